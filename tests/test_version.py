"""Tests for version information."""

import subprocess
import sys


def test_version_flag():
    """The console module prints its version and exits cleanly."""
    result = subprocess.run(
        [sys.executable, "-m", "marginalia.cli", "--version"],
        capture_output=True,
        text=True,
    )

    assert result.returncode == 0
    assert "marginalia" in result.stdout


def test_version_module():
    from marginalia import __version__

    assert isinstance(__version__, str)
    assert len(__version__.split(".")) >= 2
