"""Configuration loader for marginalia.toml."""

import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Any

CONFIG_NAME = "marginalia.toml"


@dataclass
class StoreConfig:
    """Entry store location and index database."""
    root: Path
    db: Path


@dataclass
class IdConfig:
    """ID generation configuration."""
    bytes: int = 6


@dataclass
class RenderConfig:
    """Rendering defaults."""
    link_base: str = "/entries"


@dataclass
class LogConfig:
    """Logging configuration."""
    level: str = "WARNING"


@dataclass
class MarginaliaConfig:
    """Complete marginalia configuration."""
    store: StoreConfig
    id: IdConfig
    render: RenderConfig
    log: LogConfig


def load_config(config_path: Path | None = None, store_path: Path | None = None) -> MarginaliaConfig:
    """
    Load configuration from marginalia.toml.

    Search order:
    1. config_path (if provided)
    2. cwd/marginalia.toml
    3. store_path/marginalia.toml

    Args:
        config_path: Explicit path to config file
        store_path: Entry store root for fallback search

    Returns:
        MarginaliaConfig with resolved settings
    """
    toml_data: dict[str, Any] = {}

    search_paths = []
    if config_path:
        search_paths.append(config_path)
    search_paths.append(Path.cwd() / CONFIG_NAME)
    if store_path:
        search_paths.append(store_path / CONFIG_NAME)

    for path in search_paths:
        if path.exists():
            with open(path, "rb") as f:
                toml_data = tomllib.load(f)
            break

    store_data = toml_data.get("store", {})
    store_root = Path(store_data.get("root", store_path or Path("./entries")))
    store_config = StoreConfig(
        root=store_root,
        db=Path(store_data.get("db", store_root / ".marginalia" / "index.sqlite")),
    )

    id_data = toml_data.get("id", {})
    render_data = toml_data.get("render", {})
    log_data = toml_data.get("log", {})

    return MarginaliaConfig(
        store=store_config,
        id=IdConfig(bytes=int(id_data.get("bytes", 6))),
        render=RenderConfig(link_base=str(render_data.get("link_base", "/entries"))),
        log=LogConfig(level=str(log_data.get("level", "WARNING")).upper()),
    )
