"""marginalia - live-markup rendering engine and entry store for notes."""

__version__ = "0.1.0"
