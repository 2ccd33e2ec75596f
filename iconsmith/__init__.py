"""iconsmith — Generate Linux, Windows and macOS icon assets from one image."""

__version__ = "0.1.0"
