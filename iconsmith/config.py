"""Configuration management for iconsmith."""

import copy
import json
import logging
import os
import sys
from pathlib import Path
from typing import Any

from iconsmith.errors import ConfigError
from iconsmith.exporter import ICONS_DIR, PIXMAPS_DIR, RESAMPLE_FILTERS

logger = logging.getLogger(__name__)


def _get_data_dir() -> Path:
    """Return the iconsmith data directory, platform-appropriate.

    Windows: %APPDATA%\\iconsmith
    Other:   ~/.iconsmith
    """
    if sys.platform == "win32":
        appdata = os.environ.get("APPDATA")
        if appdata:
            return Path(appdata) / "iconsmith"
    return Path.home() / ".iconsmith"


# Default config / data directory
DATA_DIR = _get_data_dir()
CONFIG_FILE = DATA_DIR / "config.json"
LOG_FILE = DATA_DIR / "iconsmith_log.txt"

DEFAULT_CONFIG = {
    "output_dir": ".",
    "names": {
        "png": "output.png",
        "ico": "app.ico",
        "icns": "AppIcon.icns"
    },
    "sizes": {
        "hicolor": [16, 24, 32, 48, 64, 96, 128, 256, 512],
        "ico": [16, 24, 32, 48, 64, 96, 128, 256],
        "pixmap": 128
    },
    "resample": "lanczos"  # "lanczos", "bicubic", "bilinear", "nearest"
}

# Keys whose values must be JSON objects
SECTIONS = ("names", "sizes")
# Names the pipeline itself uses in the output directory
RESERVED_NAMES = (ICONS_DIR, PIXMAPS_DIR)


class Config:
    """Settings file layered over DEFAULT_CONFIG."""

    def __init__(self, config_path: Path | None = None):
        self.config_path = config_path or CONFIG_FILE
        self.data: dict[str, Any] = self.load()

    def load(self) -> dict[str, Any]:
        """Read the settings file and merge it over the defaults.

        A missing or undecodable file yields the defaults. A file that decodes
        but is not shaped like DEFAULT_CONFIG raises ConfigError.
        """
        if not self.config_path.exists():
            return copy.deepcopy(DEFAULT_CONFIG)
        try:
            with open(self.config_path, "r", encoding="utf-8") as f:
                saved = json.load(f)
        except (json.JSONDecodeError, OSError) as e:
            logger.warning("Ignoring unreadable config %s: %s", self.config_path, e)
            return copy.deepcopy(DEFAULT_CONFIG)

        if not isinstance(saved, dict):
            raise ConfigError(
                f"{self.config_path}: expected a JSON object, got {type(saved).__name__}"
            )
        for section in SECTIONS:
            if section in saved and not isinstance(saved[section], dict):
                raise ConfigError(f"{self.config_path}: '{section}' must be a JSON object")
        unknown = sorted(set(saved) - set(DEFAULT_CONFIG))
        if unknown:
            logger.warning("Unknown keys in %s: %s", self.config_path, ", ".join(unknown))

        data = copy.deepcopy(DEFAULT_CONFIG)
        for key, value in saved.items():
            if key in SECTIONS:
                data[key].update(value)
            else:
                data[key] = value
        return data

    def get(self, *keys: str, default: Any = None) -> Any:
        """Get a nested config value. Example: config.get('sizes', 'pixmap')"""
        value = self.data
        for key in keys:
            if not isinstance(value, dict) or value.get(key) is None:
                return default
            value = value[key]
        return value


class Settings:
    """Resolved, validated options for one pipeline run."""

    def __init__(self, output_dir: Path | str = ".", png_name: str = "output.png",
                 ico_name: str = "app.ico", icns_name: str = "AppIcon.icns",
                 hicolor_sizes: list[int] | None = None, ico_sizes: list[int] | None = None,
                 pixmap_size: int = 128, resample: str = "lanczos"):
        if hicolor_sizes is None:
            hicolor_sizes = DEFAULT_CONFIG["sizes"]["hicolor"]
        if ico_sizes is None:
            ico_sizes = DEFAULT_CONFIG["sizes"]["ico"]
        self.output_dir = output_dir
        self.png_name = png_name
        self.ico_name = ico_name
        self.icns_name = icns_name
        self.hicolor_sizes = hicolor_sizes
        self.ico_sizes = ico_sizes
        self.pixmap_size = pixmap_size
        self.resample = resample
        self.validate()
        self.output_dir = Path(output_dir)
        self.hicolor_sizes = list(hicolor_sizes)
        self.ico_sizes = list(ico_sizes)

    @classmethod
    def from_config(cls, config: Config, **overrides: Any) -> "Settings":
        """Build settings from ``config``; overrides that are not None win."""
        values = {
            "output_dir": config.get("output_dir"),
            "png_name": config.get("names", "png"),
            "ico_name": config.get("names", "ico"),
            "icns_name": config.get("names", "icns"),
            "hicolor_sizes": config.get("sizes", "hicolor"),
            "ico_sizes": config.get("sizes", "ico"),
            "pixmap_size": config.get("sizes", "pixmap"),
            "resample": config.get("resample"),
        }
        values.update(overrides)
        return cls(**{k: v for k, v in values.items() if v is not None})

    @property
    def resample_filter(self) -> int:
        return RESAMPLE_FILTERS[self.resample]

    def validate(self):
        if not isinstance(self.output_dir, (str, os.PathLike)):
            raise ConfigError(f"Output directory must be a path: {self.output_dir!r}")
        for name in (self.png_name, self.ico_name, self.icns_name):
            if not isinstance(name, str) or not name or Path(name).name != name:
                raise ConfigError(f"Output name must be a plain file name: {name!r}")
        for name in (self.ico_name, self.icns_name):
            if name in RESERVED_NAMES:
                raise ConfigError(f"Output name {name!r} clashes with the {name}/ directory")
        if self.ico_name == self.icns_name:
            raise ConfigError(f"The .ico and .icns outputs share the name {self.ico_name!r}")

        for label, sizes in (("hicolor", self.hicolor_sizes), ("ico", self.ico_sizes)):
            if not isinstance(sizes, (list, tuple)):
                raise ConfigError(f"{label} sizes must be a list, got {sizes!r}")
            for size in sizes:
                _check_size(size)
        _check_size(self.pixmap_size)
        if len(set(self.hicolor_sizes)) != len(self.hicolor_sizes):
            raise ConfigError(f"Duplicate hicolor sizes: {self.hicolor_sizes}")
        # ICO entries are read back from the hicolor tree
        missing = [s for s in self.ico_sizes if s not in self.hicolor_sizes]
        if missing:
            raise ConfigError(f"ICO sizes {missing} are not exported to the hicolor tree")
        too_big = [s for s in self.ico_sizes if s > 256]
        if too_big:
            raise ConfigError(f"ICO sizes {too_big} exceed 256 pixels")

        if not isinstance(self.resample, str) or self.resample not in RESAMPLE_FILTERS:
            raise ConfigError(
                f"Unknown resample filter {self.resample!r} "
                f"(choose from {', '.join(RESAMPLE_FILTERS)})"
            )


def _check_size(size: Any):
    if isinstance(size, bool) or not isinstance(size, int) or size < 1:
        raise ConfigError(f"Invalid icon size: {size!r}")
