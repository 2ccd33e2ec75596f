"""Resize the source image and lay out PNGs for the hicolor theme and pixmaps."""

import logging
from pathlib import Path
from typing import Iterable

from PIL import Image

from iconsmith.errors import ExportError, SourceImageError

logger = logging.getLogger(__name__)

ICONS_DIR = "icons"
PIXMAPS_DIR = "pixmaps"
THEME = "hicolor"

RESAMPLE_FILTERS = {
    "lanczos": Image.LANCZOS,
    "bicubic": Image.BICUBIC,
    "bilinear": Image.BILINEAR,
    "nearest": Image.NEAREST,
}


def load_source(path: Path | str) -> Image.Image:
    """Open the source image and return a decoded RGBA copy."""
    try:
        with Image.open(path) as img:
            return img.convert("RGBA")
    except (OSError, ValueError, Image.DecompressionBombError) as e:
        raise SourceImageError(f"Cannot open source image '{path}': {e}") from e


def hicolor_path(root: Path, size: int, name: str) -> Path:
    """icons/hicolor/{size}x{size}/apps/{name} under ``root``."""
    return root / ICONS_DIR / THEME / f"{size}x{size}" / "apps" / name


def pixmap_path(root: Path, name: str) -> Path:
    return root / PIXMAPS_DIR / name


def resize(image: Image.Image, size: int, resample: int = Image.LANCZOS) -> Image.Image:
    return image.resize((size, size), resample)


def save_png(image: Image.Image, path: Path):
    """Save ``image`` as PNG, creating parent directories as needed."""
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        image.save(path, format="PNG")
    except OSError as e:
        raise ExportError(f"Failed to write {path}: {e}") from e


def export_sizes(image: Image.Image, root: Path, name: str, sizes: Iterable[int],
                 resample: int = Image.LANCZOS) -> dict[int, Path]:
    """Write one resized PNG per size into the hicolor tree under ``root``.

    Returns a mapping of size to the written file.
    """
    paths = {}
    for size in sizes:
        path = hicolor_path(root, size, name)
        save_png(resize(image, size, resample), path)
        logger.debug("Exported %dx%d -> %s", size, size, path)
        paths[size] = path
    logger.info("Exported %d hicolor sizes under %s", len(paths), root / ICONS_DIR)
    return paths


def export_pixmap(image: Image.Image, root: Path, name: str, size: int,
                  resample: int = Image.LANCZOS) -> Path:
    path = pixmap_path(root, name)
    save_png(resize(image, size, resample), path)
    logger.info("Exported %dx%d pixmap -> %s", size, size, path)
    return path


def load_rasters(paths: dict[int, Path], sizes: Iterable[int]) -> list[Image.Image]:
    """Re-open the exported PNGs for ``sizes``, in that order."""
    rasters = []
    for size in sizes:
        path = paths.get(size)
        if path is None:
            raise ExportError(f"No exported PNG for size {size}")
        try:
            with Image.open(path) as img:
                img.load()
                raster = img.copy()
        except OSError as e:
            raise ExportError(f"Failed to read back {path}: {e}") from e
        if raster.size != (size, size):
            logger.warning("%s is %dx%d, expected %dx%d",
                           path, raster.size[0], raster.size[1], size, size)
        rasters.append(raster)
    return rasters
