"""macOS .icns export — delegated to Pillow's ICNS writer."""

import logging
from pathlib import Path

from PIL import Image

logger = logging.getLogger(__name__)


def write_icns(image: Image.Image, path: Path | str) -> bool:
    """Write ``image`` as an .icns file. Returns False (and logs) on failure."""
    try:
        image.save(path, format="ICNS")
    except Exception as e:
        logger.error("Failed to encode ICNS '%s': %s", path, e)
        return False
    logger.info("Wrote %s", path)
    return True
