"""Run the full conversion: hicolor tree, pixmap, .ico and .icns."""

import logging
import os
import shutil
import tempfile
from pathlib import Path

from iconsmith.config import Settings
from iconsmith.errors import ExportError
from iconsmith.exporter import (
    ICONS_DIR,
    PIXMAPS_DIR,
    export_pixmap,
    export_sizes,
    load_rasters,
    load_source,
)
from iconsmith.icns import write_icns
from iconsmith.ico import write_ico

logger = logging.getLogger(__name__)

STAGING_PREFIX = ".iconsmith-"


class PipelineResult:
    """Paths written by a pipeline run."""

    def __init__(self):
        self.png_paths: dict[int, Path] = {}
        self.pixmap_path: Path | None = None
        self.ico_path: Path | None = None
        self.icns_path: Path | None = None
        # ICNS failure is logged, not raised
        self.icns_ok = False


class IconPipeline:
    """Converts one source image into all icon assets under ``settings.output_dir``.

    Everything except the .icns is written into a staging directory first and
    only moved into place once the .ico has been encoded, so a failed run
    leaves the previous icons/ and pixmaps/ trees untouched.
    """

    def __init__(self, settings: Settings):
        self.settings = settings

    def run(self, source: Path | str) -> PipelineResult:
        s = self.settings
        image = load_source(source)
        logger.info("Loaded %s (%dx%d)", source, image.size[0], image.size[1])

        root = s.output_dir
        try:
            root.mkdir(parents=True, exist_ok=True)
            staging = Path(tempfile.mkdtemp(prefix=STAGING_PREFIX, dir=root))
        except OSError as e:
            raise ExportError(f"Cannot prepare output directory {root}: {e}") from e

        result = PipelineResult()
        try:
            staged_pngs = export_sizes(image, staging, s.png_name, s.hicolor_sizes,
                                       s.resample_filter)
            export_pixmap(image, staging, s.png_name, s.pixmap_size, s.resample_filter)

            rasters = load_rasters(staged_pngs, s.ico_sizes)
            # The .ico stages in its own directory, apart from previous/
            ico_dir = staging / "ico"
            try:
                ico_dir.mkdir()
                staged_ico = write_ico(rasters, ico_dir / s.ico_name)
            except OSError as e:
                raise ExportError(f"Failed to write {s.ico_name}: {e}") from e

            self._swap_in(staging, root)
            result.ico_path = root / s.ico_name
            try:
                os.replace(staged_ico, result.ico_path)
            except OSError as e:
                raise ExportError(f"Failed to write {result.ico_path}: {e}") from e
        finally:
            self._cleanup(staging)

        result.png_paths = {
            size: root / path.relative_to(staging) for size, path in staged_pngs.items()
        }
        result.pixmap_path = root / PIXMAPS_DIR / s.png_name

        result.icns_path = root / s.icns_name
        result.icns_ok = write_icns(image, result.icns_path)
        return result

    def _swap_in(self, staging: Path, root: Path):
        """Replace the live icons/ and pixmaps/ trees with the staged ones."""
        previous = staging / "previous"
        moved_aside = []
        installed = []
        try:
            previous.mkdir()
            for name in (ICONS_DIR, PIXMAPS_DIR):
                live = root / name
                if live.exists():
                    os.replace(live, previous / name)
                    moved_aside.append(name)
            for name in (ICONS_DIR, PIXMAPS_DIR):
                os.replace(staging / name, root / name)
                installed.append(name)
        except OSError as e:
            self._restore(root, previous, moved_aside, installed)
            raise ExportError(f"Failed to install icon trees into {root}: {e}") from e
        if moved_aside:
            logger.info("Replaced existing %s in %s", ", ".join(moved_aside), root)

    @staticmethod
    def _restore(root: Path, previous: Path, moved_aside: list[str], installed: list[str]):
        for name in installed:
            shutil.rmtree(root / name, ignore_errors=True)
        for name in moved_aside:
            try:
                os.replace(previous / name, root / name)
            except OSError as e:
                logger.error("Could not restore %s from %s: %s", name, previous, e)

    @staticmethod
    def _cleanup(staging: Path):
        try:
            shutil.rmtree(staging)
        except OSError as e:
            logger.warning("Failed to remove staging directory %s: %s", staging, e)
