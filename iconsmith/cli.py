"""Command-line interface for iconsmith."""

import argparse
import logging
from pathlib import Path

from iconsmith import __version__
from iconsmith.config import CONFIG_FILE, DATA_DIR, LOG_FILE, Config, Settings
from iconsmith.errors import IconsmithError
from iconsmith.pipeline import IconPipeline

logger = logging.getLogger("iconsmith")


def _setup_logging(verbose: bool = False, log_file: Path | None = LOG_FILE):
    """Configure logging to console and, when possible, a log file."""
    handlers: list[logging.Handler] = [logging.StreamHandler()]
    file_error = None
    if log_file is not None:
        try:
            log_file.parent.mkdir(parents=True, exist_ok=True)
            handlers.append(logging.FileHandler(log_file, encoding="utf-8"))
        except OSError as e:
            file_error = e

    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        handlers=handlers,
    )
    if file_error is not None:
        logger.warning("Logging to console only, cannot open %s: %s", log_file, file_error)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="iconsmith",
        description="Generate hicolor PNGs, a pixmap, a Windows .ico and a macOS .icns "
                    "from a single image.",
    )
    parser.add_argument("-i", dest="input", default="input.png",
                        help="source image (default: input.png)")
    parser.add_argument("-o", dest="png_name", default=None,
                        help="PNG file name in the hicolor tree and pixmaps (default: output.png)")
    parser.add_argument("-w", dest="ico_name", default=None,
                        help="Windows icon file name (default: app.ico)")
    parser.add_argument("-m", dest="icns_name", default=None,
                        help="macOS icon file name (default: AppIcon.icns)")
    parser.add_argument("-d", dest="output_dir", default=None,
                        help="output directory (default: current directory)")
    parser.add_argument("-c", dest="config", type=Path, default=None,
                        help=f"JSON settings file (default: {CONFIG_FILE})")
    parser.add_argument("-v", dest="verbose", action="store_true",
                        help="debug logging")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    _setup_logging(args.verbose)
    logger.debug("Data dir: %s", DATA_DIR)

    if args.config is not None and not args.config.is_file():
        logger.error("Config file not found: %s", args.config)
        return 1

    try:
        settings = Settings.from_config(
            Config(args.config),
            output_dir=args.output_dir,
            png_name=args.png_name,
            ico_name=args.ico_name,
            icns_name=args.icns_name,
        )
        result = IconPipeline(settings).run(args.input)
    except IconsmithError as e:
        logger.error("%s", e)
        return 1

    if not result.icns_ok:
        logger.warning("Finished without %s", result.icns_path)
    logger.info("Conversion completed.")
    return 0
