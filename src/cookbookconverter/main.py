"""Command line entry point.

Run with: cookbookconverter --input-dir export/ --output-dir out/
"""

import argparse
import asyncio
import sys
from pathlib import Path

from cookbookconverter.config import get_settings
from cookbookconverter.ingest.exceptions import ConversionError
from cookbookconverter.logging_config import configure_logging, get_logger
from cookbookconverter.pipeline import run_conversion

logger = get_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="cookbookconverter",
        description="Convert a Firestore recipe export into Crouton recipe bundles.",
    )
    parser.add_argument("--input-dir", type=Path, help="Directory with recipes.json and cookbooks.json")
    parser.add_argument("--output-dir", type=Path, help="Directory for the aggregate listing and bundles")
    parser.add_argument("--images-dir", type=Path, help="Directory used as image cache")
    parser.add_argument("--concurrency", type=int, help="Maximum parallel image downloads")
    parser.add_argument("--log-level", help="DEBUG, INFO, WARNING, ERROR")
    parser.add_argument("--json-logs", action="store_true", help="Emit logs as JSON lines")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    overrides = {
        "input_dir": args.input_dir,
        "output_dir": args.output_dir,
        "images_dir": args.images_dir,
        "image_concurrency": args.concurrency,
        "log_level": args.log_level,
    }
    settings = get_settings().model_copy(
        update={key: value for key, value in overrides.items() if value is not None}
    )

    configure_logging(log_level=settings.log_level, json_format=args.json_logs or None)

    try:
        result = asyncio.run(run_conversion(settings))
    except ConversionError as e:
        logger.error(f"Conversion aborted: {e}")
        return 1

    logger.info(f"Conversion finished: {result.to_dict()}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
