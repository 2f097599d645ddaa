"""Command line entry point for building a deck from a parsed presentation."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from .deck_generation import generate_from_library
from .exceptions import DeckError
from .settings import DeckSettings

LOGGER = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="slidedeck-ml",
        description="Generate reveal.js markup, stylesheet and script from parsed deck documents.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    generate = subparsers.add_parser("generate", help="Generate one presentation")
    generate.add_argument("presentation", type=Path, help="presentation document (.json)")
    generate.add_argument("--source-dir", type=Path, help="folder holding imported templates")
    generate.add_argument("--output-dir", type=Path, help="folder receiving the artifacts")
    generate.add_argument("--assets-dir", type=Path, help="folder holding relative media")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    settings = DeckSettings.from_env()
    if args.source_dir:
        settings.source_dir = args.source_dir
        if not args.assets_dir:
            settings.assets_dir = args.source_dir / "assets"
    if args.output_dir:
        settings.output_dir = args.output_dir
    if args.assets_dir:
        settings.assets_dir = args.assets_dir

    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        written = generate_from_library(args.presentation, settings)
    except DeckError as exc:
        LOGGER.error("Generation failed: %s", exc)
        return 1

    for path in written:
        print(f"Generated {path}")
    return 0


if __name__ == "__main__":  # pragma: no cover - manual execution utility
    sys.exit(main())
