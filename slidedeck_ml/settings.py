"""Environment driven configuration for deck builds."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

STYLESHEET_FILENAME = "style.css"
SCRIPT_FILENAME = "main.ts"
SCRIPT_MODULE_PATH = "/main.ts"
ASSETS_URL_PREFIX = "./assets"


@dataclass(slots=True)
class DeckSettings:
    """Locations and defaults used by a generation run."""

    source_dir: Path
    output_dir: Path
    assets_dir: Path
    log_level: str = "INFO"

    @property
    def output_assets_dir(self) -> Path:
        return self.output_dir / "assets"

    @classmethod
    def from_env(cls, env_file: Optional[Path] = None) -> "DeckSettings":
        """Build settings from the process environment and an optional ``.env``.

        ``SLIDEDECK_SOURCE_DIR`` and ``SLIDEDECK_OUTPUT_DIR`` default to the
        ``Presentations``/``Reveal`` folder pair; ``SLIDEDECK_ASSETS_DIR``
        defaults to ``<source>/assets``.
        """

        load_dotenv(env_file)
        source_dir = Path(os.getenv("SLIDEDECK_SOURCE_DIR", "Presentations"))
        output_dir = Path(os.getenv("SLIDEDECK_OUTPUT_DIR", "Reveal"))
        assets_dir = Path(os.getenv("SLIDEDECK_ASSETS_DIR") or source_dir / "assets")
        log_level = os.getenv("SLIDEDECK_LOG_LEVEL", "INFO").upper()
        return cls(
            source_dir=source_dir,
            output_dir=output_dir,
            assets_dir=assets_dir,
            log_level=log_level,
        )
