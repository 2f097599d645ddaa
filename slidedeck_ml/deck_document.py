"""Utilities for reading and writing parsed deck documents as JSON."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from .deck_models import Document, document_from_dict
from .exceptions import DocumentLoadError


class DeckDocumentStore:
    """Persist :class:`Template` / :class:`Presentation` documents to disk."""

    def __init__(self, path: Path) -> None:
        self.path = Path(path)

    # ------------------------------------------------------------------
    # I/O helpers
    # ------------------------------------------------------------------
    def read_json(self) -> Any:
        """Return the decoded JSON payload without interpreting it."""

        if not self.path.exists():
            raise DocumentLoadError(f"Document not found at {self.path}", source=str(self.path))
        try:
            text = self.path.read_text(encoding="utf-8")
        except UnicodeDecodeError as exc:
            raise DocumentLoadError(
                f"Document is not valid UTF-8: {exc.reason}",
                source=str(self.path),
                original_error=exc,
            ) from exc
        except OSError as exc:
            raise DocumentLoadError(
                f"Cannot read document: {exc}", source=str(self.path), original_error=exc
            ) from exc
        try:
            return json.loads(text)
        except json.JSONDecodeError as exc:
            raise DocumentLoadError(
                f"Invalid JSON: {exc.msg}", source=str(self.path), original_error=exc
            ) from exc

    def load(self) -> Document:
        return self.decode(self.read_json())

    def decode(self, data: Any) -> Document:
        try:
            return document_from_dict(data)
        except DocumentLoadError as exc:
            exc.source = str(self.path)
            raise

    def save(self, document: Document) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(
            json.dumps(document.to_dict(), ensure_ascii=False, indent=2),
            encoding="utf-8",
        )
