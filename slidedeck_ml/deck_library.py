"""Workspace of parsed documents and import path lookup."""

from __future__ import annotations

import logging
from pathlib import Path, PurePosixPath
from typing import Dict, Iterable, List, Optional, Tuple

from .deck_document import DeckDocumentStore
from .deck_models import DOCUMENT_TYPES, Document, Presentation, Template

LOGGER = logging.getLogger(__name__)

DOCUMENT_SUFFIX = ".json"


class DocumentLibrary:
    """Loads every ``*.json`` document below ``root`` and resolves imports.

    Documents are keyed by their POSIX path relative to ``root``. A document
    matches an import path when that key, with or without its ``.json``
    suffix, equals or ends with the import path. JSON files below an
    ``exclude`` folder, or whose top-level ``"type"`` is not a document type,
    are media data and are skipped.
    """

    def __init__(
        self,
        root: Optional[Path] = None,
        *,
        autoload: bool = True,
        exclude: Iterable[Path] = (),
    ) -> None:
        self.root = Path(root) if root is not None else None
        self.exclude: List[Path] = [Path(path).resolve() for path in exclude]
        self._documents: Dict[str, Document] = {}
        if self.root is not None and autoload:
            self.load_all()

    # ------------------------------------------------------------------
    # loading
    # ------------------------------------------------------------------
    def load_all(self) -> None:
        if self.root is None or not self.root.exists():
            LOGGER.info("Document root %s does not exist; library is empty", self.root)
            return
        for path in sorted(self.root.rglob(f"*{DOCUMENT_SUFFIX}")):
            if self._is_excluded(path):
                continue
            store = DeckDocumentStore(path)
            data = store.read_json()
            if not isinstance(data, dict) or data.get("type") not in DOCUMENT_TYPES:
                LOGGER.debug("Skipping %s: not a deck document", path)
                continue
            key = path.relative_to(self.root).as_posix()
            self._documents[key] = store.decode(data)
        LOGGER.info("Loaded %d documents from %s", len(self._documents), self.root)

    def _is_excluded(self, path: Path) -> bool:
        resolved = path.resolve()
        return any(resolved.is_relative_to(folder) for folder in self.exclude)

    def register(self, path: str, document: Document) -> None:
        self._documents[PurePosixPath(path).as_posix()] = document

    # ------------------------------------------------------------------
    # lookup helpers
    # ------------------------------------------------------------------
    def find_document_by_import_path(self, import_path: str) -> Optional[Document]:
        wanted = PurePosixPath(import_path).as_posix()
        for key, document in self._documents.items():
            candidates = [key]
            if key.endswith(DOCUMENT_SUFFIX):
                candidates.append(key[: -len(DOCUMENT_SUFFIX)])
            if any(candidate.endswith(wanted) for candidate in candidates):
                return document
        LOGGER.debug("No document matches import path '%s'", import_path)
        return None

    __call__ = find_document_by_import_path

    def get(self, path: str) -> Optional[Document]:
        return self._documents.get(PurePosixPath(path).as_posix())

    def items(self) -> Iterable[Tuple[str, Document]]:
        return self._documents.items()

    def presentations(self) -> Dict[str, Presentation]:
        return {
            key: document
            for key, document in self._documents.items()
            if isinstance(document, Presentation)
        }

    def templates(self) -> Dict[str, Template]:
        return {
            key: document
            for key, document in self._documents.items()
            if isinstance(document, Template)
        }

    def __len__(self) -> int:
        return len(self._documents)
