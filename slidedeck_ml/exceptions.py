"""Error taxonomy for deck loading and generation."""

from __future__ import annotations

from datetime import datetime
from typing import Optional


class DeckError(Exception):
    """Base exception for all deck-related errors"""

    def __init__(
        self,
        message: str,
        source: str = "",
        error_type: str = "general",
        original_error: Optional[Exception] = None,
    ):
        super().__init__(message)
        self.message = message
        self.source = source
        self.error_type = error_type
        self.original_error = original_error
        self.timestamp = datetime.now()

    def __str__(self):
        if self.source:
            return f"[{self.source}] {self.error_type}: {self.message}"
        return f"{self.error_type}: {self.message}"


class DocumentLoadError(DeckError):
    """AST document could not be read or decoded"""

    def __init__(self, message: str, source: str = "", original_error: Optional[Exception] = None):
        super().__init__(message, source=source, error_type="document_load", original_error=original_error)


class AssetCopyError(DeckError):
    """Media asset could not be copied into the output tree"""

    def __init__(self, message: str, source: str = "", original_error: Optional[Exception] = None):
        super().__init__(message, source=source, error_type="asset_copy", original_error=original_error)


class GenerationError(DeckError):
    """Generation was invoked with input it cannot process"""

    def __init__(self, message: str, source: str = "", original_error: Optional[Exception] = None):
        super().__init__(message, source=source, error_type="generation", original_error=original_error)
