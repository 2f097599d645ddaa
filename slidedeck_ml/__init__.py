"""High-level interfaces for slide deck generation."""

from .deck_document import DeckDocumentStore
from .deck_generation import DeckGenerator, GeneratedDeck, generate_from_library
from .deck_library import DocumentLibrary
from .deck_models import Presentation, Slide, SlideTemplate, Template, document_from_dict
from .exceptions import AssetCopyError, DeckError, DocumentLoadError, GenerationError
from .identity_registry import IdentityRegistry
from .layout_style import LayoutClasses, classes_for
from .markup_generator import MarkupGenerator
from .media_assets import AssetCopier
from .reference_resolver import ReferenceResolver
from .runtime_generator import RuntimeGenerator, analyze_presentation
from .settings import DeckSettings
from .style_generator import StyleGenerator

__all__ = [
    "AssetCopier",
    "AssetCopyError",
    "DeckDocumentStore",
    "DeckError",
    "DeckGenerator",
    "DeckSettings",
    "DocumentLibrary",
    "DocumentLoadError",
    "GeneratedDeck",
    "GenerationError",
    "IdentityRegistry",
    "LayoutClasses",
    "MarkupGenerator",
    "Presentation",
    "ReferenceResolver",
    "RuntimeGenerator",
    "Slide",
    "SlideTemplate",
    "StyleGenerator",
    "Template",
    "analyze_presentation",
    "classes_for",
    "document_from_dict",
    "generate_from_library",
]
