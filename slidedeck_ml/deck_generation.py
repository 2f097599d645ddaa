"""One generation pass: resolve a presentation and render its three artifacts."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional

from .deck_document import DeckDocumentStore
from .deck_library import DocumentLibrary
from .deck_models import Presentation
from .exceptions import GenerationError
from .identity_registry import IdentityRegistry
from .markup_generator import MarkupGenerator
from .media_assets import AssetCopier, AssetCopy
from .reference_resolver import BindingIssue, DocumentLookup, ReferenceResolver
from .runtime_generator import RuntimeGenerator
from .settings import SCRIPT_FILENAME, STYLESHEET_FILENAME, DeckSettings
from .style_generator import StyleGenerator

LOGGER = logging.getLogger(__name__)


@dataclass
class GeneratedDeck:
    """The markup, stylesheet and behavior script of one presentation."""

    name: str
    markup: str
    stylesheet: str
    script: str
    issues: Optional[List[BindingIssue]] = None

    @property
    def markup_filename(self) -> str:
        return f"{self.name}.html"

    def artifacts(self) -> Dict[str, str]:
        return {
            self.markup_filename: self.markup,
            STYLESHEET_FILENAME: self.stylesheet,
            SCRIPT_FILENAME: self.script,
        }

    def write(self, output_dir: Path) -> List[Path]:
        output_dir = Path(output_dir)
        output_dir.mkdir(parents=True, exist_ok=True)
        written: List[Path] = []
        for filename, text in self.artifacts().items():
            path = output_dir / filename
            path.write_text(text, encoding="utf-8")
            written.append(path)
        LOGGER.info("Wrote %s to %s", ", ".join(p.name for p in written), output_dir)
        return written


class DeckGenerator:
    """Run the resolver and the markup, style and runtime generators."""

    def __init__(
        self,
        find_document_by_import_path: Optional[DocumentLookup] = None,
        *,
        asset_copier: Optional[AssetCopy] = None,
        registry: Optional[IdentityRegistry] = None,
    ) -> None:
        self.find_document_by_import_path = find_document_by_import_path
        self.asset_copier = asset_copier
        self.registry = registry or IdentityRegistry()

    def generate(self, presentation: Presentation) -> GeneratedDeck:
        if not isinstance(presentation, Presentation):
            raise GenerationError(
                f"Expected a Presentation, got {type(presentation).__name__}"
            )

        LOGGER.info("Generating deck '%s'", presentation.name)
        self.registry.reset()
        self.registry.register_presentation(presentation)

        resolver = ReferenceResolver(presentation, self.find_document_by_import_path)
        issues = resolver.binding_diagnostics()
        for issue in issues:
            LOGGER.warning("%s: %s", presentation.name, issue.message)

        markup = MarkupGenerator(self.registry, resolver, self.asset_copier).generate(presentation)
        stylesheet = StyleGenerator(self.registry, resolver).generate(presentation)
        script = RuntimeGenerator(resolver).generate(presentation)
        return GeneratedDeck(
            name=presentation.name,
            markup=markup,
            stylesheet=stylesheet,
            script=script,
            issues=issues,
        )


def generate_from_library(
    presentation_path: Path,
    settings: DeckSettings,
    *,
    library: Optional[DocumentLibrary] = None,
) -> List[Path]:
    """Build ``presentation_path`` and write its artifacts to the output dir.

    Templates are looked up in ``library`` (by default every document below
    ``settings.source_dir``, outside the assets and output folders).
    """

    document = DeckDocumentStore(presentation_path).load()
    if not isinstance(document, Presentation):
        raise GenerationError(
            "Only presentations can be generated", source=str(presentation_path)
        )

    if library is None:
        library = DocumentLibrary(
            settings.source_dir, exclude=(settings.assets_dir, settings.output_dir)
        )
    copier = AssetCopier(settings.assets_dir, settings.output_assets_dir)
    generator = DeckGenerator(library.find_document_by_import_path, asset_copier=copier)
    deck = generator.generate(document)
    return deck.write(settings.output_dir)
