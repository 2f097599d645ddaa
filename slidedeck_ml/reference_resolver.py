"""Bind presentation slides and content nodes to their template placeholders."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Tuple, Type

from .deck_models import (
    CodeBlock,
    CodePlaceholder,
    Content,
    ContentPlaceholder,
    Document,
    FreeText,
    Image,
    LayoutBlock,
    LayoutPlaceholder,
    MathBlock,
    MathPlaceholder,
    MediaPlaceholder,
    Model3D,
    OrderedList,
    Presentation,
    Slide,
    SlideTemplate,
    Template,
    TextPlaceholder,
    UnorderedList,
    Video,
    flatten_placeholders,
    walk_contents,
)

LOGGER = logging.getLogger(__name__)

DocumentLookup = Callable[[str], Optional[Document]]

# content type -> (placeholder type, expected placeholder kind)
PLACEHOLDER_COMPATIBILITY: Dict[Type[Content], Tuple[Type[ContentPlaceholder], Optional[str]]] = {
    FreeText: (TextPlaceholder, "freetext"),
    UnorderedList: (TextPlaceholder, "ul"),
    OrderedList: (TextPlaceholder, "ol"),
    Image: (MediaPlaceholder, "image"),
    Video: (MediaPlaceholder, "video"),
    Model3D: (MediaPlaceholder, "model3d"),
    CodeBlock: (CodePlaceholder, None),
    MathBlock: (MathPlaceholder, None),
    LayoutBlock: (LayoutPlaceholder, None),
}


@dataclass(slots=True)
class BindingIssue:
    """A reference problem found while resolving a presentation."""

    severity: str
    message: str


def is_compatible(content: Content, placeholder: ContentPlaceholder) -> bool:
    expected, _ = PLACEHOLDER_COMPATIBILITY[type(content)]
    return isinstance(placeholder, expected)


def kind_matches(content: Content, placeholder: ContentPlaceholder) -> bool:
    _, expected_kind = PLACEHOLDER_COMPATIBILITY[type(content)]
    if expected_kind is None:
        return True
    return getattr(placeholder, "kind", None) == expected_kind


class ReferenceResolver:
    """Read-only binding view over one presentation and its imported template.

    Unresolvable names are a valid authoring state: every lookup that finds no
    match returns ``None`` instead of raising.
    """

    def __init__(
        self,
        presentation: Presentation,
        find_document_by_import_path: Optional[DocumentLookup] = None,
    ) -> None:
        self.presentation = presentation
        self._find_document = find_document_by_import_path
        self._template: Optional[Template] = None
        self._template_loaded = False
        self._slide_bindings: Dict[Slide, Optional[SlideTemplate]] = {}
        self._content_bindings: Dict[Content, Optional[ContentPlaceholder]] = {}
        self._enclosing: Dict[Content, Tuple[Slide, Optional[LayoutBlock]]] = {}
        for slide in presentation.slides:
            for content, layout_block in walk_contents(slide.contents):
                self._enclosing[content] = (slide, layout_block)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    def resolve_template(self) -> Optional[Template]:
        if not self._template_loaded:
            self._template = self._load_template()
            self._template_loaded = True
        return self._template

    def resolve_slide_template(self, slide: Slide) -> Optional[SlideTemplate]:
        if slide in self._slide_bindings:
            return self._slide_bindings[slide]

        binding: Optional[SlideTemplate] = None
        template = self.resolve_template()
        if template is not None and slide.template:
            binding = template.get_slide_template(slide.template)
            if binding is None:
                LOGGER.debug("Slide template '%s' not found in '%s'", slide.template, template.name)
        self._slide_bindings[slide] = binding
        return binding

    def resolve_content_placeholder(
        self,
        content: Content,
        slide: Slide,
        layout_block: Optional[LayoutBlock] = None,
    ) -> Optional[ContentPlaceholder]:
        if content in self._content_bindings:
            return self._content_bindings[content]

        binding: Optional[ContentPlaceholder] = None
        if content.placeholder:
            candidates = self.placeholder_candidates(slide, layout_block)
            binding = next(
                (item for item in candidates if item.name == content.placeholder), None
            )
            if binding is None:
                LOGGER.debug("Placeholder '%s' has no binding", content.placeholder)
        self._content_bindings[content] = binding
        return binding

    def bound_placeholder(self, content: Content) -> Optional[ContentPlaceholder]:
        """Resolve ``content`` using its recorded slide and enclosing layout block."""

        location = self._enclosing.get(content)
        if location is None:
            return None
        slide, layout_block = location
        return self.resolve_content_placeholder(content, slide, layout_block)

    def placeholder_candidates(
        self, slide: Slide, layout_block: Optional[LayoutBlock] = None
    ) -> List[ContentPlaceholder]:
        """Return the placeholders visible to a content node at this position."""

        template = self.resolve_template()
        if template is None:
            return []

        slide_template = self.resolve_slide_template(slide)
        if slide_template is None:
            return [
                placeholder
                for item in template.slide_templates
                for placeholder in flatten_placeholders(item.content)
            ]

        if layout_block is not None:
            _, outer_layout = self._enclosing.get(layout_block, (slide, None))
            layout_binding = self.resolve_content_placeholder(layout_block, slide, outer_layout)
            if isinstance(layout_binding, LayoutPlaceholder):
                return flatten_placeholders(layout_binding.content)

        return flatten_placeholders(slide_template.content)

    def binding_diagnostics(self) -> List[BindingIssue]:
        """Describe unresolved and type-incompatible references."""

        issues: List[BindingIssue] = []
        imported = self.presentation.template_import
        if imported is None:
            return issues
        if self.resolve_template() is None:
            issues.append(
                BindingIssue("warning", f"Imported template '{imported.path}' could not be located")
            )
            return issues

        for slide in self.presentation.slides:
            if slide.template and self.resolve_slide_template(slide) is None:
                issues.append(
                    BindingIssue("warning", f"Slide template '{slide.template}' is not defined")
                )
            for content, layout_block in walk_contents(slide.contents):
                if not content.placeholder:
                    continue
                placeholder = self.resolve_content_placeholder(content, slide, layout_block)
                content_type = type(content).__name__
                if placeholder is None:
                    issues.append(
                        BindingIssue(
                            "warning",
                            f"'{content_type}' references unknown placeholder '{content.placeholder}'",
                        )
                    )
                elif not is_compatible(content, placeholder):
                    issues.append(
                        BindingIssue(
                            "error",
                            f"'{content_type}' cannot bind to '{placeholder.name}', "
                            f"which is a {type(placeholder).__name__}",
                        )
                    )
                elif not kind_matches(content, placeholder):
                    issues.append(
                        BindingIssue(
                            "warning",
                            f"'{content_type}' references placeholder '{placeholder.name}' "
                            f"of kind '{getattr(placeholder, 'kind', None)}'",
                        )
                    )
        return issues

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _load_template(self) -> Optional[Template]:
        imported = self.presentation.template_import
        if imported is None:
            return None
        document = self._find_document(imported.path) if self._find_document else None
        if not isinstance(document, Template):
            LOGGER.warning(
                "Template import '%s' could not be located for '%s'",
                imported.path,
                self.presentation.name,
            )
            return None
        LOGGER.debug("Resolved template '%s' from '%s'", document.name, imported.path)
        return document
