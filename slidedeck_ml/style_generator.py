"""Render the deck stylesheet: baseline rules plus per-node overrides."""

from __future__ import annotations

import logging
from typing import List, Optional

from .deck_models import Content, LayoutBlock, Presentation, Size, Slide, TextList
from .identity_registry import IdentityRegistry
from .reference_resolver import ReferenceResolver

LOGGER = logging.getLogger(__name__)

_ALIGNMENTS = {"start": "flex-start", "center": "center", "end": "flex-end"}


def baseline_css() -> str:
    """Fixed rules every deck starts from."""

    align_rules = []
    for name, value in _ALIGNMENTS.items():
        align_rules.append(f".v-align-{name} {{\n  align-items: {value};\n}}")
    for name, value in _ALIGNMENTS.items():
        align_rules.append(f".h-align-{name} {{\n  justify-content: {value};\n}}")

    rules = [
        "html, body {\n  margin: 0;\n  width: 100vw;\n  height: 100vh;\n}",
        "*, *::before, *::after {\n  box-sizing: border-box;\n}",
        ".reveal .slides section {\n  width: 100%;\n  height: 100%;\n  display: flex;\n}",
        ".vertical {\n  display: flex;\n  flex-direction: column;\n}",
        ".horizontal {\n  display: flex;\n  flex-direction: row;\n}",
        *align_rules,
        ".layout {\n  width: 100%;\n  gap: 1rem;\n}",
        ".code-block {\n  width: 100%;\n  gap: 1rem;\n  align-items: center;\n}",
        ".code-block pre {\n  flex: 1;\n}",
        ".code-block img {\n  max-width: 40%;\n}",
        ".annotated-media {\n  position: relative;\n  display: inline-block;\n}",
        ".annotated-media img {\n  display: block;\n  width: 100%;\n}",
        ".annotation-layer {\n  position: absolute;\n  inset: 0;\n  width: 100%;\n"
        "  height: 100%;\n  pointer-events: none;\n  overflow: visible;\n}",
        ".anno-rect {\n  fill: none;\n  stroke: #ff2d2d;\n  stroke-width: 0.6;\n}",
        ".anno-arrow {\n  stroke: #ff2d2d;\n  stroke-width: 0.6;\n}",
        ".anno-arrowhead {\n  fill: #ff2d2d;\n}",
        ".anno-label {\n  fill: #ff2d2d;\n  font-size: 3px;\n  font-family: sans-serif;\n}",
    ]
    return "\n\n".join(rules) + "\n"


def size_rule(identity: str, size: Optional[Size]) -> Optional[str]:
    if size is None:
        return None
    declarations = []
    if size.width:
        declarations.append(f"  width: {size.width};")
    if size.height:
        declarations.append(f"  height: {size.height};")
    if not declarations:
        return None
    return f".{identity} {{\n" + "\n".join(declarations) + "\n}"


def raw_rule(identity: str, css: Optional[str]) -> Optional[str]:
    if css is None or not css.strip():
        return None
    return f".{identity} {{\n{css.strip()}\n}}"


class StyleGenerator:
    """Emit per-node rules addressed by identity.

    For each node the tiers are written in a fixed order so that later rules
    win on conflicting properties: size, then the bound template placeholder's
    CSS, then the node's own CSS. Containers write their children's rules
    before their own.
    """

    def __init__(
        self,
        registry: IdentityRegistry,
        resolver: Optional[ReferenceResolver] = None,
    ) -> None:
        self.registry = registry
        self.resolver = resolver

    def generate(self, presentation: Presentation) -> str:
        rules: List[str] = []
        theme = self._template_rule()
        if theme:
            rules.append(theme)
        for slide in presentation.slides:
            rules.extend(self.slide_rules(slide))
        stylesheet = baseline_css()
        if rules:
            stylesheet += "\n" + "\n\n".join(rules) + "\n"
        LOGGER.debug("Generated %d rule blocks for '%s'", len(rules), presentation.name)
        return stylesheet

    def slide_rules(self, slide: Slide) -> List[str]:
        rules: List[str] = []
        for content in slide.contents:
            rules.extend(self.content_rules(content, slide, None))

        identity = self.registry.identity(slide)
        slide_template = self.resolver.resolve_slide_template(slide) if self.resolver else None
        rules.extend(
            rule
            for rule in (
                raw_rule(identity, slide_template.css if slide_template else None),
                raw_rule(identity, slide.css),
            )
            if rule
        )
        return rules

    def content_rules(
        self,
        content: Content,
        slide: Slide,
        layout_block: Optional[LayoutBlock],
    ) -> List[str]:
        rules: List[str] = []
        if isinstance(content, LayoutBlock):
            for element in content.elements:
                rules.extend(self.content_rules(element, slide, content))
        elif isinstance(content, TextList):
            rules.extend(self._nested_list_rules(content))

        placeholder = None
        if self.resolver is not None:
            placeholder = self.resolver.resolve_content_placeholder(content, slide, layout_block)
        rules.extend(self._tier_rules(content, placeholder))
        return rules

    def _nested_list_rules(self, text_list: TextList) -> List[str]:
        rules: List[str] = []
        for nested in text_list.nested_lists():
            rules.extend(self._nested_list_rules(nested))
            rules.extend(self._tier_rules(nested, None))
        return rules

    def _tier_rules(self, content: Content, placeholder) -> List[str]:
        identity = self.registry.identity(content)
        size = content.size or (placeholder.size if placeholder is not None else None)
        tiers = (
            size_rule(identity, size),
            raw_rule(identity, placeholder.css if placeholder is not None else None),
            raw_rule(identity, content.css),
        )
        return [rule for rule in tiers if rule]

    def _template_rule(self) -> Optional[str]:
        template = self.resolver.resolve_template() if self.resolver else None
        if template is None:
            return None
        declarations = []
        if template.font:
            declarations.append(f"  font-family: {template.font};")
        if template.color:
            declarations.append(f"  color: {template.color};")
        if not declarations:
            return None
        return ".reveal {\n" + "\n".join(declarations) + "\n}"
