"""Derive flex layout classes from slide and layout block style options."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .deck_models import (
    HorizontalAlignOption,
    LayoutStyle,
    LayoutTypeOption,
    VerticalAlignOption,
)

DEFAULT_LAYOUT = "vertical"
DEFAULT_V_ALIGNMENT = "center"
DEFAULT_H_ALIGNMENT = "center"


@dataclass(frozen=True, slots=True)
class LayoutClasses:
    layout_type: str = DEFAULT_LAYOUT
    vertical: str = DEFAULT_V_ALIGNMENT
    horizontal: str = DEFAULT_H_ALIGNMENT

    @property
    def css_classes(self) -> str:
        return f"{self.layout_type} v-align-{self.vertical} h-align-{self.horizontal}"

    def __str__(self) -> str:
        return self.css_classes


def classes_for(layout: Optional[LayoutStyle]) -> LayoutClasses:
    """Return the layout classes for ``layout``.

    A ``vertical`` layout is a flex column, where the main and cross axes are
    inverted relative to a row. The declared vertical and horizontal
    alignments are therefore swapped for vertical layouts so that
    ``v-align-*`` always drives ``align-items`` and ``h-align-*`` always
    drives ``justify-content``.
    """

    if layout is None or not layout.options:
        return LayoutClasses()

    layout_type = DEFAULT_LAYOUT
    vertical = DEFAULT_V_ALIGNMENT
    horizontal = DEFAULT_H_ALIGNMENT
    for option in layout.options:
        if isinstance(option, LayoutTypeOption):
            layout_type = option.value
        elif isinstance(option, VerticalAlignOption):
            vertical = option.value
        elif isinstance(option, HorizontalAlignOption):
            horizontal = option.value

    if layout_type == "vertical":
        vertical, horizontal = horizontal, vertical

    return LayoutClasses(layout_type=layout_type, vertical=vertical, horizontal=horizontal)
