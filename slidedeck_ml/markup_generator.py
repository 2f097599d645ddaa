"""Render a presentation into reveal.js markup."""

from __future__ import annotations

import html
import logging
from dataclasses import dataclass
from typing import Callable, List, Optional

from .deck_models import (
    Animation,
    Annotation,
    ArrowAnnotation,
    CodeBlock,
    Content,
    Coordinate,
    FreeText,
    Image,
    LayoutBlock,
    LayoutPlaceholder,
    LineHighlight,
    MathBlock,
    Model3D,
    OrderedList,
    Presentation,
    RectAnnotation,
    SimpleHighlight,
    Slide,
    TextList,
    Video,
    VisualHighlight,
)
from .exceptions import GenerationError
from .identity_registry import IdentityRegistry
from .layout_style import classes_for
from .media_assets import AssetCopy, media_src, render_video
from .reference_resolver import ReferenceResolver
from .settings import SCRIPT_MODULE_PATH, STYLESHEET_FILENAME

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class Fragment:
    """Class suffix and attributes that stage a node as a reveal fragment."""

    class_suffix: str = ""
    attrs: str = ""


def fragment_for(animation: Optional[Animation]) -> Fragment:
    if animation is None:
        return Fragment()
    attrs = ""
    if animation.index is not None:
        attrs += f' data-fragment-index="{animation.index}"'
    if animation.duration_ms is not None:
        attrs += f' style="transition-duration: {animation.duration_ms}ms"'
    return Fragment(class_suffix=f" fragment {animation.effect}", attrs=attrs)


def step_fragment(step: Optional[int]) -> Fragment:
    if step is None:
        return Fragment()
    return Fragment(class_suffix=" fragment", attrs=f' data-fragment-index="{step}"')


def line_highlight_spec(steps: List[LineHighlight]) -> str:
    """Render highlight steps as reveal's ``data-line-numbers`` value."""

    rendered = []
    for step in steps:
        parts = [
            f"{atom[0]}-{atom[1]}" if isinstance(atom, tuple) else str(atom)
            for atom in step.atoms
        ]
        rendered.append(",".join(parts))
    return "|".join(rendered)


def strip_quotes(text: str) -> str:
    if len(text) >= 2 and text[0] == text[-1] and text[0] in ("'", '"'):
        return text[1:-1]
    return text


def escape_xml(text: str) -> str:
    return html.escape(text, quote=True).replace("&#x27;", "&apos;")


def legend_image_steps(
    highlight: VisualHighlight, resolve: Callable[[str], str] = str
) -> List[str]:
    """Return one legend image per highlight step.

    A step without a url keeps showing the previous image; leading steps
    without one show the first image declared. Without any url the list is
    empty.
    """

    urls: List[str] = []
    previous = ""
    for step in highlight.steps:
        if step.url:
            previous = resolve(step.url)
        urls.append(previous)
    first = next((url for url in urls if url), "")
    if not first:
        return []
    return [url or first for url in urls]


def _pad(level: int) -> str:
    return "\t" * level


def _indent_lines(text: str, level: int) -> List[str]:
    return [_pad(level) + line for line in text.split("\n")]


def _percent(value: Coordinate) -> float:
    if isinstance(value, str):
        return float(value.strip().rstrip("%"))
    return float(value)


def _number(value: float) -> str:
    return str(int(value)) if value.is_integer() else repr(value)


class MarkupGenerator:
    """Walk the presentation and emit one ``<section>`` per slide."""

    def __init__(
        self,
        registry: IdentityRegistry,
        resolver: Optional[ReferenceResolver] = None,
        asset_copier: Optional[AssetCopy] = None,
        *,
        stylesheet_href: str = STYLESHEET_FILENAME,
        script_src: str = SCRIPT_MODULE_PATH,
    ) -> None:
        self.registry = registry
        self.resolver = resolver
        self.asset_copier = asset_copier
        self.stylesheet_href = stylesheet_href
        self.script_src = script_src

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    def generate(self, presentation: Presentation) -> str:
        slides = [self.render_slide(slide, 3) for slide in presentation.slides]
        LOGGER.debug("Rendered %d slides for '%s'", len(slides), presentation.name)
        lines = [
            "<!DOCTYPE html>",
            '<html lang="en">',
            "<head>",
            '  <meta charset="utf-8">',
            f"  <title>{html.escape(presentation.name)}</title>",
            f'  <link rel="stylesheet" href="{self.stylesheet_href}">',
            "</head>",
            "<body>",
            '  <div class="reveal">',
            '    <div class="slides">',
            *slides,
            "    </div>",
            "  </div>",
            f'  <script type="module" src="{self.script_src}"></script>',
            "</body>",
            "</html>",
        ]
        return "\n".join(lines) + "\n"

    def render_slide(self, slide: Slide, level: int) -> str:
        identity = self.registry.identity(slide)
        lines = [f'{_pad(level)}<section class="{classes_for(slide.layout)} {identity}">']
        lines.extend(
            self.render_content(content, slide, None, level + 1) for content in slide.contents
        )
        lines.append(f"{_pad(level)}</section>")
        return "\n".join(lines)

    def render_content(
        self,
        content: Content,
        slide: Slide,
        layout_block: Optional[LayoutBlock],
        level: int,
    ) -> str:
        if isinstance(content, FreeText):
            return self._render_free_text(content, level)
        if isinstance(content, TextList):
            return self._render_list(content, level)
        if isinstance(content, Image):
            return self._render_image(content, level)
        if isinstance(content, Video):
            return self._render_video(content, level)
        if isinstance(content, Model3D):
            return self._render_model(content, level)
        if isinstance(content, CodeBlock):
            return self._render_code_block(content, level)
        if isinstance(content, MathBlock):
            return self._render_math(content, level)
        if isinstance(content, LayoutBlock):
            return self._render_layout_block(content, slide, layout_block, level)
        raise GenerationError(f"Unsupported content type '{type(content).__name__}'")

    # ------------------------------------------------------------------
    # Variants
    # ------------------------------------------------------------------
    def _render_free_text(self, content: FreeText, level: int) -> str:
        fragment = fragment_for(content.animation)
        identity = self.registry.identity(content)
        lines = [f'{_pad(level)}<p class="{identity}{fragment.class_suffix}"{fragment.attrs}>']
        lines.extend(_indent_lines(content.text, level + 1))
        lines.append(f"{_pad(level)}</p>")
        return "\n".join(lines)

    def _render_list(self, text_list: TextList, level: int) -> str:
        tag = "ol" if isinstance(text_list, OrderedList) else "ul"
        fragment = fragment_for(text_list.animation)
        identity = self.registry.identity(text_list)
        lines = [f'{_pad(level)}<{tag} class="{identity}{fragment.class_suffix}"{fragment.attrs}>']
        for item in text_list.items:
            if isinstance(item, TextList):
                lines.append(f'{_pad(level + 1)}<li style="list-style-type: none;">')
                lines.append(self._render_list(item, level + 2))
                lines.append(f"{_pad(level + 1)}</li>")
            else:
                lines.append(f"{_pad(level + 1)}<li>{item}</li>")
        lines.append(f"{_pad(level)}</{tag}>")
        return "\n".join(lines)

    def _render_image(self, image: Image, level: int) -> str:
        src = media_src(image.url, self.asset_copier)
        fragment = fragment_for(image.animation)
        identity = self.registry.identity(image)
        class_name = f"{identity}{fragment.class_suffix}"
        if not image.annotations:
            return f'{_pad(level)}<img class="{class_name}"{fragment.attrs} src="{src}" alt="" />'

        lines = [f'{_pad(level)}<div class="annotated-media {class_name}"{fragment.attrs}>']
        lines.append(f'{_pad(level + 1)}<img src="{src}" alt="" />')
        lines.extend(_pad(level + 1) + line for line in annotation_svg(image.annotations))
        lines.append(f"{_pad(level)}</div>")
        return "\n".join(lines)

    def _render_video(self, video: Video, level: int) -> str:
        src = media_src(video.url, self.asset_copier)
        fragment = fragment_for(video.animation)
        class_name = f"{self.registry.identity(video)}{fragment.class_suffix}"
        return _pad(level) + render_video(src, class_name, fragment.attrs)

    def _render_model(self, model: Model3D, level: int) -> str:
        src = media_src(model.url, self.asset_copier)
        fragment = fragment_for(model.animation)
        class_name = f"{self.registry.identity(model)}{fragment.class_suffix}"
        return (
            f'{_pad(level)}<model-viewer class="{class_name}"{fragment.attrs} src="{src}" '
            f'alt="" camera-controls></model-viewer>'
        )

    def _render_code_block(self, block: CodeBlock, level: int) -> str:
        identity = self.registry.identity(block)
        fragment = fragment_for(block.animation)
        pre_class = f' class="{fragment.class_suffix.strip()}"' if fragment.class_suffix else ""
        code_attrs = "data-trim"
        highlight = self._code_highlight_attrs(block, identity)
        if highlight:
            code_attrs += f" {highlight}"

        lines = [f'{_pad(level)}<div class="code-block {identity} horizontal">']
        lines.append(
            f"{_pad(level + 1)}<pre{pre_class}{fragment.attrs}>"
            f'<code {code_attrs} class="language-{block.language}">'
        )
        lines.extend(_indent_lines(html.escape(block.code, quote=False), level + 2))
        lines.append(f"{_pad(level + 1)}</code></pre>")
        if isinstance(block.highlight, VisualHighlight):
            lines.append(
                f'{_pad(level + 1)}<img alt="Legend for code highlighting" class="highlight-{identity}" />'
            )
        lines.append(f"{_pad(level)}</div>")
        return "\n".join(lines)

    def _code_highlight_attrs(self, block: CodeBlock, identity: str) -> str:
        highlight = block.highlight
        if isinstance(highlight, SimpleHighlight):
            return f'data-line-numbers="{line_highlight_spec(highlight.steps)}"'
        if isinstance(highlight, VisualHighlight):
            line_numbers = line_highlight_spec([step.lines for step in highlight.steps])
            images = "|".join(
                legend_image_steps(highlight, lambda url: media_src(url, self.asset_copier))
            )
            return (
                f'data-line-numbers="{line_numbers}" '
                f'data-target=".highlight-{identity}" '
                f'data-image-steps="{images}"'
            )
        return ""

    def _render_math(self, block: MathBlock, level: int) -> str:
        fragment = fragment_for(block.animation)
        identity = self.registry.identity(block)
        lines = [f'{_pad(level)}<div class="math {identity}{fragment.class_suffix}"{fragment.attrs}>']
        lines.append(f"{_pad(level + 1)}$$")
        lines.extend(_indent_lines(block.formula, level + 1))
        lines.append(f"{_pad(level + 1)}$$")
        lines.append(f"{_pad(level)}</div>")
        return "\n".join(lines)

    def _render_layout_block(
        self,
        block: LayoutBlock,
        slide: Slide,
        enclosing: Optional[LayoutBlock],
        level: int,
    ) -> str:
        layout = block.layout
        if layout is None and self.resolver is not None:
            placeholder = self.resolver.resolve_content_placeholder(block, slide, enclosing)
            if isinstance(placeholder, LayoutPlaceholder):
                layout = placeholder.layout

        fragment = fragment_for(block.animation)
        identity = self.registry.identity(block)
        lines = [
            f'{_pad(level)}<div class="layout {classes_for(layout)} {identity}'
            f'{fragment.class_suffix}"{fragment.attrs}>'
        ]
        lines.extend(
            self.render_content(element, slide, block, level + 1) for element in block.elements
        )
        lines.append(f"{_pad(level)}</div>")
        return "\n".join(lines)


# ----------------------------------------------------------------------
# Annotation overlay
# ----------------------------------------------------------------------
def annotation_svg(annotations: List[Annotation]) -> List[str]:
    """Return the lines of the vector overlay drawn on top of an image.

    Coordinates are percentages of the image, mapped onto a 100x100 viewBox.
    """

    shapes: List[str] = []
    for annotation in annotations:
        fragment = step_fragment(annotation.step)
        label = (
            escape_xml(strip_quotes(annotation.label)) if annotation.label else None
        )
        if isinstance(annotation, RectAnnotation):
            x, y = _number(_percent(annotation.x)), _number(_percent(annotation.y))
            w, h = _number(_percent(annotation.w)), _number(_percent(annotation.h))
            shapes.append(
                f'<rect class="anno-rect{fragment.class_suffix}"{fragment.attrs} '
                f'x="{x}" y="{y}" width="{w}" height="{h}" rx="1" ry="1" />'
            )
            if label:
                shapes.append(
                    f'<text class="anno-label{fragment.class_suffix}"{fragment.attrs} '
                    f'x="{x}" y="{y}">{label}</text>'
                )
        elif isinstance(annotation, ArrowAnnotation):
            x1, y1 = _percent(annotation.x1), _percent(annotation.y1)
            x2, y2 = _percent(annotation.x2), _percent(annotation.y2)
            shapes.append(
                f'<line class="anno-arrow{fragment.class_suffix}"{fragment.attrs} '
                f'x1="{_number(x1)}" y1="{_number(y1)}" x2="{_number(x2)}" y2="{_number(y2)}" '
                f'marker-end="url(#arrowhead)" />'
            )
            if label:
                mid_x, mid_y = (x1 + x2) / 2, (y1 + y2) / 2
                shapes.append(
                    f'<text class="anno-label{fragment.class_suffix}"{fragment.attrs} '
                    f'x="{_number(mid_x)}" y="{_number(mid_y)}">{label}</text>'
                )

    return [
        '<svg class="annotation-layer" viewBox="0 0 100 100" preserveAspectRatio="none" aria-hidden="true">',
        "  <defs>",
        '    <marker id="arrowhead" markerWidth="6" markerHeight="6" refX="5" refY="3" orient="auto">',
        '      <path d="M0,0 L6,3 L0,6 Z" class="anno-arrowhead" />',
        "    </marker>",
        "  </defs>",
        *("  " + shape for shape in shapes),
        "</svg>",
    ]
