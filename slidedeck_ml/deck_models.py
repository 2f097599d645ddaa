"""Data models representing templates, presentations and their content nodes.

Instances are produced from the parser's JSON output (``from_dict``) and are
treated as read-only for the duration of a generation pass. Tree nodes use
``eq=False`` so that two structurally identical nodes remain distinct keys.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional, Tuple, Union

from .exceptions import DocumentLoadError

OPTION_SLIDE_NUMBERS = "slideNumbers"
OPTION_PROGRESS_BAR = "progressBar"
OPTION_LIVE_ANNOTATIONS = "liveAnnotations"

Coordinate = Union[str, float, int]
LineAtom = Union[int, Tuple[int, int]]


def _require(data: Dict[str, Any], key: str, node_type: str) -> Any:
    try:
        return data[key]
    except KeyError as exc:
        raise DocumentLoadError(f"{node_type} is missing required field '{key}'") from exc


def _tag(data: Any, kind: str) -> str:
    if not isinstance(data, dict):
        raise DocumentLoadError(f"Expected a {kind} object, got {type(data).__name__}")
    tag = data.get("type")
    if not tag:
        raise DocumentLoadError(f"{kind} object is missing its 'type' tag")
    return tag


def _drop_none(payload: Dict[str, Any]) -> Dict[str, Any]:
    return {key: value for key, value in payload.items() if value is not None}


# ----------------------------------------------------------------------
# Value types
# ----------------------------------------------------------------------
@dataclass(slots=True)
class Size:
    width: Optional[str] = None
    height: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Size":
        return cls(width=data.get("width"), height=data.get("height"))

    def to_dict(self) -> Dict[str, Any]:
        return _drop_none({"width": self.width, "height": self.height})


@dataclass(slots=True)
class Animation:
    """Incremental reveal settings attached to a content node."""

    effect: str
    index: Optional[int] = None
    duration_ms: Optional[int] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Animation":
        index = data.get("index")
        duration = data.get("duration_ms")
        return cls(
            effect=_require(data, "effect", "Animation"),
            index=int(index) if index is not None else None,
            duration_ms=int(duration) if duration is not None else None,
        )

    def to_dict(self) -> Dict[str, Any]:
        return _drop_none(
            {"effect": self.effect, "index": self.index, "duration_ms": self.duration_ms}
        )


@dataclass(slots=True)
class LayoutTypeOption:
    value: str


@dataclass(slots=True)
class VerticalAlignOption:
    value: str


@dataclass(slots=True)
class HorizontalAlignOption:
    value: str


LayoutOption = Union[LayoutTypeOption, VerticalAlignOption, HorizontalAlignOption]

_LAYOUT_OPTIONS = {
    cls.__name__: cls
    for cls in (LayoutTypeOption, VerticalAlignOption, HorizontalAlignOption)
}


@dataclass(slots=True)
class LayoutStyle:
    """Ordered direction/alignment options of a slide or layout block."""

    options: List[LayoutOption] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "LayoutStyle":
        options: List[LayoutOption] = []
        for item in data.get("options", []):
            tag = _tag(item, "layout option")
            option_cls = _LAYOUT_OPTIONS.get(tag)
            if option_cls is None:
                raise DocumentLoadError(f"Unknown layout option type '{tag}'")
            options.append(option_cls(value=_require(item, "value", tag)))
        return cls(options=options)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "options": [
                {"type": type(option).__name__, "value": option.value}
                for option in self.options
            ]
        }


# ----------------------------------------------------------------------
# Template side
# ----------------------------------------------------------------------
@dataclass(eq=False, kw_only=True)
class ContentPlaceholder:
    """A named, typed slot declared in a slide template."""

    name: str
    css: Optional[str] = None
    size: Optional[Size] = None

    def _common_dict(self) -> Dict[str, Any]:
        return _drop_none(
            {
                "type": type(self).__name__,
                "name": self.name,
                "css": self.css,
                "size": self.size.to_dict() if self.size else None,
            }
        )

    @staticmethod
    def _common_fields(data: Dict[str, Any], node_type: str) -> Dict[str, Any]:
        size = data.get("size")
        return {
            "name": _require(data, "name", node_type),
            "css": data.get("css"),
            "size": Size.from_dict(size) if size else None,
        }

    def to_dict(self) -> Dict[str, Any]:
        return self._common_dict()


@dataclass(eq=False, kw_only=True)
class TextPlaceholder(ContentPlaceholder):
    kind: str = "freetext"

    def to_dict(self) -> Dict[str, Any]:
        return {**self._common_dict(), "kind": self.kind}


@dataclass(eq=False, kw_only=True)
class MediaPlaceholder(ContentPlaceholder):
    kind: str = "image"

    def to_dict(self) -> Dict[str, Any]:
        return {**self._common_dict(), "kind": self.kind}


@dataclass(eq=False, kw_only=True)
class CodePlaceholder(ContentPlaceholder):
    pass


@dataclass(eq=False, kw_only=True)
class MathPlaceholder(ContentPlaceholder):
    pass


@dataclass(eq=False, kw_only=True)
class LayoutPlaceholder(ContentPlaceholder):
    content: List[ContentPlaceholder] = field(default_factory=list)
    layout: Optional[LayoutStyle] = None

    def to_dict(self) -> Dict[str, Any]:
        payload = self._common_dict()
        payload["content"] = [item.to_dict() for item in self.content]
        if self.layout is not None:
            payload["layout"] = self.layout.to_dict()
        return payload


def placeholder_from_dict(data: Dict[str, Any]) -> ContentPlaceholder:
    tag = _tag(data, "placeholder")
    common = ContentPlaceholder._common_fields(data, tag)
    if tag == "TextPlaceholder":
        return TextPlaceholder(kind=data.get("kind", "freetext"), **common)
    if tag == "MediaPlaceholder":
        return MediaPlaceholder(kind=data.get("kind", "image"), **common)
    if tag == "CodePlaceholder":
        return CodePlaceholder(**common)
    if tag == "MathPlaceholder":
        return MathPlaceholder(**common)
    if tag == "LayoutPlaceholder":
        layout = data.get("layout")
        return LayoutPlaceholder(
            content=[placeholder_from_dict(item) for item in data.get("content", [])],
            layout=LayoutStyle.from_dict(layout) if layout else None,
            **common,
        )
    raise DocumentLoadError(f"Unknown placeholder type '{tag}'")


def flatten_placeholders(placeholders: List[ContentPlaceholder]) -> List[ContentPlaceholder]:
    """Return ``placeholders`` and every placeholder nested in layout placeholders."""

    result: List[ContentPlaceholder] = []
    for placeholder in placeholders:
        result.append(placeholder)
        if isinstance(placeholder, LayoutPlaceholder):
            result.extend(flatten_placeholders(placeholder.content))
    return result


@dataclass(eq=False, kw_only=True)
class SlideTemplate:
    """Named slide layout made of content placeholders."""

    name: str
    content: List[ContentPlaceholder] = field(default_factory=list)
    css: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SlideTemplate":
        return cls(
            name=_require(data, "name", "SlideTemplate"),
            content=[placeholder_from_dict(item) for item in data.get("content", [])],
            css=data.get("css"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return _drop_none(
            {
                "name": self.name,
                "content": [item.to_dict() for item in self.content],
                "css": self.css,
            }
        )


@dataclass(eq=False, kw_only=True)
class Template:
    """Reusable set of slide templates."""

    name: str
    font: Optional[str] = None
    color: Optional[str] = None
    options: List[str] = field(default_factory=list)
    slide_templates: List[SlideTemplate] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Template":
        return cls(
            name=_require(data, "name", "Template"),
            font=data.get("font"),
            color=data.get("color"),
            options=list(data.get("options", [])),
            slide_templates=[
                SlideTemplate.from_dict(item) for item in data.get("slide_templates", [])
            ],
        )

    def to_dict(self) -> Dict[str, Any]:
        return _drop_none(
            {
                "type": "Template",
                "name": self.name,
                "font": self.font,
                "color": self.color,
                "options": list(self.options),
                "slide_templates": [item.to_dict() for item in self.slide_templates],
            }
        )

    def get_slide_template(self, name: str) -> Optional[SlideTemplate]:
        return next((item for item in self.slide_templates if item.name == name), None)


# ----------------------------------------------------------------------
# Presentation side
# ----------------------------------------------------------------------
@dataclass(slots=True)
class RectAnnotation:
    x: Coordinate
    y: Coordinate
    w: Coordinate
    h: Coordinate
    label: Optional[str] = None
    step: Optional[int] = None


@dataclass(slots=True)
class ArrowAnnotation:
    x1: Coordinate
    y1: Coordinate
    x2: Coordinate
    y2: Coordinate
    label: Optional[str] = None
    step: Optional[int] = None


Annotation = Union[RectAnnotation, ArrowAnnotation]

_ANNOTATION_FIELDS = {
    "RectAnnotation": (RectAnnotation, ("x", "y", "w", "h")),
    "ArrowAnnotation": (ArrowAnnotation, ("x1", "y1", "x2", "y2")),
}


def annotation_from_dict(data: Dict[str, Any]) -> Annotation:
    tag = _tag(data, "annotation")
    try:
        annotation_cls, coordinates = _ANNOTATION_FIELDS[tag]
    except KeyError as exc:
        raise DocumentLoadError(f"Unknown annotation type '{tag}'") from exc
    step = data.get("step")
    return annotation_cls(
        *(_require(data, key, tag) for key in coordinates),
        label=data.get("label"),
        step=int(step) if step is not None else None,
    )


def annotation_to_dict(annotation: Annotation) -> Dict[str, Any]:
    _, coordinates = _ANNOTATION_FIELDS[type(annotation).__name__]
    payload: Dict[str, Any] = {"type": type(annotation).__name__}
    payload.update({key: getattr(annotation, key) for key in coordinates})
    payload.update(_drop_none({"label": annotation.label, "step": annotation.step}))
    return payload


@dataclass(slots=True)
class LineHighlight:
    """One highlight step: single lines and inclusive ranges."""

    atoms: List[LineAtom] = field(default_factory=list)

    @classmethod
    def from_value(cls, value: Any) -> "LineHighlight":
        if isinstance(value, (int, str)):
            value = [value]
        atoms: List[LineAtom] = []
        for atom in value:
            if isinstance(atom, str):
                atoms.extend(_parse_line_atoms(atom))
            elif isinstance(atom, (list, tuple)):
                start, end = atom
                atoms.append((int(start), int(end)))
            else:
                atoms.append(int(atom))
        return cls(atoms=atoms)

    def to_value(self) -> List[Any]:
        return [list(atom) if isinstance(atom, tuple) else atom for atom in self.atoms]


def _parse_line_atoms(text: str) -> List[LineAtom]:
    atoms: List[LineAtom] = []
    for part in text.split(","):
        part = part.strip()
        if not part:
            continue
        if "-" in part:
            start, end = part.split("-", 1)
            atoms.append((int(start), int(end)))
        else:
            atoms.append(int(part))
    return atoms


@dataclass(slots=True)
class SimpleHighlight:
    steps: List[LineHighlight] = field(default_factory=list)


@dataclass(slots=True)
class VisualStep:
    lines: LineHighlight
    url: Optional[str] = None


@dataclass(slots=True)
class VisualHighlight:
    """Highlight steps paired with a legend image per step."""

    steps: List[VisualStep] = field(default_factory=list)


Highlight = Union[SimpleHighlight, VisualHighlight]


def highlight_from_dict(data: Dict[str, Any]) -> Highlight:
    tag = _tag(data, "highlight")
    if tag == "SimpleHighlight":
        return SimpleHighlight(
            steps=[LineHighlight.from_value(step) for step in data.get("steps", [])]
        )
    if tag == "VisualHighlight":
        return VisualHighlight(
            steps=[
                VisualStep(
                    lines=LineHighlight.from_value(_require(step, "lines", "VisualStep")),
                    url=step.get("url"),
                )
                for step in data.get("steps", [])
            ]
        )
    raise DocumentLoadError(f"Unknown highlight type '{tag}'")


def highlight_to_dict(highlight: Highlight) -> Dict[str, Any]:
    if isinstance(highlight, SimpleHighlight):
        return {
            "type": "SimpleHighlight",
            "steps": [step.to_value() for step in highlight.steps],
        }
    return {
        "type": "VisualHighlight",
        "steps": [
            _drop_none({"lines": step.lines.to_value(), "url": step.url})
            for step in highlight.steps
        ],
    }


@dataclass(eq=False, kw_only=True)
class Content:
    """Common fields of every content variant."""

    placeholder: Optional[str] = None
    css: Optional[str] = None
    size: Optional[Size] = None
    animation: Optional[Animation] = None

    def _common_dict(self) -> Dict[str, Any]:
        return _drop_none(
            {
                "type": type(self).__name__,
                "placeholder": self.placeholder,
                "css": self.css,
                "size": self.size.to_dict() if self.size else None,
                "animation": self.animation.to_dict() if self.animation else None,
            }
        )

    def to_dict(self) -> Dict[str, Any]:
        return self._common_dict()


@dataclass(eq=False, kw_only=True)
class FreeText(Content):
    inline: Optional[str] = None
    block: Optional[str] = None

    @property
    def text(self) -> str:
        if self.inline is not None:
            return self.inline
        return self.block or ""

    def to_dict(self) -> Dict[str, Any]:
        return {**self._common_dict(), **_drop_none({"inline": self.inline, "block": self.block})}


@dataclass(eq=False, kw_only=True)
class TextList(Content):
    items: List[Union[str, "TextList"]] = field(default_factory=list)

    def nested_lists(self) -> List["TextList"]:
        return [item for item in self.items if isinstance(item, TextList)]

    def to_dict(self) -> Dict[str, Any]:
        return {
            **self._common_dict(),
            "items": [item if isinstance(item, str) else item.to_dict() for item in self.items],
        }


@dataclass(eq=False, kw_only=True)
class UnorderedList(TextList):
    pass


@dataclass(eq=False, kw_only=True)
class OrderedList(TextList):
    pass


@dataclass(eq=False, kw_only=True)
class MediaBlock(Content):
    url: str

    def to_dict(self) -> Dict[str, Any]:
        return {**self._common_dict(), "url": self.url}


@dataclass(eq=False, kw_only=True)
class Image(MediaBlock):
    annotations: List[Annotation] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        payload = super().to_dict()
        if self.annotations:
            payload["annotations"] = [annotation_to_dict(item) for item in self.annotations]
        return payload


@dataclass(eq=False, kw_only=True)
class Video(MediaBlock):
    pass


@dataclass(eq=False, kw_only=True)
class Model3D(MediaBlock):
    pass


@dataclass(eq=False, kw_only=True)
class CodeBlock(Content):
    language: str
    code: str
    highlight: Optional[Highlight] = None

    def to_dict(self) -> Dict[str, Any]:
        payload = {**self._common_dict(), "language": self.language, "code": self.code}
        if self.highlight is not None:
            payload["highlight"] = highlight_to_dict(self.highlight)
        return payload


@dataclass(eq=False, kw_only=True)
class MathBlock(Content):
    formula: str

    def to_dict(self) -> Dict[str, Any]:
        return {**self._common_dict(), "formula": self.formula}


@dataclass(eq=False, kw_only=True)
class LayoutBlock(Content):
    elements: List[Content] = field(default_factory=list)
    layout: Optional[LayoutStyle] = None

    def to_dict(self) -> Dict[str, Any]:
        payload = {
            **self._common_dict(),
            "elements": [item.to_dict() for item in self.elements],
        }
        if self.layout is not None:
            payload["layout"] = self.layout.to_dict()
        return payload


def _content_common(data: Dict[str, Any]) -> Dict[str, Any]:
    size = data.get("size")
    animation = data.get("animation")
    return {
        "placeholder": data.get("placeholder"),
        "css": data.get("css"),
        "size": Size.from_dict(size) if size else None,
        "animation": Animation.from_dict(animation) if animation else None,
    }


def _list_item_from_value(value: Any) -> Union[str, TextList]:
    if isinstance(value, str):
        return value
    if _tag(value, "list item") == "TextItem":
        return _require(value, "text", "TextItem")
    item = content_from_dict(value)
    if not isinstance(item, TextList):
        raise DocumentLoadError(
            f"List items must be text or nested lists, got '{type(item).__name__}'"
        )
    return item


def content_from_dict(data: Dict[str, Any]) -> Content:
    tag = _tag(data, "content")
    common = _content_common(data)
    if tag == "FreeText":
        return FreeText(inline=data.get("inline"), block=data.get("block"), **common)
    if tag in ("UnorderedList", "OrderedList"):
        list_cls = UnorderedList if tag == "UnorderedList" else OrderedList
        return list_cls(
            items=[_list_item_from_value(item) for item in data.get("items", [])],
            **common,
        )
    if tag == "Image":
        return Image(
            url=_require(data, "url", tag),
            annotations=[annotation_from_dict(item) for item in data.get("annotations", [])],
            **common,
        )
    if tag == "Video":
        return Video(url=_require(data, "url", tag), **common)
    if tag == "Model3D":
        return Model3D(url=_require(data, "url", tag), **common)
    if tag == "CodeBlock":
        highlight = data.get("highlight")
        return CodeBlock(
            language=data.get("language", ""),
            code=_require(data, "code", tag),
            highlight=highlight_from_dict(highlight) if highlight else None,
            **common,
        )
    if tag == "MathBlock":
        return MathBlock(formula=_require(data, "formula", tag), **common)
    if tag == "LayoutBlock":
        layout = data.get("layout")
        return LayoutBlock(
            elements=[content_from_dict(item) for item in data.get("elements", [])],
            layout=LayoutStyle.from_dict(layout) if layout else None,
            **common,
        )
    raise DocumentLoadError(f"Unknown content type '{tag}'")


@dataclass(eq=False, kw_only=True)
class Slide:
    """A single slide within a presentation."""

    contents: List[Content] = field(default_factory=list)
    title: Optional[str] = None
    template: Optional[str] = None
    layout: Optional[LayoutStyle] = None
    css: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Slide":
        layout = data.get("layout")
        return cls(
            contents=[content_from_dict(item) for item in data.get("contents", [])],
            title=data.get("title"),
            template=data.get("template"),
            layout=LayoutStyle.from_dict(layout) if layout else None,
            css=data.get("css"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return _drop_none(
            {
                "title": self.title,
                "template": self.template,
                "layout": self.layout.to_dict() if self.layout else None,
                "css": self.css,
                "contents": [item.to_dict() for item in self.contents],
            }
        )


@dataclass(slots=True)
class TemplateImport:
    """``import <template> from "<path>"`` clause of a presentation."""

    template: str
    path: str


@dataclass(eq=False, kw_only=True)
class Presentation:
    """Container for all slides that compose the deck."""

    name: str
    template_import: Optional[TemplateImport] = None
    options: List[str] = field(default_factory=list)
    slides: List[Slide] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Presentation":
        imported = data.get("import")
        return cls(
            name=_require(data, "name", "Presentation"),
            template_import=(
                TemplateImport(
                    template=imported.get("template", ""),
                    path=_require(imported, "path", "import"),
                )
                if imported
                else None
            ),
            options=list(data.get("options", [])),
            slides=[Slide.from_dict(item) for item in data.get("slides", [])],
        )

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"type": "Presentation", "name": self.name}
        if self.template_import is not None:
            payload["import"] = {
                "template": self.template_import.template,
                "path": self.template_import.path,
            }
        payload["options"] = list(self.options)
        payload["slides"] = [slide.to_dict() for slide in self.slides]
        return payload


Document = Union[Template, Presentation]

DOCUMENT_TYPES = ("Template", "Presentation")


def document_from_dict(data: Dict[str, Any]) -> Document:
    tag = _tag(data, "document")
    try:
        if tag == "Template":
            return Template.from_dict(data)
        if tag == "Presentation":
            return Presentation.from_dict(data)
    except (AttributeError, TypeError, ValueError) as exc:
        raise DocumentLoadError(f"Malformed {tag}: {exc}", original_error=exc) from exc
    raise DocumentLoadError(f"Unknown document type '{tag}'")


# ----------------------------------------------------------------------
# Traversal helpers
# ----------------------------------------------------------------------
def walk_contents(
    contents: List[Content], layout_block: Optional[LayoutBlock] = None
) -> Iterator[Tuple[Content, Optional[LayoutBlock]]]:
    """Yield ``(content, enclosing layout block)`` depth-first, pre-order."""

    for content in contents:
        yield content, layout_block
        if isinstance(content, LayoutBlock):
            yield from walk_contents(content.elements, content)
