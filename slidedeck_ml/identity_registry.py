"""Per-run identity strings shared by the markup, style and runtime generators."""

from __future__ import annotations

import logging
import weakref
from typing import Dict, Iterator, List, Union

from .deck_models import Content, Presentation, Slide, TextList, walk_contents

LOGGER = logging.getLogger(__name__)

IdentifiedNode = Union[Slide, Content]


class IdentityRegistry:
    """Assigns ``slide-<n>`` / ``content-<n>`` identities to node instances.

    Identities are memoized per instance through weak references, so the
    registry never keeps AST nodes alive. One registry serves exactly one
    generation pass at a time; call :meth:`reset` before starting another.
    """

    def __init__(self) -> None:
        self._identities: "weakref.WeakKeyDictionary[IdentifiedNode, str]" = (
            weakref.WeakKeyDictionary()
        )
        self._counters: Dict[str, int] = {}

    def identity(self, node: IdentifiedNode) -> str:
        cached = self._identities.get(node)
        if cached is not None:
            return cached
        kind = "slide" if isinstance(node, Slide) else "content"
        self._counters[kind] = self._counters.get(kind, 0) + 1
        value = f"{kind}-{self._counters[kind]}"
        self._identities[node] = value
        return value

    def reset(self) -> None:
        self._identities = weakref.WeakKeyDictionary()
        self._counters = {}

    def register_presentation(self, presentation: Presentation) -> List[str]:
        """Assign identities to every node of ``presentation`` in canonical order.

        The order is depth-first pre-order: a slide, then its contents, with a
        layout block or list placed before its own children.
        """

        assigned = [self.identity(node) for node in iter_identified_nodes(presentation)]
        LOGGER.debug("Registered %d identities for '%s'", len(assigned), presentation.name)
        return assigned

    def __len__(self) -> int:
        return len(self._identities)


def iter_identified_nodes(presentation: Presentation) -> Iterator[IdentifiedNode]:
    for slide in presentation.slides:
        yield slide
        for content, _ in walk_contents(slide.contents):
            yield content
            if isinstance(content, TextList):
                yield from _iter_nested_lists(content)


def _iter_nested_lists(text_list: TextList) -> Iterator[TextList]:
    for nested in text_list.nested_lists():
        yield nested
        yield from _iter_nested_lists(nested)
