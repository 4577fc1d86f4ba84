"""Container selection over any tree of nodes with parent links.

Nothing here knows about a concrete DOM: callers hand in accessors for a
node's tag name and parent, a serializer, and an outline setter. The live
browser script in ``selector`` and the parsed-document picker in ``picker``
both follow the same rules.
"""

from dataclasses import dataclass
from typing import Any, Callable, Iterable, Optional

import structlog

from pricelocator import config
from pricelocator.models import ExtractionRequest

logger = structlog.get_logger(__name__)

# Clicks on these are left alone so links and form fields keep working.
INTERACTIVE_TAGS = ("A", "INPUT", "TEXTAREA")
CONTAINER_TAG = "DIV"

Node = Any
TagOf = Callable[[Node], Optional[str]]
ParentOf = Callable[[Node], Optional[Node]]


def is_interactive_leaf(tag: str | None) -> bool:
    return (tag or "").upper() in INTERACTIVE_TAGS


def is_container(tag: str | None) -> bool:
    return (tag or "").upper() == CONTAINER_TAG


def find_container(node: Node, tag_of: TagOf, parent_of: ParentOf) -> Node | None:
    """Nearest ancestor-or-self of ``node`` that is a block container."""
    while node is not None and not is_container(tag_of(node)):
        node = parent_of(node)
    return node


class HighlightManager:
    """Owns the one highlighted container.

    ``set_outline(node, value)`` applies an outline style to a node; an empty
    value removes it.
    """

    def __init__(self, set_outline: Callable[[Node, str], None], style: str | None = None):
        self._set_outline = set_outline
        self.style = style or config.HIGHLIGHT_STYLE
        self.current: Node | None = None

    def reset(self, nodes: Iterable[Node] = ()) -> None:
        for node in nodes:
            self._set_outline(node, "")
        if self.current is not None:
            self._set_outline(self.current, "")
            self.current = None

    def set_highlighted(self, node: Node, nodes: Iterable[Node] = ()) -> None:
        self.reset(nodes)
        self._set_outline(node, self.style)
        self.current = node


@dataclass
class Selection:
    """Outcome of one activation."""

    intercepted: bool
    container: Node | None = None
    request: ExtractionRequest | None = None


def select(
    target: Node,
    tag_of: TagOf,
    parent_of: ParentOf,
    serialize: Callable[[Node], str],
    highlighter: HighlightManager,
    nodes: Iterable[Node] = (),
) -> Selection:
    """Handle an activation on ``target``.

    Interactive leaves are not intercepted. Otherwise the nearest container is
    highlighted and serialized, in that order, so the markup carries the
    outline exactly as a browser's outerHTML would.
    """
    if is_interactive_leaf(tag_of(target)):
        logger.debug("Interactive element, not intercepted", tag=tag_of(target))
        return Selection(intercepted=False)

    container = find_container(target, tag_of, parent_of)
    if container is None:
        logger.info("No parent container found", tag=tag_of(target))
        return Selection(intercepted=True)

    highlighter.set_highlighted(container, nodes)
    html = serialize(container)
    if not html:
        return Selection(intercepted=True, container=container)
    return Selection(intercepted=True, container=container, request=ExtractionRequest(html=html))
