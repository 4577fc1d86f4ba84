"""Container selection over a saved HTML document."""

import structlog
from bs4 import BeautifulSoup, Tag

from pricelocator import config
from pricelocator.domwalk import CONTAINER_TAG, HighlightManager, Selection, select

logger = structlog.get_logger(__name__)


def _tag_of(node) -> str | None:
    return getattr(node, "name", None)


def _parent_of(node):
    return getattr(node, "parent", None)


def set_outline(tag: Tag, value: str) -> None:
    """Replace the ``outline`` declaration of an inline style, keeping the rest.

    Clearing a tag that has no outline leaves its style attribute as written.
    """
    all_decls = [d.strip() for d in (tag.get("style") or "").split(";") if d.strip()]
    decls = [d for d in all_decls if d.split(":", 1)[0].strip().lower() != "outline"]
    if not value and len(decls) == len(all_decls):
        return
    if value:
        decls.append(f"outline: {value}")
    if decls:
        tag["style"] = "; ".join(decls) + ";"
    elif tag.has_attr("style"):
        del tag["style"]


class SoupPicker:
    """Selector for a parsed document; ``pick`` plays the part of a click."""

    def __init__(self, html: str, max_chars: int | None = None):
        self.soup = BeautifulSoup(html, "html.parser")
        self.max_chars = max_chars if max_chars is not None else config.MAX_HTML_CHARS
        self.highlighter = HighlightManager(set_outline)
        self.highlighter.reset(self.containers())

    def containers(self) -> list[Tag]:
        return self.soup.find_all(CONTAINER_TAG.lower())

    def serialize(self, tag: Tag) -> str:
        html = str(tag)
        if self.max_chars and len(html) > self.max_chars:
            logger.warning("Truncating container markup", chars=len(html), max_chars=self.max_chars)
            html = html[: self.max_chars]
        return html

    def pick(self, css_selector: str) -> Selection:
        target = self.soup.select_one(css_selector)
        if target is None:
            raise LookupError(f"No element matches {css_selector!r}")
        return select(
            target,
            _tag_of,
            _parent_of,
            self.serialize,
            self.highlighter,
            nodes=self.containers(),
        )
