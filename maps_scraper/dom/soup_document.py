"""BeautifulSoup-backed document accessor for saved HTML snapshots.

Lets the extractors run against a stored copy of a detail page, which is how
selector revisions are checked without a browser. Selection and scrolling have
no effect on static HTML, so they are forwarded to optional callbacks; a
caller simulating a live page can use them to swap in new markup.
"""

import inspect
import logging
from collections.abc import Awaitable, Callable
from urllib.parse import urljoin

from bs4 import BeautifulSoup, Tag

logger = logging.getLogger(__name__)

ElementCallback = Callable[["SoupElement"], Awaitable[None] | None]


class SoupElement:
    """Element protocol implementation over a BeautifulSoup ``Tag``."""

    def __init__(self, tag: Tag, document: "SoupDocument") -> None:
        self.tag = tag
        self.document = document

    def __repr__(self) -> str:
        return f"SoupElement(<{self.tag.name}>)"

    async def text(self) -> str:
        return self.tag.get_text()

    async def attribute(self, name: str) -> str | None:
        value = self.tag.get(name)
        if value is None:
            return None
        # Multi-valued attributes such as class come back as lists
        if isinstance(value, list):
            return " ".join(value)
        return str(value)

    async def href(self) -> str:
        raw = await self.attribute("href")
        if not raw:
            return ""
        return urljoin(self.document.base_url, raw)

    async def click(self) -> None:
        await self.document.dispatch(self.document.on_click, self)

    async def query(self, selector: str) -> "SoupElement | None":
        found = self.tag.select_one(selector)
        return SoupElement(found, self.document) if found is not None else None

    async def query_all(self, selector: str) -> list["SoupElement"]:
        return [SoupElement(t, self.document) for t in self.tag.select(selector)]

    async def container(self, selector: str) -> "SoupElement | None":
        found = self.tag.css.closest(selector) or self.tag.parent
        return SoupElement(found, self.document) if found is not None else None

    async def scroll_to_bottom(self) -> None:
        await self.document.dispatch(self.document.on_scroll, self)


class SoupDocument:
    """Document protocol implementation over parsed HTML.

    Attributes:
        base_url: URL relative links are resolved against.
        on_click: Called with the element when an element is selected.
        on_scroll: Called with the element when it is scrolled to the bottom.
    """

    def __init__(
        self,
        html: str = "",
        base_url: str = "",
        on_click: ElementCallback | None = None,
        on_scroll: ElementCallback | None = None,
        parser: str = "html.parser",
    ) -> None:
        self.base_url = base_url
        self.on_click = on_click
        self.on_scroll = on_scroll
        self.parser = parser
        self.soup = BeautifulSoup(html, parser)

    def load(self, html: str) -> None:
        """Replace the document content, as a re-render of the page would."""
        self.soup = BeautifulSoup(html, self.parser)

    async def query(self, selector: str) -> SoupElement | None:
        found = self.soup.select_one(selector)
        return SoupElement(found, self) if found is not None else None

    async def query_all(self, selector: str) -> list[SoupElement]:
        return [SoupElement(t, self) for t in self.soup.select(selector)]

    async def dispatch(self, callback: ElementCallback | None, element: SoupElement) -> None:
        if callback is None:
            logger.debug(f"No handler bound for interaction with {element!r}")
            return
        result = callback(element)
        if inspect.isawaitable(result):
            await result
