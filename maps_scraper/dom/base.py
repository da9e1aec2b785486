"""Document accessor protocol used by the traversal engine.

The engine never talks to a browser directly. Everything it needs from the
host page (querying elements, reading text and attributes, selecting an entry,
scrolling the feed) goes through these two protocols, so the same extraction
and traversal code runs against a live Playwright page or a parsed HTML
snapshot.
"""

from typing import Protocol


class ElementProtocol(Protocol):
    """A rendered element of the host document."""

    async def text(self) -> str:
        """Full text content of the element, empty string when absent."""
        ...

    async def attribute(self, name: str) -> str | None:
        """Attribute value, None when the attribute is missing."""
        ...

    async def href(self) -> str:
        """Absolute link target of an anchor, empty string when absent."""
        ...

    async def click(self) -> None:
        """Select the element the way a DOM ``click()`` would."""
        ...

    async def query(self, selector: str) -> "ElementProtocol | None":
        """First descendant matching the CSS selector."""
        ...

    async def query_all(self, selector: str) -> list["ElementProtocol"]:
        """All descendants matching the CSS selector, in document order."""
        ...

    async def container(self, selector: str) -> "ElementProtocol | None":
        """Closest ancestor (or self) matching the selector, else the parent."""
        ...

    async def scroll_to_bottom(self) -> None:
        """Scroll a scrollable element to its end."""
        ...


class DocumentProtocol(Protocol):
    """The host document as seen by the engine."""

    async def query(self, selector: str) -> ElementProtocol | None:
        """First element matching the CSS selector."""
        ...

    async def query_all(self, selector: str) -> list[ElementProtocol]:
        """All elements matching the CSS selector, in document order."""
        ...


async def attribute_or_empty(element: ElementProtocol, name: str) -> str:
    """Read an attribute, treating a missing attribute as an empty string."""
    return (await element.attribute(name)) or ""
