"""Playwright-backed document accessor.

Wraps a live ``Page`` and its ``ElementHandle`` objects behind the engine's
document protocol. Selection calls the element's own ``click()`` via script,
not Playwright's actionability-checked click.
"""

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from playwright.async_api import ElementHandle, Page
else:
    ElementHandle = Page = Any


class PlaywrightElement:
    """Element protocol implementation over a Playwright ``ElementHandle``."""

    def __init__(self, handle: ElementHandle) -> None:
        self.handle = handle

    async def text(self) -> str:
        return (await self.handle.text_content()) or ""

    async def attribute(self, name: str) -> str | None:
        return await self.handle.get_attribute(name)

    async def href(self) -> str:
        # The DOM property resolves relative links against the page URL
        value = await self.handle.evaluate("el => el.href || el.getAttribute('href') || ''")
        return str(value or "")

    async def click(self) -> None:
        await self.handle.evaluate("el => el.click()")

    async def query(self, selector: str) -> "PlaywrightElement | None":
        handle = await self.handle.query_selector(selector)
        return PlaywrightElement(handle) if handle is not None else None

    async def query_all(self, selector: str) -> list["PlaywrightElement"]:
        return [PlaywrightElement(h) for h in await self.handle.query_selector_all(selector)]

    async def container(self, selector: str) -> "PlaywrightElement | None":
        js_handle = await self.handle.evaluate_handle(
            "(el, sel) => el.closest(sel) || el.parentElement", selector
        )
        element = js_handle.as_element()
        if element is None:
            await js_handle.dispose()
            return None
        return PlaywrightElement(element)

    async def scroll_to_bottom(self) -> None:
        await self.handle.evaluate("el => { el.scrollTop = el.scrollHeight; }")


class PlaywrightDocument:
    """Document protocol implementation over a Playwright ``Page``."""

    def __init__(self, page: Page) -> None:
        self.page = page

    async def query(self, selector: str) -> PlaywrightElement | None:
        handle = await self.page.query_selector(selector)
        return PlaywrightElement(handle) if handle is not None else None

    async def query_all(self, selector: str) -> list[PlaywrightElement]:
        return [PlaywrightElement(h) for h in await self.page.query_selector_all(selector)]
