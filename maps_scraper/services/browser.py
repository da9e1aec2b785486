"""Headless browser host for the live maps page.

This module owns the Playwright Chromium instance the traversal engine drives.
It opens the configured search page, waits for the result feed and hands the
page out wrapped in a ``PlaywrightDocument``.

Key features:
- Playwright-based browser lifecycle as an async context manager
- Optional blocking of image, media and font requests
- On-demand ``playwright install chromium`` when the binary is missing
"""

import asyncio
import logging
import shlex
from typing import TYPE_CHECKING, Any

from playwright.async_api import async_playwright

from ..dom import PlaywrightDocument

if TYPE_CHECKING:
    from playwright.async_api import Browser, BrowserContext, Page, Playwright, Route

logger = logging.getLogger(__name__)

BLOCKED_RESOURCE_TYPES = ("image", "media", "font")


class HeadlessBrowser:
    """Browser manager for the maps page.

    Attributes:
        headless: Launch Chromium without a window.
        block_media: Abort image, media and font requests.
        page: Page opened by ``open_page``, None before.
    """

    def __init__(self, headless: bool = True, block_media: bool = True) -> None:
        self.headless = headless
        self.block_media = block_media
        self.browser: "Browser | None" = None
        self.context: "BrowserContext | None" = None
        self.playwright: "Playwright | None" = None
        self.page: "Page | None" = None
        self._install_attempted: bool = False

    async def __aenter__(self) -> "HeadlessBrowser":
        """Async context manager entry."""
        await self.start()
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Async context manager exit."""
        await self.stop()

    async def start(self) -> None:
        """Start the browser."""
        try:
            self.playwright = await async_playwright().start()
            self.browser = await self.playwright.chromium.launch(
                headless=self.headless,
                args=[
                    "--no-sandbox",
                    "--disable-setuid-sandbox",
                    "--disable-dev-shm-usage",
                    "--no-first-run",
                    "--no-default-browser-check",
                ],
            )
            self.context = await self.browser.new_context(
                viewport={"width": 1366, "height": 768},
                locale="en-US",
            )

            if self.block_media:
                await self.context.route("**/*", self._route_handler)

            logger.info("Headless browser started successfully")

        except Exception as e:
            logger.error(f"Failed to start headless browser: {e}")

            if not self._install_attempted and _needs_browser_install(str(e)):
                logger.warning("Playwright browsers missing; attempting automatic installation...")
                self._install_attempted = True
                success = await _ensure_playwright_browsers_installed()
                if success:
                    logger.info("Playwright browsers installed successfully, retrying launch.")
                    await self.stop()
                    await self.start()
                    return

            await self.stop()
            raise

    async def stop(self) -> None:
        """Stop the browser and cleanup resources."""
        try:
            if self.context:
                await self.context.close()
                self.context = None
                self.page = None

            if self.browser:
                await self.browser.close()
                self.browser = None

            if self.playwright:
                await self.playwright.stop()
                self.playwright = None

            logger.debug("Headless browser stopped and cleaned up")

        except Exception as e:
            logger.warning(f"Error during browser cleanup: {e}")

    async def _route_handler(self, route: "Route") -> None:
        """Abort heavy media requests, let everything else through."""
        if route.request.resource_type in BLOCKED_RESOURCE_TYPES:
            await route.abort()
        else:
            await route.continue_()

    async def open_page(
        self, url: str, ready_selector: str | None = None, timeout: int = 30000
    ) -> PlaywrightDocument:
        """Open a page and wrap it as a document accessor.

        Args:
            url: Page to navigate to.
            ready_selector: Selector to wait for after navigation, if any.
            timeout: Navigation and wait timeout in milliseconds.

        Returns:
            Document accessor over the opened page.

        Raises:
            RuntimeError: If the browser has not been started.
        """
        if self.context is None:
            raise RuntimeError("Browser not started. Call start() first.")

        page = await self.context.new_page()
        await page.goto(url, wait_until="domcontentloaded", timeout=timeout)
        logger.info(f"Opened {url}")

        if ready_selector:
            try:
                await page.wait_for_selector(ready_selector, timeout=timeout)
            except Exception as e:
                # The engine reports a missing feed itself
                logger.warning(f"'{ready_selector}' did not appear on {url}: {e}")

        self.page = page
        return PlaywrightDocument(page)


def _needs_browser_install(message: str) -> bool:
    lowered = message.lower()
    return "executable doesn't exist" in lowered or "playwright install" in lowered


async def _ensure_playwright_browsers_installed() -> bool:
    """Attempt to install Playwright Chromium binaries on demand."""
    try:
        cmd = ["playwright", "install", "chromium"]
        logger.info("Running %s", " ".join(shlex.quote(part) for part in cmd))
        process = await asyncio.create_subprocess_exec(
            *cmd,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.STDOUT,
        )
        stdout, _ = await process.communicate()
        if stdout:
            logger.info(stdout.decode(errors="ignore"))
        if process.returncode == 0:
            return True

        logger.error("playwright install chromium exited with %s", process.returncode)
        return False
    except Exception as exc:
        logger.error(f"Automatic Playwright installation failed: {exc}")
        return False
