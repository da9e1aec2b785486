"""Detail view readiness detection.

The detail view is rendered asynchronously into the same subtree for every
selection, so there is no load event to wait for. Readiness is inferred from
content instead: a new, non-placeholder title plus at least one marker that
only exists once the detail view is populated.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable

from ..dom import DocumentProtocol
from ..models import ReadyState
from .selectors import SelectorStrategy

logger = logging.getLogger(__name__)

Sleep = Callable[[float], Awaitable[None]]
Clock = Callable[[], float]


class DetailReadyDetector:
    """Polls the document until the detail view shows a new selection.

    Attributes:
        timeout: Wall-clock bound on a single wait, seconds.
        interval: Polling interval, seconds.
    """

    def __init__(
        self,
        document: DocumentProtocol,
        selectors: SelectorStrategy,
        timeout: float = 3.0,
        interval: float = 0.1,
        sleep: Sleep = asyncio.sleep,
        clock: Clock | None = None,
    ) -> None:
        if interval <= 0:
            raise ValueError("Polling interval must be positive")
        self.document = document
        self.selectors = selectors
        self.timeout = timeout
        self.interval = interval
        self._sleep = sleep
        self._clock = clock

    async def fresh_title(self, previous_name: str = "") -> str:
        """First heading that is not a placeholder and differs from the previous name.

        Args:
            previous_name: Name displayed before the selection.

        Returns:
            The heading text, empty string when there is none.
        """
        for heading in await self.document.query_all(self.selectors.detail_headings):
            text = (await heading.text()).strip()
            if text and not self.selectors.is_placeholder(text) and text != previous_name:
                return text
        return ""

    async def has_detail_marker(self) -> bool:
        """Check for any element that only exists in a populated detail view."""
        for selector in (
            self.selectors.action_controls,
            self.selectors.tab_strip,
            self.selectors.heading_marker,
        ):
            if await self.document.query(selector) is not None:
                return True
        return False

    async def wait(self, previous_name: str = "", cancel: asyncio.Event | None = None) -> ReadyState:
        """Wait for the detail view to reflect a new selection.

        The wait never outlives ``timeout``: slow document queries are cut
        off at the deadline and the result is decided from the last title
        seen.

        Args:
            previous_name: Name displayed before the selection, may be empty.
            cancel: Ends the wait early when set; treated like a timeout.

        Returns:
            READY on success, DEGRADED when the wait ended with a new title
            but no detail marker, FAILED when no new title appeared.
        """
        clock = self._clock or asyncio.get_running_loop().time
        deadline = clock() + self.timeout
        title = ""

        try:
            async with asyncio.timeout(self.timeout):
                while True:
                    await self._sleep(self.interval)

                    title = await self.fresh_title(previous_name)
                    if title and await self.has_detail_marker():
                        return ReadyState.READY

                    if cancel is not None and cancel.is_set():
                        logger.debug("Detail wait cancelled")
                        break
                    if clock() >= deadline:
                        break
        except TimeoutError:
            logger.debug(f"Detail wait cut off after {self.timeout}s")

        return ReadyState.DEGRADED if title else ReadyState.FAILED
