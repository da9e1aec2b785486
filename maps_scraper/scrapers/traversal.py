"""Traversal of the virtualized result feed.

``TraversalEngine`` owns one scraping session: the record store, the run
state, the traversal cursor and the stall counter. A run repeats one cycle
until the feed is exhausted, scrolling stops revealing anything, the operator
stops it, or something outside the per-card guard fails:

1. snapshot the visible entries (reset the cursor if the window shrank)
2. scrape every entry from the cursor on, advancing the cursor first
3. stop if the end-of-results marker is shown
4. scroll the feed and count again; no growth and no commit is a stall

Stopping is cooperative. The run state is checked before every card, after
the card loop and after the scroll settle; a card already being scraped is
finished, never abandoned.
"""

import asyncio
import logging
from typing import TYPE_CHECKING

from ..bot.messages import (
    FATAL_ERROR_MESSAGE,
    NO_FEED_MESSAGE,
    PROGRESS_CARD,
    PROGRESS_PROCESSING,
    PROGRESS_SCROLLING,
    PROGRESS_STOPPED,
)
from ..dom import DocumentProtocol, ElementProtocol
from ..exceptions import FeedLostError
from ..models import RunState, ScrapeOutcome, StopReason
from ..services.record_store import RecordStore
from ..services.status_channel import StatusChannel, StatusNotifier
from .card_scraper import CardScraper
from .detail_ready import Clock, DetailReadyDetector, Sleep
from .selectors import SelectorStrategy

if TYPE_CHECKING:
    from ..config import ScraperConfig

logger = logging.getLogger(__name__)


class TraversalEngine:
    """Drives the feed and owns all traversal state.

    Attributes:
        state: Current lifecycle state.
        stop_reason: Why the last run ended, None before the first run ends.
        cursor: Number of entries of the current snapshot already attempted.
        stall_count: Consecutive scroll cycles without any progress.
        store: Committed records.
    """

    def __init__(
        self,
        document: DocumentProtocol,
        channel: StatusChannel,
        selectors: SelectorStrategy,
        settings: "ScraperConfig",
        store: RecordStore | None = None,
        sleep: Sleep = asyncio.sleep,
        clock: Clock | None = None,
    ) -> None:
        self.document = document
        self.selectors = selectors
        self.settings = settings
        self.store = store if store is not None else RecordStore()
        self.notifier = StatusNotifier(channel)
        self._sleep = sleep
        self._stop_event = asyncio.Event()

        self.state = RunState.IDLE
        self.stop_reason: StopReason | None = None
        self.cursor = 0
        self.stall_count = 0

        self.detector = DetailReadyDetector(
            document,
            selectors,
            timeout=settings.detail_timeout,
            interval=settings.detail_poll_interval,
            sleep=sleep,
            clock=clock,
        )
        self.card_scraper = CardScraper(
            document,
            selectors,
            self.store,
            self.notifier,
            self.detector,
            settle_delay=settings.settle_delay,
            sleep=sleep,
        )

    @property
    def is_running(self) -> bool:
        return self.state is RunState.RUNNING

    async def run(self) -> StopReason | None:
        """Run the traversal until it stops.

        Returns:
            Why the run ended, or None if it never started (already running
            or no feed on the page).

        Raises:
            asyncio.CancelledError: Re-raised when the run task is cancelled,
                after the completion notification has been pushed.
        """
        if self.is_running:
            logger.info("Already running")
            return None

        if await self.document.query(self.selectors.feed) is None:
            logger.warning("No result feed on the page, not starting")
            await self.notifier.scraping_error(NO_FEED_MESSAGE)
            return None

        self._begin()
        logger.info("Scraping started")

        try:
            while self.is_running:
                reason = await self._run_cycle()
                if reason is not None:
                    self._finish(reason)
        except asyncio.CancelledError:
            self._finish(StopReason.USER_STOP)
            await asyncio.shield(self._report_completion())
            raise
        except Exception as e:
            logger.error(f"Fatal error: {e}")
            self._finish(StopReason.FATAL_ERROR)
            await self.notifier.scraping_error(FATAL_ERROR_MESSAGE.format(error=e))

        await self._report_completion()
        return self.stop_reason

    async def _report_completion(self) -> None:
        reason_text = self.stop_reason.value if self.stop_reason else "unknown"
        logger.info(f"Scraping complete ({reason_text}). Total: {len(self.store)} places")
        await self.notifier.scraping_complete(len(self.store))

    async def stop(self) -> bool:
        """Request a cooperative stop.

        Returns:
            True if a running traversal was asked to stop.
        """
        if not self.is_running:
            return False
        self._finish(StopReason.USER_STOP)
        logger.info("Scraping stopped by user")
        await self.notifier.update_progress(PROGRESS_STOPPED)
        return True

    def reset(self) -> bool:
        """Drop all collected records.

        Returns:
            True if the records were cleared, False while running.
        """
        if self.is_running:
            logger.warning("Reset ignored while scraping is running")
            return False
        self.store.clear()
        logger.info("Collected data cleared")
        return True

    async def visible_entries(self) -> list[ElementProtocol]:
        """Entries currently rendered in the feed window.

        Raises:
            FeedLostError: If the feed container is gone.
        """
        feed = await self._feed()
        return await feed.query_all(self.selectors.entry_link)

    async def has_reached_end(self) -> bool:
        """Check for the end-of-results marker."""
        for marker in await self.document.query_all(self.selectors.end_markers):
            if self.selectors.matches_end_of_feed(await marker.text()):
                return True
        return False

    async def _feed(self) -> ElementProtocol:
        feed = await self.document.query(self.selectors.feed)
        if feed is None:
            raise FeedLostError("Result feed disappeared from the page")
        return feed

    def _begin(self) -> None:
        self.state = RunState.RUNNING
        self.stop_reason = None
        self.cursor = 0
        self.stall_count = 0
        self._stop_event.clear()

    def _finish(self, reason: StopReason) -> None:
        self.state = RunState.STOPPED
        self.stop_reason = reason
        self._stop_event.set()

    async def _run_cycle(self) -> StopReason | None:
        entries = await self.visible_entries()
        if len(entries) < self.cursor:
            logger.debug(f"Feed window shrank to {len(entries)} below cursor {self.cursor}, restarting")
            self.cursor = 0

        await self.notifier.update_progress(PROGRESS_PROCESSING.format(count=len(entries)))

        committed = 0
        for index in range(self.cursor, len(entries)):
            if not self.is_running:
                break
            # Advanced before the attempt so a failing entry is never replayed
            self.cursor = index + 1
            if await self._process_entry(entries[index], index, len(entries)):
                committed += 1
            await self._sleep(self.settings.click_delay)

        if not self.is_running:
            return None

        if await self.has_reached_end():
            logger.info("Reached end of results")
            return StopReason.EXHAUSTED

        await self.notifier.update_progress(PROGRESS_SCROLLING)
        before = len(await self.visible_entries())
        feed = await self._feed()
        await feed.scroll_to_bottom()
        await self._sleep(self.settings.scroll_wait)
        if not self.is_running:
            return None
        after = len(await self.visible_entries())

        if after <= before and committed == 0:
            self.stall_count += 1
            logger.info(
                f"No new cards after scroll (attempt {self.stall_count}/{self.settings.max_scroll_fails})"
            )
            if self.stall_count >= self.settings.max_scroll_fails:
                logger.info("Max scroll attempts reached, stopping")
                return StopReason.STALLED
        else:
            self.stall_count = 0

        return None

    async def _process_entry(self, entry: ElementProtocol, index: int, total: int) -> bool:
        try:
            if self.store.contains(await entry.href()):
                return False

            await self.notifier.update_progress(PROGRESS_CARD.format(index=index + 1, total=total))
            outcome = await self.card_scraper.scrape_entry(entry, cancel=self._stop_event)
            return outcome is ScrapeOutcome.COMMITTED
        except Exception as e:
            logger.warning(f"Error scraping card {index + 1}: {e}")
            return False
