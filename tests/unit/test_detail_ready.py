"""Tests for the detail view readiness detector."""

import asyncio

import pytest

from maps_scraper.dom import SoupDocument
from maps_scraper.models import ReadyState
from maps_scraper.scrapers.detail_ready import DetailReadyDetector

PLACEHOLDER = '<div role="main"><h1 class="fontHeadlineLarge">Results</h1></div>'
TITLE_ONLY = '<div role="main"><h1 class="fontHeadlineLarge">Harbor Books</h1></div>'
POPULATED = (
    '<div role="main"><h1 class="fontHeadlineLarge">Harbor Books</h1>'
    '<button data-item-id="address" aria-label="Address: Pier 3">Pier 3</button></div>'
)
TAB_STRIP_ONLY = (
    '<div role="main"><h1 class="fontHeadlineLarge">Harbor Books</h1>'
    '<div role="tablist"></div></div>'
)


class CountingSleep:
    """Records sleeps, advances a fake clock and optionally swaps the page markup on a given tick."""

    def __init__(self, document: SoupDocument | None = None, renders: dict[int, str] | None = None):
        self.calls: list[float] = []
        self.now = 0.0
        self.document = document
        self.renders = renders or {}

    def time(self) -> float:
        return self.now

    async def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)
        self.now += seconds
        html = self.renders.get(len(self.calls))
        if html is not None and self.document is not None:
            self.document.load(html)


class SlowDocument(SoupDocument):
    """Document whose queries take real time, like a busy browser page."""

    def __init__(self, html: str, delay: float) -> None:
        super().__init__(html)
        self.delay = delay

    async def query_all(self, selector: str):
        await asyncio.sleep(self.delay)
        return await super().query_all(selector)


def make_detector(document, selectors, sleep, timeout=0.3, interval=0.1) -> DetailReadyDetector:
    return DetailReadyDetector(
        document, selectors, timeout=timeout, interval=interval, sleep=sleep, clock=sleep.time
    )


@pytest.mark.asyncio
async def test_ready_on_first_poll(selectors) -> None:
    sleep = CountingSleep()
    detector = make_detector(SoupDocument(POPULATED), selectors, sleep)

    assert await detector.wait("Blue Door Cafe") is ReadyState.READY
    assert sleep.calls == [0.1]


@pytest.mark.asyncio
async def test_tab_strip_counts_as_marker(selectors) -> None:
    detector = make_detector(SoupDocument(TAB_STRIP_ONLY), selectors, CountingSleep())

    assert await detector.wait("") is ReadyState.READY


@pytest.mark.asyncio
async def test_waits_until_content_changes(selectors) -> None:
    document = SoupDocument(PLACEHOLDER)
    sleep = CountingSleep(document, renders={2: POPULATED})
    detector = make_detector(document, selectors, sleep)

    assert await detector.wait("") is ReadyState.READY
    assert len(sleep.calls) == 2


@pytest.mark.asyncio
async def test_placeholder_title_fails_after_timeout(selectors) -> None:
    sleep = CountingSleep()
    detector = make_detector(SoupDocument(PLACEHOLDER), selectors, sleep)

    assert await detector.wait("") is ReadyState.FAILED
    assert len(sleep.calls) == 3


@pytest.mark.asyncio
async def test_unchanged_title_fails(selectors) -> None:
    detector = make_detector(SoupDocument(POPULATED), selectors, CountingSleep())

    assert await detector.wait("Harbor Books") is ReadyState.FAILED


@pytest.mark.asyncio
async def test_title_without_marker_is_degraded(selectors) -> None:
    sleep = CountingSleep()
    detector = make_detector(SoupDocument(TITLE_ONLY), selectors, sleep)

    assert await detector.wait("Blue Door Cafe") is ReadyState.DEGRADED
    assert len(sleep.calls) == 3


@pytest.mark.asyncio
async def test_cancelled_wait_resolves_like_timeout(selectors) -> None:
    cancel = asyncio.Event()
    cancel.set()
    sleep = CountingSleep()
    detector = make_detector(SoupDocument(TITLE_ONLY), selectors, sleep, timeout=3.0)

    assert await detector.wait("", cancel=cancel) is ReadyState.DEGRADED
    assert len(sleep.calls) == 1


@pytest.mark.asyncio
async def test_short_timeout_still_polls_once(selectors) -> None:
    sleep = CountingSleep()
    detector = make_detector(SoupDocument(PLACEHOLDER), selectors, sleep, timeout=0.05)

    assert await detector.wait("") is ReadyState.FAILED
    assert sleep.calls == [0.1]


@pytest.mark.asyncio
async def test_slow_queries_do_not_extend_the_timeout(selectors) -> None:
    detector = DetailReadyDetector(
        SlowDocument(TITLE_ONLY, delay=0.2), selectors, timeout=0.5, interval=0.1
    )
    loop = asyncio.get_running_loop()

    started = loop.time()
    state = await detector.wait("Blue Door Cafe")
    elapsed = loop.time() - started

    assert state is ReadyState.DEGRADED
    assert elapsed < 0.75


@pytest.mark.asyncio
async def test_titles_containing_found_are_real_places(selectors) -> None:
    document = SoupDocument(
        '<div role="main"><h1 class="fontHeadlineLarge">Profound Coffee</h1>'
        '<div role="tablist"></div></div>'
    )
    sleep = CountingSleep()
    detector = make_detector(document, selectors, sleep)

    assert await detector.wait("") is ReadyState.READY
    assert sleep.calls == [0.1]


def test_non_positive_interval_is_rejected(selectors) -> None:
    with pytest.raises(ValueError):
        make_detector(SoupDocument(""), selectors, CountingSleep(), interval=0)
