"""Global test configuration and fixtures.

Provides shared fixtures for all test levels: selector strategy, engine
settings with every delay zeroed, an engine factory over the fake maps page,
and sample places and records.
"""

from datetime import UTC, datetime

import pytest

from fakes import FakeMapsPage, FakePlace, FakeTimer
from maps_scraper.config import ScraperConfig
from maps_scraper.models import Record
from maps_scraper.scrapers.selectors import SelectorStrategy
from maps_scraper.scrapers.traversal import TraversalEngine
from maps_scraper.services.exporter import RecordExporter
from maps_scraper.services.status_channel import QueueStatusChannel


@pytest.fixture
def selectors() -> SelectorStrategy:
    return SelectorStrategy()


@pytest.fixture
def scraper_settings() -> ScraperConfig:
    """Engine settings with every delay zeroed and a three-poll detail wait."""
    return ScraperConfig(
        click_delay=0,
        scroll_wait=0,
        settle_delay=0,
        detail_timeout=0.3,
        detail_poll_interval=0.1,
        max_scroll_fails=3,
    )


@pytest.fixture
def channel() -> QueueStatusChannel:
    return QueueStatusChannel()


@pytest.fixture
def make_engine(selectors, scraper_settings, channel):
    """Build an engine over a fake page."""

    def _make(page: FakeMapsPage, **overrides) -> TraversalEngine:
        settings = scraper_settings.model_copy(update=overrides) if overrides else scraper_settings
        timer = FakeTimer()
        return TraversalEngine(
            page.document, channel, selectors, settings, sleep=timer, clock=timer.time
        )

    return _make


@pytest.fixture
def exporter(tmp_path) -> RecordExporter:
    return RecordExporter(tmp_path / "exports")


@pytest.fixture
def sample_places() -> list[FakePlace]:
    """A small, fully populated result list."""
    return [
        FakePlace(
            name="Blue Door Cafe",
            phone="+1 415-555-0101",
            website="https://bluedoor.example.com/",
            address="Market St, San Francisco",
            rating="4.6",
            reviews="1,204",
            category="Cafe",
        ),
        FakePlace(
            name="Harbor Books",
            phone="(415) 555-0199",
            address="Pier 3, San Francisco",
            rating="4.8",
            reviews="87",
            category="Book store",
        ),
        FakePlace(
            name="Nob Hill Dental",
            card_phone="415-555-0123",
            website="https://nobhilldental.example.org/",
            address="Sacramento St, San Francisco",
            category="Dentist",
        ),
    ]


@pytest.fixture
def sample_records() -> list[Record]:
    """Records as they come out of a run."""
    captured = datetime(2024, 5, 1, 12, 0, tzinfo=UTC)
    return [
        Record(
            name="Blue Door Cafe",
            phone="+1 415-555-0101",
            website="https://bluedoor.example.com/",
            address="Market St, San Francisco",
            rating="4.6",
            review_count="1204",
            category="Cafe",
            source_url="https://www.google.com/maps/place/Blue+Door+Cafe?hl=en",
            captured_at=captured,
            provenance={"name": "heading", "phone": "phone_control"},
        ),
        Record(
            name='The "Quoted" Diner, Inc.',
            source_url="https://www.google.com/maps/place/Quoted+Diner",
            captured_at=captured,
        ),
    ]
