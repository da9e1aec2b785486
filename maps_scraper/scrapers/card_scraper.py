"""Single-card scrape step of the traversal.

Selects one feed entry, waits for the detail view to show it, reads every
field and commits the record when it is new and named.
"""

import asyncio
import logging
from datetime import UTC, datetime

from ..dom import DocumentProtocol, ElementProtocol
from ..models import FieldValue, ReadyState, Record, ScrapeOutcome, canonical_key
from ..services.record_store import RecordStore
from ..services.status_channel import StatusNotifier
from .detail_ready import DetailReadyDetector, Sleep
from .extractors import extract_all, extract_card_phone, extract_name
from .selectors import SelectorStrategy

logger = logging.getLogger(__name__)


class CardScraper:
    """Scrapes one feed entry into the record store.

    Attributes:
        settle_delay: Pause after readiness to absorb trailing DOM updates, seconds.
    """

    def __init__(
        self,
        document: DocumentProtocol,
        selectors: SelectorStrategy,
        store: RecordStore,
        notifier: StatusNotifier,
        detector: DetailReadyDetector,
        settle_delay: float = 0.5,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        self.document = document
        self.selectors = selectors
        self.store = store
        self.notifier = notifier
        self.detector = detector
        self.settle_delay = settle_delay
        self._sleep = sleep

    async def scrape_entry(
        self, entry: ElementProtocol, cancel: asyncio.Event | None = None
    ) -> ScrapeOutcome:
        """Scrape a feed entry.

        Args:
            entry: Feed entry link.
            cancel: Cuts the detail wait short when set; the scrape itself
                still runs to completion.

        Returns:
            What happened to the entry.
        """
        raw_url = await entry.href()
        key = canonical_key(raw_url)
        if self.store.contains(raw_url):
            return ScrapeOutcome.DUPLICATE

        # The detail view must move away from whatever it shows now
        previous_name = await extract_name(self.document, self.selectors)
        card_phone = await extract_card_phone(entry, self.selectors)

        await entry.click()

        readiness = await self.detector.wait(previous_name, cancel=cancel)
        if not readiness.succeeded:
            logger.info(f"Detail panel did not load or update for: {key}")
        elif readiness is ReadyState.DEGRADED:
            logger.debug(f"Detail panel only partially rendered for: {key}")

        await self._sleep(self.settle_delay)

        current_name = await extract_name(self.document, self.selectors)
        if previous_name and current_name == previous_name:
            logger.info(
                f"Duplicate content detected (name did not change from '{previous_name}'). Skipping."
            )
            return ScrapeOutcome.NO_CHANGE

        fields = await extract_all(self.document, self.selectors)
        if not fields["phone"].value and card_phone:
            fields["phone"] = FieldValue(value=card_phone, source="card")

        if not fields["name"].value:
            logger.info(f"No name found for: {key}")
            return ScrapeOutcome.NO_NAME

        record = self._build_record(fields, raw_url)
        if not self.store.commit(record):
            return ScrapeOutcome.DUPLICATE

        logger.info(
            f"Scraped: {record.name} | Phone: {record.phone or '-'} | Website: {record.website or '-'}"
        )
        await self.notifier.update_count(len(self.store))
        return ScrapeOutcome.COMMITTED

    @staticmethod
    def _build_record(fields: dict[str, FieldValue], raw_url: str) -> Record:
        found = {name: field for name, field in fields.items() if field.value}
        return Record(
            **{name: field.value for name, field in found.items()},
            source_url=raw_url,
            captured_at=datetime.now(UTC),
            provenance={name: field.source or "" for name, field in found.items()},
            low_confidence=[name for name, field in found.items() if field.low_confidence],
        )
