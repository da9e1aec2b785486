"""Data models for the maps scraper application.

Defines Pydantic models and enumerations for the data flowing through the
traversal engine: scraped listing records, per-field extraction results,
run lifecycle states, and the command/notification messages exchanged with
the operator surface.
"""

from datetime import UTC, datetime
from enum import Enum
from typing import Any, Literal
from urllib.parse import urlsplit, urlunsplit

from pydantic import BaseModel, Field, field_validator


class RunState(str, Enum):
    """Lifecycle state of a traversal engine."""

    IDLE = "idle"
    RUNNING = "running"
    STOPPED = "stopped"


class StopReason(str, Enum):
    """Why a run left the running state."""

    EXHAUSTED = "exhausted"
    STALLED = "stalled"
    USER_STOP = "user_stop"
    FATAL_ERROR = "fatal_error"


class ScrapeOutcome(str, Enum):
    """Result of a single card scrape attempt."""

    COMMITTED = "committed"
    DUPLICATE = "duplicate"
    NO_CHANGE = "no_change"
    NO_NAME = "no_name"


class ReadyState(str, Enum):
    """Outcome of waiting for the detail view to reflect a new selection."""

    READY = "ready"
    DEGRADED = "degraded"
    FAILED = "failed"

    @property
    def succeeded(self) -> bool:
        return self is not ReadyState.FAILED


class ExportFormat(str, Enum):
    """Supported export formats."""

    CSV = "csv"
    EXCEL = "excel"
    JSON = "json"


def canonical_key(url: str | None) -> str:
    """Derive the deduplication key of a listing link.

    The query component and fragment are dropped, everything else is kept
    as-is, so ``.../place/A?hl=en`` and ``.../place/A?hl=fr`` collide.

    Args:
        url: Listing link as found on the feed entry.

    Returns:
        Canonical key, empty string for a missing link.
    """
    if not url:
        return ""
    parts = urlsplit(url)
    return urlunsplit((parts.scheme, parts.netloc, parts.path, "", ""))


class FieldValue(BaseModel):
    """One extracted field together with where it came from.

    Attributes:
        value: Extracted text, empty when every strategy came up short.
        source: Name of the fallback strategy that produced the value.
        low_confidence: True when the winning strategy is heuristic.
    """

    value: str = ""
    source: str | None = None
    low_confidence: bool = False


class Record(BaseModel):
    """One scraped business listing.

    Attributes:
        name: Business name, never empty for a committed record.
        phone: Phone number as displayed, trailing separators trimmed.
        website: Business website URL.
        address: Street address.
        rating: Star rating as decimal text (e.g. "4.5").
        review_count: Number of reviews, digits only.
        category: Business category.
        source_url: Listing link exactly as found on the feed entry.
        captured_at: When the record was committed.
        provenance: Field name to the strategy that produced its value.
        low_confidence: Fields whose value came from a heuristic strategy.
    """

    name: str = Field(..., min_length=1)
    phone: str | None = None
    website: str | None = None
    address: str | None = None
    rating: str | None = None
    review_count: str | None = None
    category: str | None = None
    source_url: str
    captured_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    provenance: dict[str, str] = Field(default_factory=dict)
    low_confidence: list[str] = Field(default_factory=list)

    @field_validator("name")
    @classmethod
    def _strip_name(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("name must not be blank")
        return value

    @property
    def key(self) -> str:
        """Canonical deduplication key of this record."""
        return canonical_key(self.source_url)


class Notification(BaseModel):
    """Push notification from the engine to an observer.

    Attributes:
        action: Notification kind.
        count: Record count for count/completion notifications.
        message: Human readable text for progress/error notifications.
    """

    action: Literal["updateCount", "updateProgress", "scrapingComplete", "scrapingError"]
    count: int | None = None
    message: str | None = None

    def to_message(self) -> dict[str, Any]:
        """Wire representation without unset fields."""
        return self.model_dump(exclude_none=True)


class Command(BaseModel):
    """Command from the operator surface to the engine.

    Attributes:
        action: Command name.
        format: Export format, only meaningful for ``export``.
    """

    action: str
    format: ExportFormat | None = None
