"""Custom exceptions for the maps scraper."""

from typing import Any


class ScraperError(Exception):
    """Base exception for the maps scraper."""

    def __init__(self, message: str, context: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.context = context or {}


class FeedNotFoundError(ScraperError):
    """No result feed is rendered when a run is requested."""

    pass


class FeedLostError(ScraperError):
    """The result feed disappeared while a run was in progress."""

    pass


class ExportError(ScraperError):
    """Records could not be serialized or written."""

    pass


class UnknownSelectorStrategyError(ScraperError):
    """Requested selector strategy version is not registered."""

    def __init__(self, version: str, available: list[str]):
        super().__init__(
            f"Unknown selector strategy '{version}'", {"available": sorted(available)}
        )
        self.version = version
