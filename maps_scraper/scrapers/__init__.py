"""Google Maps feed scraping package.

Contains the selector strategies, field extractors, the detail-ready
detector and the single-card scrape step the traversal engine is built from.

Architecture:
- SelectorStrategy / SelectorRegistry: versioned query surface of the maps page
- FieldExtractor: ordered fallback chains, one per record field
- DetailReadyDetector: polls until the detail view shows a new selection
- CardScraper: selects one entry and commits its record
- traversal.TraversalEngine: drives the feed (import from ``.traversal``)
"""

from .card_scraper import CardScraper
from .detail_ready import DetailReadyDetector
from .extractors import DETAIL_FIELDS, FieldExtractor, extract_all, extract_snapshot
from .selectors import SelectorRegistry, SelectorStrategy

__all__ = [
    "CardScraper",
    "DetailReadyDetector",
    "DETAIL_FIELDS",
    "FieldExtractor",
    "extract_all",
    "extract_snapshot",
    "SelectorRegistry",
    "SelectorStrategy",
]
