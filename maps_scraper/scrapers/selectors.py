"""Selector strategies describing the host page markup.

Every CSS selector, placeholder string and text pattern the engine depends on
lives in a ``SelectorStrategy``. When the host page changes its markup, a new
strategy version is registered (in code or in ``config/scraper.yml``) and
selected by name; extraction and traversal code stays untouched.
"""

import logging
import re
from typing import Any

from pydantic import BaseModel, Field

from ..exceptions import UnknownSelectorStrategyError

logger = logging.getLogger(__name__)


class SelectorStrategy(BaseModel):
    """One version of the host page selector contract.

    Attributes:
        version: Strategy identifier.
        feed: Scrollable, virtualized result list.
        entry_link: Feed entries, relative to the feed container.
        card_container: Ancestor of an entry holding its card-level details.
        detail_headings: Candidate title headings of the detail view.
        main_region: Main content region of the detail view.
        info_area: Region scanned by the category heuristic.
        placeholder_titles: Titles shown when no place is selected.
        not_found_marker: Substring of "no results" style titles.
        action_controls: Controls bound to the selected item.
        tab_strip: Tab strip of the detail view.
        heading_marker: Category-specific heading marker (hotels).
        phone_control: Dedicated phone action control.
        phone_label_control: Control whose accessible label starts with "Phone".
        interactive_controls: Controls scanned for a bare phone number.
        card_phone_text: Card elements scanned for a phone number.
        card_phone_label: Card element carrying a phone accessible label.
        website_link: Dedicated website link.
        website_control: Dedicated website control.
        external_links: Links inside the main region considered as websites.
        host_domains: Domains of the host application, never a business website.
        address_control: Dedicated address control.
        rating_image: Element whose accessible label holds the star rating.
        rating_text: Bare rating text nodes.
        review_label: Elements whose accessible label holds a review count.
        review_text: Bare review count text nodes.
        category_control: Dedicated category control.
        hotel_stars: Hotel star class label.
        category_text: Text nodes scanned by the category heuristic.
        category_exclusions: Substrings that disqualify a category candidate.
        end_markers: Elements that may carry the end-of-results text.
        end_patterns: Regular expressions matching the end-of-results text.
    """

    version: str = "default"

    feed: str = 'div[role="feed"]'
    entry_link: str = 'a[href*="/maps/place/"]'
    card_container: str = "[data-result-index]"

    detail_headings: str = (
        'h1.fontHeadlineLarge, h1.DUwDvf, h1.kpih0e, h1.uvopNe, div[role="main"] h1'
    )
    main_region: str = 'div[role="main"]'
    info_area: str = 'div[role="main"], .m6QErb[aria-label]'
    placeholder_titles: list[str] = Field(default_factory=lambda: ["Results", "Google Maps"])
    not_found_marker: str = "found"

    action_controls: str = "button[data-item-id]"
    tab_strip: str = 'div[role="tablist"]'
    heading_marker: str = ".DUwDvf"

    phone_control: str = 'button[data-item-id*="phone"]'
    phone_label_control: str = 'button[aria-label^="Phone"]'
    interactive_controls: str = "button"
    card_phone_text: str = "span"
    card_phone_label: str = '[aria-label*="Phone"]'

    website_link: str = 'a[data-item-id="authority"], a[data-item-id*="authority"]'
    website_control: str = 'button[data-item-id="authority"], button[data-item-id*="authority"]'
    external_links: str = 'div[role="main"] a[href]'
    host_domains: list[str] = Field(default_factory=lambda: ["google.com", "gstatic.com"])

    address_control: str = 'button[data-item-id="address"], button[data-item-id*="address"]'

    rating_image: str = 'div[role="img"][aria-label*="star"], span[role="img"][aria-label*="star"]'
    rating_text: str = 'div[role="main"] span[aria-hidden="true"]'
    review_label: str = 'span[aria-label*="reviews"]'
    review_text: str = 'div[role="main"] span'

    category_control: str = 'button[jsaction*="category"]'
    hotel_stars: str = 'span[aria-label*="-star hotel"]'
    category_text: str = "span"
    category_exclusions: list[str] = Field(
        default_factory=lambda: ["star", "review", "Open", "Closed", "·"]
    )

    end_markers: str = "p > span > span, div.m6QErb span"
    end_patterns: list[str] = Field(default_factory=lambda: [r"you.ve reached the end"])

    def is_placeholder(self, title: str) -> bool:
        """Check whether a title is one of the no-selection placeholders."""
        return title in self.placeholder_titles

    def matches_end_of_feed(self, text: str) -> bool:
        """Check whether text is the end-of-results marker in any known locale."""
        return any(re.search(pattern, text, re.IGNORECASE) for pattern in self.end_patterns)


class SelectorRegistry:
    """Registry of selector strategy versions.

    Provides lookup by version name so the engine can be pointed at a newer
    markup contract through configuration alone.
    """

    def __init__(self) -> None:
        """Initialize registry with the built-in default strategy."""
        self._strategies: dict[str, SelectorStrategy] = {}
        self.logger = logging.getLogger(f"{__name__}.registry")
        self.register(SelectorStrategy())

    def register(self, strategy: SelectorStrategy) -> None:
        """Register or replace a strategy version.

        Args:
            strategy: Strategy to register under its ``version``.
        """
        self._strategies[strategy.version] = strategy
        self.logger.debug(f"Registered selector strategy: {strategy.version}")

    def register_overrides(self, version: str, overrides: dict[str, Any], base: str = "default") -> SelectorStrategy:
        """Register a version derived from an existing one.

        Args:
            version: Name of the new version.
            overrides: Field values replacing those of the base version.
            base: Version the new one inherits unspecified fields from.

        Returns:
            The registered strategy.
        """
        parent = self.get(base)
        data = parent.model_dump()
        data.update(overrides)
        data["version"] = version
        strategy = SelectorStrategy.model_validate(data)
        self.register(strategy)
        return strategy

    def get(self, version: str) -> SelectorStrategy:
        """Look up a strategy by version.

        Args:
            version: Strategy identifier.

        Returns:
            The registered strategy.

        Raises:
            UnknownSelectorStrategyError: If no such version is registered.
        """
        strategy = self._strategies.get(version)
        if strategy is None:
            raise UnknownSelectorStrategyError(version, list(self._strategies))
        return strategy

    def versions(self) -> list[str]:
        """Get the names of all registered versions."""
        return list(self._strategies.keys())
