"""Field extractors for the place detail view.

Each field is read by a ``FieldExtractor`` holding an ordered chain of
strategies. The first strategy that yields a non-empty value after
normalization wins; a strategy that raises is logged and skipped. Strategies
only read the document.

Strategies known to misfire on unrelated page text are flagged
low-confidence, and the flag travels with the value into the record.
"""

import logging
import re
from collections.abc import Awaitable, Callable, Iterable
from urllib.parse import urlsplit

from ..dom import DocumentProtocol, ElementProtocol, SoupDocument, attribute_or_empty
from ..models import FieldValue
from .selectors import SelectorStrategy

logger = logging.getLogger(__name__)

Strategy = Callable[[DocumentProtocol, SelectorStrategy], Awaitable[str]]

MIN_PHONE_DIGITS = 7

PHONE_SCAN_RE = re.compile(r"[\+\(]?\d[\d\s\-\(\)]{6,}")
PHONE_CLEAN_RE = re.compile(r"[\+\(]?[\d\s\-\(\)\.]{7,}")
PHONE_TRAILING_RE = re.compile(r"[\s\-\.]+$")
PHONE_PREFIX_RE = re.compile(r"^Phone:\s*", re.IGNORECASE)
WEBSITE_PREFIX_RE = re.compile(r"^Website:\s*", re.IGNORECASE)
ADDRESS_PREFIX_RE = re.compile(r"^Address:\s*", re.IGNORECASE)
URL_RE = re.compile(r"https?://[^\s]+")
RATING_LABEL_RE = re.compile(r"(\d+(?:\.\d+)?)\s*star", re.IGNORECASE)
RATING_TEXT_RE = re.compile(r"^\d\.\d$")
REVIEW_LABEL_RE = re.compile(r"(\d[\d,]*)\s*review", re.IGNORECASE)
REVIEWS_ARIA_RE = re.compile(r"(\d[\d,]*)\s*reviews")
BARE_COUNT_RE = re.compile(r"^\(?(\d[\d,]*)\)?$")


def clean_phone(text: str | None) -> str:
    """Normalize a phone number candidate.

    Picks the first phone-shaped run of characters, trims trailing
    separators and requires at least ``MIN_PHONE_DIGITS`` digits.

    Args:
        text: Raw text that may contain a phone number.

    Returns:
        Normalized phone number, empty string when none is found.
    """
    if not text:
        return ""
    for match in PHONE_CLEAN_RE.finditer(text):
        phone = PHONE_TRAILING_RE.sub("", match.group(0)).strip()
        if sum(ch.isdigit() for ch in phone) >= MIN_PHONE_DIGITS:
            return phone
    return ""


def is_valid_title(text: str, selectors: SelectorStrategy) -> bool:
    """Check whether a heading names an actual place."""
    return (
        bool(text)
        and not selectors.is_placeholder(text)
        and selectors.not_found_marker not in text
    )


def _digits(value: str) -> str:
    return value.replace(",", "")


def _is_host_domain(url: str, selectors: SelectorStrategy) -> bool:
    host = (urlsplit(url).hostname or "").lower()
    return any(domain in host for domain in selectors.host_domains)


async def _label(element: ElementProtocol | None) -> str:
    if element is None:
        return ""
    return (await attribute_or_empty(element, "aria-label")).strip()


async def _text(element: ElementProtocol | None) -> str:
    if element is None:
        return ""
    return (await element.text()).strip()


class FieldExtractor:
    """Ordered fallback chain for one record field.

    Attributes:
        field: Record field name.
        chain: ``(strategy name, strategy)`` pairs in priority order.
        normalize: Applied to each strategy result before it is accepted.
        low_confidence: Names of heuristic strategies.
    """

    def __init__(
        self,
        field: str,
        chain: list[tuple[str, Strategy]],
        normalize: Callable[[str], str] = str.strip,
        low_confidence: Iterable[str] = (),
    ) -> None:
        self.field = field
        self.chain = chain
        self.normalize = normalize
        self.low_confidence = frozenset(low_confidence)

    async def extract(self, document: DocumentProtocol, selectors: SelectorStrategy) -> FieldValue:
        """Run the chain against the document.

        Args:
            document: Host document with the detail view rendered.
            selectors: Selector strategy describing the markup.

        Returns:
            The first accepted value with its provenance, or an empty value.
        """
        for name, strategy in self.chain:
            try:
                value = self.normalize(await strategy(document, selectors) or "")
            except Exception as e:
                logger.debug(f"{self.field} strategy '{name}' failed: {e}")
                continue
            if value:
                return FieldValue(
                    value=value, source=name, low_confidence=name in self.low_confidence
                )
        return FieldValue()


# Name ----------------------------------------------------------------------


async def _name_from_headings(document: DocumentProtocol, selectors: SelectorStrategy) -> str:
    for heading in await document.query_all(selectors.detail_headings):
        text = await _text(heading)
        if is_valid_title(text, selectors):
            return text
    return ""


async def _name_from_main_label(document: DocumentProtocol, selectors: SelectorStrategy) -> str:
    label = await _label(await document.query(selectors.main_region))
    if label and not selectors.is_placeholder(label):
        return label
    return ""


# Phone ---------------------------------------------------------------------


async def _phone_from_control(document: DocumentProtocol, selectors: SelectorStrategy) -> str:
    control = await document.query(selectors.phone_control)
    if control is None:
        return ""
    return PHONE_PREFIX_RE.sub("", await _label(control)).strip() or await _text(control)


async def _phone_from_label(document: DocumentProtocol, selectors: SelectorStrategy) -> str:
    control = await document.query(selectors.phone_label_control)
    return PHONE_PREFIX_RE.sub("", await _label(control)).strip()


async def _phone_from_controls_scan(document: DocumentProtocol, selectors: SelectorStrategy) -> str:
    for control in await document.query_all(selectors.interactive_controls):
        text = f"{await control.text()} {await attribute_or_empty(control, 'aria-label')}"
        match = PHONE_SCAN_RE.search(text)
        if match and clean_phone(match.group(0)):
            return match.group(0)
    return ""


async def extract_card_phone(entry: ElementProtocol, selectors: SelectorStrategy) -> str:
    """Read a phone number from a feed entry's own card.

    Some categories show the phone directly on the result card; this is used
    when the detail view has none.

    Args:
        entry: Feed entry link.
        selectors: Selector strategy describing the markup.

    Returns:
        Normalized phone number, empty string when the card shows none.
    """
    try:
        container = await entry.container(selectors.card_container)
        if container is None:
            return ""

        for span in await container.query_all(selectors.card_phone_text):
            text = await _text(span)
            if PHONE_SCAN_RE.search(text):
                phone = clean_phone(text)
                if phone:
                    return phone

        labelled = await container.query(selectors.card_phone_label)
        if labelled is not None:
            return clean_phone(PHONE_PREFIX_RE.sub("", await _label(labelled)))
    except Exception as e:
        logger.debug(f"Card phone lookup failed: {e}")

    return ""


# Website -------------------------------------------------------------------


async def _website_from_link(document: DocumentProtocol, selectors: SelectorStrategy) -> str:
    link = await document.query(selectors.website_link)
    if link is None:
        return ""
    return await link.href()


async def _website_from_control(document: DocumentProtocol, selectors: SelectorStrategy) -> str:
    label = await _label(await document.query(selectors.website_control))
    match = URL_RE.search(label)
    return match.group(0) if match else WEBSITE_PREFIX_RE.sub("", label).strip()


async def _website_from_external_link(document: DocumentProtocol, selectors: SelectorStrategy) -> str:
    for link in await document.query_all(selectors.external_links):
        href = await link.href()
        if href.startswith("http") and not _is_host_domain(href, selectors):
            return href
    return ""


# Address -------------------------------------------------------------------


async def _address_from_control(document: DocumentProtocol, selectors: SelectorStrategy) -> str:
    control = await document.query(selectors.address_control)
    if control is None:
        return ""
    return ADDRESS_PREFIX_RE.sub("", await _label(control)).strip() or await _text(control)


# Rating & reviews ------------------------------------------------------------


async def _rating_from_label(document: DocumentProtocol, selectors: SelectorStrategy) -> str:
    match = RATING_LABEL_RE.search(await _label(await document.query(selectors.rating_image)))
    return match.group(1) if match else ""


async def _rating_from_text(document: DocumentProtocol, selectors: SelectorStrategy) -> str:
    for span in await document.query_all(selectors.rating_text):
        text = await _text(span)
        if RATING_TEXT_RE.match(text):
            return text
    return ""


async def _reviews_from_rating_label(document: DocumentProtocol, selectors: SelectorStrategy) -> str:
    match = REVIEW_LABEL_RE.search(await _label(await document.query(selectors.rating_image)))
    return _digits(match.group(1)) if match else ""


async def _reviews_from_label(document: DocumentProtocol, selectors: SelectorStrategy) -> str:
    for element in await document.query_all(selectors.review_label):
        match = REVIEWS_ARIA_RE.search(await _label(element))
        if match:
            return _digits(match.group(1))
    return ""


async def _reviews_from_bare_number(document: DocumentProtocol, selectors: SelectorStrategy) -> str:
    # Can pick up years or prices; flagged low-confidence
    for span in await document.query_all(selectors.review_text):
        match = BARE_COUNT_RE.match(await _text(span))
        if match and int(_digits(match.group(1))) > 0:
            return _digits(match.group(1))
    return ""


# Category ------------------------------------------------------------------


async def _category_from_control(document: DocumentProtocol, selectors: SelectorStrategy) -> str:
    return await _text(await document.query(selectors.category_control))


async def _category_from_hotel_stars(document: DocumentProtocol, selectors: SelectorStrategy) -> str:
    return await _text(await document.query(selectors.hotel_stars))


def _looks_like_category(text: str, selectors: SelectorStrategy) -> bool:
    return (
        2 < len(text) < 60
        and not text[0].isdigit()
        and not any(marker in text for marker in selectors.category_exclusions)
        and text[0].isupper()
        and len(text.split(" ")) <= 4
    )


async def _category_from_text(document: DocumentProtocol, selectors: SelectorStrategy) -> str:
    area = await document.query(selectors.info_area)
    if area is None:
        return ""
    for span in await area.query_all(selectors.category_text):
        text = await _text(span)
        if _looks_like_category(text, selectors):
            return text
    return ""


NAME = FieldExtractor(
    "name", [("heading", _name_from_headings), ("main_region_label", _name_from_main_label)]
)
PHONE = FieldExtractor(
    "phone",
    [
        ("phone_control", _phone_from_control),
        ("phone_label", _phone_from_label),
        ("controls_scan", _phone_from_controls_scan),
    ],
    normalize=clean_phone,
)
WEBSITE = FieldExtractor(
    "website",
    [
        ("authority_link", _website_from_link),
        ("authority_control", _website_from_control),
        ("external_link", _website_from_external_link),
    ],
)
ADDRESS = FieldExtractor("address", [("address_control", _address_from_control)])
RATING = FieldExtractor(
    "rating", [("star_label", _rating_from_label), ("bare_rating", _rating_from_text)]
)
REVIEW_COUNT = FieldExtractor(
    "review_count",
    [
        ("star_label", _reviews_from_rating_label),
        ("reviews_label", _reviews_from_label),
        ("bare_number", _reviews_from_bare_number),
    ],
    low_confidence={"bare_number"},
)
CATEGORY = FieldExtractor(
    "category",
    [
        ("category_control", _category_from_control),
        ("hotel_stars", _category_from_hotel_stars),
        ("text_heuristic", _category_from_text),
    ],
    low_confidence={"text_heuristic"},
)

DETAIL_FIELDS: tuple[FieldExtractor, ...] = (
    NAME,
    PHONE,
    WEBSITE,
    ADDRESS,
    RATING,
    REVIEW_COUNT,
    CATEGORY,
)


async def extract_name(document: DocumentProtocol, selectors: SelectorStrategy) -> str:
    """Name currently displayed in the detail view, empty when none."""
    return (await NAME.extract(document, selectors)).value


async def extract_all(
    document: DocumentProtocol, selectors: SelectorStrategy
) -> dict[str, FieldValue]:
    """Run every field extractor against the rendered detail view.

    Args:
        document: Host document with the detail view rendered.
        selectors: Selector strategy describing the markup.

    Returns:
        Mapping of record field name to extracted value.
    """
    return {extractor.field: await extractor.extract(document, selectors) for extractor in DETAIL_FIELDS}


async def extract_snapshot(
    html: str, selectors: SelectorStrategy | None = None, base_url: str = ""
) -> dict[str, FieldValue]:
    """Run every field extractor against a saved detail page.

    Args:
        html: Saved page markup.
        selectors: Selector strategy, the default one when omitted.
        base_url: URL relative links are resolved against.

    Returns:
        Mapping of record field name to extracted value.
    """
    document = SoupDocument(html, base_url=base_url)
    return await extract_all(document, selectors or SelectorStrategy())
