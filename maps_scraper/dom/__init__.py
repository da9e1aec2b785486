"""Document accessors.

- DocumentProtocol / ElementProtocol: what the engine needs from a host page
- PlaywrightDocument: live browser page
- SoupDocument: parsed HTML snapshot
"""

from .base import DocumentProtocol, ElementProtocol, attribute_or_empty
from .playwright_document import PlaywrightDocument, PlaywrightElement
from .soup_document import SoupDocument, SoupElement

__all__ = [
    "DocumentProtocol",
    "ElementProtocol",
    "attribute_or_empty",
    "PlaywrightDocument",
    "PlaywrightElement",
    "SoupDocument",
    "SoupElement",
]
