"""Append-only store of scraped records with URL deduplication."""

import logging

from ..models import Record, canonical_key

logger = logging.getLogger(__name__)


class RecordStore:
    """Committed records plus the set of their canonical keys.

    The record list and the key set only change together, in ``commit`` and
    ``clear``, so they never disagree.
    """

    def __init__(self) -> None:
        self._records: list[Record] = []
        self._keys: set[str] = set()

    def __len__(self) -> int:
        return len(self._records)

    def __bool__(self) -> bool:
        return bool(self._records)

    @property
    def records(self) -> list[Record]:
        """Snapshot of committed records in commit order."""
        return list(self._records)

    def contains(self, url: str | None) -> bool:
        """Check whether a listing link is already committed.

        Args:
            url: Listing link, with or without query parameters.

        Returns:
            True if a record with the same canonical key exists.
        """
        return canonical_key(url) in self._keys

    def commit(self, record: Record) -> bool:
        """Append a record unless its canonical key is already known.

        Args:
            record: Record to store.

        Returns:
            True if the record was appended, False for a duplicate.
        """
        key = record.key
        if key in self._keys:
            logger.debug(f"Duplicate record ignored: {key}")
            return False
        self._records.append(record)
        self._keys.add(key)
        return True

    def clear(self) -> None:
        """Drop all records and keys."""
        self._records = []
        self._keys = set()
