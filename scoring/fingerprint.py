"""
Batch-wide fingerprint index for template/duplicate detection.

The index is built once per batch, before any comment is scored, and is
read-only afterwards. Scoring a comment only needs its own entry.
"""

import logging
from collections import Counter
from dataclasses import dataclass
from types import MappingProxyType
from typing import Iterable, Mapping, Tuple

from core.constants import DUPLICATE_MIN_COUNT, FINGERPRINT_MIN_LENGTH
from scoring.normalizer import fingerprint_text

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FingerprintEntry:
    """Fingerprint of one comment and how often it occurs in the batch."""
    fingerprint: str
    frequency: int

    @property
    def is_duplicate(self) -> bool:
        return self.frequency >= DUPLICATE_MIN_COUNT


EMPTY_ENTRY = FingerprintEntry(fingerprint="", frequency=0)


class FingerprintIndex:
    """
    Fingerprint frequency table for one batch of comment bodies.

    Fingerprints shorter than FINGERPRINT_MIN_LENGTH are never counted and
    report frequency 0, so short generic text ("nice", "lol") can't form a
    template.

    Usage:
        index = FingerprintIndex.build(c.text for c in comments)
        entry = index.entry(0)
        if entry.is_duplicate:
            ...
    """

    def __init__(self, fingerprints: Tuple[str, ...], min_length: int = FINGERPRINT_MIN_LENGTH):
        self.min_length = min_length
        counts = Counter(fp for fp in fingerprints if len(fp) >= min_length)
        self._table: Mapping[str, int] = MappingProxyType(dict(counts))
        self._entries: Tuple[FingerprintEntry, ...] = tuple(
            FingerprintEntry(fp, counts[fp] if len(fp) >= min_length else 0)
            for fp in fingerprints
        )

    @classmethod
    def build(cls, texts: Iterable[object], min_length: int = FINGERPRINT_MIN_LENGTH) -> "FingerprintIndex":
        """Fingerprint every text once and count them."""
        fingerprints = tuple(fingerprint_text(text) for text in texts)
        index = cls(fingerprints, min_length=min_length)
        templates = index.templates()
        if templates:
            logger.debug(
                f"Fingerprint index: {len(fingerprints)} comments, "
                f"{len(templates)} repeated template(s)"
            )
        return index

    @property
    def table(self) -> Mapping[str, int]:
        """Read-only fingerprint -> occurrence count mapping."""
        return self._table

    @property
    def entries(self) -> Tuple[FingerprintEntry, ...]:
        return self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def entry(self, position: int) -> FingerprintEntry:
        return self._entries[position]

    def frequency(self, position: int) -> int:
        return self._entries[position].frequency

    def templates(self, min_count: int = DUPLICATE_MIN_COUNT) -> Mapping[str, int]:
        """Fingerprints repeated at least min_count times."""
        return {fp: n for fp, n in self._table.items() if n >= min_count}
