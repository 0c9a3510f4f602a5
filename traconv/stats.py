#!/usr/bin/env python3
"""
String table statistics.

Estimates how much text a table would send to a translator: entry counts,
characters and tiktoken token counts of the translatable core of each
value (marker tags removed, empty strings skipped).
"""

import logging
from dataclasses import asdict, dataclass
from typing import Optional

import tiktoken

from .store import EntryStore
from .tags import split_marker_tags, split_trailing_tag

logger = logging.getLogger(__name__)


class TokenEstimator:
    """Token counter backed by a tiktoken encoding."""

    def __init__(self, model: str = "cl100k_base"):
        """
        Args:
            model: Tiktoken encoding name (default: cl100k_base)
        """
        try:
            self.encoder = tiktoken.get_encoding(model)
        except Exception as e:
            # Encoding files are fetched on first use; offline runs estimate
            logger.warning("Tiktoken encoding %s unavailable (%s); using estimate", model, e)
            self.encoder = None

    def count(self, text: str) -> int:
        if not text:
            return 0
        if self.encoder:
            return len(self.encoder.encode(text))
        # ~4 chars per token
        return max(1, len(text) // 4)


@dataclass
class TableStats:
    entries: int = 0
    empty: int = 0
    tagged: int = 0
    marker_tagged: int = 0
    multiline: int = 0
    characters: int = 0
    estimated_tokens: int = 0

    def to_dict(self) -> dict:
        return asdict(self)


def table_stats(
    store: EntryStore,
    start: int = 0,
    limit: Optional[int] = None,
    estimator: Optional[TokenEstimator] = None,
) -> TableStats:
    """
    Compute statistics over a slice of a table.

    Args:
        store: Table to inspect
        start: Index of the first entry to include
        limit: Maximum number of entries (default: all remaining)
        estimator: Token counter (default: cl100k_base)
    """
    estimator = estimator or TokenEstimator()
    items = list(store.items())
    end = len(items) if limit is None else min(len(items), start + limit)

    stats = TableStats()
    for _, text in items[start:end]:
        stats.entries += 1
        if not text:
            stats.empty += 1
            continue
        if split_trailing_tag(text)[1]:
            stats.tagged += 1
        tagged = split_marker_tags(text)
        if tagged.has_tags:
            stats.marker_tagged += 1
        if "\n" in text:
            stats.multiline += 1
        stats.characters += len(tagged.main_text)
        stats.estimated_tokens += estimator.count(tagged.main_text)

    return stats
