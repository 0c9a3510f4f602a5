#!/usr/bin/env python3
"""
Entry store and the JSON boundary.

A string table is held as an ordered mapping of strref -> text. The JSON
form is a single flat object with the same keys in the same order.
"""

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, Optional

from .errors import DuplicateKeyError, JsonFormatError, SourceNotFoundError

logger = logging.getLogger(__name__)


@dataclass
class TraEntry:
    """Single string table record."""
    key: str
    text: str

    def __post_init__(self):
        """Ensure key is a string (JSON keys, strrefs read as ints)."""
        self.key = str(self.key)


class EntryStore:
    """
    Ordered key -> text mapping for one conversion.

    Later puts of an existing key overwrite the earlier text while keeping
    the key's original position. With reject_duplicates=True a repeated key
    raises DuplicateKeyError instead.
    """

    def __init__(self, reject_duplicates: bool = False):
        self.reject_duplicates = reject_duplicates
        self._entries: dict[str, str] = {}

    def put(self, key: str, text: str) -> None:
        key = str(key)
        if key in self._entries:
            if self.reject_duplicates:
                raise DuplicateKeyError(key)
            logger.debug("Key @%s seen again, keeping the later text", key)
        self._entries[key] = text

    def add(self, entry: TraEntry) -> None:
        self.put(entry.key, entry.text)

    def get(self, key: str, default: Optional[str] = None) -> Optional[str]:
        return self._entries.get(str(key), default)

    def keys(self) -> list[str]:
        return list(self._entries)

    def items(self) -> Iterator[tuple[str, str]]:
        return iter(self._entries.items())

    def entries(self) -> Iterator[TraEntry]:
        for key, text in self._entries.items():
            yield TraEntry(key, text)

    def to_dict(self) -> dict[str, str]:
        return dict(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __contains__(self, key) -> bool:
        return str(key) in self._entries

    def __eq__(self, other) -> bool:
        if isinstance(other, EntryStore):
            return self._entries == other._entries
        if isinstance(other, dict):
            return self._entries == other
        return NotImplemented

    def __repr__(self) -> str:
        return f"EntryStore({len(self._entries)} entries)"

    @classmethod
    def from_dict(cls, data: dict, reject_duplicates: bool = False) -> "EntryStore":
        store = cls(reject_duplicates=reject_duplicates)
        for key, text in data.items():
            store.put(key, text)
        return store

    def to_json(self) -> str:
        """Serialize as a 2-space indented JSON object, non-ASCII kept literal."""
        return json.dumps(self._entries, indent=2, ensure_ascii=False)

    @classmethod
    def from_json(cls, content: str) -> "EntryStore":
        """
        Parse a flat JSON object of strings.

        Args:
            content: Raw JSON text

        Returns:
            EntryStore in the object's key order

        Raises:
            JsonFormatError: If the JSON is invalid or not a flat string map
        """
        try:
            data = json.loads(content)
        except json.JSONDecodeError as e:
            raise JsonFormatError(f"Invalid JSON: {e.msg} at line {e.lineno}") from e

        if not isinstance(data, dict):
            raise JsonFormatError("Root element must be an object")

        for key, value in data.items():
            if not isinstance(value, str):
                raise JsonFormatError(
                    f"Value for key '{key}' must be a string, got {type(value).__name__}"
                )

        return cls.from_dict(data)


def load_json(path) -> EntryStore:
    """Read a JSON string table from disk."""
    path = Path(path)
    try:
        content = path.read_text(encoding="utf-8")
    except FileNotFoundError as e:
        raise SourceNotFoundError(f"Input file not found: {path}") from e
    store = EntryStore.from_json(content)
    logger.debug("Loaded %d entries from %s", len(store), path)
    return store


def write_json(store: EntryStore, path) -> Path:
    """Write a string table as JSON, creating parent directories as needed."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(store.to_json(), encoding="utf-8")
    logger.debug("Wrote %d entries to %s", len(store), path)
    return path
