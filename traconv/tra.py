#!/usr/bin/env python3
"""
TRA string table reader and writer.

TRA format structure:
```
// comment lines and blank lines are ignored
@100 = ~Hello World~
@101 = ~Line one
continues here~
@102 = ~Echo~~ chamber~ [REF1]
```

A record opens with ``@<strref> = ~`` and runs until the closing tilde,
possibly several lines later. ``~~`` inside a value is a literal tilde.
An optional bracketed tag may follow the closing tilde; it is kept by
appending it to the decoded value.

Decoding is a two-state machine (Idle / Recording) driven one physical
line at a time by the pure ``step`` function.
"""

import io
import logging
import re
from dataclasses import dataclass, replace
from typing import Iterable, Iterator, Optional, Union

from .errors import InvalidEntryError, UnterminatedRecordError
from .store import EntryStore, TraEntry
from .tags import attach_tag, match_trailing_tag, split_trailing_tag

logger = logging.getLogger(__name__)

# Trimmed line that starts a record: @ followed by ASCII digits
HEADER_START_PATTERN = re.compile(r"^@[0-9]+")

# Full header up to and including the opening tilde
HEADER_PATTERN = re.compile(r"^\s*@([0-9]+)\s*=\s*~")

KEY_PATTERN = re.compile(r"^[0-9]+\Z")

COMMENT_PREFIX = "//"


@dataclass(frozen=True)
class Idle:
    """Scanning for the next record header."""


@dataclass(frozen=True)
class Recording:
    """Inside a record, accumulating value lines."""
    key: str
    lines: tuple[str, ...] = ()
    line_num: int = 0


DecoderState = Union[Idle, Recording]

IDLE = Idle()


def find_closing_tilde(text: str) -> int:
    """
    Find the closing delimiter in a line of record text.

    Tildes are paired left to right, so ``~~`` never closes a record. Of
    the remaining single tildes the last one on the line is the delimiter.

    Returns:
        Index of the closing ``~``, or -1 if the line has none
    """
    closing = -1
    i = 0
    while i < len(text):
        if text[i] == "~":
            if text.startswith("~~", i):
                i += 2
                continue
            closing = i
        i += 1
    return closing


def unescape_value(text: str) -> str:
    return text.replace("~~", "~")


def escape_value(text: str) -> str:
    return text.replace("~", "~~")


def _consume(state: Recording, text: str) -> tuple[DecoderState, Optional[TraEntry]]:
    """Feed record text (everything after the opening tilde, or a whole line)."""
    closing = find_closing_tilde(text)
    if closing < 0:
        return replace(state, lines=state.lines + (text.rstrip(),)), None

    lines = state.lines + (text[:closing],)
    value = unescape_value("\n".join(lines))
    tag = match_trailing_tag(text[closing + 1:])
    return IDLE, TraEntry(state.key, attach_tag(value, tag))


def step(
    state: DecoderState,
    line: str,
    line_num: int = 0,
) -> tuple[DecoderState, Optional[TraEntry]]:
    """
    Advance the decoder by one physical line.

    Args:
        state: Current state
        line: Line without its line terminator
        line_num: 1-based line number, used for diagnostics only

    Returns:
        Tuple of (next state, finished entry or None)
    """
    stripped = line.strip()
    if not stripped or stripped.startswith(COMMENT_PREFIX):
        return state, None

    if isinstance(state, Recording):
        return _consume(state, line)

    if not HEADER_START_PATTERN.match(stripped):
        return state, None

    match = HEADER_PATTERN.match(line)
    if not match:
        logger.warning("Line %d: malformed record header skipped: %s", line_num, stripped)
        return state, None

    recording = Recording(key=match.group(1), line_num=line_num)
    return _consume(recording, line[match.end():])


class TraDecoder:
    """
    Decode TRA lines into an EntryStore.

    An unterminated record at end of input is dropped with a warning. With
    strict=True it raises UnterminatedRecordError instead. Repeated keys
    overwrite earlier ones unless reject_duplicates=True.
    """

    def __init__(self, strict: bool = False, reject_duplicates: bool = False):
        self.strict = strict
        self.reject_duplicates = reject_duplicates
        self.dropped_key: Optional[str] = None

    def decode(self, lines: Iterable[str]) -> EntryStore:
        """
        Decode lines into a store.

        Args:
            lines: Iterable of lines (terminators already removed)

        Returns:
            EntryStore in file order
        """
        store = EntryStore(reject_duplicates=self.reject_duplicates)
        self.dropped_key = None
        state: DecoderState = IDLE

        for line_num, line in enumerate(lines, 1):
            state, entry = step(state, line, line_num)
            if entry is not None:
                logger.debug("Record @%s finalized", entry.key)
                store.add(entry)

        if isinstance(state, Recording):
            if self.strict:
                raise UnterminatedRecordError(state.key, state.line_num)
            logger.warning(
                "Record @%s opened on line %d is never closed; dropped",
                state.key, state.line_num,
            )
            self.dropped_key = state.key

        return store


class TraEncoder:
    """Encode an EntryStore as TRA records, one per key in store order."""

    def validate(self, store: EntryStore) -> None:
        """Check every key is a strref before any output is produced."""
        for key in store:
            if not KEY_PATTERN.match(key):
                raise InvalidEntryError(
                    f"Key '{key}' is not a numeric strref; TRA headers need @<digits>"
                )

    def format_record(self, key: str, text: str) -> str:
        """
        Format one record line.

        A trailing [A-Z0-9]+ tag is moved after the closing tilde; the rest
        of the value is escaped and trimmed. The closing tilde is always
        followed by a space, tag or not.
        """
        if not KEY_PATTERN.match(key):
            raise InvalidEntryError(f"Key '{key}' is not a numeric strref")
        body, tag = split_trailing_tag(escape_value(text))
        return f"@{key} = ~{body.strip()}~ {tag or ''}\n"

    def iter_records(self, store: EntryStore) -> Iterator[str]:
        for key, text in store.items():
            yield self.format_record(key, text)

    def encode(self, store: EntryStore) -> str:
        return "".join(self.iter_records(store))


def decode_tra(text: str, strict: bool = False, reject_duplicates: bool = False) -> EntryStore:
    """Decode TRA text held in memory."""
    lines = (line.rstrip("\n") for line in io.StringIO(text, newline=None))
    return TraDecoder(strict=strict, reject_duplicates=reject_duplicates).decode(lines)


def encode_tra(store: Union[EntryStore, dict]) -> str:
    """Encode a store (or plain dict) to TRA text."""
    if isinstance(store, dict):
        store = EntryStore.from_dict(store)
    encoder = TraEncoder()
    encoder.validate(store)
    return encoder.encode(store)
