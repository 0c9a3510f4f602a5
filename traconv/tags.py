#!/usr/bin/env python3
"""
Bracketed tag handling.

Two independent conventions live here:

1. Tag suffix on TRA records. A record may carry a trailing token such as
   ``[REF1]`` after its closing tilde::

       @100 = ~Hello there~ [REF1]

   On decode the tag is glued back onto the value (``Hello there[REF1]``);
   on encode it is split off again and written after the closing tilde.

2. Marker tags around translatable text, used when preparing values for
   translation: ``[START]main text[END]``. The markers are kept out of the
   text sent to a translator and restored afterwards.
"""

import re
from dataclasses import dataclass
from typing import Optional

# Text following a closing tilde: optional whitespace, one bracketed token
DECODE_TAG_PATTERN = re.compile(r"^\s*(\[[^\[\]]+\])\s*$")

# Tag at the very end of a JSON value (uppercase alphanumerics only)
ENCODE_TAG_PATTERN = re.compile(r"\[[A-Z0-9]+\]\Z")

# [start]main[end], anchored to the whole string
MARKER_TAG_PATTERN = re.compile(r"^(\[[^\]]+\])(.*)(\[[^\]]+\])$", re.DOTALL)


def match_trailing_tag(rest: str) -> Optional[str]:
    """
    Match the text after a closing tilde against the tag grammar.

    Args:
        rest: Remainder of the line after the closing ``~``

    Returns:
        The bracketed tag (without surrounding whitespace), or None
    """
    match = DECODE_TAG_PATTERN.match(rest)
    return match.group(1) if match else None


def split_trailing_tag(value: str) -> tuple[str, Optional[str]]:
    """
    Split a trailing ``[A-Z0-9]+`` tag off a value.

    Returns:
        Tuple of (body, tag); tag is None when the value has no suffix
    """
    match = ENCODE_TAG_PATTERN.search(value)
    if not match:
        return value, None
    return value[:match.start()], match.group(0)


def attach_tag(body: str, tag: Optional[str]) -> str:
    """Re-attach a tag suffix to a value body."""
    return body + tag if tag else body


@dataclass(frozen=True)
class TaggedText:
    """Value split into optional marker tags and the translatable core."""
    main_text: str
    start_tag: Optional[str] = None
    end_tag: Optional[str] = None

    @property
    def has_tags(self) -> bool:
        return self.start_tag is not None


def split_marker_tags(text: str) -> TaggedText:
    """Split ``[a]text[b]`` into its parts; untagged text is all main_text."""
    match = MARKER_TAG_PATTERN.match(text)
    if not match:
        return TaggedText(main_text=text)
    return TaggedText(
        main_text=match.group(2),
        start_tag=match.group(1),
        end_tag=match.group(3),
    )


def join_marker_tags(tagged: TaggedText) -> str:
    """Inverse of split_marker_tags."""
    return f"{tagged.start_tag or ''}{tagged.main_text}{tagged.end_tag or ''}"
