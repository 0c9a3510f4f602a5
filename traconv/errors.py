#!/usr/bin/env python3
"""
Error types raised by the converter.

Everything derives from ConversionError so callers (the CLI in particular)
can report any failure of a single conversion uniformly.
"""

from typing import Optional


class ConversionError(Exception):
    """A conversion could not be completed."""


class SourceNotFoundError(ConversionError):
    """Input file does not exist."""


class TranscodeError(ConversionError):
    """Byte sequence is not valid for the declared encoding."""

    def __init__(self, message: str, encoding: str, path: Optional[str] = None):
        super().__init__(message)
        self.encoding = encoding
        self.path = path


class JsonFormatError(ConversionError):
    """JSON input is unparseable or not a flat object of strings."""


class InvalidEntryError(ConversionError):
    """Entry cannot be represented as a TRA record."""


class UnterminatedRecordError(ConversionError):
    """Input ended inside a record (strict decoding only)."""

    def __init__(self, key: str, line_num: int):
        super().__init__(
            f"Record @{key} opened on line {line_num} is never closed with '~'"
        )
        self.key = key
        self.line_num = line_num


class DuplicateKeyError(ConversionError):
    """Key appears twice in one table (when duplicates are rejected)."""

    def __init__(self, key: str):
        super().__init__(f"Duplicate key: @{key}")
        self.key = key


class ConfigError(ConversionError):
    """Project manifest is unreadable or malformed."""
