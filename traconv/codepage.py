#!/usr/bin/env python3
"""
Codepage transcoding for TRA files.

Russian TRA files ship in the Windows Cyrillic codepage; everything else is
UTF-8. A small set of aliases (case-insensitive) selects the legacy codec,
any other encoding name means the data is already canonical UTF-8.
"""

import io
import logging
from pathlib import Path
from typing import Optional, TextIO

from .errors import SourceNotFoundError, TranscodeError

logger = logging.getLogger(__name__)

CANONICAL_ENCODING = "utf-8"

# Alias -> Python codec name
LEGACY_CODEPAGES = {
    "win1251": "cp1251",
    "windows-1251": "cp1251",
    "cp1251": "cp1251",
}


def resolve_codepage(name: Optional[str]) -> Optional[str]:
    """Return the legacy codec for an encoding name, or None for canonical text."""
    if not name:
        return None
    return LEGACY_CODEPAGES.get(name.strip().lower())


def _read_codec(encoding: Optional[str]) -> str:
    # utf-8-sig drops a leading BOM that some editors add to TRA files
    return resolve_codepage(encoding) or "utf-8-sig"


def _write_codec(encoding: Optional[str]) -> str:
    return resolve_codepage(encoding) or CANONICAL_ENCODING


def decode_bytes(data: bytes, encoding: Optional[str] = None) -> str:
    """
    Decode raw file bytes to text.

    Args:
        data: Raw bytes
        encoding: Encoding name as given by the caller

    Returns:
        Decoded text

    Raises:
        TranscodeError: If the bytes are invalid for the selected codec
    """
    codec = _read_codec(encoding)
    try:
        return data.decode(codec)
    except UnicodeDecodeError as e:
        raise TranscodeError(
            f"Cannot decode input as {codec}: {e.reason} at byte {e.start}",
            encoding=codec,
        ) from e


def encode_text(text: str, encoding: Optional[str] = None) -> bytes:
    """Encode text for writing, transcoding to the legacy codepage if named."""
    codec = _write_codec(encoding)
    try:
        return text.encode(codec)
    except UnicodeEncodeError as e:
        raise TranscodeError(
            f"Cannot encode {e.object[e.start:e.end]!r} as {codec}",
            encoding=codec,
        ) from e


class TranscodingReader:
    """
    Line iterator over a file, decoding with the selected codec.

    Wraps UnicodeDecodeError raised mid-stream into TranscodeError so a bad
    byte anywhere in the file aborts the conversion with a clear message.
    """

    def __init__(self, path: Path, encoding: Optional[str] = None):
        self.path = Path(path)
        self.codec = _read_codec(encoding)
        try:
            self._stream: TextIO = open(self.path, "r", encoding=self.codec, newline=None)
        except FileNotFoundError as e:
            raise SourceNotFoundError(f"Input file not found: {self.path}") from e
        logger.debug("Reading %s as %s", self.path, self.codec)

    def __iter__(self):
        try:
            for line in self._stream:
                yield line.rstrip("\n")
        except UnicodeDecodeError as e:
            raise TranscodeError(
                f"Cannot decode {self.path} as {self.codec}: {e.reason}",
                encoding=self.codec,
                path=str(self.path),
            ) from e

    def close(self) -> None:
        self._stream.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False


class TranscodingWriter:
    """Text sink that encodes each write with the selected codec."""

    def __init__(self, path: Path, encoding: Optional[str] = None):
        self.path = Path(path)
        self.codec = _write_codec(encoding)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self._stream: io.BufferedWriter = open(self.path, "wb")
        logger.debug("Writing %s as %s", self.path, self.codec)

    def write(self, text: str) -> None:
        data = encode_text(text, self.codec)
        self._stream.write(data)

    def close(self) -> None:
        self._stream.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False


def open_source(path, encoding: Optional[str] = None) -> TranscodingReader:
    """Open a TRA file for line-by-line reading."""
    return TranscodingReader(path, encoding)


def open_sink(path, encoding: Optional[str] = None) -> TranscodingWriter:
    """Open a TRA file for writing records."""
    return TranscodingWriter(path, encoding)


def list_codepages() -> list[dict[str, str]]:
    """List recognised legacy codepage aliases."""
    return [
        {"alias": alias, "codec": codec}
        for alias, codec in LEGACY_CODEPAGES.items()
    ]
