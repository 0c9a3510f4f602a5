#!/usr/bin/env python3
"""
File-level conversions between TRA and JSON.

Each call owns its own EntryStore and streams; nothing is shared between
calls. A failure mid-way aborts the call and may leave a partial output
file behind (no temp file, no rename).
"""

import logging
from pathlib import Path
from typing import Optional

from .codepage import open_sink, open_source, resolve_codepage
from .store import load_json, write_json
from .tra import TraDecoder, TraEncoder

logger = logging.getLogger(__name__)


def default_json_path(input_path: Path) -> Path:
    """setup.tra -> setup.tra.json"""
    return input_path.with_name(input_path.name + ".json")


def default_tra_path(input_path: Path) -> Path:
    """setup.tra.json -> setup.tra, strings.json -> strings.tra"""
    if input_path.suffix.lower() == ".json":
        stripped = input_path.with_suffix("")
        if stripped.suffix.lower() == ".tra":
            return stripped
        return stripped.with_suffix(".tra")
    return input_path.with_name(input_path.name + ".tra")


def tra_to_json(
    input_path,
    output_path=None,
    encoding: str = "utf-8",
    strict: bool = False,
    reject_duplicates: bool = False,
) -> dict:
    """
    Convert a TRA file to a JSON string table.

    Args:
        input_path: Path to the .tra file
        output_path: Output .json path (default: <input>.json)
        encoding: Encoding name; legacy codepage aliases trigger transcoding
        strict: Raise on an unterminated trailing record instead of dropping it
        reject_duplicates: Raise on a repeated strref instead of last-wins

    Returns:
        Result dictionary with output path and stats
    """
    input_path = Path(input_path)
    output_path = Path(output_path) if output_path else default_json_path(input_path)

    decoder = TraDecoder(strict=strict, reject_duplicates=reject_duplicates)
    with open_source(input_path, encoding) as lines:
        store = decoder.decode(lines)

    write_json(store, output_path)
    logger.info("Converted %s -> %s (%d entries)", input_path, output_path, len(store))

    result = {
        "status": "ok",
        "input_file": str(input_path),
        "output_file": str(output_path),
        "encoding": resolve_codepage(encoding) or "utf-8",
        "stats": {
            "entries": len(store),
        },
        "summary": f"Conversion completed: {len(store)} entries written to {output_path.name}",
    }
    if decoder.dropped_key is not None:
        result["warnings"] = [
            f"Unterminated record @{decoder.dropped_key} at end of file was dropped"
        ]
    return result


def json_to_tra(
    input_path,
    output_path=None,
    encoding: str = "utf-8",
) -> dict:
    """
    Convert a JSON string table to a TRA file.

    The JSON is fully loaded and validated before the output file is opened,
    so a bad input never produces an output file.

    Args:
        input_path: Path to the .json file
        output_path: Output .tra path (default: derived from input name)
        encoding: Encoding name; legacy codepage aliases trigger transcoding

    Returns:
        Result dictionary with output path and stats
    """
    input_path = Path(input_path)
    output_path = Path(output_path) if output_path else default_tra_path(input_path)

    store = load_json(input_path)
    encoder = TraEncoder()
    encoder.validate(store)

    with open_sink(output_path, encoding) as sink:
        for record in encoder.iter_records(store):
            sink.write(record)

    logger.info("Converted %s -> %s (%d entries)", input_path, output_path, len(store))

    return {
        "status": "ok",
        "input_file": str(input_path),
        "output_file": str(output_path),
        "encoding": resolve_codepage(encoding) or "utf-8",
        "stats": {
            "entries": len(store),
        },
        "summary": f"Conversion to .TRA completed: {len(store)} entries written to {output_path.name}",
    }


def convert(input_path, output_path: Optional[str] = None, encoding: str = "utf-8", **kwargs) -> dict:
    """Pick the direction from the input file extension."""
    input_path = Path(input_path)
    if input_path.suffix.lower() == ".json":
        return json_to_tra(input_path, output_path, encoding)
    return tra_to_json(input_path, output_path, encoding, **kwargs)
