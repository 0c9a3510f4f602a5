#!/usr/bin/env python3
"""
traconv - TRA <-> JSON string table converter

Converts WeiDU-style .tra string tables to flat JSON objects and back,
transcoding legacy Cyrillic codepages on the way.

Commands:
    decode    - Convert a .tra file to .json
    encode    - Convert a .json file to .tra
    convert   - Pick the direction from the input extension
    tree      - Convert every language/file of a mod source tree
    check     - Report which language directories exist in a source tree
    stats     - Entry and token statistics for a .json table
    codepages - List recognised legacy codepage aliases

Every command prints a JSON result on stdout. Errors are printed as JSON
on stderr with exit code 1.
"""

import argparse
import json
import logging
import sys
from pathlib import Path

from . import __version__
from .codepage import list_codepages
from .converter import convert, json_to_tra, tra_to_json
from .project import ProjectConfig, check_language_dirs, convert_tree
from .stats import table_stats
from .store import load_json


def cmd_decode(args) -> dict:
    """Convert TRA to JSON."""
    return tra_to_json(
        args.input,
        args.output,
        encoding=args.encoding,
        strict=args.strict,
        reject_duplicates=args.reject_duplicates,
    )


def cmd_encode(args) -> dict:
    """Convert JSON to TRA."""
    return json_to_tra(args.input, args.output, encoding=args.encoding)


def cmd_convert(args) -> dict:
    """Convert in the direction implied by the input extension."""
    return convert(args.input, args.output, encoding=args.encoding)


def cmd_tree(args) -> dict:
    """Convert a whole source tree."""
    config = ProjectConfig.load(args.config)
    return convert_tree(args.source, config, output_dir=args.output, strict=args.strict)


def cmd_check(args) -> dict:
    """Check language directories in a source tree."""
    source = Path(args.source)
    if not source.is_dir():
        return {
            "status": "error",
            "error_type": "SOURCE_NOT_FOUND",
            "error": f"Source directory not found: {args.source}",
            "suggestion": "Point --source at the mod directory containing the tra root",
        }

    config = ProjectConfig.load(args.config)
    languages = check_language_dirs(source, config)
    missing = [name for name, exists in languages.items() if not exists]

    return {
        "status": "ok" if not missing else "incomplete",
        "source": str(source.resolve()),
        "tra_root": config.tra_root,
        "languages": languages,
        "summary": (
            f"All {len(languages)} language directories present."
            if not missing else f"Missing language directories: {', '.join(missing)}"
        ),
    }


def cmd_stats(args) -> dict:
    """Statistics for a JSON table."""
    store = load_json(args.input)
    stats = table_stats(store, start=args.start, limit=args.limit)
    return {
        "status": "ok",
        "input_file": args.input,
        "range": {
            "start": args.start,
            "limit": args.limit,
        },
        "stats": stats.to_dict(),
        "summary": f"{stats.entries} entries, ~{stats.estimated_tokens} tokens to translate.",
    }


def cmd_codepages(args) -> dict:
    """List recognised codepage aliases."""
    codepages = list_codepages()
    return {
        "status": "ok",
        "codepages": codepages,
        "summary": f"{len(codepages)} aliases recognised; any other encoding is read as UTF-8.",
    }


COMMANDS = {
    "decode": cmd_decode,
    "encode": cmd_encode,
    "convert": cmd_convert,
    "tree": cmd_tree,
    "check": cmd_check,
    "stats": cmd_stats,
    "codepages": cmd_codepages,
}


def non_negative_int(value: str) -> int:
    try:
        parsed = int(value, 10)
    except ValueError:
        raise argparse.ArgumentTypeError(f"Must be a valid integer: {value}")
    if parsed < 0:
        raise argparse.ArgumentTypeError(f"Must not be negative: {value}")
    return parsed


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="traconv",
        description="traconv - TRA <-> JSON string table converter",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # TRA to JSON (writes setup.tra.json)
  traconv decode --input setup.tra

  # Russian tables are cp1251
  traconv decode --input Russian/setup.tra --encoding win1251

  # JSON back to TRA
  traconv encode --input setup.tra.json --output setup.tra --encoding win1251

  # Whole mod tree into l10n/<lang>/*.json
  traconv tree --source ~/mods/iwd2ee-src --config manifest.yaml

TRA record format:
  @100 = ~Hello World~
  @101 = ~Line one
  continues here~
  @102 = ~Echo~~ chamber~ [REF1]
        """,
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging to stderr")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    decode_parser = subparsers.add_parser("decode", help="Convert .tra to .json")
    decode_parser.add_argument("--input", "-i", required=True, help="Input .tra file")
    decode_parser.add_argument("--output", "-o", help="Output .json file (default: <input>.json)")
    decode_parser.add_argument("--encoding", "-e", default="utf-8", help="Input encoding (default: utf-8)")
    decode_parser.add_argument("--strict", action="store_true",
                               help="Fail on an unterminated final record instead of dropping it")
    decode_parser.add_argument("--reject-duplicates", action="store_true",
                               help="Fail on repeated strrefs instead of keeping the last")

    encode_parser = subparsers.add_parser("encode", help="Convert .json to .tra")
    encode_parser.add_argument("--input", "-i", required=True, help="Input .json file")
    encode_parser.add_argument("--output", "-o", help="Output .tra file")
    encode_parser.add_argument("--encoding", "-e", default="utf-8", help="Output encoding (default: utf-8)")

    convert_parser = subparsers.add_parser("convert", help="Convert by input extension")
    convert_parser.add_argument("--input", "-i", required=True, help="Input .tra or .json file")
    convert_parser.add_argument("--output", "-o", help="Output file")
    convert_parser.add_argument("--encoding", "-e", default="utf-8", help="TRA side encoding (default: utf-8)")

    tree_parser = subparsers.add_parser("tree", help="Convert a mod source tree")
    tree_parser.add_argument("--source", "-s", required=True, help="Mod source directory")
    tree_parser.add_argument("--config", "-c", help="YAML manifest (default: built-in IWD2EE layout)")
    tree_parser.add_argument("--output", "-o", help="Base output directory (default: current directory)")
    tree_parser.add_argument("--strict", action="store_true", help="Fail on unterminated records")

    check_parser = subparsers.add_parser("check", help="Check language directories")
    check_parser.add_argument("--source", "-s", required=True, help="Mod source directory")
    check_parser.add_argument("--config", "-c", help="YAML manifest")

    stats_parser = subparsers.add_parser("stats", help="Table statistics")
    stats_parser.add_argument("--input", "-i", required=True, help="Input .json file")
    stats_parser.add_argument("--start", type=non_negative_int, default=0, help="First entry index (default: 0)")
    stats_parser.add_argument("--limit", type=non_negative_int, help="Number of entries (default: all)")

    subparsers.add_parser("codepages", help="List codepage aliases")

    return parser


def configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        sys.exit(1)

    configure_logging(args.verbose)

    try:
        result = COMMANDS[args.command](args)
    except Exception as e:
        print(json.dumps({
            "status": "error",
            "error": str(e),
            "error_type": type(e).__name__,
        }, ensure_ascii=False), file=sys.stderr)
        sys.exit(1)

    print(json.dumps(result, indent=2, ensure_ascii=False))
    if result.get("status") == "error":
        sys.exit(1)


if __name__ == "__main__":
    main()
