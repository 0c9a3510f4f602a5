#!/usr/bin/env python3
"""
Tests for the command-line interface.

Commands are run through main() with an explicit argv; stdout carries the
JSON result, stderr the JSON error.
"""

import json
import sys

import pytest

from traconv.cli import main


def run(capsys, *argv):
    main(list(argv))
    return json.loads(capsys.readouterr().out)


def test_decode_command(tmp_path, capsys):
    """Test 1: decode writes JSON and reports the entry count."""
    source = tmp_path / "setup.tra"
    source.write_text("@1 = ~One~\n@2 = ~Two~\n", encoding="utf-8")

    result = run(capsys, "decode", "--input", str(source))

    assert result["status"] == "ok"
    assert result["stats"]["entries"] == 2
    assert json.loads((tmp_path / "setup.tra.json").read_text(encoding="utf-8")) == {
        "1": "One",
        "2": "Two",
    }


def test_encode_command_cp1251(tmp_path, capsys):
    """Test 2: encode with --encoding win1251 writes cp1251 bytes."""
    source = tmp_path / "ru.json"
    source.write_text(json.dumps({"200": "Привет"}, ensure_ascii=False), encoding="utf-8")
    output = tmp_path / "ru.tra"

    result = run(capsys, "encode", "-i", str(source), "-o", str(output), "-e", "win1251")

    assert result["encoding"] == "cp1251"
    assert output.read_bytes() == "@200 = ~Привет~ \n".encode("cp1251")


def test_error_reported_on_stderr(tmp_path, capsys):
    """Test 3: Failures exit 1 with a JSON error on stderr."""
    with pytest.raises(SystemExit) as exc_info:
        main(["decode", "--input", str(tmp_path / "missing.tra")])

    assert exc_info.value.code == 1
    error = json.loads(capsys.readouterr().err)
    assert error["status"] == "error"
    assert error["error_type"] == "SourceNotFoundError"


def test_check_command(tmp_path, capsys):
    """Test 4: check reports language directories."""
    (tmp_path / "iwd2ee" / "tra" / "English").mkdir(parents=True)

    result = run(capsys, "check", "--source", str(tmp_path))

    assert result["status"] == "incomplete"
    assert result["languages"] == {"English": True, "Italian": False, "Russian": False}


def test_check_missing_source(tmp_path, capsys):
    """Test 5: check on a missing directory returns an error result."""
    with pytest.raises(SystemExit):
        main(["check", "--source", str(tmp_path / "nowhere")])
    result = json.loads(capsys.readouterr().out)
    assert result["error_type"] == "SOURCE_NOT_FOUND"


def test_codepages_command(capsys):
    """Test 6: codepages lists the aliases."""
    result = run(capsys, "codepages")
    assert {c["alias"] for c in result["codepages"]} == {"win1251", "windows-1251", "cp1251"}


def test_stats_rejects_negative_limit(tmp_path, capsys):
    """Test 7: --limit must be non-negative."""
    with pytest.raises(SystemExit) as exc_info:
        main(["stats", "--input", str(tmp_path / "x.json"), "--limit", "-1"])
    assert exc_info.value.code == 2


def test_no_command_prints_help(capsys):
    """Test 8: No subcommand prints help and exits 1."""
    with pytest.raises(SystemExit) as exc_info:
        main([])
    assert exc_info.value.code == 1


if __name__ == "__main__":
    sys.exit(pytest.main([__file__, "-v"]))
