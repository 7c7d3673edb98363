"""Tests for logging configuration and the command line entrypoint."""

from __future__ import annotations

import io
import json
import sys

import pytest
import structlog

from tokenest import main as main_module
from tokenest.logging import configure_logging


def _stdin(monkeypatch, data: bytes) -> None:
    monkeypatch.setattr(sys, "stdin", io.TextIOWrapper(io.BytesIO(data)))


def test_configure_logging_outputs_json_to_stderr(capsys):
    configure_logging()
    logger = structlog.get_logger()
    logger.info("unit-test", foo="bar")
    captured = capsys.readouterr()
    assert captured.out == ""
    record = json.loads(captured.err.strip().splitlines()[-1])
    assert record["event"] == "unit-test"
    assert record["foo"] == "bar"
    assert record["level"] == "info"


def test_main_counts_stdin(monkeypatch, capsys):
    _stdin(monkeypatch, "你好abc".encode("utf-8"))

    assert main_module.main([]) == 0
    assert capsys.readouterr().out == "3\n"


def test_main_counts_files_with_total(tmp_path, capsys):
    first = tmp_path / "a.txt"
    second = tmp_path / "b.txt"
    first.write_text("abcdef", encoding="utf-8")
    second.write_text("你好世", encoding="utf-8")

    assert main_module.main([str(first), str(second)]) == 0

    lines = capsys.readouterr().out.splitlines()
    assert lines == [f"2\t{first}", f"4\t{second}", "6\ttotal"]


def test_main_single_file_has_no_total(tmp_path, capsys):
    path = tmp_path / "a.txt"
    path.write_text("ab", encoding="utf-8")

    assert main_module.main([str(path)]) == 0
    assert capsys.readouterr().out.splitlines() == [f"1\t{path}"]


def test_main_estimates_request(monkeypatch, capsys):
    payload = {
        "model": "m",
        "system": "abc",
        "messages": [{"role": "user", "content": "你好"}],
    }
    _stdin(monkeypatch, json.dumps(payload).encode("utf-8"))

    assert main_module.main(["--request", "-"]) == 0
    assert json.loads(capsys.readouterr().out) == {"input_tokens": 3}


def test_main_reports_invalid_json(monkeypatch, capsys):
    _stdin(monkeypatch, b"{not json")

    assert main_module.main(["--request", "-"]) == 1
    captured = capsys.readouterr()
    assert captured.out == ""
    assert "token_estimation_failed" in captured.err
    assert "InvalidRequestError" in captured.err


def test_main_reports_deeply_nested_json(tmp_path, capsys):
    path = tmp_path / "nested.json"
    path.write_text("[" * 200_000 + "]" * 200_000, encoding="utf-8")

    assert main_module.main(["--request", str(path)]) == 1
    captured = capsys.readouterr()
    assert captured.out == ""
    assert "InvalidRequestError" in captured.err


def test_main_reports_malformed_input(monkeypatch, capsys):
    _stdin(monkeypatch, b"\xff\xfe\xfd")

    assert main_module.main([]) == 1
    assert "MalformedInputError" in capsys.readouterr().err


def test_main_enforces_configured_limit(monkeypatch, tmp_path, capsys):
    monkeypatch.setenv("TOKENEST_INPUT__MAX_CHARS", "3")
    path = tmp_path / "long.txt"
    path.write_text("abcdef", encoding="utf-8")

    assert main_module.main([str(path)]) == 1
    assert "InputTooLargeError" in capsys.readouterr().err


def test_main_reports_missing_file(tmp_path, capsys):
    assert main_module.main([str(tmp_path / "missing.txt")]) == 1
    assert "token_estimation_failed" in capsys.readouterr().err


def test_main_rejects_request_with_files(capsys):
    with pytest.raises(SystemExit) as excinfo:
        main_module.main(["--request", "-", "a.txt"])
    assert excinfo.value.code == 2
