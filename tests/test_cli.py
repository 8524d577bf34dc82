"""Tests for the command-line interface."""

import json

import pytest

from shelflife.cli import main


@pytest.fixture(autouse=True)
def _no_api_keys(monkeypatch):
    monkeypatch.delenv("ANTHROPIC_API_KEY", raising=False)
    monkeypatch.delenv("GEMINI_API_KEY", raising=False)
    monkeypatch.setattr("shelflife.cli.load_dotenv", lambda: None)


def test_no_command_exits():
    with pytest.raises(SystemExit) as exc_info:
        main([])
    assert exc_info.value.code == 1


def test_expiry_rule_json(capsys):
    main(["expiry", "fried rice", "--location", "fridge", "--purchased", "2024-01-01", "--json"])
    data = json.loads(capsys.readouterr().out)
    assert data["days"] == 1
    assert data["source"] == "rule"


def test_expiry_without_api_key_falls_back(capsys):
    main(["expiry", "milk", "--purchased", "2024-01-01"])
    out = capsys.readouterr().out
    assert "7 days" in out
    assert "fallback" in out


def test_expiry_bad_date_exits(capsys):
    with pytest.raises(SystemExit) as exc_info:
        main(["expiry", "milk", "--purchased", "someday"])
    assert exc_info.value.code == 1
    assert "purchasedDate" in capsys.readouterr().err


def test_scan_without_images_exits(capsys):
    with pytest.raises(SystemExit) as exc_info:
        main(["scan"])
    assert exc_info.value.code == 1


def test_parse_short_text_exits(capsys):
    with pytest.raises(SystemExit) as exc_info:
        main(["parse", "x"])
    assert exc_info.value.code == 1
    assert "Text is too short" in capsys.readouterr().err


def test_parse_without_api_key_is_unavailable(capsys):
    with pytest.raises(SystemExit) as exc_info:
        main(["parse", "2 bottles of milk", "--list"])
    assert exc_info.value.code == 2
