"""Tests for CLI commands against a stubbed provider."""

from __future__ import annotations

import sys

import pytest

from conftest import CalendlyStub, make_client
from slotlink import cli


@pytest.fixture
def stub(monkeypatch):
    s = CalendlyStub(times=[{"status": "available", "start_time": "2025-03-14T09:00:00Z"}])
    monkeypatch.setattr(cli, "_build_client", lambda config: make_client(s))
    monkeypatch.delenv("CALENDLY_TOKEN", raising=False)
    return s


def _run(monkeypatch, *argv):
    monkeypatch.setattr(sys, "argv", ["slotlink", *argv])
    cli.main()


def test_link_prints_deep_link(monkeypatch, capsys, stub):
    _run(
        monkeypatch, "link",
        "--date", "2025-03-10", "--time", "2025-03-10T15:30:00Z",
        "--name", "Ada Lovelace", "--email", "ada@example.com",
    )
    out = capsys.readouterr().out
    assert "https://calendly.com/acct/ET1/2025-03-10T15%3A30%3A00Z?month=2025-03" in out
    assert "Expires at 2025-03-10T17:30:00Z" in out


def test_slots_auto_selects_event_type(monkeypatch, capsys, stub):
    _run(monkeypatch, "slots", "--date", "2025-03-14")
    out = capsys.readouterr().out
    assert "Event type: 30 Minute Meeting (ET1)" in out
    assert "2025-03-14T09:00:00Z" in out


def test_event_types_lists(monkeypatch, capsys, stub):
    _run(monkeypatch, "event-types")
    out = capsys.readouterr().out
    assert "30 Minute Meeting (30 min) slug=30min-meeting" in out


def test_link_failure_exits_nonzero(monkeypatch, capsys):
    failing = CalendlyStub(statuses={"/scheduling_links": 500})
    monkeypatch.setattr(cli, "_build_client", lambda config: make_client(failing))
    with pytest.raises(SystemExit) as exc_info:
        _run(
            monkeypatch, "link",
            "--date", "2025-03-10", "--time", "2025-03-10T15:30:00Z",
            "--name", "Ada", "--email", "ada@example.com",
        )
    assert exc_info.value.code == 1
    assert "LinkCreationError" in capsys.readouterr().out


def test_check_without_token_fails(monkeypatch, capsys, tmp_path):
    monkeypatch.delenv("CALENDLY_TOKEN", raising=False)
    monkeypatch.chdir(tmp_path)
    with pytest.raises(SystemExit):
        _run(monkeypatch, "check")
    assert "CALENDLY_TOKEN not set" in capsys.readouterr().out
