"""Tests for the compute_ratings command-line script."""

import json
import sys

from scripts.compute_ratings import main

RACES = [
    {
        "id": "a1-450",
        "name": "Anaheim 1",
        "date": "2020-01-04",
        "venue": "Angel Stadium",
        "tier": "PREMIER",
        "discipline": "SX",
        "results": [
            {"position": 1, "riderName": "Rider A"},
            {"position": 2, "riderName": "Rider B"},
            {"position": 3, "riderName": "Rider C"},
        ],
    },
    {
        "id": "a1-250",
        "name": "Anaheim 1",
        "date": "2020-01-04",
        "venue": "Angel Stadium",
        "tier": "LITES",
        "discipline": "SX",
        "results": [
            {"position": 1, "riderName": "Rider D"},
            {"position": 2, "riderName": "Rider E"},
        ],
    },
]


def _run(monkeypatch, *args):
    monkeypatch.setattr(sys, "argv", ["compute_ratings.py", *map(str, args)])
    return main()


def test_writes_output(monkeypatch, tmp_path, capsys):
    events_path = tmp_path / "races.json"
    events_path.write_text(json.dumps(RACES), encoding="utf-8")
    output_path = tmp_path / "out" / "ratings.json"

    assert _run(monkeypatch, events_path, "--output", output_path) == 0

    data = json.loads(output_path.read_text(encoding="utf-8"))
    assert set(data["riders"]) == {"ridera", "riderb", "riderc", "riderd", "ridere"}
    assert data["riders"]["ridera"]["elo"] == 1540
    assert "Rider A" in capsys.readouterr().out


def test_tier_filter(monkeypatch, tmp_path):
    events_path = tmp_path / "races.json"
    events_path.write_text(json.dumps(RACES), encoding="utf-8")
    output_path = tmp_path / "ratings.json"

    assert _run(monkeypatch, events_path, "--tier", "LITES", "--output", output_path) == 0

    data = json.loads(output_path.read_text(encoding="utf-8"))
    assert set(data["riders"]) == {"riderd", "ridere"}


def test_bad_decay_offset(monkeypatch, tmp_path, capsys):
    events_path = tmp_path / "races.json"
    events_path.write_text(json.dumps(RACES), encoding="utf-8")

    assert _run(monkeypatch, events_path, "--decay-offset", "3") == 1
    assert "ERROR" in capsys.readouterr().out


def test_unreadable_input(monkeypatch, tmp_path, capsys):
    events_path = tmp_path / "races.json"
    events_path.write_text(json.dumps({"not": "a list"}), encoding="utf-8")

    assert _run(monkeypatch, events_path) == 1
    assert "expected a JSON array" in capsys.readouterr().out

    assert _run(monkeypatch, tmp_path / "missing.json") == 1
