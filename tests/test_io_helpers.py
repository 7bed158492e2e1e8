from __future__ import annotations

import json
from pathlib import Path

import pytest

from frisbee_fantasy.data import Position, RosterEntry, ValidationError
from frisbee_fantasy.io import load_lineup_json, load_roster_snapshot_json, parse_position_str
from frisbee_fantasy.lineup import LineupSlot


def test_parse_position_str_variants() -> None:
    assert parse_position_str("handler") == Position.HANDLER
    assert parse_position_str("CUTTER") == Position.CUTTER
    assert parse_position_str(" Receiver ") == Position.RECEIVER
    assert parse_position_str("HND") == Position.HANDLER
    assert parse_position_str("ctr") == Position.CUTTER
    assert parse_position_str("RCV") == Position.RECEIVER

    with pytest.raises(ValidationError):
        parse_position_str("GOALIE")


def test_load_roster_snapshot_json_happy_path(tmp_path: Path) -> None:
    p = tmp_path / "current.json"
    p.write_text(
        json.dumps(
            [
                {"player_id": "h1", "position": "handler"},
                {"player_id": "c1", "position": "CTR"},
                {"player_id": "7", "position": "receiver"},
            ]
        ),
        encoding="utf-8",
    )

    entries = load_roster_snapshot_json(p)

    assert entries == [
        RosterEntry("h1", Position.HANDLER),
        RosterEntry("c1", Position.CUTTER),
        RosterEntry("7", Position.RECEIVER),
    ]


def test_load_roster_snapshot_json_empty_list(tmp_path: Path) -> None:
    p = tmp_path / "empty.json"
    p.write_text("[]", encoding="utf-8")
    assert load_roster_snapshot_json(p) == []


def test_load_roster_snapshot_json_keeps_duplicates(tmp_path: Path) -> None:
    p = tmp_path / "dup.json"
    p.write_text(
        json.dumps([{"player_id": "h1", "position": "handler"}, {"player_id": "h1", "position": "cutter"}]),
        encoding="utf-8",
    )
    assert len(load_roster_snapshot_json(p)) == 2


def test_load_roster_snapshot_json_requires_list(tmp_path: Path) -> None:
    p = tmp_path / "bad.json"
    p.write_text(json.dumps({"player_id": "h1"}), encoding="utf-8")

    with pytest.raises(ValueError, match="must be a JSON list"):
        load_roster_snapshot_json(p)


def test_load_roster_snapshot_json_missing_key_names_key(tmp_path: Path) -> None:
    p = tmp_path / "bad.json"
    p.write_text(json.dumps([{"player_id": "h1"}]), encoding="utf-8")

    with pytest.raises(ValueError, match="position"):
        load_roster_snapshot_json(p)


def test_load_roster_snapshot_json_rejects_non_object_entries(tmp_path: Path) -> None:
    p = tmp_path / "bad.json"
    p.write_text(json.dumps(["h1"]), encoding="utf-8")

    with pytest.raises(ValueError, match="entries must be objects"):
        load_roster_snapshot_json(p)


@pytest.mark.parametrize("bad_id", [None, 7, ""])
def test_load_roster_snapshot_json_rejects_non_string_player_id(tmp_path: Path, bad_id) -> None:
    p = tmp_path / "bad.json"
    p.write_text(json.dumps([{"player_id": bad_id, "position": "handler"}]), encoding="utf-8")

    with pytest.raises(ValidationError, match="bad.json entry player_id"):
        load_roster_snapshot_json(p)


def test_load_lineup_json_reads_flags(tmp_path: Path) -> None:
    p = tmp_path / "lineup.json"
    p.write_text(
        json.dumps(
            [
                {"player_id": "h1", "position": "HND", "is_captain": True},
                {"player_id": "hb", "position": "handler", "is_benched": True},
                {"player_id": "c1", "position": "cutter"},
            ]
        ),
        encoding="utf-8",
    )

    assert load_lineup_json(p) == [
        LineupSlot("h1", Position.HANDLER, is_captain=True),
        LineupSlot("hb", Position.HANDLER, is_benched=True),
        LineupSlot("c1", Position.CUTTER),
    ]


def test_load_lineup_json_rejects_non_boolean_flags(tmp_path: Path) -> None:
    p = tmp_path / "lineup.json"
    p.write_text(json.dumps([{"player_id": "h1", "position": "handler", "is_captain": "yes"}]), encoding="utf-8")

    with pytest.raises(ValidationError, match="is_captain"):
        load_lineup_json(p)
