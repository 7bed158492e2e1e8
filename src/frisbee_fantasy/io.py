"""I/O utilities for building the roster-economy domain objects.

This module owns:
- file format knowledge (JSON, CSV)
- parsing and validation
- construction of domain objects from :mod:`frisbee_fantasy.data`

Input files
-----------
- starting prices CSV: ``player_id,starting_price``
- player stats CSV: ``player_id,week,points`` (one row per game)
- value changes CSV: ``player_id,round,value``
- roster snapshot JSON: ``[{"player_id": "...", "position": "handler"}, ...]``
- lineup JSON: snapshot records with optional ``is_benched`` / ``is_captain``
- game stats CSV: ``player_id,game_id,played,goals,assists,blocks,drops,throwaways``
- rule configs JSON: see the ``load_*_from_json`` helpers
"""

from __future__ import annotations

import csv
import json
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Tuple, cast

from frisbee_fantasy.data import (
    BudgetRules,
    LineupRules,
    Position,
    PricingConfig,
    RosterEntry,
    TransferRules,
    ValidationError,
)
from frisbee_fantasy.lineup import LineupSlot
from frisbee_fantasy.scoring import PlayerGameStats

# Short codes used on the pitch display.
_POSITION_ALIASES: Mapping[str, Position] = {
    "HND": Position.HANDLER,
    "CTR": Position.CUTTER,
    "RCV": Position.RECEIVER,
}


def parse_position_str(value: str) -> Position:
    """Parse position strings from CSV/JSON sources.

    Accepts:
    - the canonical names (handler, cutter, receiver), case-insensitive
    - the pitch short codes HND / CTR / RCV
    """

    v = value.strip()
    alias = _POSITION_ALIASES.get(v.upper())
    if alias is not None:
        return alias

    try:
        return Position(v.lower())
    except ValueError as e:
        raise ValidationError(f"Unknown position string: {value!r}") from e


def _parse_float(value: str, *, field_name: str, path: Path) -> float:
    v = value.strip().replace("$", "").replace(",", "")
    if v == "":
        raise ValueError(f"{field_name} missing in {path}")
    try:
        return float(v)
    except ValueError as e:
        raise ValueError(f"Invalid {field_name} {value!r} in {path}") from e


def _parse_int(value: str, *, field_name: str, path: Path) -> int:
    v = value.strip()
    try:
        return int(v)
    except ValueError as e:
        raise ValueError(f"Invalid {field_name} {value!r} in {path}") from e


def load_starting_prices_csv(path: str | Path) -> Dict[str, float]:
    path = Path(path)
    prices: Dict[str, float] = {}

    with path.open("r", encoding="utf-8", newline="") as f:
        reader = csv.DictReader(f)
        for raw_row in reader:
            row = cast(Dict[str, str], raw_row)
            player_id = (row.get("player_id") or "").strip()
            if not player_id:
                continue
            if player_id in prices:
                raise ValueError(f"Duplicate starting price for player {player_id!r} in {path}")

            prices[player_id] = _parse_float(row.get("starting_price") or "", field_name="starting_price", path=path)

    if not prices:
        raise ValueError(f"No starting prices loaded from {path}")

    return prices


def load_player_stats_csv(path: str | Path) -> List[Tuple[str, int, float]]:
    """Load per-game stat lines as ``(player_id, week, points)`` tuples.

    Blank points are read as 0 (the player appeared but did not score).
    """

    path = Path(path)
    stats: List[Tuple[str, int, float]] = []

    with path.open("r", encoding="utf-8", newline="") as f:
        reader = csv.DictReader(f)
        for raw_row in reader:
            row = cast(Dict[str, str], raw_row)
            player_id = (row.get("player_id") or "").strip()
            week_str = (row.get("week") or "").strip()
            if not player_id or not week_str:
                continue

            week = _parse_int(week_str, field_name="week", path=path)
            if week < 1:
                raise ValueError(f"Invalid week {week} for player {player_id!r} in {path}")

            points_str = (row.get("points") or "").strip()
            points = _parse_float(points_str, field_name="points", path=path) if points_str else 0.0
            stats.append((player_id, week, points))

    return stats


def load_value_changes_csv(path: str | Path) -> Dict[str, Dict[int, float]]:
    """Load saved price changes as player_id -> round -> value."""

    path = Path(path)
    changes: Dict[str, Dict[int, float]] = {}

    with path.open("r", encoding="utf-8", newline="") as f:
        reader = csv.DictReader(f)
        for raw_row in reader:
            row = cast(Dict[str, str], raw_row)
            player_id = (row.get("player_id") or "").strip()
            round_str = (row.get("round") or "").strip()
            if not player_id or not round_str:
                continue

            r = _parse_int(round_str, field_name="round", path=path)
            changes.setdefault(player_id, {})[r] = _parse_float(row.get("value") or "", field_name="value", path=path)

    return changes


def _read_json_records(path: Path) -> List[Dict[str, Any]]:
    raw = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(raw, list):
        raise ValueError(f"{path.name} must be a JSON list")
    for rec in raw:
        if not isinstance(rec, dict):
            raise ValueError(f"{path.name} entries must be objects, got {rec!r}")
    return raw


def _required_str(rec: Mapping[str, Any], key: str, *, path: Path) -> str:
    try:
        value = rec[key]
    except KeyError as e:
        raise ValueError(f"{path.name} entry missing key {key!r}: {rec!r}") from e
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"{path.name} entry {key} must be a non-empty string, got {value!r}")
    return value


def _optional_bool(rec: Mapping[str, Any], key: str, *, path: Path) -> bool:
    value = rec.get(key, False)
    if not isinstance(value, bool):
        raise ValidationError(f"{path.name} entry {key} must be true or false, got {value!r}")
    return value


def load_roster_snapshot_json(path: str | Path) -> List[RosterEntry]:
    """Load a roster snapshot.

    Player ids must be JSON strings; ``null`` or numeric ids are rejected
    rather than coerced. Duplicate ids are *not* rejected here; that is the
    transfer computer's job, so the error names which snapshot was malformed.
    """

    path = Path(path)
    return [
        RosterEntry(
            player_id=_required_str(rec, "player_id", path=path),
            position=parse_position_str(_required_str(rec, "position", path=path)),
        )
        for rec in _read_json_records(path)
    ]


def load_lineup_json(path: str | Path) -> List[LineupSlot]:
    """Load a lineup: snapshot records plus optional ``is_benched`` / ``is_captain`` flags."""

    path = Path(path)
    return [
        LineupSlot(
            player_id=_required_str(rec, "player_id", path=path),
            position=parse_position_str(_required_str(rec, "position", path=path)),
            is_benched=_optional_bool(rec, "is_benched", path=path),
            is_captain=_optional_bool(rec, "is_captain", path=path),
        )
        for rec in _read_json_records(path)
    ]


_TRUE_STRINGS = frozenset({"1", "true", "yes", "y"})
_FALSE_STRINGS = frozenset({"0", "false", "no", "n", ""})


def _parse_bool(value: str, *, field_name: str, path: Path) -> bool:
    v = value.strip().lower()
    if v in _TRUE_STRINGS:
        return True
    if v in _FALSE_STRINGS:
        return False
    raise ValueError(f"Invalid {field_name} {value!r} in {path}")


_STAT_COLUMNS = ("goals", "assists", "blocks", "drops", "throwaways")


def load_game_stats_csv(path: str | Path) -> Dict[Tuple[str, str], PlayerGameStats]:
    """Load per-game stat lines keyed by ``(player_id, game_id)``.

    Columns: ``player_id,game_id,played,goals,assists,blocks,drops,throwaways``.
    Blank counts are read as 0.
    """

    path = Path(path)
    stats: Dict[Tuple[str, str], PlayerGameStats] = {}

    with path.open("r", encoding="utf-8", newline="") as f:
        reader = csv.DictReader(f)
        for raw_row in reader:
            row = cast(Dict[str, str], raw_row)
            player_id = (row.get("player_id") or "").strip()
            game_id = (row.get("game_id") or "").strip()
            if not player_id or not game_id:
                continue
            if (player_id, game_id) in stats:
                raise ValueError(f"Duplicate stat line for player {player_id!r} in game {game_id!r} in {path}")

            counts = {
                col: _parse_int((row.get(col) or "").strip() or "0", field_name=col, path=path)
                for col in _STAT_COLUMNS
            }
            stats[(player_id, game_id)] = PlayerGameStats(
                player_id=player_id,
                game_id=game_id,
                played=_parse_bool(row.get("played") or "", field_name="played", path=path),
                **counts,
            )

    return stats


def _read_json_object(path: str | Path) -> Dict[str, Any]:
    path = Path(path)
    raw = json.loads(path.read_text(encoding="utf-8-sig"))
    if not isinstance(raw, dict):
        raise ValueError(f"{path.name} must contain a JSON object")
    return raw


def load_pricing_config_from_json(path: str | Path) -> PricingConfig:
    """Load :class:`~frisbee_fantasy.data.PricingConfig`; missing keys keep defaults."""

    raw = _read_json_object(path)
    defaults = PricingConfig()
    return PricingConfig(
        damping_factor=float(raw.get("damping_factor", defaults.damping_factor)),
        points_multiplier=float(raw.get("points_multiplier", defaults.points_multiplier)),
        average_window=int(raw.get("average_window", defaults.average_window)),
        rounding_places=int(raw.get("rounding_places", defaults.rounding_places)),
    )


def load_transfer_rules_from_json(path: str | Path) -> TransferRules:
    raw = _read_json_object(path)
    defaults = TransferRules()
    return TransferRules(
        max_transfers_per_week=int(raw.get("max_transfers_per_week", defaults.max_transfers_per_week)),
        require_balanced_positions=bool(raw.get("require_balanced_positions", defaults.require_balanced_positions)),
    )


def load_lineup_rules_from_json(path: str | Path) -> LineupRules:
    """Load :class:`~frisbee_fantasy.data.LineupRules` from JSON.

    Expected format::

        {"salary_cap": 450,
         "starting": {"handler": 3, "cutter": 2, "receiver": 2},
         "bench": {"handler": 1, "cutter": 1, "receiver": 1}}

    Omitted sections keep their defaults, but a supplied section must list
    every position.
    """

    raw = _read_json_object(path)
    defaults = LineupRules()

    def _parse_counts(obj: Optional[Mapping[str, Any]], field_name: str) -> Dict[Position, int]:
        if obj is None:
            return dict(getattr(defaults, field_name))
        counts: Dict[Position, int] = {}
        for key, n in obj.items():
            counts[parse_position_str(key)] = int(n)
        missing = set(Position) - set(counts)
        if missing:
            raise ValueError(f"{field_name} missing positions: {sorted(p.value for p in missing)}")
        return counts

    return LineupRules(
        starting=_parse_counts(raw.get("starting"), "starting"),
        bench=_parse_counts(raw.get("bench"), "bench"),
        salary_cap=float(raw.get("salary_cap", defaults.salary_cap)),
    )


def load_budget_rules_from_json(path: str | Path) -> BudgetRules:
    raw = _read_json_object(path)
    return BudgetRules(salary_cap=float(raw.get("salary_cap", BudgetRules().salary_cap)))
