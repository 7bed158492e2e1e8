from __future__ import annotations

import json
from pathlib import Path

import pytest

from frisbee_fantasy.data import ComputedTransfer, Position, TransferRules, ValidationError
from frisbee_fantasy.main import check_lineup, compute_roster_transfers, recalculate_prices, score_week


def _season_files(tmp_path: Path, write_csv) -> tuple[Path, Path]:
    prices = write_csv(
        tmp_path / "starting_prices.csv",
        header=["player_id", "starting_price"],
        rows=[["a", "50"], ["b", "40"], ["c", "30"]],
    )
    stats = write_csv(
        tmp_path / "player_stats.csv",
        header=["player_id", "week", "points"],
        # a plays both weeks (two games in week 2), b only week 2, c never.
        rows=[["a", "1", "10"], ["a", "2", "3"], ["a", "2", "5"], ["b", "2", "6"]],
    )
    return prices, stats


def test_recalculate_prices_end_to_end(tmp_path: Path, write_csv) -> None:
    prices, stats = _season_files(tmp_path, write_csv)

    result = recalculate_prices(starting_prices_csv=prices, player_stats_csv=stats, log_level=None)

    assert result.week_numbers == (1, 2)
    assert result.table == {
        "a": [50.0, 62.5, 69.38],
        "b": [40.0, 40.0, 45.0],
        "c": [30.0, 30.0, 30.0],
    }
    assert result.changes[:2] == [("a", 1, 62.5), ("a", 2, 69.38)]
    assert len(result.changes) == 6


def test_recalculate_prices_with_explicit_weeks(tmp_path: Path, write_csv) -> None:
    prices, stats = _season_files(tmp_path, write_csv)

    result = recalculate_prices(
        starting_prices_csv=prices,
        player_stats_csv=stats,
        week_numbers=[1, 2, 3],
        log_level=None,
    )

    assert result.week_numbers == (1, 2, 3)
    # Nobody played week 3, so prices are frozen.
    assert result.table["a"] == [50.0, 62.5, 69.38, 69.38]
    assert ("b", 3, 45.0) in result.changes


def test_recalculate_prices_ignores_stats_for_unknown_players(tmp_path: Path, write_csv) -> None:
    prices = write_csv(tmp_path / "sp.csv", header=["player_id", "starting_price"], rows=[["a", "50"]])
    stats = write_csv(tmp_path / "st.csv", header=["player_id", "week", "points"], rows=[["z", "1", "4"]])

    result = recalculate_prices(starting_prices_csv=prices, player_stats_csv=stats, log_level=None)

    assert result.table == {"a": [50.0, 50.0]}
    assert result.changes == [("a", 1, 50.0)]


def _snapshot(path: Path, entries: list[tuple[str, str]]) -> Path:
    path.write_text(json.dumps([{"player_id": pid, "position": pos} for pid, pos in entries]), encoding="utf-8")
    return path


def test_compute_roster_transfers_within_limit(tmp_path: Path) -> None:
    current = _snapshot(tmp_path / "current.json", [("h2", "handler"), ("c1", "cutter")])
    baseline = _snapshot(tmp_path / "baseline.json", [("h1", "handler"), ("c1", "cutter")])

    result = compute_roster_transfers(
        current_snapshot_json=current,
        baseline_snapshot_json=baseline,
        is_first_week=False,
        log_level=None,
    )

    assert result.transfers == [ComputedTransfer("h2", "h1", Position.HANDLER)]
    assert result.transfer_count == 1
    assert result.within_limit
    assert result.remaining == 1


def test_compute_roster_transfers_over_limit(tmp_path: Path) -> None:
    current = _snapshot(tmp_path / "current.json", [("h2", "handler"), ("c2", "cutter"), ("r2", "receiver")])
    baseline = _snapshot(tmp_path / "baseline.json", [("h1", "handler"), ("c1", "cutter"), ("r1", "receiver")])

    result = compute_roster_transfers(
        current_snapshot_json=current,
        baseline_snapshot_json=baseline,
        is_first_week=False,
        log_level=None,
    )

    assert result.transfer_count == 3
    assert not result.within_limit
    assert result.remaining == 0

    relaxed = compute_roster_transfers(
        current_snapshot_json=current,
        baseline_snapshot_json=baseline,
        is_first_week=False,
        rules=TransferRules(max_transfers_per_week=3),
        log_level=None,
    )
    assert relaxed.within_limit


def test_compute_roster_transfers_first_week_without_baseline(tmp_path: Path) -> None:
    current = _snapshot(tmp_path / "current.json", [("h1", "HND"), ("c1", "CTR"), ("r1", "RCV")])

    result = compute_roster_transfers(
        current_snapshot_json=current,
        baseline_snapshot_json=None,
        is_first_week=True,
        log_level=None,
    )

    assert result.transfer_count == 3
    assert result.within_limit
    assert result.remaining is None


def test_compute_roster_transfers_rejects_duplicate_ids(tmp_path: Path) -> None:
    current = _snapshot(tmp_path / "current.json", [("h1", "handler"), ("h1", "cutter")])

    with pytest.raises(ValidationError, match="current snapshot"):
        compute_roster_transfers(
            current_snapshot_json=current,
            baseline_snapshot_json=None,
            is_first_week=True,
            log_level=None,
        )


def test_compute_roster_transfers_first_week_budget(tmp_path: Path, write_csv) -> None:
    current = _snapshot(tmp_path / "current.json", [("h1", "handler"), ("c1", "cutter")])
    prices = write_csv(tmp_path / "sp.csv", header=["player_id", "starting_price"], rows=[["h1", "300"], ["c1", "240"]])

    result = compute_roster_transfers(
        current_snapshot_json=current,
        baseline_snapshot_json=None,
        is_first_week=True,
        week_number=1,
        starting_prices_csv=prices,
        log_level=None,
    )

    assert result.budget is not None
    assert result.budget.team_value == 540
    assert result.budget.budget == 10


def test_compute_roster_transfers_carries_budget_through_transfers(tmp_path: Path, write_csv) -> None:
    current = _snapshot(tmp_path / "current.json", [("h2", "handler"), ("c1", "cutter")])
    baseline = _snapshot(tmp_path / "baseline.json", [("h1", "handler"), ("c1", "cutter")])
    prices = write_csv(tmp_path / "sp.csv", header=["player_id", "starting_price"], rows=[["h1", "50"], ["h2", "40"]])
    changes = write_csv(
        tmp_path / "vc.csv",
        header=["player_id", "round", "value"],
        rows=[["h1", "2", "60"], ["h2", "2", "65"], ["h2", "4", "99"]],
    )

    result = compute_roster_transfers(
        current_snapshot_json=current,
        baseline_snapshot_json=baseline,
        is_first_week=False,
        week_number=3,
        starting_prices_csv=prices,
        value_changes_csv=changes,
        previous_budget=2.0,
        log_level=None,
    )

    assert result.budget is not None
    assert result.budget.budget == pytest.approx(2.0 + 60 - 65)
    assert not result.budget.is_valid
    assert result.budget.error == "Budget exceeded by $3"


def test_compute_roster_transfers_budget_requires_week_and_previous_budget(tmp_path: Path, write_csv) -> None:
    current = _snapshot(tmp_path / "current.json", [("h1", "handler")])
    prices = write_csv(tmp_path / "sp.csv", header=["player_id", "starting_price"], rows=[["h1", "50"]])

    with pytest.raises(ValueError, match="week_number"):
        compute_roster_transfers(
            current_snapshot_json=current,
            baseline_snapshot_json=None,
            is_first_week=True,
            starting_prices_csv=prices,
            log_level=None,
        )

    with pytest.raises(ValueError, match="previous_budget"):
        compute_roster_transfers(
            current_snapshot_json=current,
            baseline_snapshot_json=None,
            is_first_week=False,
            week_number=2,
            starting_prices_csv=prices,
            log_level=None,
        )


def test_compute_roster_transfers_without_price_source_has_no_budget(tmp_path: Path) -> None:
    current = _snapshot(tmp_path / "current.json", [("h1", "handler")])

    result = compute_roster_transfers(
        current_snapshot_json=current,
        baseline_snapshot_json=None,
        is_first_week=True,
        log_level=None,
    )

    assert result.budget is None


def _lineup_file(path: Path, *, captain: str = "h1") -> Path:
    records = [
        {"player_id": pid, "position": pos, "is_benched": benched, "is_captain": pid == captain}
        for pid, pos, benched in [
            ("h1", "handler", False),
            ("h2", "handler", False),
            ("h3", "handler", False),
            ("c1", "cutter", False),
            ("c2", "cutter", False),
            ("r1", "receiver", False),
            ("r2", "receiver", False),
            ("hb", "handler", True),
            ("cb", "cutter", True),
            ("rb", "receiver", True),
        ]
    ]
    path.write_text(json.dumps(records), encoding="utf-8")
    return path


def test_check_lineup_valid_without_prices(tmp_path: Path) -> None:
    result = check_lineup(lineup_json=_lineup_file(tmp_path / "lineup.json"), log_level=None)

    assert result.validation.valid
    assert result.values == {}
    assert len(result.lineup) == 10


def test_check_lineup_reports_salary_cap(tmp_path: Path, write_csv) -> None:
    lineup = _lineup_file(tmp_path / "lineup.json", captain="")
    ids = ["h1", "h2", "h3", "c1", "c2", "r1", "r2", "hb", "cb", "rb"]
    prices = write_csv(tmp_path / "sp.csv", header=["player_id", "starting_price"], rows=[[pid, "50"] for pid in ids])

    result = check_lineup(lineup_json=lineup, starting_prices_csv=prices, log_level=None)

    assert result.validation.errors == [
        "Must have exactly one captain",
        "Team salary exceeds cap: $500.00 / $450",
    ]


def test_score_week_from_files(tmp_path: Path, write_csv) -> None:
    lineup = _lineup_file(tmp_path / "lineup.json")
    header = ["player_id", "game_id", "played", "goals", "assists", "blocks", "drops", "throwaways"]
    stats = write_csv(
        tmp_path / "game_stats.csv",
        header=header,
        rows=[
            ["h1", "g1", "1", "1", "0", "0", "0", "0"],
            ["c1", "g1", "0", "0", "0", "0", "0", "0"],
            ["c2", "g1", "1", "0", "0", "0", "0", "0"],
            ["cb", "g1", "1", "0", "1", "0", "0", "0"],
            ["h1", "g2", "1", "2", "0", "0", "0", "0"],
        ],
    )

    score = score_week(lineup_json=lineup, game_stats_csv=stats, log_level=None)

    assert score.captain_points == 2 * (1 + 2)
    assert score.total_points == 2
    assert [(s.player_out_id, s.player_in_id, s.game_id) for s in score.substitutions] == [("c1", "cb", "g1")]

    only_g2 = score_week(lineup_json=lineup, game_stats_csv=stats, game_ids=["g2"], log_level=None)
    assert only_g2.captain_points == 4
    assert only_g2.total_points == 0
