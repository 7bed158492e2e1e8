"""Command-line entry point for :mod:`frisbee_fantasy`.

Examples
--------
Recalculate the season's price table and write it as JSON::

    frisbee-fantasy prices --data-dir ./data --out-json ./output/prices.json

Diff a saved roster against last week's snapshot::

    frisbee-fantasy transfers --current current.json --baseline previous.json

Add budget accounting for week 3, carrying forward last week's budget::

    frisbee-fantasy transfers --current current.json --baseline previous.json \\
        --value-changes-csv value_changes.csv --week 3 --previous-budget 12.5

Validate a lineup and score it over a week's games::

    frisbee-fantasy lineup --lineup lineup.json --starting-prices-csv starting_prices.csv
    frisbee-fantasy score --lineup lineup.json --game-stats-csv game_stats.csv
"""

from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path
from typing import Sequence

from .data import BudgetRules, LineupRules, PricingConfig, TransferRules
from .export import build_price_table_records, transfers_to_records, week_score_to_record
from .io import (
    load_budget_rules_from_json,
    load_lineup_rules_from_json,
    load_pricing_config_from_json,
    load_transfer_rules_from_json,
)
from .main import (
    LineupCheckResult,
    PriceRecalculationResult,
    TransferCheckResult,
    check_lineup,
    compute_roster_transfers,
    recalculate_prices,
    score_week,
)
from .scoring import WeekScore


def _print_price_summary(result: PriceRecalculationResult, *, sample_players: int) -> None:
    weeks = result.week_numbers
    print("Price recalculation complete")
    print(f"- Players: {len(result.table)}")
    if weeks:
        print(f"- Weeks: {weeks[0]}..{weeks[-1]} (count={len(weeks)})")
    else:
        print("- Weeks: <none>")
    print(f"- Price changes: {len(result.changes)}")

    sample_n = max(0, int(sample_players))
    sample = sorted(result.table)[:sample_n]
    if not sample:
        return

    print(f"\nSample of {len(sample)} players:")
    for player_id in sample:
        series = result.table[player_id]
        shown = ", ".join(f"{p:.2f}" for p in series[:6])
        more = ", ..." if len(series) > 6 else ""
        print(f"- {player_id}: start={series[0]:.2f} final={series[-1]:.2f} series=[{shown}{more}]")


def _print_transfer_summary(result: TransferCheckResult) -> None:
    print(f"Transfers: {result.transfer_count}")
    for t in result.transfers:
        player_in = t.player_in_id or "<none>"
        player_out = t.player_out_id or "<none>"
        print(f"- {t.position.value}: in={player_in} out={player_out}")

    if result.is_first_week:
        print("First week: unlimited transfers")
    else:
        status = "OK" if result.within_limit else "OVER LIMIT"
        print(f"Limit: {result.transfer_count}/{result.max_transfers} ({status})")

    if result.budget is not None:
        print(f"Budget: ${result.budget.budget:.2f}")
        for d in result.budget.transfer_deltas:
            print(f"- {d.player_out_id or '<none>'} -> {d.player_in_id or '<none>'}: {d.delta:+.2f}")
        if result.budget.error:
            print(result.budget.error)


def _print_lineup_summary(result: LineupCheckResult, *, rules: LineupRules) -> None:
    total = sum(result.values.get(p.player_id, 0.0) for p in result.lineup)
    print(f"Lineup: {len(result.lineup)} players, salary ${total:.2f} / ${rules.salary_cap:g}")
    if result.validation.valid:
        print("Valid")
        return
    for error in result.validation.errors:
        print(f"- {error}")


def _print_score_summary(score: WeekScore) -> None:
    print(f"Points: {score.total_points}")
    print(f"Captain points: {score.captain_points}")
    print(f"Team points: {score.team_points}")
    for s in score.substitutions:
        print(f"- game {s.game_id}: {s.player_out_id} -> {s.player_in_id} ({s.reason})")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="frisbee-fantasy")
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: WARNING)",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    prices = sub.add_parser("prices", help="Recalculate player prices from weekly stats")
    prices.add_argument(
        "--data-dir",
        type=Path,
        default=Path("data"),
        help="Directory containing starting_prices.csv and player_stats.csv (default: ./data)",
    )
    prices.add_argument(
        "--starting-prices-csv",
        type=Path,
        default=None,
        help="Override path to starting_prices.csv (default: <data-dir>/starting_prices.csv)",
    )
    prices.add_argument(
        "--player-stats-csv",
        type=Path,
        default=None,
        help="Override path to player_stats.csv (default: <data-dir>/player_stats.csv)",
    )
    prices.add_argument(
        "--pricing-config",
        type=Path,
        default=None,
        help="JSON file overriding pricing formula constants (optional)",
    )
    prices.add_argument(
        "--max-week",
        type=int,
        default=None,
        help="Last week to price (default: latest week in the stats)",
    )
    prices.add_argument(
        "--sample-players",
        type=int,
        default=10,
        help="Number of sample players to print (default: 10)",
    )
    prices.add_argument(
        "--out-json",
        type=Path,
        default=None,
        help="Write the price table as JSON to this path (optional)",
    )

    transfers = sub.add_parser("transfers", help="Compute transfers between two roster snapshots")
    transfers.add_argument("--current", type=Path, required=True, help="Current roster snapshot JSON")
    transfers.add_argument(
        "--baseline",
        type=Path,
        default=None,
        help="Baseline roster snapshot JSON (omit for an empty baseline)",
    )
    transfers.add_argument(
        "--first-week",
        action="store_true",
        help="Treat this as first-week squad selection (unlimited transfers)",
    )
    transfers.add_argument(
        "--rules",
        type=Path,
        default=None,
        help="JSON file overriding transfer rules (optional)",
    )
    transfers.add_argument(
        "--max-transfers",
        type=int,
        default=None,
        help="Override the weekly transfer limit",
    )
    transfers.add_argument(
        "--json",
        action="store_true",
        help="Print transfers as JSON instead of a summary",
    )

    transfers.add_argument(
        "--starting-prices-csv",
        type=Path,
        default=None,
        help="Starting prices CSV; enables budget accounting (optional)",
    )
    transfers.add_argument(
        "--value-changes-csv",
        type=Path,
        default=None,
        help="Saved value changes CSV; enables budget accounting (optional)",
    )
    transfers.add_argument("--week", type=int, default=None, help="Week number to value players at")
    transfers.add_argument(
        "--previous-budget",
        type=float,
        default=None,
        help="Budget carried forward from last week (required after the first week)",
    )
    transfers.add_argument(
        "--budget-rules",
        type=Path,
        default=None,
        help="JSON file overriding budget rules (optional)",
    )

    lineup = sub.add_parser("lineup", help="Validate a lineup's structure, captain and salary cap")
    lineup.add_argument("--lineup", type=Path, required=True, help="Lineup JSON")
    lineup.add_argument("--starting-prices-csv", type=Path, default=None, help="Starting prices CSV (optional)")
    lineup.add_argument("--value-changes-csv", type=Path, default=None, help="Saved value changes CSV (optional)")
    lineup.add_argument("--week", type=int, default=1, help="Week number to value players at (default: 1)")
    lineup.add_argument("--rules", type=Path, default=None, help="JSON file overriding lineup rules (optional)")
    lineup.add_argument("--partial", action="store_true", help="Validate an in-progress lineup (maximums only)")

    score = sub.add_parser("score", help="Score a lineup over a week's games")
    score.add_argument("--lineup", type=Path, required=True, help="Lineup JSON")
    score.add_argument(
        "--game-stats-csv",
        type=Path,
        required=True,
        help="Per-game stats CSV (player_id,game_id,played,goals,assists,blocks,drops,throwaways)",
    )
    score.add_argument(
        "--game",
        action="append",
        default=[],
        help="Game id to include; repeatable (default: every game in the stats)",
    )
    score.add_argument("--json", action="store_true", help="Print the score as JSON")

    return parser


def _run_prices(args: argparse.Namespace, log_level: int) -> int:
    data_dir: Path = args.data_dir
    starting_prices_csv: Path = args.starting_prices_csv or (data_dir / "starting_prices.csv")
    player_stats_csv: Path = args.player_stats_csv or (data_dir / "player_stats.csv")

    config = load_pricing_config_from_json(args.pricing_config) if args.pricing_config else PricingConfig()
    week_numbers = range(1, args.max_week + 1) if args.max_week is not None else None

    result = recalculate_prices(
        starting_prices_csv=starting_prices_csv,
        player_stats_csv=player_stats_csv,
        week_numbers=week_numbers,
        config=config,
        log_level=log_level,
    )

    _print_price_summary(result, sample_players=args.sample_players)

    out_json: Path | None = args.out_json
    if out_json is not None:
        records = build_price_table_records(result.table)
        out_json.parent.mkdir(parents=True, exist_ok=True)
        out_json.write_text(json.dumps(records, indent=2), encoding="utf-8")
        print(f"\nWrote {len(records)} players to {out_json}")

    return 0


def _run_transfers(args: argparse.Namespace, log_level: int) -> int:
    rules = load_transfer_rules_from_json(args.rules) if args.rules else TransferRules()
    if args.max_transfers is not None:
        rules = TransferRules(
            max_transfers_per_week=args.max_transfers,
            require_balanced_positions=rules.require_balanced_positions,
        )
    budget_rules = load_budget_rules_from_json(args.budget_rules) if args.budget_rules else BudgetRules()

    result = compute_roster_transfers(
        current_snapshot_json=args.current,
        baseline_snapshot_json=args.baseline,
        is_first_week=args.first_week,
        rules=rules,
        week_number=args.week,
        starting_prices_csv=args.starting_prices_csv,
        value_changes_csv=args.value_changes_csv,
        previous_budget=args.previous_budget,
        budget_rules=budget_rules,
        log_level=log_level,
    )

    if args.json:
        print(json.dumps(transfers_to_records(result.transfers), indent=2))
    else:
        _print_transfer_summary(result)

    budget_ok = result.budget is None or result.budget.is_valid
    return 0 if result.within_limit and budget_ok else 1


def _run_lineup(args: argparse.Namespace, log_level: int) -> int:
    rules = load_lineup_rules_from_json(args.rules) if args.rules else LineupRules()

    result = check_lineup(
        lineup_json=args.lineup,
        week_number=args.week,
        starting_prices_csv=args.starting_prices_csv,
        value_changes_csv=args.value_changes_csv,
        rules=rules,
        allow_partial=args.partial,
        log_level=log_level,
    )

    _print_lineup_summary(result, rules=rules)
    return 0 if result.validation.valid else 1


def _run_score(args: argparse.Namespace, log_level: int) -> int:
    score = score_week(
        lineup_json=args.lineup,
        game_stats_csv=args.game_stats_csv,
        game_ids=args.game or None,
        log_level=log_level,
    )

    if args.json:
        print(json.dumps(week_score_to_record(score), indent=2))
    else:
        _print_score_summary(score)
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)
    log_level = getattr(logging, args.log_level)

    if args.command == "prices":
        return _run_prices(args, log_level)
    if args.command == "lineup":
        return _run_lineup(args, log_level)
    if args.command == "score":
        return _run_score(args, log_level)
    return _run_transfers(args, log_level)


if __name__ == "__main__":
    raise SystemExit(main())
