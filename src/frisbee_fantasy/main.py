from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional, Sequence

from frisbee_fantasy.budget import BudgetResult, budget_after_transfers, initial_budget, player_values_for_week
from frisbee_fantasy.data import (
    BudgetRules,
    ComputedTransfer,
    LineupRules,
    PriceChange,
    PriceTable,
    PricingConfig,
    TransferRules,
)
from frisbee_fantasy.io import (
    load_game_stats_csv,
    load_lineup_json,
    load_player_stats_csv,
    load_roster_snapshot_json,
    load_starting_prices_csv,
    load_value_changes_csv,
)
from frisbee_fantasy.lineup import LineupSlot, LineupValidationResult, validate_fantasy_team
from frisbee_fantasy.pricing import generate_price_table, price_changes_from_table, weekly_performances_from_stats
from frisbee_fantasy.scoring import WeekScore, calculate_week_score
from frisbee_fantasy.transfers import (
    compute_transfers,
    count_transfers,
    is_within_transfer_limit,
    transfers_remaining,
)


def configure_logging(*, level: int = logging.INFO) -> None:
    """Configure a simple root logger that writes to stderr.

    This is safe to call multiple times.
    """

    root = logging.getLogger()
    if not root.handlers:
        logging.basicConfig(
            level=level,
            format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
        )
    else:
        root.setLevel(level)


logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class PriceRecalculationResult:
    week_numbers: tuple[int, ...]
    table: PriceTable
    changes: List[PriceChange]


@dataclass(frozen=True, slots=True)
class TransferCheckResult:
    transfers: List[ComputedTransfer]
    transfer_count: int
    is_first_week: bool
    max_transfers: int
    within_limit: bool
    remaining: Optional[int]
    budget: Optional[BudgetResult] = None


@dataclass(frozen=True, slots=True)
class LineupCheckResult:
    lineup: List[LineupSlot]
    values: Dict[str, float]
    validation: LineupValidationResult


def _load_player_values(
    player_ids: Sequence[str],
    *,
    week_number: int,
    starting_prices_csv: str | Path | None,
    value_changes_csv: str | Path | None,
) -> Dict[str, float]:
    starting = load_starting_prices_csv(starting_prices_csv) if starting_prices_csv is not None else {}
    changes = load_value_changes_csv(value_changes_csv) if value_changes_csv is not None else {}
    logger.info(
        "Valuing %d players at week %d (%d starting prices, %d players with value changes)",
        len(player_ids),
        week_number,
        len(starting),
        len(changes),
    )
    return player_values_for_week(player_ids, week_number, changes, starting)


def recalculate_prices(
    *,
    starting_prices_csv: str | Path,
    player_stats_csv: str | Path,
    week_numbers: Sequence[int] | None = None,
    config: PricingConfig = PricingConfig(),
    log_level: int | None = logging.INFO,
) -> PriceRecalculationResult:
    """Top-level entrypoint for the "recalculate prices" admin action.

    Loads starting prices and per-game stats, prices every player across the
    season and returns both the full table and the per-week change rows that
    the caller persists.

    If ``week_numbers`` is not supplied, the season is taken to be weeks
    1..N where N is the latest week seen in the stats.
    """

    if log_level is not None:
        configure_logging(level=log_level)

    logger.info("Loading starting prices: %s", starting_prices_csv)
    starting_prices = load_starting_prices_csv(starting_prices_csv)
    logger.info("Loaded %d starting prices", len(starting_prices))

    logger.info("Loading player stats: %s", player_stats_csv)
    stats = load_player_stats_csv(player_stats_csv)
    logger.info("Loaded %d stat lines", len(stats))

    if week_numbers is None:
        last_week = max((week for _, week, _ in stats), default=0)
        week_numbers = range(1, last_week + 1)
    weeks = tuple(sorted(set(week_numbers)))

    if weeks:
        logger.info("Pricing %d weeks (min=%d, max=%d)", len(weeks), weeks[0], weeks[-1])
    else:
        logger.info("No weeks to price; every series is the starting price only")

    performances = weekly_performances_from_stats(stats, weeks)
    table = generate_price_table(
        starting_prices=starting_prices,
        performances=performances,
        n_weeks=len(weeks),
        config=config,
    )

    changes = price_changes_from_table(table, weeks)
    logger.info("Computed %d players, %d price changes", len(table), len(changes))

    return PriceRecalculationResult(week_numbers=weeks, table=table, changes=changes)


def compute_roster_transfers(
    *,
    current_snapshot_json: str | Path,
    baseline_snapshot_json: str | Path | None,
    is_first_week: bool,
    rules: TransferRules = TransferRules(),
    week_number: int | None = None,
    starting_prices_csv: str | Path | None = None,
    value_changes_csv: str | Path | None = None,
    previous_budget: float | None = None,
    budget_rules: BudgetRules = BudgetRules(),
    log_level: int | None = logging.INFO,
) -> TransferCheckResult:
    """Diff two saved snapshots and check the result against the weekly limit.

    A missing baseline (``None``) is treated as an empty roster.

    When a price source (``starting_prices_csv`` and/or ``value_changes_csv``)
    is given, the budget is computed too, valuing players at ``week_number``:

    - first week: the cap minus the current squad's value
    - later weeks: ``previous_budget`` moved by each transfer's sell - buy

    Raises
    ------
    ValueError
        If budget accounting is requested without ``week_number``, or after
        the first week without ``previous_budget``.
    """

    if log_level is not None:
        configure_logging(level=log_level)

    current = load_roster_snapshot_json(current_snapshot_json)
    baseline = load_roster_snapshot_json(baseline_snapshot_json) if baseline_snapshot_json is not None else []
    logger.info("Comparing snapshots: current=%d players, baseline=%d players", len(current), len(baseline))

    transfers = compute_transfers(current, baseline, rules=rules)
    n = count_transfers(transfers)
    within = is_within_transfer_limit(n, is_first_week, rules.max_transfers_per_week)

    logger.info(
        "Transfers: count=%d first_week=%s max=%d within_limit=%s",
        n,
        is_first_week,
        rules.max_transfers_per_week,
        within,
    )

    budget: Optional[BudgetResult] = None
    if starting_prices_csv is not None or value_changes_csv is not None:
        if week_number is None:
            raise ValueError("week_number is required for budget accounting")

        player_ids = sorted({e.player_id for e in current} | {e.player_id for e in baseline})
        values = _load_player_values(
            player_ids,
            week_number=week_number,
            starting_prices_csv=starting_prices_csv,
            value_changes_csv=value_changes_csv,
        )
        if is_first_week:
            budget = initial_budget({e.player_id: values[e.player_id] for e in current}, rules=budget_rules)
        elif previous_budget is None:
            raise ValueError("previous_budget is required for budget accounting after the first week")
        else:
            budget = budget_after_transfers(previous_budget, transfers, values)
        logger.info("Budget: %.2f (valid=%s)", budget.budget, budget.is_valid)

    return TransferCheckResult(
        transfers=transfers,
        transfer_count=n,
        is_first_week=is_first_week,
        max_transfers=rules.max_transfers_per_week,
        within_limit=within,
        remaining=transfers_remaining(n, is_first_week, rules.max_transfers_per_week),
        budget=budget,
    )


def check_lineup(
    *,
    lineup_json: str | Path,
    week_number: int = 1,
    starting_prices_csv: str | Path | None = None,
    value_changes_csv: str | Path | None = None,
    rules: LineupRules = LineupRules(),
    allow_partial: bool = False,
    log_level: int | None = logging.INFO,
) -> LineupCheckResult:
    """Validate a saved lineup's structure, captaincy and salary cap.

    Without a price source every player is valued at 0, so only the
    structural checks can fail.
    """

    if log_level is not None:
        configure_logging(level=log_level)

    lineup = load_lineup_json(lineup_json)
    logger.info("Loaded lineup of %d players from %s", len(lineup), lineup_json)

    values: Dict[str, float] = {}
    if starting_prices_csv is not None or value_changes_csv is not None:
        values = _load_player_values(
            [p.player_id for p in lineup],
            week_number=week_number,
            starting_prices_csv=starting_prices_csv,
            value_changes_csv=value_changes_csv,
        )

    validation = validate_fantasy_team(lineup, values, rules=rules, allow_partial=allow_partial)
    logger.info("Lineup valid=%s errors=%d", validation.valid, len(validation.errors))

    return LineupCheckResult(lineup=lineup, values=values, validation=validation)


def score_week(
    *,
    lineup_json: str | Path,
    game_stats_csv: str | Path,
    game_ids: Sequence[str] | None = None,
    log_level: int | None = logging.INFO,
) -> WeekScore:
    """Score a saved lineup over a week's games.

    If ``game_ids`` is not supplied, every game in the stats file counts.
    """

    if log_level is not None:
        configure_logging(level=log_level)

    lineup = load_lineup_json(lineup_json)
    stats = load_game_stats_csv(game_stats_csv)
    if game_ids is None:
        game_ids = sorted({game_id for _, game_id in stats})
    logger.info("Scoring %d players over %d games", len(lineup), len(game_ids))

    score = calculate_week_score(lineup, game_ids, stats)
    logger.info(
        "Score: total=%d captain=%d substitutions=%d",
        score.total_points,
        score.captain_points,
        len(score.substitutions),
    )
    return score
