"""Roster economy for an ultimate-frisbee fantasy league.

Two independent, pure components make up the core:

- :mod:`frisbee_fantasy.pricing` turns a starting price and a weekly
  performance record into a price series.
- :mod:`frisbee_fantasy.transfers` diffs two roster snapshots into
  position-paired transfers and checks the weekly transfer limit.

Budget accounting, lineup validation, weekly scoring and transfer-window
state live in their own modules. File loading is in :mod:`frisbee_fantasy.io`
and the file-level entry points are in :mod:`frisbee_fantasy.main`.
"""

from .budget import BudgetResult, budget_after_transfers, initial_budget, player_value_for_week
from .data import (
    BudgetRules,
    ComputedTransfer,
    LineupRules,
    Position,
    PricingConfig,
    RosterEntry,
    TransferRules,
    ValidationError,
    WeeklyPerformance,
)
from .lineup import LineupSlot, validate_fantasy_team, validate_lineup
from .pricing import compute_price_series, generate_price_table
from .scoring import PlayerGameStats, WeekScore, apply_auto_substitution, calculate_week_score
from .transfers import compute_transfers, is_within_transfer_limit
from .windows import TransferWindowState, can_make_transfer, can_open_transfer_window, transfer_window_state

__all__ = [
    "BudgetResult",
    "BudgetRules",
    "ComputedTransfer",
    "LineupRules",
    "LineupSlot",
    "PlayerGameStats",
    "Position",
    "PricingConfig",
    "RosterEntry",
    "TransferRules",
    "TransferWindowState",
    "ValidationError",
    "WeekScore",
    "WeeklyPerformance",
    "apply_auto_substitution",
    "budget_after_transfers",
    "calculate_week_score",
    "can_make_transfer",
    "can_open_transfer_window",
    "compute_price_series",
    "compute_transfers",
    "generate_price_table",
    "initial_budget",
    "is_within_transfer_limit",
    "player_value_for_week",
    "transfer_window_state",
    "validate_fantasy_team",
    "validate_lineup",
]
