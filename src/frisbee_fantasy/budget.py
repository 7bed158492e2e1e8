"""Budget accounting for fantasy teams.

Budget rules
------------
- Week 1: budget = salary cap - sum of player values at current prices.
- Week 2+: budget carries forward and changes only via transfers. Players are
  sold and bought at their *current* market value, so each transfer moves the
  budget by ``sell_value - buy_value``.
- Player value appreciation does not affect budget; only transfers do.

Values come from saved price changes (see
:func:`frisbee_fantasy.pricing.price_changes_from_table`) with the starting
value as a fallback.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Mapping, Optional, Sequence

from .data import BudgetRules, ComputedTransfer

ValueChanges = Mapping[str, Mapping[int, float]]  # player_id -> week/round -> value


@dataclass(frozen=True, slots=True)
class TransferDelta:
    player_in_id: str
    player_out_id: str
    player_in_value: float
    player_out_value: float

    @property
    def delta(self) -> float:
        """Budget change for this transfer; positive means money back."""

        return self.player_out_value - self.player_in_value


@dataclass(frozen=True, slots=True)
class BudgetResult:
    budget: float
    team_value: float
    transfer_deltas: List[TransferDelta] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return self.budget >= 0

    @property
    def error(self) -> Optional[str]:
        if self.is_valid:
            return None
        return f"Budget exceeded by ${abs(self.budget):.0f}"


def player_value_for_week(
    player_id: str,
    week_number: int,
    value_changes: ValueChanges,
    starting_values: Mapping[str, float],
) -> float:
    """A player's market value for a week.

    Uses the most recent value change at or before ``week_number``. Falls back
    to the starting value, then to 0 for a player we know nothing about.
    """

    changes = value_changes.get(player_id, {})
    eligible_rounds = [r for r in changes if r <= week_number]
    if eligible_rounds:
        return float(changes[max(eligible_rounds)])

    return float(starting_values.get(player_id, 0.0))


def player_values_for_week(
    player_ids: Iterable[str],
    week_number: int,
    value_changes: ValueChanges,
    starting_values: Mapping[str, float],
) -> Dict[str, float]:
    return {
        pid: player_value_for_week(pid, week_number, value_changes, starting_values)
        for pid in player_ids
    }


def team_value(values: Iterable[float]) -> float:
    return float(sum(values))


def initial_budget(
    player_values: Mapping[str, float],
    *,
    rules: BudgetRules = BudgetRules(),
) -> BudgetResult:
    """Week-1 budget: what's left of the cap after buying the squad."""

    value = team_value(player_values.values())
    return BudgetResult(budget=rules.salary_cap - value, team_value=value)


def budget_after_transfers(
    previous_budget: float,
    transfers: Sequence[ComputedTransfer],
    player_values: Mapping[str, float],
) -> BudgetResult:
    """Carry a budget forward through a week's transfers.

    Empty (unmatched) or unknown player ids are valued at 0. ``team_value`` is
    not computed here and is reported as 0.
    """

    deltas: List[TransferDelta] = []
    for t in transfers:
        deltas.append(
            TransferDelta(
                player_in_id=t.player_in_id,
                player_out_id=t.player_out_id,
                player_in_value=float(player_values.get(t.player_in_id, 0.0)) if t.player_in_id else 0.0,
                player_out_value=float(player_values.get(t.player_out_id, 0.0)) if t.player_out_id else 0.0,
            )
        )

    budget = previous_budget + sum(d.delta for d in deltas)
    return BudgetResult(budget=budget, team_value=0.0, transfer_deltas=deltas)
