"""Lineup structure and salary-cap validation.

Validation here collects *all* problems into a list of messages rather than
raising on the first one, so a roster editor can show them together.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Sequence

from .data import LineupRules, Position


@dataclass(frozen=True, slots=True)
class LineupSlot:
    player_id: str
    position: Position
    is_benched: bool = False
    is_captain: bool = False

    def __post_init__(self) -> None:
        object.__setattr__(self, "position", Position.coerce(self.position))


@dataclass(frozen=True, slots=True)
class LineupValidationResult:
    errors: List[str] = field(default_factory=list)

    @property
    def valid(self) -> bool:
        return not self.errors


def _plural(position: Position, n: int) -> str:
    return position.value if n == 1 else f"{position.value}s"


def validate_lineup(
    players: Sequence[LineupSlot],
    *,
    rules: LineupRules = LineupRules(),
    allow_partial: bool = False,
) -> LineupValidationResult:
    """Check position counts and captaincy.

    A complete team must match the rules exactly and have one captain. A
    partial team (mid-edit) only has to stay within the maximums and have at
    most one captain.
    """

    errors: List[str] = []

    if not allow_partial and len(players) != rules.squad_size:
        errors.append(f"Must have exactly {rules.squad_size} players, found {len(players)}")

    starting: Dict[Position, int] = {pos: 0 for pos in Position}
    bench: Dict[Position, int] = {pos: 0 for pos in Position}
    for p in players:
        if p.is_benched:
            bench[p.position] += 1
        else:
            starting[p.position] += 1

    for pos in Position:
        want_start = rules.starting[pos]
        want_bench = rules.bench[pos]
        if allow_partial:
            if starting[pos] > want_start:
                errors.append(
                    f"Cannot have more than {want_start} {_plural(pos, want_start)} in starting lineup, "
                    f"found {starting[pos]}"
                )
            if bench[pos] > want_bench:
                errors.append(
                    f"Cannot have more than {want_bench} {_plural(pos, want_bench)} on bench, found {bench[pos]}"
                )
        else:
            if starting[pos] != want_start:
                errors.append(
                    f"Must have exactly {want_start} {_plural(pos, want_start)} in starting lineup, "
                    f"found {starting[pos]}"
                )
            if bench[pos] != want_bench:
                errors.append(
                    f"Must have exactly {want_bench} {_plural(pos, want_bench)} on bench, found {bench[pos]}"
                )

    n_captains = sum(1 for p in players if p.is_captain)
    if n_captains == 0 and not allow_partial and players:
        errors.append("Must have exactly one captain")
    elif n_captains > 1:
        errors.append(f"Must have exactly one captain, found {n_captains}")

    return LineupValidationResult(errors=errors)


def validate_salary_cap(
    players: Sequence[LineupSlot],
    values: Mapping[str, float],
    *,
    rules: LineupRules = LineupRules(),
) -> LineupValidationResult:
    """Check the squad's total current value against the cap.

    Players missing from ``values`` are ignored (valued at 0).
    """

    total = sum(float(values.get(p.player_id, 0.0)) for p in players)
    if total > rules.salary_cap:
        return LineupValidationResult(errors=[f"Team salary exceeds cap: ${total:.2f} / ${rules.salary_cap:g}"])
    return LineupValidationResult()


def validate_fantasy_team(
    players: Sequence[LineupSlot],
    values: Mapping[str, float],
    *,
    rules: LineupRules = LineupRules(),
    allow_partial: bool = False,
) -> LineupValidationResult:
    lineup = validate_lineup(players, rules=rules, allow_partial=allow_partial)
    salary = validate_salary_cap(players, values, rules=rules)
    return LineupValidationResult(errors=[*lineup.errors, *salary.errors])
