"""Domain data model for the frisbee fantasy roster economy.

This module is intentionally *pure*: it defines the core enums, dataclasses
and rule configurations used throughout the project, with no dependency on
input file formats.

I/O, parsing, and dataset construction live in :mod:`frisbee_fantasy.io`.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Mapping, Tuple

from frisbee_fantasy import constants


class ValidationError(ValueError):
    """Raised when a caller hands the core malformed input.

    These are contract violations by the stats or roster-snapshot layer and
    are surfaced immediately rather than masked with a default.
    """


class Position(str, Enum):
    """Fantasy roster positions, declared in canonical order."""

    HANDLER = "handler"
    CUTTER = "cutter"
    RECEIVER = "receiver"

    @classmethod
    def coerce(cls, value: "Position | str") -> "Position":
        if isinstance(value, Position):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError as e:
            raise ValidationError(f"Unknown position: {value!r}") from e


def require_finite(value: float, *, label: str) -> float:
    """Return ``value`` as a float, rejecting NaN and +/-infinity."""

    try:
        v = float(value)
    except (TypeError, ValueError) as e:
        raise ValidationError(f"{label} must be a number, got {value!r}") from e
    if not math.isfinite(v):
        raise ValidationError(f"{label} must be finite, got {value!r}")
    return v


@dataclass(frozen=True, slots=True)
class WeeklyPerformance:
    """A player's fantasy output for one week.

    ``played=False`` means the price must not move that week regardless of
    ``points``.
    """

    points: float
    played: bool

    def __post_init__(self) -> None:
        require_finite(self.points, label="WeeklyPerformance.points")


@dataclass(frozen=True, slots=True)
class RosterEntry:
    """One player occupying a roster slot of a given position."""

    player_id: str
    position: Position

    def __post_init__(self) -> None:
        if not isinstance(self.player_id, str) or not self.player_id:
            raise ValidationError(f"RosterEntry.player_id must be a non-empty string, got {self.player_id!r}")
        # frozen dataclass: bypass __setattr__ to store the coerced enum
        object.__setattr__(self, "position", Position.coerce(self.position))


@dataclass(frozen=True, slots=True)
class ComputedTransfer:
    """A position-paired swap between two snapshots.

    Either id may be the empty string for an unmatched addition or removal.
    """

    player_in_id: str
    player_out_id: str
    position: Position

    @property
    def is_unmatched(self) -> bool:
        return not self.player_in_id or not self.player_out_id


@dataclass(frozen=True, slots=True)
class PricingConfig:
    """Price-update formula constants.

    price = previous + (points_multiplier * avg - previous) * damping_factor

    where ``avg`` is the mean of the last ``average_window`` played weeks.
    Prices are rounded half-up to ``rounding_places`` after every played week.
    """

    damping_factor: float = constants.DAMPING_FACTOR
    points_multiplier: float = constants.POINTS_MULTIPLIER
    average_window: int = constants.AVERAGE_WINDOW
    rounding_places: int = constants.ROUNDING_PLACES

    def __post_init__(self) -> None:
        if not (0.0 < self.damping_factor <= 1.0):
            raise ValueError("PricingConfig.damping_factor must be in (0, 1]")
        if not math.isfinite(self.points_multiplier):
            raise ValueError("PricingConfig.points_multiplier must be finite")
        if self.average_window < 1:
            raise ValueError("PricingConfig.average_window must be >= 1")
        if self.rounding_places < 0:
            raise ValueError("PricingConfig.rounding_places must be >= 0")


@dataclass(frozen=True, slots=True)
class TransferRules:
    """Per-week transfer rules."""

    max_transfers_per_week: int = constants.MAX_TRANSFERS_PER_WEEK

    # If set, an in/out count mismatch within a position is an error instead
    # of producing unmatched transfers.
    require_balanced_positions: bool = False

    def __post_init__(self) -> None:
        if self.max_transfers_per_week < 0:
            raise ValueError("TransferRules.max_transfers_per_week must be >= 0")


def _default_starting() -> Dict[Position, int]:
    return {Position(name): n for name, n in constants.STARTING_SLOTS_BY_NAME.items()}


def _default_bench() -> Dict[Position, int]:
    return {Position(name): n for name, n in constants.BENCH_SLOTS_BY_NAME.items()}


@dataclass(frozen=True, slots=True)
class LineupRules:
    """Squad structure rules used by lineup validation."""

    starting: Mapping[Position, int] = field(default_factory=_default_starting)
    bench: Mapping[Position, int] = field(default_factory=_default_bench)
    salary_cap: float = constants.LINEUP_SALARY_CAP

    def __post_init__(self) -> None:
        if self.salary_cap < 0:
            raise ValueError("LineupRules.salary_cap must be >= 0")

        for mapping_name, mapping in (("starting", self.starting), ("bench", self.bench)):
            missing = set(Position) - set(mapping)
            if missing:
                raise ValueError(f"{mapping_name} missing positions: {sorted(p.value for p in missing)}")
            for pos, count in mapping.items():
                if count < 0:
                    raise ValueError(f"{mapping_name}[{pos.value}] must be >= 0")

    @property
    def squad_size(self) -> int:
        return sum(self.starting.values()) + sum(self.bench.values())


@dataclass(frozen=True, slots=True)
class BudgetRules:
    """Season budget rules."""

    salary_cap: float = constants.BUDGET_SALARY_CAP

    def __post_init__(self) -> None:
        if self.salary_cap < 0:
            raise ValueError("BudgetRules.salary_cap must be >= 0")


# Aliases for algorithm inputs/outputs.
PriceSeries = List[float]
PriceTable = Dict[str, PriceSeries]  # player_id -> [start, week1, week2, ...]
PriceChange = Tuple[str, int, float]  # (player_id, week_number, value)
