"""Project-wide constants for :mod:`frisbee_fantasy`.

These are the defaults behind the rule dataclasses in
:mod:`frisbee_fantasy.data`. Override them by constructing a config object
(or loading one from JSON) rather than by editing the algorithms.
"""

from __future__ import annotations

# Price formula: price += (POINTS_MULTIPLIER * avg - price) * DAMPING_FACTOR
DAMPING_FACTOR: float = 0.25
POINTS_MULTIPLIER: float = 10.0
AVERAGE_WINDOW: int = 2
ROUNDING_PLACES: int = 2

MAX_TRANSFERS_PER_WEEK: int = 2

# Budget cap used for week-1 budget accounting.
BUDGET_SALARY_CAP: float = 550.0

# Lineup structure. Keys are Position values; data.py converts them.
LINEUP_SALARY_CAP: float = 450.0
STARTING_SLOTS_BY_NAME: dict[str, int] = {"handler": 3, "cutter": 2, "receiver": 2}
BENCH_SLOTS_BY_NAME: dict[str, int] = {"handler": 1, "cutter": 1, "receiver": 1}

# Weekly scoring: the captain's points count this many times.
CAPTAIN_MULTIPLIER: int = 2
