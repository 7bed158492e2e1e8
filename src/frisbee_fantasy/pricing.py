"""Player price model.

Implements the damped mean-reversion price update used by the league:

    price_next = price_prev + (multiplier * avg - price_prev) * damping

where ``avg`` is a rolling average over the player's *most recent games
played*.

Key behaviour
-------------
- Index 0 of a price series is the starting price.
- If a player doesn't play in a week, the price is frozen for that week and
  the week is skipped for the score window (a bye never dilutes the average).
- Prices are rounded half-up to the cent after every played week, and the
  rounded value feeds the next week's update.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from decimal import ROUND_FLOOR, Decimal
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from .data import PriceChange, PriceSeries, PriceTable, PricingConfig, WeeklyPerformance, require_finite

logger = logging.getLogger(__name__)

_DEFAULT_CONFIG = PricingConfig()


def round_half_up(value: float, places: int = 2) -> float:
    """Round ``value`` to ``places`` decimals, halves going towards +infinity.

    Rounding works on the shortest decimal form of ``value`` (its ``repr``), so
    77.035 rounds to 77.04 and a value just below a half stays below it.
    """

    step = Decimal(1).scaleb(-places)
    scaled = Decimal(repr(float(value))) / step
    return float((scaled + Decimal("0.5")).to_integral_value(rounding=ROUND_FLOOR) * step)


def compute_new_price(
    previous_price: float,
    average_points: float,
    *,
    config: PricingConfig = _DEFAULT_CONFIG,
) -> float:
    """Apply one week's price update and round it."""

    target = config.points_multiplier * average_points
    raw = previous_price + (target - previous_price) * config.damping_factor
    return round_half_up(raw, config.rounding_places)


def _rolling_average(played_points: Sequence[float], window: int) -> float:
    recent = played_points[-window:]
    return sum(recent) / len(recent)


def compute_price_series(
    starting_price: float,
    weeks: Sequence[WeeklyPerformance],
    *,
    config: PricingConfig = _DEFAULT_CONFIG,
) -> PriceSeries:
    """Compute a player's price for every week of a season.

    Parameters
    ----------
    starting_price:
        Pre-season valuation. Returned unchanged at index 0.
    weeks:
        One entry per season week, in week order starting at week 1.

    Returns
    -------
    list[float]
        ``[starting_price, price_week_1, ..., price_week_n]``.

    Raises
    ------
    ValidationError
        If ``starting_price`` or any week's points is NaN or infinite.
    """

    start = require_finite(starting_price, label="starting_price")

    prices: PriceSeries = [start]
    previous_price = start

    # Points from played weeks only, chronological.
    played_points: List[float] = []

    for week_number, week in enumerate(weeks, start=1):
        if not week.played:
            price = previous_price
        else:
            played_points.append(require_finite(week.points, label=f"points (week {week_number})"))
            avg = _rolling_average(played_points, config.average_window)
            price = compute_new_price(previous_price, avg, config=config)

        prices.append(price)
        previous_price = price

    return prices


def weekly_performances_from_stats(
    stats: Iterable[Tuple[str, int, float]],
    week_numbers: Sequence[int],
) -> Dict[str, List[WeeklyPerformance]]:
    """Aggregate per-game stat lines into per-week performances.

    Parameters
    ----------
    stats:
        ``(player_id, week_number, points)`` stat lines, one per game played.
        A player appearing in several games in a week has their points summed.
    week_numbers:
        The season's scoring weeks. Stat lines for other weeks are ignored.

    Returns
    -------
    dict[str, list[WeeklyPerformance]]
        player_id -> one performance per week in ``sorted(week_numbers)``.
        Weeks with no stat line are ``played=False`` with 0 points.
    """

    ordered_weeks = sorted(set(week_numbers))
    known_weeks = set(ordered_weeks)

    points_by_player: Dict[str, Dict[int, float]] = defaultdict(dict)
    ignored = 0
    for player_id, week_number, points in stats:
        if week_number not in known_weeks:
            ignored += 1
            continue
        p_weeks = points_by_player[player_id]
        p_weeks[week_number] = p_weeks.get(week_number, 0.0) + require_finite(points, label="points")

    if ignored:
        logger.debug("Ignored %d stat lines outside weeks %s", ignored, ordered_weeks)

    return {
        player_id: [
            WeeklyPerformance(points=p_weeks[w], played=True) if w in p_weeks else WeeklyPerformance(points=0.0, played=False)
            for w in ordered_weeks
        ]
        for player_id, p_weeks in points_by_player.items()
    }


def generate_price_table(
    *,
    starting_prices: Mapping[str, float],
    performances: Mapping[str, Sequence[WeeklyPerformance]],
    n_weeks: Optional[int] = None,
    config: PricingConfig = _DEFAULT_CONFIG,
) -> PriceTable:
    """Generate price series for every player with a starting price.

    The starting prices define the season's players. Performances for anyone
    else (e.g. a guest who only appears in the stats) are skipped with a
    warning rather than aborting the batch.

    Players without a performance history (or with a shorter one) are padded
    with did-not-play weeks, so every series in the table has the same length:
    ``n_weeks + 1``, or the longest history + 1 when ``n_weeks`` is not given.

    Raises
    ------
    ValueError
        If a performance history is longer than ``n_weeks``.
    """

    longest = max((len(w) for w in performances.values()), default=0)
    if n_weeks is None:
        n_weeks = longest
    elif longest > n_weeks:
        raise ValueError(f"Performance history of {longest} weeks exceeds n_weeks={n_weeks}")
    did_not_play = WeeklyPerformance(points=0.0, played=False)

    unpriced = sorted(set(performances) - set(starting_prices))
    if unpriced:
        logger.warning("Skipping %d players with stats but no starting price: %s", len(unpriced), unpriced)

    table: PriceTable = {}
    for player_id in sorted(starting_prices):
        weeks = list(performances.get(player_id, ()))
        weeks.extend([did_not_play] * (n_weeks - len(weeks)))

        table[player_id] = compute_price_series(starting_prices[player_id], weeks, config=config)

    logger.debug("Priced %d players over %d weeks", len(table), n_weeks)
    return table


def price_changes_from_table(
    table: Mapping[str, PriceSeries],
    week_numbers: Optional[Sequence[int]] = None,
) -> List[PriceChange]:
    """Flatten a price table into ``(player_id, week_number, value)`` rows.

    Index 0 (the starting price) is not a change and is omitted. Series index
    ``i`` is reported as week ``i`` unless ``week_numbers`` is given, in which
    case it is reported as ``sorted(week_numbers)[i - 1]``.
    """

    ordered_weeks = sorted(week_numbers) if week_numbers is not None else None

    changes: List[PriceChange] = []
    for player_id in sorted(table):
        for i, price in enumerate(table[player_id][1:], start=1):
            week_number = ordered_weeks[i - 1] if ordered_weeks is not None else i
            changes.append((player_id, week_number, price))
    return changes
