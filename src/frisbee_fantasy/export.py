"""Export helpers.

Results are exported as plain JSON-serialisable records so the persistence
layer can write them back without importing any domain classes. Week keys
are strings, matching how JSON objects round-trip.
"""

from __future__ import annotations

from typing import Any, Mapping, Sequence

from .data import ComputedTransfer, PriceSeries
from .scoring import WeekScore


def build_price_table_records(table: Mapping[str, PriceSeries]) -> list[dict[str, Any]]:
    """Build one record per player from a price table.

    Each record is ``{"player_id", "starting_price", "prices": {"1": ..., ...}}``,
    sorted by player id for deterministic output.
    """

    records: list[dict[str, Any]] = []
    for player_id in sorted(table):
        series = table[player_id]
        records.append(
            {
                "player_id": player_id,
                "starting_price": float(series[0]),
                "prices": {str(week): float(price) for week, price in enumerate(series) if week >= 1},
            }
        )
    return records


def transfers_to_records(transfers: Sequence[ComputedTransfer]) -> list[dict[str, str]]:
    return [
        {
            "player_in_id": t.player_in_id,
            "player_out_id": t.player_out_id,
            "position": t.position.value,
        }
        for t in transfers
    ]


def week_score_to_record(score: WeekScore) -> dict[str, Any]:
    return {
        "total_points": score.total_points,
        "captain_points": score.captain_points,
        "substitutions": [
            {
                "player_out_id": s.player_out_id,
                "player_in_id": s.player_in_id,
                "game_id": s.game_id,
                "reason": s.reason,
            }
            for s in score.substitutions
        ],
    }
