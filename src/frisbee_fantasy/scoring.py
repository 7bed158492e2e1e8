"""Weekly fantasy scoring.

Scoring rules
-------------
- Only the starting lineup scores; benched players' points never count on
  their own.
- The captain's points are doubled and reported separately as
  ``captain_points``; ``total_points`` holds everyone else.
- A starter who did not play a game is auto-substituted, for that game, by
  the first benched non-captain player of the same position, provided the
  bench player played it. Otherwise the starter scores nothing for that game.

A player's game points come from the stat line:
``goals + 2 * assists + 3 * blocks - drops - throwaways``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Mapping, Optional, Sequence, Tuple

from .constants import CAPTAIN_MULTIPLIER
from .data import ValidationError
from .lineup import LineupSlot

logger = logging.getLogger(__name__)

NO_BENCH_PLAYER = "No benched player of same position available"
BENCH_PLAYER_DID_NOT_PLAY = "Benched player of same position also did not play"


@dataclass(frozen=True, slots=True)
class PlayerGameStats:
    player_id: str
    game_id: str
    played: bool
    goals: int = 0
    assists: int = 0
    blocks: int = 0
    drops: int = 0
    throwaways: int = 0

    @property
    def points(self) -> int:
        return self.goals + 2 * self.assists + 3 * self.blocks - self.drops - self.throwaways


StatsLookup = Mapping[Tuple[str, str], PlayerGameStats]  # (player_id, game_id) -> stats


@dataclass(frozen=True, slots=True)
class SubstitutionOutcome:
    player_id: str
    substituted: bool
    reason: Optional[str] = None


@dataclass(frozen=True, slots=True)
class Substitution:
    player_out_id: str
    player_in_id: str
    game_id: str
    reason: str


@dataclass(frozen=True, slots=True)
class WeekScore:
    total_points: int
    captain_points: int
    substitutions: List[Substitution] = field(default_factory=list)

    @property
    def team_points(self) -> int:
        return self.total_points + self.captain_points


def _played(player_id: str, game_id: str, stats: StatsLookup) -> bool:
    line = stats.get((player_id, game_id))
    return line is not None and line.played


def apply_auto_substitution(
    lineup: Sequence[LineupSlot],
    player_id: str,
    game_id: str,
    stats: StatsLookup,
) -> SubstitutionOutcome:
    """Decide who scores a lineup slot for one game.

    Only a starter who missed the game is replaced; anyone else keeps the
    slot. When no substitute is available the outcome carries the
    reason but ``substituted`` is False.
    """

    if _played(player_id, game_id, stats):
        return SubstitutionOutcome(player_id=player_id, substituted=False)

    slot = next((p for p in lineup if p.player_id == player_id), None)
    if slot is None or slot.is_benched:
        return SubstitutionOutcome(player_id=player_id, substituted=False)

    bench = next(
        (p for p in lineup if p.position is slot.position and p.is_benched and not p.is_captain),
        None,
    )
    if bench is None:
        return SubstitutionOutcome(player_id=player_id, substituted=False, reason=NO_BENCH_PLAYER)

    if not _played(bench.player_id, game_id, stats):
        return SubstitutionOutcome(player_id=player_id, substituted=False, reason=BENCH_PLAYER_DID_NOT_PLAY)

    position = slot.position.value
    return SubstitutionOutcome(
        player_id=bench.player_id,
        substituted=True,
        reason=f"{position} did not play, substituted with benched {position}",
    )


def calculate_week_score(
    lineup: Sequence[LineupSlot],
    game_ids: Sequence[str],
    stats: StatsLookup,
) -> WeekScore:
    """Score a lineup over a week's games.

    A week without games scores zero. Otherwise the lineup must have a
    captain.

    Raises
    ------
    ValidationError
        If the week has games and the lineup has no captain.
    """

    if not game_ids:
        return WeekScore(total_points=0, captain_points=0)

    if not any(p.is_captain for p in lineup):
        raise ValidationError("No captain found in lineup")

    total_points = 0
    captain_points = 0
    substitutions: List[Substitution] = []

    for player in lineup:
        if player.is_benched:
            continue

        points = 0
        for game_id in game_ids:
            outcome = apply_auto_substitution(lineup, player.player_id, game_id, stats)
            if outcome.substituted:
                substitutions.append(
                    Substitution(
                        player_out_id=player.player_id,
                        player_in_id=outcome.player_id,
                        game_id=game_id,
                        reason=outcome.reason or "",
                    )
                )
            elif outcome.reason:
                logger.debug("No substitute for %s in game %s: %s", player.player_id, game_id, outcome.reason)

            line = stats.get((outcome.player_id, game_id))
            if line is not None and line.played:
                points += line.points

        if player.is_captain:
            captain_points += points * CAPTAIN_MULTIPLIER
        else:
            total_points += points

    return WeekScore(total_points=total_points, captain_points=captain_points, substitutions=substitutions)
