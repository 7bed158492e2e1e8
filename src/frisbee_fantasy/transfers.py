"""Snapshot-diff transfer computation.

Transfers are derived by comparing two roster snapshots (current vs. the
pre-window baseline), never by replaying individual edits. Any chain of
swaps made within a window therefore nets out automatically: A -> B -> C at
one slot shows up as a single A -> C transfer, and A -> B -> A shows up as
nothing.

Transfers are paired by position: a handler can only be swapped for another
handler, and so on.
"""

from __future__ import annotations

import logging
from collections import Counter
from typing import Dict, Iterable, List, Optional, Sequence, Tuple, Union

from .constants import MAX_TRANSFERS_PER_WEEK
from .data import ComputedTransfer, Position, RosterEntry, TransferRules, ValidationError

logger = logging.getLogger(__name__)

SnapshotItem = Union[RosterEntry, Tuple[str, Union[Position, str]]]
SnapshotLike = Iterable[SnapshotItem]


def _as_entry(item: SnapshotItem) -> RosterEntry:
    if isinstance(item, RosterEntry):
        return item
    try:
        player_id, position = item
    except (TypeError, ValueError) as e:
        raise ValidationError(f"Expected a RosterEntry or (player_id, position) pair, got {item!r}") from e
    return RosterEntry(player_id=player_id, position=position)


def validate_snapshot(snapshot: SnapshotLike, *, label: str = "snapshot") -> Tuple[RosterEntry, ...]:
    """Coerce a snapshot to RosterEntry values and check player ids are unique.

    Raises
    ------
    ValidationError
        On duplicate player ids, unknown positions or malformed entries.
    """

    entries = tuple(_as_entry(item) for item in snapshot)

    counts = Counter(e.player_id for e in entries)
    duplicates = sorted(pid for pid, n in counts.items() if n > 1)
    if duplicates:
        raise ValidationError(f"Duplicate player ids in {label}: {duplicates}")

    return entries


def _group_missing_by_position(
    entries: Sequence[RosterEntry],
    other_ids: frozenset[str],
) -> Dict[Position, List[str]]:
    """Player ids in ``entries`` absent from ``other_ids``, grouped by position."""

    grouped: Dict[Position, List[str]] = {pos: [] for pos in Position}
    for e in entries:
        if e.player_id not in other_ids:
            grouped[e.position].append(e.player_id)

    # Sorting makes pairing independent of snapshot ordering.
    for ids in grouped.values():
        ids.sort()
    return grouped


def compute_transfers(
    current: SnapshotLike,
    baseline: SnapshotLike,
    *,
    rules: TransferRules = TransferRules(),
) -> List[ComputedTransfer]:
    """Compute the position-paired transfers between two snapshots.

    Parameters
    ----------
    current:
        The roster being edited or saved.
    baseline:
        The roster at the start of the transfer window. Empty for the first
        week, in which case every current player is an unmatched addition.
    rules:
        Only ``require_balanced_positions`` is consulted here.

    Returns
    -------
    list[ComputedTransfer]
        Ordered by position (handler, cutter, receiver), then by pairing
        index. Unmatched sides are the empty string.

    Raises
    ------
    ValidationError
        If either snapshot is malformed, or if ``rules.require_balanced_positions``
        is set and a position has differing in/out counts.
    """

    current_entries = validate_snapshot(current, label="current snapshot")
    baseline_entries = validate_snapshot(baseline, label="baseline snapshot")

    current_ids = frozenset(e.player_id for e in current_entries)
    baseline_ids = frozenset(e.player_id for e in baseline_entries)

    players_in = _group_missing_by_position(current_entries, baseline_ids)
    players_out = _group_missing_by_position(baseline_entries, current_ids)

    transfers: List[ComputedTransfer] = []
    for position in Position:
        ins = players_in[position]
        outs = players_out[position]

        if len(ins) != len(outs):
            if rules.require_balanced_positions:
                raise ValidationError(
                    f"Unbalanced {position.value} changes: {len(ins)} in, {len(outs)} out"
                )
            logger.debug("Unbalanced %s changes: %d in, %d out", position.value, len(ins), len(outs))

        for k in range(max(len(ins), len(outs))):
            transfers.append(
                ComputedTransfer(
                    player_in_id=ins[k] if k < len(ins) else "",
                    player_out_id=outs[k] if k < len(outs) else "",
                    position=position,
                )
            )

    return transfers


def is_within_transfer_limit(
    transfer_count: int,
    is_first_week: bool,
    max_transfers: int = MAX_TRANSFERS_PER_WEEK,
) -> bool:
    """Check a transfer count against the weekly limit.

    First-week roster construction is initial squad selection, not
    transferring, so it is unlimited.
    """

    if is_first_week:
        return True
    return transfer_count <= max_transfers


def count_transfers(transfers: Sequence[ComputedTransfer]) -> int:
    """Number of transfers that consume weekly allowance.

    Every computed entry counts, unmatched ones included.
    """

    return len(transfers)


def transfers_remaining(
    transfers_used: int,
    is_first_week: bool,
    max_transfers: int = MAX_TRANSFERS_PER_WEEK,
) -> Optional[int]:
    """Transfers still available this week, or None when unlimited."""

    if is_first_week:
        return None
    return max(0, max_transfers - transfers_used)


def is_transfer_limit_reached(
    transfers_used: int,
    pending_count: int,
    is_first_week: bool,
    max_transfers: int = MAX_TRANSFERS_PER_WEEK,
) -> bool:
    """Whether further swaps should be blocked.

    ``transfers_used`` are already saved this week; ``pending_count`` are
    unsaved edits in the current session.
    """

    if is_first_week:
        return False
    return transfers_used + pending_count >= max_transfers
