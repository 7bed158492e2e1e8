from __future__ import annotations

import itertools

import pytest

from frisbee_fantasy.data import ComputedTransfer, Position, RosterEntry, TransferRules, ValidationError
from frisbee_fantasy.transfers import (
    compute_transfers,
    count_transfers,
    is_transfer_limit_reached,
    is_within_transfer_limit,
    transfers_remaining,
    validate_snapshot,
)

H, C, R = Position.HANDLER, Position.CUTTER, Position.RECEIVER


def _e(player_id: str, position: Position) -> RosterEntry:
    return RosterEntry(player_id=player_id, position=position)


def test_no_changes_returns_empty() -> None:
    roster = [_e("h1", H), _e("c1", C), _e("r1", R)]
    assert compute_transfers(roster, list(roster)) == []


def test_single_swap_within_position() -> None:
    current = [_e("h1", H), _e("h2", H), _e("NEW-H", H), _e("c1", C)]
    baseline = [_e("h1", H), _e("h2", H), _e("h3", H), _e("c1", C)]

    assert compute_transfers(current, baseline) == [ComputedTransfer("NEW-H", "h3", H)]


def test_cross_position_changes_pair_within_each_position() -> None:
    current = [_e("hNew", H), _e("c1", C), _e("rNew", R)]
    baseline = [_e("h1", H), _e("c1", C), _e("r1", R)]

    assert compute_transfers(current, baseline) == [
        ComputedTransfer("hNew", "h1", H),
        ComputedTransfer("rNew", "r1", R),
    ]


def test_transfers_ordered_handler_cutter_receiver() -> None:
    current = [_e("r2", R), _e("c2", C), _e("h2", H)]
    baseline = [_e("r1", R), _e("c1", C), _e("h1", H)]

    positions = [t.position for t in compute_transfers(current, baseline)]
    assert positions == [H, C, R]


def test_handler_for_cutter_is_two_unmatched_changes_not_one_swap() -> None:
    current = [_e("c2", C)]
    baseline = [_e("h1", H)]

    assert compute_transfers(current, baseline) == [
        ComputedTransfer("", "h1", H),
        ComputedTransfer("c2", "", C),
    ]


def test_order_independence_with_multiple_swaps_in_one_position() -> None:
    current = [_e("hB", H), _e("hA", H), _e("c1", C)]
    baseline = [_e("h2", H), _e("c1", C), _e("h1", H)]

    expected = [ComputedTransfer("hA", "h1", H), ComputedTransfer("hB", "h2", H)]
    for cur, base in itertools.product(itertools.permutations(current), itertools.permutations(baseline)):
        assert compute_transfers(list(cur), list(base)) == expected


def test_chain_collapse_yields_single_net_transfer() -> None:
    # The session went h1 -> hX -> hY -> hZ; only the final state is compared.
    baseline = [_e("h1", H), _e("c1", C)]
    current = [_e("hZ", H), _e("c1", C)]

    assert compute_transfers(current, baseline) == [ComputedTransfer("hZ", "h1", H)]


def test_revert_to_baseline_cancels() -> None:
    assert compute_transfers([_e("h1", H)], [_e("h1", H)]) == []


def test_empty_baseline_is_all_unmatched_additions() -> None:
    current = [_e("h1", H), _e("c1", C), _e("r1", R)]

    transfers = compute_transfers(current, [])

    assert len(transfers) == len(current)
    assert all(t.player_out_id == "" for t in transfers)
    assert all(t.is_unmatched for t in transfers)
    assert [t.player_in_id for t in transfers] == ["h1", "c1", "r1"]


def test_accepts_plain_tuples_and_string_positions() -> None:
    transfers = compute_transfers([("h2", "handler")], [("h1", "HANDLER")])
    assert transfers == [ComputedTransfer("h2", "h1", H)]


def test_duplicate_player_id_rejected() -> None:
    with pytest.raises(ValidationError, match="Duplicate player ids in current snapshot"):
        compute_transfers([_e("h1", H), _e("h1", C)], [])

    with pytest.raises(ValidationError, match="baseline snapshot"):
        compute_transfers([], [_e("h1", H), _e("h1", H)])


def test_unknown_position_rejected() -> None:
    with pytest.raises(ValidationError, match="Unknown position"):
        compute_transfers([("h1", "goalie")], [])

    with pytest.raises(ValidationError):
        validate_snapshot([("h1",)])


def test_unbalanced_position_allowed_by_default() -> None:
    current = [_e("h1", H), _e("h2", H)]
    baseline = [_e("h1", H)]

    assert compute_transfers(current, baseline) == [ComputedTransfer("h2", "", H)]


def test_unbalanced_position_rejected_when_rules_require_balance() -> None:
    rules = TransferRules(require_balanced_positions=True)

    with pytest.raises(ValidationError, match="Unbalanced handler"):
        compute_transfers([_e("h1", H), _e("h2", H)], [_e("h1", H)], rules=rules)

    # Balanced edits still go through.
    assert compute_transfers([_e("h2", H)], [_e("h1", H)], rules=rules) == [ComputedTransfer("h2", "h1", H)]


def test_is_within_transfer_limit() -> None:
    for n in range(0, 12):
        assert is_within_transfer_limit(n, True)

    assert is_within_transfer_limit(2, False)
    assert not is_within_transfer_limit(3, False)
    assert is_within_transfer_limit(3, False, 3)
    assert not is_within_transfer_limit(1, False, 0)


def test_count_transfers_includes_unmatched() -> None:
    transfers = [ComputedTransfer("a", "b", H), ComputedTransfer("", "c", C)]
    assert count_transfers(transfers) == 2


def test_transfers_remaining() -> None:
    assert transfers_remaining(5, True) is None
    assert transfers_remaining(0, False) == 2
    assert transfers_remaining(1, False) == 1
    assert transfers_remaining(3, False) == 0
    assert transfers_remaining(1, False, max_transfers=3) == 2


def test_is_transfer_limit_reached() -> None:
    assert not is_transfer_limit_reached(10, 10, True)
    assert not is_transfer_limit_reached(0, 1, False)
    assert is_transfer_limit_reached(1, 1, False)
    assert is_transfer_limit_reached(2, 0, False)
    assert not is_transfer_limit_reached(2, 0, False, max_transfers=3)


def test_transfer_rules_validation() -> None:
    with pytest.raises(ValueError):
        TransferRules(max_transfers_per_week=-1)
