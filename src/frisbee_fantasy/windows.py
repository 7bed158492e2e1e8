"""Transfer window state.

A week's transfer window is derived from a few stored flags:

- upcoming:  prices not calculated yet, window not open
- ready:     prices calculated, window never opened
- open:      prices calculated, window open and before cutoff
- completed: window was opened and then closed, the cutoff was reached, or
             the week has ended

A cutoff (or week end) counts as reached from its exact instant onwards.
Naive datetimes are read as UTC.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Collection, Optional


class TransferWindowState(str, Enum):
    UPCOMING = "upcoming"
    READY = "ready"
    OPEN = "open"
    COMPLETED = "completed"


@dataclass(frozen=True, slots=True)
class WindowCheck:
    """Outcome of a permission check; ``reason`` is set when refused."""

    allowed: bool
    reason: Optional[str] = None


def _as_utc(moment: datetime) -> datetime:
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment


def _now_utc(now: Optional[datetime]) -> datetime:
    return datetime.now(timezone.utc) if now is None else _as_utc(now)


def _is_reached(moment: Optional[datetime], now: datetime) -> bool:
    return moment is not None and _as_utc(moment) <= now


def transfer_window_state(
    prices_calculated: bool,
    window_open: bool,
    *,
    cutoff_time: Optional[datetime] = None,
    closed_at: Optional[datetime] = None,
    week_end: Optional[datetime] = None,
    now: Optional[datetime] = None,
) -> TransferWindowState:
    """Derive the window state.

    ``now`` defaults to the current UTC time.
    """

    now = _now_utc(now)

    if not prices_calculated and not window_open:
        return TransferWindowState.UPCOMING

    if prices_calculated and not window_open:
        if closed_at is not None or _is_reached(week_end, now):
            return TransferWindowState.COMPLETED
        return TransferWindowState.READY

    if prices_calculated and window_open:
        if _is_reached(cutoff_time, now):
            return TransferWindowState.COMPLETED
        return TransferWindowState.OPEN

    # Open without calculated prices is not a valid stored state.
    return TransferWindowState.UPCOMING


def can_bypass_transfer_window(user_id: Optional[str], whitelist: Collection[str]) -> bool:
    """Whether a user may transfer while the window is closed."""

    if not user_id:
        return False
    return user_id in whitelist


def can_make_transfer(
    window_open: bool,
    *,
    cutoff_time: Optional[datetime] = None,
    user_id: Optional[str] = None,
    whitelist: Collection[str] = (),
    now: Optional[datetime] = None,
) -> WindowCheck:
    """Whether a transfer may be saved right now.

    Whitelisted users always may. Everyone else needs an open window and a
    cutoff that has not been reached.
    """

    if can_bypass_transfer_window(user_id, whitelist):
        return WindowCheck(allowed=True)

    if not window_open:
        return WindowCheck(allowed=False, reason="Transfer window is closed for this week")

    if _is_reached(cutoff_time, _now_utc(now)):
        return WindowCheck(allowed=False, reason="Transfer cutoff time has passed")

    return WindowCheck(allowed=True)


def can_open_transfer_window(
    week_number: int,
    *,
    previous_week_prices_calculated: bool,
    open_window_week_numbers: Collection[int] = (),
) -> WindowCheck:
    """Preconditions for opening the window before ``week_number``.

    The window before week 1 needs no prices. Later windows need the previous
    week's prices. Only one window per season may be open at a time;
    re-opening the same week is allowed.
    """

    if week_number > 1 and not previous_week_prices_calculated:
        return WindowCheck(
            allowed=False,
            reason=f"Week {week_number - 1} prices not yet calculated. Enter stats first.",
        )

    others = sorted(n for n in open_window_week_numbers if n != week_number)
    if others:
        return WindowCheck(allowed=False, reason=f"TW {others[0]} is already open. Close it first.")

    return WindowCheck(allowed=True)
