"""Module: dose_state.

Maps a scheduled reminder time, the day's log entry for it and the current
wall-clock time onto one of five lifecycle states plus a short countdown
string. Nothing is stored: callers recompute on every refresh tick, so the
result is always a function of the three inputs alone.
"""

from __future__ import annotations

import enum
import math
from dataclasses import dataclass
from datetime import datetime
from typing import Any

# Minutes after the scheduled time during which a dose is still on time.
BUFFER_MINUTES = 30
# Minutes before the scheduled time during which a dose shows as upcoming.
UPCOMING_WINDOW_MINUTES = 30
# How often clients are expected to re-evaluate states.
REFRESH_INTERVAL_SECONDS = 10


class MedState(str, enum.Enum):
    LOCKED = "LOCKED"
    UPCOMING = "UPCOMING"
    ACTIVE = "ACTIVE"
    OVERDUE = "OVERDUE"
    COMPLETED = "COMPLETED"


@dataclass(frozen=True)
class DoseState:
    state: MedState
    remaining_text: str = ""


def parse_time(value: str) -> tuple[int, int]:
    hours, minutes = value.split(":")
    return int(hours), int(minutes)


def scheduled_for(scheduled_time: str, now: datetime) -> datetime:
    """The instant ``scheduled_time`` falls on, using ``now``'s calendar day."""
    hours, minutes = parse_time(scheduled_time)
    return now.replace(hour=hours, minute=minutes, second=0, microsecond=0)


def _countdown(minutes_left: float) -> str:
    if minutes_left >= 60:
        return f"Ready in {math.floor(minutes_left / 60)}h"
    return f"Ready in {math.ceil(minutes_left)}m"


def derive_state(scheduled_time: str, log: Any | None, now: datetime) -> DoseState:
    """
    Work out where a dose is in its day.

    ``log`` is the day's MedLog for this (medication, time) or None. A log
    with ``taken_at`` set wins over any time-based rule. Boundaries: exactly
    30 minutes early is UPCOMING, exactly on time and exactly 30 minutes late
    are both ACTIVE.
    """
    if log is not None and getattr(log, "taken_at", None):
        return DoseState(MedState.COMPLETED)

    target = scheduled_for(scheduled_time, now)
    diff_minutes = (now - target).total_seconds() / 60

    if diff_minutes < -UPCOMING_WINDOW_MINUTES:
        return DoseState(MedState.LOCKED, _countdown(abs(diff_minutes)))
    if diff_minutes < 0:
        return DoseState(MedState.UPCOMING, "Almost ready")
    if diff_minutes <= BUFFER_MINUTES:
        return DoseState(MedState.ACTIVE)
    return DoseState(MedState.OVERDUE)


def can_confirm(state: MedState) -> bool:
    # LOCKED and UPCOMING doses cannot be marked yet; COMPLETED has no undo.
    return state in (MedState.ACTIVE, MedState.OVERDUE)


def format_time(value: str) -> str:
    """Render "HH:MM" as a 12-hour clock string, e.g. "8:05 AM"."""
    hours, minutes = value.split(":")
    h = int(hours)
    suffix = "PM" if h >= 12 else "AM"
    return f"{h % 12 or 12}:{minutes} {suffix}"
