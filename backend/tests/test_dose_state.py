"""Dose lifecycle states around a scheduled reminder time."""
from datetime import datetime
from types import SimpleNamespace

import pytest

from medsguardian.domain.dose_state import (
    DoseState,
    MedState,
    can_confirm,
    derive_state,
    format_time,
)


def at(hour, minute, second=0, day=2):
    return datetime(2026, 3, day, hour, minute, second)


@pytest.mark.parametrize(
    "now, expected_state, expected_text",
    [
        (at(5, 0), MedState.LOCKED, "Ready in 3h"),
        (at(6, 59), MedState.LOCKED, "Ready in 1h"),
        (at(7, 0), MedState.LOCKED, "Ready in 1h"),
        (at(7, 1), MedState.LOCKED, "Ready in 59m"),
        (at(7, 29), MedState.LOCKED, "Ready in 31m"),
        (at(7, 30), MedState.UPCOMING, "Almost ready"),
        (at(7, 59), MedState.UPCOMING, "Almost ready"),
        (at(8, 0), MedState.ACTIVE, ""),
        (at(8, 30), MedState.ACTIVE, ""),
        (at(8, 31), MedState.OVERDUE, ""),
        (at(23, 59), MedState.OVERDUE, ""),
    ],
)
def test_states_around_eight_oclock(now, expected_state, expected_text):
    assert derive_state("08:00", None, now) == DoseState(expected_state, expected_text)


def test_partial_minutes_round_up_in_countdown():
    # 30 minutes 30 seconds early
    result = derive_state("08:00", None, at(7, 29, 30))
    assert result == DoseState(MedState.LOCKED, "Ready in 31m")


def test_seconds_past_the_buffer_are_overdue():
    assert derive_state("08:00", None, at(8, 30, 1)).state == MedState.OVERDUE


def test_completed_log_overrides_time():
    log = SimpleNamespace(taken_at=at(8, 5))
    for now in (at(0, 0), at(7, 0), at(8, 0), at(23, 59)):
        assert derive_state("08:00", log, now) == DoseState(MedState.COMPLETED, "")


def test_log_without_taken_at_does_not_complete():
    log = SimpleNamespace(taken_at=None)
    assert derive_state("08:00", log, at(8, 10)).state == MedState.ACTIVE


def test_only_time_of_day_matters():
    assert derive_state("08:00", None, at(7, 0, day=1)) == derive_state("08:00", None, at(7, 0, day=20))


def test_repeated_calls_agree():
    now = at(7, 45)
    assert derive_state("08:00", None, now) == derive_state("08:00", None, now)


def test_confirmable_states():
    assert can_confirm(MedState.ACTIVE)
    assert can_confirm(MedState.OVERDUE)
    assert not can_confirm(MedState.LOCKED)
    assert not can_confirm(MedState.UPCOMING)
    assert not can_confirm(MedState.COMPLETED)


@pytest.mark.parametrize(
    "value, expected",
    [("08:05", "8:05 AM"), ("00:30", "12:30 AM"), ("12:00", "12:00 PM"), ("21:45", "9:45 PM")],
)
def test_format_time(value, expected):
    assert format_time(value) == expected
