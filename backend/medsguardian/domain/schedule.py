"""Module: schedule."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Iterable, Sequence

from medsguardian.domain.dose_state import DoseState, derive_state


@dataclass(frozen=True)
class ChecklistEntry:
    medication: Any
    time: str


@dataclass(frozen=True)
class DoseStats:
    total: int
    completed: int
    progress_percent: float
    message: str


@dataclass(frozen=True)
class DoseItem:
    medication: Any
    time: str
    dose: DoseState
    log: Any | None = None


@dataclass(frozen=True)
class TodayView:
    items: list[DoseItem] = field(default_factory=list)
    stats: DoseStats = DoseStats(0, 0, 0.0, "No medicine for today.")


def build_checklist(meds: Iterable[Any]) -> list[ChecklistEntry]:
    """One entry per (medication, reminder time), ordered by time of day.

    "HH:MM" is zero-padded 24-hour, so string order is clock order. The sort
    is stable: medications sharing a time keep the order they came in.
    """
    entries = [ChecklistEntry(med, time) for med in meds for time in med.times]
    return sorted(entries, key=lambda entry: entry.time)


def _taken_keys(logs: Iterable[Any]) -> set[tuple[Any, str]]:
    return {(log.med_id, log.scheduled_time) for log in logs if log.taken_at}


def compute_stats(checklist: Sequence[ChecklistEntry], logs: Iterable[Any]) -> DoseStats:
    taken = _taken_keys(logs)
    total = len(checklist)
    completed = sum(1 for entry in checklist if (entry.medication.id, entry.time) in taken)
    progress = (completed / total) * 100 if total > 0 else 0.0

    if total == 0:
        message = "No medicine for today."
    elif completed == 0:
        message = f"{total} doses to take today."
    elif completed < total:
        message = f"{total - completed} doses remaining."
    else:
        message = "You've taken all your doses!"

    return DoseStats(total=total, completed=completed, progress_percent=progress, message=message)


def build_today_view(meds: Iterable[Any], logs: Iterable[Any], now: datetime) -> TodayView:
    # Logs are expected to be today's already; matching here is by (med, time) only.
    logs = list(logs)
    by_dose = {(log.med_id, log.scheduled_time): log for log in logs}
    checklist = build_checklist(meds)

    items = []
    for entry in checklist:
        log = by_dose.get((entry.medication.id, entry.time))
        items.append(
            DoseItem(
                medication=entry.medication,
                time=entry.time,
                dose=derive_state(entry.time, log, now),
                log=log,
            )
        )

    return TodayView(items=items, stats=compute_stats(checklist, logs))
