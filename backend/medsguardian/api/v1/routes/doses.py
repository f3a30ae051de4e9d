"""Module: doses."""

from __future__ import annotations

import uuid
from datetime import datetime

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from medsguardian.api.v1.routes.deps import get_current_user, get_now, get_storage
from medsguardian.api.v1.routes.medications import MedicationOut, as_medication_out
from medsguardian.db.models.user import User
from medsguardian.domain.dose_state import REFRESH_INTERVAL_SECONDS, format_time
from medsguardian.domain.identity import patient_id_for
from medsguardian.services import medications
from medsguardian.services.storage import Storage

router = APIRouter()


class DoseOut(BaseModel):
    medication: MedicationOut
    time: str
    display_time: str
    state: str
    remaining_text: str
    taken_at: datetime | None = None
    taken_by: uuid.UUID | None = None
    taken_by_name: str | None = None


class StatsOut(BaseModel):
    total: int
    completed: int
    progress_percent: float
    message: str


class TodayOut(BaseModel):
    date: str
    generated_at: datetime
    refresh_interval_seconds: int
    revision: int
    doses: list[DoseOut]
    stats: StatsOut


class MarkTakenRequest(BaseModel):
    med_id: uuid.UUID
    scheduled_time: str


class MarkTakenOut(BaseModel):
    id: uuid.UUID
    med_id: uuid.UUID
    scheduled_time: str
    date: str
    taken_at: datetime | None
    taken_by: uuid.UUID | None
    taken_by_name: str | None
    created: bool


@router.get("/today", response_model=TodayOut)
def today(
    user: User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
    now: datetime = Depends(get_now),
):
    view = medications.today_view(storage, user, now)
    doses = [
        DoseOut(
            medication=as_medication_out(item.medication),
            time=item.time,
            display_time=format_time(item.time),
            state=item.dose.state.value,
            remaining_text=item.dose.remaining_text,
            taken_at=item.log.taken_at if item.log else None,
            taken_by=item.log.taken_by if item.log else None,
            taken_by_name=item.log.taken_by_name if item.log else None,
        )
        for item in view.items
    ]
    return TodayOut(
        date=now.date().isoformat(),
        generated_at=now,
        refresh_interval_seconds=REFRESH_INTERVAL_SECONDS,
        revision=storage.feed.revision_for(patient_id_for(user)),
        doses=doses,
        stats=StatsOut(
            total=view.stats.total,
            completed=view.stats.completed,
            progress_percent=view.stats.progress_percent,
            message=view.stats.message,
        ),
    )


@router.post("/taken", response_model=MarkTakenOut)
def mark_taken(
    payload: MarkTakenRequest,
    user: User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
    now: datetime = Depends(get_now),
):
    log, created = medications.mark_taken(storage, user, payload.med_id, payload.scheduled_time, now)
    return MarkTakenOut(
        id=log.id,
        med_id=log.med_id,
        scheduled_time=log.scheduled_time,
        date=log.date.isoformat(),
        taken_at=log.taken_at,
        taken_by=log.taken_by,
        taken_by_name=log.taken_by_name,
        created=created,
    )
