"""Module: medications."""

from __future__ import annotations

import logging
import uuid
from datetime import datetime

from medsguardian.core.config import settings
from medsguardian.core.errors import NotFoundError, PermissionDeniedError, ValidationError
from medsguardian.db.models.med_log import MedLog
from medsguardian.db.models.medication import Medication
from medsguardian.db.models.user import User
from medsguardian.domain.dose_state import can_confirm, derive_state
from medsguardian.domain.identity import normalize_times, patient_id_for, validate_schedule
from medsguardian.domain.schedule import TodayView, build_today_view
from medsguardian.services.storage import Storage

logger = logging.getLogger(__name__)


# -------------------------
# Helpers
# -------------------------
def _linked_patient_id(user: User) -> uuid.UUID:
    patient_id = patient_id_for(user)
    if patient_id is None:
        raise PermissionDeniedError("This account is not linked to a patient.")
    return patient_id


def _guardian_patient_id(user: User) -> uuid.UUID:
    # Only a guardian manages the schedule; patients just confirm doses.
    if not user.is_guardian:
        raise PermissionDeniedError("Only a linked guardian can change medications.")
    return _linked_patient_id(user)


def _owned_medication(storage: Storage, med_id: uuid.UUID, patient_id: uuid.UUID) -> Medication:
    med = storage.get_medication(med_id)
    if med is None or med.patient_id != patient_id:
        raise NotFoundError("Medication not found")
    return med


# -------------------------
# Operations
# -------------------------
def list_medications(storage: Storage, user: User) -> list[Medication]:
    patient_id = patient_id_for(user)
    if patient_id is None:
        return []
    return storage.list_medications(patient_id)


def save_medication(
    storage: Storage,
    actor: User,
    *,
    name: str,
    dosage: str,
    times: list[str],
    frequency: str = "daily",
    is_high_priority: bool = False,
    image_url: str | None = None,
    med_id: uuid.UUID | None = None,
) -> Medication:
    """Create a medication, or replace one when ``med_id`` is given."""
    patient_id = _guardian_patient_id(actor)

    normalized = normalize_times(times)
    validate_schedule(name, dosage, normalized, frequency)
    if image_url and len(image_url.encode("utf-8")) > settings.max_image_bytes:
        raise ValidationError("Photo too large. Please use an image under 2MB.")

    if med_id is not None:
        existing = _owned_medication(storage, med_id, patient_id)
        med = Medication(
            id=existing.id,
            patient_id=patient_id,
            created_at=existing.created_at,
        )
    else:
        med = Medication(id=uuid.uuid4(), patient_id=patient_id)

    med.name = name.strip()
    med.dosage = dosage.strip()
    med.times = normalized
    med.frequency = frequency
    med.is_high_priority = is_high_priority
    med.image_url = image_url or None

    saved = storage.upsert_medication(med)
    logger.info("Saved medication %s for patient %s", saved.id, patient_id)
    return saved


def delete_medication(storage: Storage, actor: User, med_id: uuid.UUID) -> None:
    patient_id = _guardian_patient_id(actor)
    _owned_medication(storage, med_id, patient_id)
    storage.delete_medication_cascade(med_id)


def today_view(storage: Storage, user: User, now: datetime) -> TodayView:
    patient_id = patient_id_for(user)
    if patient_id is None:
        return TodayView()
    meds = storage.list_medications(patient_id)
    logs = storage.list_logs_for_date(patient_id, now.date())
    return build_today_view(meds, logs, now)


def mark_taken(
    storage: Storage,
    actor: User,
    med_id: uuid.UUID,
    scheduled_time: str,
    now: datetime,
) -> tuple[MedLog, bool]:
    """
    Confirm a dose for today. There is no undo.

    Confirming an already-confirmed dose returns the existing log with
    ``created`` False. Doses that are not due yet are refused.
    """
    patient_id = _linked_patient_id(actor)
    med = _owned_medication(storage, med_id, patient_id)

    times = normalize_times([scheduled_time])
    if times[0] not in med.times:
        raise ValidationError(f"{med.name} is not scheduled at {scheduled_time}")
    scheduled_time = times[0]

    today = now.date()
    existing = {
        (log.med_id, log.scheduled_time): log for log in storage.list_logs_for_date(patient_id, today)
    }
    current = existing.get((med.id, scheduled_time))
    if current is not None and current.taken_at:
        return current, False

    dose = derive_state(scheduled_time, None, now)
    if not can_confirm(dose.state):
        raise ValidationError(f"This dose is not ready yet ({dose.remaining_text})")

    log, created = storage.insert_log_if_absent(
        med_id=med.id,
        scheduled_time=scheduled_time,
        day=today,
        actor=actor,
        patient_id=patient_id,
        taken_at=now,
    )
    if created:
        logger.info("Dose %s@%s confirmed by %s", med.id, scheduled_time, actor.id)
    return log, created
