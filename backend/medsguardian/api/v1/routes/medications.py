"""Module: medications."""

from __future__ import annotations

import uuid
from typing import Literal

from fastapi import APIRouter, Depends, HTTPException, Response
from pydantic import BaseModel, Field

from medsguardian.api.v1.routes.deps import get_current_user, get_storage
from medsguardian.db.models.medication import Medication
from medsguardian.db.models.user import User
from medsguardian.services import medications
from medsguardian.services.storage import Storage

router = APIRouter()


class MedicationPayload(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    dosage: str = Field(min_length=1, max_length=200)
    times: list[str] = Field(default_factory=list)
    frequency: Literal["daily", "weekly", "as_needed"] = "daily"
    is_high_priority: bool = False
    image_url: str | None = None


class MedicationOut(BaseModel):
    id: uuid.UUID
    patient_id: uuid.UUID
    name: str
    dosage: str
    times: list[str]
    frequency: str
    is_high_priority: bool
    image_url: str | None = None


# -------------------------
# Helpers
# -------------------------
def _parse_uuid(value: str, field_name: str = "id") -> uuid.UUID:
    try:
        return uuid.UUID(value)
    except ValueError:
        raise HTTPException(status_code=400, detail=f"Invalid {field_name} (must be UUID)")


def as_medication_out(med: Medication) -> MedicationOut:
    return MedicationOut(
        id=med.id,
        patient_id=med.patient_id,
        name=med.name,
        dosage=med.dosage,
        times=list(med.times or []),
        frequency=med.frequency,
        is_high_priority=med.is_high_priority,
        image_url=med.image_url,
    )


# -------------------------
# Endpoints
# -------------------------
@router.get("", response_model=list[MedicationOut], summary="List the patient's medications")
def list_medications(user: User = Depends(get_current_user), storage: Storage = Depends(get_storage)):
    return [as_medication_out(m) for m in medications.list_medications(storage, user)]


@router.post("", response_model=MedicationOut, status_code=201, summary="Add a medication")
def create_medication(
    payload: MedicationPayload,
    user: User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
):
    med = medications.save_medication(storage, user, **payload.model_dump())
    return as_medication_out(med)


@router.put("/{med_id}", response_model=MedicationOut, summary="Edit a medication")
def update_medication(
    med_id: str,
    payload: MedicationPayload,
    user: User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
):
    med = medications.save_medication(
        storage, user, med_id=_parse_uuid(med_id, "med_id"), **payload.model_dump()
    )
    return as_medication_out(med)


@router.delete("/{med_id}", status_code=204, summary="Delete a medication and its logs")
def delete_medication(
    med_id: str,
    user: User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
):
    medications.delete_medication(storage, user, _parse_uuid(med_id, "med_id"))
    return Response(status_code=204)
