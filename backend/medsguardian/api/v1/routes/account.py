"""Module: account."""

from fastapi import APIRouter, Depends, HTTPException, Response
from pydantic import BaseModel

from medsguardian.api.v1.routes.auth import UserPayload, as_user_payload
from medsguardian.api.v1.routes.deps import get_current_user, get_sessions, get_storage
from medsguardian.db.models.user import User
from medsguardian.services import accounts
from medsguardian.services.sessions import SessionRegistry
from medsguardian.services.storage import Storage

router = APIRouter()


class SettingsRequest(BaseModel):
    current_password: str
    name: str | None = None
    email: str | None = None
    avatar: str | None = None
    new_password: str | None = None


class DeleteAccountRequest(BaseModel):
    confirmation: str


class GuardianPayload(BaseModel):
    name: str
    email: str
    avatar: str | None = None


@router.get("/profile", response_model=UserPayload)
def profile(user: User = Depends(get_current_user)):
    return as_user_payload(user)


@router.patch("/settings", response_model=UserPayload)
def update_settings(
    payload: SettingsRequest,
    user: User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
):
    updated = accounts.update_settings(
        storage,
        user,
        accounts.SettingsUpdate(
            current_password=payload.current_password,
            name=payload.name,
            email=payload.email,
            avatar=payload.avatar,
            new_password=payload.new_password,
        ),
    )
    return as_user_payload(updated)


@router.delete("", status_code=204)
def delete_account(
    payload: DeleteAccountRequest,
    user: User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
    registry: SessionRegistry = Depends(get_sessions),
):
    accounts.delete_account(storage, user, payload.confirmation)
    registry.revoke_user(user.id)
    return Response(status_code=204)


# Endpoint: guardians following the signed-in patient.
@router.get("/guardians", response_model=list[GuardianPayload])
def guardians(user: User = Depends(get_current_user), storage: Storage = Depends(get_storage)):
    return [
        GuardianPayload(name=g.name, email=g.email, avatar=g.avatar)
        for g in accounts.linked_guardians(storage, user)
    ]


# Endpoint: the patient whose schedule the signed-in user sees.
@router.get("/patient", response_model=UserPayload)
def patient(user: User = Depends(get_current_user), storage: Storage = Depends(get_storage)):
    recipient = accounts.care_recipient(storage, user)
    if recipient is None:
        raise HTTPException(status_code=404, detail="No linked patient")
    return as_user_payload(recipient)
