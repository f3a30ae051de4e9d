import uuid
from typing import Literal

from fastapi import APIRouter, Depends, Response
from pydantic import BaseModel

from medsguardian.api.v1.routes.deps import get_current_user, get_sessions, get_storage, get_token
from medsguardian.db.models.user import User
from medsguardian.services import accounts
from medsguardian.services.sessions import SessionRegistry
from medsguardian.services.storage import Storage

router = APIRouter()


class SignupRequest(BaseModel):
    name: str
    email: str
    password: str
    role: Literal["Patient", "Guardian"] = "Patient"
    patient_code: str | None = None


class LoginRequest(BaseModel):
    email: str
    password: str


class ForgotPasswordRequest(BaseModel):
    email: str
    new_password: str


class UserPayload(BaseModel):
    id: uuid.UUID
    name: str
    email: str
    role: str
    patient_code: str | None = None
    linked_patient_id: uuid.UUID | None = None
    avatar: str | None = None


class LoginResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: UserPayload


def as_user_payload(user: User) -> UserPayload:
    return UserPayload(
        id=user.id,
        name=user.name,
        email=user.email,
        role=user.role,
        patient_code=user.patient_code,
        linked_patient_id=user.linked_patient_id,
        avatar=user.avatar,
    )


@router.post("/signup", response_model=LoginResponse, status_code=201)
def signup(
    payload: SignupRequest,
    storage: Storage = Depends(get_storage),
    registry: SessionRegistry = Depends(get_sessions),
):
    user = accounts.signup(
        storage,
        name=payload.name,
        email=payload.email,
        password=payload.password,
        role=payload.role,
        patient_code=payload.patient_code,
    )
    # Signing up also signs in.
    return LoginResponse(access_token=registry.issue(user.id), user=as_user_payload(user))


@router.post("/login", response_model=LoginResponse)
def login(
    payload: LoginRequest,
    storage: Storage = Depends(get_storage),
    registry: SessionRegistry = Depends(get_sessions),
):
    user = accounts.login(storage, payload.email, payload.password)
    return LoginResponse(access_token=registry.issue(user.id), user=as_user_payload(user))


@router.post("/logout", status_code=204)
def logout(token: str = Depends(get_token), registry: SessionRegistry = Depends(get_sessions)):
    registry.revoke(token)
    return Response(status_code=204)


@router.post("/forgot-password")
def forgot_password(payload: ForgotPasswordRequest, storage: Storage = Depends(get_storage)):
    accounts.reset_password(storage, payload.email, payload.new_password)
    return {"message": "Password updated successfully! Sign in now."}


@router.get("/me", response_model=UserPayload)
def me(user: User = Depends(get_current_user)):
    return as_user_payload(user)
