"""Module: accounts.

Signup, login, password reset, profile settings and account deletion.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass

from medsguardian.core.config import settings
from medsguardian.core.errors import (
    AuthenticationError,
    IntegrityConflict,
    NotFoundError,
    ValidationError,
)
from medsguardian.core.security import digest, verify_password
from medsguardian.db.models.user import PATIENT, VALID_ROLES, User
from medsguardian.domain.identity import (
    check_delete_confirmation,
    new_patient_code,
    normalize_code,
    normalize_email,
)
from medsguardian.services.storage import Storage

logger = logging.getLogger(__name__)


@dataclass
class SettingsUpdate:
    current_password: str
    name: str | None = None
    email: str | None = None
    avatar: str | None = None
    new_password: str | None = None


def _require(*values: str | None) -> None:
    if any(not value or not value.strip() for value in values):
        raise ValidationError("Please fill in all required fields.")


def _check_avatar(avatar: str | None) -> None:
    if avatar and len(avatar.encode("utf-8")) > settings.max_avatar_bytes:
        raise ValidationError("Photo too large. Please use an image under 2MB.")


def signup(
    storage: Storage,
    name: str,
    email: str,
    password: str,
    role: str,
    patient_code: str | None = None,
) -> User:
    _require(name, email, password)
    if role not in VALID_ROLES:
        raise ValidationError("Invalid role")

    normalized_email = normalize_email(email)
    if storage.find_user_by_email(normalized_email):
        raise IntegrityConflict("Email is already in use")

    user = User(
        id=uuid.uuid4(),
        name=name.strip(),
        email=normalized_email,
        password=digest(password),
        role=role,
    )

    if role == PATIENT:
        user.patient_code = new_patient_code(
            storage.patient_code_exists, attempts=settings.patient_code_attempts
        )
    else:
        patient = storage.find_patient_by_code(normalize_code(patient_code)) if patient_code else None
        if patient is None:
            raise ValidationError("Invalid Care Code. Please check with the patient.")
        user.linked_patient_id = patient.id

    try:
        saved = storage.upsert_user(user)
    except IntegrityConflict as exc:
        # Lost a race for the care code; the email check above already passed.
        if role == PATIENT and storage.find_user_by_email(normalized_email) is None:
            raise IntegrityConflict("Could not allocate a care code. Please try again.") from exc
        raise
    logger.info("New %s account %s", role.lower(), saved.id)
    return saved


def login(storage: Storage, email: str, password: str) -> User:
    if not email or not password:
        raise AuthenticationError()
    user = storage.find_user_by_email(email)
    if user is None or not verify_password(password, user.password):
        raise AuthenticationError()
    return user


def reset_password(storage: Storage, email: str, new_password: str) -> User:
    """
    Set a new password for the account registered under ``email``.

    There is no ownership check on the email address (no token, no mail
    round-trip). Anyone who knows an address can reset its password.
    """
    _require(email, new_password)
    user = storage.find_user_by_email(email)
    if user is None:
        raise NotFoundError("Account not found")
    logger.warning("Password reset without verification for account %s", user.id)
    return storage.update_user_fields(user.id, password=digest(new_password))


def update_settings(storage: Storage, user: User, update: SettingsUpdate) -> User:
    """Apply profile changes after re-checking the current password."""
    if not verify_password(update.current_password or "", user.password):
        raise AuthenticationError("Identity verification failed (Wrong password)")

    fields: dict[str, str | None] = {}
    if update.name is not None:
        _require(update.name)
        fields["name"] = update.name.strip()
    if update.email is not None:
        _require(update.email)
        email = normalize_email(update.email)
        if email != user.email:
            other = storage.find_user_by_email(email)
            if other is not None and other.id != user.id:
                raise IntegrityConflict("Email is already in use")
        fields["email"] = email
    if update.avatar is not None:
        _check_avatar(update.avatar)
        # An empty string clears the photo.
        fields["avatar"] = update.avatar or None
    if update.new_password:
        fields["password"] = digest(update.new_password)

    if not fields:
        return user
    return storage.update_user_fields(user.id, **fields)


def delete_account(storage: Storage, user: User, confirmation: str | None) -> None:
    check_delete_confirmation(user, confirmation)
    storage.delete_user_cascade(user.id)
    logger.info("Deleted %s account %s", user.role.lower(), user.id)


def linked_guardians(storage: Storage, patient: User) -> list[User]:
    if not patient.is_patient:
        return []
    return storage.list_guardians_for(patient.id)


def care_recipient(storage: Storage, user: User) -> User | None:
    if user.is_patient:
        return user
    if user.is_guardian and user.linked_patient_id:
        return storage.get_user(user.linked_patient_id)
    return None
