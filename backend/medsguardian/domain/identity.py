"""Module: identity.

Care codes, role rules and the input normalisation shared by the account and
medication flows.
"""

from __future__ import annotations

import random
import re
import uuid
from typing import Any, Callable, Iterable

from medsguardian.core.errors import IntegrityConflict, ValidationError
from medsguardian.db.models.medication import FREQUENCIES
from medsguardian.db.models.user import GUARDIAN, PATIENT

CODE_PREFIX = "MG-"
CODE_PATTERN = re.compile(r"^MG-\d{6}$")
TIME_PATTERN = re.compile(r"^([01]?\d|2[0-3]):([0-5]\d)$")


def generate_patient_code(rng: random.Random | None = None) -> str:
    rng = rng or random.SystemRandom()
    return f"{CODE_PREFIX}{rng.randint(100000, 999999)}"


def new_patient_code(
    is_taken: Callable[[str], bool],
    attempts: int = 5,
    rng: random.Random | None = None,
) -> str:
    # Codes are only six digits, so draw again on the rare collision.
    for _ in range(attempts):
        code = generate_patient_code(rng)
        if not is_taken(code):
            return code
    raise IntegrityConflict("Could not allocate a care code. Please try again.")


def normalize_email(value: str) -> str:
    return value.strip().lower()


def normalize_code(value: str | None) -> str:
    return (value or "").strip().upper()


def patient_id_for(user: Any) -> uuid.UUID | None:
    """The patient whose schedule ``user`` looks at."""
    if user.role == PATIENT:
        return user.id
    if user.role == GUARDIAN:
        return user.linked_patient_id
    return None


def check_delete_confirmation(user: Any, typed: str | None) -> None:
    # Exact match: no trimming, no case folding.
    if typed is None or typed != user.name:
        raise ValidationError("Type your name exactly as shown to confirm deletion.")


def normalize_times(times: Iterable[str]) -> list[str]:
    """Validate "HH:MM" values, zero-pad them, drop duplicates and sort."""
    cleaned = set()
    for raw in times:
        match = TIME_PATTERN.match((raw or "").strip())
        if not match:
            raise ValidationError(f"Invalid time '{raw}' (expected HH:MM)")
        cleaned.add(f"{int(match.group(1)):02d}:{match.group(2)}")
    return sorted(cleaned)


def validate_schedule(name: str, dosage: str, times: list[str], frequency: str) -> None:
    if not name or not name.strip() or not dosage or not dosage.strip():
        raise ValidationError("Please fill in all required fields.")
    if frequency not in FREQUENCIES:
        raise ValidationError(f"Invalid frequency '{frequency}'")
    if not times and frequency != "as_needed":
        raise ValidationError("Add at least one reminder time.")
