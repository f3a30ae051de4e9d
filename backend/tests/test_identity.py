import random
from types import SimpleNamespace

import pytest

from medsguardian.core.errors import IntegrityConflict, ValidationError
from medsguardian.core.security import digest, verify_password
from medsguardian.domain.identity import (
    CODE_PATTERN,
    check_delete_confirmation,
    generate_patient_code,
    new_patient_code,
    normalize_times,
    patient_id_for,
    validate_schedule,
)


def test_patient_code_format():
    rng = random.Random(7)
    for _ in range(200):
        code = generate_patient_code(rng)
        assert CODE_PATTERN.match(code)
        assert 100000 <= int(code[3:]) <= 999999


def test_new_patient_code_retries_on_collision():
    seen = []

    def is_taken(code):
        seen.append(code)
        return len(seen) < 3

    code = new_patient_code(is_taken, attempts=5, rng=random.Random(1))
    assert code == seen[-1]
    assert len(seen) == 3


def test_new_patient_code_gives_up():
    with pytest.raises(IntegrityConflict):
        new_patient_code(lambda code: True, attempts=3)


def test_patient_id_for_roles():
    patient = SimpleNamespace(role="Patient", id="p1", linked_patient_id=None)
    guardian = SimpleNamespace(role="Guardian", id="g1", linked_patient_id="p1")
    assert patient_id_for(patient) == "p1"
    assert patient_id_for(guardian) == "p1"


@pytest.mark.parametrize("typed", ["ada patient", "Ada Patient ", " Ada Patient", "", None])
def test_delete_confirmation_is_exact(typed):
    user = SimpleNamespace(name="Ada Patient")
    with pytest.raises(ValidationError):
        check_delete_confirmation(user, typed)


def test_delete_confirmation_accepts_exact_name():
    check_delete_confirmation(SimpleNamespace(name="Ada Patient"), "Ada Patient")


def test_normalize_times_pads_dedupes_and_sorts():
    assert normalize_times(["20:00", "8:00", "08:00", " 13:30"]) == ["08:00", "13:30", "20:00"]


@pytest.mark.parametrize("bad", ["24:00", "8", "08:60", "noon", ""])
def test_normalize_times_rejects_garbage(bad):
    with pytest.raises(ValidationError):
        normalize_times([bad])


def test_schedule_needs_times_unless_as_needed():
    validate_schedule("Ibuprofen", "200mg", [], "as_needed")
    with pytest.raises(ValidationError):
        validate_schedule("Ibuprofen", "200mg", [], "daily")


def test_schedule_requires_name_dosage_and_known_frequency():
    with pytest.raises(ValidationError):
        validate_schedule(" ", "200mg", ["08:00"], "daily")
    with pytest.raises(ValidationError):
        validate_schedule("Ibuprofen", "", ["08:00"], "daily")
    with pytest.raises(ValidationError):
        validate_schedule("Ibuprofen", "200mg", ["08:00"], "hourly")


def test_digest_is_sha256_hex():
    assert digest("abc") == "ba7816bf8f01cfea414140de5dae2223b00361a396177a9cb410ff61f20015ad"
    assert digest("") == ""


def test_verify_password():
    stored = digest("hunter22")
    assert verify_password("hunter22", stored)
    assert not verify_password("hunter23", stored)
    assert not verify_password("", stored)
    assert not verify_password("", "")
