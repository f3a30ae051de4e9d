import uuid
from datetime import date, datetime

import pytest
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session

from medsguardian.core.errors import ConfigurationError, NotFoundError, StorageError
from medsguardian.db.models.medication import Medication
from medsguardian.db.models.user import User
from medsguardian.services import medications
from medsguardian.services.events import ChangeFeed
from medsguardian.services.storage import Storage

TODAY = date(2026, 3, 2)


@pytest.fixture
def unconfigured():
    return Storage(None, ChangeFeed())


@pytest.fixture
def med(storage, guardian):
    return medications.save_medication(
        storage, guardian, name="Aspirin", dosage="81mg", times=["20:00", "08:00"]
    )


def test_unconfigured_reads_come_back_empty(unconfigured):
    assert not unconfigured.is_configured
    assert unconfigured.list_users() == []
    assert unconfigured.get_user(uuid.uuid4()) is None
    assert unconfigured.find_user_by_email("a@b.c") is None
    assert unconfigured.list_medications(uuid.uuid4()) == []
    assert unconfigured.list_logs_for_date(uuid.uuid4(), TODAY) == []
    assert unconfigured.patient_code_exists("MG-123456") is False


def test_unconfigured_writes_raise(unconfigured):
    user = User(id=uuid.uuid4(), name="A", email="a@b.c", password="x", role="Patient")
    with pytest.raises(ConfigurationError):
        unconfigured.upsert_user(user)
    with pytest.raises(ConfigurationError):
        unconfigured.update_user_fields(user.id, name="B")
    with pytest.raises(ConfigurationError):
        unconfigured.delete_medication_cascade(uuid.uuid4())
    assert unconfigured.feed.revision == 0


def test_failing_reads_raise_storage_error(storage, monkeypatch):
    def boom(self, *args, **kwargs):
        raise OperationalError("SELECT", {}, Exception("connection reset"))

    monkeypatch.setattr(Session, "scalars", boom)
    with pytest.raises(StorageError):
        storage.list_users()


def test_medication_times_are_stored_sorted(storage, med, patient):
    [stored] = storage.list_medications(patient.id)
    assert stored.times == ["08:00", "20:00"]
    assert stored.patient_id == patient.id


def test_update_unknown_user(storage):
    with pytest.raises(NotFoundError):
        storage.update_user_fields(uuid.uuid4(), name="Nobody")


def test_update_rejects_unknown_fields(storage, patient):
    with pytest.raises(ValueError):
        storage.update_user_fields(patient.id, role="Guardian")


def test_insert_log_if_absent_is_idempotent(storage, med, patient, guardian):
    first, created = storage.insert_log_if_absent(
        med.id, "08:00", TODAY, guardian, patient.id, datetime(2026, 3, 2, 8, 5)
    )
    second, created_again = storage.insert_log_if_absent(
        med.id, "08:00", TODAY, patient, patient.id, datetime(2026, 3, 2, 8, 6)
    )
    assert created is True
    assert created_again is False
    assert second.id == first.id
    assert second.taken_by == guardian.id
    assert second.taken_by_name == "Gus Guardian"
    assert len(storage.list_logs_for_date(patient.id, TODAY)) == 1


def test_logs_are_filtered_by_date(storage, med, patient):
    storage.insert_log_if_absent(med.id, "08:00", TODAY, patient, patient.id, datetime(2026, 3, 2, 8, 5))
    storage.insert_log_if_absent(
        med.id, "08:00", date(2026, 3, 1), patient, patient.id, datetime(2026, 3, 1, 8, 5)
    )
    assert [log.date for log in storage.list_logs_for_date(patient.id, TODAY)] == [TODAY]


def test_delete_medication_cascades_to_logs(storage, med, patient):
    storage.insert_log_if_absent(med.id, "08:00", TODAY, patient, patient.id, datetime(2026, 3, 2, 8, 5))
    storage.delete_medication_cascade(med.id)
    assert storage.get_medication(med.id) is None
    assert storage.list_logs_for_date(patient.id, TODAY) == []


def test_delete_user_is_all_or_nothing(storage, med, patient, monkeypatch):
    storage.insert_log_if_absent(med.id, "08:00", TODAY, patient, patient.id, datetime(2026, 3, 2, 8, 5))

    def boom(self, instance):
        raise OperationalError("DELETE", {}, Exception("connection lost"))

    # The dependent rows are deleted first; failing on the user row must undo them.
    monkeypatch.setattr(Session, "delete", boom)
    with pytest.raises(StorageError):
        storage.delete_user_cascade(patient.id)
    monkeypatch.undo()

    assert storage.get_user(patient.id) is not None
    assert [m.id for m in storage.list_medications(patient.id)] == [med.id]
    assert len(storage.list_logs_for_date(patient.id, TODAY)) == 1


def test_writes_publish_changes(storage, feed, patient):
    events = []
    unsubscribe = feed.subscribe(events.append)

    med = Medication(
        id=uuid.uuid4(), patient_id=patient.id, name="Zinc", dosage="1 tab", times=["09:00"]
    )
    storage.upsert_medication(med)
    storage.delete_medication_cascade(med.id)
    unsubscribe()
    storage.update_user_fields(patient.id, name="Quiet")

    assert [(e.kind, e.patient_id) for e in events] == [
        ("medication", patient.id),
        ("medication", patient.id),
    ]
    assert feed.revision_for(patient.id) == feed.revision


def test_reads_do_not_publish(storage, feed, patient):
    before = feed.revision
    storage.list_users()
    storage.list_medications(patient.id)
    assert feed.revision == before


def test_insert_log_race_returns_winning_row(storage, med, patient, guardian, monkeypatch):
    first, _ = storage.insert_log_if_absent(
        med.id, "08:00", TODAY, guardian, patient.id, datetime(2026, 3, 2, 8, 5)
    )

    real_find = Storage._find_log
    calls = []

    def stale_find(self, db, *args):
        # The first lookup misses the row, as if the other writer had not committed yet.
        calls.append(args)
        if len(calls) == 1:
            return None
        return real_find(self, db, *args)

    monkeypatch.setattr(Storage, "_find_log", stale_find)
    log, created = storage.insert_log_if_absent(
        med.id, "08:00", TODAY, patient, patient.id, datetime(2026, 3, 2, 8, 6)
    )

    assert created is False
    assert log.id == first.id
    assert log.taken_by_name == "Gus Guardian"
    assert len(calls) == 2
    assert len(storage.list_logs_for_date(patient.id, TODAY)) == 1
