"""Module: storage.

The one place that talks to the database. Reads soft-fail when no database is
configured (empty list / None) so screens still render; writes always raise so
the caller can tell the user their change was not saved.
"""

from __future__ import annotations

import logging
import uuid
from contextlib import contextmanager
from datetime import date, datetime
from typing import Any, Callable, Iterator, TypeVar

from sqlalchemy import delete, func, or_, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from medsguardian.core.errors import (
    ConfigurationError,
    IntegrityConflict,
    NotFoundError,
    StorageError,
)
from medsguardian.db.models.med_log import MedLog
from medsguardian.db.models.medication import Medication
from medsguardian.db.models.user import GUARDIAN, PATIENT, User
from medsguardian.services.events import ChangeEvent, ChangeFeed

logger = logging.getLogger(__name__)

T = TypeVar("T")

UPDATABLE_USER_FIELDS = {"name", "email", "password", "avatar"}


class Storage:
    def __init__(self, session_factory: sessionmaker | None, feed: ChangeFeed | None = None):
        self._session_factory = session_factory
        self.feed = feed or ChangeFeed()

    @property
    def is_configured(self) -> bool:
        return self._session_factory is not None

    # -------------------------
    # Plumbing
    # -------------------------
    @contextmanager
    def _session(self) -> Iterator[Session]:
        if self._session_factory is None:
            raise ConfigurationError()
        db = self._session_factory()
        try:
            yield db
        finally:
            db.close()

    def _read(self, op: str, fn: Callable[[Session], T], default: T) -> T:
        try:
            with self._session() as db:
                return fn(db)
        except ConfigurationError:
            logger.debug("Store not configured; %s returns empty", op)
            return default
        except SQLAlchemyError as exc:
            logger.error("DB Error (%s): %s", op, exc)
            raise StorageError() from exc

    def _write(self, op: str, fn: Callable[[Session], T]) -> T:
        try:
            with self._session() as db:
                try:
                    result = fn(db)
                    db.commit()
                except Exception:
                    db.rollback()
                    raise
                return result
        except ConfigurationError:
            logger.warning("Store not configured; %s was not saved", op)
            raise
        except IntegrityError as exc:
            logger.info("Integrity conflict (%s): %s", op, exc.orig)
            raise IntegrityConflict() from exc
        except SQLAlchemyError as exc:
            logger.error("DB Error (%s): %s", op, exc)
            raise StorageError() from exc

    def _changed(self, kind: str, patient_id: uuid.UUID | None) -> None:
        self.feed.publish(ChangeEvent(kind=kind, patient_id=patient_id))

    # -------------------------
    # Users
    # -------------------------
    def list_users(self) -> list[User]:
        return self._read("list_users", lambda db: list(db.scalars(select(User))), [])

    def get_user(self, user_id: uuid.UUID) -> User | None:
        return self._read("get_user", lambda db: db.get(User, user_id), None)

    def find_user_by_email(self, email: str) -> User | None:
        normalized = email.strip().lower()
        return self._read(
            "find_user_by_email",
            lambda db: db.execute(
                select(User).where(func.lower(User.email) == normalized)
            ).scalar_one_or_none(),
            None,
        )

    def find_patient_by_code(self, code: str) -> User | None:
        return self._read(
            "find_patient_by_code",
            lambda db: db.execute(
                select(User).where(User.role == PATIENT, User.patient_code == code)
            ).scalar_one_or_none(),
            None,
        )

    def patient_code_exists(self, code: str) -> bool:
        return self._read(
            "patient_code_exists",
            lambda db: db.execute(
                select(User.id).where(User.patient_code == code)
            ).first() is not None,
            False,
        )

    def list_guardians_for(self, patient_id: uuid.UUID) -> list[User]:
        return self._read(
            "list_guardians_for",
            lambda db: list(
                db.scalars(
                    select(User)
                    .where(User.role == GUARDIAN, User.linked_patient_id == patient_id)
                    .order_by(User.name)
                )
            ),
            [],
        )

    def upsert_user(self, user: User) -> User:
        saved = self._write("upsert_user", lambda db: db.merge(user))
        self._changed("user", saved.id if saved.is_patient else saved.linked_patient_id)
        return saved

    def update_user_fields(self, user_id: uuid.UUID, **fields: Any) -> User:
        unknown = set(fields) - UPDATABLE_USER_FIELDS
        if unknown:
            raise ValueError(f"Cannot update user fields: {sorted(unknown)}")

        def apply(db: Session) -> User:
            user = db.get(User, user_id)
            if user is None:
                raise NotFoundError("Account not found")
            for key, value in fields.items():
                setattr(user, key, value)
            db.flush()
            return user

        user = self._write("update_user_fields", apply)
        self._changed("user", user.id if user.is_patient else user.linked_patient_id)
        return user

    def delete_user_cascade(self, user_id: uuid.UUID) -> None:
        """Remove a user and every row that depends on it in one transaction."""

        def apply(db: Session) -> User:
            user = db.get(User, user_id)
            if user is None:
                raise NotFoundError("Account not found")
            db.execute(
                delete(MedLog).where(or_(MedLog.patient_id == user_id, MedLog.taken_by == user_id))
            )
            db.execute(delete(Medication).where(Medication.patient_id == user_id))
            # Guardians keep their accounts; they just lose the link.
            db.execute(
                update(User).where(User.linked_patient_id == user_id).values(linked_patient_id=None)
            )
            db.delete(user)
            return user

        user = self._write("delete_user_cascade", apply)
        self._changed("user", user.id if user.is_patient else user.linked_patient_id)

    # -------------------------
    # Medications
    # -------------------------
    def list_medications(self, patient_id: uuid.UUID) -> list[Medication]:
        return self._read(
            "list_medications",
            lambda db: list(
                db.scalars(
                    select(Medication)
                    .where(Medication.patient_id == patient_id)
                    .order_by(Medication.created_at, Medication.name)
                )
            ),
            [],
        )

    def get_medication(self, med_id: uuid.UUID) -> Medication | None:
        return self._read("get_medication", lambda db: db.get(Medication, med_id), None)

    def upsert_medication(self, med: Medication) -> Medication:
        saved = self._write("upsert_medication", lambda db: db.merge(med))
        self._changed("medication", saved.patient_id)
        return saved

    def delete_medication_cascade(self, med_id: uuid.UUID) -> None:
        def apply(db: Session) -> uuid.UUID:
            med = db.get(Medication, med_id)
            if med is None:
                raise NotFoundError("Medication not found")
            db.execute(delete(MedLog).where(MedLog.med_id == med_id))
            db.delete(med)
            return med.patient_id

        patient_id = self._write("delete_medication_cascade", apply)
        self._changed("medication", patient_id)

    # -------------------------
    # Logs
    # -------------------------
    def list_logs_for_date(self, patient_id: uuid.UUID, day: date) -> list[MedLog]:
        return self._read(
            "list_logs_for_date",
            lambda db: list(
                db.scalars(
                    select(MedLog).where(MedLog.patient_id == patient_id, MedLog.date == day)
                )
            ),
            [],
        )

    def _find_log(self, db: Session, med_id: uuid.UUID, scheduled_time: str, day: date) -> MedLog | None:
        return db.execute(
            select(MedLog).where(
                MedLog.med_id == med_id,
                MedLog.scheduled_time == scheduled_time,
                MedLog.date == day,
            )
        ).scalar_one_or_none()

    def insert_log_if_absent(
        self,
        med_id: uuid.UUID,
        scheduled_time: str,
        day: date,
        actor: User,
        patient_id: uuid.UUID,
        taken_at: datetime,
    ) -> tuple[MedLog, bool]:
        """
        Record a dose as taken unless it already is.

        Returns ``(log, created)``. When two writers race, the unique
        (med_id, scheduled_time, date) constraint lets exactly one insert win
        and the loser gets the winner's row back.
        """

        def apply(db: Session) -> tuple[MedLog, bool]:
            existing = self._find_log(db, med_id, scheduled_time, day)
            if existing is not None:
                return existing, False
            log = MedLog(
                id=uuid.uuid4(),
                med_id=med_id,
                patient_id=patient_id,
                scheduled_time=scheduled_time,
                date=day,
                taken_at=taken_at,
                taken_by=actor.id,
                taken_by_name=actor.name,
            )
            db.add(log)
            db.flush()
            return log, True

        try:
            log, created = self._write("insert_log_if_absent", apply)
        except IntegrityConflict:
            existing = self._read(
                "insert_log_if_absent",
                lambda db: self._find_log(db, med_id, scheduled_time, day),
                None,
            )
            if existing is None:
                raise
            return existing, False

        if created:
            self._changed("log", patient_id)
        return log, created
