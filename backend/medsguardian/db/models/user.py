import uuid
from sqlalchemy import String, DateTime, ForeignKey, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column
from datetime import datetime

from medsguardian.db.base import Base

PATIENT = "Patient"
GUARDIAN = "Guardian"
VALID_ROLES = (PATIENT, GUARDIAN)


class User(Base):
    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4
    )

    name: Mapped[str] = mapped_column(String, nullable=False)
    email: Mapped[str] = mapped_column(String, unique=True, nullable=False)
    # Hex digest of the password, never the plaintext.
    password: Mapped[str] = mapped_column(String, nullable=False)
    role: Mapped[str] = mapped_column(String, nullable=False, default=PATIENT)

    # Patients only: the care code guardians type in at signup.
    patient_code: Mapped[str | None] = mapped_column(String, unique=True, nullable=True)
    # Guardians only: the patient they follow. A reference, not ownership.
    linked_patient_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )
    avatar: Mapped[str | None] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime,
        default=datetime.now
    )

    @property
    def is_patient(self) -> bool:
        return self.role == PATIENT

    @property
    def is_guardian(self) -> bool:
        return self.role == GUARDIAN
