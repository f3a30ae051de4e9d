"""Module: medication."""

import uuid
from datetime import datetime
from sqlalchemy import JSON, Boolean, DateTime, ForeignKey, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from medsguardian.db.base import Base

FREQUENCIES = ("daily", "weekly", "as_needed")


# A prescribed item owned by one patient, with its daily reminder times.
class Medication(Base):
    __tablename__ = "medications"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    patient_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    name: Mapped[str] = mapped_column(String, nullable=False)
    dosage: Mapped[str] = mapped_column(String, nullable=False)
    # Zero-padded "HH:MM" strings, deduplicated and sorted ascending.
    times: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    frequency: Mapped[str] = mapped_column(String, nullable=False, default="daily")
    is_high_priority: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    image_url: Mapped[str | None] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.now)
