"""Module: med_log."""

import uuid
import datetime as dt
from sqlalchemy import Date, DateTime, ForeignKey, String, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from medsguardian.db.base import Base


# Completion marker for one dose on one day. Written once, never updated.
class MedLog(Base):
    __tablename__ = "med_logs"
    __table_args__ = (
        UniqueConstraint("med_id", "scheduled_time", "date", name="uq_med_logs_dose"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    med_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("medications.id", ondelete="CASCADE"),
        nullable=False,
    )
    patient_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    scheduled_time: Mapped[str] = mapped_column(String(5), nullable=False)
    date: Mapped[dt.date] = mapped_column(Date, nullable=False)
    taken_at: Mapped[dt.datetime | None] = mapped_column(DateTime, nullable=True)

    # Actor may be the patient or a guardian; the name is copied at write time.
    taken_by: Mapped[uuid.UUID | None] = mapped_column(Uuid, nullable=True)
    taken_by_name: Mapped[str | None] = mapped_column(String, nullable=True)
