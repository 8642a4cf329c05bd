# carebook/db/models/scheduling/appointment.py
from typing import Optional
from datetime import date, datetime

from sqlalchemy import DateTime, Index, text
from sqlmodel import SQLModel, Field

from ....utils import utcnow

ACTIVE_SLOT_CONDITION = "status IN ('PENDING', 'CONFIRMED')"


class Appointment(SQLModel, table=True):
    __tablename__ = "appointments"
    __table_args__ = (
        # At most one active appointment per doctor slot; losers of a booking race fail here
        Index(
            "uq_appointments_active_slot",
            "doctor_id",
            "appointment_date",
            "appointment_time",
            unique=True,
            sqlite_where=text(ACTIVE_SLOT_CONDITION),
            postgresql_where=text(ACTIVE_SLOT_CONDITION),
        ),
        Index("ix_appointments_doctor_date", "doctor_id", "appointment_date"),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    patient_id: int = Field(foreign_key="patients.id", index=True)
    doctor_id: int = Field(foreign_key="doctors.id")
    appointment_date: date
    appointment_time: str = Field(max_length=5)  # HH:MM
    appointment_type: str = Field(max_length=20)
    status: str = Field(default="PENDING", max_length=20)
    notes: str = Field(default="")
    created_at: datetime = Field(default_factory=utcnow, sa_type=DateTime(timezone=True))
    updated_at: datetime = Field(default_factory=utcnow, sa_type=DateTime(timezone=True))
