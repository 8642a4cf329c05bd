# carebook/db/models/directory/doctor.py
from typing import Optional
from sqlalchemy import DateTime
from sqlmodel import SQLModel, Field
from datetime import datetime

from ....utils import utcnow


class Doctor(SQLModel, table=True):
    __tablename__ = "doctors"
    id: Optional[int] = Field(default=None, primary_key=True)
    name: str
    specialization: str = Field(default="")
    working_hours: Optional[str] = Field(default=None, max_length=11)  # HH:MM-HH:MM
    created_at: datetime = Field(default_factory=utcnow, sa_type=DateTime(timezone=True))
