# carebook/db/models/scheduling/notification.py
from typing import Optional
from sqlalchemy import DateTime
from sqlmodel import SQLModel, Field
from datetime import datetime

from ....utils import utcnow


class Notification(SQLModel, table=True):
    __tablename__ = "notifications"
    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(index=True)
    recipient_role: str = Field(max_length=20)
    title: str
    message: str
    notification_type: str = Field(default="APPOINTMENT", max_length=30)
    reference_id: Optional[int] = Field(default=None, foreign_key="appointments.id")
    is_read: bool = Field(default=False)
    read_at: Optional[datetime] = Field(default=None, sa_type=DateTime(timezone=True))
    created_at: datetime = Field(default_factory=utcnow, sa_type=DateTime(timezone=True))
