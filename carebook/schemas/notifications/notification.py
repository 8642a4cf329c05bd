# carebook/schemas/notifications/notification.py
from dataclasses import asdict
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class NotificationResponse(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: int
    user_id: int
    recipient_role: str
    title: str
    message: str
    notification_type: str
    reference_id: Optional[int] = None
    is_read: bool
    read_at: Optional[datetime] = None
    created_at: datetime

    @classmethod
    def from_dto(cls, n) -> "NotificationResponse":
        return cls.model_validate(asdict(n))


class UnreadCountResponse(BaseModel):
    count: int


class MarkAllReadResponse(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    success: bool = True
    message: str
    updated_count: int
