from dataclasses import dataclass
from typing import List, Optional, Protocol
from datetime import datetime


@dataclass
class NotificationDraft:
    user_id: int
    recipient_role: str
    title: str
    message: str
    notification_type: str
    reference_id: Optional[int]


@dataclass
class NotificationDto:
    id: int
    user_id: int
    recipient_role: str
    title: str
    message: str
    notification_type: str
    reference_id: Optional[int]
    is_read: bool
    read_at: Optional[datetime]
    created_at: datetime


class NotificationsRepository(Protocol):
    def add(self, draft: NotificationDraft) -> NotificationDto:
        ...

    def get(self, notification_id: int) -> Optional[NotificationDto]:
        ...

    def get_for_user(self, notification_id: int, user_id: int, recipient_role: str) -> Optional[NotificationDto]:
        ...

    def list_for_user(self, user_id: int, recipient_role: str, unread_only: bool = False, limit: int = 50, offset: int = 0) -> List[NotificationDto]:
        ...

    def list_for_reference(self, reference_id: int) -> List[NotificationDto]:
        ...

    def mark_read(self, notification_id: int) -> NotificationDto:
        ...

    def mark_all_read(self, user_id: int, recipient_role: str) -> int:
        ...

    def unread_count(self, user_id: int, recipient_role: str) -> int:
        ...
