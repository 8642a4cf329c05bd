from typing import List, Optional

from sqlmodel import Session, func, select

from .....db.models import Notification
from .....application.ports.notifications_repo import NotificationsRepository, NotificationDraft, NotificationDto
from .....exceptions import NotFound
from .....utils import utcnow


class SqlNotificationsRepository(NotificationsRepository):
    def __init__(self, session: Session):
        self.session = session

    def _to_dto(self, n: Notification) -> NotificationDto:
        return NotificationDto(
            id=n.id,
            user_id=n.user_id,
            recipient_role=n.recipient_role,
            title=n.title,
            message=n.message,
            notification_type=n.notification_type,
            reference_id=n.reference_id,
            is_read=n.is_read,
            read_at=n.read_at,
            created_at=n.created_at,
        )

    def _for_user(self, user_id: int, recipient_role: str):
        return (
            select(Notification)
            .where(Notification.user_id == user_id)
            .where(Notification.recipient_role == recipient_role)
        )

    def add(self, draft: NotificationDraft) -> NotificationDto:
        n = Notification(
            user_id=draft.user_id,
            recipient_role=draft.recipient_role,
            title=draft.title,
            message=draft.message,
            notification_type=draft.notification_type,
            reference_id=draft.reference_id,
            is_read=False,
        )
        self.session.add(n)
        self.session.flush()
        return self._to_dto(n)

    def get(self, notification_id: int) -> Optional[NotificationDto]:
        n = self.session.exec(select(Notification).where(Notification.id == notification_id)).first()
        return self._to_dto(n) if n else None

    def get_for_user(self, notification_id: int, user_id: int, recipient_role: str) -> Optional[NotificationDto]:
        n = self.session.exec(self._for_user(user_id, recipient_role).where(Notification.id == notification_id)).first()
        return self._to_dto(n) if n else None

    def list_for_user(self, user_id: int, recipient_role: str, unread_only: bool = False, limit: int = 50, offset: int = 0) -> List[NotificationDto]:
        query = self._for_user(user_id, recipient_role)
        if unread_only:
            query = query.where(Notification.is_read == False)  # noqa: E712
        rows = self.session.exec(
            query.order_by(Notification.created_at.desc(), Notification.id.desc()).offset(offset).limit(limit)
        ).all()
        return [self._to_dto(n) for n in rows]

    def list_for_reference(self, reference_id: int) -> List[NotificationDto]:
        rows = self.session.exec(
            select(Notification)
            .where(Notification.reference_id == reference_id)
            .order_by(Notification.id.asc())
        ).all()
        return [self._to_dto(n) for n in rows]

    def mark_read(self, notification_id: int) -> NotificationDto:
        n = self.session.exec(select(Notification).where(Notification.id == notification_id)).first()
        if not n:
            raise NotFound("Notification not found", notification_id=notification_id)
        n.is_read = True
        n.read_at = utcnow()
        self.session.add(n)
        self.session.flush()
        return self._to_dto(n)

    def mark_all_read(self, user_id: int, recipient_role: str) -> int:
        unread = self.session.exec(
            self._for_user(user_id, recipient_role).where(Notification.is_read == False)  # noqa: E712
        ).all()
        now = utcnow()
        for n in unread:
            n.is_read = True
            n.read_at = now
            self.session.add(n)
        self.session.flush()
        return len(unread)

    def unread_count(self, user_id: int, recipient_role: str) -> int:
        return self.session.exec(
            select(func.count())
            .select_from(Notification)
            .where(Notification.user_id == user_id)
            .where(Notification.recipient_role == recipient_role)
            .where(Notification.is_read == False)  # noqa: E712
        ).one()
