import logging
from dataclasses import dataclass
from typing import Callable, List

from ...exceptions import NotFound
from ..ports.identity import Actor
from ..ports.notifications_repo import NotificationDto
from ..ports.unit_of_work import UnitOfWork

logger = logging.getLogger(__name__)


@dataclass
class NotificationsService:
    """Read side of the notification rows written by the scheduling engine."""

    uow_factory: Callable[..., UnitOfWork]

    def list_for_actor(self, actor: Actor, unread_only: bool = False, limit: int = 50, offset: int = 0) -> List[NotificationDto]:
        with self.uow_factory(read_only=True) as uow:
            return uow.notifications.list_for_user(actor.user_id, actor.role.value, unread_only=unread_only, limit=limit, offset=offset)

    def unread_count(self, actor: Actor) -> int:
        with self.uow_factory(read_only=True) as uow:
            return uow.notifications.unread_count(actor.user_id, actor.role.value)

    def mark_read(self, actor: Actor, notification_id: int) -> NotificationDto:
        """Mark one notification read; recipients see only their own, admins any."""
        with self.uow_factory() as uow:
            if actor.is_admin:
                n = uow.notifications.get(notification_id)
            else:
                n = uow.notifications.get_for_user(notification_id, actor.user_id, actor.role.value)
            if not n:
                raise NotFound("Notification not found", notification_id=notification_id)
            if not n.is_read:
                n = uow.notifications.mark_read(notification_id)
                uow.commit()
        return n

    def mark_all_read(self, actor: Actor) -> int:
        with self.uow_factory() as uow:
            count = uow.notifications.mark_all_read(actor.user_id, actor.role.value)
            uow.commit()
        logger.info(f"Marked {count} notification(s) read for {actor.role.value} {actor.user_id}")
        return count
