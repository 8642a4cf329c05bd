from typing import List
from fastapi import APIRouter, Depends, Query
import logging

from ..application.ports.identity import Actor
from ..application.services.notifications_service import NotificationsService
from ..auth import get_current_actor
from ..dependencies import get_notifications_service
from ..schemas.notifications.notification import MarkAllReadResponse, NotificationResponse, UnreadCountResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/notifications", tags=["Notifications"])


@router.get("", response_model=List[NotificationResponse])
def get_notifications(
    unread: bool = Query(False),
    limit: int = Query(50, ge=1, le=100),
    offset: int = Query(0, ge=0),
    actor: Actor = Depends(get_current_actor),
    service: NotificationsService = Depends(get_notifications_service),
):
    rows = service.list_for_actor(actor, unread_only=unread, limit=limit, offset=offset)
    return [NotificationResponse.from_dto(n) for n in rows]


@router.get("/unread-count", response_model=UnreadCountResponse)
def get_unread_count(
    actor: Actor = Depends(get_current_actor),
    service: NotificationsService = Depends(get_notifications_service),
):
    return UnreadCountResponse(count=service.unread_count(actor))


@router.put("/read-all", response_model=MarkAllReadResponse)
def mark_all_notifications_read(
    actor: Actor = Depends(get_current_actor),
    service: NotificationsService = Depends(get_notifications_service),
):
    count = service.mark_all_read(actor)
    return MarkAllReadResponse(message="All notifications marked as read", updated_count=count)


@router.put("/{notification_id}/read", response_model=NotificationResponse)
def mark_notification_read(
    notification_id: int,
    actor: Actor = Depends(get_current_actor),
    service: NotificationsService = Depends(get_notifications_service),
):
    return NotificationResponse.from_dto(service.mark_read(actor, notification_id))
