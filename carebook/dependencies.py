# carebook/dependencies.py
from typing import Callable

from fastapi import Depends

from .application.ports.unit_of_work import UnitOfWork
from .application.services.appointments_service import AppointmentsService
from .application.services.notifications_service import NotificationsService
from .config import settings
from .database import engine
from .infrastructure.audit.std_logger import StdAuditLogger
from .infrastructure.persistence.sqlalchemy.unit_of_work import SqlUnitOfWork


def get_uow_factory() -> Callable[..., UnitOfWork]:
    return lambda read_only=False: SqlUnitOfWork(engine, read_only=read_only)


def get_appointments_service(uow_factory: Callable[..., UnitOfWork] = Depends(get_uow_factory)) -> AppointmentsService:
    return AppointmentsService(
        uow_factory=uow_factory,
        audit=StdAuditLogger(),
        default_working_hours=settings.DEFAULT_WORKING_HOURS,
        slot_granularity_minutes=settings.SLOT_GRANULARITY_MINUTES,
        reject_past_dates=settings.REJECT_PAST_APPOINTMENTS,
    )


def get_notifications_service(uow_factory: Callable[..., UnitOfWork] = Depends(get_uow_factory)) -> NotificationsService:
    return NotificationsService(uow_factory=uow_factory)
