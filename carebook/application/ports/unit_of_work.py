from typing import Protocol

from .appointments_repo import AppointmentsRepository
from .directory_repo import DirectoryRepository
from .notifications_repo import NotificationsRepository


class UnitOfWork(Protocol):
    """One database transaction.

    Used as a context manager: everything done through its repositories
    lands on ``commit()`` and is rolled back on any other exit. Factories
    accept ``read_only=True`` for units of work that never write.
    """

    appointments: AppointmentsRepository
    notifications: NotificationsRepository
    directory: DirectoryRepository

    def __enter__(self) -> "UnitOfWork":
        ...

    def __exit__(self, exc_type, exc, tb) -> None:
        ...

    def commit(self) -> None:
        ...
