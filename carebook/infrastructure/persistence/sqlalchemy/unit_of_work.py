import logging
from typing import Optional

from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session

from ....application.ports.unit_of_work import UnitOfWork
from ....database import READ_ONLY_OPTION
from ....exceptions import PersistenceFailure
from .repositories.appointments_repository_sql import SqlAppointmentsRepository
from .repositories.directory_repository_sql import SqlDirectoryRepository
from .repositories.notifications_repository_sql import SqlNotificationsRepository

logger = logging.getLogger(__name__)


class SqlUnitOfWork(UnitOfWork):
    """One SQLModel session and one transaction.

    Nothing is written until ``commit()``; leaving the block any other way
    (domain error, database error, lock timeout) rolls everything back.
    A ``read_only`` unit of work takes no write lock on SQLite.
    """

    def __init__(self, engine: Engine, read_only: bool = False):
        self._engine = engine
        self.read_only = read_only
        self.session: Optional[Session] = None

    def __enter__(self) -> "SqlUnitOfWork":
        self.session = Session(self._engine, expire_on_commit=False)
        if self.read_only:
            # opens the transaction now, with the option visible to BEGIN
            try:
                self.session.connection(execution_options={READ_ONLY_OPTION: True})
            except SQLAlchemyError as e:
                self.session.close()
                logger.error(f"Could not open read transaction: {e}")
                raise PersistenceFailure("The data could not be read") from e
        self.appointments = SqlAppointmentsRepository(self.session)
        self.notifications = SqlNotificationsRepository(self.session)
        self.directory = SqlDirectoryRepository(self.session)
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        try:
            # no-op when commit() already succeeded
            self.session.rollback()
        finally:
            self.session.close()
        if isinstance(exc, SQLAlchemyError):
            logger.error(f"Transaction rolled back: {exc}")
            raise PersistenceFailure("The change could not be saved; nothing was applied") from exc

    def commit(self) -> None:
        self.session.commit()
