import logging
from typing import Optional

from sqlalchemy import event
from sqlalchemy.engine import Engine
from sqlmodel import SQLModel, create_engine

from .config import settings

logger = logging.getLogger(__name__)

# Execution option marking a connection that only reads
READ_ONLY_OPTION = "carebook_read_only"


def build_engine(db_url: str, echo: bool = False) -> Engine:
    """Create an engine whose transactions are safe for slot booking.

    SQLite has no row locks, so every write transaction opens with
    ``BEGIN IMMEDIATE``: writers are serialized and the conflict check always
    sees every previously committed booking. Connections carrying the
    ``READ_ONLY_OPTION`` execution option open a deferred ``BEGIN`` instead and
    never wait behind a writer. Server databases rely on
    ``SELECT ... FOR UPDATE`` plus the partial unique index on active slots.
    """
    engine_kwargs = {}

    if db_url.startswith("sqlite"):
        engine_kwargs.update({
            "connect_args": {
                "check_same_thread": False,
                "timeout": settings.DB_LOCK_TIMEOUT_SECONDS,
            }
        })
    else:
        # Better resiliency for managed Postgres
        engine_kwargs.update({
            "pool_pre_ping": True,
            "pool_recycle": 300,
            "pool_size": 5,
            "max_overflow": 10,
        })

    new_engine = create_engine(db_url, echo=echo, **engine_kwargs)

    if db_url.startswith("sqlite"):
        _use_immediate_transactions(new_engine)

    return new_engine


def _use_immediate_transactions(sqlite_engine: Engine) -> None:
    @event.listens_for(sqlite_engine, "connect")
    def _disable_pysqlite_transactions(dbapi_connection, connection_record):
        # let SQLAlchemy emit BEGIN itself
        dbapi_connection.isolation_level = None

    @event.listens_for(sqlite_engine, "begin")
    def _begin(conn):
        if conn.get_execution_options().get(READ_ONLY_OPTION):
            conn.exec_driver_sql("BEGIN")
        else:
            conn.exec_driver_sql("BEGIN IMMEDIATE")


engine = build_engine(settings.DATABASE_URL, echo=settings.DEBUG)


def create_db_and_tables(target: Optional[Engine] = None) -> None:
    # register table models on the metadata before create_all
    from .db import models  # noqa: F401

    SQLModel.metadata.create_all(target or engine)
    logger.info("Database tables ensured")
