"""Database connection, session and transaction management."""

import logging
from contextlib import contextmanager
from typing import Iterator

from sqlalchemy import event
from sqlalchemy.engine import Engine
from sqlmodel import Session, SQLModel, create_engine

from gedkeeper.config import settings

logger = logging.getLogger(__name__)


def enable_sqlite_savepoints(sqlite_engine: Engine) -> None:
    """
    Let SQLAlchemy, not pysqlite, emit BEGIN, so that SAVEPOINTs work.
    """

    @event.listens_for(sqlite_engine, "connect")
    def _connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(sqlite_engine, "begin")
    def _begin(connection):
        connection.exec_driver_sql("BEGIN")


# Create engine
engine = create_engine(
    settings.database_url,
    echo=settings.debug,
    pool_pre_ping=True,
)
if engine.dialect.name == "sqlite":
    enable_sqlite_savepoints(engine)


def init_db() -> None:
    """Create all tables."""
    SQLModel.metadata.create_all(engine)


def get_session() -> Iterator[Session]:
    """Get database session."""
    with Session(engine) as session:
        yield session


@contextmanager
def transaction(session: Session) -> Iterator[Session]:
    """
    Run a unit of work atomically.

    Commits when the block completes; on any error, rolls back and
    re-raises the original exception.
    """
    try:
        yield session
        session.commit()
    except BaseException:
        logger.debug("Rolling back transaction")
        session.rollback()
        raise


def get_transactional_session() -> Iterator[Session]:
    """Get a database session wrapped in a single request transaction."""
    with Session(engine) as session:
        with transaction(session):
            yield session
