from contextlib import contextmanager
from typing import Iterator

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker, declarative_base

from core.config import settings
from core.exceptions import StorageFailure
from utils.logger import get_logger

logger = get_logger(__name__)

connect_args = {"check_same_thread": False} if settings.DATABASE_URL.startswith("sqlite") else {}

engine = create_engine(settings.DATABASE_URL, connect_args=connect_args)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


@event.listens_for(Engine, "connect")
def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    # SQLite ignores ON DELETE CASCADE / SET NULL unless this is on per connection
    if type(dbapi_connection).__module__.startswith("sqlite3"):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


def init_db(bind: Engine = engine):
    """Create every table registered on Base."""
    import models  # noqa: F401  (registers the mappers)

    Base.metadata.create_all(bind=bind)


@contextmanager
def transaction(db: Session, failure: type[StorageFailure] = StorageFailure) -> Iterator[Session]:
    """
    One atomic unit of work.

    Commits when the block finishes. Any error rolls back everything the
    block wrote; database errors are logged and re-raised as `failure`
    so callers never see driver details.
    """
    try:
        yield db
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error(
            f"Database error: {exc.__class__.__name__}",
            extra={"error_type": type(exc).__name__, "failure": failure.__name__},
            exc_info=True
        )
        raise failure() from exc
    except Exception:
        db.rollback()
        raise


@contextmanager
def storage_errors(db: Session) -> Iterator[Session]:
    """Read-only counterpart of transaction(): translate errors, never commit."""
    try:
        yield db
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error(
            f"Database error: {exc.__class__.__name__}",
            extra={"error_type": type(exc).__name__},
            exc_info=True
        )
        raise StorageFailure() from exc
