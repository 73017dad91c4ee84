import logging
from contextlib import contextmanager

from sqlalchemy import create_engine
from sqlalchemy.exc import IntegrityError, OperationalError, SQLAlchemyError
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from config import settings
from exceptions import Conflict, InternalError

logger = logging.getLogger(__name__)


def create_db_engine(url: str):
    if url.startswith("sqlite"):
        # one shared connection, so ":memory:" databases survive across sessions
        return create_engine(
            url,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    return create_engine(
        url,
        pool_pre_ping=True,
        pool_recycle=300,
        pool_size=settings.DB_POOL_SIZE,
        max_overflow=settings.DB_MAX_OVERFLOW,
        pool_timeout=settings.DB_POOL_TIMEOUT,
    )


engine = create_db_engine(settings.database_url)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


SERIALIZATION_FAILURE = "40001"
DEADLOCK_DETECTED = "40P01"


def _is_concurrency_failure(error: OperationalError) -> bool:
    # PostgreSQL SQLSTATE codes, exposed by psycopg2 as ``pgcode``
    return getattr(error.orig, "pgcode", None) in (SERIALIZATION_FAILURE, DEADLOCK_DETECTED)


@contextmanager
def transaction(db: Session):
    """Run a block of ledger writes as one unit.

    Commits when the block finishes, rolls back on any exception. Constraint
    violations, deadlocks and serialization failures mean another
    transaction got there first and come out as ``Conflict``, which callers
    may retry. Other store failures come out as ``InternalError``; ledger
    errors propagate as raised.
    """
    try:
        yield db
        db.commit()
    except (IntegrityError, OperationalError) as e:
        db.rollback()
        if isinstance(e, OperationalError) and not _is_concurrency_failure(e):
            logger.exception("Transaction rolled back after a database error")
            raise InternalError(f"Database error: {e.orig}") from e
        logger.warning("Transaction rolled back after a concurrent write: %s", e.orig)
        raise Conflict(f"Concurrent update rejected by the database: {e.orig}") from e
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception("Transaction rolled back after a database error")
        raise InternalError(f"Database error: {e}") from e
    except Exception:
        db.rollback()
        raise
