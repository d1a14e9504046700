"""Database Session Manager - connection pool with automatic rollback and health checks.

Invariants:
    - Every session auto-rolls-back on exception (no partial commits leak)
    - Connection pool uses pool_pre_ping for stale connection detection
    - Raw SQLAlchemy exceptions mapped to DatabaseError (core/errors.py);
      RosterError raised inside a session propagates unchanged after rollback

Design Decisions:
    - Singleton db_manager initialized by bootstrap(): no global import side effects
    - expire_on_commit=False: returned entities stay readable after commit
    - SQLite URLs skip pool sizing (SingletonThreadPool/QueuePool defaults)
"""

import logging
from contextlib import contextmanager
from typing import Generator

from sqlalchemy import create_engine, text
from sqlalchemy.exc import (
    DBAPIError, IntegrityError, OperationalError, SQLAlchemyError,
)
from sqlalchemy.orm import Session, sessionmaker

from ringside.core.errors import DatabaseError, RosterError

logger = logging.getLogger(__name__)


class DatabaseSessionManager:
    """Manages database sessions with pooling, rollback, and health checks."""

    def __init__(
        self,
        database_url: str,
        pool_size: int = 20,
        max_overflow: int = 10,
        echo: bool = False,
    ):
        engine_kwargs: dict = {"echo": echo, "pool_pre_ping": True}
        if not database_url.startswith("sqlite"):
            engine_kwargs.update(
                pool_size=pool_size,
                max_overflow=max_overflow,
                pool_recycle=3600,
            )
        self.engine = create_engine(database_url, **engine_kwargs)
        self._session_factory = sessionmaker(
            self.engine,
            class_=Session,
            expire_on_commit=False,
        )

    @contextmanager
    def session(self) -> Generator[Session, None, None]:
        """Provide session with auto-rollback on exception."""
        session = self._session_factory()
        try:
            yield session
        except RosterError:
            session.rollback()
            raise
        except IntegrityError as e:
            session.rollback()
            logger.error(f"DB integrity error: {e}", extra={"error_code": "DATABASE_ERROR"})
            raise DatabaseError("Integrity constraint violated", "commit") from e
        except OperationalError as e:
            session.rollback()
            logger.error(f"DB operational error: {e}", extra={"error_code": "DATABASE_ERROR"})
            raise DatabaseError("Connection or operational error", "execute") from e
        except DBAPIError as e:
            session.rollback()
            logger.error(f"DB driver error: {e}", extra={"error_code": "DATABASE_ERROR"})
            raise DatabaseError("Database driver error", "query") from e
        except SQLAlchemyError as e:
            session.rollback()
            logger.error(f"SQLAlchemy error: {e}", extra={"error_code": "DATABASE_ERROR"})
            raise DatabaseError("Database operation failed", "unknown") from e
        finally:
            session.close()

    def health_check(self) -> bool:
        """Check database connectivity."""
        try:
            with self.session() as db:
                db.execute(text("SELECT 1"))
            return True
        except DatabaseError as e:
            logger.error(f"DB health check failed: {e}")
            return False

    def dispose(self) -> None:
        self.engine.dispose()


# Singleton (initialized by bootstrap)
db_manager: DatabaseSessionManager | None = None


def init_db(database_url: str, **kwargs) -> DatabaseSessionManager:
    global db_manager
    db_manager = DatabaseSessionManager(database_url, **kwargs)
    return db_manager


def get_db() -> Generator[Session, None, None]:
    """Request-scoped session for action handlers and listing views."""
    if not db_manager:
        raise RuntimeError("Database not initialized")
    with db_manager.session() as session:
        yield session
