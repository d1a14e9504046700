"""Session Factory - provides DB sessions for direct usage outside the manager.

Invariants:
    - Meant for scripts and test fixtures
    - expire_on_commit=False, same as DatabaseSessionManager

Design Decisions:
    - Separate from infrastructure/database.py: fixtures need a raw factory
      bound to an engine they control (in-memory or file-backed SQLite)
"""

from sqlalchemy import Engine, create_engine
from sqlalchemy.orm import Session, sessionmaker


def create_session_factory(
    database_url: str | None = None, engine: Engine | None = None,
) -> sessionmaker[Session]:
    """Create a session factory for the given database URL or engine."""
    if engine is None:
        if database_url is None:
            raise ValueError("database_url or engine is required")
        engine = create_engine(database_url, echo=False)
    return sessionmaker(engine, class_=Session, expire_on_commit=False)
