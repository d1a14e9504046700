"""Ringside Engine - process bootstrap for hosts that embed the engine.

Invariants:
    - bootstrap() is the only place logging, the session manager and the
      schema are set up; importing ringside has no side effects
    - Tables are created with Base.metadata.create_all (no migrations)
    - A failed bootstrap leaves no engine handler on the root logger
"""

import logging

from ringside.config import Settings, get_settings
from ringside.db.base import Base
from ringside.infrastructure.database import DatabaseSessionManager, init_db
from ringside.infrastructure.observability import setup_logging
import ringside.models  # noqa: F401  (registers every table on Base.metadata)

logger = logging.getLogger(__name__)


def bootstrap(settings: Settings | None = None) -> DatabaseSessionManager:
    """Startup: logging, database manager, tables."""
    settings = settings or get_settings()
    handler = setup_logging(settings.log_level, settings.log_format)
    try:
        manager = init_db(
            settings.database_url,
            pool_size=settings.database_pool_size,
            max_overflow=settings.database_max_overflow,
            echo=settings.database_echo,
        )
        Base.metadata.create_all(manager.engine)
    except Exception as e:
        logger.error(f"Ringside engine failed to start: {e}", extra={"action": "bootstrap"})
        logging.root.removeHandler(handler)
        handler.close()
        raise
    logger.info(
        f"Ringside engine started ({settings.log_format} logs)",
        extra={"action": "bootstrap"},
    )
    return manager
