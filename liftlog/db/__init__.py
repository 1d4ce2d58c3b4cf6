"""Database package."""
from liftlog.db.database import (
    Base,
    async_session_maker,
    check_database,
    close_engine,
    create_engine,
    create_session_maker,
    engine,
    init_db,
)

__all__ = [
    "Base",
    "async_session_maker",
    "check_database",
    "close_engine",
    "create_engine",
    "create_session_maker",
    "engine",
    "init_db",
]
