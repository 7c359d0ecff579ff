"""
Database package for the drayage engine.
"""
from drayage.db.database import (
    Base,
    engine,
    async_session_maker,
    get_async_session,
    init_db,
    drop_db,
)

__all__ = [
    "Base",
    "engine",
    "async_session_maker",
    "get_async_session",
    "init_db",
    "drop_db",
]
