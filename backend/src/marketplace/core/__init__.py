from marketplace.core.config import settings
from marketplace.core.database import Base, async_session_maker, engine, get_db

__all__ = [
    "settings",
    "Base",
    "engine",
    "async_session_maker",
    "get_db",
]
