from .base import Base
from .session import (
    async_database_url,
    async_session_factory,
    build_engine,
    build_session_factory,
    create_tables,
    engine,
    get_db_session,
)
from .models import ContentModel

__all__ = [
    "Base",
    "async_database_url",
    "async_session_factory",
    "build_engine",
    "build_session_factory",
    "create_tables",
    "engine",
    "get_db_session",
    "ContentModel",
]
