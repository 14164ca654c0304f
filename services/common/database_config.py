"""
Shared database engine configuration for the platform services.

SQLite is used for local development and the test suites; PostgreSQL (via
asyncpg) in deployed environments. Both go through the async engine factory
below so services never build engines by hand.
"""

from typing import Any, Dict

from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine

from services.common import get_async_database_url


def get_sqlite_connect_args() -> Dict[str, Any]:
    """
    Connection arguments for aiosqlite.

    Sessions are opened per store operation and may run on different tasks,
    so the same-thread check is disabled and writers wait on the file lock.
    """
    return {
        "check_same_thread": False,
        "timeout": 30,
    }


def is_sqlite_database(database_url: str) -> bool:
    """Return True for ``sqlite://`` and ``sqlite+aiosqlite://`` URLs."""
    return database_url.lower().startswith("sqlite")


def create_strict_async_engine(
    database_url: str, echo: bool = False, **kwargs: Any
) -> AsyncEngine:
    """
    Create an async engine for the given URL.

    Sync-style URLs are converted to their async driver form. SQLite engines
    receive the connection arguments from ``get_sqlite_connect_args``, merged
    over any ``connect_args`` supplied by the caller.

    Args:
        database_url: The database URL
        echo: Whether to echo SQL statements
        **kwargs: Additional arguments to pass to create_async_engine
    """
    existing_connect_args = kwargs.pop("connect_args", {})
    database_url = get_async_database_url(database_url)

    if is_sqlite_database(database_url):
        connect_args = {**existing_connect_args, **get_sqlite_connect_args()}
    else:
        connect_args = existing_connect_args

    return create_async_engine(
        database_url, echo=echo, future=True, connect_args=connect_args, **kwargs
    )
