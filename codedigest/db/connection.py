"""Database connection management."""

import os
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict

from psycopg import AsyncConnection
from psycopg.rows import dict_row
from psycopg_pool import AsyncConnectionPool


class DatabaseConfig:
    """Database configuration."""

    def __init__(self, config: Dict[str, Any]) -> None:
        """Initialize database config from dict."""
        self.host = config.get("host", "localhost")
        self.port = config.get("port", 5432)
        self.database = config.get("database", "codedigest")
        self.user = config.get("user", "codedigest")

        password_env = config.get("password_env")
        if password_env and os.environ.get(password_env):
            self.password = os.environ[password_env]
        else:
            self.password = config.get("password") or ""

    @property
    def connection_string(self) -> str:
        """Get psycopg connection string."""
        return f"postgresql://{self.user}:{self.password}@{self.host}:{self.port}/{self.database}"


async def create_pool(
    config: Dict[str, Any],
    min_size: int = 1,
    max_size: int = 10,
) -> AsyncConnectionPool:
    """Create and open a connection pool; the caller owns and closes it."""
    db_config = DatabaseConfig(config)
    pool = AsyncConnectionPool(
        db_config.connection_string,
        min_size=min_size,
        max_size=max_size,
        kwargs={"row_factory": dict_row},
        open=False,
    )
    await pool.open()
    return pool


@asynccontextmanager
async def get_connection(pool: AsyncConnectionPool) -> AsyncIterator[AsyncConnection]:
    """Borrow a connection, committing on success and rolling back on error."""
    async with pool.connection() as conn:
        try:
            yield conn
            await conn.commit()
        except Exception:
            await conn.rollback()
            raise
