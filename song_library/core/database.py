# song_library/core/database.py
"""
Storage connector. One asyncpg pool per process, shared by every request.
Each call acquires a pooled connection for a single statement.
"""

import logging
from typing import Any, List, Optional

import asyncpg

from song_library.core.config import Settings

logger = logging.getLogger(__name__)


class Database:
    def __init__(self, dsn: str, min_size: int = 1, max_size: int = 10, command_timeout: float = 30.0):
        self.dsn = dsn
        self.min_size = min_size
        self.max_size = max_size
        self.command_timeout = command_timeout
        self._pool: Optional[asyncpg.Pool] = None

    @classmethod
    def from_settings(cls, settings: Settings) -> "Database":
        return cls(
            settings.dsn,
            min_size=settings.db_pool_min_size,
            max_size=settings.db_pool_max_size,
        )

    @property
    def pool(self) -> asyncpg.Pool:
        if self._pool is None:
            raise RuntimeError("Database is not connected. Call connect() first.")
        return self._pool

    async def connect(self) -> None:
        """Create the pool and verify connectivity. Errors propagate to the caller."""
        if self._pool is not None:
            return
        self._pool = await asyncpg.create_pool(
            self.dsn,
            min_size=self.min_size,
            max_size=self.max_size,
            command_timeout=self.command_timeout,
        )
        try:
            await self.ping()
        except Exception:
            await self.close()
            raise
        logger.info("Connected to database!")

    async def close(self) -> None:
        if self._pool is not None:
            await self._pool.close()
            self._pool = None
            logger.info("Database connection pool closed")

    async def ping(self) -> bool:
        return await self.pool.fetchval("SELECT 1") == 1

    async def fetch(self, query: str, *args: Any) -> List[asyncpg.Record]:
        return await self.pool.fetch(query, *args)

    async def fetchrow(self, query: str, *args: Any) -> Optional[asyncpg.Record]:
        return await self.pool.fetchrow(query, *args)

    async def fetchval(self, query: str, *args: Any) -> Any:
        return await self.pool.fetchval(query, *args)

    async def execute(self, query: str, *args: Any) -> int:
        """Run a statement and return the number of affected rows."""
        status = await self.pool.execute(query, *args)
        return affected_rows(status)


def affected_rows(status: str) -> int:
    """
    Parse an asyncpg command status tag ("DELETE 1", "UPDATE 0", "INSERT 0 1").
    The row count is always the last token.
    """
    try:
        return int(status.rsplit(" ", 1)[-1])
    except (ValueError, AttributeError):
        return 0
