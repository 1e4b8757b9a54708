import asyncpg
import logging
import os
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)

SCHEMA_PATH = Path(__file__).with_name("schema.sql")
APPLICATION_NAME = "golf-tournament-scoring"


def dsn_from_env() -> Optional[str]:
    """DATABASE_URL, or None to fall back to the keyword defaults."""
    return os.environ.get("DATABASE_URL") or None


class DatabasePool:
    """Owns the single asyncpg pool shared by every repository.

    Opened once from the app lifespan and closed after in-flight
    achievement posts have drained.
    """

    def __init__(self):
        self._pool: Optional[asyncpg.Pool] = None

    async def initialize(
        self,
        dsn: Optional[str] = None,
        *,
        host: str = "localhost",
        port: int = 5432,
        database: str = "golf_tournament",
        user: str = "postgres",
        password: str = "",
        min_size: int = 2,
        max_size: int = 10,
        command_timeout: float = 30.0,
    ) -> None:
        """Open the pool. A second call is a no-op."""
        if self._pool is not None:
            return
        connect_kwargs = {"dsn": dsn} if dsn else {
            "host": host,
            "port": port,
            "database": database,
            "user": user,
            "password": password,
        }
        self._pool = await asyncpg.create_pool(
            **connect_kwargs,
            min_size=min_size,
            max_size=max_size,
            command_timeout=command_timeout,
            server_settings={"application_name": APPLICATION_NAME},
        )
        logger.info(f"Database pool ready (min={min_size}, max={max_size})")

    async def close(self) -> None:
        if self._pool is None:
            return
        await self._pool.close()
        self._pool = None
        logger.info("Database pool closed")

    @property
    def pool(self) -> asyncpg.Pool:
        if self._pool is None:
            raise RuntimeError(
                "Database pool not initialized. Call await db.initialize() first."
            )
        return self._pool

    async def apply_schema(self, schema_path: Optional[Path] = None) -> None:
        """Create the golf/social schemas. Statements are idempotent."""
        sql_text = (schema_path or SCHEMA_PATH).read_text(encoding="utf-8")
        async with self.pool.acquire() as conn:
            await conn.execute(sql_text)

    async def health_check(self) -> bool:
        """True when a pooled connection answers SELECT 1."""
        try:
            async with self.pool.acquire() as conn:
                await conn.fetchval("SELECT 1")
            return True
        except (asyncpg.PostgresError, asyncpg.InterfaceError, OSError, RuntimeError) as e:
            logger.warning(f"Database health check failed: {e}")
            return False


# Module-level singleton used by the API lifespan
db = DatabasePool()
