"""
Async Database Connection Pool using asyncpg
Bookkeeping storage for connections, metadata, activity and settings
"""
import asyncpg
from asyncpg import Pool, Connection
from typing import Optional, AsyncGenerator, Dict, Any, List
from contextlib import asynccontextmanager
from tenacity import retry, stop_after_attempt, wait_exponential
from loguru import logger
import json

from .config import settings


def _json_encode(value: Any) -> str:
    return json.dumps(value, default=str)


async def register_json_codecs(conn: Connection) -> None:
    """Register JSON/JSONB codecs so values round-trip as Python objects"""
    for type_name in ("json", "jsonb"):
        await conn.set_type_codec(
            type_name,
            encoder=_json_encode,
            decoder=json.loads,
            schema="pg_catalog",
            format="text"
        )


class DatabasePool:
    """Manages async PostgreSQL connection pool for the bookkeeping database"""

    def __init__(self):
        self.pool: Optional[Pool] = None

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True
    )
    async def init_pool(self) -> None:
        """Initialize connection pool"""
        if self.pool:
            return

        try:
            self.pool = await asyncpg.create_pool(
                settings.get_database_dsn(),
                min_size=settings.DATABASE_POOL_MIN_SIZE,
                max_size=settings.DATABASE_POOL_SIZE,
                max_inactive_connection_lifetime=300,
                command_timeout=float(settings.DATABASE_POOL_TIMEOUT),
                init=register_json_codecs,
                server_settings={
                    'application_name': settings.APP_NAME
                }
            )

            logger.info(f"Database pool initialized with max {settings.DATABASE_POOL_SIZE} connections")

        except Exception as e:
            logger.error(f"Failed to initialize database pool: {e}")
            raise

    async def close_pool(self) -> None:
        """Close connection pool"""
        if self.pool:
            await self.pool.close()
            self.pool = None
            logger.info("Database pool closed")

    def get_pool_stats(self) -> Dict[str, Any]:
        """Get pool statistics safely"""
        if not self.pool:
            return {"status": "not_initialized"}

        return {
            "status": "active",
            "current_size": self.pool.get_size(),
            "idle_connections": self.pool.get_idle_size(),
            "max_size": self.pool.get_max_size()
        }

    @asynccontextmanager
    async def acquire(self) -> AsyncGenerator[Connection, None]:
        """Acquire a connection from the pool"""
        if not self.pool:
            await self.init_pool()

        async with self.pool.acquire() as connection:
            yield connection

    @asynccontextmanager
    async def transaction(self) -> AsyncGenerator[Connection, None]:
        """Acquire a connection and run the block inside one transaction"""
        async with self.acquire() as conn:
            async with conn.transaction():
                yield conn

    async def execute(self, query: str, *args, timeout: Optional[float] = None) -> str:
        """Execute a query without returning results"""
        async with self.acquire() as conn:
            return await conn.execute(query, *args, timeout=timeout)

    async def fetch(self, query: str, *args, timeout: Optional[float] = None) -> List[asyncpg.Record]:
        """Fetch multiple rows"""
        async with self.acquire() as conn:
            return await conn.fetch(query, *args, timeout=timeout)

    async def fetchrow(self, query: str, *args, timeout: Optional[float] = None) -> Optional[asyncpg.Record]:
        """Fetch a single row"""
        async with self.acquire() as conn:
            return await conn.fetchrow(query, *args, timeout=timeout)

    async def fetchval(self, query: str, *args, timeout: Optional[float] = None) -> Any:
        """Fetch a single value"""
        async with self.acquire() as conn:
            return await conn.fetchval(query, *args, timeout=timeout)


# Global database pool instance
db_pool = DatabasePool()
