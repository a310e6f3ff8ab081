"""
Connection pools for target databases
One asyncpg pool per registered connection, created on first use
"""
import asyncio
import asyncpg
from asyncpg import Pool
from typing import Dict, Optional, Tuple, Any
from loguru import logger

from .config import settings
from .database import register_json_codecs


def connect_kwargs(params: Any) -> Dict[str, Any]:
    """Driver keyword arguments for a connection record or candidate params"""
    return {
        "host": params.host,
        "port": int(params.port),
        "database": params.database,
        "user": params.username,
        "password": params.password or None,
        "ssl": "require" if params.secure else "disable",
    }


def _fingerprint(params: Any) -> Tuple:
    kwargs = connect_kwargs(params)
    return tuple(sorted(kwargs.items()))


class TargetPoolManager:
    """Caches driver pools keyed by connection id"""

    def __init__(self):
        self._pools: Dict[int, Tuple[Tuple, Pool]] = {}
        self._lock = asyncio.Lock()

    async def get_pool(self, connection: Any) -> Pool:
        """Return the pool for a connection, rebuilding it when credentials changed"""
        fingerprint = _fingerprint(connection)

        cached = self._pools.get(connection.id)
        if cached and cached[0] == fingerprint:
            return cached[1]

        async with self._lock:
            cached = self._pools.get(connection.id)
            if cached and cached[0] == fingerprint:
                return cached[1]

            if cached:
                logger.info(f"Credentials changed for connection {connection.id}, rebuilding pool")
                await self._close(connection.id)

            pool = await asyncpg.create_pool(
                min_size=settings.TARGET_POOL_MIN_SIZE,
                max_size=settings.TARGET_POOL_MAX_SIZE,
                timeout=float(settings.CONNECT_TIMEOUT),
                init=register_json_codecs,
                server_settings={'application_name': settings.APP_NAME},
                **connect_kwargs(connection)
            )
            self._pools[connection.id] = (fingerprint, pool)
            logger.info(
                f"Created pool for connection {connection.id} "
                f"({connection.host}:{connection.port}/{connection.database})"
            )
            return pool

    async def invalidate(self, connection_id: int) -> None:
        """Drop the cached pool for a connection"""
        async with self._lock:
            await self._close(connection_id)

    async def close_all(self) -> None:
        async with self._lock:
            for connection_id in list(self._pools):
                await self._close(connection_id)

    async def _close(self, connection_id: int) -> None:
        cached = self._pools.pop(connection_id, None)
        if cached:
            await cached[1].close()
            logger.debug(f"Closed pool for connection {connection_id}")

    def get_stats(self) -> Dict[str, Any]:
        return {
            str(connection_id): {
                "current_size": pool.get_size(),
                "idle_connections": pool.get_idle_size()
            }
            for connection_id, (_, pool) in self._pools.items()
        }

    async def test_connection(self, params: Any) -> Tuple[bool, Optional[str]]:
        """Open a one-off connection with candidate params"""
        logger.info(f"Testing connection to {params.host}:{params.port}/{params.database}")
        try:
            conn = await asyncpg.connect(
                timeout=float(settings.CONNECT_TIMEOUT),
                **connect_kwargs(params)
            )
        except (OSError, asyncio.TimeoutError, asyncpg.PostgresError, asyncpg.InterfaceError) as e:
            logger.warning(f"Test connection failed: {e}")
            return False, str(e) or e.__class__.__name__

        try:
            await conn.fetchval("SELECT 1")
        finally:
            await conn.close()

        logger.info("Test connection successful")
        return True, None


# Global target pool manager
target_pools = TargetPoolManager()
