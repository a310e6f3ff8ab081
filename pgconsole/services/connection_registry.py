"""
Connection Registry - stored target database endpoints and the active one
"""
from datetime import datetime, timezone
from typing import List, Optional
from loguru import logger

from pgconsole.core.database import db_pool
from pgconsole.core.errors import NotFoundError
from pgconsole.core.target_pools import target_pools
from pgconsole.schemas.connection_models import (
    Connection,
    ConnectionCreate,
    ConnectionUpdate
)
from pgconsole.services.sql_builder import build_update

# Serializes activations across processes sharing the bookkeeping database
ACTIVATION_LOCK_KEY = 7_302_114


class ConnectionRegistry:
    """CRUD over db_connections plus single-active bookkeeping"""

    async def list_connections(self) -> List[Connection]:
        rows = await db_pool.fetch("SELECT * FROM db_connections ORDER BY id")
        return [Connection.model_validate(dict(row)) for row in rows]

    async def get_connection(self, connection_id: int) -> Optional[Connection]:
        row = await db_pool.fetchrow("SELECT * FROM db_connections WHERE id = $1", connection_id)
        return Connection.model_validate(dict(row)) if row else None

    async def require_connection(self, connection_id: int) -> Connection:
        connection = await self.get_connection(connection_id)
        if not connection:
            raise NotFoundError(f"Connection {connection_id} not found")
        return connection

    async def create_connection(self, data: ConnectionCreate) -> Connection:
        logger.info(f"Creating new database connection: {data.name}")

        query = """
            INSERT INTO db_connections
            (name, host, port, database, username, password, secure)
            VALUES ($1, $2, $3, $4, $5, $6, $7)
            RETURNING *
        """
        row = await db_pool.fetchrow(
            query,
            data.name,
            data.host,
            data.port,
            data.database,
            data.username,
            data.password,
            data.secure
        )
        connection = Connection.model_validate(dict(row))

        if data.is_active:
            connection = await self.activate_connection(connection.id)

        return connection

    async def update_connection(self, connection_id: int, data: ConnectionUpdate) -> Optional[Connection]:
        """Partial update of the supplied fields"""
        logger.info(f"Updating connection with id: {connection_id}")

        changes = {
            field: value
            for field, value in data.model_dump(exclude_unset=True).items()
            if value is not None
        }
        if not changes:
            return await self.get_connection(connection_id)

        changes["updated_at"] = datetime.now(timezone.utc)
        sql, params = build_update("db_connections", "id", connection_id, changes, schema=None)
        row = await db_pool.fetchrow(sql, *params)
        if not row:
            return None

        # Credentials may have changed
        await target_pools.invalidate(connection_id)
        return Connection.model_validate(dict(row))

    async def delete_connection(self, connection_id: int) -> bool:
        logger.info(f"Deleting connection with id: {connection_id}")

        deleted = await db_pool.fetchval(
            "DELETE FROM db_connections WHERE id = $1 RETURNING id",
            connection_id
        )
        if deleted is None:
            return False

        await target_pools.invalidate(connection_id)
        return True

    async def activate_connection(self, connection_id: int) -> Optional[Connection]:
        """
        Make one connection the active one.

        Deactivating the others and activating the target happen in a single
        transaction under an advisory lock, so readers never see zero or two
        active connections. Returns None when the id does not exist, leaving
        the current active connection untouched.
        """
        logger.info(f"Activating connection with id: {connection_id}")

        async with db_pool.transaction() as conn:
            await conn.execute("SELECT pg_advisory_xact_lock($1)", ACTIVATION_LOCK_KEY)

            exists = await conn.fetchval(
                "SELECT id FROM db_connections WHERE id = $1 FOR UPDATE",
                connection_id
            )
            if exists is None:
                return None

            await conn.execute(
                "UPDATE db_connections SET is_active = false WHERE is_active AND id <> $1",
                connection_id
            )
            row = await conn.fetchrow(
                """
                UPDATE db_connections
                SET is_active = true, updated_at = NOW()
                WHERE id = $1
                RETURNING *
                """,
                connection_id
            )

        return Connection.model_validate(dict(row))

    async def get_active_connection(self) -> Connection:
        """The single active connection; NotFoundError means setup is incomplete"""
        row = await db_pool.fetchrow("SELECT * FROM db_connections WHERE is_active LIMIT 1")
        if not row:
            raise NotFoundError("No active connection found")
        return Connection.model_validate(dict(row))


# Global connection registry instance
connection_registry = ConnectionRegistry()
