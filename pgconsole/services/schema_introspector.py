"""
Schema Introspector
Live table and column discovery through the target's information_schema
"""
from dataclasses import dataclass
from typing import Any, Dict, List
from loguru import logger

from pgconsole.core.errors import DRIVER_ERRORS, ExecutionError, NotFoundError, ValidationError
from pgconsole.core.target_pools import target_pools
from pgconsole.schemas.connection_models import Connection
from pgconsole.schemas.table_models import ColumnInfo

PUBLIC_SCHEMA = "public"


@dataclass
class TableShape:
    """Columns of one table as seen in the current request"""
    name: str
    columns: List[ColumnInfo]

    @property
    def column_types(self) -> Dict[str, str]:
        return {column.name: column.type for column in self.columns}

    @property
    def primary_keys(self) -> List[str]:
        return [column.name for column in self.columns if column.is_primary]

    def require_columns(self, names: Any) -> None:
        """Reject any name that is not a column of this table"""
        known = self.column_types
        unknown = [name for name in names if name not in known]
        if unknown:
            raise ValidationError(
                f"Unknown column(s) for table '{self.name}': {', '.join(unknown)}",
                errors={"columns": unknown}
            )


class SchemaIntrospector:
    """
    Reads the target catalog on every call; nothing is cached, so results
    reflect the target at call time.
    """

    async def _fetch(self, connection: Connection, query: str, *args) -> List[Dict[str, Any]]:
        try:
            pool = await target_pools.get_pool(connection)
            rows = await pool.fetch(query, *args)
        except DRIVER_ERRORS as e:
            raise ExecutionError(str(e) or e.__class__.__name__)
        return [dict(row) for row in rows]

    async def list_tables(self, connection: Connection) -> List[str]:
        """Base tables of the public schema, ordered by name"""
        logger.debug(f"Fetching tables for connection id: {connection.id}")

        query = """
            SELECT table_name
            FROM information_schema.tables
            WHERE table_schema = $1
                AND table_type = 'BASE TABLE'
            ORDER BY table_name
        """
        rows = await self._fetch(connection, query, PUBLIC_SCHEMA)
        return [row["table_name"] for row in rows]

    async def list_columns(self, connection: Connection, table_name: str) -> List[ColumnInfo]:
        """Columns in ordinal order with a primary-key flag"""
        logger.debug(f"Fetching columns for table {table_name}, connection id: {connection.id}")

        query = """
            SELECT
                c.column_name,
                c.data_type,
                c.is_nullable,
                c.column_default,
                EXISTS (
                    SELECT 1
                    FROM information_schema.table_constraints tc
                    JOIN information_schema.key_column_usage kcu
                        ON tc.constraint_name = kcu.constraint_name
                        AND tc.table_schema = kcu.table_schema
                        AND tc.table_name = kcu.table_name
                    WHERE tc.constraint_type = 'PRIMARY KEY'
                        AND tc.table_schema = c.table_schema
                        AND tc.table_name = c.table_name
                        AND kcu.column_name = c.column_name
                ) AS is_primary
            FROM information_schema.columns c
            WHERE c.table_schema = $1 AND c.table_name = $2
            ORDER BY c.ordinal_position
        """
        rows = await self._fetch(connection, query, PUBLIC_SCHEMA, table_name)
        return [
            ColumnInfo(
                name=row["column_name"],
                type=row["data_type"],
                nullable=row["is_nullable"] == "YES",
                default_value=row["column_default"],
                is_primary=row["is_primary"]
            )
            for row in rows
        ]

    async def resolve_table(self, connection: Connection, table_name: str) -> TableShape:
        """
        Allow-list a table name against the live table list and load its
        columns; the returned shape is the only source of identifiers used
        to build SQL for this request.
        """
        tables = await self.list_tables(connection)
        if table_name not in tables:
            raise NotFoundError(f"Table '{table_name}' not found")

        columns = await self.list_columns(connection, table_name)
        return TableShape(name=table_name, columns=columns)


# Global schema introspector instance
schema_introspector = SchemaIntrospector()
