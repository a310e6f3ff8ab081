"""
Metadata Store - locally cached table and column descriptions

These rows are edited by users and are not synchronized with live
introspection of the target database.
"""
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional
import asyncpg
from loguru import logger

from pgconsole.core.database import db_pool
from pgconsole.core.errors import NotFoundError, ValidationError
from pgconsole.schemas.table_models import (
    ColumnMetadata,
    ColumnMetadataCreate,
    ColumnMetadataUpdate,
    TableMetadata,
    TableMetadataCreate,
    TableMetadataUpdate
)
from pgconsole.services.sql_builder import build_update


def _changes(data: Any) -> Dict[str, Any]:
    changes = data.model_dump(exclude_unset=True)
    # Model field schema_name maps onto the "schema" column
    if "schema_name" in changes:
        changes["schema"] = changes.pop("schema_name")
    return changes


class MetadataStore:

    # Tables

    async def list_tables(self, connection_id: int) -> List[TableMetadata]:
        rows = await db_pool.fetch(
            "SELECT * FROM db_tables WHERE connection_id = $1 ORDER BY schema, name",
            connection_id
        )
        return [TableMetadata.model_validate(dict(row)) for row in rows]

    async def get_table(self, table_id: int) -> Optional[TableMetadata]:
        row = await db_pool.fetchrow("SELECT * FROM db_tables WHERE id = $1", table_id)
        return TableMetadata.model_validate(dict(row)) if row else None

    async def find_table_id(self, connection_id: int, name: str, schema: str = "public") -> Optional[int]:
        return await db_pool.fetchval(
            "SELECT id FROM db_tables WHERE connection_id = $1 AND name = $2 AND schema = $3",
            connection_id,
            name,
            schema
        )

    async def create_table(self, data: TableMetadataCreate) -> TableMetadata:
        logger.info(f"Creating table metadata: {data.schema_name}.{data.name}")

        query = """
            INSERT INTO db_tables (connection_id, name, schema, description)
            VALUES ($1, $2, $3, $4)
            RETURNING *
        """
        try:
            row = await db_pool.fetchrow(
                query,
                data.connection_id,
                data.name,
                data.schema_name,
                data.description
            )
        except asyncpg.UniqueViolationError:
            raise ValidationError(
                f"Table {data.schema_name}.{data.name} is already registered for connection {data.connection_id}"
            )
        except asyncpg.ForeignKeyViolationError:
            raise NotFoundError(f"Connection {data.connection_id} not found")

        return TableMetadata.model_validate(dict(row))

    async def update_table(self, table_id: int, data: TableMetadataUpdate) -> Optional[TableMetadata]:
        changes = _changes(data)
        if not changes:
            return await self.get_table(table_id)

        changes["updated_at"] = datetime.now(timezone.utc)
        sql, params = build_update("db_tables", "id", table_id, changes, schema=None)
        try:
            row = await db_pool.fetchrow(sql, *params)
        except asyncpg.UniqueViolationError:
            raise ValidationError("A table with this name and schema is already registered")
        except asyncpg.NotNullViolationError as e:
            raise ValidationError(str(e))

        return TableMetadata.model_validate(dict(row)) if row else None

    async def delete_table(self, table_id: int) -> bool:
        deleted = await db_pool.fetchval("DELETE FROM db_tables WHERE id = $1 RETURNING id", table_id)
        return deleted is not None

    # Columns

    async def list_columns(self, table_id: int) -> List[ColumnMetadata]:
        rows = await db_pool.fetch(
            "SELECT * FROM db_columns WHERE table_id = $1 ORDER BY id",
            table_id
        )
        return [ColumnMetadata.model_validate(dict(row)) for row in rows]

    async def get_column(self, column_id: int) -> Optional[ColumnMetadata]:
        row = await db_pool.fetchrow("SELECT * FROM db_columns WHERE id = $1", column_id)
        return ColumnMetadata.model_validate(dict(row)) if row else None

    async def create_column(self, data: ColumnMetadataCreate) -> ColumnMetadata:
        logger.info(f"Creating column metadata: {data.name} for table {data.table_id}")

        query = """
            INSERT INTO db_columns
            (table_id, name, type, nullable, is_primary, is_unique, default_value, description)
            VALUES ($1, $2, $3, $4, $5, $6, $7, $8)
            RETURNING *
        """
        try:
            row = await db_pool.fetchrow(
                query,
                data.table_id,
                data.name,
                data.type,
                data.nullable,
                data.is_primary,
                data.is_unique,
                data.default_value,
                data.description
            )
        except asyncpg.UniqueViolationError:
            raise ValidationError(f"Column {data.name} is already registered for table {data.table_id}")
        except asyncpg.ForeignKeyViolationError:
            raise NotFoundError(f"Table {data.table_id} not found")

        return ColumnMetadata.model_validate(dict(row))

    async def update_column(self, column_id: int, data: ColumnMetadataUpdate) -> Optional[ColumnMetadata]:
        changes = _changes(data)
        if not changes:
            return await self.get_column(column_id)

        changes["updated_at"] = datetime.now(timezone.utc)
        sql, params = build_update("db_columns", "id", column_id, changes, schema=None)
        try:
            row = await db_pool.fetchrow(sql, *params)
        except asyncpg.UniqueViolationError:
            raise ValidationError("A column with this name is already registered for the table")
        except asyncpg.NotNullViolationError as e:
            raise ValidationError(str(e))

        return ColumnMetadata.model_validate(dict(row)) if row else None

    async def delete_column(self, column_id: int) -> bool:
        deleted = await db_pool.fetchval("DELETE FROM db_columns WHERE id = $1 RETURNING id", column_id)
        return deleted is not None


# Global metadata store instance
metadata_store = MetadataStore()
