"""
Generic Row Accessor
Paginated reads and single-row writes against tables whose shape is only
known from introspection in the same request
"""
import math
from typing import Any, Dict, Optional
from loguru import logger

from pgconsole.core.config import settings
from pgconsole.core.errors import ValidationError
from pgconsole.schemas.connection_models import Connection
from pgconsole.schemas.table_models import PaginationInfo, TablePage
from pgconsole.services.metadata_store import metadata_store
from pgconsole.services.query_executor import query_executor
from pgconsole.services.schema_introspector import TableShape, schema_introspector
from pgconsole.services.sql_builder import (
    build_count,
    build_delete,
    build_insert,
    build_select_page,
    build_update
)
from pgconsole.services.value_coercion import coerce_row, coerce_value

SORT_ORDERS = ("asc", "desc")


class RowAccessor:

    def _key_column(self, shape: TableShape, key_column: str) -> str:
        """The row-identity column must exist and, when the table has one, be part of its primary key"""
        shape.require_columns([key_column])
        primary_keys = shape.primary_keys
        if primary_keys and key_column not in primary_keys:
            raise ValidationError(
                f"Column '{key_column}' is not a primary key of '{shape.name}' "
                f"(primary key: {', '.join(primary_keys)})"
            )
        return key_column

    async def fetch_page(
        self,
        connection: Connection,
        table_name: str,
        page: int = 1,
        page_size: Optional[int] = None,
        sort_by: Optional[str] = None,
        sort_order: str = "asc",
        filters: Optional[Dict[str, Any]] = None
    ) -> TablePage:
        """
        COUNT(*) then one LIMIT/OFFSET page. Without sort_by the rows are
        ordered by the first primary-key column; tables without a primary
        key come back in server order, which is not stable across pages.
        """
        if page_size is None:
            page_size = settings.DEFAULT_PAGE_SIZE
        if page < 1:
            raise ValidationError("page must be >= 1")
        if page_size < 1 or page_size > settings.MAX_PAGE_SIZE:
            raise ValidationError(f"pageSize must be between 1 and {settings.MAX_PAGE_SIZE}")
        if sort_order.lower() not in SORT_ORDERS:
            raise ValidationError("sortOrder must be 'asc' or 'desc'")

        logger.info(
            f"Fetching data for table {table_name}, connection id: {connection.id}, "
            f"page: {page}, pageSize: {page_size}"
        )

        shape = await schema_introspector.resolve_table(connection, table_name)

        filters = filters or {}
        shape.require_columns(filters)
        filters = coerce_row(filters, shape.column_types)

        if sort_by:
            shape.require_columns([sort_by])
        elif shape.primary_keys:
            sort_by = shape.primary_keys[0]

        table_id = await metadata_store.find_table_id(connection.id, table_name)

        count_sql, count_params = build_count(table_name, filters)
        count_rows = await query_executor.fetch_rows(connection, count_sql, count_params, record=False)
        total = int(count_rows[0]["total"])

        sql, params = build_select_page(
            table_name,
            page,
            page_size,
            filters=filters,
            order_by=sort_by,
            descending=sort_order.lower() == "desc"
        )
        rows = await query_executor.fetch_rows(connection, sql, params, table_id=table_id)

        return TablePage(
            data=rows,
            pagination=PaginationInfo(
                total=total,
                page=page,
                page_size=page_size,
                total_pages=math.ceil(total / page_size)
            )
        )

    async def insert_row(self, connection: Connection, table_name: str, data: Dict[str, Any]) -> Dict[str, Any]:
        """Insert one record; keys are column names. Returns the stored row"""
        logger.info(f"Inserting row into table {table_name}, connection id: {connection.id}")

        shape = await schema_introspector.resolve_table(connection, table_name)
        shape.require_columns(data)
        values = coerce_row(data, shape.column_types)

        table_id = await metadata_store.find_table_id(connection.id, table_name)
        sql, params = build_insert(table_name, values)
        rows = await query_executor.fetch_rows(connection, sql, params, table_id=table_id)

        logger.info(f"Row inserted into {table_name} successfully")
        return rows[0]

    async def update_row(
        self,
        connection: Connection,
        table_name: str,
        key_column: str,
        key_value: Any,
        data: Dict[str, Any]
    ) -> Optional[Dict[str, Any]]:
        """Update the row identified by key_column = key_value; None when no row matched"""
        logger.info(
            f"Updating row in table {table_name} where {key_column} = {key_value}, "
            f"connection id: {connection.id}"
        )

        shape = await schema_introspector.resolve_table(connection, table_name)
        key_column = self._key_column(shape, key_column)
        shape.require_columns(data)

        column_types = shape.column_types
        values = coerce_row(data, column_types)
        key = coerce_value(column_types[key_column], key_value, key_column)

        table_id = await metadata_store.find_table_id(connection.id, table_name)
        sql, params = build_update(table_name, key_column, key, values)
        rows = await query_executor.fetch_rows(connection, sql, params, table_id=table_id)

        if not rows:
            return None

        logger.info(f"Row updated in {table_name} successfully")
        return rows[0]

    async def delete_row(self, connection: Connection, table_name: str, key_column: str, key_value: Any) -> bool:
        """Delete the row identified by key_column = key_value; False when nothing was removed"""
        logger.info(
            f"Deleting row from table {table_name} where {key_column} = {key_value}, "
            f"connection id: {connection.id}"
        )

        shape = await schema_introspector.resolve_table(connection, table_name)
        key_column = self._key_column(shape, key_column)
        key = coerce_value(shape.column_types[key_column], key_value, key_column)

        table_id = await metadata_store.find_table_id(connection.id, table_name)
        sql, params = build_delete(table_name, key_column, key)
        rows = await query_executor.fetch_rows(connection, sql, params, table_id=table_id)

        return len(rows) > 0


# Global row accessor instance
row_accessor = RowAccessor()
