"""
Live Table API Endpoints - introspection, pagination and row CRUD
"""
from fastapi import APIRouter, Body, Depends, Query
from typing import Any, Dict, List, Optional
from loguru import logger

from pgconsole.api.deps import get_target_connection
from pgconsole.core.config import settings
from pgconsole.core.errors import ConsoleError, NotFoundError, ValidationError
from pgconsole.schemas.connection_models import Connection
from pgconsole.schemas.table_models import ColumnInfo
from pgconsole.services.row_accessor import row_accessor
from pgconsole.services.schema_introspector import schema_introspector

router = APIRouter()


def parse_filters(raw_filters: List[str]) -> Dict[str, Any]:
    """Turn repeated filter=column:value parameters into a dict"""
    filters = {}
    for raw in raw_filters:
        column, separator, value = raw.partition(":")
        if not separator or not column:
            raise ValidationError(f"Invalid filter '{raw}', expected column:value")
        filters[column] = value
    return filters


@router.get("/{connection_id}/tables", response_model=List[str])
async def list_tables(connection: Connection = Depends(get_target_connection)):
    """
    Base tables of the public schema, read live from the target
    """
    try:
        return await schema_introspector.list_tables(connection)
    except ConsoleError as e:
        logger.error(f"Failed to fetch tables for connection {connection.id}: {e.message}")
        raise


@router.get("/{connection_id}/tables/{table_name}/columns", response_model=List[ColumnInfo])
async def list_columns(table_name: str, connection: Connection = Depends(get_target_connection)):
    """
    Columns of a table in ordinal order
    """
    try:
        shape = await schema_introspector.resolve_table(connection, table_name)
        return shape.columns
    except ConsoleError as e:
        logger.error(f"Failed to fetch columns for table {table_name}: {e.message}")
        raise


@router.get("/{connection_id}/tables/{table_name}/data")
async def get_table_data(
    table_name: str,
    page: int = Query(1, ge=1),
    page_size: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE, alias="pageSize"),
    sort_by: Optional[str] = Query(None, alias="sortBy"),
    sort_order: str = Query("asc", alias="sortOrder"),
    filters: List[str] = Query(default=[], alias="filter"),
    connection: Connection = Depends(get_target_connection)
):
    """
    One page of rows with {total, page, pageSize, totalPages}
    """
    try:
        result = await row_accessor.fetch_page(
            connection,
            table_name,
            page=page,
            page_size=page_size,
            sort_by=sort_by,
            sort_order=sort_order,
            filters=parse_filters(filters)
        )
        return result.model_dump(by_alias=True)
    except ConsoleError as e:
        logger.error(f"Failed to fetch data for table {table_name}: {e.message}")
        raise


@router.post("/{connection_id}/tables/{table_name}/rows", status_code=201)
async def insert_row(
    table_name: str,
    data: Dict[str, Any] = Body(...),
    connection: Connection = Depends(get_target_connection)
):
    try:
        return await row_accessor.insert_row(connection, table_name, data)
    except ConsoleError as e:
        logger.error(f"Failed to insert row into table {table_name}: {e.message}")
        raise


@router.put("/{connection_id}/tables/{table_name}/rows/{primary_key}/{primary_key_value}")
async def update_row(
    table_name: str,
    primary_key: str,
    primary_key_value: str,
    data: Dict[str, Any] = Body(...),
    connection: Connection = Depends(get_target_connection)
):
    try:
        row = await row_accessor.update_row(connection, table_name, primary_key, primary_key_value, data)
    except ConsoleError as e:
        logger.error(f"Failed to update row in table {table_name}: {e.message}")
        raise

    if row is None:
        raise NotFoundError("Row not found")
    return row


@router.delete("/{connection_id}/tables/{table_name}/rows/{primary_key}/{primary_key_value}")
async def delete_row(
    table_name: str,
    primary_key: str,
    primary_key_value: str,
    connection: Connection = Depends(get_target_connection)
):
    try:
        success = await row_accessor.delete_row(connection, table_name, primary_key, primary_key_value)
    except ConsoleError as e:
        logger.error(f"Failed to delete row from table {table_name}: {e.message}")
        raise

    if not success:
        raise NotFoundError("Row not found")
    return {"success": success}
