"""
Stored Metadata API Endpoints - locally cached table and column descriptions
"""
from fastapi import APIRouter
from typing import List

from pgconsole.core.errors import NotFoundError
from pgconsole.schemas.common import SuccessResponse
from pgconsole.schemas.table_models import (
    ColumnMetadata,
    ColumnMetadataCreate,
    ColumnMetadataUpdate,
    TableMetadata,
    TableMetadataCreate,
    TableMetadataUpdate
)
from pgconsole.services.metadata_store import metadata_store

router = APIRouter()


@router.get("/connections/{connection_id}/stored-tables", response_model=List[TableMetadata])
async def list_stored_tables(connection_id: int):
    return await metadata_store.list_tables(connection_id)


@router.post("/tables", response_model=TableMetadata, status_code=201)
async def create_table(data: TableMetadataCreate):
    return await metadata_store.create_table(data)


@router.put("/tables/{table_id}", response_model=TableMetadata)
async def update_table(table_id: int, data: TableMetadataUpdate):
    table = await metadata_store.update_table(table_id, data)
    if not table:
        raise NotFoundError("Table not found")
    return table


@router.delete("/tables/{table_id}", response_model=SuccessResponse)
async def delete_table(table_id: int):
    """
    Removes the table description and, by cascade, its columns
    """
    if not await metadata_store.delete_table(table_id):
        raise NotFoundError("Table not found")
    return SuccessResponse(success=True)


@router.get("/tables/{table_id}/columns", response_model=List[ColumnMetadata])
async def list_stored_columns(table_id: int):
    return await metadata_store.list_columns(table_id)


@router.post("/columns", response_model=ColumnMetadata, status_code=201)
async def create_column(data: ColumnMetadataCreate):
    return await metadata_store.create_column(data)


@router.put("/columns/{column_id}", response_model=ColumnMetadata)
async def update_column(column_id: int, data: ColumnMetadataUpdate):
    column = await metadata_store.update_column(column_id, data)
    if not column:
        raise NotFoundError("Column not found")
    return column


@router.delete("/columns/{column_id}", response_model=SuccessResponse)
async def delete_column(column_id: int):
    if not await metadata_store.delete_column(column_id):
        raise NotFoundError("Column not found")
    return SuccessResponse(success=True)
