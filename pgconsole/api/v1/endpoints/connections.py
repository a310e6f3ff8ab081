"""
Connection Registry API Endpoints
"""
from fastapi import APIRouter, Depends, Query
from typing import List, Optional
from loguru import logger

from pgconsole.api.deps import get_target_connection
from pgconsole.core.config import settings
from pgconsole.core.errors import NotFoundError
from pgconsole.schemas.activity_models import ActivityLog
from pgconsole.schemas.common import SuccessResponse
from pgconsole.schemas.connection_models import (
    Connection,
    ConnectionCreate,
    ConnectionUpdate
)
from pgconsole.services.activity_recorder import activity_recorder
from pgconsole.services.connection_registry import connection_registry

router = APIRouter()


@router.get("", response_model=List[Connection])
async def list_connections():
    """
    List all registered connections
    """
    return await connection_registry.list_connections()


@router.get("/active", response_model=Connection)
async def get_active_connection():
    """
    The single active connection, 404 while setup is incomplete
    """
    return await connection_registry.get_active_connection()


@router.get("/{connection_id}", response_model=Connection)
async def get_connection(connection: Connection = Depends(get_target_connection)):
    return connection


@router.post("", response_model=Connection, status_code=201)
async def create_connection(data: ConnectionCreate):
    return await connection_registry.create_connection(data)


@router.put("/{connection_id}", response_model=Connection)
async def update_connection(connection_id: int, data: ConnectionUpdate):
    connection = await connection_registry.update_connection(connection_id, data)
    if not connection:
        raise NotFoundError("Connection not found")
    return connection


@router.delete("/{connection_id}", response_model=SuccessResponse)
async def delete_connection(connection_id: int):
    if not await connection_registry.delete_connection(connection_id):
        raise NotFoundError("Connection not found")
    return SuccessResponse(success=True)


@router.post("/{connection_id}/activate", response_model=Connection)
async def activate_connection(connection_id: int):
    """
    Make this connection the active one; all others are deactivated
    """
    connection = await connection_registry.activate_connection(connection_id)
    if not connection:
        raise NotFoundError("Connection not found")

    logger.info(f"Connection {connection_id} is now active")
    return connection


@router.get("/{connection_id}/activity", response_model=List[ActivityLog])
async def get_activity(
    connection_id: int,
    limit: Optional[int] = Query(None, ge=1, le=settings.MAX_ACTIVITY_LIMIT)
):
    """
    Audit trail for a connection, most recent first
    """
    return await activity_recorder.list(connection_id, limit)
