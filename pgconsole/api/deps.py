"""
Request-scoped dependencies
"""
from fastapi import Path

from pgconsole.schemas.connection_models import Connection
from pgconsole.services.connection_registry import connection_registry


async def get_target_connection(connection_id: int = Path(..., ge=1)) -> Connection:
    """Resolve the connection named in the path once per request, 404 when absent"""
    return await connection_registry.require_connection(connection_id)
