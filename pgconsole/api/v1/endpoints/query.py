"""
Raw SQL API Endpoint
"""
from fastapi import APIRouter
from loguru import logger

from pgconsole.core.errors import ConsoleError
from pgconsole.schemas.query_models import RawQueryRequest
from pgconsole.services.connection_registry import connection_registry
from pgconsole.services.query_executor import query_executor

router = APIRouter()


@router.post("")
async def execute_query(request: RawQueryRequest):
    """
    Pass caller SQL and bound parameters straight to the target.
    Every execution, failed or not, lands in the activity log.
    """
    logger.info(f"Executing raw query for connection id: {request.connection_id}")

    try:
        connection = await connection_registry.require_connection(request.connection_id)
        result = await query_executor.run(connection, request.query, request.params)
    except ConsoleError as e:
        logger.error(f"Query execution failed: {e.message}")
        raise

    return result.model_dump(by_alias=True)
