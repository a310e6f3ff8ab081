"""
Setup Wizard API Endpoints
"""
from fastapi import APIRouter
from fastapi.responses import JSONResponse
from loguru import logger

from pgconsole.core.errors import NotFoundError
from pgconsole.core.secrets import load_from_secrets_file, save_to_secrets_file
from pgconsole.core.target_pools import target_pools
from pgconsole.schemas.connection_models import (
    ConnectionParams,
    SaveConnectionRequest,
    SaveConnectionResponse,
    SetupStatusResponse,
    TestConnectionResponse
)
from pgconsole.services.connection_registry import connection_registry

router = APIRouter()


@router.post("/test-connection", response_model=TestConnectionResponse)
async def test_connection(params: ConnectionParams):
    """
    Verify that candidate connection parameters reach a server
    """
    logger.info(f"Testing database connection to {params.host}:{params.port}/{params.database}")

    success, error = await target_pools.test_connection(params)
    if not success:
        return JSONResponse(
            status_code=400,
            content={"success": False, "message": f"Connection failed: {error}"}
        )

    return TestConnectionResponse(success=True, message="Connection successful")


@router.post("/save-connection", response_model=SaveConnectionResponse)
async def save_connection(request: SaveConnectionRequest):
    """
    Persist a connection, optionally writing the secrets file and activating it
    """
    logger.info(f"Saving database connection: {request.name}")

    if request.store_securely:
        await save_to_secrets_file(request)

    connection = await connection_registry.create_connection(request)

    if request.set_active and not connection.is_active:
        connection = await connection_registry.activate_connection(connection.id)

    logger.info("Connection saved successfully")
    return SaveConnectionResponse(success=True, connection=connection)


@router.get("/status", response_model=SetupStatusResponse)
async def setup_status():
    """
    Setup is complete once a secrets file or an active connection exists
    """
    if await load_from_secrets_file():
        return SetupStatusResponse(is_complete=True)

    try:
        await connection_registry.get_active_connection()
    except NotFoundError:
        return SetupStatusResponse(is_complete=False)

    return SetupStatusResponse(is_complete=True)
