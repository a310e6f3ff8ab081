"""
API Router Configuration
"""
from fastapi import APIRouter

from pgconsole.api.v1.endpoints import (
    health,
    setup,
    connections,
    tables,
    metadata,
    query,
    app_settings
)

# Create main API router
api_router = APIRouter()

api_router.include_router(health.router, prefix="", tags=["Health"])
api_router.include_router(setup.router, prefix="/setup", tags=["Setup"])
api_router.include_router(connections.router, prefix="/connections", tags=["Connections"])
api_router.include_router(tables.router, prefix="/connections", tags=["Tables"])
api_router.include_router(metadata.router, prefix="", tags=["Stored Metadata"])
api_router.include_router(query.router, prefix="/query", tags=["Query"])
api_router.include_router(app_settings.router, prefix="/settings", tags=["Settings"])
