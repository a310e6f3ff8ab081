"""
Health Check and System Status API
"""
from fastapi import APIRouter
from typing import Dict, Any
from datetime import datetime, timezone
from loguru import logger
import psutil

from pgconsole.core.config import settings
from pgconsole.core.database import db_pool
from pgconsole.core.errors import DRIVER_ERRORS
from pgconsole.core.target_pools import target_pools

router = APIRouter()


@router.get("/health")
async def health_check() -> Dict[str, Any]:
    """
    Bookkeeping database reachability plus process metrics
    """
    start_time = datetime.now(timezone.utc)
    health_status = {
        "status": "ok",
        "timestamp": start_time.isoformat(),
        "version": settings.APP_VERSION,
        "checks": {}
    }

    try:
        await db_pool.fetchval("SELECT 1")
        health_status["checks"]["database"] = {
            "status": "healthy",
            "connected": True,
            "pool": db_pool.get_pool_stats(),
            "target_pools": target_pools.get_stats()
        }
    except DRIVER_ERRORS as e:
        logger.warning(f"Health check: database unreachable: {e}")
        health_status["checks"]["database"] = {
            "status": "unhealthy",
            "error": str(e)
        }
        health_status["status"] = "degraded"

    memory = psutil.virtual_memory()
    health_status["metrics"] = {
        "cpu_percent": psutil.cpu_percent(interval=None),
        "memory": {
            "percent": memory.percent,
            "available_mb": memory.available / 1024 / 1024
        }
    }

    response_time_ms = (datetime.now(timezone.utc) - start_time).total_seconds() * 1000
    health_status["response_time_ms"] = round(response_time_ms, 2)

    return health_status
