"""
Activity Recorder - append-only audit trail of SQL executed against targets
"""
from typing import Any, Dict, List, Optional
from loguru import logger

from pgconsole.core.config import settings
from pgconsole.core.database import db_pool
from pgconsole.schemas.activity_models import ActivityLog, ActivityStatus


class ActivityRecorder:
    """Writes and lists activity_logs rows"""

    async def record(
        self,
        connection_id: int,
        operation: str,
        details: Optional[str],
        status: ActivityStatus,
        metadata: Optional[Dict[str, Any]] = None,
        table_id: Optional[int] = None
    ) -> ActivityLog:
        """Append one entry"""
        query = """
            INSERT INTO activity_logs
            (connection_id, table_id, operation, details, status, metadata)
            VALUES ($1, $2, $3, $4, $5, $6)
            RETURNING *
        """
        row = await db_pool.fetchrow(
            query,
            connection_id,
            table_id,
            operation,
            details,
            ActivityStatus(status).value,
            metadata
        )
        logger.debug(f"Recorded {status} {operation} for connection {connection_id}")
        return ActivityLog.model_validate(dict(row))

    async def list(self, connection_id: int, limit: Optional[int] = None) -> List[ActivityLog]:
        """Most recent entries first"""
        if limit is None:
            limit = settings.DEFAULT_ACTIVITY_LIMIT

        query = """
            SELECT *
            FROM activity_logs
            WHERE connection_id = $1
            ORDER BY created_at DESC, id DESC
            LIMIT $2
        """
        rows = await db_pool.fetch(query, connection_id, limit)
        return [ActivityLog.model_validate(dict(row)) for row in rows]


# Global activity recorder instance
activity_recorder = ActivityRecorder()
