"""
Query Executor - runs SQL against a target connection and records the outcome
"""
from typing import Any, List, Optional, Sequence
from loguru import logger

from pgconsole.core.errors import DRIVER_ERRORS, ExecutionError
from pgconsole.core.target_pools import target_pools
from pgconsole.schemas.activity_models import ActivityStatus
from pgconsole.schemas.connection_models import Connection
from pgconsole.schemas.query_models import RawQueryResult
from pgconsole.services.activity_recorder import activity_recorder
from pgconsole.services.sql_builder import classify_statement, parse_row_count
from pgconsole.services.value_coercion import serialize_row


class QueryExecutor:
    """
    Every statement is prepared and bound with its parameters, so a single
    statement per call is supported.

    The activity entry is written after the statement completes, outside the
    target transaction: a crash in between leaves the statement unlogged.
    """

    async def run(
        self,
        connection: Connection,
        sql: str,
        params: Optional[Sequence[Any]] = None,
        table_id: Optional[int] = None,
        record: bool = True
    ) -> RawQueryResult:
        params = list(params or [])
        operation = classify_statement(sql)
        logger.debug(f"Executing {operation} on connection {connection.id}: {sql}")

        try:
            pool = await target_pools.get_pool(connection)
            async with pool.acquire() as conn:
                statement = await conn.prepare(sql)
                records = await statement.fetch(*params)
                status = statement.get_statusmsg()
                fields = [attribute.name for attribute in statement.get_attributes()]

        except DRIVER_ERRORS as e:
            message = str(e) or e.__class__.__name__
            logger.error(f"Query execution failed on connection {connection.id}: {message}")
            if record:
                await self._record(
                    connection.id, operation, sql, ActivityStatus.ERROR,
                    {"error": message}, table_id
                )
            raise ExecutionError(message)

        if record:
            await self._record(connection.id, operation, sql, ActivityStatus.SUCCESS, None, table_id)

        rows = [serialize_row(dict(row)) for row in records]
        return RawQueryResult(
            command=operation,
            row_count=parse_row_count(status, len(rows)),
            rows=rows,
            fields=fields
        )

    async def _record(
        self,
        connection_id: int,
        operation: str,
        sql: str,
        status: ActivityStatus,
        metadata: Optional[dict],
        table_id: Optional[int]
    ) -> None:
        # A bookkeeping failure must not replace the statement's own outcome
        try:
            await activity_recorder.record(
                connection_id, operation, sql, status,
                metadata=metadata, table_id=table_id
            )
        except DRIVER_ERRORS as e:
            logger.error(f"[ACTIVITY ERROR] Failed to record {operation} for connection {connection_id}: {e}")

    async def fetch_rows(
        self,
        connection: Connection,
        sql: str,
        params: Optional[Sequence[Any]] = None,
        table_id: Optional[int] = None,
        record: bool = True
    ) -> List[dict]:
        result = await self.run(connection, sql, params, table_id=table_id, record=record)
        return result.rows


# Global query executor instance
query_executor = QueryExecutor()
