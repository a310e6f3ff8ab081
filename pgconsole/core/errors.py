"""
Error taxonomy surfaced at the HTTP boundary as {"message": ...}
"""
import asyncio
import asyncpg
from typing import Any, Optional


class ConsoleError(Exception):
    """Base class for errors with a known HTTP status"""

    status_code: int = 500

    def __init__(self, message: str, errors: Optional[Any] = None):
        super().__init__(message)
        self.message = message
        self.errors = errors

    def to_dict(self) -> dict:
        body = {"message": self.message}
        if self.errors is not None:
            body["errors"] = self.errors
        return body


class ValidationError(ConsoleError):
    """Malformed request, unknown column, bad pagination arguments"""
    status_code = 400


class NotFoundError(ConsoleError):
    """Referenced connection, table, row or setting is absent"""
    status_code = 404


class ExecutionError(ConsoleError):
    """Driver, connectivity or SQL failure; message is the driver's verbatim"""
    status_code = 500


# Failures raised by the driver or the network under it
DRIVER_ERRORS = (
    asyncpg.PostgresError,
    asyncpg.InterfaceError,
    OSError,
    asyncio.TimeoutError,
)
