"""
Pydantic models for connection registry and setup wizard requests and responses
"""
from pydantic import Field
from typing import Optional
from datetime import datetime

from pgconsole.schemas.common import CamelModel


class ConnectionParams(CamelModel):
    """Endpoint and credentials of a target database"""
    host: str = Field(..., min_length=1)
    port: int = Field(default=5432, ge=1, le=65535)
    database: str = Field(..., min_length=1)
    username: str = Field(..., min_length=1)
    password: str = Field(default="")
    secure: bool = Field(default=True, description="Require TLS to the target")


class ConnectionCreate(ConnectionParams):
    """Request to register a connection"""
    name: str = Field(..., min_length=1)
    is_active: bool = Field(default=False, description="Activate right after creation")


class ConnectionUpdate(CamelModel):
    """Partial update; activation goes through the activate endpoint"""
    name: Optional[str] = Field(None, min_length=1)
    host: Optional[str] = Field(None, min_length=1)
    port: Optional[int] = Field(None, ge=1, le=65535)
    database: Optional[str] = Field(None, min_length=1)
    username: Optional[str] = Field(None, min_length=1)
    password: Optional[str] = None
    secure: Optional[bool] = None


class Connection(CamelModel):
    """Stored connection; the password never leaves the server"""
    id: int
    name: str
    host: str
    port: int
    database: str
    username: str
    password: str = Field(default="", exclude=True)
    secure: bool
    is_active: bool
    created_at: datetime
    updated_at: datetime


class SaveConnectionRequest(ConnectionCreate):
    """Setup wizard save request"""
    store_securely: bool = Field(default=False, description="Also write the secrets file")
    set_active: bool = Field(default=False)


class SaveConnectionResponse(CamelModel):
    success: bool
    connection: Connection


class TestConnectionResponse(CamelModel):
    success: bool
    message: str


class SetupStatusResponse(CamelModel):
    is_complete: bool
