"""
Pydantic models for the activity trail
"""
from enum import Enum
from typing import Optional, Dict, Any
from datetime import datetime

from pgconsole.schemas.common import CamelModel


class ActivityStatus(str, Enum):
    SUCCESS = "SUCCESS"
    ERROR = "ERROR"


class ActivityLog(CamelModel):
    id: int
    connection_id: int
    table_id: Optional[int] = None
    operation: str
    details: Optional[str] = None
    status: ActivityStatus
    user_id: Optional[int] = None
    metadata: Optional[Dict[str, Any]] = None
    created_at: datetime
