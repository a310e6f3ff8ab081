"""
Pydantic models for application settings
"""
from pydantic import Field
from typing import Any
from datetime import datetime

from pgconsole.schemas.common import CamelModel


class SettingUpdate(CamelModel):
    key: str = Field(..., min_length=1, max_length=100)
    value: Any


class AppSetting(CamelModel):
    id: int
    key: str
    value: Any
    created_at: datetime
    updated_at: datetime
