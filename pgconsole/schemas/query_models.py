"""
Pydantic models for raw SQL execution
"""
from pydantic import Field
from typing import List, Dict, Any

from pgconsole.schemas.common import CamelModel


class RawQueryRequest(CamelModel):
    connection_id: int
    query: str = Field(..., min_length=1)
    params: List[Any] = Field(default_factory=list)


class RawQueryResult(CamelModel):
    """Driver result: classified command, affected/returned row count, rows, column names"""
    command: str
    row_count: int
    rows: List[Dict[str, Any]]
    fields: List[str]
