"""
Pydantic models for live introspection, row access and stored table metadata
"""
from pydantic import Field
from typing import List, Optional, Dict, Any
from datetime import datetime

from pgconsole.schemas.common import CamelModel


class ColumnInfo(CamelModel):
    """Live column description from information_schema"""
    name: str
    type: str
    nullable: bool
    default_value: Optional[str] = None
    is_primary: bool = False


class PaginationInfo(CamelModel):
    total: int
    page: int
    page_size: int
    total_pages: int


class TablePage(CamelModel):
    """One page of rows plus its pagination descriptor"""
    data: List[Dict[str, Any]]
    pagination: PaginationInfo


class TableMetadataCreate(CamelModel):
    connection_id: int
    name: str = Field(..., min_length=1)
    schema_name: str = Field(default="public", alias="schema", min_length=1)
    description: Optional[str] = None


class TableMetadataUpdate(CamelModel):
    name: Optional[str] = Field(None, min_length=1)
    schema_name: Optional[str] = Field(None, alias="schema", min_length=1)
    description: Optional[str] = None


class TableMetadata(CamelModel):
    """Locally cached table description"""
    id: int
    connection_id: int
    name: str
    schema_name: str = Field(alias="schema")
    description: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class ColumnMetadataCreate(CamelModel):
    table_id: int
    name: str = Field(..., min_length=1)
    type: str = Field(..., min_length=1)
    nullable: bool = True
    is_primary: bool = False
    is_unique: bool = False
    default_value: Optional[str] = None
    description: Optional[str] = None


class ColumnMetadataUpdate(CamelModel):
    name: Optional[str] = Field(None, min_length=1)
    type: Optional[str] = Field(None, min_length=1)
    nullable: Optional[bool] = None
    is_primary: Optional[bool] = None
    is_unique: Optional[bool] = None
    default_value: Optional[str] = None
    description: Optional[str] = None


class ColumnMetadata(CamelModel):
    """Locally cached column description"""
    id: int
    table_id: int
    name: str
    type: str
    nullable: bool
    is_primary: bool
    is_unique: bool
    default_value: Optional[str] = None
    description: Optional[str] = None
    created_at: datetime
    updated_at: datetime
