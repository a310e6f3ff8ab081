from datetime import datetime, timezone

import pytest

from fakes import FakePool
from pgconsole.core.target_pools import target_pools
from pgconsole.schemas.connection_models import Connection
from pgconsole.schemas.table_models import ColumnInfo
from pgconsole.services.activity_recorder import activity_recorder
from pgconsole.services.schema_introspector import TableShape


@pytest.fixture
def connection():
    now = datetime(2026, 1, 1, tzinfo=timezone.utc)
    return Connection(
        id=1,
        name="local",
        host="localhost",
        port=5432,
        database="shop",
        username="postgres",
        password="secret",
        secure=False,
        is_active=True,
        created_at=now,
        updated_at=now
    )


@pytest.fixture
def orders_shape():
    return TableShape(
        name="orders",
        columns=[
            ColumnInfo(
                name="id",
                type="integer",
                nullable=False,
                default_value="nextval('orders_id_seq'::regclass)",
                is_primary=True
            ),
            ColumnInfo(name="customer", type="text", nullable=True),
            ColumnInfo(name="total", type="numeric", nullable=True),
            ColumnInfo(name="placed_at", type="timestamp with time zone", nullable=True),
        ]
    )


class FakeExecutor:
    """Stands in for query_executor.fetch_rows and records every call"""

    def __init__(self, responses=None):
        self.calls = []
        self.responses = list(responses or [])

    async def fetch_rows(self, connection, sql, params=None, table_id=None, record=True):
        self.calls.append({"sql": sql, "params": list(params or []), "table_id": table_id, "record": record})
        return self.responses.pop(0) if self.responses else []


@pytest.fixture
def fake_executor():
    return FakeExecutor()


@pytest.fixture
def use_statements(monkeypatch):
    """Route target pool lookups to a FakePool serving the given statements"""
    def install(*statements):
        pool = FakePool(*statements)

        async def get_pool(connection):
            return pool

        monkeypatch.setattr(target_pools, "get_pool", get_pool)
        return pool

    return install


@pytest.fixture
def recorded(monkeypatch):
    """Capture activity entries instead of writing them"""
    entries = []

    async def record(connection_id, operation, details, status, metadata=None, table_id=None):
        entries.append({
            "connection_id": connection_id,
            "operation": operation,
            "details": details,
            "status": status,
            "metadata": metadata,
            "table_id": table_id,
        })

    monkeypatch.setattr(activity_recorder, "record", record)
    return entries
