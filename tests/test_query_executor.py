from decimal import Decimal

import asyncpg
import pytest

from fakes import FakeStatement
from pgconsole.core.errors import ExecutionError
from pgconsole.schemas.activity_models import ActivityStatus
from pgconsole.services import query_executor as query_executor_module
from pgconsole.services.query_executor import query_executor


async def test_select_returns_rows_and_fields(connection, recorded, use_statements):
    statement = FakeStatement([{"n": 1}, {"n": 2}], "SELECT 2", ["n"])
    use_statements(statement)

    result = await query_executor.run(connection, "SELECT n FROM t WHERE n > $1", [0])

    assert result.command == "SELECT"
    assert result.row_count == 2
    assert result.rows == [{"n": 1}, {"n": 2}]
    assert result.fields == ["n"]
    assert statement.args == (0,)

    assert len(recorded) == 1
    assert recorded[0]["status"] == ActivityStatus.SUCCESS
    assert recorded[0]["operation"] == "SELECT"
    assert recorded[0]["details"] == "SELECT n FROM t WHERE n > $1"


async def test_write_row_count_comes_from_status(connection, recorded, use_statements):
    use_statements(FakeStatement([], "UPDATE 4", []))

    result = await query_executor.run(connection, "UPDATE t SET a = 1")

    assert result.command == "UPDATE"
    assert result.row_count == 4
    assert result.rows == []


async def test_failure_is_recorded_and_raised(connection, recorded, use_statements):
    error = asyncpg.PostgresError('relation "missing" does not exist')
    use_statements(FakeStatement([], None, [], error=error))

    with pytest.raises(ExecutionError) as exc_info:
        await query_executor.run(connection, "SELECT * FROM missing", table_id=3)

    assert 'relation "missing" does not exist' in exc_info.value.message
    assert exc_info.value.status_code == 500
    assert recorded[0]["status"] == ActivityStatus.ERROR
    assert recorded[0]["metadata"] == {"error": exc_info.value.message}
    assert recorded[0]["table_id"] == 3


async def test_unrecorded_run(connection, recorded, use_statements):
    use_statements(FakeStatement([{"total": 0}], "SELECT 1", ["total"]))

    rows = await query_executor.fetch_rows(connection, "SELECT COUNT(*) AS total FROM t", record=False)

    assert rows == [{"total": 0}]
    assert recorded == []


async def test_recorder_failure_does_not_mask_result(connection, monkeypatch, use_statements):
    async def broken_record(*args, **kwargs):
        raise OSError("bookkeeping database unreachable")

    monkeypatch.setattr(query_executor_module.activity_recorder, "record", broken_record)
    use_statements(FakeStatement([{"n": 1}], "SELECT 1", ["n"]))

    result = await query_executor.run(connection, "SELECT 1 AS n")

    assert result.rows == [{"n": 1}]


async def test_rows_are_made_json_safe(connection, recorded, use_statements):
    use_statements(FakeStatement(
        [{
            "id": 1,
            "blob": b"\x89PNG\xff",
            "flags": asyncpg.BitString("1010"),
            "span": asyncpg.Range(1, 10),
            "amount": Decimal("3.50"),
        }],
        "SELECT 1",
        ["id", "blob", "flags", "span", "amount"]
    ))

    result = await query_executor.run(connection, "SELECT * FROM assets")

    assert result.rows == [{
        "id": 1,
        "blob": "\\x89504e47ff",
        "flags": "1010",
        "span": {"lower": 1, "upper": 10, "lowerInc": True, "upperInc": False, "empty": False},
        "amount": Decimal("3.50"),
    }]
