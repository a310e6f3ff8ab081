"""
SQL Builder - parameterized statements for tables known only at request time

Identifiers passed in here must already be allow-listed against introspected
metadata; they are double-quoted on the way out. Values are always bound as
$n parameters, never interpolated.
"""
from typing import Any, Dict, List, Optional, Tuple
import re

from pgconsole.core.errors import ValidationError

Statement = Tuple[str, List[Any]]

DML_KEYWORDS = ("SELECT", "INSERT", "UPDATE", "DELETE")

_LEADING_NOISE = re.compile(r"^(?:\s+|--[^\n]*(?:\n|$)|/\*.*?\*/|\()*", re.S)
_KEYWORD = re.compile(r"[A-Za-z]+")
_TOKENS = re.compile(r"'(?:[^']|'')*'|\"(?:[^\"]|\"\")*\"|--[^\n]*|/\*.*?\*/|\(|\)|[A-Za-z_]+", re.S)


def quote_ident(name: str) -> str:
    """Quote a PostgreSQL identifier, doubling embedded quotes"""
    if not name or "\x00" in name:
        raise ValidationError(f"Invalid identifier: {name!r}")
    return '"' + name.replace('"', '""') + '"'


def qualified_name(table: str, schema: Optional[str] = "public") -> str:
    if schema is None:
        return quote_ident(table)
    return f"{quote_ident(schema)}.{quote_ident(table)}"


def classify_statement(sql: str) -> str:
    """
    Label a statement by its leading keyword.

    Leading whitespace, comments and opening parentheses are skipped. A WITH
    statement is labelled by the first DML verb found outside the CTE bodies.
    """
    body = _LEADING_NOISE.sub("", sql, count=1)
    match = _KEYWORD.match(body)
    if not match:
        return "UNKNOWN"

    keyword = match.group(0).upper()
    if keyword != "WITH":
        return keyword

    depth = 0
    for token in _TOKENS.findall(body[match.end():]):
        if token == "(":
            depth += 1
        elif token == ")":
            depth -= 1
        elif depth == 0 and token.upper() in DML_KEYWORDS:
            return token.upper()
    return keyword


def _where_clause(filters: Optional[Dict[str, Any]], params: List[Any]) -> str:
    if not filters:
        return ""

    conditions = []
    for column, value in filters.items():
        params.append(value)
        conditions.append(f"{quote_ident(column)} = ${len(params)}")
    return " WHERE " + " AND ".join(conditions)


def build_count(
    table: str,
    filters: Optional[Dict[str, Any]] = None,
    schema: str = "public"
) -> Statement:
    params: List[Any] = []
    where = _where_clause(filters, params)
    return f"SELECT COUNT(*) AS total FROM {qualified_name(table, schema)}{where}", params


def build_select_page(
    table: str,
    page: int,
    page_size: int,
    filters: Optional[Dict[str, Any]] = None,
    order_by: Optional[str] = None,
    descending: bool = False,
    schema: str = "public"
) -> Statement:
    """SELECT * with optional equality filters, ORDER BY, LIMIT and OFFSET"""
    if page < 1:
        raise ValidationError("page must be >= 1")
    if page_size < 1:
        raise ValidationError("pageSize must be >= 1")

    params: List[Any] = []
    sql = f"SELECT * FROM {qualified_name(table, schema)}{_where_clause(filters, params)}"

    if order_by:
        sql += f" ORDER BY {quote_ident(order_by)} {'DESC' if descending else 'ASC'}"

    params.extend([page_size, (page - 1) * page_size])
    sql += f" LIMIT ${len(params) - 1} OFFSET ${len(params)}"
    return sql, params


def build_insert(table: str, data: Dict[str, Any], schema: str = "public") -> Statement:
    """INSERT ... RETURNING *; an empty record inserts column defaults"""
    target = qualified_name(table, schema)
    if not data:
        return f"INSERT INTO {target} DEFAULT VALUES RETURNING *", []

    columns = ", ".join(quote_ident(column) for column in data)
    placeholders = ", ".join(f"${index}" for index in range(1, len(data) + 1))
    return (
        f"INSERT INTO {target} ({columns}) VALUES ({placeholders}) RETURNING *",
        list(data.values())
    )


def build_update(
    table: str,
    key_column: str,
    key_value: Any,
    data: Dict[str, Any],
    schema: Optional[str] = "public"
) -> Statement:
    """UPDATE ... SET every supplied column except the key, RETURNING *"""
    assignments = {column: value for column, value in data.items() if column != key_column}
    if not assignments:
        raise ValidationError("No columns to update")

    params = list(assignments.values())
    set_clause = ", ".join(
        f"{quote_ident(column)} = ${index}"
        for index, column in enumerate(assignments, start=1)
    )
    params.append(key_value)
    return (
        f"UPDATE {qualified_name(table, schema)} SET {set_clause} "
        f"WHERE {quote_ident(key_column)} = ${len(params)} RETURNING *",
        params
    )


def build_delete(
    table: str,
    key_column: str,
    key_value: Any,
    schema: str = "public"
) -> Statement:
    key = quote_ident(key_column)
    return (
        f"DELETE FROM {qualified_name(table, schema)} WHERE {key} = $1 RETURNING {key}",
        [key_value]
    )


def parse_row_count(status: Optional[str], fallback: int) -> int:
    """Row count from a command tag such as 'INSERT 0 3' or 'UPDATE 2'"""
    if status:
        last = status.rsplit(" ", 1)[-1]
        if last.isdigit():
            return int(last)
    return fallback
