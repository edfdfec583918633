"""
SQL Template Module for blib

Builds named-placeholder INSERT/UPDATE templates and normalizes date strings
for SQL date columns. Statements are returned for a database layer to bind
and execute; nothing here opens a connection.

Usage:
    from src.sql import build_insert, build_update, normalize_date

    statement = build_insert("users", {"name": "Bob", "age": 30})
    cursor.execute(statement.sql, statement.parameters)

    sql, parameters = build_update("users", {"name": "Bob"}, {"id": 5})

    normalize_date("31/12/2023")  # "2023-12-31"
"""

from typing import Any, Mapping, Optional

from src.sql.builder import SqlBuilder, SqlStatement
from src.sql.dates import Clock, DateNormalizer
from src.sql.exceptions import (
    SqlErrorKind,
    SqlBuildError,
    EmptyDataError,
    EmptyTableError,
    InvalidTableNameError,
    EmptyCriteriaError,
    EmptyPlaceholdersError,
    InvalidColumnNameError,
    DuplicatePlaceholderError,
    InvalidDataError,
)
from src.utils.metrics_collector import get_default_collector


def build_insert(table: str, data: Mapping[str, Any]) -> SqlStatement:
    """Build an INSERT template; see SqlBuilder.insert."""
    return SqlBuilder(metrics=get_default_collector()).insert(table, data)


def build_update(
    table: str,
    data: Mapping[str, Any],
    criteria: Mapping[str, Any]
) -> SqlStatement:
    """Build an UPDATE template; see SqlBuilder.update."""
    return SqlBuilder(metrics=get_default_collector()).update(table, data, criteria)


def normalize_date(
    field: str,
    preset_now: bool = True,
    is_datetime: bool = False,
    clock: Optional[Clock] = None
) -> str:
    """Convert a date string to SQL format; see DateNormalizer.normalize."""
    return DateNormalizer(clock=clock).normalize(
        field,
        preset_now=preset_now,
        is_datetime=is_datetime
    )


force_date_to_sql = normalize_date

__all__ = [
    "SqlBuilder",
    "SqlStatement",
    "DateNormalizer",
    "build_insert",
    "build_update",
    "normalize_date",
    "force_date_to_sql",
    "SqlErrorKind",
    "SqlBuildError",
    "EmptyDataError",
    "EmptyTableError",
    "InvalidTableNameError",
    "EmptyCriteriaError",
    "EmptyPlaceholdersError",
    "InvalidColumnNameError",
    "DuplicatePlaceholderError",
    "InvalidDataError",
]

__version__ = "1.0.0"
