"""
SQL Template Builder

Builds INSERT and UPDATE statements with named placeholders (":column") and
the matching parameter mapping, ready to hand to a DB-API driver that
supports the named paramstyle. Nothing here talks to a database.
"""

import logging
import re
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterator, List, Mapping, Optional

from src.sql.exceptions import (
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
from src.utils.metrics_collector import MetricsCollector

logger = logging.getLogger(__name__)

IDENTIFIER_PATTERN = re.compile(r"[A-Za-z0-9_]+")
WHERE_PREFIX = "where_"

# Existing callers match on these messages, which differ per operation
INVALID_TABLE_REASONS = {"insert": "Table name invalid", "update": "Invalid table name"}


@dataclass(frozen=True)
class SqlStatement:
    """
    A SQL template and the values for its placeholders.

    Unpacks as ``sql, parameters = statement``.
    """

    sql: str
    parameters: Dict[str, Any] = field(default_factory=dict)

    def __iter__(self) -> Iterator[Any]:
        return iter((self.sql, self.parameters))

    def as_dict(self) -> Dict[str, Any]:
        return {"sql": self.sql, "parameters": dict(self.parameters)}


class SqlBuilder:
    """
    Builds parameterized INSERT / UPDATE templates.

    Placeholders are derived from column names: ":column" for VALUES and
    SET entries, ":where_column" for WHERE criteria.
    """

    def __init__(self, metrics: Optional[MetricsCollector] = None):
        """
        Initialize the builder.

        Args:
            metrics: Collector to record build counts, failures and timings.
                It must have the blib metrics registered (see setup_blib_metrics).
        """
        self.metrics = metrics
        logger.debug("Initialized SqlBuilder")

    def insert(self, table: str, data: Mapping[str, Any]) -> SqlStatement:
        """
        Build an INSERT statement.

        Args:
            table: Table name, letters, digits and underscores only
            data: Column -> value pairs, in column order

        Returns:
            SqlStatement, e.g. for ("users", {"name": "Bob", "age": 30}):
            INSERT INTO users (name, age) VALUES (:name, :age)
            with parameters {":name": "Bob", ":age": 30}

        Raises:
            EmptyDataError: data is empty
            InvalidDataError: data is not a mapping
            EmptyTableError: table is empty
            InvalidTableNameError: table has characters outside [A-Za-z0-9_]
            InvalidColumnNameError: a column name is not a plain identifier
            EmptyPlaceholdersError: no VALUES placeholders were produced
        """
        return self._run("insert", self._build_insert, table, data)

    def update(
        self,
        table: str,
        data: Mapping[str, Any],
        criteria: Mapping[str, Any]
    ) -> SqlStatement:
        """
        Build an UPDATE statement.

        Args:
            table: Table name, letters, digits and underscores only
            data: Column -> new value pairs for the SET clause
            criteria: Column -> value pairs ANDed together in the WHERE clause

        Returns:
            SqlStatement, e.g. for ("users", {"name": "Bob"}, {"id": 5}):
            UPDATE users SET name = :name WHERE id = :where_id
            with parameters {":name": "Bob", ":where_id": 5}

        Raises:
            EmptyDataError: data is empty
            EmptyTableError: table is empty
            InvalidTableNameError: table has characters outside [A-Za-z0-9_]
            EmptyCriteriaError: criteria is empty
            InvalidDataError: data or criteria is not a mapping
            InvalidColumnNameError: a column name is not a plain identifier
            EmptyPlaceholdersError: SET or WHERE produced no placeholders
            DuplicatePlaceholderError: a SET and a WHERE placeholder coincide
        """
        return self._run("update", self._build_update, table, data, criteria)

    def _run(self, operation: str, build: Callable[..., SqlStatement], *args) -> SqlStatement:
        if self.metrics is not None:
            build = self.metrics.time_function(
                "processing_duration_seconds",
                labels={"operation": operation}
            )(build)

        try:
            statement = build(*args)
        except SqlBuildError as e:
            logger.warning(
                f"Rejected {operation}: {e}",
                extra={"operation": operation, "error_kind": e.kind.value}
            )
            if self.metrics is not None:
                self.metrics.increment_counter(
                    "build_errors_total",
                    labels={"operation": operation, "error_kind": e.kind.value}
                )
            raise

        if self.metrics is not None:
            self.metrics.increment_counter(
                "statements_built_total",
                labels={"operation": operation}
            )

        logger.debug(
            f"Built {operation} with {len(statement.parameters)} parameters: {statement.sql}",
            extra={"operation": operation, "table": args[0]}
        )
        return statement

    def _build_insert(self, table: str, data: Mapping[str, Any]) -> SqlStatement:
        if not data:
            raise EmptyDataError("Empty data", "insert")
        self._validate_mapping(data, "data", "insert")
        self._validate_table(table, "insert")

        fields = list(data.keys())
        self._validate_columns(fields, "insert")

        placeholders = [f":{column}" for column in fields]
        parameters = {f":{column}": value for column, value in data.items()}

        if not placeholders:
            raise EmptyPlaceholdersError("Wrong placeholders", "insert")

        sql = "INSERT INTO {} ({}) VALUES ({})".format(
            table,
            ", ".join(fields),
            ", ".join(placeholders)
        )

        return SqlStatement(sql=sql, parameters=parameters)

    def _build_update(
        self,
        table: str,
        data: Mapping[str, Any],
        criteria: Mapping[str, Any]
    ) -> SqlStatement:
        if not data:
            raise EmptyDataError("Empty data", "update")
        self._validate_mapping(data, "data", "update")
        self._validate_table(table, "update")
        if not criteria:
            raise EmptyCriteriaError("Empty criteria", "update")
        self._validate_mapping(criteria, "criteria", "update")

        self._validate_columns(list(data.keys()), "update")
        self._validate_columns(list(criteria.keys()), "update")

        set_parts = [f"{column} = :{column}" for column in data]
        where_parts = [f"{column} = :{WHERE_PREFIX}{column}" for column in criteria]

        parameters: Dict[str, Any] = {f":{column}": value for column, value in data.items()}
        for column, value in criteria.items():
            placeholder = f":{WHERE_PREFIX}{column}"
            if placeholder in parameters:
                raise DuplicatePlaceholderError(
                    "Placeholder used twice", "update", field=placeholder
                )
            parameters[placeholder] = value

        if not set_parts or not where_parts:
            raise EmptyPlaceholdersError("Placeholders wrong", "update")

        sql = "UPDATE {} SET {} WHERE {}".format(
            table,
            ", ".join(set_parts),
            " AND ".join(where_parts)
        )

        return SqlStatement(sql=sql, parameters=parameters)

    def _validate_table(self, table: str, operation: str) -> None:
        if not table:
            raise EmptyTableError("Table name null", operation)
        if not isinstance(table, str) or not IDENTIFIER_PATTERN.fullmatch(table):
            raise InvalidTableNameError(
                INVALID_TABLE_REASONS[operation], operation, field=str(table)
            )

    def _validate_columns(self, columns: List[Any], operation: str) -> None:
        for column in columns:
            if not isinstance(column, str) or not IDENTIFIER_PATTERN.fullmatch(column):
                raise InvalidColumnNameError("Column name invalid", operation, field=str(column))

    def _validate_mapping(self, values: Any, argument: str, operation: str) -> None:
        if not isinstance(values, Mapping):
            raise InvalidDataError(
                f"{argument.capitalize()} is not a mapping", operation, field=argument
            )
