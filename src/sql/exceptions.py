"""
Errors raised by the SQL template builders.
"""

from enum import Enum
from typing import Optional


class SqlErrorKind(Enum):
    """Reasons a statement could not be built."""
    EMPTY_DATA = "EMPTY_DATA"
    EMPTY_TABLE = "EMPTY_TABLE"
    INVALID_TABLE_NAME = "INVALID_TABLE_NAME"
    EMPTY_CRITERIA = "EMPTY_CRITERIA"
    EMPTY_PLACEHOLDERS = "EMPTY_PLACEHOLDERS"
    INVALID_COLUMN_NAME = "INVALID_COLUMN_NAME"
    DUPLICATE_PLACEHOLDER = "DUPLICATE_PLACEHOLDER"
    INVALID_DATA = "INVALID_DATA"


class SqlBuildError(ValueError):
    """
    Raised when an INSERT or UPDATE template cannot be built.

    Attributes:
        kind: Which validation failed
        operation: "insert" or "update"
        field: Offending table, column or placeholder name, or the
            argument ("data", "criteria") that is not a mapping
    """

    kind: SqlErrorKind

    def __init__(self, reason: str, operation: str, field: Optional[str] = None):
        self.operation = operation
        self.field = field
        message = f"{reason} - {operation}"
        if field:
            message = f"{message} ({field!r})"
        super().__init__(message)


class EmptyDataError(SqlBuildError):
    kind = SqlErrorKind.EMPTY_DATA


class EmptyTableError(SqlBuildError):
    kind = SqlErrorKind.EMPTY_TABLE


class InvalidTableNameError(SqlBuildError):
    kind = SqlErrorKind.INVALID_TABLE_NAME


class EmptyCriteriaError(SqlBuildError):
    kind = SqlErrorKind.EMPTY_CRITERIA


class EmptyPlaceholdersError(SqlBuildError):
    kind = SqlErrorKind.EMPTY_PLACEHOLDERS


class InvalidColumnNameError(SqlBuildError):
    kind = SqlErrorKind.INVALID_COLUMN_NAME


class DuplicatePlaceholderError(SqlBuildError):
    kind = SqlErrorKind.DUPLICATE_PLACEHOLDER



class InvalidDataError(SqlBuildError):
    """Column values or criteria are not a mapping."""
    kind = SqlErrorKind.INVALID_DATA
