from __future__ import annotations

from typing import Any, Sequence


class CatalogError(Exception):
    """Base class for every error raised by the catalog storage layer."""


class BootstrapError(CatalogError):
    """The store could not be opened or brought to the expected schema.

    There is no degraded mode without a schema, so the hosting process is
    expected to terminate when it sees this.
    """


class StatementError(CatalogError):
    """A statement could not be prepared or executed."""


class InvalidSortColumnError(StatementError, ValueError):
    def __init__(self, column: str) -> None:
        super().__init__(f"Unknown sort column: {column!r}")
        self.column = column


class ConstraintViolation(CatalogError):
    """A write was rejected by a constraint declared in the schema."""


class DuplicateUidError(ConstraintViolation):
    def __init__(self, uid: str | None, message: str) -> None:
        super().__init__(message)
        self.uid = uid


class RowDecodeError(CatalogError):
    """A stored row could not be turned into a Photo."""

    def __init__(self, index: int, values: Sequence[Any], reason: str) -> None:
        super().__init__(f"Unable to decode row {index}: {reason}")
        self.index = index
        self.values = tuple(values)
        self.reason = reason
