"""Persistence errors.

Every failure of the pagination and versioned-write primitives is raised as
one of these types. None of them is retried by the layer that raises it;
callers decide whether to re-read, start over, or report the problem.
"""

from __future__ import annotations

import uuid
from typing import Any, Self


class PersistenceError(Exception):
    """Base class for typed persistence failures.

    Attributes:
        batch_index: Position of the failing entry when raised from a batch.
        record_id: Identifier of the failing record when raised from a batch.
    """

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}
        self.batch_index: int | None = None
        self.record_id: uuid.UUID | None = None

    def __str__(self) -> str:
        if self.details:
            details_str = ", ".join(f"{k}={v!r}" for k, v in self.details.items())
            return f"{self.message} ({details_str})"
        return self.message

    def at_batch_position(self, index: int, record_id: uuid.UUID | None) -> Self:
        self.batch_index = index
        self.record_id = record_id
        self.details = {**self.details, "batch_index": index}
        return self


class InvalidCursor(PersistenceError):
    """Pagination token is malformed, corrupted or semantically invalid."""

    def __init__(self, reason: str) -> None:
        super().__init__("Invalid cursor", details={"reason": reason})
        self.reason = reason


class NotFoundError(PersistenceError):
    """Target record does not exist (or no longer exists)."""

    def __init__(self, model_name: str, identifier: dict[str, Any]) -> None:
        self.model_name = model_name
        self.identifier = identifier
        id_str = ", ".join(f"{k}={v!r}" for k, v in identifier.items())
        super().__init__(f"{model_name} not found with {id_str}", details={"model": model_name})

    def __repr__(self) -> str:
        return f"NotFoundError(model={self.model_name!r}, identifier={self.identifier!r})"


class ConflictError(PersistenceError):
    """Stored version moved past the version the writer last observed."""

    reason = "stale_data"

    def __init__(
        self,
        model_name: str,
        identifier: dict[str, Any],
        *,
        expected_version: int,
        current_version: int | None,
    ) -> None:
        self.model_name = model_name
        self.identifier = identifier
        self.expected_version = expected_version
        self.current_version = current_version
        super().__init__(
            f"{model_name} was modified concurrently",
            details={
                "model": model_name,
                "expected_version": expected_version,
                "current_version": current_version,
            },
        )


class ValidationError(PersistenceError):
    """One or more fields violate a domain constraint. Nothing was written.

    Attributes:
        errors: Mapping of field name to a human readable message.
    """

    def __init__(self, errors: dict[str, str]) -> None:
        self.errors = dict(errors)
        super().__init__("Validation failed", details={"fields": sorted(self.errors)})


__all__ = [
    "ConflictError",
    "InvalidCursor",
    "NotFoundError",
    "PersistenceError",
    "ValidationError",
]
