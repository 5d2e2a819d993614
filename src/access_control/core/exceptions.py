from __future__ import annotations

from typing import Any, Optional


class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is missing or malformed."""


class StateConflict(DomainError):
    """Raised when a clock event violates the session state machine."""


class NotFoundError(DomainError):
    """Raised when a requested entity does not exist."""


class DuplicateProfileError(DomainError):
    """Raised when a registration collides with an existing identity."""

    def __init__(
        self,
        message: str,
        *,
        duplicate_type: Any,
        existing: Optional[Any] = None,
        similarity: Optional[float] = None,
    ):
        super().__init__(message)
        self.duplicate_type = duplicate_type
        self.existing = existing
        self.similarity = similarity


class DependencyFailure(DomainError):
    """Raised when a backing store or scan is unavailable."""


class DuplicateCheckUnavailable(DependencyFailure):
    """The duplicate scan could not run; registration must fail closed."""
