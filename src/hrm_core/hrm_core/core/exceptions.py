from __future__ import annotations

from typing import Optional


class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""

    def __init__(self, message: str, *, field: Optional[str] = None):
        super().__init__(message)
        self.field = field


class ConflictError(DomainError):
    """Raised when a write would duplicate a uniquely keyed record."""


class NotFoundError(DomainError):
    """Raised when a record id does not exist."""


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""


class DirectoryUnavailable(DomainError):
    """Raised when the employee directory service cannot be reached."""
