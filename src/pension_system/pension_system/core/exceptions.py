from __future__ import annotations

from typing import Any, Optional


class DomainError(Exception):
    """Base exception for business rule violations.

    ``payload`` holds extra JSON fields merged into the error response.
    """

    status_code = 400

    def __init__(self, message: str, payload: Optional[dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.payload = payload or {}


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules.

    ``errors`` carries per-field details (``{"field": ..., "msg": ...}``) when the
    failure comes from request validation.
    """

    status_code = 400

    def __init__(self, message: str, errors: Optional[list[dict]] = None):
        super().__init__(message, {"errors": errors} if errors else None)
        self.errors = errors or []


class AuthenticationError(DomainError):
    """Raised when login credentials or bearer tokens are invalid."""

    status_code = 401


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""

    status_code = 403


class NotFoundError(DomainError):
    status_code = 404


class AccountLockedError(DomainError):
    """Raised when a locked or disabled account tries to log in."""

    status_code = 423
