"""
Domain error taxonomy.

Stores and services raise these for expected conditions (duplicate email,
missing task, bad token).  ``api.errors`` turns them into JSON responses;
anything that is not an ``AppError`` is treated as an internal fault.
"""

from __future__ import annotations

from fastapi import status


class AppError(Exception):
    """Base class for errors that map onto a client-visible response."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    code: str = "internal_error"
    message: str = "Internal server error"

    def __init__(self, message: str | None = None) -> None:
        if message is not None:
            self.message = message
        super().__init__(self.message)


class ValidationError(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    code = "validation_error"
    message = "Invalid input"


class ConflictError(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    code = "conflict"
    message = "Resource already exists"


class DuplicateEmailError(ConflictError):
    code = "duplicate_email"
    message = "User already exists"


class NotFoundError(AppError):
    """Raised for missing resources *and* for resources owned by someone else."""

    status_code = status.HTTP_404_NOT_FOUND
    code = "not_found"
    message = "Not found"


class AuthenticationError(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    code = "authentication_required"
    message = "Credential required"


class InvalidCredentialsError(AuthenticationError):
    code = "invalid_credentials"
    message = "Invalid credentials"


class InvalidTokenError(AuthenticationError):
    code = "token_invalid"
    message = "Invalid or expired credential"


class ExpiredTokenError(AuthenticationError):
    code = "token_expired"
    message = "Invalid or expired credential"


class InternalError(AppError):
    """Unexpected fault; the client only ever sees the generic message."""
