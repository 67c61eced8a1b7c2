from abc import ABC


class UserError(ABC, Exception):
    """Base class for user-related errors.

    All errors that inherit from UserError will have their messages
    displayed to the user. These errors should not contain any
    sensitive information.
    """


class NotFoundError(UserError):
    """Raised when a requested resource is not found."""

    def __init__(self, message: str = "Document not found") -> None:
        super().__init__(message)


class AuthenticationError(UserError):
    """Raised when a bearer token is missing, invalid or expired, or credentials do not match."""

    def __init__(self, message: str = "Unauthorized") -> None:
        super().__init__(message)


class ConflictError(UserError):
    """Raised when a write would violate a uniqueness constraint."""


class ValidationError(UserError):
    """Raised when user input fails validation."""
