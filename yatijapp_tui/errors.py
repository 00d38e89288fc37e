"""
Defines project-specific exception classes.

API errors live in :mod:`yatijapp_tui.api.errors`; this module holds the
ones raised outside of HTTP calls.
"""

from typing import Optional


class YatijappError(Exception):
    """Base class for all custom exceptions in the yatijapp client."""


class ConfigurationError(YatijappError):
    """Raised when loading or validating the configuration file fails."""


class AuthClientError(YatijappError):
    """Raised when the auth client cannot issue a request at all."""


class InvalidTokenError(AuthClientError):
    """Raised when the stored token is missing, unreadable or rejected."""

    def __init__(self, msg: str = "token is missing or invalid") -> None:
        self.msg = msg
        super().__init__(msg)


class ValidationError(YatijappError):
    """Raised when one or more form fields fail validation."""

    def __init__(self, msg: str = "input validation failed") -> None:
        self.msg = msg
        super().__init__(msg)


class InternalError(YatijappError):
    """
    Raised when a page cannot be built from the data it was handed,
    e.g. a record whose status is not one of the known choices.
    """

    def __init__(self, msg: str, cause: Optional[BaseException] = None) -> None:
        self.msg = msg
        self.cause = cause
        full_msg = msg
        if cause is not None:
            full_msg += f" (cause: {cause})"
        super().__init__(full_msg)


class EditorError(YatijappError):
    """Raised when the external editor cannot be found or exits with an error."""
