"""
Exceptions raised by the identity layer.

Each carries the HTTP status the API should answer with; the FastAPI app
renders them as `{"message": ...}` bodies.
"""

from __future__ import annotations

from typing import Optional


class IdentityError(Exception):
    """Base class for identity and profile failures."""

    status_code: int = 400

    def __init__(self, message: str, *, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class InvalidInputError(IdentityError):
    """A required input was missing; raised before contacting the provider."""


class ProviderError(IdentityError):
    """The identity provider rejected a request or could not be reached."""

    def __init__(
        self,
        message: str,
        *,
        code: Optional[str] = None,
        status_code: Optional[int] = None,
    ):
        super().__init__(message, status_code=status_code)
        self.code = code


class SessionMismatchError(IdentityError):
    """No user is signed in, or the signed-in user is not the one requested."""

    status_code = 401
