"""
Error types raised by the registry client.
Validation errors are local; remote, decode and cancellation errors come from the transport.
"""

from __future__ import annotations

from typing import Any


class RegistryError(Exception):
    """Base class for all registry client errors."""


class ValidationError(RegistryError, ValueError):
    """An identifier or option failed local validation. No request was sent."""


class DecodeError(RegistryError):
    """A response body could not be decoded into a registry resource."""


class OperationCancelled(RegistryError):
    """The caller's context was cancelled before or during the request."""


class DeadlineExceeded(OperationCancelled):
    """The caller's context deadline passed before the request completed."""


class RemoteError(RegistryError):
    """
    The registry answered with a non-success HTTP status.
    Carries the status code and the JSON:API error objects, if any.
    """

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        errors: list[dict[str, Any]] | None = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.errors = errors or []


class UnauthorizedError(RemoteError):
    """401: token missing, expired or lacking access."""


class NotFoundError(RemoteError):
    """404: the resource does not exist (or is not visible to the token)."""


class ConflictError(RemoteError):
    """409/422: the resource already exists or the request conflicts with its state."""


def remote_error_for_status(
    status_code: int, message: str, errors: list[dict[str, Any]] | None = None
) -> RemoteError:
    """Return the RemoteError subclass matching an HTTP status code."""
    if status_code == 401:
        cls: type[RemoteError] = UnauthorizedError
    elif status_code == 404:
        cls = NotFoundError
    elif status_code in (409, 422):
        cls = ConflictError
    else:
        cls = RemoteError
    return cls(message, status_code=status_code, errors=errors)
