"""Gateway error taxonomy.

Every error carries the HTTP status code the gateway answers with, so routers
can raise and let the exception handlers render the response. Storage
failures live in :mod:`statusgate.storage.errors`.
"""

from __future__ import annotations

from fastapi import status


class GatewayError(Exception):
    """Base exception for request-level failures."""

    status_code: int = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class NotReadyError(GatewayError):
    """Raised when the messaging session has not finished pairing."""

    status_code = status.HTTP_409_CONFLICT


class UnauthorizedError(GatewayError):
    """Raised when the manager password is missing or does not match."""

    status_code = status.HTTP_401_UNAUTHORIZED


class SetupRequiredError(UnauthorizedError):
    """Raised when an upload arrives before any manager password was set."""

    status_code = status.HTTP_403_FORBIDDEN


class InvalidInputError(GatewayError):
    """Raised when request content is malformed."""


class EmptyContentError(InvalidInputError):
    """Raised when an upload carries neither files nor text."""


class UnsupportedMediaTypeError(InvalidInputError):
    """Raised when a file is not an image or a video."""


class TooManyFilesError(GatewayError):
    """Raised when an upload exceeds the configured file count."""

    status_code = 413


class FileTooLargeError(GatewayError):
    """Raised when a single file exceeds the configured byte limit."""

    status_code = 413


class DeliveryFailedError(GatewayError):
    """Raised when the messaging client rejects a send.

    Items dispatched before the failure stay posted; ``delivered`` counts them.
    """

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str, *, delivered: int = 0) -> None:
        super().__init__(message)
        self.delivered = delivered
