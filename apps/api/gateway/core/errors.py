"""Error kinds surfaced by the gateway and their HTTP status codes."""
from __future__ import annotations

from fastapi import status


class GatewayError(RuntimeError):
    """Base class for errors rendered as ``{"error": message}``."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class InvalidArgumentError(GatewayError):
    """A required request field was missing or empty."""

    status_code = status.HTTP_400_BAD_REQUEST


class ForbiddenError(GatewayError):
    """The caller is not allowed to perform a host-only operation."""

    status_code = status.HTTP_403_FORBIDDEN


class UpstreamFailureError(GatewayError):
    """The media server (or token signer) reported a failure."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
