"""Error taxonomy shared by the gatekeeper, the proxy and the HTTP layer."""
from __future__ import annotations

GENERIC_INTERNAL_ERROR = "Internal server error in Worker."


class GatewayError(Exception):
    """Base class for failures that map onto a client-facing JSON error."""

    status_code: int = 500

    def __init__(self, detail: str, *, status_code: int | None = None) -> None:
        super().__init__(detail)
        self.detail = detail
        if status_code is not None:
            self.status_code = status_code


class ClientInputError(GatewayError):
    """Raised when the inbound request breaks a validation rule."""

    status_code = 400


class ServerConfigurationError(GatewayError):
    """Raised when the gateway lacks configuration required to proxy."""


class UpstreamError(GatewayError):
    """Raised when the upstream provider answers with a non-2xx status."""


class UpstreamShapeError(GatewayError):
    """Raised when a successful upstream response cannot be used."""


class UpstreamTransportError(GatewayError):
    """Raised when the upstream cannot be reached or does not answer in time."""
