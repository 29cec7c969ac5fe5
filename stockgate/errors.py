"""
Stockgate error hierarchy.

Every failure surfaced by the client, the catalog, the proxy and the
notifier is a StockgateError carrying the uniform error shape:
message, optional upstream HTTP status and optional upstream error code.
"""

from typing import Any


class StockgateError(Exception):
    """Base exception for all stockgate errors."""

    response_status: int = 500

    def __init__(
        self,
        message: str,
        *,
        http_status: int | None = None,
        upstream_code: str | None = None,
    ) -> None:
        self.message = message
        self.http_status = http_status
        self.upstream_code = upstream_code
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        return {
            "message": self.message,
            "http_status": self.http_status,
            "upstream_code": self.upstream_code,
        }


class ConfigurationError(StockgateError):
    """Missing or invalid credentials, raised before any network call."""


class ConnectivityError(StockgateError):
    """DNS, TCP, TLS or timeout failure reaching a remote service."""


class UpstreamError(StockgateError):
    """Remote service answered with a non-2xx status."""


class ProtocolError(StockgateError):
    """Remote service answered with a body that could not be decoded."""


class ProxyForwardingError(StockgateError):
    """The proxy could not relay a call to the upstream API."""


class InvalidNotification(StockgateError):
    """Notification text rejected before transmission."""

    response_status = 400
