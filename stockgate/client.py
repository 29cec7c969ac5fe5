"""
Stockgate Client

Sends authenticated calls straight to the upstream inventory API.
Every call rebuilds its Authorization header from the config held at that
moment, and every failure is raised as a StockgateError. Nothing is retried.
"""

import base64
import json
import logging
from dataclasses import dataclass, field
from typing import Any

import httpx

from stockgate.errors import (
    ConfigurationError,
    ConnectivityError,
    ProtocolError,
    StockgateError,
    UpstreamError,
)
from stockgate.models import ConnectionStatus, EntityKind, GatewayConfig
from stockgate.store import CredentialStore

LOG = logging.getLogger(__name__)

PROBE_PATH = EntityKind.ORGANIZATION.path
GENERIC_ERROR = "API Error"


@dataclass
class InventoryClient:
    """
    Client for the upstream inventory API.

    Usage:
        client = InventoryClient(httpx.AsyncClient())
        client.configure(GatewayConfig(username="admin@shop", password="secret"))
        organizations = await client.request("GET", "/entity/organization")
    """

    http: httpx.AsyncClient = field(default_factory=httpx.AsyncClient)
    store: CredentialStore | None = None
    config: GatewayConfig | None = field(default=None, init=False)
    connected: bool = field(default=False, init=False)

    @property
    def status(self) -> ConnectionStatus:
        return ConnectionStatus(connected=self.connected)

    def configure(self, config: GatewayConfig) -> None:
        """Use config for all following calls. Reachability is not checked."""
        if not config.identity or not config.secret:
            raise ConfigurationError("Username and password are required")

        self.config = config
        self.connected = False
        self.http.base_url = httpx.URL(config.endpoint_base)
        self.http.timeout = httpx.Timeout(config.timeout_seconds)
        LOG.debug("Configured upstream %s for %s", config.endpoint_base, config.identity)

    def authorization_header(self) -> str:
        if self.config is None or not self.config.identity or not self.config.secret:
            raise ConfigurationError("Connection settings are not configured")

        credentials = f"{self.config.identity}:{self.config.secret}".encode("utf-8")
        return "Basic " + base64.b64encode(credentials).decode("ascii")

    def build_headers(self) -> dict[str, str]:
        return {
            "Authorization": self.authorization_header(),
            "Content-Type": "application/json",
            "Accept-Encoding": "gzip",
        }

    async def request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        json_body: Any = None,
    ) -> Any:
        """
        Send one call to the upstream API and return its decoded JSON body.

        Raises:
            ConfigurationError: If no usable credentials are configured
            ConnectivityError: If the upstream could not be reached in time
            UpstreamError: If the upstream answered with a non-2xx status
            ProtocolError: If a 2xx body is not valid JSON
        """
        headers = self.build_headers()

        try:
            response = await self.http.request(
                method,
                path,
                params=params,
                json=json_body,
                headers=headers,
            )
        except httpx.TimeoutException as exc:
            LOG.warning("Timeout calling %s %s", method, path)
            raise ConnectivityError(f"Request timed out: {method} {path}") from exc
        except httpx.HTTPError as exc:
            LOG.warning("Transport error calling %s %s: %s", method, path, exc)
            raise ConnectivityError(str(exc) or type(exc).__name__) from exc

        if not response.is_success:
            raise translate_error(response)

        if not response.content:
            return None

        try:
            return response.json()
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            raise ProtocolError(
                f"Undecodable response body from {method} {path}",
                http_status=response.status_code,
            ) from exc

    async def probe(self) -> bool:
        """Return True only if a cheap read-only call succeeds."""
        try:
            await self.request("GET", PROBE_PATH, params={"limit": 1})
        except StockgateError as exc:
            LOG.info("Connection probe failed: %s", exc.message)
            self.connected = False
            return False

        self.connected = True
        return True

    async def connect(self, config: GatewayConfig) -> bool:
        """Configure, probe, and persist config only if the probe succeeds."""
        self.configure(config)
        if not await self.probe():
            return False

        if self.store is not None:
            await self.store.save(config)
        return True

    async def restore(self) -> bool:
        """Configure from the store. Returns False if nothing was saved."""
        if self.store is None:
            return False

        config = await self.store.load()
        if config is None:
            return False

        self.configure(config)
        return True


def translate_error(response: httpx.Response) -> UpstreamError:
    """Turn a non-2xx upstream response into an UpstreamError."""
    status = response.status_code
    try:
        payload = response.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        return UpstreamError(GENERIC_ERROR, http_status=status)

    detail: Any = None
    if isinstance(payload, dict):
        detail = payload.get("error")
        if detail is None:
            errors = payload.get("errors")
            if isinstance(errors, list) and errors:
                detail = errors[0]

    if isinstance(detail, dict) and isinstance(detail.get("error"), str):
        code = detail.get("code")
        return UpstreamError(
            detail["error"],
            http_status=status,
            upstream_code=str(code) if code is not None else None,
        )

    return UpstreamError(GENERIC_ERROR, http_status=status)
