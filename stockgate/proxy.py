"""
Reverse proxy to the upstream inventory API.

Rewrites the local prefix to the upstream base, forwards method, body and
the caller's own Authorization header, then streams the upstream response
back with cross-origin headers stripped. The proxy never adds credentials
and never reinterprets upstream status codes.
"""

import asyncio
import contextlib
import logging
from collections.abc import AsyncIterator
from dataclasses import dataclass
from typing import TYPE_CHECKING

import httpx
from fastapi.responses import JSONResponse
from starlette.background import BackgroundTask
from starlette.responses import Response, StreamingResponse

if TYPE_CHECKING:
    from starlette.requests import Request

from stockgate.config import GatewaySettings
from stockgate.errors import ProxyForwardingError

LOG = logging.getLogger(__name__)

BODY_METHODS = frozenset({"POST", "PUT", "PATCH"})

DENIED_HEADER_PREFIXES = ("access-control-",)

# Framing is owned by the ASGI server on the downstream connection.
HOP_BY_HOP_HEADERS = frozenset(
    {
        "connection",
        "keep-alive",
        "proxy-authenticate",
        "proxy-authorization",
        "te",
        "trailer",
        "transfer-encoding",
        "upgrade",
    }
)


def is_forwardable_header(name: str) -> bool:
    name = name.lower()
    if name in HOP_BY_HOP_HEADERS:
        return False
    return not name.startswith(DENIED_HEADER_PREFIXES)


def filter_response_headers(headers: httpx.Headers) -> list[tuple[str, str]]:
    return [(name, value) for name, value in headers.multi_items() if is_forwardable_header(name)]


class ClientDisconnected(Exception):
    pass


@dataclass
class ReverseProxy:
    """
    Usage:
        proxy = ReverseProxy(http, settings)
        response = await proxy.forward(request, "/entity/product")
    """

    http: httpx.AsyncClient
    settings: GatewaySettings

    def target_url(self, remainder: str, query: str = "") -> str:
        url = self.settings.upstream_url(remainder)
        if query:
            url = f"{url}?{query}"
        return url

    def forward_headers(
        self,
        inbound: "Request | None",
        method: str,
        body: bytes,
    ) -> dict[str, str]:
        headers = {
            "User-Agent": self.settings.user_agent,
            "Accept": self.settings.upstream_accept,
            "Accept-Encoding": self.settings.upstream_accept_encoding,
        }

        if inbound is not None:
            authorization = inbound.headers.get("authorization")
            if authorization:
                headers["Authorization"] = authorization

        if method in BODY_METHODS and body:
            headers["Content-Type"] = "application/json"
            headers["Content-Length"] = str(len(body))

        return headers

    async def forward(self, request: "Request", remainder: str) -> Response:
        method = request.method.upper()
        body = await request.body() if method in BODY_METHODS else b""
        url = self.target_url(remainder, request.url.query)

        # Standalone request: no client cookies or default headers upstream.
        upstream_request = httpx.Request(
            method,
            url,
            headers=self.forward_headers(request, method, body),
            content=body or None,
        )
        LOG.debug("Proxying %s %s -> %s", method, request.url.path, url)

        try:
            upstream = await self.send_unless_disconnected(request, upstream_request)
        except ClientDisconnected:
            LOG.info("Caller disconnected, aborted %s %s", method, url)
            return Response(status_code=499)
        except httpx.HTTPError as exc:
            error = ProxyForwardingError(f"Proxy error: {exc}")
            LOG.warning("Proxy error for %s %s: %s", method, url, exc)
            return JSONResponse({"error": error.message}, status_code=error.response_status)

        response = StreamingResponse(
            relay(upstream),
            status_code=upstream.status_code,
            background=BackgroundTask(upstream.aclose),
        )
        # Raw list keeps repeated headers such as Set-Cookie.
        response.raw_headers = [
            (name.encode("latin-1"), value.encode("latin-1"))
            for name, value in filter_response_headers(upstream.headers)
        ]
        return response

    async def send_unless_disconnected(
        self,
        request: "Request",
        upstream_request: httpx.Request,
    ) -> httpx.Response:
        """Send upstream, cancelling the call if the caller goes away first."""
        send_task = asyncio.ensure_future(self.http.send(upstream_request, stream=True))
        disconnect_task = asyncio.ensure_future(wait_for_disconnect(request))

        try:
            await asyncio.wait({send_task, disconnect_task}, return_when=asyncio.FIRST_COMPLETED)
        except asyncio.CancelledError:
            send_task.cancel()
            raise
        finally:
            disconnect_task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await disconnect_task

        if send_task.done():
            return send_task.result()

        send_task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await send_task
        raise ClientDisconnected()


async def wait_for_disconnect(request: "Request") -> None:
    while True:
        message = await request.receive()
        if message["type"] == "http.disconnect":
            return


async def relay(upstream: httpx.Response) -> AsyncIterator[bytes]:
    """Yield the raw upstream body; an upstream failure drops the connection."""
    try:
        async for chunk in upstream.aiter_raw():
            yield chunk
    except httpx.HTTPError:
        LOG.exception("Upstream stream failed after headers were sent")
        raise
    finally:
        await upstream.aclose()
