"""
Stockgate Server

Builds the FastAPI application for server-resident mode: the /api reverse
proxy and the Telegram notification endpoints behind one CORS policy.

Run it with the `stockgate` console script or `python -m stockgate.server`.
"""

import argparse
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import httpx
import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from stockgate.config import GatewaySettings
from stockgate.errors import StockgateError
from stockgate.notify import TelegramNotifier
from stockgate.router import router

LOG = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    if app.extra.get("http") is not None:
        yield
        return

    app.extra["http"] = httpx.AsyncClient()
    try:
        yield
    finally:
        await app.extra.pop("http").aclose()


async def handle_stockgate_error(request: Request, exc: StockgateError) -> JSONResponse:
    if exc.response_status >= 500:
        LOG.warning(
            "%s on %s %s: %s", type(exc).__name__, request.method, request.url.path, exc.message
        )
    return JSONResponse({"error": exc.message}, status_code=exc.response_status)


def create_app(
    settings: GatewaySettings | None = None,
    http: httpx.AsyncClient | None = None,
    notifier: TelegramNotifier | None = None,
) -> FastAPI:
    """
    Build the gateway application.

    An injected http client is used as-is and left open on shutdown;
    otherwise one is created for the lifetime of the app.
    """
    settings = settings or GatewaySettings()

    app = FastAPI(title="stockgate", lifespan=lifespan)
    app.extra["settings"] = settings
    app.extra["http"] = http
    app.extra["notifier"] = notifier

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(StockgateError, handle_stockgate_error)
    app.include_router(router)

    if notifier is None and not settings.telegram_configured:
        LOG.warning("Telegram notifications are not configured")

    return app


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Run the stockgate gateway server")
    parser.add_argument("--host", default=None)
    parser.add_argument("--port", type=int, default=None)
    parser.add_argument("--log-level", default=None)
    return parser.parse_args()


def main() -> None:
    args = parse_args()
    settings = GatewaySettings()
    host = args.host or settings.host
    port = args.port or settings.port
    log_level = (args.log_level or settings.log_level).upper()

    logging.basicConfig(
        level=log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    LOG.info("Starting stockgate on %s:%d, proxying %s", host, port, settings.upstream_base_url)

    uvicorn.run(create_app(settings), host=host, port=port, log_level=log_level.lower())


if __name__ == "__main__":
    main()
