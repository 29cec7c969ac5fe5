"""
FastAPI Router for the stockgate HTTP surface

Mirrors the upstream inventory API under /api and hosts the Telegram
notification endpoints under /api/telegram. Collaborators (shared httpx
client, settings, notifier) are read from app.extra.
"""

import logging
from json import JSONDecodeError

import httpx
from fastapi import APIRouter, HTTPException, Request
from starlette.responses import Response

from stockgate.config import GatewaySettings
from stockgate.errors import InvalidNotification
from stockgate.models import NotificationResult
from stockgate.notify import TelegramNotifier
from stockgate.proxy import ReverseProxy

LOG = logging.getLogger(__name__)

API_PREFIX = "/api"
PROXY_METHODS = ["GET", "POST", "PUT", "PATCH", "DELETE", "HEAD", "OPTIONS"]

router = APIRouter(prefix=API_PREFIX, tags=["stockgate"])


def get_settings(request: Request) -> GatewaySettings:
    settings = request.app.extra.get("settings")
    if settings is None:
        settings = GatewaySettings()
    elif not isinstance(settings, GatewaySettings):
        settings = GatewaySettings.model_validate(settings)
    return settings


def get_http(request: Request) -> httpx.AsyncClient:
    return request.app.extra["http"]


def get_notifier(request: Request) -> TelegramNotifier:
    notifier = request.app.extra.get("notifier")
    if notifier is None:
        notifier = TelegramNotifier.from_settings(get_http(request), get_settings(request))
    return notifier


def proxied_remainder(request: Request) -> str:
    """Path below /api, still percent-encoded as the caller sent it."""
    raw_path = request.scope.get("raw_path")
    path = raw_path.decode("latin-1") if raw_path else request.url.path
    return path[len(API_PREFIX) :]


@router.post("/telegram/send", response_model=NotificationResult, response_model_exclude_none=True)
async def telegram_send(request: Request) -> NotificationResult:
    """Forward a text message to the configured Telegram chat."""
    try:
        payload = await request.json()
    except (JSONDecodeError, UnicodeDecodeError) as exc:
        raise InvalidNotification("Valid message is required") from exc

    message = payload.get("message") if isinstance(payload, dict) else None
    return await get_notifier(request).send(message)


@router.get("/telegram/getchatid")
async def telegram_chat_ids(request: Request) -> dict:
    """List the chats that recently messaged the bot."""
    chats = await get_notifier(request).recent_chats()
    if not chats:
        return {"success": False, "message": "No messages yet. Send the bot a message first."}
    return {"success": True, "chats": chats}


@router.api_route("/{path:path}", methods=PROXY_METHODS, include_in_schema=False)
async def proxy_upstream(request: Request, path: str) -> Response:
    """Relay any other /api call to the upstream inventory API."""
    settings = get_settings(request)
    remainder = proxied_remainder(request)
    if settings.is_reserved(remainder):
        raise HTTPException(status_code=404, detail="Not Found")

    proxy = ReverseProxy(get_http(request), settings)
    return await proxy.forward(request, remainder)
