"""
Notification side-channel

Forwards short text messages to a Telegram chat. When the bot token or
chat id is missing the channel quietly acknowledges without sending
anything. Exactly one delivery attempt is made per call.
"""

import logging
import re
from dataclasses import dataclass, field
from typing import Any

import httpx

from stockgate.config import GatewaySettings, is_placeholder
from stockgate.errors import (
    ConfigurationError,
    ConnectivityError,
    InvalidNotification,
    ProtocolError,
    UpstreamError,
)
from stockgate.models import NotificationMessage, NotificationResult

LOG = logging.getLogger(__name__)

# C0 and C1 control characters, except tab, line feed and carriage return.
CONTROL_CHARS = re.compile("[\x00-\x08\x0b\x0c\x0e-\x1f\x7f-\x9f]")


def sanitize(text: str) -> str:
    return CONTROL_CHARS.sub("", text).strip()


@dataclass
class TelegramNotifier:
    """
    Usage:
        notifier = TelegramNotifier(http, bot_token="123:abc", chat_id="42")
        result = await notifier.send("Stock is low")
    """

    http: httpx.AsyncClient
    bot_token: str | None = field(default=None, repr=False)
    chat_id: str | None = None
    api_base: str = "https://api.telegram.org"

    @classmethod
    def from_settings(
        cls, http: httpx.AsyncClient, settings: GatewaySettings
    ) -> "TelegramNotifier":
        return cls(
            http,
            bot_token=settings.telegram_bot_token,
            chat_id=settings.telegram_chat_id,
            api_base=settings.telegram_api_base,
        )

    @property
    def is_configured(self) -> bool:
        return not is_placeholder(self.bot_token) and not is_placeholder(self.chat_id)

    def method_url(self, method: str) -> str:
        return f"{self.api_base.rstrip('/')}/bot{self.bot_token}/{method}"

    async def send(self, text: Any) -> NotificationResult:
        """
        Deliver text to the configured chat.

        Raises:
            InvalidNotification: If text is not a non-blank string
            ConfigurationError: If the chat id is not numeric
            ConnectivityError: If the provider could not be reached
            UpstreamError: If the provider rejected the message
        """
        if not isinstance(text, str) or not text.strip():
            raise InvalidNotification("Valid message is required")

        message = NotificationMessage(text=sanitize(text))
        if not message.text:
            raise InvalidNotification("Valid message is required")

        if not self.is_configured:
            LOG.info("Telegram not configured, dropping notification")
            return NotificationResult(
                success=True, delivered=False, message="Telegram not configured"
            )

        try:
            chat_id = int(self.chat_id)
        except ValueError as exc:
            raise ConfigurationError("Telegram chat_id must be numeric") from exc

        try:
            response = await self.http.post(
                self.method_url("sendMessage"),
                json={"chat_id": chat_id, "text": message.text},
            )
        except httpx.HTTPError as exc:
            LOG.warning("Error sending message to Telegram: %s", exc)
            raise ConnectivityError("Error sending message to Telegram") from exc

        if not response.is_success:
            LOG.warning("Telegram rejected message with status %d", response.status_code)
            raise UpstreamError(
                "Failed to send message to Telegram", http_status=response.status_code
            )

        return NotificationResult(success=True, delivered=True, message="Message sent to Telegram")

    async def recent_chats(self) -> list[dict[str, Any]]:
        """Return one entry per distinct chat that recently messaged the bot."""
        if is_placeholder(self.bot_token):
            raise ConfigurationError("Telegram bot token not configured")

        try:
            response = await self.http.get(self.method_url("getUpdates"))
        except httpx.HTTPError as exc:
            raise ConnectivityError("Error fetching Telegram updates") from exc

        if not response.is_success:
            raise UpstreamError("Error fetching Telegram updates", http_status=response.status_code)

        try:
            payload = response.json()
        except ValueError as exc:
            raise ProtocolError("Undecodable Telegram updates") from exc

        if not isinstance(payload, dict) or not payload.get("ok"):
            return []

        chats: dict[int, dict[str, Any]] = {}
        for update in payload.get("result") or []:
            if not isinstance(update, dict) or not isinstance(update.get("message"), dict):
                continue
            message = update["message"]
            chat_id = (message.get("chat") or {}).get("id")
            if chat_id is None or chat_id in chats:
                continue
            sender = message.get("from") or {}
            chats[chat_id] = {
                "chat_id": chat_id,
                "username": sender.get("username"),
                "first_name": sender.get("first_name"),
                "message": message.get("text"),
            }
        return list(chats.values())
