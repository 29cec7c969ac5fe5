"""Configuration for stockgate components."""

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from stockgate.models import DEFAULT_ENDPOINT_BASE

PLACEHOLDER_VALUES = frozenset({"", "YOUR_BOT_TOKEN", "YOUR_CHAT_ID"})


class GatewaySettings(BaseSettings):
    upstream_base_url: str = DEFAULT_ENDPOINT_BASE
    reserved_prefix: str = "/telegram/"

    user_agent: str = "stockgate-proxy/0.1.0"
    upstream_accept: str = "application/json;charset=utf-8"
    upstream_accept_encoding: str = "gzip"

    telegram_api_base: str = "https://api.telegram.org"
    telegram_bot_token: str | None = Field(
        default=None,
        validation_alias=AliasChoices("stockgate_telegram_bot_token", "telegram_bot_token"),
    )
    telegram_chat_id: str | None = Field(
        default=None,
        validation_alias=AliasChoices("stockgate_telegram_chat_id", "telegram_chat_id"),
    )

    redis_url: str = "redis://localhost:6379/0"
    config_key: str = "apiConfig"

    cors_origins: list[str] = ["*"]
    host: str = "0.0.0.0"
    port: int = 3001
    log_level: str = "INFO"

    model_config = SettingsConfigDict(env_prefix="stockgate_", populate_by_name=True)

    def upstream_url(self, remainder: str) -> str:
        return self.upstream_base_url.rstrip("/") + remainder

    def is_reserved(self, remainder: str) -> bool:
        return remainder.startswith(self.reserved_prefix)

    @property
    def telegram_configured(self) -> bool:
        return not is_placeholder(self.telegram_bot_token) and not is_placeholder(
            self.telegram_chat_id
        )


def is_placeholder(value: str | None) -> bool:
    return value is None or value.strip() in PLACEHOLDER_VALUES
