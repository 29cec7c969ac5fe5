"""
Credential Store

Persists the upstream connection settings under a single Redis key so a
later process can pick them up. Reachability is not checked here.
"""

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from pydantic import ValidationError

if TYPE_CHECKING:
    from redis.asyncio import Redis

from stockgate.config import GatewaySettings
from stockgate.errors import ConfigurationError
from stockgate.models import GatewayConfig

LOG = logging.getLogger(__name__)


@dataclass
class CredentialStore:
    """
    Usage:
        store = CredentialStore(redis)
        await store.save(config)
        config = await store.load()
    """

    redis: "Redis"
    key: str = "apiConfig"

    @classmethod
    def from_settings(cls, redis: "Redis", settings: GatewaySettings) -> "CredentialStore":
        return cls(redis, key=settings.config_key)

    async def save(self, config: GatewayConfig) -> None:
        """Overwrite the stored config."""
        await self.redis.set(self.key, config.model_dump_json(by_alias=True))
        LOG.info("Saved connection settings for %s", config.identity)

    async def load(self) -> GatewayConfig | None:
        """Return the last saved config, or None if nothing was ever saved."""
        data = await self.redis.get(self.key)
        if data is None:
            return None

        if isinstance(data, bytes):
            data = data.decode("utf-8")

        try:
            return GatewayConfig.model_validate_json(data)
        except ValidationError as exc:
            raise ConfigurationError(f"Stored connection settings are invalid: {exc}") from exc
