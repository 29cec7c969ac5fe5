"""Shared fixtures for stockgate tests."""

from collections.abc import AsyncIterator

import httpx
import pytest

from stockgate.client import InventoryClient
from stockgate.config import GatewaySettings
from stockgate.models import GatewayConfig
from stockgate.store import CredentialStore

UPSTREAM = "https://api.test/api/remap/1.2"
TELEGRAM = "https://telegram.test"


class FakeRedis:
    """In-memory stand-in for the two Redis calls the store makes."""

    def __init__(self) -> None:
        self.data: dict[str, bytes] = {}

    async def get(self, key: str) -> bytes | None:
        return self.data.get(key)

    async def set(self, key: str, value: str | bytes) -> bool:
        self.data[key] = value.encode("utf-8") if isinstance(value, str) else value
        return True


@pytest.fixture
def redis() -> FakeRedis:
    return FakeRedis()


@pytest.fixture
def store(redis: FakeRedis) -> CredentialStore:
    return CredentialStore(redis)


@pytest.fixture
def config() -> GatewayConfig:
    return GatewayConfig(baseURL=UPSTREAM, username="admin@shop", password="s3cret", timeout=5000)


@pytest.fixture
async def http() -> AsyncIterator[httpx.AsyncClient]:
    async with httpx.AsyncClient() as client:
        yield client


@pytest.fixture
def client(http: httpx.AsyncClient, store: CredentialStore) -> InventoryClient:
    return InventoryClient(http, store=store)


@pytest.fixture
def configured_client(client: InventoryClient, config: GatewayConfig) -> InventoryClient:
    client.configure(config)
    return client


@pytest.fixture
def settings() -> GatewaySettings:
    return GatewaySettings(
        upstream_base_url=UPSTREAM,
        telegram_api_base=TELEGRAM,
        telegram_bot_token=None,
        telegram_chat_id=None,
    )
