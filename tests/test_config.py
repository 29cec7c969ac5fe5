import pytest

from stockgate.config import GatewaySettings, is_placeholder
from stockgate.models import EntityKind, GatewayConfig, QueryFilters


def test_telegram_credentials_read_from_unprefixed_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("TELEGRAM_BOT_TOKEN", "123:abc")
    monkeypatch.setenv("TELEGRAM_CHAT_ID", "42")

    settings = GatewaySettings()

    assert settings.telegram_bot_token == "123:abc"
    assert settings.telegram_chat_id == "42"
    assert settings.telegram_configured is True


def test_prefixed_env_overrides_upstream(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("STOCKGATE_UPSTREAM_BASE_URL", "https://inventory.test/api")
    monkeypatch.setenv("STOCKGATE_PORT", "8080")

    settings = GatewaySettings()

    assert settings.upstream_url("/entity/store") == "https://inventory.test/api/entity/store"
    assert settings.port == 8080


@pytest.mark.parametrize(
    ("value", "expected"),
    [(None, True), ("", True), ("  ", True), ("YOUR_BOT_TOKEN", True), ("YOUR_CHAT_ID", True),
     ("123:abc", False)],
)
def test_is_placeholder(value, expected: bool) -> None:
    assert is_placeholder(value) is expected


def test_reserved_prefix() -> None:
    settings = GatewaySettings()

    assert settings.is_reserved("/telegram/send")
    assert not settings.is_reserved("/entity/telegram")


def test_gateway_config_accepts_field_names_and_defaults() -> None:
    config = GatewayConfig(identity="admin", secret="pw")

    assert config.endpoint_base == "https://api.moysklad.ru/api/remap/1.2"
    assert config.timeout_seconds == 30.0


def test_query_filters_drop_unset_values() -> None:
    assert QueryFilters(limit=10, search="chair").to_params() == {"limit": 10, "search": "chair"}
    assert QueryFilters().to_params() == {}


def test_entity_kind_paths() -> None:
    assert EntityKind.DEMAND.path == "/entity/demand"
    assert EntityKind.SUPPLY.is_document
    assert not EntityKind.STORE.is_document
