"""Data models shared by the client, the catalog and the gateway."""

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_ENDPOINT_BASE = "https://api.moysklad.ru/api/remap/1.2"


class GatewayConfig(BaseModel):
    """
    Connection settings for the upstream inventory API.

    Stored by alias so the persisted record keeps the field names
    (baseURL, username, password, timeout) used by existing installs.
    """

    model_config = ConfigDict(populate_by_name=True)

    endpoint_base: str = Field(default=DEFAULT_ENDPOINT_BASE, alias="baseURL")
    identity: str = Field(alias="username")
    secret: str = Field(alias="password", repr=False)
    timeout_ms: int = Field(default=30000, alias="timeout", gt=0)

    @property
    def timeout_seconds(self) -> float:
        return self.timeout_ms / 1000


class ConnectionStatus(BaseModel):
    connected: bool = False


class EntityKind(str, Enum):
    PRODUCT = "product"
    COUNTERPARTY = "counterparty"
    DEMAND = "demand"
    SUPPLY = "supply"
    ORGANIZATION = "organization"
    STORE = "store"

    @property
    def path(self) -> str:
        return f"/entity/{self.value}"

    @property
    def is_document(self) -> bool:
        return self in (EntityKind.DEMAND, EntityKind.SUPPLY)


class QueryFilters(BaseModel):
    """Collection query parameters, passed upstream verbatim."""

    limit: int | None = None
    offset: int | None = None
    search: str | None = None
    filter: str | None = None
    order: str | None = None
    expand: str | None = None

    def to_params(self) -> dict[str, str | int]:
        return self.model_dump(exclude_none=True)


class Page(BaseModel):
    """Collection envelope returned by upstream list endpoints."""

    model_config = ConfigDict(extra="allow")

    context: dict[str, Any] = Field(default_factory=dict)
    meta: dict[str, Any] = Field(default_factory=dict)
    rows: list[dict[str, Any]] = Field(default_factory=list)


class SearchResult(BaseModel):
    kind: EntityKind | str
    page: Page


class NotificationMessage(BaseModel):
    text: str


class NotificationResult(BaseModel):
    success: bool
    delivered: bool = False
    message: str | None = None
