"""
Resource Accessor Catalog

Typed CRUD and query operations per entity kind, each a thin
parameterization of InventoryClient. Entity bodies are passed through
as plain dicts; filters are sent upstream verbatim.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any

from pydantic import ValidationError

from stockgate.client import InventoryClient
from stockgate.errors import ProtocolError, StockgateError
from stockgate.models import EntityKind, Page, QueryFilters, SearchResult

LOG = logging.getLogger(__name__)

SEARCH_LIMIT = 20


def parse_page(data: Any) -> Page:
    try:
        return Page.model_validate(data)
    except ValidationError as exc:
        raise ProtocolError(f"Malformed collection envelope: {exc}") from exc


@dataclass
class ResourceAccessor:
    client: InventoryClient
    kind: EntityKind

    @property
    def path(self) -> str:
        return self.kind.path

    async def list(self, filters: QueryFilters | None = None) -> Page:
        params = filters.to_params() if filters is not None else None
        return parse_page(await self.client.request("GET", self.path, params=params))

    async def get(self, entity_id: str) -> dict[str, Any]:
        return await self.client.request("GET", f"{self.path}/{entity_id}")

    async def create(self, entity: dict[str, Any]) -> dict[str, Any]:
        return await self.client.request("POST", self.path, json_body=entity)

    async def update(self, entity_id: str, entity: dict[str, Any]) -> dict[str, Any]:
        return await self.client.request("PUT", f"{self.path}/{entity_id}", json_body=entity)


@dataclass
class EntityAccessor(ResourceAccessor):
    """Accessor for reference entities (products, counterparties, ...)."""

    async def delete(self, entity_id: str) -> None:
        await self.client.request("DELETE", f"{self.path}/{entity_id}")


@dataclass
class DocumentAccessor(ResourceAccessor):
    """
    Accessor for shipment and receipt documents.

    Documents cannot be deleted through the API; they carry positions instead.
    """

    async def get(self, entity_id: str) -> dict[str, Any]:
        return await self.client.request(
            "GET", f"{self.path}/{entity_id}", params={"expand": "positions"}
        )

    async def list_positions(self, entity_id: str) -> Page:
        return parse_page(await self.client.request("GET", f"{self.path}/{entity_id}/positions"))

    async def add_position(self, entity_id: str, position: dict[str, Any]) -> dict[str, Any]:
        return await self.client.request(
            "POST", f"{self.path}/{entity_id}/positions", json_body=position
        )


@dataclass
class Catalog:
    """
    All entity accessors bound to one client.

    Usage:
        catalog = Catalog(client)
        page = await catalog.products.list(QueryFilters(limit=50))
        results = await catalog.search("chair", [EntityKind.PRODUCT, EntityKind.STORE])
    """

    client: InventoryClient
    accessors: dict[EntityKind, ResourceAccessor] = field(default_factory=dict, init=False)

    def __post_init__(self) -> None:
        for kind in EntityKind:
            accessor_cls = DocumentAccessor if kind.is_document else EntityAccessor
            self.accessors[kind] = accessor_cls(self.client, kind)

    def accessor(self, kind: EntityKind) -> ResourceAccessor:
        return self.accessors[EntityKind(kind)]

    @property
    def products(self) -> EntityAccessor:
        return self.accessors[EntityKind.PRODUCT]

    @property
    def counterparties(self) -> EntityAccessor:
        return self.accessors[EntityKind.COUNTERPARTY]

    @property
    def demands(self) -> DocumentAccessor:
        return self.accessors[EntityKind.DEMAND]

    @property
    def supplies(self) -> DocumentAccessor:
        return self.accessors[EntityKind.SUPPLY]

    @property
    def organizations(self) -> EntityAccessor:
        return self.accessors[EntityKind.ORGANIZATION]

    @property
    def stores(self) -> EntityAccessor:
        return self.accessors[EntityKind.STORE]

    async def search(
        self,
        query: str,
        kinds: list[EntityKind | str] | None = None,
    ) -> list[SearchResult]:
        """
        Search several entity kinds at once.

        One call per kind runs concurrently. A kind whose call fails, or an
        unknown kind, gets an empty page; the other kinds are unaffected.
        Without kinds only products are searched.
        """
        kinds = list(kinds) if kinds else [EntityKind.PRODUCT]
        filters = QueryFilters(search=query, limit=SEARCH_LIMIT)

        async with asyncio.TaskGroup() as tg:
            tasks = [tg.create_task(self.search_kind(kind, filters)) for kind in kinds]

        return [task.result() for task in tasks]

    async def search_kind(self, kind: EntityKind | str, filters: QueryFilters) -> SearchResult:
        try:
            kind = EntityKind(kind)
        except ValueError:
            LOG.warning("Search skipped unknown entity kind %r", kind)
            return SearchResult(kind=kind, page=Page())

        try:
            page = await self.accessors[kind].list(filters)
        except StockgateError as exc:
            LOG.warning("Search in %s failed: %s", kind.value, exc.message)
            page = Page()
        except Exception:
            LOG.exception("Unexpected error searching %s", kind.value)
            page = Page()
        return SearchResult(kind=kind, page=page)
