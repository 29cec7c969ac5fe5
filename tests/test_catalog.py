import json

import httpx
import pytest
from respx import MockRouter

from stockgate.catalog import Catalog, DocumentAccessor, EntityAccessor
from stockgate.client import InventoryClient
from stockgate.errors import ProtocolError, UpstreamError
from stockgate.models import EntityKind, QueryFilters
from tests.conftest import UPSTREAM


def envelope(*rows: dict) -> dict:
    return {
        "context": {"employee": {"href": f"{UPSTREAM}/context/employee"}},
        "meta": {"href": UPSTREAM, "size": len(rows), "limit": 1000, "offset": 0},
        "rows": list(rows),
    }


@pytest.fixture
def catalog(configured_client: InventoryClient) -> Catalog:
    return Catalog(configured_client)


async def test_catalog_covers_every_kind(catalog: Catalog) -> None:
    assert isinstance(catalog.products, EntityAccessor)
    assert isinstance(catalog.counterparties, EntityAccessor)
    assert isinstance(catalog.organizations, EntityAccessor)
    assert isinstance(catalog.stores, EntityAccessor)
    assert isinstance(catalog.demands, DocumentAccessor)
    assert isinstance(catalog.supplies, DocumentAccessor)


async def test_documents_cannot_be_deleted(catalog: Catalog) -> None:
    assert not hasattr(catalog.demands, "delete")
    assert not hasattr(catalog.supplies, "delete")
    assert hasattr(catalog.products, "delete")


async def test_list_passes_filters_verbatim(catalog: Catalog, respx_mock: MockRouter) -> None:
    route = respx_mock.get(f"{UPSTREAM}/entity/product").mock(
        return_value=httpx.Response(200, json=envelope({"id": "p1", "name": "Chair"}))
    )
    filters = QueryFilters(
        limit=50,
        offset=100,
        search="chair",
        filter="archived=false;weight>2",
        order="name,desc",
        expand="supplier",
    )

    page = await catalog.products.list(filters)

    assert page.rows == [{"id": "p1", "name": "Chair"}]
    assert page.meta["size"] == 1
    assert dict(route.calls.last.request.url.params) == {
        "limit": "50",
        "offset": "100",
        "search": "chair",
        "filter": "archived=false;weight>2",
        "order": "name,desc",
        "expand": "supplier",
    }


async def test_list_without_filters_sends_no_query(
    catalog: Catalog, respx_mock: MockRouter
) -> None:
    route = respx_mock.get(f"{UPSTREAM}/entity/store").mock(
        return_value=httpx.Response(200, json=envelope())
    )

    page = await catalog.stores.list()

    assert page.rows == []
    assert route.calls.last.request.url.query == b""


async def test_list_rejects_malformed_envelope(catalog: Catalog, respx_mock: MockRouter) -> None:
    respx_mock.get(f"{UPSTREAM}/entity/product").mock(
        return_value=httpx.Response(200, json={"rows": "not-a-list"})
    )

    with pytest.raises(ProtocolError):
        await catalog.products.list()


async def test_entity_crud(catalog: Catalog, respx_mock: MockRouter) -> None:
    base = f"{UPSTREAM}/entity/counterparty"
    respx_mock.get(f"{base}/c1").mock(return_value=httpx.Response(200, json={"id": "c1"}))
    create = respx_mock.post(base).mock(
        return_value=httpx.Response(200, json={"id": "c2", "name": "ACME"})
    )
    update = respx_mock.put(f"{base}/c2").mock(
        return_value=httpx.Response(200, json={"id": "c2", "name": "ACME Ltd"})
    )

    assert await catalog.counterparties.get("c1") == {"id": "c1"}
    assert (await catalog.counterparties.create({"name": "ACME"}))["id"] == "c2"
    assert (await catalog.counterparties.update("c2", {"name": "ACME Ltd"}))["name"] == "ACME Ltd"

    assert json.loads(create.calls.last.request.content) == {"name": "ACME"}
    assert json.loads(update.calls.last.request.content) == {"name": "ACME Ltd"}


async def test_product_delete(catalog: Catalog, respx_mock: MockRouter) -> None:
    route = respx_mock.delete(f"{UPSTREAM}/entity/product/p1").mock(
        return_value=httpx.Response(200)
    )

    await catalog.products.delete("p1")

    assert route.call_count == 1


async def test_document_get_expands_positions(catalog: Catalog, respx_mock: MockRouter) -> None:
    route = respx_mock.get(f"{UPSTREAM}/entity/demand/d1").mock(
        return_value=httpx.Response(200, json={"id": "d1", "positions": {"rows": []}})
    )

    document = await catalog.demands.get("d1")

    assert document["id"] == "d1"
    assert route.calls.last.request.url.params["expand"] == "positions"


async def test_document_positions(catalog: Catalog, respx_mock: MockRouter) -> None:
    positions = f"{UPSTREAM}/entity/supply/s1/positions"
    respx_mock.get(positions).mock(
        return_value=httpx.Response(200, json=envelope({"id": "pos1", "quantity": 3}))
    )
    add = respx_mock.post(positions).mock(
        return_value=httpx.Response(200, json={"id": "pos2", "quantity": 1})
    )
    position = {"quantity": 1, "price": 1000, "assortment": {"meta": {"type": "product"}}}

    page = await catalog.supplies.list_positions("s1")
    created = await catalog.supplies.add_position("s1", position)

    assert page.rows[0]["quantity"] == 3
    assert created["id"] == "pos2"
    assert json.loads(add.calls.last.request.content) == position


async def test_errors_propagate_from_accessors(catalog: Catalog, respx_mock: MockRouter) -> None:
    respx_mock.get(f"{UPSTREAM}/entity/organization").mock(
        return_value=httpx.Response(403, json={"errors": [{"error": "Forbidden", "code": 1016}]})
    )

    with pytest.raises(UpstreamError, match="Forbidden"):
        await catalog.organizations.list()


async def test_search_tolerates_failure_of_one_kind(
    catalog: Catalog, respx_mock: MockRouter
) -> None:
    products = respx_mock.get(f"{UPSTREAM}/entity/product").mock(
        return_value=httpx.Response(200, json=envelope({"id": "p1", "name": "Chair"}))
    )
    counterparties = respx_mock.get(f"{UPSTREAM}/entity/counterparty").mock(
        return_value=httpx.Response(500, json={"errors": [{"error": "boom"}]})
    )

    results = await catalog.search("chair", [EntityKind.PRODUCT, EntityKind.COUNTERPARTY])

    assert [result.kind for result in results] == [EntityKind.PRODUCT, EntityKind.COUNTERPARTY]
    assert results[0].page.rows == [{"id": "p1", "name": "Chair"}]
    assert results[1].page.rows == []
    for route in (products, counterparties):
        params = route.calls.last.request.url.params
        assert params["search"] == "chair"
        assert params["limit"] == "20"


async def test_search_tolerates_transport_failure(
    catalog: Catalog, respx_mock: MockRouter
) -> None:
    respx_mock.get(f"{UPSTREAM}/entity/store").mock(side_effect=httpx.ConnectError("down"))
    respx_mock.get(f"{UPSTREAM}/entity/demand").mock(
        return_value=httpx.Response(200, json=envelope({"id": "d1"}))
    )

    results = await catalog.search("x", ["store", "demand"])

    assert results[0].page.rows == []
    assert results[1].page.rows == [{"id": "d1"}]


async def test_search_defaults_to_products(catalog: Catalog, respx_mock: MockRouter) -> None:
    respx_mock.get(f"{UPSTREAM}/entity/product").mock(
        return_value=httpx.Response(200, json=envelope({"id": "p1"}))
    )

    results = await catalog.search("p")

    assert len(results) == 1
    assert results[0].kind is EntityKind.PRODUCT


async def test_search_tolerates_unexpected_exception_in_one_kind(
    catalog: Catalog, respx_mock: MockRouter
) -> None:
    respx_mock.get(f"{UPSTREAM}/entity/product").mock(side_effect=RuntimeError("boom"))
    respx_mock.get(f"{UPSTREAM}/entity/store").mock(
        return_value=httpx.Response(200, json=envelope({"id": "s1", "name": "Main"}))
    )

    results = await catalog.search("x", ["product", "store"])

    assert [result.kind for result in results] == [EntityKind.PRODUCT, EntityKind.STORE]
    assert results[0].page.rows == []
    assert results[1].page.rows == [{"id": "s1", "name": "Main"}]


async def test_search_unknown_kind_yields_empty_page(
    catalog: Catalog, respx_mock: MockRouter
) -> None:
    respx_mock.get(f"{UPSTREAM}/entity/product").mock(
        return_value=httpx.Response(200, json=envelope({"id": "p1"}))
    )

    results = await catalog.search("x", ["product", "warehouse"])

    assert results[0].page.rows == [{"id": "p1"}]
    assert results[1].kind == "warehouse"
    assert results[1].page.rows == []
