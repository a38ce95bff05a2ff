from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest


async def _create_menu(client) -> dict:
    menu_group = (await client.post("/api/menu-groups", json={"name": "Chicken sets"})).json()
    product = (await client.post("/api/products", json={"name": "Fried chicken", "price": "16000"})).json()
    resp = await client.post(
        "/api/menus",
        json={
            "name": "Fried chicken",
            "price": "16000",
            "menu_group_id": menu_group["id"],
            "menu_products": [{"product_id": product["id"], "quantity": 1}],
        },
    )
    assert resp.status_code == 201
    return resp.json()


async def _create_table(client, empty: bool) -> dict:
    resp = await client.post("/api/tables", json={"number_of_guests": 0, "empty": empty})
    assert resp.status_code == 201
    return resp.json()


@pytest.mark.asyncio
async def test_root_endpoint(client):
    resp = await client.get("/")
    assert resp.status_code == 200
    assert resp.json()["documentation"] == "/docs"


@pytest.mark.asyncio
async def test_health_endpoint_reports_database(client):
    resp = await client.get("/health")
    assert resp.status_code == 200
    assert resp.json()["database"] == "healthy"


@pytest.mark.asyncio
async def test_catalog_endpoints(client):
    menu_group_resp = await client.post("/api/menu-groups", json={"name": "Chicken sets"})
    assert menu_group_resp.status_code == 201
    assert menu_group_resp.headers["location"] == f"/api/menu-groups/{menu_group_resp.json()['id']}"

    menu = await _create_menu(client)
    assert Decimal(menu["price"]) == Decimal("16000")
    assert len(menu["menu_products"]) == 1

    menus = (await client.get("/api/menus")).json()
    assert [m["id"] for m in menus] == [menu["id"]]
    assert [g["name"] for g in (await client.get("/api/menu-groups")).json()] == ["Chicken sets"] * 2
    assert len((await client.get("/api/products")).json()) == 1


@pytest.mark.asyncio
async def test_negative_product_price_is_rejected(client):
    resp = await client.post("/api/products", json={"name": "Fried chicken", "price": "-1"})
    body = resp.json()
    assert resp.status_code == 400
    assert body["success"] is False
    assert "zero or greater" in body["detail"]


@pytest.mark.asyncio
async def test_table_group_lifecycle(client):
    first = await _create_table(client, empty=True)
    second = await _create_table(client, empty=True)

    resp = await client.post(
        "/api/table-groups",
        json={"order_tables": [{"id": first["id"]}, {"id": second["id"]}]},
    )
    assert resp.status_code == 201
    table_group = resp.json()
    assert [t["table_group_id"] for t in table_group["order_tables"]] == [table_group["id"]] * 2
    assert all(t["empty"] is False for t in table_group["order_tables"])

    resp = await client.put(f"/api/tables/{first['id']}/empty", json={"empty": True})
    assert resp.status_code == 409

    resp = await client.delete(f"/api/table-groups/{table_group['id']}")
    assert resp.status_code == 204

    tables = (await client.get("/api/tables")).json()
    assert [(t["table_group_id"], t["empty"]) for t in tables] == [(None, True), (None, True)]


@pytest.mark.asyncio
async def test_table_group_needs_two_tables(client):
    table = await _create_table(client, empty=True)

    resp = await client.post("/api/table-groups", json={"order_tables": [{"id": table["id"]}]})
    assert resp.status_code == 400


@pytest.mark.asyncio
async def test_order_lifecycle(client, ledger_task):
    menu = await _create_menu(client)
    table = await _create_table(client, empty=False)

    resp = await client.put(f"/api/tables/{table['id']}/number-of-guests", json={"number_of_guests": 4})
    assert resp.status_code == 200
    assert resp.json()["number_of_guests"] == 4

    resp = await client.post(
        "/api/orders",
        json={
            "order_table_id": table["id"],
            "order_line_items": [{"menu_id": menu["id"], "quantity": 2}],
        },
    )
    assert resp.status_code == 201
    order = resp.json()
    assert order["order_status"] == "COOKING"
    assert order["order_line_items"][0]["name"] == "Fried chicken"
    assert resp.headers["location"] == f"/api/orders/{order['id']}"

    resp = await client.put(f"/api/tables/{table['id']}/empty", json={"empty": True})
    assert resp.status_code == 409

    for next_status in ("MEAL", "COMPLETION"):
        resp = await client.put(f"/api/orders/{order['id']}/order-status", json={"order_status": next_status})
        assert resp.status_code == 200
        assert resp.json()["order_status"] == next_status

    assert [p["order_id"] for p in ledger_task.payloads] == [order["id"]]

    resp = await client.put(f"/api/orders/{order['id']}/order-status", json={"order_status": "COOKING"})
    assert resp.status_code == 409
    assert "already completed" in resp.json()["detail"]

    resp = await client.put(f"/api/tables/{table['id']}/empty", json={"empty": True})
    assert resp.status_code == 200

    orders = (await client.get("/api/orders")).json()
    assert [(o["id"], o["order_status"]) for o in orders] == [(order["id"], "COMPLETION")]


@pytest.mark.asyncio
async def test_ordered_time_keeps_its_instant_across_endpoints(client):
    menu = await _create_menu(client)
    table = await _create_table(client, empty=False)

    resp = await client.post(
        "/api/orders",
        json={
            "order_table_id": table["id"],
            "ordered_time": "2024-01-01T10:00:00+09:00",
            "order_line_items": [{"menu_id": menu["id"], "quantity": 1}],
        },
    )
    assert resp.status_code == 201
    created = resp.json()["ordered_time"]

    listed = [o["ordered_time"] for o in (await client.get("/api/orders")).json()]

    assert listed == [created]
    ordered_time = datetime.fromisoformat(created.replace("Z", "+00:00"))
    assert ordered_time.utcoffset() == timedelta(0)
    assert ordered_time == datetime(2024, 1, 1, 10, 0, tzinfo=timezone(timedelta(hours=9)))


@pytest.mark.asyncio
async def test_order_without_line_items_is_rejected(client):
    table = await _create_table(client, empty=False)

    resp = await client.post("/api/orders", json={"order_table_id": table["id"], "order_line_items": []})
    assert resp.status_code == 400
    assert "no line items" in resp.json()["detail"]


@pytest.mark.asyncio
async def test_unknown_order_status_change_is_not_found(client):
    resp = await client.put("/api/orders/999/order-status", json={"order_status": "MEAL"})
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_invalid_order_status_is_unprocessable(client):
    resp = await client.put("/api/orders/1/order-status", json={"order_status": "EATING"})
    assert resp.status_code == 422
