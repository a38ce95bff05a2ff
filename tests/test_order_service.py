from datetime import datetime

import logging

import pytest

from kitchenpos.core.exceptions import InvalidRequestError, InvalidStateError, NotFoundError
from kitchenpos.models import Order, OrderStatus, OrderTable
from kitchenpos.schemas import OrderLineItemRequest, OrderRequest, OrderStatusChangeRequest
from kitchenpos.services import order_service
from kitchenpos.services.order_service import OrderService


def _order_request(order_table_id, menu_ids, order_status=OrderStatus.MEAL):
    return OrderRequest(
        order_table_id=order_table_id,
        order_status=order_status,
        ordered_time=datetime.now(),
        order_line_items=[OrderLineItemRequest(menu_id=menu_id, quantity=2) for menu_id in menu_ids],
    )


@pytest.mark.asyncio
async def test_create_order(session, publisher, occupied_table, menu):
    service = OrderService(session, publish=publisher)

    order = await service.create(_order_request(occupied_table.id, [menu.id]))

    assert order.id is not None
    assert order.order_table_id == occupied_table.id
    assert order.order_status == OrderStatus.MEAL
    assert [item.menu_id for item in order.order_line_items] == [menu.id]
    assert order.order_line_items[0].name == menu.name
    assert order.order_line_items[0].price == menu.price
    assert order.order_line_items[0].quantity == 2
    assert publisher.payloads == []


@pytest.mark.asyncio
async def test_create_order_defaults_to_cooking(session, publisher, occupied_table, menu):
    service = OrderService(session, publish=publisher)
    request = OrderRequest(
        order_table_id=occupied_table.id,
        order_line_items=[OrderLineItemRequest(menu_id=menu.id, quantity=1)],
    )

    order = await service.create(request)

    assert order.order_status == OrderStatus.COOKING
    assert order.ordered_time is not None


@pytest.mark.asyncio
async def test_create_order_without_line_items_fails(session, publisher, occupied_table):
    service = OrderService(session, publish=publisher)

    with pytest.raises(InvalidRequestError, match="no line items"):
        await service.create(_order_request(occupied_table.id, []))


@pytest.mark.asyncio
async def test_create_order_with_unknown_menu_fails(session, publisher, occupied_table, menu):
    service = OrderService(session, publish=publisher)

    with pytest.raises(InvalidRequestError, match="menu that does not exist"):
        await service.create(_order_request(occupied_table.id, [menu.id, 1000]))


@pytest.mark.asyncio
async def test_create_order_with_unknown_table_fails(session, publisher, menu):
    service = OrderService(session, publish=publisher)

    with pytest.raises(InvalidRequestError, match="order table does not exist"):
        await service.create(_order_request(-1, [menu.id], order_status=None))


@pytest.mark.asyncio
async def test_create_order_at_empty_table_fails(session, publisher, menu):
    empty_table = OrderTable(number_of_guests=0, empty=True)
    session.add(empty_table)
    await session.commit()
    service = OrderService(session, publish=publisher)

    with pytest.raises(InvalidStateError, match="empty"):
        await service.create(_order_request(empty_table.id, [menu.id]))


@pytest.mark.asyncio
async def test_create_completed_order_is_published(session, publisher, occupied_table, menu):
    service = OrderService(session, publish=publisher)

    order = await service.create(_order_request(occupied_table.id, [menu.id], OrderStatus.COMPLETION))

    assert len(publisher.payloads) == 1
    payload = publisher.payloads[0]
    assert payload["order_id"] == order.id
    assert payload["order_status"] == "COMPLETION"
    assert payload["total_amount"] == 32000.0


@pytest.mark.asyncio
async def test_change_order_status(session, publisher, occupied_table, menu):
    service = OrderService(session, publish=publisher)
    order = await service.create(_order_request(occupied_table.id, [menu.id], OrderStatus.COOKING))

    changed = await service.change_order_status(
        order.id, OrderStatusChangeRequest(order_status=OrderStatus.MEAL)
    )

    assert changed.order_status == OrderStatus.MEAL
    assert publisher.payloads == []


@pytest.mark.asyncio
async def test_change_order_status_to_completion_is_published(session, publisher, placed_order):
    service = OrderService(session, publish=publisher)

    await service.change_order_status(
        placed_order.id, OrderStatusChangeRequest(order_status=OrderStatus.COMPLETION)
    )

    assert [p["order_id"] for p in publisher.payloads] == [placed_order.id]


@pytest.mark.asyncio
async def test_change_status_of_unknown_order_fails(session, publisher):
    service = OrderService(session, publish=publisher)

    with pytest.raises(NotFoundError, match="order does not exist"):
        await service.change_order_status(100000, OrderStatusChangeRequest(order_status=OrderStatus.MEAL))


@pytest.mark.asyncio
async def test_change_status_of_completed_order_fails(session, publisher, occupied_table, menu, caplog):
    service = OrderService(session, publish=publisher)
    order = await service.create(_order_request(occupied_table.id, [menu.id], OrderStatus.COMPLETION))

    with caplog.at_level(logging.WARNING, logger="kitchenpos.services.order_service"):
        with pytest.raises(InvalidStateError, match="already completed"):
            await service.change_order_status(
                order.id, OrderStatusChangeRequest(order_status=OrderStatus.COOKING)
            )

    assert f"Order #{order.id} is already completed" in caplog.text
    assert order.order_status == OrderStatus.COMPLETION


@pytest.mark.asyncio
async def test_broker_outage_does_not_fail_completed_order(
        session_maker, session, occupied_table, menu, monkeypatch, caplog):
    class UnreachableBrokerTask:
        def delay(self, payload):
            raise ConnectionError("Error 111 connecting to localhost:6379. Connection refused.")

    monkeypatch.setattr(order_service, "export_order_to_ledger", UnreachableBrokerTask())
    monkeypatch.setattr(order_service.settings, "ledger_export_enabled", True)
    service = OrderService(session)

    with caplog.at_level(logging.ERROR, logger="kitchenpos.services.order_service"):
        order = await service.create(_order_request(occupied_table.id, [menu.id], OrderStatus.COMPLETION))

    assert order.id is not None
    assert order.order_status == OrderStatus.COMPLETION
    assert f"Could not queue ledger export for order #{order.id}" in caplog.text

    async with session_maker() as other_session:
        stored = await other_session.get(Order, order.id)
    assert stored is not None
    assert stored.order_status == OrderStatus.COMPLETION


@pytest.mark.asyncio
async def test_ledger_export_disabled_queues_nothing(session, occupied_table, menu, ledger_task, monkeypatch):
    monkeypatch.setattr(order_service.settings, "ledger_export_enabled", False)
    service = OrderService(session)

    order = await service.create(_order_request(occupied_table.id, [menu.id], OrderStatus.COMPLETION))

    assert order.is_completed
    assert ledger_task.payloads == []


@pytest.mark.asyncio
async def test_ledger_export_enabled_queues_completed_order(session, occupied_table, menu, ledger_task):
    service = OrderService(session)

    order = await service.create(_order_request(occupied_table.id, [menu.id], OrderStatus.COMPLETION))

    assert [p["order_id"] for p in ledger_task.payloads] == [order.id]


@pytest.mark.asyncio
async def test_list_orders_in_insertion_order(session, publisher, placed_order, occupied_table, menu):
    service = OrderService(session, publish=publisher)
    second = await service.create(_order_request(occupied_table.id, [menu.id]))
    third = await service.create(_order_request(occupied_table.id, [menu.id]))

    orders = await service.list()

    assert [(o.id, o.ordered_time) for o in orders] == [
        (placed_order.id, placed_order.ordered_time),
        (second.id, second.ordered_time),
        (third.id, third.ordered_time),
    ]
    assert all(o.order_line_items for o in orders)
