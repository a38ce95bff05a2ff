"""
Order Service

Places orders at occupied tables and moves them through
COOKING -> MEAL -> COMPLETION. Completed orders are queued for the
sales ledger.
"""

import json
import logging
from typing import Any, Callable, List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from kitchenpos.core.config import get_settings
from kitchenpos.core.exceptions import InvalidRequestError, InvalidStateError, NotFoundError
from kitchenpos.models import Order, OrderLineItem, OrderStatus, as_utc, utcnow
from kitchenpos.repositories import MenuRepository, OrderRepository, OrderTableRepository
from kitchenpos.schemas import OrderRequest, OrderStatusChangeRequest
from kitchenpos.tasks import export_order_to_ledger

settings = get_settings()
logger = logging.getLogger(__name__)

LedgerPublisher = Callable[[dict[str, Any]], None]


def ledger_payload(order: Order) -> dict[str, Any]:
    """Serialize an order for the ledger export task."""
    return {
        "order_id": order.id,
        "order_table_id": order.order_table_id,
        "order_status": order.order_status.value,
        "ordered_time": order.ordered_time.isoformat(),
        "line_items": json.dumps([
            {
                "menu_id": item.menu_id,
                "name": item.name,
                "price": str(item.price),
                "quantity": item.quantity,
            }
            for item in order.order_line_items
        ]),
        "total_amount": float(order.total_amount()),
    }


def queue_ledger_export(order_data: dict[str, Any]) -> None:
    """Queue the Celery export; a broker outage must not fail the order."""
    if not settings.ledger_export_enabled:
        return
    try:
        export_order_to_ledger.delay(order_data)
    except Exception:
        logger.exception(f"Could not queue ledger export for order #{order_data.get('order_id')}")


class OrderService:
    def __init__(self, session: AsyncSession, publish: Optional[LedgerPublisher] = None):
        self.session = session
        self.orders = OrderRepository(session)
        self.order_tables = OrderTableRepository(session)
        self.menus = MenuRepository(session)
        self.publish = publish or queue_ledger_export

    async def create(self, request: OrderRequest) -> Order:
        """
        Place an order.

        Raises:
            InvalidRequestError: no line items, an unknown menu, or an unknown table
            InvalidStateError: the table is empty
        """
        line_items = request.order_line_items
        if not line_items:
            logger.warning(f"Order rejected, no line items for table #{request.order_table_id}")
            raise InvalidRequestError("The order has no line items. The order cannot be placed.")

        menu_ids = {item.menu_id for item in line_items}
        menus = {menu.id: menu for menu in await self.menus.find_all_by_id_in(menu_ids)}
        if len(menus) != len(menu_ids):
            logger.warning(f"Order rejected, unknown menus {sorted(menu_ids - menus.keys())}")
            raise InvalidRequestError(
                "A line item refers to a menu that does not exist. The order cannot be placed."
            )

        order_table = await self.order_tables.find_by_id(request.order_table_id)
        if order_table is None:
            logger.warning(f"Order rejected, table #{request.order_table_id} not found")
            raise InvalidRequestError("The order table does not exist. The order cannot be placed.")
        if order_table.empty:
            logger.warning(f"Order rejected, table #{order_table.id} is empty")
            raise InvalidStateError("The order table is empty. The order cannot be placed.")

        order = Order(
            order_table_id=order_table.id,
            order_status=request.order_status or OrderStatus.COOKING,
            ordered_time=as_utc(request.ordered_time) if request.ordered_time else utcnow(),
            order_line_items=[
                OrderLineItem(
                    menu_id=item.menu_id,
                    name=menus[item.menu_id].name,
                    price=menus[item.menu_id].price,
                    quantity=item.quantity,
                )
                for item in line_items
            ],
        )
        await self.orders.save(order)
        await self.session.commit()

        logger.info(
            f"Order #{order.id} placed at table #{order.order_table_id} "
            f"({order.order_status.value}, {len(order.order_line_items)} items)"
        )
        if order.is_completed:
            self.publish(ledger_payload(order))
        return order

    async def list(self) -> List[Order]:
        return await self.orders.find_all()

    async def change_order_status(
        self, order_id: int, request: OrderStatusChangeRequest
    ) -> Order:
        """
        Replace the status of an order that is not completed yet.

        Raises:
            NotFoundError: the order does not exist
            InvalidStateError: the order is already completed
        """
        order = await self.orders.find_by_id(order_id)
        if order is None:
            logger.warning(f"Order #{order_id} not found")
            raise NotFoundError("The order does not exist. Its status cannot be changed.")

        try:
            order.change_status(request.order_status)
        except InvalidStateError:
            logger.warning(f"Order #{order_id} is already completed")
            raise
        await self.session.commit()

        logger.info(f"Order #{order_id} is now {order.order_status.value}")
        if order.is_completed:
            self.publish(ledger_payload(order))
        return order
