from __future__ import annotations

from typing import Iterable

from sqlalchemy import exists, select

from kitchenpos.models import Order, OrderStatus
from kitchenpos.repositories.base import CrudRepository


class OrderRepository(CrudRepository[Order]):
    entity = Order

    async def exists_by_order_table_id_and_order_status_in(
        self, order_table_id: int, statuses: Iterable[OrderStatus]
    ) -> bool:
        return await self.exists_by_order_table_id_in_and_order_status_in([order_table_id], statuses)

    async def exists_by_order_table_id_in_and_order_status_in(
        self, order_table_ids: Iterable[int], statuses: Iterable[OrderStatus]
    ) -> bool:
        order_table_ids = list(order_table_ids)
        if not order_table_ids:
            return False
        query = select(
            exists().where(
                Order.order_table_id.in_(order_table_ids),
                Order.order_status.in_(list(statuses)),
            )
        )
        result = await self.session.execute(query)
        return bool(result.scalar())
