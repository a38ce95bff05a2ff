"""
Table Services

Order tables and table groups. A table's emptiness is frozen while it is
grouped or while one of its orders is still cooking or being eaten.
"""

import logging
from typing import List

from sqlalchemy.ext.asyncio import AsyncSession

from kitchenpos.core.exceptions import InvalidRequestError, InvalidStateError, NotFoundError
from kitchenpos.models import OrderStatus, OrderTable, TableGroup, utcnow
from kitchenpos.repositories import OrderRepository, OrderTableRepository, TableGroupRepository
from kitchenpos.schemas import (
    ChangeEmptyRequest,
    ChangeNumberOfGuestsRequest,
    OrderTableRequest,
    TableGroupRequest,
)

logger = logging.getLogger(__name__)


class TableService:
    def __init__(self, session: AsyncSession):
        self.session = session
        self.order_tables = OrderTableRepository(session)
        self.orders = OrderRepository(session)

    async def create(self, request: OrderTableRequest) -> OrderTable:
        order_table = OrderTable(
            table_group_id=None,
            number_of_guests=request.number_of_guests,
            empty=request.empty,
        )
        await self.order_tables.save(order_table)
        await self.session.commit()
        logger.info(f"Table #{order_table.id} created (empty={order_table.empty})")
        return order_table

    async def list(self) -> List[OrderTable]:
        return await self.order_tables.find_all()

    async def change_empty(self, order_table_id: int, request: ChangeEmptyRequest) -> OrderTable:
        """
        Mark a table empty or occupied.

        Raises:
            NotFoundError: the table does not exist
            InvalidStateError: the table is grouped or has an order in progress
        """
        order_table = await self.order_tables.find_by_id(order_table_id)
        if order_table is None:
            logger.warning(f"Table #{order_table_id} not found")
            raise NotFoundError("The table does not exist. It cannot be marked empty.")

        if order_table.is_grouped:
            logger.warning(f"Table #{order_table_id} belongs to group #{order_table.table_group_id}")
            raise InvalidStateError("The table belongs to a table group. It cannot be marked empty.")

        if await self.orders.exists_by_order_table_id_and_order_status_in(
                order_table_id, OrderStatus.in_progress()):
            logger.warning(f"Table #{order_table_id} has an order in progress")
            raise InvalidStateError(
                "The table has an order that is cooking or being eaten. It cannot be marked empty."
            )

        order_table.empty = request.empty
        await self.session.commit()
        logger.info(f"Table #{order_table_id} empty={order_table.empty}")
        return order_table

    async def change_number_of_guests(
        self, order_table_id: int, request: ChangeNumberOfGuestsRequest
    ) -> OrderTable:
        number_of_guests = request.number_of_guests
        if number_of_guests < 0:
            logger.warning(f"Rejected number of guests {number_of_guests} for table #{order_table_id}")
            raise InvalidRequestError("The number of guests must be zero or greater.")

        order_table = await self.order_tables.find_by_id(order_table_id)
        if order_table is None:
            logger.warning(f"Table #{order_table_id} not found")
            raise NotFoundError("The table does not exist. The number of guests cannot be changed.")

        if order_table.empty:
            logger.warning(f"Table #{order_table_id} is empty")
            raise InvalidStateError("The table is empty. The number of guests cannot be changed.")

        order_table.number_of_guests = number_of_guests
        await self.session.commit()
        logger.info(f"Table #{order_table_id} now seats {number_of_guests} guests")
        return order_table


class TableGroupService:
    def __init__(self, session: AsyncSession):
        self.session = session
        self.table_groups = TableGroupRepository(session)
        self.order_tables = OrderTableRepository(session)
        self.orders = OrderRepository(session)

    async def create(self, request: TableGroupRequest) -> TableGroup:
        """
        Group at least two empty, ungrouped tables.

        Raises:
            InvalidRequestError: fewer than two tables, or an unknown table
            InvalidStateError: a table is occupied or already grouped
        """
        order_table_ids = [order_table.id for order_table in request.order_tables]
        if len(order_table_ids) < TableGroup.MIN_TABLE_SIZE:
            logger.warning(f"Grouping rejected, only {len(order_table_ids)} tables given")
            raise InvalidRequestError(
                f"A table group needs at least {TableGroup.MIN_TABLE_SIZE} tables."
            )

        saved_order_tables = await self.order_tables.find_all_by_id_in(order_table_ids)
        if len(saved_order_tables) != len(order_table_ids):
            logger.warning(f"Grouping rejected, unknown or repeated tables in {order_table_ids}")
            raise InvalidRequestError("Some of the tables do not exist. The tables cannot be grouped.")

        for order_table in saved_order_tables:
            if not order_table.empty or order_table.is_grouped:
                logger.warning(f"Table #{order_table.id} is occupied or already grouped")
                raise InvalidStateError(
                    "Only empty tables that are not already grouped can be grouped."
                )

        table_group = TableGroup(created_date=utcnow())
        table_group.group(saved_order_tables)
        await self.table_groups.save(table_group)
        await self.session.commit()

        logger.info(f"Table group #{table_group.id} created with tables {order_table_ids}")
        return table_group

    async def ungroup(self, table_group_id: int) -> None:
        """
        Release every table of a group.

        Raises:
            NotFoundError: the group does not exist
            InvalidStateError: a member table has an order in progress
        """
        table_group = await self.table_groups.find_by_id(table_group_id)
        if table_group is None:
            logger.warning(f"Table group #{table_group_id} not found")
            raise NotFoundError("The table group does not exist. It cannot be ungrouped.")

        order_table_ids = [order_table.id for order_table in table_group.order_tables]
        if await self.orders.exists_by_order_table_id_in_and_order_status_in(
                order_table_ids, OrderStatus.in_progress()):
            logger.warning(f"Table group #{table_group_id} has an order in progress")
            raise InvalidStateError(
                "A grouped table has an order that is cooking or being eaten. The group cannot be released."
            )

        table_group.ungroup()
        await self.session.commit()
        logger.info(f"Table group #{table_group_id} released tables {order_table_ids}")
