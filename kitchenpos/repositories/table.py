from __future__ import annotations

from kitchenpos.models import OrderTable, TableGroup
from kitchenpos.repositories.base import CrudRepository


class OrderTableRepository(CrudRepository[OrderTable]):
    entity = OrderTable


class TableGroupRepository(CrudRepository[TableGroup]):
    entity = TableGroup
