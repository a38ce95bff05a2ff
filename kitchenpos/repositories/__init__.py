"""
Repositories Module

One repository per aggregate, each bound to the request's AsyncSession.
"""

from kitchenpos.repositories.base import CrudRepository
from kitchenpos.repositories.menu import MenuGroupRepository, MenuRepository, ProductRepository
from kitchenpos.repositories.order import OrderRepository
from kitchenpos.repositories.table import OrderTableRepository, TableGroupRepository

__all__ = [
    "CrudRepository",
    "MenuGroupRepository",
    "MenuRepository",
    "ProductRepository",
    "OrderRepository",
    "OrderTableRepository",
    "TableGroupRepository",
]
