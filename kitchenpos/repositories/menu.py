from __future__ import annotations

from kitchenpos.models import Menu, MenuGroup, Product
from kitchenpos.repositories.base import CrudRepository


class MenuGroupRepository(CrudRepository[MenuGroup]):
    entity = MenuGroup


class ProductRepository(CrudRepository[Product]):
    entity = Product


class MenuRepository(CrudRepository[Menu]):
    entity = Menu
