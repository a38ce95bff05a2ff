"""
Catalog Services

Menu groups, products and menus. A menu is priced at most at the sum of
the products it is made of.
"""

import logging
from decimal import Decimal
from typing import List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from kitchenpos.core.exceptions import InvalidRequestError
from kitchenpos.models import Menu, MenuGroup, MenuProduct, Product
from kitchenpos.repositories import MenuGroupRepository, MenuRepository, ProductRepository
from kitchenpos.schemas import MenuGroupRequest, MenuRequest, ProductRequest

logger = logging.getLogger(__name__)


def _validate_price(price: Optional[Decimal], subject: str) -> Decimal:
    if price is None or price < 0:
        logger.warning(f"Rejected {subject} price: {price}")
        raise InvalidRequestError(f"The {subject} price must be zero or greater.")
    return price


class MenuGroupService:
    def __init__(self, session: AsyncSession):
        self.session = session
        self.menu_groups = MenuGroupRepository(session)

    async def create(self, request: MenuGroupRequest) -> MenuGroup:
        menu_group = await self.menu_groups.save(MenuGroup(name=request.name))
        await self.session.commit()
        logger.info(f"Menu group #{menu_group.id} created: {menu_group.name}")
        return menu_group

    async def list(self) -> List[MenuGroup]:
        return await self.menu_groups.find_all()


class ProductService:
    def __init__(self, session: AsyncSession):
        self.session = session
        self.products = ProductRepository(session)

    async def create(self, request: ProductRequest) -> Product:
        price = _validate_price(request.price, "product")
        product = await self.products.save(Product(name=request.name, price=price))
        await self.session.commit()
        logger.info(f"Product #{product.id} created: {product.name} ({product.price})")
        return product

    async def list(self) -> List[Product]:
        return await self.products.find_all()


class MenuService:
    def __init__(self, session: AsyncSession):
        self.session = session
        self.menus = MenuRepository(session)
        self.menu_groups = MenuGroupRepository(session)
        self.products = ProductRepository(session)

    async def create(self, request: MenuRequest) -> Menu:
        """
        Register a menu.

        Raises:
            InvalidRequestError: negative or missing price, unknown menu group,
                unknown product, or a price above the sum of its products.
        """
        price = _validate_price(request.price, "menu")

        if not await self.menu_groups.exists_by_id(request.menu_group_id):
            logger.warning(f"Menu group #{request.menu_group_id} not found")
            raise InvalidRequestError("The menu group does not exist. The menu cannot be registered.")

        product_ids = {menu_product.product_id for menu_product in request.menu_products}
        products = {
            product.id: product
            for product in await self.products.find_all_by_id_in(product_ids)
        }
        if len(products) != len(product_ids):
            missing = sorted(product_ids - products.keys())
            logger.warning(f"Products not found: {missing}")
            raise InvalidRequestError("The menu contains a product that does not exist. The menu cannot be registered.")

        products_sum = sum(
            (products[mp.product_id].price * mp.quantity for mp in request.menu_products),
            Decimal(0),
        )
        if price > products_sum:
            logger.warning(f"Menu price {price} exceeds products sum {products_sum}")
            raise InvalidRequestError("The menu price cannot exceed the sum of its products' prices.")

        menu = Menu(
            name=request.name,
            price=price,
            menu_group_id=request.menu_group_id,
            menu_products=[
                MenuProduct(product_id=mp.product_id, quantity=mp.quantity)
                for mp in request.menu_products
            ],
        )
        await self.menus.save(menu)
        await self.session.commit()

        logger.info(f"Menu #{menu.id} created: {menu.name} ({menu.price})")
        return menu

    async def list(self) -> List[Menu]:
        return await self.menus.find_all()
