"""
SQLAlchemy Database Models

Relational records for the point-of-sale catalog, tables and orders:
- MenuGroup / Product / Menu / MenuProduct (catalog)
- OrderTable / TableGroup (seating)
- Order / OrderLineItem (orders)
"""

import enum
from datetime import datetime, timezone

from sqlalchemy import Column, Integer, BigInteger, String, Numeric, DateTime, Enum, Boolean, ForeignKey
from sqlalchemy.types import TypeDecorator
from sqlalchemy.orm import relationship

from kitchenpos.core.exceptions import InvalidRequestError, InvalidStateError
from kitchenpos.database import Base


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    """Normalize to UTC. Naive values are taken to be UTC already."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class UtcDateTime(TypeDecorator):
    """
    DateTime(timezone=True) that always reads back as an aware UTC value.

    SQLite stores no offset, so values are written in UTC and the offset
    is restored on load.
    """
    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        return as_utc(value) if value is not None else None

    def process_result_value(self, value, dialect):
        return as_utc(value) if value is not None else None


class OrderStatus(str, enum.Enum):
    """Order status workflow. COMPLETION is terminal."""
    COOKING = "COOKING"
    MEAL = "MEAL"
    COMPLETION = "COMPLETION"

    @classmethod
    def in_progress(cls) -> list["OrderStatus"]:
        """Statuses that keep a table occupied."""
        return [cls.COOKING, cls.MEAL]


# =============================================================================
# CATALOG
# =============================================================================

class MenuGroup(Base):
    """A named category of menus (e.g. "Lunch set")."""
    __tablename__ = "menu_group"

    id = Column(BigInteger().with_variant(Integer, "sqlite"), primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False)

    def __repr__(self):
        return f"<MenuGroup #{self.id} - {self.name}>"


class Product(Base):
    """A single sellable product with its unit price."""
    __tablename__ = "product"

    id = Column(BigInteger().with_variant(Integer, "sqlite"), primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    price = Column(Numeric(19, 2), nullable=False)

    def __repr__(self):
        return f"<Product #{self.id} - {self.name} - {self.price}>"


class Menu(Base):
    """
    A menu sold to customers.

    Composed of products; its price may never exceed the sum of
    the composing products' prices.
    """
    __tablename__ = "menu"

    id = Column(BigInteger().with_variant(Integer, "sqlite"), primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    price = Column(Numeric(19, 2), nullable=False)
    menu_group_id = Column(ForeignKey("menu_group.id"), nullable=False, index=True)

    menu_products = relationship(
        "MenuProduct",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="MenuProduct.seq",
    )

    def __repr__(self):
        return f"<Menu #{self.id} - {self.name} - {self.price}>"


class MenuProduct(Base):
    """Quantity of a product inside a menu."""
    __tablename__ = "menu_product"

    seq = Column(BigInteger().with_variant(Integer, "sqlite"), primary_key=True, autoincrement=True)
    menu_id = Column(ForeignKey("menu.id"), nullable=False, index=True)
    product_id = Column(ForeignKey("product.id"), nullable=False)
    quantity = Column(Integer, nullable=False)

    def __repr__(self):
        return f"<MenuProduct menu={self.menu_id} product={self.product_id} x{self.quantity}>"


# =============================================================================
# SEATING
# =============================================================================

class OrderTable(Base):
    """A physical table, optionally empty, optionally part of a TableGroup."""
    __tablename__ = "order_table"

    id = Column(BigInteger().with_variant(Integer, "sqlite"), primary_key=True, autoincrement=True)
    table_group_id = Column(ForeignKey("table_group.id"), nullable=True, index=True)
    number_of_guests = Column(Integer, nullable=False, default=0)
    empty = Column(Boolean, nullable=False, default=True)

    @property
    def is_grouped(self) -> bool:
        return self.table_group_id is not None

    def __repr__(self):
        return f"<OrderTable #{self.id} - guests={self.number_of_guests} empty={self.empty}>"


class TableGroup(Base):
    """
    A set of tables seated and billed together.

    Membership is set through group() and released through ungroup();
    both keep each member's empty flag consistent with the group.
    """
    __tablename__ = "table_group"

    MIN_TABLE_SIZE = 2

    id = Column(BigInteger().with_variant(Integer, "sqlite"), primary_key=True, autoincrement=True)
    created_date = Column(UtcDateTime, nullable=False, default=utcnow)

    order_tables = relationship(
        "OrderTable",
        lazy="selectin",
        order_by="OrderTable.id",
    )

    def group(self, order_tables: list[OrderTable]) -> None:
        """Attach the tables to this group and mark them occupied."""
        if not order_tables or len(order_tables) < self.MIN_TABLE_SIZE:
            raise InvalidRequestError(
                f"A table group needs at least {self.MIN_TABLE_SIZE} tables."
            )
        for order_table in order_tables:
            order_table.empty = False
        self.order_tables = list(order_tables)

    def ungroup(self) -> list[OrderTable]:
        """Release every member table, leaving it empty. Returns the released tables."""
        released = list(self.order_tables)
        for order_table in released:
            order_table.empty = True
        self.order_tables.clear()
        return released

    def __repr__(self):
        return f"<TableGroup #{self.id} - {self.created_date}>"


# =============================================================================
# ORDERS
# =============================================================================

class Order(Base):
    """
    A customer order placed at a table.

    Tracks the status from COOKING through MEAL to COMPLETION.
    """
    __tablename__ = "orders"

    id = Column(BigInteger().with_variant(Integer, "sqlite"), primary_key=True, autoincrement=True)
    order_table_id = Column(ForeignKey("order_table.id"), nullable=False, index=True)
    order_status = Column(
        Enum(OrderStatus),
        default=OrderStatus.COOKING,
        nullable=False,
        index=True
    )
    ordered_time = Column(UtcDateTime, nullable=False, default=utcnow)

    order_line_items = relationship(
        "OrderLineItem",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="OrderLineItem.seq",
    )

    @property
    def is_completed(self) -> bool:
        return self.order_status == OrderStatus.COMPLETION

    def change_status(self, order_status: OrderStatus) -> None:
        if self.is_completed:
            raise InvalidStateError("The order is already completed. Its status cannot be changed.")
        self.order_status = order_status

    def total_amount(self):
        return sum((item.price * item.quantity for item in self.order_line_items), start=0)

    def __repr__(self):
        return f"<Order #{self.id} - table {self.order_table_id} - {self.order_status.value}>"


class OrderLineItem(Base):
    """A menu ordered in some quantity; name and price are captured at ordering time."""
    __tablename__ = "order_line_item"

    seq = Column(BigInteger().with_variant(Integer, "sqlite"), primary_key=True, autoincrement=True)
    order_id = Column(ForeignKey("orders.id"), nullable=False, index=True)
    menu_id = Column(ForeignKey("menu.id"), nullable=True)
    name = Column(String(255), nullable=False)
    price = Column(Numeric(19, 2), nullable=False)
    quantity = Column(BigInteger, nullable=False)

    def __repr__(self):
        return f"<OrderLineItem order={self.order_id} {self.name} x{self.quantity}>"
