from __future__ import annotations

import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("LEDGER_EXPORT_ENABLED", "false")
os.environ.setdefault("REDIS_URL", "redis://localhost:6379/15")

from decimal import Decimal

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from kitchenpos.database import Base, build_engine
from kitchenpos.models import Menu, MenuGroup, MenuProduct, Order, OrderLineItem, OrderStatus, OrderTable, Product


class RecordingPublisher:
    """Collects ledger payloads instead of queueing Celery tasks."""

    def __init__(self):
        self.payloads = []

    def __call__(self, payload):
        self.payloads.append(payload)


class DummyTask:
    def __init__(self):
        self.payloads = []

    def delay(self, payload):
        self.payloads.append(payload)


@pytest.fixture
async def session_maker():
    engine = build_engine("sqlite+aiosqlite:///:memory:")

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    await engine.dispose()


@pytest.fixture
async def session(session_maker):
    async with session_maker() as session:
        yield session


@pytest.fixture
def publisher() -> RecordingPublisher:
    return RecordingPublisher()


@pytest.fixture
async def menu(session) -> Menu:
    menu_group = MenuGroup(name="Chicken sets")
    session.add(menu_group)
    product = Product(name="Fried chicken", price=Decimal("16000"))
    session.add(product)
    await session.flush()

    menu = Menu(
        name="Fried chicken",
        price=Decimal("16000"),
        menu_group_id=menu_group.id,
        menu_products=[MenuProduct(product_id=product.id, quantity=1)],
    )
    session.add(menu)
    await session.commit()
    return menu


@pytest.fixture
async def occupied_table(session) -> OrderTable:
    order_table = OrderTable(number_of_guests=1, empty=False)
    session.add(order_table)
    await session.commit()
    return order_table


@pytest.fixture
async def placed_order(session, occupied_table, menu) -> Order:
    order = Order(
        order_table_id=occupied_table.id,
        order_status=OrderStatus.MEAL,
        order_line_items=[
            OrderLineItem(menu_id=menu.id, name=menu.name, price=menu.price, quantity=1),
        ],
    )
    session.add(order)
    await session.commit()
    return order


@pytest.fixture
def ledger_task(monkeypatch) -> DummyTask:
    from kitchenpos.services import order_service

    dummy_task = DummyTask()
    monkeypatch.setattr(order_service, "export_order_to_ledger", dummy_task)
    monkeypatch.setattr(order_service.settings, "ledger_export_enabled", True)
    return dummy_task


@pytest.fixture
async def client(session_maker, ledger_task):
    from kitchenpos.database import get_db
    from kitchenpos.main import app

    async def override_get_db():
        async with session_maker() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as test_client:
        yield test_client
    app.dependency_overrides.clear()
