"""
FastAPI Application Entry Point

Kitchen POS - restaurant point-of-sale backend.

Endpoints:
    - POST/GET /api/menu-groups: Menu groups
    - POST/GET /api/products: Products
    - POST/GET /api/menus: Menus
    - POST/GET /api/tables: Order tables
    - PUT /api/tables/{id}/empty: Mark a table empty or occupied
    - PUT /api/tables/{id}/number-of-guests: Seat guests
    - POST /api/table-groups: Group tables
    - DELETE /api/table-groups/{id}: Release a table group
    - POST/GET /api/orders: Orders
    - PUT /api/orders/{id}/order-status: Move an order through its lifecycle
    - GET /health: System health check
"""

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import List

import redis
from fastapi import Depends, FastAPI, Request, Response, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from kitchenpos.core.config import get_settings, setup_logging
from kitchenpos.core.exceptions import KitchenPosError
from kitchenpos.database import engine, get_db, init_db
from kitchenpos.schemas import (
    ChangeEmptyRequest,
    ChangeNumberOfGuestsRequest,
    ErrorResponse,
    HealthResponse,
    MenuGroupRequest,
    MenuGroupResponse,
    MenuRequest,
    MenuResponse,
    OrderRequest,
    OrderResponse,
    OrderStatusChangeRequest,
    OrderTableRequest,
    OrderTableResponse,
    ProductRequest,
    ProductResponse,
    TableGroupRequest,
    TableGroupResponse,
)
from kitchenpos.services.menu_service import MenuGroupService, MenuService, ProductService
from kitchenpos.services.order_service import OrderService
from kitchenpos.services.table_service import TableGroupService, TableService

# Initialize configuration and logging
settings = get_settings()
setup_logging()
logger = logging.getLogger(__name__)

ERROR_RESPONSES = {
    400: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
    409: {"model": ErrorResponse},
}


# =============================================================================
# APPLICATION LIFECYCLE
# =============================================================================

@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Manage application startup and shutdown events.
    """
    logger.info("=" * 60)
    logger.info(f"Starting {settings.app_name}")
    logger.info(f"   Version: {settings.app_version}")
    logger.info(f"   Environment: {settings.env_mode.value}")
    logger.info(f"   Debug: {settings.debug}")
    logger.info("=" * 60)

    await init_db()

    problems = settings.validate_production_config()
    if problems:
        logger.warning(f"Suspicious configuration outside development: {problems}")

    logger.info("Application ready!")

    yield

    logger.info("Shutting down...")
    await engine.dispose()
    logger.info("Cleanup complete")


# =============================================================================
# APPLICATION INSTANCE
# =============================================================================

app = FastAPI(
    title=settings.app_name,
    description="Point-of-sale backend: menus, tables, table groups and orders.",
    version=settings.app_version,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# =============================================================================
# SERVICE DEPENDENCIES
# =============================================================================

def get_menu_group_service(db: AsyncSession = Depends(get_db)) -> MenuGroupService:
    return MenuGroupService(db)


def get_product_service(db: AsyncSession = Depends(get_db)) -> ProductService:
    return ProductService(db)


def get_menu_service(db: AsyncSession = Depends(get_db)) -> MenuService:
    return MenuService(db)


def get_table_service(db: AsyncSession = Depends(get_db)) -> TableService:
    return TableService(db)


def get_table_group_service(db: AsyncSession = Depends(get_db)) -> TableGroupService:
    return TableGroupService(db)


def get_order_service(db: AsyncSession = Depends(get_db)) -> OrderService:
    return OrderService(db)


# =============================================================================
# ROOT & HEALTH ENDPOINTS
# =============================================================================

@app.get("/", tags=["Root"])
async def root() -> dict[str, str]:
    """API root with navigation links."""
    return {
        "message": f"Welcome to {settings.app_name}",
        "version": settings.app_version,
        "environment": settings.env_mode.value,
        "documentation": "/docs",
        "health": "/health",
    }


@app.get(
    "/health",
    response_model=HealthResponse,
    tags=["Health"],
    summary="System Health Check",
)
async def health_check(
    db: AsyncSession = Depends(get_db)
) -> HealthResponse:
    """Verify the database and the Celery broker are reachable."""

    db_status = "healthy"
    try:
        await db.execute(select(func.now()))
    except Exception as e:
        db_status = f"unhealthy: {str(e)}"
        logger.error(f"Database health check failed: {e}")

    redis_status = "healthy"
    try:
        r = redis.Redis.from_url(settings.redis_url, socket_timeout=2)
        r.ping()
        r.close()
    except Exception as e:
        redis_status = f"unhealthy: {str(e)}"
        logger.error(f"Redis health check failed: {e}")

    overall = "operational" if all(
        s == "healthy" for s in [db_status, redis_status]
    ) else "degraded"

    return HealthResponse(
        status=overall,
        database=db_status,
        redis=redis_status,
        timestamp=datetime.now(timezone.utc),
    )


# =============================================================================
# MENU GROUP ENDPOINTS
# =============================================================================

@app.post(
    "/api/menu-groups",
    response_model=MenuGroupResponse,
    status_code=status.HTTP_201_CREATED,
    responses=ERROR_RESPONSES,
    tags=["Menu Groups"],
)
async def create_menu_group(
    request: MenuGroupRequest,
    response: Response,
    service: MenuGroupService = Depends(get_menu_group_service),
) -> MenuGroupResponse:
    menu_group = await service.create(request)
    response.headers["Location"] = f"/api/menu-groups/{menu_group.id}"
    return MenuGroupResponse.model_validate(menu_group)


@app.get("/api/menu-groups", response_model=List[MenuGroupResponse], tags=["Menu Groups"])
async def list_menu_groups(
    service: MenuGroupService = Depends(get_menu_group_service),
) -> List[MenuGroupResponse]:
    return [MenuGroupResponse.model_validate(m) for m in await service.list()]


# =============================================================================
# PRODUCT ENDPOINTS
# =============================================================================

@app.post(
    "/api/products",
    response_model=ProductResponse,
    status_code=status.HTTP_201_CREATED,
    responses=ERROR_RESPONSES,
    tags=["Products"],
)
async def create_product(
    request: ProductRequest,
    response: Response,
    service: ProductService = Depends(get_product_service),
) -> ProductResponse:
    product = await service.create(request)
    response.headers["Location"] = f"/api/products/{product.id}"
    return ProductResponse.model_validate(product)


@app.get("/api/products", response_model=List[ProductResponse], tags=["Products"])
async def list_products(
    service: ProductService = Depends(get_product_service),
) -> List[ProductResponse]:
    return [ProductResponse.model_validate(p) for p in await service.list()]


# =============================================================================
# MENU ENDPOINTS
# =============================================================================

@app.post(
    "/api/menus",
    response_model=MenuResponse,
    status_code=status.HTTP_201_CREATED,
    responses=ERROR_RESPONSES,
    tags=["Menus"],
)
async def create_menu(
    request: MenuRequest,
    response: Response,
    service: MenuService = Depends(get_menu_service),
) -> MenuResponse:
    menu = await service.create(request)
    response.headers["Location"] = f"/api/menus/{menu.id}"
    return MenuResponse.model_validate(menu)


@app.get("/api/menus", response_model=List[MenuResponse], tags=["Menus"])
async def list_menus(
    service: MenuService = Depends(get_menu_service),
) -> List[MenuResponse]:
    return [MenuResponse.model_validate(m) for m in await service.list()]


# =============================================================================
# ORDER TABLE ENDPOINTS
# =============================================================================

@app.post(
    "/api/tables",
    response_model=OrderTableResponse,
    status_code=status.HTTP_201_CREATED,
    responses=ERROR_RESPONSES,
    tags=["Tables"],
)
async def create_table(
    request: OrderTableRequest,
    response: Response,
    service: TableService = Depends(get_table_service),
) -> OrderTableResponse:
    order_table = await service.create(request)
    response.headers["Location"] = f"/api/tables/{order_table.id}"
    return OrderTableResponse.model_validate(order_table)


@app.get("/api/tables", response_model=List[OrderTableResponse], tags=["Tables"])
async def list_tables(
    service: TableService = Depends(get_table_service),
) -> List[OrderTableResponse]:
    return [OrderTableResponse.model_validate(t) for t in await service.list()]


@app.put(
    "/api/tables/{order_table_id}/empty",
    response_model=OrderTableResponse,
    responses=ERROR_RESPONSES,
    tags=["Tables"],
)
async def change_table_empty(
    order_table_id: int,
    request: ChangeEmptyRequest,
    service: TableService = Depends(get_table_service),
) -> OrderTableResponse:
    order_table = await service.change_empty(order_table_id, request)
    return OrderTableResponse.model_validate(order_table)


@app.put(
    "/api/tables/{order_table_id}/number-of-guests",
    response_model=OrderTableResponse,
    responses=ERROR_RESPONSES,
    tags=["Tables"],
)
async def change_table_number_of_guests(
    order_table_id: int,
    request: ChangeNumberOfGuestsRequest,
    service: TableService = Depends(get_table_service),
) -> OrderTableResponse:
    order_table = await service.change_number_of_guests(order_table_id, request)
    return OrderTableResponse.model_validate(order_table)


# =============================================================================
# TABLE GROUP ENDPOINTS
# =============================================================================

@app.post(
    "/api/table-groups",
    response_model=TableGroupResponse,
    status_code=status.HTTP_201_CREATED,
    responses=ERROR_RESPONSES,
    tags=["Table Groups"],
)
async def create_table_group(
    request: TableGroupRequest,
    response: Response,
    service: TableGroupService = Depends(get_table_group_service),
) -> TableGroupResponse:
    table_group = await service.create(request)
    response.headers["Location"] = f"/api/table-groups/{table_group.id}"
    return TableGroupResponse.model_validate(table_group)


@app.delete(
    "/api/table-groups/{table_group_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses=ERROR_RESPONSES,
    tags=["Table Groups"],
)
async def ungroup_table_group(
    table_group_id: int,
    service: TableGroupService = Depends(get_table_group_service),
) -> Response:
    await service.ungroup(table_group_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# =============================================================================
# ORDER ENDPOINTS
# =============================================================================

@app.post(
    "/api/orders",
    response_model=OrderResponse,
    status_code=status.HTTP_201_CREATED,
    responses=ERROR_RESPONSES,
    tags=["Orders"],
)
async def create_order(
    request: OrderRequest,
    response: Response,
    service: OrderService = Depends(get_order_service),
) -> OrderResponse:
    order = await service.create(request)
    response.headers["Location"] = f"/api/orders/{order.id}"
    return OrderResponse.model_validate(order)


@app.get("/api/orders", response_model=List[OrderResponse], tags=["Orders"])
async def list_orders(
    service: OrderService = Depends(get_order_service),
) -> List[OrderResponse]:
    return [OrderResponse.model_validate(o) for o in await service.list()]


@app.put(
    "/api/orders/{order_id}/order-status",
    response_model=OrderResponse,
    responses=ERROR_RESPONSES,
    tags=["Orders"],
)
async def change_order_status(
    order_id: int,
    request: OrderStatusChangeRequest,
    service: OrderService = Depends(get_order_service),
) -> OrderResponse:
    order = await service.change_order_status(order_id, request)
    return OrderResponse.model_validate(order)


# =============================================================================
# ERROR HANDLERS
# =============================================================================

@app.exception_handler(KitchenPosError)
async def kitchenpos_exception_handler(request: Request, exc: KitchenPosError) -> JSONResponse:
    """Turn a rejected business rule into its HTTP status."""
    logger.info(f"{request.method} {request.url.path} rejected: {exc.message}")

    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorResponse(error=exc.error, detail=exc.message).model_dump(),
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all exception handler."""
    logger.exception(f"Unhandled exception: {exc}")

    return JSONResponse(
        status_code=500,
        content={
            "success": False,
            "error": "Internal Server Error",
            "detail": str(exc) if settings.debug else "An unexpected error occurred",
        },
    )
