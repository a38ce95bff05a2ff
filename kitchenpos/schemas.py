"""
Pydantic Schemas for Request/Response Validation

Requests carry only shape validation; business rules (non-negative prices,
guest counts, minimum group size...) are enforced by the service layer so the
same rules apply to every caller.
"""

from datetime import datetime
from decimal import Decimal
from typing import Optional, List

from pydantic import BaseModel, ConfigDict, Field

from kitchenpos.models import OrderStatus


# =============================================================================
# MENU GROUPS
# =============================================================================

class MenuGroupRequest(BaseModel):
    """Request schema for creating a menu group."""
    name: str = Field(..., min_length=1, max_length=255, examples=["Lunch set"])


class MenuGroupResponse(BaseModel):
    id: int
    name: str

    model_config = ConfigDict(from_attributes=True)


# =============================================================================
# PRODUCTS
# =============================================================================

class ProductRequest(BaseModel):
    """Request schema for creating a product."""
    name: str = Field(..., min_length=1, max_length=255, examples=["Fried chicken"])
    price: Optional[Decimal] = Field(None, examples=["16000"])


class ProductResponse(BaseModel):
    id: int
    name: str
    price: Decimal

    model_config = ConfigDict(from_attributes=True)


# =============================================================================
# MENUS
# =============================================================================

class MenuProductRequest(BaseModel):
    """One product and its quantity inside a menu."""
    product_id: int
    quantity: int = Field(..., ge=1, examples=[2])


class MenuRequest(BaseModel):
    """Request schema for creating a menu."""
    name: str = Field(..., min_length=1, max_length=255, examples=["Two fried chickens"])
    price: Optional[Decimal] = Field(None, examples=["19000"])
    menu_group_id: int
    menu_products: List[MenuProductRequest] = Field(default_factory=list)


class MenuProductResponse(BaseModel):
    seq: int
    menu_id: int
    product_id: int
    quantity: int

    model_config = ConfigDict(from_attributes=True)


class MenuResponse(BaseModel):
    id: int
    name: str
    price: Decimal
    menu_group_id: int
    menu_products: List[MenuProductResponse]

    model_config = ConfigDict(from_attributes=True)


# =============================================================================
# ORDER TABLES
# =============================================================================

class OrderTableRequest(BaseModel):
    """Request schema for creating a table."""
    number_of_guests: int = Field(default=0, examples=[0])
    empty: bool = Field(default=True)


class ChangeEmptyRequest(BaseModel):
    empty: bool


class ChangeNumberOfGuestsRequest(BaseModel):
    number_of_guests: int = Field(..., examples=[4])


class OrderTableResponse(BaseModel):
    id: int
    table_group_id: Optional[int]
    number_of_guests: int
    empty: bool

    model_config = ConfigDict(from_attributes=True)


# =============================================================================
# TABLE GROUPS
# =============================================================================

class OrderTableIdRequest(BaseModel):
    """Reference to an existing table."""
    id: int


class TableGroupRequest(BaseModel):
    """Request schema for grouping tables."""
    order_tables: List[OrderTableIdRequest] = Field(default_factory=list)


class TableGroupResponse(BaseModel):
    id: int
    created_date: datetime
    order_tables: List[OrderTableResponse]

    model_config = ConfigDict(from_attributes=True)


# =============================================================================
# ORDERS
# =============================================================================

class OrderLineItemRequest(BaseModel):
    """A menu and its quantity inside an order."""
    menu_id: int
    quantity: int = Field(..., ge=1, examples=[1])


class OrderRequest(BaseModel):
    """Request schema for placing an order."""
    order_table_id: int
    order_status: Optional[OrderStatus] = Field(None, examples=["COOKING"])
    ordered_time: Optional[datetime] = None
    order_line_items: List[OrderLineItemRequest] = Field(default_factory=list)


class OrderStatusChangeRequest(BaseModel):
    order_status: OrderStatus = Field(..., examples=["MEAL"])


class OrderLineItemResponse(BaseModel):
    seq: int
    order_id: int
    menu_id: Optional[int]
    name: str
    price: Decimal
    quantity: int

    model_config = ConfigDict(from_attributes=True)


class OrderResponse(BaseModel):
    """Response schema for a single order."""
    id: int
    order_table_id: int
    order_status: OrderStatus
    ordered_time: datetime
    order_line_items: List[OrderLineItemResponse]

    model_config = ConfigDict(from_attributes=True)


# =============================================================================
# COMMON
# =============================================================================

class ErrorResponse(BaseModel):
    """Standard error response."""
    success: bool = False
    error: str
    detail: Optional[str] = None


class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    database: str
    redis: str
    timestamp: datetime
