"""
Pydantic Schemas for Request/Response Validation

Registration, login and catalog payloads are deliberately *not* modelled
here: they go through the rule engines in food_ordering.validation so that
clients get the documented messages instead of generic schema errors.
Response models serialize in the public camelCase shape.
"""

from datetime import datetime
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from food_ordering.models import OrderStatus
from food_ordering.security.identity import Role


class ApiModel(BaseModel):
    """Reads ORM attributes and emits camelCase keys."""
    model_config = ConfigDict(
        from_attributes=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )


# =============================================================================
# REQUEST SCHEMAS
# =============================================================================

class OrderItemCreate(ApiModel):
    """Single line of a new order."""
    food_id: int = Field(..., ge=1, examples=[1])
    quantity: int = Field(..., ge=1, le=99, examples=[2])


class OrderCreate(ApiModel):
    """Request schema for placing an order."""
    items: List[OrderItemCreate] = Field(..., min_length=1)
    special_instructions: Optional[str] = Field(None, max_length=500)
    delivery_address: Optional[str] = Field(None, max_length=255)
    phone: Optional[str] = Field(None, max_length=20)


class OrderStatusUpdate(ApiModel):
    status: OrderStatus


class AdminPasswordRequest(ApiModel):
    """Step-up secret for sensitive admin actions."""
    password: str = ""


class AdminFlagUpdate(ApiModel):
    is_admin: bool


class AvailabilityUpdate(ApiModel):
    available: bool


# =============================================================================
# RESPONSE SCHEMAS
# =============================================================================

class UserResponse(ApiModel):
    """Public view of a user; never includes the password digest."""
    id: int
    username: str
    email: str
    full_name: str
    phone: Optional[str] = None
    address: Optional[str] = None
    role: Role
    is_admin: bool
    created_at: Optional[datetime] = None


class UserSummary(ApiModel):
    id: int
    username: str
    full_name: str


class FoodResponse(ApiModel):
    id: int
    name: str
    description: str
    price: float
    category: str
    image: str
    available: bool
    preparation_time: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class OrderItemResponse(ApiModel):
    food_id: int
    food_name: str
    quantity: int
    price: float


class OrderResponse(ApiModel):
    id: int
    user_id: int
    user: Optional[UserSummary] = None
    items: List[OrderItemResponse]
    total_amount: float
    status: OrderStatus
    special_instructions: Optional[str] = None
    delivery_address: str
    phone: str
    estimated_delivery_time: Optional[datetime] = None
    confirmed_by_id: Optional[int] = None
    confirmed_at: Optional[datetime] = None
    created_at: datetime


class AuthResponse(ApiModel):
    message: str
    token: str
    user: UserResponse


class UserMessageResponse(ApiModel):
    message: str
    user: UserResponse


class FoodMessageResponse(ApiModel):
    message: str
    food: FoodResponse


class OrderMessageResponse(ApiModel):
    message: str
    order: OrderResponse


class OrderPageResponse(ApiModel):
    orders: List[OrderResponse]
    total_pages: int
    current_page: int
    total_orders: int


class MessageResponse(ApiModel):
    message: str


class FoodStatistics(ApiModel):
    total_items: int
    available_items: int
    average_price: float
    category_counts: dict[str, int]


class DashboardStatistics(ApiModel):
    total_users: int
    total_orders: int
    pending_orders: int
    completed_orders: int
    total_revenue: float


class PopularFood(ApiModel):
    food_id: int
    name: str
    total_quantity: int
    total_revenue: float


class DashboardResponse(ApiModel):
    statistics: DashboardStatistics
    recent_orders: List[OrderResponse]
    popular_foods: List[PopularFood]


class HealthResponse(ApiModel):
    """Health check response."""
    status: str
    database: str
    rate_limit_store: str
    timestamp: datetime


class ErrorResponse(BaseModel):
    """Documented error shapes (one of the keys is present)."""
    error: Optional[str] = None
    message: Optional[str] = None
    errors: Optional[List[str]] = None
    detail: Optional[Any] = None
