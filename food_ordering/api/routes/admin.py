"""
Admin Routes

Everything here requires the admin role. Order confirmation additionally
requires the step-up secret in the request body.
"""

import logging
from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from food_ordering.api.dependencies import get_app_settings, get_step_up, require_admin, user_pk
from food_ordering.core.config import Settings
from food_ordering.core.errors import NotFoundError, ValidationError
from food_ordering.database import get_db
from food_ordering.models import REVENUE_STATUSES, Food, Order, OrderItem, OrderStatus, User
from food_ordering.schemas import (
    AdminFlagUpdate,
    AdminPasswordRequest,
    AvailabilityUpdate,
    DashboardResponse,
    DashboardStatistics,
    FoodMessageResponse,
    FoodResponse,
    MessageResponse,
    OrderMessageResponse,
    OrderResponse,
    PopularFood,
    UserMessageResponse,
    UserResponse,
)
from food_ordering.security.identity import Identity, Role
from food_ordering.security.stepup import StepUpVerifier

logger = logging.getLogger(__name__)
router = APIRouter()

DASHBOARD_RECENT_ORDERS = 5
DASHBOARD_POPULAR_FOODS = 5


# =============================================================================
# STEP-UP ACTIONS
# =============================================================================

@router.post("/verify-password", response_model=MessageResponse, summary="Check the step-up secret")
async def verify_password(
    body: AdminPasswordRequest,
    admin: Identity = Depends(require_admin),
    step_up: StepUpVerifier = Depends(get_step_up),
) -> MessageResponse:
    step_up.verify(admin, body.password)
    return MessageResponse(message="Password verified successfully")


@router.post(
    "/confirm-order/{order_id}",
    response_model=OrderMessageResponse,
    summary="Confirm a pending order",
)
async def confirm_order(
    order_id: int,
    body: AdminPasswordRequest,
    admin: Identity = Depends(require_admin),
    step_up: StepUpVerifier = Depends(get_step_up),
    settings: Settings = Depends(get_app_settings),
    db: AsyncSession = Depends(get_db),
) -> OrderMessageResponse:
    """
    Confirm an order. The secret is checked before the order is even looked
    up, so a wrong secret never reveals whether the order exists.
    """
    step_up.verify(admin, body.password)

    order = await db.get(Order, order_id)
    if order is None:
        raise NotFoundError("Order not found")
    if order.status != OrderStatus.PENDING:
        raise ValidationError("Only pending orders can be confirmed")

    order.confirm(user_pk(admin), settings.delivery_buffer_minutes)
    await db.commit()

    logger.info(f"Order #{order.id} confirmed by user {admin.user_id}")

    return OrderMessageResponse(
        message="Order confirmed successfully",
        order=OrderResponse.model_validate(order),
    )


# =============================================================================
# DASHBOARD
# =============================================================================

@router.get("/dashboard", response_model=DashboardResponse, summary="Dashboard statistics")
async def dashboard(
    admin: Identity = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> DashboardResponse:
    """Aggregated counts, revenue, recent orders and best-selling items."""

    async def count(query) -> int:
        return (await db.execute(query)).scalar() or 0

    total_users = await count(select(func.count(User.id)).where(User.role == Role.USER))
    total_orders = await count(select(func.count(Order.id)))
    pending_orders = await count(
        select(func.count(Order.id)).where(Order.status == OrderStatus.PENDING)
    )
    completed_orders = await count(
        select(func.count(Order.id)).where(Order.status == OrderStatus.DELIVERED)
    )

    revenue_result = await db.execute(
        select(func.sum(Order.total_amount)).where(Order.status.in_(REVENUE_STATUSES))
    )
    total_revenue = revenue_result.scalar() or 0.0

    recent_result = await db.execute(
        select(Order)
        .order_by(Order.created_at.desc(), Order.id.desc())
        .limit(DASHBOARD_RECENT_ORDERS)
    )

    quantity = func.sum(OrderItem.quantity).label("total_quantity")
    popular_result = await db.execute(
        select(
            OrderItem.food_id,
            OrderItem.food_name,
            quantity,
            func.sum(OrderItem.quantity * OrderItem.price).label("total_revenue"),
        )
        .group_by(OrderItem.food_id, OrderItem.food_name)
        .order_by(quantity.desc())
        .limit(DASHBOARD_POPULAR_FOODS)
    )

    return DashboardResponse(
        statistics=DashboardStatistics(
            total_users=total_users,
            total_orders=total_orders,
            pending_orders=pending_orders,
            completed_orders=completed_orders,
            total_revenue=round(float(total_revenue), 2),
        ),
        recent_orders=[OrderResponse.model_validate(o) for o in recent_result.scalars().all()],
        popular_foods=[
            PopularFood(
                food_id=row.food_id,
                name=row.food_name,
                total_quantity=row.total_quantity,
                total_revenue=round(float(row.total_revenue), 2),
            )
            for row in popular_result.all()
        ],
    )


# =============================================================================
# USER & CATALOG MANAGEMENT
# =============================================================================

@router.get("/users", response_model=List[UserResponse], summary="Customer accounts")
async def list_users(
    admin: Identity = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> List[UserResponse]:
    result = await db.execute(
        select(User).where(User.role == Role.USER).order_by(User.created_at.desc(), User.id.desc())
    )
    return [UserResponse.model_validate(user) for user in result.scalars().all()]


@router.put("/users/{user_id}/admin", response_model=UserMessageResponse, summary="Grant or revoke admin")
async def set_admin_status(
    user_id: int,
    update: AdminFlagUpdate,
    admin: Identity = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> UserMessageResponse:
    """Role changes apply to tokens issued afterwards."""
    if user_id == user_pk(admin):
        raise ValidationError("You cannot change your own admin status")

    user = await db.get(User, user_id)
    if user is None:
        raise NotFoundError("User not found")

    user.role = Role.ADMIN if update.is_admin else Role.USER
    await db.commit()

    logger.warning(f"User #{user.id} role set to '{user.role.value}' by user {admin.user_id}")

    return UserMessageResponse(
        message="User admin status updated successfully",
        user=UserResponse.model_validate(user),
    )


@router.put(
    "/food/{food_id}/availability",
    response_model=FoodMessageResponse,
    summary="Toggle food availability",
)
async def set_food_availability(
    food_id: int,
    update: AvailabilityUpdate,
    admin: Identity = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> FoodMessageResponse:
    food = await db.get(Food, food_id)
    if food is None:
        raise NotFoundError("Food item not found")

    food.available = update.available
    await db.commit()

    logger.info(f"Food #{food.id} availability -> {food.available} by user {admin.user_id}")

    return FoodMessageResponse(
        message="Food availability updated successfully",
        food=FoodResponse.model_validate(food),
    )
