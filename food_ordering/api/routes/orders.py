"""
Order Routes

Customers place, list, view and cancel their own orders. Admins can view and
page through all orders and move them along the status workflow.
"""

import logging
import math
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from food_ordering.api.dependencies import (
    get_app_settings,
    get_authorizer,
    get_current_user,
    get_identity,
    require_admin,
    user_pk,
)
from food_ordering.core.config import Settings
from food_ordering.core.errors import NotFoundError, ValidationError
from food_ordering.database import get_db
from food_ordering.models import Food, Order, OrderItem, OrderStatus, User
from food_ordering.schemas import (
    OrderCreate,
    OrderMessageResponse,
    OrderPageResponse,
    OrderResponse,
    OrderStatusUpdate,
)
from food_ordering.security.authorization import RoleAuthorizer
from food_ordering.security.identity import Identity
from food_ordering.security.sanitizer import sanitize_text

logger = logging.getLogger(__name__)
router = APIRouter()


async def load_order(db: AsyncSession, order_id: int) -> Order:
    order = await db.get(Order, order_id)
    if order is None:
        raise NotFoundError("Order not found")
    return order


def _clean(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    return sanitize_text(value) or None


@router.post("", response_model=OrderMessageResponse, status_code=201, summary="Place an order")
async def create_order(
    order_data: OrderCreate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> OrderMessageResponse:
    """
    Place an order for the current user.

    Prices and names are snapshotted from the catalog; the client never
    supplies them. Delivery address and phone fall back to the profile.
    """
    delivery_address = _clean(order_data.delivery_address) or user.address
    phone = _clean(order_data.phone) or user.phone
    if not delivery_address:
        raise ValidationError("Delivery address is required")
    if not phone:
        raise ValidationError("Phone number is required")

    order = Order(
        user=user,
        user_id=user.id,
        status=OrderStatus.PENDING,
        special_instructions=_clean(order_data.special_instructions),
        delivery_address=delivery_address,
        phone=phone,
        items=[],
    )

    total = 0.0
    for line in order_data.items:
        food = await db.get(Food, line.food_id)
        if food is None or not food.available:
            name = food.name if food else "unknown"
            raise ValidationError(f"Food item {name} is not available")

        order.items.append(OrderItem(
            food_id=food.id,
            food_name=food.name,
            quantity=line.quantity,
            price=food.price,
            preparation_time=food.preparation_time,
        ))
        total += food.price * line.quantity

    order.total_amount = round(total, 2)
    db.add(order)
    await db.commit()

    logger.info(
        f"Order #{order.id} placed by user {user.id}: "
        f"{len(order.items)} line(s), total {order.total_amount}"
    )

    return OrderMessageResponse(
        message="Order placed successfully",
        order=OrderResponse.model_validate(order),
    )


@router.get("/my-orders", response_model=List[OrderResponse], summary="Current user's orders")
async def my_orders(
    identity: Identity = Depends(get_identity),
    db: AsyncSession = Depends(get_db),
) -> List[OrderResponse]:
    result = await db.execute(
        select(Order)
        .where(Order.user_id == user_pk(identity))
        .order_by(Order.created_at.desc(), Order.id.desc())
    )
    return [OrderResponse.model_validate(order) for order in result.scalars().all()]


@router.get("", response_model=OrderPageResponse, summary="All orders (admin)")
async def list_orders(
    status: Optional[OrderStatus] = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    admin: Identity = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> OrderPageResponse:
    query = select(Order)
    count_query = select(func.count(Order.id))
    if status is not None:
        query = query.where(Order.status == status)
        count_query = count_query.where(Order.status == status)

    total = (await db.execute(count_query)).scalar() or 0

    result = await db.execute(
        query.order_by(Order.created_at.desc(), Order.id.desc())
        .offset((page - 1) * limit)
        .limit(limit)
    )

    return OrderPageResponse(
        orders=[OrderResponse.model_validate(order) for order in result.scalars().all()],
        total_pages=math.ceil(total / limit),
        current_page=page,
        total_orders=total,
    )


@router.get("/{order_id}", response_model=OrderResponse, summary="Get an order")
async def get_order(
    order_id: int,
    identity: Identity = Depends(get_identity),
    authorizer: RoleAuthorizer = Depends(get_authorizer),
    db: AsyncSession = Depends(get_db),
) -> OrderResponse:
    """Owners see their own orders; admins see all."""
    order = await load_order(db, order_id)
    authorizer.authorize_owner(identity, order.user_id)
    return OrderResponse.model_validate(order)


@router.put("/{order_id}/status", response_model=OrderMessageResponse, summary="Update order status")
async def update_order_status(
    order_id: int,
    update: OrderStatusUpdate,
    admin: Identity = Depends(require_admin),
    settings: Settings = Depends(get_app_settings),
    db: AsyncSession = Depends(get_db),
) -> OrderMessageResponse:
    order = await load_order(db, order_id)

    if update.status == OrderStatus.CONFIRMED:
        order.confirm(user_pk(admin), settings.delivery_buffer_minutes)
    else:
        order.status = update.status
    await db.commit()

    logger.info(f"Order #{order.id} -> {order.status.value} by user {admin.user_id}")

    return OrderMessageResponse(
        message="Order status updated successfully",
        order=OrderResponse.model_validate(order),
    )


@router.put("/{order_id}/cancel", response_model=OrderMessageResponse, summary="Cancel an order")
async def cancel_order(
    order_id: int,
    identity: Identity = Depends(get_identity),
    authorizer: RoleAuthorizer = Depends(get_authorizer),
    db: AsyncSession = Depends(get_db),
) -> OrderMessageResponse:
    """Only the owner may cancel, and only while the order is pending."""
    order = await load_order(db, order_id)
    authorizer.authorize_owner(identity, order.user_id, override_role=None)

    if order.status != OrderStatus.PENDING:
        raise ValidationError("Can only cancel pending orders")

    order.status = OrderStatus.CANCELLED
    await db.commit()

    logger.info(f"Order #{order.id} cancelled by user {identity.user_id}")

    return OrderMessageResponse(
        message="Order cancelled successfully",
        order=OrderResponse.model_validate(order),
    )
