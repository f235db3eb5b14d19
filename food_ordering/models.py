"""
SQLAlchemy Database Models

Users (credential records), food items, orders and order lines.
Timestamps are filled in Python so they are available right after a flush
without another round trip.
"""

import enum
from datetime import datetime, timedelta, timezone

from sqlalchemy import Boolean, Column, DateTime, Enum, Float, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship

from food_ordering.database import Base
from food_ordering.security.identity import Role


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class OrderStatus(str, enum.Enum):
    """Order status workflow."""
    PENDING = "pending"
    CONFIRMED = "confirmed"
    PREPARING = "preparing"
    READY = "ready"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


# Statuses whose totals count as revenue on the admin dashboard.
REVENUE_STATUSES = (
    OrderStatus.CONFIRMED,
    OrderStatus.PREPARING,
    OrderStatus.READY,
    OrderStatus.DELIVERED,
)


class User(Base):
    """
    Registered customer or administrator.

    The password is only ever stored as an opaque bcrypt digest.
    """
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    username = Column(String(50), nullable=False, unique=True, index=True)
    email = Column(String(255), nullable=False, unique=True, index=True)
    password_digest = Column(String(255), nullable=False)
    full_name = Column(String(100), nullable=False)
    phone = Column(String(20), nullable=True)
    address = Column(String(255), nullable=True)
    role = Column(Enum(Role), default=Role.USER, nullable=False, index=True)

    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN

    def __repr__(self):
        return f"<User #{self.id} - {self.username} - {self.role.value}>"


class Food(Base):
    """Menu item."""
    __tablename__ = "foods"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    name = Column(String(100), nullable=False, index=True)
    description = Column(Text, nullable=False)
    price = Column(Float, nullable=False)
    category = Column(String(50), nullable=False, index=True)
    image = Column(String(500), nullable=False, default="https://via.placeholder.com/300x200")
    available = Column(Boolean, nullable=False, default=True, index=True)
    preparation_time = Column(Integer, nullable=False)  # minutes

    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    def to_draft(self) -> dict:
        """Current values in the public camelCase shape used by the validators."""
        return {
            "name": self.name,
            "description": self.description,
            "price": self.price,
            "category": self.category,
            "image": self.image,
            "preparationTime": self.preparation_time,
            "available": self.available,
        }

    def __repr__(self):
        return f"<Food #{self.id} - {self.name} - {self.price}>"


class Order(Base):
    """Customer order with its lines; totals are computed from stored prices."""
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    total_amount = Column(Float, nullable=False)
    status = Column(Enum(OrderStatus), default=OrderStatus.PENDING, nullable=False, index=True)
    special_instructions = Column(String(500), nullable=True)
    delivery_address = Column(String(255), nullable=False)
    phone = Column(String(20), nullable=False)
    estimated_delivery_time = Column(DateTime(timezone=True), nullable=True)

    confirmed_by_id = Column(Integer, ForeignKey("users.id"), nullable=True)
    confirmed_at = Column(DateTime(timezone=True), nullable=True)

    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False, index=True)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    user = relationship("User", foreign_keys=[user_id], lazy="selectin")
    items = relationship(
        "OrderItem",
        back_populates="order",
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    def confirm(self, admin_id: int, delivery_buffer_minutes: int = 30) -> None:
        """
        Mark the order confirmed by admin_id.

        The delivery estimate is set once: average line preparation time plus
        the delivery buffer, counted from the confirmation moment.
        """
        now = utcnow()
        self.status = OrderStatus.CONFIRMED
        self.confirmed_by_id = admin_id
        self.confirmed_at = now
        if self.estimated_delivery_time is None and self.items:
            average = sum(item.preparation_time or 20 for item in self.items) / len(self.items)
            self.estimated_delivery_time = now + timedelta(
                minutes=average + delivery_buffer_minutes
            )

    def __repr__(self):
        return f"<Order #{self.id} - user {self.user_id} - {self.status.value}>"


class OrderItem(Base):
    """One line of an order; price and name are snapshotted at order time."""
    __tablename__ = "order_items"

    id = Column(Integer, primary_key=True, autoincrement=True)
    order_id = Column(Integer, ForeignKey("orders.id"), nullable=False, index=True)
    food_id = Column(Integer, ForeignKey("foods.id"), nullable=False, index=True)
    food_name = Column(String(100), nullable=False)
    quantity = Column(Integer, nullable=False)
    price = Column(Float, nullable=False)
    preparation_time = Column(Integer, nullable=False, default=20)

    order = relationship("Order", back_populates="items")
