"""
API Routers

    /api/auth    registration, login, profile
    /api/food    catalog (public reads, admin writes)
    /api/orders  ordering and order workflow
    /api/admin   step-up actions, dashboard, user and catalog management
"""

from food_ordering.api.routes import admin, auth, food, orders

__all__ = ["admin", "auth", "food", "orders"]
