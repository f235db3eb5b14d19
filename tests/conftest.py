"""
Shared fixtures.

Every test that needs the HTTP surface gets a fresh application with its own
in-memory SQLite database and its own in-memory rate-limit store.
"""

from functools import partial
from typing import Any

import pytest
from fastapi.testclient import TestClient

from food_ordering.core.config import Settings
from food_ordering.main import create_app
from food_ordering.models import Food, User
from food_ordering.security.identity import Role

JWT_SECRET = "test-signing-key-5f0c2a9e7d3b41c8a6e2"
ADMIN_SECRET = "step-up-7Qz-x9Lm-2026"
USER_PASSWORD = "SecurePass123!"


def make_settings(**overrides: Any) -> Settings:
    values = {
        "_env_file": None,
        "jwt_secret": JWT_SECRET,
        "admin_password": ADMIN_SECRET,
        "database_url": "sqlite+aiosqlite:///:memory:",
        "password_hash_rounds": 4,
        "cors_allowed_origins": "http://localhost:3000",
    }
    values.update(overrides)
    return Settings(**values)


@pytest.fixture
def settings() -> Settings:
    return make_settings()


@pytest.fixture
def app(settings):
    return create_app(settings)


@pytest.fixture
def client(app):
    with TestClient(app, raise_server_exceptions=False) as test_client:
        yield test_client


@pytest.fixture
def registration() -> dict[str, Any]:
    return {
        "username": "john_doe",
        "email": "john@example.com",
        "password": USER_PASSWORD,
        "fullName": "John Doe",
        "phone": "+1234567890",
        "address": "123 Main St",
    }


def auth_header(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


async def insert_user(app, username: str, role: Role = Role.USER) -> int:
    async with app.state.session_maker() as db:
        user = User(
            username=username,
            email=f"{username}@example.com",
            password_digest=app.state.password_hasher.hash(USER_PASSWORD),
            full_name=username.replace("_", " ").title(),
            phone="+15551234567",
            address="1 Kitchen Road",
            role=role,
        )
        db.add(user)
        await db.commit()
        return user.id


async def insert_food(app, name: str = "Margherita Pizza", **fields: Any) -> int:
    values = {
        "description": "Classic pizza with tomato, mozzarella and basil",
        "price": 12.99,
        "category": "Pizza",
        "preparation_time": 20,
        "available": True,
    }
    values.update(fields)
    async with app.state.session_maker() as db:
        food = Food(name=name, **values)
        db.add(food)
        await db.commit()
        return food.id


def add_food(client, name: str = "Margherita Pizza", **fields: Any) -> int:
    """Insert a food item through the running app's event loop."""
    return client.portal.call(partial(insert_food, client.app, name, **fields))


@pytest.fixture
def user_token(client, registration) -> str:
    response = client.post("/api/auth/register", json=registration)
    assert response.status_code == 201, response.text
    return response.json()["token"]


@pytest.fixture
def admin_token(client, app) -> str:
    admin_id = client.portal.call(insert_user, app, "head_chef", Role.ADMIN)
    return app.state.token_service.issue(admin_id, "head_chef", Role.ADMIN)


@pytest.fixture
def food_id(client) -> int:
    return add_food(client)
