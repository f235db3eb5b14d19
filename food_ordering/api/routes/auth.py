"""
Authentication Routes

    POST /api/auth/register   create a user account and return a token
    POST /api/auth/login      exchange credentials for a token (login limiter)
    GET  /api/auth/profile    current user's profile
    PUT  /api/auth/profile    update fullName / phone / address
"""

import logging
from typing import Any

from fastapi import APIRouter, Depends
from sqlalchemy import or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from food_ordering.api.dependencies import (
    enforce_login_rate_limit,
    get_app_settings,
    get_current_user,
    get_password_hasher,
    get_token_service,
    json_object_body,
)
from food_ordering.core.config import Settings
from food_ordering.core.errors import AuthenticationError, ValidationError
from food_ordering.database import get_db
from food_ordering.models import User
from food_ordering.schemas import AuthResponse, UserMessageResponse, UserResponse
from food_ordering.security.identity import Role
from food_ordering.security.passwords import PasswordHasher
from food_ordering.security.sanitizer import (
    login_sanitizer,
    profile_sanitizer,
    registration_sanitizer,
)
from food_ordering.security.tokens import TokenService
from food_ordering.validation import login_validator, profile_validator, registration_validator

logger = logging.getLogger(__name__)
router = APIRouter()


def _optional_text(value: Any):
    if value is None:
        return None
    text = str(value).strip()
    return text or None


@router.post(
    "/register",
    response_model=AuthResponse,
    status_code=201,
    summary="Register a new user",
)
async def register(
    payload: dict[str, Any] = Depends(json_object_body),
    db: AsyncSession = Depends(get_db),
    hasher: PasswordHasher = Depends(get_password_hasher),
    tokens: TokenService = Depends(get_token_service),
    settings: Settings = Depends(get_app_settings),
) -> AuthResponse:
    """
    Create an account. Every validation problem is reported at once as
    {"errors": [...]}. Self-registration always yields the user role.
    """
    data = registration_sanitizer.sanitize(payload)
    registration_validator(settings.registration_mode).ensure_valid(data)

    username = str(data["username"])
    email = str(data["email"]).lower()

    result = await db.execute(
        select(User).where(or_(User.email == email, User.username == username))
    )
    existing = result.scalars().first()
    if existing:
        message = "Email already registered" if existing.email == email else "Username already taken"
        raise ValidationError(message)

    user = User(
        username=username,
        email=email,
        password_digest=await hasher.hash_async(str(data["password"])),
        full_name=str(data["fullName"]),
        phone=_optional_text(data.get("phone")),
        address=_optional_text(data.get("address")),
        role=Role.USER,
    )
    db.add(user)
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise ValidationError("Username or email already exists")

    logger.info(f"User #{user.id} registered ({user.username})")

    return AuthResponse(
        message="User registered successfully",
        token=tokens.issue(user.id, user.username, user.role),
        user=UserResponse.model_validate(user),
    )


@router.post(
    "/login",
    response_model=AuthResponse,
    dependencies=[Depends(enforce_login_rate_limit)],
    summary="Log in",
)
async def login(
    payload: dict[str, Any] = Depends(json_object_body),
    db: AsyncSession = Depends(get_db),
    hasher: PasswordHasher = Depends(get_password_hasher),
    tokens: TokenService = Depends(get_token_service),
) -> AuthResponse:
    """Presence checks only; unknown user and wrong password look identical."""
    data = login_sanitizer.sanitize(payload)
    login_validator().ensure_valid(data)

    result = await db.execute(select(User).where(User.username == str(data["username"])))
    user = result.scalar_one_or_none()

    password = str(data["password"])
    if user is None:
        await hasher.verify_async(password)
        raise AuthenticationError("Invalid username or password")
    if not await hasher.verify_async(password, user.password_digest):
        raise AuthenticationError("Invalid username or password")

    logger.info(f"User #{user.id} logged in")

    return AuthResponse(
        message="Login successful",
        token=tokens.issue(user.id, user.username, user.role),
        user=UserResponse.model_validate(user),
    )


@router.get("/profile", summary="Current user's profile")
async def get_profile(user: User = Depends(get_current_user)) -> dict[str, UserResponse]:
    return {"user": UserResponse.model_validate(user)}


@router.put("/profile", response_model=UserMessageResponse, summary="Update profile")
async def update_profile(
    payload: dict[str, Any] = Depends(json_object_body),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> UserMessageResponse:
    """Fields left out of the body keep their stored values."""
    changes = profile_sanitizer.sanitize(payload)
    merged = {
        "fullName": changes.get("fullName", user.full_name),
        "phone": changes.get("phone", user.phone),
        "address": changes.get("address", user.address),
    }
    profile_validator().ensure_valid(merged)

    user.full_name = str(merged["fullName"])
    user.phone = _optional_text(merged["phone"])
    user.address = _optional_text(merged["address"])
    await db.commit()

    return UserMessageResponse(
        message="Profile updated successfully",
        user=UserResponse.model_validate(user),
    )
