"""
FastAPI Dependencies

Glue between the security components (kept on app.state by the application
factory) and the routes. Ordering inside a route follows the pipeline:
login limiter -> token verification -> role check -> body validation.
"""

import logging
from typing import Any, Optional

from fastapi import Body, Depends, Request
from fastapi.security import APIKeyHeader
from sqlalchemy.ext.asyncio import AsyncSession

from food_ordering.core.config import Settings
from food_ordering.core.errors import InvalidTokenError, ValidationError
from food_ordering.database import get_db
from food_ordering.models import User
from food_ordering.security.authorization import RoleAuthorizer
from food_ordering.security.identity import Identity, Role
from food_ordering.security.passwords import PasswordHasher
from food_ordering.security.rate_limit import RateLimiter, client_address
from food_ordering.security.stepup import StepUpVerifier
from food_ordering.security.tokens import TokenService, extract_bearer

logger = logging.getLogger(__name__)

# auto_error=False: a missing header must become our 401 body, not FastAPI's.
authorization_header = APIKeyHeader(name="Authorization", auto_error=False)


# =============================================================================
# APP STATE ACCESSORS
# =============================================================================

def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_token_service(request: Request) -> TokenService:
    return request.app.state.token_service


def get_authorizer(request: Request) -> RoleAuthorizer:
    return request.app.state.authorizer


def get_password_hasher(request: Request) -> PasswordHasher:
    return request.app.state.password_hasher


def get_login_limiter(request: Request) -> RateLimiter:
    return request.app.state.login_limiter


def get_step_up(request: Request) -> StepUpVerifier:
    return request.app.state.step_up


# =============================================================================
# RATE LIMITING
# =============================================================================

async def enforce_login_rate_limit(
    request: Request,
    limiter: RateLimiter = Depends(get_login_limiter),
    settings: Settings = Depends(get_app_settings),
) -> None:
    """Stricter per-client budget for the login route, counted on every attempt."""
    await limiter.check(client_address(request, settings.trust_proxy_headers))


# =============================================================================
# IDENTITY
# =============================================================================

async def get_identity(
    authorization: Optional[str] = Depends(authorization_header),
    tokens: TokenService = Depends(get_token_service),
) -> Identity:
    """Verify the bearer token and return the identity it asserts."""
    return tokens.verify(extract_bearer(authorization))


def require_role(role: Role):
    """Dependency factory: verified identity whose role equals role."""

    async def dependency(
        identity: Identity = Depends(get_identity),
        authorizer: RoleAuthorizer = Depends(get_authorizer),
    ) -> Identity:
        return authorizer.authorize(identity, role)

    return dependency


require_admin = require_role(Role.ADMIN)


def user_pk(identity: Identity) -> int:
    """Primary key behind a token subject."""
    try:
        return int(identity.user_id)
    except ValueError:
        raise InvalidTokenError() from None


async def get_current_user(
    identity: Identity = Depends(get_identity),
    db: AsyncSession = Depends(get_db),
) -> User:
    """
    Load the user record for the verified identity.

    A valid token for a user that no longer exists is treated like an invalid
    token.
    """
    user = await db.get(User, user_pk(identity))
    if user is None:
        logger.warning(f"Token subject {identity.user_id} has no user record")
        raise InvalidTokenError()
    return user


# =============================================================================
# BODIES
# =============================================================================

async def json_object_body(payload: Any = Body(default=None)) -> dict[str, Any]:
    """
    Raw JSON object body for routes validated by the rule engines.

    Anything other than a JSON object is a validation error.
    """
    if payload is None:
        return {}
    if not isinstance(payload, dict):
        raise ValidationError(["Request body must be a JSON object"], aggregated=True)
    return payload
