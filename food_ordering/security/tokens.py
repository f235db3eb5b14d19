"""
Token Service

Issues and verifies signed, time-bounded access tokens (JWT, HMAC) carrying
the user id, username and role.

The service refuses to exist without a real signing secret: constructing it
with a missing or placeholder secret raises ConfigurationError, which the
application factory lets escape so the process never starts in that state.

Usage:
    service = TokenService.from_settings(settings)
    token = service.issue(user_id="42", username="john_doe", role=Role.USER)
    identity = service.verify(token)
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Optional

import jwt

from food_ordering.core.config import Settings, is_placeholder_secret
from food_ordering.core.errors import (
    AuthenticationError,
    ConfigurationError,
    InvalidTokenError,
)
from food_ordering.security.identity import Identity, Role

logger = logging.getLogger(__name__)

DEFAULT_LIFETIME = timedelta(hours=2)
REQUIRED_CLAIMS = ["sub", "username", "role", "iat", "exp"]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def extract_bearer(authorization: Optional[str]) -> Optional[str]:
    """
    Pull the token out of an Authorization header value.

    Returns:
        The token, or None when the header is absent or not a Bearer header
    """
    if not authorization:
        return None
    scheme, _, credentials = authorization.strip().partition(" ")
    if scheme.lower() != "bearer" or not credentials.strip():
        return None
    return credentials.strip()


class TokenService:
    """
    Stateless JWT issuer/verifier.

    Attributes:
        algorithm: HMAC algorithm used to sign and the only one accepted
        lifetime: How long an issued token stays valid
    """

    def __init__(
        self,
        secret: Optional[str],
        algorithm: str = "HS256",
        lifetime: timedelta = DEFAULT_LIFETIME,
        clock: Callable[[], datetime] = _utcnow,
    ):
        if not secret or not secret.strip():
            raise ConfigurationError("JWT_SECRET must be set to sign access tokens")
        if is_placeholder_secret(secret):
            raise ConfigurationError("JWT_SECRET is set to a placeholder value")

        self._secret = secret
        self.algorithm = algorithm
        self.lifetime = lifetime
        self._clock = clock

    @classmethod
    def from_settings(cls, settings: Settings) -> "TokenService":
        secret = settings.jwt_secret.get_secret_value() if settings.jwt_secret else None
        return cls(
            secret=secret,
            algorithm=settings.jwt_algorithm,
            lifetime=timedelta(minutes=settings.token_lifetime_minutes),
        )

    def issue(self, user_id: Any, username: str, role: Role) -> str:
        """
        Sign a token for the given identity claims.

        Args:
            user_id: User identifier (stored as a string subject)
            username: Username claim
            role: Role claim

        Returns:
            Encoded JWT
        """
        issued_at = self._clock()
        payload = {
            "sub": str(user_id),
            "username": username,
            "role": Role(role).value,
            "iat": int(issued_at.timestamp()),
            "exp": int((issued_at + self.lifetime).timestamp()),
        }
        return jwt.encode(payload, self._secret, algorithm=self.algorithm)

    def verify(self, token: Optional[str]) -> Identity:
        """
        Verify a token and build the Identity it asserts.

        Raises:
            AuthenticationError: token absent
            InvalidTokenError: token malformed, tampered, expired or missing claims
        """
        if not token:
            raise AuthenticationError("Access token required")

        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[self.algorithm],
                options={"require": REQUIRED_CLAIMS},
            )
            identity = Identity(
                user_id=str(payload["sub"]),
                username=self._claim_str(payload, "username"),
                role=Role(payload["role"]),
                issued_at=datetime.fromtimestamp(payload["iat"], tz=timezone.utc),
                expires_at=datetime.fromtimestamp(payload["exp"], tz=timezone.utc),
            )
        except (jwt.PyJWTError, ValueError, TypeError) as e:
            logger.warning(f"Rejected access token: {type(e).__name__}")
            raise InvalidTokenError("Invalid or expired token") from None

        return identity

    @staticmethod
    def _claim_str(payload: dict, name: str) -> str:
        value = payload[name]
        if not isinstance(value, str):
            raise TypeError(f"claim {name} must be a string")
        return value
