"""
Admin Step-Up Verification

Sensitive admin actions (order confirmation) require a second secret on top
of an admin token. Like the token signing secret, it has no default: the
verifier cannot be built with a missing or placeholder value.
"""

import hmac
import logging
from typing import Optional

from food_ordering.core.config import Settings, is_placeholder_secret
from food_ordering.core.errors import ConfigurationError, StepUpVerificationError
from food_ordering.security.identity import Identity

logger = logging.getLogger(__name__)


class StepUpVerifier:
    """Constant-time comparison against the configured admin secret."""

    def __init__(self, secret: Optional[str]):
        if not secret or not secret.strip():
            raise ConfigurationError("ADMIN_PASSWORD must be set for order confirmation")
        if is_placeholder_secret(secret):
            raise ConfigurationError("ADMIN_PASSWORD is set to a placeholder value")
        self._secret = secret.encode("utf-8")

    @classmethod
    def from_settings(cls, settings: Settings) -> "StepUpVerifier":
        secret = settings.admin_password.get_secret_value() if settings.admin_password else None
        return cls(secret)

    def verify(self, identity: Identity, password: Optional[str]) -> None:
        """
        Raises:
            StepUpVerificationError: password does not match
        """
        candidate = (password or "").encode("utf-8")
        if not hmac.compare_digest(candidate, self._secret):
            logger.warning(f"Step-up verification failed for user {identity.user_id}")
            raise StepUpVerificationError()
