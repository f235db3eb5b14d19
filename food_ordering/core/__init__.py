"""
Core module initialization.
Exports configuration, logging utilities and the error taxonomy.
"""

from food_ordering.core.config import (
    get_settings,
    setup_logging,
    Settings,
    EnvironmentMode,
    RateLimitBackend,
    RegistrationMode,
)
from food_ordering.core.errors import (
    AppError,
    AuthenticationError,
    AuthorizationError,
    ConfigurationError,
    InvalidTokenError,
    NotFoundError,
    RateLimitError,
    ServerError,
    StepUpVerificationError,
    ValidationError,
)

__all__ = [
    "get_settings",
    "setup_logging",
    "Settings",
    "EnvironmentMode",
    "RateLimitBackend",
    "RegistrationMode",
    "AppError",
    "AuthenticationError",
    "AuthorizationError",
    "ConfigurationError",
    "InvalidTokenError",
    "NotFoundError",
    "RateLimitError",
    "ServerError",
    "StepUpVerificationError",
    "ValidationError",
]
