"""
Security Module

The request-security pipeline, leaves first:

    - sanitizer: strips dangerous substrings from free text
    - tokens: signed identity tokens (issue / verify)
    - authorization: role and ownership checks
    - passwords: bcrypt hashing capability
    - stepup: second secret for sensitive admin actions
    - rate_limit: fixed-window limiter over an injectable store
    - headers: security response headers
"""

from food_ordering.security.authorization import RoleAuthorizer
from food_ordering.security.headers import SecurityHeadersMiddleware
from food_ordering.security.identity import Identity, Role
from food_ordering.security.passwords import PasswordHasher
from food_ordering.security.sanitizer import FieldSpec, Sanitizer, sanitize_text
from food_ordering.security.stepup import StepUpVerifier
from food_ordering.security.tokens import TokenService, extract_bearer

__all__ = [
    "RoleAuthorizer",
    "SecurityHeadersMiddleware",
    "Identity",
    "Role",
    "PasswordHasher",
    "FieldSpec",
    "Sanitizer",
    "sanitize_text",
    "StepUpVerifier",
    "TokenService",
    "extract_bearer",
]
