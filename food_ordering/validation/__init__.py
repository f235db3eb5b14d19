"""
Validation Module

Rule engines for untrusted request payloads.

    - base: ValidationResult, AggregatingValidator, FailFastValidator
    - users: registration / profile / login rules (aggregating)
    - catalog: food item business rules (fail-fast)
"""

from food_ordering.validation.base import (
    AggregatingValidator,
    FailFastValidator,
    ValidationResult,
    Validator,
    is_missing,
)
from food_ordering.validation.catalog import CATEGORIES, CatalogItemValidator
from food_ordering.validation.users import (
    login_validator,
    profile_validator,
    registration_validator,
)

__all__ = [
    "AggregatingValidator",
    "FailFastValidator",
    "ValidationResult",
    "Validator",
    "is_missing",
    "CATEGORIES",
    "CatalogItemValidator",
    "login_validator",
    "profile_validator",
    "registration_validator",
]
