"""
Catalog Item Business Rules

Food items are checked with a FailFastValidator: the first violated rule is
reported on its own. Price is checked before the required-field sweep so a
negative price yields a price message rather than a generic one.

The update path merges the stored item with the requested changes and runs
the same rule list on the result, so no rule can be skipped by sending a
partial update.
"""

import math
from numbers import Real
from typing import Any, Mapping

from food_ordering.validation.base import FailFastValidator, ValidationResult, is_missing


REQUIRED_FIELDS = ("name", "description", "price", "category", "preparationTime")
MIN_PRICE = 0
MIN_PREPARATION_TIME = 0
MAX_NAME_LENGTH = 100

TEXT_FIELDS = (
    ("name", "Food name must be text"),
    ("description", "Description must be text"),
    ("category", "Category must be text"),
    ("image", "Image must be text"),
)

CATEGORIES = (
    "Appetizer",
    "Main Course",
    "Dessert",
    "Beverage",
    "Pizza",
    "Burger",
    "Pasta",
    "Salad",
)


def _is_number(value: Any) -> bool:
    if not isinstance(value, Real) or isinstance(value, bool):
        return False
    return math.isfinite(value)


def price_positive(data: Mapping[str, Any]) -> list[str]:
    price = data.get("price")
    if price is None:
        return []
    if not _is_number(price):
        return ["Price must be a number"]
    if price <= MIN_PRICE:
        return ["Price must be greater than 0"]
    return []


def required_fields(data: Mapping[str, Any]) -> list[str]:
    if any(is_missing(data.get(field)) for field in REQUIRED_FIELDS):
        return ["Required fields are missing"]
    return []


def text_fields(data: Mapping[str, Any]) -> list[str]:
    for field, message in TEXT_FIELDS:
        value = data.get(field)
        if value is not None and not isinstance(value, str):
            return [message]
    return []


def preparation_time_positive(data: Mapping[str, Any]) -> list[str]:
    minutes = data.get("preparationTime")
    if not _is_number(minutes):
        return ["Preparation time must be a number"]
    if minutes <= MIN_PREPARATION_TIME:
        return ["Preparation time must be greater than 0"]
    if isinstance(minutes, float) and not minutes.is_integer():
        return ["Preparation time must be a whole number of minutes"]
    return []


def name_length(data: Mapping[str, Any]) -> list[str]:
    name = data.get("name")
    if isinstance(name, str) and len(name) > MAX_NAME_LENGTH:
        return ["Food name is too long"]
    return []


def known_category(data: Mapping[str, Any]) -> list[str]:
    if data.get("category") not in CATEGORIES:
        return ["Invalid food category"]
    return []


class CatalogItemValidator(FailFastValidator):
    """Rules for a CatalogItemDraft, shared by create and update."""

    def __init__(self):
        super().__init__([
            price_positive,
            required_fields,
            text_fields,
            preparation_time_positive,
            name_length,
            known_category,
        ])

    def validate_update(
        self,
        current: Mapping[str, Any],
        changes: Mapping[str, Any],
    ) -> ValidationResult:
        """Validate the item as it would look after applying changes."""
        return self.validate(merge_update(current, changes))

    def ensure_valid_update(self, current: Mapping[str, Any], changes: Mapping[str, Any]) -> None:
        self.ensure_valid(merge_update(current, changes))


def merge_update(current: Mapping[str, Any], changes: Mapping[str, Any]) -> dict[str, Any]:
    """Overlay changes on current; keys sent as None leave the stored value alone."""
    merged = dict(current)
    merged.update({k: v for k, v in changes.items() if v is not None})
    return merged
