"""
User Field Validation

Registration, profile and login rules built on AggregatingValidator, so a
client sees every problem with its payload in one response.

Payload keys follow the public JSON contract (camelCase: fullName).
"""

import re
from typing import Any, Mapping, Sequence

from food_ordering.core.config import RegistrationMode
from food_ordering.validation.base import AggregatingValidator, Rule, is_missing


EMAIL_PATTERN = re.compile(r"[^\s@]+@[^\s@]+\.[^\s@]+")
PHONE_PATTERN = re.compile(r"\+?[1-9][0-9]{0,15}")
USERNAME_PATTERN = re.compile(r"[A-Za-z0-9_]+")
SPECIAL_CHAR_PATTERN = re.compile(r"[!@#$%^&*()_+\-=\[\]{};':\"\\|,.<>?]")

MIN_PASSWORD_LENGTH = 6
STRONG_PASSWORD_LENGTH = 8
MAX_USERNAME_LENGTH = 50

REQUIRED_FIELDS = ("username", "email", "password", "fullName")
CONTACT_FIELDS = ("phone", "address")


def _label(field: str) -> str:
    return field[:1].upper() + field[1:]


def _text(value: Any) -> str:
    return value if isinstance(value, str) else str(value)


# =============================================================================
# RULES
# =============================================================================

def required(fields: Sequence[str]) -> Rule:
    """Build a rule reporting '<Field> is required' for each missing field."""
    def rule(data: Mapping[str, Any]) -> list[str]:
        return [f"{_label(f)} is required" for f in fields if is_missing(data.get(f))]
    return rule


def email_format(data: Mapping[str, Any]) -> list[str]:
    email = data.get("email")
    if is_missing(email):
        return []
    if not EMAIL_PATTERN.fullmatch(_text(email)):
        return ["Invalid email format"]
    return []


def password_strength(data: Mapping[str, Any]) -> list[str]:
    """
    Weak-password heuristics. Each condition flags independently, so one
    password can collect several messages.
    """
    password = data.get("password")
    if password is None or password == "":
        return []
    password = _text(password)
    errors = []

    if len(password) < MIN_PASSWORD_LENGTH:
        errors.append(f"Password must be at least {MIN_PASSWORD_LENGTH} characters long")

    has_digit = re.search(r"[0-9]", password) is not None
    has_special = SPECIAL_CHAR_PATTERN.search(password) is not None
    if len(password) < STRONG_PASSWORD_LENGTH and not has_digit and not has_special:
        errors.append("Password is too weak")

    if re.fullmatch(r"[0-9]+", password):
        errors.append("Password cannot be only numbers")

    if re.fullmatch(r"[a-z]+", password):
        errors.append("Password is too weak")

    return errors


def username_format(data: Mapping[str, Any]) -> list[str]:
    username = data.get("username")
    if is_missing(username):
        return []
    username = _text(username)
    errors = []
    if len(username) > MAX_USERNAME_LENGTH:
        errors.append("Username is too long")
    if not USERNAME_PATTERN.fullmatch(username):
        errors.append(
            "Username contains invalid characters and can only contain "
            "letters, numbers, and underscores"
        )
    return errors


def phone_format(data: Mapping[str, Any]) -> list[str]:
    phone = data.get("phone")
    if is_missing(phone):
        return []
    if not PHONE_PATTERN.fullmatch(_text(phone)):
        return ["Invalid phone number format"]
    return []


# =============================================================================
# VALIDATORS
# =============================================================================

def registration_validator(mode: RegistrationMode = RegistrationMode.STRICT) -> AggregatingValidator:
    """
    Build the registration validator for the configured mode.

    STRICT also requires phone and address. Whether they should be optional
    is an unresolved business decision, hence the switch.
    """
    required_fields = REQUIRED_FIELDS
    if mode == RegistrationMode.STRICT:
        required_fields = REQUIRED_FIELDS + CONTACT_FIELDS

    return AggregatingValidator([
        required(required_fields),
        email_format,
        password_strength,
        username_format,
        phone_format,
    ])


def profile_validator() -> AggregatingValidator:
    """Profile updates may only touch fullName, phone and address."""
    return AggregatingValidator([required(("fullName",)), phone_format])


def login_validator() -> AggregatingValidator:
    """Presence only; login must not reveal which format rule a guess broke."""
    return AggregatingValidator([required(("username", "password"))])
