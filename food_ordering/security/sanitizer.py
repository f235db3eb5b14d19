"""
Input Sanitizer

Defense-in-depth cleaning of free-text fields that may end up in logs, HTML
or query strings. This is not a substitute for parameterized queries; the
store never interpolates these values.

Each payload kind has an explicit list of FieldSpec descriptors. Fields not
in the list are dropped (and logged) instead of being passed through.
"""

import logging
import re
from dataclasses import dataclass
from typing import Any, Iterable, Mapping

logger = logging.getLogger(__name__)


_PATTERNS = (
    re.compile(r"<script[^>]*>.*?</script>", re.IGNORECASE | re.DOTALL),
    re.compile(r"javascript:", re.IGNORECASE),
    re.compile(r"on\w+\s*=", re.IGNORECASE),
    re.compile(r"DROP\s+TABLE", re.IGNORECASE),
    re.compile(r";"),
)


def sanitize_text(value: str) -> str:
    """
    Strip dangerous substrings and surrounding whitespace.

    Removing one match can splice a new one together (``javajavascript:script:``),
    so passes repeat until the text stops changing. The result is therefore
    a fixed point and sanitizing it again is a no-op.
    """
    previous = None
    while value != previous:
        previous = value
        for pattern in _PATTERNS:
            value = pattern.sub("", value)
        value = value.strip()
    return value


@dataclass(frozen=True)
class FieldSpec:
    """
    How one known field is treated.

    Attributes:
        name: Payload key
        sanitize: Clean string values (False for secrets that are only hashed)
    """
    name: str
    sanitize: bool = True


class Sanitizer:
    """Applies sanitize_text to the string fields of a payload per FieldSpec."""

    def __init__(self, fields: Iterable[FieldSpec]):
        self.fields = {spec.name: spec for spec in fields}

    def sanitize(self, record: Mapping[str, Any]) -> dict[str, Any]:
        """
        Return a cleaned copy of record.

        Non-string values and fields with sanitize=False pass through
        unchanged; unknown keys are left out.
        """
        unknown = [key for key in record if key not in self.fields]
        if unknown:
            logger.warning(f"Dropping unexpected fields: {sorted(unknown)}")

        cleaned = {}
        for name, spec in self.fields.items():
            if name not in record:
                continue
            value = record[name]
            if spec.sanitize and isinstance(value, str):
                value = sanitize_text(value)
            cleaned[name] = value
        return cleaned


# =============================================================================
# FIELD SETS
# =============================================================================

REGISTRATION_FIELDS = (
    FieldSpec("username"),
    FieldSpec("email"),
    FieldSpec("password", sanitize=False),
    FieldSpec("fullName"),
    FieldSpec("phone"),
    FieldSpec("address"),
)

LOGIN_FIELDS = (
    FieldSpec("username"),
    FieldSpec("password", sanitize=False),
)

PROFILE_FIELDS = (
    FieldSpec("fullName"),
    FieldSpec("phone"),
    FieldSpec("address"),
)

CATALOG_FIELDS = (
    FieldSpec("name"),
    FieldSpec("description"),
    FieldSpec("price"),
    FieldSpec("category"),
    FieldSpec("image"),
    FieldSpec("preparationTime"),
    FieldSpec("available"),
)

registration_sanitizer = Sanitizer(REGISTRATION_FIELDS)
login_sanitizer = Sanitizer(LOGIN_FIELDS)
profile_sanitizer = Sanitizer(PROFILE_FIELDS)
catalog_sanitizer = Sanitizer(CATALOG_FIELDS)
