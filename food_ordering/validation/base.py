"""
Validation Strategies

Two deliberately different contracts share one rule shape:

    AggregatingValidator  runs every rule and reports every violation
                          (registration, profile, login)
    FailFastValidator     stops at the first violation
                          (catalog items)

A rule is a callable taking the input mapping and returning a list of
messages (empty when the rule passes). Aggregating validators concatenate
all lists in rule order; fail-fast validators return the first message of the
first failing rule.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Callable, Iterable, Mapping, Sequence

from food_ordering.core.errors import ValidationError


Rule = Callable[[Mapping[str, Any]], list[str]]


@dataclass(frozen=True)
class ValidationResult:
    """
    Outcome of one validation call.

    errors keeps rule evaluation order and may contain duplicates.
    is_valid is derived from errors so the two can never disagree.
    """
    errors: tuple[str, ...] = ()

    @property
    def is_valid(self) -> bool:
        return len(self.errors) == 0

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {"isValid": self.is_valid, "errors": list(self.errors)}


def is_missing(value: Any) -> bool:
    """A value is missing if it is None or its text form trims to empty."""
    if value is None:
        return True
    return str(value).strip() == ""


class Validator(ABC):
    """Common plumbing for rule-based validators."""

    def __init__(self, rules: Iterable[Rule]):
        self.rules: Sequence[Rule] = tuple(rules)

    @abstractmethod
    def validate(self, data: Mapping[str, Any]) -> ValidationResult:
        """Evaluate the rules against data."""

    def ensure_valid(self, data: Mapping[str, Any]) -> None:
        """
        Validate and raise on failure.

        Raises:
            ValidationError: carrying the result's errors
        """
        result = self.validate(data)
        if not result.is_valid:
            raise ValidationError(result.errors, aggregated=isinstance(self, AggregatingValidator))


class AggregatingValidator(Validator):
    """Evaluates every rule; no rule can hide another rule's message."""

    def validate(self, data: Mapping[str, Any]) -> ValidationResult:
        errors: list[str] = []
        for rule in self.rules:
            errors.extend(rule(data))
        return ValidationResult(tuple(errors))


class FailFastValidator(Validator):
    """Evaluates rules in order and stops at the first violation."""

    def validate(self, data: Mapping[str, Any]) -> ValidationResult:
        for rule in self.rules:
            messages = rule(data)
            if messages:
                return ValidationResult((messages[0],))
        return ValidationResult()
