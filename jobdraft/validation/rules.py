"""
Composable validation rules

A ``Rule`` is one variant of a closed set of rule kinds (``RuleKind``). Each
variant carries only its own parameters and is evaluated through the
``_CHECKS`` table. A ``Validator`` runs an ordered list of rules and stops
at the first failure, so a field always reports its most specific problem
("required" before "too short").

    title_validator = Validator([
        Rule.not_empty("Title is required"),
        Rule.min_length(3),
        Rule.max_length(100),
    ])
    title_validator.validate("Hi")   # Invalid(TOO_SHORT)
"""

import math
import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, Generic, Iterable, List, Optional, TypeVar

from .outcome import (
    VALID,
    ValidationErrorKind,
    ValidationOutcome,
    invalid,
)

T = TypeVar("T")

EMAIL_REGEX = re.compile(
    r"[a-zA-Z0-9+._%\-]{1,256}"
    r"@"
    r"[a-zA-Z0-9][a-zA-Z0-9\-]{0,64}"
    r"("
    r"\."
    r"[a-zA-Z0-9][a-zA-Z0-9\-]{0,25}"
    r")+"
)


class RuleKind(str, Enum):
    """Closed set of rule kinds"""
    NOT_EMPTY = "not_empty"
    MIN_LENGTH = "min_length"
    MAX_LENGTH = "max_length"
    PATTERN = "pattern"
    EMAIL = "email"
    MINIMUM = "minimum"
    MAXIMUM = "maximum"
    RANGE = "range"
    CUSTOM = "custom"


_ERROR_KINDS: Dict[RuleKind, ValidationErrorKind] = {
    RuleKind.NOT_EMPTY: ValidationErrorKind.REQUIRED,
    RuleKind.MIN_LENGTH: ValidationErrorKind.TOO_SHORT,
    RuleKind.MAX_LENGTH: ValidationErrorKind.TOO_LONG,
    RuleKind.PATTERN: ValidationErrorKind.PATTERN_MISMATCH,
    RuleKind.EMAIL: ValidationErrorKind.PATTERN_MISMATCH,
    RuleKind.MINIMUM: ValidationErrorKind.OUT_OF_RANGE,
    RuleKind.MAXIMUM: ValidationErrorKind.OUT_OF_RANGE,
    RuleKind.RANGE: ValidationErrorKind.OUT_OF_RANGE,
    RuleKind.CUSTOM: ValidationErrorKind.INVALID_VALUE,
}

_NUMERIC_KINDS = {RuleKind.MINIMUM, RuleKind.MAXIMUM, RuleKind.RANGE}

NOT_A_NUMBER_MESSAGE = "Value must be a number"


@dataclass(frozen=True)
class Rule:
    """
    One validation rule.

    Build instances through the classmethod constructors rather than by
    hand; they fill in exactly the parameters the kind needs.
    """
    kind: RuleKind
    length: Optional[int] = None
    pattern: Optional[str] = None
    minimum: Optional[float] = None
    maximum: Optional[float] = None
    exclusive: bool = False
    predicate: Optional[Callable[[Any], bool]] = None
    error_kind: Optional[ValidationErrorKind] = None
    message: Optional[str] = None

    # === constructors ===

    @classmethod
    def not_empty(cls, message: Optional[str] = None) -> "Rule":
        return cls(RuleKind.NOT_EMPTY, message=message)

    @classmethod
    def min_length(cls, length: int, message: Optional[str] = None) -> "Rule":
        return cls(RuleKind.MIN_LENGTH, length=length, message=message)

    @classmethod
    def max_length(cls, length: int, message: Optional[str] = None) -> "Rule":
        return cls(RuleKind.MAX_LENGTH, length=length, message=message)

    @classmethod
    def matches(cls, pattern: str, message: Optional[str] = None) -> "Rule":
        re.compile(pattern)
        return cls(RuleKind.PATTERN, pattern=pattern, message=message)

    @classmethod
    def email(cls, message: Optional[str] = None) -> "Rule":
        return cls(RuleKind.EMAIL, message=message)

    @classmethod
    def at_least(cls, minimum: float, message: Optional[str] = None, exclusive: bool = False) -> "Rule":
        return cls(RuleKind.MINIMUM, minimum=minimum, exclusive=exclusive, message=message)

    @classmethod
    def at_most(cls, maximum: float, message: Optional[str] = None) -> "Rule":
        return cls(RuleKind.MAXIMUM, maximum=maximum, message=message)

    @classmethod
    def between(cls, minimum: float, maximum: float, message: Optional[str] = None) -> "Rule":
        if minimum > maximum:
            raise ValueError(f"Empty range: {minimum} > {maximum}")
        return cls(RuleKind.RANGE, minimum=minimum, maximum=maximum, message=message)

    @classmethod
    def custom(
        cls,
        predicate: Callable[[Any], bool],
        message: str,
        error_kind: ValidationErrorKind = ValidationErrorKind.INVALID_VALUE,
    ) -> "Rule":
        return cls(RuleKind.CUSTOM, predicate=predicate, message=message, error_kind=error_kind)

    # === evaluation ===

    @property
    def error_message(self) -> str:
        if self.message:
            return self.message
        return _DEFAULT_MESSAGES[self.kind](self)

    def validate(self, value: Any) -> ValidationOutcome:
        """Evaluate this rule against ``value``. Never raises."""
        if self.kind in _NUMERIC_KINDS and _as_number(value) is None:
            return invalid(NOT_A_NUMBER_MESSAGE, ValidationErrorKind.INVALID_VALUE)

        if _CHECKS[self.kind](self, value):
            return VALID
        return invalid(self.error_message, self.error_kind or _ERROR_KINDS[self.kind])


def _as_text(value: Any) -> str:
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)


def _as_number(value: Any) -> Optional[float]:
    if isinstance(value, bool) or value is None:
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return None if math.isnan(number) else number


def _check_not_empty(rule: Rule, value: Any) -> bool:
    if value is None:
        return False
    if isinstance(value, str):
        return value.strip() != ""
    if isinstance(value, (list, tuple, set, dict)):
        return len(value) > 0
    return True


def _check_minimum(rule: Rule, value: Any) -> bool:
    number = _as_number(value)
    return number > rule.minimum if rule.exclusive else number >= rule.minimum


def _check_custom(rule: Rule, value: Any) -> bool:
    try:
        return bool(rule.predicate(value))
    except (TypeError, ValueError, AttributeError):
        return False


_CHECKS: Dict[RuleKind, Callable[[Rule, Any], bool]] = {
    RuleKind.NOT_EMPTY: _check_not_empty,
    RuleKind.MIN_LENGTH: lambda rule, value: len(_as_text(value)) >= rule.length,
    RuleKind.MAX_LENGTH: lambda rule, value: len(_as_text(value)) <= rule.length,
    RuleKind.PATTERN: lambda rule, value: re.fullmatch(rule.pattern, _as_text(value)) is not None,
    RuleKind.EMAIL: lambda rule, value: EMAIL_REGEX.fullmatch(_as_text(value)) is not None,
    RuleKind.MINIMUM: _check_minimum,
    RuleKind.MAXIMUM: lambda rule, value: _as_number(value) <= rule.maximum,
    RuleKind.RANGE: lambda rule, value: rule.minimum <= _as_number(value) <= rule.maximum,
    RuleKind.CUSTOM: _check_custom,
}

_DEFAULT_MESSAGES: Dict[RuleKind, Callable[[Rule], str]] = {
    RuleKind.NOT_EMPTY: lambda rule: "Field cannot be empty",
    RuleKind.MIN_LENGTH: lambda rule: f"Minimum length is {rule.length} characters",
    RuleKind.MAX_LENGTH: lambda rule: f"Maximum length is {rule.length} characters",
    RuleKind.PATTERN: lambda rule: "Invalid format",
    RuleKind.EMAIL: lambda rule: "Invalid email address",
    RuleKind.MINIMUM: lambda rule: (
        f"Value must be greater than {_fmt(rule.minimum)}" if rule.exclusive
        else f"Value must be at least {_fmt(rule.minimum)}"
    ),
    RuleKind.MAXIMUM: lambda rule: f"Value must be at most {_fmt(rule.maximum)}",
    RuleKind.RANGE: lambda rule: f"Value must be between {_fmt(rule.minimum)} and {_fmt(rule.maximum)}",
    RuleKind.CUSTOM: lambda rule: "Invalid value",
}


def _fmt(number: float) -> str:
    return str(int(number)) if float(number).is_integer() else str(number)


class Validator(Generic[T]):
    """
    Ordered list of rules, evaluated first-failure-wins.
    """

    def __init__(self, rules: Optional[Iterable[Rule]] = None):
        self._rules: List[Rule] = list(rules or [])

    def add_rule(self, rule: Rule) -> "Validator[T]":
        self._rules.append(rule)
        return self

    @property
    def rules(self) -> tuple:
        return tuple(self._rules)

    def validate(self, value: T) -> ValidationOutcome:
        for rule in self._rules:
            outcome = rule.validate(value)
            if not outcome.is_valid:
                return outcome
        return VALID


def validate_value(value: Any, *rules: Rule) -> ValidationOutcome:
    """Run ``rules`` against ``value`` with first-failure-wins semantics"""
    return Validator(rules).validate(value)
