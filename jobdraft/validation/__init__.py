"""
Validation engine

- rules: composable rules and the first-failure-wins Validator
- field_validators: fixed rule sets for job fields and whole-job validation
"""

from .outcome import (
    ValidationErrorKind,
    ValidationError,
    Valid,
    Invalid,
    ValidationOutcome,
    VALID,
)
from .rules import (
    RuleKind,
    Rule,
    Validator,
    validate_value,
)
from .field_validators import (
    FIELD_ORDER,
    FIELD_VALIDATORS,
    validate_field,
    validate_job,
    collect_field_errors,
)

__all__ = [
    "ValidationErrorKind",
    "ValidationError",
    "Valid",
    "Invalid",
    "ValidationOutcome",
    "VALID",

    "RuleKind",
    "Rule",
    "Validator",
    "validate_value",

    "FIELD_ORDER",
    "FIELD_VALIDATORS",
    "validate_field",
    "validate_job",
    "collect_field_errors",
]
