"""
Validation outcome types

- ValidationErrorKind: what went wrong
- ValidationError: a single field-scoped problem
- Valid / Invalid: the tagged outcome every rule and validator returns
"""

from enum import Enum
from typing import List, Union, Dict

from pydantic import BaseModel, Field


class ValidationErrorKind(str, Enum):
    """Validation error kind"""
    REQUIRED = "REQUIRED"
    TOO_SHORT = "TOO_SHORT"
    TOO_LONG = "TOO_LONG"
    PATTERN_MISMATCH = "PATTERN_MISMATCH"
    INVALID_VALUE = "INVALID_VALUE"
    OUT_OF_RANGE = "OUT_OF_RANGE"


class ValidationError(BaseModel):
    """A single field-scoped validation problem"""
    field: str = Field("", description="Field the error belongs to")
    message: str = Field(..., description="Human-readable message")
    kind: ValidationErrorKind = Field(..., description="Error kind")

    model_config = {"frozen": True}

    def for_field(self, field: str) -> "ValidationError":
        """Return a copy scoped to ``field``"""
        return self.model_copy(update={"field": field})


class Valid(BaseModel):
    """Successful outcome"""

    model_config = {"frozen": True}

    @property
    def is_valid(self) -> bool:
        return True

    @property
    def errors(self) -> List[ValidationError]:
        return []


class Invalid(BaseModel):
    """Failed outcome carrying an ordered list of errors"""
    errors: List[ValidationError] = Field(..., min_length=1)

    model_config = {"frozen": True}

    @property
    def is_valid(self) -> bool:
        return False

    @property
    def first_error(self) -> ValidationError:
        return self.errors[0]

    def as_field_map(self) -> Dict[str, ValidationError]:
        """field -> error map, in the order the errors were reported"""
        return {error.field: error for error in self.errors}


ValidationOutcome = Union[Valid, Invalid]

VALID = Valid()


def invalid(message: str, kind: ValidationErrorKind, field: str = "") -> Invalid:
    """Shorthand for a single-error Invalid outcome"""
    return Invalid(errors=[ValidationError(field=field, message=message, kind=kind)])
