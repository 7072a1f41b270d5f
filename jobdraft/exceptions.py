"""
Error taxonomy for the draft & publication core

Two kinds of error objects live here:

- ``StoreError``: the error *value* a DraftStore/JobStore returns inside a
  failed ``Result``. Collaborators never raise it.
- ``BaseJobDraftError`` and its subclasses: the typed errors the core hands
  back to its host (``JobValidationError``, ``NotFoundError``,
  ``StoreFailure``, ``UnexpectedError``).
"""

from typing import Optional, Dict, Any, List, TYPE_CHECKING
from enum import Enum
from datetime import datetime

if TYPE_CHECKING:
    from .validation.outcome import ValidationError


class ErrorSeverity(str, Enum):
    """Error severity level"""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class ErrorCategory(str, Enum):
    """Error category"""
    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    STORE = "store"
    UNEXPECTED = "unexpected"


class StoreError:
    """
    Failure reported by a store collaborator.

    ``code`` is a short machine-readable tag; ``"not_found"`` is the only
    value the core interprets, everything else is treated as an I/O failure.
    """

    NOT_FOUND = "not_found"
    IO = "io"
    CAPACITY = "capacity"

    def __init__(self, message: str, code: str = IO, cause: Optional[BaseException] = None):
        self.message = message
        self.code = code
        self.cause = cause

    @property
    def is_not_found(self) -> bool:
        return self.code == self.NOT_FOUND

    def __repr__(self) -> str:
        return f"StoreError(code={self.code!r}, message={self.message!r})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, StoreError):
            return NotImplemented
        return (self.message, self.code, self.cause) == (other.message, other.code, other.cause)


class BaseJobDraftError(Exception):
    """
    Base class of every error the core surfaces.

    Carries an error code, severity, category and free-form details so that
    a host can render or log it without knowing the concrete subclass.
    """

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        severity: ErrorSeverity = ErrorSeverity.MEDIUM,
        category: ErrorCategory = ErrorCategory.UNEXPECTED,
        details: Optional[Dict[str, Any]] = None,
        suggestions: Optional[List[str]] = None
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code or self._generate_error_code()
        self.severity = severity
        self.category = category
        self.details = details or {}
        self.suggestions = suggestions or []

    def _generate_error_code(self) -> str:
        class_name = self.__class__.__name__
        return f"{class_name.upper()}_001"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "error_code": self.error_code,
            "severity": self.severity.value,
            "category": self.category.value,
            "details": self.details,
            "suggestions": self.suggestions
        }

    def __str__(self) -> str:
        return f"[{self.error_code}] {self.category.value}: {self.message}"


class JobValidationError(BaseJobDraftError):
    """
    User-fixable, field-scoped validation failure.

    ``errors`` holds one ValidationError per offending field, in field
    declaration order.
    """

    def __init__(
        self,
        message: str,
        errors: Optional[List["ValidationError"]] = None,
        **kwargs
    ):
        super().__init__(
            message,
            category=ErrorCategory.VALIDATION,
            severity=ErrorSeverity.LOW,
            **kwargs
        )
        self.errors = list(errors or [])
        self.details["field_errors"] = {error.field: error.message for error in self.errors}

    @property
    def field_errors(self) -> Dict[str, "ValidationError"]:
        return {error.field: error for error in self.errors}


class NotFoundError(BaseJobDraftError):
    """A referenced draft or job does not exist"""

    def __init__(self, resource: str, resource_id: str, **kwargs):
        super().__init__(
            f"{resource} '{resource_id}' was not found",
            category=ErrorCategory.NOT_FOUND,
            **kwargs
        )
        self.resource = resource
        self.resource_id = resource_id
        self.details.update({
            "resource": resource,
            "resource_id": resource_id
        })


class StoreFailure(BaseJobDraftError):
    """
    A collaborator store reported a failure during a primary write or read.
    """

    def __init__(
        self,
        message: str,
        cause: StoreError,
        operation: Optional[str] = None,
        store: Optional[str] = None,
        **kwargs
    ):
        super().__init__(
            message,
            category=ErrorCategory.STORE,
            severity=ErrorSeverity.HIGH,
            **kwargs
        )
        self.cause = cause
        self.operation = operation
        self.store = store

        self.details.update({
            "operation": operation,
            "store": store,
            "store_error": cause.message,
            "store_error_code": cause.code
        })
        self.suggestions.append("Retry the operation; the draft has been left intact")


class UnexpectedError(BaseJobDraftError):
    """Anything uncategorized. The original exception is kept as ``cause``."""

    def __init__(self, message: str, cause: Optional[BaseException] = None, **kwargs):
        super().__init__(
            message,
            category=ErrorCategory.UNEXPECTED,
            severity=ErrorSeverity.CRITICAL,
            **kwargs
        )
        self.cause = cause
        self.__cause__ = cause
        if cause is not None:
            self.details["cause_type"] = type(cause).__name__
            self.details["cause"] = str(cause)


def create_error_response(error: BaseJobDraftError) -> Dict[str, Any]:
    """
    Build the standard error payload for a host.

    Args:
        error: Any BaseJobDraftError instance

    Returns:
        Standardized error dict
    """
    return {
        "success": False,
        "error": error.to_dict(),
        "timestamp": str(datetime.now()),
        "suggestions": error.suggestions
    }


def handle_pydantic_validation_error(pydantic_error) -> JobValidationError:
    """
    Convert a pydantic ValidationError (raised while building a model from
    raw host input) into a JobValidationError.
    """
    from .validation.outcome import ValidationError, ValidationErrorKind

    errors = []
    for error in pydantic_error.errors():
        field = ".".join(str(loc) for loc in error["loc"])
        errors.append(ValidationError(
            field=field,
            message=error["msg"],
            kind=ValidationErrorKind.INVALID_VALUE
        ))

    return JobValidationError(
        "Input data failed validation",
        errors=errors
    )
