"""
Tagged success/failure result

Stores return ``Result[T, StoreError]``; the coordinator returns
``Result[T, BaseJobDraftError]``. Neither raises for expected failures.
"""

from dataclasses import dataclass
from typing import Generic, TypeVar, Union

T = TypeVar("T")
E = TypeVar("E")


@dataclass(frozen=True)
class Success(Generic[T]):
    value: T

    @property
    def is_success(self) -> bool:
        return True

    @property
    def error(self) -> None:
        return None

    def unwrap(self) -> T:
        return self.value


@dataclass(frozen=True)
class Failure(Generic[E]):
    error: E

    @property
    def is_success(self) -> bool:
        return False

    def unwrap(self):
        """Raise the carried error if it is an exception, else a RuntimeError"""
        if isinstance(self.error, BaseException):
            raise self.error
        raise RuntimeError(f"unwrap() called on a failed result: {self.error!r}")


Result = Union[Success[T], Failure[E]]
