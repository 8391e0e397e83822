from dataclasses import dataclass, field
from typing import Generic, List, Optional, TypeVar

from .errors import ErrorKind

T = TypeVar("T")


@dataclass
class Result(Generic[T]):
    """Outcome of a service call: either data, or a typed failure with messages."""

    succeeded: bool
    data: Optional[T] = None
    message: Optional[str] = None
    errors: List[str] = field(default_factory=list)
    error_kind: Optional[ErrorKind] = None

    @classmethod
    def success(cls, data: Optional[T] = None, message: Optional[str] = None) -> "Result[T]":
        return cls(succeeded=True, data=data, message=message)

    @classmethod
    def failure(cls, error: str, kind: ErrorKind = ErrorKind.UNKNOWN) -> "Result[T]":
        return cls(succeeded=False, errors=[error], error_kind=kind)

    @property
    def first_error(self) -> Optional[str]:
        return self.errors[0] if self.errors else None
