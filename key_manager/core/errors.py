"""
Service-level error kinds and results.

Services report expected failures by returning a failed Result instead of
raising; the HTTP layer decides which status code each kind becomes.
"""
import enum
from dataclasses import dataclass
from typing import Generic, Optional, TypeVar

T = TypeVar("T")


class ErrorKind(str, enum.Enum):
    """Failure categories a service call can report."""
    VALIDATION_ERROR = "ValidationError"
    DUPLICATE_EMAIL = "DuplicateEmail"
    INVALID_CREDENTIALS = "InvalidCredentials"
    MISSING_CREDENTIAL = "MissingCredential"
    INVALID_CREDENTIAL = "InvalidCredential"
    STORAGE_ERROR = "StorageError"


@dataclass(frozen=True)
class ServiceError:
    kind: ErrorKind
    message: str


@dataclass(frozen=True)
class Result(Generic[T]):
    """Outcome of a service call: either a value or a ServiceError."""
    value: Optional[T] = None
    error: Optional[ServiceError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: T) -> "Result[T]":
        return cls(value=value)

    @classmethod
    def failure(cls, kind: ErrorKind, message: str) -> "Result[T]":
        return cls(error=ServiceError(kind=kind, message=message))


def missing_fields(**fields: Optional[str]) -> list:
    """Return names of fields that are absent or blank."""
    return [name for name, value in fields.items() if value is None or not str(value).strip()]
