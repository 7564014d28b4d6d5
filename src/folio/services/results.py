"""ServiceResult and ServiceError: the contract every service operation returns.

A failed operation never raises; it returns ``ok=False`` with a ``ServiceError``
whose ``kind`` tells callers how to react:

- TRANSPORT: the store failed or returned unusable data
- NOT_FOUND: no document with the requested id
- VALIDATION: malformed input or query options
"""

from enum import Enum
from typing import Any, Dict, Generic, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field

T = TypeVar("T")


class ErrorKind(str, Enum):
    TRANSPORT = "transport"
    NOT_FOUND = "not_found"
    VALIDATION = "validation"


class ServiceError(BaseModel):
    """Structured error payload within a ServiceResult."""

    model_config = ConfigDict(frozen=True)

    kind: ErrorKind
    message: str
    detail: Dict[str, Any] = Field(default_factory=dict)


class ServiceFailure(Exception):
    """Raised by ``ServiceResult.unwrap`` on a failed result."""

    def __init__(self, error: ServiceError):
        super().__init__(error.message)
        self.error = error

    @property
    def kind(self) -> ErrorKind:
        return self.error.kind


class ServiceResult(BaseModel, Generic[T]):
    """
    Return type for all service operations.

    Attributes:
        ok: Whether the operation succeeded
        op: Operation name (e.g. ``"projects.create"``)
        data: Payload on success
        error: Structured error when ``ok`` is False
    """

    model_config = ConfigDict(frozen=True)

    ok: bool
    op: str
    data: Optional[T] = None
    error: Optional[ServiceError] = None

    @classmethod
    def success(cls, op: str, data: Any) -> "ServiceResult":
        return cls(ok=True, op=op, data=data)

    @classmethod
    def failure(cls, op: str, kind: ErrorKind, message: str, **detail: Any) -> "ServiceResult":
        return cls(ok=False, op=op, error=ServiceError(kind=kind, message=message, detail=detail))

    @property
    def not_found(self) -> bool:
        return self.error is not None and self.error.kind == ErrorKind.NOT_FOUND

    def unwrap(self) -> T:
        """Return ``data`` or raise ``ServiceFailure``."""
        if not self.ok:
            raise ServiceFailure(self.error)
        return self.data
