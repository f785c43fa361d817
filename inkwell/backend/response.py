"""Result envelope returned by every managed-backend call."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class BackendError:
    """Error indicator attached to a failed backend call."""

    message: str
    code: str | None = None

    def __str__(self) -> str:
        return f"{self.code}: {self.message}" if self.code else self.message


@dataclass(frozen=True)
class BackendResponse(Generic[T]):
    """Either ``data`` or ``error``; callers must check ``error`` explicitly."""

    data: T | None = None
    error: BackendError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, data: T | None = None) -> "BackendResponse[T]":
        return cls(data=data)

    @classmethod
    def failure(cls, message: str, *, code: str | None = None) -> "BackendResponse[T]":
        return cls(error=BackendError(message=message, code=code))


__all__ = ["BackendError", "BackendResponse"]
