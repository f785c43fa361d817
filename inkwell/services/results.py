"""Result values returned by the user-action flows."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class FlowResult(Generic[T]):
    """Outcome of one user action.

    ``error`` holds the user-facing message; ``redirect_to`` names the view the
    caller should move to next, if any.
    """

    value: T | None = None
    error: str | None = None
    redirect_to: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: T | None = None, *, redirect_to: str | None = None) -> "FlowResult[T]":
        return cls(value=value, redirect_to=redirect_to)

    @classmethod
    def failure(cls, message: str, *, redirect_to: str | None = None) -> "FlowResult[T]":
        return cls(error=message, redirect_to=redirect_to)


__all__ = ["FlowResult"]
