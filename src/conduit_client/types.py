"""Shared typing helpers."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, TypeVar, cast

T = TypeVar("T")


@dataclass(frozen=True)
class ValidationResult(Generic[T]):
    ok: bool
    data: T | None = None
    error: Exception | None = None

    @classmethod
    def success(cls, data: T) -> "ValidationResult[T]":
        return cls(ok=True, data=data)

    @classmethod
    def failure(cls, error: Exception) -> "ValidationResult[T]":
        return cls(ok=False, error=error)

    def unwrap(self) -> T:
        if not self.ok:
            raise self.error or ValueError("Validation failed")
        return cast(T, self.data)


__all__ = ["ValidationResult"]
