from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, Optional, TypeVar

from .enums import RejectionReason
from .exceptions import DomainError

T = TypeVar("T")


@dataclass(frozen=True)
class Rejection:
    reason: RejectionReason
    message: str


@dataclass(frozen=True)
class Result(Generic[T]):
    """Outcome returned across the ledger boundary instead of raising."""

    value: Optional[T] = None
    rejection: Optional[Rejection] = None

    @property
    def ok(self) -> bool:
        return self.rejection is None

    @property
    def reason(self) -> Optional[RejectionReason]:
        return self.rejection.reason if self.rejection else None

    @classmethod
    def success(cls, value: Optional[T] = None) -> "Result[T]":
        return cls(value=value)

    @classmethod
    def failure(cls, reason: RejectionReason, message: str) -> "Result[T]":
        return cls(rejection=Rejection(reason=reason, message=message))

    @classmethod
    def from_error(cls, error: DomainError) -> "Result[T]":
        return cls.failure(error.reason, str(error))
