"""Typed results for calls that must never raise.

External collaborators (engine probes, web grounding, speech) follow an
absorb-and-degrade policy: the caller always gets a value back, plus the
reason when that value is only a fallback.
"""

from dataclasses import dataclass
from typing import Generic, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class Result(Generic[T]):
    """Outcome of a best-effort call."""

    value: T
    ok: bool = True
    reason: str | None = None

    @classmethod
    def success(cls, value: T) -> "Result[T]":
        return cls(value=value)

    @classmethod
    def failure(cls, default: T, reason: str) -> "Result[T]":
        return cls(value=default, ok=False, reason=reason)

    def __bool__(self) -> bool:
        return self.ok
