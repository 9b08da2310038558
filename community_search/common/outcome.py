"""
Explicit outcomes for calls to external collaborators.

Every call that leaves the process (content-store query, identity lookup,
suggestion source, analytics write) reports one of three states:

    ok        the call succeeded; ``value`` holds its result
    degraded  the call failed but the caller can continue; ``value`` holds
              a safe substitute (usually an empty list or ``None``)
    failed    the call failed and nothing usable came back

Usage:
    outcome = Outcome.ok(rows)
    outcome = Outcome.degraded([], "articles query timed out")
    if outcome.is_ok: ...
"""

from dataclasses import dataclass
from typing import Any, Generic, Optional, TypeVar

T = TypeVar("T")

OK = "ok"
DEGRADED = "degraded"
FAILED = "failed"


@dataclass(frozen=True)
class Outcome(Generic[T]):
    """Result of one external call."""
    status: str
    value: Optional[T] = None
    reason: Optional[str] = None
    source: Optional[str] = None

    @classmethod
    def ok(cls, value: T, source: Optional[str] = None) -> "Outcome[T]":
        return cls(OK, value, None, source)

    @classmethod
    def degraded(cls, value: T, reason: str, source: Optional[str] = None) -> "Outcome[T]":
        return cls(DEGRADED, value, reason, source)

    @classmethod
    def failed(cls, reason: str, source: Optional[str] = None) -> "Outcome[Any]":
        return cls(FAILED, None, reason, source)

    @property
    def is_ok(self) -> bool:
        return self.status == OK

    @property
    def is_degraded(self) -> bool:
        return self.status == DEGRADED

    @property
    def is_failed(self) -> bool:
        return self.status == FAILED

    def value_or(self, default: T) -> T:
        """Return the carried value, or ``default`` when there is none."""
        return self.value if self.value is not None else default
