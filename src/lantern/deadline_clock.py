from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol
import time

from lantern.invariants import never

_NS_PER_MS = 1_000_000


class DeadlineClock(Protocol):
    def now_ns(self) -> int:
        """Return the current monotonic mark in nanoseconds."""

    def advance(self, delta_ns: int) -> None:
        """Move logical time forward."""


@dataclass(frozen=True)
class MonotonicClock:
    """Default wall-clock implementation used when no logical clock is injected."""

    def now_ns(self) -> int:
        return time.monotonic_ns()

    def advance(self, delta_ns: int) -> None:
        # Wall-clock time passes on its own.
        return


@dataclass
class ManualClock:
    """Deterministic logical clock that only moves when advanced."""

    current_ns: int = 0

    def __post_init__(self) -> None:
        self.current_ns = int(self.current_ns)
        if self.current_ns < 0:
            never("invalid manual clock start", current_ns=self.current_ns)

    def now_ns(self) -> int:
        return self.current_ns

    def advance(self, delta_ns: int) -> None:
        delta = int(delta_ns)
        if delta < 0:
            never("manual clock cannot run backwards", delta_ns=delta_ns)
        self.current_ns += delta


@dataclass(frozen=True)
class Deadline:
    clock: DeadlineClock
    deadline_ns: int
    timeout_ms: int

    @classmethod
    def from_timeout_ms(cls, clock: DeadlineClock, timeout_ms: int) -> "Deadline":
        timeout_value = int(timeout_ms)
        if timeout_value < 0:
            never("invalid timeout ms", timeout_ms=timeout_ms)
        return cls(
            clock=clock,
            deadline_ns=clock.now_ns() + timeout_value * _NS_PER_MS,
            timeout_ms=timeout_value,
        )

    def remaining_ns(self) -> int:
        return max(0, self.deadline_ns - self.clock.now_ns())

    def expired(self) -> bool:
        return self.clock.now_ns() >= self.deadline_ns
