from __future__ import annotations

import pytest

from lantern.deadline_clock import Deadline, ManualClock, MonotonicClock
from lantern.exceptions import NeverThrown


def test_monotonic_clock_mark_increases() -> None:
    clock = MonotonicClock()
    first = clock.now_ns()
    second = clock.now_ns()
    assert second >= first
    clock.advance(1)


def test_manual_clock_moves_only_when_advanced() -> None:
    clock = ManualClock()
    assert clock.now_ns() == 0
    clock.advance(5)
    clock.advance(0)
    assert clock.now_ns() == 5


def test_manual_clock_rejects_invalid_inputs() -> None:
    with pytest.raises(NeverThrown):
        ManualClock(current_ns=-1)
    clock = ManualClock()
    with pytest.raises(NeverThrown):
        clock.advance(-1)


def test_deadline_expires_at_timeout() -> None:
    clock = ManualClock(current_ns=10)
    deadline = Deadline.from_timeout_ms(clock, 2)
    assert deadline.timeout_ms == 2
    assert deadline.remaining_ns() == 2_000_000
    assert not deadline.expired()
    clock.advance(1_999_999)
    assert not deadline.expired()
    clock.advance(1)
    assert deadline.expired()
    assert deadline.remaining_ns() == 0


def test_zero_timeout_is_already_expired() -> None:
    assert Deadline.from_timeout_ms(ManualClock(), 0).expired()


def test_deadline_rejects_negative_timeout() -> None:
    with pytest.raises(NeverThrown):
        Deadline.from_timeout_ms(ManualClock(), -1)
