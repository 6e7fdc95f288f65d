"""Frame scheduler seen from the extension.

The extension consumes only a polled two-boolean snapshot, frame requests and
an end-of-frame hook. `FrameScheduler` is a cooperative single-threaded
reference implementation: frames run when `pump()` is called, either by a
test or by the `run()` ticker on an asyncio loop.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Protocol

from lantern.deadline_clock import DeadlineClock, MonotonicClock

logger = logging.getLogger(__name__)

FrameCallback = Callable[[int], None]

_NS_PER_MS = 1_000_000


@dataclass(frozen=True)
class QuiescenceSignal:
    transient_callbacks_pending: bool
    frame_scheduled: bool

    @property
    def idle(self) -> bool:
        return not (self.transient_callbacks_pending or self.frame_scheduled)


class Scheduler(Protocol):
    clock: DeadlineClock

    def signals(self) -> QuiescenceSignal:
        ...

    def schedule_frame(self) -> None:
        ...

    def add_persistent_frame_callback(self, callback: FrameCallback) -> None:
        ...

    def add_post_frame_callback(self, callback: FrameCallback) -> None:
        ...


class FrameScheduler:
    """Tick-driven scheduler with transient, persistent and post-frame callbacks.

    A frame clears the scheduled flag, runs the transient callbacks registered
    before it started, then the persistent callbacks, then the one-shot
    post-frame callbacks. Post-frame callbacks registered during the
    post-frame phase wait for the next frame, so the last one queued sees the
    state the frame leaves behind.
    """

    def __init__(self, clock: DeadlineClock | None = None) -> None:
        self.clock: DeadlineClock = clock or MonotonicClock()
        self._transient: dict[int, FrameCallback] = {}
        self._next_callback_id = 0
        self._frame_scheduled = False
        self._in_frame = False
        self._persistent: list[FrameCallback] = []
        self._post_frame: list[FrameCallback] = []
        self.frame_count = 0

    @property
    def transient_callback_count(self) -> int:
        return len(self._transient)

    @property
    def has_scheduled_frame(self) -> bool:
        return self._frame_scheduled

    def signals(self) -> QuiescenceSignal:
        return QuiescenceSignal(
            transient_callbacks_pending=bool(self._transient),
            frame_scheduled=self._frame_scheduled,
        )

    def schedule_frame(self) -> None:
        self._frame_scheduled = True

    def schedule_frame_callback(self, callback: FrameCallback) -> int:
        self._next_callback_id += 1
        self._transient[self._next_callback_id] = callback
        self.schedule_frame()
        return self._next_callback_id

    def cancel_frame_callback(self, callback_id: int) -> None:
        self._transient.pop(callback_id, None)

    def add_persistent_frame_callback(self, callback: FrameCallback) -> None:
        self._persistent.append(callback)

    def add_post_frame_callback(self, callback: FrameCallback) -> None:
        self._post_frame.append(callback)

    def pump(self, duration_ms: int = 0) -> None:
        """Advance the clock by `duration_ms` and run one frame."""
        if self._in_frame:
            raise RuntimeError("pump() called re-entrantly from a frame callback")
        if duration_ms:
            self.clock.advance(int(duration_ms) * _NS_PER_MS)
        timestamp = self.clock.now_ns()
        self._in_frame = True
        try:
            self._frame_scheduled = False
            transient, self._transient = self._transient, {}
            for callback in transient.values():
                callback(timestamp)
            for callback in list(self._persistent):
                callback(timestamp)
            post_frame, self._post_frame = self._post_frame, []
            for callback in post_frame:
                callback(timestamp)
        finally:
            self._in_frame = False
            self.frame_count += 1

    async def run(self, interval_s: float) -> None:
        """Pump a frame every `interval_s` seconds while work is pending."""
        logger.debug("frame ticker started (interval=%.3fs)", interval_s)
        try:
            while True:
                await asyncio.sleep(interval_s)
                if not self.signals().idle:
                    self.pump()
        finally:
            logger.debug("frame ticker stopped after %d frames", self.frame_count)
