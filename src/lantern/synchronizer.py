"""Quiescence synchronizer.

Callers suspend until the scheduler has no animation work left. The signals
are polled, never pushed: the synchronizer registers a single persistent
frame callback which, while anyone is waiting, queues a post-frame sample.
Each waiter gets the snapshot taken after the last post-frame callback of the
frame it woke up on, so work queued anywhere in that frame is seen.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable

from lantern.deadline_clock import Deadline
from lantern.scheduler import QuiescenceSignal, Scheduler

logger = logging.getLogger(__name__)


class QuiescenceSynchronizer:
    def __init__(self, scheduler: Scheduler) -> None:
        self._scheduler = scheduler
        self._tick_waiters: list[asyncio.Future[QuiescenceSignal]] = []
        self._sample_queued = False
        scheduler.add_persistent_frame_callback(self._on_frame)

    def signals(self) -> QuiescenceSignal:
        return self._scheduler.signals()

    def is_idle(self) -> bool:
        return self.signals().idle

    def next_tick(self) -> asyncio.Future[QuiescenceSignal]:
        """Future resolved with the signal snapshot at the end of the next frame."""
        future: asyncio.Future[QuiescenceSignal] = (
            asyncio.get_running_loop().create_future()
        )
        self._tick_waiters.append(future)
        return future

    def next_frame(self) -> asyncio.Future[QuiescenceSignal]:
        """Request a frame and return the future for its end."""
        future = self.next_tick()
        self._scheduler.schedule_frame()
        return future

    def _on_frame(self, timestamp_ns: int) -> None:
        if not self._tick_waiters or self._sample_queued:
            return
        # Queued from the persistent phase, so it runs after every post-frame
        # callback already registered for this frame.
        self._sample_queued = True
        self._scheduler.add_post_frame_callback(self._on_frame_end)

    def _on_frame_end(self, timestamp_ns: int) -> None:
        self._sample_queued = False
        snapshot = self._scheduler.signals()
        waiters, self._tick_waiters = self._tick_waiters, []
        for future in waiters:
            if not future.done():
                future.set_result(snapshot)

    async def _wait_for(
        self,
        settled: Callable[[QuiescenceSignal], bool],
        deadline: Deadline | None,
    ) -> bool:
        signal = self.signals()
        if not settled(signal):
            logger.debug("waiting for quiescence: %s", signal)
        # No await when already settled: the caller completes without yielding.
        while not settled(signal):
            if deadline is not None and deadline.expired():
                logger.debug("gave up waiting for quiescence: %s", signal)
                return False
            signal = await self.next_tick()
        return True

    async def wait_until_idle(self, deadline: Deadline | None = None) -> bool:
        """Wait for a frame ending with both signals clear.

        Returns False when `deadline` passes first.
        """
        return await self._wait_for(lambda signal: signal.idle, deadline)

    async def wait_until_no_transient_callbacks(
        self, deadline: Deadline | None = None
    ) -> bool:
        return await self._wait_for(
            lambda signal: not signal.transient_callbacks_pending, deadline
        )
