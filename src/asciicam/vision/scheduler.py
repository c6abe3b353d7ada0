"""Display-tick schedulers for the render loop."""

from __future__ import annotations

from collections.abc import Callable
import itertools
import threading
import time
from typing import Any, Protocol

from loguru import logger


class DisplayScheduler(Protocol):
    def schedule_next_tick(self, callback: Callable[[], None]) -> Any: ...

    def cancel(self, handle: Any) -> None: ...


class FrameScheduler:
    """Runs scheduled callbacks once per display refresh on the calling thread.

    Callbacks scheduled while a refresh is being processed run on the next
    refresh, never the current one. ``run_pending`` steps a single refresh and
    is what tests drive; ``run`` paces refreshes at ``refresh_hz``.
    """

    def __init__(
        self,
        refresh_hz: float = 60.0,
        clock: Callable[[], float] = time.perf_counter,
    ) -> None:
        if refresh_hz <= 0:
            raise ValueError("refresh_hz must be positive")
        self._interval = 1.0 / refresh_hz
        self._clock = clock
        self._ids = itertools.count(1)
        self._pending: dict[int, Callable[[], None]] = {}

    @property
    def pending(self) -> int:
        return len(self._pending)

    def schedule_next_tick(self, callback: Callable[[], None]) -> int:
        handle = next(self._ids)
        self._pending[handle] = callback
        return handle

    def cancel(self, handle: int) -> None:
        self._pending.pop(handle, None)

    def run_pending(self) -> int:
        """Run every callback that was pending when called. Returns how many ran."""
        due = list(self._pending)
        ran = 0
        for handle in due:
            # An earlier callback in this batch may have cancelled this one
            callback = self._pending.pop(handle, None)
            if callback is None:
                continue
            callback()
            ran += 1
        return ran

    def run(self, shutdown_event: threading.Event | None = None) -> None:
        """Process refreshes until nothing is scheduled or ``shutdown_event`` is set."""
        shutdown_event = shutdown_event or threading.Event()
        while self._pending and not shutdown_event.is_set():
            refresh_started = self._clock()
            self.run_pending()

            elapsed = self._clock() - refresh_started
            sleep_time = max(0.0, self._interval - elapsed)
            if sleep_time:
                shutdown_event.wait(timeout=sleep_time)
        logger.debug("FrameScheduler: run finished with {} pending callbacks.", len(self._pending))


class TextualScheduler:
    """Schedules ticks on a Textual app or widget timer, on the app's event loop."""

    def __init__(self, owner: Any, refresh_hz: float = 60.0) -> None:
        if refresh_hz <= 0:
            raise ValueError("refresh_hz must be positive")
        self._owner = owner
        self._interval = 1.0 / refresh_hz

    def schedule_next_tick(self, callback: Callable[[], None]) -> Any:
        return self._owner.set_timer(self._interval, callback, name="render-tick")

    def cancel(self, handle: Any) -> None:
        handle.stop()
