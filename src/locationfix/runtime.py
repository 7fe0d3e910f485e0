"""Queue-driven runtime that feeds collaborator callbacks to a coordinator.

Collaborators may call back from any thread; they only ``post`` events.
Events are applied to the coordinator one at a time, in arrival order,
on whichever thread pumps the queue.
"""

from __future__ import annotations

import logging
import threading
from queue import Empty, Queue
from time import monotonic
from typing import Callable, Optional

from locationfix.coordinator import LocationFixCoordinator
from locationfix.models import Event, ViewState

logger = logging.getLogger(__name__)


class ThreadingTimer:
    """Timer collaborator backed by ``threading.Timer``."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._timer: Optional[threading.Timer] = None

    @property
    def armed(self) -> bool:
        with self._lock:
            return self._timer is not None and self._timer.is_alive()

    def arm(self, duration_seconds: float, on_fire: Callable[[], None]) -> None:
        timer = threading.Timer(duration_seconds, on_fire)
        timer.daemon = True
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
            self._timer = timer
        timer.start()

    def disarm(self) -> None:
        with self._lock:
            timer, self._timer = self._timer, None
        if timer is not None:
            timer.cancel()


class FixRuntime:
    """Serialise events from collaborators into one coordinator."""

    def __init__(self, coordinator: LocationFixCoordinator):
        self._coordinator = coordinator
        self._queue: Queue[Event] = Queue()
        self._last_view = coordinator.current_view_state()
        coordinator.dispatch = self.post

    @property
    def coordinator(self) -> LocationFixCoordinator:
        return self._coordinator

    @property
    def view(self) -> ViewState:
        return self._last_view

    def post(self, event: Event) -> None:
        """Queue *event*; safe to call from any thread."""
        self._queue.put(event)

    def process_pending(self) -> int:
        """Apply every queued event on the calling thread; return the count."""
        processed = 0
        while True:
            try:
                event = self._queue.get_nowait()
            except Empty:
                return processed
            self._apply(event)
            processed += 1

    def run(
        self,
        stop_when: Callable[[ViewState], bool],
        timeout: Optional[float] = None,
        poll_interval: float = 0.1,
    ) -> ViewState:
        """
        Pump events until *stop_when* holds for the latest view state.

        Returns the view state that satisfied *stop_when*, or the last one
        seen when *timeout* seconds elapse first.
        """
        deadline = None if timeout is None else monotonic() + timeout
        while not stop_when(self._last_view):
            wait = poll_interval
            if deadline is not None:
                remaining = deadline - monotonic()
                if remaining <= 0:
                    logger.debug("Runtime timed out waiting for condition")
                    break
                wait = min(wait, remaining)
            try:
                event = self._queue.get(timeout=wait)
            except Empty:
                continue
            self._apply(event)
        return self._last_view

    def _apply(self, event: Event) -> None:
        logger.debug("Applying %s", type(event).__name__)
        self._last_view = self._coordinator.handle(event)
        self._queue.task_done()
