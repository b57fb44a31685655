import heapq
import itertools
import logging
from typing import Callable, List, Tuple


class BackgroundScheduler:
    """Runs each callback on a Socket.IO background task after ``delay`` seconds."""

    def __init__(self, socketio, logger=None):
        self.socketio = socketio
        self.logger = logger or logging.getLogger(__name__)

    def call_later(self, delay: float, callback: Callable[[], None]) -> None:
        def _runner(wait: float):
            if wait > 0:
                self.socketio.sleep(wait)
            try:
                callback()
            except Exception:
                self.logger.exception(f"[scheduler-error] callback failed after {wait}s")

        self.socketio.start_background_task(_runner, delay)


class ManualScheduler:
    """Deterministic scheduler for tests: time only moves on ``advance``."""

    def __init__(self):
        self.now = 0.0
        self._queue: List[Tuple[float, int, Callable[[], None]]] = []
        self._seq = itertools.count()

    def call_later(self, delay: float, callback: Callable[[], None]) -> None:
        heapq.heappush(self._queue, (self.now + max(0.0, delay), next(self._seq), callback))

    def advance(self, seconds: float) -> int:
        """Fire every callback due within ``seconds``; returns how many ran."""
        target = self.now + seconds
        fired = 0
        while self._queue and self._queue[0][0] <= target:
            due, _, callback = heapq.heappop(self._queue)
            self.now = due
            callback()
            fired += 1
        self.now = target
        return fired

    @property
    def pending(self) -> int:
        return len(self._queue)
