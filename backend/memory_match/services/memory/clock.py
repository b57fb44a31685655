import threading
from typing import Callable, Optional


class SessionClock:
    """Whole-second elapsed time counter driven by a scheduler.

    Every start/stop bumps ``_token``; a tick scheduled under an older token
    is dropped, so a restarted clock never inherits a previous tick chain.
    Ticks and state changes run under ``lock``, which the owning session
    shares so a tick cannot land after the session stopped the clock.
    """

    def __init__(self, scheduler, interval: float = 1.0, on_tick: Optional[Callable[[], None]] = None, lock=None):
        self.scheduler = scheduler
        self.interval = interval
        self.on_tick = on_tick
        self.elapsed_seconds = 0
        self.running = False
        self._token = 0
        self._lock = lock if lock is not None else threading.RLock()

    def start(self) -> None:
        with self._lock:
            if self.running:
                return
            self.running = True
            self._token += 1
            self._schedule(self._token)

    def stop(self) -> None:
        with self._lock:
            if not self.running:
                return
            self.running = False
            self._token += 1

    def reset(self) -> None:
        with self._lock:
            self.running = False
            self._token += 1
            self.elapsed_seconds = 0

    def _schedule(self, token: int) -> None:
        self.scheduler.call_later(self.interval, lambda: self._tick(token))

    def _tick(self, token: int) -> None:
        with self._lock:
            if token != self._token or not self.running:
                return
            self.elapsed_seconds += 1
            if self.on_tick:
                self.on_tick()
            # on_tick may have stopped the clock
            if token == self._token and self.running:
                self._schedule(token)
