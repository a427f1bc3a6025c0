"""Clock threads — session tick and pre-start countdown."""

from __future__ import annotations

import threading
from collections.abc import Callable


class TickerThread(threading.Thread):
    """Background thread that fires `on_tick` once per interval.

    The first tick happens one full interval after start. A stopped ticker
    cannot be restarted; create a new one when play resumes.

    With `lock`, each tick runs under it and is dropped if the ticker was
    stopped while waiting for it.
    """

    def __init__(self, on_tick: Callable[[], None], interval: float = 1.0,
                 lock=None):
        super().__init__(daemon=True)
        self.on_tick = on_tick
        self.interval = interval
        self.lock = lock
        self._stop_event = threading.Event()

    def stop(self):
        """Signal the ticker to stop.

        When called while holding `lock`, no tick fires after this returns.
        """
        self._stop_event.set()

    @property
    def stopped(self) -> bool:
        return self._stop_event.is_set()

    def _fire(self) -> bool:
        if self.lock is None:
            self.on_tick()
            return True
        with self.lock:
            if self._stop_event.is_set():
                return False
            self.on_tick()
        return True

    def run(self):
        while not self._stop_event.wait(self.interval):
            if not self._fire():
                return


class CountdownThread(threading.Thread):
    """Counts N..1 then 0 ("START") one step per interval, then calls on_done.

    on_step(n) is called for every value including 0. Cancelling skips
    on_done.
    """

    def __init__(self, on_step: Callable[[int], None],
                 on_done: Callable[[], None],
                 count: int = 3, interval: float = 1.0):
        super().__init__(daemon=True)
        self.on_step = on_step
        self.on_done = on_done
        self.count = max(0, count)
        self.interval = interval
        self._cancel_event = threading.Event()

    def cancel(self):
        self._cancel_event.set()

    @property
    def cancelled(self) -> bool:
        return self._cancel_event.is_set()

    def run(self):
        for n in range(self.count, -1, -1):
            if self._cancel_event.is_set():
                return
            self.on_step(n)
            if self._cancel_event.wait(self.interval):
                return
        self.on_done()


class SessionClock:
    """Keeps one TickerThread alive exactly while the session is playing."""

    def __init__(self, on_tick: Callable[[], None], interval: float = 1.0,
                 lock=None):
        self.on_tick = on_tick
        self.interval = interval
        self.lock = lock
        self._ticker: TickerThread | None = None

    @property
    def running(self) -> bool:
        return self._ticker is not None

    def sync(self, playing: bool):
        """Start or stop the ticker to match `playing`."""
        if playing and self._ticker is None:
            self._ticker = TickerThread(self.on_tick, self.interval, self.lock)
            self._ticker.start()
        elif not playing and self._ticker is not None:
            self._ticker.stop()
            self._ticker = None

    def stop(self):
        self.sync(False)
