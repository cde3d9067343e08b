"""Background sweep that evicts idle keys from a velocity store."""

from __future__ import annotations

import logging
import threading
import time
from typing import Callable

from velocitygate.lib.sliding_window import VelocityWindowStore

logger = logging.getLogger(__name__)

SWEEP_INTERVAL_SECONDS = 5.0


class Reaper:
    """Periodically calls :meth:`VelocityWindowStore.evict_idle`.

    Construction does not start anything; call :meth:`start` and
    :meth:`stop` to control the background thread. A sweep only runs when
    more than ``interval`` seconds have passed since the last one, so an
    early wake-up never sweeps twice.
    """

    def __init__(
        self,
        store: VelocityWindowStore,
        interval: float = SWEEP_INTERVAL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if interval <= 0:
            raise ValueError("interval must be positive")
        self.store = store
        self.interval = interval
        self._clock = clock
        self._last_sweep = clock()
        self._thread: threading.Thread | None = None
        self._stop_event = threading.Event()
        self._state_lock = threading.Lock()
        self._sweep_lock = threading.Lock()

    @property
    def running(self) -> bool:
        with self._state_lock:
            return bool(self._thread and self._thread.is_alive())

    def tick(self, now: float | None = None) -> bool:
        """Sweep the store if the interval has elapsed. Returns True if it swept."""
        with self._sweep_lock:
            if now is None:
                now = self._clock()
            if now - self._last_sweep <= self.interval:
                return False
            removed = self.store.evict_idle(now)
            self._last_sweep = now
        if removed:
            logger.debug("Evicted %d idle velocity keys", removed)
        return True

    def start(self) -> bool:
        with self._state_lock:
            if self._thread and self._thread.is_alive():
                return False
            stop_event = threading.Event()
            thread = threading.Thread(
                target=self._run_loop,
                args=(stop_event,),
                name="velocitygate-reaper",
                daemon=True,
            )
            thread.start()
            self._thread = thread
            self._stop_event = stop_event
        logger.info("Velocity reaper started (interval=%.1fs)", self.interval)
        return True

    def stop(self, *, timeout: float = 2.0) -> bool:
        """Signal the thread to exit and wait up to *timeout* seconds.

        Returns False if the reaper was not running or the thread is still
        finishing a sweep; in the latter case :meth:`start` keeps refusing
        until the thread has exited.
        """
        with self._state_lock:
            thread = self._thread
            if not thread:
                return False
            self._stop_event.set()
        thread.join(timeout=max(0.1, timeout))
        if thread.is_alive():
            logger.warning("Velocity reaper did not stop within %.1fs", timeout)
            return False
        with self._state_lock:
            if self._thread is thread:
                self._thread = None
        logger.info("Velocity reaper stopped")
        return True

    def _run_loop(self, stop_event: threading.Event) -> None:
        while not stop_event.wait(self.interval):
            try:
                self.tick()
            except Exception:
                logger.exception("Velocity reaper sweep failed")
