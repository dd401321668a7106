"""
Deferred task scheduling for delayed captures.
"""

from __future__ import annotations

import logging
import threading
from typing import Callable, Optional, Protocol, Set


class ScheduledTask(Protocol):
    def cancel(self) -> None:
        ...


class Scheduler(Protocol):
    def schedule(self, delay_ms: int, task: Callable[[], None]) -> ScheduledTask:
        ...

    def shutdown(self, cancel_pending: bool = False, timeout: Optional[float] = None) -> None:
        ...


class TimerScheduler:
    """
    Run each task once on its own daemon timer thread.

    Pending timers are tracked so shutdown() can either wait for them or
    cancel them. Exceptions raised by a task are logged, not propagated.
    """

    def __init__(self, name: str = "capture-timer"):
        self._name = name
        self._lock = threading.Lock()
        self._pending: Set[threading.Timer] = set()
        self._closed = False

    @property
    def pending_count(self) -> int:
        with self._lock:
            return len(self._pending)

    def schedule(self, delay_ms: int, task: Callable[[], None]) -> threading.Timer:
        timer: threading.Timer

        def _run() -> None:
            try:
                task()
            except Exception as e:
                logging.error(f"Scheduled task failed: {e}")
            finally:
                with self._lock:
                    self._pending.discard(timer)

        timer = threading.Timer(delay_ms / 1000.0, _run)
        timer.daemon = True
        timer.name = f"{self._name}-{id(timer):x}"

        with self._lock:
            if self._closed:
                raise RuntimeError("Scheduler has been shut down")
            self._pending.add(timer)
        timer.start()
        return timer

    def shutdown(self, cancel_pending: bool = False, timeout: Optional[float] = None) -> None:
        """
        Stop accepting tasks.

        Args:
            cancel_pending: Cancel timers that have not fired yet instead of
                waiting for them.
            timeout: Maximum seconds to wait per pending timer.
        """
        with self._lock:
            self._closed = True
            pending = list(self._pending)

        if cancel_pending:
            for timer in pending:
                timer.cancel()
            with self._lock:
                self._pending.difference_update(pending)
            if pending:
                logging.info(f"Cancelled {len(pending)} pending capture task(s)")
            return

        for timer in pending:
            timer.join(timeout)
