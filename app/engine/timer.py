# app/engine/timer.py

"""
Countdown for time-limited assessments.

The timer counts whole seconds from ``time_limit * 60`` down to zero. Reaching
zero calls ``on_expire`` exactly once and stops the countdown. There is no
pause, extend or restart.
"""

import asyncio
import logging
import threading
from typing import Callable, Optional

logger = logging.getLogger(__name__)


class CountdownTimer:
    def __init__(
        self,
        seconds: int,
        on_expire: Callable[[], None],
        interval: float = 1.0,
    ):
        if seconds <= 0:
            raise ValueError("Countdown must start from a positive number of seconds")

        self.remaining = seconds
        self.on_expire = on_expire
        self.interval = interval

        self._lock = threading.Lock()
        self._fired = False
        self._stopped = False
        self._task: Optional[asyncio.Task] = None

    @classmethod
    def for_minutes(cls, minutes: int, on_expire: Callable[[], None], **kwargs) -> "CountdownTimer":
        return cls(minutes * 60, on_expire, **kwargs)

    @property
    def expired(self) -> bool:
        return self.remaining == 0

    @property
    def running(self) -> bool:
        return not (self._stopped or self.expired)

    def _decrement(self) -> bool:
        """One second boundary. Returns True when the countdown just hit zero."""
        with self._lock:
            if self._stopped or self.remaining == 0:
                return False
            self.remaining -= 1
            return self.remaining == 0

    def _fire(self) -> None:
        with self._lock:
            if self._fired:
                return
            self._fired = True
        logger.info("Countdown reached zero, triggering auto-submit")
        self.on_expire()

    def tick(self) -> None:
        if self._decrement():
            self._fire()

    def stop(self) -> None:
        """Stop counting without firing (the attempt finished another way)."""
        with self._lock:
            self._stopped = True

    # ------------------------------------------------------------
    # Event-loop driver
    # ------------------------------------------------------------

    async def run(self) -> None:
        while self.running:
            await asyncio.sleep(self.interval)
            if self._decrement():
                # on_expire does blocking I/O (database write)
                await asyncio.to_thread(self._fire)

    def start(self, loop: Optional[asyncio.AbstractEventLoop] = None) -> asyncio.Task:
        loop = loop or asyncio.get_running_loop()
        self._task = loop.create_task(self.run())
        return self._task
