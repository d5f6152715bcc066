"""CPU-time stopwatch used around session setup, key agreement and cracking."""

from __future__ import annotations

import time


class UsageTimer:
    """Measure process CPU time between start() and stop().

    Can also be used as a context manager:

        with UsageTimer() as timer:
            session.run()
        print(timer.format())
    """

    def __init__(self) -> None:
        self._start: float | None = None
        self._stop: float | None = None

    def start(self) -> None:
        self._start = time.process_time()
        self._stop = None

    def stop(self) -> None:
        if self._start is None:
            raise RuntimeError("Timer was never started")
        self._stop = time.process_time()

    @property
    def elapsed(self) -> float:
        """Seconds between start and stop; running time if not stopped yet."""
        if self._start is None:
            return 0.0
        end = self._stop if self._stop is not None else time.process_time()
        return end - self._start

    def format(self) -> str:
        return f"Usage time: {self.elapsed:.5f}"

    def __enter__(self) -> UsageTimer:
        self.start()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.stop()
