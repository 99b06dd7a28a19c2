from __future__ import annotations

import time
from typing import Optional


def now_ms() -> float:
    return time.perf_counter() * 1000.0


class Stopwatch:
    """
    Monotonic wall-clock bracket in milliseconds.

    Usable as `with Stopwatch() as sw: ...` or via start()/stop().
    """

    def __init__(self) -> None:
        self._start: Optional[float] = None
        self._stop: Optional[float] = None

    def start(self) -> "Stopwatch":
        self._start = now_ms()
        self._stop = None
        return self

    def stop(self) -> float:
        if self._start is None:
            raise RuntimeError("Stopwatch.stop() called before start()")
        self._stop = now_ms()
        return self.elapsed_ms

    @property
    def elapsed_ms(self) -> float:
        if self._start is None:
            return 0.0
        end = self._stop if self._stop is not None else now_ms()
        return end - self._start

    def __enter__(self) -> "Stopwatch":
        return self.start()

    def __exit__(self, exc_type, exc, tb) -> None:
        self.stop()
