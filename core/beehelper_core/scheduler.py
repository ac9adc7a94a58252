from __future__ import annotations

import threading
import time
from typing import Callable, Optional, Protocol


class TimerHandle(Protocol):
    def cancel(self) -> None: ...


TimerFactory = Callable[[float, Callable[[], None]], TimerHandle]


def threading_timer(delay_seconds: float, callback: Callable[[], None]) -> TimerHandle:
    timer = threading.Timer(delay_seconds, callback)
    timer.daemon = True
    timer.start()
    return timer


class ManualTimer:
    def __init__(self, delay_seconds: float, callback: Callable[[], None]) -> None:
        self.delay_seconds = delay_seconds
        self.cancelled = False
        self.fired = False
        self._callback = callback

    def cancel(self) -> None:
        self.cancelled = True

    def fire(self) -> None:
        if self.cancelled or self.fired:
            return
        self.fired = True
        self._callback()


class ManualTimerFactory:
    def __init__(self) -> None:
        self.timers: list[ManualTimer] = []

    def __call__(self, delay_seconds: float, callback: Callable[[], None]) -> ManualTimer:
        timer = ManualTimer(delay_seconds, callback)
        self.timers.append(timer)
        return timer

    def pending(self) -> list[ManualTimer]:
        return [timer for timer in self.timers if not timer.cancelled and not timer.fired]

    def fire_pending(self) -> int:
        fired = 0
        for timer in self.pending():
            timer.fire()
            fired += 1
        return fired


class Debouncer:
    """Trailing debounce with a single pending slot.

    Each ``trigger`` cancels whatever is pending and schedules a fresh call.
    """

    def __init__(
        self,
        callback: Callable[[], None],
        *,
        delay_ms: int,
        timer_factory: TimerFactory = threading_timer,
    ) -> None:
        self._callback = callback
        self._delay_seconds = max(0, int(delay_ms)) / 1000.0
        self._timer_factory = timer_factory
        self._lock = threading.Lock()
        self._pending: Optional[TimerHandle] = None
        self._generation = 0

    @property
    def pending(self) -> bool:
        return self._pending is not None

    def trigger(self) -> None:
        with self._lock:
            if self._pending is not None:
                self._pending.cancel()
            self._generation += 1
            generation = self._generation
            self._pending = self._timer_factory(self._delay_seconds, lambda: self._fire(generation))

    def cancel(self) -> None:
        with self._lock:
            if self._pending is not None:
                self._pending.cancel()
            self._pending = None
            self._generation += 1

    def _fire(self, generation: int) -> None:
        with self._lock:
            if generation != self._generation:
                return
            self._pending = None
        self._callback()


class ChangeGate:
    """Admits a pass only when enough time and enough visible text changed."""

    def __init__(
        self,
        *,
        min_interval_ms: int,
        min_text_delta: int,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._min_interval = max(0, int(min_interval_ms)) / 1000.0
        self._min_text_delta = max(0, int(min_text_delta))
        self._clock = clock
        self._last_pass_at: Optional[float] = None
        self._last_text_length = 0

    def admit(self, text_length: int) -> bool:
        now = self._clock()
        if self._last_pass_at is not None and now - self._last_pass_at < self._min_interval:
            return False
        self._last_pass_at = now
        if abs(text_length - self._last_text_length) < self._min_text_delta:
            return False
        self._last_text_length = text_length
        return True

    def mark(self, text_length: int) -> None:
        self._last_pass_at = self._clock()
        self._last_text_length = text_length

    def reset(self) -> None:
        self._last_pass_at = None
        self._last_text_length = 0
