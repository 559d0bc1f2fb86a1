"""Rate limiting and cancellation primitives for optimization runs."""

from __future__ import annotations

import threading

DEFAULT_THROTTLE_INTERVAL = 0.2


class Throttle:
    """Allow at most one emission per ``interval`` seconds.

    The first call always passes. Create a new instance for every run.
    """

    def __init__(self, interval: float = DEFAULT_THROTTLE_INTERVAL) -> None:
        if interval < 0:
            raise ValueError("Throttle interval cannot be negative")
        self.interval = float(interval)
        self._last_emitted: float | None = None

    @property
    def last_emitted(self) -> float | None:
        return self._last_emitted

    def should_emit(self, now: float) -> bool:
        if self._last_emitted is not None and now - self._last_emitted < self.interval:
            return False
        self._last_emitted = now
        return True


class CancellationToken:
    """Cooperative stop flag checked by the optimizer between climbs."""

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()
