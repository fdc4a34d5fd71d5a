"""
Stopwatch: the one piece of cross-screen mutable state.

Elapsed time is anchored on the instant `start()` was called and recomputed from
the clock on every read, so it does not depend on how often the page re-renders.
Views that want to redraw on change subscribe for as long as they are displayed.
"""

from __future__ import annotations

import logging
import time
from typing import Callable, List, Optional

logger = logging.getLogger(__name__)

Listener = Callable[["Stopwatch"], None]


class Stopwatch:
    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._accumulated = 0.0
        self._anchor: Optional[float] = None
        self._last_seconds = 0
        self._listeners: List[Listener] = []

    @property
    def is_active(self) -> bool:
        return self._anchor is not None

    @property
    def seconds(self) -> int:
        """Elapsed whole seconds."""
        total = self._accumulated
        if self._anchor is not None:
            total += max(0.0, self._clock() - self._anchor)
        return int(total)

    # ── Transitions ─────────────────────────────────────────────────────────

    def start(self) -> None:
        if self.is_active:
            return
        self._anchor = self._clock()
        logger.debug("Stopwatch started at %.3f", self._anchor)
        self._notify()

    def stop(self) -> int:
        """Freeze the elapsed value and return it."""
        if self._anchor is not None:
            self._accumulated += max(0.0, self._clock() - self._anchor)
            self._anchor = None
            self._notify()
        return self.seconds

    def reset(self) -> None:
        self._anchor = None
        self._accumulated = 0.0
        self._notify()

    def toggle(self) -> None:
        if self.is_active:
            self.stop()
        else:
            self.start()

    # ── Change broadcast ────────────────────────────────────────────────────

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a listener; returns the function that removes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    @property
    def listener_count(self) -> int:
        return len(self._listeners)

    def tick(self) -> bool:
        """Called by the owning view's refresh loop; notifies when the whole-second value moved."""
        if self.seconds == self._last_seconds:
            return False
        self._notify()
        return True

    def _notify(self) -> None:
        self._last_seconds = self.seconds
        for listener in list(self._listeners):
            listener(self)
