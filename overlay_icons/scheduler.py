from __future__ import annotations

from typing import Callable, Dict, Protocol

from PyQt6.QtCore import QTimer

from overlay_icons.logging_utils import get_logger

_LOGGER = get_logger("Scheduler")


class Scheduler(Protocol):
    """Host timer surface: fire ``callback`` once after ``delay_ms``."""

    def after(self, delay_ms: int, callback: Callable[[], None]) -> object: ...

    def cancel(self, handle: object) -> None: ...


def seconds_to_ms(seconds: float) -> int:
    return max(0, int(round(float(seconds) * 1000)))


class QtScheduler:
    """Single-shot QTimer scheduler; requires a running Qt event loop to fire."""

    def __init__(self) -> None:
        self._timers: Dict[int, QTimer] = {}
        self._next_handle = 0

    def after(self, delay_ms: int, callback: Callable[[], None]) -> object:
        self._next_handle += 1
        handle = self._next_handle
        timer = QTimer()
        timer.setSingleShot(True)

        def _fire() -> None:
            self._timers.pop(handle, None)
            try:
                callback()
            except Exception:
                _LOGGER.exception("Scheduled callback %r failed", callback)

        timer.timeout.connect(_fire)
        self._timers[handle] = timer
        timer.start(max(0, int(delay_ms)))
        return handle

    def cancel(self, handle: object) -> None:
        timer = self._timers.pop(handle, None)  # type: ignore[arg-type]
        if timer is None:
            return
        timer.stop()
        timer.deleteLater()

    @property
    def pending(self) -> int:
        return len(self._timers)
