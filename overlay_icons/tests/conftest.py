from __future__ import annotations

from typing import Callable, List, Tuple

import pytest

from overlay_icons.registry import IconContext, set_default_context


class ManualScheduler:
    """Scheduler stand-in whose timers only fire when the test advances the clock."""

    def __init__(self) -> None:
        self.now_ms = 0
        self._next = 0
        self.scheduled: List[Tuple[int, int, Callable[[], None]]] = []
        self.cancelled: List[int] = []

    def after(self, delay_ms: int, callback: Callable[[], None]) -> int:
        self._next += 1
        self.scheduled.append((self.now_ms + delay_ms, self._next, callback))
        return self._next

    def cancel(self, handle: object) -> None:
        self.cancelled.append(handle)  # type: ignore[arg-type]
        self.scheduled = [entry for entry in self.scheduled if entry[1] != handle]

    @property
    def pending(self) -> int:
        return len(self.scheduled)

    def advance(self, ms: int) -> None:
        self.now_ms += ms
        while True:
            due = sorted(entry for entry in self.scheduled if entry[0] <= self.now_ms)
            if not due:
                return
            entry = due[0]
            self.scheduled.remove(entry)
            entry[2]()


class EventRecorder:
    """Binds to every channel of an icon and records (label, *args) tuples."""

    def __init__(self, log: List[tuple] | None = None) -> None:
        self.log: List[tuple] = log if log is not None else []

    def attach(self, icon, label: str = "") -> "EventRecorder":
        prefix = f"{label}." if label else ""
        for name in ("selected", "deselected", "toggled", "viewingStarted", "viewingEnded", "notified"):
            icon.bind_event(name, lambda _icon, *args, _name=name: self.log.append((prefix + _name, *args)))
        return self

    def names(self) -> List[str]:
        return [entry[0] for entry in self.log]


@pytest.fixture
def scheduler() -> ManualScheduler:
    return ManualScheduler()


@pytest.fixture(autouse=True)
def context(scheduler: ManualScheduler):
    ctx = IconContext(scheduler=scheduler)
    previous = set_default_context(ctx)
    yield ctx
    ctx.destroy_all()
    set_default_context(previous)


@pytest.fixture
def recorder() -> EventRecorder:
    return EventRecorder()
