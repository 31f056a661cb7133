"""Per-icon event channels and fault-isolated subscriber bookkeeping."""
from __future__ import annotations

from typing import Any, Callable, Dict, List, Optional

from PyQt6.QtCore import QObject, pyqtSignal

from overlay_icons.errors import ConfigurationError
from overlay_icons.logging_utils import get_logger

_LOGGER = get_logger("Signals")

EVENT_NAMES = ("selected", "deselected", "toggled", "viewing_started", "viewing_ended", "notified")

_ALIASES = {
    "selected": "selected",
    "deselected": "deselected",
    "toggled": "toggled",
    "viewingstarted": "viewing_started",
    "viewing_started": "viewing_started",
    "viewingended": "viewing_ended",
    "viewing_ended": "viewing_ended",
    "notified": "notified",
}


def normalize_event_name(name: str) -> Optional[str]:
    """Map camelCase or snake_case channel names onto EVENT_NAMES; None if unknown."""
    if not isinstance(name, str):
        return None
    return _ALIASES.get(name.strip().lower()) or _ALIASES.get(name.strip())


class IconEvents(QObject):
    """The six channels every icon publishes."""

    selected = pyqtSignal()
    deselected = pyqtSignal()
    toggled = pyqtSignal(bool)
    viewing_started = pyqtSignal()
    viewing_ended = pyqtSignal()
    notified = pyqtSignal()

    def channel(self, name: str):
        canonical = normalize_event_name(name)
        if canonical is None:
            raise ConfigurationError(f"Unknown icon event {name!r}; expected one of {', '.join(EVENT_NAMES)}")
        return getattr(self, canonical)


class _Subscription:
    """Wraps a user callback so its failures are logged instead of raised."""

    def __init__(self, owner: Any, event_name: str, callback: Callable[..., Any]) -> None:
        self.owner = owner
        self.event_name = event_name
        self.callback = callback
        self.active = True

    def __call__(self, *args: Any) -> None:
        if not self.active:
            return
        try:
            self.callback(self.owner, *args)
        except Exception:
            _LOGGER.exception(
                "Callback %r for %s on %r raised; continuing", self.callback, self.event_name, self.owner
            )


class EventBindings:
    """Subscriptions registered through bind/unbind for one icon."""

    def __init__(self, owner: Any, events: IconEvents) -> None:
        self._owner = owner
        self._events = events
        self._subscriptions: Dict[str, List[_Subscription]] = {}

    def bind(self, name: str, callback: Callable[..., Any]) -> _Subscription:
        if not callable(callback):
            raise ConfigurationError(f"Callback for {name!r} must be callable, got {callback!r}")
        signal = self._events.channel(name)
        canonical = normalize_event_name(name)
        subscription = _Subscription(self._owner, canonical, callback)
        signal.connect(subscription)
        self._subscriptions.setdefault(canonical, []).append(subscription)
        return subscription

    def unbind(self, name: str) -> int:
        """Drop every subscription for ``name``; unknown names are ignored."""
        canonical = normalize_event_name(name)
        if canonical is None:
            _LOGGER.debug("Ignoring unbind for unknown event %r", name)
            return 0
        subscriptions = self._subscriptions.pop(canonical, [])
        signal = getattr(self._events, canonical)
        for subscription in subscriptions:
            subscription.active = False
            try:
                signal.disconnect(subscription)
            except TypeError:
                pass
        return len(subscriptions)

    def unbind_all(self) -> int:
        return sum(self.unbind(name) for name in list(self._subscriptions))

    def count(self, name: str) -> int:
        canonical = normalize_event_name(name)
        return len(self._subscriptions.get(canonical, [])) if canonical else 0
