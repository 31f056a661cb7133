from __future__ import annotations

from typing import TYPE_CHECKING, Any, Callable, List, Optional

from PyQt6.QtCore import QMetaObject, QObject

from overlay_icons.errors import ConfigurationError
from overlay_icons.logging_utils import get_logger
from overlay_icons.state import IconState

if TYPE_CHECKING:
    from overlay_icons.icon import Icon

_LOGGER = get_logger("Notices")


class _ClearSubscription:
    """One clear-signal connection.

    Qt signals are released through the ``QMetaObject.Connection`` handle, never
    through the bound signal, so a sender deleted in the meantime is not touched.
    """

    def __init__(self, on_fire: Callable[[], None]) -> None:
        self.active = True
        self._on_fire = on_fire
        self._connection: Optional[QMetaObject.Connection] = None
        self._signal: Any = None

    def attach(self, signal: Any) -> None:
        result = signal.connect(self)
        if isinstance(result, QMetaObject.Connection):
            self._connection = result
        else:
            self._signal = signal

    def __call__(self, *_args: Any) -> None:
        if not self.active:
            return
        try:
            self._on_fire()
        except Exception:
            _LOGGER.exception("Clearing notices after clear signal failed")

    def cancel(self) -> None:
        self.active = False
        connection, self._connection = self._connection, None
        signal, self._signal = self._signal, None
        try:
            if connection is not None:
                QObject.disconnect(connection)
            elif signal is not None and callable(getattr(signal, "disconnect", None)):
                signal.disconnect(self)
        except (TypeError, RuntimeError) as exc:
            _LOGGER.debug("Clear signal already disconnected: %s", exc)


class NoticeCounter:
    """Pending notice count plus the clear signals waiting to reset it."""

    def __init__(self) -> None:
        self.count = 0
        self._subscriptions: List[_ClearSubscription] = []

    @property
    def pending_signals(self) -> int:
        return len(self._subscriptions)

    def add(self, clear_signal: Any, on_clear: Callable[[], None]) -> int:
        self.count += 1
        subscription = _ClearSubscription(on_clear)
        subscription.attach(clear_signal)
        self._subscriptions.append(subscription)
        return self.count

    def clear(self) -> bool:
        changed = self.count != 0
        self.count = 0
        subscriptions, self._subscriptions = self._subscriptions, []
        for subscription in subscriptions:
            subscription.cancel()
        return changed


def notify(icon: "Icon", clear_signal: Optional[Any] = None) -> int:
    signal = clear_signal if clear_signal is not None else icon.events.deselected
    if not callable(getattr(signal, "connect", None)):
        raise ConfigurationError(f"Clear signal {signal!r} has no connect()")
    total = icon._notices.add(signal, lambda: clear(icon))
    _LOGGER.debug("Icon %s notified (total=%d)", icon.uid, total)
    icon.events.notified.emit()
    refresh_badges(icon)
    return total


def clear(icon: "Icon") -> bool:
    if icon.is_destroyed:
        return False
    changed = icon._notices.clear()
    if changed:
        refresh_badges(icon)
    return changed


def displayed_notices(icon: "Icon") -> int:
    """Own notices plus those of hidden children; an open (Viewing) icon shows only its own."""
    from overlay_icons import grouping

    total = icon._notices.count
    if icon._state is IconState.VIEWING:
        return total
    for child in grouping.children(icon):
        total += displayed_notices(child)
    return total


def refresh_badges(icon: "Icon") -> None:
    """Redraw ``icon`` and every ancestor whose aggregate badge may have changed."""
    from overlay_icons import grouping

    if icon.is_destroyed:
        return
    context = icon.context
    context.request_redraw(icon)
    for ancestor in grouping.ancestors(icon):
        context.request_redraw(ancestor)
