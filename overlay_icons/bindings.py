"""Toggle keys and toggle items bound to an icon's selection state."""
from __future__ import annotations

from typing import Any, List

from overlay_icons.errors import ConfigurationError
from overlay_icons.logging_utils import get_logger

_LOGGER = get_logger("Bindings")


def _supports_visibility(item: Any) -> bool:
    return callable(getattr(item, "setVisible", None)) or hasattr(item, "visible")


def set_item_visible(item: Any, visible: bool) -> None:
    setter = getattr(item, "setVisible", None)
    try:
        if callable(setter):
            setter(visible)
        else:
            item.visible = visible
    except Exception:
        _LOGGER.exception("Failed to set visibility of toggle item %r", item)


class ToggleBindings:
    """Ordered, duplicate-free keys and items for one icon."""

    def __init__(self) -> None:
        self.keys: List[Any] = []
        self.items: List[Any] = []

    def bind_key(self, key: Any) -> bool:
        if key is None:
            raise ConfigurationError("Toggle key cannot be None")
        if key in self.keys:
            return False
        self.keys.append(key)
        return True

    def unbind_key(self, key: Any) -> bool:
        if key not in self.keys:
            _LOGGER.debug("Ignoring unbind for unbound toggle key %r", key)
            return False
        self.keys.remove(key)
        return True

    def bind_item(self, item: Any, visible: bool) -> bool:
        if not _supports_visibility(item):
            raise ConfigurationError(f"Toggle item {item!r} has neither setVisible() nor a visible attribute")
        if any(existing is item for existing in self.items):
            return False
        self.items.append(item)
        set_item_visible(item, visible)
        return True

    def unbind_item(self, item: Any) -> bool:
        for index, existing in enumerate(self.items):
            if existing is item:
                del self.items[index]
                return True
        _LOGGER.debug("Ignoring unbind for unbound toggle item %r", item)
        return False

    def sync_items(self, visible: bool) -> None:
        for item in list(self.items):
            set_item_visible(item, visible)

    def release(self) -> None:
        """Hide and forget every item; forget every key."""
        self.sync_items(False)
        self.items.clear()
        self.keys.clear()
