"""Selection state machine: Deselected -> Selected (-> Viewing) -> Deselected.

Every function returns True when it changed the icon's state. State is written
before the matching events are emitted, so callbacks that re-enter the engine
see the new state; after each emission the transition stops if a callback has
already moved the icon elsewhere.
"""
from __future__ import annotations

from typing import TYPE_CHECKING

from overlay_icons import grouping, notices
from overlay_icons.logging_utils import get_logger
from overlay_icons.state import IconState

if TYPE_CHECKING:
    from overlay_icons.icon import Icon

_LOGGER = get_logger("Selection")


def select(icon: "Icon") -> bool:
    if icon.is_destroyed or not icon._enabled or icon._state.is_selected:
        return False
    context = icon.context
    if icon._auto_deselect and context.auto_deselect_enabled:
        _deselect_others(icon)
        if icon.is_destroyed or icon._state.is_selected:
            return False

    icon._state = IconState.SELECTED
    _LOGGER.debug("Icon %s selected", icon.uid)
    try:
        icon.events.selected.emit()
        if icon._state is not IconState.SELECTED:
            return True
        icon.events.toggled.emit(True)
        if icon._state is not IconState.SELECTED:
            return True
        refresh_viewing(icon)
    finally:
        sync(icon)
    if icon._one_click and not icon.is_destroyed and icon._state.is_selected:
        deselect(icon)
    return True


def deselect(icon: "Icon") -> bool:
    if icon.is_destroyed or not icon._state.is_selected:
        return False
    was_viewing = icon._state is IconState.VIEWING
    icon._state = IconState.DESELECTED
    _LOGGER.debug("Icon %s deselected", icon.uid)
    try:
        if was_viewing:
            icon.events.viewing_ended.emit()
        if icon._state is IconState.DESELECTED:
            icon.events.deselected.emit()
        if icon._state is IconState.DESELECTED:
            icon.events.toggled.emit(False)
        # Children that were showing their own group close with the parent.
        for child in grouping.children(icon):
            if child._state is IconState.VIEWING:
                deselect(child)
    finally:
        sync(icon)
    return True


def toggle_from_input(icon: "Icon") -> bool:
    """User-input toggle (click or toggle key); refused while locked or disabled."""
    if icon.is_destroyed or not icon._enabled:
        return False
    if icon._lock.locked:
        _LOGGER.debug("Ignoring input toggle for locked icon %s", icon.uid)
        return False
    if icon._state.is_selected:
        return deselect(icon)
    return select(icon)


def refresh_viewing(icon: "Icon") -> bool:
    """Enter or leave Viewing to match whether the icon currently owns children."""
    if icon.is_destroyed:
        return False
    has_group = grouping.has_children(icon)
    if icon._state is IconState.SELECTED and has_group:
        icon._state = IconState.VIEWING
        icon.events.viewing_started.emit()
    elif icon._state is IconState.VIEWING and not has_group:
        icon._state = IconState.SELECTED
        icon.events.viewing_ended.emit()
    else:
        return False
    sync(icon)
    return True


def sync(icon: "Icon") -> None:
    """Push the current state to toggle items and ask renderers to redraw."""
    if icon.is_destroyed:
        return
    icon._bindings.sync_items(icon._state.is_selected)
    notices.refresh_badges(icon)


def _deselect_others(icon: "Icon") -> None:
    for other in icon.context:
        if other is icon or other.is_destroyed:
            continue
        if other._auto_deselect and other._state.is_selected:
            _LOGGER.debug("Auto-deselecting %s in favour of %s", other.uid, icon.uid)
            deselect(other)
