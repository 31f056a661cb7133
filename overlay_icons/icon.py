"""The ``Icon`` widget: a fluent facade over the selection, grouping, notice,
binding and theme engines.

Every mutating method returns the icon so calls can be chained::

    Icon().set_name("Shop").set_label("Shop").bind_toggle_key("B").align("Right")

Once ``destroy()`` has run, every method and property except ``uid`` and
``is_destroyed`` raises ``StateError``.
"""
from __future__ import annotations

import asyncio
import functools
import uuid
import weakref
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple, TypeVar

from overlay_icons import grouping, notices, selection
from overlay_icons.bindings import ToggleBindings
from overlay_icons.errors import ConfigurationError, StateError
from overlay_icons.janitor import Janitor
from overlay_icons.logging_utils import get_logger
from overlay_icons.notices import NoticeCounter
from overlay_icons.registry import IconContext, get_default_context
from overlay_icons.scheduler import seconds_to_ms
from overlay_icons.signals import EventBindings, IconEvents
from overlay_icons.state import Alignment, GroupKind, IconState, LockState, parse_alignment
from overlay_icons.theme import (
    ThemeModification,
    ThemeTable,
    parse_modifications,
    raise_for_failures,
    resolve_element,
    resolve_property,
)

_LOGGER = get_logger("Icon")

_F = TypeVar("_F", bound=Callable[..., Any])


def _live(method: _F) -> _F:
    @functools.wraps(method)
    def wrapper(self: "Icon", *args: Any, **kwargs: Any) -> Any:
        if self._destroyed:
            raise StateError(f"Icon {self._uid} has been destroyed")
        return method(self, *args, **kwargs)

    return wrapper  # type: ignore[return-value]


class _DebounceRelease:
    """Releases one debounce hold when its timer fires, unless cancelled first."""

    def __init__(self, icon: "Icon") -> None:
        self._icon = icon
        self.handle: object = None
        self.done = False

    def fire(self) -> None:
        if self.done:
            return
        self.done = True
        icon = self._icon
        icon._janitor.remove(self)
        if icon._destroyed:
            return
        icon._lock.release()
        if not icon._lock.locked:
            _LOGGER.debug("Icon %s unlocked after debounce", icon.uid)

    def cancel(self) -> None:
        if self.done:
            return
        self.done = True
        if self.handle is not None:
            self._icon.context.scheduler.cancel(self.handle)


class Icon:
    """A clickable overlay icon."""

    def __init__(self, context: Optional[IconContext] = None) -> None:
        self._destroyed = False
        self._uid = str(uuid.uuid4())
        self.context = context if context is not None else get_default_context()
        self.events = IconEvents()
        self._event_bindings = EventBindings(self, self.events)
        self._name = "Widget"
        self._state = IconState.DESELECTED
        self._enabled = True
        self._lock = LockState()
        self._auto_deselect = True
        self._one_click = False
        self._alignment = Alignment.LEFT
        self._caption: Optional[str] = None
        self._caption_hint: Any = None
        self._notices = NoticeCounter()
        self._bindings = ToggleBindings()
        self._theme = ThemeTable()
        self._child_modifications: List[ThemeModification] = []
        self._parents: Dict[GroupKind, Optional[weakref.ref]] = {kind: None for kind in GroupKind}
        self._children: Dict[GroupKind, List[str]] = {kind: [] for kind in GroupKind}
        self._janitor = Janitor(self._uid)
        self.context.register(self)

    def __repr__(self) -> str:
        if self._destroyed:
            return f"<Icon uid={self._uid} destroyed>"
        return f"<Icon {self._name!r} uid={self._uid} state={self._state.value}>"

    # Static surface -----------------------------------------------------------

    @staticmethod
    def get_icons() -> Dict[str, "Icon"]:
        return get_default_context().get_icons()

    @staticmethod
    def get_icon(name_or_uid: str) -> Optional["Icon"]:
        return get_default_context().get_icon(name_or_uid)

    @staticmethod
    def set_topbar_enabled(enabled: bool) -> None:
        get_default_context().set_topbar_enabled(enabled)

    @staticmethod
    def set_display_order(order: int) -> None:
        get_default_context().set_display_order(order)

    @staticmethod
    def modify_base_theme(modifications: Any) -> None:
        get_default_context().modify_base_theme(modifications)

    # Read-only state ----------------------------------------------------------

    @property
    def uid(self) -> str:
        return self._uid

    @property
    def is_destroyed(self) -> bool:
        return self._destroyed

    @property
    @_live
    def name(self) -> str:
        return self._name

    @property
    @_live
    def state(self) -> IconState:
        return self._state

    @property
    @_live
    def is_selected(self) -> bool:
        return self._state.is_selected

    @property
    @_live
    def is_viewing(self) -> bool:
        return self._state is IconState.VIEWING

    @property
    @_live
    def enabled(self) -> bool:
        return self._enabled

    @property
    @_live
    def locked(self) -> bool:
        return self._lock.locked

    @property
    @_live
    def total_notices(self) -> int:
        return self._notices.count

    @property
    @_live
    def displayed_notices(self) -> int:
        return notices.displayed_notices(self)

    @property
    @_live
    def alignment(self) -> Alignment:
        return self._alignment

    @property
    @_live
    def toggle_keys(self) -> Tuple[Any, ...]:
        return tuple(self._bindings.keys)

    @property
    @_live
    def toggle_items(self) -> Tuple[Any, ...]:
        return tuple(self._bindings.items)

    @property
    @_live
    def caption(self) -> Optional[str]:
        return self._caption

    @property
    @_live
    def caption_hint(self) -> Any:
        if self._caption_hint is not None:
            return self._caption_hint
        return self._bindings.keys[0] if self._bindings.keys else None

    @property
    @_live
    def auto_deselect_enabled(self) -> bool:
        return self._auto_deselect

    @property
    @_live
    def one_click_enabled(self) -> bool:
        return self._one_click

    @property
    @_live
    def parent(self) -> Optional["Icon"]:
        return grouping.parent_of(self, GroupKind.DROPDOWN) or grouping.parent_of(self, GroupKind.MENU)

    @property
    @_live
    def dropdown_parent(self) -> Optional["Icon"]:
        return grouping.parent_of(self, GroupKind.DROPDOWN)

    @property
    @_live
    def menu_parent(self) -> Optional["Icon"]:
        return grouping.parent_of(self, GroupKind.MENU)

    @property
    @_live
    def dropdown(self) -> List["Icon"]:
        return grouping.children(self, GroupKind.DROPDOWN)

    @property
    @_live
    def menu(self) -> List["Icon"]:
        return grouping.children(self, GroupKind.MENU)

    # Naming & appearance ------------------------------------------------------

    @_live
    def set_name(self, name: str) -> "Icon":
        self._name = str(name)
        return self

    @_live
    def get_instance(self, element: str) -> Dict[str, Any]:
        """Resolved properties of one element for the current state."""
        return resolve_element(element, self._state, self._theme, self.context.base_theme)

    @_live
    def resolve(self, element: str, prop: str) -> Any:
        return resolve_property(element, prop, self._state, self._theme, self.context.base_theme)

    @_live
    def modify_theme(self, modifications: Any) -> "Icon":
        try:
            self._theme.apply(modifications)
        finally:
            self.context.request_redraw(self)
        return self

    @_live
    def modify_child_theme(self, modifications: Any) -> "Icon":
        """Apply to current children and remember for icons that join later."""
        valid, failures = parse_modifications(modifications)
        self._child_modifications.extend(valid)
        if valid:
            for child in grouping.children(self):
                child._theme.apply(valid)
                self.context.request_redraw(child)
        raise_for_failures(failures)
        return self

    def _set_property(self, element: str, prop: str, value: Any, state: Any = None) -> "Icon":
        return self.modify_theme((element, prop, value, state))

    @_live
    def set_label(self, text: str, state: Any = None) -> "Icon":
        return self._set_property("IconLabel", "text", text, state)

    @_live
    def set_image(self, image: Any, state: Any = None) -> "Icon":
        return self._set_property("IconImage", "image", image, state)

    @_live
    def set_order(self, order: int, state: Any = None) -> "Icon":
        return self._set_property("Widget", "layoutOrder", order, state)

    @_live
    def set_corner_radius(self, scale: float, offset: int, state: Any = None) -> "Icon":
        return self.modify_theme([
            ("IconCorners", "cornerScale", scale, state),
            ("IconCorners", "cornerOffset", offset, state),
        ])

    @_live
    def set_width(self, minimum_width: int, state: Any = None) -> "Icon":
        return self._set_property("Widget", "minimumWidth", minimum_width, state)

    @_live
    def set_image_scale(self, scale: float, state: Any = None) -> "Icon":
        return self._set_property("IconImageScale", "value", scale, state)

    @_live
    def set_image_ratio(self, ratio: float, state: Any = None) -> "Icon":
        return self._set_property("IconImageRatio", "aspectRatio", ratio, state)

    @_live
    def set_text_size(self, size: int, state: Any = None) -> "Icon":
        return self._set_property("IconLabel", "textSize", size, state)

    @_live
    def set_text_font(self, font: Any, weight: str = "Regular", style: str = "Normal", state: Any = None) -> "Icon":
        return self.modify_theme([
            ("IconLabel", "fontFamily", font, state),
            ("IconLabel", "fontWeight", weight, state),
            ("IconLabel", "fontStyle", style, state),
        ])

    @_live
    def disable_overlay(self, disabled: bool = True) -> "Icon":
        return self._set_property("IconOverlay", "visible", not disabled)

    @_live
    def align(self, alignment: Any) -> "Icon":
        self._alignment = parse_alignment(alignment)
        self.context.request_redraw(self)
        return self

    @_live
    def set_caption(self, text: Optional[str]) -> "Icon":
        self._caption = None if text is None else str(text)
        self.context.request_redraw(self)
        return self

    @_live
    def set_caption_hint(self, key: Any) -> "Icon":
        self._caption_hint = key
        self.context.request_redraw(self)
        return self

    # Selection ----------------------------------------------------------------

    @_live
    def set_enabled(self, enabled: bool) -> "Icon":
        flag = bool(enabled)
        if flag == self._enabled:
            return self
        if not flag:
            selection.deselect(self)
        self._enabled = flag
        self.context.request_redraw(self)
        return self

    @_live
    def select(self) -> "Icon":
        selection.select(self)
        return self

    @_live
    def deselect(self) -> "Icon":
        selection.deselect(self)
        return self

    @_live
    def click(self) -> "Icon":
        """Toggle as user input would; ignored while locked or disabled."""
        selection.toggle_from_input(self)
        return self

    @_live
    def auto_deselect(self, enabled: bool = True) -> "Icon":
        self._auto_deselect = bool(enabled)
        return self

    @_live
    def one_click(self, enabled: bool = True) -> "Icon":
        self._one_click = bool(enabled)
        if self._one_click:
            selection.deselect(self)
        return self

    @_live
    def lock(self) -> "Icon":
        self._lock.lock()
        return self

    @_live
    def unlock(self) -> "Icon":
        self._lock.unlock()
        return self

    @_live
    def debounce(self, seconds: float) -> "Icon":
        """Lock now and release after ``seconds`` via the context scheduler."""
        self._lock.acquire()
        release = _DebounceRelease(self)
        self._janitor.add(release, "cancel")
        release.handle = self.context.scheduler.after(seconds_to_ms(seconds), release.fire)
        return self

    @_live
    async def debounce_async(self, seconds: float) -> "Icon":
        """Lock, suspend the calling coroutine for ``seconds``, then release."""
        self._lock.acquire()
        try:
            await asyncio.sleep(max(0.0, float(seconds)))
        finally:
            if not self._destroyed:
                self._lock.release()
        return self

    # Notices ------------------------------------------------------------------

    @_live
    def notify(self, clear_signal: Any = None) -> "Icon":
        notices.notify(self, clear_signal)
        return self

    @_live
    def clear_notices(self) -> "Icon":
        notices.clear(self)
        return self

    # Bindings -----------------------------------------------------------------

    @_live
    def bind_event(self, name: str, callback: Callable[..., Any]) -> "Icon":
        self._event_bindings.bind(name, callback)
        return self

    @_live
    def unbind_event(self, name: str) -> "Icon":
        self._event_bindings.unbind(name)
        return self

    @_live
    def bind_toggle_key(self, key: Any) -> "Icon":
        self._bindings.bind_key(key)
        return self

    @_live
    def unbind_toggle_key(self, key: Any) -> "Icon":
        self._bindings.unbind_key(key)
        return self

    @_live
    def bind_toggle_item(self, item: Any) -> "Icon":
        self._bindings.bind_item(item, self._state.is_selected)
        return self

    @_live
    def unbind_toggle_item(self, item: Any) -> "Icon":
        self._bindings.unbind_item(item)
        return self

    @_live
    def call(self, func: Callable[["Icon"], Any]) -> "Icon":
        try:
            func(self)
        except Exception:
            _LOGGER.exception("Icon.call(%r) raised for %s", func, self._uid)
        return self

    @_live
    def add_to_janitor(self, resource: Any) -> "Icon":
        if isinstance(resource, Icon):
            owned = resource
            self._janitor.add(lambda: owned.is_destroyed or owned.destroy())
            return self
        try:
            self._janitor.add(resource)
        except TypeError as exc:
            raise ConfigurationError(str(exc)) from exc
        return self

    # Grouping -----------------------------------------------------------------

    @_live
    def set_dropdown(self, icons: Iterable["Icon"]) -> "Icon":
        grouping.set_children(self, GroupKind.DROPDOWN, icons)
        return self

    @_live
    def join_dropdown(self, parent: "Icon") -> "Icon":
        grouping.join(self, parent, GroupKind.DROPDOWN)
        return self

    @_live
    def set_menu(self, icons: Iterable["Icon"]) -> "Icon":
        grouping.set_children(self, GroupKind.MENU, icons)
        return self

    @_live
    def join_menu(self, parent: "Icon") -> "Icon":
        grouping.join(self, parent, GroupKind.MENU)
        return self

    @_live
    def leave(self) -> "Icon":
        grouping.leave(self)
        return self

    # Lifecycle ----------------------------------------------------------------

    @_live
    def destroy(self) -> "Icon":
        """Unregister, then release children, parents, subscriptions and janitor resources."""
        self._destroyed = True
        self.context.unregister(self)
        self._state = IconState.DESELECTED
        self._notices.clear()
        grouping.release_children(self)
        grouping.leave(self)
        self._event_bindings.unbind_all()
        self._bindings.release()
        self._lock.reset()
        self._janitor.cleanup()
        _LOGGER.debug("Icon %s destroyed", self._uid)
        return self
