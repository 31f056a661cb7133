"""Owning context for icons: registry, base theme, display flags and scheduler."""
from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict, Iterator, List, Optional

from PyQt6.QtCore import QObject, pyqtSignal

from overlay_icons import selection
from overlay_icons.logging_utils import get_logger
from overlay_icons.scheduler import QtScheduler, Scheduler
from overlay_icons.settings import IconSettings
from overlay_icons.state import ChildPolicy, GroupKind
from overlay_icons.theme import ThemeTable

if TYPE_CHECKING:
    from overlay_icons.icon import Icon

_LOGGER = get_logger("Registry")


class IconContext(QObject):
    """Process-wide state shared by a set of icons."""

    redraw_requested = pyqtSignal(str)
    topbar_enabled_changed = pyqtSignal(bool)
    display_order_changed = pyqtSignal(int)

    def __init__(self, settings: Optional[IconSettings] = None, scheduler: Optional[Scheduler] = None) -> None:
        super().__init__()
        self.settings = settings or IconSettings()
        self.scheduler: Scheduler = scheduler if scheduler is not None else QtScheduler()
        self.base_theme = ThemeTable()
        self.auto_deselect_enabled = self.settings.auto_deselect_enabled
        self._topbar_enabled = self.settings.topbar_enabled
        self._display_order = self.settings.display_order
        self._child_policies: Dict[GroupKind, str] = {
            GroupKind.DROPDOWN: self.settings.dropdown_child_policy,
            GroupKind.MENU: self.settings.menu_child_policy,
        }
        self._icons: Dict[str, "Icon"] = {}

    # Registry -----------------------------------------------------------------

    def register(self, icon: "Icon") -> None:
        self._icons[icon.uid] = icon
        _LOGGER.debug("Registered icon %s", icon.uid)

    def unregister(self, icon: "Icon") -> None:
        if self._icons.pop(icon.uid, None) is not None:
            _LOGGER.debug("Unregistered icon %s", icon.uid)

    def get_icons(self) -> Dict[str, "Icon"]:
        return {uid: icon for uid, icon in self._icons.items() if not icon.is_destroyed}

    def get_icon(self, name_or_uid: str) -> Optional["Icon"]:
        """Resolve by name first (oldest icon wins), then by uid."""
        for icon in self:
            if icon._name == name_or_uid:
                return icon
        return self.live_icon(name_or_uid)

    def live_icon(self, uid: str) -> Optional["Icon"]:
        icon = self._icons.get(uid)
        return None if icon is None or icon.is_destroyed else icon

    def __iter__(self) -> Iterator["Icon"]:
        return iter([icon for icon in self._icons.values() if not icon.is_destroyed])

    def __len__(self) -> int:
        return len(self._icons)

    def destroy_all(self) -> int:
        """Destroy every registered icon; icons freed by an earlier cascade are skipped."""
        destroyed = 0
        for icon in list(self._icons.values()):
            if icon.is_destroyed:
                continue
            icon.destroy()
            destroyed += 1
        return destroyed

    # Global display flags -----------------------------------------------------

    @property
    def topbar_enabled(self) -> bool:
        return self._topbar_enabled

    def set_topbar_enabled(self, enabled: bool) -> None:
        flag = bool(enabled)
        if flag == self._topbar_enabled:
            return
        self._topbar_enabled = flag
        _LOGGER.debug("Topbar visibility set to %s", "visible" if flag else "hidden")
        self.topbar_enabled_changed.emit(flag)

    @property
    def display_order(self) -> int:
        return self._display_order

    def set_display_order(self, order: int) -> None:
        value = int(order)
        if value == self._display_order:
            return
        self._display_order = value
        self.display_order_changed.emit(value)

    # Policies -----------------------------------------------------------------

    def child_policy(self, kind: GroupKind) -> str:
        return self._child_policies[kind]

    def set_child_policy(self, kind: GroupKind, policy: str) -> None:
        if policy not in (ChildPolicy.DESTROY, ChildPolicy.LEAVE):
            raise ValueError(f"Unknown child policy {policy!r}")
        self._child_policies[GroupKind(kind)] = policy

    # Theme & rendering --------------------------------------------------------

    def modify_base_theme(self, modifications: Any) -> None:
        try:
            self.base_theme.apply(modifications)
        finally:
            for icon in self:
                self.request_redraw(icon)

    def request_redraw(self, icon: "Icon") -> None:
        if icon.is_destroyed:
            return
        self.redraw_requested.emit(icon.uid)

    # Input --------------------------------------------------------------------

    def press_key(self, key: Any) -> List["Icon"]:
        """Toggle every icon bound to ``key``; returns the icons that toggled."""
        toggled: List["Icon"] = []
        for icon in self:
            if icon.is_destroyed or key not in icon.toggle_keys:
                continue
            if selection.toggle_from_input(icon):
                toggled.append(icon)
        return toggled


_DEFAULT_CONTEXT: Optional[IconContext] = None


def get_default_context() -> IconContext:
    global _DEFAULT_CONTEXT
    if _DEFAULT_CONTEXT is None:
        _DEFAULT_CONTEXT = IconContext()
    return _DEFAULT_CONTEXT


def set_default_context(context: Optional[IconContext]) -> Optional[IconContext]:
    """Install ``context`` as the default and return the previous one."""
    global _DEFAULT_CONTEXT
    previous = _DEFAULT_CONTEXT
    _DEFAULT_CONTEXT = context
    return previous


def reset_default_context() -> None:
    """Destroy every icon of the default context and drop it."""
    global _DEFAULT_CONTEXT
    context = _DEFAULT_CONTEXT
    _DEFAULT_CONTEXT = None
    if context is not None:
        context.destroy_all()
