"""Dropdown and menu membership.

Parents hold ordered lists of child uids per group kind; children hold weak
references back to at most one parent per kind. Lookups go through the
owning context so destroyed icons can never be returned as children.
"""
from __future__ import annotations

import weakref
from typing import TYPE_CHECKING, Iterable, List, Optional

from overlay_icons import notices
from overlay_icons.errors import ConfigurationError, StateError
from overlay_icons.logging_utils import get_logger
from overlay_icons.state import ChildPolicy, GroupKind

if TYPE_CHECKING:
    from overlay_icons.icon import Icon

_LOGGER = get_logger("Grouping")

GROUP_KINDS = (GroupKind.DROPDOWN, GroupKind.MENU)


def parent_of(icon: "Icon", kind: GroupKind) -> Optional["Icon"]:
    ref = icon._parents.get(kind)
    parent = ref() if ref is not None else None
    if parent is None or parent.is_destroyed:
        return None
    return parent


def parents(icon: "Icon") -> List["Icon"]:
    found = []
    for kind in GROUP_KINDS:
        parent = parent_of(icon, kind)
        if parent is not None and parent not in found:
            found.append(parent)
    return found


def children(icon: "Icon", kind: Optional[GroupKind] = None) -> List["Icon"]:
    kinds = GROUP_KINDS if kind is None else (kind,)
    found: List["Icon"] = []
    for group_kind in kinds:
        for uid in list(icon._children[group_kind]):
            child = icon.context.live_icon(uid)
            if child is not None and not child.is_destroyed:
                found.append(child)
    return found


def has_children(icon: "Icon") -> bool:
    return any(children(icon, kind) for kind in GROUP_KINDS)


def ancestors(icon: "Icon") -> List["Icon"]:
    seen: List["Icon"] = []
    pending = parents(icon)
    while pending:
        current = pending.pop(0)
        if current in seen or current is icon:
            continue
        seen.append(current)
        pending.extend(parents(current))
    return seen


def join(child: "Icon", parent: "Icon", kind: GroupKind) -> bool:
    """Append ``child`` to ``parent``'s group, leaving any previous same-kind parent."""
    _check_join(child, parent)

    current = parent_of(child, kind)
    uids = parent._children[kind]
    if current is parent and uids and uids[-1] == child.uid:
        return False
    if current is not None:
        _detach(child, kind)
    parent._children[kind].append(child.uid)
    child._parents[kind] = weakref.ref(parent)
    _LOGGER.debug("Icon %s joined %s of %s", child.uid, kind.value, parent.uid)

    if current is not parent and parent._child_modifications:
        child._theme.apply(list(parent._child_modifications))
    if current is not None and current is not parent:
        _refresh_parent(current)
    _refresh_parent(parent)
    return True


def leave(child: "Icon", kind: Optional[GroupKind] = None) -> bool:
    kinds = GROUP_KINDS if kind is None else (kind,)
    left = False
    for group_kind in kinds:
        parent = _detach(child, group_kind)
        if parent is None:
            continue
        left = True
        _LOGGER.debug("Icon %s left %s of %s", child.uid, group_kind.value, parent.uid)
        _refresh_parent(parent)
    if left:
        notices.refresh_badges(child)
    return left


def set_children(parent: "Icon", kind: GroupKind, icons: Iterable["Icon"]) -> List["Icon"]:
    """Replace the whole group; icons dropped from it leave without being destroyed."""
    wanted: List["Icon"] = []
    for icon in icons:
        if icon.is_destroyed:
            raise StateError(f"Cannot add destroyed icon {icon.uid} to a {kind.value}")
        _check_join(icon, parent)
        if icon not in wanted:
            wanted.append(icon)
    for existing in children(parent, kind):
        if existing not in wanted:
            leave(existing, kind)
    for icon in wanted:
        join(icon, parent, kind)
    return children(parent, kind)


def release_children(parent: "Icon") -> None:
    """Apply the context's destroy policy to every child of a dying parent."""
    for kind in GROUP_KINDS:
        policy = parent.context.child_policy(kind)
        for child in children(parent, kind):
            if child.is_destroyed:
                continue
            if policy == ChildPolicy.DESTROY:
                child.destroy()
            else:
                leave(child, kind)
        parent._children[kind].clear()


def _check_join(child: "Icon", parent: "Icon") -> None:
    if parent.is_destroyed:
        raise StateError(f"Cannot join destroyed icon {parent.uid}")
    if parent is child or child in ancestors(parent):
        raise ConfigurationError(f"Icon {child.uid} cannot join its own descendant {parent.uid}")
    if parent.context is not child.context:
        raise ConfigurationError("Icons from different contexts cannot be grouped")


def _detach(child: "Icon", kind: GroupKind) -> Optional["Icon"]:
    ref = child._parents.get(kind)
    child._parents[kind] = None
    parent = ref() if ref is not None else None
    if parent is None:
        return None
    try:
        parent._children[kind].remove(child.uid)
    except ValueError:
        pass
    return parent


def _refresh_parent(parent: "Icon") -> None:
    from overlay_icons import selection

    if parent.is_destroyed:
        return
    if not selection.refresh_viewing(parent):
        notices.refresh_badges(parent)
