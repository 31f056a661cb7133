from __future__ import annotations

from enum import Enum
from typing import Optional, Union

from overlay_icons.errors import ConfigurationError


class IconState(str, Enum):
    DESELECTED = "Deselected"
    SELECTED = "Selected"
    VIEWING = "Viewing"

    @property
    def is_selected(self) -> bool:
        return self is not IconState.DESELECTED


class Alignment(str, Enum):
    LEFT = "Left"
    CENTER = "Center"
    RIGHT = "Right"


class GroupKind(str, Enum):
    DROPDOWN = "dropdown"
    MENU = "menu"


def parse_state(value: Union[str, IconState, None]) -> Optional[IconState]:
    """Normalise a state scope; ``None`` means unscoped."""
    if value is None or isinstance(value, IconState):
        return value
    if isinstance(value, str):
        token = value.strip().lower()
        for state in IconState:
            if state.value.lower() == token:
                return state
    raise ConfigurationError(f"Unknown icon state {value!r}")


def parse_alignment(value: Union[str, Alignment]) -> Alignment:
    if isinstance(value, Alignment):
        return value
    if isinstance(value, str):
        token = value.strip().lower()
        for alignment in Alignment:
            if alignment.value.lower() == token:
                return alignment
    raise ConfigurationError(f"Unknown alignment {value!r}; expected Left, Center or Right")


class LockState:
    """Manual lock flag plus a count of pending debounce holds.

    The icon counts as locked while either is active, so overlapping debounce
    windows keep it locked until the last one expires.
    """

    def __init__(self) -> None:
        self._manual = False
        self._holds = 0

    @property
    def locked(self) -> bool:
        return self._manual or self._holds > 0

    @property
    def pending_holds(self) -> int:
        return self._holds

    def lock(self) -> None:
        self._manual = True

    def unlock(self) -> None:
        self._manual = False

    def acquire(self) -> None:
        self._holds += 1

    def release(self) -> None:
        if self._holds > 0:
            self._holds -= 1

    def reset(self) -> None:
        self._manual = False
        self._holds = 0


class ChildPolicy:
    """What happens to a group's children when their parent is destroyed."""

    DESTROY = "destroy"
    LEAVE = "leave"
