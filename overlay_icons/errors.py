"""Exception taxonomy for the icon engine."""
from __future__ import annotations

from typing import Iterable, List


class IconError(Exception):
    """Base class for icon engine failures."""


class ConfigurationError(IconError, ValueError):
    """Raised when a theme, alignment, event or grouping request is invalid.

    ``failures`` holds one message per rejected entry so batch callers can see
    everything that was skipped while the valid entries were still applied.
    """

    def __init__(self, message: str, failures: Iterable[str] = ()) -> None:
        self.failures: List[str] = list(failures) or [message]
        super().__init__(message)


class StateError(IconError, RuntimeError):
    """Raised when an operation targets an icon that has been destroyed."""
