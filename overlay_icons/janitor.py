from __future__ import annotations

from typing import Any, Callable, List, Optional, Tuple

from overlay_icons.logging_utils import get_logger

_LOGGER = get_logger("Janitor")

_RELEASE_METHODS = ("disconnect", "destroy", "Destroy", "deleteLater", "stop", "close")


class Janitor:
    """Tracks resources bound to an icon and releases each exactly once."""

    def __init__(self, label: str = "") -> None:
        self._label = label
        self._entries: List[Tuple[Any, Callable[[], None]]] = []
        self._cleaned = False

    @property
    def cleaned(self) -> bool:
        return self._cleaned

    def __len__(self) -> int:
        return len(self._entries)

    def add(self, resource: Any, method: Optional[str] = None) -> Any:
        """Track ``resource`` and return it.

        ``method`` names the release call; without it a callable is invoked
        directly and any other object is released through the first method it
        exposes from disconnect/destroy/deleteLater/stop/close.
        """
        if resource is None:
            return None
        release = self._release_for(resource, method)
        if self._cleaned:
            _LOGGER.debug("Janitor %s already cleaned; releasing %r immediately", self._label, resource)
            self._run(resource, release)
            return resource
        self._entries.append((resource, release))
        return resource

    def remove(self, resource: Any) -> bool:
        """Stop tracking ``resource`` without releasing it."""
        for index, (tracked, _release) in enumerate(self._entries):
            if tracked is resource:
                del self._entries[index]
                return True
        return False

    def cleanup(self) -> int:
        """Release tracked resources newest first; returns how many were released."""
        if self._cleaned:
            return 0
        self._cleaned = True
        released = 0
        while self._entries:
            resource, release = self._entries.pop()
            if self._run(resource, release):
                released += 1
        return released

    def _run(self, resource: Any, release: Callable[[], None]) -> bool:
        try:
            release()
        except Exception:
            _LOGGER.exception("Janitor %s failed to release %r", self._label, resource)
            return False
        return True

    @staticmethod
    def _release_for(resource: Any, method: Optional[str]) -> Callable[[], None]:
        if method is not None:
            release = getattr(resource, method, None)
            if not callable(release):
                raise TypeError(f"{resource!r} has no callable {method!r}")
            return release
        for name in _RELEASE_METHODS:
            release = getattr(resource, name, None)
            if callable(release):
                return release
        if callable(resource):
            return resource
        raise TypeError(f"Don't know how to release {resource!r}")
