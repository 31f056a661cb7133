"""Engine settings loader (JSON file plus environment overrides)."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Mapping, Optional

from overlay_icons.logging_utils import get_logger

_LOGGER = get_logger("Settings")

DEBUG_ENV_VAR = "OVERLAY_ICONS_DEBUG"
DISPLAY_ORDER_ENV_VAR = "OVERLAY_ICONS_DISPLAY_ORDER"
AUTO_DESELECT_ENV_VAR = "OVERLAY_ICONS_AUTO_DESELECT"

LOG_RETENTION_MIN = 1
LOG_RETENTION_MAX = 20
CHILD_POLICIES = ("destroy", "leave")

_TRUE_TOKENS = {"1", "true", "yes", "on"}
_FALSE_TOKENS = {"0", "false", "no", "off"}


@dataclass(frozen=True)
class IconSettings:
    auto_deselect_enabled: bool = True
    topbar_enabled: bool = True
    display_order: int = 10
    dropdown_child_policy: str = "destroy"
    menu_child_policy: str = "leave"
    debug: bool = False
    log_retention: int = 5


def _coerce_bool(value: Any, fallback: bool) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return bool(value)
    if isinstance(value, str):
        token = value.strip().lower()
        if token in _TRUE_TOKENS:
            return True
        if token in _FALSE_TOKENS:
            return False
    return fallback


def _coerce_int(value: Any, fallback: int) -> int:
    if isinstance(value, bool):
        return fallback
    try:
        return int(value)
    except (TypeError, ValueError):
        return fallback


def _coerce_retention(value: Any) -> int:
    numeric = _coerce_int(value, IconSettings.log_retention)
    if numeric < LOG_RETENTION_MIN:
        return LOG_RETENTION_MIN
    if numeric > LOG_RETENTION_MAX:
        return LOG_RETENTION_MAX
    return numeric


def _coerce_policy(value: Any, fallback: str) -> str:
    token = str(value or "").strip().lower()
    return token if token in CHILD_POLICIES else fallback


def settings_from_mapping(data: Mapping[str, Any]) -> IconSettings:
    defaults = IconSettings()
    return IconSettings(
        auto_deselect_enabled=_coerce_bool(data.get("auto_deselect_enabled"), defaults.auto_deselect_enabled),
        topbar_enabled=_coerce_bool(data.get("topbar_enabled"), defaults.topbar_enabled),
        display_order=_coerce_int(data.get("display_order"), defaults.display_order),
        dropdown_child_policy=_coerce_policy(data.get("dropdown_child_policy"), defaults.dropdown_child_policy),
        menu_child_policy=_coerce_policy(data.get("menu_child_policy"), defaults.menu_child_policy),
        debug=_coerce_bool(data.get("debug"), defaults.debug),
        log_retention=_coerce_retention(data.get("log_retention", defaults.log_retention)),
    )


def load_settings(path: Path) -> IconSettings:
    """Read settings from ``path``; missing or malformed files yield defaults."""

    try:
        raw_text = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return IconSettings()
    except OSError as exc:
        _LOGGER.warning("Failed to read icon settings at %s: %s", path, exc)
        return IconSettings()
    try:
        data = json.loads(raw_text)
    except json.JSONDecodeError as exc:
        _LOGGER.warning("Icon settings at %s are not valid JSON (%s); using defaults", path, exc)
        return IconSettings()
    if not isinstance(data, dict):
        _LOGGER.warning("Icon settings at %s must be a JSON object; using defaults", path)
        return IconSettings()
    return settings_from_mapping(data)


def apply_env_overrides(settings: IconSettings, env: Optional[Mapping[str, str]] = None) -> IconSettings:
    source = os.environ if env is None else env
    changes: dict[str, Any] = {}
    if DEBUG_ENV_VAR in source:
        changes["debug"] = _coerce_bool(source[DEBUG_ENV_VAR], settings.debug)
    if DISPLAY_ORDER_ENV_VAR in source:
        changes["display_order"] = _coerce_int(source[DISPLAY_ORDER_ENV_VAR], settings.display_order)
    if AUTO_DESELECT_ENV_VAR in source:
        changes["auto_deselect_enabled"] = _coerce_bool(
            source[AUTO_DESELECT_ENV_VAR], settings.auto_deselect_enabled
        )
    if not changes:
        return settings
    _LOGGER.debug("Applied icon settings env overrides: %s", ", ".join(sorted(changes)))
    return replace(settings, **changes)
