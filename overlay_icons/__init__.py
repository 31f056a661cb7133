from .errors import ConfigurationError, IconError, StateError
from .icon import Icon
from .registry import IconContext, get_default_context, reset_default_context, set_default_context
from .scheduler import QtScheduler, Scheduler
from .settings import IconSettings, apply_env_overrides, load_settings
from .state import Alignment, ChildPolicy, GroupKind, IconState
from .theme import ELEMENT_SCHEMA, ThemeModification

__all__ = [
    "Alignment",
    "ChildPolicy",
    "ConfigurationError",
    "ELEMENT_SCHEMA",
    "GroupKind",
    "Icon",
    "IconContext",
    "IconError",
    "IconSettings",
    "IconState",
    "QtScheduler",
    "Scheduler",
    "StateError",
    "ThemeModification",
    "apply_env_overrides",
    "get_default_context",
    "load_settings",
    "reset_default_context",
    "set_default_context",
]
