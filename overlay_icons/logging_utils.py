from __future__ import annotations

import logging
import os
import tempfile
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from overlay_icons.settings import IconSettings

LOGGER_NAME = "Overlay.Icons"
LOG_FILENAME = "overlay-icons.log"
LOG_DIR_ENV_VAR = "OVERLAY_ICONS_LOG_DIR"
PROPAGATE_ENV_VAR = "OVERLAY_ICONS_PROPAGATE_LOGS"
LOG_MAX_BYTES = 512 * 1024
LOG_FORMAT = "%(asctime)s - %(levelname)s - %(name)s - %(message)s"

_HANDLER_MARKER = "_overlay_icons_handler"


def get_logger(suffix: str = "") -> logging.Logger:
    """Return the package logger or one of its children (``Overlay.Icons.<suffix>``)."""
    name = f"{LOGGER_NAME}.{suffix}" if suffix else LOGGER_NAME
    return logging.getLogger(name)


def resolve_logs_dir(base_path: Path, log_dir_name: str = "OverlayIcons") -> Path:
    """
    Resolve the directory to store icon engine logs.

    Strategy:
    - Use OVERLAY_ICONS_LOG_DIR if set.
    - Fall back to XDG state/cache locations, then `cwd/logs/<log_dir_name>`.
    - Final fallback: tempdir/<log_dir_name>.
    `base_path` is only used to skip candidates that live inside the package tree.
    """
    package_root = base_path.resolve()
    candidates = []

    env_override = os.environ.get(LOG_DIR_ENV_VAR)
    if env_override:
        candidates.append(Path(env_override).expanduser())

    state_home = Path(os.environ.get("XDG_STATE_HOME", Path.home() / ".local" / "state"))
    cache_home = Path(os.environ.get("XDG_CACHE_HOME", Path.home() / ".cache"))
    candidates.append(state_home / "overlay-icons" / "logs")
    candidates.append(cache_home / "overlay-icons" / "logs")
    candidates.append(Path.cwd() / "logs")

    for base in candidates:
        target = base / log_dir_name
        if package_root in target.resolve().parents:
            continue
        try:
            target.mkdir(parents=True, exist_ok=True)
        except OSError:
            continue
        return target

    temp_fallback = Path(tempfile.gettempdir()) / "OverlayIcons" / log_dir_name
    temp_fallback.mkdir(parents=True, exist_ok=True)
    return temp_fallback


def propagation_requested(env: Optional[dict] = None) -> bool:
    source = os.environ if env is None else env
    return str(source.get(PROPAGATE_ENV_VAR, "")).strip().lower() in {"1", "true", "yes", "on"}


def configure_logging(settings: "IconSettings", base_path: Optional[Path] = None) -> logging.Handler:
    """Attach one rotating file handler to the package logger.

    Calling this again replaces nothing: the already attached handler is returned.
    Once a file handler is attached, records stop propagating to the root logger
    unless OVERLAY_ICONS_PROPAGATE_LOGS is set.
    """
    logger = get_logger()
    for existing in logger.handlers:
        if getattr(existing, _HANDLER_MARKER, False):
            return existing

    log_dir = resolve_logs_dir(base_path or Path(__file__).resolve().parent)
    # log_retention counts the live file too
    handler = RotatingFileHandler(
        log_dir / LOG_FILENAME,
        maxBytes=LOG_MAX_BYTES,
        backupCount=max(0, settings.log_retention - 1),
        encoding="utf-8",
    )
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    setattr(handler, _HANDLER_MARKER, True)
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG if settings.debug else logging.INFO)
    logger.propagate = propagation_requested()
    logger.debug("Icon engine logging to %s (retention=%d)", log_dir, settings.log_retention)
    return handler
