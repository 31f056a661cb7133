from __future__ import annotations

import json
import logging
from pathlib import Path

import pytest

from overlay_icons import IconSettings, apply_env_overrides, load_settings
from overlay_icons import logging_utils
from overlay_icons.settings import settings_from_mapping


def test_missing_file_uses_defaults(tmp_path: Path):
    assert load_settings(tmp_path / "absent.json") == IconSettings()


def test_load_settings_coerces_values(tmp_path: Path):
    path = tmp_path / "icons.json"
    path.write_text(
        json.dumps(
            {
                "auto_deselect_enabled": "off",
                "display_order": "7",
                "dropdown_child_policy": "LEAVE",
                "menu_child_policy": "explode",
                "debug": 1,
                "log_retention": 99,
            }
        ),
        encoding="utf-8",
    )

    settings = load_settings(path)

    assert settings.auto_deselect_enabled is False
    assert settings.display_order == 7
    assert settings.dropdown_child_policy == "leave"
    assert settings.menu_child_policy == "leave"
    assert settings.debug is True
    assert settings.log_retention == 20


def test_invalid_json_logs_and_falls_back(tmp_path: Path, caplog: pytest.LogCaptureFixture):
    path = tmp_path / "icons.json"
    path.write_text("{not json", encoding="utf-8")

    with caplog.at_level(logging.WARNING, logger="Overlay.Icons.Settings"):
        settings = load_settings(path)

    assert settings == IconSettings()
    assert any("not valid JSON" in record.getMessage() for record in caplog.records)


def test_non_object_payload_falls_back(tmp_path: Path):
    path = tmp_path / "icons.json"
    path.write_text("[1, 2]", encoding="utf-8")

    assert load_settings(path) == IconSettings()


def test_retention_clamped_low():
    assert settings_from_mapping({"log_retention": 0}).log_retention == 1
    assert settings_from_mapping({"display_order": True}).display_order == 10


def test_env_overrides_apply_only_present_keys():
    base = IconSettings()

    assert apply_env_overrides(base, {}) is base
    updated = apply_env_overrides(
        base,
        {"OVERLAY_ICONS_DEBUG": "yes", "OVERLAY_ICONS_DISPLAY_ORDER": "3", "OVERLAY_ICONS_AUTO_DESELECT": "0"},
    )
    assert updated.debug is True
    assert updated.display_order == 3
    assert updated.auto_deselect_enabled is False
    assert updated.log_retention == base.log_retention


def test_env_override_with_garbage_keeps_current_value():
    updated = apply_env_overrides(IconSettings(display_order=4), {"OVERLAY_ICONS_DISPLAY_ORDER": "soon"})

    assert updated.display_order == 4


def test_get_logger_builds_child_names():
    assert logging_utils.get_logger().name == "Overlay.Icons"
    assert logging_utils.get_logger("Icon").name == "Overlay.Icons.Icon"


def test_propagation_flag_parsing():
    assert logging_utils.propagation_requested({"OVERLAY_ICONS_PROPAGATE_LOGS": "true"}) is True
    assert logging_utils.propagation_requested({"OVERLAY_ICONS_PROPAGATE_LOGS": "0"}) is False
    assert logging_utils.propagation_requested({}) is False


def test_resolve_logs_dir_prefers_env_override(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("OVERLAY_ICONS_LOG_DIR", str(tmp_path / "custom"))

    target = logging_utils.resolve_logs_dir(tmp_path / "package")

    assert target == tmp_path / "custom" / "OverlayIcons"
    assert target.is_dir()


def test_configure_logging_attaches_single_rotating_handler(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("OVERLAY_ICONS_LOG_DIR", str(tmp_path))
    monkeypatch.delenv("OVERLAY_ICONS_PROPAGATE_LOGS", raising=False)
    logger = logging_utils.get_logger()
    previous_level = logger.level
    previous_propagate = logger.propagate

    handler = logging_utils.configure_logging(IconSettings(debug=True, log_retention=3), tmp_path / "package")
    try:
        again = logging_utils.configure_logging(IconSettings(), tmp_path / "package")

        assert again is handler
        assert handler.backupCount == 2
        assert handler.maxBytes == logging_utils.LOG_MAX_BYTES
        assert logger.level == logging.DEBUG
        assert logger.propagate is False
        logging_utils.get_logger("Icon").info("hello from test")
        handler.flush()
        log_path = tmp_path / "OverlayIcons" / logging_utils.LOG_FILENAME
        assert "hello from test" in log_path.read_text(encoding="utf-8")
    finally:
        logger.removeHandler(handler)
        handler.close()
        logger.setLevel(previous_level)
        logger.propagate = previous_propagate
