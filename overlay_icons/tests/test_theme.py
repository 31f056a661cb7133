from __future__ import annotations

import pytest

from overlay_icons import ConfigurationError, Icon, IconState
from overlay_icons.theme import ThemeTable, normalize_font, normalize_image, resolve_property


def test_resolution_precedence_follows_scope_and_level():
    Icon.modify_base_theme([
        ("IconLabel", "text", "V0"),
        ("IconLabel", "text", "V1", "Selected"),
    ])
    icon = Icon().modify_theme([
        ("IconLabel", "text", "V2"),
        ("IconLabel", "text", "V3", "Selected"),
    ])

    assert icon.resolve("IconLabel", "text") == "V2"
    icon.select()
    assert icon.resolve("IconLabel", "text") == "V3"


def test_base_scoped_entry_loses_to_icon_unscoped_entry():
    Icon.modify_base_theme(("IconButton", "backgroundColor", "#111111", "Selected"))
    icon = Icon().modify_theme(("IconButton", "backgroundColor", "#222222"))

    icon.select()

    assert icon.resolve("IconButton", "backgroundColor") == "#222222"


def test_defaults_apply_without_overrides():
    icon = Icon()

    assert icon.resolve("Widget", "minimumWidth") == 44
    assert icon.get_instance("IconImageScale") == {"value": 0.5}


def test_viewing_falls_back_to_selected_scope():
    parent = Icon().set_label("Open", "Selected")
    parent.set_dropdown([Icon()]).select()

    assert parent.state is IconState.VIEWING
    assert parent.resolve("IconLabel", "text") == "Open"

    parent.set_label("Viewing", "Viewing")
    assert parent.resolve("IconLabel", "text") == "Viewing"


def test_later_entries_overwrite_earlier_ones_with_same_key():
    icon = Icon().modify_theme([
        ("IconLabel", "textSize", 14),
        ("IconLabel", "textSize", 20),
    ])

    assert icon.resolve("IconLabel", "textSize") == 20


def test_invalid_tuples_are_reported_but_valid_ones_apply():
    icon = Icon()

    with pytest.raises(ConfigurationError) as excinfo:
        icon.modify_theme([
            ("IconLabel", "text", "Kept"),
            ("NoSuchElement", "text", "x"),
            ("IconLabel", "noSuchProperty", 1),
            ("IconLabel", "textSize", "big"),
            ("IconLabel", "text", "x", "Hovering"),
        ])

    assert len(excinfo.value.failures) == 4
    assert icon.resolve("IconLabel", "text") == "Kept"


def test_single_tuple_failure_raises_configuration_error():
    with pytest.raises(ConfigurationError):
        Icon().modify_theme(("Widget", "minimumWidth", True))


def test_colors_are_normalised():
    icon = Icon().modify_theme([
        ("IconLabel", "textColor", (255, 0, 16)),
        ("IconButton", "backgroundColor", "#ABC"),
    ])

    assert icon.resolve("IconLabel", "textColor") == "#ff0010"
    assert icon.resolve("IconButton", "backgroundColor") == "#aabbcc"


def test_image_references():
    assert normalize_image(12345) == "asset://12345"
    assert normalize_image("678") == "asset://678"
    assert normalize_image("https://example.com/icon.png") == "https://example.com/icon.png"
    with pytest.raises(ValueError):
        normalize_image("not an image")
    with pytest.raises(ConfigurationError):
        Icon().set_image(-1)


def test_font_references():
    assert normalize_font("creepster") == "Creepster"
    assert normalize_font("fonts/families/Sarpanch.json") == "Sarpanch"
    assert normalize_font(12187370928) == "font://12187370928"
    with pytest.raises(ValueError):
        normalize_font("Comic Sans")


def test_set_text_font_applies_family_weight_and_style():
    icon = Icon().set_text_font("Bangers", "bold", "italic")

    label = icon.get_instance("IconLabel")
    assert (label["fontFamily"], label["fontWeight"], label["fontStyle"]) == ("Bangers", "Bold", "Italic")


def test_convenience_setters_target_schema_properties():
    icon = (
        Icon()
        .set_label("Shop")
        .set_image(99)
        .set_order(3)
        .set_corner_radius(0.5, 2)
        .set_width(60)
        .set_image_scale(0.7)
        .set_image_ratio(1.5)
        .set_text_size(18)
        .disable_overlay(True)
    )

    assert icon.resolve("IconLabel", "text") == "Shop"
    assert icon.resolve("IconImage", "image") == "asset://99"
    assert icon.resolve("Widget", "layoutOrder") == 3
    assert icon.get_instance("IconCorners") == {"cornerScale": 0.5, "cornerOffset": 2}
    assert icon.resolve("Widget", "minimumWidth") == 60
    assert icon.resolve("IconImageScale", "value") == 0.7
    assert icon.resolve("IconImageRatio", "aspectRatio") == 1.5
    assert icon.resolve("IconLabel", "textSize") == 18
    assert icon.resolve("IconOverlay", "visible") is False


def test_modify_base_theme_requests_redraw_of_every_icon(context):
    first = Icon()
    second = Icon()
    redrawn = []
    context.redraw_requested.connect(lambda uid: redrawn.append(uid))

    Icon.modify_base_theme(("IconLabel", "text", "All"))

    assert set(redrawn) >= {first.uid, second.uid}
    assert second.resolve("IconLabel", "text") == "All"


def test_child_theme_applies_to_current_and_future_children():
    parent = Icon()
    existing = Icon()
    parent.set_dropdown([existing])

    parent.modify_child_theme(("IconLabel", "textSize", 12))
    late = Icon().join_dropdown(parent)

    assert existing.resolve("IconLabel", "textSize") == 12
    assert late.resolve("IconLabel", "textSize") == 12
    assert parent.resolve("IconLabel", "textSize") == 16


def test_unknown_element_lookup_raises():
    with pytest.raises(ConfigurationError):
        Icon().get_instance("Nope")


def test_theme_table_lookup_order():
    base = ThemeTable()
    local = ThemeTable()
    base.apply(("Notice", "visible", False))

    assert resolve_property("Notice", "visible", IconState.DESELECTED, local, base) is False
    local.apply(("Notice", "visible", True, "Deselected"))
    assert resolve_property("Notice", "visible", IconState.DESELECTED, local, base) is True
    assert resolve_property("Notice", "visible", IconState.SELECTED, local, base) is False
