from __future__ import annotations

from overlay_icons import Icon, IconState


def test_select_then_deselect_fires_events_in_order(recorder):
    icon = Icon()
    recorder.attach(icon)

    icon.select().deselect()

    assert icon.state is IconState.DESELECTED
    assert recorder.log == [
        ("selected",),
        ("toggled", True),
        ("deselected",),
        ("toggled", False),
    ]


def test_select_is_idempotent(recorder):
    icon = Icon()
    recorder.attach(icon)

    icon.select()
    icon.select()

    assert recorder.names().count("selected") == 1
    assert icon.is_selected is True


def test_deselect_on_deselected_icon_is_noop(recorder):
    icon = Icon()
    recorder.attach(icon)

    icon.deselect()

    assert recorder.log == []


def test_auto_deselect_happens_before_new_selection(recorder):
    first = Icon().set_name("A")
    second = Icon().set_name("B")
    recorder.attach(first, "A")
    recorder.attach(second, "B")

    first.select()
    recorder.log.clear()
    second.select()

    assert first.is_selected is False
    assert second.is_selected is True
    assert recorder.names().index("A.deselected") < recorder.names().index("B.selected")


def test_auto_deselect_opt_out_keeps_other_icon_selected():
    sticky = Icon().auto_deselect(False)
    other = Icon()

    sticky.select()
    other.select()

    assert sticky.is_selected is True
    assert other.is_selected is True


def test_auto_deselect_disabled_context_wide(context):
    context.auto_deselect_enabled = False
    first = Icon().select()
    second = Icon().select()

    assert first.is_selected and second.is_selected


def test_selecting_dropdown_child_closes_auto_deselect_parent():
    parent = Icon()
    child = Icon()
    parent.set_dropdown([child]).select()

    child.select()

    assert parent.is_selected is False
    assert child.is_selected is True
    assert sum(icon.is_selected for icon in Icon.get_icons().values()) == 1


def test_dropdown_child_without_auto_deselect_keeps_parent_open():
    parent = Icon()
    child = Icon().auto_deselect(False)
    parent.set_dropdown([child]).select()

    child.select()

    assert parent.state is IconState.VIEWING
    assert child.is_selected is True


def test_one_click_emits_both_pairs_and_ends_deselected(recorder):
    icon = Icon().one_click()
    recorder.attach(icon)

    icon.select()

    assert icon.state is IconState.DESELECTED
    assert recorder.names() == ["selected", "toggled", "deselected", "toggled"]


def test_lock_blocks_input_but_not_programmatic_calls():
    icon = Icon().lock()

    icon.click()
    assert icon.is_selected is False

    icon.select()
    assert icon.is_selected is True

    icon.unlock().click()
    assert icon.is_selected is False


def test_disabled_icon_cannot_be_selected():
    icon = Icon().select()

    icon.set_enabled(False)
    assert icon.is_selected is False

    icon.select()
    icon.click()
    assert icon.is_selected is False
    assert icon.enabled is False


def test_viewing_entered_when_selected_with_group(recorder):
    parent = Icon()
    parent.set_menu([Icon()])
    recorder.attach(parent)

    parent.select()

    assert parent.state is IconState.VIEWING
    assert parent.is_viewing is True
    assert recorder.names() == ["selected", "toggled", "viewingStarted"]

    recorder.log.clear()
    parent.deselect()
    assert recorder.names() == ["viewingEnded", "deselected", "toggled"]


def test_callback_deselecting_during_select_stops_transition(recorder):
    icon = Icon()
    icon.bind_event("selected", lambda target: target.deselect())
    recorder.attach(icon)

    icon.select()

    assert icon.state is IconState.DESELECTED
    assert ("toggled", True) not in recorder.log
    assert ("toggled", False) in recorder.log
