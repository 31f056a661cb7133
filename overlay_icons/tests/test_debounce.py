from __future__ import annotations

import asyncio

from overlay_icons import Icon


def test_debounce_locks_until_timer_fires(scheduler):
    icon = Icon()

    icon.debounce(0.5)
    assert icon.locked is True
    icon.click()
    assert icon.is_selected is False

    scheduler.advance(499)
    assert icon.locked is True
    scheduler.advance(1)
    assert icon.locked is False

    icon.click()
    assert icon.is_selected is True


def test_overlapping_debounces_hold_until_last_release(scheduler):
    icon = Icon()

    icon.debounce(1.0)
    scheduler.advance(500)
    icon.debounce(1.0)

    scheduler.advance(500)
    assert icon.locked is True
    scheduler.advance(500)
    assert icon.locked is False


def test_manual_unlock_does_not_cut_pending_debounce(scheduler):
    icon = Icon().lock()
    icon.debounce(0.2)

    icon.unlock()
    assert icon.locked is True

    scheduler.advance(200)
    assert icon.locked is False


def test_destroy_cancels_pending_debounce(scheduler):
    icon = Icon()
    icon.debounce(2.0)
    assert scheduler.pending == 1

    icon.destroy()

    assert scheduler.pending == 0
    assert scheduler.cancelled


def test_debounce_async_suspends_then_unlocks():
    icon = Icon()
    observed = []

    async def scenario():
        task = asyncio.ensure_future(icon.debounce_async(0.01))
        await asyncio.sleep(0)
        observed.append(icon.locked)
        await task
        observed.append(icon.locked)

    asyncio.run(scenario())

    assert observed == [True, False]
