"""Input state, key maps and per-tick snapshots."""

import threading

import pytest

from controls import BROWSER_KEYMAP, MPL_KEYMAP, Control, ControlSnapshot, InputState


def test_key_maps_cover_every_control():
    assert set(BROWSER_KEYMAP.values()) == set(Control)
    assert set(MPL_KEYMAP.values()) == set(Control)


def test_key_events_toggle_held_state():
    inputs = InputState()
    inputs.key_down("KeyW")
    inputs.key_down("ArrowUp")
    assert inputs.snapshot().held == {Control.PITCH_FORWARD, Control.THROTTLE_UP}

    inputs.key_up("KeyW")
    assert inputs.snapshot().held == {Control.THROTTLE_UP}


def test_unmapped_keys_are_ignored():
    inputs = InputState()
    inputs.key_down("F13")
    inputs.key_up("Escape")
    assert inputs.snapshot().held == frozenset()


def test_matplotlib_keymap():
    inputs = InputState(MPL_KEYMAP)
    inputs.key_down("left")
    inputs.key_down("r")
    assert inputs.snapshot().held == {Control.YAW_LEFT, Control.RESET}


def test_set_by_name_and_unknown_name():
    inputs = InputState()
    inputs.set("ROLL_RIGHT", True)
    assert inputs.snapshot().is_held(Control.ROLL_RIGHT)
    with pytest.raises(KeyError):
        inputs.set("BARREL_ROLL", True)


def test_snapshot_is_unaffected_by_later_events():
    inputs = InputState()
    inputs.set(Control.YAW_RIGHT, True)
    snapshot = inputs.snapshot()
    inputs.set(Control.YAW_RIGHT, False)
    inputs.set(Control.THROTTLE_DOWN, True)
    assert snapshot.held == {Control.YAW_RIGHT}


def test_apply_and_release_all():
    inputs = InputState()
    inputs.apply([Control.PITCH_BACK, Control.ROLL_LEFT])
    assert inputs.snapshot().held == {Control.PITCH_BACK, Control.ROLL_LEFT}
    inputs.apply([Control.RESET])
    assert inputs.snapshot().held == {Control.RESET}
    inputs.release_all()
    assert inputs.snapshot().held == frozenset()


def test_axis_cancels_opposite_holds():
    both = ControlSnapshot.of(Control.YAW_LEFT, Control.YAW_RIGHT)
    assert both.axis(Control.YAW_RIGHT, Control.YAW_LEFT) == 0
    assert ControlSnapshot.of(Control.YAW_LEFT).axis(Control.YAW_RIGHT, Control.YAW_LEFT) == 1
    assert ControlSnapshot.of(Control.YAW_RIGHT).axis(Control.YAW_RIGHT, Control.YAW_LEFT) == -1
    assert ControlSnapshot().axis(Control.YAW_RIGHT, Control.YAW_LEFT) == 0


def test_snapshot_names_are_sorted():
    snapshot = ControlSnapshot.of(Control.THROTTLE_UP, Control.PITCH_BACK)
    assert snapshot.names() == ["PITCH_BACK", "THROTTLE_UP"]


def test_concurrent_writers_never_tear_a_snapshot():
    inputs = InputState()
    pair = [Control.ROLL_LEFT, Control.THROTTLE_UP]
    stop = threading.Event()

    def writer():
        held = False
        while not stop.is_set():
            held = not held
            inputs.apply(pair if held else [])

    thread = threading.Thread(target=writer)
    thread.start()
    try:
        for _ in range(2000):
            held = inputs.snapshot().held
            assert held in (frozenset(), frozenset(pair))
    finally:
        stop.set()
        thread.join()
