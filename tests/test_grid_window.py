from __future__ import annotations

import threading

import cv2
import pytest

from flip3d.dashboard import GridWindow
from flip3d.grid_adapter import GridFlipAdapter
from flip3d.sides import Side
from flip3d.state_machine import FlipState

from conftest import FLIP_TICKS

# cell 40 + status strip 18 + margin 4
PITCH = 62


@pytest.fixture
def states():
    return [FlipState(i) for i in range(30)]


@pytest.fixture
def window(states, flip_config):
    adapter = GridFlipAdapter(40, states, config=flip_config)
    return GridWindow(adapter, threading.Event(), columns=3, visible_rows=2, cell_size=40, margin=4)


def _assert_slots_match(window, states):
    for position in window.visible_positions():
        host = window.host_at(position)
        assert host is not None
        assert states[position].host is host
        assert window.adapter.owner_of(host) is states[position]


def test_geometry(window):
    assert window.pitch == PITCH
    assert window.width == 3 * 44 + 4
    assert window.grid_height == 2 * PITCH + 4
    assert list(window.visible_positions()) == list(range(6))


def test_first_step_binds_visible_cards(window, states):
    window.step(0.0)
    assert window.pool_size == 6
    _assert_slots_match(window, states)
    assert states[6].host is None


def test_scrolling_reuses_a_bounded_pool(window, states):
    window.step(0.0)
    for _ in range(20):
        window.scroll(1)
        window.step(0.0)
        assert window.pool_size <= 9
        _assert_slots_match(window, states)

    assert window.scroll_offset == 10 * PITCH + 4 - window.grid_height
    assert window.host_at(29) is not None
    assert states[0].host is None

    for _ in range(30):
        window.scroll(-1)
    assert window.scroll_offset == 0


def test_click_flips_card_under_cursor(window, states):
    window.step(0.0)
    assert window.click(4 + 20, 4 + 18 + 20)
    assert states[0].in_progress
    assert not states[1].in_progress

    for t in FLIP_TICKS:
        window.step(t)
    assert states[0].current_side is Side.BACK
    assert window.host_at(0).visible_side is Side.BACK


def test_click_on_status_strip_or_gap_is_ignored(window, states):
    window.step(0.0)
    assert not window.click(4 + 20, 4 + 5)
    assert not window.click(1, 1)
    assert not any(s.in_progress for s in states)


def test_mouse_events(window, states):
    window.step(0.0)
    window._on_mouse_event(cv2.EVENT_MOUSEWHEEL, 0, 0, -120, None)
    assert window.scroll_offset == 40
    window._on_mouse_event(cv2.EVENT_MOUSEWHEEL, 0, 0, 120, None)
    assert window.scroll_offset == 0
    window._on_mouse_event(cv2.EVENT_LBUTTONDOWN, 4 + 44 + 20, 4 + 18 + 20, 0, None)
    assert states[1].in_progress


def test_force_all_reaches_off_screen_cards(window, states):
    window.step(0.0)
    window.force_all(Side.BACK)
    assert states[0].in_progress
    assert states[20].current_side is Side.BACK

    for t in FLIP_TICKS:
        window.step(t)
    assert all(s.current_side is Side.BACK for s in states)


def test_scrolling_away_mid_flip_resolves_card(window, states):
    window.step(0.0)
    window.click(4 + 20, 4 + 18 + 20)
    window.step(FLIP_TICKS[0])

    for _ in range(5):
        window.scroll(1)
    window.step(FLIP_TICKS[1])

    assert window.host_at(0) is None
    assert states[0].current_side is Side.BACK
    assert not states[0].in_progress


def test_render_shape(window):
    window.step(0.0)
    image = window.render()
    assert image.shape == (window.height, window.width, 3)


def test_error_list_keeps_last_ten(window):
    for i in range(15):
        window.add_error(f"error {i}")
    assert len(window.errors) == 10
    assert window.errors[-1].endswith("error 14")
