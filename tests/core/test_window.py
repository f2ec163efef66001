from __future__ import annotations

from chatscroll.core.window import MessageWindow


def _window(count: int, *, buffer: int = 0, estimated: int = 10) -> MessageWindow:
    window = MessageWindow(buffer=buffer, estimated_height=estimated)
    window.reset([f"m{i}" for i in range(count)])
    return window


def test_empty_window_has_no_range():
    window = MessageWindow()
    assert window.visible_range() == (0, -1)
    assert window.total_height == 0


def test_range_covers_viewport():
    window = _window(100)
    assert window.set_viewport(scroll_offset=0, visible_height=30) == (0, 3)
    assert window.set_viewport(scroll_offset=505, visible_height=30) == (50, 53)


def test_buffer_extends_range_both_ways():
    window = _window(100, buffer=20)
    assert window.set_viewport(scroll_offset=500, visible_height=30) == (48, 55)


def test_range_is_clamped_to_last_message():
    window = _window(5)
    assert window.set_viewport(scroll_offset=10_000, visible_height=30) == (4, 4)


def test_spacers_and_range_add_up_to_total():
    window = _window(100)
    start, end = window.set_viewport(scroll_offset=505, visible_height=30)
    top, bottom = window.spacer_heights(start, end)
    assert top == 500
    assert top + (end - start + 1) * 10 + bottom == window.total_height == 1000


def test_measurement_shifts_following_rows():
    window = _window(10)
    assert window.measure(2, 30)
    assert not window.measure(2, 30)
    assert not window.measure(99, 5)
    assert window.total_height == 120
    assert window.set_viewport(scroll_offset=45, visible_height=1) == (2, 2)


def test_reset_keeps_measurements_for_surviving_keys():
    window = _window(3)
    window.measure(1, 40)
    window.reset(["older", "m0", "m1", "m2"])
    assert window.total_height == 70


def test_append_extends_prefix():
    window = _window(2)
    window.append("m2")
    assert len(window) == 3
    assert window.total_height == 30
