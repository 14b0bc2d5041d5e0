"""
Raw event parsing and the per-frame EventQueue (coalescing, overflow).
"""
import math

import pytest

from trackcam.core.events import (
    ButtonChanged,
    EventQueue,
    KeyChanged,
    Modifiers,
    MouseButton,
    PointerMoved,
    Resized,
    Scrolled,
    event_from_dict,
)
from trackcam.core.exceptions import ValidationError


def test_consecutive_moves_coalesce():
    queue = EventQueue()
    queue.extend([PointerMoved(1, 1), PointerMoved(2, 2), PointerMoved(3, 3)])
    assert queue.drain() == [PointerMoved(3, 3)]
    assert len(queue) == 0


def test_moves_do_not_coalesce_across_other_events():
    queue = EventQueue()
    events = [
        PointerMoved(1, 1),
        ButtonChanged(MouseButton.LEFT, True),
        PointerMoved(2, 2),
        PointerMoved(4, 4),
        Scrolled(1.0),
        PointerMoved(5, 5),
    ]
    queue.extend(events)
    assert queue.drain() == [
        PointerMoved(1, 1),
        ButtonChanged(MouseButton.LEFT, True),
        PointerMoved(4, 4),
        Scrolled(1.0),
        PointerMoved(5, 5),
    ]


def test_overflow_drops_oldest(caplog):
    queue = EventQueue(maxsize=2)
    queue.push(Scrolled(1.0))
    queue.push(Scrolled(2.0))
    queue.push(Scrolled(3.0))
    assert queue.dropped == 1
    assert queue.drain() == [Scrolled(2.0), Scrolled(3.0)]
    assert "dropped" in caplog.text


def test_maxsize_must_be_positive():
    with pytest.raises(ValueError):
        EventQueue(0)
    assert EventQueue(5).maxsize == 5


def test_event_from_dict_types():
    assert event_from_dict({"type": "move", "x": 10, "y": "20"}) == PointerMoved(10.0, 20.0)
    assert event_from_dict({"type": "button", "button": "Left", "pressed": False, "modifiers": "shift"}) == (
        ButtonChanged(MouseButton.LEFT, False, Modifiers.SHIFT)
    )
    assert event_from_dict({"type": "scroll", "delta": -2}) == Scrolled(-2.0)
    assert event_from_dict({"type": "key", "key": "Return"}) == KeyChanged("Return", True)
    assert event_from_dict({"type": "resize", "width": 640, "height": 480}) == Resized(640.0, 480.0)


@pytest.mark.parametrize("data", [
    {"type": "teleport"},
    {"type": "move", "x": 1},
    {"type": "move", "x": "left", "y": 0},
    {"type": "move", "x": math.nan, "y": 0},
    {"type": "button"},
    {"type": "button", "button": "thumb"},
    {"type": "key"},
    {"type": "key", "key": "A", "modifiers": ["hyper"]},
    ["move", 1, 2],
])
def test_event_from_dict_rejects_malformed(data):
    with pytest.raises(ValidationError):
        event_from_dict(data)


def test_modifiers_parse():
    assert Modifiers.parse(None) == Modifiers.NONE
    assert Modifiers.parse("alt") == Modifiers.ALT
    assert Modifiers.parse(["Shift", "super"]) == Modifiers.SHIFT | Modifiers.SUPER
    assert MouseButton.parse(None) is None
    assert MouseButton.parse("RIGHT") is MouseButton.RIGHT


def test_overflow_keeps_button_transitions():
    queue = EventQueue(maxsize=3)
    press = ButtonChanged(MouseButton.LEFT, True)
    release = ButtonChanged(MouseButton.LEFT, False)
    queue.extend([press, PointerMoved(5, 5), release])
    queue.push(Scrolled(1.0))
    assert queue.drain() == [press, release, Scrolled(1.0)]
    assert queue.dropped == 1


def test_overflow_refuses_moves_when_only_transitions_queued():
    queue = EventQueue(maxsize=2)
    press = ButtonChanged(MouseButton.LEFT, True)
    release = ButtonChanged(MouseButton.LEFT, False)
    queue.extend([press, release, PointerMoved(1, 1)])
    assert queue.drain() == [press, release]

    key = KeyChanged("F", True)
    queue.extend([press, release, key])
    assert queue.drain() == [release, key]
    assert queue.dropped == 2
