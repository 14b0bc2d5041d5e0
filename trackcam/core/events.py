"""
Raw input events, abstract trackball operations, and the per-frame event queue.

Raw events are what a host event loop delivers (pointer position, button and
key state, scroll delta, viewport size). The input mapper turns them into
operations which the controller applies.
"""
import math
from collections import deque
from dataclasses import dataclass
from enum import Enum, Flag
from typing import Any, Iterable, Mapping, Optional, Union

from .config import DEFAULT_QUEUE_SIZE
from .exceptions import ValidationError
from .logger import get_logger

logger = get_logger("events")


class MouseButton(Enum):
    LEFT = "left"
    RIGHT = "right"
    MIDDLE = "middle"

    @classmethod
    def parse(cls, value) -> Optional["MouseButton"]:
        """Button from its name; None stays None (binding disabled)."""
        if value is None or isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError as e:
            raise ValidationError(f"unknown mouse button {value!r}") from e


class Modifiers(Flag):
    NONE = 0
    SHIFT = 1
    CONTROL = 2
    ALT = 4
    SUPER = 8

    @classmethod
    def parse(cls, value) -> "Modifiers":
        """Modifier set from a name, a list of names, or None (no modifiers)."""
        if value is None:
            return cls.NONE
        if isinstance(value, cls):
            return value
        names = [value] if isinstance(value, str) else list(value)
        mods = cls.NONE
        for name in names:
            try:
                mods |= cls[str(name).strip().upper()]
            except KeyError as e:
                raise ValidationError(f"unknown modifier {name!r}") from e
        return mods


# ---------------------------------------------------------------------------
# Raw device events
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class PointerMoved:
    x: float
    y: float


@dataclass(frozen=True)
class ButtonChanged:
    button: MouseButton
    pressed: bool
    modifiers: Modifiers = Modifiers.NONE


@dataclass(frozen=True)
class Scrolled:
    """Scroll delta in wheel notches; positive scrolls away from the user (zoom in)."""
    delta: float


@dataclass(frozen=True)
class KeyChanged:
    key: str
    pressed: bool
    modifiers: Modifiers = Modifiers.NONE


@dataclass(frozen=True)
class Resized:
    width: float
    height: float


InputEvent = Union[PointerMoved, ButtonChanged, Scrolled, KeyChanged, Resized]


# ---------------------------------------------------------------------------
# Abstract operations
# ---------------------------------------------------------------------------

class DragKind(Enum):
    ROTATE = "rotate"
    PAN = "pan"


@dataclass(frozen=True)
class BeginRotate:
    pass


@dataclass(frozen=True)
class BeginPan:
    pass


@dataclass(frozen=True)
class ContinueDrag:
    x: float
    y: float


@dataclass(frozen=True)
class EndDrag:
    """Ends the drag of ``kind``; None ends any drag."""
    kind: Optional[DragKind] = None


@dataclass(frozen=True)
class Zoom:
    delta: float


@dataclass(frozen=True)
class Reset:
    pass


@dataclass(frozen=True)
class ToggleFirstPerson:
    pass


@dataclass(frozen=True)
class ToggleProjection:
    pass


@dataclass(frozen=True)
class Resize:
    width: float
    height: float


Operation = Union[
    BeginRotate, BeginPan, ContinueDrag, EndDrag, Zoom, Reset,
    ToggleFirstPerson, ToggleProjection, Resize,
]


# ---------------------------------------------------------------------------
# Parsing (replay scripts, YAML)
# ---------------------------------------------------------------------------

def _number(data: Mapping[str, Any], key: str) -> float:
    try:
        value = float(data[key])
    except KeyError as e:
        raise ValidationError(f"event {data.get('type')!r} is missing {key!r}") from e
    except (TypeError, ValueError) as e:
        raise ValidationError(f"event field {key!r} must be a number, got {data[key]!r}") from e
    if math.isnan(value):
        raise ValidationError(f"event field {key!r} is NaN")
    return value


def event_from_dict(data: Mapping[str, Any]) -> InputEvent:
    """
    Parse one raw event, e.g. {"type": "move", "x": 400, "y": 300} or
    {"type": "button", "button": "left", "pressed": true, "modifiers": ["shift"]}.
    Types: move, button, scroll, key, resize.
    """
    if not isinstance(data, Mapping):
        raise ValidationError(f"event must be a mapping, got {data!r}")
    kind = str(data.get("type", "")).strip().lower()
    if kind == "move":
        return PointerMoved(_number(data, "x"), _number(data, "y"))
    if kind == "button":
        button = MouseButton.parse(data.get("button"))
        if button is None:
            raise ValidationError("button event is missing 'button'")
        return ButtonChanged(button, bool(data.get("pressed", True)), Modifiers.parse(data.get("modifiers")))
    if kind == "scroll":
        return Scrolled(_number(data, "delta"))
    if kind == "key":
        if not data.get("key"):
            raise ValidationError("key event is missing 'key'")
        return KeyChanged(str(data["key"]), bool(data.get("pressed", True)), Modifiers.parse(data.get("modifiers")))
    if kind == "resize":
        return Resized(_number(data, "width"), _number(data, "height"))
    raise ValidationError(f"unknown event type {data.get('type')!r}")


# ---------------------------------------------------------------------------
# Per-frame queue
# ---------------------------------------------------------------------------

class EventQueue:
    """
    Bounded FIFO of raw events, drained once per rendered frame.

    Consecutive pointer moves collapse into the latest one; drag motion is
    computed from the drag anchor, so intermediate positions carry no
    information. When full, the oldest pointer move or scroll is dropped;
    button, key and resize events are kept, so a release is never lost while
    there is anything else to discard.
    """

    _TRANSITIONS = (ButtonChanged, KeyChanged, Resized)

    def __init__(self, maxsize: int = DEFAULT_QUEUE_SIZE) -> None:
        if maxsize < 1:
            raise ValueError("maxsize must be >= 1")
        self._events: deque = deque()
        self._maxsize = maxsize
        self.dropped = 0

    def __len__(self) -> int:
        return len(self._events)

    @property
    def maxsize(self) -> int:
        return self._maxsize

    def push(self, event: InputEvent) -> None:
        if isinstance(event, PointerMoved) and self._events and isinstance(self._events[-1], PointerMoved):
            self._events[-1] = event
            return
        if len(self._events) >= self._maxsize:
            index = self._discardable()
            if index is None and not isinstance(event, self._TRANSITIONS):
                self._drop(event)
                return
            if index is None:
                index = 0
            dropped = self._events[index]
            del self._events[index]
            self._drop(dropped)
        self._events.append(event)

    def _discardable(self) -> Optional[int]:
        """Index of the oldest queued pointer move or scroll."""
        for i, queued in enumerate(self._events):
            if not isinstance(queued, self._TRANSITIONS):
                return i
        return None

    def _drop(self, event: InputEvent) -> None:
        self.dropped += 1
        logger.warning("Event queue full (%d); dropped %r", self._maxsize, event)

    def extend(self, events: Iterable[InputEvent]) -> None:
        for event in events:
            self.push(event)

    def drain(self) -> list:
        """Return all queued events in arrival order and empty the queue."""
        events = list(self._events)
        self._events.clear()
        return events
