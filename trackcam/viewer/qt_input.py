"""Qt (PySide6) host adapter: Qt events -> raw trackball input events."""

from typing import Optional

import numpy as np
from PySide6.QtCore import QEvent, QObject, Qt
from PySide6.QtGui import QMatrix4x4

from trackcam.core.config import WHEEL_NOTCH
from trackcam.core.events import (
    ButtonChanged,
    EventQueue,
    KeyChanged,
    Modifiers,
    MouseButton,
    PointerMoved,
    Resized,
    Scrolled,
)

_BUTTONS = {
    Qt.MouseButton.LeftButton: MouseButton.LEFT,
    Qt.MouseButton.RightButton: MouseButton.RIGHT,
    Qt.MouseButton.MiddleButton: MouseButton.MIDDLE,
}

_MODIFIERS = (
    (Qt.KeyboardModifier.ShiftModifier, Modifiers.SHIFT),
    (Qt.KeyboardModifier.ControlModifier, Modifiers.CONTROL),
    (Qt.KeyboardModifier.AltModifier, Modifiers.ALT),
    (Qt.KeyboardModifier.MetaModifier, Modifiers.SUPER),
)

_KEYS_BY_NAME = {
    Qt.Key.Key_Return: "Return",
    Qt.Key.Key_Enter: "Return",
    Qt.Key.Key_Escape: "Escape",
    Qt.Key.Key_Space: "Space",
    Qt.Key.Key_Tab: "Tab",
    Qt.Key.Key_Backspace: "Backspace",
    Qt.Key.Key_Home: "Home",
    Qt.Key.Key_Shift: "LShift",
    Qt.Key.Key_Control: "LControl",
    Qt.Key.Key_Alt: "LAlt",
}


def _key_code(key) -> int:
    """Qt.Key member or plain int -> int."""
    return int(getattr(key, "value", key))


_KEYS = {_key_code(k): name for k, name in _KEYS_BY_NAME.items()}
_KEY_F1 = _key_code(Qt.Key.Key_F1)
_KEY_F35 = _key_code(Qt.Key.Key_F35)


def modifiers_from_qt(qt_modifiers) -> Modifiers:
    mods = Modifiers.NONE
    for qt_flag, flag in _MODIFIERS:
        if (qt_modifiers & qt_flag) == qt_flag:
            mods |= flag
    return mods


def key_name(key) -> Optional[str]:
    """Key name used in InputConfig bindings ("Return", "F", "5", "F1"); None if unnamed."""
    code = _key_code(key)
    if code in _KEYS:
        return _KEYS[code]
    if ord("0") <= code <= ord("9") or ord("A") <= code <= ord("Z"):
        return chr(code)
    if _KEY_F1 <= code <= _KEY_F35:
        return f"F{code - _KEY_F1 + 1}"
    return None


def translate(event: QEvent) -> list:
    """
    Raw input events for one Qt event (possibly none).
    Button presses and releases are preceded by a PointerMoved at the event
    position, since widgets without mouse tracking only see moves while a
    button is held.
    """
    etype = event.type()
    if etype == QEvent.Type.MouseMove:
        pos = event.position()
        return [PointerMoved(pos.x(), pos.y())]
    if etype in (QEvent.Type.MouseButtonPress, QEvent.Type.MouseButtonRelease):
        button = _BUTTONS.get(event.button())
        if button is None:
            return []
        pos = event.position()
        pressed = etype == QEvent.Type.MouseButtonPress
        return [
            PointerMoved(pos.x(), pos.y()),
            ButtonChanged(button, pressed, modifiers_from_qt(event.modifiers())),
        ]
    if etype == QEvent.Type.Wheel:
        delta = event.angleDelta().y()
        if delta == 0:
            return []
        return [Scrolled(delta / WHEEL_NOTCH)]
    if etype in (QEvent.Type.KeyPress, QEvent.Type.KeyRelease):
        if event.isAutoRepeat():
            return []
        name = key_name(event.key())
        if name is None:
            return []
        pressed = etype == QEvent.Type.KeyPress
        return [KeyChanged(name, pressed, modifiers_from_qt(event.modifiers()))]
    if etype == QEvent.Type.Resize:
        size = event.size()
        return [Resized(size.width(), size.height())]
    return []


def to_qmatrix(matrix: np.ndarray) -> QMatrix4x4:
    """Row-major 4x4 numpy matrix -> QMatrix4x4 (e.g. for shader uniforms)."""
    values = [float(v) for v in np.asarray(matrix, dtype=np.float64).reshape(16)]
    return QMatrix4x4(*values)


class TrackballEventFilter(QObject):
    """Event filter feeding a widget's input into an EventQueue. Events still reach the widget."""

    def __init__(self, queue: EventQueue, parent: QObject | None = None) -> None:
        super().__init__(parent)
        self._queue = queue

    @property
    def queue(self) -> EventQueue:
        return self._queue

    def eventFilter(self, watched: QObject, event: QEvent) -> bool:
        events = translate(event)
        if events:
            self._queue.extend(events)
        return False
