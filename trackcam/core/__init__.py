from .frame import Frame, Scope
from .events import (
    MouseButton, Modifiers, PointerMoved, ButtonChanged, Scrolled, KeyChanged, Resized,
    DragKind, BeginRotate, BeginPan, ContinueDrag, EndDrag, Zoom, Reset,
    ToggleFirstPerson, ToggleProjection, Resize, EventQueue, event_from_dict,
)
from .rotor import rotor, lift, to_trackball, trackball_radius
from .input_mapper import InputConfig, InputMapper
from .controller import TrackballController, ControllerState, Orbit, FirstPerson, DragSession
from .camera import Camera, Plane, TrackballCamera
from .exceptions import TrackCamError, ConfigError, ValidationError
from .logger import get_logger, setup_logging

__all__ = [
    "Frame", "Scope",
    "MouseButton", "Modifiers", "PointerMoved", "ButtonChanged", "Scrolled", "KeyChanged", "Resized",
    "DragKind", "BeginRotate", "BeginPan", "ContinueDrag", "EndDrag", "Zoom", "Reset",
    "ToggleFirstPerson", "ToggleProjection", "Resize", "EventQueue", "event_from_dict",
    "rotor", "lift", "to_trackball", "trackball_radius",
    "InputConfig", "InputMapper",
    "TrackballController", "ControllerState", "Orbit", "FirstPerson", "DragSession",
    "Camera", "Plane", "TrackballCamera",
    "TrackCamError", "ConfigError", "ValidationError",
    "get_logger", "setup_logging",
]
