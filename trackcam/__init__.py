"""TrackCam: coherent virtual trackball camera mode."""

__version__ = "0.1.0"

from trackcam.core.camera import Camera, TrackballCamera
from trackcam.core.controller import TrackballController
from trackcam.core.events import EventQueue
from trackcam.core.frame import Frame, Scope
from trackcam.core.input_mapper import InputConfig, InputMapper

__all__ = [
    "__version__",
    "Camera",
    "TrackballCamera",
    "TrackballController",
    "EventQueue",
    "Frame",
    "Scope",
    "InputConfig",
    "InputMapper",
]
