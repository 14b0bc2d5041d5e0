"""
Trackball controller: owns Frame, Scope, Mode and the drag session.

State machine over IDLE and DRAGGING(kind). Drag motion is always recomputed
from the session anchor (pointer position and frame at gesture start), never
accumulated move by move, so returning the pointer to the anchor restores the
anchor frame exactly and no numerical drift builds up.

Runtime input never raises: non-finite coordinates, a degenerate viewport or a
computed frame that is non-finite are logged and skipped, keeping the previous
frame.
"""
import math
from dataclasses import dataclass, replace
from enum import Enum
from typing import Iterable, Optional, Union

import numpy as np

from . import quaternion
from .config import DEFAULT_VIEWPORT, MAX_ZOOM_EXPONENT
from .events import (
    BeginPan,
    BeginRotate,
    ContinueDrag,
    DragKind,
    EndDrag,
    Reset,
    Resize,
    ToggleFirstPerson,
    ToggleProjection,
    Zoom,
)
from .exceptions import ConfigError
from .frame import Frame, Scope, renormalized
from .input_mapper import InputConfig
from .logger import get_logger
from .rotor import rotor, to_trackball, trackball_radius

logger = get_logger("controller")


class ControllerState(Enum):
    IDLE = "idle"
    DRAGGING = "dragging"


@dataclass(frozen=True)
class Orbit:
    """Eye orbits the target; the field of view is held fixed."""
    fov: float


@dataclass(frozen=True)
class FirstPerson:
    """Eye is fixed and the target moves around it at a held distance; zoom changes the field of view."""
    distance: float
    fov: float


Mode = Union[Orbit, FirstPerson]


@dataclass(frozen=True, eq=False)
class DragSession:
    """
    Transient drag state. ``anchor`` is None until a pointer position is known;
    ``moved`` records whether the pointer has left the anchor since the press.
    """
    kind: DragKind
    anchor: Optional[np.ndarray]
    anchor_frame: Frame
    moved: bool = False


def _finite(*values) -> bool:
    try:
        return all(math.isfinite(float(v)) for v in values)
    except (TypeError, ValueError):
        return False


class TrackballController:
    """
    Applies trackball operations to the camera frame.

    frame: initial alignment; also the frame Reset restores until replaced via
        ``reset_frame``.
    scope: distance / field-of-view bounds and clip factors.
    config: input configuration; only its sensitivities are read here.
    viewport: initial viewport size in pixels.
    """

    def __init__(
        self,
        frame: Frame,
        scope: Scope | None = None,
        config: InputConfig | None = None,
        viewport: tuple = DEFAULT_VIEWPORT,
    ) -> None:
        self._scope = scope or Scope()
        self._config = config or InputConfig()
        self._check_frame(frame)
        width, height = (float(v) for v in viewport)
        if not (_finite(width, height) and width > 0 and height > 0):
            raise ConfigError(f"viewport must be positive, got {viewport!r}")

        self._frame = frame
        self._reset = frame
        self._mode: Mode = Orbit(self._scope.fov)
        self._session: Optional[DragSession] = None
        self._pointer: Optional[tuple] = None
        self._viewport = (width, height)
        self._ortho = False
        self._revision = 0
        self._handlers = {
            BeginRotate: lambda op: self.begin_rotate(),
            BeginPan: lambda op: self.begin_pan(),
            ContinueDrag: lambda op: self.continue_drag(op.x, op.y),
            EndDrag: lambda op: self.end_drag(op.kind),
            Zoom: lambda op: self.zoom(op.delta),
            Reset: lambda op: self.reset(),
            ToggleFirstPerson: lambda op: self.toggle_first_person(),
            ToggleProjection: lambda op: self.toggle_projection(),
            Resize: lambda op: self.resize(op.width, op.height),
        }

    def _check_frame(self, frame: Frame) -> None:
        if not isinstance(frame, Frame):
            raise ConfigError(f"expected a Frame, got {type(frame).__name__}")
        distance = frame.distance()
        if not self._scope.contains_distance(distance):
            lo, hi = self._scope.distance_bounds
            raise ConfigError(f"frame distance {distance} outside distance_bounds ({lo}, {hi})")

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def frame(self) -> Frame:
        return self._frame

    @property
    def reset_frame(self) -> Frame:
        return self._reset

    @reset_frame.setter
    def reset_frame(self, frame: Frame) -> None:
        self._check_frame(frame)
        self._reset = frame

    @property
    def scope(self) -> Scope:
        return self._scope

    @property
    def config(self) -> InputConfig:
        return self._config

    @property
    def mode(self) -> Mode:
        return self._mode

    @property
    def first_person(self) -> bool:
        return isinstance(self._mode, FirstPerson)

    @property
    def fov(self) -> float:
        """Current vertical field of view (radians)."""
        return self._mode.fov

    @property
    def ortho(self) -> bool:
        return self._ortho

    @property
    def session(self) -> Optional[DragSession]:
        return self._session

    @property
    def state(self) -> ControllerState:
        return ControllerState.DRAGGING if self._session is not None else ControllerState.IDLE

    @property
    def viewport(self) -> tuple:
        return self._viewport

    @property
    def pointer(self) -> Optional[tuple]:
        return self._pointer

    @property
    def revision(self) -> int:
        """Incremented whenever frame, mode, projection or viewport change."""
        return self._revision

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------

    def apply(self, op) -> bool:
        """Apply one operation; returns True when the camera changed."""
        handler = self._handlers.get(type(op))
        if handler is None:
            logger.debug("Ignoring unknown operation %r", op)
            return False
        return handler(op)

    def process(self, ops: Iterable) -> int:
        """Apply operations in arrival order; returns how many changed the camera."""
        return sum(1 for op in ops if self.apply(op))

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def begin_rotate(self) -> bool:
        self._begin(DragKind.ROTATE)
        return False

    def begin_pan(self) -> bool:
        self._begin(DragKind.PAN)
        return False

    def _begin(self, kind: DragKind) -> None:
        self._session = DragSession(kind, self._normalized_pointer(), self._frame)
        logger.debug("Begin %s drag at %s", kind.value, self._pointer)

    def continue_drag(self, x: float, y: float) -> bool:
        if not _finite(x, y):
            logger.debug("Ignoring non-finite pointer position (%r, %r)", x, y)
            return False
        self._pointer = (float(x), float(y))
        session = self._session
        if session is None:
            return False
        current = self._normalized_pointer()
        if session.anchor is None:
            self._session = replace(session, anchor=current)
            return False
        if np.array_equal(current, session.anchor):
            return self._commit(session.anchor_frame)
        if not session.moved:
            self._session = session = replace(session, moved=True)
        if session.kind is DragKind.ROTATE:
            frame = self._rotated(session, current)
        else:
            frame = self._panned(session, current)
        return self._commit(frame)

    def end_drag(self, kind: Optional[DragKind] = None) -> bool:
        session = self._session
        if session is None or (kind is not None and kind is not session.kind):
            return False
        self._session = None
        logger.debug("End %s drag", session.kind.value)
        if (
            session.kind is DragKind.ROTATE
            and not session.moved
            and session.anchor is not None
            and not self.first_person
        ):
            return self._commit(self._slid_to(session))
        return False

    def zoom(self, delta: float) -> bool:
        """
        Orbit: scale the eye-target distance by exp(-delta * zoom_sensitivity)
        within distance_bounds. First person: scale the field of view instead,
        within fov_bounds.
        """
        if not _finite(delta):
            logger.debug("Ignoring non-finite zoom delta %r", delta)
            return False
        exponent = -delta * self._config.zoom_sensitivity
        exponent = max(-MAX_ZOOM_EXPONENT, min(MAX_ZOOM_EXPONENT, exponent))
        scale = math.exp(exponent)
        mode = self._mode
        if isinstance(mode, FirstPerson):
            fov = self._scope.clamp_fov(mode.fov * scale)
            if fov == mode.fov:
                return False
            self._mode = FirstPerson(mode.distance, fov)
            self._revision += 1
            changed = True
        else:
            frame = self._frame
            distance = self._scope.clamp_distance(frame.distance() * scale)
            if distance == frame.distance():
                return False
            eye = self._place_eye(frame, distance)
            changed = eye is not None and self._commit(renormalized(eye, frame.target, frame.up))
        if changed:
            self._rebase()
        return changed

    def _place_eye(self, frame: Frame, distance: float) -> Optional[np.ndarray]:
        """Eye at ``distance`` from the target whose measured distance stays inside the bounds."""
        lo, hi = self._scope.distance_bounds
        forward = frame.forward()
        target = frame.target
        for _ in range(16):
            eye = target - forward * distance
            actual = float(np.linalg.norm(target - eye))
            if lo <= actual <= hi:
                return eye
            if actual > hi:
                distance = float(np.nextafter(distance * hi / actual, 0.0))
            else:
                distance = float(np.nextafter(distance * lo / actual, math.inf))
        logger.warning("Could not place eye within distance bounds; zoom skipped")
        return None

    def reset(self) -> bool:
        """Restore the reset frame and terminate any drag."""
        self._session = None
        if self._frame == self._reset:
            return False
        self._frame = self._reset
        self._sync_mode()
        self._revision += 1
        logger.info("Camera reset to %r", self._reset)
        return True

    def toggle_first_person(self) -> bool:
        """Swap Orbit <-> FirstPerson. Eye, target and up stay where they are."""
        mode = self._mode
        if isinstance(mode, FirstPerson):
            self._mode = Orbit(mode.fov)
        else:
            self._mode = FirstPerson(self._frame.distance(), mode.fov)
        self._revision += 1
        self._rebase()
        logger.info("Camera mode: %s", type(self._mode).__name__)
        return True

    def toggle_projection(self) -> bool:
        self._ortho = not self._ortho
        self._revision += 1
        logger.info("Projection: %s", "orthographic" if self._ortho else "perspective")
        return True

    def resize(self, width: float, height: float) -> bool:
        if not (_finite(width, height) and width > 0 and height > 0):
            logger.debug("Ignoring degenerate viewport %r x %r", width, height)
            return False
        viewport = (float(width), float(height))
        if viewport == self._viewport:
            return False
        self._viewport = viewport
        self._revision += 1
        self._rebase()
        return True

    def look_at(self, target, eye, up) -> None:
        """Realign the camera. Raises ConfigError for an invalid or out-of-bounds frame."""
        frame = Frame.look_at(target, eye, up)
        self._check_frame(frame)
        self._session = None
        if frame != self._frame:
            self._frame = frame
            self._sync_mode()
            self._revision += 1

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _normalized_pointer(self) -> Optional[np.ndarray]:
        if self._pointer is None:
            return None
        return to_trackball(self._pointer[0], self._pointer[1], *self._viewport)

    def _rebase(self) -> None:
        """Re-anchor an active drag at the current pointer and frame."""
        if self._session is not None:
            self._session = DragSession(
                self._session.kind, self._normalized_pointer(), self._frame, self._session.moved
            )

    def _sync_mode(self) -> None:
        """First person holds the eye-target distance of the frame it was given."""
        if isinstance(self._mode, FirstPerson):
            self._mode = FirstPerson(self._frame.distance(), self._mode.fov)

    def _commit(self, frame: Optional[Frame]) -> bool:
        if frame is None or not frame.is_finite():
            logger.warning("Rejected degenerate frame update; keeping %r", self._frame)
            return False
        if frame == self._frame:
            return False
        self._frame = frame
        self._revision += 1
        return True

    def _rotated(self, session: DragSession, current: np.ndarray) -> Optional[Frame]:
        local = rotor(session.anchor, current, self._config.rotation_sensitivity)
        start = session.anchor_frame
        # The trackball turns the scene with the pointer, so the camera turns the other way.
        world = quaternion.conjugate(quaternion.change_basis(local, start.basis()))
        up = quaternion.rotate(world, start.up)
        if isinstance(self._mode, FirstPerson):
            look = quaternion.rotate(world, start.forward())
            look = look / np.linalg.norm(look)
            eye = start.eye
            target = eye + start.distance() * look
        else:
            target = start.target
            eye = target + quaternion.rotate(world, start.eye - start.target)
        return renormalized(eye, target, up)

    def _focus_scale(self, frame: Frame) -> float:
        """World units per trackball unit on the focus plane through the target."""
        width, height = self._viewport
        return trackball_radius(width, height) * 2.0 * frame.distance() * math.tan(0.5 * self.fov) / height

    def _panned(self, session: DragSession, current: np.ndarray) -> Optional[Frame]:
        # the grabbed point follows the pointer
        start = session.anchor_frame
        d = current - session.anchor
        basis = start.basis()
        offset = -(d[0] * basis[:, 0] + d[1] * basis[:, 1]) * self._focus_scale(start)
        return renormalized(start.eye + offset, start.target + offset, start.up)

    def _slid_to(self, session: DragSession) -> Optional[Frame]:
        """Click without drag: the focus-plane point under the pointer becomes the target."""
        start = session.anchor_frame
        a = session.anchor
        basis = start.basis()
        offset = (a[0] * basis[:, 0] + a[1] * basis[:, 1]) * self._focus_scale(start)
        return renormalized(start.eye + offset, start.target + offset, start.up)
