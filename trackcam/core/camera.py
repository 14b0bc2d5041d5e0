"""
Camera capability consumed by host renderers, and its trackball implementation.

A host needs five things from a camera: view and projection transforms,
unprojection for picking, frustum planes for culling, and a per-frame update
with the input events gathered since the last frame. Any object with those
methods satisfies ``Camera``; no base class is required.
"""
import math
from dataclasses import dataclass
from typing import Optional, Protocol, Sequence, runtime_checkable

import numpy as np

from . import transforms
from .config import DEFAULT_VIEWPORT
from .controller import TrackballController
from .frame import Frame, Scope
from .input_mapper import InputConfig, InputMapper
from .logger import get_logger

logger = get_logger("camera")


@runtime_checkable
class Camera(Protocol):
    def view_transform(self) -> np.ndarray: ...

    def projection_transform(self, viewport_aspect: Optional[float] = None) -> np.ndarray: ...

    def unproject(self, screen_xy, depth: float) -> Optional[np.ndarray]: ...

    def clip_planes(self) -> list: ...

    def update(self, events: Sequence, dt: float = 0.0) -> bool: ...


@dataclass(frozen=True, eq=False)
class Plane:
    """World-space plane n . p + offset = 0 with unit normal pointing into the frustum."""
    name: str
    normal: np.ndarray
    offset: float

    def signed_distance(self, point) -> float:
        return float(np.dot(self.normal, np.asarray(point, dtype=np.float64)) + self.offset)


def _readonly(arr: np.ndarray) -> np.ndarray:
    arr.setflags(write=False)
    return arr


class TrackballCamera:
    """
    Camera adapter over a TrackballController.

    Matrices are derived on demand and cached per (controller revision, aspect),
    so querying several transforms in one frame computes them once. A zero or
    non-finite aspect returns the previously cached matrices.
    """

    def __init__(self, controller: TrackballController, mapper: InputMapper | None = None) -> None:
        self.controller = controller
        self.mapper = mapper or InputMapper(controller.config)
        self._key: Optional[tuple] = None
        self._cache: dict = {}

    @classmethod
    def from_config(cls, config: dict) -> "TrackballCamera":
        """Build the whole stack from a config dict (see trackcam.config.load_config)."""
        scope = Scope.from_dict(config.get("scope"))
        input_config = InputConfig.from_dict(config.get("input"))
        frame = Frame.from_dict(config.get("frame") or {})
        viewport = tuple(config.get("viewport") or DEFAULT_VIEWPORT)
        controller = TrackballController(frame, scope, input_config, viewport)
        return cls(controller, InputMapper(input_config))

    # ------------------------------------------------------------------
    # Per-frame update
    # ------------------------------------------------------------------

    def update(self, events: Sequence, dt: float = 0.0) -> bool:
        """
        Map and apply the events gathered since the last frame, in arrival order.
        ``dt`` is accepted for host loops that pass frame time; motion is
        event-driven and does not depend on it. Returns True when the camera changed.
        """
        ops = self.mapper.map_all(events)
        return self.controller.process(ops) > 0

    # ------------------------------------------------------------------
    # Derived transforms
    # ------------------------------------------------------------------

    @property
    def frame(self) -> Frame:
        return self.controller.frame

    def eye(self) -> np.ndarray:
        return self.controller.frame.eye

    def near_far(self) -> tuple:
        """Near and far clip distances for the current eye-target distance."""
        return self.controller.scope.clip_planes(self.controller.frame.distance())

    def _viewport_aspect(self) -> float:
        width, height = self.controller.viewport
        return width / height

    def _matrices(self, viewport_aspect: Optional[float] = None) -> dict:
        aspect = self._viewport_aspect() if viewport_aspect is None else viewport_aspect
        try:
            aspect = float(aspect)
        except (TypeError, ValueError):
            aspect = math.nan
        if not (math.isfinite(aspect) and aspect > 0):
            if self._cache:
                logger.debug("Degenerate aspect %r; returning cached matrices", viewport_aspect)
                return self._cache
            aspect = self._viewport_aspect()

        key = (self.controller.revision, aspect)
        if key == self._key:
            return self._cache

        controller = self.controller
        frame = controller.frame
        distance = frame.distance()
        near, far = controller.scope.clip_planes(distance)
        view = transforms.look_at(frame.eye, frame.target, frame.up)
        if controller.ortho:
            proj = transforms.orthographic(distance * math.tan(0.5 * controller.fov), aspect, near, far)
        else:
            proj = transforms.perspective(controller.fov, aspect, near, far)
        transformation = proj @ view
        inverse = np.linalg.inv(transformation)
        planes = transforms.frustum_planes(transformation)

        self._key = key
        self._cache = {
            "view": _readonly(view),
            "projection": _readonly(proj),
            "transformation": _readonly(transformation),
            "inverse": _readonly(inverse),
            "planes": [
                Plane(name, _readonly(row[:3].copy()), float(row[3]))
                for name, row in zip(transforms.PLANE_NAMES, planes)
            ],
        }
        return self._cache

    def view_transform(self) -> np.ndarray:
        """Right-handed look-at matrix (world to view)."""
        return self._matrices()["view"]

    def projection_transform(self, viewport_aspect: Optional[float] = None) -> np.ndarray:
        """Perspective (or orthographic) projection for the given or current aspect."""
        return self._matrices(viewport_aspect)["projection"]

    def transformation(self) -> np.ndarray:
        """projection @ view."""
        return self._matrices()["transformation"]

    def inverse_transformation(self) -> np.ndarray:
        return self._matrices()["inverse"]

    def clip_planes(self) -> list:
        """Six world-space frustum planes: left, right, bottom, top, near, far."""
        return list(self._matrices()["planes"])

    def unproject(self, screen_xy, depth: float) -> Optional[np.ndarray]:
        """
        World point for normalized device x/y in [-1, 1] and window depth in
        [0, 1] (0 = near plane, 1 = far plane). None for non-finite input.
        """
        x, y = (float(v) for v in screen_xy)
        if not all(math.isfinite(v) for v in (x, y, depth)):
            return None
        point = transforms.unproject(self.inverse_transformation(), x, y, float(depth))
        return point if np.all(np.isfinite(point)) else None

    def unproject_ray(self, screen_xy) -> Optional[tuple]:
        """Picking ray (origin on the near plane, unit direction) through a NDC position."""
        near = self.unproject(screen_xy, 0.0)
        far = self.unproject(screen_xy, 1.0)
        if near is None or far is None:
            return None
        direction = far - near
        return near, direction / np.linalg.norm(direction)

    def project(self, point) -> Optional[np.ndarray]:
        """NDC x, y and window depth of a world point; None behind the eye."""
        clip = self.transformation() @ np.append(np.asarray(point, dtype=np.float64), 1.0)
        if clip[3] <= 0.0:
            return None
        ndc = clip[:3] / clip[3]
        return np.array([ndc[0], ndc[1], 0.5 * (ndc[2] + 1.0)])
