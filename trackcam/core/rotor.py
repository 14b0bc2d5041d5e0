"""
Exponential-map rotor: pointer displacement -> trackball rotation.

Screen positions are first normalized to trackball coordinates: origin at the
viewport centre, x to the right, y up, one unit = trackball radius = half the
larger viewport dimension.

The anchor of a drag is lifted onto the virtual trackball: inside r^2 <= 1/2 onto
the unit sphere, beyond that onto the hyperbolic sheet z = 1/(2r). The two
surfaces meet at r = 1/sqrt(2) and the sheet never becomes undefined, so a drag
keeps rotating past the trackball circle where a plain arcball saturates.

The displacement d is then treated as a tangent vector at the lifted anchor and
mapped through the exponential map: the rotation angle is |d| (arc length on the
unit sphere equals the straight screen distance, not the chord), the axis is
lift(anchor) x d. A straight drag from the centre to the edge of the trackball
circle therefore rotates by exactly one radian. The caller rotates both the eye
offset and the up vector with the result, which parallel-transports up along the
geodesic and avoids roll drift.
"""

import math
from typing import Optional

import numpy as np

from . import quaternion
from .config import EPSILON

SHEET_RADIUS_SQ = 0.5

# Camera-local axis orthogonal to the view direction (z) and up (y)
FALLBACK_AXIS = np.array([1.0, 0.0, 0.0])


def trackball_radius(width: float, height: float) -> float:
    """Trackball radius in pixels: half the larger viewport dimension."""
    return 0.5 * max(width, height)


def to_trackball(x: float, y: float, width: float, height: float) -> Optional[np.ndarray]:
    """
    Map a pixel position (origin top-left, y down) to trackball coordinates.
    Returns None for non-finite input or a degenerate viewport.
    """
    if not all(math.isfinite(v) for v in (x, y, width, height)):
        return None
    if width <= 0 or height <= 0:
        return None
    radius = trackball_radius(width, height)
    return np.array([(x - 0.5 * width) / radius, (0.5 * height - y) / radius])


def lift(point: np.ndarray) -> np.ndarray:
    """Lift a trackball position onto the sphere or the hyperbolic sheet."""
    x, y = float(point[0]), float(point[1])
    r_sq = x * x + y * y
    if r_sq <= SHEET_RADIUS_SQ:
        z = math.sqrt(1.0 - r_sq)
    else:
        z = 0.5 / math.sqrt(r_sq)
    return np.array([x, y, z])


def rotor(anchor: np.ndarray, current: np.ndarray, sensitivity: float = 1.0) -> np.ndarray:
    """
    Rotation (camera-local quaternion) rolling the trackball from ``anchor`` to
    ``current``. Zero displacement gives the identity.
    """
    d = np.asarray(current, dtype=np.float64) - np.asarray(anchor, dtype=np.float64)
    length = math.hypot(float(d[0]), float(d[1]))
    if length < EPSILON:
        return quaternion.identity()

    p = lift(anchor)
    p /= np.linalg.norm(p)
    axis = np.cross(p, np.array([d[0], d[1], 0.0]))
    norm = float(np.linalg.norm(axis))
    if not math.isfinite(norm) or norm < EPSILON * length:
        axis = FALLBACK_AXIS
    return quaternion.from_axis_angle(axis, length * sensitivity)
