"""Unit quaternion helpers.

Quaternions are numpy arrays laid out as ``[w, x, y, z]``.
"""

import math

import numpy as np

from .config import EPSILON


def identity() -> np.ndarray:
    """Identity rotation."""
    return np.array([1.0, 0.0, 0.0, 0.0])


def from_axis_angle(axis: np.ndarray, angle: float) -> np.ndarray:
    """Rotation of ``angle`` radians about ``axis`` (normalized here).

    A zero axis yields the identity.
    """
    axis = np.asarray(axis, dtype=np.float64)
    norm = float(np.linalg.norm(axis))
    if norm < EPSILON:
        return identity()
    half = 0.5 * angle
    xyz = axis / norm * math.sin(half)
    return np.array([math.cos(half), xyz[0], xyz[1], xyz[2]])


def conjugate(q: np.ndarray) -> np.ndarray:
    """Inverse of a unit quaternion."""
    return np.array([q[0], -q[1], -q[2], -q[3]])


def rotate(q: np.ndarray, vec: np.ndarray) -> np.ndarray:
    """Rotate a 3-vector by a unit quaternion.

    The identity quaternion returns ``vec`` bit-for-bit.
    """
    w = q[0]
    u = np.asarray(q[1:], dtype=np.float64)
    vec = np.asarray(vec, dtype=np.float64)
    cross1 = np.cross(u, vec) + w * vec
    cross2 = np.cross(u, cross1)
    return vec + 2.0 * cross2


def change_basis(q: np.ndarray, basis: np.ndarray) -> np.ndarray:
    """Express a rotation given in a local frame in the parent frame.

    ``basis`` is the 3x3 local-to-parent rotation matrix (orthonormal columns).
    """
    xyz = basis @ np.asarray(q[1:], dtype=np.float64)
    return np.array([q[0], xyz[0], xyz[1], xyz[2]])
