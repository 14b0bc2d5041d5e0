"""
Matrix helpers for the camera adapter (OpenGL conventions).

View space is right-handed, the camera looks down -z with y up. Clip space
depth runs from -1 (near) to +1 (far); window depth from 0 to 1.
"""

import math

import numpy as np

PLANE_NAMES = ("left", "right", "bottom", "top", "near", "far")


def look_at(eye: np.ndarray, target: np.ndarray, up: np.ndarray) -> np.ndarray:
    """World-to-view matrix."""
    forward = target - eye
    forward = forward / np.linalg.norm(forward)
    right = np.cross(forward, up)
    right = right / np.linalg.norm(right)
    true_up = np.cross(right, forward)

    view = np.eye(4)
    view[0, 0:3] = right
    view[1, 0:3] = true_up
    view[2, 0:3] = -forward
    view[0, 3] = -np.dot(right, eye)
    view[1, 3] = -np.dot(true_up, eye)
    view[2, 3] = np.dot(forward, eye)
    return view


def perspective(fov_y: float, aspect: float, near: float, far: float) -> np.ndarray:
    """Perspective projection with vertical field of view ``fov_y`` (radians)."""
    f = 1.0 / math.tan(0.5 * fov_y)
    proj = np.zeros((4, 4))
    proj[0, 0] = f / aspect
    proj[1, 1] = f
    proj[2, 2] = (far + near) / (near - far)
    proj[2, 3] = 2.0 * far * near / (near - far)
    proj[3, 2] = -1.0
    return proj


def orthographic(half_height: float, aspect: float, near: float, far: float) -> np.ndarray:
    """Symmetric orthographic projection."""
    half_width = half_height * aspect
    proj = np.eye(4)
    proj[0, 0] = 1.0 / half_width
    proj[1, 1] = 1.0 / half_height
    proj[2, 2] = -2.0 / (far - near)
    proj[2, 3] = -(far + near) / (far - near)
    return proj


def unproject(inverse: np.ndarray, x_ndc: float, y_ndc: float, depth: float) -> np.ndarray:
    """World point for NDC x/y and window depth in [0, 1]."""
    clip = np.array([x_ndc, y_ndc, 2.0 * depth - 1.0, 1.0])
    world = inverse @ clip
    return world[:3] / world[3]


def frustum_planes(transformation: np.ndarray) -> np.ndarray:
    """
    Six world-space planes (a, b, c, d) from a projection @ view matrix,
    ordered as PLANE_NAMES. Normals point inward and have unit length, so
    a*x + b*y + c*z + d >= 0 inside the frustum.
    """
    m = transformation
    rows = np.array([
        m[3] + m[0],  # left
        m[3] - m[0],  # right
        m[3] + m[1],  # bottom
        m[3] - m[1],  # top
        m[3] + m[2],  # near
        m[3] - m[2],  # far
    ])
    norms = np.linalg.norm(rows[:, :3], axis=1)
    return rows / norms[:, np.newaxis]
