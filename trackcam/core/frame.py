"""
Frame and Scope: camera alignment and its user boundary conditions.

Both are immutable values. A Frame's vectors are read-only float64 arrays, so
the controller can hand the very same object to the camera adapter.
"""

import math
from dataclasses import dataclass
from typing import Any, Mapping

import numpy as np

from .config import (
    DEFAULT_CLIP_FACTORS,
    DEFAULT_DISTANCE_BOUNDS,
    DEFAULT_FOV,
    DEFAULT_FOV_BOUNDS,
    EPSILON,
)
from .exceptions import ConfigError


def _vec3(value, name: str) -> np.ndarray:
    arr = np.array(value, dtype=np.float64).reshape(-1)
    if arr.shape != (3,):
        raise ConfigError(f"{name} must have 3 components, got {arr.shape[0]}")
    arr.setflags(write=False)
    return arr


def _normalize(vec: np.ndarray) -> np.ndarray:
    return vec / float(np.linalg.norm(vec))


@dataclass(frozen=True, eq=False)
class Frame:
    """Camera eye, target (focus point) and unit up vector."""

    eye: np.ndarray
    target: np.ndarray
    up: np.ndarray

    def __post_init__(self) -> None:
        object.__setattr__(self, "eye", _vec3(self.eye, "eye"))
        object.__setattr__(self, "target", _vec3(self.target, "target"))
        object.__setattr__(self, "up", _vec3(self.up, "up"))

    @classmethod
    def look_at(cls, target, eye, up) -> "Frame":
        """
        Validating constructor. Orthonormalizes ``up`` against the view direction.
        Raises ConfigError for non-finite input, coincident eye/target, or an up
        vector parallel to the view direction.
        """
        target = np.asarray(target, dtype=np.float64)
        eye = np.asarray(eye, dtype=np.float64)
        up = np.asarray(up, dtype=np.float64)
        for name, vec in (("target", target), ("eye", eye), ("up", up)):
            if vec.shape != (3,) or not np.all(np.isfinite(vec)):
                raise ConfigError(f"{name} must be 3 finite floats, got {vec!r}")
        offset = target - eye
        distance = float(np.linalg.norm(offset))
        if distance < EPSILON:
            raise ConfigError("eye and target coincide")
        ortho = orthonormal_up(offset / distance, up)
        if ortho is None:
            raise ConfigError("up is parallel to the view direction")
        return cls(eye=eye, target=target, up=ortho)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Frame):
            return NotImplemented
        return (
            np.array_equal(self.eye, other.eye)
            and np.array_equal(self.target, other.target)
            and np.array_equal(self.up, other.up)
        )

    __hash__ = None

    def __repr__(self) -> str:
        def fmt(v):
            return "(" + ", ".join(f"{c:.4f}" for c in v) + ")"
        return f"Frame(eye={fmt(self.eye)}, target={fmt(self.target)}, up={fmt(self.up)})"

    def distance(self) -> float:
        """Distance between eye and target."""
        return float(np.linalg.norm(self.target - self.eye))

    def forward(self) -> np.ndarray:
        """Unit view direction (eye towards target)."""
        return _normalize(self.target - self.eye)

    def right(self) -> np.ndarray:
        return _normalize(np.cross(self.forward(), self.up))

    def basis(self) -> np.ndarray:
        """Camera-to-world rotation: columns are right, up and back (-forward)."""
        forward = self.forward()
        right = _normalize(np.cross(forward, self.up))
        up = np.cross(right, forward)
        return np.column_stack((right, up, -forward))

    def is_finite(self) -> bool:
        return bool(
            np.all(np.isfinite(self.eye))
            and np.all(np.isfinite(self.target))
            and np.all(np.isfinite(self.up))
        )

    def to_dict(self) -> dict:
        return {
            "eye": [float(c) for c in self.eye],
            "target": [float(c) for c in self.target],
            "up": [float(c) for c in self.up],
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Frame":
        try:
            return cls.look_at(data["target"], data["eye"], data["up"])
        except KeyError as e:
            raise ConfigError(f"frame is missing {e.args[0]!r}") from e


def orthonormal_up(forward: np.ndarray, up: np.ndarray):
    """Gram-Schmidt ``up`` against unit ``forward``; None when (nearly) parallel."""
    ortho = up - float(np.dot(up, forward)) * forward
    norm = float(np.linalg.norm(ortho))
    if not math.isfinite(norm) or norm < 1e-9 * max(1.0, float(np.linalg.norm(up))):
        return None
    return ortho / norm


def renormalized(eye, target, up):
    """
    Build a Frame after a mutation, re-orthonormalizing ``up``.
    Returns None when the result is non-finite or degenerate.
    """
    eye = np.asarray(eye, dtype=np.float64)
    target = np.asarray(target, dtype=np.float64)
    if not (np.all(np.isfinite(eye)) and np.all(np.isfinite(target)) and np.all(np.isfinite(up))):
        return None
    offset = target - eye
    distance = float(np.linalg.norm(offset))
    if not math.isfinite(distance) or distance < EPSILON:
        return None
    ortho = orthonormal_up(offset / distance, np.asarray(up, dtype=np.float64))
    if ortho is None:
        return None
    return Frame(eye=eye, target=target, up=ortho)


def _bounds(value, name: str, lower_exclusive: float = 0.0, upper_exclusive: float = math.inf):
    try:
        lo, hi = (float(v) for v in value)
    except (TypeError, ValueError) as e:
        raise ConfigError(f"{name} must be a (min, max) pair, got {value!r}") from e
    if not (math.isfinite(lo) and math.isfinite(hi)):
        raise ConfigError(f"{name} must be finite, got ({lo}, {hi})")
    if lo > hi:
        raise ConfigError(f"{name}: min {lo} is greater than max {hi}")
    if lo <= lower_exclusive or hi >= upper_exclusive:
        raise ConfigError(
            f"{name} must lie in ({lower_exclusive}, {upper_exclusive}), got ({lo}, {hi})"
        )
    return lo, hi


@dataclass(frozen=True)
class Scope:
    """
    Immutable numeric bounds read by the controller on every zoom and reset.

    distance_bounds: (min, max) eye-target distance, both > 0.
    fov_bounds: (min, max) vertical field of view in radians, inside (0, pi).
    fov: default vertical field of view (radians), inside fov_bounds.
    clip_factors: (near, far) clip distances as multiples of the eye-target distance.
    """

    distance_bounds: tuple = DEFAULT_DISTANCE_BOUNDS
    fov_bounds: tuple = DEFAULT_FOV_BOUNDS
    fov: float = DEFAULT_FOV
    clip_factors: tuple = DEFAULT_CLIP_FACTORS

    def __post_init__(self) -> None:
        object.__setattr__(self, "distance_bounds", _bounds(self.distance_bounds, "distance_bounds"))
        object.__setattr__(self, "fov_bounds", _bounds(self.fov_bounds, "fov_bounds", 0.0, math.pi))
        near, far = _bounds(self.clip_factors, "clip_factors")
        if near >= far:
            raise ConfigError(f"clip_factors: near {near} must be less than far {far}")
        object.__setattr__(self, "clip_factors", (near, far))
        fov = float(self.fov)
        lo, hi = self.fov_bounds
        if not (math.isfinite(fov) and lo <= fov <= hi):
            raise ConfigError(f"fov {fov} outside fov_bounds ({lo}, {hi})")
        object.__setattr__(self, "fov", fov)

    def clamp_distance(self, distance: float) -> float:
        lo, hi = self.distance_bounds
        return min(hi, max(lo, distance))

    def clamp_fov(self, fov: float) -> float:
        lo, hi = self.fov_bounds
        return min(hi, max(lo, fov))

    def contains_distance(self, distance: float) -> bool:
        lo, hi = self.distance_bounds
        return lo <= distance <= hi

    def clip_planes(self, distance: float) -> tuple:
        """Near and far clip distances for the given eye-target distance."""
        near, far = self.clip_factors
        return near * distance, far * distance

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None) -> "Scope":
        """Build from the YAML ``scope`` section (angles in degrees)."""
        data = data or {}
        kwargs = {}
        if data.get("distance_bounds") is not None:
            kwargs["distance_bounds"] = tuple(data["distance_bounds"])
        if data.get("fov_bounds_deg") is not None:
            kwargs["fov_bounds"] = tuple(_radians(v, "fov_bounds_deg") for v in data["fov_bounds_deg"])
        if data.get("fov_deg") is not None:
            kwargs["fov"] = _radians(data["fov_deg"], "fov_deg")
        if data.get("clip_factors") is not None:
            kwargs["clip_factors"] = tuple(data["clip_factors"])
        return cls(**kwargs)


def _radians(value, name: str) -> float:
    try:
        return math.radians(float(value))
    except (TypeError, ValueError) as e:
        raise ConfigError(f"{name} must be a number, got {value!r}") from e
