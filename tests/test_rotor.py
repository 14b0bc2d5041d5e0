"""
Exponential-map rotor and quaternion helpers: normalization, lifting,
rotation angle = drag length.
"""
import math

import numpy as np
import pytest

from trackcam.core import quaternion
from trackcam.core.rotor import SHEET_RADIUS_SQ, lift, rotor, to_trackball, trackball_radius


def angle_of(q):
    return 2.0 * math.atan2(float(np.linalg.norm(q[1:])), abs(float(q[0])))


def axis_of(q):
    xyz = np.asarray(q[1:]) * (1.0 if q[0] >= 0.0 else -1.0)
    return xyz / np.linalg.norm(xyz)


def test_trackball_radius_is_half_larger_dimension():
    assert trackball_radius(800, 600) == 400.0
    assert trackball_radius(300, 900) == 450.0


def test_to_trackball_centre_and_edges():
    """Origin at the viewport centre, y up, unit = trackball radius."""
    assert np.array_equal(to_trackball(400, 300, 800, 600), [0.0, 0.0])
    assert np.allclose(to_trackball(800, 300, 800, 600), [1.0, 0.0])
    assert np.allclose(to_trackball(400, 100, 800, 600), [0.0, 0.5])


@pytest.mark.parametrize("args", [
    (math.nan, 0.0, 800, 600),
    (0.0, math.inf, 800, 600),
    (10.0, 10.0, 0, 600),
    (10.0, 10.0, 800, -1),
])
def test_to_trackball_rejects_degenerate_input(args):
    assert to_trackball(*args) is None


def test_lift_sphere_and_sheet_meet():
    r = math.sqrt(SHEET_RADIUS_SQ)
    inside = lift(np.array([r, 0.0]))
    assert inside[2] == pytest.approx(math.sqrt(0.5))
    outside = lift(np.array([r + 1e-9, 0.0]))
    assert outside[2] == pytest.approx(inside[2], abs=1e-8)
    far = lift(np.array([0.6, 0.6]))
    assert far[2] == pytest.approx(0.5 / math.sqrt(0.72))


def test_zero_displacement_is_identity():
    q = rotor(np.array([0.3, -0.2]), np.array([0.3, -0.2]))
    assert np.array_equal(q, quaternion.identity())


def test_angle_equals_drag_length():
    q = rotor(np.array([0.0, 0.0]), np.array([1.0, 0.0]))
    assert angle_of(q) == pytest.approx(1.0, abs=1e-12)
    assert np.allclose(axis_of(q), [0.0, 1.0, 0.0])

    q = rotor(np.array([0.0, 0.0]), np.array([0.0, 0.5]))
    assert angle_of(q) == pytest.approx(0.5, abs=1e-12)
    assert np.allclose(axis_of(q), [-1.0, 0.0, 0.0])


def test_drag_beyond_trackball_keeps_rotating():
    q = rotor(np.array([0.0, 0.0]), np.array([3.0, 0.0]))
    assert angle_of(q) == pytest.approx(3.0, abs=1e-12)


def test_anchor_on_sheet_gives_finite_rotor():
    q = rotor(np.array([2.0, 0.0]), np.array([2.0, 0.5]))
    assert np.all(np.isfinite(q))
    assert angle_of(q) == pytest.approx(0.5, abs=1e-12)


def test_sensitivity_scales_angle():
    q = rotor(np.array([0.0, 0.0]), np.array([0.4, 0.0]), sensitivity=2.0)
    assert angle_of(q) == pytest.approx(0.8, abs=1e-12)


def test_rotate_identity_is_exact():
    v = np.array([0.1, -2.5, 3.3])
    assert np.array_equal(quaternion.rotate(quaternion.identity(), v), v)


def test_rotate_quarter_turn():
    q = quaternion.from_axis_angle(np.array([0.0, 0.0, 2.0]), math.pi / 2)
    assert np.allclose(quaternion.rotate(q, np.array([1.0, 0.0, 0.0])), [0.0, 1.0, 0.0])


def test_conjugate_undoes_rotation():
    q = quaternion.from_axis_angle(np.array([1.0, 1.0, 0.0]), 0.7)
    v = np.array([0.3, 0.4, 0.5])
    back = quaternion.rotate(quaternion.conjugate(q), quaternion.rotate(q, v))
    assert np.allclose(back, v)


def test_change_basis_matches_conjugation():
    """A local rotation expressed in the parent frame acts as B R B^T."""
    b = quaternion.from_axis_angle(np.array([0.0, 1.0, 0.0]), 0.9)
    basis = np.column_stack([quaternion.rotate(b, e) for e in np.eye(3)])
    local = quaternion.from_axis_angle(np.array([1.0, 0.0, 0.0]), 0.4)
    world = quaternion.change_basis(local, basis)
    for v in (np.array([0.3, -1.0, 2.0]), np.array([1.0, 0.0, 0.0])):
        expected = basis @ quaternion.rotate(local, basis.T @ v)
        assert np.allclose(quaternion.rotate(world, v), expected)
