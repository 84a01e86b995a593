"""Tests for maneuver-local frame geometry."""

import math

import numpy as np
import numpy.testing as npt
import pytest

from precise_node.core.frames import (
    coordinate_rotation, fold_angle, fold_periodic, fold_ratio,
    maneuver_downward, orbital_plane_downward, target_frame,
)
from precise_node.core.types import (
    DegenerateGeometryError, OrbitalGeometrySnapshot, momentum_vector,
)

from conftest import make_geometry


class TestDownward:
    """Vessel-to-primary vector."""

    @pytest.mark.parametrize("E", [0.0, 0.3, 1.5, 2.9, -2.0])
    def test_circular_points_radially_in(self, E):
        D = maneuver_downward(make_geometry(eccentric_anomaly=E))
        npt.assert_allclose(D, [-700_000.0, 0.0, 0.0], atol=1e-6)

    @pytest.mark.parametrize("E", [0.2, 1.1, 2.5, -1.3])
    def test_elliptic_length_is_orbit_radius(self, E):
        a, e = 1_200_000.0, 0.3
        D = maneuver_downward(make_geometry(eccentric_anomaly=E,
                                            semi_major_axis=a, eccentricity=e))
        assert np.linalg.norm(D) == pytest.approx(a * (1.0 - e * math.cos(E)))
        assert D[1] == 0.0

    @pytest.mark.parametrize("E", [0.2, 1.1, 2.5, -1.3])
    def test_elliptic_components_match_velocity_frame(self, E):
        a, e = 1_200_000.0, 0.3
        b = a * math.sqrt(1.0 - e**2)
        d = orbital_plane_downward(a, b, e, E)
        v = np.array([-a * math.sin(E), b * math.cos(E)])
        v_hat = v / np.linalg.norm(v)

        D = maneuver_downward(make_geometry(eccentric_anomaly=E,
                                            semi_major_axis=a, eccentricity=e))

        # prograde = along velocity, radial out = velocity rotated clockwise
        assert D[2] == pytest.approx(np.dot(d, v_hat), abs=1e-6)
        assert D[0] == pytest.approx(np.dot(d, [v_hat[1], -v_hat[0]]), abs=1e-6)

    def test_coordinate_rotation_at_periapsis(self):
        # velocity along +y at periapsis
        assert coordinate_rotation(1.0, 1.0, 0.0) == pytest.approx(-math.pi / 2)


class TestTargetFrame:
    """Target prograde / normal / radial basis."""

    def test_circular_zero_dv_matches_local_axes(self, circular_geometry):
        frame = target_frame(momentum_vector(), circular_geometry)
        npt.assert_allclose(frame.unit_prograde, [0, 0, 1], atol=1e-12)
        npt.assert_allclose(frame.unit_normal, [0, 1, 0], atol=1e-9)
        npt.assert_allclose(frame.unit_radial, [1, 0, 0], atol=1e-9)

    def test_prograde_includes_orbital_speed(self, circular_geometry):
        frame = target_frame(momentum_vector(10.0, -5.0, 40.0), circular_geometry)
        npt.assert_allclose(frame.prograde, [10.0, -5.0, 7040.0])

    def test_basis_is_orthonormal_and_right_handed(self, elliptic_geometry):
        frame = target_frame(momentum_vector(120.0, 300.0, -80.0), elliptic_geometry)
        basis = np.array([frame.unit_radial, frame.unit_normal, frame.unit_prograde])
        npt.assert_allclose(basis @ basis.T, np.eye(3), atol=1e-12)
        npt.assert_allclose(np.cross(frame.unit_radial, frame.unit_normal),
                            frame.unit_prograde, atol=1e-12)

    def test_normal_is_orthogonal_to_downward(self, elliptic_geometry):
        frame = target_frame(momentum_vector(120.0, 300.0, -80.0), elliptic_geometry)
        assert np.dot(frame.unit_normal, frame.downward) == pytest.approx(0.0, abs=1e-6)

    def test_prograde_split(self, elliptic_geometry):
        frame = target_frame(momentum_vector(120.0, 300.0, -80.0), elliptic_geometry)
        down, level = frame.prograde_split()
        npt.assert_allclose(down + level, frame.prograde)
        assert np.dot(level, frame.downward) == pytest.approx(0.0, abs=1e-3)

    def test_zero_target_prograde_is_degenerate(self, circular_geometry):
        with pytest.raises(DegenerateGeometryError):
            target_frame(momentum_vector(0.0, 0.0, -7000.0), circular_geometry)

    def test_prograde_parallel_to_downward_is_degenerate(self, circular_geometry):
        # target prograde straight down: normal and radial undefined
        frame = target_frame(momentum_vector(-500.0, 0.0, -7000.0), circular_geometry)
        npt.assert_allclose(frame.unit_prograde, [-1.0, 0.0, 0.0], atol=1e-12)
        with pytest.raises(DegenerateGeometryError):
            frame.unit_normal
        with pytest.raises(DegenerateGeometryError):
            frame.unit_radial

    def test_collapsed_orbit_is_degenerate(self):
        geometry = make_geometry(semi_major_axis=0.0)
        with pytest.raises(DegenerateGeometryError):
            target_frame(momentum_vector(), geometry)

    def test_nan_geometry_is_degenerate(self):
        geometry = OrbitalGeometrySnapshot(7000.0, float("nan"), float("nan"),
                                           700_000.0, 700_000.0, 0.0)
        assert not geometry.is_finite
        with pytest.raises(DegenerateGeometryError):
            target_frame(momentum_vector(), geometry)


class TestFold:
    """Periodic reduction of handle deltas."""

    @pytest.mark.parametrize("delta, expected", [
        (0.0, 0.0),
        (1.0, 1.0),
        (2.0, 2.0),
        (-2.0, -2.0),
        (3.0, -1.0),
        (-3.0, 1.0),
        (4.0, 0.0),
        (5.0, 1.0),
        (-9.5, -1.5),
    ])
    def test_fold_periodic(self, delta, expected):
        assert fold_periodic(delta, 1.0) == pytest.approx(expected)

    @pytest.mark.parametrize("delta", [1e-3, 13.7, -13.7, 2e4, 7.77e9, -1e12])
    def test_ratio_stays_in_asin_domain(self, delta):
        for magnitude in (0.5, 7000.0, 123.456):
            ratio = fold_ratio(delta * magnitude, magnitude)
            assert -1.0 <= ratio <= 1.0
            assert math.isfinite(fold_angle(delta * magnitude, magnitude))

    def test_half_period_is_a_reversal(self):
        assert fold_angle(2.0, 1.0) == pytest.approx(math.pi)
        assert fold_angle(-2.0, 1.0) == pytest.approx(-math.pi)

    def test_small_delta_is_near_linear(self):
        assert fold_angle(1.0, 7000.0) == pytest.approx(1.0 / 7000.0, rel=1e-6)
