"""Shared fixtures for the gizmo core tests."""

import math

import numpy as np
import pytest

from precise_node.astrodynamics.kepler import KeplerPatch
from precise_node.core.config import GizmoConfig
from precise_node.core.types import OrbitalGeometrySnapshot
from precise_node.maneuvers.nodes import PatchedConicSolver
from precise_node.maneuvers.session_registry import SessionRegistry

# Kerbin reference body (stock KSP system)
MU_KERBIN = 3.5316e12                   # Gravitational parameter [m³/s²]
R_KERBIN = 600_000.0                    # Equatorial radius [m]


class FixedPatch:
    """Orbit patch returning the same geometry at every UT."""

    def __init__(self, orbital_speed=7000.0, true_anomaly=0.3,
                 eccentric_anomaly=0.3, semi_major_axis=700_000.0,
                 semi_minor_axis=None, eccentricity=0.0):
        self.orbital_speed = orbital_speed
        self.true_anomaly = true_anomaly
        self.ecc_anomaly = eccentric_anomaly
        self.semi_major_axis = semi_major_axis
        self.semi_minor_axis = (semi_major_axis * math.sqrt(1.0 - eccentricity**2)
                                if semi_minor_axis is None else semi_minor_axis)
        self.eccentricity = eccentricity

    def orbital_velocity_at(self, ut):
        return np.array([0.0, self.orbital_speed, 0.0])

    def true_anomaly_at(self, ut):
        return self.true_anomaly

    def eccentric_anomaly(self, true_anomaly):
        return self.ecc_anomaly


def make_geometry(orbital_speed=7000.0, eccentric_anomaly=0.3,
                  semi_major_axis=700_000.0, eccentricity=0.0):
    return OrbitalGeometrySnapshot.from_patch(
        FixedPatch(orbital_speed=orbital_speed,
                   true_anomaly=eccentric_anomaly,
                   eccentric_anomaly=eccentric_anomaly,
                   semi_major_axis=semi_major_axis,
                   eccentricity=eccentricity),
        0.0)


@pytest.fixture
def circular_geometry():
    """e = 0, s = 7000 m/s."""
    return make_geometry()


@pytest.fixture
def elliptic_geometry():
    return make_geometry(orbital_speed=2600.0, eccentric_anomaly=1.1,
                         semi_major_axis=1_200_000.0, eccentricity=0.3)


@pytest.fixture
def fixed_patch():
    return FixedPatch()


@pytest.fixture
def kerbin_patch():
    """Elliptical Kerbin orbit, ~230 km x ~870 km altitude."""
    return KeplerPatch(R_KERBIN + 550_000.0, 0.28, MU_KERBIN,
                       epoch=0.0, mean_anomaly_at_epoch=0.4)


@pytest.fixture
def config():
    return GizmoConfig()


@pytest.fixture
def solver():
    return PatchedConicSolver()


@pytest.fixture
def registry(solver, config):
    return SessionRegistry(lambda: solver, config)
