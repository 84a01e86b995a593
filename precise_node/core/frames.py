"""
Maneuver-local frame geometry.

Provides the vectors needed to re-express a raw gizmo handle drag in the frame
the maneuver actually produces:
    - Vessel-to-primary ("downward") vector in the orbital plane and in
      maneuver coordinates [radial, normal, prograde]
    - Target prograde / normal / radial unit vectors implied by a delta-V
    - Periodic folding of an unbounded handle delta into a rotation angle

CRITICAL: the target frame is rebuilt from the *reference* delta-V, not from
the raw handle axes, since the latter drift as the true anomaly changes.
"""

from __future__ import annotations

import math
import numpy as np
from dataclasses import dataclass

from ..core.constants import (
    DEGENERATE_EPSILON, FOLD_PERIOD_FACTOR, FOLD_HALF_PERIOD_FACTOR
)
from ..core.types import DegenerateGeometryError, OrbitalGeometrySnapshot


def orbital_plane_downward(semi_major: float, semi_minor: float,
                           eccentricity: float,
                           eccentric_anomaly: float) -> np.ndarray:
    """Vessel-to-primary vector in the perifocal plane.

    Args:
        semi_major: Semi-major axis [m].
        semi_minor: Semi-minor axis [m].
        eccentricity: Orbit eccentricity.
        eccentric_anomaly: Eccentric anomaly at the epoch [rad].

    Returns:
        2-vector [x, y] in the orbital plane, periapsis along +x [m].
    """
    return np.array([
        semi_major * (eccentricity - np.cos(eccentric_anomaly)),
        -semi_minor * np.sin(eccentric_anomaly)
    ])


def coordinate_rotation(semi_major: float, semi_minor: float,
                        eccentric_anomaly: float) -> float:
    """Angle rotating the orbital plane onto the maneuver's prograde axis.

    The velocity direction in the plane is (-a sin E, b cos E); the rotation
    is minus its polar angle.
    """
    return -math.atan2(semi_minor * math.cos(eccentric_anomaly),
                       -semi_major * math.sin(eccentric_anomaly))


def maneuver_downward(geometry: OrbitalGeometrySnapshot) -> np.ndarray:
    """Vessel-to-primary vector in maneuver coordinates.

    Together with the prograde vector it spans the plane the radial direction
    must always lie in. The normal component is zero by construction.

    Args:
        geometry: Orbit geometry at the node epoch.

    Returns:
        Downward vector [radial, normal, prograde] [m], shape (3,).
    """
    d = orbital_plane_downward(geometry.semi_major_axis,
                               geometry.semi_minor_axis,
                               geometry.eccentricity,
                               geometry.eccentric_anomaly)
    phi = coordinate_rotation(geometry.semi_major_axis,
                              geometry.semi_minor_axis,
                              geometry.eccentric_anomaly)
    c, s = math.cos(phi), math.sin(phi)
    return np.array([
        -(s * d[0] + c * d[1]),
        0.,
        c * d[0] - s * d[1]
    ])


def _unit(v: np.ndarray, epsilon: float, name: str) -> np.ndarray:
    mag = np.linalg.norm(v)
    if not mag >= epsilon:
        raise DegenerateGeometryError(f"{name} magnitude {mag:g} below {epsilon:g}")
    return v / mag


@dataclass
class TargetFrame:
    """Frame implied by a reference delta-V at the node epoch.

    Only the prograde axis is validated on construction. The normal and
    radial axes are undefined when the target prograde points straight along
    the downward vector; they raise on access instead, so a prograde-only
    correction still works there.

    Attributes:
        downward: Vessel-to-primary vector [m], shape (3,).
        prograde: Post-maneuver velocity (delta-V plus orbital speed on the
            prograde axis) [m/s], shape (3,).
        unit_prograde: prograde / |prograde|.
        epsilon: Minimum magnitude for the derived axes.
    """
    downward: np.ndarray
    prograde: np.ndarray
    unit_prograde: np.ndarray
    epsilon: float = DEGENERATE_EPSILON

    @property
    def unit_normal(self) -> np.ndarray:
        """normalize(downward × prograde), orthogonal to downward.

        Raises:
            DegenerateGeometryError: when the burn points straight down or up.
        """
        unit_downward = _unit(self.downward, self.epsilon, "downward")
        # sine of the downward/prograde angle
        return _unit(np.cross(unit_downward, self.unit_prograde), self.epsilon,
                     "target normal")

    @property
    def unit_radial(self) -> np.ndarray:
        """unit_normal × unit_prograde."""
        return np.cross(self.unit_normal, self.unit_prograde)

    def prograde_split(self) -> tuple[np.ndarray, np.ndarray]:
        """Split the prograde vector along and across the downward axis.

        Returns:
            (downward_part, level_part), with level_part ⟂ downward.
        """
        d = self.downward
        downward_part = d * (np.dot(self.prograde, d) / np.dot(d, d))
        return downward_part, self.prograde - downward_part


def target_frame(reference_dv: np.ndarray,
                 geometry: OrbitalGeometrySnapshot,
                 epsilon: float = DEGENERATE_EPSILON) -> TargetFrame:
    """Construct the target frame for a reference delta-V.

    Args:
        reference_dv: Last applied delta-V [radial, normal, prograde] [m/s].
        geometry: Orbit geometry at the node epoch.
        epsilon: Minimum magnitude for any frame axis.

    Returns:
        TargetFrame.

    Raises:
        DegenerateGeometryError: non-finite geometry, a collapsed orbit, or a
            zero target prograde.
    """
    if not geometry.is_finite or not np.all(np.isfinite(reference_dv)):
        raise DegenerateGeometryError("non-finite orbit geometry or delta-V")

    downward = maneuver_downward(geometry)
    _unit(downward, epsilon, "downward")

    prograde = np.array([reference_dv[0],
                         reference_dv[1],
                         reference_dv[2] + geometry.orbital_speed])
    unit_prograde = _unit(prograde, epsilon, "target prograde")

    return TargetFrame(
        downward=downward,
        prograde=prograde,
        unit_prograde=unit_prograde,
        epsilon=epsilon
    )


def fold_periodic(delta: float, magnitude: float) -> float:
    """Reduce a handle delta modulo two full direction reversals.

    A change of 4·|v| along an axis orthogonal to v is the identity, so the
    delta is taken modulo 4·magnitude (truncated remainder) and shifted into
    [-2·magnitude, 2·magnitude].
    """
    period = FOLD_PERIOD_FACTOR * magnitude
    half = FOLD_HALF_PERIOD_FACTOR * magnitude
    remainder = math.fmod(delta, period)
    if remainder > half:
        remainder -= period
    elif remainder < -half:
        remainder += period
    return remainder


def fold_ratio(delta: float, magnitude: float) -> float:
    """Folded delta as the sine argument in [-1, 1]."""
    ratio = fold_periodic(delta, magnitude) / (FOLD_HALF_PERIOD_FACTOR * magnitude)
    # round-off at the fold boundary
    return min(1.0, max(-1.0, ratio))


def fold_angle(delta: float, magnitude: float) -> float:
    """Rotation angle equivalent to a handle delta against a vector length.

    Returns:
        2·asin(folded / (2·magnitude)) in [-π, π] [rad].
    """
    return 2.0 * math.asin(fold_ratio(delta, magnitude))
