"""
Two-body elliptical orbit patch.

Implements the orbit-propagation contract the correction engine samples each
tick: orbital velocity, true anomaly and eccentric anomaly at a universal
time, plus the patch's shape (a, b, e).

Convention: perifocal frame, periapsis along +x, angular momentum along +z.

References:
    Vallado, "Fundamentals of Astrodynamics and Applications", Sec. 2.2-2.3
"""

from __future__ import annotations

import math
import numpy as np
from scipy.optimize import root_scalar

from ..core.constants import TWO_PI, KEPLER_XTOL


class KeplerPatch:
    """Closed elliptical orbit around a point-mass primary.

    Attributes:
        semi_major_axis: Semi-major axis [m].
        eccentricity: Eccentricity, 0 <= e < 1.
        mu: Primary gravitational parameter [m³/s²].
        epoch: Reference universal time [s].
        mean_anomaly_at_epoch: Mean anomaly at epoch [rad].
    """

    def __init__(self, semi_major_axis: float, eccentricity: float, mu: float,
                 epoch: float = 0.0, mean_anomaly_at_epoch: float = 0.0):
        if semi_major_axis <= 0.0:
            raise ValueError(f"Semi-major axis must be positive, got {semi_major_axis}")
        if not 0.0 <= eccentricity < 1.0:
            raise ValueError(f"Eccentricity must be in [0, 1), got {eccentricity}")
        if mu <= 0.0:
            raise ValueError(f"Gravitational parameter must be positive, got {mu}")
        self.semi_major_axis = float(semi_major_axis)
        self.eccentricity = float(eccentricity)
        self.mu = float(mu)
        self.epoch = float(epoch)
        self.mean_anomaly_at_epoch = float(mean_anomaly_at_epoch)

    @property
    def semi_minor_axis(self) -> float:
        return self.semi_major_axis * math.sqrt(1.0 - self.eccentricity**2)

    @property
    def mean_motion(self) -> float:
        """Mean motion [rad/s]."""
        return math.sqrt(self.mu / self.semi_major_axis**3)

    @property
    def period(self) -> float:
        """Orbital period [s]."""
        return TWO_PI / self.mean_motion

    @property
    def semi_latus_rectum(self) -> float:
        return self.semi_major_axis * (1.0 - self.eccentricity**2)

    def mean_anomaly_at(self, ut: float) -> float:
        """Mean anomaly at a universal time, wrapped to [0, 2π)."""
        M = self.mean_anomaly_at_epoch + self.mean_motion * (ut - self.epoch)
        return M % TWO_PI

    def eccentric_anomaly_from_mean(self, mean_anomaly: float) -> float:
        """Solve Kepler's equation M = E - e sin E.

        E is bracketed by [M - e, M + e] since |e sin E| <= e.
        """
        e = self.eccentricity
        M = mean_anomaly
        if e == 0.0:
            return M

        def f(E):
            return E - e * math.sin(E) - M

        return root_scalar(f, bracket=(M - e, M + e), method='brentq',
                           xtol=KEPLER_XTOL).root

    def true_anomaly_from_eccentric(self, eccentric_anomaly: float) -> float:
        """True anomaly for an eccentric anomaly, same revolution [rad]."""
        e = self.eccentricity
        E = eccentric_anomaly
        return 2.0 * math.atan2(math.sqrt(1.0 + e) * math.sin(E / 2.0),
                                math.sqrt(1.0 - e) * math.cos(E / 2.0))

    def eccentric_anomaly(self, true_anomaly: float) -> float:
        """Eccentric anomaly for a true anomaly, same revolution [rad]."""
        e = self.eccentricity
        nu = true_anomaly
        return 2.0 * math.atan2(math.sqrt(1.0 - e) * math.sin(nu / 2.0),
                                math.sqrt(1.0 + e) * math.cos(nu / 2.0))

    def true_anomaly_at(self, ut: float) -> float:
        """True anomaly at a universal time [rad]."""
        E = self.eccentric_anomaly_from_mean(self.mean_anomaly_at(ut))
        return self.true_anomaly_from_eccentric(E)

    def radius_at_true_anomaly(self, true_anomaly: float) -> float:
        """Orbit radius [m]."""
        return self.semi_latus_rectum / (1.0 + self.eccentricity * math.cos(true_anomaly))

    def orbital_velocity_at(self, ut: float) -> np.ndarray:
        """Perifocal velocity vector at a universal time [m/s], shape (3,)."""
        nu = self.true_anomaly_at(ut)
        k = math.sqrt(self.mu / self.semi_latus_rectum)
        return np.array([
            -k * math.sin(nu),
            k * (self.eccentricity + math.cos(nu)),
            0.
        ])
