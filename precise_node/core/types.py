"""
Foundational data types for the maneuver gizmo core.

Convention:
    - Delta-V vectors live in the maneuver-local frame, ordered
      [radial, normal, prograde] (the layout the solver stores per node)
    - Distances: m
    - Velocity: m/s
    - Angles: radians
    - Time: seconds of universal time (UT)
"""

from __future__ import annotations

import math
import numpy as np
from dataclasses import dataclass, astuple
from enum import Enum
from typing import Optional, Protocol, Callable, Sequence


# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------

class HandleAxis(Enum):
    """Maneuver-local axis driven by a gizmo handle pair.

    The value is the component index in a momentum vector.
    """
    RADIAL = 0
    NORMAL = 1
    PROGRADE = 2


# Processing order when several axes changed within one tick
AXIS_PRIORITY = (HandleAxis.PROGRADE, HandleAxis.NORMAL, HandleAxis.RADIAL)

# Gizmo handle attribute name -> axis it reports on
HANDLE_AXES = {
    "handle_prograde": HandleAxis.PROGRADE,
    "handle_retrograde": HandleAxis.PROGRADE,
    "handle_normal": HandleAxis.NORMAL,
    "handle_antinormal": HandleAxis.NORMAL,
    "handle_radial_in": HandleAxis.RADIAL,
    "handle_radial_out": HandleAxis.RADIAL,
}


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------

class DegenerateGeometryError(ValueError):
    """Orbital geometry at the node epoch does not define a target frame.

    Raised when a frame axis has (near-)zero magnitude or an input is not
    finite. Callers in the tick loop treat it as "skip this tick".
    """


# ---------------------------------------------------------------------------
# Momentum vectors
# ---------------------------------------------------------------------------

def momentum_vector(radial: float = 0.0, normal: float = 0.0,
                    prograde: float = 0.0) -> np.ndarray:
    """Build a maneuver-local delta-V vector, shape (3,)."""
    return np.array([radial, normal, prograde], dtype=np.float64)


def as_momentum_vector(value: Sequence[float]) -> np.ndarray:
    """Copy any 3-sequence into a fresh float64 array, shape (3,)."""
    vec = np.array(value, dtype=np.float64)
    if vec.shape != (3,):
        raise ValueError(f"Momentum vector must have shape (3,), got {vec.shape}")
    return vec


# ---------------------------------------------------------------------------
# Orbital geometry
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class OrbitalGeometrySnapshot:
    """Orbit geometry at a maneuver epoch.

    Only valid for the tick it was sampled in; the epoch or the orbit itself
    may be edited between ticks.

    Attributes:
        orbital_speed: Speed at the epoch [m/s].
        true_anomaly: True anomaly at the epoch [rad].
        eccentric_anomaly: Eccentric anomaly at the epoch [rad].
        semi_major_axis: Semi-major axis [m].
        semi_minor_axis: Semi-minor axis [m].
        eccentricity: Eccentricity.
    """
    orbital_speed: float
    true_anomaly: float
    eccentric_anomaly: float
    semi_major_axis: float
    semi_minor_axis: float
    eccentricity: float

    @property
    def is_finite(self) -> bool:
        """True when every field is a finite number."""
        return all(math.isfinite(x) for x in astuple(self))

    @classmethod
    def from_patch(cls, patch: OrbitPatch, ut: float) -> OrbitalGeometrySnapshot:
        """Sample an orbit patch at a universal time."""
        true_anomaly = float(patch.true_anomaly_at(ut))
        return cls(
            orbital_speed=float(np.linalg.norm(patch.orbital_velocity_at(ut))),
            true_anomaly=true_anomaly,
            eccentric_anomaly=float(patch.eccentric_anomaly(true_anomaly)),
            semi_major_axis=float(patch.semi_major_axis),
            semi_minor_axis=float(patch.semi_minor_axis),
            eccentricity=float(patch.eccentricity),
        )


# ---------------------------------------------------------------------------
# Collaborator contracts
# ---------------------------------------------------------------------------

class OrbitPatch(Protocol):
    """Orbit-propagation engine for the patch a maneuver node sits on."""
    semi_major_axis: float
    semi_minor_axis: float
    eccentricity: float

    def orbital_velocity_at(self, ut: float) -> np.ndarray: ...

    def true_anomaly_at(self, ut: float) -> float: ...

    def eccentric_anomaly(self, true_anomaly: float) -> float: ...


class UpdateHook(Protocol):
    """Subscribable notification with a membership test."""

    def subscribe(self, callback: Callable) -> bool: ...

    def unsubscribe(self, callback: Callable) -> bool: ...

    def __contains__(self, callback: object) -> bool: ...


class Handle(Protocol):
    """A single draggable gizmo handle."""
    on_handle_update: UpdateHook


class Gizmo(Protocol):
    """On-screen editor attached to a maneuver node.

    Each of the six handle attributes named in HANDLE_AXES may be None.
    """
    delta_v: np.ndarray
    on_delete: UpdateHook


class ManeuverSession(Protocol):
    """A maneuver node as seen by the correction engine."""
    delta_v: np.ndarray
    ut: float
    patch: OrbitPatch
    gizmo: Optional[Gizmo]

    def on_gizmo_updated(self, delta_v: np.ndarray, ut: float) -> None: ...


class SessionSource(Protocol):
    """Solver exposing the current maneuver nodes."""
    maneuver_nodes: Sequence[ManeuverSession]
