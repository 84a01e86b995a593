"""
PreciseNode Gizmo Core
======================
Intuitive behavior for maneuver-node gizmo handles.

A raw handle drag moves the delta-V along a fixed maneuver-local axis; this
package re-expresses the drag in the frame the maneuver actually produces so
that prograde, normal and radial handles keep their meaning at any true
anomaly.

Architecture:
    - Target-frame geometry from the orbit at the node epoch
    - Per-node correction engine with debounced handle notifications
    - Session registry discovering open gizmos once per frame
    - Two-body orbit patch and in-memory nodes for hosts and tests
"""

from .core.config import GizmoConfig
from .core.types import (
    HandleAxis, OrbitalGeometrySnapshot, DegenerateGeometryError,
    momentum_vector,
)
from .maneuvers.intuitive_correction import CorrectionEngine, correct_delta_v
from .maneuvers.session_registry import SessionRegistry

__version__ = "0.1.0"
__all__ = [
    "GizmoConfig",
    "HandleAxis", "OrbitalGeometrySnapshot", "DegenerateGeometryError",
    "momentum_vector",
    "CorrectionEngine", "correct_delta_v",
    "SessionRegistry",
]
