"""
Runtime configuration.

Central options object shared by the session registry and every correction
engine it creates.
"""

from dataclasses import dataclass

from .constants import DEGENERATE_EPSILON


@dataclass
class GizmoConfig:
    """Maneuver gizmo behavior options.

    A single instance is shared by reference, so flipping a flag at runtime
    takes effect on the next tick of every engine.

    Attributes:
        intuitive_gizmos: Apply the geometric correction to handle drags.
            When False, raw handle changes pass through untouched.
        degenerate_epsilon: Magnitude below which a target-frame axis is
            treated as undefined and the tick's correction is skipped.
    """
    intuitive_gizmos: bool = True
    degenerate_epsilon: float = DEGENERATE_EPSILON

    def describe(self) -> str:
        """Human-readable description of the active options."""
        mode = "intuitive" if self.intuitive_gizmos else "raw"
        return f"{mode} handles (epsilon {self.degenerate_epsilon:g})"
