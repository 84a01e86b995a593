"""
Intuitive maneuver-gizmo correction.

A gizmo handle only moves the delta-V along one fixed maneuver-local axis.
Those axes are defined relative to the previous delta-V, so once the node
carries a sizeable burn a raw drag no longer does what the handle promises.
This module re-expresses each raw drag in the frame the maneuver produces:

    - Prograde: scale along the post-maneuver velocity direction
    - Normal:   rotate the level part of the post-maneuver velocity around
                the target normal (plane change at constant level speed)
    - Radial:   rotate the post-maneuver velocity around the target radial
                (apsis rotation at constant speed)

Workflow per tick:
    1. Handle notifications mark an axis as pending (no math inline)
    2. The registry drives on_update(); the raw delta since the last applied
       vector is measured once
    3. The correction for the highest-priority pending axis is computed from
       fresh orbit geometry and written back to node, gizmo and solver
"""

from __future__ import annotations

import logging
import numpy as np
from typing import Optional, TYPE_CHECKING

from ..core.config import GizmoConfig
from ..core.constants import DEGENERATE_EPSILON
from ..core.frames import target_frame, fold_angle
from ..core.types import (
    AXIS_PRIORITY, HANDLE_AXES, DegenerateGeometryError, Gizmo, HandleAxis,
    ManeuverSession, OrbitalGeometrySnapshot, as_momentum_vector
)

if TYPE_CHECKING:
    from .session_registry import SessionRegistry

logger = logging.getLogger(__name__)


def correct_delta_v(reference_dv: np.ndarray,
                    raw_dv: np.ndarray,
                    geometry: OrbitalGeometrySnapshot,
                    axis: HandleAxis,
                    epsilon: float = DEGENERATE_EPSILON) -> np.ndarray:
    """Correct a raw single-axis change of a maneuver delta-V.

    Args:
        reference_dv: Last applied delta-V [radial, normal, prograde] [m/s].
        raw_dv: Current delta-V after the raw handle drag [m/s].
        geometry: Orbit geometry at the node epoch.
        axis: Axis whose handle was dragged.
        epsilon: Minimum magnitude for frame axes.

    Returns:
        Corrected change to add to reference_dv [m/s], shape (3,).

    Raises:
        DegenerateGeometryError: when the target frame or the rotated vector
            is undefined at this geometry.
    """
    reference_dv = np.asarray(reference_dv, dtype=np.float64)
    raw_change = np.asarray(raw_dv, dtype=np.float64) - reference_dv
    if not np.all(np.isfinite(raw_change)):
        raise DegenerateGeometryError("non-finite raw delta-V")

    frame = target_frame(reference_dv, geometry, epsilon)
    speed = geometry.orbital_speed

    if axis is HandleAxis.PROGRADE:
        # already aligned with its own target direction
        return frame.unit_prograde * raw_change[2]

    if axis is HandleAxis.NORMAL:
        prograde_downward, prograde_level = frame.prograde_split()
        level = np.linalg.norm(prograde_level)
        if not level >= epsilon:
            raise DegenerateGeometryError(
                f"level prograde magnitude {level:g} below {epsilon:g}")
        angle = fold_angle(raw_change[1], level)
        corrected = ((prograde_level / level * np.cos(angle)
                      + frame.unit_normal * np.sin(angle)) * level
                     + prograde_downward - reference_dv)
    else:
        magnitude = np.linalg.norm(frame.prograde)
        angle = fold_angle(raw_change[0], magnitude)
        corrected = ((frame.unit_prograde * np.cos(angle)
                      + frame.unit_radial * np.sin(angle)) * magnitude
                     - reference_dv)

    # orbital speed lives in the target prograde vector, not in the delta-V
    corrected[2] -= speed
    return corrected


class CorrectionEngine:
    """Per-node gizmo handler applying intuitive handle corrections.

    Attaches to the six handles of the node's gizmo, records which axes were
    dragged, and on each registry tick replaces the raw change with the
    geometrically corrected one.

    Attributes:
        node: The maneuver node being edited.
        gizmo: The gizmo this engine is attached to.
        config: Shared runtime options.
        reference_dv: Last applied delta-V, the "before" state of the next
            correction [m/s], shape (3,).
        pending: Axes dragged since the last processed tick.
    """

    def __init__(self, registry: Optional[SessionRegistry],
                 node: ManeuverSession, config: GizmoConfig):
        """Attach to a node whose gizmo is open.

        Args:
            registry: Registry to remove this engine from on deletion.
            node: Maneuver node with an attached gizmo.
            config: Shared runtime options.
        """
        if node.gizmo is None:
            raise ValueError("Maneuver node has no attached gizmo")
        self.registry = registry
        self.node = node
        self.gizmo: Gizmo = node.gizmo
        self.config = config
        self.reference_dv = as_momentum_vector(node.delta_v)
        self.pending: set[HandleAxis] = set()
        self.deleted = False
        self._callbacks = {
            HandleAxis.PROGRADE: self.on_prograde_change,
            HandleAxis.NORMAL: self.on_normal_change,
            HandleAxis.RADIAL: self.on_radial_change,
        }

        self.attach_handle_listeners()
        self.gizmo.on_delete.subscribe(self.delete)

    # ------------------------------------------------------------------
    # Handle notifications
    # ------------------------------------------------------------------

    def on_prograde_change(self, value: float = 0.0) -> None:
        self.pending.add(HandleAxis.PROGRADE)

    def on_normal_change(self, value: float = 0.0) -> None:
        self.pending.add(HandleAxis.NORMAL)

    def on_radial_change(self, value: float = 0.0) -> None:
        self.pending.add(HandleAxis.RADIAL)

    # ------------------------------------------------------------------
    # Tick
    # ------------------------------------------------------------------

    def on_update(self) -> bool:
        """Process pending handle changes for this tick.

        Returns:
            True if a corrected delta-V was written to the node.
        """
        if self.deleted:
            return False
        if self.node.gizmo is not self.gizmo:
            # gizmo closed or replaced without a delete notification
            self.delete()
            return False

        # idempotent
        self.attach_handle_listeners()

        if not self.config.intuitive_gizmos:
            self.pending.clear()
            self.reference_dv = as_momentum_vector(self.node.delta_v)
            return False

        if not self.pending:
            return False

        axis = next(a for a in AXIS_PRIORITY if a in self.pending)
        ut = self.node.ut
        try:
            geometry = OrbitalGeometrySnapshot.from_patch(self.node.patch, ut)
            corrected = correct_delta_v(self.reference_dv, self.node.delta_v,
                                        geometry, axis,
                                        self.config.degenerate_epsilon)
        except DegenerateGeometryError as err:
            logger.debug("Skipping %s correction at UT %.3f: %s",
                         axis.name.lower(), ut, err)
            return False

        # raw drags on axes still pending are carried to the next tick
        raw_change = as_momentum_vector(self.node.delta_v) - self.reference_dv
        deferred = np.zeros(3)
        for other in self.pending - {axis}:
            deferred[other.value] = raw_change[other.value]

        new_reference = self.reference_dv + corrected
        new_dv = new_reference + deferred
        self.node.delta_v = new_dv.copy()
        self.gizmo.delta_v = new_dv.copy()
        self.node.on_gizmo_updated(new_dv.copy(), ut)
        logger.debug("Applied %s correction %s at UT %.3f",
                     axis.name.lower(), np.array2string(corrected, precision=3), ut)

        self.reference_dv = new_reference
        self.pending.discard(axis)
        return True

    # ------------------------------------------------------------------
    # Listener management
    # ------------------------------------------------------------------

    def _present_handles(self):
        for name, axis in HANDLE_AXES.items():
            handle = getattr(self.gizmo, name, None)
            if handle is not None:
                yield handle, self._callbacks[axis]

    def attach_handle_listeners(self) -> int:
        """Subscribe to every present handle not yet subscribed to.

        Returns:
            Number of new subscriptions.
        """
        attached = 0
        for handle, callback in self._present_handles():
            if callback not in handle.on_handle_update:
                handle.on_handle_update.subscribe(callback)
                attached += 1
        return attached

    def detach_handle_listeners(self) -> None:
        for handle, callback in self._present_handles():
            if callback in handle.on_handle_update:
                handle.on_handle_update.unsubscribe(callback)

    def delete(self) -> None:
        """Detach from the gizmo and leave the registry."""
        if self.deleted:
            return
        self.deleted = True
        self.detach_handle_listeners()
        self.gizmo.on_delete.unsubscribe(self.delete)
        if self.registry is not None:
            self.registry.remove(self)
