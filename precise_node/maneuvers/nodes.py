"""
In-memory maneuver nodes, gizmos and handles.

Host-side objects implementing the session-source contract the correction
engine and session registry depend on. A flight planner embeds the core by
providing objects shaped like these; the test-suite drives the core through
them directly.
"""

from __future__ import annotations

import numpy as np
from typing import Callable, Optional, Sequence

from ..core.types import (
    HANDLE_AXES, OrbitPatch, momentum_vector, as_momentum_vector
)


class HandleUpdateHook:
    """Ordered list of subscribers for one notification.

    Subscribing a callback that is already present is a no-op, so attaching
    from a per-frame refresh cannot stack duplicate listeners.
    """

    def __init__(self):
        self._callbacks: list[Callable] = []

    def __contains__(self, callback: object) -> bool:
        return callback in self._callbacks

    def __len__(self) -> int:
        return len(self._callbacks)

    def subscribe(self, callback: Callable) -> bool:
        """Add a callback. Returns False if it was already subscribed."""
        if callback in self._callbacks:
            return False
        self._callbacks.append(callback)
        return True

    def unsubscribe(self, callback: Callable) -> bool:
        """Remove a callback. Returns False if it was not subscribed."""
        if callback not in self._callbacks:
            return False
        self._callbacks.remove(callback)
        return True

    def fire(self, *args) -> None:
        """Invoke every subscriber; subscribers may detach while firing."""
        for callback in list(self._callbacks):
            callback(*args)


class GizmoHandle:
    """One draggable handle of a maneuver gizmo."""

    def __init__(self, name: str):
        self.name = name
        self.on_handle_update = HandleUpdateHook()

    def __repr__(self) -> str:
        return f"GizmoHandle({self.name!r})"


class ManeuverGizmo:
    """On-screen editor for a single maneuver node.

    Attributes:
        node: The node being edited.
        delta_v: Delta-V shown by the gizmo [radial, normal, prograde] [m/s].
        on_delete: Fired once when the gizmo is destroyed.
        handle_*: The six handles; any may be None.
    """

    def __init__(self, node: ManeuverNode, handles: Optional[Sequence[str]] = None):
        self.node = node
        self.delta_v = node.delta_v.copy()
        self.on_delete = HandleUpdateHook()
        self.deleted = False
        names = HANDLE_AXES if handles is None else handles
        for name in HANDLE_AXES:
            setattr(self, name, GizmoHandle(name) if name in names else None)

    def handles(self) -> dict[str, GizmoHandle]:
        """Present handles keyed by attribute name."""
        return {name: getattr(self, name) for name in HANDLE_AXES
                if getattr(self, name) is not None}

    def replace_handle(self, name: str) -> GizmoHandle:
        """Recreate a handle, dropping its subscribers."""
        handle = GizmoHandle(name)
        setattr(self, name, handle)
        return handle

    def drag(self, name: str, amount: float) -> None:
        """Apply a raw single-axis change the way the stock handle does.

        The raw amount is added to the handle's fixed local axis (negated
        for retrograde, anti-normal and radial-in) and the handle hook fires.
        """
        handle = getattr(self, name)
        if handle is None:
            raise ValueError(f"Gizmo has no {name}")
        axis = HANDLE_AXES[name]
        sign = -1.0 if name in ("handle_retrograde", "handle_antinormal",
                                "handle_radial_in") else 1.0
        raw = self.node.delta_v.copy()
        raw[axis.value] += sign * amount
        self.node.delta_v = raw
        self.delta_v = raw.copy()
        handle.on_handle_update.fire(float(amount))

    def delete(self) -> None:
        if self.deleted:
            return
        self.deleted = True
        self.on_delete.fire()


class ManeuverNode:
    """A planned impulsive maneuver on an orbit patch.

    Attributes:
        ut: Maneuver epoch [s].
        patch: Orbit patch the node sits on.
        delta_v: Delta-V [radial, normal, prograde] [m/s], shape (3,).
        gizmo: Attached gizmo while the node is being edited, else None.
        updates: Number of gizmo update reports received.
        last_reported: Last (delta_v, ut) reported through on_gizmo_updated.
    """

    def __init__(self, ut: float, patch: OrbitPatch,
                 delta_v: Optional[Sequence[float]] = None):
        self.ut = ut
        self.patch = patch
        self.delta_v = (momentum_vector() if delta_v is None
                        else as_momentum_vector(delta_v))
        self.gizmo: Optional[ManeuverGizmo] = None
        self.updates = 0
        self.last_reported: Optional[tuple[np.ndarray, float]] = None

    def open_gizmo(self, handles: Optional[Sequence[str]] = None) -> ManeuverGizmo:
        """Attach a fresh gizmo, closing any previous one."""
        self.close_gizmo()
        self.gizmo = ManeuverGizmo(self, handles)
        return self.gizmo

    def close_gizmo(self) -> None:
        gizmo, self.gizmo = self.gizmo, None
        if gizmo is not None:
            gizmo.delete()

    def on_gizmo_updated(self, delta_v: np.ndarray, ut: float) -> None:
        """Solver-side notification that the gizmo committed a new vector."""
        self.delta_v = as_momentum_vector(delta_v)
        self.ut = ut
        self.updates += 1
        self.last_reported = (self.delta_v.copy(), ut)


class PatchedConicSolver:
    """Owner of the maneuver nodes planned for the active vessel."""

    def __init__(self):
        self.maneuver_nodes: list[ManeuverNode] = []

    def add_node(self, ut: float, patch: OrbitPatch,
                 delta_v: Optional[Sequence[float]] = None) -> ManeuverNode:
        node = ManeuverNode(ut, patch, delta_v)
        self.maneuver_nodes.append(node)
        return node

    def remove_node(self, node: ManeuverNode) -> None:
        """Remove a node, destroying its gizmo first."""
        node.close_gizmo()
        self.maneuver_nodes.remove(node)
