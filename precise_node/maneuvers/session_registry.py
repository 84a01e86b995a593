"""
Gizmo session registry.

Keeps exactly one CorrectionEngine per maneuver node whose gizmo is open,
drives them once per frame and drops them when their gizmo goes away.
"""

from __future__ import annotations

import logging
from typing import Callable, Optional

from ..core.config import GizmoConfig
from ..core.types import ManeuverSession, SessionSource
from .intuitive_correction import CorrectionEngine

logger = logging.getLogger(__name__)


class SessionRegistry:
    """Lifecycle manager for per-node correction engines.

    Normally only one gizmo is visible at a time, but nothing relies on it;
    every node with an attached gizmo gets its own engine.

    Attributes:
        solver_provider: Returns the current solver, or None when there is
            no vessel to plan for.
        config: Options shared with every engine.
    """

    def __init__(self, solver_provider: Callable[[], Optional[SessionSource]],
                 config: Optional[GizmoConfig] = None):
        self.solver_provider = solver_provider
        self.config = config if config is not None else GizmoConfig()
        self._engines: list[CorrectionEngine] = []

    def __len__(self) -> int:
        return len(self._engines)

    @property
    def engines(self) -> tuple[CorrectionEngine, ...]:
        return tuple(self._engines)

    def on_update(self) -> int:
        """Run one frame: discover new sessions, then tick every engine.

        Engines may be removed while this runs (a node deleted from inside
        its own update); those are skipped for the rest of the pass.

        Returns:
            Number of engines that applied a correction this frame.
        """
        self.refresh()

        corrected = 0
        for engine in tuple(self._engines):
            if engine.deleted:
                continue
            if engine.on_update():
                corrected += 1
        return corrected

    def refresh(self) -> int:
        """Create engines for nodes whose gizmo is open and not yet handled.

        Returns:
            Number of engines created.
        """
        solver = self.solver_provider()
        if solver is None:
            return 0

        created = 0
        for node in list(solver.maneuver_nodes):
            if node.gizmo is not None and not self.is_handled(node):
                self._engines.append(CorrectionEngine(self, node, self.config))
                created += 1
                logger.info("Attached gizmo handler for node at UT %.3f (%d active, %s)",
                            node.ut, len(self._engines), self.config.describe())
        return created

    def is_handled(self, node: ManeuverSession) -> bool:
        return any(engine.node is node for engine in self._engines)

    def remove(self, engine: CorrectionEngine) -> None:
        """Drop an engine; unknown engines are ignored."""
        if engine in self._engines:
            self._engines.remove(engine)
            logger.info("Removed gizmo handler for node at UT %.3f (%d active)",
                        engine.node.ut, len(self._engines))

    def on_destroy(self) -> None:
        """Delete every engine, detaching all listeners."""
        while self._engines:
            engine = self._engines[0]
            engine.delete()
            self.remove(engine)
