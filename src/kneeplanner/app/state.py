"""
Planning Session (Application State)
====================================
This module defines the central state object of a running planning session.

Why is this file needed?
------------------------
1. State Management: It owns the landmark store, the derived plan and the
   rotation parameters in one place. No module-level globals.
2. Orchestration: It decides when derivation runs. The plan is derived once
   when the last missing landmark is placed; afterwards `update()` re-derives
   on request.
3. Decoupling: Views connect to its Qt signals; pickers and sliders call its
   methods. Neither side touches the model directly.

Classes:
    PlanningSession: The aggregate, a QObject emitting change signals.
"""
from __future__ import annotations

import logging
from typing import Optional, Union, TYPE_CHECKING

from PySide6.QtCore import QObject, Signal

from kneeplanner.errors import PlanningError
from kneeplanner.model.geometry_primitives import Plane
from kneeplanner.model.landmarks import Landmark, LandmarkName, LandmarkStore
from kneeplanner.model.planes import SurgicalPlan, derive_plan
from kneeplanner.model.rotation import RotationController

if TYPE_CHECKING:
    from kneeplanner.model.geometry_utils import VectorLike

logger = logging.getLogger(__name__)


class PlanningSession(QObject):
    """Central session store with signals for viewer/panel sync."""
    landmark_changed = Signal(object)         # Landmark
    active_landmark_changed = Signal(object)  # LandmarkName | None
    plan_changed = Signal(object)             # SurgicalPlan | None
    plane_rotated = Signal(object)            # Plane

    def __init__(self) -> None:
        super().__init__()
        self.landmarks = LandmarkStore()
        self.rotation = RotationController()
        self.plan: Optional[SurgicalPlan] = None
        self._active_landmark: Optional[LandmarkName] = None

    # ---- landmarks ----

    @property
    def active_landmark(self) -> Optional[LandmarkName]:
        return self._active_landmark

    @property
    def is_complete(self) -> bool:
        return self.landmarks.all_present()

    def select_landmark(self, name: Union[LandmarkName, str, None]) -> None:
        """Arm a landmark for the next surface pick, or disarm with None."""
        key = None if name is None else LandmarkName.parse(name)
        if key != self._active_landmark:
            self._active_landmark = key
            if key is not None:
                logger.info(f"Selected landmark: {key}")
            self.active_landmark_changed.emit(key)

    def place_landmark(self, name: Union[LandmarkName, str], position: VectorLike) -> Landmark:
        """
        Place (or re-place) a landmark; derives the plan if the set is complete
        and no plan exists yet.

        If that derivation fails, the error propagates but the landmark stays
        stored and `landmark_changed` has already been emitted.
        """
        was_complete = self.is_complete
        landmark = self._store_landmark(name, position)
        self._derive_on_completion(was_complete)
        return landmark

    def pick(self, point: Optional[VectorLike]) -> Optional[Landmark]:
        """
        Handle a surface pick. A miss (None) or a pick with no armed landmark is
        ignored; a hit places the armed landmark and disarms it.
        """
        if point is None or self._active_landmark is None:
            return None

        was_complete = self.is_complete
        landmark = self._store_landmark(self._active_landmark, point)
        self.select_landmark(None)
        self._derive_on_completion(was_complete)
        return landmark

    def _store_landmark(self, name: Union[LandmarkName, str], position: VectorLike) -> Landmark:
        try:
            landmark = self.landmarks.place(name, position)
        except (PlanningError, ValueError) as e:
            logger.warning(f"Rejected landmark '{name}': {e}")
            raise
        self.landmark_changed.emit(landmark)
        return landmark

    def _derive_on_completion(self, was_complete: bool) -> None:
        if not self.is_complete:
            return
        if not was_complete or self.plan is None:
            logger.info("All landmarks placed, deriving plan.")
            self.update()

    # ---- derivation ----

    def update(self) -> SurgicalPlan:
        """
        Re-run the whole derivation pipeline on the current landmarks.

        On failure the previous plan stays in place and the error propagates.
        """
        logger.info(f"Landmarks: {self.landmarks.snapshot()}")
        try:
            plan = derive_plan(self.landmarks)
            self.rotation.apply(plan)
        except PlanningError as e:
            logger.warning(f"Plan derivation failed: {e}")
            raise

        self.plan = plan
        self.plan_changed.emit(plan)
        return plan

    # ---- rotation ----

    def set_varus_angle(self, degrees: float) -> Plane:
        try:
            plane = self.rotation.set_varus_angle(self.plan, degrees)
        except PlanningError as e:
            logger.warning(f"Varus/valgus rotation rejected: {e}")
            raise
        self.plane_rotated.emit(plane)
        return plane

    def set_flexion_angle(self, degrees: float) -> Plane:
        try:
            plane = self.rotation.set_flexion_angle(self.plan, degrees)
        except PlanningError as e:
            logger.warning(f"Flexion rotation rejected: {e}")
            raise
        self.plane_rotated.emit(plane)
        return plane

    def reset(self) -> None:
        """Clear all data for a new session."""
        self.landmarks.clear()
        self.rotation.reset()
        self.plan = None
        self.select_landmark(None)
        self.plan_changed.emit(None)
        logger.info("Planning session has been reset.")
