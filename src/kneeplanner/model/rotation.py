"""Interactive varus/valgus and flexion adjustment of the resection planes."""
from __future__ import annotations

from dataclasses import dataclass
import logging
import math
from numbers import Real
from typing import Optional

from kneeplanner.config import ANGLE_MAX, ANGLE_MIN, ANGLE_STEP, DEFAULT_FLEXION_ANGLE, DEFAULT_VARUS_ANGLE
from kneeplanner.errors import MissingAxisError, OutOfRangeError
from kneeplanner.model.geometry_primitives import LineRole, Plane, PlaneRole
from kneeplanner.model.geometry_utils import rotate_about_axis
from kneeplanner.model.planes import SurgicalPlan

logger = logging.getLogger(__name__)


def validate_angle(
    degrees: float, minimum: int = ANGLE_MIN, maximum: int = ANGLE_MAX, step: int = ANGLE_STEP
) -> int:
    """Return `degrees` as an int, or raise if it is non-finite, out of range or off the step grid."""
    if isinstance(degrees, bool) or not isinstance(degrees, Real):
        raise OutOfRangeError(degrees, minimum, maximum)
    if not math.isfinite(degrees) or not minimum <= degrees <= maximum:
        raise OutOfRangeError(degrees, minimum, maximum)
    if (degrees - minimum) % step != 0:
        raise OutOfRangeError(degrees, minimum, maximum)
    return int(degrees)


@dataclass
class RotationController:
    """
    Holds the two angle parameters and re-orients the adjustable planes.

    Each rotation starts from the orientation the plane had when it was
    derived, so applying the same angle twice changes nothing.
    """
    varus_angle: int = DEFAULT_VARUS_ANGLE
    flexion_angle: int = DEFAULT_FLEXION_ANGLE

    def set_varus_angle(self, plan: Optional[SurgicalPlan], degrees: float) -> Plane:
        """Rotate the varus/valgus plane about the anterior line."""
        angle = validate_angle(degrees)
        plane = self._rotate(plan, PlaneRole.VARUS_VALGUS, LineRole.ANTERIOR, angle)
        self.varus_angle = angle
        return plane

    def set_flexion_angle(self, plan: Optional[SurgicalPlan], degrees: float) -> Plane:
        """Rotate the flexion plane about the perpendicular line."""
        angle = validate_angle(degrees)
        plane = self._rotate(plan, PlaneRole.FLEXION, LineRole.PERPENDICULAR, angle)
        self.flexion_angle = angle
        return plane

    def apply(self, plan: SurgicalPlan) -> None:
        """Re-apply both current angles, e.g. right after a fresh derivation."""
        self._rotate(plan, PlaneRole.VARUS_VALGUS, LineRole.ANTERIOR, self.varus_angle)
        self._rotate(plan, PlaneRole.FLEXION, LineRole.PERPENDICULAR, self.flexion_angle)

    def reset(self) -> None:
        self.varus_angle = DEFAULT_VARUS_ANGLE
        self.flexion_angle = DEFAULT_FLEXION_ANGLE

    @staticmethod
    def _rotate(plan: Optional[SurgicalPlan], role: PlaneRole, axis_role: LineRole, angle: int) -> Plane:
        if plan is None:
            raise MissingAxisError(f"Cannot rotate '{role}': '{axis_role}' has not been derived.")

        axis = plan.line(axis_role).direction()
        base = plan.base_orientation(role)
        rotated = plan.plane(role).duplicate(role, orientation=rotate_about_axis(base, axis, angle))
        plan.set_plane(rotated)

        logger.debug(f"{role} rotated {angle} deg about {axis_role} {axis.tolist()}")
        return rotated
