"""
Plane Derivation Pipeline
=========================
Turns a complete landmark set into the reference axes and the cascade of
resection planes.

Why is this file needed?
------------------------
1. Ordering: Every plane depends on an ancestor (base -> varus/valgus and
   flexion -> distal medial -> distal resection). `derive_plan` runs the steps
   in that fixed order, in one call.
2. Atomicity: A new `SurgicalPlan` is assembled locally and only returned once
   every step succeeded, so a failure never leaves a half-built cascade behind.

Classes:
    SurgicalPlan: Container for the derived lines, planes and markers.

Functions:
    derive_plan: Run the whole pipeline on a landmark store.
"""
from __future__ import annotations

from dataclasses import dataclass, field
import logging
from typing import TYPE_CHECKING

import numpy as np
from scipy.spatial.transform import Rotation

from kneeplanner.config import (
    ANTERIOR_LINE_LENGTH,
    BACK_DIRECTION,
    CANONICAL_NORMAL,
    PERPENDICULAR_LINE_LENGTH,
    PROJECTED_LINE_DEPTH,
    RESECTION_DEPTH,
)
from kneeplanner.errors import IncompletePlanError, MissingAxisError
from kneeplanner.model.axes import derive_axes
from kneeplanner.model.geometry_primitives import Line, LineRole, Marker, MarkerRole, Plane, PlaneRole
from kneeplanner.model.geometry_utils import direction, normalize, project_to_depth, rotation_aligning
from kneeplanner.model.landmarks import LandmarkName, LandmarkStore, REQUIRED_LANDMARKS

if TYPE_CHECKING:
    import numpy.typing as npt

logger = logging.getLogger(__name__)

ADJUSTABLE_PLANES: tuple[PlaneRole, PlaneRole] = (PlaneRole.VARUS_VALGUS, PlaneRole.FLEXION)


@dataclass
class SurgicalPlan:
    """
    Everything derived from one complete landmark set.

    `lines` keeps creation order (the four axes first, then the auxiliary
    lines); `planes` keeps dependency order. Only the two adjustable plane
    slots change after derivation, and only through `set_plane`.
    """
    axes: dict[LineRole, Line] = field(default_factory=dict)
    lines: dict[LineRole, Line] = field(default_factory=dict)
    planes: dict[PlaneRole, Plane] = field(default_factory=dict)
    markers: list[Marker] = field(default_factory=list)
    base_orientations: dict[PlaneRole, Rotation] = field(default_factory=dict)

    def line(self, role: LineRole) -> Line:
        try:
            return self.lines[role]
        except KeyError:
            raise MissingAxisError(f"'{role}' has not been derived.") from None

    def plane(self, role: PlaneRole) -> Plane:
        try:
            return self.planes[role]
        except KeyError:
            raise IncompletePlanError(f"'{role}' has not been derived.") from None

    def base_orientation(self, role: PlaneRole) -> Rotation:
        """The orientation an adjustable plane had when it was derived."""
        try:
            return self.base_orientations[role]
        except KeyError:
            raise IncompletePlanError(f"'{role}' is not an adjustable plane of this plan.") from None

    def set_plane(self, plane: Plane) -> None:
        if plane.role not in ADJUSTABLE_PLANES:
            raise ValueError(f"'{plane.role}' is fixed once derived.")
        if plane.role not in self.planes:
            raise IncompletePlanError(f"'{plane.role}' has not been derived.")
        self.planes[plane.role] = plane


# ------------------------------------------------------------------------------
# Pipeline steps
# ------------------------------------------------------------------------------
def _base_plane(store: LandmarkStore, plan: SurgicalPlan) -> Plane:
    femur_center = store.position(LandmarkName.FEMUR_CENTER)
    hip_center = store.position(LandmarkName.HIP_CENTER)

    axis_direction = direction(femur_center, hip_center)
    orientation = rotation_aligning(CANONICAL_NORMAL, axis_direction)
    base = Plane(
        role=PlaneRole.MECHANICAL_AXIS,
        origin=femur_center,
        orientation=orientation,
        anchor_points=(femur_center,),
    )
    plan.planes[base.role] = base

    # TEA landmarks dropped onto the depth of the base plane
    depth = base.origin[2]
    medial = project_to_depth(store.position(LandmarkName.MEDIAL_EPICONDYLE), depth)
    lateral = project_to_depth(store.position(LandmarkName.LATERAL_EPICONDYLE), depth)
    plan.lines[LineRole.PROJECTED_TEA] = Line(role=LineRole.PROJECTED_TEA, start=medial, end=lateral)
    plan.markers.append(Marker(role=MarkerRole.PROJECTED_MEDIAL_EPICONDYLE, position=medial))
    plan.markers.append(Marker(role=MarkerRole.PROJECTED_LATERAL_EPICONDYLE, position=lateral))

    logger.debug(f"Base plane at {base.origin.tolist()} aligned to {axis_direction.tolist()}")
    return base


def _anterior_lines(store: LandmarkStore, plan: SurgicalPlan) -> None:
    """Anterior line and its in-plane perpendicular, both rooted at the femur center."""
    femur_center = store.position(LandmarkName.FEMUR_CENTER)
    tea = direction(
        store.position(LandmarkName.MEDIAL_EPICONDYLE),
        store.position(LandmarkName.LATERAL_EPICONDYLE),
    )
    tea_projected = normalize((tea[0], tea[1], 0.0))
    anterior_direction = np.array([-tea_projected[1], tea_projected[0], 0.0])

    anterior = Line(
        role=LineRole.ANTERIOR,
        start=femur_center,
        end=femur_center + ANTERIOR_LINE_LENGTH * anterior_direction,
    )
    perpendicular = Line(
        role=LineRole.PERPENDICULAR,
        start=femur_center,
        end=femur_center + PERPENDICULAR_LINE_LENGTH * tea_projected,
    )
    plan.lines[anterior.role] = anterior
    plan.lines[perpendicular.role] = perpendicular


def _adjustable_planes(base: Plane, plan: SurgicalPlan) -> Plane:
    for role in ADJUSTABLE_PLANES:
        plan.planes[role] = base.duplicate(role)
        plan.base_orientations[role] = base.orientation
    return plan.planes[PlaneRole.FLEXION]


def _distal_medial_plane(store: LandmarkStore, flexion: Plane, plan: SurgicalPlan) -> Plane:
    distal_medial = store.position(LandmarkName.DISTAL_MEDIAL_PT)
    plane = flexion.duplicate(
        PlaneRole.DISTAL_MEDIAL,
        origin=distal_medial,
        anchor_points=(distal_medial,),
    )
    plan.planes[plane.role] = plane

    depth = flexion.origin[2]
    plan.lines[LineRole.PROJECTED_DISTAL_MEDIAL] = Line(
        role=LineRole.PROJECTED_DISTAL_MEDIAL,
        start=project_to_depth(distal_medial, depth),
        end=project_to_depth(distal_medial, depth - PROJECTED_LINE_DEPTH),
    )
    return plane


def _distal_resection_plane(store: LandmarkStore, flexion: Plane, plan: SurgicalPlan) -> Plane:
    """Parallel to the flexion plane, pushed back from the distal medial point."""
    distal_medial = store.position(LandmarkName.DISTAL_MEDIAL_PT)
    origin = distal_medial + RESECTION_DEPTH * np.asarray(BACK_DIRECTION, dtype=np.float64)
    plane = flexion.duplicate(
        PlaneRole.DISTAL_RESECTION,
        origin=origin,
        anchor_points=(distal_medial,),
    )
    plan.planes[plane.role] = plane

    depth = plane.origin[2]
    plan.lines[LineRole.PROJECTED_DISTAL_RESECTION] = Line(
        role=LineRole.PROJECTED_DISTAL_RESECTION,
        start=project_to_depth(distal_medial, depth),
        end=project_to_depth(distal_medial, depth - PROJECTED_LINE_DEPTH),
    )
    return plane


def derive_plan(store: LandmarkStore) -> SurgicalPlan:
    """
    Derive axes, auxiliary lines and the five planes from a complete store.

    Raises:
        IncompletePlanError: If any of the ten landmarks is missing.
        DegenerateVectorError: If the landmarks define a zero-length direction
            (e.g. femur center on top of hip center).
    """
    missing = store.missing(REQUIRED_LANDMARKS)
    if missing:
        raise IncompletePlanError(
            f"Cannot derive plan, missing landmarks: {', '.join(missing)}", missing=missing
        )

    plan = SurgicalPlan()
    plan.axes = derive_axes(store)
    plan.lines.update(plan.axes)

    base = _base_plane(store, plan)
    _anterior_lines(store, plan)
    flexion = _adjustable_planes(base, plan)
    _distal_medial_plane(store, flexion, plan)
    _distal_resection_plane(store, flexion, plan)

    logger.info(
        f"Derived plan: {len(plan.axes)} axes, {len(plan.lines)} lines, {len(plan.planes)} planes."
    )
    return plan
