"""Axis derivation: the four reference axes drawn between landmark pairs."""
from __future__ import annotations

import logging

from kneeplanner.errors import IncompletePlanError
from kneeplanner.model.geometry_primitives import Line, LineRole
from kneeplanner.model.landmarks import LandmarkName, LandmarkStore

logger = logging.getLogger(__name__)

# Role -> (start landmark, end landmark)
AXIS_ENDPOINTS: dict[LineRole, tuple[LandmarkName, LandmarkName]] = {
    LineRole.MECHANICAL_AXIS: (LandmarkName.HIP_CENTER, LandmarkName.FEMUR_CENTER),
    LineRole.ANATOMICAL_AXIS: (LandmarkName.FEMUR_PROXIMAL_CANAL, LandmarkName.FEMUR_DISTAL_CANAL),
    LineRole.TEA: (LandmarkName.MEDIAL_EPICONDYLE, LandmarkName.LATERAL_EPICONDYLE),
    LineRole.PCA: (LandmarkName.POSTERIOR_MEDIAL_PT, LandmarkName.POSTERIOR_LATERAL_PT),
}


def derive_axes(store: LandmarkStore) -> dict[LineRole, Line]:
    """
    Build the Mechanical, Anatomical, TEA and PCA axes from the landmark store.

    The endpoints are copies; moving a landmark afterwards does not move an
    existing axis.

    Raises:
        IncompletePlanError: If any endpoint landmark has not been placed.
    """
    required = {name for pair in AXIS_ENDPOINTS.values() for name in pair}
    missing = store.missing(required)
    if missing:
        raise IncompletePlanError(
            f"Cannot derive axes, missing landmarks: {', '.join(missing)}", missing=missing
        )

    axes = {
        role: Line(role=role, start=store.position(start), end=store.position(end))
        for role, (start, end) in AXIS_ENDPOINTS.items()
    }
    for line in axes.values():
        logger.debug(f"{line.name}: {line.start.tolist()} -> {line.end.tolist()}")
    return axes
