"""
Geometric Primitives for the planning engine.

All primitives are immutable value types. Positions are copied on
construction so a derived entity never aliases a landmark or another entity.
"""
from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import StrEnum
from typing import TYPE_CHECKING

import numpy as np
from scipy.spatial.transform import Rotation

from kneeplanner.model.geometry_utils import as_vec3, direction, plane_normal, VectorLike

if TYPE_CHECKING:
    import numpy.typing as npt


# ------------------------------------------------------------------------------
# Roles
# ------------------------------------------------------------------------------
class LineRole(StrEnum):
    MECHANICAL_AXIS = "Mechanical Axis"
    ANATOMICAL_AXIS = "Anatomical Axis"
    TEA = "TEA-Trans epicondyle Axis"
    PCA = "PCA- Posterior Condyle Axis"
    PROJECTED_TEA = "Projected Line"
    ANTERIOR = "Anterior Line"
    PERPENDICULAR = "Perpendicular Line"
    PROJECTED_DISTAL_MEDIAL = "Projected Distal Medial Line"
    PROJECTED_DISTAL_RESECTION = "Projected Distal Resection Line"


class PlaneRole(StrEnum):
    MECHANICAL_AXIS = "Mechanical Axis Plane"
    VARUS_VALGUS = "Varus/Valgus Plane"
    FLEXION = "Flexion Plane"
    DISTAL_MEDIAL = "Distal Medial Plane"
    DISTAL_RESECTION = "Distal Resection Plane"


class MarkerRole(StrEnum):
    PROJECTED_MEDIAL_EPICONDYLE = "Projected Medial Epicondyle"
    PROJECTED_LATERAL_EPICONDYLE = "Projected Lateral Epicondyle"


def _frozen_vec3(value: VectorLike) -> npt.NDArray[np.float64]:
    arr = as_vec3(value)
    arr.setflags(write=False)
    return arr


# ------------------------------------------------------------------------------
# Data Structures
# ------------------------------------------------------------------------------
@dataclass(frozen=True, eq=False)
class Line:
    """A straight segment between two snapshotted points."""
    role: LineRole
    start: npt.NDArray[np.float64]
    end: npt.NDArray[np.float64]

    def __post_init__(self) -> None:
        object.__setattr__(self, "start", _frozen_vec3(self.start))
        object.__setattr__(self, "end", _frozen_vec3(self.end))

    @property
    def name(self) -> str:
        return self.role.value

    @property
    def points(self) -> tuple[npt.NDArray[np.float64], npt.NDArray[np.float64]]:
        return self.start, self.end

    @property
    def length(self) -> float:
        return float(np.linalg.norm(self.end - self.start))

    def direction(self) -> npt.NDArray[np.float64]:
        """Unit vector from start to end."""
        return direction(self.start, self.end)


@dataclass(frozen=True, eq=False)
class Plane:
    """
    An oriented plane: the canonical normal (0, 0, 1) rotated by `orientation`,
    centred on `origin`.
    """
    role: PlaneRole
    origin: npt.NDArray[np.float64]
    orientation: Rotation
    anchor_points: tuple[npt.NDArray[np.float64], ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        object.__setattr__(self, "origin", _frozen_vec3(self.origin))
        object.__setattr__(
            self, "anchor_points", tuple(_frozen_vec3(p) for p in self.anchor_points)
        )

    @property
    def name(self) -> str:
        return self.role.value

    @property
    def normal(self) -> npt.NDArray[np.float64]:
        return plane_normal(self.orientation)

    def duplicate(self, role: PlaneRole, **changes) -> Plane:
        """Rigid copy of this plane under a new role, optionally re-positioned or re-oriented."""
        return replace(self, role=role, **changes)

    def signed_distance(self, point: VectorLike) -> float:
        """Signed distance of `point` from the plane, positive on the normal side."""
        return float(np.dot(as_vec3(point) - self.origin, self.normal))


@dataclass(frozen=True, eq=False)
class Marker:
    """A derived point drawn as a small sphere."""
    role: MarkerRole
    position: npt.NDArray[np.float64]

    def __post_init__(self) -> None:
        object.__setattr__(self, "position", _frozen_vec3(self.position))

    @property
    def name(self) -> str:
        return self.role.value
