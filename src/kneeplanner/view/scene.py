"""
Scene Builders
Convert planning entities (landmarks, lines, planes, markers) into PyVista
geometry. Nothing here renders; the viewer decides what to draw.
"""
from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Iterable, Optional, TYPE_CHECKING

import numpy as np
import pyvista as pv

from kneeplanner.config import LANDMARK_COLOR, LANDMARK_RADIUS, MARKER_COLOR, PLANE_OPACITY, PLANE_SIZE
from kneeplanner.model.geometry_primitives import Line, LineRole, Marker, Plane, PlaneRole
from kneeplanner.model.landmarks import Landmark

if TYPE_CHECKING:
    from kneeplanner.model.planes import SurgicalPlan

logger = logging.getLogger(__name__)

LINE_COLORS: dict[LineRole, str] = {
    LineRole.MECHANICAL_AXIS: "#000000",
    LineRole.ANATOMICAL_AXIS: "#000000",
    LineRole.TEA: "#000000",
    LineRole.PCA: "#000000",
    LineRole.PROJECTED_TEA: "#FB8B24",
    LineRole.ANTERIOR: "#00FF00",
    LineRole.PERPENDICULAR: "#00FFFF",
    LineRole.PROJECTED_DISTAL_MEDIAL: "#FF5733",
    LineRole.PROJECTED_DISTAL_RESECTION: "#8B4513",
}

PLANE_COLORS: dict[PlaneRole, str] = {
    PlaneRole.MECHANICAL_AXIS: "#000000",
    PlaneRole.VARUS_VALGUS: "#9EB8D9",
    PlaneRole.FLEXION: "#FFB534",
    PlaneRole.DISTAL_MEDIAL: "#FF5733",
    PlaneRole.DISTAL_RESECTION: "#8B4513",
}


@dataclass
class SceneItem:
    """One drawable entity."""
    name: str
    mesh: pv.PolyData
    color: str
    opacity: float = 1.0
    line_width: float = 2.0


def landmark_mesh(landmark: Landmark, radius: float = LANDMARK_RADIUS) -> pv.PolyData:
    return pv.Sphere(radius=radius, center=landmark.position)


def marker_mesh(marker: Marker, radius: float = LANDMARK_RADIUS) -> pv.PolyData:
    return pv.Sphere(radius=radius, center=marker.position)


def line_mesh(line: Line) -> pv.PolyData:
    return pv.Line(line.start, line.end)


def plane_mesh(plane: Plane, size: float = PLANE_SIZE) -> pv.PolyData:
    """
    A square of side `size` in the canonical XY plane, rotated by the plane's
    orientation and moved to its origin.
    """
    half = 0.5 * size
    corners = np.array([
        [-half, -half, 0.0],
        [half, -half, 0.0],
        [half, half, 0.0],
        [-half, half, 0.0],
    ])
    points = plane.orientation.apply(corners) + plane.origin
    return pv.PolyData(points, faces=np.array([4, 0, 1, 2, 3]))


def build_scene(landmarks: Iterable[Landmark], plan: Optional[SurgicalPlan] = None) -> list[SceneItem]:
    """Collect every drawable for the current session state."""
    items = [
        SceneItem(name=landmark.name.value, mesh=landmark_mesh(landmark), color=LANDMARK_COLOR)
        for landmark in landmarks
    ]
    if plan is None:
        return items

    for line in plan.lines.values():
        items.append(SceneItem(name=line.name, mesh=line_mesh(line), color=LINE_COLORS[line.role]))

    for marker in plan.markers:
        items.append(SceneItem(name=marker.name, mesh=marker_mesh(marker), color=MARKER_COLOR))

    for plane in plan.planes.values():
        items.append(SceneItem(
            name=plane.name,
            mesh=plane_mesh(plane),
            color=PLANE_COLORS[plane.role],
            opacity=PLANE_OPACITY,
        ))

    logger.debug(f"Built scene with {len(items)} items.")
    return items
