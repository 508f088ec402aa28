"""
3D Plan Viewer (PyVista)
========================
Thin display and picking adapter around a `PlanningSession`.

Why is this file needed?
------------------------
1. Display: It redraws landmarks, axes, markers and planes whenever the
   session signals a change.
2. Picking: Surface picks on the bone mesh are forwarded to
   `PlanningSession.pick`; number keys arm the landmark to be placed.
3. Parameters: Two slider widgets feed the varus/valgus and flexion angles.
"""
from __future__ import annotations

import logging
from typing import Optional

import pyvista as pv

from kneeplanner.app.state import PlanningSession
from kneeplanner.config import ANGLE_MAX, ANGLE_MIN, BONE_COLOR, PLANE_OPACITY
from kneeplanner.errors import PlanningError
from kneeplanner.model.geometry_primitives import Plane
from kneeplanner.model.landmarks import LandmarkName
from kneeplanner.view.scene import PLANE_COLORS, build_scene, plane_mesh

logger = logging.getLogger(__name__)

# '1'..'9', '0' arm the landmarks in canonical order
LANDMARK_KEYS: dict[str, LandmarkName] = {
    str((index + 1) % 10): name for index, name in enumerate(LandmarkName)
}


class PlanViewer:
    def __init__(
        self,
        session: PlanningSession,
        bone: Optional[pv.DataSet] = None,
        plotter: Optional[pv.Plotter] = None,
    ) -> None:
        self.session = session
        self.bone = bone
        self.plotter = plotter if plotter is not None else pv.Plotter()
        self._actor_names: set[str] = set()

        self.session.landmark_changed.connect(self.refresh)
        self.session.plan_changed.connect(self.refresh)
        self.session.plane_rotated.connect(self._on_plane_rotated)
        self.session.active_landmark_changed.connect(self._on_active_landmark_changed)

        self._init_plotter()
        self.refresh()

    # ------------------------------------------------------------------------------
    # Setup
    # ------------------------------------------------------------------------------

    def _init_plotter(self) -> None:
        self.plotter.add_axes()
        self.plotter.set_background("white")

        if self.bone is not None:
            self.plotter.add_mesh(self.bone, color=BONE_COLOR, name="bone", pickable=True)
            self.plotter.enable_surface_point_picking(
                callback=self._on_pick,
                show_message=False,
                show_point=False,
                left_clicking=True,
            )

        for key, name in LANDMARK_KEYS.items():
            self.plotter.add_key_event(key, lambda n=name: self.session.select_landmark(n))
        self.plotter.add_key_event("u", self._on_update_requested)

        self.plotter.add_slider_widget(
            lambda value: self._on_angle(self.session.set_varus_angle, value),
            rng=[ANGLE_MIN, ANGLE_MAX],
            value=self.session.rotation.varus_angle,
            title="Varus",
            pointa=(0.05, 0.1),
            pointb=(0.35, 0.1),
            fmt="%.0f",
            interaction_event="end",
        )
        self.plotter.add_slider_widget(
            lambda value: self._on_angle(self.session.set_flexion_angle, value),
            rng=[ANGLE_MIN, ANGLE_MAX],
            value=self.session.rotation.flexion_angle,
            title="Flexion",
            pointa=(0.65, 0.1),
            pointb=(0.95, 0.1),
            fmt="%.0f",
            interaction_event="end",
        )

    # ------------------------------------------------------------------------------
    # Drawing
    # ------------------------------------------------------------------------------

    def refresh(self, *_) -> None:
        """Redraw every planning entity from the session state."""
        items = build_scene(self.session.landmarks, self.session.plan)

        stale = self._actor_names - {item.name for item in items}
        for name in stale:
            self.plotter.remove_actor(name, render=False)

        for item in items:
            self.plotter.add_mesh(
                item.mesh,
                color=item.color,
                opacity=item.opacity,
                line_width=item.line_width,
                name=item.name,
                pickable=False,
                reset_camera=False,
            )
        self._actor_names = {item.name for item in items}
        self.plotter.render()

    def _on_plane_rotated(self, plane: Plane) -> None:
        self.plotter.add_mesh(
            plane_mesh(plane),
            color=PLANE_COLORS[plane.role],
            opacity=PLANE_OPACITY,
            name=plane.name,
            pickable=False,
            reset_camera=False,
        )
        self.plotter.render()

    def _on_active_landmark_changed(self, name: Optional[LandmarkName]) -> None:
        text = f"Pick: {name}" if name is not None else ""
        self.plotter.add_text(text, position="upper_left", font_size=10, name="active-landmark")

    # ------------------------------------------------------------------------------
    # Input
    # ------------------------------------------------------------------------------

    def _on_pick(self, point) -> None:
        try:
            self.session.pick(point)
        except PlanningError as e:
            logger.error(f"Pick could not be applied: {e}")

    def _on_update_requested(self) -> None:
        try:
            self.session.update()
        except PlanningError as e:
            logger.error(f"Update failed: {e}")

    @staticmethod
    def _on_angle(setter, value: float) -> None:
        try:
            setter(int(round(value)))
        except PlanningError as e:
            logger.error(f"Angle change rejected: {e}")

    def show(self) -> None:
        self.plotter.show()
