"""
Application Initialization
==========================
This module wires the session together and runs it, headless or with the
PyVista viewer.

Why is this file needed?
------------------------
It acts as the "Dependency Injection" root. It:
1. Sets up logging.
2. Instantiates the PlanningSession (model + orchestration).
3. Feeds it a landmark set and the two angle parameters.
4. Optionally hands the session to the viewer (picking + display).
"""
from __future__ import annotations

import argparse
import logging
import sys
from typing import Optional, Sequence

from PySide6.QtCore import QCoreApplication

from kneeplanner.app.state import PlanningSession
from kneeplanner.config import DEFAULT_FLEXION_ANGLE, DEFAULT_VARUS_ANGLE, DEMO_LANDMARKS_PATH
from kneeplanner.errors import PlanningError
from kneeplanner.logging_config import setup_logging
from kneeplanner.model.io import load_landmarks

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="kneeplanner",
        description="Derive TKA reference axes and resection planes from femoral landmarks.",
    )
    parser.add_argument(
        "landmarks", nargs="?", default=DEMO_LANDMARKS_PATH,
        help="JSON file with the ten landmark positions (default: bundled demo set)",
    )
    parser.add_argument("--varus", type=int, default=DEFAULT_VARUS_ANGLE, help="varus/valgus angle [deg]")
    parser.add_argument("--flexion", type=int, default=DEFAULT_FLEXION_ANGLE, help="flexion angle [deg]")
    parser.add_argument("--show", action="store_true", help="open the 3D viewer")
    parser.add_argument("--bone", default=None, help="optional bone surface (STL/VTK) for picking")
    parser.add_argument("--log-file", default=None, help="also write logs to this file")
    parser.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    return parser


def log_plan(session: PlanningSession) -> None:
    plan = session.plan
    if plan is None:
        logger.info(f"No plan yet, missing: {', '.join(session.landmarks.missing())}")
        return
    for line in plan.lines.values():
        logger.info(f"{line.name}: {line.start.round(3).tolist()} -> {line.end.round(3).tolist()}")
    for plane in plan.planes.values():
        logger.info(
            f"{plane.name}: origin={plane.origin.round(3).tolist()} normal={plane.normal.round(4).tolist()}"
        )


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    # 1. Setup Logging (Console + Optional File)
    setup_logging(level=logging.DEBUG if args.verbose else logging.INFO, log_file=args.log_file)

    # 2. Qt core application for the session signals
    app = QCoreApplication.instance() or QCoreApplication(sys.argv[:1])
    app.setApplicationName("kneeplanner")

    # 3. Initialize the session and feed it
    session = PlanningSession()
    try:
        for name, position in load_landmarks(args.landmarks):
            session.place_landmark(name, position)
        if session.plan is not None:
            session.set_varus_angle(args.varus)
            session.set_flexion_angle(args.flexion)
    except (OSError, ValueError, PlanningError) as e:
        logger.error(f"Planning failed: {e}")
        return 1

    log_plan(session)

    # 4. Optional viewer
    if args.show:
        import pyvista as pv
        from kneeplanner.view.viewer import PlanViewer

        bone = pv.read(args.bone) if args.bone else None
        PlanViewer(session, bone=bone).show()

    return 0


if __name__ == "__main__":
    sys.exit(main())
