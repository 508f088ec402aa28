"""
Configuration & Constants
=========================
This module serves as the central registry for file paths and global constants.

Why is this file needed?
------------------------
1. Abstraction: Every fixed length, offset and angle limit used by the plane
   cascade lives here instead of being scattered through the geometry code.
2. Deployment: It handles the logic required by PyInstaller (sys._MEIPASS) to
   find assets (demo landmark sets) when the app is frozen into an .exe.

Exports:
    ASSETS_PATH (str): Absolute path to the assets directory.
    DEMO_LANDMARKS_PATH (str): Absolute path to the bundled demo landmark set.
"""
import sys
import os
import logging
from pathlib import Path

logger = logging.getLogger(__name__)


def get_resource_path(relative_path: str) -> str:
    """
    Get absolute path to resource, works for dev and for PyInstaller.
    """
    if hasattr(sys, '_MEIPASS'):
        # PyInstaller temp folder
        base_path: str = getattr(sys, '_MEIPASS')
        return os.path.join(base_path, relative_path)

    # Development mode: resolve relative to this file
    # config.py is in src/kneeplanner/
    current_file_path: Path = Path(__file__)
    project_root: Path = current_file_path.parent.parent.parent
    return os.path.join(str(project_root), relative_path)


# Paths
ASSETS_PATH: str = get_resource_path("assets")
DEMO_LANDMARKS_PATH: str = os.path.join(ASSETS_PATH, "landmarks_right_femur.json")

# Geometry (model units are millimetres)
CANONICAL_NORMAL: tuple[float, float, float] = (0.0, 0.0, 1.0)
BACK_DIRECTION: tuple[float, float, float] = (0.0, 0.0, -1.0)
ANTERIOR_LINE_LENGTH: float = 10.0
PERPENDICULAR_LINE_LENGTH: float = 10.0
RESECTION_DEPTH: float = 10.0
PROJECTED_LINE_DEPTH: float = 10.0
EPSILON: float = 1e-9

# Rotation controller limits
ANGLE_MIN: int = -10
ANGLE_MAX: int = 10
ANGLE_STEP: int = 1
DEFAULT_VARUS_ANGLE: int = -1
DEFAULT_FLEXION_ANGLE: int = 1

# Rendering
PLANE_SIZE: float = 300.0
PLANE_OPACITY: float = 0.5
LANDMARK_RADIUS: float = 2.0
BONE_COLOR: str = "#E3DAC9"
LANDMARK_COLOR: str = "#F05941"
MARKER_COLOR: str = "#FB8B24"

if not os.path.exists(ASSETS_PATH):
    logger.warning(f"Assets path not found at {ASSETS_PATH}")
