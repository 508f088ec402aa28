"""
Landmark Import (JSON)
Reads a landmark set captured elsewhere so the pipeline can run headless.

Expected layout, either a list or a mapping::

    [{"name": "Femur Center", "position": [x, y, z]}, ...]
    {"Femur Center": [x, y, z], ...}
"""
from __future__ import annotations

import json
import logging
import os
from typing import Any

from kneeplanner.model.landmarks import LandmarkName

logger = logging.getLogger(__name__)


def parse_landmarks(data: Any) -> list[tuple[LandmarkName, list[float]]]:
    """
    Normalize decoded JSON into (name, position) pairs, keeping file order.

    Raises:
        InvalidNameError: For an unknown landmark name.
        ValueError: If the document has neither supported layout.
    """
    if isinstance(data, dict):
        items = list(data.items())
    elif isinstance(data, list):
        try:
            items = [(entry["name"], entry["position"]) for entry in data]
        except (TypeError, KeyError) as e:
            raise ValueError(f"Landmark entries need 'name' and 'position': {e}") from e
    else:
        raise ValueError(f"Unsupported landmark document of type {type(data).__name__}.")

    return [(LandmarkName.parse(name), list(position)) for name, position in items]


def load_landmarks(filepath: str) -> list[tuple[LandmarkName, list[float]]]:
    logger.info(f"Loading landmarks from: {filepath}")
    if not os.path.exists(filepath):
        raise FileNotFoundError(f"Landmark file not found: {filepath}")

    with open(filepath, "r", encoding="utf-8") as f:
        data = json.load(f)

    landmarks = parse_landmarks(data)
    logger.info(f"Loaded {len(landmarks)} landmarks.")
    return landmarks
