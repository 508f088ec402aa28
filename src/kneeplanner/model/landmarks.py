"""
Landmark Store
==============
Holds the anatomical points the surgeon picks on the femur surface.

Why is this file needed?
------------------------
1. Identity: The ten landmark roles are a closed set (`LandmarkName`). Lookups
   are keyed by the enum, never by matching free-form strings.
2. Uniqueness: Re-picking a landmark replaces its position, so the store can
   never hold more than one entry per role.
3. Completeness: `all_present` is the gate the session checks before any axis
   or plane derivation runs.

Classes:
    LandmarkName: The ten recognized landmark identifiers.
    Landmark: One placed point.
    LandmarkStore: The collection, ordered by canonical pick order.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
import logging
from typing import Iterable, Iterator, Optional, Union, TYPE_CHECKING

import numpy as np

from kneeplanner.errors import InvalidNameError
from kneeplanner.model.geometry_utils import as_vec3, VectorLike

if TYPE_CHECKING:
    import numpy.typing as npt

logger = logging.getLogger(__name__)


class LandmarkName(StrEnum):
    """Landmark identifiers in canonical pick order."""
    FEMUR_CENTER = "Femur Center"
    HIP_CENTER = "Hip Center"
    FEMUR_PROXIMAL_CANAL = "Femur Proximal Canal"
    FEMUR_DISTAL_CANAL = "Femur Distal Canal"
    MEDIAL_EPICONDYLE = "Medial Epicondyle"
    LATERAL_EPICONDYLE = "Lateral Epicondyle"
    DISTAL_MEDIAL_PT = "Distal Medial Pt"
    DISTAL_LATERAL_PT = "Distal Lateral Pt"
    POSTERIOR_MEDIAL_PT = "Posterior Medial Pt"
    POSTERIOR_LATERAL_PT = "Posterior Lateral Pt"

    @classmethod
    def parse(cls, name: Union[LandmarkName, str]) -> LandmarkName:
        """Resolve an enum member, its display label, or its member name."""
        if isinstance(name, LandmarkName):
            return name
        if isinstance(name, str):
            try:
                return cls(name)
            except ValueError:
                pass
            key = name.strip().upper().replace(" ", "_")
            if key in cls.__members__:
                return cls.__members__[key]
        raise InvalidNameError(name)


REQUIRED_LANDMARKS: frozenset[LandmarkName] = frozenset(LandmarkName)


@dataclass(frozen=True, eq=False)
class Landmark:
    name: LandmarkName
    position: npt.NDArray[np.float64]

    def __post_init__(self) -> None:
        pos = as_vec3(self.position)
        pos.setflags(write=False)
        object.__setattr__(self, "position", pos)

    def to_dict(self) -> dict:
        return {"name": self.name.value, "position": self.position.tolist()}


class LandmarkStore:
    """
    Name-unique collection of landmarks.

    Iteration and `snapshot()` follow the canonical order of `LandmarkName`,
    independent of the order the points were picked in.
    """

    def __init__(self) -> None:
        self._landmarks: dict[LandmarkName, Landmark] = {}

    def place(self, name: Union[LandmarkName, str], position: VectorLike) -> Landmark:
        """
        Insert the landmark, replacing any earlier pick with the same name.

        Raises:
            InvalidNameError: If `name` is not a recognized landmark identifier.
            ValueError: If `position` is not three finite coordinates.
        """
        key = LandmarkName.parse(name)
        landmark = Landmark(name=key, position=position)
        replaced = key in self._landmarks
        self._landmarks[key] = landmark
        logger.debug(
            f"{'Replaced' if replaced else 'Placed'} landmark '{key}' at {landmark.position.tolist()}"
        )
        return landmark

    def get(self, name: Union[LandmarkName, str]) -> Optional[Landmark]:
        return self._landmarks.get(LandmarkName.parse(name))

    def position(self, name: LandmarkName) -> npt.NDArray[np.float64]:
        """Copy of the landmark position. Raises KeyError when it is not placed."""
        return self._landmarks[name].position.copy()

    def all_present(self, required: Iterable[Union[LandmarkName, str]] = REQUIRED_LANDMARKS) -> bool:
        return {LandmarkName.parse(n) for n in required} <= self._landmarks.keys()

    def missing(self, required: Iterable[Union[LandmarkName, str]] = REQUIRED_LANDMARKS) -> list[LandmarkName]:
        wanted = {LandmarkName.parse(n) for n in required}
        return [name for name in LandmarkName if name in wanted and name not in self._landmarks]

    def clear(self) -> None:
        self._landmarks.clear()

    def snapshot(self) -> list[dict]:
        """Plain-data dump of every placed landmark."""
        return [landmark.to_dict() for landmark in self]

    def __len__(self) -> int:
        return len(self._landmarks)

    def __contains__(self, name: object) -> bool:
        try:
            return LandmarkName.parse(name) in self._landmarks  # type: ignore[arg-type]
        except InvalidNameError:
            return False

    def __iter__(self) -> Iterator[Landmark]:
        for name in LandmarkName:
            if name in self._landmarks:
                yield self._landmarks[name]
