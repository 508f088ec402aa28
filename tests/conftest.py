import numpy as np
import pytest
from PySide6.QtCore import QCoreApplication

from kneeplanner.app.state import PlanningSession
from kneeplanner.model.landmarks import LandmarkName, LandmarkStore

# Knee at the origin, mechanical axis along +Z, TEA along +X.
POSITIONS: dict[LandmarkName, tuple[float, float, float]] = {
    LandmarkName.FEMUR_CENTER: (0.0, 0.0, 0.0),
    LandmarkName.HIP_CENTER: (0.0, 0.0, 400.0),
    LandmarkName.FEMUR_PROXIMAL_CANAL: (5.0, 3.0, 150.0),
    LandmarkName.FEMUR_DISTAL_CANAL: (2.0, 1.0, 40.0),
    LandmarkName.MEDIAL_EPICONDYLE: (-40.0, 0.0, 5.0),
    LandmarkName.LATERAL_EPICONDYLE: (40.0, 0.0, 5.0),
    LandmarkName.DISTAL_MEDIAL_PT: (-20.0, -5.0, -20.0),
    LandmarkName.DISTAL_LATERAL_PT: (20.0, -5.0, -20.0),
    LandmarkName.POSTERIOR_MEDIAL_PT: (-22.0, -25.0, -5.0),
    LandmarkName.POSTERIOR_LATERAL_PT: (22.0, -25.0, -5.0),
}


@pytest.fixture(scope="session", autouse=True)
def qt_core_app():
    app = QCoreApplication.instance() or QCoreApplication([])
    yield app


@pytest.fixture
def positions() -> dict[LandmarkName, tuple[float, float, float]]:
    return dict(POSITIONS)


@pytest.fixture
def complete_store(positions) -> LandmarkStore:
    store = LandmarkStore()
    for name, position in positions.items():
        store.place(name, position)
    return store


@pytest.fixture
def session() -> PlanningSession:
    return PlanningSession()


@pytest.fixture
def planned_session(session, positions) -> PlanningSession:
    for name, position in positions.items():
        session.place_landmark(name, position)
    return session


def same_rotation(a, b, atol: float = 1e-9) -> bool:
    return np.allclose(a.as_matrix(), b.as_matrix(), atol=atol)
