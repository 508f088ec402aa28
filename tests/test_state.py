"""
Session orchestration:
- one plan derivation when the last landmark lands, none before
- later edits only take effect through update()
- rotations re-orient planes without re-deriving
"""
import numpy as np
import pytest

from kneeplanner.errors import DegenerateVectorError, IncompletePlanError, InvalidNameError, MissingAxisError, OutOfRangeError
from kneeplanner.model.geometry_primitives import LineRole, PlaneRole
from kneeplanner.model.landmarks import LandmarkName


def record(signal) -> list:
    received = []
    signal.connect(received.append)
    return received


def test_new_session_is_empty(session):
    assert session.plan is None
    assert session.active_landmark is None
    assert not session.is_complete
    assert session.rotation.varus_angle == -1
    assert session.rotation.flexion_angle == 1


def test_each_placement_emits_landmark_changed(session, positions):
    landmarks = record(session.landmark_changed)
    for name, position in positions.items():
        session.place_landmark(name, position)

    assert [landmark.name for landmark in landmarks] == list(positions)


def test_plan_derived_exactly_once_on_completion(session, positions):
    plans = record(session.plan_changed)
    names = list(positions)

    for name in names[:-1]:
        session.place_landmark(name, positions[name])
        assert session.plan is None
    assert plans == []

    session.place_landmark(names[-1], positions[names[-1]])
    assert len(plans) == 1
    assert plans[0] is session.plan
    assert list(session.plan.planes) == [
        PlaneRole.MECHANICAL_AXIS,
        PlaneRole.VARUS_VALGUS,
        PlaneRole.FLEXION,
        PlaneRole.DISTAL_MEDIAL,
        PlaneRole.DISTAL_RESECTION,
    ]


def test_default_angles_applied_after_derivation(planned_session):
    plan = planned_session.plan
    rad = np.deg2rad(1)

    assert np.allclose(plan.planes[PlaneRole.VARUS_VALGUS].normal, [-np.sin(rad), 0.0, np.cos(rad)])
    assert np.allclose(plan.planes[PlaneRole.FLEXION].normal, [0.0, -np.sin(rad), np.cos(rad)])


def test_edits_after_completion_wait_for_update(planned_session):
    plans = record(planned_session.plan_changed)
    old_plan = planned_session.plan

    planned_session.place_landmark(LandmarkName.FEMUR_CENTER, (0.0, 0.0, 10.0))
    assert planned_session.plan is old_plan
    assert plans == []

    new_plan = planned_session.update()
    assert plans == [new_plan]
    assert np.allclose(new_plan.planes[PlaneRole.MECHANICAL_AXIS].origin, [0.0, 0.0, 10.0])


def test_update_without_landmarks_raises(session):
    with pytest.raises(IncompletePlanError) as info:
        session.update()
    assert len(info.value.missing) == 10
    assert session.plan is None


def test_failed_update_keeps_previous_plan(planned_session):
    plans = record(planned_session.plan_changed)
    old_plan = planned_session.plan

    planned_session.place_landmark(LandmarkName.HIP_CENTER, (0.0, 0.0, 0.0))
    with pytest.raises(DegenerateVectorError):
        planned_session.update()

    assert planned_session.plan is old_plan
    assert plans == []


def test_update_keeps_current_angles(planned_session):
    planned_session.set_varus_angle(6)
    plan = planned_session.update()
    rad = np.deg2rad(6)

    assert np.allclose(plan.planes[PlaneRole.VARUS_VALGUS].normal, [np.sin(rad), 0.0, np.cos(rad)])


def test_invalid_landmark_name_is_rejected(session):
    landmarks = record(session.landmark_changed)
    with pytest.raises(InvalidNameError):
        session.place_landmark("Patella", (0.0, 0.0, 0.0))
    assert landmarks == []


# ------------------------------------------------------------------------------
# Picking
# ------------------------------------------------------------------------------

def test_select_landmark_emits_on_change_only(session):
    selections = record(session.active_landmark_changed)
    session.select_landmark("Hip Center")
    session.select_landmark(LandmarkName.HIP_CENTER)
    session.select_landmark(None)

    assert selections == [LandmarkName.HIP_CENTER, None]


def test_pick_places_armed_landmark_and_disarms(session):
    session.select_landmark(LandmarkName.MEDIAL_EPICONDYLE)
    landmark = session.pick((-40.0, 0.0, 5.0))

    assert landmark.name is LandmarkName.MEDIAL_EPICONDYLE
    assert session.active_landmark is None
    assert np.allclose(session.landmarks.position(LandmarkName.MEDIAL_EPICONDYLE), [-40.0, 0.0, 5.0])


def test_pick_miss_leaves_everything_unchanged(session):
    session.select_landmark(LandmarkName.MEDIAL_EPICONDYLE)
    assert session.pick(None) is None

    assert session.active_landmark is LandmarkName.MEDIAL_EPICONDYLE
    assert len(session.landmarks) == 0


def test_pick_without_selection_is_ignored(session):
    landmarks = record(session.landmark_changed)
    assert session.pick((1.0, 2.0, 3.0)) is None
    assert landmarks == []


def test_last_pick_derives_plan(session, positions):
    names = list(positions)
    for name in names[:-1]:
        session.place_landmark(name, positions[name])

    session.select_landmark(names[-1])
    session.pick(positions[names[-1]])
    assert session.plan is not None


# ------------------------------------------------------------------------------
# Rotation
# ------------------------------------------------------------------------------

def test_rotation_before_plan_raises(session):
    with pytest.raises(MissingAxisError):
        session.set_varus_angle(3)
    with pytest.raises(MissingAxisError):
        session.set_flexion_angle(3)


def test_rotation_emits_plane_rotated_without_rederiving(planned_session):
    plans = record(planned_session.plan_changed)
    rotated = record(planned_session.plane_rotated)
    plan = planned_session.plan
    anterior = plan.lines[LineRole.ANTERIOR]

    plane = planned_session.set_flexion_angle(-7)

    assert rotated == [plane]
    assert plans == []
    assert planned_session.plan is plan
    assert plan.lines[LineRole.ANTERIOR] is anterior
    assert planned_session.rotation.flexion_angle == -7


def test_out_of_range_rotation_is_rejected(planned_session):
    rotated = record(planned_session.plane_rotated)
    with pytest.raises(OutOfRangeError):
        planned_session.set_varus_angle(15)
    assert rotated == []
    assert planned_session.rotation.varus_angle == -1


def test_reset_clears_session(planned_session):
    plans = record(planned_session.plan_changed)
    planned_session.select_landmark(LandmarkName.HIP_CENTER)
    planned_session.set_varus_angle(4)

    planned_session.reset()

    assert plans == [None]
    assert planned_session.plan is None
    assert len(planned_session.landmarks) == 0
    assert planned_session.active_landmark is None
    assert planned_session.rotation.varus_angle == -1


def test_fixing_landmark_after_failed_completion_derives_plan(session, positions):
    plans = record(session.plan_changed)
    landmarks = record(session.landmark_changed)
    names = [name for name in positions if name is not LandmarkName.HIP_CENTER]
    for name in names:
        session.place_landmark(name, positions[name])

    with pytest.raises(DegenerateVectorError):
        session.place_landmark(LandmarkName.HIP_CENTER, positions[LandmarkName.FEMUR_CENTER])

    # the placement itself was kept even though derivation failed
    assert LandmarkName.HIP_CENTER in session.landmarks
    assert landmarks[-1].name is LandmarkName.HIP_CENTER
    assert session.is_complete
    assert session.plan is None

    session.place_landmark(LandmarkName.HIP_CENTER, (0.0, 0.0, 400.0))
    assert session.plan is not None
    assert plans == [session.plan]
