import json
import logging

import pytest

from kneeplanner.config import DEMO_LANDMARKS_PATH
from kneeplanner.errors import InvalidNameError
from kneeplanner.main import main
from kneeplanner.model.io import load_landmarks, parse_landmarks
from kneeplanner.model.landmarks import LandmarkName


def test_parse_list_layout():
    data = [
        {"name": "Hip Center", "position": [0, 0, 400]},
        {"name": "Femur Center", "position": [0, 0, 0]},
    ]
    assert parse_landmarks(data) == [
        (LandmarkName.HIP_CENTER, [0, 0, 400]),
        (LandmarkName.FEMUR_CENTER, [0, 0, 0]),
    ]


def test_parse_mapping_layout():
    parsed = parse_landmarks({"Medial Epicondyle": [-40, 0, 5]})
    assert parsed == [(LandmarkName.MEDIAL_EPICONDYLE, [-40, 0, 5])]


def test_parse_rejects_unknown_name():
    with pytest.raises(InvalidNameError):
        parse_landmarks({"Patella": [0, 0, 0]})


@pytest.mark.parametrize("data", [42, "Femur Center", [{"name": "Femur Center"}], [[0, 0, 0]]])
def test_parse_rejects_bad_documents(data):
    with pytest.raises(ValueError):
        parse_landmarks(data)


def test_load_landmarks_from_file(tmp_path, positions):
    path = tmp_path / "landmarks.json"
    path.write_text(json.dumps({name.value: list(p) for name, p in positions.items()}), encoding="utf-8")

    loaded = load_landmarks(str(path))
    assert [name for name, _ in loaded] == list(positions)


def test_load_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_landmarks(str(tmp_path / "nope.json"))


def test_demo_landmark_set_is_complete():
    loaded = load_landmarks(DEMO_LANDMARKS_PATH)
    assert {name for name, _ in loaded} == set(LandmarkName)


# ------------------------------------------------------------------------------
# Command line
# ------------------------------------------------------------------------------

def test_main_runs_headless_on_demo_set(caplog):
    caplog.set_level(logging.INFO, logger="kneeplanner")
    assert main(["--varus", "3", "--flexion", "-2"]) == 0
    assert "Distal Resection Plane" in caplog.text


def test_main_reports_out_of_range_angle():
    assert main(["--varus", "12"]) == 1


def test_main_reports_missing_file(tmp_path):
    assert main([str(tmp_path / "missing.json")]) == 1
