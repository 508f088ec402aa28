from __future__ import annotations

from typing import TYPE_CHECKING, Sequence, Union

import numpy as np
from scipy.spatial.transform import Rotation

from kneeplanner.config import CANONICAL_NORMAL, EPSILON
from kneeplanner.errors import DegenerateVectorError

if TYPE_CHECKING:
    from numpy import typing as npt

VectorLike = Union[Sequence[float], "npt.NDArray[np.float64]"]


def as_vec3(value: VectorLike) -> npt.NDArray[np.float64]:
    """
    Convert a point or vector into a fresh float64 array of shape (3,).

    Raises:
        ValueError: If the input does not hold exactly three finite numbers.
    """
    arr = np.array(value, dtype=np.float64).reshape(-1)
    if arr.shape != (3,):
        raise ValueError(f"Expected 3 coordinates, got shape {arr.shape}.")
    if not np.all(np.isfinite(arr)):
        raise ValueError(f"Coordinates must be finite, got {arr.tolist()}.")
    return arr


def normalize(vector: VectorLike, eps: float = EPSILON) -> npt.NDArray[np.float64]:
    """Return `vector` scaled to unit length."""
    v = as_vec3(vector)
    length = np.linalg.norm(v)
    if length < eps:
        raise DegenerateVectorError(f"Cannot normalize zero-length vector {v.tolist()}.")
    return v / length


def direction(a: VectorLike, b: VectorLike) -> npt.NDArray[np.float64]:
    """
    Unit vector pointing from point `a` to point `b`.

    Raises:
        DegenerateVectorError: If the two points coincide.
    """
    a, b = as_vec3(a), as_vec3(b)
    delta = b - a
    if np.linalg.norm(delta) < EPSILON:
        raise DegenerateVectorError(
            f"Points {a.tolist()} and {b.tolist()} coincide; direction is undefined."
        )
    return delta / np.linalg.norm(delta)


def orthogonal(vector: VectorLike) -> npt.NDArray[np.float64]:
    """
    A unit vector perpendicular to `vector`.

    The component with the smallest magnitude is zeroed so the result is
    deterministic and well conditioned.
    """
    v = normalize(vector)
    if abs(v[0]) > abs(v[2]):
        return normalize((-v[1], v[0], 0.0))
    return normalize((0.0, -v[2], v[1]))


def rotation_aligning(from_vec: VectorLike, to_vec: VectorLike) -> Rotation:
    """
    The shortest-arc rotation carrying `from_vec` onto `to_vec`.

    Both inputs are normalized first. When the vectors are antiparallel the
    rotation axis is not unique; a half turn about `orthogonal(from_vec)` is
    used so the result is always defined.

    Args:
        from_vec: Source direction (e.g. the canonical plane normal).
        to_vec: Target direction.

    Returns:
        A scipy `Rotation` such that `rotation.apply(from_vec)` equals `to_vec`.
    """
    f = normalize(from_vec)
    t = normalize(to_vec)

    # Quaternion (x, y, z, w) = (f x t, 1 + f.t), normalized
    w = 1.0 + float(np.dot(f, t))
    if w < EPSILON:
        axis = orthogonal(f)
        return Rotation.from_quat([axis[0], axis[1], axis[2], 0.0])

    xyz = np.cross(f, t)
    quat = np.array([xyz[0], xyz[1], xyz[2], w])
    return Rotation.from_quat(quat / np.linalg.norm(quat))


def rotate_about_axis(orientation: Rotation, axis: VectorLike, angle_degrees: float) -> Rotation:
    """
    Compose `orientation` with a rotation of `angle_degrees` about `axis`.

    The result is always relative to the orientation passed in; callers that
    need non-cumulative behaviour must pass the original base orientation.
    """
    unit_axis = normalize(axis)
    offset = Rotation.from_rotvec(np.deg2rad(angle_degrees) * unit_axis)
    return offset * orientation


def plane_normal(orientation: Rotation) -> npt.NDArray[np.float64]:
    """The world-space normal of a plane with the given orientation."""
    return orientation.apply(np.array(CANONICAL_NORMAL, dtype=np.float64))


def project_to_depth(point: VectorLike, depth: float) -> npt.NDArray[np.float64]:
    """Drop `point` onto the z = `depth` level, keeping its x and y."""
    p = as_vec3(point)
    return np.array([p[0], p[1], depth], dtype=np.float64)
