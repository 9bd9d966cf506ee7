"""Fixed-size vector and matrix helpers on plain tuples."""

from __future__ import annotations

import math
from typing import Tuple

Vec2D = Tuple[float, float]
Vec3D = Tuple[float, float, float]
Mat3D = Tuple[Vec3D, Vec3D, Vec3D]


def dot(a: Tuple[float, ...], b: Tuple[float, ...]) -> float:
    return sum(x * y for x, y in zip(a, b))


def norm(a: Tuple[float, ...]) -> float:
    return math.sqrt(dot(a, a))


def normalize(a: Tuple[float, ...]) -> Tuple[float, ...]:
    """Return ``a`` scaled to unit length.

    A zero vector is returned unchanged so that degenerate inputs never
    raise on the evaluation path.
    """

    length = norm(a)
    if length <= 0.0:
        return tuple(a)
    return tuple(x / length for x in a)


def cross(a: Vec3D, b: Vec3D) -> Vec3D:
    return (
        a[1] * b[2] - a[2] * b[1],
        a[2] * b[0] - a[0] * b[2],
        a[0] * b[1] - a[1] * b[0],
    )


def rotate(vec: Vec2D, angle: float) -> Vec2D:
    cos_a = math.cos(angle)
    sin_a = math.sin(angle)
    return (cos_a * vec[0] - sin_a * vec[1], sin_a * vec[0] + cos_a * vec[1])


def mat_from_columns(c0: Vec3D, c1: Vec3D, c2: Vec3D) -> Mat3D:
    return (
        (c0[0], c1[0], c2[0]),
        (c0[1], c1[1], c2[1]),
        (c0[2], c1[2], c2[2]),
    )


def mat_column(mat: Mat3D, idx: int) -> Vec3D:
    return (mat[0][idx], mat[1][idx], mat[2][idx])


def mat_vec_mul(mat: Mat3D, vec: Vec3D) -> Vec3D:
    return (
        mat[0][0] * vec[0] + mat[0][1] * vec[1] + mat[0][2] * vec[2],
        mat[1][0] * vec[0] + mat[1][1] * vec[1] + mat[1][2] * vec[2],
        mat[2][0] * vec[0] + mat[2][1] * vec[1] + mat[2][2] * vec[2],
    )


def determinant(mat: Mat3D) -> float:
    return dot(mat_column(mat, 0), cross(mat_column(mat, 1), mat_column(mat, 2)))
