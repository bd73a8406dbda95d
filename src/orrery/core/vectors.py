"""Small vector and rotation helpers shared by the propagator and cameras.

Rotations are 3x3 matrices whose columns are the local right, up and
back axes expressed in world coordinates. A camera looks along its
local -Z (the negated third column).
"""
from __future__ import annotations

import math

import numpy as np

WORLD_UP = np.array([0.0, 1.0, 0.0], dtype=float)


def normalize(v: np.ndarray) -> np.ndarray:
    """Return ``v`` scaled to unit length."""

    norm = float(np.linalg.norm(v))
    if norm <= 0.0:
        raise ValueError("cannot normalize a zero-length vector")
    return v / norm


def to_cart_coords(r: float, theta: float, phi: float) -> np.ndarray:
    """Spherical to Cartesian, ``phi`` measured from the +Y pole."""

    sin_phi = math.sin(phi)
    return np.array(
        [
            r * sin_phi * math.cos(theta),
            r * math.cos(phi),
            r * sin_phi * math.sin(theta),
        ],
        dtype=float,
    )


def rot_x(angle: float) -> np.ndarray:
    c, s = math.cos(angle), math.sin(angle)
    return np.array([[1.0, 0.0, 0.0], [0.0, c, -s], [0.0, s, c]])


def rot_y(angle: float) -> np.ndarray:
    c, s = math.cos(angle), math.sin(angle)
    return np.array([[c, 0.0, s], [0.0, 1.0, 0.0], [-s, 0.0, c]])


def rot_z(angle: float) -> np.ndarray:
    c, s = math.cos(angle), math.sin(angle)
    return np.array([[c, -s, 0.0], [s, c, 0.0], [0.0, 0.0, 1.0]])


def look_rotation(forward: np.ndarray, up: np.ndarray) -> np.ndarray:
    """Orientation looking along ``forward`` with ``up`` as the roll hint.

    ``up`` need not be perpendicular to ``forward``; it is re-orthogonalised.
    Raises :class:`ValueError` when the two are parallel.
    """

    back = -normalize(forward)
    right = np.cross(up, back)
    if float(np.linalg.norm(right)) < 1e-12:
        raise ValueError("forward and up vectors are parallel")
    right = normalize(right)
    true_up = np.cross(back, right)
    return np.column_stack((right, true_up, back))


def look_at(eye: np.ndarray, target: np.ndarray, up: np.ndarray = WORLD_UP) -> np.ndarray:
    return look_rotation(target - eye, up)


__all__ = [
    "WORLD_UP",
    "look_at",
    "look_rotation",
    "normalize",
    "rot_x",
    "rot_y",
    "rot_z",
    "to_cart_coords",
]
