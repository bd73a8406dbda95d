"""Pinhole projection of world points through a :class:`CameraPose`."""
from __future__ import annotations

import math

import numpy as np

from orrery.core.model import CameraPose

# Pixel coordinates are clipped to this magnitude before drawing.
SCREEN_LIMIT = 1_000_000.0


def focal_length(height: int, fov_deg: float) -> float:
    return (height / 2.0) / math.tan(math.radians(fov_deg) / 2.0)


def to_camera_space(points: np.ndarray, pose: CameraPose) -> np.ndarray:
    """Express world ``points`` (N x 3) in the camera's local axes."""

    return (np.atleast_2d(points) - pose.position) @ pose.rotation


def project_points(
    points: np.ndarray,
    pose: CameraPose,
    size: tuple[int, int],
    *,
    fov_deg: float,
    near: float,
) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
    """Project world points to pixel coordinates.

    Returns ``(screen, visible, depth)`` where ``screen`` is N x 2 in
    pixels, ``visible`` flags points in front of the near plane and
    ``depth`` is the distance along the view direction.
    """

    width, height = size
    local = to_camera_space(points, pose)
    depth = -local[:, 2]
    visible = depth > near
    f = focal_length(height, fov_deg)
    safe_depth = np.where(visible, depth, 1.0)
    screen = np.empty((local.shape[0], 2), dtype=float)
    screen[:, 0] = width / 2.0 + f * local[:, 0] / safe_depth
    screen[:, 1] = height / 2.0 - f * local[:, 1] / safe_depth
    np.clip(screen, -SCREEN_LIMIT, SCREEN_LIMIT, out=screen)
    return screen, visible, depth


def projected_radius(radius: float, depth: float, height: int, fov_deg: float) -> float:
    if depth <= 0.0:
        return 0.0
    return focal_length(height, fov_deg) * radius / depth


def visible_runs(screen: np.ndarray, visible: np.ndarray) -> list[list[tuple[int, int]]]:
    """Split a projected polyline into runs of consecutive visible points."""

    runs: list[list[tuple[int, int]]] = []
    current: list[tuple[int, int]] = []
    for (sx, sy), ok in zip(screen, visible):
        if ok:
            current.append((int(round(sx)), int(round(sy))))
        elif current:
            runs.append(current)
            current = []
    if current:
        runs.append(current)
    return runs


__all__ = [
    "focal_length",
    "project_points",
    "projected_radius",
    "to_camera_space",
    "visible_runs",
]
