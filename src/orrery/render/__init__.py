"""Rendering helpers for the orrery."""

from .assets import Color, TextCache, load_font
from .draw import (
    downsample_points,
    draw_body,
    draw_hud,
    draw_orbit,
    draw_orbit_line,
)
from .projection import (
    focal_length,
    project_points,
    projected_radius,
    to_camera_space,
    visible_runs,
)

__all__ = [
    "Color",
    "TextCache",
    "downsample_points",
    "draw_body",
    "draw_hud",
    "draw_orbit",
    "draw_orbit_line",
    "focal_length",
    "load_font",
    "project_points",
    "projected_radius",
    "to_camera_space",
    "visible_runs",
]
