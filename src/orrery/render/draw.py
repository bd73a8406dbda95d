from __future__ import annotations

import math
from typing import Sequence, TYPE_CHECKING

import numpy as np
import pygame

from orrery.core.model import CameraPose

from .assets import Color, TextCache
from .projection import project_points, projected_radius, visible_runs

if TYPE_CHECKING:  # pragma: no cover
    from orrery.core.config import RenderCfg


def draw_body(
    surface: pygame.Surface,
    world_position: np.ndarray,
    world_radius: float,
    pose: CameraPose,
    *,
    color: tuple[int, int, int],
    render_cfg: RenderCfg,
) -> bool:
    """Draw a body as a filled disc; returns ``False`` when behind the camera."""

    screen, visible, depth = project_points(
        world_position,
        pose,
        surface.get_size(),
        fov_deg=render_cfg.field_of_view_deg,
        near=render_cfg.near_plane,
    )
    if not visible[0]:
        return False
    radius = projected_radius(
        world_radius, float(depth[0]), surface.get_height(), render_cfg.field_of_view_deg
    )
    center = (int(round(screen[0, 0])), int(round(screen[0, 1])))
    limit = 4 * max(surface.get_size())
    pygame.draw.circle(surface, color, center, max(1, min(int(radius), limit)))
    return True


def draw_orbit_line(
    surface: pygame.Surface,
    color: Color,
    points: Sequence[tuple[int, int]],
    width: int,
) -> None:
    if len(points) < 2:
        return
    if width <= 1:
        pygame.draw.aalines(surface, color, False, points)
    else:
        pygame.draw.lines(surface, color, False, points, width)
        pygame.draw.aalines(surface, color, False, points)


def downsample_points(points: np.ndarray, max_points: int) -> np.ndarray:
    if len(points) <= max_points:
        return points
    step = max(1, math.ceil(len(points) / max_points))
    sampled = points[::step]
    if not np.array_equal(sampled[-1], points[-1]):
        sampled = np.vstack((sampled, points[-1]))
    return sampled


def draw_orbit(
    surface: pygame.Surface,
    lines: np.ndarray,
    pose: CameraPose,
    *,
    render_cfg: RenderCfg,
) -> int:
    """Draw a world-space polyline; returns the number of visible segments."""

    points = downsample_points(lines, render_cfg.max_rendered_orbit_points)
    screen, visible, _ = project_points(
        points,
        pose,
        surface.get_size(),
        fov_deg=render_cfg.field_of_view_deg,
        near=render_cfg.near_plane,
    )
    runs = visible_runs(screen, visible)
    for run in runs:
        draw_orbit_line(surface, render_cfg.orbit_line_color, run, render_cfg.orbit_line_width)
    return len(runs)


def draw_hud(
    surface: pygame.Surface,
    lines: Sequence[tuple[str, tuple[int, int, int]]],
    font: pygame.font.Font,
    text_cache: TextCache,
    *,
    render_cfg: RenderCfg,
) -> None:
    x = render_cfg.hud_margin
    y = render_cfg.hud_margin
    for text, color in lines:
        rendered = text_cache.render(font, text, color)
        surface.blit(rendered, (x, y))
        y += rendered.get_height() + render_cfg.hud_line_spacing


__all__ = [
    "downsample_points",
    "draw_body",
    "draw_hud",
    "draw_orbit",
    "draw_orbit_line",
]
