import numpy as np
import pygame
import pytest

from orrery.core.config import RENDER_CFG
from orrery.core.model import CameraPose
from orrery.render import (
    TextCache,
    downsample_points,
    draw_body,
    draw_hud,
    draw_orbit,
    focal_length,
    project_points,
    projected_radius,
    to_camera_space,
    visible_runs,
)
from orrery.render.projection import SCREEN_LIMIT

SIZE = (200, 100)


class FakeFont:
    def __init__(self):
        self.calls = 0

    def render(self, text, antialias, color):
        self.calls += 1
        return pygame.Surface((8 * len(text) + 1, 10))


@pytest.fixture
def pose():
    """Camera at z = 10 looking down -Z."""
    return CameraPose(position=np.array([0.0, 0.0, 10.0]), rotation=np.eye(3))


class TestProjection:

    def test_focal_length(self):
        assert focal_length(100, 90.0) == pytest.approx(50.0)

    def test_camera_space(self, pose):
        local = to_camera_space(np.array([1.0, 2.0, 0.0]), pose)
        assert np.allclose(local, [[1.0, 2.0, -10.0]])

    def test_center_projects_to_middle(self, pose):
        screen, visible, depth = project_points(
            np.zeros(3), pose, SIZE, fov_deg=60.0, near=0.1
        )
        assert visible[0]
        assert depth[0] == pytest.approx(10.0)
        assert np.allclose(screen[0], [100.0, 50.0])

    def test_up_is_up_on_screen(self, pose):
        screen, _, _ = project_points(
            np.array([[1.0, 1.0, 0.0]]), pose, SIZE, fov_deg=60.0, near=0.1
        )
        assert screen[0, 0] > 100.0
        assert screen[0, 1] < 50.0

    def test_behind_camera_hidden(self, pose):
        _, visible, _ = project_points(
            np.array([[0.0, 0.0, 20.0]]), pose, SIZE, fov_deg=60.0, near=0.1
        )
        assert not visible[0]

    def test_huge_coordinates_clipped(self, pose):
        screen, visible, _ = project_points(
            np.array([[1e9, 0.0, 10.0 - 1e-3]]), pose, SIZE, fov_deg=60.0, near=1e-4
        )
        assert visible[0]
        assert screen[0, 0] == SCREEN_LIMIT

    def test_projected_radius(self):
        assert projected_radius(1.0, 10.0, 100, 90.0) == pytest.approx(5.0)
        assert projected_radius(1.0, -1.0, 100, 90.0) == 0.0

    def test_visible_runs(self):
        screen = np.array([[0.0, 0.0], [1.0, 1.0], [2.0, 2.0], [3.0, 3.0], [4.4, 4.6]])
        visible = np.array([True, True, False, True, True])
        assert visible_runs(screen, visible) == [[(0, 0), (1, 1)], [(3, 3), (4, 5)]]


class TestDrawing:

    def test_draw_body_fills_center(self, pose):
        surface = pygame.Surface(SIZE)
        assert draw_body(
            surface, np.zeros(3), 1.0, pose, color=(200, 10, 10), render_cfg=RENDER_CFG
        )
        assert tuple(surface.get_at((100, 50)))[:3] == (200, 10, 10)

    def test_draw_body_behind_camera(self, pose):
        surface = pygame.Surface(SIZE)
        assert not draw_body(
            surface, np.array([0.0, 0.0, 30.0]), 1.0, pose, color=(200, 10, 10),
            render_cfg=RENDER_CFG,
        )
        assert tuple(surface.get_at((100, 50)))[:3] == (0, 0, 0)

    def test_draw_orbit_counts_runs(self, pose):
        surface = pygame.Surface(SIZE)
        angles = np.linspace(0.0, 2.0 * np.pi, 50)
        ring = np.column_stack((2.0 * np.cos(angles), 2.0 * np.sin(angles), np.zeros(50)))
        assert draw_orbit(surface, ring, pose, render_cfg=RENDER_CFG) == 1

    def test_orbit_through_camera_plane_splits(self, pose):
        surface = pygame.Surface(SIZE)
        angles = np.linspace(-0.5 * np.pi, 1.5 * np.pi, 64)
        # Ring in the x-z plane centred on the camera, starting in front of it.
        ring = np.column_stack((5.0 * np.cos(angles), np.zeros(64), 10.0 + 5.0 * np.sin(angles)))
        assert draw_orbit(surface, ring, pose, render_cfg=RENDER_CFG) == 2

    def test_downsample_keeps_endpoint(self):
        points = np.arange(1002 * 3, dtype=float).reshape(1002, 3)
        sampled = downsample_points(points, 800)
        assert len(sampled) <= 801
        assert np.array_equal(sampled[0], points[0])
        assert np.array_equal(sampled[-1], points[-1])

    def test_downsample_noop_below_limit(self):
        points = np.zeros((10, 3))
        assert downsample_points(points, 800) is points

    def test_draw_hud_uses_cache(self):
        surface = pygame.Surface(SIZE)
        font = FakeFont()
        cache = TextCache()
        lines = [("one", (255, 255, 255)), ("two", (255, 255, 255))]
        draw_hud(surface, lines, font, cache, render_cfg=RENDER_CFG)
        draw_hud(surface, lines, font, cache, render_cfg=RENDER_CFG)
        assert font.calls == 2
        assert len(cache) == 2


class TestTextCache:

    def test_evicts_least_recent(self):
        font = FakeFont()
        cache = TextCache(max_size=2)
        first = cache.render(font, "a", (1, 2, 3))
        cache.render(font, "b", (1, 2, 3))
        assert cache.render(font, "a", (1, 2, 3)) is first
        cache.render(font, "c", (1, 2, 3))
        assert len(cache) == 2
        cache.render(font, "a", (1, 2, 3))
        assert font.calls == 3
        cache.render(font, "b", (1, 2, 3))
        assert font.calls == 4

    def test_color_is_part_of_key(self):
        font = FakeFont()
        cache = TextCache()
        cache.render(font, "a", (1, 2, 3))
        cache.render(font, "a", (3, 2, 1))
        assert font.calls == 2
