import pygame
import pytest

from orrery.app import InputCollector, hud_lines, parse_args
from orrery.core.config import PHYSICS_CFG
from orrery.core.model import StepInput


def key_down(key):
    return pygame.event.Event(pygame.KEYDOWN, key=key)


def key_up(key):
    return pygame.event.Event(pygame.KEYUP, key=key)


class TestInputCollector:

    def test_empty_frame(self):
        assert InputCollector().collect([]) == StepInput()

    def test_edge_keys_fire_once(self):
        collector = InputCollector()
        step = collector.collect([key_down(pygame.K_l), key_down(pygame.K_TAB)])
        assert step.toggle_lock
        assert step.focus_next
        step = collector.collect([])
        assert not step.toggle_lock
        assert not step.focus_next

    def test_held_keys_persist_until_released(self):
        collector = InputCollector()
        assert collector.collect([key_down(pygame.K_w), key_down(pygame.K_LSHIFT)]).look_up
        step = collector.collect([])
        assert step.look_up
        assert step.precision_held
        assert not collector.collect([key_up(pygame.K_w)]).look_up

    def test_drag_and_scroll(self):
        collector = InputCollector()
        step = collector.collect(
            [
                pygame.event.Event(pygame.MOUSEBUTTONDOWN, button=1, pos=(0, 0)),
                pygame.event.Event(pygame.MOUSEMOTION, rel=(3, -2), pos=(3, -2), buttons=(1, 0, 0)),
                pygame.event.Event(pygame.MOUSEMOTION, rel=(4, 1), pos=(7, -1), buttons=(1, 0, 0)),
                pygame.event.Event(pygame.MOUSEWHEEL, x=0, y=2),
            ]
        )
        assert step.pointer_delta == (7.0, -1.0)
        assert step.rotate_held
        assert step.scroll == 2.0
        step = collector.collect([pygame.event.Event(pygame.MOUSEBUTTONUP, button=1, pos=(0, 0))])
        assert not step.rotate_held

    def test_motion_before_press_ignored(self):
        collector = InputCollector()
        step = collector.collect(
            [
                pygame.event.Event(pygame.MOUSEMOTION, rel=(50, 20), pos=(50, 20), buttons=(0, 0, 0)),
                pygame.event.Event(pygame.MOUSEBUTTONDOWN, button=1, pos=(50, 20)),
                pygame.event.Event(pygame.MOUSEMOTION, rel=(2, 1), pos=(52, 21), buttons=(1, 0, 0)),
            ]
        )
        assert step.pointer_delta == (2.0, 1.0)
        assert step.rotate_held

    def test_hover_is_not_a_drag(self):
        step = InputCollector().collect(
            [pygame.event.Event(pygame.MOUSEMOTION, rel=(9, 9), pos=(9, 9), buttons=(0, 0, 0))]
        )
        assert step.pointer_delta == (0.0, 0.0)
        assert not step.rotate_held

    def test_drag_released_mid_frame_counts(self):
        collector = InputCollector()
        collector.collect([pygame.event.Event(pygame.MOUSEBUTTONDOWN, button=1, pos=(0, 0))])
        step = collector.collect(
            [
                pygame.event.Event(pygame.MOUSEMOTION, rel=(5, 0), pos=(5, 0), buttons=(1, 0, 0)),
                pygame.event.Event(pygame.MOUSEBUTTONUP, button=1, pos=(5, 0)),
                pygame.event.Event(pygame.MOUSEMOTION, rel=(7, 7), pos=(12, 7), buttons=(0, 0, 0)),
            ]
        )
        assert step.pointer_delta == (5.0, 0.0)
        assert step.rotate_held
        assert not collector.collect([]).rotate_held

    def test_quit(self):
        collector = InputCollector()
        collector.collect([key_down(pygame.K_ESCAPE)])
        assert collector.quit_requested
        other = InputCollector()
        other.collect([pygame.event.Event(pygame.QUIT)])
        assert other.quit_requested


class TestHud:

    def test_lines(self, stopped_sim):
        result = stopped_sim.step(0.0)
        lines = [text for text, _ in hud_lines(stopped_sim, result)]
        assert lines[0] == "Sat, 01 Jan 2000 00:00:00 +0000"
        assert "stop_tick" in lines[1]
        assert "Free orbit" in lines[2]
        assert "Earth" in lines[2]
        assert lines[3].startswith("r=")
        assert lines[4] == "Altitude: 439,599 km"

    def test_degraded_warning(self, stopped_sim):
        result = stopped_sim.step(0.0)
        stopped_sim.degraded_frames = 3
        assert hud_lines(stopped_sim, result)[-1][0] == "Degraded frames: 3"


class TestArgs:

    def test_defaults(self):
        args = parse_args([])
        assert args.time_scale == PHYSICS_CFG.default_time_scale
        assert not args.no_log

    def test_overrides(self):
        args = parse_args(["--time-scale", "60", "--no-log", "--log-dir", "/tmp/runs"])
        assert args.time_scale == pytest.approx(60.0)
        assert args.no_log
        assert args.log_dir == "/tmp/runs"
