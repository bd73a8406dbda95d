"""Interactive pygame front end for the orrery."""
from __future__ import annotations

import argparse
import math
from typing import Iterable, Optional, Sequence

import pygame

from orrery.camera.view_modes import ViewMode
from orrery.core.config import LOGGING_CFG, PHYSICS_CFG, RENDER_CFG, RenderCfg
from orrery.core.logging_utils import RunLogger
from orrery.core.model import StepInput
from orrery.core.timekeeping import FrameTimer, PhysicsClock
from orrery.render import TextCache, draw_body, draw_hud, draw_orbit, load_font
from orrery.simulation import Simulation, StepResult

ROTATE_BUTTON = 1

MODE_LABELS = {
    ViewMode.FREE_ORBIT: "Free orbit",
    ViewMode.LOCKED_ORBIT: "Locked orbit",
    ViewMode.TOPOCENTRIC: "Surface view",
}

EDGE_KEYS = {
    pygame.K_l: "toggle_lock",
    pygame.K_o: "toggle_surface_view",
    pygame.K_t: "toggle_clock_mode",
    pygame.K_RIGHT: "tick_forward",
    pygame.K_LEFT: "tick_backward",
    pygame.K_RIGHTBRACKET: "speed_up",
    pygame.K_LEFTBRACKET: "slow_down",
    pygame.K_r: "reverse_time",
    pygame.K_TAB: "focus_next",
    pygame.K_BACKSPACE: "focus_previous",
}

HELD_KEYS = {
    pygame.K_LSHIFT: "precision_held",
    pygame.K_w: "look_up",
    pygame.K_s: "look_down",
    pygame.K_a: "look_left",
    pygame.K_d: "look_right",
    pygame.K_q: "roll_left",
    pygame.K_e: "roll_right",
}


class InputCollector:
    """Turns a frame's pygame events into a :class:`StepInput`.

    Held keys and buttons are tracked from down/up events so the collector
    does not depend on an open display.
    """

    def __init__(self) -> None:
        self._held_keys: set[int] = set()
        self._rotate_held = False
        self.quit_requested = False

    def collect(self, events: Iterable[pygame.event.Event]) -> StepInput:
        step = StepInput()
        dx = dy = 0.0
        dragged = False
        for event in events:
            if event.type == pygame.QUIT:
                self.quit_requested = True
            elif event.type == pygame.KEYDOWN:
                if event.key == pygame.K_ESCAPE:
                    self.quit_requested = True
                self._held_keys.add(event.key)
                name = EDGE_KEYS.get(event.key)
                if name is not None:
                    setattr(step, name, True)
            elif event.type == pygame.KEYUP:
                self._held_keys.discard(event.key)
            elif event.type == pygame.MOUSEBUTTONDOWN and event.button == ROTATE_BUTTON:
                self._rotate_held = True
            elif event.type == pygame.MOUSEBUTTONUP and event.button == ROTATE_BUTTON:
                self._rotate_held = False
            elif event.type == pygame.MOUSEMOTION and self._rotate_held:
                dx += event.rel[0]
                dy += event.rel[1]
                dragged = True
            elif event.type == pygame.MOUSEWHEEL:
                step.scroll += event.y
        step.pointer_delta = (dx, dy)
        # Motion recorded before a mid-frame release still counts.
        step.rotate_held = self._rotate_held or dragged
        for key, name in HELD_KEYS.items():
            if key in self._held_keys:
                setattr(step, name, True)
        return step


def hud_lines(
    sim: Simulation, result: StepResult, render_cfg: RenderCfg = RENDER_CFG
) -> list[tuple[str, tuple[int, int, int]]]:
    clock = sim.clock
    color = render_cfg.hud_text_color
    lines = [
        (clock.date_string(), color),
        (f"Time scale: {clock.scale:,.0f}x ({clock.mode.value})", color),
        (f"View: {MODE_LABELS[result.mode]}  Focus: {sim.focus_body.definition.name}", color),
    ]
    if sim.rig is not None:
        state = sim.rig.state
        lines.append(
            (
                f"r={state.radius:,.1f}  theta={math.degrees(state.theta_effective) % 360:.1f}"
                f"  phi={math.degrees(state.phi):.1f}",
                color,
            )
        )
        physics_cfg = sim.physics_cfg
        altitude_km = (state.radius - sim.focus_body.radius_world(physics_cfg)) * physics_cfg.world_to_real
        lines.append((f"Altitude: {altitude_km:,.0f} km", color))
    if sim.degraded_frames:
        lines.append((f"Degraded frames: {sim.degraded_frames}", render_cfg.hud_warning_color))
    return lines


def render_frame(
    surface: pygame.Surface,
    sim: Simulation,
    result: StepResult,
    font: pygame.font.Font,
    text_cache: TextCache,
    render_cfg: RenderCfg = RENDER_CFG,
) -> None:
    surface.fill(render_cfg.background_color)
    pose = result.pose
    if pose is not None:
        for key in sim.orbiting_keys:
            draw_orbit(surface, sim.orbit_lines(key), pose, render_cfg=render_cfg)
        colors = {"earth": render_cfg.earth_color, "moon": render_cfg.moon_color}
        bodies = sorted(
            sim.bodies.values(),
            key=lambda body: -float(((body.position - pose.position) ** 2).sum()),
        )
        for body in bodies:
            draw_body(
                surface,
                body.position,
                body.radius_world(sim.physics_cfg),
                pose,
                color=colors.get(body.key, render_cfg.hud_text_color),
                render_cfg=render_cfg,
            )
    draw_hud(surface, hud_lines(sim, result, render_cfg), font, text_cache, render_cfg=render_cfg)


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Interactive Earth-Moon orrery.")
    parser.add_argument(
        "--time-scale",
        type=float,
        default=PHYSICS_CFG.default_time_scale,
        help="Simulation seconds per wall-clock second.",
    )
    parser.add_argument("--log-dir", default=LOGGING_CFG.root_dir, help="Directory for run logs.")
    parser.add_argument("--no-log", action="store_true", help="Do not record the run.")
    return parser.parse_args(argv)


def main(argv: Optional[Sequence[str]] = None) -> None:
    args = parse_args(argv)
    render_cfg = RENDER_CFG

    pygame.init()
    pygame.display.set_caption("Orrery")
    screen = pygame.display.set_mode((render_cfg.width, render_cfg.height), pygame.RESIZABLE)
    font = load_font(render_cfg.hud_font_names, render_cfg.hud_font_size)
    text_cache = TextCache()
    frame_clock = pygame.time.Clock()

    logger = None
    if not args.no_log:
        logger = RunLogger(
            args.log_dir,
            timeseries_flush_threshold=LOGGING_CFG.timeseries_flush_threshold,
            events_flush_threshold=LOGGING_CFG.events_flush_threshold,
        )
    sim = Simulation(clock=PhysicsClock(scale=args.time_scale), logger=logger)
    collector = InputCollector()
    timer = FrameTimer()

    try:
        while not collector.quit_requested:
            step_input = collector.collect(pygame.event.get())
            wall_seconds = min(timer.tick(), PHYSICS_CFG.max_frame_seconds)
            result = sim.step(wall_seconds, step_input)
            render_frame(screen, sim, result, font, text_cache, render_cfg)
            pygame.display.flip()
            frame_clock.tick(render_cfg.fps_cap)
    finally:
        if logger is not None:
            logger.close()
            print(f"Run saved to {logger.run_dir}")
        pygame.quit()


if __name__ == "__main__":
    main()
