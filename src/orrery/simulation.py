"""The per-step pipeline tying the clock, propagators and camera together."""
from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Iterable, Optional

import numpy as np

from orrery.camera.sphere import SphereCameraRig
from orrery.camera.topocentric import TopocentricOrienter
from orrery.camera.view_modes import ViewMode, ViewModeController
from orrery.core.config import (
    CAMERA_CFG,
    LOGGING_CFG,
    PHYSICS_CFG,
    CameraCfg,
    LoggingCfg,
    PhysicsCfg,
)
from orrery.core.logging_utils import RunLogger
from orrery.core.model import BodyState, CameraPose, StepInput
from orrery.core.orbit import OrbitalElements, OrbitalPropagator
from orrery.core.timekeeping import PhysicsClock
from orrery.data.bodies import BODY_DEFINITIONS, DEFAULT_FOCUS_KEY, BodyDefinition


@dataclass
class StepResult:
    clock_seconds: float
    delta_seconds: float
    mode: ViewMode
    focus: str
    pose: CameraPose | None
    degraded: bool = False
    events: list[str] = field(default_factory=list)


class Simulation:
    """Owns all simulation state and runs one step per rendered frame.

    Stages run in a fixed order, each reading what the previous stage wrote
    in the same step: clock, body propagation, camera input, view mode
    resolution, then free-look orientation.
    """

    def __init__(
        self,
        bodies: Iterable[BodyDefinition] = BODY_DEFINITIONS,
        *,
        clock: PhysicsClock | None = None,
        logger: RunLogger | None = None,
        spawn_camera: bool = True,
        focus: str = DEFAULT_FOCUS_KEY,
        physics_cfg: PhysicsCfg = PHYSICS_CFG,
        camera_cfg: CameraCfg = CAMERA_CFG,
        logging_cfg: LoggingCfg = LOGGING_CFG,
    ) -> None:
        self.physics_cfg = physics_cfg
        self.camera_cfg = camera_cfg
        self.logging_cfg = logging_cfg
        self.clock = clock if clock is not None else PhysicsClock(
            scale=physics_cfg.default_time_scale,
            tick_interval_seconds=physics_cfg.tick_interval_seconds,
            epoch=physics_cfg.epoch,
        )
        self.bodies: dict[str, BodyState] = {
            definition.key: BodyState(definition) for definition in bodies
        }
        if focus not in self.bodies:
            raise ValueError(f"unknown focus body {focus!r}")
        self._body_order = list(self.bodies)
        self._propagators: dict[str, OrbitalPropagator] = {}
        self._orbit_lines: dict[str, np.ndarray] = {}
        for key, body in self.bodies.items():
            if body.definition.elements is not None:
                self._propagators[key] = OrbitalPropagator(body.definition.elements, physics_cfg)

        self.orienter = TopocentricOrienter(cfg=camera_cfg)
        self.controller = ViewModeController(self.orienter, camera_cfg)
        self.rig: SphereCameraRig | None = None
        self.focus_key = focus
        self._focus_cooldown = 0.0
        self.step_count = 0
        self.degraded_frames = 0
        self.last_result: StepResult | None = None
        self.logger = logger
        if spawn_camera:
            self.spawn_camera()
        if logger is not None:
            logger.write_meta(self.describe())

    # ------------------------------------------------------------------
    # Setup helpers
    # ------------------------------------------------------------------
    def spawn_camera(self) -> SphereCameraRig:
        if self.rig is None:
            self.rig = SphereCameraRig(
                min_radius=self.min_radius_for(self.focus_key), cfg=self.camera_cfg
            )
        return self.rig

    def min_radius_for(self, key: str) -> float:
        return self.bodies[key].radius_world(self.physics_cfg) + self.camera_cfg.surface_clearance

    @property
    def focus_body(self) -> BodyState:
        return self.bodies[self.focus_key]

    @property
    def mode(self) -> ViewMode:
        return self.controller.mode

    @property
    def orbiting_keys(self) -> list[str]:
        return list(self._propagators)

    def propagator(self, key: str) -> OrbitalPropagator:
        return self._propagators[key]

    def set_elements(self, key: str, elements: OrbitalElements) -> None:
        """Replace a body's orbit; its cached polyline is rebuilt on demand."""

        self._propagators[key] = OrbitalPropagator(elements, self.physics_cfg)
        self._orbit_lines.pop(key, None)
        self._log_event("elements", {"body": key, **elements.as_dict()})

    def orbit_lines(self, key: str) -> np.ndarray:
        lines = self._orbit_lines.get(key)
        if lines is None:
            lines = self._propagators[key].compute_orbit_lines(
                self.physics_cfg.orbit_line_samples
            )
            self._orbit_lines[key] = lines
        return lines

    def describe(self) -> dict:
        return {
            "bodies": {
                key: {
                    "radius_km": body.definition.radius_km,
                    "rotational_period": body.definition.rotational_period,
                    "elements": (
                        self._propagators[key].elements.as_dict()
                        if key in self._propagators
                        else None
                    ),
                }
                for key, body in self.bodies.items()
            },
            "physics": asdict(self.physics_cfg),
            "camera": asdict(self.camera_cfg),
            "time_scale": self.clock.scale,
        }

    # ------------------------------------------------------------------
    # Step pipeline
    # ------------------------------------------------------------------
    def step(self, wall_seconds: float, step_input: Optional[StepInput] = None) -> StepResult:
        step_input = step_input or StepInput()
        events: list[str] = []

        self._advance_clock(wall_seconds, step_input, events)
        degraded = self._propagate_bodies()
        self._integrate_camera(wall_seconds, step_input, events)
        base_pose = self._resolve_mode(step_input, events)
        pose = self._orient(base_pose, wall_seconds, step_input)

        self.step_count += 1
        if degraded:
            self.degraded_frames += 1
        result = StepResult(
            clock_seconds=self.clock.clock_seconds,
            delta_seconds=self.clock.delta_seconds,
            mode=self.controller.mode,
            focus=self.focus_key,
            pose=pose,
            degraded=degraded,
            events=events,
        )
        self.last_result = result
        self._log_step(result)
        return result

    def _advance_clock(self, wall_seconds: float, step_input: StepInput, events: list[str]) -> None:
        clock = self.clock
        if step_input.toggle_clock_mode:
            mode = clock.toggle_mode()
            events.append("clock_mode")
            self._log_event("clock_mode", {"mode": mode.value})
        if step_input.speed_up:
            self._log_event("time_scale", {"scale": clock.speed_up(self.physics_cfg.time_scale_step)})
        if step_input.slow_down:
            self._log_event("time_scale", {"scale": clock.slow_down(self.physics_cfg.time_scale_step)})
        if step_input.reverse_time:
            self._log_event("time_scale", {"scale": clock.reverse()})
        if step_input.tick_forward and clock.tick_forward():
            events.append("tick")
            self._log_event("tick", {"direction": 1})
        if step_input.tick_backward and clock.tick_backward():
            events.append("tick")
            self._log_event("tick", {"direction": -1})
        clock.advance(wall_seconds)

    def _propagate_bodies(self) -> bool:
        degraded = False
        t = self.clock.clock_seconds
        scale = self.physics_cfg.real_to_world
        for key, body in self.bodies.items():
            body.update_spin(t)
            propagator = self._propagators.get(key)
            if propagator is None:
                continue
            position, error = propagator.position_with_fallback(t)
            body.position = position * scale
            if error is not None:
                degraded = True
                self._log_event(
                    "kepler_nonconvergence",
                    {
                        "body": key,
                        "mean_anomaly": error.mean_anomaly,
                        "eccentricity": error.eccentricity,
                        "estimate": error.estimate,
                        "iterations": error.iterations,
                    },
                )
        return degraded

    def _integrate_camera(self, wall_seconds: float, step_input: StepInput, events: list[str]) -> None:
        self._focus_cooldown = max(0.0, self._focus_cooldown - wall_seconds)
        direction = int(step_input.focus_next) - int(step_input.focus_previous)
        if direction and self._focus_cooldown <= 0.0 and self.controller.allows_focus_change:
            index = self._body_order.index(self.focus_key)
            self.focus_key = self._body_order[(index + direction) % len(self._body_order)]
            self._focus_cooldown = self.camera_cfg.focus_switch_cooldown
            if self.rig is not None:
                self.rig.min_radius = self.min_radius_for(self.focus_key)
            events.append("focus")
            self._log_event("focus", {"body": self.focus_key})

        rig = self.rig
        if rig is None:
            return
        rig.sync_base_theta(self.focus_body.spin)
        rig.integrate(step_input)

    def _resolve_mode(self, step_input: StepInput, events: list[str]) -> CameraPose | None:
        rig = self.rig
        if rig is None:
            return None
        controller = self.controller
        if step_input.toggle_lock:
            self._transition("toggle_lock", controller.toggle_lock(rig), events)
        if step_input.toggle_surface_view:
            self._transition("toggle_surface_view", controller.toggle_surface_view(rig), events)
        return controller.resolve_base(rig, self.focus_body.position)

    def _transition(self, command: str, accepted: bool, events: list[str]) -> None:
        if accepted:
            events.append(command)
            self._log_event("mode_change", {"command": command, "mode": self.controller.mode.value})
        else:
            self._log_event("mode_rejected", {"command": command, "mode": self.controller.mode.value})

    def _orient(
        self, base_pose: CameraPose | None, wall_seconds: float, step_input: StepInput
    ) -> CameraPose | None:
        if base_pose is None or self.controller.mode is not ViewMode.TOPOCENTRIC:
            return base_pose
        self.orienter.integrate(step_input, wall_seconds)
        return self.controller.apply_orientation(base_pose)

    # ------------------------------------------------------------------
    # Recording
    # ------------------------------------------------------------------
    def _log_event(self, event_type: str, details: dict) -> None:
        if self.logger is not None:
            self.logger.log_event(self.clock.clock_seconds, event_type, details)

    def _log_step(self, result: StepResult) -> None:
        logger = self.logger
        if logger is None:
            return
        if not result.degraded and self.step_count % max(1, self.logging_cfg.log_every_steps):
            return
        moon = self.bodies.get("moon")
        moon_position = moon.position if moon is not None else np.zeros(3)
        earth = self.bodies.get("earth")
        rig_state = self.rig.state if self.rig is not None else None
        logger.log_ts(
            [
                self.step_count,
                result.clock_seconds,
                *(float(v) for v in moon_position),
                earth.spin if earth is not None else 0.0,
                moon.spin if moon is not None else 0.0,
                result.mode.value,
                rig_state.radius if rig_state is not None else float("nan"),
                rig_state.theta if rig_state is not None else float("nan"),
                rig_state.phi if rig_state is not None else float("nan"),
                result.degraded,
            ]
        )


__all__ = ["Simulation", "StepResult"]
