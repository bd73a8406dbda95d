"""Data models for the per-step simulation state."""
from __future__ import annotations

import math
from dataclasses import dataclass, field

import numpy as np

from orrery.data.bodies import BodyDefinition

from .config import PHYSICS_CFG, PhysicsCfg


@dataclass
class StepInput:
    """Input collected by the host for a single simulation step.

    Held flags describe the state at the end of the frame; toggle and
    tick flags are edges that occurred during the frame.
    """

    pointer_delta: tuple[float, float] = (0.0, 0.0)
    scroll: float = 0.0
    rotate_held: bool = False
    precision_held: bool = False
    toggle_lock: bool = False
    toggle_surface_view: bool = False
    toggle_clock_mode: bool = False
    tick_forward: bool = False
    tick_backward: bool = False
    speed_up: bool = False
    slow_down: bool = False
    reverse_time: bool = False
    focus_next: bool = False
    focus_previous: bool = False
    look_up: bool = False
    look_down: bool = False
    look_left: bool = False
    look_right: bool = False
    roll_left: bool = False
    roll_right: bool = False


@dataclass
class BodyState:
    """Runtime state of a body, re-derived from the clock every step."""

    definition: BodyDefinition
    position: np.ndarray = field(default_factory=lambda: np.zeros(3, dtype=float))
    spin: float = 0.0

    @property
    def key(self) -> str:
        return self.definition.key

    def radius_world(self, cfg: PhysicsCfg = PHYSICS_CFG) -> float:
        return self.definition.radius_km * cfg.real_to_world

    def update_spin(self, clock_seconds: float) -> float:
        period = self.definition.rotational_period
        turns = clock_seconds / period
        self.spin = (self.definition.spin_at_epoch + 2.0 * math.pi * turns) % (2.0 * math.pi)
        return self.spin


@dataclass(frozen=True)
class CameraPose:
    """World-space camera transform handed to the renderer."""

    position: np.ndarray
    rotation: np.ndarray

    @property
    def forward(self) -> np.ndarray:
        return -self.rotation[:, 2]

    @property
    def up(self) -> np.ndarray:
        return self.rotation[:, 1]

    @property
    def right(self) -> np.ndarray:
        return self.rotation[:, 0]

    def isclose(self, other: "CameraPose", *, atol: float = 1e-9) -> bool:
        return bool(
            np.allclose(self.position, other.position, atol=atol)
            and np.allclose(self.rotation, other.rotation, atol=atol)
        )


__all__ = ["BodyState", "CameraPose", "StepInput"]
