from __future__ import annotations

import math
from dataclasses import dataclass

import numpy as np

from orrery.core.config import CAMERA_CFG, CameraCfg
from orrery.core.model import StepInput
from orrery.core.vectors import to_cart_coords


def _clamp(value: float, minimum: float, maximum: float) -> float:
    return max(minimum, min(maximum, value))


@dataclass
class SphereCameraState:
    radius: float
    theta: float
    phi: float
    base_theta: float = 0.0
    locked: bool = False
    look_outward: bool = False
    frozen: bool = False

    @property
    def theta_effective(self) -> float:
        """Azimuth in world space; ``theta`` is body-relative while locked."""

        if self.locked:
            return self.theta - self.base_theta
        return self.theta


class SphereCameraRig:
    """Spherical camera orbiting a reference body.

    Drag deltas move ``theta``/``phi`` while the rotate input is held and
    scroll changes the radius in proportion to the current distance. The
    polar angle stays inside ``(flip_padding, pi - flip_padding)`` and the
    radius never drops below ``min_radius``.
    """

    def __init__(
        self,
        *,
        min_radius: float,
        state: SphereCameraState | None = None,
        cfg: CameraCfg = CAMERA_CFG,
    ) -> None:
        self._cfg = cfg
        self._min_radius = min_radius
        self._state = state if state is not None else SphereCameraState(
            radius=cfg.initial_radius,
            theta=cfg.initial_theta,
            phi=cfg.initial_phi,
        )
        self.clamp()

    @property
    def state(self) -> SphereCameraState:
        return self._state

    @property
    def cfg(self) -> CameraCfg:
        return self._cfg

    @property
    def min_radius(self) -> float:
        return self._min_radius

    @min_radius.setter
    def min_radius(self, value: float) -> None:
        self._min_radius = value
        self.clamp()

    @property
    def phi_limits(self) -> tuple[float, float]:
        pad = self._cfg.flip_padding
        return pad, math.pi - pad

    def sync_base_theta(self, spin: float) -> None:
        self._state.base_theta = spin

    def integrate(self, step: StepInput) -> None:
        """Fold one step of pointer and scroll input into the state."""

        state = self._state
        if state.frozen:
            return
        cfg = self._cfg

        rotate_scale = cfg.rotate_scale
        scroll_scale = cfg.scroll_scale
        if step.precision_held:
            rotate_scale = cfg.precision_rotate_scale
            scroll_scale = cfg.precision_scroll_scale

        dx, dy = step.pointer_delta if step.rotate_held else (0.0, 0.0)
        scroll_scale *= state.radius / cfg.reference_distance

        state.phi += rotate_scale * -dy / cfg.rotate_divisor
        state.theta += rotate_scale * dx / cfg.rotate_divisor
        state.radius += -(scroll_scale * step.scroll)
        self.clamp()

    def clamp(self) -> None:
        lo, hi = self.phi_limits
        self._state.phi = _clamp(self._state.phi, lo, hi)
        if self._state.radius < self._min_radius:
            self._state.radius = self._min_radius

    def offset(self, radius: float | None = None) -> np.ndarray:
        """Camera position relative to the body centre, in world axes."""

        state = self._state
        r = state.radius if radius is None else radius
        return to_cart_coords(r, state.theta_effective, state.phi)


__all__ = ["SphereCameraRig", "SphereCameraState"]
