from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from orrery.core.config import CAMERA_CFG, CameraCfg
from orrery.core.model import StepInput
from orrery.core.vectors import rot_x, rot_y, rot_z


@dataclass
class AltitudeAzimuthState:
    altitude: float = 0.0
    azimuth: float = 0.0
    roll: float = 0.0

    def reset(self) -> None:
        self.altitude = 0.0
        self.azimuth = 0.0
        self.roll = 0.0


class TopocentricOrienter:
    """Free-look angles layered on top of a surface anchor's orientation."""

    def __init__(
        self,
        state: AltitudeAzimuthState | None = None,
        cfg: CameraCfg = CAMERA_CFG,
    ) -> None:
        self._state = state if state is not None else AltitudeAzimuthState()
        self._cfg = cfg

    @property
    def state(self) -> AltitudeAzimuthState:
        return self._state

    def reset(self) -> None:
        self._state.reset()

    def integrate(self, step: StepInput, wall_seconds: float) -> None:
        rate = self._cfg.precision_free_look_rate if step.precision_held else self._cfg.free_look_rate
        amount = wall_seconds * rate
        state = self._state
        if step.look_left:
            state.azimuth -= amount
        if step.look_right:
            state.azimuth += amount
        if step.look_up:
            state.altitude += amount
        if step.look_down:
            state.altitude -= amount
        if step.roll_left:
            state.roll += amount
        if step.roll_right:
            state.roll -= amount

    def local_rotation(self) -> np.ndarray:
        """Yaw about the anchor's up, then pitch and roll about the camera axes."""

        state = self._state
        return rot_y(-state.azimuth) @ rot_x(state.altitude) @ rot_z(state.roll)

    def orient(self, base_rotation: np.ndarray) -> np.ndarray:
        return base_rotation @ self.local_rotation()


__all__ = ["AltitudeAzimuthState", "TopocentricOrienter"]
