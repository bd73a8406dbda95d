"""Wall-clock timing and the simulation clock."""
from __future__ import annotations

import enum
import time
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from email.utils import format_datetime

from .config import PHYSICS_CFG


@dataclass
class FrameTimer:
    """High resolution timer based on :func:`time.perf_counter`."""

    last_time: float = field(default_factory=time.perf_counter)

    def tick(self) -> float:
        now = time.perf_counter()
        dt = now - self.last_time
        self.last_time = now
        return dt


class ClockMode(enum.Enum):
    ELAPSING = "elapsing"
    STOP_TICK = "stop_tick"


@dataclass
class PhysicsClock:
    """Simulation time in seconds since the epoch.

    In ``ELAPSING`` mode the clock follows wall time multiplied by
    ``scale`` (negative runs time backwards). In ``STOP_TICK`` mode
    ``delta_seconds`` stays at zero and the clock only moves through
    :meth:`tick_forward` / :meth:`tick_backward`.
    """

    mode: ClockMode = ClockMode.ELAPSING
    scale: float = 1.0
    clock_seconds: float = 0.0
    delta_seconds: float = 0.0
    tick_interval_seconds: float = PHYSICS_CFG.tick_interval_seconds
    epoch: datetime = field(default_factory=lambda: PHYSICS_CFG.epoch)

    def __post_init__(self) -> None:
        if self.tick_interval_seconds <= 0.0:
            raise ValueError("tick_interval_seconds must be positive")

    @property
    def stopped(self) -> bool:
        return self.mode is ClockMode.STOP_TICK

    def advance(self, wall_seconds: float) -> float:
        """Advance by one frame of wall time and return the step delta."""

        if self.stopped:
            self.delta_seconds = 0.0
            return 0.0
        self.delta_seconds = self.scale * wall_seconds
        self.clock_seconds += self.delta_seconds
        return self.delta_seconds

    def _tick(self, direction: float) -> bool:
        if not self.stopped:
            return False
        self.clock_seconds += direction * self.tick_interval_seconds
        return True

    def tick_forward(self) -> bool:
        return self._tick(1.0)

    def tick_backward(self) -> bool:
        return self._tick(-1.0)

    def toggle_mode(self) -> ClockMode:
        if self.stopped:
            self.mode = ClockMode.ELAPSING
        else:
            self.mode = ClockMode.STOP_TICK
            self.delta_seconds = 0.0
        return self.mode

    def set_scale(self, scale: float, *, limit: float = PHYSICS_CFG.max_time_scale) -> float:
        self.scale = max(-limit, min(limit, scale))
        return self.scale

    def speed_up(self, factor: float = PHYSICS_CFG.time_scale_step) -> float:
        return self.set_scale(self.scale * factor)

    def slow_down(self, factor: float = PHYSICS_CFG.time_scale_step) -> float:
        return self.set_scale(self.scale / factor)

    def reverse(self) -> float:
        return self.set_scale(-self.scale)

    def current_datetime(self) -> datetime | None:
        """Calendar time of the clock, ``None`` outside the years 1 to 9999."""

        try:
            return self.epoch + timedelta(milliseconds=int(self.clock_seconds * 1000.0))
        except OverflowError:
            return None

    def date_string(self) -> str:
        current = self.current_datetime()
        if current is None:
            return f"epoch {self.clock_seconds:+.0f} s"
        return format_datetime(current)


__all__ = ["ClockMode", "FrameTimer", "PhysicsClock"]
