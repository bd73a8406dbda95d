"""Configuration dataclasses for the orrery."""
from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import datetime, timezone


@dataclass(frozen=True)
class PhysicsCfg:
    gravitational_constant: float = 6.67e-20  # km^3 kg^-1 s^-2
    earth_diameter_km: float = 12_742.0
    world_units_per_earth_diameter: float = 100.0
    default_time_scale: float = 3_600.0
    time_scale_step: float = 2.0
    max_time_scale: float = 31_557_600.0
    tick_interval_seconds: float = 86_400.0
    max_frame_seconds: float = 0.25
    orbit_line_samples: int = 1_000
    epoch: datetime = field(
        default_factory=lambda: datetime(2000, 1, 1, 0, 0, 0, tzinfo=timezone.utc)
    )

    @property
    def real_to_world(self) -> float:
        return self.world_units_per_earth_diameter / self.earth_diameter_km

    @property
    def world_to_real(self) -> float:
        return self.earth_diameter_km / self.world_units_per_earth_diameter


@dataclass(frozen=True)
class CameraCfg:
    initial_radius: float = 3_500.0
    initial_theta: float = 0.0
    initial_phi: float = math.pi / 3.0
    # Clearance kept above the focused body's surface, in world units.
    surface_clearance: float = 0.5
    flip_padding: float = 0.0015
    rotate_divisor: float = 500.0
    rotate_scale: float = 1.0
    scroll_scale: float = 50.0
    reference_distance: float = 1_000.0
    precision_rotate_scale: float = 0.1
    precision_scroll_scale: float = 1.0
    surface_up_offset: float = 10.0
    north_sample_delta: float = 1e-4
    free_look_rate: float = 1.5
    precision_free_look_rate: float = 0.379
    focus_switch_cooldown: float = 0.25


@dataclass(frozen=True)
class RenderCfg:
    width: int = 1280
    height: int = 800
    fps_cap: int = 60
    field_of_view_deg: float = 60.0
    near_plane: float = 0.1
    background_color: tuple[int, int, int] = (0, 0, 0)
    earth_color: tuple[int, int, int] = (70, 130, 220)
    moon_color: tuple[int, int, int] = (200, 200, 190)
    orbit_line_color: tuple[int, int, int] = (102, 0, 0)
    orbit_line_width: int = 1
    max_rendered_orbit_points: int = 800
    hud_text_color: tuple[int, int, int] = (234, 241, 255)
    hud_warning_color: tuple[int, int, int] = (255, 176, 120)
    hud_font_names: tuple[str, ...] = ("dejavusansmono", "consolas", "menlo")
    hud_font_size: int = 18
    hud_margin: int = 12
    hud_line_spacing: int = 4


@dataclass(frozen=True)
class LoggingCfg:
    root_dir: str = "data/runs"
    timeseries_flush_threshold: int = 200
    events_flush_threshold: int = 50
    log_every_steps: int = 10


PHYSICS_CFG = PhysicsCfg()
CAMERA_CFG = CameraCfg()
RENDER_CFG = RenderCfg()
LOGGING_CFG = LoggingCfg()


__all__ = [
    "CAMERA_CFG",
    "LOGGING_CFG",
    "PHYSICS_CFG",
    "RENDER_CFG",
    "CameraCfg",
    "LoggingCfg",
    "PhysicsCfg",
    "RenderCfg",
]
