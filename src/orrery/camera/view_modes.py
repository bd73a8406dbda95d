"""Camera view modes and the transitions between them.

``FREE_ORBIT`` keeps the camera fixed in world space while the body spins
underneath. ``LOCKED_ORBIT`` stores the azimuth in the body's rotating
frame so the camera turns with the surface. ``TOPOCENTRIC`` pins the camera
to a point on the surface with a locally level orientation.

Surface view can only be entered or left from a locked orbit, and the
lock cannot change while on the surface. Requests outside those paths
are ignored.
"""
from __future__ import annotations

import enum
from dataclasses import dataclass

import numpy as np

from orrery.core.config import CAMERA_CFG, CameraCfg
from orrery.core.model import CameraPose
from orrery.core.vectors import look_at, look_rotation, normalize, to_cart_coords

from .sphere import SphereCameraRig
from .topocentric import TopocentricOrienter


class ViewMode(enum.Enum):
    FREE_ORBIT = "free_orbit"
    LOCKED_ORBIT = "locked_orbit"
    TOPOCENTRIC = "topocentric"


@dataclass(frozen=True)
class SurfaceAnchor:
    """Observation point in the body's rotating frame."""

    radius: float
    theta: float
    phi: float


class ViewModeController:
    def __init__(
        self,
        orienter: TopocentricOrienter | None = None,
        cfg: CameraCfg = CAMERA_CFG,
    ) -> None:
        self._orienter = orienter if orienter is not None else TopocentricOrienter(cfg=cfg)
        self._cfg = cfg
        self._mode = ViewMode.FREE_ORBIT
        self._anchor: SurfaceAnchor | None = None

    @property
    def mode(self) -> ViewMode:
        return self._mode

    @property
    def anchor(self) -> SurfaceAnchor | None:
        return self._anchor

    @property
    def orienter(self) -> TopocentricOrienter:
        return self._orienter

    @property
    def allows_focus_change(self) -> bool:
        return self._mode is ViewMode.FREE_ORBIT

    def toggle_lock(self, rig: SphereCameraRig) -> bool:
        """Lock or unlock the azimuth to the body's spin.

        ``theta`` is shifted by the current spin so the world-space azimuth,
        and therefore the rendered view, is unchanged by the switch.
        """

        if self._mode is ViewMode.TOPOCENTRIC:
            return False
        state = rig.state
        if self._mode is ViewMode.FREE_ORBIT:
            state.theta += state.base_theta
            state.locked = True
            self._mode = ViewMode.LOCKED_ORBIT
        else:
            state.theta -= state.base_theta
            state.locked = False
            self._mode = ViewMode.FREE_ORBIT
        return True

    def toggle_surface_view(self, rig: SphereCameraRig) -> bool:
        if self._mode is ViewMode.FREE_ORBIT:
            return False
        state = rig.state
        if self._mode is ViewMode.LOCKED_ORBIT:
            self._anchor = SurfaceAnchor(rig.min_radius, state.theta, state.phi)
            self._orienter.reset()
            state.look_outward = True
            state.frozen = True
            self._mode = ViewMode.TOPOCENTRIC
        else:
            self._anchor = None
            state.look_outward = False
            state.frozen = False
            self._mode = ViewMode.LOCKED_ORBIT
        return True

    def orbit_pose(self, rig: SphereCameraRig, center: np.ndarray) -> CameraPose:
        offset = rig.offset()
        rotation = look_at(offset, np.zeros(3))
        return CameraPose(position=center + offset, rotation=rotation)

    def anchor_frame(self, rig: SphereCameraRig, center: np.ndarray) -> CameraPose:
        """Base pose at the anchor: level with the horizon, facing north.

        Up and north come from small offsets of the spherical coordinates
        rather than from the world up axis, which degenerates at the poles.
        """

        anchor = self._anchor
        if anchor is None:
            raise RuntimeError("no surface anchor is active")
        cfg = self._cfg
        theta = anchor.theta - rig.state.base_theta
        point = to_cart_coords(anchor.radius, theta, anchor.phi)
        above = to_cart_coords(anchor.radius + cfg.surface_up_offset, theta, anchor.phi)
        delta = min(cfg.north_sample_delta, 0.5 * anchor.phi)
        toward_pole = to_cart_coords(anchor.radius, theta, anchor.phi - delta)

        up = normalize(above - point)
        north = toward_pole - point
        north = normalize(north - np.dot(north, up) * up)
        return CameraPose(position=center + point, rotation=look_rotation(north, up))

    def resolve_base(
        self, rig: SphereCameraRig | None, center: np.ndarray
    ) -> CameraPose | None:
        """Pose for the current mode before free-look, ``None`` without a camera."""

        if rig is None:
            return None
        if self._mode is ViewMode.TOPOCENTRIC:
            return self.anchor_frame(rig, center)
        return self.orbit_pose(rig, center)

    def apply_orientation(self, base: CameraPose) -> CameraPose:
        if self._mode is not ViewMode.TOPOCENTRIC:
            return base
        return CameraPose(position=base.position, rotation=self._orienter.orient(base.rotation))

    def resolve(
        self, rig: SphereCameraRig | None, center: np.ndarray
    ) -> CameraPose | None:
        base = self.resolve_base(rig, center)
        if base is None:
            return None
        return self.apply_orientation(base)


__all__ = ["SurfaceAnchor", "ViewMode", "ViewModeController"]
