"""Camera navigation: orbiting rig, view modes and surface free-look."""

from .sphere import SphereCameraRig, SphereCameraState
from .topocentric import AltitudeAzimuthState, TopocentricOrienter
from .view_modes import SurfaceAnchor, ViewMode, ViewModeController

__all__ = [
    "AltitudeAzimuthState",
    "SphereCameraRig",
    "SphereCameraState",
    "SurfaceAnchor",
    "TopocentricOrienter",
    "ViewMode",
    "ViewModeController",
]
