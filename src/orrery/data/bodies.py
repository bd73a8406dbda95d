"""Fixed astronomical definitions for the bodies in the scene."""
from __future__ import annotations

from dataclasses import dataclass

from orrery.core.orbit import OrbitalElements

EARTH_MASS_KG = 5.9722e24


@dataclass(frozen=True)
class BodyDefinition:
    key: str
    name: str
    radius_km: float
    rotational_period: float  # seconds
    elements: OrbitalElements | None = None
    spin_at_epoch: float = 0.0


LUNAR_ELEMENTS = OrbitalElements(
    semimajor_axis=0.3844e6,
    eccentricity=0.0549,
    inclination=0.08970992,
    arg_of_periapsis=2.6052996,
    longitude_asc_node=3.17633867,
    mass_of_parent=EARTH_MASS_KG,
)

EARTH = BodyDefinition(
    key="earth",
    name="Earth",
    radius_km=6_371.0,
    rotational_period=86_400.0,
)

MOON = BodyDefinition(
    key="moon",
    name="Moon",
    radius_km=1_737.4,
    rotational_period=2_360_592.0,
    elements=LUNAR_ELEMENTS,
)

BODY_DEFINITIONS: tuple[BodyDefinition, ...] = (EARTH, MOON)
DEFAULT_FOCUS_KEY = EARTH.key


__all__ = [
    "BODY_DEFINITIONS",
    "DEFAULT_FOCUS_KEY",
    "EARTH",
    "EARTH_MASS_KG",
    "LUNAR_ELEMENTS",
    "MOON",
    "BodyDefinition",
]
