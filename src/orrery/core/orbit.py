"""Keplerian orbit propagation from osculating elements."""
from __future__ import annotations

import math
from dataclasses import dataclass, field

import numpy as np

from .config import PHYSICS_CFG, PhysicsCfg
from .kepler import KeplerConvergenceError, bisect_eccentric_anomaly, solve_kepler
from .vectors import rot_x, rot_z

TWO_PI = 2.0 * math.pi

# Inertial (x, y, z) with +z the orbital pole maps to world (x, z, -y) so the
# pole points along the world +Y axis. A proper rotation (det = +1).
AXIS_REMAP = np.array(
    [
        [1.0, 0.0, 0.0],
        [0.0, 0.0, 1.0],
        [0.0, -1.0, 0.0],
    ]
)


@dataclass(frozen=True)
class OrbitalElements:
    """Osculating elements of an elliptical orbit (km, rad, kg)."""

    semimajor_axis: float
    eccentricity: float
    inclination: float
    arg_of_periapsis: float
    longitude_asc_node: float
    mass_of_parent: float
    mean_anomaly_at_epoch: float = 0.0
    gravitational_constant: float = PHYSICS_CFG.gravitational_constant
    grav_parameter: float = field(init=False)
    period: float = field(init=False)

    def __post_init__(self) -> None:
        mu = self.gravitational_constant * self.mass_of_parent
        object.__setattr__(self, "grav_parameter", mu)
        object.__setattr__(
            self, "period", TWO_PI * math.sqrt(self.semimajor_axis**3 / mu)
        )

    @property
    def mean_motion(self) -> float:
        return TWO_PI / self.period

    @property
    def periapsis(self) -> float:
        return self.semimajor_axis * (1.0 - self.eccentricity)

    @property
    def apoapsis(self) -> float:
        return self.semimajor_axis * (1.0 + self.eccentricity)

    def as_dict(self) -> dict[str, float]:
        return {
            "semimajor_axis": self.semimajor_axis,
            "eccentricity": self.eccentricity,
            "inclination": self.inclination,
            "arg_of_periapsis": self.arg_of_periapsis,
            "longitude_asc_node": self.longitude_asc_node,
            "mass_of_parent": self.mass_of_parent,
            "mean_anomaly_at_epoch": self.mean_anomaly_at_epoch,
            "grav_parameter": self.grav_parameter,
            "period": self.period,
        }


class OrbitalPropagator:
    """Closed-form two-body position for a fixed element set.

    Positions are returned in kilometres on the world axes (see
    :data:`AXIS_REMAP`); :meth:`compute_orbit_lines` returns world units.
    """

    def __init__(self, elements: OrbitalElements, cfg: PhysicsCfg = PHYSICS_CFG) -> None:
        self._elements = elements
        self._cfg = cfg
        perifocal_to_inertial = (
            rot_z(elements.longitude_asc_node)
            @ rot_x(elements.inclination)
            @ rot_z(elements.arg_of_periapsis)
        )
        self._rotation = AXIS_REMAP @ perifocal_to_inertial
        e = elements.eccentricity
        self._anomaly_factors = (math.sqrt(1.0 + e), math.sqrt(1.0 - e))

    @property
    def elements(self) -> OrbitalElements:
        return self._elements

    @property
    def period(self) -> float:
        return self._elements.period

    def mean_anomaly(self, t: float) -> float:
        el = self._elements
        return (el.mean_anomaly_at_epoch + el.mean_motion * t) % TWO_PI

    def eccentric_anomaly(self, mean_anomaly: float) -> float:
        return solve_kepler(mean_anomaly, self._elements.eccentricity)

    def true_anomaly(self, eccentric_anomaly: float) -> float:
        # 2*atan(sqrt((1+e)/(1-e)) * tan(E/2)) without the pole at E = pi.
        plus, minus = self._anomaly_factors
        half = 0.5 * eccentric_anomaly
        return 2.0 * math.atan2(plus * math.sin(half), minus * math.cos(half))

    def distance(self, eccentric_anomaly: float) -> float:
        el = self._elements
        return el.semimajor_axis * (1.0 - el.eccentricity * math.cos(eccentric_anomaly))

    def position_from_eccentric_anomaly(self, eccentric_anomaly: float) -> np.ndarray:
        nu = self.true_anomaly(eccentric_anomaly)
        r = self.distance(eccentric_anomaly)
        perifocal = np.array([r * math.cos(nu), r * math.sin(nu), 0.0])
        return self._rotation @ perifocal

    def position(self, t: float) -> np.ndarray:
        """Position at simulation time ``t`` (seconds since epoch).

        Raises:
            KeplerConvergenceError: propagated from the solver.
        """

        return self.position_from_eccentric_anomaly(
            self.eccentric_anomaly(self.mean_anomaly(t))
        )

    def position_with_fallback(
        self, t: float
    ) -> tuple[np.ndarray, KeplerConvergenceError | None]:
        """Like :meth:`position` but recovers from solver non-convergence.

        On failure the eccentric anomaly is recomputed by bisection and the
        caught error is returned alongside the position so the caller can
        flag the frame.
        """

        mean_anomaly = self.mean_anomaly(t)
        try:
            eccentric_anomaly = self.eccentric_anomaly(mean_anomaly)
        except KeplerConvergenceError as exc:
            eccentric_anomaly = bisect_eccentric_anomaly(
                mean_anomaly, self._elements.eccentricity
            )
            return self.position_from_eccentric_anomaly(eccentric_anomaly), exc
        return self.position_from_eccentric_anomaly(eccentric_anomaly), None

    def position_world(self, t: float) -> np.ndarray:
        return self.position(t) * self._cfg.real_to_world

    def compute_orbit_lines(self, num_samples: int) -> np.ndarray:
        """Closed polyline of ``num_samples + 2`` points in world units.

        Samples one period at equal time steps, then repeats the last
        sample and finally the first so a line strip closes on itself.
        """

        if num_samples < 1:
            raise ValueError("num_samples must be at least 1")
        step = self.period / num_samples
        points = np.empty((num_samples + 2, 3), dtype=float)
        for index in range(num_samples):
            position, _ = self.position_with_fallback(index * step)
            points[index] = position * self._cfg.real_to_world
        points[num_samples] = points[num_samples - 1]
        points[num_samples + 1] = points[0]
        return points


__all__ = ["AXIS_REMAP", "OrbitalElements", "OrbitalPropagator"]
