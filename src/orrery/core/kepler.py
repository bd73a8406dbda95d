"""Kepler's equation solver.

Solves ``M = E - e*sin(E)`` for the eccentric anomaly ``E`` with a
Newton-Raphson iteration. Non-convergence is reported by raising
:class:`KeplerConvergenceError`, which carries the last iterate so callers
can decide how to recover (see :func:`bisect_eccentric_anomaly`).
"""
from __future__ import annotations

import math

TWO_PI = 2.0 * math.pi
KEPLER_TOLERANCE = 1e-15
KEPLER_MAX_ITERATIONS = 20
BISECTION_MAX_ITERATIONS = 200


class KeplerConvergenceError(ArithmeticError):
    """Newton iteration did not settle within the iteration budget."""

    def __init__(
        self,
        mean_anomaly: float,
        eccentricity: float,
        estimate: float,
        iterations: int,
    ) -> None:
        super().__init__(
            f"eccentric anomaly did not converge for M={mean_anomaly!r}, "
            f"e={eccentricity!r} after {iterations} iterations "
            f"(last estimate {estimate!r})"
        )
        self.mean_anomaly = mean_anomaly
        self.eccentricity = eccentricity
        self.estimate = estimate
        self.iterations = iterations


def initial_guess(mean_anomaly: float, eccentricity: float) -> float:
    """Starting value biased towards the side of the root."""

    if -math.pi < mean_anomaly < 0.0 or mean_anomaly > math.pi:
        return mean_anomaly - eccentricity
    return mean_anomaly + eccentricity


def _reduce(mean_anomaly: float) -> tuple[float, float]:
    # Split M into a [-pi, pi) remainder and a whole number of turns.
    turns = math.floor((mean_anomaly + math.pi) / TWO_PI) * TWO_PI
    return mean_anomaly - turns, turns


def solve_kepler(
    mean_anomaly: float,
    eccentricity: float,
    *,
    tolerance: float = KEPLER_TOLERANCE,
    max_iterations: int = KEPLER_MAX_ITERATIONS,
) -> float:
    """Return the eccentric anomaly for ``mean_anomaly`` (any real).

    The angle is reduced to [-pi, pi) before iterating and the removed
    whole turns are added back to the result, so ``E - e*sin(E)`` equals
    the caller's ``mean_anomaly``.

    Raises:
        KeplerConvergenceError: if ``|E_{n+1} - E_n|`` is still above
            ``tolerance`` after ``max_iterations`` Newton steps.
    """

    reduced, turns = _reduce(mean_anomaly)
    e_n = initial_guess(reduced, eccentricity)
    for iteration in range(1, max_iterations + 1):
        e_next = e_n + (reduced - e_n + eccentricity * math.sin(e_n)) / (
            1.0 - eccentricity * math.cos(e_n)
        )
        if abs(e_next - e_n) < tolerance:
            return e_next + turns
        e_n = e_next
    raise KeplerConvergenceError(mean_anomaly, eccentricity, e_n + turns, max_iterations)


def bisect_eccentric_anomaly(
    mean_anomaly: float,
    eccentricity: float,
    *,
    max_iterations: int = BISECTION_MAX_ITERATIONS,
) -> float:
    """Slow but unconditionally convergent solution of Kepler's equation.

    ``f(E) = E - e*sin(E) - M`` is monotonic for ``e < 1`` and its root
    lies within ``[M - e, M + e]``.
    """

    reduced, turns = _reduce(mean_anomaly)
    lo = reduced - eccentricity
    hi = reduced + eccentricity
    for _ in range(max_iterations):
        mid = 0.5 * (lo + hi)
        if mid <= lo or mid >= hi:
            break
        if mid - eccentricity * math.sin(mid) - reduced > 0.0:
            hi = mid
        else:
            lo = mid
    return 0.5 * (lo + hi) + turns


def kepler_residual(mean_anomaly: float, eccentricity: float, eccentric_anomaly: float) -> float:
    return abs(mean_anomaly - (eccentric_anomaly - eccentricity * math.sin(eccentric_anomaly)))


__all__ = [
    "KEPLER_MAX_ITERATIONS",
    "KEPLER_TOLERANCE",
    "KeplerConvergenceError",
    "bisect_eccentric_anomaly",
    "initial_guess",
    "kepler_residual",
    "solve_kepler",
]
