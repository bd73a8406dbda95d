"""Tests for the Kepler equation solver."""
import math

import numpy as np
import pytest

from orrery.core.kepler import (
    KEPLER_MAX_ITERATIONS,
    KeplerConvergenceError,
    bisect_eccentric_anomaly,
    initial_guess,
    kepler_residual,
    solve_kepler,
)


class TestInitialGuess:

    def test_negative_half_turn_starts_below(self):
        """M in (-pi, 0) seeds with M - e."""
        assert initial_guess(-1.0, 0.3) == pytest.approx(-1.3)

    def test_beyond_pi_starts_below(self):
        """M > pi seeds with M - e."""
        assert initial_guess(4.0, 0.3) == pytest.approx(3.7)

    def test_first_half_turn_starts_above(self):
        """M in [0, pi] seeds with M + e."""
        assert initial_guess(1.0, 0.3) == pytest.approx(1.3)
        assert initial_guess(-4.0, 0.3) == pytest.approx(-3.7)


class TestSolveKepler:

    def test_circular_orbit_is_identity(self):
        """With e = 0, E equals M."""
        for M in [0.0, 0.5, 1.0, 2.0, 5.0, -3.0]:
            assert solve_kepler(M, 0.0) == pytest.approx(M, abs=1e-14)

    def test_typical_orbit(self):
        E = solve_kepler(1.0, 0.4)
        assert kepler_residual(1.0, 0.4, E) < 1e-12

    def test_converges_across_grid(self):
        """e in [0, 0.95], M in [-4pi, 4pi] all converge to a tight residual."""
        for e in np.linspace(0.0, 0.95, 20):
            for M in np.linspace(-4 * math.pi, 4 * math.pi, 241):
                E = solve_kepler(float(M), float(e))
                assert kepler_residual(float(M), float(e), E) < 1e-12

    def test_whole_turns_preserved(self):
        """The solution lives in the same turn as M."""
        M = 3 * math.pi + 0.2
        E = solve_kepler(M, 0.5)
        assert abs(E - M) <= 0.5 + 1e-12

    def test_high_eccentricity_fuzz(self):
        """Up to e = 0.99 the solver either converges or raises, never returns junk."""
        rng = np.random.default_rng(1234)
        for _ in range(2000):
            e = float(rng.uniform(0.0, 0.99))
            M = float(rng.uniform(-4 * math.pi, 4 * math.pi))
            try:
                E = solve_kepler(M, e)
            except KeplerConvergenceError as exc:
                assert exc.iterations == KEPLER_MAX_ITERATIONS
                assert math.isfinite(exc.estimate)
                continue
            assert kepler_residual(M, e, E) < 1e-10

    def test_non_convergence_raises_with_estimate(self):
        with pytest.raises(KeplerConvergenceError) as info:
            solve_kepler(2.0, 0.9, max_iterations=1)
        err = info.value
        assert err.iterations == 1
        assert err.mean_anomaly == 2.0
        assert err.eccentricity == 0.9
        assert err.estimate != 0.0
        assert isinstance(err, ArithmeticError)


class TestBisection:

    def test_matches_newton(self):
        for M in [-5.0, -1.0, 0.3, 2.5, 9.0]:
            assert bisect_eccentric_anomaly(M, 0.6) == pytest.approx(solve_kepler(M, 0.6), abs=1e-12)

    def test_converges_at_extreme_eccentricity(self):
        for M in np.linspace(-4 * math.pi, 4 * math.pi, 97):
            E = bisect_eccentric_anomaly(float(M), 0.99)
            assert kepler_residual(float(M), 0.99, E) < 1e-12
