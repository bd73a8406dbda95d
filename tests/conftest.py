import pytest

from orrery.core.orbit import OrbitalPropagator
from orrery.core.timekeeping import ClockMode, PhysicsClock
from orrery.data.bodies import LUNAR_ELEMENTS
from orrery.simulation import Simulation


@pytest.fixture
def moon_propagator():
    return OrbitalPropagator(LUNAR_ELEMENTS)


@pytest.fixture
def stopped_sim():
    """Simulation whose clock only moves on explicit ticks."""
    return Simulation(clock=PhysicsClock(mode=ClockMode.STOP_TICK))
