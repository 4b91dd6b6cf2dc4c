"""
Shared fixtures for gameplay tests.
"""
import pytest

from shaft_miner.gameplay.grid import WorldGrid
from shaft_miner.gameplay.network import MachineNetwork


class FakeClock:
    """Manually advanced clock, injected wherever the game reads time."""

    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float):
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def world():
    """An empty 16-column shaft starting at row 2; nothing generated."""
    return WorldGrid(width=16, surface_row=2, shaft_left=0, shaft_width=16, shaft_depth=12)


@pytest.fixture
def network(world):
    network = MachineNetwork()
    network.attach(world)
    return network
