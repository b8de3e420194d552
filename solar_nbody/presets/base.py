"""Base class for preset scenarios."""

from abc import ABC, abstractmethod
from typing import Tuple

import numpy as np

from solar_nbody.physics.constants import G_AU3_PER_KG_DAY2


class Preset(ABC):
    """Abstract base class for preset initial conditions."""

    def __init__(self, G: float = G_AU3_PER_KG_DAY2, seed: int = None):
        """Initialize preset.

        Args:
            G: Gravitational constant the velocities are computed for
            seed: Random seed for reproducibility (where the preset uses one)
        """
        self.G = G
        self.seed = seed

    @abstractmethod
    def generate(self) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
        """Generate initial conditions.

        Returns:
            Tuple of (positions (n, 3), velocities (n, 3), masses (n,))
        """
        pass

    @property
    @abstractmethod
    def name(self) -> str:
        """Return the name of this preset."""
        pass


def populate(simulator, preset: Preset) -> int:
    """Load a preset into a simulator through ``init_body``, ids 0..n-1.

    Returns:
        Number of bodies loaded
    """
    positions, velocities, masses = preset.generate()
    for i, (mass, pos, vel) in enumerate(zip(masses, positions, velocities)):
        simulator.init_body(i, mass, *pos, *vel)
    return len(masses)
