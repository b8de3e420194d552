"""Two-body circular orbit."""

import numpy as np

from solar_nbody.physics.constants import G_AU3_PER_KG_DAY2
from solar_nbody.presets.base import Preset


class TwoBodyCircular(Preset):
    """Central mass M at the origin, mass m on a circular orbit of radius r.

    The orbiting body starts at (r, 0, 0) moving along +y with speed
    sqrt(G * M / r); the central body starts at rest.
    """

    def __init__(
        self,
        central_mass: float = 1.0,
        orbiting_mass: float = 1e-6,
        radius: float = 1.0,
        G: float = G_AU3_PER_KG_DAY2,
    ):
        super().__init__(G=G)
        self.central_mass = central_mass
        self.orbiting_mass = orbiting_mass
        self.radius = radius

    @property
    def name(self) -> str:
        return "two_body"

    @property
    def speed(self) -> float:
        return float(np.sqrt(self.G * self.central_mass / self.radius))

    @property
    def period(self) -> float:
        """Analytic orbital period 2*pi*sqrt(r^3 / (G*M))."""
        return float(2.0 * np.pi * np.sqrt(self.radius ** 3 / (self.G * self.central_mass)))

    def generate(self):
        positions = np.array([
            [0.0, 0.0, 0.0],
            [self.radius, 0.0, 0.0],
        ])
        velocities = np.array([
            [0.0, 0.0, 0.0],
            [0.0, self.speed, 0.0],
        ])
        masses = np.array([self.central_mass, self.orbiting_mass])
        return positions, velocities, masses
