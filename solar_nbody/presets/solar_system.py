"""Sun and eight planets on circular, coplanar orbits."""

import numpy as np

from solar_nbody.physics.constants import G_AU3_PER_KG_DAY2
from solar_nbody.presets.base import Preset

SUN_MASS = 1.989e30  # kg

# name, mass (kg), mean semi-major axis (AU)
PLANETS = (
    ("mercury", 3.301e23, 0.387),
    ("venus", 4.868e24, 0.723),
    ("earth", 5.972e24, 1.000),
    ("mars", 6.417e23, 1.524),
    ("jupiter", 1.898e27, 5.203),
    ("saturn", 5.683e26, 9.537),
    ("uranus", 8.681e25, 19.191),
    ("neptune", 1.024e26, 30.069),
)


class SolarSystem(Preset):
    """Deterministic stand-in for an ephemeris: id 0 is the Sun, 1..8 the planets.

    Without a seed every planet starts on the +x axis; with a seed the
    orbital phases are drawn uniformly. The Sun is given the velocity that
    cancels the planets' total momentum.
    """

    @property
    def name(self) -> str:
        return "solar_system"

    @property
    def body_names(self):
        return ["sun"] + [planet[0] for planet in PLANETS]

    def generate(self):
        n = len(PLANETS) + 1
        masses = np.array([SUN_MASS] + [planet[1] for planet in PLANETS])
        radii = np.array([planet[2] for planet in PLANETS])

        if self.seed is not None:
            rng = np.random.default_rng(self.seed)
            phases = rng.uniform(0.0, 2.0 * np.pi, len(PLANETS))
        else:
            phases = np.zeros(len(PLANETS))

        speeds = np.sqrt(self.G * SUN_MASS / radii)

        positions = np.zeros((n, 3))
        velocities = np.zeros((n, 3))
        positions[1:, 0] = radii * np.cos(phases)
        positions[1:, 1] = radii * np.sin(phases)
        velocities[1:, 0] = -speeds * np.sin(phases)
        velocities[1:, 1] = speeds * np.cos(phases)

        # Zero total momentum
        velocities[0] = -np.sum(masses[1:, np.newaxis] * velocities[1:], axis=0) / SUN_MASS
        return positions, velocities, masses
