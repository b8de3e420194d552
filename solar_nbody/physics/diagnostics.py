"""Conserved-quantity diagnostics for N-body states."""

import numpy as np
from typing import Tuple

from solar_nbody.backends.base import Backend
from solar_nbody.backends.numpy_backend import NumPyBackend
from solar_nbody.physics.constants import EPSILON_DEFAULT, G_AU3_PER_KG_DAY2


class Diagnostics:
    """Compute energies and momenta consistent with the softened force law."""

    def __init__(
        self,
        backend: Backend = None,
        G: float = G_AU3_PER_KG_DAY2,
        epsilon: float = EPSILON_DEFAULT,
    ):
        """Initialize diagnostics.

        Args:
            backend: Compute backend
            G: Gravitational constant
            epsilon: Softening parameter (must match force calculation)
        """
        self.backend = backend or NumPyBackend()
        self.G = G
        self.epsilon = epsilon

    def _to_numpy(self, positions, velocities, masses):
        return (
            np.asarray(self.backend.to_numpy(positions)).reshape(-1, 3),
            np.asarray(self.backend.to_numpy(velocities)).reshape(-1, 3),
            np.asarray(self.backend.to_numpy(masses)).flatten(),
        )

    def compute_energies(self, positions, velocities, masses) -> Tuple[float, float, float]:
        """Compute kinetic, potential, and total energy.

        Potential uses the same Plummer softening as the force law:
        U = -G * sum_{i<j} m_i * m_j / sqrt(r_ij^2 + eps^2)

        Returns:
            Tuple of (kinetic_energy, potential_energy, total_energy)
        """
        positions_np, velocities_np, masses_np = self._to_numpy(positions, velocities, masses)
        n = len(masses_np)

        K = 0.5 * np.sum(masses_np * np.sum(velocities_np ** 2, axis=1))

        U = 0.0
        if n > 1:
            r_diff = positions_np[np.newaxis, :, :] - positions_np[:, np.newaxis, :]
            r_soft = np.sqrt(np.sum(r_diff ** 2, axis=2) + self.epsilon ** 2)
            i_upper, j_upper = np.triu_indices(n, k=1)
            U = -self.G * np.sum(
                masses_np[i_upper] * masses_np[j_upper] / r_soft[i_upper, j_upper]
            )

        return float(K), float(U), float(K + U)

    def compute_momentum(self, velocities, masses) -> np.ndarray:
        """Total linear momentum P = sum(m_i * v_i), shape (3,)."""
        velocities_np = np.asarray(self.backend.to_numpy(velocities)).reshape(-1, 3)
        masses_np = np.asarray(self.backend.to_numpy(masses)).flatten()
        return np.sum(masses_np[:, np.newaxis] * velocities_np, axis=0)

    def compute_angular_momentum(self, positions, velocities, masses) -> np.ndarray:
        """Total angular momentum L = sum(m_i * r_i x v_i), shape (3,)."""
        positions_np, velocities_np, masses_np = self._to_numpy(positions, velocities, masses)
        return np.sum(masses_np[:, np.newaxis] * np.cross(positions_np, velocities_np), axis=0)

    def compute_center_of_mass(self, positions, masses) -> np.ndarray:
        """Mass-weighted mean position, shape (3,)."""
        positions_np = np.asarray(self.backend.to_numpy(positions)).reshape(-1, 3)
        masses_np = np.asarray(self.backend.to_numpy(masses)).flatten()
        return np.sum(masses_np[:, np.newaxis] * positions_np, axis=0) / np.sum(masses_np)
