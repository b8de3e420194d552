"""Softened Newtonian gravity between point masses.

Acceleration on body i from every other body j:

    a_i = sum_j G * m_j * (p_j - p_i) / (|p_j - p_i|^2 + eps^2)^1.5

The softening length eps bounds the force as two bodies approach each
other; it is chosen far below any physical separation so realistic
trajectories are not perturbed.
"""

import math
from typing import Any, Literal, Optional

from solar_nbody.backends.base import Backend
from solar_nbody.backends.numpy_backend import NumPyBackend
from solar_nbody.errors import InvalidParameterError
from solar_nbody.physics.constants import EPSILON_DEFAULT, G_AU3_PER_KG_DAY2

FORCE_METHODS = ("vectorized", "direct")


class ForceModel:
    """Pairwise O(n^2) gravitational acceleration field.

    Two evaluation strategies produce the same physics:

    - ``"vectorized"``: builds the (n, n, 3) pair force matrix with backend ops
    - ``"direct"``: loops over unordered pairs and applies each contribution
      to both bodies with opposite sign (Newton's third law)
    """

    def __init__(
        self,
        G: float = G_AU3_PER_KG_DAY2,
        epsilon: float = EPSILON_DEFAULT,
        method: Literal["vectorized", "direct"] = "vectorized",
        backend: Optional[Backend] = None,
    ):
        """Initialize the force model.

        Args:
            G: Gravitational constant in the caller's unit system
            epsilon: Softening length, same distance unit as positions
            method: "vectorized" or "direct"
            backend: Compute backend (NumPy if None)

        Raises:
            InvalidParameterError: If G or epsilon is not positive and finite,
                or the method is unknown
        """
        if not _positive_finite(G):
            raise InvalidParameterError(f"G must be positive and finite, got {G}")
        if not _positive_finite(epsilon):
            raise InvalidParameterError(f"epsilon must be positive and finite, got {epsilon}")
        if method not in FORCE_METHODS:
            raise InvalidParameterError(
                f"Unknown force method '{method}'. Available: {list(FORCE_METHODS)}"
            )
        self.G = float(G)
        self.epsilon = float(epsilon)
        self.method = method
        self.backend = backend or NumPyBackend()
        self.evaluations = 0

    def accelerations(self, positions: Any, masses: Any) -> Any:
        """Compute the acceleration of every body.

        Args:
            positions: (n, 3) backend array
            masses: (n,) backend array

        Returns:
            (n, 3) backend array of accelerations
        """
        self.evaluations += 1
        n = positions.shape[0]
        if n < 2:
            return self.backend.zeros((n, 3))
        if self.method == "direct":
            return self._accelerations_direct(positions, masses)

        return self._accelerations_vectorized(positions, masses)

    def _accelerations_vectorized(self, positions: Any, masses: Any) -> Any:
        """Sum G * m_j * r_ij / (r^2 + eps^2)^1.5 over j without forming m_i * m_j."""
        backend = self.backend
        n = positions.shape[0]
        r_diff = backend.subtract(
            backend.reshape(positions, (1, n, 3)), backend.reshape(positions, (n, 1, 3))
        )
        r_sq = backend.sum(backend.square(r_diff), axis=2)
        inv_r_cubed = backend.divide(1.0, backend.power(backend.add(r_sq, self.epsilon ** 2), 1.5))
        # Zero diagonal before scaling by mass
        inv_r_cubed = backend.multiply(inv_r_cubed, backend.subtract(1.0, backend.eye(n)))
        coefficient = backend.multiply(
            backend.expand_dims(backend.multiply(self.G, masses), 0), inv_r_cubed
        )
        return backend.sum(backend.multiply(backend.expand_dims(coefficient, 2), r_diff), axis=1)

    def pairwise_forces(self, positions: Any, masses: Any) -> Any:
        """Force on body i exerted by body j, as an (n, n, 3) array.

        The matrix is exactly antisymmetric: ``F[i, j] == -F[j, i]``.
        """
        backend = self.backend
        n = positions.shape[0]
        # r_diff[i, j] = p_j - p_i
        pos_i = backend.reshape(positions, (n, 1, 3))
        pos_j = backend.reshape(positions, (1, n, 3))
        r_diff = backend.subtract(pos_j, pos_i)
        r_sq = backend.sum(backend.square(r_diff), axis=2)
        r_soft_cubed = backend.power(backend.add(r_sq, self.epsilon ** 2), 1.5)

        m_i = backend.expand_dims(masses, 1)
        m_j = backend.expand_dims(masses, 0)
        force_magnitude = backend.multiply(
            self.G, backend.divide(backend.multiply(m_i, m_j), r_soft_cubed)
        )
        # Zero diagonal
        force_magnitude = backend.multiply(force_magnitude, backend.subtract(1.0, backend.eye(n)))
        return backend.multiply(backend.expand_dims(force_magnitude, 2), r_diff)

    def _accelerations_direct(self, positions: Any, masses: Any) -> Any:
        """Loop over unordered pairs (i < j), computing each pair once."""
        pos = self.backend.to_numpy(positions)
        m = self.backend.to_numpy(masses)
        n = pos.shape[0]
        acc = self.backend.to_numpy(self.backend.zeros((n, 3)))
        eps_sq = self.epsilon ** 2

        for i in range(n - 1):
            for j in range(i + 1, n):
                d = pos[j] - pos[i]
                r_soft_cubed = (d[0] * d[0] + d[1] * d[1] + d[2] * d[2] + eps_sq) ** 1.5
                acc[i] += (self.G * m[j] / r_soft_cubed) * d
                acc[j] -= (self.G * m[i] / r_soft_cubed) * d

        return self.backend.array(acc)


def _positive_finite(value) -> bool:
    try:
        value = float(value)
    except (TypeError, ValueError):
        return False
    return math.isfinite(value) and value > 0.0
