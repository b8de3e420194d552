"""Per-body state storage.

Bodies live in an arena of slots indexed by a dense, caller-assigned id.
The arena tracks its capacity explicitly, which slots are live, and an
epoch that changes every time the whole population is released, so that
handles taken against an earlier population fail loudly.
"""

import math
import numbers
from typing import Optional, Tuple

import numpy as np

from solar_nbody.backends.base import Backend
from solar_nbody.backends.numpy_backend import NumPyBackend
from solar_nbody.errors import InvalidIdError, InvalidParameterError, NonFiniteStateError


class ScratchBuffers:
    """Integrator-private buffers sized to the live body count.

    Holds the acceleration cached by the Verlet integrator (tagged with the
    store revision it was computed for) and the four RK4 stage buffers.
    """

    def __init__(self, backend: Backend):
        self.backend = backend
        self.reset()

    def reset(self):
        """Drop every buffer."""
        self.n_bodies = 0
        self._acceleration = None
        self._acceleration_revision = None
        self._stages = None

    def resize(self, n_bodies: int):
        """Reset the buffers if the body count changed."""
        if n_bodies != self.n_bodies:
            self.reset()
            self.n_bodies = n_bodies

    def cached_acceleration(self, revision: int):
        """Return the cached acceleration if it is valid for ``revision``."""
        if self._acceleration is None or self._acceleration_revision != revision:
            return None
        return self._acceleration

    def store_acceleration(self, acceleration, revision: int):
        self._acceleration = acceleration
        self._acceleration_revision = revision

    def invalidate_acceleration(self):
        self._acceleration = None
        self._acceleration_revision = None

    def stages(self):
        """Four (n, 2, 3) derivative buffers for RK4: d(position), d(velocity)."""
        if self._stages is None:
            self._stages = self.backend.zeros((4, self.n_bodies, 2, 3))
        return self._stages

    @property
    def allocated(self) -> bool:
        return self._acceleration is not None or self._stages is not None


class BodyStore:
    """Arena of point masses indexed by integer id.

    Attributes:
        capacity: Number of allocated slots (ids ``0 .. capacity - 1``)
        epoch: Population counter, incremented by every ``release_all``
        revision: Mutation counter, incremented by every init or commit
        scratch: Integrator scratch buffers for the current population
    """

    def __init__(self, backend: Optional[Backend] = None):
        self.backend = backend or NumPyBackend()
        self.epoch = 0
        self.revision = 0
        self.scratch = ScratchBuffers(self.backend)
        self._allocate(0)

    def _allocate(self, capacity: int):
        self._masses = np.zeros(capacity)
        self._positions = np.zeros((capacity, 3))
        self._velocities = np.zeros((capacity, 3))
        self._live = np.zeros(capacity, dtype=bool)

    def _grow(self, capacity: int):
        old = self.capacity
        masses, positions, velocities, live = (
            self._masses, self._positions, self._velocities, self._live
        )
        self._allocate(capacity)
        self._masses[:old] = masses
        self._positions[:old] = positions
        self._velocities[:old] = velocities
        self._live[:old] = live

    @property
    def capacity(self) -> int:
        return int(self._live.shape[0])

    @property
    def live_count(self) -> int:
        return int(np.count_nonzero(self._live))

    @property
    def is_empty(self) -> bool:
        return self.live_count == 0

    def init_body(self, body_id, mass, x, y, z, vx, vy, vz):
        """Insert or overwrite the body at ``body_id``.

        Args:
            body_id: Non-negative integer id
            mass: Positive, finite mass
            x, y, z: Position components
            vx, vy, vz: Velocity components

        Raises:
            InvalidParameterError: If any argument violates the body contract.
                The store is left unchanged.
        """
        if isinstance(body_id, bool) or not isinstance(body_id, numbers.Integral):
            raise InvalidParameterError(f"Body id must be an integer, got {body_id!r}")
        body_id = int(body_id)
        if body_id < 0:
            raise InvalidParameterError(f"Body id must be non-negative, got {body_id}")

        mass = _as_finite(mass, "mass")
        if mass <= 0.0:
            raise InvalidParameterError(f"Mass must be positive, got {mass}")
        position = [_as_finite(v, name) for v, name in ((x, "x"), (y, "y"), (z, "z"))]
        velocity = [_as_finite(v, name) for v, name in ((vx, "vx"), (vy, "vy"), (vz, "vz"))]

        if body_id >= self.capacity:
            self._grow(max(body_id + 1, 2 * self.capacity))

        self._masses[body_id] = mass
        self._positions[body_id] = position
        self._velocities[body_id] = velocity
        self._live[body_id] = True

        self.revision += 1
        self.scratch.resize(self.live_count)
        self.scratch.invalidate_acceleration()

    def release_all(self):
        """Free all bodies and scratch buffers. Safe to call repeatedly."""
        if self.capacity == 0 and not self.scratch.allocated:
            return
        self._allocate(0)
        self.scratch.reset()
        self.epoch += 1
        self.revision += 1

    def _check_id(self, body_id, epoch: Optional[int] = None) -> int:
        if epoch is not None and epoch != self.epoch:
            raise InvalidIdError(
                f"Body handle from epoch {epoch} is stale (current epoch {self.epoch})"
            )
        if self.is_empty:
            raise InvalidIdError(f"No bodies allocated (requested id {body_id!r})")
        if isinstance(body_id, bool) or not isinstance(body_id, numbers.Integral):
            raise InvalidIdError(f"Body id must be an integer, got {body_id!r}")
        body_id = int(body_id)
        if body_id < 0 or body_id >= self.capacity:
            raise InvalidIdError(
                f"Body id {body_id} outside allocated range [0, {self.capacity})"
            )
        if not self._live[body_id]:
            raise InvalidIdError(f"Body id {body_id} has not been initialized")
        return body_id

    def position_of(self, body_id, epoch: Optional[int] = None) -> Tuple[float, float, float]:
        """Return the current position of a body as a tuple copy.

        Args:
            body_id: Body id
            epoch: Optional epoch the caller obtained the id under

        Raises:
            InvalidIdError: If the id is not live or the epoch is stale
        """
        body_id = self._check_id(body_id, epoch)
        return tuple(float(v) for v in self._positions[body_id])

    def velocity_of(self, body_id, epoch: Optional[int] = None) -> Tuple[float, float, float]:
        body_id = self._check_id(body_id, epoch)
        return tuple(float(v) for v in self._velocities[body_id])

    def mass_of(self, body_id, epoch: Optional[int] = None) -> float:
        body_id = self._check_id(body_id, epoch)
        return float(self._masses[body_id])

    @property
    def live_ids(self) -> np.ndarray:
        return np.flatnonzero(self._live)

    @property
    def masses(self):
        """Masses of live bodies in ascending id order, shape (n,)."""
        return self.backend.array(self._masses[self._live])

    @property
    def positions(self):
        """Positions of live bodies, shape (n, 3)."""
        return self.backend.array(self._positions[self._live])

    @property
    def velocities(self):
        """Velocities of live bodies, shape (n, 3)."""
        return self.backend.array(self._velocities[self._live])

    def commit(self, positions, velocities) -> int:
        """Write back a new live state produced by an integrator step.

        Returns:
            The new store revision

        Raises:
            NonFiniteStateError: If the new state contains NaN or inf; the
                previous state is kept.
        """
        if not (self.backend.all_finite(positions) and self.backend.all_finite(velocities)):
            raise NonFiniteStateError("Integration step produced non-finite positions or velocities")
        self._positions[self._live] = self.backend.to_numpy(positions)
        self._velocities[self._live] = self.backend.to_numpy(velocities)
        self.revision += 1
        return self.revision


def _as_finite(value, name: str) -> float:
    try:
        value = float(value)
    except (TypeError, ValueError):
        raise InvalidParameterError(f"{name} must be a real number, got {value!r}") from None
    if not math.isfinite(value):
        raise InvalidParameterError(f"{name} must be finite, got {value}")
    return value
