"""Main simulation controller."""

import numbers
from enum import Enum
from typing import Callable, Optional, Tuple

import numpy as np

from solar_nbody.backends.base import Backend
from solar_nbody.backends.factory import get_backend
from solar_nbody.errors import InvalidParameterError, InvalidStateError, NBodyError
from solar_nbody.physics.body_store import BodyStore
from solar_nbody.physics.diagnostics import Diagnostics
from solar_nbody.physics.force_model import ForceModel
from solar_nbody.physics.integrators import (
    Integrator,
    Method,
    check_timestep,
    get_integrator,
)
from solar_nbody.utils.config import SimulationConfig


class SimulationState(Enum):
    UNINITIALIZED = "uninitialized"
    READY = "ready"
    RELEASED = "released"


class Simulator:
    """Main simulation controller.

    Owns one body population, a force model and the active integrator.
    Lifecycle: UNINITIALIZED -> READY (first ``init_body``) -> RELEASED
    (``release_all``) -> READY (``init_body`` again, as a fresh population).

    Instances are independent: several simulations can coexist.
    """

    def __init__(
        self,
        config: Optional[SimulationConfig] = None,
        backend: Optional[Backend] = None,
    ):
        """Initialize simulator.

        Args:
            config: Simulation configuration (defaults: AU/day/kg, RK4, dt=0.5)
            backend: Compute backend (default: the one named in ``config``)
        """
        self.config = (config or SimulationConfig()).validate()
        self.backend = backend or get_backend(self.config.backend)

        self.store = BodyStore(self.backend)
        self.force_model = ForceModel(
            G=self.config.G,
            epsilon=self.config.epsilon,
            method=self.config.force_method,
            backend=self.backend,
        )
        self.diagnostics = Diagnostics(self.backend, G=self.config.G, epsilon=self.config.epsilon)

        self.integrator: Integrator = get_integrator(self.config.method)
        self.dt = check_timestep(self.config.dt)

        self.state = SimulationState.UNINITIALIZED
        self.time = 0.0
        self.step_count = 0
        self.paused = False

        # Callbacks
        self.on_step_callback: Optional[Callable] = None
        self.verbose = self.config.verbose
        self.debug_interval = int(self.config.debug_interval)

    # Lifecycle

    def init_body(self, body_id, mass, x, y, z, vx, vy, vz):
        """Insert or overwrite a body; moves the engine to READY.

        Raises:
            InvalidParameterError: On a non-positive mass, a non-finite value
                or a bad id. Existing state is left untouched.
        """
        self.store.init_body(body_id, mass, x, y, z, vx, vy, vz)
        if self.state is not SimulationState.READY:
            self.time = 0.0
            self.step_count = 0
        self.state = SimulationState.READY

    def release_all(self):
        """Free all bodies and scratch buffers. Calling it again is a no-op."""
        self.store.release_all()
        self.state = SimulationState.RELEASED

    def _require_ready(self, action: str):
        if self.state is not SimulationState.READY:
            raise InvalidStateError(f"Cannot {action}: simulation is {self.state.value}")

    @property
    def n_bodies(self) -> int:
        return self.store.live_count

    @property
    def epoch(self) -> int:
        return self.store.epoch

    # Stepping

    def simulate_step(self, method, dt: float):
        """Advance every body by one step with the given method.

        The method takes effect for this call only; the controller's own
        ``method``/``dt`` (used by ``step``) are not changed.

        Args:
            method: Method code (0 Euler, 1 Verlet, 2 RK4), name or ``Method``
            dt: Time step, non-zero; negative integrates backward

        Raises:
            InvalidStateError: If no population is loaded
            InvalidMethodError: If the method code is unknown
            InvalidParameterError: If dt is zero or non-finite
            NonFiniteStateError: If the step would produce non-finite state
        """
        self._require_ready("step")
        integrator = get_integrator(method)
        dt = check_timestep(dt)
        self._advance(integrator, dt)

    def step(self):
        """Perform one step with the current integrator and time step."""
        self._require_ready("step")
        if self.paused:
            return
        self._advance(self.integrator, self.dt)

    def _advance(self, integrator: Integrator, dt: float):
        integrator.advance(self.store, self.force_model, dt)
        self.time += dt
        self.step_count += 1

        if self.verbose and (self.step_count % self.debug_interval == 0):
            self._log_diagnostics()

        if self.on_step_callback:
            self.on_step_callback(self)

    def _log_diagnostics(self):
        """Log energy and momentum."""
        K, U, E = self.diagnostics.compute_energies(
            self.store.positions, self.store.velocities, self.store.masses
        )
        P = self.get_momentum()
        print(
            f"[Diag] step={self.step_count} t={self.time:.4f} "
            f"K={K:.6e} U={U:.6e} E={E:.6e} |P|={float(np.linalg.norm(P)):.6e}"
        )

    def _snapshot(self):
        return (self.store.positions, self.store.velocities, self.time, self.step_count)

    def _restore(self, snapshot):
        positions, velocities, self.time, self.step_count = snapshot
        self.store.commit(positions, velocities)

    def run(self, n_steps: int):
        """Run simulation for specified number of steps.

        If any step fails, every step of this call is rolled back.

        Args:
            n_steps: Number of steps to run
        """
        self._require_ready("step")
        n_steps = _check_steps(n_steps)
        snapshot = self._snapshot()
        try:
            for _ in range(n_steps):
                self.step()
        except NBodyError:
            self._restore(snapshot)
            raise

    def simulate_all(self, method, total_steps: int, dt: float) -> np.ndarray:
        """Run ``total_steps`` steps and record every body's position.

        Args:
            method: Method code, name or ``Method``
            total_steps: Number of steps (>= 0)
            dt: Time step

        Returns:
            Array of shape (total_steps + 1, n_bodies, 3); index 0 holds the
            initial positions

        Raises:
            InvalidParameterError: If total_steps is not a non-negative integer
            NonFiniteStateError: If any step fails; the engine is restored to
                its state before the call
        """
        self._require_ready("simulate")
        integrator = get_integrator(method)
        dt = check_timestep(dt)
        total_steps = _check_steps(total_steps)

        snapshot = self._snapshot()
        history = np.empty((total_steps + 1, self.n_bodies, 3))
        history[0] = self.backend.to_numpy(self.store.positions)
        try:
            for t in range(1, total_steps + 1):
                self._advance(integrator, dt)
                history[t] = self.backend.to_numpy(self.store.positions)
        except NBodyError:
            self._restore(snapshot)
            raise
        return history

    def pause(self):
        """Pause simulation."""
        self.paused = True

    def resume(self):
        """Resume simulation."""
        self.paused = False

    def set_timestep(self, dt: float):
        """Set time step used by ``step``."""
        self.dt = check_timestep(dt)

    def set_method(self, method):
        """Set integrator used by ``step``."""
        self.integrator = get_integrator(method)

    @property
    def method(self) -> Method:
        return self.integrator.method

    # Queries

    def get_position(self, body_id, epoch: Optional[int] = None) -> Tuple[float, float, float]:
        """Return (x, y, z) of a body.

        Raises:
            InvalidStateError: If no population is loaded
            InvalidIdError: If the id is not live or ``epoch`` is stale
        """
        self._require_ready("query position")
        return self.store.position_of(body_id, epoch)

    def get_x(self, body_id) -> float:
        return self.get_position(body_id)[0]

    def get_y(self, body_id) -> float:
        return self.get_position(body_id)[1]

    def get_z(self, body_id) -> float:
        return self.get_position(body_id)[2]

    def get_velocity(self, body_id) -> Tuple[float, float, float]:
        self._require_ready("query velocity")
        return self.store.velocity_of(body_id)

    def get_state(self):
        """Get current simulation state.

        Returns:
            Tuple of (ids, positions, velocities, masses, time, step_count)
        """
        self._require_ready("query state")
        return (
            self.store.live_ids,
            self.backend.to_numpy(self.store.positions),
            self.backend.to_numpy(self.store.velocities),
            self.backend.to_numpy(self.store.masses),
            self.time,
            self.step_count,
        )

    def get_energy(self) -> float:
        """Get current total energy (kinetic + softened potential)."""
        return self._energies()[2]

    def get_kinetic_energy(self) -> float:
        return self._energies()[0]

    def get_potential_energy(self) -> float:
        return self._energies()[1]

    def _energies(self):
        self._require_ready("compute energy")
        return self.diagnostics.compute_energies(
            self.store.positions, self.store.velocities, self.store.masses
        )

    def get_momentum(self) -> np.ndarray:
        """Total linear momentum vector."""
        self._require_ready("compute momentum")
        return self.diagnostics.compute_momentum(self.store.velocities, self.store.masses)

    def get_angular_momentum(self) -> np.ndarray:
        """Total angular momentum vector about the origin."""
        self._require_ready("compute angular momentum")
        return self.diagnostics.compute_angular_momentum(
            self.store.positions, self.store.velocities, self.store.masses
        )


def _check_steps(n_steps) -> int:
    if isinstance(n_steps, bool) or not isinstance(n_steps, numbers.Integral):
        raise InvalidParameterError(f"Step count must be an integer, got {n_steps!r}")
    if n_steps < 0:
        raise InvalidParameterError(f"Step count must be non-negative, got {n_steps}")
    return int(n_steps)
