"""Euler method integrator (baseline, O(h) accuracy)."""

from solar_nbody.physics.integrators.base import Integrator, Method


class EulerIntegrator(Integrator):
    """Explicit forward Euler - simple first-order integrator.

    Fast but inaccurate: energy drifts secularly. Good for baseline comparisons.
    """

    @property
    def method(self) -> Method:
        return Method.EULER

    @property
    def order(self) -> int:
        return 1

    @property
    def force_evaluations(self) -> int:
        return 1

    def advance(self, store, force_model, dt: float) -> None:
        """Euler step: v_new = v + a*dt, r_new = r + v*dt (pre-update v)."""
        if store.is_empty:
            return
        backend = force_model.backend
        positions = store.positions
        velocities = store.velocities

        accelerations = force_model.accelerations(positions, store.masses)

        new_velocities = backend.add(velocities, backend.multiply(accelerations, dt))
        new_positions = backend.add(positions, backend.multiply(velocities, dt))

        store.commit(new_positions, new_velocities)
