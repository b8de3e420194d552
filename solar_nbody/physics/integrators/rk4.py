"""Runge-Kutta 4th order integrator (high accuracy, O(h^4))."""

from solar_nbody.physics.integrators.base import Integrator, Method


class RK4Integrator(Integrator):
    """Runge-Kutta 4th order method - high accuracy integrator.

    Most accurate per step but needs four force evaluations.
    """

    @property
    def method(self) -> Method:
        return Method.RK4

    @property
    def order(self) -> int:
        return 4

    @property
    def force_evaluations(self) -> int:
        return 4

    def advance(self, store, force_model, dt: float) -> None:
        """RK4 step on the joint state y = (r, v) with dy/dt = (v, a(r)).

        k1 = f(y)
        k2 = f(y + k1*dt/2)
        k3 = f(y + k2*dt/2)
        k4 = f(y + k3*dt)
        y_new = y + (k1 + 2*k2 + 2*k3 + k4)*dt/6
        """
        if store.is_empty:
            return
        backend = force_model.backend
        masses = store.masses
        state = backend.stack([store.positions, store.velocities], axis=1)  # (n, 2, 3)
        k = store.scratch.stages()

        k[0] = self._derivative(state, masses, force_model)
        k[1] = self._derivative(backend.add(state, backend.multiply(k[0], 0.5 * dt)), masses, force_model)
        k[2] = self._derivative(backend.add(state, backend.multiply(k[1], 0.5 * dt)), masses, force_model)
        k[3] = self._derivative(backend.add(state, backend.multiply(k[2], dt)), masses, force_model)

        weighted = backend.add(
            backend.add(k[0], k[3]),
            backend.multiply(backend.add(k[1], k[2]), 2.0),
        )
        new_state = backend.add(state, backend.multiply(weighted, dt / 6.0))

        store.commit(new_state[:, 0, :], new_state[:, 1, :])

    @staticmethod
    def _derivative(state, masses, force_model):
        accelerations = force_model.accelerations(state[:, 0, :], masses)
        return force_model.backend.stack([state[:, 1, :], accelerations], axis=1)
