"""Numerical integrators for N-body simulations."""

from solar_nbody.physics.integrators.base import (
    Integrator,
    Method,
    check_timestep,
    resolve_method,
)
from solar_nbody.physics.integrators.euler import EulerIntegrator
from solar_nbody.physics.integrators.verlet import VerletIntegrator
from solar_nbody.physics.integrators.rk4 import RK4Integrator

INTEGRATORS = {
    Method.EULER: EulerIntegrator,
    Method.VERLET: VerletIntegrator,
    Method.RK4: RK4Integrator,
}


def get_integrator(method) -> Integrator:
    """Return an integrator instance for a method code, name or ``Method``.

    Raises:
        InvalidMethodError: If the method is unknown
    """
    return INTEGRATORS[resolve_method(method)]()


__all__ = [
    "Integrator",
    "Method",
    "EulerIntegrator",
    "VerletIntegrator",
    "RK4Integrator",
    "INTEGRATORS",
    "get_integrator",
    "resolve_method",
    "check_timestep",
]
