"""
solar-nbody - Newtonian N-body integration core.

Features:
- Softened O(n^2) pairwise gravity
- Interchangeable integrators (Euler, velocity Verlet, RK4)
- Explicit body lifecycle with stale-handle detection
- AU/day/kg units by default, configurable G and softening
"""

__version__ = "0.1.0"

from solar_nbody.errors import (
    InvalidIdError,
    InvalidMethodError,
    InvalidParameterError,
    InvalidStateError,
    NBodyError,
    NonFiniteStateError,
)
from solar_nbody.physics.integrators import Method
from solar_nbody.physics.simulator import SimulationState, Simulator
from solar_nbody.utils.config import SimulationConfig

__all__ = [
    "Simulator",
    "SimulationState",
    "SimulationConfig",
    "Method",
    "NBodyError",
    "InvalidIdError",
    "InvalidMethodError",
    "InvalidStateError",
    "InvalidParameterError",
    "NonFiniteStateError",
]
