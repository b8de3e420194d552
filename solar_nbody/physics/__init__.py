"""Physics engine for N-body simulations."""

from solar_nbody.physics.body_store import BodyStore
from solar_nbody.physics.force_model import ForceModel
from solar_nbody.physics.simulator import SimulationState, Simulator

__all__ = ["BodyStore", "ForceModel", "SimulationState", "Simulator"]
