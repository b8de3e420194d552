"""Preset initial conditions."""

from solar_nbody.presets.base import Preset, populate
from solar_nbody.presets.two_body import TwoBodyCircular
from solar_nbody.presets.solar_system import SolarSystem

PRESETS = {
    "two_body": TwoBodyCircular,
    "solar_system": SolarSystem,
}

__all__ = ["Preset", "populate", "TwoBodyCircular", "SolarSystem", "PRESETS"]
