"""Unit system and physical constants.

The engine works in astronomical units, days and kilograms, which is what
ephemeris services such as JPL Horizons hand out (positions in AU,
velocities in AU/day) combined with masses quoted in kg. The gravitational
constant is rescaled from SI so that ``a = G * m / r**2`` comes out
directly in AU/day^2.
"""

G_SI = 6.6743e-11  # m^3 kg^-1 s^-2
SECONDS_PER_DAY = 86400.0
METERS_PER_AU = 1.496e11

# G in AU^3 kg^-1 day^-2 (about 1.488e-34)
G_AU3_PER_KG_DAY2 = G_SI * SECONDS_PER_DAY ** 2 / METERS_PER_AU ** 3

# Softening length in AU (~150 km), far below any planetary separation
EPSILON_DEFAULT = 1e-6

DT_DEFAULT = 0.5  # days

UNIT_SYSTEM = "au-day-kg"
