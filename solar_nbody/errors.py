"""Error taxonomy for the simulation core.

Every error is a contract violation detected before any state is mutated,
so the engine is left exactly as it was before the offending call.
"""


class NBodyError(Exception):
    """Base class for all simulation errors."""


class InvalidIdError(NBodyError, IndexError):
    """Body id outside the allocated/live range, or a stale handle."""


class InvalidMethodError(NBodyError, ValueError):
    """Integration method code not in {0, 1, 2}."""


class InvalidStateError(NBodyError, RuntimeError):
    """Operation attempted while the engine is uninitialized or released."""


class InvalidParameterError(NBodyError, ValueError):
    """Non-positive mass, non-finite input, or zero time step."""


class NonFiniteStateError(NBodyError, FloatingPointError):
    """A step produced NaN or infinite positions/velocities."""
