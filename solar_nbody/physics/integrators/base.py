"""Abstract base class for numerical integrators and the method selector."""

import math
import numbers
from abc import ABC, abstractmethod
from enum import IntEnum

from solar_nbody.errors import InvalidMethodError, InvalidParameterError


class Method(IntEnum):
    """Integration scheme, with the integer codes callers pass to ``simulate_step``."""

    EULER = 0
    VERLET = 1
    RK4 = 2


def resolve_method(method) -> Method:
    """Turn a method code, name or ``Method`` into a ``Method``.

    Args:
        method: ``Method``, integer code (0, 1, 2) or case-insensitive name

    Raises:
        InvalidMethodError: If the code or name is not a known method
    """
    if isinstance(method, Method):
        return method
    if isinstance(method, str):
        try:
            return Method[method.strip().upper()]
        except KeyError:
            raise InvalidMethodError(
                f"Unknown method '{method}'. Available: {[m.name.lower() for m in Method]}"
            ) from None
    if isinstance(method, numbers.Integral) and not isinstance(method, bool):
        try:
            return Method(int(method))
        except ValueError:
            raise InvalidMethodError(
                f"Unknown method {method}. Available: {[int(m) for m in Method]}"
            ) from None
    raise InvalidMethodError(f"Unknown method {method!r}")


def check_timestep(dt) -> float:
    """Validate a time step: finite and non-zero (negative runs backward)."""
    try:
        dt = float(dt)
    except (TypeError, ValueError):
        raise InvalidParameterError(f"Time step must be a real number, got {dt!r}") from None
    if not math.isfinite(dt) or dt == 0.0:
        raise InvalidParameterError(f"Time step must be finite and non-zero, got {dt}")
    return dt


class Integrator(ABC):
    """Abstract interface for numerical integrators.

    An integrator advances every live body in a ``BodyStore`` by exactly
    one step of size ``dt`` and commits the result back to the store.
    """

    @abstractmethod
    def advance(self, store, force_model, dt: float) -> None:
        """Perform one integration step in place.

        Args:
            store: BodyStore holding the live bodies
            force_model: ForceModel used to evaluate accelerations
            dt: Time step (non-zero; negative integrates backward)
        """
        pass

    @property
    @abstractmethod
    def method(self) -> Method:
        """Return the method this integrator implements."""
        pass

    @property
    def name(self) -> str:
        """Return the name of this integrator."""
        return self.method.name.lower()

    @property
    @abstractmethod
    def order(self) -> int:
        """Return the order of accuracy (e.g., 1 for Euler, 2 for Verlet, 4 for RK4)."""
        pass

    @property
    @abstractmethod
    def force_evaluations(self) -> int:
        """Return the number of force evaluations per step (without caching)."""
        pass
