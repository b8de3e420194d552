"""Compute backend abstractions for the N-body core."""

from solar_nbody.backends.base import Backend
from solar_nbody.backends.factory import get_backend, list_available_backends

__all__ = ["Backend", "get_backend", "list_available_backends"]
