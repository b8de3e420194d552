"""NumPy backend implementation."""

from typing import Any, Tuple, Union
import numpy as np
from solar_nbody.backends.base import Backend


class NumPyBackend(Backend):
    """NumPy-based backend (baseline, always available)."""

    @property
    def name(self) -> str:
        return "numpy"

    @property
    def device(self) -> str:
        return "cpu"

    def array(self, data: Any, dtype=None) -> np.ndarray:
        return np.array(data, dtype=dtype or np.float64)

    def zeros(self, shape: Tuple[int, ...], dtype=None) -> np.ndarray:
        return np.zeros(shape, dtype=dtype or np.float64)

    def sum(self, array: Any, axis: Union[int, Tuple[int, ...]] = None, keepdims: bool = False) -> np.ndarray:
        return np.sum(array, axis=axis, keepdims=keepdims)

    def square(self, array: Any) -> np.ndarray:
        return np.square(array)

    def add(self, a: Any, b: Any) -> np.ndarray:
        return np.add(a, b)

    def subtract(self, a: Any, b: Any) -> np.ndarray:
        return np.subtract(a, b)

    def multiply(self, a: Any, b: Any) -> np.ndarray:
        return np.multiply(a, b)

    def divide(self, a: Any, b: Any) -> np.ndarray:
        return np.divide(a, b)

    def power(self, base: Any, exponent: Any) -> np.ndarray:
        return np.power(base, exponent)

    def reshape(self, array: Any, newshape: Tuple[int, ...]) -> np.ndarray:
        return np.reshape(array, newshape)

    def expand_dims(self, array: Any, axis: int) -> np.ndarray:
        return np.expand_dims(array, axis=axis)

    def eye(self, n: int, dtype=None) -> np.ndarray:
        return np.eye(n, dtype=dtype or np.float64)

    def stack(self, arrays, axis: int = 0) -> np.ndarray:
        return np.stack(arrays, axis=axis)

    def all_finite(self, array: Any) -> bool:
        return bool(np.all(np.isfinite(array)))

    def to_numpy(self, array: Any) -> np.ndarray:
        return np.array(array, dtype=np.float64, copy=True)
