"""Abstract base class for compute backends."""

from abc import ABC, abstractmethod
from typing import Any, Tuple, Union
import numpy as np


class Backend(ABC):
    """Abstract interface for array computation backends.

    The force model and the integrators only talk to arrays through this
    interface, so the physics does not depend on a particular array library.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Return the name of this backend."""
        pass

    @property
    @abstractmethod
    def device(self) -> str:
        """Return the device type (e.g., 'cpu')."""
        pass

    @abstractmethod
    def array(self, data: Any, dtype=None) -> Any:
        """Create an array from data.

        Args:
            data: Input data (list, numpy array, etc.)
            dtype: Optional data type

        Returns:
            Backend array object
        """
        pass

    @abstractmethod
    def zeros(self, shape: Tuple[int, ...], dtype=None) -> Any:
        """Create an array of zeros."""
        pass

    @abstractmethod
    def sum(self, array: Any, axis: Union[int, Tuple[int, ...]] = None, keepdims: bool = False) -> Any:
        """Sum array elements along axis."""
        pass

    @abstractmethod
    def square(self, array: Any) -> Any:
        """Compute square."""
        pass

    @abstractmethod
    def add(self, a: Any, b: Any) -> Any:
        """Element-wise addition."""
        pass

    @abstractmethod
    def subtract(self, a: Any, b: Any) -> Any:
        """Element-wise subtraction."""
        pass

    @abstractmethod
    def multiply(self, a: Any, b: Any) -> Any:
        """Element-wise multiplication."""
        pass

    @abstractmethod
    def divide(self, a: Any, b: Any) -> Any:
        """Element-wise division."""
        pass

    @abstractmethod
    def power(self, base: Any, exponent: Any) -> Any:
        """Element-wise power."""
        pass

    @abstractmethod
    def reshape(self, array: Any, newshape: Tuple[int, ...]) -> Any:
        """Reshape array to newshape (for broadcasting, etc.)."""
        pass

    @abstractmethod
    def expand_dims(self, array: Any, axis: int) -> Any:
        """Expand the shape by inserting a new axis at axis (e.g. (n,) -> (n, 1))."""
        pass

    @abstractmethod
    def eye(self, n: int, dtype=None) -> Any:
        """Identity matrix (n, n), for masking diagonal."""
        pass

    @abstractmethod
    def stack(self, arrays, axis: int = 0) -> Any:
        """Stack arrays along a new axis."""
        pass

    @abstractmethod
    def all_finite(self, array: Any) -> bool:
        """Return True if every element is finite (no NaN or inf)."""
        pass

    @abstractmethod
    def to_numpy(self, array: Any) -> np.ndarray:
        """Convert backend array to NumPy array.

        Used at the query boundary, where results leave the engine by copy.
        """
        pass
