"""Plain records for the inputs and outputs of the orientation filter and helpers to convert them."""

from collections.abc import Sequence
from typing import NamedTuple, Union

import numpy as np
from typing_extensions import Self, TypeAlias


class Vector3(NamedTuple):
    """A three-component vector.

    Used for angular rates (rad/s) and specific force (any consistent unit, only the direction is used).
    """

    x: float
    y: float
    z: float

    def as_array(self) -> np.ndarray:
        """Return the vector as float64 array with shape (3,)."""
        return np.array(self, dtype=np.float64)

    @classmethod
    def from_array(cls, arr: Union[np.ndarray, Sequence[float]]) -> Self:
        """Create a vector from any array-like of length 3."""
        arr = np.asarray(arr, dtype=np.float64)
        if arr.shape != (3,):
            raise ValueError(f"A vector needs exactly 3 components. Got an array with shape {arr.shape}.")
        return cls(*(float(v) for v in arr))


class Quaternion(NamedTuple):
    """An orientation quaternion in Hamilton convention with the scalar part first.

    The quaternion describes the orientation of the sensor frame relative to the global frame.

    .. note:: scipy uses the scalar-last convention (x, y, z, w).
       Use :func:`~quatfuse.utils.conversions.to_rotation` and :func:`~quatfuse.utils.conversions.from_rotation` to
       convert between the two.
    """

    w: float
    x: float
    y: float
    z: float

    @classmethod
    def identity(cls) -> Self:
        return cls(1.0, 0.0, 0.0, 0.0)

    def as_array(self) -> np.ndarray:
        """Return the quaternion as float64 array with shape (4,) in (w, x, y, z) order."""
        return np.array(self, dtype=np.float64)

    @classmethod
    def from_array(cls, arr: Union[np.ndarray, Sequence[float]]) -> Self:
        """Create a quaternion from any array-like of length 4 in (w, x, y, z) order."""
        arr = np.asarray(arr, dtype=np.float64)
        if arr.shape != (4,):
            raise ValueError(f"A quaternion needs exactly 4 components. Got an array with shape {arr.shape}.")
        return cls(*(float(v) for v in arr))

    def norm(self) -> float:
        return float(np.sqrt(self.w**2 + self.x**2 + self.y**2 + self.z**2))


# : Anything that can be interpreted as vector.
VectorLike: TypeAlias = Union[Vector3, np.ndarray, Sequence[float]]
# : Anything that can be interpreted as quaternion (scalar first).
QuaternionLike: TypeAlias = Union[Quaternion, np.ndarray, Sequence[float]]


def as_vector_array(vec: VectorLike) -> np.ndarray:
    """Convert a vector-like input to a float64 array with shape (3,)."""
    if isinstance(vec, Vector3):
        return vec.as_array()
    return Vector3.from_array(vec).as_array()


def as_quaternion_array(quat: QuaternionLike) -> np.ndarray:
    """Convert a quaternion-like input to a float64 array with shape (4,) in (w, x, y, z) order."""
    if isinstance(quat, Quaternion):
        return quat.as_array()
    return Quaternion.from_array(quat).as_array()


__all__ = [
    "Quaternion",
    "QuaternionLike",
    "Vector3",
    "VectorLike",
    "as_quaternion_array",
    "as_vector_array",
]
