"""
ElementType - closed set of tensor element types known to the IR
"""

from enum import Enum

import numpy as np


class ElementType(Enum):
    """
    Element type of a tensor edge.

    There is no implicit promotion between members. A node only moves to a
    floating type when a transformation decides so.
    """

    U8 = "u8"
    I8 = "i8"
    F16 = "f16"
    F32 = "f32"

    @property
    def is_real(self) -> bool:
        """True for floating point types."""
        return self in (ElementType.F16, ElementType.F32)

    def to_numpy(self) -> np.dtype:
        """Numpy dtype used when evaluating a graph."""
        return np.dtype(_NUMPY_NAMES[self])

    @classmethod
    def parse(cls, value) -> "ElementType":
        """
        Resolve an ElementType from a member, its short name ('u8') or a
        numpy-style dtype name ('uint8', 'float32').

        Raises:
            ValueError: If the name is not a known element type
        """
        if isinstance(value, cls):
            return value
        name = str(value).lower()
        for member in cls:
            if name == member.value or name == _NUMPY_NAMES[member]:
                return member
        raise ValueError(f"Unknown element type: {value!r}")

    def __str__(self) -> str:
        return self.value


_NUMPY_NAMES = {
    ElementType.U8: "uint8",
    ElementType.I8: "int8",
    ElementType.F16: "float16",
    ElementType.F32: "float32",
}
