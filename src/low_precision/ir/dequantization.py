"""
Dequantization descriptor attached to a tensor edge.

A descriptor is the ordered decode chain

    convert -> subtract (zero point) -> multiply (scale)

that recovers real values from a low precision tensor. Every stage is
optional; a missing stage is the identity. Descriptors are immutable, rules
build new ones and swap them on the edge.
"""

from dataclasses import dataclass
from typing import Optional, Sequence, Tuple, Union

import numpy as np

from ..errors import ShapeMismatch
from .element_type import ElementType


Values = Union[float, int, Sequence[float]]


def _as_values(values: Values) -> Tuple[float, ...]:
    if np.isscalar(values):
        return (float(values),)
    result = tuple(float(v) for v in np.asarray(values, dtype=np.float64).ravel())
    if not result:
        raise ValueError("Dequantization stage needs at least one value")
    return result


def _format_values(values: Tuple[float, ...]) -> str:
    return "[" + ",".join(f"{v:g}" for v in values) + "]"


@dataclass(frozen=True)
class Convert:
    """Element type conversion, applied first."""

    element_type: ElementType

    def __post_init__(self):
        object.__setattr__(self, "element_type", ElementType.parse(self.element_type))

    def __str__(self) -> str:
        return str(self.element_type)


@dataclass(frozen=True)
class Subtract:
    """Zero point shift. One value per tensor or one per channel."""

    values: Tuple[float, ...]
    element_type: ElementType = ElementType.F32
    per_channel: Optional[bool] = None

    def __post_init__(self):
        values = _as_values(self.values)
        object.__setattr__(self, "values", values)
        object.__setattr__(self, "element_type", ElementType.parse(self.element_type))
        if self.per_channel is None:
            object.__setattr__(self, "per_channel", len(values) > 1)
        elif not self.per_channel and len(values) != 1:
            raise ValueError(f"Per-tensor subtract expects one value, got {len(values)}")

    def __str__(self) -> str:
        return f"{_format_values(self.values)}{self.element_type}"


@dataclass(frozen=True)
class Multiply:
    """Scale. One value per tensor or one per channel."""

    values: Tuple[float, ...]
    per_channel: Optional[bool] = None

    def __post_init__(self):
        values = _as_values(self.values)
        object.__setattr__(self, "values", values)
        if self.per_channel is None:
            object.__setattr__(self, "per_channel", len(values) > 1)
        elif not self.per_channel and len(values) != 1:
            raise ValueError(f"Per-tensor multiply expects one value, got {len(values)}")

    def __str__(self) -> str:
        return _format_values(self.values)


@dataclass(frozen=True)
class DequantizationOperations:
    """
    Ordered (convert, subtract, multiply) triple.

    Per-channel lengths are not checked here because the channel count is
    only known once the descriptor is bound to an edge, see validate().
    """

    convert: Optional[Convert] = None
    subtract: Optional[Subtract] = None
    multiply: Optional[Multiply] = None

    @classmethod
    def create(cls, convert=None, subtract=None, multiply=None) -> "DequantizationOperations":
        """
        Build a descriptor from short-hand stage values.

        Args:
            convert: ElementType (or its name), a Convert stage, or None
            subtract: Scalar, list of per-channel values, a Subtract stage, or None
            multiply: Scalar, list of per-channel values, a Multiply stage, or None

        Example:
            >>> DequantizationOperations.create('f32', 128, [0.1, 0.2, 0.3])
        """
        if convert is not None and not isinstance(convert, Convert):
            convert = Convert(convert)
        if subtract is not None and not isinstance(subtract, Subtract):
            subtract = Subtract(subtract)
        if multiply is not None and not isinstance(multiply, Multiply):
            multiply = Multiply(multiply)
        return cls(convert, subtract, multiply)

    def is_empty(self) -> bool:
        """True when there is no pending decode work on the edge."""
        return self.convert is None and self.subtract is None and self.multiply is None

    def has_negative_scale(self) -> bool:
        """True if any scale value is strictly negative."""
        if self.multiply is None:
            return False
        return any(v < 0 for v in self.multiply.values)

    def split_multiply_out(self) -> Tuple["DequantizationOperations", "DequantizationOperations"]:
        """
        Split into (convert + subtract, multiply).

        Returns:
            Tuple of (before, after) descriptors
        """
        before = DequantizationOperations(convert=self.convert, subtract=self.subtract)
        after = DequantizationOperations(multiply=self.multiply)
        return before, after

    def validate(self, channels: Optional[int]) -> None:
        """
        Check per-channel stages against the channel dimension of an edge.

        Args:
            channels: Channel count of the tensor, None if unknown

        Raises:
            ShapeMismatch: If a per-channel stage has the wrong length
        """
        for stage_name in ("subtract", "multiply"):
            stage = getattr(self, stage_name)
            if stage is None or not stage.per_channel:
                continue
            if channels is None:
                raise ShapeMismatch(
                    f"Per-channel {stage_name} with {len(stage.values)} values "
                    f"attached to a tensor of unknown shape"
                )
            if len(stage.values) != channels:
                raise ShapeMismatch(
                    f"Per-channel {stage_name} has {len(stage.values)} values, "
                    f"tensor has {channels} channels"
                )

    def apply(self, values: np.ndarray, channel_axis: int = 1) -> np.ndarray:
        """
        Decode a tensor: convert, then subtract, then multiply.

        Args:
            values: Tensor data
            channel_axis: Axis that per-channel values are broadcast along

        Returns:
            Decoded tensor (input returned as-is when the descriptor is empty)
        """
        result = np.asarray(values)
        if self.convert is not None:
            result = result.astype(self.convert.element_type.to_numpy())
        if self.subtract is not None:
            shift = self._broadcast(self.subtract, result, channel_axis)
            result = result - shift.astype(self.subtract.element_type.to_numpy())
        if self.multiply is not None:
            scale = self._broadcast(self.multiply, result, channel_axis)
            result = result * scale.astype(result.dtype if result.dtype.kind == "f" else np.float32)
        return result

    @staticmethod
    def _broadcast(stage, tensor: np.ndarray, channel_axis: int) -> np.ndarray:
        stage_values = np.asarray(stage.values)
        if not stage.per_channel:
            return stage_values.reshape(())
        shape = [1] * tensor.ndim
        shape[channel_axis if tensor.ndim > 1 else 0] = len(stage_values)
        return stage_values.reshape(shape)

    def __str__(self) -> str:
        parts = [str(stage) if stage is not None else "" for stage in (self.convert, self.subtract, self.multiply)]
        return "{" + "_".join(parts) + "}"
