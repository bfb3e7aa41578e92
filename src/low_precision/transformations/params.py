"""
Transformation parameters - which low precision variants a run may produce
"""

from dataclasses import dataclass, field, replace
from typing import FrozenSet, Iterable, Tuple

from ..ir.element_type import ElementType


PrecisionPair = Tuple[ElementType, ElementType]


def _pairs(pairs: Iterable) -> FrozenSet[PrecisionPair]:
    return frozenset((ElementType.parse(a), ElementType.parse(b)) for a, b in pairs)


@dataclass(frozen=True)
class TransformationParams:
    """
    Configuration shared by every rule of one transformer run.

    Read-only after construction, so one instance can be passed to runs on
    different graphs.

    Attributes:
        allowed_precision_pairs: (input type, output type) pairs a rule may
            keep a node in
        support_asymmetric_quantization: Whether a zero point shift may be
            split from its scale
    """

    allowed_precision_pairs: FrozenSet[PrecisionPair] = field(default_factory=frozenset)
    support_asymmetric_quantization: bool = True

    def __post_init__(self):
        object.__setattr__(self, "allowed_precision_pairs", _pairs(self.allowed_precision_pairs))

    def is_precision_supported(self, input_type, output_type) -> bool:
        return (ElementType.parse(input_type), ElementType.parse(output_type)) in self.allowed_precision_pairs

    def with_support_asymmetric_quantization(self, support: bool) -> "TransformationParams":
        """Copy of these parameters with the asymmetric quantization flag changed."""
        return replace(self, support_asymmetric_quantization=support)

    def __str__(self) -> str:
        pairs = ",".join(sorted(f"{a}->{b}" for a, b in self.allowed_precision_pairs))
        return (f"TransformationParams(pairs=[{pairs}], "
                f"asymmetric={self.support_asymmetric_quantization})")


def _activation_pairs(activation: ElementType) -> FrozenSet[PrecisionPair]:
    return frozenset({(activation, ElementType.F32), (activation, ElementType.F16)})


def create_params_u8i8() -> TransformationParams:
    """u8 activations dequantized to f32 or f16, asymmetric quantization allowed."""
    return TransformationParams(
        allowed_precision_pairs=_activation_pairs(ElementType.U8),
        support_asymmetric_quantization=True
    )


def create_params_i8i8() -> TransformationParams:
    """i8 activations dequantized to f32 or f16, asymmetric quantization allowed."""
    return TransformationParams(
        allowed_precision_pairs=_activation_pairs(ElementType.I8),
        support_asymmetric_quantization=True
    )
