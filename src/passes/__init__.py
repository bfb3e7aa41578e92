"""
Compiler passes for IR optimization.

Passes transform the IR graph so that operations run on low precision data
wherever that keeps the graph numerically equivalent.

Usage:
    from passes import LowPrecisionTransformer
    from low_precision.transformations import create_params_u8i8

    transformer = LowPrecisionTransformer.from_registry(create_params_u8i8())
    optimized_ir = transformer.apply(ir_graph)
"""

from .base import IRPass
from .low_precision_transformer import LowPrecisionTransformer

__all__ = [
    'IRPass',
    'LowPrecisionTransformer',
]
