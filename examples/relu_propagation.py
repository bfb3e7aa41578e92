"""
Example: Moving dequantization across ReLU

This example demonstrates how to:
1. Build the graph a quantizer produces around a ReLU
2. Run the low precision transformer
3. Check that the rewritten graph computes the same values

The four runs cover the four outcomes of the rule.
"""

import numpy as np
import sys
import os

# Add src to path so we can import the package
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from low_precision.ir import ElementType, DequantizationOperations, GraphInterpreter, make_relu_graph
from low_precision.transformations import create_params_u8i8
from passes import LowPrecisionTransformer


SHAPE = (1, 3, 8, 8)

CASES = [
    ("no shift", DequantizationOperations.create('f32', None, [0.1, 0.2, 0.3])),
    ("negative scale", DequantizationOperations.create('f32', None, [0.1, -0.2, 0.3])),
    ("shift, asymmetric", DequantizationOperations.create('f32', 128, 0.1)),
]


def run_case(title, dequantization, params):
    print("\n" + "=" * 60)
    print(f"{title}: {dequantization}")
    print("=" * 60)

    x = np.random.default_rng(0).integers(0, 255, size=SHAPE, endpoint=True).astype(np.uint8)

    graph = make_relu_graph(SHAPE, ElementType.U8, dequantization)
    expected = GraphInterpreter(graph).run({'input': x})['output']

    transformer = LowPrecisionTransformer.from_registry(params, verbose=True)
    transformer.apply(graph)
    print(graph.print_graph())

    actual = GraphInterpreter(graph).run({'input': x})['output']
    max_error = np.max(np.abs(actual - expected))
    print(f"\nMax absolute error: {max_error:.2e}")


def main():
    params = create_params_u8i8()
    for title, dequantization in CASES:
        run_case(title, dequantization, params)

    run_case(
        "shift, symmetric only",
        DequantizationOperations.create('f32', 128, 0.1),
        params.with_support_asymmetric_quantization(False)
    )


if __name__ == "__main__":
    main()
