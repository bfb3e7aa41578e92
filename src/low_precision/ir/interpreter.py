"""
GraphInterpreter - evaluate an IRGraph with numpy

Used to check that a rewritten graph computes the same values as the
original one.
"""

from typing import Callable, Dict

import numpy as np

from .graph import IRGraph
from .node import IRNode


def _relu(node: IRNode, x: np.ndarray) -> np.ndarray:
    return np.maximum(x, 0).astype(node.dtype.to_numpy())


# op_type -> kernel(node, decoded_input)
_KERNELS: Dict[str, Callable[[IRNode, np.ndarray], np.ndarray]] = {
    'relu': _relu,
    'result': lambda node, x: x,
}


class GraphInterpreter:
    """
    Runs a graph node by node in topological order.

    A node computes op(input_dequantization(x)) in its own element type, and
    every user of the node reads output_dequantization(value).
    """

    def __init__(self, ir_graph: IRGraph):
        """
        Args:
            ir_graph: The graph to evaluate (not modified)
        """
        self.ir_graph = ir_graph

    def run(self, feeds: Dict[str, np.ndarray]) -> Dict[str, np.ndarray]:
        """
        Evaluate the graph.

        Args:
            feeds: Input node name -> tensor value

        Returns:
            Output node name -> tensor value as seen by a graph consumer

        Raises:
            KeyError: If a graph input has no value in feeds
            NotImplementedError: If the graph contains an op without a kernel
        """
        visible: Dict[str, np.ndarray] = {}

        for node in self.ir_graph.topological_sort():
            if node.op_type == 'parameter':
                if node.name not in feeds:
                    raise KeyError(f"No value provided for graph input '{node.name}'")
                value = np.asarray(feeds[node.name]).astype(node.dtype.to_numpy())
            else:
                kernel = _KERNELS.get(node.op_type)
                if kernel is None:
                    raise NotImplementedError(
                        f"No interpreter kernel for op '{node.op_type}' (node '{node.name}')"
                    )
                x = visible[node.inputs[0].name]
                value = kernel(node, node.input_dequantization.apply(x))

            visible[node.name] = node.output_dequantization.apply(value)

        return {node.name: visible[node.name] for node in self.ir_graph.outputs}
