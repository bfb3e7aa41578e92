"""
IRGraph - node table for a quantized compute graph
"""

from collections import deque
from typing import List, Dict, Optional

from .node import IRNode


class IRGraph:
    """
    Arena of IR nodes with stable indices.

    A node keeps the index it was added with for the lifetime of the graph.
    Transformation rules never add or remove nodes; they only rewrite the
    descriptors and element types of existing ones, so an order computed
    before a pass stays valid while the pass runs.
    """

    def __init__(self):
        self.nodes: List[IRNode] = []
        self.inputs: List[IRNode] = []
        self.outputs: List[IRNode] = []
        self._index: Dict[str, int] = {}

    def add_node(self, node: IRNode) -> IRNode:
        """
        Append a node to the table.

        Returns:
            The added node

        Raises:
            ValueError: If a node with the same name exists
        """
        if node.name in self._index:
            raise ValueError(f"Node with name '{node.name}' already exists in graph")

        self._index[node.name] = len(self.nodes)
        self.nodes.append(node)
        return node

    def get_node_by_name(self, name: str) -> Optional[IRNode]:
        index = self._index.get(name)
        return self.nodes[index] if index is not None else None

    def node_index(self, node: IRNode) -> int:
        """
        Stable index of a node.

        Raises:
            KeyError: If the node is not part of this graph
        """
        index = self._index.get(node.name)
        if index is None or self.nodes[index] is not node:
            raise KeyError(f"Node '{node.name}' is not in the graph")
        return index

    def mark_input(self, node: IRNode) -> None:
        if node not in self.inputs:
            self.inputs.append(node)

    def mark_output(self, node: IRNode) -> None:
        if node not in self.outputs:
            self.outputs.append(node)

    def topological_sort(self) -> List[IRNode]:
        """
        Order nodes so every producer comes before its users.

        Ties are broken by table index, so the order is deterministic.

        Returns:
            List of nodes in topological order

        Raises:
            ValueError: If the graph has a cycle
            KeyError: If a node has a user outside the graph
        """
        pending = [len(node.inputs) for node in self.nodes]
        ready = deque(i for i, count in enumerate(pending) if count == 0)
        order = []

        while ready:
            index = ready.popleft()
            node = self.nodes[index]
            order.append(node)
            for user in sorted(node.users, key=self.node_index):
                user_index = self.node_index(user)
                pending[user_index] -= 1
                if pending[user_index] == 0:
                    ready.append(user_index)

        if len(order) != len(self.nodes):
            stuck = [node.name for i, node in enumerate(self.nodes) if pending[i] > 0]
            raise ValueError(f"Graph contains a cycle through {stuck}")

        return order

    def snapshot(self) -> List[IRNode]:
        """
        Fix the visiting order before a pass starts rewriting nodes.

        Returns:
            A new list; later edits to the graph do not affect it
        """
        return list(self.topological_sort())

    def validate(self) -> bool:
        """
        Check links, acyclicity and that every descriptor fits its node.

        Returns:
            True if valid

        Raises:
            ValueError: On a broken link or a cycle
            ShapeMismatch: If a per-channel stage no longer fits its node
        """
        for node in self.nodes:
            for input_node in node.inputs:
                if input_node.name not in self._index or self.get_node_by_name(input_node.name) is not input_node:
                    raise ValueError(
                        f"Node '{node.name}' has input '{input_node.name}' "
                        f"which is not in the graph"
                    )

        try:
            self.topological_sort()
        except ValueError as e:
            raise ValueError(f"Graph validation failed: {e}")

        # Shapes may have changed since the descriptors were attached
        for node in self.nodes:
            node.check_descriptor(node.input_dequantization)
            node.check_descriptor(node.output_dequantization)

        return True

    def __repr__(self) -> str:
        return (f"IRGraph(nodes={len(self.nodes)}, "
                f"inputs={len(self.inputs)}, "
                f"outputs={len(self.outputs)})")

    def print_graph(self) -> str:
        """
        Human-readable dump: one block per node with its links, type and
        descriptors.
        """
        lines = [
            "IRGraph:",
            f"  Inputs: {[n.name for n in self.inputs]}",
            f"  Outputs: {[n.name for n in self.outputs]}",
            "  Nodes:",
        ]

        for index, node in enumerate(self.nodes):
            lines.append(f"    #{index} {node.name} [{node.op_type}]")
            lines.append(f"      inputs: [{', '.join(i.name for i in node.inputs)}]")
            lines.append(f"      shape: {node.output_shape}, dtype: {node.dtype}")
            if not node.input_dequantization.is_empty():
                lines.append(f"      dequantization before: {node.input_dequantization}")
            if not node.output_dequantization.is_empty():
                lines.append(f"      dequantization after: {node.output_dequantization}")

        return "\n".join(lines)
