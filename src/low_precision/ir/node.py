"""
IRNode - Intermediate Representation Node with double-linking and
dequantization descriptors on its input and output edges
"""

from typing import List, Dict, Any, Optional, Tuple

from ..errors import ShapeMismatch
from .dequantization import DequantizationOperations
from .element_type import ElementType


class IRNode:
    """
    Represents a single operation in the IR graph.

    Double-linked: maintains both inputs and users for bidirectional traversal.

    Each node carries two dequantization descriptors:
    - input_dequantization: decode applied to the value read from inputs[0]
    - output_dequantization: decode applied to this node's value before any
      user (or the graph output) reads it
    """

    def __init__(
        self,
        name: str,
        op_type: str,
        output_shape: Optional[Tuple[int, ...]] = None,
        dtype=ElementType.F32,
        metadata: Optional[Dict[str, Any]] = None,
        input_dequantization: Optional[DequantizationOperations] = None,
        output_dequantization: Optional[DequantizationOperations] = None
    ):
        """
        Initialize an IR node.

        Args:
            name: Unique name for this node
            op_type: Type of operation (e.g., 'parameter', 'relu', 'result')
            output_shape: Shape of the output tensor (if known)
            dtype: Output element type (ElementType or a name ElementType.parse accepts)
            metadata: Additional operation-specific data
            input_dequantization: Descriptor on the input edge (default: empty)
            output_dequantization: Descriptor on the output edge (default: empty)
        """
        self.name = name
        self.op_type = op_type
        self.output_shape = tuple(output_shape) if output_shape is not None else None
        self.dtype = ElementType.parse(dtype)
        self.metadata = metadata or {}

        # Double-linking: both inputs and users
        self.inputs: List[IRNode] = []  # Nodes that this node depends on
        self.users: List[IRNode] = []   # Nodes that depend on this node

        self.input_dequantization = DequantizationOperations()
        self.output_dequantization = DequantizationOperations()
        if input_dequantization is not None:
            self.set_input_descriptor(input_dequantization)
        if output_dequantization is not None:
            self.set_output_descriptor(output_dequantization)

    @property
    def is_quantized(self) -> bool:
        """True if this node produces a non floating point tensor."""
        return not self.dtype.is_real

    def add_input(self, producer: 'IRNode') -> 'IRNode':
        """
        Link `producer` as an input of this node; both sides are updated.

        Returns:
            This node, so chains can be built in one expression
        """
        if producer not in self.inputs:
            self.inputs.append(producer)
        if self not in producer.users:
            producer.users.append(self)
        return self

    def remove_input(self, producer: 'IRNode') -> None:
        """Unlink `producer` from this node on both sides."""
        if producer in self.inputs:
            self.inputs.remove(producer)
        if self in producer.users:
            producer.users.remove(self)

    # Read side used by transformation rules

    def get_input_descriptor(self) -> DequantizationOperations:
        return self.input_dequantization

    def get_input_element_type(self) -> ElementType:
        """
        Element type of the tensor on the input edge, before dequantization.

        Falls back to this node's own type when it has no producer.
        """
        if self.inputs:
            return self.inputs[0].dtype
        return self.dtype

    def get_output_element_type(self) -> ElementType:
        return self.dtype

    def channel_dimension(self) -> Optional[int]:
        """
        Channel count of the tensor flowing through this node.

        Axis 1 for rank >= 2 (NCHW / NC), axis 0 for rank 1.

        Returns:
            Channel count, or None if the shape is unknown
        """
        shape = self.output_shape
        if shape is None and self.inputs:
            shape = self.inputs[0].output_shape
        if not shape:
            return None
        return shape[1] if len(shape) > 1 else shape[0]

    # Write side used by transformation rules

    def set_input_descriptor(self, dequantization: DequantizationOperations) -> None:
        """
        Replace the descriptor on the input edge.

        Raises:
            ShapeMismatch: If a per-channel stage does not match channel_dimension()
        """
        self.check_descriptor(dequantization)
        self.input_dequantization = dequantization

    def set_output_descriptor(self, dequantization: DequantizationOperations) -> None:
        """
        Attach a descriptor to the output edge.

        Raises:
            ShapeMismatch: If a per-channel stage does not match channel_dimension()
        """
        self.check_descriptor(dequantization)
        self.output_dequantization = dequantization

    def set_output_element_type(self, dtype) -> None:
        self.dtype = ElementType.parse(dtype)

    def check_descriptor(self, dequantization: DequantizationOperations) -> None:
        """Raise ShapeMismatch if the descriptor cannot be attached to this node."""
        try:
            dequantization.validate(self.channel_dimension())
        except ShapeMismatch as e:
            raise ShapeMismatch(f"Node '{self.name}': {e}") from e

    def __repr__(self) -> str:
        return (f"IRNode(name='{self.name}', op_type='{self.op_type}', dtype='{self.dtype}', "
                f"before={self.input_dequantization}, after={self.output_dequantization})")

    def __str__(self) -> str:
        args = ", ".join(inp.name for inp in self.inputs)
        return f"{self.name}: {self.dtype} = {self.op_type}({args})"
