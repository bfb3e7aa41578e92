"""
LayerTransformation - base class for op-specific low precision rules
"""

from abc import ABC, abstractmethod

from ..ir.dequantization import DequantizationOperations
from ..ir.element_type import ElementType
from ..ir.node import IRNode
from .params import TransformationParams


class LayerTransformation(ABC):
    """
    Base class for rules that move dequantization across one op family.

    Rules hold no state of their own. Parameters are passed into every call,
    so the same rule instance can serve concurrent runs on different graphs.

    Contract:
    - can_be_transformed(node, params) never mutates the graph
    - transform(node, params) is only valid after can_be_transformed()
      returned True for the same node and params
    """

    # Op type this rule handles, set by register_rule()
    op_type: str = None

    def is_applicable(self, node: IRNode) -> bool:
        """True if the node is of the op type this rule handles."""
        return node.op_type == self.op_type

    @abstractmethod
    def can_be_transformed(self, node: IRNode, params: TransformationParams) -> bool:
        """
        Decide whether the rule can rewrite the node.

        Returns:
            False leaves the node untouched; this is not an error
        """
        pass

    @abstractmethod
    def transform(self, node: IRNode, params: TransformationParams) -> None:
        """
        Rewrite the node in place.

        Raises:
            ContractViolation: If can_be_transformed() is False for node/params
            ShapeMismatch: If a descriptor does not fit the node; node unchanged
        """
        pass

    @staticmethod
    def move_dequantization_after(
        node: IRNode,
        dequantization_before: DequantizationOperations,
        precision_after: ElementType,
        dequantization_after: DequantizationOperations
    ) -> None:
        """
        Replace the node's input descriptor, output type and output descriptor
        as one edit.

        Both descriptors are checked against the node before anything is
        written, so a ShapeMismatch leaves the node as it was.

        Args:
            node: Node to rewrite
            dequantization_before: New descriptor on the input edge
            precision_after: New output element type
            dequantization_after: New descriptor on the output edge

        Raises:
            ShapeMismatch: If either descriptor does not fit the node
        """
        node.check_descriptor(dequantization_before)
        node.check_descriptor(dequantization_after)

        node.set_input_descriptor(dequantization_before)
        node.set_output_element_type(precision_after)
        node.set_output_descriptor(dequantization_after)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(op_type='{self.op_type}')"
