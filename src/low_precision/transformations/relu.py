"""
ReLU transformation - move dequantization across a clamp-below-zero activation

ReLU commutes with a non-negative scale:

    relu(k * x) == k * relu(x)    for k >= 0

It does not commute with a negative scale (the clamp flips direction) and it
does not commute with a zero point shift. The rule therefore:

1. keeps everything before the op when any scale is negative
2. moves the whole descriptor after the op when there is no shift
3. keeps everything before the op when there is a shift and asymmetric
   quantization is disabled
4. otherwise keeps convert + subtract before the op and moves the scale after it
"""

from ..errors import ContractViolation
from ..ir.dequantization import DequantizationOperations
from ..ir.element_type import ElementType
from ..ir.node import IRNode
from .base import LayerTransformation
from .params import TransformationParams
from .registry import register_rule


@register_rule('relu')
class ReluTransformation(LayerTransformation):
    """Low precision rule for ReLU."""

    def can_be_transformed(self, node: IRNode, params: TransformationParams) -> bool:
        """
        False when the input descriptor is empty, when the input tensor is
        already floating point, or when the (input type, output type) pair is
        not allowed by params.

        Also False once a descriptor has been moved to the output edge, so the
        deferred scale is never overwritten by a second run. A node the rule
        kept in floating point (negative scale, or a shift with asymmetric
        quantization disabled) still has an empty output edge and stays
        transformable; transforming it again rewrites it to the same state.
        """
        if not self.is_applicable(node):
            return False

        if node.get_input_descriptor().is_empty():
            return False

        if not node.output_dequantization.is_empty():
            return False

        input_type = node.get_input_element_type()
        if input_type.is_real:
            return False

        return params.is_precision_supported(input_type, node.get_output_element_type())

    def transform(self, node: IRNode, params: TransformationParams) -> None:
        if not self.can_be_transformed(node, params):
            raise ContractViolation(
                f"{self.__class__.__name__}.transform() called on node '{node.name}' "
                f"which cannot be transformed with {params}"
            )

        dequantization = node.get_input_descriptor()

        if dequantization.has_negative_scale():
            self._keep_before(node, dequantization)
            return

        if dequantization.subtract is None:
            self.move_dequantization_after(
                node,
                DequantizationOperations(),
                node.get_input_element_type(),
                dequantization
            )
            return

        if not params.support_asymmetric_quantization:
            self._keep_before(node, dequantization)
            return

        # The shift stays in the wider type: subtracting a zero point in u8/i8
        # can leave the representable range.
        before, after = dequantization.split_multiply_out()
        self.move_dequantization_after(node, before, self._float_type(node, dequantization), after)

    def _keep_before(self, node: IRNode, dequantization: DequantizationOperations) -> None:
        """The op runs on fully decoded data; nothing is propagated."""
        self.move_dequantization_after(
            node,
            dequantization,
            self._float_type(node, dequantization),
            DequantizationOperations()
        )

    @staticmethod
    def _float_type(node: IRNode, dequantization: DequantizationOperations) -> ElementType:
        """Floating point type the input is decoded to; f32 when nothing says otherwise."""
        if dequantization.convert is not None and dequantization.convert.element_type.is_real:
            return dequantization.convert.element_type
        if node.get_output_element_type().is_real:
            return node.get_output_element_type()
        return ElementType.F32
