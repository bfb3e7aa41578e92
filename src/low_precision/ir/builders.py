"""
Small subgraph builders: parameter -> op -> result
"""

from typing import Optional, Tuple

from .dequantization import DequantizationOperations
from .element_type import ElementType
from .graph import IRGraph
from .node import IRNode


def dequantized_type(precision, dequantization: DequantizationOperations) -> ElementType:
    """Element type a tensor of `precision` has after `dequantization` ran."""
    precision = ElementType.parse(precision)
    if dequantization.is_empty():
        return precision
    if dequantization.convert is not None:
        return dequantization.convert.element_type
    return precision if precision.is_real else ElementType.F32


def _make_unary_graph(
    op_type: str,
    shape: Tuple[int, ...],
    precision_before_dequantization,
    dequantization_before: DequantizationOperations,
    precision_after_operation,
    dequantization_after: DequantizationOperations
) -> IRGraph:
    ir_graph = IRGraph()

    param = ir_graph.add_node(IRNode(
        name='input',
        op_type='parameter',
        output_shape=shape,
        dtype=precision_before_dequantization
    ))
    op = ir_graph.add_node(IRNode(
        name=op_type,
        op_type=op_type,
        output_shape=shape,
        dtype=precision_after_operation,
        input_dequantization=dequantization_before,
        output_dequantization=dequantization_after
    ))
    result = ir_graph.add_node(IRNode(
        name='output',
        op_type='result',
        output_shape=shape,
        dtype=dequantized_type(precision_after_operation, dequantization_after)
    ))

    op.add_input(param)
    result.add_input(op)
    ir_graph.mark_input(param)
    ir_graph.mark_output(result)
    ir_graph.validate()
    return ir_graph


def make_relu_graph(
    shape: Tuple[int, ...],
    precision_before_dequantization,
    dequantization: Optional[DequantizationOperations] = None
) -> IRGraph:
    """
    Build the graph a quantizer produces around a ReLU:

        input (precision) -> [dequantization] relu -> output

    Args:
        shape: Tensor shape, channels on axis 1
        precision_before_dequantization: Element type of the graph input
        dequantization: Descriptor on the ReLU input edge (default: empty)

    Returns:
        The IRGraph. The ReLU output type is the dequantized type.
    """
    dequantization = dequantization or DequantizationOperations()
    return _make_unary_graph(
        'relu',
        shape,
        precision_before_dequantization,
        dequantization,
        dequantized_type(precision_before_dequantization, dequantization),
        DequantizationOperations()
    )


def make_relu_reference(
    shape: Tuple[int, ...],
    precision_before_dequantization,
    dequantization_before: Optional[DequantizationOperations],
    precision_after_operation,
    dequantization_after: Optional[DequantizationOperations]
) -> IRGraph:
    """
    Build the graph expected after the ReLU rule ran:

        input (precision) -> [before] relu (precision after) [after] -> output
    """
    return _make_unary_graph(
        'relu',
        shape,
        precision_before_dequantization,
        dequantization_before or DequantizationOperations(),
        precision_after_operation,
        dequantization_after or DequantizationOperations()
    )
