"""Intermediate Representation (IR) module"""

from .element_type import ElementType
from .dequantization import Convert, Subtract, Multiply, DequantizationOperations
from .node import IRNode
from .graph import IRGraph
from .interpreter import GraphInterpreter
from .builders import make_relu_graph, make_relu_reference

__all__ = [
    'ElementType',
    'Convert',
    'Subtract',
    'Multiply',
    'DequantizationOperations',
    'IRNode',
    'IRGraph',
    'GraphInterpreter',
    'make_relu_graph',
    'make_relu_reference',
]
