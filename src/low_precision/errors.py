"""
Exceptions raised while rewriting a low precision graph.

A rule that does not apply to a node is not an error: can_be_transformed()
returns False and the node is skipped.
"""


class LowPrecisionError(Exception):
    """Base class for errors raised by low precision transformations."""


class ShapeMismatch(LowPrecisionError, ValueError):
    """
    A per-channel dequantization stage does not match the channel dimension
    of the tensor it is attached to.

    Fatal to a single transform() call only. The graph is left as it was and
    the transformer moves on to the next node.
    """


class ContractViolation(LowPrecisionError, RuntimeError):
    """
    transform() was called on a node for which can_be_transformed() is False.

    This is a bug in the caller and is never caught by the transformer.
    """
