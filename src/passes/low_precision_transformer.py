"""
Pass that runs low precision rules over every node of a graph.

Each node is looked up by op type in the pass's rule table. When the rule
can rewrite the node, the dequantization on its input edge is moved across
it (fully, partially or not at all, as the rule decides).

Example:
    transformer = LowPrecisionTransformer()
    transformer.add(ReluTransformation, 'relu', create_params_u8i8())
    transformer.apply(ir_graph)

Visiting order is fixed before the first edit. A node whose descriptor does
not fit its shape is reported and skipped; the rest of the graph is still
processed.
"""

from typing import Dict, Tuple, Type

from .base import IRPass
from low_precision.errors import ShapeMismatch
from low_precision.ir.graph import IRGraph
from low_precision.transformations.base import LayerTransformation
from low_precision.transformations.params import TransformationParams
from low_precision.transformations.registry import RULE_REGISTRY, RuleRegistry


class LowPrecisionTransformer(IRPass):
    """
    Applies LayerTransformation rules, one per op type.

    Parameters are bound per rule when the rule is added and passed into
    every rule call.
    """

    def __init__(self, verbose: bool = False):
        super().__init__(verbose)
        self.rules: Dict[str, Tuple[LayerTransformation, TransformationParams]] = {}

    @classmethod
    def from_registry(
        cls,
        params: TransformationParams,
        registry: RuleRegistry = RULE_REGISTRY,
        verbose: bool = False
    ) -> 'LowPrecisionTransformer':
        """
        Build a transformer with every registered rule, all sharing `params`.
        """
        transformer = cls(verbose=verbose)
        for op_type in registry.op_types():
            transformer.rules[op_type] = (registry[op_type], params)
        return transformer

    def add(
        self,
        rule_cls: Type[LayerTransformation],
        op_type: str,
        params: TransformationParams
    ) -> 'LowPrecisionTransformer':
        """
        Handle nodes of `op_type` with `rule_cls` under `params`.

        Raises:
            ValueError: If the rule class was registered for another op type
        """
        if rule_cls.op_type is not None and rule_cls.op_type != op_type:
            raise ValueError(
                f"{rule_cls.__name__} handles '{rule_cls.op_type}', not '{op_type}'"
            )
        self.rules[op_type] = (rule_cls(), params)
        return self

    def apply(self, ir_graph: IRGraph) -> IRGraph:
        """
        Run the rules over the graph.

        Args:
            ir_graph: The IR graph to rewrite (in place)

        Returns:
            The same IR graph

        Raises:
            ContractViolation: Propagated from a rule; indicates a bug
        """
        self._reset_stats(
            counters=('visited', 'transformed', 'skipped'),
            records=('failed', 'transformed_nodes')
        )

        for node in ir_graph.snapshot():
            entry = self.rules.get(node.op_type)
            if entry is None:
                continue

            rule, params = entry
            self.stats['visited'] += 1

            if not rule.can_be_transformed(node, params):
                self.stats['skipped'] += 1
                continue

            try:
                rule.transform(node, params)
            except ShapeMismatch as e:
                self.stats['failed'].append((node.name, str(e)))
                self._log(f"Skipping {node.name}: {e}")
                continue

            self.stats['transformed'] += 1
            self.stats['transformed_nodes'].append(node.name)
            self._log(f"Transformed {node.name} [{node.op_type}]: "
                      f"before={node.input_dequantization}, dtype={node.dtype}, "
                      f"after={node.output_dequantization}")

        self._log(f"Total: {self.stats['transformed']}/{self.stats['visited']} nodes transformed")

        return ir_graph

    def transform(self, ir_graph: IRGraph) -> IRGraph:
        """Alias of apply()."""
        return self(ir_graph)
