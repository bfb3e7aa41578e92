"""
Rule registry - op type -> LayerTransformation class
"""

from typing import Dict, List, Type

from .base import LayerTransformation


class RuleRegistry:
    """
    Table of transformation rules keyed by the op type they handle.

    Classes are stored instead of instances so that every lookup hands out a
    fresh rule.
    """

    def __init__(self):
        self.rules: Dict[str, Type[LayerTransformation]] = {}

    def __getitem__(self, op_type: str) -> LayerTransformation:
        if op_type not in self.rules:
            raise KeyError(f"No transformation registered for op '{op_type}'")
        return self.rules[op_type]()

    def __contains__(self, op_type: str) -> bool:
        return op_type in self.rules

    def register(
        self,
        op_type: str,
        rule_cls: Type[LayerTransformation],
        override: bool = False
    ) -> None:
        """
        Add a rule class for an op type.

        Raises:
            KeyError: If the op type already has a rule and override is False
        """
        if op_type in self.rules and not override:
            raise KeyError(
                f"Op '{op_type}' already handled by {self.rules[op_type].__name__}"
            )
        self.rules[op_type] = rule_cls

    def op_types(self) -> List[str]:
        return sorted(self.rules)


RULE_REGISTRY = RuleRegistry()


def register_rule(op_type: str, override: bool = False):
    """
    Class decorator registering a LayerTransformation for an op type.

    Example:
        @register_rule('relu')
        class ReluTransformation(LayerTransformation):
            ...
    """

    def class_wrapper(rule_cls: Type[LayerTransformation]):
        RULE_REGISTRY.register(op_type, rule_cls, override)
        rule_cls.op_type = op_type
        return rule_cls

    return class_wrapper
