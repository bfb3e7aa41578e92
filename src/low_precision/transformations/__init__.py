"""Low precision transformation rules"""

from .params import TransformationParams, create_params_u8i8, create_params_i8i8
from .base import LayerTransformation
from .registry import RuleRegistry, RULE_REGISTRY, register_rule
from .relu import ReluTransformation

__all__ = [
    'TransformationParams',
    'create_params_u8i8',
    'create_params_i8i8',
    'LayerTransformation',
    'RuleRegistry',
    'RULE_REGISTRY',
    'register_rule',
    'ReluTransformation',
]
