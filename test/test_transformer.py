"""
Tests for LowPrecisionTransformer, the rule registry and transformation parameters
"""

import dataclasses

import pytest
import numpy as np
import sys
import os

# Add src to path
sys.path.insert(0, os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), 'src'))

from low_precision.errors import ContractViolation
from low_precision.ir import (
    ElementType, DequantizationOperations, IRNode, IRGraph, GraphInterpreter
)
from low_precision.transformations import (
    TransformationParams, LayerTransformation, RuleRegistry, RULE_REGISTRY,
    ReluTransformation, create_params_u8i8, create_params_i8i8
)
from passes import IRPass, LowPrecisionTransformer


U8 = ElementType.U8
F32 = ElementType.F32
SHAPE = (1, 3, 4, 4)


def dq(convert=None, subtract=None, multiply=None):
    return DequantizationOperations.create(convert, subtract, multiply)


def make_branch_graph(branches):
    """
    input (u8) -> relu_i -> out_i for every (name, dequantization) in branches
    """
    graph = IRGraph()
    x = graph.add_node(IRNode('input', 'parameter', output_shape=SHAPE, dtype=U8))
    graph.mark_input(x)
    for name, dequantization in branches:
        relu = graph.add_node(IRNode(
            name, 'relu', output_shape=SHAPE, dtype=F32, input_dequantization=dequantization
        ))
        out = graph.add_node(IRNode(f'{name}_out', 'result', output_shape=SHAPE, dtype=F32))
        relu.add_input(x)
        out.add_input(relu)
        graph.mark_output(out)
    return graph


class TestTransformationParams:
    """Test TransformationParams"""

    def test_precision_lookup(self):
        params = create_params_u8i8()
        assert params.is_precision_supported(U8, F32)
        assert params.is_precision_supported('u8', 'f16')
        assert not params.is_precision_supported(ElementType.I8, F32)
        assert create_params_i8i8().is_precision_supported(ElementType.I8, F32)

    def test_defaults(self):
        params = create_params_u8i8()
        assert params.support_asymmetric_quantization is True
        assert params.allowed_precision_pairs == {(U8, F32), (U8, ElementType.F16)}

    def test_with_support_asymmetric_quantization(self):
        """Returns a copy, the original stays as it was"""
        params = create_params_i8i8()
        symmetric = params.with_support_asymmetric_quantization(False)

        assert symmetric.support_asymmetric_quantization is False
        assert params.support_asymmetric_quantization is True
        assert symmetric.allowed_precision_pairs == params.allowed_precision_pairs

    def test_immutable(self):
        params = create_params_u8i8()
        with pytest.raises(dataclasses.FrozenInstanceError):
            params.support_asymmetric_quantization = False

    def test_pairs_parsed(self):
        params = TransformationParams(allowed_precision_pairs=[('uint8', 'float32')])
        assert params.allowed_precision_pairs == frozenset({(U8, F32)})


class TestRuleRegistry:
    """Test rule registration by op type"""

    def test_relu_registered(self):
        assert 'relu' in RULE_REGISTRY
        assert isinstance(RULE_REGISTRY['relu'], ReluTransformation)
        assert ReluTransformation.op_type == 'relu'

    def test_lookup_returns_fresh_rule(self):
        assert RULE_REGISTRY['relu'] is not RULE_REGISTRY['relu']

    def test_unknown_op(self):
        with pytest.raises(KeyError):
            RULE_REGISTRY['conv2d']

    def test_duplicate_registration(self):
        registry = RuleRegistry()
        registry.register('relu', ReluTransformation)
        with pytest.raises(KeyError):
            registry.register('relu', ReluTransformation)

        registry.register('relu', ReluTransformation, override=True)
        assert registry.op_types() == ['relu']


class TestLowPrecisionTransformer:
    """Test the transformer pass"""

    def test_is_ir_pass(self):
        assert isinstance(LowPrecisionTransformer(), IRPass)

    def test_add_wrong_op_type(self):
        with pytest.raises(ValueError):
            LowPrecisionTransformer().add(ReluTransformation, 'clamp', create_params_u8i8())

    def test_from_registry(self):
        transformer = LowPrecisionTransformer.from_registry(create_params_u8i8())
        assert 'relu' in transformer.rules

        graph = make_branch_graph([('relu', dq(F32, None, 0.1))])
        transformer.apply(graph)

        relu = graph.get_node_by_name('relu')
        assert relu.dtype is U8
        assert relu.output_dequantization == dq(F32, None, 0.1)

    def test_stats(self):
        graph = make_branch_graph([
            ('relu_a', dq(F32, None, 0.1)),
            ('relu_b', dq()),
            ('relu_c', dq(F32, 128, 0.1)),
        ])
        transformer = LowPrecisionTransformer.from_registry(create_params_u8i8())
        transformer.apply(graph)

        stats = transformer.get_stats()
        assert stats['visited'] == 3
        assert stats['transformed'] == 2
        assert stats['skipped'] == 1
        assert stats['failed'] == []
        assert stats['transformed_nodes'] == ['relu_a', 'relu_c']

    def test_shape_mismatch_does_not_stop_the_pass(self):
        """A malformed node is reported; other nodes are still rewritten"""
        bad = dq(F32, None, [0.1, 0.2, 0.3])
        graph = make_branch_graph([
            ('relu_bad', bad),
            ('relu_good', dq(F32, None, 0.1)),
        ])
        graph.get_node_by_name('relu_bad').output_shape = (1, 5, 4, 4)

        transformer = LowPrecisionTransformer.from_registry(create_params_u8i8())
        transformer.apply(graph)

        relu_bad = graph.get_node_by_name('relu_bad')
        assert relu_bad.input_dequantization == bad
        assert relu_bad.dtype is F32
        assert relu_bad.output_dequantization.is_empty()

        assert graph.get_node_by_name('relu_good').dtype is U8

        stats = transformer.get_stats()
        assert [name for name, _ in stats['failed']] == ['relu_bad']
        assert stats['transformed'] == 1

    def test_contract_violation_propagates(self):
        """A rule that breaks its contract halts the run"""

        class BrokenRule(LayerTransformation):
            op_type = 'relu'

            def can_be_transformed(self, node, params):
                return True

            def transform(self, node, params):
                raise ContractViolation(f"bad rule on {node.name}")

        graph = make_branch_graph([('relu', dq(F32, None, 0.1))])
        transformer = LowPrecisionTransformer()
        transformer.add(BrokenRule, 'relu', create_params_u8i8())

        with pytest.raises(ContractViolation):
            transformer.apply(graph)

    def test_chain_only_first_node_rewritten(self):
        """Rewriting relu1 does not touch relu2; propagation is per node"""
        graph = IRGraph()
        x = graph.add_node(IRNode('input', 'parameter', output_shape=SHAPE, dtype=U8))
        relu1 = graph.add_node(IRNode(
            'relu1', 'relu', output_shape=SHAPE, dtype=F32,
            input_dequantization=dq(F32, None, [0.5, 1.0, 2.0])
        ))
        relu2 = graph.add_node(IRNode('relu2', 'relu', output_shape=SHAPE, dtype=F32))
        out = graph.add_node(IRNode('output', 'result', output_shape=SHAPE, dtype=F32))
        relu1.add_input(x)
        relu2.add_input(relu1)
        out.add_input(relu2)
        graph.mark_input(x)
        graph.mark_output(out)

        feeds = {'input': np.arange(np.prod(SHAPE)).reshape(SHAPE).astype(np.uint8)}
        expected = GraphInterpreter(graph).run(feeds)['output']

        transformer = LowPrecisionTransformer.from_registry(create_params_u8i8(), verbose=True)
        transformer.apply(graph)

        assert relu1.dtype is U8
        assert relu2.input_dequantization.is_empty()
        assert relu2.dtype is F32
        assert transformer.get_stats()['transformed_nodes'] == ['relu1']

        actual = GraphInterpreter(graph).run(feeds)['output']
        np.testing.assert_allclose(actual, expected)

    def test_order_independent(self):
        """Same result whichever branch is listed first"""
        branches = [
            ('relu_a', dq(F32, None, [0.1, -0.2, 0.3])),
            ('relu_b', dq(F32, 128, 0.1)),
        ]
        forward = make_branch_graph(branches)
        backward = make_branch_graph(list(reversed(branches)))

        for graph in (forward, backward):
            LowPrecisionTransformer.from_registry(create_params_u8i8()).apply(graph)

        for name, _ in branches:
            a = forward.get_node_by_name(name)
            b = backward.get_node_by_name(name)
            assert a.input_dequantization == b.input_dequantization
            assert a.dtype is b.dtype
            assert a.output_dequantization == b.output_dequantization

    def test_verbose_logging(self, capsys):
        graph = make_branch_graph([('relu', dq(F32, None, 0.1))])
        LowPrecisionTransformer.from_registry(create_params_u8i8(), verbose=True).apply(graph)

        captured = capsys.readouterr()
        assert "[LowPrecisionTransformer] Transformed relu" in captured.out

    def test_quiet_by_default(self, capsys):
        graph = make_branch_graph([('relu', dq(F32, None, 0.1))])
        LowPrecisionTransformer.from_registry(create_params_u8i8()).apply(graph)

        assert capsys.readouterr().out == ""


if __name__ == '__main__':
    pytest.main([__file__, '-v'])
