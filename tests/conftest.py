import random

import pytest

from treegp import Grammar, Type, binary_function, terminal, ternary_function, unary_function


def leaf_depths(node, depth=1):
    """Depth of every leaf under `node`, counting `node` itself as depth `depth`"""
    if node.is_empty():
        return [depth]
    return [d for child in node for d in leaf_depths(child, depth + 1)]


def assert_well_typed(grammar, tree):
    assert tree.root().subtree_size == tree.node_count()
    for i in range(tree.node_count()):
        node = tree[i]
        definition = grammar.definition_for_node(node)
        if definition.is_terminal():
            assert node.is_empty()
            continue
        assert node.child_count == definition.num_arguments
        for child, argument_type in zip(node.children(), definition.argument_types):
            assert grammar.definition_for_node(child).type == argument_type


@pytest.fixture
def rng():
    return random.Random(42)


@pytest.fixture
def scalar_grammar():
    """x, y, +, *, sin over a single int type"""
    t = Type("int")
    return Grammar([t], [
        terminal("x", t, 10),
        terminal("y", t, 10),
        binary_function("+", t, [t, t], 5),
        binary_function("*", t, [t, t], 11),
        unary_function("sin", t, t, 3),
    ])


@pytest.fixture
def typed_grammar():
    """Scalars and colour vectors"""
    scalar = Type("float")
    vec = Type("float3")
    return Grammar([scalar, vec], [
        terminal("x", scalar, 10),
        terminal("randomColor", vec, 5),
        terminal("y", scalar, 10),
        terminal("orange", vec, 1),

        binary_function("+", scalar, [scalar, scalar], 5),
        ternary_function("rgb", vec, [scalar, scalar, scalar], 5),
        binary_function("darker", vec, [vec, scalar], 2),
        binary_function("*", scalar, [scalar, scalar], 11),
        binary_function("lighter", vec, [vec, scalar], 2),
        unary_function("sin", scalar, scalar, 3),
        unary_function("grayscale", vec, vec, 8),
        unary_function("cos", scalar, scalar, 6),
    ])
