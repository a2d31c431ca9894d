import random

import pytest

from treegp import ContractViolation, Grammar, Strategy, Tree, TreeGenerator, Type, binary_function, terminal
from conftest import assert_well_typed, leaf_depths


@pytest.mark.parametrize("depth", [1, 2, 3, 5])
def test_full_trees_reach_exact_depth(scalar_grammar, rng, depth):
    generator = TreeGenerator(scalar_grammar, rng)
    for _ in range(20):
        tree = generator.tree(depth, Strategy.FULL)
        assert set(leaf_depths(tree.root())) == {depth}
        assert_well_typed(scalar_grammar, tree)


@pytest.mark.parametrize("type_name", ["float", "float3"])
def test_full_typed_trees_reach_exact_depth(typed_grammar, rng, type_name):
    generator = TreeGenerator(typed_grammar, rng)
    type_id = typed_grammar.type_by_name(type_name)
    for _ in range(20):
        builder = Tree.build()
        generator.generate_full(builder, 4, type_id)
        tree = builder.tree
        assert typed_grammar.definition_for_node(tree.root()).type == type_id
        assert set(leaf_depths(tree.root())) == {4}
        assert_well_typed(typed_grammar, tree)


def test_grow_trees_stay_within_depth(typed_grammar, rng):
    generator = TreeGenerator(typed_grammar, rng)
    for type_id in (None, 0, 1):
        for _ in range(50):
            builder = Tree.build()
            generator.generate_grow(builder, 4, type_id)
            tree = builder.tree
            assert max(leaf_depths(tree.root())) <= 4
            assert builder.open_nodes == 0
            assert_well_typed(typed_grammar, tree)
            if type_id is not None:
                assert typed_grammar.definition_for_node(tree.root()).type == type_id


def test_depth_one_yields_a_terminal(typed_grammar, rng):
    generator = TreeGenerator(typed_grammar, rng)
    for strategy in Strategy:
        tree = generator.tree(1, strategy, typed_grammar.type_by_name("float3"))
        assert tree.node_count() == 1
        assert typed_grammar.definition_for_node(tree.root()).name in ("randomColor", "orange")


def test_type_without_terminals_exceeds_depth_limit(rng):
    # A type with no terminals cannot stop at the depth limit; the generator
    # still emits a function node for it.
    item = Type("item")
    pair = Type("pair")
    grammar = Grammar([item, pair], [
        terminal("a", item),
        terminal("b", item),
        binary_function("cons", pair, [item, item]),
    ])
    generator = TreeGenerator(grammar, rng)
    pair_type = grammar.type_by_name("pair")
    for strategy in Strategy:
        tree = generator.tree(1, strategy, pair_type)
        assert grammar.definition_for_node(tree.root()).name == "cons"
        assert tree.node_count() == 3
        assert set(leaf_depths(tree.root())) == {2}


def test_full_over_terminal_only_type_yields_a_terminal(rng):
    item = Type("item")
    pair = Type("pair")
    grammar = Grammar([item, pair], [
        terminal("a", item),
        binary_function("cons", pair, [item, item]),
    ])
    generator = TreeGenerator(grammar, rng)
    tree = generator.tree(5, Strategy.FULL, grammar.type_by_name("item"))
    assert tree.values() == [grammar.lookup_by_name("a").node_value]


def test_selection_follows_weights():
    t = Type("int")
    grammar = Grammar([t], [terminal("light", t, 1), terminal("heavy", t, 1000)])
    generator = TreeGenerator(grammar, random.Random(7))
    heavy = grammar.lookup_by_name("heavy")
    draws = [generator.random_terminal_value(grammar.definition_set_for_type(0)) for _ in range(200)]
    assert sum(heavy.contains_value(v) for v in draws) >= 190


def test_generation_is_deterministic(typed_grammar):
    first = TreeGenerator(typed_grammar, random.Random(3))
    second = TreeGenerator(typed_grammar, random.Random(3))
    for _ in range(10):
        assert first.tree(5, Strategy.GROW) == second.tree(5, Strategy.GROW)


def test_grammar_without_terminals_is_rejected(rng):
    t = Type("int")
    grammar = Grammar([t], [binary_function("+", t, [t, t])])
    with pytest.raises(ContractViolation):
        TreeGenerator(grammar, rng)


def test_empty_type_is_rejected(rng):
    a = Type("a")
    empty = Type("empty")
    grammar = Grammar([a, empty], [terminal("x", a)])
    generator = TreeGenerator(grammar, rng)
    with pytest.raises(ContractViolation):
        generator.tree(3, Strategy.GROW, grammar.type_by_name("empty"))
