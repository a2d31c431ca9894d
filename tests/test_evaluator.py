import math

import pytest

from treegp import ContractViolation, Grammar, Tree, TreeEvaluator, Type, terminal, ternary_function
from test_printer import scenario_tree


class ScalarEvaluator(TreeEvaluator):

    def __init__(self, grammar, x, y):
        super().__init__(grammar)
        self.x = x
        self.y = y
        self.ids = {d.name: d.definition_id for d in grammar.definitions}

    def evaluate_terminal(self, definition_id, node):
        return self.x if definition_id == self.ids["x"] else self.y

    def evaluate_unary_function(self, definition_id, node, x):
        return math.sin(x)

    def evaluate_binary_function(self, definition_id, node, x, y):
        return x + y if definition_id == self.ids["+"] else x * y


class TerminalsOnly(TreeEvaluator):

    def evaluate_terminal(self, definition_id, node):
        return 2.0


def test_evaluates_bottom_up(scalar_grammar):
    tree = scenario_tree(scalar_grammar)
    result = ScalarEvaluator(scalar_grammar, 2.0, 3.0)(tree)
    assert result == pytest.approx(math.sin(2.0) + 3.0 * math.sin(3.0))


def test_default_hooks(scalar_grammar):
    tree = scenario_tree(scalar_grammar)
    evaluator = TerminalsOnly(scalar_grammar)
    # Unary functions pass their argument through.
    assert evaluator(tree.root()[0]) == 2.0
    # Binary functions have no default value.
    assert evaluator(tree) is None


def test_general_function_hook():
    t = Type("int")
    grammar = Grammar([t], [terminal("one", t), ternary_function("sum3", t, [t, t, t])])

    class Summing(TreeEvaluator):
        def evaluate_terminal(self, definition_id, node):
            return 1

        def evaluate_function(self, definition_id, node, arguments):
            return sum(arguments)

    one = grammar.lookup_by_name("one").node_value
    sum3 = grammar.lookup_by_name("sum3").node_value
    tree = Tree.build().push(sum3).add(one).push(sum3).add(one).add(one).add(one).pop().add(one).pop().tree
    assert Summing(grammar)(tree) == 5
    assert TerminalsOnly(grammar)(tree) is None


def test_arity_mismatch_fails(scalar_grammar):
    sin = scalar_grammar.lookup_by_name("sin").node_value
    x = scalar_grammar.lookup_by_name("x").node_value
    tree = Tree.build().push(sin).add(x).add(x).pop().tree
    with pytest.raises(ContractViolation):
        ScalarEvaluator(scalar_grammar, 1.0, 1.0)(tree)
