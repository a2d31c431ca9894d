"""
treegp/generator.py - Grammar-driven random tree generation
"""
import random
from enum import Enum
from typing import Optional

from .errors import require
from .grammar import DefinitionSet, Grammar
from .tree import Builder, Tree


class Strategy(Enum):
    # Every branch grows until it reaches the depth limit.
    FULL = 'full'
    # Branches may stop early whenever a terminal is drawn.
    GROW = 'grow'


class TreeGenerator:
    """Generates random trees with the given grammar.

    Values are drawn uniformly from node value ranges, so definitions are
    picked in proportion to their weights.
    """

    def __init__(self, grammar: Grammar, rng: random.Random):
        require(grammar.terminal_limit != 0, "grammar has no terminals")
        self.grammar = grammar
        self.rng = rng

    def _random(self, low: int, high: int) -> int:
        return self.rng.randint(low, high)

    def random_terminal_value(self, definitions: DefinitionSet) -> int:
        """Return a random node value of one of the set's terminals"""
        require(definitions.has_terminals(), f"type {definitions.type} has no terminals")
        return definitions.node_value_for_type_constrained_node_value(
            self._random(0, definitions.type_constrained_terminal_limit - 1))

    def random_function_value(self, definitions: DefinitionSet) -> int:
        """Return a random node value of one of the set's functions"""
        require(definitions.has_functions(), f"type {definitions.type} has no functions")
        return definitions.node_value_for_type_constrained_node_value(
            self._random(definitions.type_constrained_terminal_limit,
                         definitions.type_constrained_function_limit - 1))

    def random_node_value(self, definitions: DefinitionSet) -> int:
        """Return a random node value of either a terminal or a function of the set"""
        require(definitions.type_constrained_function_limit > 0,
                f"type {definitions.type} has neither terminals nor functions")
        return definitions.node_value_for_type_constrained_node_value(
            self._random(0, definitions.type_constrained_function_limit - 1))

    def generate(self, builder: Builder, max_depth: int, strategy: Strategy,
                 type_id: Optional[int] = None) -> None:
        """Append one random tree of the given type (any type for `None`).

        A type without terminals cannot stop at the depth limit, so such a
        type keeps producing function nodes below it until its arguments
        reach types that do have terminals.
        """
        definitions = self.grammar.definition_set_for_type(type_id)
        if max_depth <= 1 and definitions.has_terminals():
            builder.add(self.random_terminal_value(definitions))
            return
        if strategy is Strategy.FULL and definitions.has_functions():
            value = self.random_function_value(definitions)
        else:
            # Grow, or Full over a type that only has terminals.
            value = self.random_node_value(definitions)
        definition = self.grammar.definition_for_value(value)
        if definition.is_terminal():
            builder.add(value)
            return
        builder.push(value)
        for argument_type in definition.argument_types:
            self.generate(builder, max_depth - 1, strategy, argument_type)
        builder.pop()

    def generate_full(self, builder: Builder, max_depth: int, type_id: Optional[int] = None) -> None:
        """Generate a tree that grows fully until it reaches the specified depth"""
        self.generate(builder, max_depth, Strategy.FULL, type_id)

    def generate_grow(self, builder: Builder, max_depth: int, type_id: Optional[int] = None) -> None:
        """Generate a tree that can grow until max depth, but doesn't have to"""
        self.generate(builder, max_depth, Strategy.GROW, type_id)

    def tree(self, max_depth: int, strategy: Strategy = Strategy.GROW,
             type_id: Optional[int] = None) -> Tree:
        """Generate a new standalone tree"""
        builder = Tree.build()
        self.generate(builder, max_depth, strategy, type_id)
        return builder.tree
