"""
treegp/evaluator.py - Recursive tree interpretation
"""
from abc import ABC, abstractmethod
from typing import Any, List, Union

from .grammar import Grammar
from .printer import check_node
from .tree import Node, Tree


class TreeEvaluator(ABC):
    """Evaluates a tree bottom-up.

    Subclasses implement `evaluate_terminal` and whichever function hooks
    their grammar needs. Children are evaluated first, then the function hook
    matching the node's arity receives their results. The values can be of
    any kind, for instance numpy arrays holding one result per sample point.
    """

    def __init__(self, grammar: Grammar):
        self.grammar = grammar

    def evaluate(self, tree: Union[Tree, Node]) -> Any:
        node = tree.root() if isinstance(tree, Tree) else tree
        definition = self.grammar.definition_for_node(node)
        check_node(definition, node)
        definition_id = definition.definition_id
        if definition.is_terminal():
            return self.evaluate_terminal(definition_id, node)
        arguments = [self.evaluate(child) for child in node]
        if len(arguments) == 1:
            return self.evaluate_unary_function(definition_id, node, arguments[0])
        if len(arguments) == 2:
            return self.evaluate_binary_function(definition_id, node, arguments[0], arguments[1])
        return self.evaluate_function(definition_id, node, arguments)

    def __call__(self, tree: Union[Tree, Node]) -> Any:
        return self.evaluate(tree)

    @abstractmethod
    def evaluate_terminal(self, definition_id: int, node: Node) -> Any:
        pass

    def evaluate_unary_function(self, definition_id: int, node: Node, x: Any) -> Any:
        return x

    def evaluate_binary_function(self, definition_id: int, node: Node, x: Any, y: Any) -> Any:
        return None

    def evaluate_function(self, definition_id: int, node: Node, arguments: List[Any]) -> Any:
        return None
