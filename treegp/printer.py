"""
treegp/printer.py - Text rendering of trees
"""
from typing import Callable, List, Optional, Union

from .errors import require
from .grammar import Definition, Grammar
from .tree import Node, Tree

# Optional hook that renders a terminal itself; returning None keeps the default.
PrinterHook = Callable[[Definition, Node], Optional[str]]


def check_node(definition: Definition, node: Node) -> None:
    """Verify that a node's children agree with its definition"""
    if definition.is_terminal():
        require(node.is_empty(), f"terminal {definition.name!r} has {node.child_count} children")
    else:
        require(node.child_count == definition.num_arguments,
                f"function {definition.name!r} takes {definition.num_arguments} arguments "
                f"but its node has {node.child_count} children")


class TreePrinter:
    """Prints a tree in prefix form: `(name child child ...)`"""

    def __init__(self, grammar: Grammar):
        self.grammar = grammar

    def _print(self, node: Node, out: List[str], hook: Optional[PrinterHook]) -> None:
        definition = self.grammar.definition_for_node(node)
        check_node(definition, node)
        if definition.is_terminal():
            text = hook(definition, node) if hook else None
            out.append(definition.name if text is None else text)
            return
        out.append("(" + definition.name)
        for child in node:
            out.append(" ")
            self._print(child, out, hook)
        out.append(")")

    def print(self, tree: Union[Tree, Node], hook: Optional[PrinterHook] = None) -> str:
        out: List[str] = []
        if isinstance(tree, Node):
            self._print(tree, out, hook)
        else:
            for node in tree:
                self._print(node, out, hook)
        return "".join(out)


class CompilerDelegate:
    """Customizes TreeCompiler output. Every hook declines by default."""

    def print_terminal(self, definition: Definition, node: Node) -> Optional[str]:
        return None

    def print_function(self, definition: Definition, node: Node) -> Optional[str]:
        return None

    def print_function_as_operator(self, definition: Definition) -> bool:
        return False


class TreeCompiler:
    """Converts a tree into a source-like textual representation.

    Functions print as calls, `name(a, b)`, unless the delegate asks for
    operator form: `(op X)` for unary and `(X op Y)` for binary functions.
    """

    def __init__(self, grammar: Grammar, delegate: Optional[CompilerDelegate] = None):
        self.grammar = grammar
        self.delegate = delegate or CompilerDelegate()

    def compile_node(self, node: Node) -> str:
        definition = self.grammar.definition_for_node(node)
        check_node(definition, node)
        if definition.is_terminal():
            text = self.delegate.print_terminal(definition, node)
            return definition.name if text is None else text
        text = self.delegate.print_function(definition, node)
        if text is not None:
            return text
        if self.delegate.print_function_as_operator(definition):
            if node.child_count == 1:
                return f"({definition.name} {self.compile_node(node[0])})"
            require(node.child_count == 2,
                    f"operator {definition.name!r} must be unary or binary")
            return f"({self.compile_node(node[0])} {definition.name} {self.compile_node(node[1])})"
        arguments = ", ".join(self.compile_node(child) for child in node)
        return f"{definition.name}({arguments})"

    def compile(self, tree: Tree) -> str:
        return "".join(self.compile_node(node) for node in tree)
