"""
treegp/grammar.py - Typed terminal/function definitions and node value mapping

A grammar owns every definition a tree may use. Each definition receives a
contiguous range of integer "node values" whose width is its weight; a tree
node stores one of those values. Drawing a uniform value from a range picks
definitions in proportion to their weights.

Ranges are laid out with all terminals first and all functions after them.
Inside each kind, definitions are grouped by the declaration order of their
types and keep their own declaration order within a type. That layout makes
every (kind, type) group contiguous, which is what `DefinitionSet` relies on
to sample type-legal values without rejection.
"""
import bisect
from enum import Enum
from typing import Dict, FrozenSet, List, Optional, Sequence, Tuple

from .errors import require


class Type:
    """A named type of grammar values"""

    def __init__(self, name: str):
        self.name = name

    def __eq__(self, other):
        if not isinstance(other, Type):
            return NotImplemented
        return self.name == other.name

    def __hash__(self):
        return hash(self.name)

    def __repr__(self):
        return f"Type({self.name!r})"


class DefinitionKind(Enum):
    TERMINAL = 'terminal'
    FUNCTION = 'function'


class Definition:
    """A terminal or a function that trees may use.

    Definitions are declared with the factory functions below and resolved by
    `Grammar`, which assigns the type ids, the definition id and the start of
    the node value range.
    """

    def __init__(self, name: str, kind: DefinitionKind, type_: Type,
                 argument_types: Sequence[Type] = (), weight: int = 1):
        require(isinstance(weight, int) and weight > 0,
                f"definition {name!r} needs a positive integer weight (got {weight!r})")
        if kind is DefinitionKind.TERMINAL:
            require(len(argument_types) == 0, f"terminal {name!r} cannot take arguments")
        else:
            require(len(argument_types) > 0, f"function {name!r} needs at least one argument")
        self.name = name
        self.kind = kind
        self.declared_type = type_
        self.declared_argument_types: Tuple[Type, ...] = tuple(argument_types)
        self.weight = weight
        # Filled in by the grammar.
        self.type: Optional[int] = None
        self.argument_types: Tuple[int, ...] = ()
        self.definition_id: Optional[int] = None
        self.node_value: Optional[int] = None

    def _resolve(self, type_ids: Dict[Type, int], definition_id: int,
                 node_value: int) -> 'Definition':
        for t in (self.declared_type,) + self.declared_argument_types:
            require(t in type_ids, f"definition {self.name!r} uses undeclared type {t.name!r}")
        resolved = Definition(self.name, self.kind, self.declared_type,
                              self.declared_argument_types, self.weight)
        resolved.type = type_ids[self.declared_type]
        resolved.argument_types = tuple(type_ids[t] for t in self.declared_argument_types)
        resolved.definition_id = definition_id
        resolved.node_value = node_value
        return resolved

    def is_terminal(self) -> bool:
        return self.kind is DefinitionKind.TERMINAL

    def is_function(self) -> bool:
        return self.kind is DefinitionKind.FUNCTION

    @property
    def num_arguments(self) -> int:
        return len(self.declared_argument_types)

    def type_for_argument(self, index: int) -> int:
        require(0 <= index < len(self.argument_types),
                f"{self.name!r} has no argument {index}")
        return self.argument_types[index]

    @property
    def node_value_range(self) -> range:
        return range(self.node_value, self.node_value + self.weight)

    def contains_value(self, value: int) -> bool:
        return self.node_value <= value < self.node_value + self.weight

    def __repr__(self):
        return (f"Definition({self.name!r}, {self.kind.value}, type={self.declared_type.name!r}, "
                f"weight={self.weight}, id={self.definition_id}, value={self.node_value})")


def terminal(name: str, type_: Type, weight: int = 1) -> Definition:
    return Definition(name, DefinitionKind.TERMINAL, type_, (), weight)


def function(name: str, type_: Type, argument_types: Sequence[Type], weight: int = 1) -> Definition:
    return Definition(name, DefinitionKind.FUNCTION, type_, argument_types, weight)


def unary_function(name: str, type_: Type, argument_type: Type, weight: int = 1) -> Definition:
    return function(name, type_, (argument_type,), weight)


def binary_function(name: str, type_: Type, argument_types: Sequence[Type], weight: int = 1) -> Definition:
    require(len(argument_types) == 2, f"binary function {name!r} needs 2 argument types")
    return function(name, type_, argument_types, weight)


def ternary_function(name: str, type_: Type, argument_types: Sequence[Type], weight: int = 1) -> Definition:
    require(len(argument_types) == 3, f"ternary function {name!r} needs 3 argument types")
    return function(name, type_, argument_types, weight)


class DefinitionSet:
    """A type-constrained (or global) view of the node value space.

    Local values `[0, type_constrained_terminal_limit)` cover the terminals of
    the view and `[type_constrained_terminal_limit,
    type_constrained_function_limit)` cover its functions. Both local ranges
    map onto one contiguous global range each.
    """

    def __init__(self, type_id: Optional[int], terminals: Sequence[Definition],
                 functions: Sequence[Definition], terminal_start: int, function_start: int):
        self.type = type_id
        self.terminals: Tuple[Definition, ...] = tuple(terminals)
        self.functions: Tuple[Definition, ...] = tuple(functions)
        self._terminal_start = terminal_start
        self._function_start = function_start
        self._terminal_weight = sum(d.weight for d in self.terminals)
        self._function_weight = sum(d.weight for d in self.functions)

    def has_terminals(self) -> bool:
        return len(self.terminals) > 0

    def has_functions(self) -> bool:
        return len(self.functions) > 0

    @property
    def type_constrained_terminal_limit(self) -> int:
        return self._terminal_weight

    @property
    def type_constrained_function_limit(self) -> int:
        return self._terminal_weight + self._function_weight

    def node_value_for_type_constrained_node_value(self, value: int) -> int:
        require(0 <= value < self.type_constrained_function_limit,
                f"type constrained value {value} out of range "
                f"[0, {self.type_constrained_function_limit})")
        if value < self._terminal_weight:
            return self._terminal_start + value
        return self._function_start + (value - self._terminal_weight)

    def __repr__(self):
        return (f"DefinitionSet(type={self.type}, terminals={[d.name for d in self.terminals]}, "
                f"functions={[d.name for d in self.functions]})")


class Grammar:
    """An immutable catalog of typed definitions"""

    def __init__(self, types: Sequence[Type], definitions: Sequence[Definition]):
        self._types: Tuple[Type, ...] = tuple(types)
        type_ids = {t: i for i, t in enumerate(self._types)}
        require(len(type_ids) == len(self._types), "grammar declares the same type twice")
        for d in definitions:
            require(d.definition_id is None, f"definition {d.name!r} already belongs to a grammar")
            require(d.declared_type in type_ids,
                    f"definition {d.name!r} uses undeclared type {d.declared_type.name!r}")

        self._definitions: List[Definition] = []
        self._starts: List[int] = []
        # Declaration index of every resolved definition, by definition id.
        declared_at: List[int] = []
        # (kind, type id) -> (first definition index, end definition index, first value)
        groups: Dict[Tuple[DefinitionKind, int], Tuple[int, int, int]] = {}
        value = 0
        for kind in (DefinitionKind.TERMINAL, DefinitionKind.FUNCTION):
            for t in self._types:
                first_index, first_value = len(self._definitions), value
                for index, d in enumerate(definitions):
                    if d.kind is kind and d.declared_type == t:
                        self._definitions.append(d._resolve(type_ids, len(self._definitions), value))
                        self._starts.append(value)
                        declared_at.append(index)
                        value += d.weight
                groups[(kind, type_ids[t])] = (first_index, len(self._definitions), first_value)
            if kind is DefinitionKind.TERMINAL:
                self.terminal_limit = value
        self.node_limit = value
        self.function_limit = self.node_limit - self.terminal_limit

        self._names: Dict[str, Definition] = {}
        self._ids_by_name: Dict[str, List[int]] = {}
        # Name lookups resolve duplicates to the first definition declared.
        for d in sorted(self._definitions, key=lambda d: declared_at[d.definition_id]):
            self._names.setdefault(d.name, d)
            self._ids_by_name.setdefault(d.name, []).append(d.definition_id)

        self._sets: Dict[Optional[int], DefinitionSet] = {
            None: DefinitionSet(None, self.terminals(), self.functions(), 0, self.terminal_limit)
        }
        for type_id in range(len(self._types)):
            t_first, t_end, t_value = groups[(DefinitionKind.TERMINAL, type_id)]
            f_first, f_end, f_value = groups[(DefinitionKind.FUNCTION, type_id)]
            self._sets[type_id] = DefinitionSet(type_id, self._definitions[t_first:t_end],
                                                self._definitions[f_first:f_end],
                                                t_value, f_value)

    # Types.

    @property
    def types(self) -> Tuple[Type, ...]:
        return self._types

    def type_count(self) -> int:
        return len(self._types)

    def type_by_name(self, name: str) -> int:
        for type_id, t in enumerate(self._types):
            if t.name == name:
                return type_id
        raise KeyError(name)

    # Definitions.

    @property
    def definitions(self) -> Tuple[Definition, ...]:
        return tuple(self._definitions)

    def __len__(self) -> int:
        return len(self._definitions)

    def __getitem__(self, definition_id: int) -> Definition:
        require(0 <= definition_id < len(self._definitions),
                f"definition id {definition_id} out of range")
        return self._definitions[definition_id]

    def definition_id_for_value(self, value: int) -> int:
        require(0 <= value < self.node_limit,
                f"node value {value} out of range [0, {self.node_limit})")
        return bisect.bisect_right(self._starts, value) - 1

    def definition_for_value(self, value: int) -> Definition:
        return self._definitions[self.definition_id_for_value(value)]

    def definition_for_node(self, node) -> Definition:
        """Return the definition of a tree node (anything with a `.value`)"""
        return self.definition_for_value(node.value)

    def lookup_by_name(self, name: str) -> Definition:
        """Exact-match lookup; with duplicate names the first declared wins"""
        return self._names[name]

    def definition_ids_named(self, name: str) -> FrozenSet[int]:
        """The ids of every definition called `name`, whatever its type"""
        return frozenset(self._ids_by_name.get(name, ()))

    def terminals(self) -> Tuple[Definition, ...]:
        return tuple(d for d in self._definitions if d.is_terminal())

    def functions(self) -> Tuple[Definition, ...]:
        return tuple(d for d in self._definitions if d.is_function())

    def definition_set_for_type(self, type_id: Optional[int] = None) -> DefinitionSet:
        """The definition set of a type, or the global one for `None`"""
        require(type_id in self._sets, f"unknown type id {type_id}")
        return self._sets[type_id]

    def terminals_for_type(self, type_id: Optional[int]) -> Tuple[Definition, ...]:
        return self.definition_set_for_type(type_id).terminals

    def functions_for_type(self, type_id: Optional[int]) -> Tuple[Definition, ...]:
        return self.definition_set_for_type(type_id).functions

    def __repr__(self):
        return (f"Grammar(types={[t.name for t in self._types]}, "
                f"definitions={len(self._definitions)}, node_limit={self.node_limit})")
