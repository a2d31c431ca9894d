"""
treegp/symbolic.py - Symbolic regression example problems

Two integer function-finding problems. Trees are evaluated once per
individual over all sample points at the same time, with numpy int64 arrays
as values.
"""
import math
from typing import List, Optional, Sequence

import numpy as np

from .config import RunConfig
from .errors import require
from .evaluator import TreeEvaluator
from .generator import TreeGenerator
from .grammar import Definition, Grammar, Type, binary_function, terminal
from .initializer import RampedHalfAndHalfInitializer, RampedHalfAndHalfInitializerDelegate
from .population import Population
from .tree import Builder, Node, Tree

# The (x, y) points every candidate is scored on.
SAMPLES = np.array([(1, 2), (4, 5), (6, 7), (8, 9), (10, 11),
                    (45, 11), (450, 660), (2017, 13)], dtype=np.int64)


def size_penalty(node_count: int) -> float:
    """Penalize large trees: zero up to 30 nodes, growing logarithmically after"""
    return math.log10(math.ceil(node_count / 30.0))


def score(answers: np.ndarray, expected: np.ndarray, node_count: int) -> float:
    error = np.abs(answers.astype(np.float64) - expected.astype(np.float64))
    return float(np.mean(1.0 - error / 1000.0)) - size_penalty(node_count)


class FunctionSolver:
    """Find f(x, y) = x*y + (y - x*x) from samples.

    Both inputs share one `parameter` terminal: the lower half of its node
    value range reads x, the upper half reads y.
    """

    PARAMETER_COUNT = 2

    def __init__(self):
        int_type = Type("int")
        self.grammar = Grammar([int_type], [
            terminal("parameter", int_type, 50),
            terminal("1", int_type, 50),
            binary_function("+", int_type, [int_type, int_type], 50),
            binary_function("-", int_type, [int_type, int_type], 50),
            binary_function("*", int_type, [int_type, int_type], 50),
        ])
        self.parameter = self.grammar.lookup_by_name("parameter").definition_id
        self.one = self.grammar.lookup_by_name("1").definition_id
        self.add = self.grammar.lookup_by_name("+").definition_id
        self.sub = self.grammar.lookup_by_name("-").definition_id
        self.mul = self.grammar.lookup_by_name("*").definition_id

    @staticmethod
    def target(x, y):
        return x * y + (y - x * x)

    def parameter_id(self, definition: Definition, node: Node) -> int:
        require(definition.name == "parameter", f"{definition.name!r} is not a parameter")
        offset = node.value - definition.node_value
        width = definition.weight // self.PARAMETER_COUNT
        require(width * self.PARAMETER_COUNT == definition.weight,
                "parameter weight must split evenly between parameters")
        return offset // width

    def print_terminal(self, definition: Definition, node: Node) -> Optional[str]:
        """Print parameters as $0, $1"""
        if definition.name == "parameter":
            return f"${self.parameter_id(definition, node)}"
        return None

    def evaluate(self, tree: Tree, parameters: Sequence[np.ndarray]) -> np.ndarray:
        return _FnEvaluator(self, parameters)(tree)

    def fitness_for_individual(self, tree: Tree) -> float:
        x, y = SAMPLES[:, 0], SAMPLES[:, 1]
        return score(self.evaluate(tree, (x, y)), self.target(x, y), tree.node_count())

    def fitness(self, individuals: Sequence[Tree]) -> List[float]:
        return [self.fitness_for_individual(tree) for tree in individuals]

    def population(self, config: RunConfig) -> Population:
        """Build and seed a population for this problem"""
        params = config.parameters()
        population = Population(config.population_size, params, self.grammar, self.fitness,
                                printer_hook=self.print_terminal,
                                mutation_depth=config.mutation_depth)
        population.initialize(config.max_depth)
        return population


class _FnEvaluator(TreeEvaluator):

    def __init__(self, solver: FunctionSolver, parameters: Sequence[np.ndarray]):
        super().__init__(solver.grammar)
        self.solver = solver
        self.parameters = parameters

    def evaluate_terminal(self, definition_id: int, node: Node) -> np.ndarray:
        solver = self.solver
        if definition_id == solver.parameter:
            return self.parameters[solver.parameter_id(self.grammar[definition_id], node)]
        require(definition_id == solver.one, f"unexpected terminal {definition_id}")
        return np.ones_like(self.parameters[0])

    def evaluate_binary_function(self, definition_id: int, node: Node, x, y):
        solver = self.solver
        if definition_id == solver.add:
            return x + y
        if definition_id == solver.sub:
            return x - y
        require(definition_id == solver.mul, f"unexpected function {definition_id}")
        return x * y


class FixedRootDelegate(RampedHalfAndHalfInitializerDelegate):
    """Generates every initial tree from a fixed root type"""

    def __init__(self, root_type: int):
        self.root_type = root_type

    def generate_full(self, generator: TreeGenerator, builder: Builder, max_depth: int) -> bool:
        generator.generate_full(builder, max_depth, self.root_type)
        return True

    def generate_grow(self, generator: TreeGenerator, builder: Builder, max_depth: int) -> bool:
        generator.generate_grow(builder, max_depth, self.root_type)
        return True


class MultiFunctionSolver:
    """Find f(x, y) = f0(x + 2, f0(x, y)) - f0(y, x*y), f0(x, y) = x*y - (y*y + x).

    An individual is a `functions` node holding two programs: a helper over
    the base type and a main program that may `call` the helper.
    """

    def __init__(self):
        base_type = Type("int-base")
        fn_type = Type("int")
        set_type = Type("function-set")
        self.grammar = Grammar([base_type, fn_type, set_type], [
            terminal("x", fn_type, 25),
            terminal("y", fn_type, 25),
            terminal("1", fn_type, 50),
            binary_function("+", fn_type, [fn_type, fn_type], 50),
            binary_function("-", fn_type, [fn_type, fn_type], 50),
            binary_function("*", fn_type, [fn_type, fn_type], 50),
            binary_function("call", fn_type, [fn_type, fn_type], 200),

            terminal("x", base_type, 25),
            terminal("y", base_type, 25),
            terminal("1", base_type, 50),
            binary_function("+", base_type, [base_type, base_type], 50),
            binary_function("-", base_type, [base_type, base_type], 50),
            binary_function("*", base_type, [base_type, base_type], 50),

            # First argument: the helper, second: the main program.
            binary_function("functions", set_type, [base_type, fn_type], 50),
        ])
        self.root_type = self.grammar.type_by_name("function-set")
        self.functions = self.grammar.lookup_by_name("functions").definition_id
        names = self.grammar.definition_ids_named
        self.x, self.y, self.one = names("x"), names("y"), names("1")
        self.add, self.sub, self.mul, self.call = names("+"), names("-"), names("*"), names("call")

    @staticmethod
    def helper(x, y):
        return x * y - (y * y + x)

    @classmethod
    def target(cls, x, y):
        return cls.helper(x + 1 + 1, cls.helper(x, y)) - cls.helper(y, x * y)

    def evaluate(self, tree: Tree, x: np.ndarray, y: np.ndarray) -> np.ndarray:
        root = tree.root()
        require(self.grammar.definition_for_node(root).definition_id == self.functions,
                "individual must be rooted at a `functions` node")
        helper = root[0]
        return _MultiFnEvaluator(self, helper, x, y)(root[1])

    def fitness_for_individual(self, tree: Tree) -> float:
        x, y = SAMPLES[:, 0], SAMPLES[:, 1]
        return score(self.evaluate(tree, x, y), self.target(x, y), tree.node_count())

    def fitness(self, individuals: Sequence[Tree]) -> List[float]:
        return [self.fitness_for_individual(tree) for tree in individuals]

    def population(self, config: RunConfig) -> Population:
        params = config.parameters()
        population = Population(config.population_size, params, self.grammar, self.fitness,
                                mutation_depth=config.mutation_depth)
        population.initialize(config.max_depth, RampedHalfAndHalfInitializer(
            self.grammar, params.rng, FixedRootDelegate(self.root_type)))
        return population


class _MultiFnEvaluator(TreeEvaluator):

    def __init__(self, solver: MultiFunctionSolver, helper: Node, x: np.ndarray, y: np.ndarray):
        super().__init__(solver.grammar)
        self.solver = solver
        self.helper = helper
        self.x = x
        self.y = y

    def evaluate_terminal(self, definition_id: int, node: Node) -> np.ndarray:
        solver = self.solver
        if definition_id in solver.x:
            return self.x
        if definition_id in solver.y:
            return self.y
        require(definition_id in solver.one, f"unexpected terminal {definition_id}")
        return np.ones_like(self.x)

    def evaluate_binary_function(self, definition_id: int, node: Node, x, y):
        solver = self.solver
        if definition_id in solver.add:
            return x + y
        if definition_id in solver.sub:
            return x - y
        if definition_id in solver.call:
            return _MultiFnEvaluator(solver, self.helper, x, y)(self.helper)
        require(definition_id in solver.mul, f"unexpected function {definition_id}")
        return x * y
