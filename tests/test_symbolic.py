import numpy as np
import pytest

from treegp import RunConfig, Tree, TreePrinter
from treegp.symbolic import SAMPLES, FunctionSolver, MultiFunctionSolver, size_penalty


def solver_values(solver):
    parameter = solver.grammar.lookup_by_name("parameter")
    return {
        "$0": parameter.node_value,
        "$1": parameter.node_value + parameter.weight // 2,
        "1": solver.grammar.lookup_by_name("1").node_value,
        "+": solver.grammar.lookup_by_name("+").node_value,
        "-": solver.grammar.lookup_by_name("-").node_value,
        "*": solver.grammar.lookup_by_name("*").node_value,
    }


def exact_solution(solver):
    """(+ (* $0 $1) (- $1 (* $0 $0)))"""
    v = solver_values(solver)
    builder = Tree.build()
    builder.push(v["+"])
    builder.push(v["*"]).add(v["$0"]).add(v["$1"]).pop()
    builder.push(v["-"]).add(v["$1"]).push(v["*"]).add(v["$0"]).add(v["$0"]).pop().pop()
    builder.pop()
    return builder.tree


def test_size_penalty():
    assert size_penalty(1) == 0.0
    assert size_penalty(30) == 0.0
    assert size_penalty(31) == pytest.approx(np.log10(2))


def test_parameter_printing():
    solver = FunctionSolver()
    text = TreePrinter(solver.grammar).print(exact_solution(solver), solver.print_terminal)
    assert text == "(+ (* $0 $1) (- $1 (* $0 $0)))"


def test_exact_solution_scores_one():
    solver = FunctionSolver()
    tree = exact_solution(solver)
    x, y = SAMPLES[:, 0], SAMPLES[:, 1]
    np.testing.assert_array_equal(solver.evaluate(tree, (x, y)), solver.target(x, y))
    assert solver.fitness_for_individual(tree) == 1.0


def test_wrong_solution_scores_less():
    solver = FunctionSolver()
    v = solver_values(solver)
    tree = Tree.build().push(v["*"]).add(v["$0"]).add(v["$1"]).pop().tree
    assert solver.fitness([tree])[0] < 1.0


def test_large_trees_are_penalized():
    solver = FunctionSolver()
    v = solver_values(solver)
    # $0 + 0 * (...) keeps the value of $0 but grows the tree past 30 nodes.
    small = Tree.build().add(v["$0"]).tree
    builder = Tree.build()
    builder.push(v["+"]).add(v["$0"]).push(v["*"]).push(v["-"]).add(v["1"]).add(v["1"]).pop()
    for _ in range(15):
        builder.push(v["+"]).add(v["1"])
    builder.add(v["1"])
    for _ in range(15):
        builder.pop()
    builder.pop().pop()
    large = builder.tree
    assert large.node_count() > 30
    x, y = SAMPLES[:, 0], SAMPLES[:, 1]
    np.testing.assert_array_equal(solver.evaluate(large, (x, y)), x)
    assert solver.fitness_for_individual(large) == pytest.approx(
        solver.fitness_for_individual(small) - size_penalty(large.node_count()))


def test_function_solver_run():
    # 100 individuals, 100 generations, seed 42, rates 0.1 / 0.895, depth 10.
    solver = FunctionSolver()
    population = solver.population(RunConfig())
    best = []
    for _ in range(100):
        population.evaluate_generation()
        best.append(population.get_stats().best_fitness)
        population.next_generation()
    stats = population.evolve(0)
    best.append(stats.best_fitness)

    assert population.generation == 100
    assert len(population) == 100
    # The unmodified elite is carried over, so the best score never drops.
    assert all(b >= a for a, b in zip(best, best[1:]))
    assert stats.best_fitness == 1.0
    assert stats.best_fitness == solver.fitness_for_individual(population[stats.best_individual])


def multi_value(grammar, name, type_name):
    type_id = grammar.type_by_name(type_name)
    return next(d.node_value for d in grammar.definitions if d.name == name and d.type == type_id)


def multi_exact_solution(solver):
    grammar = solver.grammar

    def b(name):
        return multi_value(grammar, name, "int-base")

    def f(name):
        return multi_value(grammar, name, "int")

    builder = Tree.build()
    builder.push(multi_value(grammar, "functions", "function-set"))
    # Helper: (- (* x y) (+ (* y y) x))
    builder.push(b("-")).push(b("*")).add(b("x")).add(b("y")).pop()
    builder.push(b("+")).push(b("*")).add(b("y")).add(b("y")).pop().add(b("x")).pop().pop()
    # Main: (- (call (+ x (+ 1 1)) (call x y)) (call y (* x y)))
    builder.push(f("-"))
    builder.push(f("call"))
    builder.push(f("+")).add(f("x")).push(f("+")).add(f("1")).add(f("1")).pop().pop()
    builder.push(f("call")).add(f("x")).add(f("y")).pop()
    builder.pop()
    builder.push(f("call")).add(f("y")).push(f("*")).add(f("x")).add(f("y")).pop().pop()
    builder.pop()
    builder.pop()
    return builder.tree


def test_multi_function_exact_solution():
    solver = MultiFunctionSolver()
    tree = multi_exact_solution(solver)
    assert tree.node_count() == 25
    x, y = SAMPLES[:, 0], SAMPLES[:, 1]
    np.testing.assert_array_equal(solver.evaluate(tree, x, y), solver.target(x, y))
    assert solver.fitness_for_individual(tree) == 1.0


def test_multi_function_population_roots():
    solver = MultiFunctionSolver()
    config = RunConfig(population_size=10, generations=3, max_depth=4)
    population = solver.population(config)
    for tree in population.individuals:
        assert tree.root().value == multi_value(solver.grammar, "functions", "function-set")
    stats = population.evolve(config.generations)
    assert population.generation == 3
    assert stats.best_fitness == max(population.fitnesses)
    for tree in population.individuals:
        assert solver.grammar.definition_for_node(tree.root()).name == "functions"
