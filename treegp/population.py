"""
treegp/population.py - Population management and genetic operators
"""
import logging
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence, Tuple

import numpy as np

from .config import EvolutionParameters, check_rates
from .errors import require
from .generator import TreeGenerator
from .grammar import Grammar
from .initializer import InitializationOptions, Initializer, RampedHalfAndHalfInitializer
from .printer import PrinterHook, TreePrinter
from .tree import Tree

logger = logging.getLogger(__name__)

# Scores a whole generation at once; larger is better.
FitnessFunction = Callable[[Sequence[Tree]], Sequence[float]]
# Produces a fresh random tree whose root has the given type.
RandomTreeOfType = Callable[[int], Tree]

TOURNAMENT_SIZE = 3


@dataclass
class Stats:
    average_fitness: float
    best_fitness: float
    best_individual: int
    # The generation the fitness data belongs to (-1 before any evaluation).
    evaluated_generation: int


class Population:
    """A fixed-size population of trees evolving under one grammar.

    Every generation keeps the best individual twice as material for the
    genetic operators, fills up with tournament winners, applies mutation or
    crossover slot by slot, and finally appends an untouched copy of the best
    individual.
    """

    def __init__(self, size: int, params: EvolutionParameters, grammar: Grammar,
                 fitness: FitnessFunction,
                 random_tree_of_type: Optional[RandomTreeOfType] = None,
                 printer_hook: Optional[PrinterHook] = None,
                 mutation_depth: int = 2):
        require(size >= 4, f"population size must be at least 4 (got {size})")
        check_rates(params.mutation_rate, params.crossover_rate)
        self.size = size
        self.params = params
        self.grammar = grammar
        self.fitness = fitness
        self.printer_hook = printer_hook
        if random_tree_of_type is None:
            generator = TreeGenerator(grammar, params.rng)

            def random_tree_of_type(type_id: int) -> Tree:
                return generator.tree(mutation_depth, type_id=type_id)
        self.random_tree_of_type = random_tree_of_type

        self._individuals: List[Tree] = []
        self.fitnesses: List[float] = [0.0] * size
        self.generation = 0
        self.failed_crossovers = 0
        self._evaluated_generation = -1
        self._best_individual = 0

    @property
    def individuals(self) -> Tuple[Tree, ...]:
        return tuple(self._individuals)

    def __len__(self) -> int:
        return len(self._individuals)

    def __getitem__(self, index: int) -> Tree:
        return self._individuals[index]

    def initialize(self, max_depth: int, initializer: Optional[Initializer] = None) -> None:
        """Seed the population, by default with ramped half and half"""
        if initializer is None:
            initializer = RampedHalfAndHalfInitializer(self.grammar, self.params.rng)
        self._individuals = []
        initializer.initialize(InitializationOptions(max_depth, self.size), self._individuals.append)
        require(len(self._individuals) == self.size,
                f"initializer produced {len(self._individuals)} trees for a population of {self.size}")
        self.generation = 0
        self._evaluated_generation = -1

    def _random(self, high: int) -> int:
        return self.params.rng.randint(0, high)

    def _select_random_node(self, genome: Tree) -> int:
        return self._random(genome.node_count() - 1)

    def _node_type(self, genome: Tree, node_id: int) -> int:
        return self.grammar.definition_for_node(genome[node_id]).type

    def _mutate(self, genome: Tree) -> None:
        node_id = self._select_random_node(genome)
        # Replace the node only with a tree of the same type.
        genome.replace(node_id, self.random_tree_of_type(self._node_type(genome, node_id)))

    def _select_random_node_with_type(self, genome: Tree, type_id: int) -> Optional[int]:
        nodes = [i for i in range(genome.node_count()) if self._node_type(genome, i) == type_id]
        if not nodes:
            return None
        return nodes[self._random(len(nodes) - 1)]

    def _crossover(self, genome: Tree, node_id: int, type_id: int, other: Tree) -> bool:
        """Swap the subtree at `node_id` with a random same-typed subtree of `other`.

        Returns False, leaving both trees untouched, when `other` has no node
        of that type.
        """
        other_id = self._select_random_node_with_type(other, type_id)
        if other_id is None:
            return False
        x, y = genome.get_subtree(node_id), other.get_subtree(other_id)
        genome.replace(node_id, y)
        other.replace(other_id, x)
        return True

    def select(self, new_generation: List[Tree], count: int) -> None:
        """Append `count` copies of tournament winners to `new_generation`"""
        require(0 < count <= len(self._individuals),
                f"cannot select {count} individuals from a population of {len(self._individuals)}")
        last = len(self._individuals) - 1
        for _ in range(count):
            samples = [self._random(last) for _ in range(TOURNAMENT_SIZE)]
            selected = samples[0]
            for s in samples[1:]:
                if self.fitnesses[s] > self.fitnesses[selected]:
                    selected = s
            new_generation.append(self._individuals[selected].copy())

    def evaluate_generation(self) -> int:
        """Compute the fitness of the current generation and return the best index.

        The result is cached until the generation advances.
        """
        if self._evaluated_generation == self.generation:
            return self._best_individual
        require(len(self._individuals) > 0, "population has not been initialized")
        fitnesses = [float(f) for f in self.fitness(self.individuals)]
        require(len(fitnesses) == len(self._individuals),
                f"fitness function returned {len(fitnesses)} values "
                f"for {len(self._individuals)} individuals")
        self.fitnesses = fitnesses
        best = 0
        for i, fitness in enumerate(fitnesses):
            if fitnesses[best] < fitness:
                best = i
        self._best_individual = best
        self._evaluated_generation = self.generation
        logger.debug(f"Evaluated generation {self.generation}: best #{best} = {fitnesses[best]}")
        return best

    def next_generation(self) -> None:
        """Evolve to the next generation"""
        best = self.evaluate_generation()
        mutation_rate, crossover_rate = self.params.mutation_rate, self.params.crossover_rate
        check_rates(mutation_rate, crossover_rate)
        elite = self._individuals[best]

        # Two elites that take part in mutation / crossover.
        new_generation = [elite.copy(), elite.copy()]
        self.select(new_generation, self.size - 3)

        i = 0
        while i < len(new_generation):
            p = self.params.rng.random()
            if p <= mutation_rate:
                self._mutate(new_generation[i])
            elif p <= mutation_rate + crossover_rate:
                partner = i + 1 if i + 1 != len(new_generation) else self._random(len(new_generation) - 1)
                if partner == i:
                    partner = i - 1
                genome = new_generation[i]
                node_id = self._select_random_node(genome)
                type_id = self._node_type(genome, node_id)
                if not self._crossover(genome, node_id, type_id, new_generation[partner]):
                    self.failed_crossovers += 1
                    logger.warning(f"Crossover failed in generation {self.generation}: "
                                   f"individual #{partner} has no node of type "
                                   f"{self.grammar.types[type_id].name!r}")
                # The partner has been used up for this round.
                i += 1
            i += 1

        # The elite without mutation / crossover.
        new_generation.append(elite.copy())

        self._individuals = new_generation
        self.generation += 1
        logger.debug(f"Advanced to generation {self.generation}")

    def evolve(self, generations: int) -> Stats:
        """Run `generations` generations, then evaluate the last one"""
        for _ in range(generations):
            self.next_generation()
        self.evaluate_generation()
        return self.get_stats()

    def get_stats(self) -> Stats:
        """Statistics of the last evaluation; does not evaluate"""
        best = 0
        for i, fitness in enumerate(self.fitnesses):
            if self.fitnesses[best] < fitness:
                best = i
        return Stats(average_fitness=float(np.mean(self.fitnesses)),
                     best_fitness=self.fitnesses[best],
                     best_individual=best,
                     evaluated_generation=self._evaluated_generation)

    def best(self) -> Tree:
        """The best individual of the current generation, evaluating it if needed"""
        return self._individuals[self.evaluate_generation()]

    def describe(self, index: int) -> str:
        return TreePrinter(self.grammar).print(self._individuals[index], self.printer_hook)

    def dump(self, print_individuals: bool = True) -> None:
        """Log the population statistics and the best individual"""
        stats = self.get_stats()
        logger.info(f"Generation: {self.generation}")
        logger.info(f"Average fitness: {stats.average_fitness}")
        logger.info(f"Best fitness: {stats.best_fitness}")
        if self._individuals:
            logger.info(f"Best individual: {self.describe(stats.best_individual)}")
        if print_individuals:
            for i in range(len(self._individuals)):
                logger.info(f"\t#{i}:\t{self.describe(i)}")
