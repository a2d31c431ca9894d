"""
treegp/initializer.py - Population seeding
"""
import logging
import math
import random
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Callable, Optional

from .errors import require
from .generator import TreeGenerator
from .grammar import Grammar
from .tree import Builder, Tree

logger = logging.getLogger(__name__)


@dataclass
class InitializationOptions:
    """Contains the options that are used to initialize the population."""
    max_tree_depth: int
    population_size: int


class Initializer(ABC):
    """Base class for population initializers"""

    @abstractmethod
    def initialize(self, options: InitializationOptions, consumer: Callable[[Tree], None]) -> None:
        """Produce `options.population_size` trees, handing each to `consumer`"""
        pass


class RampedHalfAndHalfInitializerDelegate:
    """Lets the caller take over tree construction during initialization.

    Each hook returns True when it has built the tree itself; returning False
    falls back to the default generator strategy.
    """

    def generate_full(self, generator: TreeGenerator, builder: Builder, max_depth: int) -> bool:
        return False

    def generate_grow(self, generator: TreeGenerator, builder: Builder, max_depth: int) -> bool:
        return False


def ramp_depth(index: int, max_depth: int, population_size: int) -> int:
    """Depth of the `index`-th tree within one half of the population"""
    return int(math.floor(1 + index * (max_depth - 1) / (population_size / 2)))


class RampedHalfAndHalfInitializer(Initializer):
    """Ramped half and half initialization.

    The first half of the population is built with the Full strategy and the
    second half with Grow; within each half the depth limit ramps from 1
    towards the maximum depth.
    """

    def __init__(self, grammar: Grammar, rng: random.Random,
                 delegate: Optional[RampedHalfAndHalfInitializerDelegate] = None):
        self.generator = TreeGenerator(grammar, rng)
        self.delegate = delegate

    def _build_full(self, depth: int) -> Tree:
        builder = Tree.build()
        if not (self.delegate and self.delegate.generate_full(self.generator, builder, depth)):
            self.generator.generate_full(builder, depth)
        return builder.tree

    def _build_grow(self, depth: int) -> Tree:
        builder = Tree.build()
        if not (self.delegate and self.delegate.generate_grow(self.generator, builder, depth)):
            self.generator.generate_grow(builder, depth)
        return builder.tree

    def initialize(self, options: InitializationOptions, consumer: Callable[[Tree], None]) -> None:
        require(options.max_tree_depth >= 1, "maximum tree depth must be at least 1")
        size = options.population_size
        half = size // 2
        for i in range(half):
            consumer(self._build_full(ramp_depth(i, options.max_tree_depth, size)))
        for i in range(size - half):
            consumer(self._build_grow(ramp_depth(i, options.max_tree_depth, size)))
        logger.debug(f"Initialized {size} trees (max depth {options.max_tree_depth})")
