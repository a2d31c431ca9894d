"""
treegp/config.py - Evolution parameters, run configuration and logging setup
"""
import logging
import random
from dataclasses import dataclass, field
from typing import Optional

from .errors import require


def check_rates(mutation_rate: float, crossover_rate: float) -> None:
    """Validate a mutation/crossover rate pair"""
    require(0.0 <= mutation_rate <= 1.0, f"mutation rate {mutation_rate} outside [0, 1]")
    require(0.0 <= crossover_rate <= 1.0, f"crossover rate {crossover_rate} outside [0, 1]")
    require(mutation_rate + crossover_rate <= 1.0,
            f"mutation rate + crossover rate must not exceed 1.0 "
            f"(got {mutation_rate} + {crossover_rate})")


@dataclass
class EvolutionParameters:
    """The parameters that control the evolutionary process.

    `rng` is the only source of randomness used by a run; every stochastic
    decision (tournaments, coin flips, node picks, tree generation) draws
    from it, so a fixed seed and a fixed call order reproduce a run exactly.
    """
    rng: random.Random = field(default_factory=random.Random)
    mutation_rate: float = 0.0
    crossover_rate: float = 0.0

    def __post_init__(self):
        check_rates(self.mutation_rate, self.crossover_rate)

    @classmethod
    def seeded(cls, seed: int, mutation_rate: float = 0.0,
               crossover_rate: float = 0.0) -> 'EvolutionParameters':
        return cls(random.Random(seed), mutation_rate, crossover_rate)


@dataclass
class RunConfig:
    """Configuration for a complete run of one of the example problems."""
    population_size: int = 100
    generations: int = 100
    max_depth: int = 10
    mutation_depth: int = 2
    seed: Optional[int] = 42
    mutation_rate: float = 0.1
    crossover_rate: float = 0.895
    log_level: str = "INFO"

    def __post_init__(self):
        require(self.population_size >= 4,
                f"population size must be at least 4 (got {self.population_size})")
        require(self.generations >= 0, "generation count must not be negative")
        require(self.max_depth >= 1, "maximum depth must be at least 1")
        check_rates(self.mutation_rate, self.crossover_rate)

    def parameters(self) -> EvolutionParameters:
        """Build fresh evolution parameters (and a fresh rng) for this run"""
        return EvolutionParameters(random.Random(self.seed),
                                   self.mutation_rate, self.crossover_rate)


def setup_logging(level: str = "INFO") -> None:
    """Setup logging for treegp."""
    logging.basicConfig(
        level=getattr(logging, level.upper()),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )
