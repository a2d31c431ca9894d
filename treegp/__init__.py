"""
treegp - Strongly typed tree-based genetic programming

Populations of expression trees evolve under a caller-supplied grammar and
fitness function. Trees are stored as flattened pre-order node arrays whose
node values index into the grammar's weighted definition ranges.
"""

__version__ = "0.1.0"
__author__ = "treegp Project"

from .errors import ContractViolation
from .config import EvolutionParameters, RunConfig, setup_logging
from .grammar import (
    Type, Definition, DefinitionKind, DefinitionSet, Grammar,
    terminal, function, unary_function, binary_function, ternary_function
)
from .tree import Tree, Node, Builder
from .generator import TreeGenerator, Strategy
from .initializer import (
    InitializationOptions, Initializer,
    RampedHalfAndHalfInitializer, RampedHalfAndHalfInitializerDelegate
)
from .population import Population, Stats
from .printer import TreePrinter, TreeCompiler, CompilerDelegate
from .evaluator import TreeEvaluator

__all__ = [
    'ContractViolation',
    'EvolutionParameters', 'RunConfig', 'setup_logging',
    'Type', 'Definition', 'DefinitionKind', 'DefinitionSet', 'Grammar',
    'terminal', 'function', 'unary_function', 'binary_function', 'ternary_function',
    'Tree', 'Node', 'Builder',
    'TreeGenerator', 'Strategy',
    'InitializationOptions', 'Initializer',
    'RampedHalfAndHalfInitializer', 'RampedHalfAndHalfInitializerDelegate',
    'Population', 'Stats',
    'TreePrinter', 'TreeCompiler', 'CompilerDelegate',
    'TreeEvaluator'
]
