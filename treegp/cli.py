"""
treegp/cli.py - Command-line interface
"""
import time

import click

from .config import RunConfig, setup_logging
from .symbolic import FunctionSolver, MultiFunctionSolver


def run_options(max_depth: int):
    """Options shared by every solver command"""
    def decorate(command):
        options = [
            click.option('--generations', '-g', default=100, help='Number of generations to evolve'),
            click.option('--population', '-p', default=100, help='Population size (at least 4)'),
            click.option('--max-depth', default=max_depth, help='Maximum depth of the initial trees'),
            click.option('--seed', default=42, help='Random seed'),
            click.option('--mutation-rate', default=0.1, help='Mutation rate (0.0-1.0)'),
            click.option('--crossover-rate', default=0.895, help='Crossover rate (0.0-1.0)'),
            click.option('--log-level', default='WARNING',
                         type=click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR'], case_sensitive=False),
                         help='Logging level'),
            click.option('--verbose', '-v', is_flag=True, help='Log every individual of the final generation'),
        ]
        for option in reversed(options):
            command = option(command)
        return command
    return decorate


def _run(solver, generations, population, max_depth, seed, mutation_rate, crossover_rate,
         log_level, verbose):
    setup_logging(log_level)
    try:
        config = RunConfig(population_size=population, generations=generations, max_depth=max_depth,
                           seed=seed, mutation_rate=mutation_rate, crossover_rate=crossover_rate,
                           log_level=log_level)
    except ValueError as e:
        raise click.BadParameter(str(e)) from e

    click.echo(f"Starting evolution: {generations} generations, population {population}")
    start_time = time.time()
    pop = solver.population(config)
    stats = pop.evolve(config.generations)
    total_time = time.time() - start_time

    if verbose:
        pop.dump(print_individuals=True)
    click.echo(f"Generation: {pop.generation}")
    click.echo(f"Average fitness: {stats.average_fitness:.4f}")
    click.echo(f"Best fitness: {stats.best_fitness:.4f}")
    click.echo(f"Best individual: {pop.describe(stats.best_individual)}")
    if pop.failed_crossovers:
        click.echo(f"Failed crossovers: {pop.failed_crossovers}")
    click.echo(f"Evolution completed in {total_time:.1f}s")


@click.group()
def cli():
    """treegp - Strongly typed tree-based genetic programming"""
    pass


@cli.command()
@run_options(max_depth=10)
def solve(generations, population, max_depth, seed, mutation_rate, crossover_rate, log_level, verbose):
    """Search for f(x, y) = x*y + (y - x*x)"""
    _run(FunctionSolver(), generations, population, max_depth, seed, mutation_rate,
         crossover_rate, log_level, verbose)


@cli.command(name='multi-solve')
@run_options(max_depth=6)
def multi_solve(generations, population, max_depth, seed, mutation_rate, crossover_rate, log_level, verbose):
    """Search for a program that calls an evolved helper function"""
    _run(MultiFunctionSolver(), generations, population, max_depth, seed, mutation_rate,
         crossover_rate, log_level, verbose)


if __name__ == '__main__':
    cli()
