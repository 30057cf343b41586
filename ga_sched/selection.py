"""
Parent selection and diversity checks.
"""

import numpy as np

from .data_models import Individual, Population


def roulette_select(population: Population, rng: np.random.Generator) -> Individual:
    """
    Fitness-proportional (roulette wheel) selection.

    Spins a position in [0, population_fitness) and walks the population
    accumulating fitness until the position is reached. If the population
    has no positive aggregate fitness, falls back to a uniform random pick.

    Args:
        population: Evaluated population (population_fitness must be set)
        rng: Random number generator

    Returns:
        Selected individual (not a copy)

    Raises:
        ValueError: If the population is empty
    """
    if population.size() == 0:
        raise ValueError("Cannot select from an empty population")

    total = population.population_fitness
    if not total > 0:
        return population.get_individual(int(rng.integers(0, population.size())))

    wheel_position = rng.random() * total

    spin = 0.0
    for individual in population:
        spin += individual.fitness
        if spin >= wheel_position:
            return individual

    # Floating-point drift
    return population.get_individual(population.size() - 1)


def population_includes_individual(population: Population, individual: Individual) -> bool:
    """True if some member has equal fitness and identical genes."""
    return population.contains(individual)


def select_distinct_partner(
    population: Population,
    parent: Individual,
    rng: np.random.Generator,
    max_attempts: int = 100
) -> Individual:
    """
    Roulette-select a second parent whose genes differ from `parent`.

    Gives up after `max_attempts` draws and returns the last draw, so a
    population of identical chromosomes cannot stall the run.
    """
    partner = roulette_select(population, rng)
    attempts = 1
    while partner.same_genes(parent) and attempts < max_attempts:
        partner = roulette_select(population, rng)
        attempts += 1
    return partner
