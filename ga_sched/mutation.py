"""
Mutation operators for the GA scheduler.

Mutation reassigns a single job to a random node, in place.
"""

from typing import List, Tuple
import numpy as np

from .data_models import Individual, Population


def mutate_gene(individual: Individual, rng: np.random.Generator) -> Tuple[int, int, int]:
    """
    Overwrite one random gene with a random node index.

    The new value may equal the old one.

    Args:
        individual: Individual to mutate in place
        rng: Random number generator

    Returns:
        Tuple of (gene_index, old_value, new_value)
    """
    gene_index = int(rng.integers(0, individual.chromosome_length))
    new_value = int(rng.integers(0, individual.max_value + 1))
    old_value = individual.get_gene(gene_index)
    individual.set_gene(gene_index, new_value)
    return gene_index, old_value, new_value


def mutate_population(
    population: Population,
    mutation_rate: float,
    elitism_count: int,
    rng: np.random.Generator
) -> List[str]:
    """
    Apply single-gene mutation across the population.

    Individuals at positions below `elitism_count` are never touched; every
    other individual mutates with probability `mutation_rate`.

    Args:
        population: Population to mutate in place (sorted, or elites first)
        mutation_rate: Per-individual mutation probability
        elitism_count: Number of leading individuals protected from mutation
        rng: Random number generator

    Returns:
        Operation log, one entry per mutated individual
    """
    op_log = []
    for index in range(elitism_count, population.size()):
        if mutation_rate > rng.random():
            individual = population.get_individual(index)
            gene_index, old_value, new_value = mutate_gene(individual, rng)
            op_log.append(f"mutate(rank={index}): job {gene_index} node {old_value} -> {new_value}")
    return op_log
