"""
Crossover operators for the GA scheduler.

Implements one-point and two-point crossover on job-to-node chromosomes.
Two-point crossover treats the chromosome as circular, so the exchanged
segment may wrap around the end.
"""

from typing import Tuple
import numpy as np

from .data_models import Individual


def one_point_crossover(
    parent_a: Individual,
    parent_b: Individual,
    rng: np.random.Generator
) -> Individual:
    """
    Combine two parents around a single cut point.

    Genes before the cut come from parent_a, the rest from parent_b.

    Args:
        parent_a: First parent
        parent_b: Second parent
        rng: Random number generator

    Returns:
        New unevaluated offspring
    """
    length = parent_a.chromosome_length
    cut = int(rng.integers(0, length + 1))

    offspring = Individual.blank(length, parent_a.max_value)
    for gene_index in range(length):
        if gene_index < cut:
            offspring.set_gene(gene_index, parent_a.get_gene(gene_index))
        else:
            offspring.set_gene(gene_index, parent_b.get_gene(gene_index))
    return offspring


def draw_cut_points(length: int, rng: np.random.Generator) -> Tuple[int, int]:
    """
    Draw the two cut points of a circular two-point crossover.

    Returns:
        (c1, c2) with c1 in [0, length-1] and c2 in [c1+1, c1+length]
    """
    c1 = int(rng.integers(0, length))
    c2 = int(rng.integers(c1 + 1, c1 + length + 1))
    return c1, c2


def in_wrapped_segment(gene_index: int, c1: int, c2: int, length: int) -> bool:
    """True if gene_index lies in [c1, c2) taken modulo length."""
    if c2 >= length:
        return gene_index >= c1 or gene_index < c2 - length
    return c1 <= gene_index < c2


def segment_mask(length: int, c1: int, c2: int) -> list[bool]:
    return [in_wrapped_segment(i, c1, c2, length) for i in range(length)]


def two_point_crossover(
    parent_a: Individual,
    parent_b: Individual,
    rng: np.random.Generator
) -> Individual:
    """
    Single-offspring two-point crossover.

    Genes inside the wrapped segment [c1, c2) come from parent_b,
    all others from parent_a.

    Args:
        parent_a: First parent
        parent_b: Second parent
        rng: Random number generator

    Returns:
        New unevaluated offspring
    """
    length = parent_a.chromosome_length
    c1, c2 = draw_cut_points(length, rng)
    return _build_from_mask(parent_a, parent_b, segment_mask(length, c1, c2))


def two_point_crossover_pair(
    parent_a: Individual,
    parent_b: Individual,
    rng: np.random.Generator
) -> Tuple[Individual, Individual]:
    """
    Paired two-point crossover.

    Uses the same cut points as two_point_crossover but returns two
    complementary offspring: where the first takes parent_b's gene the
    second takes parent_a's, and vice versa.

    Args:
        parent_a: First parent
        parent_b: Second parent
        rng: Random number generator

    Returns:
        Tuple of (offspring_a, offspring_b)
    """
    length = parent_a.chromosome_length
    c1, c2 = draw_cut_points(length, rng)
    mask = segment_mask(length, c1, c2)
    return (
        _build_from_mask(parent_a, parent_b, mask),
        _build_from_mask(parent_b, parent_a, mask)
    )


def _build_from_mask(base: Individual, donor: Individual, mask: list[bool]) -> Individual:
    """Offspring taking donor's gene where mask is True, base's elsewhere."""
    offspring = Individual.blank(base.chromosome_length, base.max_value)
    for gene_index, from_donor in enumerate(mask):
        source = donor if from_donor else base
        offspring.set_gene(gene_index, source.get_gene(gene_index))
    return offspring
