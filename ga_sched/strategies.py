"""
Generation strategies for the GA scheduler.

A generation strategy turns the current (evaluated, sorted) population
into the next one. Two strategies are provided:

- ReplaceInPlaceStrategy ("replace"): each individual may be replaced by a
  two-point crossover offspring, but only if the offspring is at least as
  fit and not already present. Population size stays fixed.
- GrowTruncateStrategy ("grow"): elites and roulette-selected copies plus
  unconditionally accepted paired offspring form a new generation, which
  is merged with the previous one, evaluated and truncated back to the
  target size.
"""

from typing import Dict, List, Sequence, Type, TYPE_CHECKING

from .config import ConfigValidationError, STRATEGY_NAMES
from .data_models import Job, Node, Individual, Population
from .selection import select_distinct_partner

if TYPE_CHECKING:
    from .algorithm import GeneticAlgorithm


class GenerationStrategy:
    """Produces the next generation from the current one."""

    name = "base"

    def next_generation(
        self,
        ga: "GeneticAlgorithm",
        population: Population,
        jobs: Sequence[Job],
        nodes: Sequence[Node]
    ) -> Population:
        """
        Evolve one generation.

        Args:
            ga: Algorithm providing operators, configuration and RNG
            population: Current population, evaluated and sorted
            jobs: Jobs being scheduled
            nodes: Worker nodes

        Returns:
            Next population, evaluated, sorted and at target size
        """
        raise NotImplementedError


class ReplaceInPlaceStrategy(GenerationStrategy):

    name = "replace"

    def crossover_population(
        self,
        ga: "GeneticAlgorithm",
        population: Population,
        jobs: Sequence[Job],
        nodes: Sequence[Node]
    ) -> Population:
        """
        Offer every ranked individual a chance to be replaced by an offspring.

        The offspring of parent1 (rank order) and a roulette-selected
        parent2 replaces parent1 only when its fitness is not lower and it
        duplicates no current member.
        """
        new_individuals: List[Individual] = []

        for rank in range(population.size()):
            parent1 = population.get_fittest(rank)

            if ga.config.crossover_rate > ga.rng.random():
                parent2 = ga.select_individual(population)
                offspring = ga.crossover_2point(parent1, parent2)

                if (parent1.fitness <= ga.calc_fitness(offspring, jobs, nodes)
                        and not ga.population_includes_individual(population, offspring)):
                    new_individuals.append(offspring)
                else:
                    new_individuals.append(parent1)
            else:
                new_individuals.append(parent1)

        population.individuals = new_individuals
        return population

    def next_generation(self, ga, population, jobs, nodes):
        population = self.crossover_population(ga, population, jobs, nodes)
        ga.mutate_population(population)
        population = ga.eval_population(population, jobs, nodes)
        ga.select_population(population)
        return population


class GrowTruncateStrategy(GenerationStrategy):

    name = "grow"

    def __init__(self, merge_parents: bool = True):
        self.merge_parents = merge_parents

    def crossover_population(self, ga: "GeneticAlgorithm", population: Population) -> Population:
        """
        Build the offspring generation.

        Copy slots (population size minus two per parent pair) are filled
        with the elites first, then with roulette-selected individuals.
        Each parent pair yields two complementary offspring, accepted
        without a fitness check. Copies are independent of the originals,
        so later mutation never alters the previous generation.
        """
        new_population = Population()

        number_of_pairs = int(population.size() * ga.config.crossover_rate / 2)
        number_of_copies = population.size() - 2 * number_of_pairs

        for index in range(number_of_copies):
            if index < ga.config.elitism_count:
                new_population.add(population.get_fittest(index).copy())
            else:
                new_population.add(ga.select_individual(population).copy())

        for _ in range(number_of_pairs):
            parent1 = ga.select_individual(population)
            parent2 = select_distinct_partner(population, parent1, ga.rng)
            offspring_a, offspring_b = ga.crossover_2point_pair(parent1, parent2)
            new_population.add(offspring_a)
            new_population.add(offspring_b)

        return new_population

    def next_generation(self, ga, population, jobs, nodes):
        new_population = self.crossover_population(ga, population)
        ga.mutate_population(new_population)

        if self.merge_parents:
            new_population.extend(population.individuals)
            population.individuals = []

        new_population = ga.eval_population(new_population, jobs, nodes)
        ga.select_population(new_population)
        return new_population


STRATEGIES: Dict[str, Type[GenerationStrategy]] = {
    ReplaceInPlaceStrategy.name: ReplaceInPlaceStrategy,
    GrowTruncateStrategy.name: GrowTruncateStrategy,
}


def get_strategy(name: str, merge_parents: bool = True) -> GenerationStrategy:
    """
    Instantiate a generation strategy by name.

    Raises:
        ConfigValidationError: If the name is unknown
    """
    if name not in STRATEGIES:
        raise ConfigValidationError(
            f"Invalid strategy: '{name}'. Must be one of {', '.join(STRATEGY_NAMES)}"
        )
    if name == GrowTruncateStrategy.name:
        return GrowTruncateStrategy(merge_parents=merge_parents)
    return STRATEGIES[name]()
