"""
Genetic algorithm orchestration for job-to-node scheduling.

GeneticAlgorithm owns the run configuration, the random generator and the
problem's lower bounds, and exposes the population-level operations
(initialization, evaluation, selection, crossover, mutation, truncation,
termination) used by the generation strategies.

Run lifecycle:
    INIT -> EVALUATE -> CHECK_TERMINATION -> (done | EVOLVE -> EVALUATE -> ...)
"""

import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple
import numpy as np

from .config import GAConfig
from .cost_model import (
    ProblemBounds,
    calc_bounds,
    calc_fitness,
    calc_fitness_value,
    evaluate_assignment,
    validate_problem,
)
from .crossover import one_point_crossover, two_point_crossover, two_point_crossover_pair
from .data_models import Job, Node, Individual, Population, GenerationRecord
from .mutation import mutate_population
from .selection import roulette_select, population_includes_individual
from .strategies import GenerationStrategy, get_strategy


STOP_OPTIMAL = "optimal"
STOP_MAX_GENERATIONS = "max_generations"
STOP_MAX_SECONDS = "max_seconds"


@dataclass
class RunResult:
    """
    Outcome of a complete run.

    Attributes:
        best: Copy of the fittest individual at termination
        population: Final population (sorted)
        history: One GenerationRecord per evaluated generation
        generations: Number of generations evolved after initialization
        stop_reason: "optimal", "max_generations" or "max_seconds"
        bounds: Lower bounds used to normalize fitness
        elapsed: Wall-clock duration of the run in seconds
        metadata: Strategy name and total number of mutations
    """
    best: Individual
    population: Population
    history: List[GenerationRecord]
    generations: int
    stop_reason: str
    bounds: ProblemBounds
    elapsed: float
    metadata: dict = field(default_factory=dict)


class GeneticAlgorithm:
    """Genetic algorithm assigning independent jobs to heterogeneous nodes."""

    def __init__(
        self,
        config: GAConfig,
        rng: Optional[np.random.Generator] = None,
        strategy: Optional[GenerationStrategy] = None
    ):
        config.validate()
        self.config = config
        self.rng = rng if rng is not None else np.random.default_rng(config.random_seed)
        self.strategy = strategy or get_strategy(config.strategy, config.merge_parents)
        self.bounds: Optional[ProblemBounds] = None
        self.op_log: List[str] = []

    # Lower bounds

    def calc_min_time_cost(self, jobs: Sequence[Job], nodes: Sequence[Node]) -> ProblemBounds:
        """Compute and store the time and cost lower bounds for this problem."""
        self.bounds = calc_bounds(jobs, nodes)
        return self.bounds

    @property
    def min_time(self) -> float:
        return self._require_bounds().min_time

    @property
    def min_cost(self) -> float:
        return self._require_bounds().min_cost

    def _require_bounds(self) -> ProblemBounds:
        if self.bounds is None:
            raise RuntimeError("Lower bounds not computed; call calc_min_time_cost first")
        return self.bounds

    # Population-level operations

    def init_population(self, chromosome_length: int, max_value: int) -> Population:
        """
        Create population_size individuals with uniformly random genes.

        Args:
            chromosome_length: Number of jobs
            max_value: Highest node index

        Returns:
            Unevaluated population
        """
        return Population.random(self.config.population_size, chromosome_length, max_value, self.rng)

    def calc_fitness(self, individual: Individual, jobs: Sequence[Job], nodes: Sequence[Node]) -> float:
        return calc_fitness(individual, jobs, nodes, self._require_bounds(), self.config.time_weight)

    def eval_population(
        self,
        population: Population,
        jobs: Sequence[Job],
        nodes: Sequence[Node]
    ) -> Population:
        """
        Evaluate every member, update the aggregate fitness and sort.

        With workers > 1 the assignments are evaluated on a thread pool;
        results are written back to the individuals on this thread.
        """
        bounds = self._require_bounds()

        if self.config.workers > 1 and population.size() > 1:
            chromosomes = [individual.chromosome for individual in population]
            with ThreadPoolExecutor(max_workers=self.config.workers) as executor:
                results = list(executor.map(
                    lambda chromosome: evaluate_assignment(chromosome, jobs, nodes),
                    chromosomes
                ))
            for individual, result in zip(population, results):
                individual.time = result.makespan
                individual.cost = result.total_cost
                individual.fitness = calc_fitness_value(
                    result.makespan, result.total_cost, bounds, self.config.time_weight
                )
        else:
            for individual in population:
                self.calc_fitness(individual, jobs, nodes)

        population.recompute_fitness()
        population.sort()
        return population

    def is_termination_condition_met(self, population: Population) -> bool:
        """True if some individual reaches both lower bounds (fitness exactly 1)."""
        return any(individual.fitness == 1 for individual in population)

    def select_individual(self, population: Population) -> Individual:
        return roulette_select(population, self.rng)

    def crossover_1point(self, parent1: Individual, parent2: Individual) -> Individual:
        return one_point_crossover(parent1, parent2, self.rng)

    def crossover_2point(self, parent1: Individual, parent2: Individual) -> Individual:
        return two_point_crossover(parent1, parent2, self.rng)

    def crossover_2point_pair(self, parent1: Individual, parent2: Individual) -> Tuple[Individual, Individual]:
        return two_point_crossover_pair(parent1, parent2, self.rng)

    def mutate_population(self, population: Population) -> Population:
        """Mutate non-elite members in place; operations are appended to op_log."""
        self.op_log.extend(mutate_population(
            population, self.config.mutation_rate, self.config.elitism_count, self.rng
        ))
        return population

    def population_includes_individual(self, population: Population, individual: Individual) -> bool:
        return population_includes_individual(population, individual)

    def select_population(self, population: Population) -> Population:
        """
        Truncate the population to the target size, keeping the fittest.

        With verbose set, the population is printed before and after.
        """
        if self.config.verbose:
            _print_population("Before Selection", population)

        population.truncate(self.config.target_size)

        if self.config.verbose:
            _print_population("After Selection", population)
        return population

    def evolve(self, population: Population, jobs: Sequence[Job], nodes: Sequence[Node]) -> Population:
        """Produce the next generation with the configured strategy."""
        self.op_log = []
        return self.strategy.next_generation(self, population, jobs, nodes)

    # Driver loop

    def run(self, jobs: Sequence[Job], nodes: Sequence[Node]) -> RunResult:
        """
        Evolve until the termination condition or a budget is reached.

        Stops when an individual reaches fitness 1, after max_generations
        generations, or once max_seconds have elapsed (checked between
        generations).

        Args:
            jobs: Jobs to schedule (gene i = job i)
            nodes: Worker nodes (gene value = node index)

        Returns:
            RunResult with the best assignment and the run history

        Raises:
            ConfigValidationError: If the problem cannot be normalized
        """
        validate_problem(jobs, nodes)
        start_time = time.time()
        self.op_log = []
        self.calc_min_time_cost(jobs, nodes)

        population = self.init_population(len(jobs), len(nodes) - 1)
        population = self.eval_population(population, jobs, nodes)
        self.select_population(population)

        history = [self._record(0, population, start_time)]
        self._report(history[-1])

        generation = 0
        while True:
            if self.is_termination_condition_met(population):
                stop_reason = STOP_OPTIMAL
                break
            if generation >= self.config.max_generations:
                stop_reason = STOP_MAX_GENERATIONS
                break
            if self.config.max_seconds is not None and time.time() - start_time >= self.config.max_seconds:
                stop_reason = STOP_MAX_SECONDS
                break

            population = self.evolve(population, jobs, nodes)
            generation += 1

            history.append(self._record(generation, population, start_time))
            if generation % self.config.report_every == 0:
                self._report(history[-1])

        elapsed = time.time() - start_time
        best = population.get_fittest(0)

        if self.config.verbose:
            print(f"Stopped after {generation} generations ({stop_reason}) in {elapsed:.3f}s")
            print(f"  Best fitness: {best.fitness:.6f} time={best.time:.4f} cost={best.cost:.4f}")

        return RunResult(
            best=best.copy(),
            population=population,
            history=history,
            generations=generation,
            stop_reason=stop_reason,
            bounds=self.bounds,
            elapsed=elapsed,
            metadata={
                "strategy": self.strategy.name,
                "total_mutations": sum(record.metadata.get("mutations", 0) for record in history),
            }
        )

    def _record(self, generation: int, population: Population, start_time: float) -> GenerationRecord:
        best = population.get_fittest(0)
        return GenerationRecord(
            generation=generation,
            best_fitness=best.fitness,
            mean_fitness=population.mean_fitness(),
            best_time=best.time,
            best_cost=best.cost,
            population_size=population.size(),
            elapsed=time.time() - start_time,
            metadata={"mutations": len(self.op_log)}
        )

    def _report(self, record: GenerationRecord) -> None:
        if self.config.verbose:
            print(f"  Generation {record.generation:4d}: best={record.best_fitness:.6f} "
                  f"mean={record.mean_fitness:.6f} time={record.best_time:.4f} "
                  f"cost={record.best_cost:.4f} mutations={record.metadata.get('mutations', 0)}")


def _print_population(title: str, population: Population) -> None:
    print(f"  {title} ({population.size()} individuals, "
          f"aggregate fitness {population.population_fitness:.6f}):")
    for line in population.summary_lines():
        print(f"    {line}")
