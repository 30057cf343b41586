"""
Data models for the GA scheduler.

Core data structures representing jobs, worker nodes, individuals,
populations and per-generation statistics.
"""

from dataclasses import dataclass, field
from typing import Optional, Any, Iterator
import numpy as np


UNEVALUATED = -1.0


@dataclass(frozen=True)
class Job:
    """
    An independent unit of work to be assigned to exactly one node.

    Attributes:
        length: Computation size (instructions)
        mem_required: Memory requirement
        input_size: Input transfer size
        output_size: Output transfer size
        pes: Degree of parallelism (processing elements requested)
        id: Optional identifier used in reports and exports
    """
    length: float
    mem_required: float = 0.0
    input_size: float = 0.0
    output_size: float = 0.0
    pes: int = 1
    id: Optional[str] = None


@dataclass(frozen=True)
class Node:
    """
    A worker resource with processing capacity and cost characteristics.

    Nodes carry no assignment state; evaluations keep their own
    per-node buckets.

    Attributes:
        capacity: Processing capacity (instructions per second)
        cost_per_second: Price of one second of processing
        cost_per_mem: Price of one memory unit
        cost_per_bw: Price of one transferred data unit
        id: Optional identifier used in reports and exports
    """
    capacity: float
    cost_per_second: float = 0.0
    cost_per_mem: float = 0.0
    cost_per_bw: float = 0.0
    id: Optional[str] = None


@dataclass
class Individual:
    """
    Candidate job-to-node assignment (individual in GA population).

    Gene i holds the index of the node that runs job i.

    Attributes:
        chromosome: Node index per job
        max_value: Highest valid node index
        fitness: Cached fitness (higher is better, -1.0 until evaluated)
        time: Cached makespan
        cost: Cached total cost
    """
    chromosome: list[int]
    max_value: int
    fitness: float = UNEVALUATED
    time: float = UNEVALUATED
    cost: float = UNEVALUATED

    def __post_init__(self):
        """Check every gene is a valid node index."""
        self.chromosome = [int(gene) for gene in self.chromosome]
        for index, gene in enumerate(self.chromosome):
            if not 0 <= gene <= self.max_value:
                raise ValueError(
                    f"Gene {index} = {gene} outside valid node range [0, {self.max_value}]"
                )

    @classmethod
    def random(cls, chromosome_length: int, max_value: int, rng: np.random.Generator) -> "Individual":
        """
        Create an individual with uniformly random genes.

        Args:
            chromosome_length: Number of genes (jobs)
            max_value: Highest node index a gene may take
            rng: Random number generator

        Returns:
            New unevaluated Individual
        """
        genes = rng.integers(0, max_value + 1, size=chromosome_length)
        return cls(chromosome=genes.tolist(), max_value=max_value)

    @classmethod
    def blank(cls, chromosome_length: int, max_value: int) -> "Individual":
        """Individual with every gene set to node 0, filled in by crossover."""
        return cls(chromosome=[0] * chromosome_length, max_value=max_value)

    def copy(self) -> "Individual":
        """
        Create an independent copy of this individual.

        Returns:
            New Individual with copied chromosome and cached values
        """
        return Individual(
            chromosome=self.chromosome.copy(),
            max_value=self.max_value,
            fitness=self.fitness,
            time=self.time,
            cost=self.cost
        )

    @property
    def chromosome_length(self) -> int:
        return len(self.chromosome)

    @property
    def is_evaluated(self) -> bool:
        return self.fitness != UNEVALUATED

    def get_gene(self, index: int) -> int:
        return self.chromosome[index]

    def set_gene(self, index: int, value: int) -> None:
        """
        Assign job `index` to node `value`.

        Raises:
            ValueError: If value is not a valid node index
        """
        value = int(value)
        if not 0 <= value <= self.max_value:
            raise ValueError(f"Gene value {value} outside valid node range [0, {self.max_value}]")
        self.chromosome[index] = value

    def same_genes(self, other: "Individual") -> bool:
        """True if both chromosomes match position by position."""
        return self.chromosome == other.chromosome

    def is_duplicate_of(self, other: "Individual") -> bool:
        """
        Duplicate test used for diversity preservation.

        Two individuals are duplicates when their fitness values are equal
        and every gene matches.
        """
        return self.fitness == other.fitness and self.same_genes(other)

    def gene_string(self) -> str:
        return " ".join(str(gene) for gene in self.chromosome)


@dataclass
class Population:
    """
    Ordered collection of individuals evolved together.

    Order is meaningful after sort(): rank 0 is the fittest.

    Attributes:
        individuals: Members of the population
        population_fitness: Sum of member fitness (set by evaluation)
    """
    individuals: list[Individual] = field(default_factory=list)
    population_fitness: float = 0.0

    @classmethod
    def random(
        cls,
        population_size: int,
        chromosome_length: int,
        max_value: int,
        rng: np.random.Generator
    ) -> "Population":
        """
        Create a population of random individuals.

        Args:
            population_size: Number of individuals
            chromosome_length: Genes per individual
            max_value: Highest valid node index
            rng: Random number generator

        Returns:
            New Population
        """
        return cls(individuals=[
            Individual.random(chromosome_length, max_value, rng)
            for _ in range(population_size)
        ])

    def __len__(self) -> int:
        return len(self.individuals)

    def __iter__(self) -> Iterator[Individual]:
        return iter(self.individuals)

    def size(self) -> int:
        return len(self.individuals)

    def get_individual(self, index: int) -> Individual:
        return self.individuals[index]

    def add(self, individual: Individual) -> None:
        self.individuals.append(individual)

    def extend(self, individuals: list[Individual]) -> None:
        self.individuals.extend(individuals)

    def sort(self) -> None:
        """Order individuals by non-increasing fitness (stable)."""
        self.individuals.sort(key=lambda individual: individual.fitness, reverse=True)

    def get_fittest(self, rank: int = 0) -> Individual:
        """
        Individual at sorted position `rank` (0 = best).

        The population must have been sorted beforehand.
        """
        return self.individuals[rank]

    def truncate(self, size: int) -> None:
        """Sort, keep only the first `size` individuals and refresh the aggregate fitness."""
        self.sort()
        del self.individuals[size:]
        self.recompute_fitness()

    def recompute_fitness(self) -> float:
        self.population_fitness = sum(individual.fitness for individual in self.individuals)
        return self.population_fitness

    def mean_fitness(self) -> float:
        if not self.individuals:
            return 0.0
        return float(np.mean([individual.fitness for individual in self.individuals]))

    def contains(self, individual: Individual) -> bool:
        """True if any member is a duplicate of `individual`."""
        return any(member.is_duplicate_of(individual) for member in self.individuals)

    def summary_lines(self) -> list[str]:
        """
        One report line per member.

        Returns:
            Lines formatted as "rank: genes | fitness time cost"
        """
        return [
            f"{rank:3d}: {individual.gene_string()} | "
            f"fitness={individual.fitness:.6f} time={individual.time:.4f} cost={individual.cost:.4f}"
            for rank, individual in enumerate(self.individuals)
        ]


@dataclass
class GenerationRecord:
    """
    Statistics of one generation, written to the history log.

    Attributes:
        generation: Generation index (0 = initial population)
        best_fitness: Fitness of the fittest individual
        mean_fitness: Mean population fitness
        best_time: Makespan of the fittest individual
        best_cost: Total cost of the fittest individual
        population_size: Population size after the generation
        elapsed: Seconds since the run started
        metadata: Extra statistics (number of mutations in the generation)
    """
    generation: int
    best_fitness: float
    mean_fitness: float
    best_time: float
    best_cost: float
    population_size: int
    elapsed: float
    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """
        Convert record to dictionary for CSV export.

        Returns:
            Dictionary with CSV-serializable values
        """
        return {
            "generation": self.generation,
            "best_fitness": f"{self.best_fitness:.10f}",
            "mean_fitness": f"{self.mean_fitness:.10f}",
            "best_time": f"{self.best_time:.10f}",
            "best_cost": f"{self.best_cost:.10f}",
            "population_size": self.population_size,
            "elapsed": f"{self.elapsed:.6f}",
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "GenerationRecord":
        """Create a record from a history CSV row."""
        return cls(
            generation=int(data["generation"]),
            best_fitness=float(data["best_fitness"]),
            mean_fitness=float(data["mean_fitness"]),
            best_time=float(data["best_time"]),
            best_cost=float(data["best_cost"]),
            population_size=int(data["population_size"]),
            elapsed=float(data["elapsed"]),
        )
