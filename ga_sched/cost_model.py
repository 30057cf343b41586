"""
Cost model and fitness evaluation for the GA scheduler.

Pure functions computing the execution cost of a job on a node, the
theoretical lower bounds of makespan and cost for a problem instance,
and the makespan/cost/fitness of a complete assignment.
"""

import math
from dataclasses import dataclass
from typing import List, Sequence

from .config import ConfigValidationError
from .data_models import Job, Node, Individual


@dataclass(frozen=True)
class ProblemBounds:
    """
    Lower bounds used to normalize fitness.

    Attributes:
        min_time: Makespan under perfect, infinitely divisible load balancing
        min_cost: Sum over jobs of the cheapest node cost for that job
    """
    min_time: float
    min_cost: float


@dataclass(frozen=True)
class AssignmentResult:
    """
    Outcome of running one assignment.

    Attributes:
        makespan: Completion time of the slowest node
        total_cost: Sum of job costs over all nodes
        node_times: Completion time per node
        node_costs: Cost accumulated per node
    """
    makespan: float
    total_cost: float
    node_times: List[float]
    node_costs: List[float]


JOB_FIELDS = ('length', 'mem_required', 'input_size', 'output_size', 'pes')
NODE_FIELDS = ('capacity', 'cost_per_second', 'cost_per_mem', 'cost_per_bw')


def _check_fields(kind: str, label, item, names: Sequence[str]) -> None:
    for name in names:
        value = getattr(item, name)
        if not math.isfinite(value) or value < 0:
            raise ConfigValidationError(
                f"{kind} {label} has invalid {name}: {value} (must be finite and non-negative)"
            )


def validate_problem(jobs: Sequence[Job], nodes: Sequence[Node]) -> None:
    """
    Reject problem instances the cost model cannot normalize.

    Every numeric job and node field must be finite and non-negative, and
    every node needs positive capacity. Together these keep both lower
    bounds at or below any assignment's makespan and cost.

    Args:
        jobs: Jobs to schedule
        nodes: Worker nodes

    Raises:
        ConfigValidationError: If either list is empty or a field is malformed
    """
    if not jobs:
        raise ConfigValidationError("Job list is empty")
    if not nodes:
        raise ConfigValidationError("Node list is empty")

    for index, job in enumerate(jobs):
        _check_fields("Job", job.id or index, job, JOB_FIELDS)

    for index, node in enumerate(nodes):
        _check_fields("Node", node.id or index, node, NODE_FIELDS)
        if node.capacity <= 0:
            raise ConfigValidationError(
                f"Node {node.id or index} has non-positive capacity: {node.capacity}"
            )


def calc_cost(job: Job, node: Node) -> float:
    """
    Cost of executing `job` on `node`.

    Processing cost (price per second times run time) plus memory cost
    plus bandwidth cost for the job's input and output transfers.
    """
    cost = node.cost_per_second * job.length / node.capacity
    cost += node.cost_per_mem * job.mem_required
    cost += node.cost_per_bw * (job.input_size + job.output_size)
    return cost


def calc_min_time(jobs: Sequence[Job], nodes: Sequence[Node]) -> float:
    """Total job length divided by total node capacity."""
    validate_problem(jobs, nodes)
    total_length = sum(job.length for job in jobs)
    total_capacity = sum(node.capacity for node in nodes)
    return total_length / total_capacity


def calc_min_cost(jobs: Sequence[Job], nodes: Sequence[Node]) -> float:
    """Each job priced on its cheapest node, ignoring contention."""
    validate_problem(jobs, nodes)
    return sum(min(calc_cost(job, node) for node in nodes) for job in jobs)


def calc_bounds(jobs: Sequence[Job], nodes: Sequence[Node]) -> ProblemBounds:
    return ProblemBounds(
        min_time=calc_min_time(jobs, nodes),
        min_cost=calc_min_cost(jobs, nodes)
    )


def evaluate_assignment(
    chromosome: Sequence[int],
    jobs: Sequence[Job],
    nodes: Sequence[Node]
) -> AssignmentResult:
    """
    Compute makespan and total cost of a job-to-node assignment.

    The per-node job buckets are local to this call, so concurrent
    evaluations never interfere.

    Args:
        chromosome: Node index per job
        jobs: Jobs, in gene order
        nodes: Worker nodes

    Returns:
        AssignmentResult with per-node breakdown

    Raises:
        ValueError: If chromosome and job list lengths differ
        IndexError: If a gene names a node that does not exist
    """
    if len(chromosome) != len(jobs):
        raise ValueError(
            f"Chromosome length {len(chromosome)} does not match job count {len(jobs)}"
        )

    buckets: List[List[Job]] = [[] for _ in nodes]
    for job_index, node_index in enumerate(chromosome):
        if not 0 <= node_index < len(nodes):
            raise IndexError(f"Gene {job_index} names unknown node {node_index}")
        buckets[node_index].append(jobs[job_index])

    node_times = []
    node_costs = []
    for node, assigned in zip(nodes, buckets):
        total_length = 0.0
        node_cost = 0.0
        for job in assigned:
            total_length += job.length
            node_cost += calc_cost(job, node)
        node_times.append(total_length / node.capacity)
        node_costs.append(node_cost)

    return AssignmentResult(
        makespan=max(node_times),
        total_cost=sum(node_costs),
        node_times=node_times,
        node_costs=node_costs
    )


def _bound_ratio(bound: float, value: float) -> float:
    # Non-negative inputs: value == 0 implies bound == 0, so the bound is met
    if value == 0:
        return 1.0
    return bound / value


def calc_fitness_value(
    makespan: float,
    total_cost: float,
    bounds: ProblemBounds,
    time_weight: float
) -> float:
    """
    Weighted sum of the time and cost bound ratios.

    fitness = w * min_time / makespan + (1 - w) * min_cost / total_cost
    """
    return (time_weight * _bound_ratio(bounds.min_time, makespan)
            + (1 - time_weight) * _bound_ratio(bounds.min_cost, total_cost))


def calc_fitness(
    individual: Individual,
    jobs: Sequence[Job],
    nodes: Sequence[Node],
    bounds: ProblemBounds,
    time_weight: float
) -> float:
    """
    Evaluate an individual and cache makespan, cost and fitness on it.

    Args:
        individual: Individual to evaluate
        jobs: Jobs, in gene order
        nodes: Worker nodes
        bounds: Problem lower bounds
        time_weight: Weight of the makespan term

    Returns:
        Fitness value
    """
    result = evaluate_assignment(individual.chromosome, jobs, nodes)
    individual.time = result.makespan
    individual.cost = result.total_cost
    individual.fitness = calc_fitness_value(result.makespan, result.total_cost, bounds, time_weight)
    return individual.fitness
