"""
GA Scheduler

This package assigns a fixed set of independent jobs to heterogeneous
worker nodes with a genetic algorithm, jointly minimizing makespan and
execution cost relative to their theoretical lower bounds.

Key Features:
- Fitness normalized by lower bounds on time and cost
- Injected, seedable random generator (reproducible runs)
- Two generation strategies: replace-in-place and grow-then-truncate
- Generation and wall-clock budgets on top of the optimality check

Modules:
- data_models: Core data structures (Job, Node, Individual, Population, GenerationRecord)
- cost_model: Job costs, lower bounds and fitness evaluation
- selection: Roulette-wheel selection and duplicate detection
- crossover: One-point and circular two-point crossover operators
- mutation: Single-gene mutation operators
- strategies: Pluggable generation strategies
- algorithm: GeneticAlgorithm orchestration and run loop
- config: GA parameters, validation and YAML loading
- io_utils: Problem files, assignment/history CSV, metadata sidecars
- orchestration: End-to-end scheduling run from a run config
- visualization_utils: Convergence and node-load plots
- cli: Command-line interface
"""

__version__ = "0.1.0"

from .data_models import Job, Node, Individual, Population, GenerationRecord
from .config import GAConfig, ConfigValidationError
from .cost_model import ProblemBounds, calc_cost, calc_min_time, calc_min_cost
from .algorithm import GeneticAlgorithm, RunResult

__all__ = [
    "Job",
    "Node",
    "Individual",
    "Population",
    "GenerationRecord",
    "GAConfig",
    "ConfigValidationError",
    "ProblemBounds",
    "calc_cost",
    "calc_min_time",
    "calc_min_cost",
    "GeneticAlgorithm",
    "RunResult",
]
