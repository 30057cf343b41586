"""
Orchestration module for the GA scheduler.

Implements the end-to-end scheduling run: load the problem, evolve with
the configured strategy, report and export the best assignment.
"""

from typing import Dict, Tuple, List
from pathlib import Path

from .algorithm import GeneticAlgorithm, RunResult
from .config import GAConfig, ConfigValidationError
from .data_models import Job, Node
from .io_utils import (
    load_problem,
    load_jobs_csv,
    load_nodes_csv,
    save_assignment_csv,
    save_history_log,
    save_metadata,
    create_output_folder,
)


def load_problem_from_config(problem_config) -> Tuple[List[Job], List[Node]]:
    """
    Load jobs and nodes as described by the 'problem' section of a run config.

    The section is either a path to a problem YAML file, or a mapping with
    'path', or with both 'jobs_csv' and 'nodes_csv'.

    Raises:
        ConfigValidationError: If the section names no usable source
    """
    if isinstance(problem_config, (str, Path)):
        return load_problem(problem_config)

    if not isinstance(problem_config, dict):
        raise ConfigValidationError("'problem' must be a path or a dictionary")

    if 'path' in problem_config:
        return load_problem(problem_config['path'])

    if 'jobs_csv' in problem_config and 'nodes_csv' in problem_config:
        return load_jobs_csv(problem_config['jobs_csv']), load_nodes_csv(problem_config['nodes_csv'])

    raise ConfigValidationError(
        "'problem' requires either 'path' or both 'jobs_csv' and 'nodes_csv'"
    )


def run_scheduling(
    jobs: List[Job],
    nodes: List[Node],
    ga_config: GAConfig
) -> RunResult:
    """
    Run the genetic algorithm on an in-memory problem.

    Args:
        jobs: Jobs to schedule
        nodes: Worker nodes
        ga_config: Validated GA configuration

    Returns:
        RunResult of the run
    """
    ga = GeneticAlgorithm(ga_config)
    return ga.run(jobs, nodes)


def run_from_run_config(run_config: Dict) -> RunResult:
    """
    Schedule a problem described by a run configuration and export results.

    Args:
        run_config: Run configuration dict from YAML

    Algorithm:
        1. Build GAConfig from run_config['ga']
        2. Load jobs and nodes from run_config['problem']
        3. Create output directory: run_config['output']['root']
        4. Evolve until optimal fitness or budget exhausted
        5. Save assignment.csv, history.csv and run_metadata.yaml
        6. Optionally save convergence and node-load plots
        7. Print summary report

    Returns:
        RunResult of the run (results are also written to disk)
    """
    print("=" * 70)
    print("GA SCHEDULER")
    print("=" * 70)

    ga_config = GAConfig.from_dict(run_config.get('ga'))
    print(f"Strategy: {ga_config.strategy}")
    print(f"Population: {ga_config.population_size} (target {ga_config.target_size}), "
          f"elitism {ga_config.elitism_count}")
    print(f"Rates: crossover {ga_config.crossover_rate}, mutation {ga_config.mutation_rate}")
    print(f"Time weight: {ga_config.time_weight}")
    print(f"Random seed: {ga_config.random_seed}")

    jobs, nodes = load_problem_from_config(run_config['problem'])
    print(f"Problem: {len(jobs)} jobs on {len(nodes)} nodes")

    output_config = run_config['output']
    overwrite = output_config.get('overwrite', False)
    output_root = create_output_folder(output_config['root'], overwrite=overwrite)
    print(f"Output directory: {output_root}\n")

    print(f"Evolving for up to {ga_config.max_generations} generations...")
    result = run_scheduling(jobs, nodes, ga_config)

    assignment_path = save_assignment_csv(
        result.best, jobs, nodes, output_root / 'assignment.csv', overwrite=overwrite
    )
    history_path = save_history_log(
        result.history, output_root / 'history.csv', overwrite=overwrite
    )
    metadata_path = save_metadata(
        {
            'ga': ga_config.to_dict(),
            'jobs': len(jobs),
            'nodes': len(nodes),
            'min_time': result.bounds.min_time,
            'min_cost': result.bounds.min_cost,
            'best_fitness': result.best.fitness,
            'best_time': result.best.time,
            'best_cost': result.best.cost,
            'generations': result.generations,
            'stop_reason': result.stop_reason,
            'total_mutations': result.metadata['total_mutations'],
            'elapsed': result.elapsed,
        },
        output_root / 'run_metadata.yaml',
        overwrite=overwrite
    )

    if output_config.get('plots', False):
        print("\nGenerating visualization plots...")
        # Non-interactive backend
        import matplotlib
        matplotlib.use('Agg')
        import matplotlib.pyplot as plt
        from .visualization_utils import plot_fitness_history, plot_node_load

        fig = plot_fitness_history(result.history, output_root / 'fitness_history.png')
        plt.close(fig)
        fig = plot_node_load(result.best, jobs, nodes, output_root / 'node_load.png')
        plt.close(fig)

    print()
    print("=" * 70)
    print("SUMMARY")
    print("=" * 70)
    print(f"Generations: {result.generations} (stopped: {result.stop_reason})")
    print(f"Elapsed: {result.elapsed:.3f}s")
    print(f"Lower bounds: time {result.bounds.min_time:.4f}, cost {result.bounds.min_cost:.4f}")
    print(f"Best fitness: {result.best.fitness:.6f}")
    print(f"Best makespan: {result.best.time:.4f}")
    print(f"Best cost: {result.best.cost:.4f}")
    print(f"Assignment: {assignment_path}")
    print(f"History log: {history_path}")
    print(f"Metadata: {metadata_path}")

    return result
