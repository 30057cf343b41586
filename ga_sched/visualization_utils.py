"""
Visualization utilities for the GA scheduler.

Plots the convergence history of a run and the per-node load of an
assignment.
"""

from pathlib import Path
from typing import Sequence, Tuple, Optional

import matplotlib.pyplot as plt
import numpy as np

from .cost_model import evaluate_assignment
from .data_models import Job, Node, Individual, GenerationRecord


def plot_fitness_history(
    history: Sequence[GenerationRecord],
    output_path: Optional[Path] = None,
    figsize: Tuple[int, int] = (10, 6)
) -> plt.Figure:
    """
    Plot best and mean fitness per generation, with best makespan and cost.

    Args:
        history: GenerationRecord per generation
        output_path: Optional path to save PNG file
        figsize: Figure size (width, height) in inches

    Returns:
        The matplotlib figure
    """
    generations = [record.generation for record in history]

    fig, (ax_fitness, ax_objectives) = plt.subplots(2, 1, figsize=figsize, sharex=True)

    ax_fitness.plot(generations, [r.best_fitness for r in history], label="best", color="tab:blue")
    ax_fitness.plot(generations, [r.mean_fitness for r in history], label="mean",
                    color="tab:orange", alpha=0.7)
    ax_fitness.set_ylabel("Fitness")
    ax_fitness.set_ylim(0, 1.05)
    ax_fitness.legend(loc="lower right")
    ax_fitness.grid(alpha=0.3)

    ax_time = ax_objectives
    ax_cost = ax_objectives.twinx()
    ax_time.plot(generations, [r.best_time for r in history], color="tab:green", label="makespan")
    ax_cost.plot(generations, [r.best_cost for r in history], color="tab:red", label="cost")
    ax_time.set_xlabel("Generation")
    ax_time.set_ylabel("Makespan", color="tab:green")
    ax_cost.set_ylabel("Cost", color="tab:red")
    ax_time.grid(alpha=0.3)

    fig.tight_layout()

    if output_path:
        fig.savefig(output_path, dpi=150, bbox_inches='tight')
        print(f"  Saved visualization: {output_path}")

    return fig


def plot_node_load(
    individual: Individual,
    jobs: Sequence[Job],
    nodes: Sequence[Node],
    output_path: Optional[Path] = None,
    figsize: Tuple[int, int] = (10, 5)
) -> plt.Figure:
    """
    Bar chart of completion time and cost per node for an assignment.

    The slowest node (the makespan) is highlighted.

    Args:
        individual: Assignment to plot
        jobs: Jobs in gene order
        nodes: Worker nodes
        output_path: Optional path to save PNG file
        figsize: Figure size (width, height) in inches

    Returns:
        The matplotlib figure
    """
    result = evaluate_assignment(individual.chromosome, jobs, nodes)
    labels = [node.id or f"node_{i}" for i, node in enumerate(nodes)]
    positions = np.arange(len(nodes))
    bottleneck = int(np.argmax(result.node_times))

    fig, (ax_time, ax_cost) = plt.subplots(1, 2, figsize=figsize)

    colors = ["tab:red" if i == bottleneck else "tab:blue" for i in positions]
    ax_time.bar(positions, result.node_times, color=colors)
    ax_time.set_title(f"Completion time (makespan {result.makespan:.3f})")
    ax_time.set_xticks(positions)
    ax_time.set_xticklabels(labels, rotation=45, ha='right')

    ax_cost.bar(positions, result.node_costs, color="tab:gray")
    ax_cost.set_title(f"Cost (total {result.total_cost:.3f})")
    ax_cost.set_xticks(positions)
    ax_cost.set_xticklabels(labels, rotation=45, ha='right')

    fig.tight_layout()

    if output_path:
        fig.savefig(output_path, dpi=150, bbox_inches='tight')
        print(f"  Saved visualization: {output_path}")

    return fig
