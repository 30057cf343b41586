#!/usr/bin/env python3
"""
Random problem generator for the GA scheduler.

Writes a YAML problem file with random jobs and a heterogeneous set of
nodes: one large, expensive cloud node and several smaller, cheaper fog
nodes.

Usage:
    python3 generate_random_problem.py output.yaml --jobs 40 --fog-nodes 10 --seed 7
"""

import argparse
import sys

import numpy as np

from ga_sched.data_models import Job, Node
from ga_sched.io_utils import save_problem


def generate_jobs(count: int, rng: np.random.Generator) -> list[Job]:
    """Jobs with random length, memory and transfer sizes."""
    return [
        Job(
            length=float(rng.integers(1000, 20001)),
            mem_required=float(rng.integers(50, 501)),
            input_size=float(rng.integers(100, 1001)),
            output_size=float(rng.integers(100, 1001)),
            pes=1,
            id=f"job_{i}",
        )
        for i in range(count)
    ]


def generate_nodes(fog_count: int, rng: np.random.Generator) -> list[Node]:
    """One cloud node followed by `fog_count` fog nodes."""
    nodes = [
        Node(capacity=44800.0, cost_per_second=0.1, cost_per_mem=0.05, cost_per_bw=0.1, id="cloud")
    ]
    for i in range(fog_count):
        nodes.append(Node(
            capacity=float(rng.integers(500, 3001)),
            cost_per_second=round(float(rng.uniform(0.001, 0.01)), 5),
            cost_per_mem=round(float(rng.uniform(0.001, 0.01)), 5),
            cost_per_bw=round(float(rng.uniform(0.001, 0.01)), 5),
            id=f"fog_{i}",
        ))
    return nodes


def main():
    parser = argparse.ArgumentParser(description="Generate a random job/node problem file")
    parser.add_argument("output", help="Path of the problem YAML to write")
    parser.add_argument("--jobs", type=int, default=40, help="Number of jobs")
    parser.add_argument("--fog-nodes", type=int, default=10, help="Number of fog nodes besides the cloud")
    parser.add_argument("--seed", type=int, default=None, help="Random seed")
    parser.add_argument("--overwrite", action="store_true", help="Overwrite an existing file")
    args = parser.parse_args()

    if args.jobs <= 0 or args.fog_nodes < 0:
        print("Error: --jobs must be positive and --fog-nodes non-negative")
        sys.exit(1)

    rng = np.random.default_rng(args.seed)
    jobs = generate_jobs(args.jobs, rng)
    nodes = generate_nodes(args.fog_nodes, rng)

    try:
        path = save_problem(jobs, nodes, args.output, overwrite=args.overwrite)
    except FileExistsError as e:
        print(f"Error: {e}")
        sys.exit(1)

    print(f"Wrote {len(jobs)} jobs and {len(nodes)} nodes to {path}")


if __name__ == "__main__":
    main()
