"""
Tests for the cost model: job costs, lower bounds and fitness evaluation.
"""

import unittest
import numpy as np

from ga_sched.algorithm import GeneticAlgorithm
from ga_sched.config import ConfigValidationError, GAConfig
from ga_sched.cost_model import (
    ProblemBounds,
    calc_cost,
    calc_min_time,
    calc_min_cost,
    calc_bounds,
    calc_fitness,
    calc_fitness_value,
    evaluate_assignment,
    validate_problem,
)
from ga_sched.data_models import Job, Node, Individual


class TestCost(unittest.TestCase):
    """Test per-job cost and lower bounds."""

    def setUp(self):
        self.jobs = [
            Job(length=1000, mem_required=100, input_size=30, output_size=20),
            Job(length=500, mem_required=50, input_size=10, output_size=10),
        ]
        self.nodes = [
            Node(capacity=1000, cost_per_second=3.0, cost_per_mem=0.01, cost_per_bw=0.1),
            Node(capacity=250, cost_per_second=0.5, cost_per_mem=0.02, cost_per_bw=0.05),
        ]

    def test_calc_cost(self):
        """Processing + memory + bandwidth cost."""
        # 3.0 * 1000/1000 + 0.01 * 100 + 0.1 * 50
        self.assertAlmostEqual(calc_cost(self.jobs[0], self.nodes[0]), 3.0 + 1.0 + 5.0)
        # 0.5 * 1000/250 + 0.02 * 100 + 0.05 * 50
        self.assertAlmostEqual(calc_cost(self.jobs[0], self.nodes[1]), 2.0 + 2.0 + 2.5)

    def test_min_time(self):
        """Total length over total capacity."""
        self.assertAlmostEqual(calc_min_time(self.jobs, self.nodes), 1500 / 1250)

    def test_min_cost(self):
        """Sum over jobs of the cheapest node."""
        expected = sum(min(calc_cost(job, node) for node in self.nodes) for job in self.jobs)
        self.assertAlmostEqual(calc_min_cost(self.jobs, self.nodes), expected)

        bounds = calc_bounds(self.jobs, self.nodes)
        self.assertAlmostEqual(bounds.min_cost, expected)
        self.assertAlmostEqual(bounds.min_time, 1.2)

    def test_invalid_problems(self):
        """Empty lists and zero capacity are configuration errors."""
        with self.assertRaises(ConfigValidationError):
            calc_min_time([], self.nodes)
        with self.assertRaises(ConfigValidationError):
            calc_min_cost(self.jobs, [])
        with self.assertRaises(ConfigValidationError):
            validate_problem(self.jobs, [Node(capacity=0)])
        with self.assertRaises(ConfigValidationError):
            calc_bounds(self.jobs, [Node(capacity=10), Node(capacity=-10)])

    def test_negative_or_non_finite_fields(self):
        """Every numeric job and node field must be finite and non-negative."""
        malformed_nodes = [
            Node(capacity=10, cost_per_mem=-1),
            Node(capacity=10, cost_per_second=-0.5),
            Node(capacity=10, cost_per_bw=float('inf')),
            Node(capacity=float('nan')),
            Node(capacity=float('inf')),
        ]
        for node in malformed_nodes:
            with self.subTest(node=node):
                with self.assertRaises(ConfigValidationError):
                    validate_problem(self.jobs, [node, Node(capacity=10)])

        malformed_jobs = [
            Job(length=-100),
            Job(length=float('nan')),
            Job(length=100, mem_required=-1),
            Job(length=100, input_size=float('inf')),
            Job(length=100, output_size=-5),
        ]
        for job in malformed_jobs:
            with self.subTest(job=job):
                with self.assertRaises(ConfigValidationError):
                    validate_problem([job], self.nodes)

    def test_negative_cost_run_is_rejected(self):
        """A negative node price cannot produce a fitness above 1."""
        jobs = [Job(length=10, mem_required=1), Job(length=10, mem_required=1)]
        nodes = [Node(capacity=10, cost_per_mem=-1), Node(capacity=10)]
        ga = GeneticAlgorithm(GAConfig(population_size=6, elitism_count=1, time_weight=0.0,
                                       max_generations=2, random_seed=0))
        with self.assertRaises(ConfigValidationError):
            ga.run(jobs, nodes)


class TestFitnessEvaluation(unittest.TestCase):
    """Test assignment evaluation and fitness."""

    def setUp(self):
        # Three equal jobs on two equal nodes, all costs zero
        self.jobs = [Job(length=10), Job(length=10), Job(length=10)]
        self.nodes = [Node(capacity=10), Node(capacity=10)]
        self.bounds = calc_bounds(self.jobs, self.nodes)

    def test_three_jobs_two_nodes_scenario(self):
        """min_time 1.5, makespan 2 for a 2/1 split, fitness 0.75 with w=1."""
        self.assertAlmostEqual(self.bounds.min_time, 1.5)

        individual = Individual(chromosome=[0, 0, 1], max_value=1)
        fitness = calc_fitness(individual, self.jobs, self.nodes, self.bounds, time_weight=1.0)

        self.assertAlmostEqual(individual.time, 2.0)
        self.assertAlmostEqual(individual.cost, 0.0)
        self.assertAlmostEqual(fitness, 0.75)
        self.assertAlmostEqual(individual.fitness, 0.75)

    def test_node_breakdown(self):
        """Per-node times and costs come back with the result."""
        result = evaluate_assignment([0, 0, 1], self.jobs, self.nodes)

        self.assertEqual(result.node_times, [2.0, 1.0])
        self.assertEqual(result.node_costs, [0.0, 0.0])
        self.assertEqual(result.makespan, 2.0)

    def test_idle_node(self):
        """A node without jobs finishes at time zero."""
        result = evaluate_assignment([1, 1, 1], self.jobs, self.nodes)
        self.assertEqual(result.node_times, [0.0, 3.0])

    def test_evaluations_are_independent(self):
        """Evaluating one assignment leaves no trace in the next."""
        first = evaluate_assignment([0, 0, 0], self.jobs, self.nodes)
        second = evaluate_assignment([1, 0, 1], self.jobs, self.nodes)
        third = evaluate_assignment([0, 0, 0], self.jobs, self.nodes)

        self.assertEqual(first, third)
        self.assertEqual(second.node_times, [1.0, 2.0])

    def test_invalid_assignment(self):
        """Wrong length or unknown nodes are defects."""
        with self.assertRaises(ValueError):
            evaluate_assignment([0, 1], self.jobs, self.nodes)
        with self.assertRaises(IndexError):
            evaluate_assignment([0, 1, 2], self.jobs, self.nodes)

    def test_zero_denominators(self):
        """A met zero bound contributes a full score instead of dividing by zero."""
        bounds = ProblemBounds(min_time=0.0, min_cost=0.0)
        self.assertEqual(calc_fitness_value(0.0, 0.0, bounds, 0.5), 1.0)

    def test_optimal_assignment_has_fitness_one(self):
        """Fitness is exactly 1 when both bounds are met."""
        jobs = [Job(length=10), Job(length=10)]
        nodes = [Node(capacity=10, cost_per_second=1.0), Node(capacity=10, cost_per_second=1.0)]
        bounds = calc_bounds(jobs, nodes)

        individual = Individual(chromosome=[0, 1], max_value=1)
        self.assertEqual(calc_fitness(individual, jobs, nodes, bounds, time_weight=0.5), 1.0)

        crowded = Individual(chromosome=[0, 0], max_value=1)
        self.assertLess(calc_fitness(crowded, jobs, nodes, bounds, time_weight=0.5), 1.0)

    def test_bounds_hold_for_random_assignments(self):
        """No assignment beats the lower bounds; fitness stays in (0, 1]."""
        rng = np.random.default_rng(123)
        jobs = [
            Job(length=float(rng.integers(100, 5000)),
                mem_required=float(rng.integers(1, 100)),
                input_size=float(rng.integers(1, 300)),
                output_size=float(rng.integers(1, 300)))
            for _ in range(15)
        ]
        nodes = [
            Node(capacity=float(rng.integers(100, 2000)),
                 cost_per_second=float(rng.uniform(0.01, 1.0)),
                 cost_per_mem=float(rng.uniform(0.001, 0.05)),
                 cost_per_bw=float(rng.uniform(0.001, 0.05)))
            for _ in range(4)
        ]
        bounds = calc_bounds(jobs, nodes)

        for _ in range(200):
            individual = Individual.random(len(jobs), len(nodes) - 1, rng)
            fitness = calc_fitness(individual, jobs, nodes, bounds, time_weight=0.3)

            self.assertGreaterEqual(individual.time, bounds.min_time - 1e-9)
            self.assertGreaterEqual(individual.cost, bounds.min_cost - 1e-9)
            self.assertGreater(fitness, 0.0)
            self.assertLessEqual(fitness, 1.0 + 1e-12)


if __name__ == '__main__':
    unittest.main()
