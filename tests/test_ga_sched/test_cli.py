"""
Tests for run configuration handling, orchestration and plotting.
"""

import unittest
import tempfile
import shutil
import io
from contextlib import redirect_stdout
from pathlib import Path

import matplotlib
matplotlib.use('Agg')
import matplotlib.pyplot as plt
import yaml

from ga_sched.cli import (
    load_run_config,
    validate_run_config,
    parse_config_path,
    run_from_config,
    main,
)
from ga_sched.config import ConfigValidationError
from ga_sched.data_models import Job, Node, Individual, GenerationRecord
from ga_sched.io_utils import save_problem, load_history_log, load_assignment_csv
from ga_sched.orchestration import load_problem_from_config, run_scheduling
from ga_sched.config import GAConfig
from ga_sched.visualization_utils import plot_fitness_history, plot_node_load


class RunConfigTestCase(unittest.TestCase):
    """Shared temporary problem and run config."""

    def setUp(self):
        self.test_dir = Path(tempfile.mkdtemp())
        self.jobs = [Job(length=float(100 * (i + 1)), mem_required=10, id=f"job_{i}") for i in range(6)]
        self.nodes = [
            Node(capacity=300, cost_per_second=0.5, cost_per_mem=0.01, id="fast"),
            Node(capacity=100, cost_per_second=0.1, cost_per_mem=0.01, id="slow"),
        ]
        self.problem_path = save_problem(self.jobs, self.nodes, self.test_dir / "problem.yaml")
        self.output_root = self.test_dir / "run"
        self.run_config = {
            'problem': str(self.problem_path),
            'ga': {
                'population_size': 8,
                'elitism_count': 1,
                'max_generations': 5,
                'random_seed': 11,
            },
            'output': {'root': str(self.output_root), 'overwrite': True},
        }

    def tearDown(self):
        plt.close('all')
        shutil.rmtree(self.test_dir)

    def write_run_config(self, config=None) -> Path:
        path = self.test_dir / "run_config.yaml"
        path.write_text(yaml.safe_dump(config or self.run_config))
        return path


class TestRunConfig(RunConfigTestCase):
    """Test run configuration loading and validation."""

    def test_load_and_validate(self):
        """A complete run config validates."""
        config = load_run_config(self.write_run_config())
        validate_run_config(config)
        self.assertEqual(config['ga']['population_size'], 8)

    def test_missing_sections(self):
        """problem and output sections are required."""
        for field in ('problem', 'output'):
            config = dict(self.run_config)
            del config[field]
            with self.subTest(field=field):
                with self.assertRaises(ConfigValidationError):
                    validate_run_config(config)

    def test_missing_output_root(self):
        """output.root is required."""
        config = dict(self.run_config, output={'overwrite': True})
        with self.assertRaises(ConfigValidationError):
            validate_run_config(config)

    def test_missing_problem_file(self):
        """Problem paths must exist."""
        config = dict(self.run_config, problem=str(self.test_dir / "nope.yaml"))
        with self.assertRaises(ConfigValidationError):
            validate_run_config(config)

        config = dict(self.run_config, problem={'jobs_csv': str(self.problem_path)})
        with self.assertRaises(ConfigValidationError):
            validate_run_config(config)

    def test_invalid_ga_section(self):
        """GA parameters are validated up front."""
        config = dict(self.run_config, ga={'population_size': 2, 'elitism_count': 2})
        with self.assertRaises(ConfigValidationError):
            validate_run_config(config)

    def test_invalid_yaml(self):
        """Broken YAML is reported as a configuration error."""
        path = self.test_dir / "broken.yaml"
        path.write_text("problem: [unclosed\n")
        with self.assertRaises(ConfigValidationError):
            load_run_config(path)

        with self.assertRaises(FileNotFoundError):
            load_run_config(self.test_dir / "missing.yaml")

    def test_problem_section_forms(self):
        """Problem may be a path, {'path': ...} or a CSV pair."""
        jobs, nodes = load_problem_from_config(str(self.problem_path))
        self.assertEqual(len(jobs), 6)

        jobs, nodes = load_problem_from_config({'path': str(self.problem_path)})
        self.assertEqual(len(nodes), 2)

        with self.assertRaises(ConfigValidationError):
            load_problem_from_config({'jobs_csv': 'jobs.csv'})
        with self.assertRaises(ConfigValidationError):
            load_problem_from_config(42)


class TestCommandLine(unittest.TestCase):
    """Test argument parsing and exit codes."""

    def test_parse_config_path(self):
        self.assertEqual(parse_config_path(["run.yaml"]), "run.yaml")
        self.assertEqual(parse_config_path(["--config", "run.yaml"]), "run.yaml")
        self.assertEqual(parse_config_path(["--config=run.yaml"]), "run.yaml")
        self.assertIsNone(parse_config_path([]))
        self.assertIsNone(parse_config_path(["--help"]))

        with self.assertRaises(ConfigValidationError):
            parse_config_path(["--config"])

    def test_main_exit_codes(self):
        """Help exits 0, no arguments or failures exit 1."""
        with redirect_stdout(io.StringIO()):
            with self.assertRaises(SystemExit) as ctx:
                main(["--help"])
            self.assertEqual(ctx.exception.code, 0)

            with self.assertRaises(SystemExit) as ctx:
                main([])
            self.assertEqual(ctx.exception.code, 1)

            with self.assertRaises(SystemExit) as ctx:
                main(["/nonexistent/run_config.yaml"])
            self.assertEqual(ctx.exception.code, 1)


class TestOrchestration(RunConfigTestCase):
    """Test end-to-end runs."""

    def test_run_from_config_writes_outputs(self):
        """A run writes assignment, history and metadata files."""
        with redirect_stdout(io.StringIO()) as out:
            run_from_config(str(self.write_run_config()))

        self.assertIn("SUMMARY", out.getvalue())

        assignment = load_assignment_csv(self.output_root / "assignment.csv", max_value=1)
        self.assertEqual(assignment.chromosome_length, 6)

        history = load_history_log(self.output_root / "history.csv")
        self.assertGreaterEqual(len(history), 1)
        self.assertLessEqual(len(history), 6)

        with open(self.output_root / "run_metadata.yaml") as f:
            metadata = yaml.safe_load(f)
        self.assertEqual(metadata['jobs'], 6)
        self.assertIn('total_mutations', metadata)
        self.assertIn(metadata['stop_reason'], ('optimal', 'max_generations', 'max_seconds'))
        self.assertAlmostEqual(metadata['best_fitness'], history[-1].best_fitness, places=6)

    def test_run_with_plots(self):
        """Plots are written when requested."""
        config = dict(self.run_config, output={'root': str(self.output_root), 'overwrite': True, 'plots': True})
        with redirect_stdout(io.StringIO()):
            run_from_config(str(self.write_run_config(config)))

        self.assertTrue((self.output_root / "fitness_history.png").exists())
        self.assertTrue((self.output_root / "node_load.png").exists())

    def test_existing_output_without_overwrite(self):
        """An existing output directory is not overwritten by default."""
        self.output_root.mkdir()
        config = dict(self.run_config, output={'root': str(self.output_root)})
        with redirect_stdout(io.StringIO()):
            with self.assertRaises(FileExistsError):
                run_from_config(str(self.write_run_config(config)))

    def test_run_scheduling_in_memory(self):
        """The library entry point needs no files."""
        result = run_scheduling(self.jobs, self.nodes, GAConfig(population_size=6, elitism_count=1,
                                                                max_generations=3, random_seed=0))
        self.assertEqual(result.best.chromosome_length, 6)
        self.assertLessEqual(result.generations, 3)


class TestVisualization(unittest.TestCase):
    """Test plotting helpers."""

    def test_plot_fitness_history(self):
        history = [GenerationRecord(g, 0.5 + 0.1 * g, 0.4, 3.0 - g, 2.0, 10, 0.01 * g) for g in range(4)]
        fig = plot_fitness_history(history)
        self.assertEqual(len(fig.axes), 3)
        plt.close(fig)

    def test_plot_node_load(self):
        jobs = [Job(length=10), Job(length=20), Job(length=30)]
        nodes = [Node(capacity=10, id="a"), Node(capacity=20, id="b")]
        fig = plot_node_load(Individual(chromosome=[0, 1, 1], max_value=1), jobs, nodes)
        self.assertEqual(len(fig.axes), 2)
        plt.close(fig)


if __name__ == '__main__':
    unittest.main()
