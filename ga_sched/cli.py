"""
CLI module for the GA scheduler.

Handles run configuration loading, validation, and run dispatching.
"""

import sys
from typing import Dict, Any, Optional, List
from pathlib import Path

from .config import ConfigValidationError, GAConfig, load_yaml


USAGE = """\
GA Scheduler CLI

Assigns independent jobs to heterogeneous nodes with a genetic algorithm.
All configuration is specified in a YAML run config.

Usage:
    ga-sched run_config.yaml
    ga-sched --config run_config.yaml
    ga-sched --help

Example run config:
    problem: configs/example_problem.yaml
    ga:
      population_size: 30
      strategy: replace
      max_generations: 200
      random_seed: 42
    output:
      root: runs/example
      overwrite: true
      plots: true
"""


def load_run_config(config_path: str) -> Dict[str, Any]:
    """
    Load run configuration from YAML file.

    Args:
        config_path: Path to run configuration YAML file

    Returns:
        Dictionary containing run configuration

    Raises:
        FileNotFoundError: If config file doesn't exist
        ConfigValidationError: If config is invalid
    """
    return load_yaml(config_path)


def validate_run_config(config: Dict[str, Any]) -> None:
    """
    Validate run configuration structure.

    Args:
        config: Run configuration dictionary

    Raises:
        ConfigValidationError: If configuration is invalid
    """
    required = ['problem', 'output']
    for field in required:
        if field not in config:
            raise ConfigValidationError(f"Missing required field: '{field}'")

    _validate_problem_config(config['problem'])

    # Validate output section
    if not isinstance(config['output'], dict):
        raise ConfigValidationError("'output' must be a dictionary")

    if 'root' not in config['output']:
        raise ConfigValidationError("Missing required field: 'output.root'")

    # Validate GA section
    ga_section = config.get('ga', {})
    if ga_section is not None and not isinstance(ga_section, dict):
        raise ConfigValidationError("'ga' must be a dictionary")
    GAConfig.from_dict(ga_section)


def _validate_problem_config(problem: Any) -> None:
    """
    Validate the problem section and the existence of the files it names.

    Raises:
        ConfigValidationError: If the section is malformed or files are missing
    """
    if isinstance(problem, str):
        paths = [problem]
    elif isinstance(problem, dict):
        if 'path' in problem:
            paths = [problem['path']]
        elif 'jobs_csv' in problem and 'nodes_csv' in problem:
            paths = [problem['jobs_csv'], problem['nodes_csv']]
        else:
            raise ConfigValidationError(
                "'problem' requires either 'path' or both 'jobs_csv' and 'nodes_csv'"
            )
    else:
        raise ConfigValidationError("'problem' must be a path or a dictionary")

    for path in paths:
        if not Path(path).exists():
            raise ConfigValidationError(f"Problem file not found: {path}")


def run_from_config(config_path: str) -> None:
    """
    Load run configuration and execute the scheduling run.

    This is the main entry point called by ga_cli.py.

    Args:
        config_path: Path to run configuration YAML file

    Raises:
        FileNotFoundError: If config file doesn't exist
        ConfigValidationError: If config is invalid
        Various exceptions from the run itself
    """
    print(f"Loading configuration from: {config_path}")
    config = load_run_config(config_path)

    print("Validating configuration...")
    validate_run_config(config)

    from .orchestration import run_from_run_config
    run_from_run_config(config)

    print("\nRun completed successfully!")


def parse_config_path(argv: List[str]) -> Optional[str]:
    """
    Extract the run config path from command-line arguments.

    Accepts "path", "--config path" and "--config=path".

    Returns:
        Config path, or None when help was requested or nothing was given

    Raises:
        ConfigValidationError: If --config has no argument
    """
    if not argv or argv[0] in ['-h', '--help', 'help']:
        return None

    config_path = argv[0]

    if config_path.startswith('--config='):
        config_path = config_path.split('=', 1)[1]
    elif config_path == '--config':
        if len(argv) < 2:
            raise ConfigValidationError("--config requires an argument")
        config_path = argv[1]

    return config_path


def main(argv: Optional[List[str]] = None) -> None:
    """Main entry point for the GA scheduler CLI."""
    argv = sys.argv[1:] if argv is None else argv

    try:
        config_path = parse_config_path(argv)
    except ConfigValidationError as e:
        print(f"Error: {e}")
        print(USAGE)
        sys.exit(1)

    if config_path is None:
        print(USAGE)
        sys.exit(0 if argv else 1)

    try:
        run_from_config(config_path)
    except KeyboardInterrupt:
        print("\n\nInterrupted by user")
        sys.exit(1)
    except Exception as e:
        print(f"\nError: {e}")
        sys.exit(1)
