#!/usr/bin/env python3
"""
GA Scheduler CLI - Minimal entry point.

Usage:
    python3 ga_cli.py run_config.yaml
    python3 ga_cli.py --config run_config.yaml
    python3 ga_cli.py --help

Examples:
    # Schedule the bundled example problem
    python3 ga_cli.py configs/example_run.yaml

    # Same problem with the grow-then-truncate strategy
    python3 ga_cli.py configs/example_run_grow.yaml
"""

from ga_sched.cli import main


if __name__ == '__main__':
    main()
