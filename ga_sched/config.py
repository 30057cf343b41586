"""
Configuration for the GA scheduler.

Holds the GA run parameters, their validation rules and YAML loading.
"""

from dataclasses import dataclass, asdict, fields
from pathlib import Path
from typing import Dict, Any, Optional, Union
import yaml


STRATEGY_NAMES = ('replace', 'grow')


class ConfigValidationError(Exception):
    """Raised when run configuration or problem data is invalid."""
    pass


@dataclass
class GAConfig:
    """
    Parameters of one genetic algorithm run.

    Attributes:
        population_size: Number of individuals created at initialization
        mutation_rate: Probability that a non-elite individual mutates one gene
        crossover_rate: Probability that an individual mates (replace strategy),
            or fraction of the population produced by crossover (grow strategy)
        elitism_count: Number of top-ranked individuals protected from mutation
        time_weight: Weight of the makespan term in fitness (cost gets 1 - w)
        target_size: Population size restored by truncation (defaults to population_size)
        max_generations: Hard generation budget for the run
        max_seconds: Optional wall-clock budget in seconds
        strategy: Generation strategy name ("replace" or "grow")
        merge_parents: Grow strategy only, merge previous generation before truncation
        random_seed: Seed for the random generator (None = fresh entropy)
        workers: Number of threads used to evaluate fitness (1 = sequential)
        verbose: Print progress while evolving
        report_every: Progress line interval, in generations
    """
    population_size: int = 30
    mutation_rate: float = 0.1
    crossover_rate: float = 0.9
    elitism_count: int = 2
    time_weight: float = 0.5
    target_size: Optional[int] = None
    max_generations: int = 100
    max_seconds: Optional[float] = None
    strategy: str = 'replace'
    merge_parents: bool = True
    random_seed: Optional[int] = None
    workers: int = 1
    verbose: bool = False
    report_every: int = 10

    def __post_init__(self):
        """Default the truncation target to the population size."""
        if self.target_size is None:
            self.target_size = self.population_size

    def validate(self) -> None:
        """
        Check every parameter against its allowed range.

        Raises:
            ConfigValidationError: If any parameter is out of range
        """
        _require_positive_int('population_size', self.population_size)
        _require_positive_int('target_size', self.target_size)
        _require_positive_int('max_generations', self.max_generations)
        _require_positive_int('workers', self.workers)
        _require_positive_int('report_every', self.report_every)

        for name in ('mutation_rate', 'crossover_rate', 'time_weight'):
            value = getattr(self, name)
            if not isinstance(value, (int, float)) or isinstance(value, bool) or not 0.0 <= value <= 1.0:
                raise ConfigValidationError(f"'{name}' must be a number in [0, 1], got: {value}")

        if not isinstance(self.elitism_count, int) or isinstance(self.elitism_count, bool) or self.elitism_count < 0:
            raise ConfigValidationError(
                f"'elitism_count' must be a non-negative integer, got: {self.elitism_count}"
            )
        if self.elitism_count >= self.population_size:
            raise ConfigValidationError(
                f"'elitism_count' ({self.elitism_count}) must be smaller than "
                f"'population_size' ({self.population_size})"
            )

        if self.max_seconds is not None:
            if (not isinstance(self.max_seconds, (int, float)) or isinstance(self.max_seconds, bool)
                    or self.max_seconds <= 0):
                raise ConfigValidationError(
                    f"'max_seconds' must be a positive number, got: {self.max_seconds}"
                )

        if self.strategy not in STRATEGY_NAMES:
            raise ConfigValidationError(
                f"Invalid strategy: '{self.strategy}'. Must be one of {', '.join(STRATEGY_NAMES)}"
            )

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "GAConfig":
        """
        Build a validated GAConfig from a mapping (e.g. the 'ga' section of a run config).

        Args:
            data: Parameter mapping; missing keys take their defaults

        Returns:
            Validated GAConfig

        Raises:
            ConfigValidationError: If unknown keys are present or values are invalid
        """
        data = dict(data or {})
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigValidationError(f"Unknown GA parameter(s): {', '.join(unknown)}")

        config = cls(**data)
        config.validate()
        return config

    def to_dict(self) -> Dict[str, Any]:
        """Plain mapping of every parameter (for metadata sidecars)."""
        return asdict(self)


def _require_positive_int(name: str, value: Any) -> None:
    if not isinstance(value, int) or isinstance(value, bool) or value <= 0:
        raise ConfigValidationError(f"'{name}' must be a positive integer, got: {value}")


def load_yaml(config_path: Union[str, Path]) -> Dict[str, Any]:
    """
    Load a YAML mapping from disk.

    Args:
        config_path: Path to YAML file

    Returns:
        Parsed mapping

    Raises:
        FileNotFoundError: If the file doesn't exist
        ConfigValidationError: If the YAML is invalid, empty or not a mapping
    """
    config_file = Path(config_path)

    if not config_file.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    try:
        with open(config_file, 'r') as f:
            config = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigValidationError(f"Invalid YAML in {config_path}: {e}")

    if config is None:
        raise ConfigValidationError(f"Configuration file is empty: {config_path}")

    if not isinstance(config, dict):
        raise ConfigValidationError(f"Configuration file must contain a mapping: {config_path}")

    return config
