"""
I/O utilities for the GA scheduler.

Handles problem file parsing (YAML or CSV), assignment and history CSV
export, and metadata sidecar files.
"""

import csv
from dataclasses import asdict
from pathlib import Path
from typing import Union, Sequence, Tuple, Any
from datetime import datetime
import yaml

from .config import ConfigValidationError, load_yaml
from .cost_model import calc_cost
from .data_models import Job, Node, Individual, GenerationRecord


HISTORY_FIELDS = ['generation', 'best_fitness', 'mean_fitness', 'best_time',
                  'best_cost', 'population_size', 'elapsed']
ASSIGNMENT_FIELDS = ['job_id', 'node_index', 'node_id', 'length', 'cost']


def job_from_dict(data: dict[str, Any], index: int) -> Job:
    """
    Build a Job from a mapping (YAML entry or CSV row).

    Args:
        data: Mapping with at least 'length'
        index: Position in the job list, used as default id

    Returns:
        Job

    Raises:
        ConfigValidationError: If 'length' is missing or a value is not numeric
    """
    if 'length' not in data or data['length'] in (None, ''):
        raise ConfigValidationError(f"Job {index} is missing required field 'length'")

    try:
        return Job(
            length=float(data['length']),
            mem_required=float(data.get('mem_required') or 0),
            input_size=float(data.get('input_size') or 0),
            output_size=float(data.get('output_size') or 0),
            pes=int(data.get('pes') or 1),
            id=str(data['id']) if data.get('id') not in (None, '') else f"job_{index}",
        )
    except (TypeError, ValueError) as e:
        raise ConfigValidationError(f"Invalid value in job {index}: {e}")


def node_from_dict(data: dict[str, Any], index: int) -> Node:
    """
    Build a Node from a mapping (YAML entry or CSV row).

    Args:
        data: Mapping with at least 'capacity'
        index: Position in the node list, used as default id

    Returns:
        Node

    Raises:
        ConfigValidationError: If 'capacity' is missing or a value is not numeric
    """
    if 'capacity' not in data or data['capacity'] in (None, ''):
        raise ConfigValidationError(f"Node {index} is missing required field 'capacity'")

    try:
        return Node(
            capacity=float(data['capacity']),
            cost_per_second=float(data.get('cost_per_second') or 0),
            cost_per_mem=float(data.get('cost_per_mem') or 0),
            cost_per_bw=float(data.get('cost_per_bw') or 0),
            id=str(data['id']) if data.get('id') not in (None, '') else f"node_{index}",
        )
    except (TypeError, ValueError) as e:
        raise ConfigValidationError(f"Invalid value in node {index}: {e}")


def load_problem(problem_path: Union[str, Path]) -> Tuple[list[Job], list[Node]]:
    """
    Load jobs and nodes from a YAML problem file.

    YAML format:
        jobs:
          - {id: job_0, length: 4000, mem_required: 100, input_size: 300, output_size: 300}
        nodes:
          - {id: cloud, capacity: 44800, cost_per_second: 0.01, cost_per_mem: 0.05, cost_per_bw: 0.1}

    Args:
        problem_path: Path to problem YAML

    Returns:
        Tuple of (jobs, nodes)

    Raises:
        FileNotFoundError: If the file doesn't exist
        ConfigValidationError: If the file is malformed
    """
    problem = load_yaml(problem_path)

    for key in ('jobs', 'nodes'):
        if key not in problem:
            raise ConfigValidationError(f"Problem file {problem_path} is missing '{key}'")
        if not isinstance(problem[key], list):
            raise ConfigValidationError(f"'{key}' in {problem_path} must be a list")

    jobs = [job_from_dict(entry, i) for i, entry in enumerate(problem['jobs'])]
    nodes = [node_from_dict(entry, i) for i, entry in enumerate(problem['nodes'])]
    return jobs, nodes


def _read_csv_rows(csv_path: Union[str, Path], required: Sequence[str]) -> list[dict[str, str]]:
    csv_path = Path(csv_path)

    if not csv_path.exists():
        raise FileNotFoundError(f"CSV file not found: {csv_path}")

    with open(csv_path, 'r', newline='') as f:
        reader = csv.DictReader(f)
        if not all(col in (reader.fieldnames or []) for col in required):
            raise ConfigValidationError(
                f"Invalid CSV format in {csv_path}. Required columns: {','.join(required)}"
            )
        return list(reader)


def load_jobs_csv(csv_path: Union[str, Path]) -> list[Job]:
    """
    Load jobs from CSV.

    CSV format:
        id,length,mem_required,input_size,output_size,pes
        job_0,4000,100,300,300,1
    """
    rows = _read_csv_rows(csv_path, ['length'])
    return [job_from_dict(row, i) for i, row in enumerate(rows)]


def load_nodes_csv(csv_path: Union[str, Path]) -> list[Node]:
    """
    Load nodes from CSV.

    CSV format:
        id,capacity,cost_per_second,cost_per_mem,cost_per_bw
        cloud,44800,0.01,0.05,0.1
    """
    rows = _read_csv_rows(csv_path, ['capacity'])
    return [node_from_dict(row, i) for i, row in enumerate(rows)]


def save_problem(
    jobs: Sequence[Job],
    nodes: Sequence[Node],
    output_path: Union[str, Path],
    overwrite: bool = False
) -> Path:
    """
    Save jobs and nodes to a YAML problem file readable by load_problem.

    Raises:
        FileExistsError: If file exists and overwrite=False
    """
    output_path = _prepare_output(output_path, overwrite)

    problem = {
        'jobs': [asdict(job) for job in jobs],
        'nodes': [asdict(node) for node in nodes],
    }
    with open(output_path, 'w') as f:
        yaml.safe_dump(problem, f, default_flow_style=None, sort_keys=False)

    return output_path


def save_assignment_csv(
    individual: Individual,
    jobs: Sequence[Job],
    nodes: Sequence[Node],
    output_path: Union[str, Path],
    overwrite: bool = False
) -> Path:
    """
    Save a job-to-node assignment to CSV.

    CSV format:
        job_id,node_index,node_id,length,cost

    Args:
        individual: Assignment to save
        jobs: Jobs in gene order
        nodes: Worker nodes
        output_path: Path for output CSV
        overwrite: If True, overwrite existing file

    Returns:
        Path to saved CSV file

    Raises:
        FileExistsError: If file exists and overwrite=False
    """
    output_path = _prepare_output(output_path, overwrite)

    with open(output_path, 'w', newline='') as f:
        writer = csv.writer(f)
        writer.writerow(ASSIGNMENT_FIELDS)

        for job_index, node_index in enumerate(individual.chromosome):
            job = jobs[job_index]
            node = nodes[node_index]
            writer.writerow([
                job.id or f"job_{job_index}",
                node_index,
                node.id or f"node_{node_index}",
                job.length,
                f"{calc_cost(job, node):.10f}",
            ])

    return output_path


def load_assignment_csv(csv_path: Union[str, Path], max_value: int) -> Individual:
    """
    Load an assignment CSV back into an unevaluated Individual.

    Args:
        csv_path: Path to assignment CSV
        max_value: Highest valid node index

    Returns:
        Individual whose genes follow the CSV row order
    """
    rows = _read_csv_rows(csv_path, ['node_index'])
    return Individual(chromosome=[int(row['node_index']) for row in rows], max_value=max_value)


def save_history_log(
    records: Sequence[GenerationRecord],
    output_path: Union[str, Path],
    overwrite: bool = False
) -> Path:
    """
    Save per-generation statistics to CSV.

    Args:
        records: GenerationRecord per generation
        output_path: Path for output CSV
        overwrite: If True, overwrite existing file

    Returns:
        Path to saved history log

    Raises:
        FileExistsError: If file exists and overwrite=False
    """
    output_path = _prepare_output(output_path, overwrite)

    with open(output_path, 'w', newline='') as f:
        writer = csv.DictWriter(f, fieldnames=HISTORY_FIELDS)
        writer.writeheader()

        for record in records:
            writer.writerow(record.to_dict())

    return output_path


def load_history_log(csv_path: Union[str, Path]) -> list[GenerationRecord]:
    rows = _read_csv_rows(csv_path, HISTORY_FIELDS)
    return [GenerationRecord.from_dict(row) for row in rows]


def save_metadata(
    metadata: dict,
    output_path: Union[str, Path],
    overwrite: bool = False
) -> Path:
    """
    Save metadata to YAML sidecar file.

    Args:
        metadata: Metadata dictionary
        output_path: Path for output YAML
        overwrite: If True, overwrite existing file

    Returns:
        Path to saved metadata file

    Raises:
        FileExistsError: If file exists and overwrite=False
    """
    output_path = _prepare_output(output_path, overwrite)

    metadata = dict(metadata)
    metadata.setdefault('saved_at', datetime.now().isoformat())

    with open(output_path, 'w') as f:
        yaml.safe_dump(metadata, f, default_flow_style=False, sort_keys=False)

    return output_path


def _prepare_output(output_path: Union[str, Path], overwrite: bool) -> Path:
    output_path = Path(output_path)

    if output_path.exists() and not overwrite:
        raise FileExistsError(f"Output file already exists: {output_path}")

    output_path.parent.mkdir(parents=True, exist_ok=True)
    return output_path


def create_output_folder(root: Union[str, Path], overwrite: bool = False) -> Path:
    """
    Create the run output directory.

    Raises:
        FileExistsError: If the directory exists and overwrite=False
    """
    root = Path(root)

    if root.exists() and not overwrite:
        raise FileExistsError(
            f"Output directory already exists: {root}\n"
            f"Set 'output.overwrite: true' in config to overwrite"
        )

    root.mkdir(parents=True, exist_ok=overwrite)
    return root
