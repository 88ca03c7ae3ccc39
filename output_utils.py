# output_utils.py
"""
Output Path Management for Atomaker Runs
========================================

Keeps every generated file (configuration JSON, level plots) inside the
`results/` directory.

Usage
-----
    from output_utils import get_json_path, get_plot_path, save_json

    json_path = get_json_path("lithium")        # -> results/results_lithium_config.json
    save_json(json_path, {"Z": 3, ...})

    plot_path = get_plot_path("lithium_levels.png")  # -> results/lithium_levels.png

Notes
-----
- The results directory is created on first use.
- All functions return pathlib.Path objects.
- The directory is relative to the working directory unless a base
  directory is given.
"""

import json
from pathlib import Path
from typing import Any, Dict, Optional, Union

from logging_config import get_logger

logger = get_logger(__name__)

RESULTS_DIR = "results"


def get_results_dir(base: Optional[Union[str, Path]] = None) -> Path:
    """
    Get the results directory, creating it if it doesn't exist.

    Parameters
    ----------
    base : str or Path, optional
        Parent directory; the working directory when omitted.
    """
    results_path = Path(base) / RESULTS_DIR if base is not None else Path(RESULTS_DIR)
    results_path.mkdir(parents=True, exist_ok=True)
    return results_path


def get_output_path(filename: Union[str, Path], base: Optional[Union[str, Path]] = None) -> Path:
    """Full path of `filename` (its directory part is dropped) in the results directory."""
    return get_results_dir(base) / Path(filename).name


def get_json_path(run_name: str, base: Optional[Union[str, Path]] = None) -> Path:
    """
    Path of the configuration results file of a run.

    Examples
    --------
    >>> get_json_path("Li")
    PosixPath('results/results_Li_config.json')
    """
    return get_output_path(f"results_{run_name}_config.json", base)


def get_plot_path(plot_name: str, base: Optional[Union[str, Path]] = None) -> Path:
    """Path of a plot file in the results directory."""
    return get_output_path(plot_name, base)


def save_json(path: Union[str, Path], data: Dict[str, Any]) -> Path:
    """Write `data` as indented JSON and return the path."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=2)
    logger.info("Results saved to: %s", path)
    return path


def load_json(path: Union[str, Path]) -> Dict[str, Any]:
    """Read a results file written by save_json()."""
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)
