# config_loader.py
"""
Configuration File Loader for Atomaker Runs
===========================================

YAML-based configuration for non-interactive runs of the atomaker driver.

Usage
-----
```python
from config_loader import load_config, build_constants

config = load_config("lithium.yaml")
constants, n_fields = build_constants(config)
```

Configuration Format
--------------------
Generate a commented template with:

    python config_loader.py --generate my_run.yaml
"""

from __future__ import annotations
import yaml
from pathlib import Path
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Literal, Optional, Tuple, Union

from constants import (
    DEFAULT_MAX_RESEATS,
    DEFAULT_PRECISION,
    PRECISIONS,
    PhysicalConstants,
    resolve_precision,
)
from constants_io import load_constants_file
from logging_config import get_logger

logger = get_logger(__name__)

MODES = ("orbital_config", "calc_energies", "print_constants")
UNITS = ("natural", "si")


# =============================================================================
# CONFIGURATION DATA CLASSES
# =============================================================================

@dataclass
class AtomConfig:
    """Nucleus and electron count."""
    Z: int = 1
    electrons: int = 1
    shell: int = 0  # principal index listed by calc_energies


@dataclass
class PrecisionConfig:
    """Floating-point type and the source of the physical constants."""
    dtype: str = DEFAULT_PRECISION
    units: Literal["natural", "si"] = "natural"
    constants_file: Optional[str] = None


@dataclass
class RelaxationConfig:
    """Fixed-point iteration settings."""
    max_reseats: int = DEFAULT_MAX_RESEATS


@dataclass
class OutputConfig:
    """Result export."""
    save_json: bool = False
    plot: Optional[str] = None


@dataclass
class AtomakerConfig:
    """
    Complete configuration of one atomaker run.

    Holds everything the driver would otherwise take from the command line.
    """
    run_name: str = "atomaker_run"
    mode: Literal["orbital_config", "calc_energies", "print_constants"] = "orbital_config"

    atom: AtomConfig = field(default_factory=AtomConfig)
    precision: PrecisionConfig = field(default_factory=PrecisionConfig)
    relaxation: RelaxationConfig = field(default_factory=RelaxationConfig)
    output: OutputConfig = field(default_factory=OutputConfig)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


# =============================================================================
# CONFIG LOADING AND VALIDATION
# =============================================================================

def _section(raw_data: Dict[str, Any], key: str) -> Dict[str, Any]:
    value = raw_data.get(key) or {}
    if not isinstance(value, dict):
        raise ValueError(f"Section '{key}' must be a mapping, got {type(value).__name__}")
    return value


def load_config(path: Union[str, Path]) -> AtomakerConfig:
    """
    Load and validate a YAML configuration file.

    Parameters
    ----------
    path : str or Path
        Path to the YAML configuration file.

    Returns
    -------
    AtomakerConfig
        Validated configuration object.

    Raises
    ------
    FileNotFoundError
        If the configuration file does not exist.
    ValueError
        If the configuration is invalid or not valid YAML.
    """
    path = Path(path)

    if not path.exists():
        raise FileNotFoundError(f"Configuration file not found: {path}")

    logger.info("Loading configuration from: %s", path)

    with open(path, "r", encoding="utf-8") as f:
        try:
            raw_data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ValueError(f"Malformed YAML in {path}: {e}") from e

    if raw_data is None:
        raise ValueError(f"Configuration file is empty: {path}")
    if not isinstance(raw_data, dict):
        raise ValueError(f"Configuration root must be a mapping: {path}")

    config = AtomakerConfig()

    if "run_name" in raw_data:
        config.run_name = str(raw_data["run_name"])
    if "mode" in raw_data:
        config.mode = raw_data["mode"]

    a = _section(raw_data, "atom")
    config.atom = AtomConfig(
        Z=a.get("Z", 1),
        electrons=a.get("electrons", 1),
        shell=a.get("shell", 0),
    )

    p = _section(raw_data, "precision")
    config.precision = PrecisionConfig(
        dtype=p.get("dtype", DEFAULT_PRECISION),
        units=p.get("units", "natural"),
        constants_file=p.get("constants_file"),
    )

    r = _section(raw_data, "relaxation")
    config.relaxation = RelaxationConfig(
        max_reseats=r.get("max_reseats", DEFAULT_MAX_RESEATS),
    )

    o = _section(raw_data, "output")
    config.output = OutputConfig(
        save_json=o.get("save_json", False),
        plot=o.get("plot"),
    )

    # relative constants paths are resolved against the config file
    if config.precision.constants_file:
        constants_path = Path(config.precision.constants_file)
        if not constants_path.is_absolute():
            config.precision.constants_file = str(path.parent / constants_path)

    errors = validate_config(config)
    if errors:
        raise ValueError("Configuration validation failed:\n" + "\n".join(f"  - {e}" for e in errors))

    logger.info("Configuration loaded successfully: run_name='%s', mode='%s', Z=%d",
                config.run_name, config.mode, config.atom.Z)

    return config


def _is_int(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def validate_config(config: AtomakerConfig) -> List[str]:
    """
    Validate an AtomakerConfig and return a list of errors.

    Returns
    -------
    List[str]
        List of validation error messages. Empty if valid.
    """
    errors = []

    if config.mode not in MODES:
        errors.append(f"Invalid mode: '{config.mode}'. Must be one of {', '.join(MODES)}.")

    if not _is_int(config.atom.Z) or config.atom.Z < 1:
        errors.append(f"Atom Z must be an integer >= 1, got {config.atom.Z!r}")
    if not _is_int(config.atom.electrons) or config.atom.electrons < 0:
        errors.append(f"Atom electrons must be an integer >= 0, got {config.atom.electrons!r}")
    if not _is_int(config.atom.shell) or config.atom.shell < 0:
        errors.append(f"Atom shell must be an integer >= 0, got {config.atom.shell!r}")

    if config.precision.dtype not in PRECISIONS:
        errors.append(f"Invalid precision: '{config.precision.dtype}'. Must be one of {', '.join(PRECISIONS)}.")
    if config.precision.units not in UNITS:
        errors.append(f"Invalid units: '{config.precision.units}'. Must be 'natural' or 'si'.")

    if not _is_int(config.relaxation.max_reseats) or config.relaxation.max_reseats < 1:
        errors.append(f"max_reseats must be an integer >= 1, got {config.relaxation.max_reseats!r}")

    return errors


def build_constants(config: AtomakerConfig) -> Tuple[PhysicalConstants, int]:
    """
    Create the PhysicalConstants described by a configuration.

    Returns the constants and the number of fields read from the
    constants file (7 when no file is configured).
    """
    dtype = resolve_precision(config.precision.dtype)
    if config.precision.units == "si":
        constants = PhysicalConstants.si(dtype)
    else:
        constants = PhysicalConstants(dtype=dtype)

    if not config.precision.constants_file:
        return constants, 7
    return load_constants_file(config.precision.constants_file, constants)


def generate_template_config(output_path: Union[str, Path], mode: str = "orbital_config") -> None:
    """
    Generate a template configuration file.

    Parameters
    ----------
    output_path : str or Path
        Where to save the template.
    mode : str
        One of "orbital_config", "calc_energies", "print_constants".
    """
    template = f'''# Atomaker Run Configuration
# Generated template for {mode} runs

run_name: "{mode}_run"
mode: "{mode}"        # "orbital_config", "calc_energies" or "print_constants"

atom:
  Z: 3                # protons in the nucleus
  electrons: 3        # electrons added one at a time (orbital_config)
  shell: 0            # principal index n-1 listed by calc_energies

precision:
  dtype: "{DEFAULT_PRECISION}"        # "single", "double" or "long"
  units: "natural"    # "natural" (h_bar = e = c = 1) or "si" (CODATA)
  # constants_file: "constants.txt"   # overrides the unit set field by field

relaxation:
  max_reseats: {DEFAULT_MAX_RESEATS}    # cap on reseat moves after each electron

output:
  save_json: true     # results/results_<run_name>_config.json
  # plot: "levels.png"
'''

    path = Path(output_path)
    path.parent.mkdir(parents=True, exist_ok=True)

    with open(path, "w", encoding="utf-8") as f:
        f.write(template)

    logger.info("Template configuration saved to: %s", path)


# =============================================================================
# CLI UTILITIES
# =============================================================================

if __name__ == "__main__":
    import argparse

    parser = argparse.ArgumentParser(description="Atomaker Configuration File Utilities")
    parser.add_argument("--generate", "-g", type=str, metavar="PATH",
                        help="Generate template config at PATH")
    parser.add_argument("--mode", "-m", choices=MODES,
                        default="orbital_config", help="Template mode")
    parser.add_argument("--validate", "-v", type=str, metavar="PATH",
                        help="Validate config file at PATH")

    args = parser.parse_args()

    if args.generate:
        generate_template_config(args.generate, args.mode)
        print(f"Template saved to: {args.generate}")
    elif args.validate:
        try:
            config = load_config(args.validate)
            print(f"Configuration is valid: {args.validate}")
            print(f"  Run name: {config.run_name}")
            print(f"  Mode: {config.mode}")
            print(f"  Z: {config.atom.Z}, electrons: {config.atom.electrons}")
        except (FileNotFoundError, ValueError) as e:
            print(f"Validation failed: {e}")
    else:
        parser.print_help()
