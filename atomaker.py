"""
atomaker.py

Command-line driver for electron configuration searches.

Modes:
1. --orbital-config N : add N electrons one at a time, relaxing after each,
                        then list the valence electrons
2. --calc-energies N  : energies of every state with principal index N
3. --print-constants  : print the loaded physical constants record
4. (no mode)          : ask for the number of electrons, then run mode 1

Options -Z and -C select the nucleus and a constants file; --config reads
all of them from a YAML file (see config_loader.py). Options given on the
command line override the config file.
"""

import argparse
import sys
from typing import List, Optional, TextIO

from atoms import ConfigurationResult, build_configuration
from config_loader import AtomakerConfig, build_constants, load_config
from constants import DEFAULT_MAX_RESEATS, DEFAULT_PRECISION, PRECISIONS, PhysicalConstants
from constants_io import save_constants
from orbitals import QuantumState, shell_states
from output_utils import get_json_path, get_plot_path, save_json
from logging_config import enable_file_logging, get_logger, set_log_level

logger = get_logger(__name__)


# --- Report Formatting ---

def format_state(orb: QuantumState, energy) -> str:
    return (f"n: {orb.n}\tl: {orb.l}\ts: {orb.spin_label}\tm_l: {orb.m_l}\t\n"
            f"\tE: {float(energy):f}\n")


def format_delta(first: QuantumState, second: QuantumState, delta_energy) -> str:
    ds = int(first.s) - int(second.s)
    return (f"dn: {first.n - second.n}\tdl: {first.l - second.l}\tds: {ds}\t"
            f"dm_l: {first.m_l - second.m_l}\t\n\tdE: {float(delta_energy):f}\n")


# --- Modes ---

def run_orbital_config(
    Z: int,
    electrons: int,
    c: PhysicalConstants,
    max_reseats: int = DEFAULT_MAX_RESEATS,
    out: TextIO = sys.stdout,
) -> ConfigurationResult:
    """Build the configuration and print every placement and reseat."""
    result = build_configuration(Z, electrons, c, max_reseats)
    atom = result.atom

    for step in result.steps:
        if step.rejected:
            out.write(f"Electron {step.index} was rejected\n")
            break
        out.write(format_state(step.placed, step.placed_energy))
        for move in step.moves:
            out.write("Reseated:\n")
            out.write(format_state(move.old, move.old_energy))
            out.write(format_state(move.new, move.new_energy))
            out.write("delta:\t")
            out.write(format_delta(move.old, move.new, move.delta))
        if step.moves:
            out.write("Actual Energy:\n")
            out.write(format_state(step.settled, step.settled_energy))
            out.write("delta:\t")
            out.write(format_delta(step.placed, step.settled,
                                   step.placed_energy - step.settled_energy))
        if not step.converged:
            out.write(f"Relaxation stopped after {max_reseats} reseats without converging\n")

    out.write("Valence electrons:\n")
    for orb in sorted(atom.valence_orbitals()):
        out.write(format_state(orb, atom.E_i(c, orb)))

    if len(atom):
        out.write(f"Total energy: {float(atom.E(c)):f}\n")
        out.write(f"Ionization energy: {float(atom.ionization_energy(c, 1)):f}\n")
    return result


def run_calc_energies(Z: int, n: int, c: PhysicalConstants, out: TextIO = sys.stdout) -> None:
    """Print the bare-nucleus energy of every state in principal index n."""
    for i, orb in enumerate(shell_states(n)):
        out.write(f"{i}\t")
        out.write(format_state(orb, orb.E(c, Z, 0)))


def result_to_dict(run_name: str, result: ConfigurationResult, c: PhysicalConstants,
                   precision: str) -> dict:
    """JSON-friendly summary of a configuration run."""
    atom = result.atom
    return {
        "run_name": run_name,
        "Z": atom.Z,
        "precision": precision,
        "constants": c.as_dict(),
        "steps": [step.to_dict() for step in result.steps],
        "orbitals": [orb.to_dict() for orb in atom.orbitals],
        "valence": [orb.to_dict() for orb in sorted(atom.valence_orbitals())],
        "total_energy": float(atom.E(c)),
        "ionization_energy": float(atom.ionization_energy(c, 1)),
        "converged": result.converged,
        "rejected": result.rejected,
    }


# --- Input Helpers ---

def get_input_int(prompt: str, stream: TextIO = sys.stdin, out: TextIO = sys.stdout) -> int:
    """Ask on `out` until a non-negative integer is read from `stream`. Raises EOFError on end of input."""
    while True:
        print(prompt, end="", file=out, flush=True)
        line = stream.readline()
        if not line:
            raise EOFError("No input")
        try:
            value = int(line.strip())
        except ValueError:
            continue
        if value >= 0:
            return value


# --- Command Line ---

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="atomaker",
        description="Approximate the electron configuration of an atom by adding one "
                    "electron at a time and minimizing the total energy.",
    )
    parser.add_argument("-Z", "-z", dest="Z", type=int, metavar="PROTONS",
                        help="number of protons in the nucleus (default 1)")
    parser.add_argument("-C", "-c", dest="constants_file", metavar="FILE",
                        help="load the physical constants from FILE")
    parser.add_argument("--config", metavar="YAML",
                        help="read run settings from a YAML configuration file")
    parser.add_argument("--precision", choices=list(PRECISIONS),
                        help=f"floating-point precision (default {DEFAULT_PRECISION})")
    parser.add_argument("--si", action="store_true",
                        help="start from CODATA SI constants instead of natural units")
    parser.add_argument("--max-reseats", type=int, metavar="K",
                        help=f"cap on reseat moves per electron (default {DEFAULT_MAX_RESEATS})")

    mode = parser.add_mutually_exclusive_group()
    mode.add_argument("--orbital-config", "--orbitalConfig", dest="orbital_config",
                      type=int, metavar="ELECTRONS",
                      help="calculate the electron configuration for ELECTRONS electrons")
    mode.add_argument("--calc-energies", "--calcEnergies", dest="calc_energies",
                      type=int, metavar="N",
                      help="calculate the energies of all states of principal index N")
    mode.add_argument("--print-constants", "--printConstants", dest="print_constants",
                      action="store_true", help="print the loaded physical constants")

    parser.add_argument("--save-json", action="store_true",
                        help="save configuration results to results/")
    parser.add_argument("--plot", metavar="FILE",
                        help="save an energy level diagram to results/FILE")
    parser.add_argument("--log-level", metavar="LEVEL", help="console log level, e.g. DEBUG")
    parser.add_argument("--log-file", metavar="FILE", help="also write a DEBUG log to FILE")
    return parser


def _merge(args: argparse.Namespace, config: AtomakerConfig) -> AtomakerConfig:
    """Command-line values override the configuration file."""
    if args.Z is not None:
        config.atom.Z = args.Z
    if args.constants_file is not None:
        config.precision.constants_file = args.constants_file
    if args.precision is not None:
        config.precision.dtype = args.precision
    if args.si:
        config.precision.units = "si"
    if args.max_reseats is not None:
        config.relaxation.max_reseats = args.max_reseats
    if args.orbital_config is not None:
        config.mode = "orbital_config"
        config.atom.electrons = args.orbital_config
    elif args.calc_energies is not None:
        config.mode = "calc_energies"
        config.atom.shell = args.calc_energies
    elif args.print_constants:
        config.mode = "print_constants"
    if args.save_json:
        config.output.save_json = True
    if args.plot is not None:
        config.output.plot = args.plot
    return config


def main(argv: Optional[List[str]] = None, stdin: TextIO = sys.stdin, out: TextIO = sys.stdout) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        if args.log_level:
            set_log_level(args.log_level)
        if args.log_file:
            enable_file_logging(args.log_file)

        config = load_config(args.config) if args.config else AtomakerConfig()
        explicit_mode = (args.orbital_config is not None or args.calc_energies is not None
                         or args.print_constants or args.config is not None)
        config = _merge(args, config)
        if config.atom.Z < 1:
            raise ValueError(f"Proton count Z must be >= 1, got {config.atom.Z}")
        if config.relaxation.max_reseats < 1:
            raise ValueError(f"--max-reseats must be >= 1, got {config.relaxation.max_reseats}")
        if config.atom.electrons < 0 or config.atom.shell < 0:
            raise ValueError("Electron count and principal index must be >= 0")
        logger.info("Run '%s': mode=%s, Z=%d, precision=%s",
                    config.run_name, config.mode, config.atom.Z, config.precision.dtype)

        c, n_fields = build_constants(config)
        if n_fields < 7:
            print(f"Warning: only {n_fields} of 7 constants read from "
                  f"{config.precision.constants_file}", file=sys.stderr)

        if not explicit_mode:
            try:
                config.atom.electrons = get_input_int("\nNumber of electrons: ", stdin, out)
            except EOFError:
                print("\nNo electron count given.", file=sys.stderr)
                return 1

        if config.mode == "print_constants":
            save_constants(c, out)
            out.write("\n")
        elif config.mode == "calc_energies":
            run_calc_energies(config.atom.Z, config.atom.shell, c, out)
        else:
            result = run_orbital_config(
                config.atom.Z,
                config.atom.electrons,
                c,
                config.relaxation.max_reseats,
                out,
            )
            if config.output.save_json:
                save_json(get_json_path(config.run_name),
                          result_to_dict(config.run_name, result, c, config.precision.dtype))
            if config.output.plot:
                from plotter import plot_levels
                plot_levels(result.atom, c, get_plot_path(config.output.plot))
    except (FileNotFoundError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
