# atoms.py
"""
Atom Placement and Relaxation Engine
====================================

Approximates the electron configuration of an atom by adding one electron
at a time to the lowest-energy free state and then relaxing individual
electrons until no single move lowers the total energy.

Model
-----
Each electron sees an effective nuclear charge

    Z_eff(orb) = Z - sum_{other occupants} orb.S_i(other)

and contributes orb.E(Z_eff, B) to the total energy. Electron-electron
repulsion is only represented through the empirical shielding table in
QuantumState.S_i.

Algorithm
---------
1. populate(): scan the state enumeration for the free state that gives
   the lowest total energy when a new electron is put there.
2. reseat(): visit occupants from the highest state down; the first one
   with a strictly better free state is moved and the move is returned.
3. Repeat reseat() until it returns the no-op pair (None, None).

The result is a local minimum only. Scans over the infinite enumeration
are bounded by orbitals.ShellScanBound.

Logging
-------
Uses logging_config. Set ATOMAKER_LOG_LEVEL=DEBUG to trace every move.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import AbstractSet, Dict, List, Optional, Set, Tuple

from constants import DEFAULT_MAX_RESEATS, PhysicalConstants
from orbitals import QuantumState, ShellScanBound, iter_states
from logging_config import get_logger

# Initialize module logger
logger = get_logger(__name__)

ReseatPair = Tuple[Optional[QuantumState], Optional[QuantumState]]


# =============================================================================
# PURE ENERGY EVALUATION
# =============================================================================

def shielding(
    orb: QuantumState,
    occupants: AbstractSet[QuantumState],
    exclude: Optional[QuantumState] = None,
    dtype=float,
):
    """Total charge shielded from `orb` by all occupants except `exclude`."""
    total = dtype(0)
    for other in sorted(occupants):
        if other != exclude:
            total += orb.S_i(other)
    return total


def magnetic_field(
    c: PhysicalConstants,
    Z: int,
    occupants: AbstractSet[QuantumState],
    exclude: Optional[QuantumState] = None,
):
    """Z component of the magnetic field produced by the occupants' orbital motion."""
    total = c.dtype(0)
    for orb in sorted(occupants):
        if orb != exclude:
            total += orb.B(c, Z - shielding(orb, occupants, exclude, c.dtype))
    return total


def state_energy(
    c: PhysicalConstants,
    Z: int,
    orb: QuantumState,
    occupants: AbstractSet[QuantumState],
    exclude: Optional[QuantumState] = None,
):
    """
    Energy of an electron in `orb` among `occupants`.

    `exclude` removes one occupant from the shielding sum. The field term
    is held at zero: magnetic_field(c, Z, occupants, exclude=orb) is not
    fed back, since dE_mag has no lower bound in m_l and the state scan
    would never settle.
    """
    B = c.dtype(0)
    return orb.E(c, Z - shielding(orb, occupants, exclude, c.dtype), B)


def total_energy(
    c: PhysicalConstants,
    Z: int,
    occupants: AbstractSet[QuantumState],
):
    """Sum of the individual energies of all occupants, visited in state order."""
    total = c.dtype(0)
    for orb in sorted(occupants):
        total += state_energy(c, Z, orb, occupants)
    return total


def swapped_energy(
    c: PhysicalConstants,
    Z: int,
    occupants: AbstractSet[QuantumState],
    remove: Optional[QuantumState],
    insert: QuantumState,
):
    """Total energy with `remove` taken out of `occupants` and `insert` added."""
    moved = set(occupants)
    moved.discard(remove)
    moved.add(insert)
    return total_energy(c, Z, moved)


# =============================================================================
# ATOM
# =============================================================================

class Atom:
    """
    A nucleus of charge Z and the set of states occupied by its electrons.

    No two occupants are equal (Pauli exclusion). The set only grows
    through populate() and only changes shape through reseat().
    """

    def __init__(self, Z: int):
        if int(Z) < 1:
            raise ValueError(f"Proton count Z must be >= 1, got {Z}")
        self._Z = int(Z)
        self._orbitals: Set[QuantumState] = set()

    @property
    def Z(self) -> int:
        return self._Z

    @property
    def orbitals(self) -> Tuple[QuantumState, ...]:
        """Occupied states in enumeration order."""
        return tuple(sorted(self._orbitals))

    def __len__(self) -> int:
        return len(self._orbitals)

    def __contains__(self, orb) -> bool:
        return orb in self._orbitals

    def __iter__(self):
        return iter(self.orbitals)

    def __repr__(self) -> str:
        return f"Atom(Z={self._Z}, electrons={len(self._orbitals)})"

    # -------------------------------------------------------------------------
    # Energies
    # -------------------------------------------------------------------------

    def S(self, orb: QuantumState, exclude: Optional[QuantumState] = None):
        """Total shielding of `orb`; `exclude` is left out of the sum."""
        return shielding(orb, self._orbitals, exclude)

    def B(self, c: PhysicalConstants, exclude: Optional[QuantumState] = None):
        """Total magnetic field in the Z direction. Not used by the energies."""
        return magnetic_field(c, self._Z, self._orbitals, exclude)

    def E_i(self, c: PhysicalConstants, orb: QuantumState, exclude: Optional[QuantumState] = None):
        """Energy level of `orb`; `exclude` does not take part in the shielding."""
        return state_energy(c, self._Z, orb, self._orbitals, exclude)

    def E(self, c: PhysicalConstants):
        """Total energy of all electrons."""
        return total_energy(c, self._Z, self._orbitals)

    # -------------------------------------------------------------------------
    # Placement
    # -------------------------------------------------------------------------

    def reseat_spot(self, c: PhysicalConstants, old: Optional[QuantumState] = None) -> Optional[QuantumState]:
        """
        Lowest-energy free state for the electron currently in `old`.

        Parameters
        ----------
        c : PhysicalConstants
            Natural constants.
        old : QuantumState or None
            Occupant to relocate, or None for an incoming electron.

        Returns
        -------
        QuantumState or None
            The best state found. `old` itself (None for a new electron)
            when nothing strictly lowers the total energy; ties keep the
            earliest state in enumeration order.
        """
        best = old
        best_energy = self.E(c)
        bound = ShellScanBound()
        scanned = 0
        for candidate in iter_states():
            if bound.exhausted(candidate):
                break
            scanned += 1
            if candidate in self._orbitals:
                # Pauli exclusion: the state is taken
                bound.record_hit()
                continue
            energy = swapped_energy(
                c, self._Z, self._orbitals, old, candidate
            )
            if best_energy > energy:
                bound.record_hit()
                best = candidate
                best_energy = energy
        logger.debug("reseat_spot(%s): scanned %d states -> %s", old, scanned, best)
        return best

    def populate(self, c: PhysicalConstants) -> Optional[QuantumState]:
        """
        Add one electron in the free state of lowest total energy.

        Returns the new state, or None if no state lowers the energy
        (the atom is left unchanged).
        """
        spot = self.reseat_spot(c, None)
        if spot is None:
            logger.info("Z=%d: electron %d rejected, no state lowers the energy",
                        self._Z, len(self._orbitals) + 1)
            return None
        self._orbitals.add(spot)
        logger.debug("Z=%d: electron %d placed in %s", self._Z, len(self._orbitals), spot)
        return spot

    def reseat(self, c: PhysicalConstants) -> ReseatPair:
        """
        One relaxation step.

        Visits occupants from the highest state down and moves the first
        one whose best spot differs from its current state.

        Returns
        -------
        (old, new)
            The move performed, or (None, None) if every occupant is
            already in its best spot.
        """
        for occupant in sorted(self._orbitals, reverse=True):
            spot = self.reseat_spot(c, occupant)
            if spot != occupant:
                self._orbitals.remove(occupant)
                self._orbitals.add(spot)
                logger.debug("Z=%d: reseated %s -> %s", self._Z, occupant, spot)
                return occupant, spot
        return None, None

    # -------------------------------------------------------------------------
    # Read-out
    # -------------------------------------------------------------------------

    def valence_orbitals(self) -> Set[QuantumState]:
        """Occupants in the outermost shell reached by their own subshell type l."""
        outermost: Dict[int, int] = {}
        for orb in self._orbitals:
            outermost[orb.l] = max(outermost.get(orb.l, orb.n), orb.n)
        return {orb for orb in self._orbitals if orb.n == outermost[orb.l]}

    def ionization_energy(self, c: PhysicalConstants, level: int = 1):
        """
        Energy needed to remove the `level` least bound electrons.

        Electrons are picked greedily by highest individual energy, all
        evaluated in the unchanged atom: shielding is not updated and the
        remaining electrons are not relaxed between removals.
        """
        count = max(0, min(int(level), len(self._orbitals)))
        energies = [self.E_i(c, orb) for orb in sorted(self._orbitals)]
        ranked = sorted(energies, reverse=True)
        total = c.dtype(0)
        for energy in ranked[:count]:
            total += energy
        return -total


# =============================================================================
# DRIVER LOOPS
# =============================================================================

@dataclass(frozen=True)
class ReseatMove:
    """One electron moved by reseat(), with its energy before and after."""
    old: QuantumState
    new: QuantumState
    old_energy: float
    new_energy: float

    @property
    def delta(self) -> float:
        return self.old_energy - self.new_energy


@dataclass
class RelaxationResult:
    moves: List[ReseatMove] = field(default_factory=list)
    converged: bool = True


def relax(atom: Atom, c: PhysicalConstants, max_steps: int = DEFAULT_MAX_RESEATS) -> RelaxationResult:
    """
    Call atom.reseat() until it reports no move, at most `max_steps` times.

    Hitting the cap is not an error: the result is returned with
    converged=False and a warning is logged.
    """
    result = RelaxationResult()
    for _ in range(max_steps):
        old, new = atom.reseat(c)
        if old == new:
            return result
        result.moves.append(ReseatMove(
            old=old,
            new=new,
            old_energy=atom.E_i(c, old, new),
            new_energy=atom.E_i(c, new),
        ))
    result.converged = False
    logger.warning("Z=%d: relaxation did not converge within %d reseats", atom.Z, max_steps)
    return result


@dataclass
class ConfigurationStep:
    """Outcome of adding one electron and relaxing the atom afterwards."""
    index: int
    placed: Optional[QuantumState]
    placed_energy: Optional[float] = None
    moves: List[ReseatMove] = field(default_factory=list)
    settled: Optional[QuantumState] = None
    settled_energy: Optional[float] = None
    converged: bool = True

    @property
    def rejected(self) -> bool:
        return self.placed is None

    def to_dict(self) -> dict:
        """JSON-friendly view (energies as Python floats)."""
        def _state(orb):
            return orb.to_dict() if orb is not None else None

        def _energy(value):
            return float(value) if value is not None else None

        return {
            "index": self.index,
            "placed": _state(self.placed),
            "placed_energy": _energy(self.placed_energy),
            "moves": [
                {
                    "old": _state(m.old),
                    "new": _state(m.new),
                    "old_energy": float(m.old_energy),
                    "new_energy": float(m.new_energy),
                }
                for m in self.moves
            ],
            "settled": _state(self.settled),
            "settled_energy": _energy(self.settled_energy),
            "converged": self.converged,
        }


@dataclass
class ConfigurationResult:
    atom: Atom
    steps: List[ConfigurationStep] = field(default_factory=list)

    @property
    def converged(self) -> bool:
        return all(step.converged for step in self.steps)

    @property
    def rejected(self) -> bool:
        return any(step.rejected for step in self.steps)


def build_configuration(
    Z: int,
    electrons: int,
    c: PhysicalConstants,
    max_reseats: int = DEFAULT_MAX_RESEATS,
) -> ConfigurationResult:
    """
    Populate `electrons` electrons one at a time, relaxing after each.

    Stops early at the first rejected electron; that step is recorded
    with placed=None.
    """
    atom = Atom(Z)
    result = ConfigurationResult(atom=atom)
    logger.info("Building configuration: Z=%d, %d electrons", atom.Z, electrons)

    for index in range(electrons):
        placed = atom.populate(c)
        if placed is None:
            result.steps.append(ConfigurationStep(index=index, placed=None))
            logger.warning("Electron %d was rejected; stopping", index)
            break

        step = ConfigurationStep(index=index, placed=placed, placed_energy=atom.E_i(c, placed))
        relaxation = relax(atom, c, max_reseats)
        settled = placed
        for move in relaxation.moves:
            if move.old == settled:
                settled = move.new
        step.moves = relaxation.moves
        step.settled = settled
        step.settled_energy = atom.E_i(c, settled)
        step.converged = relaxation.converged
        result.steps.append(step)

    logger.info("Configuration done: %d electrons placed, E_total=%.6g",
                len(atom), float(atom.E(c)))
    return result
