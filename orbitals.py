# orbitals.py
"""
Single-Electron Quantum States
==============================

A QuantumState ("orbital") is one (n, l, m_l, s) tuple of a hydrogen-like
atom, i.e. a slot that can hold at most one electron.

Quantum Numbers
---------------
- n   : principal index, the principal quantum number minus one (n >= 0)
- l   : angular momentum number, 0 <= l <= n
- m_l : magnetic number, -l <= m_l <= l
- s   : spin flag, False = -1/2, True = +1/2

States are totally ordered by (n, l, m_l, s). `successor()` steps through
that order (spin first, then m_l, then l, then n), giving an infinite,
restartable enumeration of every valid state starting at FIRST_STATE.

Energy Model
------------
    E(Z, B) = E_n(Z) * (1 + dE_FS(Z)) + dE_mag(B)

with the Bohr energy E_n ~ -Z^2/(n+1)^2, a fine-structure factor that
depends on j+1/2 and n, and a Zeeman term linear in m_l and B.
Every formula takes the PhysicalConstants instance and evaluates in its
dtype.

"No state" is represented by None wherever a state is optional.
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Iterator

import numpy as np

from constants import PhysicalConstants

SPECTROSCOPIC_LETTERS = "spdfghiklmnoqrtuv"


class OrbitalGroup(Enum):
    """Granularity at which two states are considered to belong together."""
    SHELL = "shell"
    SUBSHELL = "subshell"
    PAIR = "pair"
    INDIVIDUAL = "individual"


@dataclass(frozen=True, order=True)
class QuantumState:
    """
    One single-electron state.

    Ordering and equality compare (n, l, m_l, s) lexicographically, which
    is exactly the enumeration order of `successor()`.
    """
    n: int = 0
    l: int = 0
    m_l: int = 0
    s: bool = False

    # -------------------------------------------------------------------------
    # Enumeration
    # -------------------------------------------------------------------------

    def valid(self) -> bool:
        """Whether this state actually exists."""
        return 0 <= self.l <= self.n and abs(self.m_l) <= self.l

    def starts_shell(self) -> bool:
        """True for the first state (l=0, spin down) of a principal shell."""
        return self.l == 0 and not self.s

    def successor(self) -> QuantumState:
        """Next state in enumeration order."""
        n, l, m_l, s = self.n, self.l, self.m_l, not self.s
        if not s:
            m_l += 1
            if abs(m_l) > l:
                l += 1
                if l > n:
                    l = 0
                    n += 1
                m_l = -l
        return QuantumState(n, l, m_l, s)

    def predecessor(self) -> QuantumState:
        """
        Previous state in enumeration order (exact inverse of successor).

        Raises
        ------
        ValueError
            For FIRST_STATE, which has no predecessor.
        """
        if self == FIRST_STATE:
            raise ValueError("The first state has no predecessor")
        n, l, m_l, s = self.n, self.l, self.m_l, not self.s
        if s:
            m_l -= 1
            if abs(m_l) > l:
                if l == 0:
                    n -= 1
                    l = n
                else:
                    l -= 1
                m_l = l
        return QuantumState(n, l, m_l, s)

    # -------------------------------------------------------------------------
    # Grouping
    # -------------------------------------------------------------------------

    def same_group(self, other: QuantumState, group: OrbitalGroup) -> bool:
        """Whether both states share the given shell/subshell/pair, or are identical."""
        if group is OrbitalGroup.INDIVIDUAL and self.s != other.s:
            return False
        if group in (OrbitalGroup.INDIVIDUAL, OrbitalGroup.PAIR) and self.m_l != other.m_l:
            return False
        if group is not OrbitalGroup.SHELL and self.l != other.l:
            return False
        return self.n == other.n

    def lower_limit(self, group: OrbitalGroup) -> QuantumState:
        """First state of this state's group."""
        if group is OrbitalGroup.PAIR:
            return QuantumState(self.n, self.l, self.m_l, False)
        if group is OrbitalGroup.SUBSHELL:
            return QuantumState(self.n, self.l, -self.l, False)
        if group is OrbitalGroup.SHELL:
            return QuantumState(self.n, 0, 0, False)
        return self

    def upper_limit(self, group: OrbitalGroup) -> QuantumState:
        """Last state of this state's group."""
        if group is OrbitalGroup.PAIR:
            return QuantumState(self.n, self.l, self.m_l, True)
        if group is OrbitalGroup.SUBSHELL:
            return QuantumState(self.n, self.l, self.l, True)
        if group is OrbitalGroup.SHELL:
            return QuantumState(self.n, self.n, self.n, True)
        return self

    # -------------------------------------------------------------------------
    # Shielding
    # -------------------------------------------------------------------------

    def jph(self) -> int:
        """Combined angular momentum number j + 1/2."""
        return self.l + (1 if self.s else 0) if self.l else 1

    def S_i(self, other: QuantumState) -> float:
        """
        Nuclear charge (in units of e) hidden from this state by an electron in `other`.

        Piecewise in the principal and angular numbers of both states:
        outer electrons do not shield, electrons two or more shells inward
        shield fully, one shell inward shields 0.85 (1 for l > 1), and
        electrons of the same shell shield 0.35 unless their subshell
        ordering says otherwise.
        """
        if self == other:
            return 0.0
        if self.n < other.n:
            return 0.0
        if other.n + 1 < self.n:
            return 1.0
        if other.n < self.n:
            return 1.0 if self.l > 1 else 0.85
        if other.l > self.l and (other.l != 1 or self.l != 0):
            return 0.0
        if self.l > 1 and self.l > other.l:
            return 1.0
        return 0.35

    # -------------------------------------------------------------------------
    # Magnetic field
    # -------------------------------------------------------------------------

    def L(self, c: PhysicalConstants):
        """Absolute angular momentum h_bar * sqrt(l(l+1))."""
        return c.h_bar * np.sqrt(c.dtype(self.l * (self.l + 1)))

    def inv_r3(self, c: PhysicalConstants, Z):
        """1/r^3 for the mean distance r between electron and nucleus."""
        Z = c.dtype(Z)
        l = c.dtype(self.l)
        return (Z / (c.a_B() * (self.n + 1))) ** 3 / (l * (l + c.dtype(0.5)) * (l + 1))

    def B(self, c: PhysicalConstants, Z):
        """Magnetic field in the Z direction induced by an electron in this state."""
        if not self.l:
            return c.dtype(0)
        return c.mu_0() * c.e * self.L(c) * self.m_l * self.inv_r3(c, Z) / (4 * c.pi * c.m_e)

    # -------------------------------------------------------------------------
    # Energies
    # -------------------------------------------------------------------------

    def E_n(self, c: PhysicalConstants, Z):
        """Principal (Bohr) energy level for nuclear charge Z."""
        Z = c.dtype(Z)
        return -(c.m_e * c.e**4 * Z**2) / (2 * ((self.n + 1) * c.h() * 2 * c.epsilon_0) ** 2)

    def dE_FS(self, c: PhysicalConstants, Z):
        """Relative energy change caused by fine structure splitting."""
        Z = c.dtype(Z)
        one = c.dtype(1)
        return (one / self.jph() - 3 * one / (4 * self.n + 4)) * (Z * c.alpha()) ** 2 / (self.n + 1)

    def dE_mag(self, c: PhysicalConstants, B):
        """Energy change caused by the Zeeman effect in an external field B."""
        return -c.h_bar * c.e * self.m_l * c.dtype(B) / (2 * c.m_e)

    def E(self, c: PhysicalConstants, Z, B=0):
        """Total energy of this state for effective nuclear charge Z and field B."""
        return self.E_n(c, Z) * (1 + self.dE_FS(c, Z)) + self.dE_mag(c, B)

    # -------------------------------------------------------------------------
    # Presentation
    # -------------------------------------------------------------------------

    @property
    def spin_label(self) -> str:
        return "1/2" if self.s else "-1/2"

    @property
    def subshell_label(self) -> str:
        """Spectroscopic subshell name, e.g. '1s' or '3d'."""
        if self.l < len(SPECTROSCOPIC_LETTERS):
            letter = SPECTROSCOPIC_LETTERS[self.l]
        else:
            letter = f"[l={self.l}]"
        return f"{self.n + 1}{letter}"

    def __str__(self) -> str:
        return f"{self.subshell_label}(m_l={self.m_l}, s={self.spin_label})"

    def to_dict(self) -> dict:
        return {"n": self.n, "l": self.l, "m_l": self.m_l, "s": self.spin_label}


FIRST_STATE = QuantumState(0, 0, 0, False)
"""Lowest state in enumeration order."""


def iter_states(start: QuantumState = FIRST_STATE) -> Iterator[QuantumState]:
    """Infinite stream of states in enumeration order, starting at `start`."""
    if not start.valid():
        raise ValueError(f"Cannot enumerate from invalid state {start!r}")
    state = start
    while True:
        yield state
        state = state.successor()


def shell_states(n: int) -> Iterator[QuantumState]:
    """All states of principal index n, in enumeration order."""
    for state in iter_states(QuantumState(n, 0, 0, False)):
        if state.n != n:
            return
        yield state


class ShellScanBound:
    """
    Stop rule for scans over the infinite state enumeration.

    The scan records a "hit" whenever a candidate is Pauli-blocked or
    improves on the best energy so far. Every shell start (l=0, spin down)
    consumes the pending hit; reaching a shell start with no hit since the
    previous one ends the scan. A scan therefore runs one full shell past
    the last region where anything happened.

    The scan starts with a pending hit, so the very first shell is always
    searched.
    """

    def __init__(self):
        self.hit = True

    def record_hit(self) -> None:
        self.hit = True

    def exhausted(self, state: QuantumState) -> bool:
        """Feed the next scanned state; True means stop before evaluating it."""
        if not state.starts_shell():
            return False
        if self.hit:
            self.hit = False
            return False
        return True
