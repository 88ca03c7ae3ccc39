#!/usr/bin/env python
"""
test_orbitals.py
================

Checks of the single-electron state model:
1. Enumeration: validity, ordering, successor/predecessor inverse
2. Shielding table
3. Scan stop rule (ShellScanBound) against the enumerator
4. Energy formulas and precision handling

Run:
    python test_orbitals.py
    pytest test_orbitals.py
"""

import itertools

import numpy as np
import pytest

from constants import PhysicalConstants
from orbitals import (
    FIRST_STATE,
    OrbitalGroup,
    QuantumState,
    ShellScanBound,
    iter_states,
    shell_states,
)


# --- Enumeration ---

def test_enumerated_states_are_valid():
    for state in itertools.islice(iter_states(), 1000):
        assert state.valid(), f"Invalid state enumerated: {state}"
        assert 0 <= state.l <= state.n
        assert abs(state.m_l) <= state.l


def test_enumeration_visits_every_state_once_in_order():
    n_bound = 5
    expected = sorted(
        QuantumState(n, l, m_l, s)
        for n in range(n_bound)
        for l in range(n + 1)
        for m_l in range(-l, l + 1)
        for s in (False, True)
    )
    visited = list(itertools.takewhile(lambda st: st.n < n_bound, iter_states()))

    assert visited == expected
    assert len(visited) == sum(2 * (n + 1) ** 2 for n in range(n_bound))
    for a, b in zip(visited, visited[1:]):
        assert a < b


def test_successor_then_predecessor_is_identity():
    for state in itertools.islice(iter_states(), 1, 500):
        assert state.successor().predecessor() == state
        assert state.predecessor().successor() == state


def test_first_state_has_no_predecessor():
    assert FIRST_STATE == QuantumState(0, 0, 0, False)
    with pytest.raises(ValueError):
        FIRST_STATE.predecessor()


def test_successor_steps():
    assert QuantumState(0, 0, 0, False).successor() == QuantumState(0, 0, 0, True)
    assert QuantumState(0, 0, 0, True).successor() == QuantumState(1, 0, 0, False)
    assert QuantumState(1, 0, 0, True).successor() == QuantumState(1, 1, -1, False)
    assert QuantumState(1, 1, -1, True).successor() == QuantumState(1, 1, 0, False)
    assert QuantumState(2, 2, 2, True).successor() == QuantumState(3, 0, 0, False)


def test_shell_states():
    for n in range(4):
        states = list(shell_states(n))
        assert len(states) == 2 * (n + 1) ** 2
        assert states[0] == QuantumState(n, 0, 0, False)
        assert states[-1] == QuantumState(n, n, n, True)


def test_validity_predicate():
    assert QuantumState(2, 1, -1, True).valid()
    assert not QuantumState(1, 2, 0, False).valid()
    assert not QuantumState(2, 1, 2, False).valid()
    assert not QuantumState(-1, -1, 0, False).valid()
    with pytest.raises(ValueError):
        next(iter_states(QuantumState(1, 2, 0, False)))
    with pytest.raises(ValueError):
        list(shell_states(-1))


# --- Grouping ---

def test_group_limits():
    orb = QuantumState(2, 1, 0, True)
    assert orb.lower_limit(OrbitalGroup.SHELL) == QuantumState(2, 0, 0, False)
    assert orb.upper_limit(OrbitalGroup.SHELL) == QuantumState(2, 2, 2, True)
    assert orb.lower_limit(OrbitalGroup.SUBSHELL) == QuantumState(2, 1, -1, False)
    assert orb.upper_limit(OrbitalGroup.SUBSHELL) == QuantumState(2, 1, 1, True)
    assert orb.lower_limit(OrbitalGroup.PAIR) == QuantumState(2, 1, 0, False)
    assert orb.upper_limit(OrbitalGroup.PAIR) == QuantumState(2, 1, 0, True)
    assert orb.lower_limit(OrbitalGroup.INDIVIDUAL) == orb


def test_same_group():
    a = QuantumState(2, 1, 0, True)
    assert a.same_group(QuantumState(2, 2, 1, False), OrbitalGroup.SHELL)
    assert not a.same_group(QuantumState(2, 2, 1, False), OrbitalGroup.SUBSHELL)
    assert a.same_group(QuantumState(2, 1, -1, False), OrbitalGroup.SUBSHELL)
    assert a.same_group(QuantumState(2, 1, 0, False), OrbitalGroup.PAIR)
    assert not a.same_group(QuantumState(2, 1, 0, False), OrbitalGroup.INDIVIDUAL)
    assert a.same_group(QuantumState(2, 1, 0, True), OrbitalGroup.INDIVIDUAL)


# --- Shielding ---

def test_shielding_table():
    s1 = QuantumState(0, 0, 0, False)
    s1_up = QuantumState(0, 0, 0, True)
    s2 = QuantumState(1, 0, 0, False)
    p2 = QuantumState(1, 1, 0, False)
    s3 = QuantumState(2, 0, 0, False)
    p3 = QuantumState(2, 1, 1, True)
    d3 = QuantumState(2, 2, 0, False)

    assert s1.S_i(s1) == 0.0            # no self shielding
    assert s1.S_i(s2) == 0.0            # outer electrons do not shield
    assert s3.S_i(s1) == 1.0            # two shells inward
    assert s2.S_i(s1) == 0.85           # one shell inward, l <= 1
    assert p2.S_i(s1) == 0.85
    assert d3.S_i(s2) == 1.0            # one shell inward, l > 1
    assert s1.S_i(s1_up) == 0.35        # same subshell
    assert s2.S_i(p2) == 0.35           # p shields s of the same shell
    assert p3.S_i(d3) == 0.0            # higher subshell does not shield
    assert d3.S_i(p3) == 1.0            # lower subshell shields d fully
    assert p3.S_i(s3) == 0.35


def test_jph():
    assert QuantumState(0, 0, 0, False).jph() == 1
    assert QuantumState(0, 0, 0, True).jph() == 1
    assert QuantumState(1, 1, 0, False).jph() == 1
    assert QuantumState(1, 1, 0, True).jph() == 2
    assert QuantumState(2, 2, 0, True).jph() == 3


# --- Scan stop rule ---

def _scan_until_stop(hit_states):
    """Run the stop rule over the enumerator, recording hits at `hit_states`."""
    bound = ShellScanBound()
    for state in iter_states():
        if bound.exhausted(state):
            return state
        if state in hit_states:
            bound.record_hit()
    raise AssertionError("unreachable")


def test_scan_bound_without_hits_searches_first_shell_only():
    assert _scan_until_stop(set()) == QuantumState(1, 0, 0, False)


def test_scan_bound_runs_one_shell_past_last_hit():
    assert _scan_until_stop({QuantumState(0, 0, 0, True)}) == QuantumState(2, 0, 0, False)
    hits = {QuantumState(0, 0, 0, True), QuantumState(1, 1, 0, True)}
    assert _scan_until_stop(hits) == QuantumState(3, 0, 0, False)
    # a hit on the shell start itself counts for the shell it opens
    hits = {QuantumState(0, 0, 0, True), QuantumState(1, 0, 0, True), QuantumState(2, 0, 0, False)}
    assert _scan_until_stop(hits) == QuantumState(4, 0, 0, False)


def test_scan_bound_first_shell_hit_does_not_extend_without_second():
    # the pending initial hit is consumed by the first shell start
    assert _scan_until_stop({QuantumState(1, 1, 0, True)}) == QuantumState(1, 0, 0, False)


def test_scan_bound_gap_of_one_empty_shell_ends_scan():
    hits = {QuantumState(0, 0, 0, False), QuantumState(2, 0, 0, True)}
    # shell 1 has no hit, so the scan never reaches the hit in shell 2
    assert _scan_until_stop(hits) == QuantumState(2, 0, 0, False)


# --- Energies ---

def test_hydrogen_ground_state_energy_is_minus_rydberg():
    c = PhysicalConstants.si()
    orb = FIRST_STATE
    assert orb.E_n(c, 1) == pytest.approx(-c.R_y(), rel=1e-12)
    assert orb.E(c, 1, 0) == pytest.approx(-c.R_y(), rel=1e-4)


def test_principal_energy_scaling():
    c = PhysicalConstants(dtype=np.float64)
    e1 = QuantumState(0, 0, 0, False).E_n(c, 1)
    assert QuantumState(1, 0, 0, False).E_n(c, 1) == pytest.approx(e1 / 4)
    assert QuantumState(2, 1, 0, False).E_n(c, 3) == pytest.approx(e1)
    assert e1 < 0


def test_fine_structure_natural_units():
    c = PhysicalConstants(dtype=np.float64)   # alpha = 1
    assert QuantumState(0, 0, 0, False).dE_FS(c, 1) == pytest.approx(0.25)
    assert QuantumState(1, 1, 0, True).dE_FS(c, 1) == pytest.approx((0.5 - 0.375) / 2)
    assert QuantumState(1, 1, 0, False).dE_FS(c, 1) == QuantumState(1, 0, 0, False).dE_FS(c, 1)


def test_zeeman_term():
    c = PhysicalConstants(dtype=np.float64)
    assert QuantumState(1, 1, 1, False).dE_mag(c, 0) == 0
    up = QuantumState(1, 1, 1, False).dE_mag(c, 2.0)
    down = QuantumState(1, 1, -1, False).dE_mag(c, 2.0)
    assert up == pytest.approx(-down)
    assert up == pytest.approx(-c.h_bar * c.e * 2.0 / (2 * c.m_e))


def test_magnetic_field_vanishes_for_s_states():
    c = PhysicalConstants(dtype=np.float64)
    assert QuantumState(2, 0, 0, True).B(c, 3) == 0
    assert QuantumState(2, 1, 1, True).B(c, 3) > 0
    assert QuantumState(2, 1, 0, True).B(c, 3) == 0
    assert QuantumState(2, 1, -1, True).B(c, 3) < 0


def test_energy_follows_constants_precision():
    for dtype in (np.float32, np.float64, np.longdouble):
        c = PhysicalConstants(dtype=dtype)
        energy = QuantumState(1, 1, 0, True).E(c, 2.5, 0)
        assert isinstance(energy, dtype), f"{dtype.__name__}: got {type(energy)}"


def test_labels():
    assert QuantumState(0, 0, 0, False).subshell_label == "1s"
    assert QuantumState(2, 2, -1, True).subshell_label == "3d"
    assert QuantumState(0, 0, 0, True).spin_label == "1/2"
    assert QuantumState(0, 0, 0, False).to_dict() == {"n": 0, "l": 0, "m_l": 0, "s": "-1/2"}


if __name__ == "__main__":
    for name, func in sorted(globals().items()):
        if name.startswith("test_") and callable(func):
            print(f"--- {name} ---")
            func()
    print("ALL TESTS PASSED.")
