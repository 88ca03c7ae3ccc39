#!/usr/bin/env python
"""
test_constants.py
=================

Checks of PhysicalConstants and the constants text record:
1. Derived constants in natural and SI units
2. Precision handling
3. Record loading (complete, partial, empty) and writing

Run:
    python test_constants.py
    pytest test_constants.py
"""

import io
import math
import os
import tempfile

import numpy as np
import pytest
import scipy.constants as codata

from constants import BASE_FIELDS, PhysicalConstants, resolve_precision
from constants_io import load_constants, load_constants_file, save_constants


# --- Derived constants ---

def test_natural_unit_derived_constants():
    c = PhysicalConstants(dtype=np.float64)
    assert c.h() == pytest.approx(2 * math.pi)
    assert c.a_B() == pytest.approx(1 / c.m_e)
    assert c.mu_0() == pytest.approx(4 * math.pi)
    assert c.mu_K() == pytest.approx(1 / (2 * c.m_p))
    assert c.alpha() == pytest.approx(1.0)
    assert c.R_y() == pytest.approx(c.m_e / 2)


def test_si_derived_constants_match_codata():
    c = PhysicalConstants.si()
    assert c.alpha() == pytest.approx(codata.fine_structure, rel=1e-8)
    assert c.a_B() == pytest.approx(codata.physical_constants["Bohr radius"][0], rel=1e-8)
    assert c.R_y() == pytest.approx(
        codata.physical_constants["Rydberg constant times hc in J"][0], rel=1e-8)
    assert c.mu_0() == pytest.approx(codata.mu_0, rel=1e-8)
    assert c.mu_K() == pytest.approx(codata.physical_constants["nuclear magneton"][0], rel=1e-8)


def test_derived_constants_follow_base_fields():
    c = PhysicalConstants(dtype=np.float64)
    r_y = c.R_y()
    c.update(m_e=2 * c.m_e)
    assert c.R_y() == pytest.approx(2 * r_y)
    assert c.a_B() == pytest.approx(1 / c.m_e)


def test_update_rejects_unknown_fields():
    c = PhysicalConstants()
    with pytest.raises(ValueError):
        c.update(G=6.67e-11)


# --- Precision ---

def test_fields_are_stored_in_dtype():
    for name, dtype in (("single", np.float32), ("double", np.float64), ("long", np.longdouble)):
        c = PhysicalConstants.with_precision(name)
        assert c.dtype is dtype
        for field_name in BASE_FIELDS:
            assert isinstance(getattr(c, field_name), dtype)
        assert isinstance(c.R_y(), dtype)


def test_default_precision_is_extended():
    c = PhysicalConstants()
    assert c.dtype is np.longdouble
    assert c.epsilon_0 == pytest.approx(0.25 / math.pi)


def test_unknown_precision():
    with pytest.raises(ValueError):
        resolve_precision("quad")


# --- Text record ---

def test_save_then_load_record():
    source = PhysicalConstants.si(np.float64)
    buffer = io.StringIO()
    written = save_constants(source, buffer, digits=40)
    assert written == len(buffer.getvalue())
    assert buffer.getvalue().startswith("\nm_e: ")

    target = PhysicalConstants(dtype=np.float64)
    assert load_constants(target, io.StringIO(buffer.getvalue())) == 7
    for name in ("m_p", "m_n", "c"):
        assert getattr(target, name) == pytest.approx(getattr(source, name), rel=1e-12)


def test_default_record_text():
    buffer = io.StringIO()
    save_constants(PhysicalConstants(), buffer)
    lines = buffer.getvalue().split("\n")
    assert lines[0] == ""
    assert lines[1] == "m_e: 0.004185"
    assert lines[4] == "h_bar: 1.000000"
    assert lines[5] == "epsilon_0: 0.079577"


def test_partial_record_keeps_remaining_defaults():
    c = PhysicalConstants(dtype=np.float64)
    defaults = c.as_dict()
    record = "\nm_e: 1.5\nm_p: 2.5e3\nm_n: 3\nh_bar: oops\nepsilon_0: 9\n"

    assert load_constants(c, io.StringIO(record)) == 3
    assert c.m_e == 1.5
    assert c.m_p == 2500.0
    assert c.m_n == 3.0
    assert c.h_bar == defaults["h_bar"]
    assert c.epsilon_0 == defaults["epsilon_0"]


def test_empty_or_misordered_record():
    c = PhysicalConstants(dtype=np.float64)
    assert load_constants(c, io.StringIO("")) == 0
    assert load_constants(c, io.StringIO("m_p: 1.0\nm_e: 2.0")) == 0
    assert c.m_p == PhysicalConstants(dtype=np.float64).m_p


def test_record_values_are_not_validated():
    c = PhysicalConstants(dtype=np.float64)
    record = "m_e: -1\nm_p: 0\nm_n: 0\nh_bar: -2\nepsilon_0: 1e-3\ne: inf\nc: 1"
    assert load_constants(c, io.StringIO(record)) == 7
    assert c.m_e == -1.0
    assert np.isinf(c.e)


def test_load_constants_file():
    with tempfile.TemporaryDirectory() as tmp:
        path = os.path.join(tmp, "constants.txt")
        with open(path, "w", encoding="utf-8") as f:
            f.write("\nm_e: 0.5\nm_p: 900\nm_n: 901\nh_bar: 1\nepsilon_0: 0.1\ne: 1\nc: 137")
        c, count = load_constants_file(path)
        assert count == 7
        assert c.c == 137
        assert c.dtype is np.longdouble

        with pytest.raises(FileNotFoundError):
            load_constants_file(os.path.join(tmp, "missing.txt"))


if __name__ == "__main__":
    for name, func in sorted(globals().items()):
        if name.startswith("test_") and callable(func):
            print(f"--- {name} ---")
            func()
    print("ALL TESTS PASSED.")
