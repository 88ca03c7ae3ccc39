# constants.py
"""
Physical and Numerical Constants for Electron Configuration Searches
=====================================================================

This module centralizes the physical constants every energy formula
depends on, plus the numerical defaults used by the placement engine.

Physics Constants
-----------------
PhysicalConstants holds seven configurable base constants (m_e, m_p, m_n,
h_bar, epsilon_0, e, c). Derived constants (Planck constant, Bohr radius,
magnetic constant, nuclear magneton, fine-structure constant, Rydberg
energy) are methods computed on demand, so they always agree with the
current base fields.

The default values are natural units in which h_bar = e = c = 1 and
4*pi*epsilon_0 = 1. `PhysicalConstants.si()` returns the CODATA SI set.

Precision
---------
Every instance carries a NumPy floating scalar type (`dtype`). Base fields
are stored in that type and all formulas evaluate in it, so one code path
serves single, double and extended precision.

Numerical Limits
----------------
- DEFAULT_MAX_RESEATS: iteration cap for the relax-to-fixed-point loop
"""

from __future__ import annotations
from dataclasses import dataclass, field, fields
from typing import Dict, Optional, Tuple, Type

import numpy as np
import scipy.constants as codata

# =============================================================================
# PRECISION
# =============================================================================

PRECISIONS: Dict[str, Type[np.floating]] = {
    "single": np.float32,
    "double": np.float64,
    "long": np.longdouble,
}
"""Named floating-point precisions accepted by the driver and config files."""

DEFAULT_PRECISION: str = "long"
"""Extended precision, matching the long double arithmetic of the CLI."""

_PI_TEXT = "3.14159265358979323846264338327950288"

# Order of the base fields in the textual constants record.
BASE_FIELDS: Tuple[str, ...] = ("m_e", "m_p", "m_n", "h_bar", "epsilon_0", "e", "c")

# =============================================================================
# NUMERICAL LIMITS
# =============================================================================

DEFAULT_MAX_RESEATS: int = 500
"""Maximum number of reseat moves per relaxation.

The fixed-point iteration has no internal bound; exceeding this cap is
reported as non-convergence and the configuration is kept as-is.
"""


def resolve_precision(name: str) -> Type[np.floating]:
    """
    Map a precision name ("single", "double", "long") to a NumPy scalar type.

    Raises
    ------
    ValueError
        If the name is not a known precision.
    """
    try:
        return PRECISIONS[name]
    except KeyError:
        raise ValueError(
            f"Unknown precision '{name}'. Must be one of: {', '.join(PRECISIONS)}"
        ) from None


@dataclass
class PhysicalConstants:
    """
    Base physical constants plus the derived quantities built from them.

    Attributes
    ----------
    m_e, m_p, m_n : float
        Electron, proton and neutron mass.
    h_bar : float
        Reduced Planck constant.
    epsilon_0 : float
        Vacuum permittivity (electric field constant).
    e : float
        Elementary charge.
    c : float
        Speed of light in vacuum.
    dtype : type
        NumPy floating scalar type all values are stored and computed in.

    Notes
    -----
    Values are not validated; non-physical signs propagate into every
    energy. Instances are only mutated by an explicit bulk load
    (see constants_io.load_constants) and are otherwise read-only for the
    duration of a computation.
    """
    m_e: float = 4.18493492472587e-3
    m_p: float = 7.68417979427673
    m_n: float = 7.69477146703062
    h_bar: float = 1.0
    epsilon_0: Optional[float] = None
    e: float = 1.0
    c: float = 1.0
    dtype: Type[np.floating] = field(default=np.longdouble, repr=False)

    def __post_init__(self):
        if self.epsilon_0 is None:
            # 4*pi*epsilon_0 = 1, evaluated in the working precision
            self.epsilon_0 = self.dtype("0.25") / self.pi
        for name in BASE_FIELDS:
            setattr(self, name, self.dtype(getattr(self, name)))

    @classmethod
    def si(cls, dtype: Type[np.floating] = np.float64) -> PhysicalConstants:
        """CODATA values in SI units, taken from scipy.constants."""
        return cls(
            m_e=codata.m_e,
            m_p=codata.m_p,
            m_n=codata.m_n,
            h_bar=codata.hbar,
            epsilon_0=codata.epsilon_0,
            e=codata.e,
            c=codata.c,
            dtype=dtype,
        )

    @classmethod
    def with_precision(cls, name: str) -> PhysicalConstants:
        """Default constants in the named precision."""
        return cls(dtype=resolve_precision(name))

    def as_dict(self) -> Dict[str, float]:
        """Base fields as a plain dict (Python floats) for serialization."""
        return {name: float(getattr(self, name)) for name in BASE_FIELDS}

    def update(self, **values) -> None:
        """Overwrite base fields in bulk, coercing them to `dtype`."""
        known = {f.name for f in fields(self)} - {"dtype"}
        for name, value in values.items():
            if name not in known:
                raise ValueError(f"Unknown constant '{name}'")
            setattr(self, name, self.dtype(value))

    # -------------------------------------------------------------------------
    # Derived constants
    # -------------------------------------------------------------------------

    @property
    def pi(self):
        return self.dtype(_PI_TEXT)

    def h(self):
        """Planck constant."""
        return 2 * self.pi * self.h_bar

    def a_B(self):
        """Bohr radius."""
        return 4 * self.pi * self.epsilon_0 * self.h_bar**2 / (self.m_e * self.e**2)

    def mu_0(self):
        """Magnetic field constant."""
        return 1 / (self.c**2 * self.epsilon_0)

    def mu_K(self):
        """Nuclear magneton."""
        return self.h_bar * self.e / (2 * self.m_p)

    def alpha(self):
        """Fine-structure constant."""
        return self.e**2 / (2 * self.c * self.epsilon_0 * self.h())

    def R_y(self):
        """Rydberg energy."""
        return (self.alpha() * self.c) ** 2 * self.m_e / 2
