# constants_io.py
"""
Text Records of Physical Constants
==================================

Reads and writes the seven base constants of PhysicalConstants as a
plain-text record, one field per line in fixed order:

    m_e: 0.004185
    m_p: 7.684180
    m_n: 7.694771
    h_bar: 1.000000
    epsilon_0: 0.079577
    e: 1.000000
    c: 1.000000

Loading is positional and all-or-prefix: fields are read in order until
the first one that does not parse, every field read so far is assigned,
and the number of assigned fields is returned. A count below 7 marks a
malformed record; the remaining fields keep their previous values. Values
themselves are not validated.
"""

from __future__ import annotations
import re
from pathlib import Path
from typing import Optional, TextIO, Tuple, Union

from constants import BASE_FIELDS, PhysicalConstants
from logging_config import get_logger

logger = get_logger(__name__)

_NUMBER = r"[-+]?(?:\d+\.?\d*(?:[eE][-+]?\d+)?|\.\d+(?:[eE][-+]?\d+)?|(?i:inf(?:inity)?|nan))"
_FIELD_PATTERNS = {
    name: re.compile(r"\s*" + re.escape(name) + r":\s*(" + _NUMBER + r")")
    for name in BASE_FIELDS
}


def load_constants(c: PhysicalConstants, stream: TextIO) -> int:
    """
    Read a constants record from `stream` into `c`.

    Parameters
    ----------
    c : PhysicalConstants
        Instance to update in place.
    stream : text file object
        Source of the record.

    Returns
    -------
    int
        Number of fields assigned (0..7), counted from the start of the record.
    """
    text = stream.read()
    values = {}
    pos = 0
    for name in BASE_FIELDS:
        match = _FIELD_PATTERNS[name].match(text, pos)
        if match is None:
            break
        values[name] = match.group(1)
        pos = match.end()

    c.update(**values)
    if len(values) < len(BASE_FIELDS):
        logger.warning("Constants record incomplete: %d of %d fields read",
                       len(values), len(BASE_FIELDS))
    else:
        logger.debug("Constants record loaded: %s", c.as_dict())
    return len(values)


def save_constants(c: PhysicalConstants, stream: TextIO, digits: int = 6) -> int:
    """
    Write `c` as a constants record.

    Values are written in fixed-point notation with `digits` decimals.
    Returns the number of characters written.
    """
    record = "".join(
        f"\n{name}: {float(getattr(c, name)):.{digits}f}" for name in BASE_FIELDS
    )
    return stream.write(record)


def load_constants_file(
    path: Union[str, Path],
    c: Optional[PhysicalConstants] = None,
) -> Tuple[PhysicalConstants, int]:
    """
    Load a constants record from a file.

    Parameters
    ----------
    path : str or Path
        Record file.
    c : PhysicalConstants, optional
        Instance to update; a default-valued one is created when omitted.

    Returns
    -------
    (PhysicalConstants, int)
        The updated constants and the number of fields read.

    Raises
    ------
    FileNotFoundError
        If the file does not exist.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Constants file not found: {path}")

    if c is None:
        c = PhysicalConstants()

    logger.info("Loading constants from: %s", path)
    with open(path, "r", encoding="utf-8") as f:
        count = load_constants(c, f)
    return c, count
