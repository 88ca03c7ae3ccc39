# plotter.py
#
# Energy-level diagram of a computed electron configuration.
#
# Each occupied state is drawn as a short horizontal level at its energy,
# one column per subshell (1s, 2s, 2p, ...). Spin-up and spin-down
# electrons are marked with up/down triangles on the level.
#

import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt
import numpy as np

from logging_config import get_logger

logger = get_logger(__name__)

LEVEL_WIDTH = 0.8


def level_table(atom, c):
    """
    Rows (subshell label, m_l, spin, energy) for every occupant of `atom`.

    Energies are converted to Python floats for plotting.
    """
    return [
        (orb.subshell_label, orb.m_l, orb.s, float(atom.E_i(c, orb)))
        for orb in atom.orbitals
    ]


def plot_levels(atom, c, path, title=None):
    """
    Draw the level diagram of `atom` and save it to `path`.

    Returns the path written.
    """
    rows = level_table(atom, c)
    if not rows:
        logger.warning("Nothing to plot: atom has no electrons")
        return None

    columns = []
    for label, _, _, _ in rows:
        if label not in columns:
            columns.append(label)

    fig, ax = plt.subplots(figsize=(1.2 * len(columns) + 3, 5))

    for label, m_l, spin, energy in rows:
        x0 = columns.index(label)
        ax.hlines(energy, x0 - LEVEL_WIDTH / 2, x0 + LEVEL_WIDTH / 2, color="k", lw=1.5)
        # spread the magnetic sublevels across the level
        offset = 0.08 * m_l + (0.03 if spin else -0.03)
        ax.plot(x0 + offset, energy, marker="^" if spin else "v",
                color="tab:red" if spin else "tab:blue", ms=6, ls="none")

    energies = np.array([row[3] for row in rows])
    span = max(np.ptp(energies), abs(energies.max()) * 0.05, 1e-12)
    ax.set_ylim(energies.min() - 0.1 * span, energies.max() + 0.1 * span)

    ax.set_xticks(range(len(columns)))
    ax.set_xticklabels(columns)
    ax.set_xlim(-0.75, len(columns) - 0.25)
    ax.set_xlabel("Subshell")
    ax.set_ylabel("Energy")
    ax.set_title(title or f"Z = {atom.Z}, {len(atom)} electrons")
    ax.grid(axis="y", alpha=0.3)

    fig.tight_layout()
    fig.savefig(path, dpi=150)
    plt.close(fig)
    logger.info("Level diagram saved to: %s", path)
    return path
