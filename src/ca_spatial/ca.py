from __future__ import annotations

from typing import Callable, Iterable, List, Optional

import numpy as np
from scipy.signal import convolve2d

from .constants import EMPTY, OCCUPIED
from .lattice import ArrayLattice
from .statistic import SpatialStatistic

#: Moore-neighborhood kernel without self-coupling.
LIFE_KERNEL = np.array([[1, 1, 1], [1, 0, 1], [1, 1, 1]], dtype=np.int32)


def elementary_step(row: np.ndarray, rule_number: int, wrap: bool = True) -> np.ndarray:
    """Advance a binary row by one step of a Wolfram elementary rule.

    Parameters
    ----------
    row : np.ndarray
        1-D integer row; non-zero cells are occupied.
    rule_number : int
        Rule in Wolfram numbering, 0..255.
    wrap : bool, optional
        Periodic boundary; otherwise cells beyond the edge are empty.

    Returns
    -------
    np.ndarray
        The next row, same dtype as ``row``.
    """
    if not 0 <= rule_number <= 255:
        raise ValueError("Elementary rule numbers lie in 0..255.")
    alive = (np.asarray(row) != EMPTY).astype(np.int64)
    if wrap:
        left, right = np.roll(alive, 1), np.roll(alive, -1)
    else:
        left = np.concatenate(([0], alive[:-1]))
        right = np.concatenate((alive[1:], [0]))
    table = (rule_number >> np.arange(8)) & 1
    return table[(left << 2) | (alive << 1) | right].astype(np.asarray(row).dtype)


def life_step(grid: np.ndarray, wrap: bool = True) -> np.ndarray:
    """Advance a grid by one step of Conway's Life (B3/S23)."""
    alive = (np.asarray(grid) != EMPTY).astype(np.int32)
    neighbors = convolve2d(
        alive, LIFE_KERNEL, mode="same", boundary="wrap" if wrap else "fill"
    )
    born = (alive == 0) & (neighbors == 3)
    survives = (alive == 1) & ((neighbors == 2) | (neighbors == 3))
    return np.where(born | survives, OCCUPIED, EMPTY).astype(np.asarray(grid).dtype)


def make_rule(rule: str) -> Callable[[np.ndarray], np.ndarray]:
    """Return the step function for ``"life"`` or an elementary rule number."""
    if rule == "life":
        return life_step
    try:
        number = int(rule)
    except ValueError:
        raise ValueError(f"Unknown rule '{rule}'. Use 'life' or 0..255.") from None
    return lambda row: elementary_step(row, number)


class CellularAutomaton:
    """Steps a rule on a lattice and drives the attached statistics."""

    def __init__(
        self,
        lattice: ArrayLattice,
        rule: Callable[[np.ndarray], np.ndarray],
        statistics: Optional[Iterable[SpatialStatistic]] = None,
    ) -> None:
        self.lattice = lattice
        self.rule = rule
        self.statistics: List[SpatialStatistic] = list(statistics or ())

    def current_state(self) -> np.ndarray:
        if self.lattice.is_one_dim:
            return self.lattice.row()
        return self.lattice.grid()

    def analyze(self) -> None:
        """Run every statistic on the newest generation."""
        generation = self.lattice.generation
        for statistic in self.statistics:
            statistic.analyze(generation)

    def step(self) -> int:
        """Advance one generation, analyse it, and return its index."""
        generation = self.lattice.push(self.rule(self.current_state()))
        self.analyze()
        return generation

    def draw(self, cell: int, value, generation: Optional[int] = None) -> None:
        """Edit one cell and tell every statistic about it."""
        self.lattice.set_cell(cell, value, generation)
        for statistic in self.statistics:
            statistic.edits.drawn(cell)

    def restart(self, initial: np.ndarray) -> None:
        self.lattice.restart(initial)
        for statistic in self.statistics:
            statistic.reset()
