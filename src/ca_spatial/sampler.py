from __future__ import annotations

from typing import List, NamedTuple, Sequence, Union

import numpy as np

from .constants import EMPTY, OCCUPIED
from .errors import UnsupportedStateError


class SampledCell(NamedTuple):
    """Immutable snapshot of one cell: position and integer value."""

    row: int
    col: int
    value: int


#: Anything the distance and occupancy code accepts as a group of cells.
CellGroup = Union[Sequence[SampledCell], np.ndarray]


def as_cell_array(cells: CellGroup) -> np.ndarray:
    """Return ``cells`` as an ``(n, 3)`` int64 array of ``row, col, value``."""
    return np.asarray(cells, dtype=np.int64).reshape(-1, 3)


class CellSampler:
    """Read ``(row, col, value)`` snapshots out of a lattice.

    Whether the lattice is integer valued is decided once, at construction.
    On integer lattices a cell's value is its integer state; otherwise, and
    for any individual state that refuses integer conversion, empty cells
    read as ``EMPTY`` and occupied cells as ``OCCUPIED``.
    """

    def __init__(self, lattice) -> None:
        self.lattice = lattice
        self.integer_valued = bool(lattice.is_integer_valued())

    def value_of(self, cell: int, generation: int) -> int:
        if self.integer_valued:
            try:
                return self.lattice.int_value(cell, generation)
            except UnsupportedStateError:
                pass
        return EMPTY if self.lattice.is_empty(cell, generation) else OCCUPIED

    def sample(self, generation: int) -> List[SampledCell]:
        """Snapshot every cell of a two-dimensional lattice."""
        lattice = self.lattice
        return [
            SampledCell(*lattice.coordinates(cell), self.value_of(cell, generation))
            for cell in lattice.cells()
        ]

    def sample_row(self, generation: int) -> List[SampledCell]:
        """Snapshot one generation of a one-dimensional lattice.

        The generation number is used as the row coordinate, so rows taken at
        different generations keep their true spacing in the space-time image.
        """
        return [
            SampledCell(generation, col, self.value_of(cell, generation))
            for col, cell in enumerate(self.lattice.cells())
        ]
