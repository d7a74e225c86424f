from __future__ import annotations

import threading
from collections import deque
from typing import Deque, Dict, Iterator, Mapping, Optional, Sequence, Tuple

import numpy as np

from .constants import TWO_DIM_HISTORY
from .errors import UnsupportedStateError

NEIGHBORHOODS = ("moore", "von_neumann", "ring")


def _is_empty_state(state) -> bool:
    if state is None:
        return True
    if isinstance(state, (bool, int, float, np.number, np.bool_)):
        return state == 0
    return False


class ArrayLattice:
    """Numpy-backed lattice exposing cells, history and neighbor lists.

    Cells are identified by their flat index in enumeration order, which is
    stable across generations. A two-dimensional lattice stores whole grids
    per generation; a one-dimensional lattice stores one row per generation
    and keeps up to ``num_rows`` generations, so that its history can be read
    as a ``num_rows x num_cols`` space-time image.

    Parameters
    ----------
    initial : np.ndarray
        Generation 0. A 1-D array for one-dimensional lattices, 2-D otherwise.
        Integer or boolean dtypes are integer valued; float and object dtypes
        are not, and only distinguish empty from occupied cells.
    num_rows : int, optional
        History depth of a one-dimensional lattice. Ignored in 2-D.
    neighborhood : str, optional
        One of ``{"moore", "von_neumann", "ring"}``. ``"ring"`` connects each
        cell to the previous and next cell in enumeration order.
    adjacency : mapping, optional
        Explicit neighbor lists keyed by cell id; overrides ``neighborhood``
        for variable-degree lattices.
    wrap : bool, optional
        Periodic boundaries for the built-in neighborhoods. Default True.
    """

    def __init__(
        self,
        initial: np.ndarray,
        num_rows: Optional[int] = None,
        neighborhood: str = "moore",
        adjacency: Optional[Mapping[int, Sequence[int]]] = None,
        wrap: bool = True,
    ) -> None:
        initial = np.asarray(initial)
        if initial.ndim not in (1, 2) or initial.size == 0:
            raise ValueError("Initial state must be a non-empty 1-D or 2-D array.")
        if neighborhood not in NEIGHBORHOODS:
            raise ValueError(
                f"Unknown neighborhood '{neighborhood}'. Use one of {NEIGHBORHOODS}."
            )
        self.is_one_dim = initial.ndim == 1
        if self.is_one_dim:
            self.num_cols = int(initial.shape[0])
            self.num_rows = int(num_rows) if num_rows is not None else self.num_cols
            capacity = self.num_rows
        else:
            self.num_rows, self.num_cols = (int(n) for n in initial.shape)
            capacity = TWO_DIM_HISTORY
        if self.num_rows <= 0:
            raise ValueError("Lattice height must be a positive integer.")
        self.dtype = initial.dtype
        self._integer_valued = bool(
            np.issubdtype(initial.dtype, np.integer) or initial.dtype == np.bool_
        )
        self.neighborhood = neighborhood
        self.wrap = wrap
        self.lock = threading.RLock()
        self._history: Deque[np.ndarray] = deque(maxlen=capacity)
        self._adjacency: Optional[Dict[int, Tuple[int, ...]]] = None
        if adjacency is not None:
            self.set_adjacency(adjacency)
        self.generation = -1
        self.restart(initial)

    # ------------------------------------------------------------------ cells
    @property
    def num_cells(self) -> int:
        return self.num_cols if self.is_one_dim else self.num_rows * self.num_cols

    def cells(self) -> Iterator[int]:
        return iter(range(self.num_cells))

    def coordinates(self, cell: int) -> Tuple[int, int]:
        self._check_cell(cell)
        if self.is_one_dim:
            return 0, cell
        return divmod(cell, self.num_cols)

    def is_integer_valued(self) -> bool:
        return self._integer_valued

    # ---------------------------------------------------------------- history
    def history_length(self) -> int:
        return len(self._history)

    def oldest_generation(self) -> int:
        return self.generation - len(self._history) + 1

    def _frame(self, generation: Optional[int]) -> np.ndarray:
        if generation is None:
            generation = self.generation
        idx = generation - self.oldest_generation()
        if not 0 <= idx < len(self._history):
            raise IndexError(
                f"Generation {generation} is not in the lattice history "
                f"({self.oldest_generation()}..{self.generation})."
            )
        return self._history[idx]

    def state(self, cell: int, generation: Optional[int] = None):
        self._check_cell(cell)
        value = self._frame(generation).reshape(-1)[cell]
        return value.item() if isinstance(value, np.generic) else value

    def is_empty(self, cell: int, generation: Optional[int] = None) -> bool:
        return _is_empty_state(self.state(cell, generation))

    def int_value(self, cell: int, generation: Optional[int] = None) -> int:
        if not self._integer_valued:
            raise UnsupportedStateError("Lattice states are not integer valued.")
        state = self.state(cell, generation)
        try:
            return int(state)
        except (TypeError, ValueError) as exc:
            raise UnsupportedStateError(f"Cell {cell} holds a non-integer state {state!r}.") from exc

    def row(self, generation: Optional[int] = None) -> np.ndarray:
        if not self.is_one_dim:
            raise ValueError("Rows of history only exist on one-dimensional lattices.")
        with self.lock:
            return self._frame(generation).copy()

    def grid(self, generation: Optional[int] = None) -> np.ndarray:
        """Return the state image: the grid (2-D) or the stacked history (1-D)."""
        with self.lock:
            if not self.is_one_dim:
                return self._frame(generation).copy()
            return np.stack(list(self._history))

    # --------------------------------------------------------------- mutation
    def push(self, next_state: np.ndarray) -> int:
        """Append the next generation and return its index."""
        next_state = np.asarray(next_state, dtype=self.dtype)
        if next_state.shape != self._history[-1].shape:
            raise ValueError(
                f"Expected a state of shape {self._history[-1].shape}, got {next_state.shape}."
            )
        with self.lock:
            self._history.append(next_state.copy())
            self.generation += 1
            return self.generation

    def set_cell(self, cell: int, value, generation: Optional[int] = None) -> None:
        """Overwrite one cell in place, as a user drawing on the lattice would."""
        self._check_cell(cell)
        with self.lock:
            self._frame(generation).reshape(-1)[cell] = value

    def restart(self, initial: np.ndarray) -> None:
        initial = np.asarray(initial, dtype=self.dtype)
        with self.lock:
            self._history.clear()
            self._history.append(initial.copy())
            self.generation = 0

    # -------------------------------------------------------------- neighbors
    def set_adjacency(self, adjacency: Mapping[int, Sequence[int]]) -> None:
        table: Dict[int, Tuple[int, ...]] = {}
        for cell, neighbors in adjacency.items():
            self._check_cell(cell)
            for other in neighbors:
                self._check_cell(other)
            table[int(cell)] = tuple(int(n) for n in neighbors)
        self._adjacency = table

    def neighbors(self, cell: int) -> Tuple[int, ...]:
        self._check_cell(cell)
        if self._adjacency is not None:
            return self._adjacency.get(cell, ())
        if self.neighborhood == "ring" or self.is_one_dim:
            return self._ring_neighbors(cell)
        return self._square_neighbors(cell)

    def _ring_neighbors(self, cell: int) -> Tuple[int, ...]:
        n = self.num_cells
        out = []
        for other in (cell - 1, cell + 1):
            if self.wrap:
                other %= n
            if 0 <= other < n and other != cell and other not in out:
                out.append(other)
        return tuple(out)

    def _square_neighbors(self, cell: int) -> Tuple[int, ...]:
        row, col = divmod(cell, self.num_cols)
        if self.neighborhood == "moore":
            offsets = [(dr, dc) for dr in (-1, 0, 1) for dc in (-1, 0, 1) if dr or dc]
        else:
            offsets = [(-1, 0), (0, -1), (0, 1), (1, 0)]
        out = []
        for dr, dc in offsets:
            r, c = row + dr, col + dc
            if self.wrap:
                r %= self.num_rows
                c %= self.num_cols
            elif not (0 <= r < self.num_rows and 0 <= c < self.num_cols):
                continue
            other = r * self.num_cols + c
            if other != cell and other not in out:
                out.append(other)
        return tuple(out)

    def _check_cell(self, cell: int) -> None:
        if not 0 <= cell < self.num_cells:
            raise IndexError(f"Cell {cell} is outside the lattice (0..{self.num_cells - 1}).")
