from __future__ import annotations

import threading
from collections import deque
from enum import Enum
from typing import Deque, List, Optional

from .sampler import CellSampler, SampledCell


class BufferState(Enum):
    EMPTY = "empty"
    FILLING = "filling"
    FULL = "full"


class SlidingHistoryBuffer:
    """Window over the most recent generations of a one-dimensional lattice.

    Holds up to ``max_rows`` sampled rows of ``width`` cells, oldest first.
    Appending the newest row evicts the oldest once the window is full, so a
    steady-state step costs O(width). Every mutation and every snapshot is
    taken under ``lock``.

    Parameters
    ----------
    sampler : CellSampler
        Sampler bound to the lattice being buffered.
    max_rows : int
        Window height; normally the lattice's history depth.
    """

    def __init__(self, sampler: CellSampler, max_rows: int) -> None:
        if max_rows <= 0:
            raise ValueError("History window must hold at least one row.")
        self.sampler = sampler
        self.max_rows = int(max_rows)
        self.width = sampler.lattice.num_cols
        self.lock = threading.RLock()
        self._rows: Deque[List[SampledCell]] = deque()
        self.newest_generation: Optional[int] = None

    def __len__(self) -> int:
        return len(self._rows)

    @property
    def state(self) -> BufferState:
        if not self._rows:
            return BufferState.EMPTY
        if len(self._rows) < self.max_rows:
            return BufferState.FILLING
        return BufferState.FULL

    @property
    def is_full(self) -> bool:
        return self.state is BufferState.FULL

    @property
    def total_cells(self) -> int:
        return len(self._rows) * self.width

    # -------------------------------------------------------------- snapshots
    def cells(self) -> List[SampledCell]:
        """Copy of every buffered cell, oldest row first."""
        with self.lock:
            return [cell for row in self._rows for cell in row]

    def rows(self) -> List[List[SampledCell]]:
        with self.lock:
            return [list(row) for row in self._rows]

    def oldest_row(self) -> List[SampledCell]:
        with self.lock:
            return list(self._rows[0])

    def newest_row(self) -> List[SampledCell]:
        with self.lock:
            return list(self._rows[-1])

    # -------------------------------------------------------------- mutations
    def fill(self, generation: int) -> None:
        """Replace the window with a fresh sample ending at ``generation``."""
        lattice = self.sampler.lattice
        depth = min(lattice.history_length(), self.max_rows, generation + 1)
        first = generation - depth + 1
        rows = [self.sampler.sample_row(g) for g in range(first, generation + 1)]
        with self.lock:
            self._rows = deque(rows)
            self.newest_generation = generation

    def append_newest_row(self, generation: int) -> Optional[List[SampledCell]]:
        """Sample ``generation`` and append it, returning the evicted row if any."""
        row = self.sampler.sample_row(generation)
        with self.lock:
            evicted = self._rows.popleft() if self.is_full else None
            self._rows.append(row)
            self.newest_generation = generation
            return evicted

    def evict_oldest_row(self) -> List[SampledCell]:
        with self.lock:
            return self._rows.popleft()

    def detect_external_edit(self) -> bool:
        """True when the newest buffered row no longer matches the lattice.

        Compares the row buffered at the previous ``analyze`` call against the
        lattice's current values for that same generation; a user drawing on
        the lattice edits the row just displayed. A row that has already left
        the lattice history cannot be checked and counts as edited.
        """
        with self.lock:
            if not self._rows:
                return False
            buffered = self._rows[-1]
            generation = self.newest_generation
        try:
            current = self.sampler.sample_row(generation)
        except IndexError:
            return True
        return any(old.value != new.value for old, new in zip(buffered, current))

    def reset(self) -> None:
        with self.lock:
            self._rows.clear()
            self.newest_generation = None
