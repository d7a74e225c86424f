from __future__ import annotations

import threading

import numpy as np

from .constants import PAIR_BLOCK_SIZE, PAIR_CHUNK_SIZE
from .errors import StaleSnapshotError
from .predicate import StatePredicate
from .sampler import CellGroup, as_cell_array


class PairDistanceHistogram:
    """Counts of matching-cell pairs indexed by squared distance.

    ``bins[d2]`` holds the number of unordered pairs of predicate-matching
    cells exactly ``sqrt(d2)`` apart. Squared distances keep every bin index
    integral and exact. After any sequence of :meth:`rebuild_full`,
    :meth:`add_row` and :meth:`remove_row` calls, ``bins.sum()`` equals
    ``C(matching_count, 2)``.

    Parameters
    ----------
    num_rows, num_cols : int
        Extent of the analysed window; fixes the largest squared distance.
    predicate : StatePredicate
        Selects the cells that take part in pairs.
    """

    def __init__(self, num_rows: int, num_cols: int, predicate: StatePredicate) -> None:
        if num_rows <= 0 or num_cols <= 0:
            raise ValueError("Histogram extent must be positive.")
        self.predicate = predicate
        self.max_distance_squared = (num_rows - 1) ** 2 + (num_cols - 1) ** 2
        self.bins = np.zeros(self.max_distance_squared + 1, dtype=np.int64)
        self.matching_count = 0
        self.lock = threading.RLock()

    # ---------------------------------------------------------------- helpers
    def _matching(self, cells: CellGroup) -> np.ndarray:
        arr = as_cell_array(cells)
        return arr[self.predicate.mask(arr[:, 2]), :2]

    def _bincount(self, d2: np.ndarray) -> np.ndarray:
        if d2.size and d2.max() > self.max_distance_squared:
            raise StaleSnapshotError(
                f"Squared distance {int(d2.max())} exceeds the histogram extent "
                f"{self.max_distance_squared}."
            )
        return np.bincount(d2, minlength=self.bins.size)

    def _cross_counts(self, a: np.ndarray, b: np.ndarray) -> np.ndarray:
        counts = np.zeros_like(self.bins)
        if len(a) == 0 or len(b) == 0:
            return counts
        step = max(1, PAIR_CHUNK_SIZE // len(b))
        for start in range(0, len(a), step):
            block = a[start:start + step]
            diff = block[:, None, :] - b[None, :, :]
            counts += self._bincount((diff ** 2).sum(axis=-1).ravel())
        return counts

    def _within_counts(self, a: np.ndarray) -> np.ndarray:
        counts = np.zeros_like(self.bins)
        for start in range(0, len(a), PAIR_BLOCK_SIZE):
            block = a[start:start + PAIR_BLOCK_SIZE]
            i, j = np.triu_indices(len(block), k=1)
            counts += self._bincount(((block[i] - block[j]) ** 2).sum(axis=1))
            counts += self._cross_counts(block, a[:start])
        return counts

    # -------------------------------------------------------------- mutations
    def rebuild_full(self, cells: CellGroup) -> None:
        """Recount every pair of matching cells from scratch. O(n^2)."""
        coords = self._matching(cells)
        counts = self._within_counts(coords)
        with self.lock:
            self.bins[:] = counts
            self.matching_count = len(coords)

    def add_row(self, new_row: CellGroup, existing_cells: CellGroup) -> None:
        """Add the pairs formed by ``new_row`` with ``existing_cells`` and itself.

        Each new cell is paired with every existing matching cell and with
        the new cells before it, so no pair is counted twice.
        """
        new = self._matching(new_row)
        old = self._matching(existing_cells)
        counts = self._cross_counts(new, old) + self._within_counts(new)
        with self.lock:
            self.bins += counts
            self.matching_count += len(new)

    def remove_row(self, old_row: CellGroup, remaining_cells: CellGroup) -> None:
        """Subtract every pair that includes a cell of ``old_row``.

        Must run while ``old_row`` still carries the coordinates it was added
        with, i.e. before it is evicted from its buffer.
        """
        old = self._matching(old_row)
        rest = self._matching(remaining_cells)
        counts = self._cross_counts(old, rest) + self._within_counts(old)
        with self.lock:
            if np.any(counts > self.bins) or len(old) > self.matching_count:
                raise StaleSnapshotError(
                    "Removed pairs were never added; the buffered cells are stale."
                )
            self.bins -= counts
            self.matching_count -= len(old)

    def reset(self) -> None:
        with self.lock:
            self.bins[:] = 0
            self.matching_count = 0

    # ---------------------------------------------------------------- readers
    def snapshot(self) -> np.ndarray:
        with self.lock:
            return self.bins.copy()

    def total_pairs(self) -> int:
        with self.lock:
            return int(self.bins.sum())

    def expected_pairs(self) -> int:
        n = self.matching_count
        return n * (n - 1) // 2

    def is_consistent(self) -> bool:
        with self.lock:
            return self.total_pairs() == self.expected_pairs()
