from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

import numpy as np

from .data import ResultSeries
from .predicate import StatePredicate
from .sampler import CellSampler
from .statistic import SpatialStatistic

logger = logging.getLogger(__name__)


def neighborhood_sizes(
    sampler: CellSampler, generation: int, predicate: StatePredicate
) -> Dict[int, int]:
    """Map every matching cell to its current number of neighbors.

    Rebuilt from scratch on each call: on variable-topology lattices the
    neighbor lists can change arbitrarily between generations.
    """
    lattice = sampler.lattice
    sizes = {}
    for cell in lattice.cells():
        value = sampler.value_of(cell, generation)
        if predicate.matches(value, lattice.is_empty(cell, generation)):
            sizes[cell] = len(lattice.neighbors(cell))
    return sizes


def neighborhood_size_histogram(
    sampler: CellSampler, generation: int, predicate: StatePredicate
) -> np.ndarray:
    """Number of matching cells with each neighborhood size.

    Index ``s`` of the returned array counts the matching cells with ``s``
    neighbors; the array has one entry past the largest size observed, and
    is ``[0]`` when no cell matches.
    """
    sizes = neighborhood_sizes(sampler, generation, predicate)
    return np.bincount(np.fromiter(sizes.values(), dtype=np.int64, count=len(sizes)), minlength=1)


@dataclass(frozen=True)
class TopKSelection:
    generation: int
    cells: Tuple[int, ...]
    sizes: Tuple[int, ...]
    highlighted: Tuple[int, ...]


def select_top_k(
    sampler: CellSampler,
    generation: int,
    predicate: StatePredicate,
    k: int,
    include_neighbors: bool = False,
) -> TopKSelection:
    """Pick the ``k`` matching cells with the most neighbors.

    Cells are sorted by neighborhood size with a stable sort and the last
    ``k`` are taken, so among equal sizes the cells enumerated last win.
    With ``include_neighbors`` the highlighted set also holds every neighbor
    of a selected cell, without duplicates.
    """
    if k < 1:
        raise ValueError("k must be at least 1.")
    lattice = sampler.lattice
    pairs = list(neighborhood_sizes(sampler, generation, predicate).items())
    ranked = sorted(pairs, key=lambda pair: pair[1])[-k:]
    cells = tuple(cell for cell, _ in ranked)
    sizes = tuple(size for _, size in ranked)
    highlighted: List[int] = list(cells)
    if include_neighbors:
        for cell in cells:
            highlighted.extend(lattice.neighbors(cell))
    return TopKSelection(generation, cells, sizes, tuple(dict.fromkeys(highlighted)))


@dataclass(frozen=True)
class NeighborhoodSizeResult:
    generation: int
    histogram: np.ndarray

    @property
    def counts(self) -> Dict[int, int]:
        """Non-zero bins as ``{size: count}``."""
        return {size: int(n) for size, n in enumerate(self.histogram) if n}

    @property
    def matching_cells(self) -> int:
        return int(self.histogram.sum())

    def points(self, include_zero: bool = False) -> List[Tuple[int, int]]:
        return [
            (size, int(n)) for size, n in enumerate(self.histogram) if include_zero or n
        ]

    def log_points(self) -> List[Tuple[float, float]]:
        """``(log(size + 1), log(count))`` for every non-empty bin."""
        return [
            (math.log(size + 1), math.log(n)) for size, n in enumerate(self.histogram) if n
        ]


class NeighborhoodSizeStatistic(SpatialStatistic):
    """Distribution of neighborhood sizes among the matching cells."""

    name = "neighborhood_size"

    def __init__(self, lattice, config=None, edits=None):
        super().__init__(lattice, config, edits)
        self.series: ResultSeries[NeighborhoodSizeResult] = ResultSeries(self.config.max_samples)
        self._latest: Optional[NeighborhoodSizeResult] = None

    def current_result(self) -> Optional[NeighborhoodSizeResult]:
        with self.lock:
            return self._latest

    def points(self) -> List[Tuple[int, int]]:
        result = self.current_result()
        if result is None:
            return []
        return result.points(include_zero=self.config.plot_zero_bins)

    def _discard(self) -> None:
        pass

    def _clear_results(self) -> None:
        self.series.clear()
        self._latest = None

    def _update(self, generation: int) -> None:
        histogram = neighborhood_size_histogram(self.sampler, generation, self.predicate)
        self._latest = NeighborhoodSizeResult(generation, histogram)
        self.series.append(self._latest)
        logger.debug("neighborhood sizes: generation %d, %s", generation, self._latest.counts)


class LargestNeighborhoodStatistic(SpatialStatistic):
    """The ``top_k`` matching cells with the largest neighborhoods."""

    name = "largest_neighborhood"

    def __init__(self, lattice, config=None, edits=None):
        super().__init__(lattice, config, edits)
        self.max_top_k = min(self.config.max_top_k, lattice.num_cells)
        self.top_k = min(self.config.top_k, self.max_top_k)
        self.include_neighbors = self.config.include_neighbors
        self._latest: Optional[TopKSelection] = None

    def current_result(self) -> Optional[TopKSelection]:
        with self.lock:
            return self._latest

    def set_top_k(self, k: int) -> None:
        if not 1 <= k <= self.max_top_k:
            raise ValueError(f"k must lie in [1, {self.max_top_k}].")
        with self.lock:
            self.top_k = k

    def set_include_neighbors(self, include: bool) -> None:
        with self.lock:
            self.include_neighbors = bool(include)

    def _discard(self) -> None:
        pass

    def _clear_results(self) -> None:
        self._latest = None

    def _update(self, generation: int) -> None:
        self._latest = select_top_k(
            self.sampler, generation, self.predicate, self.top_k, self.include_neighbors
        )
        logger.debug(
            "largest neighborhoods: generation %d, sizes %s", generation, self._latest.sizes
        )
