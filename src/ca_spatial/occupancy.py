from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Optional

import numpy as np

from .data import FractalDimensionSample, ResultSeries
from .history import SlidingHistoryBuffer
from .predicate import StatePredicate
from .sampler import CellGroup, as_cell_array
from .statistic import SpatialStatistic

logger = logging.getLogger(__name__)


def degenerate_dimension(matching: int, total: int) -> Optional[float]:
    """Shortcut dimension for an empty, single-point or (nearly) full set.

    Returns 2.0 when every cell, or all but one, matches; 0.0 when at most
    one cell matches; ``None`` otherwise.
    """
    if matching == total or matching == total - 1:
        return 2.0
    if matching in (0, 1):
        return 0.0
    return None


def box_counting_dimension(matching: int, total: int, num_rows: int, num_cols: int) -> float:
    """Single-scale box-counting dimension ``log(n) / log(1/s)``.

    Each cell is a box of side ``s = 1 / max(num_rows, num_cols)``, so ``n``
    occupied boxes give ``D = log(n) / log(max(num_rows, num_cols))``. This
    is one box size, not a regression over several.
    """
    shortcut = degenerate_dimension(matching, total)
    if shortcut is not None:
        return shortcut
    side = 1.0 / max(num_rows, num_cols)
    return math.log(matching) / math.log(1.0 / side)


class OccupancyCounter:
    """Running count of cells matching a predicate."""

    def __init__(self, predicate: StatePredicate):
        self.predicate = predicate
        self.count = 0

    def matches_in(self, cells: CellGroup) -> int:
        arr = as_cell_array(cells)
        return int(np.count_nonzero(self.predicate.mask(arr[:, 2])))

    def count_matching(self, cells: CellGroup) -> int:
        self.count = self.matches_in(cells)
        return self.count

    def add_row(self, row: CellGroup) -> None:
        self.count += self.matches_in(row)

    def remove_row(self, row: CellGroup) -> None:
        self.count -= self.matches_in(row)


@dataclass(frozen=True)
class BoxCountingResult:
    generation: int
    dimension: float
    matching_cells: int
    total_cells: int


class BoxCountingStatistic(SpatialStatistic):
    """Box-counting dimension of the matching cells, once per generation.

    On a one-dimensional lattice the count follows the sliding history
    window, adjusted by the appended and evicted rows only. A two-dimensional
    lattice can change anywhere between generations and is rescanned.
    """

    name = "box_counting"

    def __init__(self, lattice, config=None, edits=None):
        super().__init__(lattice, config, edits)
        self.counter = OccupancyCounter(self.predicate)
        self.buffer = (
            SlidingHistoryBuffer(self.sampler, lattice.num_rows) if lattice.is_one_dim else None
        )
        self.series: ResultSeries[FractalDimensionSample] = ResultSeries(self.config.max_samples)
        self._latest: Optional[BoxCountingResult] = None

    def current_result(self) -> Optional[BoxCountingResult]:
        with self.lock:
            return self._latest

    def _discard(self) -> None:
        self.counter = OccupancyCounter(self.predicate)
        if self.buffer is not None:
            self.buffer.reset()

    def _clear_results(self) -> None:
        self.series.clear()
        self._latest = None

    def _update(self, generation: int) -> None:
        if self.buffer is None:
            self.counter.count_matching(self.sampler.sample(generation))
            total = self.lattice.num_cells
        else:
            self._update_window(generation)
            total = self.buffer.total_cells
        matching = self.counter.count
        dimension = box_counting_dimension(
            matching, total, self.lattice.num_rows, self.lattice.num_cols
        )
        self._latest = BoxCountingResult(generation, dimension, matching, total)
        self.series.append(FractalDimensionSample(generation, dimension, 0.0, 1.0))
        logger.debug("box counting: generation %d, n=%d, D=%.3f", generation, matching, dimension)

    def _update_window(self, generation: int) -> None:
        buffer = self.buffer
        edited = False
        if len(buffer) and not self._rebuild_requested:
            edited = buffer.detect_external_edit()
            if edited:
                logger.info("box counting: lattice was edited; recounting the window.")
        if (
            not len(buffer)
            or self._rebuild_requested
            or edited
            or buffer.newest_generation != generation - 1
        ):
            buffer.fill(generation)
            self.counter.count_matching(buffer.cells())
            return
        if buffer.is_full:
            self.counter.remove_row(buffer.oldest_row())
        buffer.append_newest_row(generation)
        self.counter.add_row(buffer.newest_row())


@dataclass(frozen=True)
class PercentOccupiedResult:
    generation: int
    matching_cells: int
    total_cells: int

    @property
    def fraction(self) -> float:
        return self.matching_cells / self.total_cells if self.total_cells else 0.0


class PercentOccupiedStatistic(SpatialStatistic):
    """Number and fraction of matching cells in the current generation.

    Only the newest generation counts: the whole grid in 2-D, the newest row
    in 1-D.
    """

    name = "percent_occupied"

    def __init__(self, lattice, config=None, edits=None):
        super().__init__(lattice, config, edits)
        self.counter = OccupancyCounter(self.predicate)
        self.series: ResultSeries[PercentOccupiedResult] = ResultSeries(self.config.max_samples)

    def current_result(self) -> Optional[PercentOccupiedResult]:
        with self.lock:
            return self.series.latest

    def _discard(self) -> None:
        self.counter = OccupancyCounter(self.predicate)

    def _clear_results(self) -> None:
        self.series.clear()

    def _update(self, generation: int) -> None:
        if self.lattice.is_one_dim:
            cells = self.sampler.sample_row(generation)
        else:
            cells = self.sampler.sample(generation)
        matching = self.counter.count_matching(cells)
        self.series.append(PercentOccupiedResult(generation, matching, len(cells)))
