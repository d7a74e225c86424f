from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import List, NamedTuple, Optional, Sequence, Tuple

import numpy as np
from scipy.stats import linregress

from .constants import FIRST_RADIUS_SQUARED, MIN_FIT_POINTS, TAIL_TRIM_FRACTION
from .data import FractalDimensionSample, ResultSeries
from .histogram import PairDistanceHistogram
from .history import SlidingHistoryBuffer
from .occupancy import degenerate_dimension
from .sampler import as_cell_array
from .statistic import SpatialStatistic

logger = logging.getLogger(__name__)


class CorrelationPoint(NamedTuple):
    log_radius: float
    log_count: float


class LinearFit(NamedTuple):
    slope: float
    intercept: float
    std_err: float
    r_squared: float


def build_correlation_function(bins: np.ndarray) -> List[CorrelationPoint]:
    """Sample the correlation function C(r) of a squared-distance histogram.

    Radii squared start at ``FIRST_RADIUS_SQUARED`` and double up to the
    largest bin. ``C`` counts the pairs with ``0 < d^2 < r^2``. Each point is
    ``(log(r^2) / 2, log C)``, i.e. ``(log r, log C)``; radii with no pairs
    are skipped.
    """
    bins = np.asarray(bins, dtype=np.int64)
    max_distance_squared = bins.size - 1
    cumulative = np.cumsum(bins)
    points = []
    radius_squared = FIRST_RADIUS_SQUARED
    while radius_squared <= max_distance_squared:
        count = int(cumulative[radius_squared - 1] - bins[0])
        if count > 0:
            points.append(CorrelationPoint(math.log(radius_squared) / 2.0, math.log(count)))
        radius_squared *= 2
    return points


def trim_tail(
    points: Sequence[CorrelationPoint],
    fraction: float = TAIL_TRIM_FRACTION,
    min_points: int = MIN_FIT_POINTS,
) -> List[CorrelationPoint]:
    """Drop the largest-radius ``fraction`` of points, keeping at least ``min_points``."""
    kept = list(points)
    for _ in range(int(len(kept) * fraction)):
        if len(kept) <= min_points:
            break
        kept.pop()
    return kept


def fit_line(points: Sequence[CorrelationPoint]) -> LinearFit:
    """Least-squares line through ``points``; slope is the dimension.

    With fewer than two points there is no line and everything is zero.
    """
    if len(points) < 2:
        return LinearFit(0.0, 0.0, 0.0, 0.0)
    x = np.array([p.log_radius for p in points])
    y = np.array([p.log_count for p in points])
    res = linregress(x, y)
    return LinearFit(
        float(res.slope), float(res.intercept), float(res.stderr), float(res.rvalue ** 2)
    )


@dataclass(frozen=True)
class CorrelationResult:
    generation: int
    dimension: float
    std_err: float
    r_squared: float
    intercept: float
    matching_cells: int
    total_cells: int
    low_confidence: bool
    correlation_function: Tuple[CorrelationPoint, ...]


class CorrelationDimensionStatistic(SpatialStatistic):
    """Correlation dimension from an incrementally maintained distance histogram.

    One-dimensional lattices are analysed over the sliding history window:
    each generation removes the pairs of the evicted row and adds the pairs
    of the new one. Two-dimensional lattices compare the new snapshot with
    the previous one and move only the cells that entered or left the set.
    A detected or notified edit, a predicate change, or a gap in generations
    rebuilds the histogram from a full sample, which is O(n^2).

    Estimates from fewer cells than the Tsonis criterion are still produced
    and flagged ``low_confidence``.
    """

    name = "correlation_dimension"

    def __init__(self, lattice, config=None, edits=None):
        super().__init__(lattice, config, edits)
        self.buffer = (
            SlidingHistoryBuffer(self.sampler, lattice.num_rows) if lattice.is_one_dim else None
        )
        self.series: ResultSeries[FractalDimensionSample] = ResultSeries(self.config.max_samples)
        self._latest: Optional[CorrelationResult] = None
        self._discard()

    def current_result(self) -> Optional[CorrelationResult]:
        with self.lock:
            return self._latest

    def histogram_snapshot(self) -> np.ndarray:
        return self.histogram.snapshot()

    def _discard(self) -> None:
        self.histogram = PairDistanceHistogram(
            self.lattice.num_rows, self.lattice.num_cols, self.predicate
        )
        self._previous: Optional[np.ndarray] = None
        if self.buffer is not None:
            self.buffer.reset()

    def _clear_results(self) -> None:
        self.series.clear()
        self._latest = None

    # ---------------------------------------------------------------- updates
    def _update(self, generation: int) -> None:
        if self.buffer is None:
            total = self._update_grid(generation)
        else:
            total = self._update_window(generation)
        self._publish(generation, total)

    def _rebuild(self, cells, reason: str) -> None:
        if reason:
            arr = as_cell_array(cells)
            matching = int(np.count_nonzero(self.predicate.mask(arr[:, 2])))
            level = (
                logging.WARNING if matching > self.config.rebuild_warning_cells else logging.INFO
            )
            logger.log(
                level,
                "correlation dimension: %s; rebuilding pair distances over %d matching "
                "cells (this may take a long time).",
                reason, matching,
            )
        self.histogram.rebuild_full(cells)

    def _update_window(self, generation: int) -> int:
        buffer = self.buffer
        width = buffer.width
        reason = ""
        if self._rebuild_requested:
            reason = "rebuild requested"
        elif len(buffer) and buffer.detect_external_edit():
            reason = "lattice was edited"
        if reason or not len(buffer) or buffer.newest_generation != generation - 1:
            buffer.fill(generation)
            self._rebuild(buffer.cells(), reason)
            return buffer.total_cells
        if buffer.is_full:
            self.histogram.remove_row(buffer.oldest_row(), buffer.cells()[width:])
        buffer.append_newest_row(generation)
        cells = buffer.cells()
        self.histogram.add_row(cells[-width:], cells[:-width])
        return buffer.total_cells

    def _update_grid(self, generation: int) -> int:
        current = as_cell_array(self.sampler.sample(generation))
        previous = self._previous
        if (
            previous is None
            or self._rebuild_requested
            or previous.shape != current.shape
        ):
            reason = "rebuild requested" if self._rebuild_requested else ""
            self._rebuild(current, reason)
        else:
            predicate = self.predicate
            was_in = predicate.mask(previous[:, 2])
            now_in = predicate.mask(current[:, 2])
            kept = was_in & now_in
            self.histogram.remove_row(previous[was_in & ~now_in], current[kept])
            self.histogram.add_row(current[now_in & ~was_in], current[kept])
        self._previous = current
        return len(current)

    def _publish(self, generation: int, total: int) -> None:
        matching = self.histogram.matching_count
        points = trim_tail(
            build_correlation_function(self.histogram.snapshot()),
            self.config.tail_trim_fraction,
            self.config.min_fit_points,
        )
        shortcut = degenerate_dimension(matching, total)
        if shortcut is not None:
            fit = LinearFit(shortcut, 0.0, 0.0, 1.0)
        else:
            fit = fit_line(points)
        result = CorrelationResult(
            generation=generation,
            dimension=fit.slope,
            std_err=fit.std_err,
            r_squared=fit.r_squared,
            intercept=fit.intercept,
            matching_cells=matching,
            total_cells=total,
            low_confidence=matching < self.config.tsonis_threshold,
            correlation_function=tuple(points),
        )
        self._latest = result
        self.series.append(
            FractalDimensionSample(generation, fit.slope, fit.std_err, fit.r_squared)
        )
        logger.debug(
            "correlation dimension: generation %d, n=%d, D=%.3f +/- %.3f",
            generation, matching, fit.slope, fit.std_err,
        )
