import logging
import math

import numpy as np
import pytest

from ca_spatial import (
    AllOccupied, AnalysisConfig, ArrayLattice, CellularAutomaton, CorrelationDimensionStatistic,
    ExactState, build_correlation_function, fit_line, make_rule,
)
from ca_spatial.correlation import CorrelationPoint, trim_tail


def _points(n):
    return [CorrelationPoint(float(i), float(i)) for i in range(n)]


def test_correlation_function_counts_pairs_strictly_inside_radius():
    bins = np.array([0, 2, 0, 0, 1, 0, 0, 0, 0])
    points = build_correlation_function(bins)
    assert points == [
        CorrelationPoint(math.log(2) / 2, math.log(2)),
        CorrelationPoint(math.log(4) / 2, math.log(2)),
        CorrelationPoint(math.log(8) / 2, math.log(3)),
    ]


def test_correlation_function_skips_empty_radii():
    assert build_correlation_function(np.zeros(20, dtype=np.int64)) == []
    bins = np.zeros(20, dtype=np.int64)
    bins[5] = 4
    points = build_correlation_function(bins)
    assert [p.log_count for p in points] == [math.log(4), math.log(4)]


@pytest.mark.parametrize("n,kept", [(8, 6), (5, 4), (4, 3), (3, 3), (2, 2), (0, 0)])
def test_trim_tail(n, kept):
    trimmed = trim_tail(_points(n))
    assert len(trimmed) == kept
    assert trimmed == _points(n)[:kept]


def test_trim_tail_never_goes_below_minimum():
    assert len(trim_tail(_points(4), fraction=0.75, min_points=3)) == 3


def test_fit_line_recovers_slope():
    points = [CorrelationPoint(x, 2.0 * x + 1.0) for x in (0.5, 1.0, 1.5, 2.0)]
    fit = fit_line(points)
    assert fit.slope == pytest.approx(2.0)
    assert fit.intercept == pytest.approx(1.0)
    assert fit.r_squared == pytest.approx(1.0)
    assert fit.std_err == pytest.approx(0.0, abs=1e-9)


def test_fit_line_needs_two_points():
    assert fit_line([CorrelationPoint(1.0, 1.0)]) == (0.0, 0.0, 0.0, 0.0)


def test_line_of_cells_has_dimension_near_one():
    grid = np.zeros((16, 16), dtype=int)
    grid[8, :] = 1
    stat = CorrelationDimensionStatistic(ArrayLattice(grid))
    stat.analyze(0)
    result = stat.current_result()
    assert result.matching_cells == 16
    assert result.total_cells == 256
    assert 0.8 < result.dimension < 1.3
    assert len(result.correlation_function) == 6
    assert result.low_confidence


@pytest.mark.parametrize(
    "fill,expected",
    [(1, 2.0), (0, 0.0)],
)
def test_degenerate_sets(fill, expected):
    stat = CorrelationDimensionStatistic(ArrayLattice(np.full((4, 4), fill)))
    stat.analyze(0)
    result = stat.current_result()
    assert result.dimension == expected
    assert result.std_err == 0.0


def test_all_but_one_and_single_cell():
    grid = np.ones((4, 4), dtype=int)
    grid[0, 0] = 0
    stat = CorrelationDimensionStatistic(ArrayLattice(grid))
    stat.analyze(0)
    assert stat.current_result().dimension == 2.0

    single = np.zeros((4, 4), dtype=int)
    single[2, 2] = 1
    stat = CorrelationDimensionStatistic(ArrayLattice(single))
    stat.analyze(0)
    assert stat.current_result().dimension == 0.0


def test_one_dim_window_matches_brute_force(image_bins):
    initial = np.zeros(16, dtype=int)
    initial[8] = 1
    lattice = ArrayLattice(initial, num_rows=8)
    stat = CorrelationDimensionStatistic(lattice)
    ca = CellularAutomaton(lattice, make_rule("30"), [stat])
    ca.analyze()
    for _ in range(20):
        ca.step()
        np.testing.assert_array_equal(
            stat.histogram_snapshot(), image_bins(lattice.grid(), 8, 16)
        )
        assert stat.histogram.is_consistent()
        assert stat.current_result().total_cells == lattice.history_length() * 16
    assert not stat.skipped
    assert len(stat.series) == 21


def test_two_dim_snapshot_diff_matches_brute_force(rng, image_bins):
    lattice = ArrayLattice((rng.random((12, 12)) < 0.35).astype(int))
    stat = CorrelationDimensionStatistic(lattice)
    ca = CellularAutomaton(lattice, make_rule("life"), [stat])
    ca.analyze()
    for _ in range(8):
        ca.step()
        np.testing.assert_array_equal(
            stat.histogram_snapshot(), image_bins(lattice.grid(), 12, 12)
        )
    assert not stat.skipped


def test_undeclared_edit_forces_rebuild(caplog, image_bins):
    initial = np.zeros(12, dtype=int)
    initial[6] = 1
    lattice = ArrayLattice(initial, num_rows=6)
    stat = CorrelationDimensionStatistic(lattice)
    ca = CellularAutomaton(lattice, make_rule("90"), [stat])
    for _ in range(8):
        ca.step()

    lattice.push(make_rule("90")(lattice.row()))
    previous = lattice.generation - 1
    for cell in (0, 1):
        lattice.set_cell(cell, 1 - lattice.state(cell, previous), generation=previous)
    with caplog.at_level(logging.INFO, logger="ca_spatial.correlation"):
        stat.analyze(lattice.generation)
    assert "lattice was edited" in caplog.text
    np.testing.assert_array_equal(stat.histogram_snapshot(), image_bins(lattice.grid(), 6, 12))


def test_drawing_through_automaton_rebuilds(image_bins):
    lattice = ArrayLattice(np.zeros((6, 6), dtype=int))
    stat = CorrelationDimensionStatistic(lattice)
    ca = CellularAutomaton(lattice, make_rule("life"), [stat])
    ca.analyze()
    for cell in (7, 8, 9):
        ca.draw(cell, 1)
    ca.analyze()
    assert stat.current_result().matching_cells == 3
    np.testing.assert_array_equal(stat.histogram_snapshot(), image_bins(lattice.grid(), 6, 6))


def test_predicate_change_rebuilds():
    grid = np.array([[1, 2], [2, 0]])
    stat = CorrelationDimensionStatistic(ArrayLattice(grid))
    stat.analyze(0)
    assert stat.current_result().matching_cells == 3
    stat.set_predicate(ExactState(2))
    stat.analyze(0)
    assert stat.current_result().matching_cells == 2
    assert stat.histogram.snapshot()[2] == 1


def test_series_is_bounded():
    initial = np.zeros(8, dtype=int)
    initial[4] = 1
    lattice = ArrayLattice(initial, num_rows=4)
    stat = CorrelationDimensionStatistic(lattice, AnalysisConfig(max_samples=5))
    ca = CellularAutomaton(lattice, make_rule("90"), [stat])
    for _ in range(12):
        ca.step()
    assert len(stat.series) == 5
    assert list(stat.series.generations()) == [8, 9, 10, 11, 12]


def test_reanalysing_a_generation_does_not_duplicate_samples():
    grid = np.array([[1, 1, 0], [0, 1, 0], [0, 0, 1]])
    stat = CorrelationDimensionStatistic(ArrayLattice(grid))
    stat.analyze(0)
    stat.notify_external_edit()
    stat.analyze(0)
    assert len(stat.series) == 1


def test_slow_rebuild_warning_counts_matching_cells(caplog):
    grid = np.zeros((6, 6), dtype=int)
    grid[0, :4] = 1
    stat = CorrelationDimensionStatistic(
        ArrayLattice(grid), AnalysisConfig(rebuild_warning_cells=3)
    )
    stat.analyze(0)
    stat.set_predicate(AllOccupied())
    stat.notify_external_edit()
    with caplog.at_level(logging.INFO, logger="ca_spatial.correlation"):
        stat.analyze(0)
    records = [r for r in caplog.records if "rebuilding" in r.getMessage()]
    assert [r.levelno for r in records] == [logging.WARNING]
    assert "over 4 matching cells" in records[0].getMessage()
