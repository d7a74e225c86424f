from .constants import (
    EMPTY, OCCUPIED, MAX_SAMPLES,
    FIRST_RADIUS_SQUARED, TAIL_TRIM_FRACTION, MIN_FIT_POINTS,
    TSONIS_THRESHOLD, REBUILD_WARNING_CELLS,
    DEFAULT_TOP_K, MAX_TOP_K,
)

from .errors import UnsupportedStateError, StaleSnapshotError
from .predicate import (
    StatePredicate, AllCells, AllOccupied, EmptyOnly, ExactState,
    resolve_predicate, parse_predicate,
)
from .lattice import ArrayLattice
from .sampler import SampledCell, CellSampler
from .history import BufferState, SlidingHistoryBuffer
from .histogram import PairDistanceHistogram
from .events import EditAction, CellEdit, EditQueue
from .config import AnalysisConfig, SimulationConfig
from .data import FractalDimensionSample, ResultSeries
from .statistic import AnalysisSkipped, SpatialStatistic
from .occupancy import (
    box_counting_dimension, BoxCountingStatistic, PercentOccupiedStatistic,
)
from .correlation import (
    build_correlation_function, fit_line, CorrelationResult,
    CorrelationDimensionStatistic,
)
from .neighborhood import (
    neighborhood_size_histogram, select_top_k,
    NeighborhoodSizeStatistic, LargestNeighborhoodStatistic,
)
from .tracker import CellTrackerStatistic
from .registry import available_statistics, create_statistic
from .grid import initialize_grid
from .ca import elementary_step, life_step, make_rule, CellularAutomaton
from .viz import create_summary_figure
from .app import AnalysisApp

__all__ = [
    # constants
    "EMPTY", "OCCUPIED", "MAX_SAMPLES",
    "FIRST_RADIUS_SQUARED", "TAIL_TRIM_FRACTION", "MIN_FIT_POINTS",
    "TSONIS_THRESHOLD", "REBUILD_WARNING_CELLS",
    "DEFAULT_TOP_K", "MAX_TOP_K",
    # core
    "UnsupportedStateError", "StaleSnapshotError",
    "StatePredicate", "AllCells", "AllOccupied", "EmptyOnly", "ExactState",
    "resolve_predicate", "parse_predicate",
    "ArrayLattice", "SampledCell", "CellSampler",
    "BufferState", "SlidingHistoryBuffer", "PairDistanceHistogram",
    "EditAction", "CellEdit", "EditQueue",
    # statistics
    "AnalysisConfig", "FractalDimensionSample", "ResultSeries",
    "AnalysisSkipped", "SpatialStatistic",
    "box_counting_dimension", "BoxCountingStatistic", "PercentOccupiedStatistic",
    "build_correlation_function", "fit_line", "CorrelationResult",
    "CorrelationDimensionStatistic",
    "neighborhood_size_histogram", "select_top_k",
    "NeighborhoodSizeStatistic", "LargestNeighborhoodStatistic",
    "CellTrackerStatistic",
    "available_statistics", "create_statistic",
    # demo
    "initialize_grid", "elementary_step", "life_step", "make_rule",
    "CellularAutomaton", "create_summary_figure",
    "SimulationConfig", "AnalysisApp",
]
