from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Tuple

from .constants import (
    DEFAULT_TOP_K, MAX_TOP_K, MAX_SAMPLES,
    TAIL_TRIM_FRACTION, MIN_FIT_POINTS, TSONIS_THRESHOLD, REBUILD_WARNING_CELLS,
    GRID_SIZE, GENERATIONS, ELEMENTARY_RULE,
)
from .predicate import AllOccupied, StatePredicate, resolve_predicate


@dataclass
class AnalysisConfig:
    # Cell selection
    predicate: StatePredicate = field(default_factory=AllOccupied)

    # Published series
    max_samples: int = MAX_SAMPLES

    # Correlation dimension
    tail_trim_fraction: float = TAIL_TRIM_FRACTION
    min_fit_points: int = MIN_FIT_POINTS
    tsonis_threshold: int = TSONIS_THRESHOLD
    rebuild_warning_cells: int = REBUILD_WARNING_CELLS

    # Neighborhoods
    top_k: int = DEFAULT_TOP_K
    max_top_k: int = MAX_TOP_K
    include_neighbors: bool = False
    plot_zero_bins: bool = False

    def __post_init__(self) -> None:
        if self.max_samples < 1:
            raise ValueError("max_samples must be at least 1.")
        if not 0.0 <= self.tail_trim_fraction < 1.0:
            raise ValueError("tail_trim_fraction must lie in [0, 1).")
        if self.min_fit_points < 2:
            raise ValueError("min_fit_points must be at least 2.")
        if not 1 <= self.top_k <= self.max_top_k:
            raise ValueError(f"top_k must lie in [1, {self.max_top_k}].")

    def build_predicate(self, integer_valued: bool) -> StatePredicate:
        return resolve_predicate(self.predicate, integer_valued)


@dataclass
class SimulationConfig:
    # Lattice
    grid_size: int = GRID_SIZE
    one_dim: bool = True
    neighborhood: str = "moore"

    # Rule: an elementary rule number (1-D) or "life" (2-D)
    rule: str = str(ELEMENTARY_RULE)
    seed_pattern: str = "single_seed"
    generations: int = GENERATIONS

    # Analyses, by registry tag
    statistics: Tuple[str, ...] = ("box_counting", "correlation_dimension")
    analysis: AnalysisConfig = field(default_factory=AnalysisConfig)

    # IO/visual
    figure_path: Optional[str] = None
