from __future__ import annotations

from typing import Dict, Optional, Tuple, Type

from .config import AnalysisConfig
from .correlation import CorrelationDimensionStatistic
from .events import EditQueue
from .neighborhood import LargestNeighborhoodStatistic, NeighborhoodSizeStatistic
from .occupancy import BoxCountingStatistic, PercentOccupiedStatistic
from .statistic import SpatialStatistic
from .tracker import CellTrackerStatistic

STATISTICS: Dict[str, Type[SpatialStatistic]] = {
    cls.name: cls
    for cls in (
        BoxCountingStatistic,
        CorrelationDimensionStatistic,
        NeighborhoodSizeStatistic,
        LargestNeighborhoodStatistic,
        PercentOccupiedStatistic,
        CellTrackerStatistic,
    )
}


def available_statistics() -> Tuple[str, ...]:
    return tuple(STATISTICS)


def create_statistic(
    tag: str,
    lattice,
    config: Optional[AnalysisConfig] = None,
    edits: Optional[EditQueue] = None,
) -> SpatialStatistic:
    """Instantiate the statistic registered under ``tag``."""
    try:
        cls = STATISTICS[tag]
    except KeyError:
        raise ValueError(
            f"Unknown statistic '{tag}'. Available: {', '.join(available_statistics())}."
        ) from None
    return cls(lattice, config, edits)
