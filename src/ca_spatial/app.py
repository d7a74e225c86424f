from __future__ import annotations

from typing import Dict

import matplotlib.pyplot as plt

from .ca import CellularAutomaton, make_rule
from .config import SimulationConfig
from .correlation import CorrelationDimensionStatistic
from .grid import initialize_grid
from .lattice import ArrayLattice
from .registry import create_statistic
from .statistic import SpatialStatistic
from .viz import create_summary_figure


class AnalysisApp:
    """High-level orchestrator: run a rule and summarise its statistics."""

    def __init__(self, config: SimulationConfig) -> None:
        self.cfg = config
        gsize = self.cfg.grid_size
        initial = initialize_grid(
            gsize, gsize, seed_pattern=self.cfg.seed_pattern, one_dim=self.cfg.one_dim
        )
        self.lattice = ArrayLattice(
            initial,
            num_rows=gsize if self.cfg.one_dim else None,
            neighborhood=self.cfg.neighborhood,
        )
        self.statistics: Dict[str, SpatialStatistic] = {
            tag: create_statistic(tag, self.lattice, self.cfg.analysis)
            for tag in self.cfg.statistics
        }
        self.ca = CellularAutomaton(
            self.lattice, make_rule(self.cfg.rule), self.statistics.values()
        )

    def _title(self) -> str:
        kind = "1-D" if self.cfg.one_dim else "2-D"
        return "rule={}  {}  {}x{}  t={}".format(
            self.cfg.rule, kind, self.lattice.num_rows, self.lattice.num_cols,
            self.lattice.generation,
        )

    def run(self) -> Dict[str, object]:
        gsize = self.cfg.grid_size
        print(
            f"Starting analysis: Size={gsize}x{gsize}, Steps={self.cfg.generations}, "
            f"Statistics={', '.join(self.statistics)}"
        )
        self.ca.analyze()
        for _ in range(self.cfg.generations):
            self.ca.step()

        results = {tag: stat.current_result() for tag, stat in self.statistics.items()}
        for tag, result in results.items():
            print(f"{tag}: {result}")
        for tag, stat in self.statistics.items():
            if stat.skipped:
                print(f"{tag}: skipped {len(stat.skipped)} generation(s)")

        correlation = next(
            (s for s in self.statistics.values() if isinstance(s, CorrelationDimensionStatistic)),
            None,
        )
        if correlation is not None:
            latest = correlation.current_result()
            if latest is not None and latest.low_confidence:
                print(
                    f"Warning: only {latest.matching_cells} cells in the set; about "
                    f"{self.cfg.analysis.tsonis_threshold} are needed for a reliable "
                    "correlation dimension (Tsonis criterion)."
                )
            if self.cfg.figure_path:
                fig, _ = create_summary_figure(
                    self.lattice.grid(),
                    latest.correlation_function if latest is not None else (),
                    correlation.series,
                    title=self._title(),
                )
                fig.savefig(self.cfg.figure_path, dpi=150)
                plt.close(fig)
                print(f"Saved: {self.cfg.figure_path}")
        return results
