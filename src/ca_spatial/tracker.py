from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass
from typing import Deque, Dict, List, Optional

from .events import CellEdit, EditAction
from .statistic import SpatialStatistic

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TrackedCell:
    cell: int
    value: int
    running_average: float


@dataclass(frozen=True)
class CellTrackerResult:
    generation: int
    cells: Dict[int, TrackedCell]


class CellTrackerStatistic(SpatialStatistic):
    """Value and running average of each pinned cell.

    Cells are pinned and unpinned only through :attr:`edits` (``pin`` and
    ``unpin`` messages), so the pinned list is touched by the analysis thread
    alone. On lattices without integer states the value is 1 for an occupied
    cell and 0 for an empty one, and the running average is the fraction of
    recent generations in which the cell was occupied. Averages span the last
    ``max_samples`` generations.
    """

    name = "cell_tracker"

    def __init__(self, lattice, config=None, edits=None):
        super().__init__(lattice, config, edits)
        self.pinned: List[int] = []
        self._history: Dict[int, Deque[int]] = {}
        self._latest: Optional[CellTrackerResult] = None

    def current_result(self) -> Optional[CellTrackerResult]:
        with self.lock:
            return self._latest

    def history(self, cell: int) -> List[int]:
        with self.lock:
            return list(self._history.get(cell, ()))

    def _handle_edit(self, edit: CellEdit) -> None:
        if edit.action is EditAction.PIN:
            if edit.cell is None or not 0 <= edit.cell < self.lattice.num_cells:
                logger.warning("cell tracker: ignoring pin of unknown cell %r.", edit.cell)
            elif edit.cell not in self.pinned:
                self.pinned.append(edit.cell)
                self._history[edit.cell] = deque(maxlen=self.config.max_samples)
        elif edit.action is EditAction.UNPIN:
            while edit.cell in self.pinned:
                self.pinned.remove(edit.cell)
            self._history.pop(edit.cell, None)
        else:
            super()._handle_edit(edit)

    def _discard(self) -> None:
        # Value histories are accumulated results, not derived structures.
        pass

    def _clear_results(self) -> None:
        self.pinned.clear()
        self._history.clear()
        self._latest = None

    def _update(self, generation: int) -> None:
        # Read every pinned cell first so a failed read appends nothing.
        current = {cell: self.sampler.value_of(cell, generation) for cell in self.pinned}
        tracked = {}
        for cell, value in current.items():
            values = self._history[cell]
            values.append(value)
            tracked[cell] = TrackedCell(cell, value, sum(values) / len(values))
        self._latest = CellTrackerResult(generation, tracked)
