from __future__ import annotations

import logging
import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass, replace
from typing import ClassVar, List, Optional

from .config import AnalysisConfig
from .events import CellEdit, EditAction, EditQueue
from .predicate import StatePredicate
from .sampler import CellSampler

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AnalysisSkipped:
    """Published when a generation could not be analysed after one retry."""

    generation: int
    statistic: str
    reason: str


class SpatialStatistic(ABC):
    """Base class of every per-generation analysis.

    The host calls :meth:`analyze` once per generation from a single analysis
    thread. An interactive thread never touches the statistic's structures;
    it posts messages to :attr:`edits`, which are drained under :attr:`lock`
    at the start of the next ``analyze`` call.

    An update that trips over an inconsistent read (``IndexError``, which
    includes ``StaleSnapshotError``) is retried once after discarding all
    incremental state; a second failure is recorded in :attr:`skipped`.
    Subclasses implement :meth:`_update`, :meth:`_discard` and
    :meth:`current_result`.
    """

    #: Registry tag.
    name: ClassVar[str] = ""

    def __init__(
        self,
        lattice,
        config: Optional[AnalysisConfig] = None,
        edits: Optional[EditQueue] = None,
    ) -> None:
        self.lattice = lattice
        # Each statistic owns its config; set_predicate must not reach siblings.
        self.config = replace(config) if config is not None else AnalysisConfig()
        self.edits = edits if edits is not None else EditQueue()
        self.lock = threading.RLock()
        self.sampler = CellSampler(lattice)
        self.predicate = self.config.build_predicate(self.sampler.integer_valued)
        self.skipped: List[AnalysisSkipped] = []
        self.active = True
        self._rebuild_requested = False

    # ------------------------------------------------------------ host facing
    def analyze(self, generation: int) -> None:
        with self.lock:
            if not self.active:
                return
            self._drain_edits()
            try:
                self._update(generation)
            except IndexError as exc:
                logger.info(
                    "%s: generation %d read stale cells (%s); resampling.",
                    self.name, generation, exc,
                )
                self._discard()
                try:
                    self._update(generation)
                except IndexError as retry_exc:
                    event = AnalysisSkipped(generation, self.name, str(retry_exc))
                    self.skipped.append(event)
                    self._discard()
                    logger.warning(
                        "%s: skipped generation %d: %s", self.name, generation, retry_exc
                    )
            self._rebuild_requested = False

    def notify_external_edit(self) -> None:
        """Force the next ``analyze`` onto the full-rebuild path."""
        self.edits.request_rebuild()

    def reset(self) -> None:
        """Drop all accumulated state; safe between simulation runs."""
        with self.lock:
            self.edits.drain()
            self._discard()
            self._clear_results()
            self.skipped.clear()
            self._rebuild_requested = False
            self.active = True

    def stop(self) -> None:
        """Stop analysing; pending and future edits are ignored until reset."""
        with self.lock:
            self.active = False
            self.edits.drain()

    def set_predicate(self, predicate: StatePredicate) -> None:
        with self.lock:
            self.config.predicate = predicate
            self.predicate = self.config.build_predicate(self.sampler.integer_valued)
            self._discard()

    @abstractmethod
    def current_result(self):
        ...

    # ------------------------------------------------------------- subclasses
    @abstractmethod
    def _update(self, generation: int) -> None:
        ...

    @abstractmethod
    def _discard(self) -> None:
        """Drop incremental structures so the next update starts from scratch."""

    def _clear_results(self) -> None:
        pass

    def _drain_edits(self) -> None:
        for edit in self.edits.drain():
            self._handle_edit(edit)

    def _handle_edit(self, edit: CellEdit) -> None:
        if edit.action in (EditAction.DRAW, EditAction.REBUILD):
            self._rebuild_requested = True
