from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import ClassVar

import numpy as np

from .constants import EMPTY

logger = logging.getLogger(__name__)


class StatePredicate(ABC):
    """Selects which cells count as members of the analysed set.

    ``matches`` decides a single cell; ``mask`` is the vectorized form used on
    sampled values, where a value of ``EMPTY`` marks an empty cell.
    """

    #: True when the predicate only makes sense on integer-valued lattices.
    requires_integer_states: ClassVar[bool] = False

    @abstractmethod
    def matches(self, value: int, is_empty: bool) -> bool:
        ...

    @abstractmethod
    def mask(self, values: np.ndarray) -> np.ndarray:
        ...

    @property
    def label(self) -> str:
        return type(self).__name__


@dataclass(frozen=True)
class AllCells(StatePredicate):
    def matches(self, value: int, is_empty: bool) -> bool:
        return True

    def mask(self, values: np.ndarray) -> np.ndarray:
        return np.ones(np.shape(values), dtype=bool)

    @property
    def label(self) -> str:
        return "all cells"


@dataclass(frozen=True)
class AllOccupied(StatePredicate):
    def matches(self, value: int, is_empty: bool) -> bool:
        return not is_empty

    def mask(self, values: np.ndarray) -> np.ndarray:
        return np.asarray(values) != EMPTY

    @property
    def label(self) -> str:
        return "all occupied"


@dataclass(frozen=True)
class EmptyOnly(StatePredicate):
    def matches(self, value: int, is_empty: bool) -> bool:
        return is_empty

    def mask(self, values: np.ndarray) -> np.ndarray:
        return np.asarray(values) == EMPTY

    @property
    def label(self) -> str:
        return "empty"


@dataclass(frozen=True)
class ExactState(StatePredicate):
    state: int

    requires_integer_states: ClassVar[bool] = True

    def matches(self, value: int, is_empty: bool) -> bool:
        return value == self.state

    def mask(self, values: np.ndarray) -> np.ndarray:
        return np.asarray(values) == self.state

    @property
    def label(self) -> str:
        return f"state {self.state}"


def resolve_predicate(predicate: StatePredicate, integer_valued: bool) -> StatePredicate:
    """Return ``predicate`` or its fallback on a lattice without integer states.

    ``ExactState`` cannot be evaluated on such a lattice; the empty state maps
    to ``EmptyOnly`` and every other state to ``AllOccupied``.
    """
    if integer_valued or not predicate.requires_integer_states:
        return predicate
    fallback: StatePredicate = AllOccupied()
    if isinstance(predicate, ExactState) and predicate.state == EMPTY:
        fallback = EmptyOnly()
    logger.warning(
        "Lattice states are not integer valued; using '%s' instead of '%s'.",
        fallback.label, predicate.label,
    )
    return fallback


def parse_predicate(text: str) -> StatePredicate:
    """Parse ``"all"``, ``"occupied"``, ``"empty"`` or an integer state."""
    key = text.strip().lower()
    if key == "all":
        return AllCells()
    if key in ("occupied", "non_empty", "nonempty"):
        return AllOccupied()
    if key == "empty":
        return EmptyOnly()
    try:
        return ExactState(int(key))
    except ValueError:
        raise ValueError(
            f"Unknown state selection '{text}'. Use all, occupied, empty or an integer."
        ) from None
