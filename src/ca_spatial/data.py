from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from typing import Deque, Generic, Iterator, Optional, TypeVar

import numpy as np

from .constants import MAX_SAMPLES

T = TypeVar("T")


@dataclass(frozen=True)
class FractalDimensionSample:
    """One published point of a fractal-dimension time series."""

    generation: int
    dimension: float
    std_dev: float
    r_squared: float


class ResultSeries(Generic[T]):
    """Bounded time series of per-generation results.

    Keeps the last ``max_samples`` entries; the oldest is dropped on
    overflow. Entries are dataclasses with a ``generation`` field; analysing
    the newest generation again replaces its entry instead of adding one.
    :meth:`values` pulls any field out as an array for plotting.

    Parameters
    ----------
    max_samples : int, optional
        Series length. Default is ``MAX_SAMPLES``.
    """

    def __init__(self, max_samples: int = MAX_SAMPLES):
        self._samples: Deque[T] = deque(maxlen=max_samples)

    def append(self, sample: T) -> None:
        latest = self.latest
        if latest is not None and latest.generation == sample.generation:
            self.drop_latest()
        self._samples.append(sample)

    def __len__(self) -> int:
        return len(self._samples)

    def __iter__(self) -> Iterator[T]:
        return iter(list(self._samples))

    @property
    def max_samples(self) -> int:
        return self._samples.maxlen

    @property
    def latest(self) -> Optional[T]:
        return self._samples[-1] if self._samples else None

    def drop_latest(self) -> None:
        """Forget the newest sample."""
        if self._samples:
            self._samples.pop()

    def generations(self) -> np.ndarray:
        return self.values("generation").astype(int)

    def values(self, name: str) -> np.ndarray:
        return np.array([getattr(s, name) for s in self._samples], dtype=float)

    def clear(self) -> None:
        self._samples.clear()
