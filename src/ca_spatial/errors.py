from __future__ import annotations


class UnsupportedStateError(ValueError):
    """Raised when integer values are requested from a lattice whose states
    are not integer valued."""


class StaleSnapshotError(IndexError):
    """Raised when buffered cells no longer agree with the structures built
    from them, e.g. after the lattice changed during a read.

    Subclasses ``IndexError`` so that it is handled like any other
    out-of-range read: the statistic resamples and retries once.
    """
