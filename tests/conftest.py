import itertools

import matplotlib

matplotlib.use("Agg")

import numpy as np
import pytest

from ca_spatial import ArrayLattice


def _pair_bins(coords, max_distance_squared):
    """Squared-distance histogram by direct enumeration of pairs."""
    bins = np.zeros(max_distance_squared + 1, dtype=np.int64)
    for (r1, c1), (r2, c2) in itertools.combinations([tuple(p) for p in coords], 2):
        bins[(r1 - r2) ** 2 + (c1 - c2) ** 2] += 1
    return bins


@pytest.fixture
def pair_bins():
    return _pair_bins


@pytest.fixture
def image_bins():
    """Brute-force histogram of the non-zero cells of a state image."""

    def _image_bins(image, num_rows, num_cols):
        coords = np.argwhere(np.asarray(image) != 0)
        return _pair_bins(coords, (num_rows - 1) ** 2 + (num_cols - 1) ** 2)

    return _image_bins


@pytest.fixture
def rng():
    return np.random.default_rng(1234)


@pytest.fixture
def grid_lattice():
    def _make(grid, **kwargs):
        return ArrayLattice(np.asarray(grid), **kwargs)

    return _make
