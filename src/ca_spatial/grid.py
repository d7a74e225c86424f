from __future__ import annotations

import numpy as np

from .constants import EMPTY, OCCUPIED


def initialize_grid(
    grid_height: int,
    grid_width: int,
    seed_pattern: str = "single_seed",
    seed_size: int = 3,
    one_dim: bool = False,
) -> np.ndarray:
    """Return an initial state with a chosen seed pattern.

    Parameters
    ----------
    grid_height : int
        Grid height. Ignored for one-dimensional lattices.
    grid_width : int
        Grid width.
    seed_pattern : str, optional
        One of ``{"single_seed", "center", "full"}``. Default is
        ``"single_seed"``.
    seed_size : int, optional
        Side of the ``"center"`` block. Default is 3.
    one_dim : bool, optional
        Return a single row instead of a grid. Default is False.

    Returns
    -------
    np.ndarray
        Integer array, shape ``(grid_width,)`` or ``(grid_height, grid_width)``,
        with seeded cells set to ``OCCUPIED``.
    """
    if not (grid_height > 0 and grid_width > 0):
        raise ValueError("Grid height and width must be positive integers.")
    shape = (grid_width,) if one_dim else (grid_height, grid_width)
    grid = np.full(shape, EMPTY, dtype=np.int32)

    if seed_pattern == "single_seed":
        center = tuple(n // 2 for n in shape)
        grid[center] = OCCUPIED
    elif seed_pattern == "center":
        spans = []
        for n in shape:
            lo = max(0, n // 2 - seed_size // 2)
            spans.append(slice(lo, min(n, lo + seed_size)))
        grid[tuple(spans)] = OCCUPIED
    elif seed_pattern == "full":
        grid[...] = OCCUPIED
    else:
        raise ValueError(f"Unknown seed pattern '{seed_pattern}'.")
    return grid
