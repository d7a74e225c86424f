# ----------------------------- States ---------------------------------------

#: Value recorded for an empty cell.
EMPTY = 0
#: Value recorded for an occupied cell on lattices without integer states.
OCCUPIED = 1

# ------------------------- Published results --------------------------------

#: Number of samples kept in every published result series.
MAX_SAMPLES = 100

# ----------------------- Correlation dimension ------------------------------

#: Smallest squared radius sampled by the correlation function.
FIRST_RADIUS_SQUARED = 2
#: Fraction of correlation-function points (largest radii) dropped before fitting.
TAIL_TRIM_FRACTION = 0.25
#: Tail trimming never leaves fewer points than this.
MIN_FIT_POINTS = 3
#: Upper bound on the dimension used to derive the Tsonis criterion.
TSONIS_ASSUMED_DIMENSION = 2.0
#: Minimum number of cells for a reliable estimate, 10^(2 + 0.4 D).
TSONIS_THRESHOLD = int(10 ** (2 + 0.4 * TSONIS_ASSUMED_DIMENSION))
#: Matching cells above which an edit-triggered rebuild is logged as slow.
REBUILD_WARNING_CELLS = 3000
#: Cells per block when pairs within one group are binned.
PAIR_BLOCK_SIZE = 512
#: Upper bound on the number of pair distances held in memory at once.
PAIR_CHUNK_SIZE = 2 ** 18

# --------------------------- Neighborhoods ----------------------------------

#: Default number of largest neighborhoods selected.
DEFAULT_TOP_K = 1
#: Upper bound on the number of largest neighborhoods selected.
MAX_TOP_K = 100

# ------------------------- Demonstration run --------------------------------

#: Square lattice size (rows == columns) for the demo driver.
GRID_SIZE = 64
#: Generations simulated by the demo driver.
GENERATIONS = 200
#: Wolfram number of the default elementary rule (Sierpinski triangle).
ELEMENTARY_RULE = 90
#: Generations of history kept by a two-dimensional lattice.
TWO_DIM_HISTORY = 2
