import numpy as np

from ca_spatial import CellSampler, SampledCell
from ca_spatial.constants import EMPTY, OCCUPIED
from ca_spatial.lattice import ArrayLattice
from ca_spatial.sampler import as_cell_array


def test_integer_lattice_samples_states():
    lattice = ArrayLattice(np.array([[0, 3], [1, 0]]))
    sampler = CellSampler(lattice)
    assert sampler.integer_valued
    assert sampler.sample(0) == [
        SampledCell(0, 0, 0), SampledCell(0, 1, 3), SampledCell(1, 0, 1), SampledCell(1, 1, 0),
    ]


def test_non_integer_lattice_uses_binary_values():
    lattice = ArrayLattice(np.array([0.0, 2.5, None], dtype=object))
    sampler = CellSampler(lattice)
    assert not sampler.integer_valued
    assert [sampler.value_of(c, 0) for c in range(3)] == [EMPTY, OCCUPIED, EMPTY]


def test_sample_row_uses_generation_as_row():
    lattice = ArrayLattice(np.array([1, 0, 1]), num_rows=4)
    lattice.push(np.array([0, 1, 0]))
    sampler = CellSampler(lattice)
    row = sampler.sample_row(1)
    assert [c.row for c in row] == [1, 1, 1]
    assert [c.col for c in row] == [0, 1, 2]
    assert [c.value for c in row] == [0, 1, 0]


def test_as_cell_array_handles_empty_groups():
    assert as_cell_array([]).shape == (0, 3)
    arr = as_cell_array([SampledCell(2, 3, 1)])
    assert arr.dtype == np.int64
    assert arr.tolist() == [[2, 3, 1]]
