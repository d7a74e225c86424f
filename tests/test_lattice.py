import numpy as np
import pytest

from ca_spatial import ArrayLattice, UnsupportedStateError


def test_two_dim_cells_and_coordinates():
    lattice = ArrayLattice(np.zeros((3, 4), dtype=int))
    assert not lattice.is_one_dim
    assert lattice.num_cells == 12
    assert list(lattice.cells()) == list(range(12))
    assert lattice.coordinates(6) == (1, 2)
    assert lattice.is_integer_valued()


def test_one_dim_history_is_bounded_by_num_rows():
    lattice = ArrayLattice(np.array([0, 1, 0]), num_rows=3)
    for _ in range(5):
        lattice.push(lattice.row())
    assert lattice.generation == 5
    assert lattice.history_length() == 3
    assert lattice.oldest_generation() == 3
    assert lattice.grid().shape == (3, 3)
    with pytest.raises(IndexError):
        lattice.state(0, generation=1)


def test_state_and_emptiness():
    lattice = ArrayLattice(np.array([[0, 2], [1, 0]]))
    assert lattice.state(1) == 2
    assert lattice.is_empty(0)
    assert not lattice.is_empty(2)
    assert lattice.int_value(1) == 2


def test_non_integer_lattice_refuses_int_values():
    lattice = ArrayLattice(np.array([0.0, 0.5]))
    assert not lattice.is_integer_valued()
    assert lattice.is_empty(0)
    assert not lattice.is_empty(1)
    with pytest.raises(UnsupportedStateError):
        lattice.int_value(1)


def test_object_states():
    lattice = ArrayLattice(np.array([None, "tree", 0], dtype=object))
    assert not lattice.is_integer_valued()
    assert lattice.is_empty(0)
    assert not lattice.is_empty(1)
    assert lattice.is_empty(2)


def test_set_cell_edits_history_in_place():
    lattice = ArrayLattice(np.array([0, 0, 0, 0]), num_rows=4)
    lattice.push(np.array([1, 1, 1, 1]))
    lattice.set_cell(2, 1, generation=0)
    assert lattice.state(2, generation=0) == 1
    assert list(lattice.row(0)) == [0, 0, 1, 0]


def test_push_rejects_wrong_shape():
    lattice = ArrayLattice(np.zeros((2, 2), dtype=int))
    with pytest.raises(ValueError):
        lattice.push(np.zeros((3, 3), dtype=int))


def test_restart_rewinds_generation():
    lattice = ArrayLattice(np.zeros(4, dtype=int))
    lattice.push(np.ones(4, dtype=int))
    lattice.restart(np.zeros(4, dtype=int))
    assert lattice.generation == 0
    assert lattice.history_length() == 1


@pytest.mark.parametrize(
    "neighborhood,wrap,cell,expected",
    [
        ("moore", True, 0, 8),
        ("von_neumann", True, 0, 4),
        ("moore", False, 0, 3),
        ("moore", False, 1, 5),
        ("moore", False, 4, 8),
        ("von_neumann", False, 0, 2),
    ],
)
def test_square_neighborhood_sizes(neighborhood, wrap, cell, expected):
    lattice = ArrayLattice(np.zeros((3, 3), dtype=int), neighborhood=neighborhood, wrap=wrap)
    neighbors = lattice.neighbors(cell)
    assert len(neighbors) == expected
    assert cell not in neighbors
    assert len(set(neighbors)) == len(neighbors)


def test_ring_neighbors():
    lattice = ArrayLattice(np.zeros(5, dtype=int))
    assert set(lattice.neighbors(0)) == {4, 1}
    open_ring = ArrayLattice(np.zeros(5, dtype=int), wrap=False)
    assert open_ring.neighbors(0) == (1,)


def test_explicit_adjacency_and_range_checks():
    lattice = ArrayLattice(np.zeros(4, dtype=int), adjacency={0: [1, 2, 3], 1: [0]})
    assert lattice.neighbors(0) == (1, 2, 3)
    assert lattice.neighbors(3) == ()
    with pytest.raises(IndexError):
        lattice.neighbors(4)
    with pytest.raises(IndexError):
        lattice.set_adjacency({0: [9]})


def test_invalid_construction():
    with pytest.raises(ValueError):
        ArrayLattice(np.zeros((2, 2, 2)))
    with pytest.raises(ValueError):
        ArrayLattice(np.zeros(3), neighborhood="hex")
    with pytest.raises(ValueError):
        ArrayLattice(np.zeros(3), num_rows=0)
