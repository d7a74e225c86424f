import logging

import numpy as np
import pytest

from ca_spatial.predicate import (
    AllCells, AllOccupied, EmptyOnly, ExactState, parse_predicate, resolve_predicate,
)


def test_masks_partition_integer_states():
    values = np.array([0, 1, 2, 2, 0, 3, 1, 0])
    total = AllCells().mask(values).sum()
    assert total == len(values)
    assert AllOccupied().mask(values).sum() + EmptyOnly().mask(values).sum() == total
    per_state = sum(ExactState(s).mask(values).sum() for s in np.unique(values))
    assert per_state == total


def test_matches_agrees_with_mask():
    values = [0, 1, 2]
    for predicate in (AllCells(), AllOccupied(), EmptyOnly(), ExactState(2)):
        mask = predicate.mask(np.array(values))
        single = [predicate.matches(v, v == 0) for v in values]
        assert list(mask) == single


def test_exact_state_falls_back_on_non_integer_lattice(caplog):
    with caplog.at_level(logging.WARNING, logger="ca_spatial.predicate"):
        assert resolve_predicate(ExactState(0), integer_valued=False) == EmptyOnly()
        assert resolve_predicate(ExactState(3), integer_valued=False) == AllOccupied()
    assert "not integer valued" in caplog.text


def test_integer_lattice_keeps_exact_state():
    assert resolve_predicate(ExactState(3), integer_valued=True) == ExactState(3)
    assert resolve_predicate(EmptyOnly(), integer_valued=False) == EmptyOnly()


@pytest.mark.parametrize(
    "text,expected",
    [
        ("all", AllCells()),
        ("occupied", AllOccupied()),
        ("Non_Empty", AllOccupied()),
        ("empty", EmptyOnly()),
        (" 4 ", ExactState(4)),
    ],
)
def test_parse_predicate(text, expected):
    assert parse_predicate(text) == expected


def test_parse_predicate_rejects_unknown():
    with pytest.raises(ValueError):
        parse_predicate("sometimes")
