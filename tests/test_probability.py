import math

import numpy as np
import pytest

from gaevo.utils.probability import (
    SERIAL_INDEX_THRESHOLD,
    check_and_correct,
    eq,
    incremental,
    index_of,
    index_of_binary,
    index_of_serial,
    revert,
    sort_and_revert,
    sum2one,
    ulp_distance,
)


def test_ulp_distance_of_neighbours_is_one():
    assert ulp_distance(1.0, math.nextafter(1.0, 2.0)) == 1
    assert ulp_distance(-1.0, math.nextafter(-1.0, -2.0)) == 1
    assert ulp_distance(0.0, -0.0) == 0
    assert ulp_distance(2.5, 2.5) == 0


def test_ulp_distance_crosses_zero():
    tiny = math.nextafter(0.0, 1.0)
    assert ulp_distance(-tiny, tiny) == 2


def test_eq_tolerates_rounding_but_not_real_differences():
    assert eq(0.1 + 0.2, 0.3)
    assert not eq(1.0, 1.001)


def test_sum2one():
    assert sum2one([0.1] * 10)
    assert sum2one(np.full(7, 1.0 / 7))
    assert sum2one([])
    assert not sum2one([0.5, 0.4])


def test_check_and_correct_replaces_non_finite_vector():
    p = np.array([0.5, np.nan, 0.5])
    assert np.allclose(check_and_correct(p), [1 / 3] * 3)

    q = np.array([0.25, 0.75])
    assert np.array_equal(check_and_correct(q), [0.25, 0.75])


def test_incremental_pins_last_entry_to_one():
    p = np.full(10, 0.1)
    incr = incremental(p)
    assert incr[-1] == 1.0
    assert np.all(np.diff(incr) >= 0)


@pytest.mark.parametrize(
    "n", [1, 5, SERIAL_INDEX_THRESHOLD, SERIAL_INDEX_THRESHOLD + 1, 500]
)
def test_index_of_returns_first_cumulative_entry_reaching_draw(n):
    rng = np.random.default_rng(n)
    p = rng.random(n)
    p /= p.sum()
    incr = incremental(p)

    for v in rng.random(200):
        i = index_of(incr, v)
        assert incr[i] >= v
        assert i == 0 or incr[i - 1] < v


def test_serial_and_binary_search_agree():
    rng = np.random.default_rng(7)
    p = rng.random(100)
    incr = incremental(p / p.sum())
    for v in np.append(rng.random(100), [0.0, incr[0], incr[50]]):
        assert index_of_serial(incr, v) == index_of_binary(incr, v)


def test_index_of_beyond_last_entry_raises_arithmetic_error():
    incr = np.array([0.2, 0.5, 0.9])
    with pytest.raises(ArithmeticError):
        index_of_serial(incr, 0.95)
    with pytest.raises(ArithmeticError):
        index_of_binary(incr, 0.95)


def test_revert():
    assert list(revert(np.array([0.1, 0.2, 0.7]))) == [0.7, 0.2, 0.1]


def test_sort_and_revert_swaps_ranks():
    p = np.array([0.2, 0.5, 0.1, 0.2])
    inverted = sort_and_revert(p)

    assert sum2one(inverted)
    # Largest probability goes to the slot of the smallest and vice versa.
    assert inverted[2] == 0.5
    assert inverted[1] == 0.1
    assert sorted(inverted) == sorted(p)
