import operator

import numpy as np
import pytest

from arqtree.core import AddSum, AffineSum, AssignMin, AssignSum, MonoidAlgebra, StaticArq
from tests.utils import NaiveArray, random_operations


def test_range_add_scenario():
    tree = StaticArq(AddSum(), [1, 3, 5, 7])
    assert tree.query(0, 3) == 16

    assert tree.update(1, 2, 10) is None

    assert tree.query(0, 1) == 14
    assert tree.query(2, 3) == 22
    assert tree.to_list() == [1, 13, 15, 7]


def test_point_queries_after_build():
    values = [4, -2, 9, 0, 3, 3, 8]
    tree = StaticArq.build(values, AddSum())

    assert [tree.point_query(i) for i in range(len(values))] == values
    assert [tree[i] for i in range(len(values))] == values
    assert len(tree) == len(values)


def test_empty_and_out_of_bounds_ranges():
    tree = StaticArq(AddSum(), [1, 3, 5, 7])

    assert tree.query(3, 1) == 0
    assert tree.query(10, 20) == 0
    assert tree.query(-5, -1) == 0
    assert tree.query(-5, 1) == 4
    assert tree.query(2, 99) == 12

    tree.update(5, 9, 100)
    tree.update(2, 1, 100)
    assert tree.to_list() == [1, 3, 5, 7]


def test_empty_tree():
    tree = StaticArq(AddSum(), [])

    assert len(tree) == 0
    assert tree.query(0, 0) == 0
    assert tree.to_list() == []
    assert tree.find_prefix(lambda total: True) is None
    tree.update(0, 3, 1)


def test_identity_update_is_a_no_op():
    tree = StaticArq(AddSum(), [5, 1, 4, 2, 8])
    before = [tree.query(lo, hi) for lo in range(5) for hi in range(lo, 5)]

    tree.update(0, 4, 0)
    tree.update(1, 3, 0)

    assert [tree.query(lo, hi) for lo in range(5) for hi in range(lo, 5)] == before


def test_non_commutative_combine_keeps_order():
    tree = StaticArq(MonoidAlgebra(operator.add, ""), list("abcdefg"))

    assert tree.query(1, 4) == "bcde"
    assert tree.query(0, 6) == "abcdefg"

    tree.update(2, 2, "Z")

    assert tree.query(0, 6) == "abZdefg"
    assert tree.query(3, 2) == ""


def test_assign_min_updates():
    tree = StaticArq(AssignMin(), [5, 3, 8, 6])

    tree.update(1, 2, 10)
    assert tree.query(0, 3) == 5
    assert tree.query(1, 3) == 6

    tree.update(0, 3, 1)
    assert tree.query(1, 2) == 1
    assert tree.to_list() == [1, 1, 1, 1]


def test_assign_then_add_via_sum_of_spans():
    tree = StaticArq(AssignSum(), [0] * 10)

    tree.update(0, 9, 2)
    tree.update(3, 5, 7)

    assert tree.query(0, 9) == 2 * 7 + 7 * 3
    assert tree.query(2, 3) == 9


@pytest.mark.parametrize("seed", [0, 1, 7])
def test_affine_updates_match_naive(seed):
    rng = np.random.default_rng(seed)
    algebra = AffineSum()
    values = rng.integers(-5, 6, size=23).tolist()
    tree = StaticArq(algebra, values)
    naive = NaiveArray(algebra, values)
    updates = [(1, 0), (2, 1), (-1, 3), (3, -2), (1, 5)]

    for kind, low, high, update in random_operations(rng, len(values), 200, updates):
        if kind == "update":
            tree.update(low, high, update)
            naive.update(low, high, update)
        else:
            assert tree.query(low, high) == naive.query(low, high)
    assert tree.to_list() == naive.values


def test_find_prefix():
    tree = StaticArq(AddSum(), [1, 3, 5, 7])

    assert tree.find_prefix(lambda total: total >= 0) == 0
    assert tree.find_prefix(lambda total: total >= 9) == 2
    assert tree.find_prefix(lambda total: total >= 16) == 3
    assert tree.find_prefix(lambda total: total >= 100) is None

    tree.update(0, 0, 10)
    assert tree.find_prefix(lambda total: total >= 9) == 0

    tree.update(0, 0, -11)
    assert tree.find_prefix(lambda total: total >= 9) == 3


def test_from_size():
    assert StaticArq.from_size(5, AddSum()).to_list() == [0] * 5
    assert StaticArq.from_size(5, AddSum(), fill=2).query(0, 4) == 10
    with pytest.raises(ValueError):
        StaticArq.from_size(-1, AddSum())


def test_numpy_input_becomes_native_scalars():
    tree = StaticArq(AddSum(), np.arange(5))

    total = tree.query(0, 4)

    assert total == 10
    assert type(total) is int


def test_rejects_multidimensional_arrays():
    with pytest.raises(ValueError):
        StaticArq(AddSum(), np.zeros((2, 2)))
