import operator

import numpy as np
import pytest

from arqtree.core import AddMin, AddSum, AssignSum, DynamicArq, MonoidAlgebra
from tests.utils import NaiveArray, random_operations

DOMAIN = 10**9


def test_range_add_scenario_mutates_in_place():
    tree = DynamicArq.build([1, 3, 5, 7], AddSum())
    assert tree.query(0, 3) == 16

    assert tree.update(1, 2, 10) is None

    assert tree.query(0, 1) == 14
    assert tree.query(2, 3) == 22
    assert tree.to_list() == [1, 13, 15, 7]


def test_sparse_point_assignment_stays_logarithmic():
    tree = DynamicArq.sparse(DOMAIN, AssignSum())
    assert tree.node_count() == 0

    tree.update(500_000, 500_000, 5)

    assert tree.query(0, DOMAIN - 1) == 5
    assert tree.query(500_000, 500_000) == 5
    assert tree.query(0, 499_999) == 0
    assert tree.node_count() <= 31


def test_full_domain_update_creates_a_single_node():
    tree = DynamicArq.sparse(DOMAIN, AddSum())

    tree.update(0, DOMAIN - 1, 3)

    assert tree.node_count() == 1
    assert tree.query(10, 19) == 30
    assert tree.query(0, DOMAIN - 1) == 3 * DOMAIN
    assert tree.node_count() == 1


def test_queries_never_materialise_nodes():
    tree = DynamicArq.sparse(1024, AddSum())
    tree.update(0, 1023, 1)

    assert tree.query(5, 10) == 6
    assert tree.point_query(700) == 1
    assert tree.find_prefix(lambda total: total >= 10) == 9
    assert tree.node_count() == 1


def test_push_down_materialises_only_touched_children():
    tree = DynamicArq.sparse(16, AssignSum())

    tree.update(0, 15, 2)
    tree.update(4, 7, 5)

    assert tree.query(0, 15) == 2 * 12 + 5 * 4
    assert tree.query(3, 4) == 7
    assert tree.to_list() == [2] * 4 + [5] * 4 + [2] * 8
    assert tree.node_count() < 2 * 16 - 1


def test_untouched_min_is_identity():
    tree = DynamicArq.sparse(100, AddMin())

    assert tree.query(0, 99) == float("inf")


def test_sparse_find_prefix():
    tree = DynamicArq.sparse(DOMAIN, AddSum())
    tree.update(123_456, 123_456, 1)
    tree.update(900_000_000, 900_000_000, 1)

    assert tree.find_prefix(lambda total: total >= 1) == 123_456
    assert tree.find_prefix(lambda total: total >= 2) == 900_000_000
    assert tree.find_prefix(lambda total: total >= 3) is None


def test_empty_ranges_return_identity():
    tree = DynamicArq.build([1, 2, 3], AddSum())

    assert tree.query(2, 1) == 0
    assert tree.query(3, 10) == 0
    assert tree.update(5, 9, 1) is None
    assert tree.to_list() == [1, 2, 3]


def test_empty_tree():
    tree = DynamicArq.build([], AddSum())

    assert len(tree) == 0
    assert tree.query(0, 0) == 0
    assert tree.to_list() == []
    assert tree.find_prefix(lambda total: True) is None


def test_negative_size_rejected():
    with pytest.raises(ValueError):
        DynamicArq.sparse(-1, AddSum())


def test_non_commutative_combine_keeps_order():
    tree = DynamicArq.build(list("abcdefg"), MonoidAlgebra(operator.add, ""))

    tree.update(4, 4, "Z")

    assert tree.query(0, 6) == "abcdZfg"
    assert tree.query(3, 5) == "dZf"


def test_sparse_concatenation_treats_gaps_as_identity():
    tree = DynamicArq.sparse(DOMAIN, MonoidAlgebra(operator.add, ""))

    tree.update(7, 7, "b")
    tree.update(3, 3, "a")
    tree.update(DOMAIN - 1, DOMAIN - 1, "c")

    assert tree.query(0, DOMAIN - 1) == "abc"


@pytest.mark.parametrize("seed", [0, 3, 11])
def test_matches_naive_model(seed):
    rng = np.random.default_rng(seed)
    algebra = AddSum()
    values = rng.integers(-20, 21, size=37).tolist()
    tree = DynamicArq.build(values, algebra)
    naive = NaiveArray(algebra, values)

    for kind, low, high, update in random_operations(rng, len(values), 300, [-3, -1, 2, 5]):
        if kind == "update":
            tree.update(low, high, update)
            naive.update(low, high, update)
        else:
            assert tree.query(low, high) == naive.query(low, high)
    assert tree.to_list() == naive.values


@pytest.mark.parametrize("persistent", [False, True])
@pytest.mark.parametrize(
    "algebra, values, no_op",
    [
        (AddSum(), [5, 1, 4, 2, 8], 0),
        (AssignSum(), [5, 1, 4, 2, 8], None),
    ],
)
def test_identity_update_is_a_no_op(algebra, values, no_op, persistent):
    tree = DynamicArq.build(values, algebra, persistent=persistent)
    before = [tree.query(lo, hi) for lo in range(5) for hi in range(lo, 5)]

    for low, high in [(0, 4), (1, 3), (2, 2)]:
        updated = tree.update(low, high, no_op)
        if updated is not None:
            tree = updated

    assert [tree.query(lo, hi) for lo in range(5) for hi in range(lo, 5)] == before
    assert tree.to_list() == values
