import random

import numpy as np
import pytest

from RBTree.AMTreeArray import (
    EVEN,
    MAX_VALUE,
    ODD,
    AMTree,
    build_amt,
    fill_amt,
    warmup,
)
from RBTree.Errors import InvalidRelationshipError, InvalidValueError


def _build(values, size=64):
    amt = AMTree(size)
    for value in values:
        amt.insert(value)
    return amt


def test_empty_tree():
    amt = AMTree()

    assert amt.is_empty()
    assert len(amt) == 0
    assert amt.rows == 0
    assert amt.root_of(EVEN) == 0 and amt.root_of(ODD) == 0
    assert not amt.contains(2)
    assert amt.to_level_order_string(EVEN) == "[ ]"


def test_even_and_odd_share_rows(assert_red_black):
    amt = _build([2, 3, 4, 7])

    assert amt.contains(2)
    assert amt.contains(7)
    assert not amt.contains(5)
    assert not amt.contains(6)

    assert amt.rows == 2
    assert amt.to_level_order_string(EVEN) == "[ 2/3(b), 4/7(r) ]"
    assert amt.to_level_order_string(ODD) == "[ 2/3(b), 4/7(r) ]"

    assert assert_red_black(amt, EVEN) == [2, 4]
    assert assert_red_black(amt, ODD) == [3, 7]


def test_each_parity_rebalances_on_its_own_layer():
    amt = _build([2, 4, 6])
    assert amt.to_level_order_string(EVEN) == "[ 4/0(b), 2/0(r), 6/0(r) ]"

    for value in (1, 3, 5):
        amt.insert(value)

    # Vacant odd slots are filled newest row first.
    assert amt.rows == 3
    assert amt.to_level_order_string(EVEN) == "[ 4/3(b), 2/5(r), 6/1(r) ]"
    assert amt.to_level_order_string(ODD) == "[ 4/3(b), 6/1(r), 2/5(r) ]"


def test_first_value_of_each_parity_is_a_black_root():
    amt = _build([9])

    assert amt.get_value(amt.root_of(ODD), ODD) == 9
    assert not amt.is_red(amt.root_of(ODD), ODD)
    assert amt.root_of(EVEN) == 0

    amt.insert(8)
    assert amt.root_of(EVEN) == amt.root_of(ODD)
    assert not amt.is_red(amt.root_of(EVEN), EVEN)


@pytest.mark.parametrize("value", [0, -1, -100, None, 2.5, "4", True])
def test_invalid_values_are_rejected(value):
    amt = _build([2, 3])

    with pytest.raises(InvalidValueError):
        amt.insert(value)

    assert len(amt) == 2
    assert amt.to_level_order_string(EVEN) == "[ 2/3(b) ]"


def test_values_beyond_int64_are_rejected():
    amt = AMTree()

    with pytest.raises(InvalidValueError):
        amt.insert(MAX_VALUE + 1)

    amt.insert(MAX_VALUE)
    assert amt.contains(MAX_VALUE)
    assert not amt.contains(MAX_VALUE + 1)


def test_invalid_value_error_is_a_value_error():
    assert issubclass(InvalidValueError, ValueError)


def test_contains_never_raises():
    amt = _build([1, 2])

    for value in (0, -3, None, 1.0, "1", True):
        assert not amt.contains(value)

    assert amt.contains(np.int64(2))
    assert 1 in amt


def test_duplicates_go_left():
    amt = _build([6, 6])

    root = amt.root_of(EVEN)
    assert amt.get_right(root, EVEN) == 0
    assert amt.get_value(amt.get_left(root, EVEN), EVEN) == 6
    assert len(amt) == 2


@pytest.mark.parametrize("seed", [0, 5, 99])
def test_random_inserts_keep_both_parities_valid(seed, assert_red_black):
    rng = random.Random(seed)
    values = [rng.randrange(1, 800) for _ in range(500)]

    amt = _build(values, size=0)

    evens = sorted(v for v in values if v % 2 == 0)
    odds  = sorted(v for v in values if v % 2 == 1)

    assert assert_red_black(amt, EVEN) == evens
    assert assert_red_black(amt, ODD) == odds
    assert amt.rows == max(len(evens), len(odds))
    assert len(amt) == len(values)

    for value in values:
        assert amt.contains(value)

    for value in set(range(1, 810)) - set(values):
        assert not amt.contains(value)


def test_rotation_only_moves_one_parity(assert_links):
    amt = _build([2, 3, 4, 7])
    root  = amt.root_of(EVEN)
    right = amt.get_right(root, EVEN)

    amt.rotate(right, root, EVEN)

    assert amt.root_of(EVEN) == right
    assert amt.to_level_order_string(EVEN) == "[ 4/7(r), 2/3(b) ]"
    assert amt.to_level_order_string(ODD) == "[ 2/3(b), 4/7(r) ]"
    assert_links(amt, EVEN)
    assert_links(amt, ODD)

    amt.rotate(root, right, EVEN)
    assert amt.to_level_order_string(EVEN) == "[ 2/3(b), 4/7(r) ]"


def test_rotation_errors():
    amt = _build([2, 4, 6, 1])
    before = amt.to_level_order_string(EVEN)

    root = amt.root_of(EVEN)
    left, right = amt.get_left(root, EVEN), amt.get_right(root, EVEN)

    for child, parent in ((None, None), (None, root), (root, None), (left, right)):
        with pytest.raises(InvalidRelationshipError):
            amt.rotate(child, parent, EVEN)

    # Rows 1 and 2 are linked in the even layer only.
    with pytest.raises(InvalidRelationshipError):
        amt.rotate(left, root, ODD)

    with pytest.raises(ValueError):
        amt.rotate(left, root, 2)

    assert amt.to_level_order_string(EVEN) == before


def test_insert_bulk_matches_single_inserts(assert_red_black):
    rng = random.Random(8)
    values = [rng.randrange(1, 300) for _ in range(200)]

    bulk = AMTree(4)
    bulk.insert_bulk(np.array(values, dtype=np.int64))
    single = _build(values)

    for parity in (EVEN, ODD):
        assert bulk.to_level_order_string(parity) == single.to_level_order_string(parity)
        assert_red_black(bulk, parity)

    assert len(bulk) == len(values)


@pytest.mark.parametrize("batch", [
    [3, 0, 5],
    [4, -2],
    np.array([1.5, 2.0]),
])
def test_insert_bulk_validates_before_writing(batch):
    amt = _build([10])

    with pytest.raises(InvalidValueError):
        amt.insert_bulk(batch)

    assert len(amt) == 1
    assert amt.to_level_order_string(EVEN) == "[ 10/0(b) ]"


def test_insert_bulk_accepts_empty_and_unsigned():
    amt = AMTree()
    amt.insert_bulk([])
    assert amt.is_empty()

    amt.insert_bulk(np.array([5, 6], dtype=np.uint64))
    assert amt.contains(5) and amt.contains(6)


def test_contains_bulk():
    amt = _build([2, 3, 4, 7, 100])

    queries = np.array([2, 5, 100, 0, -7, 7, 101], dtype=np.int64)
    found   = amt.contains_bulk(queries)

    assert found.dtype == np.bool_
    assert found.tolist() == [True, False, True, False, False, True, False]
    assert amt.contains_bulk([]).size == 0
    assert amt.contains_bulk(np.array([2**64 - 1, 4], dtype=np.uint64)).tolist() == [False, True]


def test_build_and_fill_helpers(assert_red_black):
    amt = build_amt(np.arange(1, 101, dtype=np.int64))

    assert len(amt) == 100
    assert amt.rows == 50
    assert assert_red_black(amt, EVEN) == list(range(2, 101, 2))

    fill_amt(amt, np.array([101, 102], dtype=np.int64))
    assert amt.contains(101) and amt.contains(102)

    assert build_amt([]).is_empty()


def test_clear():
    amt = _build([1, 2, 3])
    amt.clear()

    assert amt.is_empty()
    assert amt.rows == 0
    assert not amt.contains(1)

    amt.insert(5)
    assert amt.to_level_order_string(ODD) == "[ 0/5(b) ]"


def test_invalid_parity_is_rejected():
    amt = _build([1])

    with pytest.raises(ValueError):
        amt.root_of(3)

    with pytest.raises(ValueError):
        amt.to_level_order_string(-1)


def test_warmup():
    assert warmup()
