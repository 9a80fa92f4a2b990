import logging
from typing import Iterable, Optional, Tuple

import numpy as np
from numba import njit, prange

from RBTree.Arena import DEFAULT_SIZE, Arena, _resized
from RBTree.Errors import InvalidValueError
from RBTree.Layout import NIL, left_of, right_of
from RBTree.RBTreeArray import RedBlackTree
from RBTree.Repair import place_and_repair



logger = logging.getLogger(__name__)

# Layers of the shared arena; a value's parity selects its layer.
EVEN = 0
ODD  = 1

# 0 marks an empty slot and can never be stored.
EMPTY     = 0
MIN_VALUE = 1
MAX_VALUE = (1 << 63) - 1



def check_value(value) -> int:
    """
    Validate a parity tree value and return it as a Python int.

    Raises:
        InvalidValueError: `value` is not an integer in [MIN_VALUE, MAX_VALUE].
    """

    if isinstance(value, bool) or not isinstance(value, (int, np.integer)):
        raise InvalidValueError(f"Value must be an integer, not {value!r}")

    if not (MIN_VALUE <= value <= MAX_VALUE):
        raise InvalidValueError(
            f"Value must be between {MIN_VALUE} and {MAX_VALUE}, not {value}"
        )

    return int(value)


def _check_parity(parity: int) -> int:
    if parity not in (EVEN, ODD):
        raise ValueError(f"Parity must be {EVEN} (even) or {ODD} (odd), not {parity!r}")

    return parity



# ---------- JIT-Compiled AMT Core Operations ----------
@njit(inline="always")
def _find_position(
    tree:   np.ndarray,
    values: np.ndarray,
    roots:  np.ndarray,
    layer:  np.int64,
    value:  np.int64

) -> Tuple[np.int64, bool]:

    """
    BST descent within one parity layer, comparing against that parity's
    slot only. Equal values go left.

    Returns:
        Tuple[np.int64, bool]:
            - parent: index of the node the new leaf hangs from (0 if the layer is empty).
            - go_left: True when the leaf becomes the parent's left child.
    """

    parent  = NIL
    go_left = False
    current = roots[layer]

    while current != NIL:
        parent  = current
        go_left = value <= values[current, layer]

        if go_left:
            current = left_of(tree, current, layer)
        else:
            current = right_of(tree, current, layer)

    return np.int64(parent), go_left

@njit(inline="always")
def _take_row(
    vacancies:    np.ndarray,
    vacancy_tops: np.ndarray,
    free:         np.int64,
    layer:        np.int64

) -> Tuple[np.int64, np.int64]:

    """
    Pick the row that will hold a value of `layer`'s parity.

    A row whose slot of that parity is still empty is reused first (stack
    per parity). Otherwise a fresh row is taken from `free`; its slot of the
    other parity is empty, so it is pushed on the other parity's stack.

    Returns:
        Tuple[np.int64, np.int64]: (row index, updated free)
    """

    if vacancy_tops[layer] > 0:
        vacancy_tops[layer] -= 1
        return np.int64(vacancies[vacancy_tops[layer], layer]), np.int64(free)

    row   = np.int64(free)
    other = 1 - layer

    vacancies[vacancy_tops[other], other] = row
    vacancy_tops[other] += 1

    return row, np.int64(free + 1)

@njit(boundscheck=False)
def insert(
    tree:         np.ndarray,
    values:       np.ndarray,
    roots:        np.ndarray,
    vacancies:    np.ndarray,
    vacancy_tops: np.ndarray,
    free:         np.int64,
    value:        np.int64

) -> np.int64:

    """
    Insert one validated value into the AMT.

    The parity of `value` picks the layer. The value is written into the
    matching slot of a reused or fresh row, the row is linked as a red leaf
    at its BST position in that layer, and the layer is repaired.

    The caller guarantees value >= 1 and at least one spare row in every
    row-aligned array.

    Parameters
    ----------
    tree : np.ndarray
        Node array [N, 2 layers, 2 words].
    values : np.ndarray
        Slot array [N, 2]: column 0 holds even values, column 1 odd values.
    roots : np.ndarray
        Root index per layer.
    vacancies : np.ndarray
        Per-parity stacks [N, 2] of rows whose slot of that parity is empty.
    vacancy_tops : np.ndarray
        Stack heights per parity.
    free : np.int64
        Next never-used row.
    value : np.int64
        The value to insert.

    Returns
    -------
    np.int64
        Updated free.
    """

    layer = np.int64(value & 1)

    parent, go_left = _find_position(tree, values, roots, layer, value)
    row, free       = _take_row(vacancies, vacancy_tops, free, layer)

    values[row, layer] = value
    place_and_repair(tree, roots, layer, row, parent, go_left)

    return free

@njit
def _insert_all(
    tree:         np.ndarray,
    values:       np.ndarray,
    roots:        np.ndarray,
    vacancies:    np.ndarray,
    vacancy_tops: np.ndarray,
    free:         np.int64,
    data:         np.ndarray

) -> np.int64:

    """
    Insert every value of `data` in a single compiled loop.
    """

    for i in range(data.size):
        free = insert(tree, values, roots, vacancies, vacancy_tops, free, data[i])

    return free

@njit(inline="always")
def _search_single(
    tree:   np.ndarray,
    values: np.ndarray,
    roots:  np.ndarray,
    value:  np.int64

) -> np.int64:

    """
    Iterative search in the layer of `value`'s parity.

    Returns:
        np.int64: Index of the row holding `value`, or 0 if not found.
    """

    if value < MIN_VALUE:
        return np.int64(NIL)

    layer   = np.int64(value & 1)
    current = roots[layer]

    while current != NIL:
        value_curr = values[current, layer]

        if value == value_curr:
            return np.int64(current)

        elif value < value_curr:
            current = left_of(tree, current, layer)

        else:
            current = right_of(tree, current, layer)

    return np.int64(NIL)

@njit(parallel=True)
def _search_bulk(
    tree:    np.ndarray,
    values:  np.ndarray,
    roots:   np.ndarray,
    queries: np.ndarray

) -> np.ndarray:

    """
    Parallel membership test for many values.

    Searches only read the arrays, so they are spread over all cores with
    'prange'. The tree must not be modified while this runs.

    Returns:
        np.ndarray: Boolean array, True where the query value is stored.
    """

    size    = queries.size
    results = np.zeros(size, dtype=np.bool_)
    for i in prange(size):
        results[i] = _search_single(tree, values, roots, queries[i]) != NIL

    return results



# --------- AMTree API ---------
class AMTree:
    """
    Alternating/Merged Tree: two red-black trees, one over even values and
    one over odd values, sharing a single array of node rows.

    Every row has an even slot and an odd slot, and one link layer per
    parity. Each parity is balanced on its own layer by the same
    rotation/repair kernels as `RedBlackTree`, so the even values and the
    odd values each form a valid red-black tree. A row created for one
    parity leaves its other slot empty (0) and is reused by the next
    insertion of the other parity, so n even and m odd values need only
    max(n, m) rows.

    Attributes:
        values (int64[:, :]): Slot array [size, 2]; column EVEN / ODD.
        count (int): Number of stored values.
    """

    def __init__(
        self,
        size: int = DEFAULT_SIZE

    ) -> None:

        self._arena        = Arena(size, layers=2)
        self.values        = np.zeros((self._arena.size, 2), dtype=np.int64)
        self._vacancies    = np.zeros((self._arena.size, 2), dtype=np.int64)
        self._vacancy_tops = np.zeros(2, dtype=np.int64)
        self.count         = 0

    def _reserve(
        self,
        count: int

    ) -> None:

        if self._arena.reserve(count):
            self.values     = _resized(self.values, self._arena.size)
            self._vacancies = _resized(self._vacancies, self._arena.size)

    def root_of(
        self,
        parity: int

    ) -> int:

        return int(self._arena.roots[_check_parity(parity)])

    @property
    def rows(self) -> int:
        """Number of node rows in use."""

        return self._arena.free - 1

    def black_height(
        self,
        parity: int

    ) -> int:

        return self._arena.black_height(_check_parity(parity))

    def get_value(
        self,
        index:  int,
        parity: int

    ) -> int:

        """
        Slot of the given parity at `index`; 0 when the slot is empty or
        the index is the absent node.
        """

        if index == NIL:
            return EMPTY

        return int(self.values[index, _check_parity(parity)])

    def get_left(self, index: int, parity: int) -> int:
        return self._arena.left(index, _check_parity(parity))

    def get_right(self, index: int, parity: int) -> int:
        return self._arena.right(index, _check_parity(parity))

    def get_up(self, index: int, parity: int) -> int:
        return self._arena.up(index, _check_parity(parity))

    def is_red(self, index: int, parity: int) -> bool:
        return self._arena.is_red(index, _check_parity(parity))

    def insert(
        self,
        value: int

    ) -> None:

        """
        Insert a value >= 1 into the tree of its parity and rebalance.

        Raises:
            InvalidValueError: `value` is not an integer in [1, MAX_VALUE].
        """

        value = check_value(value)
        self._reserve(1)

        self._arena.free = int(insert(
            self._arena.tree,
            self.values,
            self._arena.roots,
            self._vacancies,
            self._vacancy_tops,
            self._arena.free,
            value
        ))

        self.count += 1

    def insert_bulk(
        self,
        data: Iterable[int]

    ) -> None:

        """
        Insert many values in one compiled loop.

        The whole batch is validated first; on error nothing is inserted.
        """

        data = np.asarray(data)
        if data.size == 0:
            return

        if data.dtype.kind not in "iu":
            raise InvalidValueError(f"Values must be integers, not {data.dtype}")

        if data.min() < MIN_VALUE or data.max() > MAX_VALUE:
            raise InvalidValueError(
                f"Values must be between {MIN_VALUE} and {MAX_VALUE}"
            )

        data = data.astype(np.int64).ravel()
        self._reserve(data.size)

        self._arena.free = int(_insert_all(
            self._arena.tree,
            self.values,
            self._arena.roots,
            self._vacancies,
            self._vacancy_tops,
            self._arena.free,
            data
        ))

        self.count += int(data.size)
        logger.debug("AMTree bulk insert of %d values, %d rows in use", data.size, self.rows)

    def contains(
        self,
        value

    ) -> bool:

        """Search the tree of `value`'s parity. Values that could never be stored are never contained."""

        if isinstance(value, bool) or not isinstance(value, (int, np.integer)):
            return False

        if not (MIN_VALUE <= value <= MAX_VALUE):
            return False

        return _search_single(
            self._arena.tree,
            self.values,
            self._arena.roots,
            int(value)
        ) != NIL

    def __contains__(self, value) -> bool:
        return self.contains(value)

    def contains_bulk(
        self,
        queries: Iterable[int]

    ) -> np.ndarray:

        """Parallel membership test; returns a boolean array aligned with `queries`."""

        queries = np.asarray(queries)
        if queries.size == 0:
            return np.zeros(0, dtype=np.bool_)

        if queries.dtype.kind not in "iu":
            raise InvalidValueError(f"Values must be integers, not {queries.dtype}")

        results = np.zeros(queries.size, dtype=np.bool_)
        flat    = queries.ravel()

        # Values above int64 cannot be stored and would wrap when cast.
        in_range = flat <= MAX_VALUE
        results[in_range] = _search_bulk(
            self._arena.tree,
            self.values,
            self._arena.roots,
            flat[in_range].astype(np.int64)
        )

        return results.reshape(queries.shape)

    def rotate(
        self,
        child:  Optional[int],
        parent: Optional[int],
        parity: int

    ) -> None:

        """
        Rotate `child` over `parent` in the tree of the given parity.

        Raises:
            InvalidRelationshipError: a node is absent or the two are not
                parent and child in that parity's tree.
        """

        self._arena.rotate(child, parent, _check_parity(parity))

    def is_empty(self) -> bool:
        return self.count == 0

    def clear(self) -> None:
        self._arena.reset()
        self.values[:]        = EMPTY
        self._vacancies[:]    = 0
        self._vacancy_tops[:] = 0
        self.count            = 0
        logger.debug("AMTree cleared")

    def to_level_order_string(
        self,
        parity: int

    ) -> str:

        """
        Breadth-first debug rendering of one parity's tree. Each row shows
        both slots and its color in that tree, e.g. "[ 4/3(b), 2/0(b) ]".
        """

        parity = _check_parity(parity)
        items  = [
            f"{self.values[index, EVEN]}/{self.values[index, ODD]}({'r' if self._arena.is_red(index, parity) else 'b'})"
            for index in self._arena.level_order(parity)
        ]

        if not items:
            return "[ ]"

        return "[ " + ", ".join(items) + " ]"

    def __len__(self) -> int:
        return int(self.count)

    def __str__(self) -> str:
        return "AMTree(size=" + str(self.count) + ", rows=" + str(self.rows) + ", even_root=" + str(self.root_of(EVEN)) + ", odd_root=" + str(self.root_of(ODD)) + ")"



# --------- Utils ---------
def warmup() -> bool:
    """
    Minimally triggers JIT compilation for the AMT and red-black kernels.
    """

    amt = AMTree(16)
    for x in (30, 20, 10, 41, 55, 25):
        amt.insert(x)

    amt.insert_bulk(np.array([7, 8], dtype=np.int64))
    _ = amt.contains(20)
    _ = amt.contains_bulk(np.array([10, 25, 99], dtype=np.int64))

    rbt = RedBlackTree(16)
    for x in (3, 1, 2):
        rbt.insert(x)

    rbt.rotate(rbt.get_left(rbt.root), rbt.root)

    return True

def build_amt(
    data: Iterable[int]

) -> AMTree:

    """
    Builds and populates an AMTree from an array of values >= 1.
    """

    data = np.asarray(data)
    amt  = AMTree(max(int(data.size), 1))
    amt.insert_bulk(data)

    return amt

def fill_amt(
    amt:  AMTree,
    data: Iterable[int]

) -> None:

    """
    Populates an existing AMTree with multiple values in one compiled loop.
    """

    amt.insert_bulk(data)
