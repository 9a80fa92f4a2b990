import logging
from collections import deque
from typing import List

import numpy as np
from numba import njit

from RBTree.Errors import InvalidRelationshipError
from RBTree.Layout import (
    LINKS,
    MAX_INDEX,
    NIL,
    UP,
    _get_left,
    _get_right,
    _is_red,
)
from RBTree.Rotation import ROTATE_MISSING, ROTATE_OK, rotate



logger = logging.getLogger(__name__)

DEFAULT_SIZE  = 64
GROWTH_FACTOR = 2



@njit
def _rotate(
    tree:   np.ndarray,
    roots:  np.ndarray,
    layer:  np.int64,
    child:  np.int64,
    parent: np.int64

) -> np.int64:

    return rotate(tree, roots, layer, child, parent)


def _resized(
    array: np.ndarray,
    size:  int

) -> np.ndarray:

    """
    Copy `array` into a zeroed array with `size` rows; trailing axes are kept.
    """

    grown = np.zeros((size,) + array.shape[1:], dtype=array.dtype)
    grown[:array.shape[0]] = array
    return grown


class Arena:
    """
    Index-based node storage shared by every tree type.

    Rows are addressed by index; row 0 is the absent node (NIL) and is never
    handed out. Each row carries one packed link word and one parent index
    per layer, so a single row can take part in several independent trees.

    Attributes:
        layers (int): Number of independent link layers.
        size (int): Allocated rows, the NIL row included.
        free (int): Next unused row index (rows are handed out from 1).
        tree (int64[:, :, :]): Array [size, layers, 2] of (links, up) words.
        roots (int64[:]): Root index per layer, 0 when the layer is empty.
    """

    def __init__(
        self,
        size:   int = DEFAULT_SIZE,
        layers: int = 1

    ) -> None:

        if not (0 <= size <= MAX_INDEX):
            raise ValueError(
                f"The size value must be between 0 and {MAX_INDEX}, not {size}"
            )

        self.layers = layers
        self.size   = size + 1
        self.free   = 1
        self.tree   = np.zeros((self.size, layers, 2), dtype=np.int64)
        self.roots  = np.zeros(layers, dtype=np.int64)

    def reserve(
        self,
        count: int

    ) -> bool:

        """
        Make room for `count` more rows. Returns True when the arrays were
        reallocated, so owners of row-aligned side arrays can follow.
        """

        needed = self.free + count
        if needed <= self.size:
            return False

        if needed - 1 > MAX_INDEX:
            raise OverflowError(
                f"Cannot address more than {MAX_INDEX} nodes"
            )

        new_size  = min(max(self.size * GROWTH_FACTOR, needed), MAX_INDEX + 1)
        self.tree = _resized(self.tree, new_size)
        logger.debug("Arena grown from %d to %d rows", self.size, new_size)
        self.size = new_size
        return True

    def allocate(self) -> int:
        """Hand out the next unused row."""

        self.reserve(1)
        index = self.free
        self.free += 1
        return index

    def reset(self) -> None:
        self.tree[:] = 0
        self.roots[:] = 0
        self.free = 1

    def contains_index(
        self,
        index

    ) -> bool:

        return isinstance(index, (int, np.integer)) and not isinstance(index, bool) and NIL < index < self.free

    # -- Python-side accessors -------------------------------------

    def left(
        self,
        index: int,
        layer: int = 0

    ) -> int:

        if index == NIL:
            return NIL

        return int(_get_left(self.tree[index, layer, LINKS]))

    def right(
        self,
        index: int,
        layer: int = 0

    ) -> int:

        if index == NIL:
            return NIL

        return int(_get_right(self.tree[index, layer, LINKS]))

    def up(
        self,
        index: int,
        layer: int = 0

    ) -> int:

        if index == NIL:
            return NIL

        return int(self.tree[index, layer, UP])

    def is_red(
        self,
        index: int,
        layer: int = 0

    ) -> bool:

        if index == NIL:
            return False

        return bool(_is_red(self.tree[index, layer, LINKS]))

    def level_order(
        self,
        layer: int = 0

    ) -> List[int]:

        """
        Row indices of one layer in breadth-first order, left before right.
        Used to build debug strings.
        """

        order = []
        queue = deque()

        root = int(self.roots[layer])
        if root != NIL:
            queue.append(root)

        while queue:
            index = queue.popleft()
            order.append(index)

            left  = self.left(index, layer)
            right = self.right(index, layer)
            if left != NIL:
                queue.append(left)
            if right != NIL:
                queue.append(right)

        return order

    def black_height(
        self,
        layer: int = 0

    ) -> int:

        """
        Count of black nodes on the leftmost path of a layer.
        """

        height  = 0
        current = int(self.roots[layer])
        while current != NIL:
            if not self.is_red(current, layer):
                height += 1
            current = self.left(current, layer)

        return height

    def rotate(
        self,
        child,
        parent,
        layer: int = 0

    ) -> None:

        """
        Checked rotation of `child` over `parent` in one layer.

        Raises:
            InvalidRelationshipError: either node is absent or not an
                allocated row, or the two are not a direct parent/child pair.
        """

        if child is None or parent is None or child == NIL or parent == NIL:
            raise InvalidRelationshipError("The child or parent node is missing")

        if not (self.contains_index(child) and self.contains_index(parent)):
            raise InvalidRelationshipError(
                f"Node indices must be allocated rows in [1, {self.free - 1}], not ({child}, {parent})"
            )

        status = _rotate(self.tree, self.roots, layer, int(child), int(parent))

        if status == ROTATE_MISSING:
            raise InvalidRelationshipError("The child or parent node is missing")

        if status != ROTATE_OK:
            raise InvalidRelationshipError(
                f"Node {child} is not a child of node {parent}"
            )
