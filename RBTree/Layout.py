import numpy as np
from numba import njit
from typing import Tuple



# Packed per-layer node layout:
#     LINKS[63]: [left[31] | right[31] | red[1]]
#     UP[64]   : parent index
#     Limitations:
#         0 <= left  <= (1 << 31) - 1
#         0 <= right <= (1 << 31) - 1
#     Index 0 is the absent node (NIL): no child, no parent, empty tree.



# LINKS[63]: [left[31] | right[31] | red[1]]
INDEX_MASK  = np.int64(0x7FFFFFFF) # (1 << 31) - 1
RED_MASK    = np.int64(0x1)
RIGHT_SHIFT = np.int64(0x1)  # 1
LEFT_SHIFT  = np.int64(0x20) # 32

# Word positions inside tree[index, layer]
LINKS = 0
UP    = 1

NIL   = 0
BLACK = 0
RED   = 1

MAX_INDEX = int(INDEX_MASK)



# ---------- JIT-Compiled Bitwise Accessors / Updaters for Packed Fields ----------
@njit(inline="always")
def pack(
    left:  np.int64,
    right: np.int64,
    red:   np.int64

) -> np.int64:

    """
    Pack the two child indices and the color bit of one layer into a single
    63-bit word: [left[31] | right[31] | red[1]].

    The top bit of the int64 is never used, so packed words stay non-negative.

    :param left: Index of the left child (0 when absent)
    :type left: np.int64
    :param right: Index of the right child (0 when absent)
    :type right: np.int64
    :param red: 1 for a red node, 0 for a black node
    :type red: np.int64
    :return: The packed link word
    :rtype: np.int64
    """

    return np.int64(
        ((np.int64(left) & INDEX_MASK) << LEFT_SHIFT)
        | ((np.int64(right) & INDEX_MASK) << RIGHT_SHIFT)
        | (np.int64(red) & RED_MASK)
    )

@njit(inline="always")
def unpack(
    word: np.int64

) -> Tuple[np.int64, np.int64, np.int64]:

    """
    Unpack a link word into (left, right, red).

    NOTE:
    Intended for tests and debugging. Kernels read single fields through the
    `_get_*` accessors instead.
    """

    left  = (word >> LEFT_SHIFT) & INDEX_MASK
    right = (word >> RIGHT_SHIFT) & INDEX_MASK
    red   = word & RED_MASK

    return np.int64(left), np.int64(right), np.int64(red)

@njit(inline="always")
def _get_left(
    word: np.int64

) -> np.int64:

    """
    Extract the 'left' field (31 bits) from a link word.
    """

    return np.int64((word >> LEFT_SHIFT) & INDEX_MASK)

@njit(inline="always")
def _get_right(
    word: np.int64

) -> np.int64:

    """
    Extract the 'right' field (31 bits) from a link word.
    """

    return np.int64((word >> RIGHT_SHIFT) & INDEX_MASK)

@njit(inline="always")
def _is_red(
    word: np.int64

) -> bool:

    return (word & RED_MASK) == RED_MASK

@njit(inline="always")
def _update_left(
    word:     np.int64,
    new_left: np.int64

) -> np.int64:

    """
    Replace the 'left' field (31 bits) of a link word.
    The right index and the color bit are left unchanged.
    """

    word     = np.int64(word)
    new_left = np.int64(new_left)

    return np.int64((word & ~(INDEX_MASK << LEFT_SHIFT)) | ((new_left & INDEX_MASK) << LEFT_SHIFT))

@njit(inline="always")
def _update_right(
    word:      np.int64,
    new_right: np.int64

) -> np.int64:

    """
    Replace the 'right' field (31 bits) of a link word.
    The left index and the color bit are left unchanged.
    """

    word      = np.int64(word)
    new_right = np.int64(new_right)

    return np.int64((word & ~(INDEX_MASK << RIGHT_SHIFT)) | ((new_right & INDEX_MASK) << RIGHT_SHIFT))

@njit(inline="always")
def _update_red(
    word:    np.int64,
    new_red: np.int64

) -> np.int64:

    """
    Replace the color bit of a link word.
    """

    word    = np.int64(word)
    new_red = np.int64(new_red)

    return np.int64((word & ~RED_MASK) | (new_red & RED_MASK))



# ---------- Row Access ----------
@njit(inline="always")
def left_of(
    tree:  np.ndarray,
    index: np.int64,
    layer: np.int64

) -> np.int64:

    return _get_left(tree[index, layer, LINKS])

@njit(inline="always")
def right_of(
    tree:  np.ndarray,
    index: np.int64,
    layer: np.int64

) -> np.int64:

    return _get_right(tree[index, layer, LINKS])

@njit(inline="always")
def up_of(
    tree:  np.ndarray,
    index: np.int64,
    layer: np.int64

) -> np.int64:

    return np.int64(tree[index, layer, UP])

@njit(inline="always")
def red_of(
    tree:  np.ndarray,
    index: np.int64,
    layer: np.int64

) -> bool:

    """
    Color test that treats the absent node as black.
    """

    if index == NIL:
        return False

    return _is_red(tree[index, layer, LINKS])

@njit(inline="always")
def set_color(
    tree:  np.ndarray,
    index: np.int64,
    layer: np.int64,
    red:   np.int64

) -> None:

    tree[index, layer, LINKS] = _update_red(tree[index, layer, LINKS], red)

@njit(inline="always")
def set_leaf(
    tree:   np.ndarray,
    index:  np.int64,
    layer:  np.int64,
    parent: np.int64,
    red:    np.int64

) -> None:

    """
    Reset a row of one layer to a childless node hanging below `parent`.
    """

    tree[index, layer, LINKS] = pack(NIL, NIL, red)
    tree[index, layer, UP]    = parent
