import numpy as np
from numba import njit

from RBTree.Layout import (
    LINKS,
    NIL,
    UP,
    _get_left,
    _get_right,
    _update_left,
    _update_right,
)



# Status codes returned by `rotate`; the API classes turn them into exceptions.
ROTATE_OK        = 0
ROTATE_MISSING   = 1
ROTATE_UNRELATED = 2



# ---------- JIT-Compiled Rotation ----------
@njit(inline="always")
def rotate(
    tree:   np.ndarray,
    roots:  np.ndarray,
    layer:  np.int64,
    child:  np.int64,
    parent: np.int64

) -> np.int64:

    """
    Rotate `child` into the position of `parent` within one layer.

    The direction is taken from the structure rather than passed in:
    - `child` is the right child of `parent` -> left rotation
      (parent.right <- child.left, child.left <- parent)
    - `child` is the left child of `parent`  -> right rotation (mirror)

    Afterwards `child` takes over the old parent link of `parent`, `parent`
    hangs below `child`, the grandparent's link is redirected to `child`,
    and `roots[layer]` is updated when `parent` was the root. Colors are
    not touched.

    Nothing is written unless the pair is valid: both indices present,
    `parent` links down to `child` and `child` links back up to `parent`.

    :param tree: Node array [N, layers, 2] of packed link words and parent indices
    :type tree: np.ndarray
    :param roots: Root index of every layer
    :type roots: np.ndarray
    :param layer: Layer the rotation applies to
    :type layer: np.int64
    :param child: Index of the node moving up
    :type child: np.int64
    :param parent: Index of the node moving down
    :type parent: np.int64
    :return: ROTATE_OK, ROTATE_MISSING or ROTATE_UNRELATED
    :rtype: np.int64
    """

    if child == NIL or parent == NIL:
        return np.int64(ROTATE_MISSING)

    parent_word = tree[parent, layer, LINKS]
    child_word  = tree[child, layer, LINKS]

    is_right = _get_right(parent_word) == child
    if not is_right and _get_left(parent_word) != child:
        return np.int64(ROTATE_UNRELATED)

    if tree[child, layer, UP] != parent:
        return np.int64(ROTATE_UNRELATED)

    grandparent = tree[parent, layer, UP]

    # Rotate
    if is_right: # SLR
        inner       = _get_left(child_word)
        parent_word = _update_right(parent_word, inner)
        child_word  = _update_left(child_word, parent)
    else: # SRR
        inner       = _get_right(child_word)
        parent_word = _update_left(parent_word, inner)
        child_word  = _update_right(child_word, parent)

    if inner != NIL:
        tree[inner, layer, UP] = parent

    tree[parent, layer, LINKS] = parent_word
    tree[child, layer, LINKS]  = child_word
    tree[child, layer, UP]     = grandparent
    tree[parent, layer, UP]    = child

    # Reattach
    if grandparent == NIL:
        roots[layer] = child
    else:
        grand_word = tree[grandparent, layer, LINKS]
        if _get_left(grand_word) == parent:
            tree[grandparent, layer, LINKS] = _update_left(grand_word, child)
        else:
            tree[grandparent, layer, LINKS] = _update_right(grand_word, child)

    return np.int64(ROTATE_OK)
