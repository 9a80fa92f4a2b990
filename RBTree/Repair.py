import numpy as np
from numba import njit

from RBTree.Layout import (
    BLACK,
    LINKS,
    NIL,
    RED,
    _update_left,
    _update_right,
    left_of,
    red_of,
    right_of,
    set_color,
    set_leaf,
    up_of,
)
from RBTree.Rotation import rotate



@njit(inline="always")
def _flip_color(
    tree:  np.ndarray,
    index: np.int64,
    layer: np.int64

) -> None:

    tree[index, layer, LINKS] = tree[index, layer, LINKS] ^ np.int64(1)

@njit(inline="always")
def _swap_colors(
    tree:  np.ndarray,
    a:     np.int64,
    b:     np.int64,
    layer: np.int64

) -> None:

    red_a = RED if red_of(tree, a, layer) else BLACK
    red_b = RED if red_of(tree, b, layer) else BLACK

    set_color(tree, a, layer, red_b)
    set_color(tree, b, layer, red_a)

@njit(inline="always")
def ensure_red_property(
    tree:  np.ndarray,
    roots: np.ndarray,
    layer: np.int64,
    node:  np.int64

) -> None:

    """
    Repair red-black violations caused by a red `node` in one layer.

    Walks upward from `node`:
    1. `node` is the root: color it black and stop.
    2. Parent is black: nothing to repair.
    3. Parent and aunt are red: flip parent, aunt and grandparent, then
       continue from the grandparent, which may now clash with its parent.
    4. Parent is red, aunt is black or absent: one or two rotations
       (LL, RR, LR, RL) followed by a color swap; the subtree is balanced
       and the walk stops.

    :param tree: Node array [N, layers, 2]
    :type tree: np.ndarray
    :param roots: Root index of every layer
    :type roots: np.ndarray
    :param layer: Layer being repaired
    :type layer: np.int64
    :param node: Index of the red node
    :type node: np.int64
    """

    while True:
        parent = up_of(tree, node, layer)

        if parent == NIL:
            set_color(tree, node, layer, BLACK)
            return

        if not red_of(tree, parent, layer):
            return

        grandparent = up_of(tree, parent, layer)

        # Red root
        if grandparent == NIL:
            set_color(tree, parent, layer, BLACK)
            return

        parent_is_left = left_of(tree, grandparent, layer) == parent
        if parent_is_left:
            aunt = right_of(tree, grandparent, layer)
        else:
            aunt = left_of(tree, grandparent, layer)

        # Recolor
        if red_of(tree, aunt, layer):
            _flip_color(tree, parent, layer)
            _flip_color(tree, aunt, layer)
            _flip_color(tree, grandparent, layer)

            node = grandparent
            continue

        # Rotate
        node_is_left = left_of(tree, parent, layer) == node

        if parent_is_left == node_is_left: # LL / RR
            rotate(tree, roots, layer, parent, grandparent)
            _swap_colors(tree, parent, grandparent, layer)

        else: # LR / RL
            rotate(tree, roots, layer, node, parent)
            rotate(tree, roots, layer, node, grandparent)
            _swap_colors(tree, node, grandparent, layer)

        return

@njit(inline="always")
def attach_red_leaf(
    tree:    np.ndarray,
    roots:   np.ndarray,
    layer:   np.int64,
    index:   np.int64,
    parent:  np.int64,
    go_left: bool

) -> None:

    """
    Link the row `index` as a new red leaf below `parent` (or as the root
    when `parent` is NIL).
    """

    set_leaf(tree, index, layer, parent, RED)

    if parent == NIL:
        roots[layer] = index
        return

    word = tree[parent, layer, LINKS]
    if go_left:
        tree[parent, layer, LINKS] = _update_left(word, index)
    else:
        tree[parent, layer, LINKS] = _update_right(word, index)

@njit
def place_and_repair(
    tree:    np.ndarray,
    roots:   np.ndarray,
    layer:   np.int64,
    index:   np.int64,
    parent:  np.int64,
    go_left: bool

) -> None:

    """
    Finish an insertion whose BST position has already been found: link the
    red leaf, repair the layer and force its root black.
    """

    attach_red_leaf(tree, roots, layer, index, parent, go_left)
    ensure_red_property(tree, roots, layer, index)
    set_color(tree, roots[layer], layer, BLACK)
