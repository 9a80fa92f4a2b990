import pytest

from RBTree.RBTreeArray import RedBlackTree


class _LayerView:
    """Uniform read access to one red-black layer of either tree type."""

    def __init__(self, tree, parity=None):
        if isinstance(tree, RedBlackTree):
            self.root  = tree.root
            self.left  = tree.get_left
            self.right = tree.get_right
            self.up    = tree.get_up
            self.red   = tree.is_red
            self.key   = tree.get_key
        else:
            self.root  = tree.root_of(parity)
            self.left  = lambda i: tree.get_left(i, parity)
            self.right = lambda i: tree.get_right(i, parity)
            self.up    = lambda i: tree.get_up(i, parity)
            self.red   = lambda i: tree.is_red(i, parity)
            self.key   = lambda i: tree.get_value(i, parity)


def _check_red_black(tree, parity=None):
    """
    Assert every red-black and BST invariant of one layer and return its
    keys in order.
    """

    view = _LayerView(tree, parity)
    keys = []

    assert not view.red(view.root), "root must be black"

    def visit(index, parent):
        if index == 0:
            return 1

        assert view.up(index) == parent, f"up link of {index} does not match its parent"

        left, right = view.left(index), view.right(index)
        if view.red(index):
            assert not view.red(left) and not view.red(right), f"red-red at {view.key(index)}"

        left_height = visit(left, index)
        keys.append(view.key(index))
        right_height = visit(right, index)

        assert left_height == right_height, f"black-height mismatch at {view.key(index)}"
        return left_height + (0 if view.red(index) else 1)

    visit(view.root, 0)
    assert keys == sorted(keys), "in-order keys must be sorted"
    return keys


def _check_links(tree, parity=None):
    """Assert only that every up link agrees with its parent's child link."""

    view  = _LayerView(tree, parity)
    stack = [(view.root, 0)]
    while stack:
        index, parent = stack.pop()
        if index == 0:
            continue
        assert view.up(index) == parent
        stack.append((view.left(index), index))
        stack.append((view.right(index), index))


@pytest.fixture
def assert_red_black():
    return _check_red_black


@pytest.fixture
def assert_links():
    return _check_links
