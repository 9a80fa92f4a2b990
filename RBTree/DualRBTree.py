from RBTree.AMTreeArray import EVEN, ODD, check_value
from RBTree.Arena import DEFAULT_SIZE
from RBTree.Errors import InvalidValueError
from RBTree.RBTreeArray import RedBlackTree



class DualRedBlackTree:
    """
    Two separate red-black trees, one for even and one for odd values.

    Baseline for `AMTree`: the same values and validation, but each parity
    owns a full arena instead of sharing rows.
    """

    def __init__(
        self,
        size: int = DEFAULT_SIZE

    ) -> None:

        self.trees = (RedBlackTree(size), RedBlackTree(size))

    def tree_of(
        self,
        parity: int

    ) -> RedBlackTree:

        if parity not in (EVEN, ODD):
            raise ValueError(f"Parity must be {EVEN} (even) or {ODD} (odd), not {parity!r}")

        return self.trees[parity]

    def insert(
        self,
        value: int

    ) -> None:

        """
        Raises:
            InvalidValueError: `value` is not an integer in [1, MAX_VALUE].
        """

        value = check_value(value)
        self.trees[value & 1].insert(value)

    def contains(
        self,
        value

    ) -> bool:

        try:
            value = check_value(value)
        except InvalidValueError:
            return False

        return self.trees[value & 1].contains(value)

    def __contains__(self, value) -> bool:
        return self.contains(value)

    def is_empty(self) -> bool:
        return len(self) == 0

    def clear(self) -> None:
        for tree in self.trees:
            tree.clear()

    def __len__(self) -> int:
        return len(self.trees[EVEN]) + len(self.trees[ODD])
