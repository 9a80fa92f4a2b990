import logging
from typing import Any, List, Optional, Tuple

from RBTree.Arena import DEFAULT_SIZE, Arena
from RBTree.Errors import NullValueError
from RBTree.Layout import NIL
from RBTree.Repair import place_and_repair



logger = logging.getLogger(__name__)

LAYER = 0



class RedBlackTree:
    """
    Red-black tree over any mutually comparable keys, stored in an index arena.

    Links, parent indices and colors live in the arena's packed node words
    and are rebalanced by the compiled rotation/repair kernels. Keys stay in
    a Python list aligned with the row indices, so comparisons run in Python
    and any ordered type (ints, strings, tuples, ...) can be stored.

    Duplicates are kept: a key equal to a visited node goes to its left.

    Attributes:
        root (int): Index of the root node (0 if empty).
    """

    def __init__(
        self,
        size: int = DEFAULT_SIZE

    ) -> None:

        self._arena = Arena(size, layers=1)
        self._keys: List[Any] = [None]

    @property
    def root(self) -> int:
        return int(self._arena.roots[LAYER])

    @property
    def black_height(self) -> int:
        return self._arena.black_height(LAYER)

    def get_key(
        self,
        index: int

    ) -> Optional[Any]:

        """
        Key stored at `index`, or None for the absent node.
        """

        if index == NIL:
            return None

        return self._keys[index]

    def get_left(self, index: int) -> int:
        return self._arena.left(index, LAYER)

    def get_right(self, index: int) -> int:
        return self._arena.right(index, LAYER)

    def get_up(self, index: int) -> int:
        return self._arena.up(index, LAYER)

    def is_red(self, index: int) -> bool:
        return self._arena.is_red(index, LAYER)

    def _find_position(
        self,
        key: Any

    ) -> Tuple[int, bool]:

        """
        Plain BST descent for a new key.

        Returns:
            Tuple[int, bool]:
                - parent: index of the node the new leaf hangs from (0 if empty).
                - go_left: True when the leaf becomes the parent's left child.
        """

        parent  = NIL
        go_left = False
        current = self.root

        while current != NIL:
            parent  = current
            go_left = key <= self._keys[current]
            current = self.get_left(current) if go_left else self.get_right(current)

        return parent, go_left

    def insert(
        self,
        key: Any

    ) -> None:

        """
        Insert `key` and rebalance.

        Raises:
            NullValueError: `key` is None.
            TypeError: `key` cannot be compared with the stored keys. The
                tree is left unchanged.
        """

        if key is None:
            raise NullValueError("Provided key is None")

        parent, go_left = self._find_position(key)

        index = self._arena.allocate()
        self._keys.append(key)

        place_and_repair(
            self._arena.tree,
            self._arena.roots,
            LAYER,
            index,
            parent,
            go_left
        )

    def contains(
        self,
        key: Any

    ) -> bool:

        """Iterative BST search; None is never contained."""

        if key is None:
            return False

        current = self.root
        while current != NIL:
            current_key = self._keys[current]

            if key == current_key:
                return True

            elif key < current_key:
                current = self.get_left(current)

            else:
                current = self.get_right(current)

        return False

    def __contains__(self, key: Any) -> bool:
        return self.contains(key)

    def rotate(
        self,
        child:  Optional[int],
        parent: Optional[int]

    ) -> None:

        """
        Rotate `child` over `parent`: a left rotation when `child` is the
        right child, a right rotation when it is the left child.

        Raises:
            InvalidRelationshipError: a node is absent or the two are not
                parent and child.
        """

        self._arena.rotate(child, parent, LAYER)

    def is_empty(self) -> bool:
        return self.root == NIL

    def clear(self) -> None:
        self._arena.reset()
        self._keys = [None]
        logger.debug("RedBlackTree cleared")

    def to_level_order_string(self) -> str:
        """
        Breadth-first debug rendering, e.g. "[ 10(b), 5(b), 20(b), 3(r) ]".
        """

        items = [
            f"{self._keys[index]}({'r' if self.is_red(index) else 'b'})"
            for index in self._arena.level_order(LAYER)
        ]

        if not items:
            return "[ ]"

        return "[ " + ", ".join(items) + " ]"

    def __len__(self) -> int:
        return len(self._keys) - 1

    def __str__(self) -> str:
        return "RedBlackTree(size=" + str(len(self)) + ", root=" + str(self.root) + ", black_height=" + str(self.black_height) + ")"
