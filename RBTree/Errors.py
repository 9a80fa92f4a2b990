class TreeError(Exception):
    """Base class for errors raised by the tree API."""


class NullValueError(TreeError, TypeError):
    """An absent (None) key was passed to a single-key insert."""


class InvalidValueError(TreeError, ValueError):
    """A parity tree value is not an integer in [1, MAX_VALUE]; 0 marks an empty slot."""


class InvalidRelationshipError(TreeError, ValueError):
    """The nodes given to a rotation are absent or not a direct parent/child pair."""
