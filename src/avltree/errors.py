"""Exceptions raised by the AVL tree.

Every condition has its own type so callers can tell them apart without
looking at messages. Each also derives from the builtin exception a plain
Python container would raise in the same situation.
"""

from typing import Any


class AVLTreeError(Exception):
    """Base class for every error raised by the tree."""

    def __str__(self) -> str:
        return str(self.args[0]) if self.args else ""


class EmptyTreeError(AVLTreeError, ValueError):
    """min, max, pop or popleft on an empty tree."""


class DuplicateKeyError(AVLTreeError, KeyError):
    def __init__(self, key: Any) -> None:
        super().__init__(f"repeated key {key!r}")
        self.key = key


class NotFoundError(AVLTreeError, KeyError):
    def __init__(self, key: Any) -> None:
        super().__init__(f"key {key!r} not found")
        self.key = key


class IteratorExhaustedError(AVLTreeError, StopIteration):
    """Advancing an iterator past its last element.

    Being a StopIteration, it ends ``for`` loops normally.
    """


class SerializationError(AVLTreeError, ValueError):
    """A binary dump is truncated or describes an invalid tree."""
