from collections import deque
from typing import TYPE_CHECKING, Deque, Generic, List, Tuple, TypeVar

from .arena import NIL
from .errors import IteratorExhaustedError

if TYPE_CHECKING:
    from .tree import AVLTree

T = TypeVar('T')


class _TreeIterator(Generic[T]):
    def __init__(self, tree: 'AVLTree[T]') -> None:
        self._tree = tree
        self._arena = tree._arena
        self._version = tree._version

    # Using an iterator after its tree was mutated is a programming error.
    def _check(self) -> None:
        if self._tree._version != self._version or self._tree._arena is not self._arena:
            raise RuntimeError("tree modified during iteration")

    def _position(self) -> int:
        raise NotImplementedError

    def exhausted(self) -> bool:
        return self._position() == NIL

    def __iter__(self) -> '_TreeIterator[T]':
        return self

    # Equal when both are exhausted or both are about to produce the same node
    # of the same tree; never by value.
    def __eq__(self, other: object) -> bool:
        if not isinstance(other, _TreeIterator) or type(self) is not type(other):
            return NotImplemented
        if self.exhausted() and other.exhausted():
            return True
        return self._arena is other._arena and self._position() == other._position()


class InOrderIterator(_TreeIterator[T]):
    def __init__(self, tree: 'AVLTree[T]') -> None:
        super().__init__(tree)
        self._stack: List[int] = []
        self._push_left_spine(tree._root)

    def _push_left_spine(self, node: int) -> None:
        while node != NIL:
            self._stack.append(int(node))
            node = self._arena.left[node]

    def _position(self) -> int:
        return self._stack[-1] if self._stack else NIL

    def __next__(self) -> T:
        self._check()
        if not self._stack:
            raise IteratorExhaustedError("in-order iterator is exhausted")
        node = self._stack.pop()
        self._push_left_spine(self._arena.right[node])
        return self._arena.values[node]


class LevelOrderIterator(_TreeIterator[T]):
    def __init__(self, tree: 'AVLTree[T]') -> None:
        super().__init__(tree)
        self._queue: Deque[Tuple[int, int]] = deque()
        self._level = -1
        if tree._root != NIL:
            self._queue.append((0, int(tree._root)))

    def level(self) -> int:
        return self._level

    def _position(self) -> int:
        return self._queue[0][1] if self._queue else NIL

    def __next__(self) -> T:
        self._check()
        if not self._queue:
            raise IteratorExhaustedError("level-order iterator is exhausted")
        depth, node = self._queue.popleft()
        for child in (self._arena.left[node], self._arena.right[node]):
            if child != NIL:
                self._queue.append((depth + 1, int(child)))
        self._level = depth
        return self._arena.values[node]
