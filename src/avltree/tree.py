import operator
from typing import Callable, Generic, Iterable, Iterator, List, Optional, Sequence, Tuple, TypeVar

from .arena import NIL, NodeArena
from .balance import balance_factor, rebalance
from .errors import DuplicateKeyError, EmptyTreeError, NotFoundError
from .iterators import InOrderIterator, LevelOrderIterator

T = TypeVar('T')

Less = Callable[[T, T], bool]


class Node(Generic[T]):
    """Read-only handle on one node of an AVLTree.

    A handle is invalidated by the next mutating call on its tree (insert,
    update, remove, pop, popleft, clear); touching it afterwards raises
    RuntimeError. Two handles are equal when they name the same node of the
    same tree.
    """

    __slots__ = ('_tree', '_index', '_version')

    def __init__(self, tree: 'AVLTree[T]', index: int) -> None:
        self._tree = tree
        self._index = int(index)
        self._version = tree._version

    def _arena(self) -> NodeArena:
        if self._tree._version != self._version:
            raise RuntimeError("node handle used after its tree was modified")
        return self._tree._arena

    def _child(self, index: int) -> Optional['Node[T]']:
        if index == NIL:
            return None
        return Node(self._tree, index)

    @property
    def value(self) -> T:
        return self._arena().values[self._index]

    @property
    def left(self) -> Optional['Node[T]']:
        return self._child(self._arena().left[self._index])

    @property
    def right(self) -> Optional['Node[T]']:
        return self._child(self._arena().right[self._index])

    @property
    def height(self) -> int:
        return int(self._arena().height[self._index])

    @property
    def size(self) -> int:
        return int(self._arena().size[self._index])

    @property
    def balance_factor(self) -> int:
        return balance_factor(self._arena(), self._index)

    def is_leaf(self) -> bool:
        return self._arena().is_leaf(self._index)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Node):
            return NotImplemented
        return self._tree is other._tree and self._index == other._index

    def __hash__(self) -> int:
        return hash((id(self._tree), self._index))

    def __repr__(self) -> str:
        return f"Node({self.value!r}, height={self.height}, size={self.size})"


class AVLTree(Generic[T]):
    def __init__(
        self,
        values: Optional[Iterable[T]] = None,
        less: Less = operator.lt,
        capacity: Optional[int] = None,
    ) -> None:
        self._less = less
        self._arena: NodeArena[T] = NodeArena(capacity)
        self._root: int = NIL
        self._version: int = 0
        if values is not None:
            for value in values:
                self.insert(value)

    def _modified(self) -> None:
        self._version += 1

    # Mutations. Each recursive helper returns the (possibly new) root index of
    # the subtree it was handed so the caller can re-link it.

    def _insert(self, node: int, value: T, overwrite: bool) -> int:
        arena = self._arena
        if node == NIL:
            return arena.allocate(value)

        current = arena.values[node]
        if self._less(value, current):
            arena.left[node] = self._insert(arena.left[node], value, overwrite)
        elif self._less(current, value):
            arena.right[node] = self._insert(arena.right[node], value, overwrite)
        elif overwrite:
            arena.values[node] = value
            return int(node)
        else:
            raise DuplicateKeyError(value)

        return rebalance(arena, node)

    def insert(self, value: T) -> None:
        self._root = self._insert(self._root, value, overwrite=False)
        self._modified()

    def update(self, value: T) -> None:
        """Insert ``value``, or overwrite the stored value equal to it."""
        size = self.size()
        self._root = self._insert(self._root, value, overwrite=True)
        if self.size() != size:
            self._modified()

    def _pop(self, node: int) -> Tuple[int, T]:
        arena = self._arena
        right = arena.right[node]
        if right != NIL:
            arena.right[node], value = self._pop(right)
            return rebalance(arena, node), value

        value = arena.values[node]
        left = arena.left[node]
        if left == NIL:
            arena.release(node)
            return NIL, value
        arena.left[node], arena.values[node] = self._pop(left)
        return rebalance(arena, node), value

    def _popleft(self, node: int) -> Tuple[int, T]:
        arena = self._arena
        left = arena.left[node]
        if left != NIL:
            arena.left[node], value = self._popleft(left)
            return rebalance(arena, node), value

        value = arena.values[node]
        right = arena.right[node]
        if right == NIL:
            arena.release(node)
            return NIL, value
        arena.right[node], arena.values[node] = self._popleft(right)
        return rebalance(arena, node), value

    def pop(self) -> T:
        """Remove and return the largest value."""
        if self._root == NIL:
            raise EmptyTreeError("can't pop from an empty tree")
        self._root, value = self._pop(self._root)
        self._modified()
        return value

    def popleft(self) -> T:
        """Remove and return the smallest value."""
        if self._root == NIL:
            raise EmptyTreeError("can't pop from an empty tree")
        self._root, value = self._popleft(self._root)
        self._modified()
        return value

    def _remove(self, node: int, value: T) -> int:
        arena = self._arena
        if node == NIL:
            raise NotFoundError(value)

        current = arena.values[node]
        if self._less(value, current):
            arena.left[node] = self._remove(arena.left[node], value)
        elif self._less(current, value):
            arena.right[node] = self._remove(arena.right[node], value)
        elif arena.left[node] != NIL:
            arena.left[node], arena.values[node] = self._pop(arena.left[node])
        elif arena.right[node] != NIL:
            arena.right[node], arena.values[node] = self._popleft(arena.right[node])
        else:
            arena.release(node)
            return NIL

        return rebalance(arena, node)

    def remove(self, value: T) -> None:
        self._root = self._remove(self._root, value)
        self._modified()

    def clear(self) -> None:
        self._arena = NodeArena(self._arena.capacity())
        self._root = NIL
        self._modified()

    # Queries

    def find(self, value: T) -> Optional[T]:
        """Return the stored value equal to ``value``, or None if absent.

        The stored value may differ from the query when the comparator only
        looks at part of it.
        """
        arena = self._arena
        node = self._root
        while node != NIL:
            current = arena.values[node]
            if self._less(value, current):
                node = arena.left[node]
            elif self._less(current, value):
                node = arena.right[node]
            else:
                return current
        return None

    def includes(self, value: T) -> bool:
        arena = self._arena
        node = self._root
        while node != NIL:
            current = arena.values[node]
            if self._less(value, current):
                node = arena.left[node]
            elif self._less(current, value):
                node = arena.right[node]
            else:
                return True
        return False

    contains = includes

    def min(self) -> T:
        if self._root == NIL:
            raise EmptyTreeError("empty tree has no minimum value")
        arena = self._arena
        node = self._root
        while arena.left[node] != NIL:
            node = arena.left[node]
        return arena.values[node]

    def max(self) -> T:
        if self._root == NIL:
            raise EmptyTreeError("empty tree has no maximum value")
        arena = self._arena
        node = self._root
        while arena.right[node] != NIL:
            node = arena.right[node]
        return arena.values[node]

    def size(self) -> int:
        return int(self._arena.size[self._root])

    def height(self) -> int:
        return int(self._arena.height[self._root])

    def is_empty(self) -> bool:
        return self._root == NIL

    def is_leaf(self) -> bool:
        return self._arena.is_leaf(self._root)

    def root(self) -> Optional[Node[T]]:
        if self._root == NIL:
            return None
        return Node(self, self._root)

    # Traversals

    def in_order_iter(self) -> InOrderIterator[T]:
        return InOrderIterator(self)

    def level_order_iter(self) -> LevelOrderIterator[T]:
        return LevelOrderIterator(self)

    def in_order(self) -> List[T]:
        return list(self.in_order_iter())

    def level_order(self) -> List[T]:
        return list(self.level_order_iter())

    def levels(self) -> List[List[T]]:
        result: List[List[T]] = []
        it = self.level_order_iter()
        for value in it:
            if it.level() == len(result):
                result.append([])
            result[-1].append(value)
        return result

    def pre_order(self) -> List[T]:
        result: List[T] = []
        if self._root == NIL:
            return result
        arena = self._arena
        stack: List[int] = [self._root]
        while stack:
            node = stack.pop()
            result.append(arena.values[node])
            if arena.right[node] != NIL:
                stack.append(arena.right[node])
            if arena.left[node] != NIL:
                stack.append(arena.left[node])
        return result

    def post_order(self) -> List[T]:
        result: List[T] = []
        if self._root == NIL:
            return result
        arena = self._arena
        stack: List[int] = [self._root]
        while stack:
            node = stack.pop()
            result.append(arena.values[node])
            if arena.left[node] != NIL:
                stack.append(arena.left[node])
            if arena.right[node] != NIL:
                stack.append(arena.right[node])
        result.reverse()
        return result

    def copy(self) -> 'AVLTree[T]':
        """Deep copy with the same shape; the two trees share no nodes."""
        clone: AVLTree[T] = AVLTree(less=self._less, capacity=self._arena.capacity())
        clone._arena = self._arena.copy()
        clone._root = self._root
        return clone

    @classmethod
    def _from_links(
        cls,
        links: Sequence[Tuple[int, int]],
        values: Sequence[T],
        less: Less = operator.lt,
    ) -> 'AVLTree[T]':
        """Build a tree with an exact shape.

        ``links[k]`` holds the 1-based (left, right) positions of the children
        of the node at position ``k + 1``, 0 meaning no child. Children must
        come after their parent. Nothing is checked beyond that.
        """
        tree: AVLTree[T] = cls(less=less, capacity=len(values) + 1)
        arena = tree._arena
        for value in values:
            arena.allocate(value)
        for position, (left, right) in enumerate(links, start=1):
            arena.left[position] = left
            arena.right[position] = right
        for position in range(len(values), 0, -1):
            arena.refresh(position)
        tree._root = 1 if values else NIL
        return tree

    # Structural checks

    def _is_balanced(self, node: int) -> bool:
        if node == NIL:
            return True
        if abs(balance_factor(self._arena, node)) > 1:
            return False
        return self._is_balanced(self._arena.left[node]) and self._is_balanced(self._arena.right[node])

    def is_balanced(self) -> bool:
        return self._is_balanced(self._root)

    def is_ordered(self) -> bool:
        """True when in-order values are strictly ascending (so also unique)."""
        previous = None
        for position, value in enumerate(self.in_order_iter()):
            if position and not self._less(previous, value):
                return False
            previous = value
        return True

    def __len__(self) -> int:
        return self.size()

    def __bool__(self) -> bool:
        return self._root != NIL

    def __contains__(self, value: T) -> bool:
        return self.includes(value)

    def __iter__(self) -> Iterator[T]:
        return self.in_order_iter()

    def __copy__(self) -> 'AVLTree[T]':
        return self.copy()

    def __repr__(self) -> str:
        return f"AVLTree({self.in_order()})"

    def __str__(self) -> str:
        return f"AVLTree(size={self.size()}, height={self.height()})"
