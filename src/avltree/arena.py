import logging
from typing import Generic, List, Optional, TypeVar

import numpy as np

logger = logging.getLogger(__name__)

T = TypeVar('T')

# Index 0 is the empty subtree: never allocated, height and size stay 0.
NIL = 0

INITIAL_CAPACITY = 16


class NodeArena(Generic[T]):
    def __init__(self, capacity: Optional[int] = None) -> None:
        if capacity is None:
            capacity = INITIAL_CAPACITY
        capacity = max(int(capacity), 2)
        self.left = np.zeros(capacity, dtype=np.intp)
        self.right = np.zeros(capacity, dtype=np.intp)
        self.height = np.zeros(capacity, dtype=np.intp)
        self.size = np.zeros(capacity, dtype=np.intp)
        self.values: List[Optional[T]] = [None] * capacity
        self._next: int = 1
        self._free: List[int] = []

    def capacity(self) -> int:
        return len(self.values)

    def live(self) -> int:
        return self._next - 1 - len(self._free)

    def allocate(self, value: T) -> int:
        if self._free:
            index = self._free.pop()
        else:
            if self._next == self.capacity():
                self._grow()
            index = self._next
            self._next += 1
        self.values[index] = value
        self.left[index] = NIL
        self.right[index] = NIL
        self.height[index] = 1
        self.size[index] = 1
        return index

    def release(self, index: int) -> None:
        if index == NIL:
            raise ValueError("cannot release the NIL sentinel")
        self.values[index] = None
        self.left[index] = NIL
        self.right[index] = NIL
        self.height[index] = 0
        self.size[index] = 0
        self._free.append(int(index))

    def refresh(self, index: int) -> None:
        left = self.left[index]
        right = self.right[index]
        self.height[index] = 1 + max(self.height[left], self.height[right])
        self.size[index] = 1 + self.size[left] + self.size[right]

    def is_leaf(self, index: int) -> bool:
        return self.left[index] == NIL and self.right[index] == NIL

    def copy(self) -> 'NodeArena[T]':
        clone: NodeArena[T] = NodeArena(self.capacity())
        clone.left = self.left.copy()
        clone.right = self.right.copy()
        clone.height = self.height.copy()
        clone.size = self.size.copy()
        clone.values = list(self.values)
        clone._next = self._next
        clone._free = list(self._free)
        return clone

    def _grow(self) -> None:
        old_capacity = self.capacity()
        new_capacity = old_capacity * 2
        self.left = self._extended(self.left, new_capacity)
        self.right = self._extended(self.right, new_capacity)
        self.height = self._extended(self.height, new_capacity)
        self.size = self._extended(self.size, new_capacity)
        self.values.extend([None] * (new_capacity - old_capacity))
        logger.debug("arena grown from %d to %d slots", old_capacity, new_capacity)

    @staticmethod
    def _extended(array: np.ndarray, capacity: int) -> np.ndarray:
        grown = np.zeros(capacity, dtype=array.dtype)
        grown[:len(array)] = array
        return grown

    def __len__(self) -> int:
        return self.live()
