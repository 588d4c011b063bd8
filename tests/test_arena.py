import sys
import os
import unittest
from unittest import mock

sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

from avltree import arena as arena_module
from avltree.arena import NIL, NodeArena
from avltree.balance import balance_factor, rebalance, rotate_left, rotate_right


def chain(arena, values, side):
    """Link freshly allocated nodes into a one-sided chain; returns the top index."""
    nodes = [arena.allocate(v) for v in values]
    links = arena.left if side == "left" else arena.right
    for parent, child in zip(nodes, nodes[1:]):
        links[parent] = child
    for node in reversed(nodes):
        arena.refresh(node)
    return nodes[0]


class TestNodeArena(unittest.TestCase):
    def test_nil_slot_is_empty(self):
        arena: NodeArena[int] = NodeArena()
        self.assertEqual(arena.height[NIL], 0)
        self.assertEqual(arena.size[NIL], 0)
        self.assertEqual(arena.live(), 0)

    def test_allocate_starts_after_nil(self):
        arena: NodeArena[int] = NodeArena()
        index = arena.allocate(42)
        self.assertEqual(index, 1)
        self.assertEqual(arena.values[index], 42)
        self.assertEqual(arena.height[index], 1)
        self.assertEqual(arena.size[index], 1)
        self.assertTrue(arena.is_leaf(index))

    def test_release_recycles_slot(self):
        arena: NodeArena[int] = NodeArena()
        a = arena.allocate(1)
        arena.allocate(2)
        arena.release(a)
        self.assertEqual(arena.live(), 1)
        self.assertIsNone(arena.values[a])
        self.assertEqual(arena.allocate(3), a)
        self.assertEqual(len(arena), 2)

    def test_release_nil_raises(self):
        arena: NodeArena[int] = NodeArena()
        with self.assertRaises(ValueError):
            arena.release(NIL)

    def test_grows_past_capacity(self):
        arena: NodeArena[int] = NodeArena(capacity=2)
        indices = [arena.allocate(i) for i in range(10)]
        self.assertEqual(indices, list(range(1, 11)))
        self.assertGreaterEqual(arena.capacity(), 11)
        self.assertEqual([arena.values[i] for i in indices], list(range(10)))

    def test_default_capacity(self):
        self.assertEqual(NodeArena().capacity(), arena_module.INITIAL_CAPACITY)
        with mock.patch.object(arena_module, "INITIAL_CAPACITY", 5):
            self.assertEqual(NodeArena().capacity(), 5)

    def test_refresh_derives_from_children(self):
        arena: NodeArena[int] = NodeArena()
        top = chain(arena, [3, 2, 1], "left")
        self.assertEqual(arena.height[top], 3)
        self.assertEqual(arena.size[top], 3)

    def test_copy_is_independent(self):
        arena: NodeArena[int] = NodeArena()
        a = arena.allocate(1)
        clone = arena.copy()
        arena.values[a] = 99
        arena.left[a] = 5
        self.assertEqual(clone.values[a], 1)
        self.assertEqual(clone.left[a], NIL)


class TestBalance(unittest.TestCase):
    def test_balance_factor_of_nil(self):
        arena: NodeArena[int] = NodeArena()
        self.assertEqual(balance_factor(arena, NIL), 0)

    def test_rotate_left_relinks(self):
        arena: NodeArena[int] = NodeArena()
        top = chain(arena, [10, 20, 30], "right")
        new_top = rotate_left(arena, top)
        self.assertEqual(arena.values[new_top], 20)
        self.assertEqual(arena.left[new_top], top)
        self.assertEqual(arena.height[new_top], 2)
        self.assertEqual(arena.size[new_top], 3)
        self.assertEqual(arena.height[top], 1)
        self.assertEqual(arena.size[top], 1)

    def test_rotate_right_relinks(self):
        arena: NodeArena[int] = NodeArena()
        top = chain(arena, [30, 20, 10], "left")
        new_top = rotate_right(arena, top)
        self.assertEqual(arena.values[new_top], 20)
        self.assertEqual(arena.right[new_top], top)
        self.assertEqual(balance_factor(arena, new_top), 0)

    def test_rebalance_left_right_case(self):
        arena: NodeArena[int] = NodeArena()
        a = arena.allocate(30)
        b = arena.allocate(10)
        c = arena.allocate(20)
        arena.left[a] = b
        arena.right[b] = c
        arena.refresh(c)
        arena.refresh(b)
        top = rebalance(arena, a)
        self.assertEqual(top, c)
        self.assertEqual(arena.left[c], b)
        self.assertEqual(arena.right[c], a)
        self.assertEqual(arena.height[c], 2)
        self.assertTrue(arena.is_leaf(a))
        self.assertTrue(arena.is_leaf(b))

    def test_rebalance_right_left_case(self):
        arena: NodeArena[int] = NodeArena()
        a = arena.allocate(10)
        b = arena.allocate(30)
        c = arena.allocate(20)
        arena.right[a] = b
        arena.left[b] = c
        arena.refresh(c)
        arena.refresh(b)
        top = rebalance(arena, a)
        self.assertEqual(top, c)
        self.assertEqual(arena.left[c], a)
        self.assertEqual(arena.right[c], b)

    def test_rebalance_balanced_is_noop(self):
        arena: NodeArena[int] = NodeArena()
        top = chain(arena, [2, 1], "left")
        self.assertEqual(rebalance(arena, top), top)
        self.assertEqual(balance_factor(arena, top), -1)


if __name__ == '__main__':
    unittest.main()
