import logging

from .arena import NIL, NodeArena

logger = logging.getLogger(__name__)


def balance_factor(arena: NodeArena, index: int) -> int:
    """height(right) - height(left); 0 for NIL."""
    return int(arena.height[arena.right[index]] - arena.height[arena.left[index]])


def rotate_left(arena: NodeArena, x: int) -> int:
    y = arena.right[x]
    assert y != NIL
    t2 = arena.left[y]

    arena.left[y] = x
    arena.right[x] = t2

    arena.refresh(x)
    arena.refresh(y)

    logger.debug("rotate left at %r", arena.values[x])
    return int(y)


def rotate_right(arena: NodeArena, y: int) -> int:
    x = arena.left[y]
    assert x != NIL
    t2 = arena.right[x]

    arena.right[x] = y
    arena.left[y] = t2

    arena.refresh(y)
    arena.refresh(x)

    logger.debug("rotate right at %r", arena.values[y])
    return int(x)


def rebalance(arena: NodeArena, node: int) -> int:
    """Restore the AVL condition at ``node`` and return the subtree's new root.

    The node's cached fields are refreshed first. At most one single or one
    double rotation is applied; the caller must link its parent to the
    returned index.
    """
    arena.refresh(node)
    balance = balance_factor(arena, node)

    if balance < -1:
        if balance_factor(arena, arena.left[node]) > 0:
            arena.left[node] = rotate_left(arena, arena.left[node])
        return rotate_right(arena, node)

    if balance > 1:
        if balance_factor(arena, arena.right[node]) < 0:
            arena.right[node] = rotate_right(arena, arena.right[node])
        return rotate_left(arena, node)

    return int(node)
