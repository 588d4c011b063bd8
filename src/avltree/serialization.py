import logging
import operator
from collections import deque
from typing import IO, Any, Callable, Deque, Dict, List, TypeVar

import numpy as np

from .errors import SerializationError
from .tree import AVLTree, Node

logger = logging.getLogger(__name__)

T = TypeVar('T')

DTypeLike = Any

# Layout, nodes numbered 1..n breadth-first: n, then n (left, right) pairs
# with 0 for no child, all of INDEX_DTYPE; then n raw VALUE_DTYPE payloads.
INDEX_DTYPE = "<u8"
VALUE_DTYPE = "<i8"


def _breadth_first(tree: AVLTree[T]) -> List[Node[T]]:
    order: List[Node[T]] = []
    root = tree.root()
    queue: Deque[Node[T]] = deque([root] if root is not None else [])
    while queue:
        node = queue.popleft()
        order.append(node)
        for child in (node.left, node.right):
            if child is not None:
                queue.append(child)
    return order


def _encode_values(values: List[Any], dtype: np.dtype) -> np.ndarray:
    try:
        payload = np.asarray(values, dtype=dtype)
    except (OverflowError, TypeError, ValueError) as exc:
        raise SerializationError(f"values cannot be stored as {dtype}: {exc}") from exc
    # Casting may truncate or wrap silently; only exact round trips are stored.
    if payload.tolist() != values:
        raise SerializationError(f"values are not exactly representable as {dtype}")
    return payload


def dumps(tree: AVLTree[T], dtype: DTypeLike = None, index_dtype: DTypeLike = None) -> bytes:
    value_dtype = np.dtype(dtype if dtype is not None else VALUE_DTYPE)
    index_dtype = np.dtype(index_dtype if index_dtype is not None else INDEX_DTYPE)

    order = _breadth_first(tree)
    position: Dict[Node[T], int] = {node: k for k, node in enumerate(order, start=1)}

    header = np.zeros((len(order), 2), dtype=index_dtype)
    for k, node in enumerate(order):
        header[k, 0] = position[node.left] if node.left is not None else 0
        header[k, 1] = position[node.right] if node.right is not None else 0
    payload = _encode_values([node.value for node in order], value_dtype)

    count = np.array([len(order)], dtype=index_dtype)
    logger.debug("dumping %d nodes (index %s, value %s)", len(order), index_dtype, value_dtype)
    return count.tobytes() + header.tobytes() + payload.tobytes()


def dump(tree: AVLTree[T], fp: IO[bytes], dtype: DTypeLike = None, index_dtype: DTypeLike = None) -> None:
    data = dumps(tree, dtype=dtype, index_dtype=index_dtype)
    fp.write(data)


def loads(
    data: bytes,
    dtype: DTypeLike = None,
    index_dtype: DTypeLike = None,
    less: Callable[[Any, Any], bool] = operator.lt,
) -> AVLTree:
    value_dtype = np.dtype(dtype if dtype is not None else VALUE_DTYPE)
    index_dtype = np.dtype(index_dtype if index_dtype is not None else INDEX_DTYPE)
    width = index_dtype.itemsize

    if len(data) < width:
        raise SerializationError("truncated dump: missing node count")
    n = int(np.frombuffer(data, dtype=index_dtype, count=1)[0])
    if n < 0:
        raise SerializationError(f"negative node count {n}")
    expected = width * (1 + 2 * n) + value_dtype.itemsize * n
    if len(data) != expected:
        raise SerializationError(f"dump of {n} nodes should be {expected} bytes, got {len(data)}")
    if n == 0:
        return AVLTree(less=less)

    header = np.frombuffer(data, dtype=index_dtype, count=2 * n, offset=width).reshape(n, 2)
    values = np.frombuffer(data, dtype=value_dtype, count=n, offset=width * (1 + 2 * n))

    parent = [0] * (n + 1)
    links = []
    for k in range(1, n + 1):
        pair = []
        for child in header[k - 1]:
            child = int(child)
            if child != 0:
                if child > n or child <= k:
                    raise SerializationError(f"node {k} has invalid child index {child}")
                if parent[child]:
                    raise SerializationError(f"node {child} is a child of both {parent[child]} and {k}")
                parent[child] = k
            pair.append(child)
        links.append((pair[0], pair[1]))
    for k in range(2, n + 1):
        if not parent[k]:
            raise SerializationError(f"node {k} is not reachable from the root")

    tree = AVLTree._from_links(links, values.tolist(), less=less)
    if not tree.is_ordered():
        raise SerializationError("decoded values are not in search-tree order")
    if not tree.is_balanced():
        raise SerializationError("decoded tree is not AVL balanced")
    logger.debug("loaded %d nodes, height %d", n, tree.height())
    return tree


def load(
    fp: IO[bytes],
    dtype: DTypeLike = None,
    index_dtype: DTypeLike = None,
    less: Callable[[Any, Any], bool] = operator.lt,
) -> AVLTree:
    return loads(fp.read(), dtype=dtype, index_dtype=index_dtype, less=less)


def _label(value: Any) -> str:
    return str(value).replace("\\", "\\\\").replace('"', '\\"')


def to_graphviz(tree: AVLTree[T]) -> str:
    lines = ["graph {"]
    next_id = 0
    root = tree.root()
    stack: List[tuple] = [(root, None)] if root is not None else []
    while stack:
        node, parent_id = stack.pop()
        node_id = next_id
        next_id += 1
        lines.append(f'    {node_id} [label="{_label(node.value)}", shape=box];')
        if parent_id is not None:
            lines.append(f"    {parent_id} -- {node_id};")
        if node.right is not None:
            stack.append((node.right, node_id))
        if node.left is not None:
            stack.append((node.left, node_id))
    lines.append("}")
    return "\n".join(lines) + "\n"


def write_graphviz(tree: AVLTree[T], fp: IO[str]) -> None:
    fp.write(to_graphviz(tree))
