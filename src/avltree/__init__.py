from .errors import (
    AVLTreeError,
    DuplicateKeyError,
    EmptyTreeError,
    IteratorExhaustedError,
    NotFoundError,
    SerializationError,
)
from .iterators import InOrderIterator, LevelOrderIterator
from .serialization import dump, dumps, load, loads, to_graphviz, write_graphviz
from .tree import AVLTree, Node

__version__ = "0.1.0"
