"""Interactive line-oriented shell over an AVLTree of integers."""

import argparse
import logging
import re
import sys
from typing import IO, List, Optional

from .errors import AVLTreeError
from .serialization import dumps, load, to_graphviz
from .tree import AVLTree

logger = logging.getLogger(__name__)

INSERT = re.compile(r"^\s*(?:i|insert)\s*(-?\d+)\s*$", re.IGNORECASE)
REMOVE = re.compile(r"^\s*(?:r|remove)\s*(-?\d+)\s*$", re.IGNORECASE)
PRINT = re.compile(r"^\s*(?:p|print)\s*(in|pre|post|level)?\s*$", re.IGNORECASE)
CLEAR = re.compile(r"^\s*(?:c|clear)\s*$", re.IGNORECASE)
DUMP = re.compile(r"^\s*(?:d|dump)\s+(\S+)\s*$", re.IGNORECASE)
LOAD = re.compile(r"^\s*(?:l|load)\s+(\S+)\s*$", re.IGNORECASE)
GRAPHVIZ = re.compile(r"^\s*(?:g|graphviz)\s+(\S+)\s*$", re.IGNORECASE)
QUIT = re.compile(r"^\s*(?:q|e|quit|exit)\s*$", re.IGNORECASE)

BANNER = """Interactive AVL Tree

i|insert x                     => Inserts X into the tree
r|remove x                     => Removes X from the tree
p|print [(in|pre|post|level)]  => Prints out the tree
c|clear                        => Clears the tree
d|dump FILE                    => Writes the tree to a binary file
l|load FILE                    => Replaces the tree with one read from FILE
g|graphviz FILE                => Writes a Graphviz drawing of the tree
q|e|quit|exit                  => Quits
"""


class Shell:
    def __init__(
        self,
        tree: Optional[AVLTree[int]] = None,
        stdout: Optional[IO[str]] = None,
        stderr: Optional[IO[str]] = None,
    ) -> None:
        self.tree: AVLTree[int] = tree if tree is not None else AVLTree()
        self.stdout = stdout if stdout is not None else sys.stdout
        self.stderr = stderr if stderr is not None else sys.stderr

    def prompt(self) -> str:
        return f"avl ({self.tree.size()})> "

    def _print(self, mode: str) -> None:
        if mode == "in":
            values = self.tree.in_order()
        elif mode == "pre":
            values = self.tree.pre_order()
        elif mode == "post":
            values = self.tree.post_order()
        else:
            for level in self.tree.levels():
                print(" ".join(str(v) for v in level), file=self.stdout)
            return
        print(" ".join(str(v) for v in values), file=self.stdout)

    def execute(self, line: str) -> bool:
        """Run one command. Returns False when the shell should stop."""
        if QUIT.match(line):
            return False

        try:
            m = INSERT.match(line)
            if m:
                self.tree.insert(int(m.group(1)))
                return True
            m = REMOVE.match(line)
            if m:
                self.tree.remove(int(m.group(1)))
                return True
            m = PRINT.match(line)
            if m:
                self._print((m.group(1) or "in").lower())
                return True
            if CLEAR.match(line):
                self.tree.clear()
                return True
            m = DUMP.match(line)
            if m:
                data = dumps(self.tree)
                with open(m.group(1), "wb") as fp:
                    fp.write(data)
                return True
            m = LOAD.match(line)
            if m:
                with open(m.group(1), "rb") as fp:
                    self.tree = load(fp)
                return True
            m = GRAPHVIZ.match(line)
            if m:
                text = to_graphviz(self.tree)
                with open(m.group(1), "w") as fp:
                    fp.write(text)
                return True
        except (AVLTreeError, OSError) as exc:
            logger.debug("command %r failed", line, exc_info=True)
            print(f"Err: {exc}", file=self.stderr)
            return True

        if line.strip():
            print("Err: Invalid command", file=self.stderr)
        return True

    def run(self, stdin: IO[str], interactive: bool = False) -> None:
        if interactive:
            print(BANNER, file=self.stdout)
            print("Have fun!", file=self.stdout)
        while True:
            if interactive:
                self.stdout.write(self.prompt())
                self.stdout.flush()
            line = stdin.readline()
            if not line:
                break
            if not self.execute(line):
                break


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(prog="avltree", description="Interactive AVL tree shell.")
    parser.add_argument("--load", metavar="FILE", help="start from a tree previously dumped to FILE")
    parser.add_argument("--log-level", default="WARNING", help="logging level (default: %(default)s)")
    args = parser.parse_args(argv)

    logging.basicConfig(level=args.log_level.upper(), format="%(levelname)s %(name)s: %(message)s")

    shell = Shell()
    if args.load:
        try:
            with open(args.load, "rb") as fp:
                shell.tree = load(fp)
        except (AVLTreeError, OSError) as exc:
            print(f"Err: {exc}", file=sys.stderr)
            return 1
    shell.run(sys.stdin, interactive=sys.stdin.isatty())
    return 0


if __name__ == "__main__":
    sys.exit(main())
