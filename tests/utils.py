import os
import sys

from xenpath import Node
from xenpath.utils import compare_trees


if sys.version_info < (3, 11):  # DROPWITH Python 3.10
    from contextlib import contextmanager
    from pathlib import Path

    @contextmanager
    def chdir(path: Path):
        state = Path.cwd()
        os.chdir(path)
        yield
        os.chdir(state)

else:
    from contextlib import chdir  # noqa: F401


def assert_equal_trees(a: Node, b: Node):
    result = compare_trees(a, b)
    if not result:
        raise AssertionError(str(result))


def names(nodes) -> list[str]:
    return [n.name for n in nodes]
