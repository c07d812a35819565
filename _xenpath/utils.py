# Copyright (C) 2018-'25  Frank Sachsenheim
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU Affero General Public License as published
# by the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU Affero General Public License for more details.
#
# You should have received a copy of the GNU Affero General Public License
# along with this program.  If not, see <https://www.gnu.org/licenses/>.

from __future__ import annotations

from collections import deque
from collections.abc import Iterable, Iterator, Sequence
from typing import TYPE_CHECKING, Any, Optional

if TYPE_CHECKING:
    from _xenpath.nodes import Node


def first(iterable: Iterable) -> Optional[Any]:
    """
    Returns the first item of the given :term:`iterable` or :obj:`None` if it's empty.
    Note that the first item is consumed when the iterable is an :term:`iterator`.
    """
    match iterable:
        case Iterator():
            try:
                return next(iterable)
            except StopIteration:
                return None
        case Sequence():
            return iterable[0] if len(iterable) else None
        case _:
            raise TypeError


def last(iterable: Iterable) -> Optional[Any]:
    """
    Returns the last item of the given :term:`iterable` or :obj:`None` if it's empty.
    Note that the whole :term:`iterator` is consumed when such is given.
    """
    match iterable:
        case Iterator():
            result = None
            for result in iterable:
                pass
            return result
        case Sequence():
            return iterable[-1] if len(iterable) else None
        case _:
            raise TypeError


# tree traversers


def traverse_bf_ttb(root: Node) -> Iterator[Node]:
    """Yields the nodes of a subtree level by level, from left to right."""
    queue = deque((root,))
    while queue:
        node = queue.popleft()
        queue.extend(node._children)
        yield node


def traverse_df_ttb(root: Node) -> Iterator[Node]:
    """Yields the nodes of a subtree in document order."""
    stack = [iter((root,))]

    while stack:
        for node in stack[-1]:
            yield node
            if node._children:
                stack.append(iter(node._children))
                break
        else:
            stack.pop()


__all__: tuple[str, ...] = (
    first.__name__,
    last.__name__,
    traverse_bf_ttb.__name__,
    traverse_df_ttb.__name__,
)
