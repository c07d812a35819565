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

"""
*xenpath* locates nodes with short path expressions that borrow from XPath and the
conventions of *XMLSlurper*. An expression can be written in two notations:

- The *slash notation* delimits steps with ``/`` and counts indexes from one, just
  like XPath does: ``customer/email[2]/@addr``.
- The *dot notation* starts with a ``.`` that is immediately followed by a letter,
  delimits steps with ``.`` and counts indexes from zero: ``.customer.email[1].@addr``.
  A literal dot in a name is escaped as ``\\.``.

A step is one of:

- a node name or ``*`` for all child nodes, optionally followed by one predicate
- ``..`` for the parent node
- ``.`` for the node itself (slash notation only)
- a leading ``/`` for the root node
- ``@name`` to address an attribute, which must be the last step

These predicates are available:

- ``[n]``: the n-th node; ``[last()]``, ``[last()-n]`` and, in slash notation,
  ``[0]`` and ``[-n]`` count from the end; in dot notation ``[-n]`` counts from the
  end as in Python
- ``[@name]``: nodes with a non-empty attribute ``name``
- ``[@name='value']``: nodes whose attribute ``name`` equals ``value``
- ``[@name~'pattern']``: nodes whose attribute ``name`` entirely matches the regular
  expression ``pattern``
- ``[.='value']``, ``[text()='value']``, ``[.~'pattern']``: the same tests against a
  node's text

These deviations from XPath are intended:

- There's no descendant search, ``//`` is refused as well as ``@*``.
- Attributes are projected as read-only leaf nodes, their text is the attribute's
  value and their parent is the owning node.

Multiple fragments can be passed to all query functions, they are joined with ``/``
unless one starts with it, which discards the previously joined fragments:

    >>> root.get_text("customer", "email[1]", "@addr")  # doctest: +SKIP
"""

from __future__ import annotations

from collections.abc import Collection, Iterable, Sequence
from typing import TYPE_CHECKING, Optional

from _xenpath.path.ast import CompiledPath, resolve_one
from _xenpath.path.parser import assemble_path, compile_path, parse


if TYPE_CHECKING:
    from _xenpath.nodes import Node
    from _xenpath.typing import Filter


class QueryResults(Sequence["Node"]):
    """
    A container with the results of a path query with some helpers for better readable
    Python expressions.
    """

    def __init__(self, results: Iterable[Node]):
        self.__items = tuple(results)

    def __eq__(self, other):
        if not isinstance(other, Collection):
            raise TypeError

        return len(self.__items) == len(other) and all(
            any(x is y for y in other) for x in self.__items
        )

    def __getitem__(self, item):
        return self.__items[item]

    def __len__(self) -> int:
        return len(self.__items)

    def __repr__(self):
        return str([repr(x) for x in self.__items])

    def as_list(self) -> list[Node]:
        """The contained nodes as a new :class:`list`."""
        return list(self.__items)

    @property
    def as_tuple(self) -> tuple[Node, ...]:
        """The contained nodes in a :class:`tuple`."""
        return self.__items

    def filtered_by(self, *filters: Filter) -> QueryResults:
        """
        Returns another :class:`QueryResults` instance that contains all nodes filtered
        by the provided :term:`filter` s.
        """
        items: Sequence[Node] = self.__items
        for filter in filters:
            items = [x for x in items if filter(x)]
        return self.__class__(items)

    @property
    def first(self) -> Optional[Node]:
        """The first node from the results or :obj:`None` if there are none."""
        if len(self.__items):
            return self.__items[0]
        else:
            return None

    @property
    def last(self) -> Optional[Node]:
        """The last node from the results or :obj:`None` if there are none."""
        if len(self.__items):
            return self.__items[-1]
        else:
            return None

    @property
    def size(self) -> int:
        """The amount of contained nodes."""
        return len(self.__items)

    def texts(self) -> list[str]:
        """The local texts of the contained nodes."""
        return [x.text for x in self.__items]


def evaluate(node: Node, *fragments: str) -> QueryResults:
    """Evaluates the path that is assembled from ``fragments`` against ``node``."""
    return QueryResults(compile_path(*fragments).evaluate(node))


__all__ = (
    assemble_path.__name__,
    compile_path.__name__,
    evaluate.__name__,
    parse.__name__,  # type: ignore
    resolve_one.__name__,
    CompiledPath.__name__,
    QueryResults.__name__,
)
