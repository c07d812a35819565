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

import re
from abc import ABC, abstractmethod
from collections.abc import Iterable, Sequence
from textwrap import indent
from typing import TYPE_CHECKING, Any, Optional

from _xenpath.exceptions import (
    AmbiguousMatch,
    IndexOutOfRange,
    InvalidCodePath,
    NotFound,
)


if TYPE_CHECKING:
    from typing import Final

    from _xenpath.nodes import Node


# helper


def nested_repr(obj: Any) -> str:  # pragma: no cover
    result = f"{obj.__class__.__name__}(\n"
    for name, value in ((x, getattr(obj, x)) for x in obj.__slots__):
        result += f"  {name}="
        if isinstance(value, Iterable) and not isinstance(value, str):
            result += (
                "[\n" + "\n".join(indent(repr(x), "    ") for x in value) + "\n]\n"
            )
        else:
            result += f"{value!r}\n"
    result += ")"
    return result


def resolve_one(matches: Sequence[Node], expression: str) -> Node:
    """
    Reduces the result of a path evaluation to exactly one node.

    :param matches: The nodes that a path expression yielded.
    :param expression: The evaluated expression, it's used in error messages.
    :raises NotFound: When ``matches`` is empty.
    :raises AmbiguousMatch: When ``matches`` contains more than one node.
    """
    match len(matches):
        case 0:
            raise NotFound(expression)
        case 1:
            return matches[0]
        case count:
            raise AmbiguousMatch(expression, count)


# base class for nodes


class PlanNode(ABC):
    __slots__: tuple[str, ...] = ()

    def __eq__(self, other):
        return type(self) is type(other) and all(
            getattr(self, x) == getattr(other, x) for x in self.__slots__
        )

    def __hash__(self):
        return hash((type(self), *(getattr(self, x) for x in self.__slots__)))

    def __repr__(self):
        return (
            f"{self.__class__.__qualname__}("
            f"{', '.join(f'{x}={getattr(self, x)!r}' for x in self.__slots__)})"
        )


# predicates


class Predicate(PlanNode):
    @abstractmethod
    def apply(self, candidates: Sequence[Node], expression: str) -> Sequence[Node]:
        """
        Narrows the ``candidates`` down to those that pass this predicate. The
        ``expression`` is only used to report errors.
        """


class All(Predicate):
    """The predicate that is used when a segment has none, it lets all nodes pass."""

    def apply(self, candidates: Sequence[Node], expression: str) -> Sequence[Node]:
        return candidates


class _PositionalPredicate(Predicate):
    def apply(self, candidates: Sequence[Node], expression: str) -> Sequence[Node]:
        if not candidates:
            return ()

        size = len(candidates)
        position = self.position(size)
        if not 0 <= position < size:
            raise IndexOutOfRange(expression, position, size)
        return (candidates[position],)

    @abstractmethod
    def position(self, size: int) -> int:
        pass


class ExactIndex(_PositionalPredicate):
    """
    Selects the node at a zero-based ``index``, negative values count from the end.
    """

    __slots__ = ("index",)

    def __init__(self, index: int):
        self.index: Final = index

    def position(self, size: int) -> int:
        if self.index < 0:
            return size + self.index
        return self.index


class LastRelative(_PositionalPredicate):
    """Selects the node ``offset`` positions before the last one."""

    __slots__ = ("offset",)

    def __init__(self, offset: int = 0):
        self.offset: Final = offset

    def position(self, size: int) -> int:
        return size - 1 - self.offset


class AttributeExists(Predicate):
    __slots__ = ("name",)

    def __init__(self, name: str):
        self.name: Final = name

    def apply(self, candidates: Sequence[Node], expression: str) -> Sequence[Node]:
        name = self.name
        return [n for n in candidates if n.attribute(name)]


class _ValueComparison(Predicate):
    value: str
    is_regex: bool

    def _test(self, subject: str) -> bool:
        if self.is_regex:
            return re.fullmatch(self.value, subject) is not None
        return subject == self.value


class AttributeMatches(_ValueComparison):
    __slots__ = ("is_regex", "name", "value")

    def __init__(self, name: str, value: str, is_regex: bool = False):
        self.name: Final = name
        self.value: Final = value
        self.is_regex: Final = is_regex

    def apply(self, candidates: Sequence[Node], expression: str) -> Sequence[Node]:
        name = self.name
        return [n for n in candidates if self._test(n.attribute(name))]


class TextMatches(_ValueComparison):
    __slots__ = ("is_regex", "value")

    def __init__(self, value: str, is_regex: bool = False):
        self.value: Final = value
        self.is_regex: Final = is_regex

    def apply(self, candidates: Sequence[Node], expression: str) -> Sequence[Node]:
        return [n for n in candidates if self._test(n.text)]


# segments


class Segment(PlanNode):
    pass


class AttributeSegment(Segment):
    __slots__ = ("name",)

    def __init__(self, name: str):
        self.name: Final = name


class NamedSegment(Segment):
    __slots__ = ("name", "predicate")

    def __init__(self, name: str, predicate: Optional[Predicate] = None):
        self.name: Final = name
        self.predicate: Final[Predicate] = All() if predicate is None else predicate


class ParentSegment(Segment):
    pass


class RootSegment(Segment):
    pass


class SelfSegment(Segment):
    pass


# the plan


class CompiledPath(PlanNode):
    """
    The normalized representation of a path expression. All predicates use zero-based
    indexes, regardless of the notation that the expression was written in.
    Instances are immutable and can be evaluated against any number of nodes.
    """

    __slots__ = ("expression", "segments", "zero_based")

    def __init__(
        self, expression: str, segments: Iterable[Segment], zero_based: bool = False
    ):
        self.expression: Final = expression
        self.segments: Final = tuple(segments)
        self.zero_based: Final = zero_based

    def __repr__(self):
        return nested_repr(self)

    def evaluate(self, node: Node) -> list[Node]:
        """
        Returns the nodes that the path addresses from ``node`` in document order.
        A node that is reached on several ways is only contained once.
        """
        from _xenpath.nodes import AttributeNode

        result: list[Node] = []
        yielded_nodes: set[int | tuple[int, str]] = set()
        for match in self._evaluate(node, 0):
            # attribute nodes are created per projection
            key: int | tuple[int, str] = (
                (id(match._parent), match.name)
                if isinstance(match, AttributeNode)
                else id(match)
            )
            if key not in yielded_nodes:
                yielded_nodes.add(key)
                result.append(match)
        return result

    def _evaluate(self, node: Node, start: int) -> list[Node]:
        segments = self.segments
        last_index = len(segments) - 1
        current: Optional[Node] = node

        for index in range(start, len(segments)):
            if current is None:
                break

            match segments[index]:
                case ParentSegment():
                    current = current.parent
                case SelfSegment():
                    continue
                case RootSegment():
                    current = current.root
                case AttributeSegment(name=name):
                    current = current._project_attribute(name)
                    break
                case NamedSegment(name=name, predicate=predicate):
                    candidates = predicate.apply(
                        current.children_by_name(name), self.expression
                    )
                    if index == last_index:
                        return list(candidates)

                    matches: list[Node] = []
                    for candidate in candidates:
                        matches.extend(self._evaluate(candidate, index + 1))
                    return matches
                case _:
                    raise InvalidCodePath

        if current is None:
            return []
        return [current]

    def resolve_one(self, node: Node) -> Node:
        """Evaluates the path and returns the only resulting node."""
        return resolve_one(self.evaluate(node), self.expression)


__all__ = (
    All.__name__,
    AttributeExists.__name__,
    AttributeMatches.__name__,
    AttributeSegment.__name__,
    CompiledPath.__name__,
    ExactIndex.__name__,
    LastRelative.__name__,
    NamedSegment.__name__,
    ParentSegment.__name__,
    Predicate.__name__,
    RootSegment.__name__,
    Segment.__name__,
    SelfSegment.__name__,
    TextMatches.__name__,
    resolve_one.__name__,
)
