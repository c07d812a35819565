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

import enum
from itertools import zip_longest
from typing import Optional

from _xenpath.exceptions import InvalidCodePath
from _xenpath.nodes import Node
from _xenpath.utils import *  # noqa
from _xenpath.utils import __all__


class TreeDifferenceKind(enum.Enum):
    None_ = enum.auto()
    Attributes = enum.auto()
    ChildrenSize = enum.auto()
    Name = enum.auto()
    Text = enum.auto()


class TreesComparisonResult:
    """
    Instances of this class describe one or no difference between two trees.
    Casting an instance to :class:`bool` will yield :obj:`True` when it describes no
    difference, thus the compared trees were equal.
    Casted to strings they're intended to support debugging.
    """

    def __init__(
        self,
        difference_kind: TreeDifferenceKind,
        lhn: Optional[Node],
        rhn: Optional[Node],
    ):
        self.difference_kind = difference_kind
        self.lhn: Optional[Node] = lhn
        self.rhn: Optional[Node] = rhn

    def __bool__(self):
        return self.difference_kind is TreeDifferenceKind.None_

    def __str__(self):
        if self.difference_kind is TreeDifferenceKind.None_:
            return "Trees are equal."

        assert self.lhn is not None
        assert self.rhn is not None
        path = self.lhn.absolute_path

        if self.difference_kind is TreeDifferenceKind.Attributes:
            return (
                f"Attributes of nodes at {path} differ:\n"
                f"{self.lhn.attributes}\n{self.rhn.attributes}"
            )
        elif self.difference_kind is TreeDifferenceKind.ChildrenSize:
            result = f"Child nodes of nodes at {path} differ:"
            for a, b in zip_longest(self.lhn.children, self.rhn.children):
                result += f"\n\n{a!r}\n{b!r}"
            return result
        elif self.difference_kind is TreeDifferenceKind.Name:
            return (
                f"Names of nodes at {path} differ: {self.lhn.name} != {self.rhn.name}"
            )
        elif self.difference_kind is TreeDifferenceKind.Text:
            return (
                f"Texts of nodes at {path} differ:\n"
                f"{self.lhn.text!r}\n{self.rhn.text!r}"
            )

        raise InvalidCodePath()


def compare_trees(lhr: Node, rhr: Node) -> TreesComparisonResult:
    """
    Compares two trees for equality of names, attributes, texts and the order of
    children. Upon the first detection of a difference of nodes that are located at
    the same position within the compared (sub-)trees a mismatch is reported.

    :param lhr: The node that is considered as root of the left hand operand.
    :param rhr: The node that is considered as root of the right hand operand.
    :return: An object that contains information about the first or no difference.

    The :class:`Node` type deliberately doesn't implement the ``==`` operator, because
    it isn't clear whether a comparison should also consider the node's descendants as
    this function does.
    """
    if lhr.name != rhr.name:
        return TreesComparisonResult(TreeDifferenceKind.Name, lhr, rhr)
    if lhr.attributes != rhr.attributes:
        return TreesComparisonResult(TreeDifferenceKind.Attributes, lhr, rhr)
    if lhr.text != rhr.text:
        return TreesComparisonResult(TreeDifferenceKind.Text, lhr, rhr)
    if len(lhr) != len(rhr):
        return TreesComparisonResult(TreeDifferenceKind.ChildrenSize, lhr, rhr)

    for lhn, rhn in zip(lhr.children, rhr.children):
        result = compare_trees(lhn, rhn)
        if not result:
            return result

    return TreesComparisonResult(TreeDifferenceKind.None_, None, None)


__all__ = __all__ + (  # type: ignore
    compare_trees.__name__,
    TreeDifferenceKind.__name__,
    TreesComparisonResult.__name__,
)
