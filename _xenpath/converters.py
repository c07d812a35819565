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
Conversions between :class:`xenpath.Node` trees and :mod:`lxml.etree` elements.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

from lxml import etree

from _xenpath.builder import TreeBuilder
from _xenpath.exceptions import InvalidOperation
from _xenpath.parser import EventType, ParserOptions
from _xenpath.plugins.lxml_parser import XML_NAMESPACE, tag_end_events, tag_start_data
from _xenpath.serializer import ExportEventType, iterate_export_events

if TYPE_CHECKING:
    from collections.abc import Iterator

    from _xenpath.nodes import Node
    from _xenpath.parser import Event


Namespaces = dict[Optional[str], str]


def _clark_name(name: str, namespaces: Namespaces, use_default: bool) -> str:
    prefix, colon, local_name = name.partition(":")
    if not colon:
        if use_default and (namespace := namespaces.get(None)):
            return f"{{{namespace}}}{name}"
        return name

    if (namespace := namespaces.get(prefix)) is None:
        raise InvalidOperation(f"The prefix of `{name}` isn't declared.")
    return f"{{{namespace}}}{local_name}"


def to_etree(root: Node) -> etree._Element:
    """
    Converts a tree to an :mod:`lxml` element tree. Attributes named ``xmlns`` and
    ``xmlns:*`` are used as namespace declarations and all prefixes that are used in
    names must be declared so. A node's text is placed after its children, as the
    ``tail`` of the last child element if it has any.
    """
    result: Optional[etree._Element] = None
    stack: list[tuple[etree._Element, Namespaces]] = []

    for event in iterate_export_events(root):
        node = event.node

        if event.type is ExportEventType.Start:
            namespaces: Namespaces = (
                dict(stack[-1][1]) if stack else {"xml": XML_NAMESPACE}
            )
            declarations: Namespaces = {}
            attributes: dict[str, str] = {}
            for name, value in node._attributes.items():
                if name == "xmlns":
                    declarations[None] = value
                elif name.startswith("xmlns:"):
                    if name != "xmlns:xml":
                        declarations[name[6:]] = value
                else:
                    attributes[name] = value
            namespaces.update(declarations)

            tag = _clark_name(node.name, namespaces, use_default=True)
            nsmap = {k: v for k, v in declarations.items() if v}
            if stack:
                element = etree.SubElement(stack[-1][0], tag, nsmap=nsmap)
            else:
                element = etree.Element(tag, nsmap=nsmap)
            for name, value in attributes.items():
                element.set(_clark_name(name, namespaces, use_default=False), value)
            stack.append((element, namespaces))

        else:
            element, _ = stack.pop()
            if node._text:
                if len(element):
                    element[-1].tail = node._text
                else:
                    element.text = node._text
            result = element

    assert result is not None
    return result


def _iterate_element_events(root: etree._Element) -> Iterator[Event]:
    is_root = True
    for action, element in etree.iterwalk(root, events=("start", "end")):
        # comments and processing instructions
        if not isinstance(element.tag, str):
            continue

        if action == "start":
            yield EventType.TagStart, tag_start_data(
                element, inherited_nsmap={} if is_root else None
            )
            is_root = False
        else:
            yield from tag_end_events(element)


def from_etree(root: etree._Element, trim_text: bool = True) -> Node:
    """
    Converts an :mod:`lxml` element and its descendants to a tree. Texts and tails are
    merged into the local text of the containing node. Qualified names are retained and
    all namespace declarations that are in scope at ``root`` are included as ``xmlns``
    attributes of the resulting root node.

    :param root: The element to convert, it's not altered.
    :param trim_text: Strips whitespace from the start and end of each node's text.
    """
    return next(
        TreeBuilder(_iterate_element_events(root), ParserOptions(trim_text=trim_text))
    )


__all__ = (from_etree.__name__, to_etree.__name__)
