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
from abc import ABC
from enum import IntEnum
from io import StringIO, TextIOWrapper
from typing import (
    TYPE_CHECKING,
    ClassVar as ClassWar,
    Final,
    NamedTuple,
    Optional,
    TextIO,
)

if TYPE_CHECKING:
    from collections.abc import Iterator

    from _xenpath.nodes import Node


# constants


CTRL_CHAR_ENTITY_NAME_MAPPING: Final = (
    ("&", "amp"),
    (">", "gt"),
    ("<", "lt"),
    ('"', "quot"),
    ("'", "apos"),
)
CCE_TABLE: Final = str.maketrans(
    {ord(k): f"&{v};" for k, v in CTRL_CHAR_ENTITY_NAME_MAPPING}
)
BEYOND_PRINTABLE_ASCII: Final = re.compile(r"[^\x00-\x7e]")


def escape(value: str) -> str:
    """
    Replaces markup characters with entities and any character beyond ``~`` with a
    numeric character reference.
    """
    return BEYOND_PRINTABLE_ASCII.sub(
        lambda m: f"&#{ord(m.group())};", value.translate(CCE_TABLE)
    )


# export events


class ExportEventType(IntEnum):
    Start = 0
    End = 1


class ExportEvent(NamedTuple):
    type: ExportEventType
    node: Node


def iterate_export_events(root: Node) -> Iterator[ExportEvent]:
    """
    Yields a start and an end event for each node of the subtree in document order.
    A node's text is to be handled with its end event as it's to follow its
    children.
    """
    stack: list[tuple[Node, Iterator[Node]]] = [(root, iter(root._children))]
    yield ExportEvent(ExportEventType.Start, root)
    while stack:
        node, children = stack[-1]
        for child in children:
            yield ExportEvent(ExportEventType.Start, child)
            stack.append((child, iter(child._children)))
            break
        else:
            stack.pop()
            yield ExportEvent(ExportEventType.End, node)


# configuration


class FormatOptions(NamedTuple):
    """
    Instances of this class can be used to define serialization formatting that is
    easier to read for humans.

    Note that the whitespace that is added is part of a node's text when the result is
    parsed again without trimming.
    """

    indentation: str = ""
    """
    This string prefixes descending nodes one time per depth level. Each node is put
    on a new line when it's not empty.
    """


class DefaultStringOptions:
    """
    This object's class variables are used to configure the serialization parameters
    that are applied when nodes are coerced to :class:`str` objects. Hence it also
    applies when node objects are fed to the :func:`print` function and in other cases
    where objects are implicitly cast to strings.

    .. attention::

        Use this once to define behaviour on *application level*. For thread-safe
        serializations of nodes with diverging parameters use
        :meth:`Node.serialize`!
    """

    format_options: ClassWar[None | FormatOptions] = None
    """
    An instance of :class:`FormatOptions` can be provided to configure formatting.
    """

    @classmethod
    def reset_defaults(cls):
        """Restores the factory settings."""
        cls.format_options = None


# serializer


def _get_serializer(
    writer: _SerializationWriter, format_options: Optional[FormatOptions]
) -> Serializer:
    if format_options is None or not format_options.indentation:
        return Serializer(writer)

    if not format_options.indentation.isspace():
        raise ValueError("Invalid indentation characters.")

    return PrettySerializer(writer, format_options)


def serialize(node: Node, format_options: Optional[FormatOptions] = None) -> str:
    writer = _StringWriter()
    _get_serializer(writer, format_options).serialize_node(node)
    return writer.result


class Serializer:
    __slots__ = ("writer",)

    def __init__(self, writer: _SerializationWriter):
        self.writer = writer

    def _serialize_attributes(self, node: Node):
        for name, value in node._attributes.items():
            self.writer(f' {name}="{escape(value)}"')

    def _serialize_content(self, node: Node):
        for child_node in node._children:
            self.serialize_node(child_node)
        if node._text:
            self.writer(escape(node._text))

    def serialize_node(self, node: Node):
        name = node.name
        self.writer(f"<{name}")
        self._serialize_attributes(node)

        if node._children:
            self.writer(">")
            self._serialize_content(node)
            self.writer(f"</{name}>")
        elif node._text:
            self.writer(f">{escape(node._text)}</{name}>")
        else:
            self.writer("/>")


class PrettySerializer(Serializer):
    __slots__ = ("_level", "indentation")

    def __init__(self, writer: _SerializationWriter, format_options: FormatOptions):
        super().__init__(writer)
        self.indentation: Final = format_options.indentation
        self._level = 0

    def _serialize_content(self, node: Node):
        self._level += 1
        inner_indentation = "\n" + self._level * self.indentation
        for child_node in node._children:
            self.writer(inner_indentation)
            self.serialize_node(child_node)
        if node._text:
            self.writer(inner_indentation + escape(node._text))
        self._level -= 1
        self.writer("\n" + self._level * self.indentation)


# writer


class _SerializationWriter(ABC):
    __slots__ = ("buffer",)

    def __init__(self, buffer: TextIO):
        self.buffer: Final = buffer

    def __call__(self, data: str):
        self.buffer.write(data)

    @property
    def result(self):
        if isinstance(self.buffer, StringIO):
            return self.buffer.getvalue()
        raise TypeError(  # pragma: no cover
            "Underlying buffer must be an instance of `io.StingIO`"
        )


class _StringWriter(_SerializationWriter):
    def __init__(self, newline: Optional[str] = None):
        super().__init__(StringIO(newline=newline))


class _TextBufferWriter(_SerializationWriter):
    def __init__(
        self,
        buffer: TextIOWrapper,
        encoding: str = "utf-8",
        newline: Optional[str] = None,
    ):
        buffer.reconfigure(encoding=encoding, newline=newline)
        super().__init__(buffer)


__all__ = (
    DefaultStringOptions.__name__,
    ExportEvent.__name__,
    ExportEventType.__name__,
    FormatOptions.__name__,
    escape.__name__,
    iterate_export_events.__name__,
    serialize.__name__,
)
