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

import codecs
import re
import warnings
from enum import IntEnum, auto
from io import BytesIO
from typing import Final, TYPE_CHECKING, NamedTuple, Optional, TypeAlias, cast

from _xenpath.plugins import plugin_manager

if TYPE_CHECKING:
    from collections.abc import Iterator, Sequence

    from _xenpath.plugins import XMLEventParserInterface
    from _xenpath.typing import BinaryReader, InputStream


BOM_TO_ENCODING_NAME: Final = (
    (4, codecs.BOM_UTF32_LE, "utf-32-le"),
    (4, codecs.BOM_UTF32_BE, "utf-32-be"),
    (3, codecs.BOM_UTF8, "utf-8"),
    (2, codecs.BOM_UTF16_LE, "utf-16-le"),
    (2, codecs.BOM_UTF16_BE, "utf-16-be"),
)


_match_encoding: Final = re.compile(
    rb"""<\?xml\sversion=["']1\.[01]["']\sencoding=["']([A-Za-z0-9_-]+)["']"""
).match


class _EncodingDetectingReader:
    __slots__ = ("buffer", "first_bytes", "reading")

    def __init__(self, buffer: BinaryReader):
        self.buffer = buffer
        self.first_bytes = b""
        self.reading = False

    def get_encoding(self) -> str | None:
        if self.reading:
            raise RuntimeError("Get the encoding before reading from the buffer!")

        self.first_bytes = self.buffer.read(64)
        return detect_encoding(self.first_bytes)

    def read(self, n: int = -1) -> bytes:
        if self.reading:
            return self.buffer.read(n)
        else:
            self.reading = True
            return self.first_bytes + self.buffer.read(n)


class EventType(IntEnum):
    TagStart = auto()
    TagEnd = auto()
    Text = auto()


class ParserOptions(NamedTuple):
    """
    The configuration options that define a parser's behaviour.

    The used parser backend is determined by their availability and the
    ``preferred_parsers`` setting.  *xenpath* comes with two contributed
    implementations and further can be added to the plugin manager based on
    :class:`_xenpath.plugins.XMLEventParserInterface`.

    Namespaces are not resolved by either, a node's name is the qualified name as it
    appears in the source and namespace declarations are retained as ``xmlns`` and
    ``xmlns:*`` attributes. Comments and processing instructions are dropped.

    The ``expat`` parser adapter depends on the :mod:`xml.sax.expatreader` module from
    the standard library that is available with many Python distributions.

    The ``lxml`` based parser requires the *lxml* package to be present in the
    interpreter environment.
    """

    encoding: Optional[str] = None
    """
    This should be used for streams where the encoding is not noted in an XML document
    declaration or indicated by a BOM for Unicode encodings.  It doesn't affect parsing
    of data that is passed as :class:`str`.  Default: :obj:`None`.
    """
    load_referenced_resources: bool = False
    """Allows the loading of referenced external DTDs.  Default: :obj:`False`."""
    preferred_parsers: str | Sequence[str] = ("lxml", "expat")
    """
    A parser adapter name or a sequence of such that are preferably to be used.
    Default: ``("lxml", "expat")``.
    """
    trim_text: bool = True
    """
    Strips leading and trailing whitespace from each node's text when the node's end
    is reached.  Default: :obj:`True`.
    """
    unplugged: bool = False
    """Don't load referenced resources over network.  Default: :obj:`False`."""


class TagEventData(NamedTuple):
    name: str
    """The qualified name."""
    attributes: dict[str, str] | None
    """
    The attributes in document order, including namespace declarations.
    It is optional in case of a :py:enum:`EventType.TagEnd`.
    """


Event: TypeAlias = tuple[EventType, str | TagEventData]
"""
A stream event tuple consists of two values.  The first is a member of
:class:`EventType` that signals the type of event, the second carries the relevant data:
a :class:`TagEventData` for :py:enum:member:`EventType.TagStart` and
:py:enum:member:`EventType.TagEnd` events and a :class:`str` with parsed character data
for :py:enum:member:`EventType.Text` events.
"""


def detect_encoding(stream: bytes) -> str | None:
    if (match := _match_encoding(stream)) is not None:
        return match.group(1).decode("ascii")
    else:
        for bom_size, bom, name in BOM_TO_ENCODING_NAME:
            if stream[:bom_size] == bom:
                return name
        else:
            return None


def _make_parser(
    options: ParserOptions, *, base_url: str | None, encoding: str
) -> XMLEventParserInterface:
    return plugin_manager.get_parser(options.preferred_parsers)(
        options, base_url=base_url, encoding=encoding
    )


def parse_events(
    input_: InputStream, options: ParserOptions, base_url: str | None
) -> Iterator[Event]:
    encoding = options.encoding
    if isinstance(input_, str):
        encoding = "utf-8"
        input_ = BytesIO(input_.encode("utf-8"))

    elif isinstance(input_, bytes):
        if encoding is None:
            encoding = detect_encoding(input_)
        input_ = BytesIO(input_)

    elif encoding is None:
        if input_.seekable():
            encoding = detect_encoding(input_.read(64))
            input_.seek(0)
        else:
            input_ = _EncodingDetectingReader(input_)
            encoding = input_.get_encoding()

    if encoding is None:
        warnings.warn(
            "No encoding known for parsing a markup stream. Defaulting to UTF-8.",
            category=UserWarning,
        )
        encoding = "utf-8"

    yield from _make_parser(options, base_url=base_url, encoding=encoding).parse(
        cast("BinaryReader", input_)
    )


__all__ = (
    "Event",
    "EventType",
    ParserOptions.__name__,
    TagEventData.__name__,
    detect_encoding.__name__,
    parse_events.__name__,
)
