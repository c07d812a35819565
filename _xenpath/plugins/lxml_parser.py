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

from typing import TYPE_CHECKING, Final, Optional

from lxml import etree

from _xenpath.exceptions import ParsingEmptyStream, ParsingProcessingError
from _xenpath.parser import EventType, TagEventData
from _xenpath.plugins import XMLEventParserInterface


if TYPE_CHECKING:
    from collections.abc import Iterator, Mapping

    from _xenpath.parser import Event, ParserOptions
    from _xenpath.typing import BinaryReader


XML_NAMESPACE: Final = "http://www.w3.org/XML/1998/namespace"


def qualified_name(name: str, nsmap: Mapping[str | None, str]) -> str:
    """Converts a name in Clark notation to one with the declared prefix."""
    if not name.startswith("{"):
        return name

    namespace, local_name = name[1:].split("}", 1)
    if namespace == XML_NAMESPACE:
        return f"xml:{local_name}"

    for prefix, declared_namespace in nsmap.items():
        if declared_namespace == namespace and prefix is not None:
            return f"{prefix}:{local_name}"
    return local_name


def tag_name(element: etree._Element) -> str:
    local_name = etree.QName(element).localname
    if element.prefix:
        return f"{element.prefix}:{local_name}"
    return local_name


def tag_start_data(
    element: etree._Element, inherited_nsmap: Optional[Mapping[str | None, str]] = None
) -> TagEventData:
    """
    Namespace declarations that aren't inherited from the parent element, or the given
    ``inherited_nsmap``, are included as attributes.
    """
    nsmap = element.nsmap
    if inherited_nsmap is None:
        if (parent := element.getparent()) is None:
            inherited_nsmap = {}
        else:
            inherited_nsmap = parent.nsmap

    attributes: dict[str, str] = {}
    for prefix, namespace in nsmap.items():
        if inherited_nsmap.get(prefix) != namespace:
            attributes["xmlns" if prefix is None else f"xmlns:{prefix}"] = namespace
    for name, value in element.attrib.items():
        assert isinstance(name, str)
        assert isinstance(value, str)
        attributes[qualified_name(name, nsmap)] = value

    return TagEventData(tag_name(element), attributes)


def tag_end_events(element: etree._Element) -> Iterator[Event]:
    """Yields the element's character data, including its children's tails."""
    if element.text:
        yield EventType.Text, element.text
    for child in element:
        if child.tail:
            yield EventType.Text, child.tail
    yield EventType.TagEnd, TagEventData(tag_name(element), None)


class LxmlParser(XMLEventParserInterface):
    __slots__ = ("fed_data", "parser")

    name = "lxml"

    def __init__(self, options: ParserOptions, base_url: str | None, encoding: str):
        if encoding.endswith(("-be", "-le")):
            encoding = encoding[:-3]

        self.fed_data = False
        self.parser = etree.XMLPullParser(
            base_url=base_url,
            dtd_validation=False,
            encoding=encoding,
            events=("end", "start"),
            load_dtd=options.load_referenced_resources,
            no_network=options.unplugged,
            remove_blank_text=False,
            remove_comments=True,
            remove_pis=True,
            resolve_entities=True,
            strip_cdata=False,
        )

    def emit_events(self) -> Iterator[Event]:
        for action, element in self.parser.read_events():
            if action == "start":
                yield EventType.TagStart, tag_start_data(element)
            else:
                yield from tag_end_events(element)
                # the children's data has been consumed
                del element[:]

    def parse(self, data: BinaryReader) -> Iterator[Event]:
        try:
            while chunk := data.read():
                if not self.fed_data and not chunk.strip():
                    continue
                self.fed_data = True
                self.parser.feed(chunk)
                yield from self.emit_events()

            if not self.fed_data:
                raise ParsingEmptyStream

            self.parser.close()
        except etree.XMLSyntaxError as e:
            raise ParsingProcessingError(str(e)) from e

        yield from self.emit_events()


__all__ = (
    LxmlParser.__name__,
    tag_end_events.__name__,
    tag_start_data.__name__,
)
