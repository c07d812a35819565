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
from collections import deque
from typing import TYPE_CHECKING
from urllib.parse import urljoin, urlparse
from xml import sax

from _xenpath.exceptions import (
    InvalidCodePath,
    ParsingEmptyStream,
    ParsingProcessingError,
)
from _xenpath.parser import EventType, TagEventData
from _xenpath.plugins import XMLEventParserInterface


if TYPE_CHECKING:
    from collections.abc import Iterator

    from _xenpath.parser import Event, ParserOptions
    from _xenpath.typing import BinaryReader


class ContentHandler(sax.handler.ContentHandler):
    __slots__ = ("events",)

    def __init__(self, events: deque[Event]):
        super().__init__()
        self.events = events

    def characters(self, content: str):
        self.events.append((EventType.Text, content))

    def endElement(self, name: str):  # noqa: N802
        self.events.append((EventType.TagEnd, TagEventData(name, None)))

    def ignorableWhitespace(self, whitespace: str):  # noqa: N802
        raise InvalidCodePath

    def skippedEntity(self, name: str):  # noqa: N802
        raise ParsingProcessingError(f"Cannot resolve the entity '{name}'.")

    def startElement(  # noqa: N802
        self, name: str, attrs: sax.xmlreader.AttributesImpl
    ):
        self.events.append(
            (EventType.TagStart, TagEventData(name, dict(attrs.items())))
        )


class EntityResolver(sax.handler.EntityResolver):
    __slots__ = ("base_url", "options")

    def __init__(self, options: ParserOptions, base_url: str | None):
        self.base_url = base_url
        self.options = options

    def resolveEntity(  # noqa: N802
        self, publicId: str | None, systemId: str | None  # noqa: N803
    ):
        if not self.options.load_referenced_resources:
            raise ParsingProcessingError(
                "The document includes character entities that are declared in "
                "external resources."
            )

        _id = systemId or publicId
        assert _id is not None
        url = urljoin(self.base_url or "", _id, allow_fragments=False)

        if self.options.unplugged and urlparse(url).scheme != "file":
            raise ParsingProcessingError(f"Cannot load external resource '{_id}'.")

        return url


class ExpatParser(XMLEventParserInterface):
    __slots__ = ("encoding", "events", "options", "parser", "unprocessed_text")

    name = "expat"

    def __init__(self, options: ParserOptions, base_url: str | None, encoding: str):
        self.encoding = encoding
        self.events: deque[Event] = deque()
        self.options = options
        self.parser = self.make_parser(base_url=base_url)
        self.unprocessed_text = ""

    def emit_events(self) -> Iterator[Event]:
        while self.events:
            event_type, event_data = self.events.popleft()
            if event_type is EventType.Text:
                assert isinstance(event_data, str)
                self.unprocessed_text += event_data
            else:
                if self.unprocessed_text:
                    yield EventType.Text, self.unprocessed_text
                    self.unprocessed_text = ""
                yield event_type, event_data

    def make_parser(self, base_url: str | None) -> sax.xmlreader.IncrementalParser:
        parser = sax.make_parser()
        # names are retained as qualified names
        parser.setFeature(sax.handler.feature_namespaces, False)
        assert isinstance(parser, sax.xmlreader.IncrementalParser)

        parser.setContentHandler(ContentHandler(self.events))
        parser.setEntityResolver(EntityResolver(self.options, base_url))
        parser.setFeature(
            sax.handler.feature_external_ges, self.options.load_referenced_resources
        )

        return parser

    def parse(self, data: BinaryReader) -> Iterator[Event]:
        decoder = codecs.getincrementaldecoder(self.encoding)()
        fed_data = False

        try:
            while chunk := data.read():
                text = decoder.decode(chunk)
                if not fed_data:
                    # not all decoders drop a BOM
                    text = text.lstrip("\ufeff")
                    if not text.strip():
                        continue
                fed_data = True
                self.parser.feed(text)
                yield from self.emit_events()

            if not fed_data:
                raise ParsingEmptyStream

            self.parser.feed(decoder.decode(b"", final=True))
            self.parser.close()
        except sax.SAXParseException as e:
            raise ParsingProcessingError(str(e)) from e

        yield from self.emit_events()


__all__ = (ExpatParser.__name__,)
