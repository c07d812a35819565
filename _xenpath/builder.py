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

from _xenpath.exceptions import ParsingEmptyStream, ParsingProcessingError
from _xenpath.nodes import Node
from _xenpath.parser import Event, EventType, ParserOptions, TagEventData, parse_events


if TYPE_CHECKING:
    from collections.abc import Iterator

    from _xenpath.typing import InputStream


class TreeBuilder:
    """
    Consumes parser events and builds trees from them. Character data is appended to
    the text of the node that is open, when a node is closed its text is optionally
    trimmed.
    """

    __slots__ = (
        "event_feed",
        "options",
        "started_nodes",
        "texts",
    )

    def __init__(self, event_feed: Iterator[Event], options: ParserOptions):
        self.event_feed: Final = event_feed
        self.options: Final = options
        self.started_nodes: Final[list[Node]] = []
        self.texts: Final[list[list[str]]] = []

    def __iter__(self):
        return self

    def __next__(self) -> Node:
        while True:
            event = next(self.event_feed)
            result = self.handle_event(event)
            if result is not None:
                return result

    def handle_event(self, event: Event) -> Node | None:
        type_, data = event

        match type_:
            case EventType.TagStart:
                assert isinstance(data, TagEventData)
                self.handle_tag_start(data)
            case EventType.TagEnd:
                assert isinstance(data, TagEventData)
                result = self.handle_tag_end(data)
                if not self.started_nodes:
                    return result
            case EventType.Text:
                assert isinstance(data, str)
                # character data outside the root node is dropped
                if self.texts:
                    self.texts[-1].append(data)

        return None

    def handle_tag_end(self, data: TagEventData | None) -> Node:
        result = self.started_nodes.pop()
        if __debug__ and data:
            assert result.name == data.name

        text = "".join(self.texts.pop())
        if self.options.trim_text:
            text = text.strip()
        result._text = text
        return result

    def handle_tag_start(self, data: TagEventData):
        node = Node(data.name, data.attributes)
        if self.started_nodes:
            self.started_nodes[-1].children.append(node)
        self.started_nodes.append(node)
        self.texts.append([])


def parse_nodes(
    data: InputStream,
    options: Optional[ParserOptions] = None,
    *,
    base_url: str | None = None,
) -> Iterator[Node]:
    """Parses the provided input data to a sequence of root nodes."""
    if options is None:
        options = ParserOptions()
    yield from TreeBuilder(parse_events(data, options, base_url), options)


def parse_tree(
    data: InputStream,
    options: Optional[ParserOptions] = None,
    *,
    base_url: str | None = None,
) -> Node:
    """
    Parses the provided input to a single tree and returns its root node.

    :param data: Markup as :class:`str` or :class:`bytes` or a binary
                 :term:`file-like object` to read it from.
    :param options: The :class:`ParserOptions` to apply.
    :param base_url: The base URL for resolving references.
    """
    result = None
    for node in parse_nodes(data, options, base_url=base_url):
        if result is not None:
            raise ParsingProcessingError("The stream contained extra contents.")
        result = node

    if result is None:
        raise ParsingEmptyStream
    return result


__all__ = (parse_nodes.__name__, parse_tree.__name__)
