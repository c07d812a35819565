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

from copy import deepcopy
from io import TextIOWrapper
from types import SimpleNamespace
from typing import TYPE_CHECKING, Any, BinaryIO, Optional

from _xenpath.builder import parse_nodes, parse_tree
from _xenpath.converters import from_etree, to_etree
from _xenpath.exceptions import FailedDocumentLoading, InvalidOperation
from _xenpath.nodes import AttributeNode, ChildNodes, Node, NodeAttributes
from _xenpath.parser import ParserOptions
from _xenpath.path import QueryResults, compile_path, resolve_one
from _xenpath.plugins import core_loaders  # noqa: F401
from _xenpath.plugins import plugin_manager as _plugin_manager
from _xenpath.serializer import (
    DefaultStringOptions,
    FormatOptions,
    PrettySerializer,
    Serializer,
    _StringWriter,
    _TextBufferWriter,
    _get_serializer,
)

if TYPE_CHECKING:
    from pathlib import Path

    from _xenpath.typing import Loader


# plugin loading


_plugin_manager.load_plugins()


# api


class Document:
    """
    This class is the entrypoint to obtain a tree from a markup document.

    :param source: Anything that the configured loaders can make sense of to return a
                   parsed tree.
    :param parser_options: A :class:`ParserOptions` instance to configure the used
                           parser.
    :param source_url: An optional source URL for situations where a loader can't
                       determine one.

    For instantiation any object can be passed. A suitable loader must be available for
    the given source. The default loaders accept strings and bytes with markup,
    :class:`pathlib.Path` instances, binary :term:`file-like object` s, URLs with the
    ``http`` and ``https`` scheme (if :mod:`httpx` is installed) and nodes that have no
    parent.

    Nodes can be tested for membership in a document:

    >>> document = Document("<root><child/></root>")
    >>> child = document.root.children[0]
    >>> child in document
    True
    >>> child.clone() in document
    False

    The string coercion of a document yields a markup stream as string.

    >>> document = Document("<root/>")
    >>> str(document)
    '<?xml version="1.0" encoding="UTF-8"?><root/>'
    """

    __slots__ = ("config", "__root", "source_url")

    def __init__(
        self,
        source: Any,
        /,
        parser_options: Optional[ParserOptions] = None,
        source_url: Optional[str] = None,
    ):
        config = SimpleNamespace()
        if source_url is not None:
            config.source_url = source_url
        config.parser_options = parser_options or ParserOptions()

        self.__root = self.__load_source(source, config)
        self.config: SimpleNamespace = config
        """
        Beside the ``parser_options``, this property contains the namespaced data that
        loaders may have stored.
        """
        self.source_url: Optional[str] = self.config.__dict__.pop("source_url", None)
        """
        The source URL where a loader obtained the document's contents or
        :obj:`None`.
        """

    @staticmethod
    def __load_source(source: Any, config: SimpleNamespace) -> Node:
        loader_excuses: dict[Loader, str | Exception] = {}

        for loader in _plugin_manager.loaders:
            try:
                loader_result = loader(source, config)
            except Exception as e:
                loader_excuses[loader] = e
            else:
                if isinstance(loader_result, str):
                    loader_excuses[loader] = loader_result
                else:
                    break
        else:
            vars(config).pop("source_url", None)
            raise FailedDocumentLoading(source, loader_excuses)

        assert isinstance(loader_result, Node)
        return loader_result

    def __contains__(self, node: Node) -> bool:
        return node.root is self.__root

    def __str__(self) -> str:
        writer = _StringWriter()
        self.__serialize(
            _get_serializer(writer, DefaultStringOptions.format_options), "utf-8"
        )
        return writer.result

    def __serialize(self, serializer: Serializer, encoding: str):
        possible_newline = "\n" if isinstance(serializer, PrettySerializer) else ""
        serializer.writer(
            f'<?xml version="1.0" encoding="{encoding.upper()}"?>{possible_newline}'
        )
        serializer.serialize_node(self.__root)
        serializer.writer.buffer.flush()

    def clone(self) -> Document:
        """
        Clones the document with its contents.

        :return: A new document instance.
        """
        result = Document(self.__root.clone(deep=True))
        result.config = deepcopy(self.config)
        result.source_url = self.source_url
        return result

    @property
    def root(self) -> Node:
        """The root node of a document's tree."""
        return self.__root

    @root.setter
    def root(self, node: Node):
        if not isinstance(node, Node) or isinstance(node, AttributeNode):
            raise TypeError("The document root node must be a :class:`Node` instance.")
        if node._parent is not None:
            raise InvalidOperation(
                "Only a detached node can be set as root. Use :meth:`Node.clone` or "
                ":meth:`Node.detach` on the designated root node."
            )
        self.__root = node

    def save(
        self,
        path: Path,
        *,
        encoding: str = "utf-8",
        format_options: Optional[FormatOptions] = None,
        newline: None | str = None,
    ):
        """
        Saves the serialized document contents to a file.

        :param path: The filesystem path to the target file.
        :param encoding: The desired text encoding.
        :param format_options: An instance of :class:`FormatOptions` can be
                               provided to configure formatting.
        :param newline: See :class:`io.TextIOWrapper` for a detailed explanation of the
                        parameter with the same name.
        """
        with path.open("bw") as file:
            self.write(
                buffer=file,
                encoding=encoding,
                format_options=format_options,
                newline=newline,
            )

    def write(
        self,
        buffer: BinaryIO,
        *,
        encoding: str = "utf-8",
        format_options: Optional[FormatOptions] = None,
        newline: None | str = None,
    ):
        """
        Writes the serialized document contents to a :term:`file-like object`.

        :param buffer: A :term:`file-like object` that the document is written to.
        :param encoding: The desired text encoding.
        :param format_options: An instance of :class:`FormatOptions` can be provided to
                               configure formatting.
        :param newline: See :class:`io.TextIOWrapper` for a detailed explanation of the
                        parameter with the same name.
        """
        text_buffer = TextIOWrapper(buffer)
        self.__serialize(
            serializer=_get_serializer(
                _TextBufferWriter(text_buffer, encoding=encoding, newline=newline),
                format_options=format_options,
            ),
            encoding=encoding,
        )
        # the wrapped buffer stays open
        text_buffer.detach()

    # queries

    def all(self, *path: str) -> QueryResults:
        """
        This method proxies to the :meth:`Node.all` method of the document's
        :attr:`root <Document.root>` node.
        """
        return self.__root.all(*path)

    def get(self, *path: str) -> Optional[Node]:
        """
        This method proxies to the :meth:`Node.get` method of the document's
        :attr:`root <Document.root>` node.
        """
        return self.__root.get(*path)

    def one(self, *path: str) -> Node:
        """
        This method proxies to the :meth:`Node.one` method of the document's
        :attr:`root <Document.root>` node.
        """
        return self.__root.one(*path)


__all__ = (
    AttributeNode.__name__,
    ChildNodes.__name__,
    DefaultStringOptions.__name__,
    Document.__name__,
    FormatOptions.__name__,
    Node.__name__,
    NodeAttributes.__name__,
    ParserOptions.__name__,
    QueryResults.__name__,
    compile_path.__name__,
    from_etree.__name__,
    parse_nodes.__name__,
    parse_tree.__name__,
    resolve_one.__name__,
    to_etree.__name__,
)
