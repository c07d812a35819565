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

from abc import ABC, abstractmethod
from collections.abc import Iterable, Iterator, Sequence
from importlib.metadata import entry_points
from importlib.util import find_spec
from typing import TYPE_CHECKING


if TYPE_CHECKING:
    from _xenpath.parser import Event, ParserOptions
    from _xenpath.typing import (
        BinaryReader,
        Loader,
        LoaderConstraint,
        SecondOrderDecorator,
    )


class PluginManager:
    __slots__ = (
        "loaders",
        "parsers",
    )

    def __init__(self):
        self.loaders: list[Loader] = []
        self.parsers: dict[str, type[XMLEventParserInterface]] = {}

    def get_parser(
        self, preferences: str | Sequence[str]
    ) -> type[XMLEventParserInterface]:
        if isinstance(preferences, str):
            preferences = (preferences,)

        for name in preferences:
            if (parser := self.parsers.get(name)) is not None:
                return parser

        for parser in self.parsers.values():
            return parser

        raise RuntimeError("No available parsers.")

    @staticmethod
    def load_plugins():
        """
        Loads all modules that are registered as entrypoint in the ``xenpath`` group and
        imports contributed extensions whose dependencies are available.
        """
        if find_spec("httpx"):
            import _xenpath.plugins.web_loader
        if find_spec("lxml.etree"):
            import _xenpath.plugins.lxml_parser
        if find_spec("xml.sax"):
            import _xenpath.plugins.expat_parser  # noqa: F401

        for entrypoint in entry_points().select(group="xenpath"):
            entrypoint.load()

    def register_loader(
        self, before: LoaderConstraint = None, after: LoaderConstraint = None
    ) -> SecondOrderDecorator:
        """
        Registers a document loader.

        A loader is called with the ``source`` that a :class:`xenpath.Document` is
        initialized with and a ``config`` namespace that holds the ``parser_options``.
        It returns the parsed root :class:`xenpath.Node` or a string that explains why
        it didn't attempt to load the source. A module that is specified as ``xenpath``
        plugin might contain a loader like this one:

        .. testcode::

            from types import SimpleNamespace
            from typing import Any

            from _xenpath.plugins import plugin_manager
            from _xenpath.plugins.core_loaders import text_loader
            from _xenpath.typing import LoaderResult


            @plugin_manager.register_loader(before=text_loader)
            def inline_loader(source: Any, config: SimpleNamespace) -> LoaderResult:
                if isinstance(source, str) and source.startswith("inline:"):
                    return text_loader(source[7:], config)

                # return an indication why this loader didn't attempt to load in order
                # to support debugging
                return "The input value is not an inline document."

        Loaders that retrieve a document from an URL should add the origin as string to
        the ``config`` object as ``source_url``.

        You might want to specify a loader to be considered before or after another
        one, the constraints can be given as one loader or an iterable of such.
        """

        if before is not None and after is not None:
            raise NotImplementedError(
                "Loaders may only define one constraint atm. Please open an issue with "
                "a use-case description if you need to define both."
            )

        registered_loaders = self.loaders

        if before is not None:
            if not isinstance(before, Iterable):
                before = (before,)
            index = min(registered_loaders.index(x) for x in before)

        elif after is not None:
            if not isinstance(after, Iterable):
                after = (after,)
            index = max(registered_loaders.index(x) for x in after) + 1

        else:
            index = len(registered_loaders)

        def registrar(loader: Loader) -> Loader:
            assert callable(loader)
            registered_loaders.insert(index, loader)
            return loader

        return registrar


class XMLEventParserInterface(ABC):
    """
    This is the base class for parser adapters.  After initialization their
    :meth:`parse` method will be called for iterate over parser events.  Instances
    don't have to care about their state beyond the parsing of one input stream as
    they're only employed once.

    :param options: The parsing options the user passed with the input stream.
    :param base_url: The base URL for resolving references.
    :param encoding: This is the encoding that was either provided by the user,
                     noted in an XML document declaration or indicated by a Byte Order
                     Mark.  But it could also be the fallback value ``utf-8`` if none of
                     the prior was available.
    """

    name: str
    """
    The parser can be selected by this class attribute's value as (member of) a
    :attr:`ParserOptions.preferred_parsers` setting.
    """

    def __init_subclass__(cls):
        plugin_manager.parsers[cls.name] = cls

    @abstractmethod
    def __init__(self, options: ParserOptions, base_url: str | None, encoding: str):
        pass

    @abstractmethod
    def parse(self, data: BinaryReader) -> Iterator[Event]:
        """
        This method must be implemented and yield the parsed contents in document order
        as :obj:`Event` tuples.  Parser specific errors are to be raised as
        :exc:`_xenpath.exceptions.ParsingProcessingError`, a stream without any
        content as :exc:`_xenpath.exceptions.ParsingEmptyStream`.
        """
        pass


plugin_manager = PluginManager()


__all__ = (
    PluginManager.__name__,
    XMLEventParserInterface.__name__,
    "plugin_manager",
)
