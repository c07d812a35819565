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
A loader that fetches documents from ``http://`` and ``https://`` URLs with httpx_.
It's available when ``xenpath`` is installed with the ``web-loader`` extra.

.. _httpx: https://www.python-httpx.org/
"""


from __future__ import annotations

from typing import TYPE_CHECKING, Any

import httpx

from _xenpath.builder import parse_tree
from _xenpath.plugins import plugin_manager
from _xenpath.plugins.core_loaders import text_loader

if TYPE_CHECKING:
    from collections.abc import Iterator
    from types import SimpleNamespace
    from typing import Final

    from _xenpath.typing import LoaderResult


DEFAULT_CLIENT: Final = httpx.Client(follow_redirects=True)


class ResponseReader:
    """
    Reads the body of a streamed response as it arrives. Without a size, a read
    returns the next received chunk, an empty byte string signals the body's end.
    """

    __slots__ = ("_chunks", "_pending")

    def __init__(self, response: httpx.Response):
        self._chunks: Iterator[bytes] = response.iter_bytes()
        self._pending = b""

    def _next_chunk(self) -> bytes:
        for chunk in self._chunks:
            if chunk:
                return chunk
        return b""

    def read(self, n: int = -1) -> bytes:
        if n < 0:
            result, self._pending = self._pending or self._next_chunk(), b""
            return result

        while len(self._pending) < n and (chunk := self._next_chunk()):
            self._pending += chunk
        result, self._pending = self._pending[:n], self._pending[n:]
        return result

    def readable(self) -> bool:
        return True

    def seekable(self) -> bool:
        return False


@plugin_manager.register_loader(before=text_loader)
def web_loader(
    data: Any, config: SimpleNamespace, client: httpx.Client = DEFAULT_CLIENT
) -> LoaderResult:
    """
    This loader fetches a document from a URL with the ``http`` or ``https`` scheme
    and parses the response body while it's being received. The URL that was
    eventually retrieved, after redirects, is bound to ``source_url`` on the
    document's :attr:`xenpath.Document.config` attribute and serves as base URL for
    the parser.

    It refuses to touch the network when the document's
    :attr:`xenpath.ParserOptions.unplugged` is set. If the options don't name an
    encoding, the charset that the server declares for the response is used.

    A loader with a differently configured client can delegate to this one:

    .. testcode::

        import httpx
        from _xenpath.plugins import plugin_manager
        from _xenpath.plugins.web_loader import web_loader


        client = httpx.Client(timeout=30.0, trust_env=False)

        @plugin_manager.register_loader(before=web_loader)
        def patient_web_loader(data, config):
            return web_loader(data, config, client=client)
    """

    if not (
        isinstance(data, str) and data.lower().startswith(("http://", "https://"))
    ):
        return "The input value is not an URL with the http or https scheme."

    options = config.parser_options
    if options.unplugged:
        return "Network access is disabled by the parser options."

    with client.stream("GET", url=data) as response:
        response.raise_for_status()
        if options.encoding is None and response.charset_encoding is not None:
            options = options._replace(encoding=response.charset_encoding)
        if not hasattr(config, "source_url"):
            config.source_url = str(response.url)
        return parse_tree(ResponseReader(response), options, base_url=config.source_url)


__all__ = (web_loader.__name__,)
