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

"""These are the specific xenpath exceptions."""

from __future__ import annotations

from typing import Optional, TYPE_CHECKING, Any

if TYPE_CHECKING:
    from _xenpath.typing import Loader


class XenpathBaseException(Exception):
    pass


class ArgumentError(XenpathBaseException, ValueError):
    """Raised when an operation is called with malformed arguments."""

    pass


class FailedDocumentLoading(XenpathBaseException):
    def __init__(self, source: Any, excuses: dict[Loader, str | Exception]):
        self.source = source
        self.excuses = excuses

    def __str__(self):
        return f"Couldn't load {self.source!r} with these loaders: {self.excuses}"


class InvalidCodePath(XenpathBaseException, RuntimeError):
    """Raised when a code path that is not expected to be executed is reached."""

    def __init__(self):  # pragma: no cover
        super().__init__(
            "An unintended path was taken through the code. Please report this bug."
        )


class InvalidOperation(XenpathBaseException):
    """Raised when an invalid operation is attempted by the client code."""

    pass


class ParsingError(XenpathBaseException):
    pass


class ParsingProcessingError(ParsingError):
    pass


class ParsingEmptyStream(ParsingProcessingError):
    def __init__(self):
        super().__init__("The input stream is empty.")


class _QueryError(XenpathBaseException):
    """Base for errors that relate to the evaluation of a path expression."""

    def __init__(self, expression: str, message: str):
        super().__init__(message)
        self.expression = expression


class AmbiguousMatch(_QueryError, LookupError):
    """Raised when a query for a single node matches more than one node."""

    def __init__(self, expression: str, count: int):
        super().__init__(
            expression, f"Multiple nodes ({count}) found for <{expression}>."
        )
        self.count = count


class IndexOutOfRange(_QueryError, IndexError):
    """Raised when an index predicate addresses a position beyond the candidates."""

    def __init__(self, expression: str, index: int, size: int):
        super().__init__(
            expression,
            f"Index {index} is out of range for {size} candidate node(s) in "
            f"<{expression}>.",
        )
        self.index = index
        self.size = size


class NotFound(_QueryError, LookupError):
    """Raised when a query for a single node matches nothing."""

    def __init__(self, expression: str):
        super().__init__(expression, f"No nodes found for <{expression}>.")


class UnsupportedOperation(_QueryError, NotImplementedError):
    """Raised when a path expression uses a feature that is not supported."""

    def __init__(self, expression: str, feature_description: str):
        super().__init__(
            expression,
            f"{feature_description} is not supported with intention: <{expression}>.",
        )


class PathParsingError(ArgumentError):
    """Raised when a path expression can't be parsed."""

    def __init__(
        self,
        expression: Optional[str] = None,
        position: Optional[int] = None,
        message: Optional[str] = None,
    ):
        self.expression = expression
        self.position = position
        self.message = message

    def __str__(self):
        expression = self.expression
        assert expression is not None
        assert self.message is not None
        position = self.position or 0

        expression_length = len(expression)
        snippet_end = min(position + 16, expression_length)

        if expression_length > snippet_end:
            snippet = f"`{expression[position:snippet_end]}…`"
        else:
            snippet = f"`{expression[position:snippet_end]}`"

        if len(snippet) > 2:
            return (
                f"Path parsing error at character {position} ({snippet}): "
                f"{self.message}"
            )
        else:
            return f"Path parsing error at character {position}: {self.message}"


__all__ = (
    AmbiguousMatch.__name__,
    ArgumentError.__name__,
    FailedDocumentLoading.__name__,
    IndexOutOfRange.__name__,
    InvalidCodePath.__name__,
    InvalidOperation.__name__,
    NotFound.__name__,
    ParsingEmptyStream.__name__,
    ParsingError.__name__,
    ParsingProcessingError.__name__,
    PathParsingError.__name__,
    UnsupportedOperation.__name__,
    XenpathBaseException.__name__,
)
