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
from collections.abc import Iterable
from functools import lru_cache
from typing import TYPE_CHECKING, Optional

from _xenpath.exceptions import PathParsingError, UnsupportedOperation
from _xenpath.path.ast import (
    AttributeExists,
    AttributeMatches,
    AttributeSegment,
    CompiledPath,
    ExactIndex,
    LastRelative,
    NamedSegment,
    ParentSegment,
    Predicate,
    RootSegment,
    Segment,
    SelfSegment,
    TextMatches,
)

if TYPE_CHECKING:
    from typing import Final


DELIMITER: Final = "/"
PARENT_TOKEN: Final = ".."
SELF_TOKEN: Final = "."
ATTRIBUTE_PREFIX: Final = "@"
WILDCARD: Final = "*"
LAST_FUNCTION: Final = "last()"
TEXT_FUNCTION: Final = "text()"

_NAME_PATTERN: Final = re.compile(r"[^\s\"'=~@/\[\]]+")
_QUOTES: Final = ("'", '"')


def assemble_path(fragments: Iterable[str]) -> str:
    """
    Joins path fragments to one expression. A delimiter is inserted between two
    fragments unless the accumulated path already ends with one. A fragment that starts
    with a delimiter discards everything that was accumulated before.
    """
    result = ""
    for fragment in fragments:
        if not isinstance(fragment, str):
            raise TypeError("Path fragments must be strings.")
        if fragment.startswith(DELIMITER):
            result = fragment
        elif result and not result.endswith(DELIMITER):
            result += DELIMITER + fragment
        else:
            result += fragment
    return result


def is_dot_notation(expression: str) -> bool:
    return len(expression) > 1 and expression[0] == "." and expression[1].isalpha()


def translate_dot_notation(expression: str) -> tuple[str, tuple[int, ...]]:
    """
    Rewrites a dot-delimited expression to a slash-delimited one. Along with the
    result the position of each of its characters in the input is returned.
    """
    result: list[str] = []
    offsets: list[int] = []
    depth = 0
    escaped = False
    delimited_at = 0

    for position, character in enumerate(expression[1:], start=1):
        if escaped:
            escaped = False
            if depth:
                result.append("\\")
                offsets.append(position - 1)
        elif character == "\\":
            escaped = True
            continue
        elif character == "[":
            depth += 1
        elif character == "]":
            depth = max(depth - 1, 0)
        elif character == "." and not depth:
            if delimited_at == position - 1:
                raise PathParsingError(position=position, message="Empty step.")
            delimited_at = position
            result.append(DELIMITER)
            offsets.append(position)
            continue

        result.append(character)
        offsets.append(position)

    if escaped:
        result.append("\\")
        offsets.append(len(expression) - 1)

    return "".join(result), tuple(offsets)


def split_segments(path: str) -> list[tuple[int, str]]:
    """
    Splits a slash-delimited path into its tokens along with their positions.
    Delimiters within brackets and quotes are not considered.
    """
    result: list[tuple[int, str]] = []
    start = 0
    opened_at: list[int] = []
    quote: Optional[str] = None
    quote_position = 0

    for position, character in enumerate(path):
        if quote is not None:
            if character == quote:
                quote = None
            continue

        match character:
            case "'" | '"' if opened_at:
                quote = character
                quote_position = position
            case "[":
                opened_at.append(position)
            case "]":
                if not opened_at:
                    raise PathParsingError(
                        position=position, message="Unbalanced closing bracket."
                    )
                opened_at.pop()
            case "/" if not opened_at:
                result.append((start, path[start:position]))
                start = position + 1

    if quote is not None:
        raise PathParsingError(
            position=quote_position, message="Quoted value is never closed."
        )
    if opened_at:
        raise PathParsingError(
            position=opened_at[0], message="Opening bracket is never closed."
        )

    result.append((start, path[start:]))
    return result


def _check_name(name: str, position: int, subject: str) -> str:
    if not _NAME_PATTERN.fullmatch(name):
        raise PathParsingError(position=position, message=f"Invalid {subject} name.")
    return name


def _check_regex(pattern: str, position: int):
    try:
        re.compile(pattern)
    except re.error as e:
        raise PathParsingError(
            position=position, message=f"Invalid regular expression: {e}"
        ) from e


def _parse_comparison(expression: str, position: int) -> tuple[str, bool]:
    # expects the operator as first character
    if not expression or expression[0] not in "=~":
        raise PathParsingError(
            position=position, message="Expected a comparison operator (`=` or `~`)."
        )
    is_regex = expression[0] == "~"
    value = expression[1:].strip()
    if len(value) < 2 or value[0] not in _QUOTES or value[-1] != value[0]:
        raise PathParsingError(
            position=position, message="Values must be enclosed in quotes."
        )
    value = value[1:-1]
    if is_regex:
        _check_regex(value, position)
    return value, is_regex


def parse_predicate(content: str, zero_based: bool, position: int = 0) -> Predicate:
    content = content.strip()

    if content.startswith(ATTRIBUTE_PREFIX):
        body = content[1:]
        operator_position = min(
            (i for i in (body.find("="), body.find("~")) if i != -1), default=-1
        )
        if operator_position == -1:
            return AttributeExists(
                _check_name(body.strip(), position, subject="attribute")
            )
        name = _check_name(
            body[:operator_position].strip(), position, subject="attribute"
        )
        value, is_regex = _parse_comparison(body[operator_position:], position)
        return AttributeMatches(name, value, is_regex)

    for prefix in (TEXT_FUNCTION, SELF_TOKEN):
        if content.startswith(prefix):
            value, is_regex = _parse_comparison(
                content[len(prefix) :].lstrip(), position
            )
            return TextMatches(value, is_regex)

    relative_to_last = LAST_FUNCTION in content
    index_expression = "".join(content.replace(LAST_FUNCTION, "").split())
    if not index_expression:
        return LastRelative(0)

    try:
        index = int(index_expression)
    except ValueError:
        raise PathParsingError(
            position=position, message="Unrecognized predicate expression."
        ) from None

    if relative_to_last:
        return LastRelative(-index)
    if zero_based:
        return ExactIndex(index)
    if index > 0:
        return ExactIndex(index - 1)
    return LastRelative(-index)


def parse_segment(
    token: str, position: int, is_last: bool, zero_based: bool, expression: str
) -> Segment:
    if token == PARENT_TOKEN:
        return ParentSegment()
    if token == SELF_TOKEN:
        return SelfSegment()

    if token.startswith(ATTRIBUTE_PREFIX):
        if not is_last:
            raise PathParsingError(
                position=position, message="An attribute segment must be the last one."
            )
        name = token[1:]
        if name == WILDCARD:
            raise UnsupportedOperation(expression, "Attribute wildcard (`@*`)")
        return AttributeSegment(_check_name(name, position + 1, subject="attribute"))

    predicate: Optional[Predicate] = None
    bracket = token.find("[")
    if bracket == -1:
        name = token
    else:
        name = token[:bracket]
        if name in (PARENT_TOKEN, SELF_TOKEN):
            raise PathParsingError(
                position=position,
                message="Predicates can't be applied to reserved tokens.",
            )
        if not token.endswith("]"):
            raise PathParsingError(
                position=position + bracket,
                message="Unexpected characters after a predicate.",
            )
        predicate = parse_predicate(
            token[bracket + 1 : -1], zero_based, position + bracket + 1
        )

    if not name:
        raise PathParsingError(position=position, message="Missing name test.")
    return NamedSegment(_check_name(name, position, subject="node"), predicate)


def parse_segments(
    tokens: list[tuple[int, str]], expression: str, zero_based: bool
) -> list[Segment]:
    result: list[Segment] = []
    last_index = len(tokens) - 1

    for index, (position, token) in enumerate(tokens):
        if not token:
            if index == 0:
                result.append(RootSegment())
            elif index != last_index:
                raise UnsupportedOperation(expression, "Descendant search (`//`)")
            continue

        result.append(
            parse_segment(
                token,
                position,
                is_last=index == last_index,
                zero_based=zero_based,
                expression=expression,
            )
        )

    return result


@lru_cache(64)
def parse(expression: str) -> CompiledPath:
    offsets: Optional[tuple[int, ...]] = None
    try:
        if is_dot_notation(expression):
            path, offsets = translate_dot_notation(expression)
            zero_based = True
        else:
            path, zero_based = expression, False

        if not path:
            return CompiledPath(expression, (), zero_based)

        return CompiledPath(
            expression,
            parse_segments(split_segments(path), expression, zero_based),
            zero_based,
        )

    except PathParsingError as e:
        e.expression = expression
        if e.position is None:
            e.position = 0
        elif offsets is not None and e.position < len(offsets):
            e.position = offsets[e.position]
        raise e


def compile_path(*fragments: str) -> CompiledPath:
    """Assembles the given fragments to one expression and parses that."""
    return parse(assemble_path(fragments))


__all__ = (
    assemble_path.__name__,
    compile_path.__name__,
    parse.__name__,  # type: ignore
)
