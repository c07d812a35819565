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

from collections.abc import Callable, Iterable, Mapping
from typing import (
    TYPE_CHECKING,
    Any,
    AnyStr,
    BinaryIO,
    Protocol,
    TypeAlias,
    TypeVar,
)

if TYPE_CHECKING:
    from types import SimpleNamespace

    from _xenpath.nodes import Node


# protocols


class BinaryReader(Protocol):
    def close(self): ...

    def read(self, n: int = -1) -> bytes: ...


# aliases


AttributePairs: TypeAlias = "Mapping[str, str] | Iterable[tuple[str, str]]"

GenericDecorated = TypeVar("GenericDecorated", bound=Callable[..., Any])
SecondOrderDecorator: TypeAlias = "Callable[[GenericDecorated], GenericDecorated]"

Filter: TypeAlias = "Callable[[Node], bool]"

InputStream: TypeAlias = AnyStr | BinaryIO
LoaderResult: TypeAlias = "Node | str"
Loader: TypeAlias = "Callable[[Any, SimpleNamespace], LoaderResult]"
LoaderConstraint: TypeAlias = "Loader | Iterable[Loader] | None"


__all__ = (
    "AttributePairs",
    "BinaryReader",
    "Filter",
    "GenericDecorated",
    "InputStream",
    "Loader",
    "LoaderConstraint",
    "LoaderResult",
    "SecondOrderDecorator",
)
