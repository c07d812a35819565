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

from collections.abc import Iterable, Iterator, Mapping, MutableMapping
from types import MappingProxyType
from typing import TYPE_CHECKING, cast, overload, Any, Final, Optional

from _xenpath.exceptions import ArgumentError, InvalidOperation
from _xenpath.path import QueryResults, compile_path, evaluate, resolve_one
from _xenpath.serializer import DefaultStringOptions, FormatOptions, serialize
from _xenpath.utils import traverse_bf_ttb, traverse_df_ttb

if TYPE_CHECKING:
    from lxml import etree

    from _xenpath.typing import AttributePairs


# constants


EMPTY_ATTRIBUTES: Final[Mapping[str, str]] = MappingProxyType({})
EMPTY_CHILDREN: Final[tuple[Node, ...]] = ()
EMPTY_PROPERTIES: Final[Mapping[str, Any]] = MappingProxyType({})

NAME_MSG: Final = "A node's name must be a non-empty string."


# containers


class NodeAttributes(MutableMapping):
    """
    A live view on a node's attributes. Names and values are strings, the insertion
    order is retained.

    >>> node = Node("email", {"addr": "jane@example.org"})
    >>> node.attributes["type"] = "work"
    >>> del node.attributes["addr"]
    >>> node.attributes
    {'type': 'work'}
    """

    __slots__ = ("__node",)

    def __init__(self, node: Node):
        self.__node: Final = node

    def __delitem__(self, name: str):
        self.__node._check_mutability()
        del self.__node._materialized_attributes()[name]

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, Mapping):
            return False
        return dict(self.__node._attributes) == dict(other)

    def __getitem__(self, name: str) -> str:
        return self.__node._attributes[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self.__node._attributes)

    def __len__(self) -> int:
        return len(self.__node._attributes)

    def __setitem__(self, name: str, value: str):
        if not isinstance(name, str) or not isinstance(value, str):
            raise TypeError("Attribute names and values must be strings.")
        self.__node._check_mutability()
        self.__node._materialized_attributes()[name] = value

    def __str__(self):
        return str(dict(self.__node._attributes))

    __repr__ = __str__


class ChildNodes:
    """
    The ordered container of a node's children. It takes care of the parent
    references when nodes are added or removed.
    """

    __slots__ = ("__belongs_to",)

    def __init__(self, belongs_to: Node):
        self.__belongs_to: Final = belongs_to

    @overload
    def __getitem__(self, index: int) -> Node:
        pass

    @overload
    def __getitem__(self, index: slice) -> list[Node]:
        pass

    def __getitem__(self, index: int | slice) -> Node | list[Node]:
        if not isinstance(index, (int, slice)):
            raise TypeError

        result = self.__belongs_to._children[index]
        if isinstance(index, slice):
            return list(result)
        return result

    def __iter__(self) -> Iterator[Node]:
        return iter(self.__belongs_to._children)

    def __len__(self) -> int:
        return len(self.__belongs_to._children)

    def __repr__(self):
        return repr(list(self.__belongs_to._children))

    def append(self, node: Node) -> Node:
        result = self._handle_new_child(node)
        self.__belongs_to._materialized_children().append(result)
        return result

    def clear(self):
        self.__belongs_to._check_mutability()
        for node in self.__belongs_to._children:
            node._parent = None
        self.__belongs_to._children = EMPTY_CHILDREN

    def index(self, node: Node) -> int:
        for result, n in enumerate(self.__belongs_to._children):
            if n is node:
                return result
        else:
            raise ValueError("The node is not a child of this one.")

    def insert(self, index: int, node: Node) -> Node:
        result = self._handle_new_child(node)
        self.__belongs_to._materialized_children().insert(index, result)
        return result

    def remove(self, node: Node):
        self.__belongs_to._check_mutability()
        del self.__belongs_to._materialized_children()[self.index(node)]
        node._parent = None

    def _handle_new_child(self, node: Node) -> Node:
        belongs_to = self.__belongs_to
        belongs_to._check_mutability()

        if not isinstance(node, Node):
            raise TypeError("Only node instances can be added as children.")
        if isinstance(node, AttributeNode):
            raise InvalidOperation("An attribute node can't be added to a tree.")

        pointer: Optional[Node] = belongs_to
        while pointer is not None:
            if pointer is node:
                raise InvalidOperation(
                    "A node can't be added to itself or one of its descendants."
                )
            pointer = pointer._parent

        if node._parent is not None:
            node.detach()
        node._parent = belongs_to
        return node


# nodes


class Node:
    """
    The instances of this class represent the elements of a tree. A node has a
    qualified name, local text, ordered attributes, ordered child nodes and a bag of
    properties that aren't serialized.

    :param name: The qualified name, a namespace prefix is retained verbatim.
    :param attributes: Optional attributes as mapping or sequence of pairs.
    :param text: The node's local text.
    :param children: Nodes that are appended as children.

    Some syntactic sugar is baked in:

    Attributes and nodes can be tested for membership in a node.

    >>> root = Node("root", {"ham": "spam"}, children=(Node("child"),))
    >>> "ham" in root
    True
    >>> root.children[0] in root
    True

    How much child nodes has this node anyway?

    >>> len(root)
    1

    A node's string representation yields a serialized representation of the subtree.

    >>> print(root)
    <root ham="spam"><child/></root>
    """

    __slots__ = (
        "__name",
        "_attributes",
        "_children",
        "_parent",
        "_properties",
        "_text",
    )

    def __init__(
        self,
        name: str,
        attributes: Optional[AttributePairs] = None,
        text: str = "",
        children: Iterable[Node] = (),
    ):
        if not isinstance(name, str) or not name:
            raise ArgumentError(NAME_MSG)

        self.__name: Final = name
        self._parent: Optional[Node] = None
        self._text = ""
        self._attributes: Mapping[str, str] = EMPTY_ATTRIBUTES
        self._children: list[Node] | tuple[Node, ...] = EMPTY_CHILDREN
        self._properties: Mapping[str, Any] = EMPTY_PROPERTIES

        if text:
            self.text = text
        if attributes:
            self.set_attributes(attributes)
        for child in children:
            self.children.append(child)

    def __contains__(self, item: str | Node) -> bool:
        match item:
            case str():
                return item in self._attributes
            case Node():
                return any(x is item for x in self._children)
            case _:
                raise TypeError(
                    "Argument must be a node instance or an attribute name."
                )

    def __copy__(self):
        return self.clone(deep=False)

    def __deepcopy__(self, memo):
        return self.clone(deep=True)

    def __len__(self) -> int:
        return len(self._children)

    def __repr__(self) -> str:
        return (
            f'<{self.__class__.__name__}("{self.name}", '
            f"{self.attributes}, {self.absolute_path}) [{hex(id(self))}]>"
        )

    def __str__(self) -> str:
        return self.serialize(format_options=DefaultStringOptions.format_options)

    # materialization of containers

    def _check_mutability(self):
        pass

    def _materialized_attributes(self) -> dict[str, str]:
        self._check_mutability()
        if self._attributes is EMPTY_ATTRIBUTES:
            self._attributes = {}
        return cast("dict[str, str]", self._attributes)

    def _materialized_children(self) -> list[Node]:
        self._check_mutability()
        if self._children is EMPTY_CHILDREN:
            self._children = []
        return cast("list[Node]", self._children)

    def _materialized_properties(self) -> dict[str, Any]:
        self._check_mutability()
        if self._properties is EMPTY_PROPERTIES:
            self._properties = {}
        return cast("dict[str, Any]", self._properties)

    # identity

    @property
    def name(self) -> str:
        """The node's qualified name."""
        return self.__name

    @property
    def local_name(self) -> str:
        """The node's name without a prefix."""
        return self.__name.partition(":")[2] or self.__name

    @property
    def prefix(self) -> str:
        """The prefix of the node's qualified name or an empty string."""
        prefix, colon, _ = self.__name.partition(":")
        return prefix if colon else ""

    # text

    @property
    def text(self) -> str:
        """
        The node's local text, the text of child nodes isn't included. Assigning
        :obj:`None` has no effect, other objects than strings are converted to such.
        """
        return self._text

    @text.setter
    def text(self, value: Any):
        if value is None:
            return
        self._check_mutability()
        self._text = value if isinstance(value, str) else str(value)

    @property
    def full_text(self) -> str:
        """
        The concatenated local texts of the node and all its descendants in
        breadth-first order.
        """
        return "".join(n._text for n in traverse_bf_ttb(self))

    def get_full_text(self, include_descendants: bool = True) -> str:
        return self.full_text if include_descendants else self._text

    # attributes

    @property
    def attributes(self) -> NodeAttributes:
        """A mutable mapping of the node's attributes."""
        return NodeAttributes(self)

    def attribute(self, name: str) -> str:
        """Returns the value of the attribute ``name`` or an empty string."""
        return self._attributes.get(name, "")

    def has_attribute(self, name: str) -> bool:
        return name in self._attributes

    def put_attributes(self, *pairs: Any):
        """
        Sets attributes from alternating names and values that are converted to
        strings, e.g. ``node.put_attributes("id", 1, "type", "work")``.
        """
        if len(pairs) % 2:
            raise ArgumentError("An even number of arguments is required.")
        if not pairs:
            return

        attributes = self._materialized_attributes()
        for name, value in zip(pairs[::2], pairs[1::2]):
            attributes[str(name)] = str(value)

    def set_attributes(self, source: Optional[AttributePairs]):
        """
        Replaces all attributes with those from ``source``, which can be a mapping,
        pairs of names and values or :obj:`None` to remove all.
        """
        self._check_mutability()
        if source is None:
            items: Iterable[tuple[Any, Any]] = ()
        elif isinstance(source, Mapping):
            items = source.items()
        else:
            items = source
        attributes = {str(k): str(v) for k, v in items}
        self._attributes = attributes if attributes else EMPTY_ATTRIBUTES

    # tree

    @property
    def children(self) -> ChildNodes:
        """The node's children in an ordered container."""
        return ChildNodes(self)

    def children_by_name(self, name: str) -> list[Node]:
        """
        Returns the child nodes with the qualified ``name`` or all with ``*``.
        """
        if name == "*":
            return list(self._children)
        return [n for n in self._children if n.__name == name]

    def append_children(self, *nodes: Node) -> tuple[Node, ...]:
        """
        Appends the given nodes as children. Nodes that have a parent are detached from
        it beforehand.
        """
        children = self.children
        return tuple(children.append(node) for node in nodes)

    def remove_children(self, *nodes: Node) -> tuple[Node, ...]:
        """
        Removes the given nodes from the children. Nodes that aren't children of this
        one are ignored. The removed nodes are returned.
        """
        self._check_mutability()
        children = self.children
        result = []
        for node in nodes:
            if node._parent is self:
                children.remove(node)
                result.append(node)
        return tuple(result)

    def detach(self) -> Node:
        """Removes the node from its parent and returns it."""
        if (parent := self._parent) is not None:
            parent.children.remove(self)
        return self

    @property
    def parent(self) -> Optional[Node]:
        return self._parent

    @property
    def root(self) -> Node:
        """The topmost ancestor or the node itself."""
        result = self
        while result._parent is not None:
            result = result._parent
        return result

    @property
    def is_root(self) -> bool:
        return self._parent is None

    @property
    def depth(self) -> int:
        """The number of ancestors."""
        result = 0
        pointer = self._parent
        while pointer is not None:
            result += 1
            pointer = pointer._parent
        return result

    @property
    def absolute_path(self) -> str:
        """
        A slash-delimited path of names from the root to this node that is purposed for
        diagnostics. The root itself is represented as ``/``.
        """
        if self._parent is None:
            return "/"
        result = self._parent.absolute_path
        if len(result) > 1:
            result += "/"
        return result + self.__name

    def breadth_first(self) -> list[Node]:
        """The node and all its descendants in breadth-first order."""
        return list(traverse_bf_ttb(self))

    def depth_first(self) -> list[Node]:
        """The node and all its descendants in depth-first order (document order)."""
        return list(traverse_df_ttb(self))

    def clone(self, deep: bool = False) -> Node:
        """
        Creates a detached copy of the node with its text, attributes and local
        properties. Descendants are also copied when ``deep`` is :obj:`True`.
        """
        result = Node(self.__name, self._attributes, self._text)
        if self._properties:
            result._properties = dict(self._properties)
        if deep:
            for child in self._children:
                result.children.append(child.clone(deep=True))
        return result

    # properties

    @property
    def properties(self) -> Mapping[str, Any]:
        """A read-only view on the node's local properties."""
        return MappingProxyType(self._properties)

    def get_property(self, name: str, default: Any = None) -> Any:
        """
        Returns the value of the property ``name``. If it's not set on this node, it's
        looked up on the ancestors. ``default`` is returned if none has it.
        """
        pointer: Optional[Node] = self
        while pointer is not None:
            if name in pointer._properties:
                return pointer._properties[name]
            pointer = pointer._parent
        return default

    def set_property(self, name: str, value: Any) -> Any:
        """Sets a property on this node and returns the previous local value."""
        properties = self._materialized_properties()
        result = properties.get(name)
        properties[name] = value
        return result

    # queries

    def all(self, *path: str) -> QueryResults:
        """
        Returns all nodes that the path assembled from the given fragments addresses.
        An empty result is no error.
        """
        return evaluate(self, *path)

    def get(self, *path: str) -> Optional[Node]:
        """
        Returns the one node that the path addresses or :obj:`None` if there's none.

        :raises AmbiguousMatch: If multiple nodes are addressed.
        """
        if not path:
            return self
        compiled_path = compile_path(*path)
        matches = compiled_path.evaluate(self)
        if not matches:
            return None
        return resolve_one(matches, compiled_path.expression)

    def one(self, *path: str) -> Node:
        """
        Returns the one node that the path addresses.

        :raises NotFound: If no node is addressed.
        :raises AmbiguousMatch: If multiple nodes are addressed.
        """
        if not path:
            return self
        return compile_path(*path).resolve_one(self)

    def all_text(self, *path: str) -> list[str]:
        return self.all(*path).texts()

    def get_text(self, *path: str) -> Optional[str]:
        node = self.get(*path)
        return None if node is None else node.text

    def one_text(self, *path: str) -> str:
        return self.one(*path).text

    def to_int(self, *path: str) -> int:
        """
        Converts the text of the addressed node, or this one's if no path is given, to
        an :class:`int`.
        """
        return int(self.one_text(*path).strip())

    def to_float(self, *path: str) -> float:
        """
        Converts the text of the addressed node, or this one's if no path is given, to
        a :class:`float`.
        """
        return float(self.one_text(*path).strip())

    def _project_attribute(self, name: str) -> Optional[AttributeNode]:
        if name not in self._attributes:
            return None
        return AttributeNode(self, name)

    # export

    def serialize(self, format_options: Optional[FormatOptions] = None) -> str:
        """
        Returns a string that contains the serialization of the node and its
        descendants.

        :param format_options: An instance of :class:`FormatOptions` can be provided to
                               configure formatting.
        """
        return serialize(self, format_options=format_options)

    def to_etree(self) -> etree._Element:
        """Converts the subtree to an :mod:`lxml` element tree."""
        from _xenpath.converters import to_etree

        return to_etree(self)


class AttributeNode(Node):
    """
    A read-only projection of an attribute as leaf node. Its name is the attribute's
    name prefixed with ``@``, its text is the attribute's value and its parent is the
    owning node, which doesn't list it as child though.
    """

    __slots__ = ()

    def __init__(self, owner: Node, name: str):
        super().__init__(f"@{name}")
        self._text = owner.attribute(name)
        self._parent = owner

    def __str__(self) -> str:
        return self._text

    def _check_mutability(self):
        raise InvalidOperation("Attribute nodes are read-only.")

    @property
    def text(self) -> str:
        return self._text

    @text.setter
    def text(self, value: Any):
        self._check_mutability()

    def clone(self, deep: bool = False) -> Node:
        raise InvalidOperation("Attribute nodes can't be cloned.")

    def detach(self) -> Node:
        self._check_mutability()
        return self


__all__ = (
    AttributeNode.__name__,
    ChildNodes.__name__,
    Node.__name__,
    NodeAttributes.__name__,
)
