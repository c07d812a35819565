import pytest

from xenpath import Node
from xenpath.exceptions import ArgumentError


def test_attribute_access(customer):
    assert customer.attribute("someattr") == "123"
    assert customer.attribute("missing") == ""
    assert customer.has_attribute("someattr")
    assert not customer.has_attribute("missing")


def test_attributes_view():
    node = Node("email", {"addr": "jane@example.org"})
    attributes = node.attributes

    attributes["type"] = "work"
    assert node.attribute("type") == "work"
    assert list(attributes) == ["addr", "type"]
    assert len(attributes) == 2

    del attributes["addr"]
    assert not node.has_attribute("addr")
    assert attributes == {"type": "work"}
    assert str(attributes) == "{'type': 'work'}"

    with pytest.raises(KeyError):
        attributes["addr"]
    with pytest.raises(TypeError):
        attributes["n"] = 1  # type: ignore


def test_attributes_order_is_retained():
    node = Node("node", (("z", "1"), ("a", "2"), ("m", "3")))
    assert list(node.attributes) == ["z", "a", "m"]

    node.put_attributes("b", "4")
    assert list(node.attributes.items()) == [
        ("z", "1"),
        ("a", "2"),
        ("m", "3"),
        ("b", "4"),
    ]


def test_put_attributes(customer):
    customer.put_attributes("foo", "bar")
    assert "foo" in customer.attributes
    assert "name" not in customer.attributes
    assert customer.attribute("someattr") == "123"

    customer.put_attributes("n", 1, "ratio", 0.5)
    assert customer.attribute("n") == "1"
    assert customer.attribute("ratio") == "0.5"

    customer.put_attributes("foo", "baz")
    assert customer.attribute("foo") == "baz"

    del customer.attributes["foo"]
    assert "foo" not in customer.attributes


@pytest.mark.parametrize("args", (("a",), ("a", "b", "c")))
def test_put_attributes_with_odd_arguments(args):
    node = Node("node")
    with pytest.raises(ArgumentError):
        node.put_attributes(*args)
    with pytest.raises(ValueError):
        node.put_attributes(*args)
    assert node.attributes == {}


def test_set_attributes():
    node = Node("node", {"a": "1", "b": "2"})

    node.set_attributes({"c": 3})
    assert node.attributes == {"c": "3"}

    node.set_attributes([("d", "4"), ("e", "5")])
    assert node.attributes == {"d": "4", "e": "5"}

    node.set_attributes({})
    assert node.attributes == {}

    node.put_attributes("f", "6")
    node.set_attributes(None)
    assert node.attributes == {}
    assert len(node.attributes) == 0
