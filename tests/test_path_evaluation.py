import pytest

from xenpath import compile_path, parse_tree, resolve_one, AttributeNode, Node
from xenpath.exceptions import (
    AmbiguousMatch,
    IndexOutOfRange,
    NotFound,
    PathParsingError,
)

from tests.utils import names


@pytest.fixture
def records():
    return parse_tree('<r><a x="1"/><a x="2"/></r>')


def test_all(records):
    result = records.all("a")
    assert result.size == 2
    assert [n.attribute("x") for n in result] == ["1", "2"]

    assert records.all("b").size == 0
    assert records.all("a/b/c").size == 0


def test_get(records):
    with pytest.raises(AmbiguousMatch, match="<a>") as exception_info:
        records.get("a")
    assert exception_info.value.expression == "a"
    assert exception_info.value.count == 2

    assert records.get("a[2]").attribute("x") == "2"
    assert records.get("a[1]").attribute("x") == "1"
    assert records.get("b") is None
    assert records.get() is records


def test_get_text(customers, customer):
    assert customers.get_text("id") == "DONGLE_01"
    assert customer.get_text("/id") == "DONGLE_01"
    assert customer.get_text("/m:customer/name") == "Boomer Institute"
    assert customer.get_text(".././id") == "DONGLE_01"
    assert customers.get_text("missing/path") is None
    assert customers.get_text("m:customer/not_there") is None
    assert customer.get_text() == "<sender>John Smith</sender>"


def test_one(customers, customer):
    assert customers.one("m:customer") is customer
    assert customers.one() is customers

    with pytest.raises(NotFound) as exception_info:
        customers.one("customer")
    assert str(exception_info.value) == "No nodes found for <customer>."
    assert exception_info.value.expression == "customer"

    with pytest.raises(AmbiguousMatch) as exception_info:
        customer.get("email")
    assert str(exception_info.value) == "Multiple nodes (2) found for <email>."

    with pytest.raises(AmbiguousMatch) as exception_info:
        customer.one("email", "@addr")
    assert str(exception_info.value) == "Multiple nodes (2) found for <email/@addr>."
    assert isinstance(exception_info.value, LookupError)


def test_one_text(customers):
    assert customers.one_text(".m:customer.email[0].@addr") == "address1"
    assert customers.one_text("/m:customer/email[1]/@addr") == "address1"
    with pytest.raises(NotFound):
        customers.one_text("nothing")


def test_all_text(customer):
    assert customer.all_text("email", "@addr") == ["address1", "address2"]
    assert customer.all_text("email", "@nothing") == []
    assert customer.all_text("*") == [
        "CUSTOMER_03",
        "Boomer Institute",
        "Montara CA",
        "",
        "",
        "",
        "",
    ]


def test_attribute_projection(customers, customer):
    attribute = customers.get("m:customer/@someattr")
    assert isinstance(attribute, AttributeNode)
    assert attribute.text == "123"
    assert attribute.to_float() == 123.0
    assert attribute.to_int() == 123
    assert attribute.parent is customer

    assert customers.all_text("m:customer/@someattrnotthere") == []
    assert customer.get("@someattr").text == "123"
    assert customer.get("@nothing") is None

    # projections are created per query
    assert customer.get("@someattr") is not customer.get("@someattr")


def test_attribute_projection_of_an_empty_value():
    root = parse_tree('<root empty=""/>')
    assert root.get_text("@empty") == ""
    assert root.get_text("@missing") is None


def test_attribute_predicates(customers):
    assert customers.all("m:customer[@someattr]").size == 1
    assert customers.all("m:customer[@someattr='123']").size == 1
    assert customers.all("m:customer[@someattrnotthere]").size == 0
    assert customers.all("m:customer[@someattr='xxx']").size == 0
    assert customers.all("m:customer[@someattr~'\\d+']").size == 1
    assert customers.all("m:customer[@someattr~'\\d']").size == 0


def test_fragments(customer):
    assert customer.get_text("email[1]", "@addr") == "address1"
    assert customer.get_text("email[2]", "@addr") == "address2"
    assert customer.get_text(".email[0]", "@addr") == "address1"
    assert customer.get_text(".email[1]", "@addr") == "address2"
    assert customer.get_text("email[1]", "/id") == "DONGLE_01"


def test_dot_notation(customers):
    email = customers.get(".m:customer").get(".email[0]")
    assert email.attribute("addr") == "address1"
    assert customers.get(".m:customer.email[-1]").attribute("addr") == "address2"
    assert customers.get(".m:customer.email[last()]").attribute("addr") == "address2"
    assert (
        customers.get(".m:customer.email[last()-1]").attribute("addr") == "address1"
    )


def test_dot_notation_with_escaped_dot():
    root = parse_tree("<root><a.b>dotted</a.b><a><b>nested</b></a></root>")
    assert root.get_text(".a\\.b") == "dotted"
    assert root.get_text(".a.b") == "nested"
    assert root.get_text("a.b") == "dotted"


@pytest.mark.parametrize(
    ("expression", "expected"),
    (
        ("x[1]", "a"),
        (".x[0]", "a"),
        ("x[2]", "b"),
        (".x[1]", "b"),
        ("x[0]", "c"),
        (".x[-1]", "c"),
        ("x[-1]", "b"),
        (".x[-2]", "b"),
        ("x[last()]", "c"),
        (".x[last()]", "c"),
        ("x[last()-2]", "a"),
        (".x[last()-2]", "a"),
        ("x[]", "c"),
        (".x[]", "c"),
    ),
)
def test_index_consistency_across_syntaxes(expression, expected):
    root = parse_tree("<root><x>a</x><x>b</x><x>c</x></root>")
    assert root.one_text(expression) == expected


@pytest.mark.parametrize(
    "expression", ("x[4]", ".x[3]", ".x[-4]", "x[-3]", "x[last()-3]")
)
def test_index_out_of_range(expression):
    root = parse_tree("<root><x>a</x><x>b</x><x>c</x></root>")
    with pytest.raises(IndexOutOfRange) as exception_info:
        root.all(expression)
    assert exception_info.value.expression == expression
    assert exception_info.value.size == 3
    assert isinstance(exception_info.value, IndexError)


def test_index_on_empty_candidates():
    root = parse_tree("<root><x/></root>")
    assert root.all("y[5]").size == 0
    assert root.get("y[1]") is None


def test_index_is_applied_per_parent():
    root = parse_tree(
        "<root><a><b>1</b><b>2</b></a><a><b>3</b></a><a><b>4</b><b>5</b></a></root>"
    )
    assert root.all_text("a/b[1]") == ["1", "3", "4"]
    assert root.all_text("a/b[0]") == ["2", "3", "5"]
    assert root.all_text("a[2]/b") == ["3"]


def test_parent_and_self(customer):
    email = customer.get("email[2]")
    assert email.get("..") is customer
    assert email.get(".") is email
    assert email.get("../..") is customer.parent
    assert email.get("../../..") is None
    assert email.all("../../..").size == 0
    assert names(email.all("../*")) == names(customer.children)


def test_root_segment(customer):
    email = customer.get("email[2]")
    assert email.get("/") is customer.parent
    assert email.get_text("/m:customer/id") == "CUSTOMER_03"


def test_text_predicates(queries_sample):
    assert queries_sample.get("node[.='two']").attribute("n") == "2"
    assert queries_sample.get("node[text()='three']").attribute("n") == "3"
    assert queries_sample.all("node[.~'t.*']").size == 2
    assert queries_sample.all("node[.~'t']").size == 0
    assert queries_sample.all("node[.='']").size == 1


def test_wildcard(customer):
    result = customer.all("*")
    assert result.as_list() == list(customer.children)
    assert names(result) == [
        "id",
        "name",
        "m:address",
        "email",
        "email",
        "memo",
        "fixed_pool_id",
    ]
    assert customer.parent.all("*/id").size == 1
    assert names(customer.parent.all("*/*")) == names(result)


def test_wildcard_with_predicate(queries_sample):
    assert queries_sample.all("*[@n]").size == 3
    assert queries_sample.get("*[2]").attribute("n") == "2"


def test_results_are_unique():
    root = parse_tree("<root><a><b/></a><a/></root>")
    result = root.all("a/..")
    assert result.size == 1
    assert result[0] is root

    result = root.all("a/../a/b")
    assert result.size == 1


def test_attribute_results_are_unique():
    root = parse_tree('<r><a x="2"><b/><b/></a></r>')
    assert root.all_text("a/b/../@x") == ["2"]
    assert root.get_text("a/b/../@x") == "2"
    assert root.all("a/b/../@x").size == 1
    assert root.all("a/b/../@x")[0].parent is root.one("a")


def test_results_in_document_order():
    root = parse_tree("<root><a><c>1</c><c>2</c></a><b/><a><c>3</c></a></root>")
    assert root.all_text("a/c") == ["1", "2", "3"]


def test_evaluate_with_compiled_path(customers, customer):
    path = compile_path("email", "@addr")
    assert path.expression == "email/@addr"

    assert [n.text for n in path.evaluate(customer)] == ["address1", "address2"]
    assert path.evaluate(customers) == []

    with pytest.raises(AmbiguousMatch):
        path.resolve_one(customer)

    path = compile_path("/id")
    assert path.resolve_one(customer).text == "DONGLE_01"
    assert path.resolve_one(customers.one("m:customer/id")).text == "DONGLE_01"


def test_resolve_one():
    a, b = Node("a"), Node("b")
    assert resolve_one([a], "a") is a
    with pytest.raises(NotFound, match="<x>"):
        resolve_one([], "x")
    with pytest.raises(AmbiguousMatch, match=r"\(2\)"):
        resolve_one([a, b], "y")


def test_malformed_paths_fail(customers):
    with pytest.raises(PathParsingError):
        customers.all("a[")
    with pytest.raises(PathParsingError):
        customers.get_text("@a/b")


def test_number_conversions():
    root = parse_tree(
        "<root><id> 1 </id><customer><ratio>2.5</ratio></customer></root>"
    )
    assert root.to_int("id") == 1
    assert root.one("id").to_int() == 1
    assert root.to_float("customer", "ratio") == 2.5
    assert root.to_float("id") == 1.0


def test_number_conversion_errors():
    root = parse_tree("<root><n>x</n></root>")
    with pytest.raises(ValueError):
        root.to_int("n")
    with pytest.raises(NotFound):
        root.to_float("nothing")
