from pathlib import Path

import pytest

from xenpath import parse_tree, DefaultStringOptions, ParserOptions


FILES_PATH = Path(__file__).parent / "files"

CUSTOMERS_XML = (
    '<?xml version="1.0" encoding="UTF-8"?><dongle xmlns:m="myns" >\n'
    '  <m:customer someattr="123">\n'
    "    <id>CUSTOMER_03</id>\n"
    "    <name>Boomer Institute</name>\n"
    "    <m:address>Montara CA</m:address>\n"
    '    <email addr="address1" />\n '
    '    <email addr="address2"/>'
    "    <memo/>\n"
    "    <fixed_pool_id/>\n"
    "    <![CDATA[<sender>John Smith</sender>]]>"
    "  </m:customer>\n"
    "  <id>DONGLE_01</id>\n"
    "</dongle>\n"
)

PARSERS = ("expat", "lxml")


@pytest.fixture
def files_path():
    return FILES_PATH


@pytest.fixture(params=PARSERS)
def parser_options(request):
    return ParserOptions(preferred_parsers=request.param)


@pytest.fixture
def customers():
    return parse_tree(CUSTOMERS_XML)


@pytest.fixture
def customer(customers):
    return customers.children[0]


@pytest.fixture
def queries_sample():
    return parse_tree(
        """\
            <root>
                <node n="1">one</node>
                <node n="2">two</node>
                <node/>
                <node n="3">three</node>
            </root>
        """
    )


@pytest.fixture(autouse=True)
def _reset_serializer():
    DefaultStringOptions.reset_defaults()
