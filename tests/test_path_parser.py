import pytest

from _xenpath.path.ast import (
    All,
    AttributeExists,
    AttributeMatches,
    AttributeSegment,
    CompiledPath,
    ExactIndex,
    LastRelative,
    NamedSegment,
    ParentSegment,
    RootSegment,
    SelfSegment,
    TextMatches,
)
from _xenpath.path.parser import (
    assemble_path,
    is_dot_notation,
    parse,
    translate_dot_notation,
)
from xenpath import compile_path
from xenpath.exceptions import ArgumentError, PathParsingError, UnsupportedOperation


@pytest.mark.parametrize(
    ("fragments", "expected"),
    (
        (("a",), "a"),
        (("a", "b"), "a/b"),
        (("a/", "b"), "a/b"),
        (("a", "b", "@c"), "a/b/@c"),
        (("a", "/b"), "/b"),
        (("a", "b", "/c", "d"), "/c/d"),
        (("email[1]", "@addr"), "email[1]/@addr"),
        (("", "a"), "a"),
        ((), ""),
    ),
)
def test_assemble_path(fragments, expected):
    assert assemble_path(fragments) == expected


def test_assemble_path_with_invalid_fragment():
    with pytest.raises(TypeError):
        assemble_path(("a", 1))  # type: ignore


@pytest.mark.parametrize(
    ("expression", "expected"),
    (
        (".a", True),
        (".m:customer.email[0]", True),
        (".", False),
        ("..", False),
        (".././id", False),
        ("./a", False),
        ("a.b", False),
        ("/a", False),
        ("", False),
    ),
)
def test_is_dot_notation(expression, expected):
    assert is_dot_notation(expression) is expected


@pytest.mark.parametrize(
    ("expression", "expected"),
    (
        (".a", "a"),
        (".a.b.c", "a/b/c"),
        (".a[0].@b", "a[0]/@b"),
        (".a[@x='1.5'].b", "a[@x='1.5']/b"),
        (".a\\.b.c", "a.b/c"),
        (".a[.~'\\d\\.\\d']", "a[.~'\\d\\.\\d']"),
    ),
)
def test_translate_dot_notation(expression, expected):
    result, offsets = translate_dot_notation(expression)
    assert result == expected
    assert len(offsets) == len(result)


@pytest.mark.parametrize(
    ("expression", "segments"),
    (
        ("", ()),
        ("a", (NamedSegment("a"),)),
        ("a/", (NamedSegment("a"),)),
        ("*", (NamedSegment("*"),)),
        ("/", (RootSegment(),)),
        ("/a", (RootSegment(), NamedSegment("a"))),
        ("..", (ParentSegment(),)),
        (".", (SelfSegment(),)),
        (
            ".././id",
            (ParentSegment(), SelfSegment(), NamedSegment("id")),
        ),
        ("@a", (AttributeSegment("a"),)),
        (
            "m:customer/email/@addr",
            (
                NamedSegment("m:customer"),
                NamedSegment("email"),
                AttributeSegment("addr"),
            ),
        ),
        ("a[1]", (NamedSegment("a", ExactIndex(0)),)),
        ("a[3]", (NamedSegment("a", ExactIndex(2)),)),
        ("a[0]", (NamedSegment("a", LastRelative(0)),)),
        ("a[-1]", (NamedSegment("a", LastRelative(1)),)),
        ("a[]", (NamedSegment("a", LastRelative(0)),)),
        ("a[last()]", (NamedSegment("a", LastRelative(0)),)),
        ("a[last()-2]", (NamedSegment("a", LastRelative(2)),)),
        ("a[ last() - 1 ]", (NamedSegment("a", LastRelative(1)),)),
        (".a[0]", (NamedSegment("a", ExactIndex(0)),)),
        (".a[2]", (NamedSegment("a", ExactIndex(2)),)),
        (".a[-1]", (NamedSegment("a", ExactIndex(-1)),)),
        (".a[last()]", (NamedSegment("a", LastRelative(0)),)),
        (".a[last()-1]", (NamedSegment("a", LastRelative(1)),)),
        (".a[]", (NamedSegment("a", LastRelative(0)),)),
        (".a.b.@c", (NamedSegment("a"), NamedSegment("b"), AttributeSegment("c"))),
        (".a\\.b", (NamedSegment("a.b"),)),
        ("a[@x]", (NamedSegment("a", AttributeExists("x")),)),
        ("a[@x='1']", (NamedSegment("a", AttributeMatches("x", "1")),)),
        ('a[@x="1"]', (NamedSegment("a", AttributeMatches("x", "1")),)),
        ("a[@x = '1']", (NamedSegment("a", AttributeMatches("x", "1")),)),
        ("a[@x~'\\d+']", (NamedSegment("a", AttributeMatches("x", "\\d+", True)),)),
        (
            "a[@x='a/b']/c",
            (NamedSegment("a", AttributeMatches("x", "a/b")), NamedSegment("c")),
        ),
        ("a[@x='[]']", (NamedSegment("a", AttributeMatches("x", "[]")),)),
        ("a[.='foo']", (NamedSegment("a", TextMatches("foo")),)),
        ("a[text()='foo']", (NamedSegment("a", TextMatches("foo")),)),
        ("a[.~'f.*']", (NamedSegment("a", TextMatches("f.*", True)),)),
        ("a[text()~'f.*']", (NamedSegment("a", TextMatches("f.*", True)),)),
        (".a[.='x.y']", (NamedSegment("a", TextMatches("x.y")),)),
    ),
)
def test_parse(expression, segments):
    result = parse(expression)
    assert isinstance(result, CompiledPath)
    assert result.expression == expression
    assert result.segments == segments


def test_parse_sets_the_syntax_mode():
    assert parse(".a[0]").zero_based
    assert not parse("a[1]").zero_based
    assert not parse("/a").zero_based


def test_default_predicate():
    assert NamedSegment("a").predicate == All()
    assert NamedSegment("a") == NamedSegment("a", All())
    assert NamedSegment("a") != NamedSegment("b")
    assert NamedSegment("a", ExactIndex(0)) != NamedSegment("a", LastRelative(0))


def test_parse_is_cached():
    assert parse("a/b[1]/@c") is parse("a/b[1]/@c")
    assert compile_path("a", "b[1]", "@c") is parse("a/b[1]/@c")


@pytest.mark.parametrize(
    ("expression", "position", "message"),
    (
        ("a]", 1, "Unbalanced closing bracket."),
        ("a[1", 1, "Opening bracket is never closed."),
        ("a[@x='1]", 5, "Quoted value is never closed."),
        ("@a/b", 0, "An attribute segment must be the last one."),
        ("a/@b/c", 2, "An attribute segment must be the last one."),
        ("..[1]", 0, "Predicates can't be applied to reserved tokens."),
        (".[1]", 0, "Predicates can't be applied to reserved tokens."),
        ("a[1]b", 1, "Unexpected characters after a predicate."),
        ("[1]", 0, "Missing name test."),
        ("a[foo]", 2, "Unrecognized predicate expression."),
        ("a[1.5]", 2, "Unrecognized predicate expression."),
        ("a[@x=1]", 2, "Values must be enclosed in quotes."),
        ("a[.!='x']", 2, "Expected a comparison operator (`=` or `~`)."),
        ("a[@]", 2, "Invalid attribute name."),
        ("a b", 0, "Invalid node name."),
        (".a.b]", 4, "Unbalanced closing bracket."),
        (".a..b", 3, "Empty step."),
        (".a.b..@c", 5, "Empty step."),
    ),
)
def test_parsing_errors(expression, position, message):
    with pytest.raises(PathParsingError) as exception_info:
        parse(expression)

    exception = exception_info.value
    assert exception.expression == expression
    assert exception.position == position
    assert exception.message == message
    assert str(exception).startswith(f"Path parsing error at character {position}")
    assert str(exception).endswith(message)


def test_invalid_regular_expression():
    with pytest.raises(PathParsingError, match="Invalid regular expression"):
        parse("a[@x~'(']")
    with pytest.raises(ArgumentError):
        parse("a[.~'[']")


def test_error_message_snippet():
    with pytest.raises(PathParsingError) as exception_info:
        parse("node[unrecognizable predicate]")
    assert str(exception_info.value) == (
        "Path parsing error at character 5 (`unrecognizable p…`): "
        "Unrecognized predicate expression."
    )


@pytest.mark.parametrize(
    ("expression", "feature"),
    (
        ("a//b", "Descendant search (`//`)"),
        ("//a", "Descendant search (`//`)"),
        ("a/@*", "Attribute wildcard (`@*`)"),
        (".a.@*", "Attribute wildcard (`@*`)"),
    ),
)
def test_unsupported_operations(expression, feature):
    with pytest.raises(UnsupportedOperation) as exception_info:
        parse(expression)
    assert exception_info.value.expression == expression
    assert str(exception_info.value) == (
        f"{feature} is not supported with intention: <{expression}>."
    )
    assert isinstance(exception_info.value, NotImplementedError)
