import pytest

from xenpath import QueryResults


def test_as_containers(queries_sample):
    results = queries_sample.all("node")

    as_list = results.as_list()
    assert isinstance(as_list, list)
    assert len(as_list) == 4
    as_list.pop()
    assert results.size == 4

    assert isinstance(results.as_tuple, tuple)
    assert results.as_tuple == tuple(queries_sample.children)


def test_equality(queries_sample):
    results = queries_sample.all("node")
    assert results == queries_sample.all("*")
    assert results == list(queries_sample.children)
    assert results != queries_sample.all("node[@n]")

    with pytest.raises(TypeError):
        results == 4  # noqa: B015


def test_filtered_by(queries_sample):
    results = queries_sample.all("node").filtered_by(lambda n: "n" in n)
    assert isinstance(results, QueryResults)
    assert results.size == 3

    results = results.filtered_by(
        lambda n: n.text.startswith("t"), lambda n: n.attribute("n") == "3"
    )
    assert results.texts() == ["three"]


def test_first_and_last(queries_sample):
    results = queries_sample.all("node")
    assert results.first is queries_sample.children[0]
    assert results.last is queries_sample.children[-1]

    results = queries_sample.all("nothing")
    assert results.first is None
    assert results.last is None
    assert results.size == 0
    assert not results


def test_sequence_protocol(queries_sample):
    results = queries_sample.all("node[@n]")
    assert len(results) == 3
    assert results[1].attribute("n") == "2"
    assert [n.attribute("n") for n in results[::2]] == ["1", "3"]
    assert queries_sample.children[0] in results


def test_texts(queries_sample):
    assert queries_sample.all("node").texts() == ["one", "two", "", "three"]
