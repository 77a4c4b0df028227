"""Tests for expanding path expressions into triple patterns."""

import pytest
from rdflib import URIRef

from pathsparql.errors import PathStructureError
from pathsparql.expressions import TriplePattern, walk_path, where_block
from pathsparql.models import PathSegment
from pathsparql.utils import var_name

ME = PathSegment(subject=URIRef("https://example.org/#me"))


def steps(*names):
    return [PathSegment(predicate=URIRef(f"https://ex.org/{name}")) for name in names]


def test_final_variable_is_named_after_last_predicate():
    scope = {}
    walk = walk_path([ME, *steps("knows", "name")], scope)
    assert walk.final == "?name"
    assert [str(t) for t in walk.triples] == [
        "<https://example.org/#me> <https://ex.org/knows> ?v0",
        "?v0 <https://ex.org/name> ?name",
    ]
    assert scope == {"name": True, "v0": True}


def test_caller_supplied_final_variable():
    scope = {"friend": True}
    walk = walk_path([ME, *steps("knows")], scope, final_var="friend")
    assert walk.triples == [
        TriplePattern("<https://example.org/#me>", "<https://ex.org/knows>", "?friend"),
    ]


def test_intermediate_variables_follow_position():
    walk = walk_path([ME, *steps("a", "b", "c", "d")], {})
    assert [t.object for t in walk.triples] == ["?v0", "?v1", "?v2", "?d"]
    assert [t.subject for t in walk.triples[1:]] == ["?v0", "?v1", "?v2"]


def test_subject_only_path_is_too_short():
    with pytest.raises(PathStructureError):
        walk_path([ME], {})


def test_where_block_terminates_each_triple():
    triples = [TriplePattern("?a", "<p>", "?b"), TriplePattern("?b", "<q>", "?c")]
    assert where_block(triples) == "  ?a <p> ?b.\n  ?b <q> ?c.\n"


@pytest.mark.parametrize(
    ("suggestion", "expected"),
    [
        ("p1", "p1"),
        ("foaf:name", "name"),
        ("https://example.org/#Dp2", "Dp2"),
        ("https://example.org/#", "result"),
        ("/x/", "result"),
        ("first_name", "first_name"),
        (None, "result"),
        ("", "result"),
    ],
)
def test_var_name(suggestion, expected):
    assert var_name(suggestion) == expected
