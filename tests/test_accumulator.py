"""Tests for collecting mutations along derived paths."""

import pytest
from rdflib import Literal, URIRef

from pathsparql.accumulator import collect_mutation_expressions
from pathsparql.arena import PathArena, PathContext
from pathsparql.models import MutationExpression, PathSegment

EX = "https://example.org/"


def insert(value):
    return MutationExpression.model_validate({
        "mutationType": "INSERT",
        "domainExpression": [{"subject": URIRef(EX + "#me")}],
        "predicate": URIRef(EX + "name"),
        "rangeExpression": [{"subject": Literal(value)}],
    })


@pytest.fixture
def arena():
    """Arena holding a root path and a predicate step below it."""
    arena = PathArena()
    root = (PathSegment(subject=URIRef(EX + "#me")),)
    arena.add(PathContext(description="me", path_expression=root))
    arena.add(
        PathContext(
            description="me.name",
            property="name",
            parent=0,
            path_expression=root + (PathSegment(predicate=URIRef(EX + "name")),),
        )
    )
    return arena


def test_no_mutations_gives_empty_list(arena):
    assert collect_mutation_expressions(arena, 1) == []


def test_collecting_twice_gives_equal_results(arena):
    arena.add(PathContext(description="m", parent=1, mutation_expressions=(insert("A"),)))
    assert collect_mutation_expressions(arena, 2) == collect_mutation_expressions(arena, 2)


def test_ancestor_mutations_come_first(arena):
    first = arena.add(
        PathContext(description="add", parent=1, mutation_expressions=(insert("A"), insert("B")))
    )
    second = arena.add(
        PathContext(description="add", parent=first, mutation_expressions=(insert("C"),))
    )
    collected = collect_mutation_expressions(arena, second)
    values = [str(m.range_expression[0].subject) for m in collected]
    assert values == ["A", "B", "C"]


def test_siblings_do_not_see_each_other(arena):
    arena.add(PathContext(description="add", parent=1, mutation_expressions=(insert("A"),)))
    sibling = arena.add(
        PathContext(description="add", parent=1, mutation_expressions=(insert("B"),))
    )
    collected = collect_mutation_expressions(arena, sibling)
    assert [str(m.range_expression[0].subject) for m in collected] == ["B"]


def test_lineage_walks_to_root(arena):
    assert [c.description for c in arena.lineage(1)] == ["me.name", "me"]


def test_unknown_parent_is_rejected(arena):
    with pytest.raises(IndexError):
        arena.add(PathContext(description="orphan", parent=10))
