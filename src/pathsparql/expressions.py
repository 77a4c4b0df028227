"""Turn path expressions into chains of SPARQL triple patterns.

Each predicate step past the subject becomes one triple pattern.  The
objects of all steps but the last are anonymous variables ``v0``,
``v1``, ... allocated through the query's variable scope; the last
object is the caller's variable or a variable named after the final
predicate.
"""

from __future__ import annotations

import logging
from typing import List, NamedTuple, Optional, Sequence

from rdflib.term import Identifier

from pathsparql.errors import PathStructureError
from pathsparql.models import PathSegment
from pathsparql.scope import VariableScope, get_query_var
from pathsparql.terms import term_to_query_string
from pathsparql.utils import var_name

logger = logging.getLogger(__name__)


class TriplePattern(NamedTuple):
    """A subject/predicate/object clause, each part already serialized."""

    subject: str
    predicate: str
    object: str

    def __str__(self) -> str:
        return f"{self.subject} {self.predicate} {self.object}"


class PathWalk(NamedTuple):
    """Triple patterns for one path plus the variable holding its end."""

    triples: List[TriplePattern]
    final: str


def single_subject(segment: PathSegment) -> Identifier:
    """Return the only subject term of *segment*.

    Raises
    ------
    PathStructureError
        When the segment lists several subject terms.
    """
    terms = segment.subject_terms
    if len(terms) != 1:
        raise PathStructureError(
            "multiple subject terms can only be used as objects of a concrete triple"
        )
    return terms[0]


def walk_path(
    path_expression: Sequence[PathSegment],
    scope: VariableScope,
    final_var: Optional[str] = None,
) -> PathWalk:
    """Expand *path_expression* into triple patterns.

    Parameters
    ----------
    path_expression:
        A subject segment followed by at least one predicate segment.
    scope:
        Variable scope of the query being compiled; updated in place.
    final_var:
        Label for the object of the last step.  It must already be
        allocated in *scope*.  When omitted, a label derived from the
        last predicate's local name is allocated.

    Returns
    -------
    PathWalk
        The triple patterns in path order and the ``?var`` holding the
        node the path ends in.
    """
    if len(path_expression) < 2:
        raise PathStructureError(
            "path should at least contain a subject and a predicate"
        )
    root, *steps = path_expression
    if final_var is None:
        final_var = get_query_var(var_name(steps[-1].predicate), scope)

    last = len(steps) - 1
    current = term_to_query_string(single_subject(root))
    triples: List[TriplePattern] = []
    for index, segment in enumerate(steps):
        if index < last:
            obj = f"?{get_query_var(f'v{index}', scope)}"
        else:
            obj = f"?{final_var}"
        triples.append(
            TriplePattern(current, term_to_query_string(segment.predicate), obj)
        )
        current = obj

    logger.debug(f"Expanded path of {len(steps)} step(s) ending in {current}")
    return PathWalk(triples=triples, final=current)


def where_block(triples: Sequence[TriplePattern]) -> str:
    """Render triple patterns as period-terminated lines of a group."""
    return "".join(f"  {triple}.\n" for triple in triples)
