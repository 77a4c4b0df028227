"""Compile mutation expressions into SPARQL Update blocks.

The block shape depends on how many predicate steps the domain and the
range carry:

* both concrete: ``INSERT DATA { ... }`` / ``DELETE DATA { ... }``
* any side with steps: ``INSERT { ... } WHERE { ... }`` where that side
  is bound through a variable chain
* no predicate and range: delete the final triple of the domain path
"""

from __future__ import annotations

import logging
from typing import List, Optional

from pathsparql.errors import PathStructureError
from pathsparql.expressions import (
    TriplePattern,
    single_subject,
    walk_path,
    where_block,
)
from pathsparql.models import MutationExpression
from pathsparql.scope import VariableScope
from pathsparql.terms import term_to_query_string

logger = logging.getLogger(__name__)


def mutation_to_query(
    expression: MutationExpression,
    scope: Optional[VariableScope] = None,
) -> str:
    """Compile one mutation expression into a single update block.

    Parameters
    ----------
    expression:
        The mutation to compile.
    scope:
        Variable scope for this block.  A new one is created when
        omitted; domain and range allocate from the same scope so their
        variables never collide.

    Returns
    -------
    str
        The block, starting with ``INSERT`` or ``DELETE``.
    """
    if scope is None:
        scope = {}
    keyword = expression.mutation_type.value
    domain = expression.domain_expression
    if not domain or (expression.has_range and not expression.range_expression):
        raise PathStructureError(
            "a mutation expression cannot have an empty domain or range"
        )

    if not expression.has_range:
        return _exact_pattern_block(keyword, expression, scope)

    where: List[TriplePattern] = []

    # ── Domain side ───────────────────────────────────────────────
    if len(domain) > 1:
        domain_walk = walk_path(domain, scope)
        subject = domain_walk.final
        where.extend(domain_walk.triples)
    else:
        subject = term_to_query_string(single_subject(domain[0]))

    # ── Range side ────────────────────────────────────────────────
    range_expression = expression.range_expression
    if len(range_expression) > 1:
        range_walk = walk_path(range_expression, scope)
        objects = range_walk.final
        where.extend(range_walk.triples)
    else:
        objects = ", ".join(
            term_to_query_string(term)
            for term in range_expression[0].subject_terms
        )

    pattern = f"{subject} {term_to_query_string(expression.predicate)} {objects}"
    if not where:
        return f"{keyword} DATA {{\n  {pattern}\n}}"
    return f"{keyword} {{\n  {pattern}\n}} WHERE {{\n{where_block(where)}}}"


def _exact_pattern_block(
    keyword: str,
    expression: MutationExpression,
    scope: VariableScope,
) -> str:
    """Target the last triple of the domain path itself."""
    if len(expression.domain_expression) < 2:
        raise PathStructureError(
            "a mutation without range needs a domain with at least one predicate"
        )
    walk = walk_path(expression.domain_expression, scope)
    return (
        f"{keyword} {{\n  {walk.triples[-1]}\n}} "
        f"WHERE {{\n{where_block(walk.triples)}}}"
    )
