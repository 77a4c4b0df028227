"""
Path-to-query compiler.

Turns the expressions collected for a path into SPARQL text: a single
``SELECT`` block for reads, or one update block per mutation joined by
``;`` for writes.  Compilation is synchronous and keeps no state
between calls; each block gets its own variable scope.

Usage:
    from pathsparql.compiler import compile_query

    query = compile_query(
        {"property": "name"},
        {"pathExpression": [
            {"subject": "https://example.org/#me"},
            {"predicate": "http://xmlns.com/foaf/0.1/name"},
        ]},
    )
"""

from __future__ import annotations

import logging
from typing import Any, Mapping, Sequence, Union

from pathsparql.errors import MissingPathExpressionError
from pathsparql.expressions import walk_path, where_block
from pathsparql.models import MutationExpression, PathSegment, QueryContext
from pathsparql.mutations import mutation_to_query
from pathsparql.scope import VariableScope, get_query_var
from pathsparql.utils import var_name

logger = logging.getLogger(__name__)

__all__ = [
    "BLOCK_SEPARATOR",
    "compile_query",
    "compile_read",
    "compile_write",
]

# Separator between update blocks of one request
BLOCK_SEPARATOR = "\n;\n"


def _property_of(path_data: Any) -> Any:
    if isinstance(path_data, Mapping):
        return path_data.get("property")
    return getattr(path_data, "property", None)


def _path_label(path_data: Any) -> str:
    if isinstance(path_data, Mapping) or type(path_data).__str__ is object.__str__:
        return "path"
    return str(path_data)


def compile_query(
    path_data: Any,
    context: Union[QueryContext, Mapping[str, Any]],
) -> str:
    """Compile the expressions of a path into a query.

    Parameters
    ----------
    path_data:
        Description of the path being compiled.  Its ``property`` (an
        attribute or mapping key) names the variable of a read query,
        and its string form identifies the path in error messages.
    context:
        A :class:`~pathsparql.models.QueryContext` or a mapping that
        validates into one.

    Returns
    -------
    str
        The query text.

    Raises
    ------
    MissingPathExpressionError
        If there are no mutations and no path expression.
    PathStructureError
        If an expression is too short or has multi-term subjects where
        a single node is required.
    TermKindError
        If a term cannot be written into query text.
    """
    if not isinstance(context, QueryContext):
        context = QueryContext.model_validate(context)

    if context.mutation_expressions:
        return compile_write(context.mutation_expressions)

    if context.path_expression is None:
        raise MissingPathExpressionError(
            f"{_path_label(path_data)} has no pathExpression property"
        )
    return compile_read(context.path_expression, _property_of(path_data))


def compile_read(
    path_expression: Sequence[PathSegment],
    property_name: Any = None,
) -> str:
    """Compile a path expression into a ``SELECT`` query.

    The selected variable is named after *property_name*, or
    ``result`` when it yields no usable label.
    """
    scope: VariableScope = {}
    query_var = get_query_var(var_name(property_name), scope)
    walk = walk_path(path_expression, scope, final_var=query_var)
    query = f"SELECT ?{query_var} WHERE {{\n{where_block(walk.triples)}}}"
    logger.debug(f"Compiled read query for ?{query_var}:\n{query}")
    return query


def compile_write(mutation_expressions: Sequence[MutationExpression]) -> str:
    """Compile mutation expressions into update blocks, in order."""
    blocks = [mutation_to_query(expression, {}) for expression in mutation_expressions]
    query = BLOCK_SEPARATOR.join(blocks)
    logger.debug(f"Compiled {len(blocks)} update block(s):\n{query}")
    return query
