"""pathsparql: compile graph path traversals into SPARQL queries.

Main modules:
- compiler: turns path and mutation expressions into query text
- paths: PathFactory and Path for building expressions by property access
- engine: SparqlEndpoint client for running compiled queries
- models: Pydantic models for path and mutation expressions
"""

from .compiler import compile_query
from .engine import EndpointError, SparqlEndpoint
from .errors import (
    MissingPathExpressionError,
    PathQueryError,
    PathStructureError,
    TermKindError,
    UnknownPropertyError,
)
from .models import (
    CompileRequest,
    MutationExpression,
    MutationType,
    PathSegment,
    QueryContext,
)
from .paths import Path, PathFactory
from .version import VERSION

__all__ = [
    "VERSION",
    "CompileRequest",
    "EndpointError",
    "MissingPathExpressionError",
    "MutationExpression",
    "MutationType",
    "Path",
    "PathFactory",
    "PathQueryError",
    "PathSegment",
    "PathStructureError",
    "QueryContext",
    "SparqlEndpoint",
    "TermKindError",
    "UnknownPropertyError",
    "compile_query",
]
