"""Query compilation service — thin Flask wrapper.

All core logic lives in :mod:`pathsparql.compiler` and
:mod:`pathsparql.engine`.
"""

from __future__ import annotations

from typing import Any

from pathsparql.compiler import compile_query
from pathsparql.engine import SparqlEndpoint
from pathsparql.models import CompileRequest


class CompileService:
    """Compile and optionally execute path documents."""

    def compile(self, document: dict[str, Any]) -> dict[str, Any]:
        """Validate a compile document and return its query."""
        request = CompileRequest.model_validate(document)
        query = compile_query(request, request)
        return {
            "query": query,
            "kind": "update" if request.mutation_expressions else "select",
        }

    def run(
        self,
        document: dict[str, Any],
        endpoint: str,
        update_endpoint: str | None = None,
        timeout: int = 30,
    ) -> dict[str, Any]:
        """Compile a document and execute it against *endpoint*."""
        result = self.compile(document)
        with SparqlEndpoint(
            endpoint, update_url=update_endpoint or None, timeout=float(timeout),
        ) as client:
            if result["kind"] == "update":
                client.update(result["query"])
                result["results"] = []
            else:
                result["results"] = [term.n3() for term in client.terms(result["query"])]
        return result
