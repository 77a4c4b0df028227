"""
SPARQL endpoint client for running compiled path queries.

This module sends compiled queries to a SPARQL 1.1 protocol endpoint:
- SELECT queries are sent with GET and read as SPARQL JSON results
- Update requests are sent as form-encoded POST bodies
- Exponential backoff retry logic for transient failures
- Consistent logging across all requests

Usage:
    from pathsparql.engine import SparqlEndpoint

    with SparqlEndpoint("https://sparql.example.org/") as endpoint:
        names = endpoint.terms("SELECT ?name WHERE { ?s <http://xmlns.com/foaf/0.1/name> ?name. }")
"""

from __future__ import annotations

import json
import logging
import secrets
import time
from typing import Any, Optional

import requests
from rdflib.term import Identifier

from pathsparql.errors import PathQueryError
from pathsparql.terms import term_from_binding

logger = logging.getLogger(__name__)


class EndpointError(PathQueryError):
    """Raised when the endpoint returns an error."""

    pass


class MimeTypes:
    """Standard MIME types for SPARQL protocol."""

    JSON = "application/sparql-results+json"
    FORM = "application/x-www-form-urlencoded"


class SparqlEndpoint:
    """
    Executes compiled queries against a SPARQL endpoint.

    Attributes:
        endpoint_url: The SPARQL query endpoint URL
        update_url: The SPARQL update endpoint URL (defaults to endpoint_url)
        max_retries: Maximum number of retry attempts
        initial_backoff: Initial backoff delay in seconds
        max_backoff: Maximum backoff delay in seconds
        timeout: Request timeout in seconds

    Example:
        >>> endpoint = SparqlEndpoint("https://dbpedia.org/sparql")
        >>> for term in endpoint.terms("SELECT ?s WHERE { ?s ?p ?o } LIMIT 3"):
        ...     print(term.n3())
    """

    # HTTP status codes that warrant a retry
    RETRY_STATUS_CODES = (500, 502, 503, 504, 429)

    USER_AGENT = "pathsparql/0.1 (SPARQL client)"

    def __init__(
        self,
        endpoint_url: str,
        *,
        update_url: Optional[str] = None,
        max_retries: int = 3,
        initial_backoff: float = 1.0,
        max_backoff: float = 30.0,
        timeout: float = 60.0,
    ) -> None:
        """
        Initialize the endpoint client.

        Args:
            endpoint_url: SPARQL query endpoint URL
            update_url: SPARQL update endpoint URL, if different
            max_retries: Maximum retry attempts for transient failures
            initial_backoff: Initial delay between retries (seconds)
            max_backoff: Maximum delay between retries (seconds)
            timeout: Request timeout in seconds (default: 60)

        Raises:
            ValueError: If max_retries is less than 1
        """
        if max_retries < 1:
            raise ValueError(f"max_retries must be at least 1, got {max_retries}")
        self.endpoint_url = endpoint_url.rstrip("/")
        self.update_url = (update_url or endpoint_url).rstrip("/")
        self.max_retries = max_retries
        self.initial_backoff = initial_backoff
        self.max_backoff = max_backoff
        self.timeout = timeout

        # Session for connection pooling
        self._session = requests.Session()

        logger.debug(f"SparqlEndpoint initialized for {self.endpoint_url}")

    def select(self, query: str) -> dict[str, Any]:
        """
        Execute a SELECT query and return JSON results.

        Args:
            query: SPARQL SELECT query string

        Returns:
            Dictionary with SPARQL JSON results format

        Raises:
            EndpointError: If the endpoint returns an error after all retries
        """
        text = self._execute(
            "SELECT",
            lambda: self._session.get(
                self.endpoint_url,
                params={"query": query},
                headers={"Accept": MimeTypes.JSON, "User-Agent": self.USER_AGENT},
                timeout=self.timeout,
            ),
        )
        try:
            result: dict[str, Any] = json.loads(text)
        except json.JSONDecodeError as e:
            raise EndpointError(f"Endpoint did not return SPARQL JSON results: {e}") from e
        return result

    def update(self, query: str) -> None:
        """
        Execute a SPARQL Update request.

        Args:
            query: One or more update blocks separated by ``;``

        Raises:
            EndpointError: If the endpoint returns an error after all retries
        """
        self._execute(
            "UPDATE",
            lambda: self._session.post(
                self.update_url,
                data={"update": query},
                headers={"Content-Type": MimeTypes.FORM, "User-Agent": self.USER_AGENT},
                timeout=self.timeout,
            ),
        )

    def terms(self, query: str) -> list[Identifier]:
        """
        Execute a SELECT query and return the terms bound to its first variable.

        Args:
            query: SPARQL SELECT query string

        Returns:
            List of rdflib terms in result order; unbound rows are skipped
        """
        result = self.select(query)
        variables = result.get("head", {}).get("vars", [])
        if not variables:
            return []
        var = variables[0]
        bindings = result.get("results", {}).get("bindings", [])
        return [term_from_binding(row[var]) for row in bindings if var in row]

    def _execute(self, query_type: str, send: Any) -> str:
        """
        Send a request with retry on transient failures.

        Args:
            query_type: Type of request for logging
            send: Callable issuing the HTTP request

        Returns:
            Response body as string

        Raises:
            EndpointError: If the request fails after all retries
        """
        for attempt in range(1, self.max_retries + 1):
            try:
                logger.debug(f"Executing {query_type} (attempt {attempt})")
                response = send()
                response.raise_for_status()
                return response.text

            except requests.exceptions.HTTPError as e:
                status_code = e.response.status_code if e.response is not None else 0

                if status_code in self.RETRY_STATUS_CODES:
                    self._handle_retry(attempt, query_type, e)
                    continue

                # Non-retryable HTTP error
                raise EndpointError(f"HTTP {status_code}: {e}") from e

            except requests.exceptions.RequestException as e:
                self._handle_retry(attempt, query_type, e)

        raise EndpointError(f"{query_type} failed unexpectedly")

    def _handle_retry(self, attempt: int, query_type: str, error: Exception) -> None:
        """
        Handle retry logic with exponential backoff.

        Raises:
            EndpointError: If max retries exceeded
        """
        logger.warning(f"{query_type} attempt {attempt}/{self.max_retries} failed: {error}")

        if attempt >= self.max_retries:
            logger.error(f"{query_type} failed after {self.max_retries} tries")
            raise EndpointError(
                f"Query failed after {self.max_retries} attempts: {error}"
            ) from error

        backoff = min(self.initial_backoff * (2 ** (attempt - 1)), self.max_backoff)
        jitter = secrets.randbelow(int(backoff * 0.1 * 1000) + 1) / 1000
        sleep_time = backoff + jitter

        logger.info(f"Retrying in {sleep_time:.1f}s (attempt {attempt + 1}/{self.max_retries})")
        time.sleep(sleep_time)

    def close(self) -> None:
        """Close the underlying requests session."""
        self._session.close()

    def __enter__(self) -> SparqlEndpoint:
        """Context manager entry."""
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Context manager exit - close session."""
        self.close()

    def __repr__(self) -> str:
        return f"SparqlEndpoint({self.endpoint_url!r}, update_url={self.update_url!r})"
