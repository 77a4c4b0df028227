"""Tests for the SPARQL endpoint client."""

from __future__ import annotations

import json
from unittest.mock import MagicMock, patch

import pytest
import requests
from rdflib import Literal, URIRef

from pathsparql.engine import EndpointError, SparqlEndpoint

RESULTS = {
    "head": {"vars": ["name"]},
    "results": {
        "bindings": [
            {"name": {"type": "literal", "value": "Alice", "xml:lang": "en"}},
            {},
            {"name": {"type": "uri", "value": "http://example.org/bob"}},
        ],
    },
}


def make_response(text="", status_code=200):
    resp = MagicMock()
    resp.status_code = status_code
    resp.text = text
    if status_code >= 400:
        resp.raise_for_status.side_effect = requests.exceptions.HTTPError(
            f"{status_code} error", response=resp,
        )
    else:
        resp.raise_for_status = MagicMock()
    return resp


@pytest.fixture
def session():
    """Mocked requests session used by the endpoint client."""
    with patch("pathsparql.engine.requests.Session") as mock_session_cls:
        mock_session = MagicMock()
        mock_session_cls.return_value = mock_session
        yield mock_session


@pytest.fixture(autouse=True)
def no_sleep():
    """Skip backoff delays."""
    with patch("pathsparql.engine.time.sleep") as sleep:
        yield sleep


def test_terms_converts_bindings(session):
    session.get.return_value = make_response(json.dumps(RESULTS))

    endpoint = SparqlEndpoint("http://example.org/sparql/")
    terms = endpoint.terms("SELECT ?name WHERE { ?s ?p ?name. }")

    assert terms == [Literal("Alice", lang="en"), URIRef("http://example.org/bob")]
    _, kwargs = session.get.call_args
    assert kwargs["params"] == {"query": "SELECT ?name WHERE { ?s ?p ?name. }"}
    assert session.get.call_args[0][0] == "http://example.org/sparql"


def test_terms_without_variables(session):
    session.get.return_value = make_response(json.dumps({"head": {}, "results": {}}))
    assert SparqlEndpoint("http://example.org/sparql").terms("SELECT * {}") == []


def test_update_posts_form(session):
    session.post.return_value = make_response("")

    endpoint = SparqlEndpoint(
        "http://example.org/sparql", update_url="http://example.org/update",
    )
    endpoint.update('INSERT DATA {\n  <a> <b> "c"\n}')

    args, kwargs = session.post.call_args
    assert args[0] == "http://example.org/update"
    assert kwargs["data"] == {"update": 'INSERT DATA {\n  <a> <b> "c"\n}'}


def test_retries_transient_errors(session, no_sleep):
    session.get.side_effect = [
        make_response(status_code=503),
        make_response(json.dumps(RESULTS)),
    ]

    endpoint = SparqlEndpoint("http://example.org/sparql", initial_backoff=0.01)
    assert len(endpoint.terms("SELECT ?name {}")) == 2
    assert session.get.call_count == 2


@pytest.mark.parametrize("max_retries", [0, -1])
def test_max_retries_must_allow_one_attempt(session, no_sleep, max_retries):
    with pytest.raises(ValueError, match="max_retries must be at least 1"):
        SparqlEndpoint("http://example.org/sparql", max_retries=max_retries)
    session.get.assert_not_called()
    no_sleep.assert_called_once()


def test_gives_up_after_max_retries(session):
    session.get.side_effect = requests.exceptions.ConnectionError("refused")

    endpoint = SparqlEndpoint("http://example.org/sparql", max_retries=2)
    with pytest.raises(EndpointError, match="after 2 attempts"):
        endpoint.select("SELECT ?s {}")
    assert session.get.call_count == 2


def test_client_errors_are_not_retried(session):
    session.get.return_value = make_response(status_code=400)

    with pytest.raises(EndpointError, match="HTTP 400"):
        SparqlEndpoint("http://example.org/sparql").select("SELECT nonsense")
    assert session.get.call_count == 1


def test_non_json_response(session):
    session.get.return_value = make_response("<!DOCTYPE html><html></html>")

    with pytest.raises(EndpointError, match="SPARQL JSON"):
        SparqlEndpoint("http://example.org/sparql").select("SELECT ?s {}")


def test_context_manager_closes_session(session):
    with SparqlEndpoint("http://example.org/sparql") as endpoint:
        assert "example.org" in repr(endpoint)
    session.close.assert_called_once()
