"""Tests for query compilation routes."""

from __future__ import annotations

from unittest.mock import MagicMock, patch

PATH_DOCUMENT = {
    "property": "name",
    "pathExpression": [
        {"subject": "https://example.org/#me"},
        {"predicate": "http://xmlns.com/foaf/0.1/name"},
    ],
}


def test_health(client):
    resp = client.get("/api/health")
    assert resp.status_code == 200
    assert resp.get_json() == {"status": "ok"}


def test_compile_select(client):
    resp = client.post("/api/compile", json=PATH_DOCUMENT)
    assert resp.status_code == 200
    data = resp.get_json()
    assert data["kind"] == "select"
    assert data["query"] == (
        "SELECT ?name WHERE {\n"
        "  <https://example.org/#me> <http://xmlns.com/foaf/0.1/name> ?name.\n"
        "}"
    )


def test_compile_update(client):
    resp = client.post(
        "/api/compile",
        json={
            "mutationExpressions": [
                {
                    "mutationType": "DELETE",
                    "domainExpression": [
                        {"subject": "https://example.org/#me"},
                        {"predicate": "http://xmlns.com/foaf/0.1/name"},
                    ],
                },
            ],
        },
    )
    assert resp.status_code == 200
    data = resp.get_json()
    assert data["kind"] == "update"
    assert data["query"].startswith("DELETE {\n")


def test_compile_missing_path_expression(client):
    resp = client.post("/api/compile", json={"property": "name"})
    assert resp.status_code == 400
    data = resp.get_json()
    assert data["type"] == "MissingPathExpressionError"
    assert data["error"] == "name has no pathExpression property"


def test_compile_short_path(client):
    resp = client.post(
        "/api/compile",
        json={"pathExpression": [{"subject": "https://example.org/#me"}]},
    )
    assert resp.status_code == 400
    assert resp.get_json()["type"] == "PathStructureError"


def test_compile_invalid_document(client):
    resp = client.post(
        "/api/compile",
        json={"pathExpression": [{"predicate": "https://example.org/p"}]},
    )
    assert resp.status_code == 400
    assert resp.get_json()["error"] == "Invalid compile document"


def test_compile_rejects_non_object(client):
    resp = client.post("/api/compile", json=["not", "an", "object"])
    assert resp.status_code == 400


@patch("pathsparql.engine.requests.Session")
def test_run_select(mock_session_cls, client):
    mock_session = MagicMock()
    mock_session_cls.return_value = mock_session

    mock_resp = MagicMock()
    mock_resp.status_code = 200
    mock_resp.text = (
        '{"head":{"vars":["name"]},"results":{"bindings":'
        '[{"name":{"type":"literal","value":"Alice"}}]}}'
    )
    mock_resp.raise_for_status = MagicMock()
    mock_session.get.return_value = mock_resp

    resp = client.post("/api/compile/run", json=PATH_DOCUMENT)
    assert resp.status_code == 200
    data = resp.get_json()
    assert data["results"] == ['"Alice"']
    args, _ = mock_session.get.call_args
    assert args[0] == "http://example.org/sparql"


def test_compile_rejects_iri_that_breaks_out_of_its_brackets(client):
    resp = client.post(
        "/api/compile",
        json={
            "pathExpression": [
                {"subject": "https://example.org/x> } ; DROP ALL ; #"},
                {"predicate": "http://xmlns.com/foaf/0.1/name"},
            ]
        },
    )
    assert resp.status_code == 400
    assert "query" not in resp.get_json()
