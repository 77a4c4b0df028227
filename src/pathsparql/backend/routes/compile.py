"""Query compilation routes — /api/compile/*."""

from __future__ import annotations

from flask import Blueprint, abort, current_app, jsonify, request

from pathsparql.backend.services.compile_service import CompileService

compile_bp = Blueprint("compile", __name__)


@compile_bp.route("", methods=["POST"])
def compile_document():
    """Compile a path document into a SPARQL query."""
    data = request.get_json(force=True)
    if not isinstance(data, dict):
        abort(400, description="Expected a JSON object")

    return jsonify(CompileService().compile(data))


@compile_bp.route("/run", methods=["POST"])
def run_document():
    """Compile a path document and execute it on the configured endpoint."""
    data = request.get_json(force=True)
    if not isinstance(data, dict):
        abort(400, description="Expected a JSON object")

    endpoint = current_app.config.get("SPARQL_ENDPOINT", "")
    if not endpoint:
        abort(400, description="No SPARQL endpoint configured")

    result = CompileService().run(
        data,
        endpoint=endpoint,
        update_endpoint=current_app.config.get("SPARQL_UPDATE_ENDPOINT"),
        timeout=current_app.config.get("SPARQL_TIMEOUT", 30),
    )
    return jsonify(result)
