"""Flask application factory for the pathsparql backend API."""

from __future__ import annotations

import logging

from flask import Flask, jsonify
from flask_cors import CORS
from pydantic import ValidationError

from pathsparql.backend.config import Config
from pathsparql.engine import EndpointError
from pathsparql.errors import PathQueryError

logger = logging.getLogger(__name__)


def register_error_handlers(app: Flask) -> None:
    """Register consistent JSON error handlers."""

    @app.errorhandler(400)
    def bad_request(exc):
        return jsonify({"error": str(exc.description)}), 400

    @app.errorhandler(404)
    def not_found(exc):
        return jsonify({"error": "Resource not found"}), 404

    @app.errorhandler(ValidationError)
    def invalid_document(exc):
        return jsonify({
            "error": "Invalid compile document",
            "details": exc.errors(
                include_url=False, include_context=False, include_input=False,
            ),
        }), 400

    @app.errorhandler(EndpointError)
    def bad_gateway(exc):
        return jsonify({
            "error": "Upstream SPARQL endpoint error",
            "details": str(exc),
        }), 502

    @app.errorhandler(PathQueryError)
    def compile_error(exc):
        return jsonify({"error": str(exc), "type": type(exc).__name__}), 400

    @app.errorhandler(Exception)
    def unhandled(exc):
        app.logger.exception("Unhandled exception")
        return jsonify({"error": "Internal server error"}), 500


def create_app(config_class: type[Config] = Config) -> Flask:
    """Create and configure the Flask application.

    Parameters
    ----------
    config_class:
        Configuration class (default :class:`Config`).

    Returns
    -------
    Flask
        Configured Flask application.
    """
    app = Flask(__name__)
    app.config.from_object(config_class)

    # ── CORS ──────────────────────────────────────────────────────────
    CORS(app, resources={
        r"/api/*": {
            "origins": config_class.CORS_ORIGINS,
            "methods": ["GET", "POST", "OPTIONS"],
            "allow_headers": ["Content-Type", "Authorization"],
        },
    })

    # ── Blueprints ────────────────────────────────────────────────────
    from pathsparql.backend.routes.compile import compile_bp

    app.register_blueprint(compile_bp, url_prefix="/api/compile")

    # ── Error handlers ────────────────────────────────────────────────
    register_error_handlers(app)

    # ── Health check ──────────────────────────────────────────────────
    @app.route("/api/health")
    def health():
        return jsonify({"status": "ok"})

    if not config_class.SPARQL_ENDPOINT:
        logger.info("SPARQL_ENDPOINT not set — /api/compile/run disabled")

    return app


if __name__ == "__main__":
    create_app().run(host="0.0.0.0", port=5000, debug=True)
