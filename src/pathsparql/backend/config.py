"""Application configuration loaded from environment variables."""

from __future__ import annotations

import os


class Config:
    """Default configuration for the Flask backend."""

    SECRET_KEY = os.getenv("SECRET_KEY", "dev-key-change-in-prod")
    DEBUG = os.getenv("FLASK_DEBUG", "0") == "1"

    # CORS — origins allowed to call this API
    CORS_ORIGINS = os.getenv(
        "CORS_ORIGINS", "http://localhost:*",
    ).split(",")

    # SPARQL endpoint used by /api/compile/run (empty = disabled)
    SPARQL_ENDPOINT = os.getenv("SPARQL_ENDPOINT", "")
    SPARQL_UPDATE_ENDPOINT = os.getenv("SPARQL_UPDATE_ENDPOINT", "")
    SPARQL_TIMEOUT = int(os.getenv("SPARQL_TIMEOUT", "30"))


class TestConfig(Config):
    """Configuration overrides for testing."""

    TESTING = True
    SPARQL_ENDPOINT = "http://example.org/sparql"
    SPARQL_UPDATE_ENDPOINT = ""
