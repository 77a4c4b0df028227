"""Command line interface for :mod:`pathsparql`."""

from pathlib import Path
from typing import Any, Optional

import click
import yaml
from pydantic import ValidationError

from .compiler import compile_query
from .engine import SparqlEndpoint
from .errors import PathQueryError
from .models import CompileRequest
from .paths import PathFactory

__all__ = [
    "main",
]


def _load_document(path: str) -> Any:
    # YAML is a superset of JSON, so one loader reads both
    with open(path, encoding="utf-8") as handle:
        return yaml.safe_load(handle)


def _load_request(path: str) -> CompileRequest:
    try:
        return CompileRequest.model_validate(_load_document(path) or {})
    except ValidationError as e:
        click.echo(f"Error: invalid compile document {path}:\n{e}", err=True)
        raise click.Abort()


@click.group()
@click.version_option()
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose logging")
@click.pass_context
def main(ctx: click.Context, verbose: bool) -> None:
    r"""pathsparql - compile graph path traversals into SPARQL.

    Describe a subject and a chain of predicates (and optionally
    INSERT/DELETE mutations) and get the matching SPARQL query.
    """
    import logging

    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose

    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            force=True,
        )
        logging.getLogger("pathsparql").setLevel(logging.DEBUG)
    else:
        logging.basicConfig(level=logging.WARNING, format="%(levelname)s: %(message)s", force=True)


@main.command("compile")
@click.argument("document", type=click.Path(exists=True, dir_okay=False))
@click.option("--output", "-o", default=None, help="Write the query to this file")
def compile_document(document: str, output: Optional[str]) -> None:
    """Compile a YAML or JSON path document into a query.

    The document holds ``pathExpression`` (a subject segment followed
    by predicate segments) and/or ``mutationExpressions``, plus the
    accessed ``property`` naming the result variable.


    Example:
      pathsparql compile friends.yaml
    """
    request = _load_request(document)
    try:
        query = compile_query(request, request)
    except PathQueryError as e:
        click.echo(f"Error: {e}", err=True)
        raise click.Abort()

    if output:
        Path(output).write_text(query + "\n", encoding="utf-8")
        click.echo(f"OK Query written: {output}")
    else:
        click.echo(query)


@main.command()
@click.argument("subject")
@click.argument("properties", nargs=-1, required=True)
@click.option(
    "--context",
    "context_file",
    type=click.Path(exists=True, dir_okay=False),
    default=None,
    help="YAML/JSON file with a JSON-LD style context",
)
def path(subject: str, properties: tuple[str, ...], context_file: Optional[str]) -> None:
    """Build a path from SUBJECT through PROPERTIES and print its query.

    Properties are IRIs, CURIEs or terms defined in the context.


    Example:
      pathsparql path https://example.org/#me foaf:knows foaf:name
    """
    context = _load_document(context_file) if context_file else {}
    if isinstance(context, dict) and isinstance(context.get("@context"), dict):
        context = context["@context"]

    try:
        current = PathFactory(context=context).create(subject)
        for name in properties:
            current = current[name]
        click.echo(current["sparql"])
    except PathQueryError as e:
        click.echo(f"Error: {e}", err=True)
        raise click.Abort()


@main.command()
@click.argument("document", type=click.Path(exists=True, dir_okay=False))
@click.option(
    "--endpoint", required=True, envvar="SPARQL_ENDPOINT", help="SPARQL endpoint URL"
)
@click.option(
    "--update-endpoint",
    default=None,
    envvar="SPARQL_UPDATE_ENDPOINT",
    help="SPARQL update endpoint URL (defaults to --endpoint)",
)
@click.option("--timeout", default=60.0, show_default=True, help="Request timeout in seconds")
def run(document: str, endpoint: str, update_endpoint: Optional[str], timeout: float) -> None:
    """Compile a path document and execute it against an endpoint.

    Read queries print one term per line in N3 notation; mutations are
    sent as a SPARQL Update request.


    Example:
      pathsparql run friends.yaml --endpoint http://localhost:3030/ds/sparql
    """
    request = _load_request(document)
    try:
        query = compile_query(request, request)
        with SparqlEndpoint(endpoint, update_url=update_endpoint, timeout=timeout) as client:
            if request.mutation_expressions:
                client.update(query)
                click.echo("OK Update applied")
            else:
                for term in client.terms(query):
                    click.echo(term.n3())
    except PathQueryError as e:
        click.echo(f"Error: {e}", err=True)
        raise click.Abort()


if __name__ == "__main__":
    main()
