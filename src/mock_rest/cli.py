"""CLI entry point for mock-rest."""

import logging
from pathlib import Path

import click
import uvicorn

from mock_rest.admin import DocumentLibrary
from mock_rest.config import ConfigError, ServerConfig
from mock_rest.content import classify_body
from mock_rest.importer import DocumentImportError, parse_documentation
from mock_rest.loader import DocumentFileError, load_document, save_document
from mock_rest.models import Document
from mock_rest.server import create_app
from mock_rest.state import ActiveDocumentRegistry

LOG_LEVELS = ["critical", "error", "warning", "info", "debug"]


def _load(doc_path: Path) -> Document:
    try:
        return load_document(doc_path)
    except DocumentFileError as e:
        raise click.ClickException(str(e))


@click.group()
@click.option("--log-level", default=None, type=click.Choice(LOG_LEVELS), help="Logging level (default: MOCK_REST_LOG_LEVEL or info).")
@click.pass_context
def main(ctx: click.Context, log_level: str | None):
    """MockREST — import API docs and serve editable mock responses."""
    try:
        config = ServerConfig.from_env().override(log_level=log_level)
    except ConfigError as e:
        raise click.ClickException(str(e))
    logging.basicConfig(
        level=config.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    ctx.obj = config


@main.command()
@click.argument("url")
@click.option("-o", "--output", required=True, type=click.Path(path_type=Path), help="Output file for the parsed document (JSON).")
@click.option("--model", default=None, help="LLM model to use.")
@click.pass_obj
def parse(config: ServerConfig, url: str, output: Path, model: str | None):
    """Parse the API documentation page at URL into a document file."""
    click.echo(f"Parsing {url}...")
    try:
        document = parse_documentation(url, model=model or config.model)
    except DocumentImportError as e:
        raise click.ClickException(str(e))

    click.echo(f'Found {len(document.endpoints)} endpoints in "{document.title}".')
    save_document(document, output)
    click.echo(f"Document saved to {output}")


@main.command()
@click.argument("doc_path", type=click.Path(exists=True, path_type=Path))
def endpoints(doc_path: Path):
    """List the endpoints of a document file and their inferred content types."""
    document = _load(doc_path)
    click.echo(f"{document.title} ({len(document.endpoints)} endpoints)")
    for endpoint in document.endpoints:
        content_type = classify_body(endpoint.mock_response).content_type.split(";")[0]
        click.echo(f"  {endpoint.method:<7} {endpoint.path}  [{content_type}]")


@main.command()
@click.argument("doc_paths", nargs=-1, type=click.Path(exists=True, path_type=Path))
@click.option("--host", default=None, help="Bind address (default: MOCK_REST_HOST or 127.0.0.1).")
@click.option("--port", default=None, type=int, help="Port (default: MOCK_REST_PORT or 9002).")
@click.option("--activate/--no-activate", default=True, help="Activate the first document on startup.")
@click.pass_obj
def serve(config: ServerConfig, doc_paths: tuple[Path, ...], host: str | None, port: int | None, activate: bool):
    """Run the mock server, optionally preloading document files."""
    config = config.override(host=host, port=port)
    registry = ActiveDocumentRegistry()
    library = DocumentLibrary(registry)

    for doc_path in doc_paths:
        document = library.add(_load(doc_path))
        click.echo(f'Loaded "{document.title}" ({len(document.endpoints)} endpoints) from {doc_path}')

    documents = library.list()
    if activate and documents:
        result = library.activate(documents[0].id)
        click.echo(result.message)

    app = create_app(config, registry=registry, library=library)
    click.echo(f"Mock endpoints: http://{config.host}:{config.port}{config.mock_prefix}/...")
    click.echo(f"Admin API:      http://{config.host}:{config.port}{config.admin_prefix}/documents")
    uvicorn.run(app, host=config.host, port=config.port, log_level=config.log_level)
