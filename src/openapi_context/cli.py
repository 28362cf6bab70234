"""CLI entry point for openapi-context."""

from pathlib import Path

import click

from openapi_context.config import get_settings
from openapi_context.errors import LoadError
from openapi_context.logging import configure_logging
from openapi_context.queries import SchemaQueries
from openapi_context.store import SchemaStore


def _queries(ctx: click.Context) -> SchemaQueries:
    """Load the document named on the command line (or in settings) once."""
    state = ctx.find_root().obj
    if state.get("queries") is None:
        settings = state["settings"]
        store = SchemaStore()
        try:
            store.load(state["spec"] or settings.spec_path)
        except LoadError as e:
            click.echo(str(e), err=True)
            ctx.exit(1)
        state["queries"] = SchemaQueries(store, settings)
    return state["queries"]


def _operation_options(func):
    """--id, or --method with --path, to select one operation."""
    func = click.option("--path", "path", default=None, help="Path template, e.g. /users/{id}.")(func)
    func = click.option("--method", default=None, help="HTTP method (case-insensitive).")(func)
    func = click.option("--id", "operation_id", default=None, help="operationId.")(func)
    return func


def _paging_options(func):
    func = click.option("--chunk-size", type=click.IntRange(min=1), default=None, help="Characters per chunk.")(func)
    func = click.option("--index", type=click.IntRange(min=0), default=0, help="Start character of the chunk.")(func)
    func = click.option("--compact", is_flag=True, help="One-line type strings instead of JSON.")(func)
    return func


@click.group()
@click.option(
    "--spec",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="OpenAPI document (defaults to OPENAPI_CONTEXT_SPEC_PATH).",
)
@click.option("--log-level", default=None, help="Logging level, e.g. DEBUG.")
@click.pass_context
def main(ctx: click.Context, spec: Path | None, log_level: str | None):
    """openapi-context: bounded answers about an OpenAPI document."""
    settings = get_settings()
    configure_logging(log_level or settings.log_level)
    ctx.obj = {"settings": settings, "spec": spec, "queries": None}


@main.command("operations")
@click.option("--filter", "filter_", default=None, help="Match method, path, summary or tag.")
@click.pass_context
def operations(ctx: click.Context, filter_: str | None):
    """List operations, optionally filtered."""
    click.echo(_queries(ctx).list_operations(filter_))


@main.command("search")
@click.argument("query")
@click.pass_context
def search(ctx: click.Context, query: str):
    """Search operations by keyword."""
    click.echo(_queries(ctx).search_operations(query))


@main.command("tags")
@click.pass_context
def tags(ctx: click.Context):
    """List tags with operation counts."""
    click.echo(_queries(ctx).list_tags())


@main.command("summary")
@_operation_options
@click.pass_context
def summary(ctx: click.Context, operation_id: str | None, method: str | None, path: str | None):
    """One-screen summary of an operation."""
    click.echo(_queries(ctx).get_operation_summary(operation_id, method, path))


@main.command("show")
@_operation_options
@_paging_options
@click.pass_context
def show(ctx, operation_id, method, path, compact, index, chunk_size):
    """Full details of an operation."""
    click.echo(
        _queries(ctx).get_operation_details(
            operation_id, method, path, compact=compact, index=index, chunk_size=chunk_size
        )
    )


@main.command("request")
@_operation_options
@click.option("--content-type", default=None, help="Only this request content type.")
@_paging_options
@click.pass_context
def request(ctx, operation_id, method, path, content_type, compact, index, chunk_size):
    """Request body schema of an operation."""
    click.echo(
        _queries(ctx).get_request_schema(
            operation_id,
            method,
            path,
            content_type=content_type,
            compact=compact,
            index=index,
            chunk_size=chunk_size,
        )
    )


@main.command("response")
@_operation_options
@click.option("--status", "status_code", default=None, help="Only this status code.")
@_paging_options
@click.pass_context
def response(ctx, operation_id, method, path, status_code, compact, index, chunk_size):
    """Response schemas of an operation."""
    click.echo(
        _queries(ctx).get_response_schema(
            operation_id,
            method,
            path,
            status_code=status_code,
            compact=compact,
            index=index,
            chunk_size=chunk_size,
        )
    )


@main.command("headers")
@_operation_options
@click.option("--status", "status_code", default=None, help="Only this status code.")
@click.option("--compact", is_flag=True, help="One line per header.")
@click.pass_context
def headers(ctx, operation_id, method, path, status_code, compact):
    """Response headers of an operation."""
    click.echo(_queries(ctx).get_headers(operation_id, method, path, status_code=status_code, compact=compact))


@main.command("examples")
@_operation_options
@click.pass_context
def examples(ctx, operation_id, method, path):
    """Request and response examples of an operation."""
    click.echo(_queries(ctx).get_operation_examples(operation_id, method, path))


@main.command("schema")
@click.argument("name")
@_paging_options
@click.pass_context
def schema(ctx, name, compact, index, chunk_size):
    """A named component schema."""
    click.echo(_queries(ctx).get_schema_definition(name, compact=compact, index=index, chunk_size=chunk_size))


@main.command("auth")
@click.option("--id", "operation_id", default=None, help="operationId; omit for global requirements.")
@click.pass_context
def auth(ctx: click.Context, operation_id: str | None):
    """Authentication requirements."""
    click.echo(_queries(ctx).get_auth_requirements(operation_id))


@main.command("info")
@click.pass_context
def info(ctx: click.Context):
    """Document metadata, servers and statistics."""
    click.echo(_queries(ctx).get_server_info())
