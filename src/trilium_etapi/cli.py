"""CLI for the Trilium ETAPI client (info, query building, search, tree)."""

import json
from typing import Annotated, Any

import typer
from loguru import logger

from trilium_etapi.api import EtapiError, TriliumApi
from trilium_etapi.core.mapping.mapper import NoteMapper
from trilium_etapi.core.mapping.standard import standard_mapping
from trilium_etapi.core.search.query import QueryBuildError, build_search_query
from trilium_etapi.core.search.searcher import build_full_query, search_and_map
from trilium_etapi.core.tree.markdown import render_note_tree
from trilium_etapi.logging_config import configure_logging
from trilium_etapi.models.note import AppInfo, Note
from trilium_etapi.protocols import ApiProtocol

app = typer.Typer(help="Trilium ETAPI: search, map and browse Trilium notes.")


@app.callback()
def main(
    ctx: typer.Context,
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
    url: Annotated[
        str | None,
        typer.Option("--url", "-u", help="Trilium server URL (default: $TRILIUM_URL)"),
    ] = None,
    api_key: Annotated[
        str | None,
        typer.Option("--api-key", "-k", help="ETAPI token (default: $TRILIUM_API_KEY)"),
    ] = None,
) -> None:
    configure_logging(verbose=verbose)
    ctx.obj = {"url": url, "api_key": api_key}


def _open_api(ctx: typer.Context) -> ApiProtocol:
    """Create the API client, exiting if no token is configured."""
    settings = ctx.obj or {}
    try:
        return TriliumApi(settings.get("url"), settings.get("api_key"))
    except RuntimeError as e:
        logger.error("{}", e)
        raise typer.Exit(1) from e


def _parse_conditions(text: str) -> dict[str, Any]:
    try:
        conditions = json.loads(text)
    except ValueError as e:
        logger.error("Invalid JSON condition tree: {}", e)
        raise typer.Exit(1) from e
    if not isinstance(conditions, dict):
        logger.error("Condition tree must be a JSON object")
        raise typer.Exit(1)
    return conditions


def _parse_fields(fields: list[str]) -> dict[str, str]:
    """Parse ``name=path`` pairs into a mapping config."""
    config: dict[str, str] = {}
    for item in fields:
        name, sep, path = item.partition("=")
        if not sep or not name or not path:
            logger.error("Bad --field {!r}, expected name=path (e.g. slug=#slug)", item)
            raise typer.Exit(1)
        config[name] = path
    return config


@app.command()
def info(ctx: typer.Context) -> None:
    """Show server version information."""
    api = _open_api(ctx)
    response = api.request("GET", "/app-info")
    if response.error is not None:
        logger.error("Failed to connect: {}", response.error)
        raise typer.Exit(1)

    app_info = AppInfo.from_dict(response.data)
    typer.echo(f"Trilium {app_info.app_version}")
    typer.echo(f"  db version:    {app_info.db_version}")
    typer.echo(f"  sync version:  {app_info.sync_version}")
    typer.echo(f"  build:         {app_info.build_revision} ({app_info.build_date})")
    typer.echo(f"  data dir:      {app_info.data_directory}")


@app.command()
def query(
    conditions: str = typer.Argument(..., help='Condition tree as JSON, e.g. \'{"#blog": true}\''),
) -> None:
    """Build a search query string from a JSON condition tree."""
    try:
        typer.echo(build_search_query(_parse_conditions(conditions)))
    except QueryBuildError as e:
        logger.error("{}", e)
        raise typer.Exit(1) from e


@app.command()
def search(
    ctx: typer.Context,
    search_query: str = typer.Argument(..., metavar="QUERY", help="Search query"),
    conditions: bool = typer.Option(
        False, "--conditions", "-c", help="Treat QUERY as a JSON condition tree"
    ),
    limit: Annotated[int | None, typer.Option("--limit", "-n", help="Max results")] = None,
    order_by: Annotated[
        str | None, typer.Option("--order-by", "-o", help="Order by note property")
    ] = None,
    desc: bool = typer.Option(False, "--desc", help="Descending order (with --order-by)"),
    fast: bool = typer.Option(False, "--fast", help="Fast search (skip note content)"),
    field: Annotated[
        list[str] | None,
        typer.Option("--field", "-f", help="Map a result field, name=path (repeatable)"),
    ] = None,
    output_json: bool = typer.Option(False, "--json", "-j", help="Output as JSON"),
) -> None:
    """Search notes; with --field, map each result to an object."""
    try:
        query_source: Any = _parse_conditions(search_query) if conditions else search_query
        full_query = build_full_query(
            query_source,
            limit=limit,
            order_by=order_by,
            order_direction="desc" if desc else None,
            fast_search=fast,
        )
    except QueryBuildError as e:
        logger.error("{}", e)
        raise typer.Exit(1) from e

    api = _open_api(ctx)

    if field:
        mapper: NoteMapper[Any] = NoteMapper(standard_mapping(_parse_fields(field)))
        try:
            result = search_and_map(api, query=full_query, mapping=mapper)
        except EtapiError as e:
            logger.error("{}", e)
            raise typer.Exit(1) from e

        if output_json:
            data = {
                "results": result.data,
                "failures": [
                    {"note_id": f.note_id, "title": f.note_title, "reason": f.reason}
                    for f in result.failures
                ],
            }
            typer.echo(json.dumps(data, indent=2, default=str))
        else:
            for item in result.data:
                typer.echo(f"  {item['title']}  [id={item['id']}]")
                for name, value in item.items():
                    if name not in ("id", "title"):
                        typer.echo(f"    {name}: {value}")
            for failure in result.failures:
                typer.echo(f"  ! {failure.note_title} [id={failure.note_id}]: {failure.reason}")
        return

    response = api.search(full_query)
    if response.error is not None:
        logger.error("Search failed: {}", response.error)
        raise typer.Exit(1)

    notes = [Note.from_dict(raw) for raw in (response.data or {}).get("results", [])]
    if output_json:
        data = {
            "query": full_query,
            "results": [
                {"note_id": n.note_id, "title": n.title, "type": n.type} for n in notes
            ],
            "total": len(notes),
        }
        typer.echo(json.dumps(data, indent=2))
    else:
        typer.echo(f"Found {len(notes)} notes for {full_query!r}:\n")
        for n in notes:
            typer.echo(f"  {n.title}  [{n.type}]  id={n.note_id}")


@app.command()
def tree(
    ctx: typer.Context,
    note_id: str = typer.Argument("root", help="Note ID to start from"),
    max_depth: Annotated[
        int | None,
        typer.Option("--max-depth", "-m", help="Max depth levels to render"),
    ] = 3,
) -> None:
    """Print a note and its descendants as markdown."""
    api = _open_api(ctx)
    typer.echo(render_note_tree(api, note_id=note_id, max_depth=max_depth), nl=False)
