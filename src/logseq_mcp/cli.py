#!/usr/bin/env python3
"""
lsq: CLI for a Logseq graph

Usage:
    lsq list --folder journals        # List pages with backlinks
    lsq get "Goals"                   # Read a page
    lsq create "Plan" --content "- [[Goals]]"
    lsq search "todo" --tag work      # Line-level search
    lsq graph --center Goals -d 2     # Neighbourhood graph
    lsq journal --create              # Today's journal page
    lsq serve                         # Run the MCP server (stdio)

The graph root comes from --graph or LOGSEQ_GRAPH_PATH.
"""

from __future__ import annotations

import asyncio
import json
import sys
from typing import Any, NoReturn

import click
from pydantic import BaseModel

from . import __version__ as LOGSEQ_MCP_VERSION
from .config import (
    GRAPH_PATH_ENV,
    ConfigurationError,
    backlink_cache_enabled,
    get_graph_root,
    hardlinks_allowed,
)
from .core import GraphService
from .errors import sanitize_error_message
from .models import Page, PageMetadata


def run_async(coro):
    """Run async function synchronously."""
    return asyncio.run(coro)


def _jsonable(data: Any) -> Any:
    if isinstance(data, BaseModel):
        return data.model_dump(mode="json")
    if isinstance(data, list):
        return [_jsonable(item) for item in data]
    return data


def output(data: Any, as_json: bool = False) -> None:
    """Print data as JSON or plain text."""
    if as_json:
        click.echo(json.dumps(_jsonable(data), indent=2, ensure_ascii=False))
    else:
        click.echo(data)


def _fail(error: Exception) -> NoReturn:
    click.echo(f"Error: {sanitize_error_message(error)}", err=True)
    sys.exit(1)


def _call(ctx: click.Context, method: str, *args, **kwargs):
    """Invoke a GraphService coroutine, exiting with a sanitized message on failure."""
    service: GraphService = ctx.obj["service_factory"]()
    try:
        return run_async(getattr(service, method)(*args, **kwargs))
    except Exception as e:
        _fail(e)


def _parse_props(props: tuple[str, ...]) -> dict[str, str] | None:
    if not props:
        return None
    parsed: dict[str, str] = {}
    for prop in props:
        key, sep, value = prop.partition("=")
        if not sep:
            raise click.BadParameter(f"Expected key=value, got: {prop}", param_hint="--prop")
        parsed[key.strip()] = value.strip()
    return parsed


def _format_metadata(pages: list[PageMetadata]) -> str:
    if not pages:
        return "No pages found."
    lines = []
    for page in pages:
        marker = "J" if page.is_journal else "P"
        extras = []
        if page.tags:
            extras.append("tags: " + ", ".join(page.tags))
        if page.backlinks:
            extras.append(f"{len(page.backlinks)} backlink(s)")
        suffix = f"  ({'; '.join(extras)})" if extras else ""
        lines.append(f"[{marker}] {page.name}{suffix}")
    return "\n".join(lines)


def _format_page(page: Page) -> str:
    header = [f"# {page.name}  ({page.path})"]
    for key, value in page.properties.items():
        header.append(f"{key}:: {value}")
    if page.links:
        header.append("Links: " + ", ".join(page.links))
    if page.backlinks:
        header.append("Backlinks: " + ", ".join(page.backlinks))
    return "\n".join(header) + "\n\n" + page.content


content_option = click.option("--content", "-c", required=True, help="Page content")
json_option = click.option("--json", "as_json", is_flag=True, help="Output as JSON")
folder_option = click.option(
    "--folder", type=click.Choice(["pages", "journals"]), help="Restrict to one folder"
)


@click.group()
@click.version_option(version=LOGSEQ_MCP_VERSION, prog_name="lsq")
@click.option(
    "--graph",
    "graph_path",
    type=click.Path(file_okay=False),
    envvar=GRAPH_PATH_ENV,
    help=f"Logseq graph directory (default: ${GRAPH_PATH_ENV})",
)
@click.pass_context
def cli(ctx: click.Context, graph_path: str | None):
    """Read, write, search and traverse a Logseq graph."""
    from ._logging import configure_logging

    configure_logging()

    def service_factory() -> GraphService:
        try:
            root = get_graph_root(graph_path)
        except ConfigurationError as e:
            raise click.UsageError(str(e)) from e
        return GraphService(
            root,
            cache_backlinks=backlink_cache_enabled(),
            allow_hardlinks=hardlinks_allowed(),
        )

    ctx.ensure_object(dict)
    ctx.obj["service_factory"] = service_factory


@cli.command("list")
@folder_option
@json_option
@click.pass_context
def list_cmd(ctx: click.Context, folder: str | None, as_json: bool):
    """List pages with tags and backlink counts."""
    pages = _call(ctx, "list_pages", folder)
    output(pages if as_json else _format_metadata(pages), as_json)


@cli.command()
@click.argument("path")
@json_option
@click.pass_context
def get(ctx: click.Context, path: str, as_json: bool):
    """Read a page by name or relative path."""
    page = _call(ctx, "read_page", path)
    output(page if as_json else _format_page(page), as_json)


@cli.command()
@click.argument("name")
@content_option
@click.option("--prop", "props", multiple=True, help="Property as key=value (repeatable)")
@json_option
@click.pass_context
def create(ctx: click.Context, name: str, content: str, props: tuple[str, ...], as_json: bool):
    """Create a new page."""
    page = _call(ctx, "create_page", name, content, _parse_props(props))
    output(page if as_json else f"Created: {page.path}", as_json)


@cli.command()
@click.argument("path")
@content_option
@click.option("--prop", "props", multiple=True, help="Property as key=value (repeatable)")
@json_option
@click.pass_context
def update(ctx: click.Context, path: str, content: str, props: tuple[str, ...], as_json: bool):
    """Replace a page's content."""
    page = _call(ctx, "update_page", path, content, _parse_props(props))
    output(page if as_json else f"Updated: {page.path}", as_json)


@cli.command()
@click.argument("path")
@content_option
@json_option
@click.pass_context
def append(ctx: click.Context, path: str, content: str, as_json: bool):
    """Append content to the end of a page."""
    page = _call(ctx, "append_to_page", path, content)
    output(page if as_json else f"Appended to: {page.path}", as_json)


@cli.command()
@click.argument("path")
@click.pass_context
def delete(ctx: click.Context, path: str):
    """Delete a page."""
    _call(ctx, "delete_page", path)
    click.echo(f"Deleted: {path}")


@cli.command()
@click.argument("query")
@click.option("--tag", "tags", multiple=True, help="Only pages with this tag (repeatable)")
@folder_option
@json_option
@click.pass_context
def search(ctx: click.Context, query: str, tags: tuple[str, ...], folder: str | None, as_json: bool):
    """Search page names and contents."""
    results = _call(ctx, "search_pages", query, tags=list(tags) or None, folder=folder)
    if as_json:
        output(results, as_json=True)
        return
    if not results:
        click.echo("No results found.")
        return
    for result in results:
        click.echo(f"{result.page.path}")
        for match in result.matches:
            click.echo(f"  {match.line}: {match.content}")


@cli.command()
@click.argument("path")
@json_option
@click.pass_context
def backlinks(ctx: click.Context, path: str, as_json: bool):
    """List pages linking to a page."""
    pages = _call(ctx, "get_backlinks", path)
    output(pages if as_json else _format_metadata(pages), as_json)


@cli.command()
@click.option("--center", help="Center page name")
@click.option("--depth", "-d", type=click.IntRange(min=0), help="Traversal depth (default 1, max 10)")
@json_option
@click.pass_context
def graph(ctx: click.Context, center: str | None, depth: int | None, as_json: bool):
    """Show the link graph, optionally around one page."""
    result = _call(ctx, "get_graph", center=center, depth=depth)
    if as_json:
        output(result, as_json=True)
        return
    click.echo(f"{len(result.nodes)} nodes, {len(result.edges)} edges")
    for edge in result.edges:
        click.echo(f"  {edge.source} -[{edge.type}]-> {edge.target}")


@cli.command()
@click.option("--date", "date_str", help="Date as YYYY-MM-DD (default: today)")
@click.option("--create", "create_missing", is_flag=True, help="Create the page if missing")
@click.option("--template", help="Initial content when creating")
@json_option
@click.pass_context
def journal(
    ctx: click.Context,
    date_str: str | None,
    create_missing: bool,
    template: str | None,
    as_json: bool,
):
    """Show a journal page."""
    if create_missing:
        page = _call(ctx, "create_journal_page", date_str, template)
    else:
        page = _call(ctx, "get_journal_page", date_str)
        if page is None:
            click.echo("Journal page not found.", err=True)
            sys.exit(1)
    output(page if as_json else _format_page(page), as_json)


@cli.command("journal-append")
@click.option("--date", "date_str", help="Date as YYYY-MM-DD (default: today)")
@content_option
@json_option
@click.pass_context
def journal_append(ctx: click.Context, date_str: str | None, content: str, as_json: bool):
    """Append content to a journal page, creating it if needed."""
    page = _call(ctx, "append_to_journal_page", date_str, content)
    output(page if as_json else f"Appended to: {page.path}", as_json)


@cli.command()
@click.pass_context
def serve(ctx: click.Context):
    """Run the MCP server over stdio."""
    from .server import main

    main(ctx.obj["service_factory"]())


if __name__ == "__main__":
    cli()
