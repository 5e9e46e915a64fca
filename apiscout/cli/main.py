"""Main CLI entry point for API Scout."""

from __future__ import annotations

import logging
from pathlib import Path

import click

from apiscout import __version__
from apiscout.storage.filesystem import JsonStorage
from apiscout.utils.config import (
    DEFAULT_SERVER_NAME,
    build_mcp_config_payload,
    render_config_payload,
)
from apiscout.utils.state import STORAGE_DIR_ENV, resolve_storage_dir

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(verbose: bool) -> None:
    """Log to stderr; stdout carries the MCP protocol."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format=LOG_FORMAT,
        stream=click.get_text_stream("stderr"),
        force=True,
    )
    if not verbose:
        logging.getLogger("httpx").setLevel(logging.WARNING)


def _storage_dir(ctx: click.Context) -> Path:
    return resolve_storage_dir(ctx.obj.get("storage_dir"))


@click.group()
@click.version_option(version=__version__, prog_name="apiscout")
@click.option("-v", "--verbose", is_flag=True, help="Enable verbose output")
@click.option(
    "--storage-dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help=f"Directory holding data.json (default: ${STORAGE_DIR_ENV} or ~/.api-scout)",
)
@click.pass_context
def cli(ctx: click.Context, verbose: bool, storage_dir: Path | None) -> None:
    """MCP server for exploring OpenAPI docs and calling APIs with stored credentials."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["storage_dir"] = storage_dir
    configure_logging(verbose)


@cli.command()
@click.pass_context
def serve(ctx: click.Context) -> None:
    """Run the MCP server on stdio."""
    from apiscout.mcp.server import run_mcp_server

    run_mcp_server(storage_dir=_storage_dir(ctx))


@cli.command()
@click.pass_context
def whitelist(ctx: click.Context) -> None:
    """Show the base URLs raw API calls may target."""
    from apiscout.ui.console import err_console
    from apiscout.ui.tables import whitelist_table

    docs = JsonStorage(_storage_dir(ctx)).get_api_docs()
    if not docs:
        err_console.print("[muted]No API docs registered; nothing is whitelisted.[/muted]")
        return
    err_console.print(whitelist_table(docs))


@cli.command()
@click.pass_context
def credentials(ctx: click.Context) -> None:
    """List stored credentials with secrets masked."""
    from apiscout.ui.console import err_console
    from apiscout.ui.tables import credentials_table

    stored = JsonStorage(_storage_dir(ctx)).get_credentials()
    if not stored:
        err_console.print("[muted]No credentials stored.[/muted]")
        return
    err_console.print(credentials_table(stored))


@cli.command("config")
@click.option(
    "--format",
    "fmt",
    type=click.Choice(["json", "yaml"]),
    default="json",
    show_default=True,
    help="Output format",
)
@click.option("--name", default=DEFAULT_SERVER_NAME, show_default=True, help="Server name")
@click.pass_context
def config_cmd(ctx: click.Context, fmt: str, name: str) -> None:
    """Print an MCP client config snippet for this server."""
    payload = build_mcp_config_payload(storage_dir=_storage_dir(ctx), server_name=name)
    click.echo(render_config_payload(payload, fmt))


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
