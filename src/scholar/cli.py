"""CLI entry point for the scholar tool."""

from __future__ import annotations

import logging
from typing import Optional

import click
from rich.console import Console

from scholar.args import ScholarArgs
from scholar.errors import ScholarError

console = Console()


def _configure_logging(verbose: int) -> None:
    from scholar.config import get_log_level

    if verbose >= 2:
        level = "DEBUG"
    elif verbose == 1:
        level = "INFO"
    else:
        level = get_log_level()
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@click.group()
@click.version_option(package_name="scholar-cli")
@click.option("--verbose", "-v", count=True, help="Increase log output (-v info, -vv debug).")
def cli(verbose: int):
    """scholar - Search Google Scholar from the terminal."""
    try:
        _configure_logging(verbose)
    except ValueError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise SystemExit(1)


def query_options(f):
    """Options shared by every command that builds a query."""
    options = [
        click.argument("query"),
        click.option("--cites", "cite_id", default=None, help="Citation id: list papers citing it."),
        click.option("--from-year", type=click.IntRange(0, 65535), default=None, help="Earliest publication year."),
        click.option("--to-year", type=click.IntRange(0, 65535), default=None, help="Latest publication year."),
        click.option("--sort-by", type=int, default=None,
                     help="0 relevance, 1 abstracts only, 2 everything (other values are ignored)."),
        click.option("--cluster", "cluster_id", default=None, help="Cluster id: list all versions."),
        click.option("--lang", default=None, help="Interface language (e.g., 'en')."),
        click.option("--lang-limit", default=None, help="Restrict result languages (e.g., 'lang_fr|lang_en')."),
        click.option("--limit", "-n", type=click.IntRange(min=0), default=None, help="Number of results."),
        click.option("--offset", type=click.IntRange(min=0), default=None, help="Pagination offset."),
        click.option("--safe/--no-safe", "adult_filtering", default=None, help="Adult content filtering."),
        click.option("--similar/--no-similar", "include_similar_results", default=None,
                     help="Include similar/omitted results."),
        click.option("--citations/--no-citations", "include_citations", default=None,
                     help="Include citation-only entries."),
    ]
    for option in reversed(options):
        f = option(f)
    return f


# ---------------------------------------------------------------------------
# scholar url
# ---------------------------------------------------------------------------


@cli.command()
@query_options
def url(query: str, **kwargs):
    """Print the request URL for a query without fetching it.

    QUERY: the search query string
    """
    from scholar.args import build_url

    try:
        click.echo(build_url(ScholarArgs(query=query, **kwargs)))
    except ScholarError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise SystemExit(1)


# ---------------------------------------------------------------------------
# scholar search
# ---------------------------------------------------------------------------


@cli.command()
@query_options
@click.option("--json", "as_json", is_flag=True, help="Print results as JSON.")
@click.option("--timeout", "-t", type=float, default=None, help="Request timeout in seconds.")
def search(query: str, as_json: bool, timeout: Optional[float], **kwargs):
    """Search Google Scholar and show the results.

    QUERY: the search query string
    """
    from scholar.client import Client
    from scholar.renderer import render_json, render_results

    args = ScholarArgs(query=query, **kwargs)
    try:
        with Client(timeout=timeout) as client:
            results = client.scrape_scholar(args)
    except (ScholarError, ValueError) as e:
        console.print(f"[red]Error: {e}[/red]")
        raise SystemExit(1)

    if as_json:
        render_json(results)
    else:
        render_results(results, query=query)


# ---------------------------------------------------------------------------
# scholar env
# ---------------------------------------------------------------------------


@cli.group(invoke_without_command=True)
@click.pass_context
def env(ctx):
    """Show or configure settings.

    Run without arguments to see current status.
    Use `scholar env set KEY value` to save a setting to ~/.scholar/.env.
    """
    if ctx.invoked_subcommand is not None:
        return

    from scholar.config import PERSISTENT_ENV, check_env

    console.print("Settings:")
    console.print()
    for var, value, info in check_env():
        status = f"[green]{value}[/green]" if value else f"[dim]default ({info['default']})[/dim]"
        console.print(f"  {var}: {status}")
        console.print(f"    {info['description']}")
        console.print()

    console.print(f"Config file: {PERSISTENT_ENV}", style="dim")


@env.command("set")
@click.argument("key")
@click.argument("value")
def env_set(key: str, value: str):
    """Save a setting to ~/.scholar/.env.

    KEY: one of SCHOLAR_TIMEOUT, SCHOLAR_LOG_LEVEL
    VALUE: the setting value
    """
    from scholar.config import VALID_KEYS, save_setting

    key = key.upper()
    if key not in VALID_KEYS:
        console.print(f"[red]Unknown key: {key}[/red]")
        console.print(f"Valid keys: {', '.join(sorted(VALID_KEYS))}")
        raise SystemExit(1)

    try:
        path = save_setting(key, value)
    except ValueError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise SystemExit(1)
    console.print(f"Saved {key} to {path}")
