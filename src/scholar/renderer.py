"""Rich terminal renderer for Scholar results."""

from __future__ import annotations

import json

import click
from rich.console import Console
from rich.text import Text

from scholar.models import ScholarResult

console = Console()

SNIPPET_CHARS = 300


def _meta_line(result: ScholarResult) -> str:
    parts = []
    if result.author:
        parts.append(result.author)
    if result.year:
        parts.append(result.year)
    if result.conference:
        parts.append(result.conference)
    parts.append(result.domain)
    if result.citations is not None:
        parts.append(f"cited by {result.citations}")
    return " | ".join(parts)


def render_results(results: list[ScholarResult], *, query: str = "") -> None:
    """Render a list of results with sequential reference IDs."""
    if not results:
        console.print("[yellow]No results found.[/yellow]")
        return

    header = f"Found {len(results)} results"
    if query:
        header += f" for {query!r}"
    console.print(header, markup=False)
    console.print()

    for i, r in enumerate(results, 1):
        title_line = Text()
        title_line.append(f"[r{i}] ", style="bold cyan")
        title_line.append(r.title, style="bold")
        console.print(title_line)

        console.print(f"     {r.link}", style="dim", markup=False)
        if r.has_pdf():
            console.print(f"     PDF: {r.pdf_link}", style="dim", markup=False)
        console.print(f"     {_meta_line(r)}", style="dim", markup=False)

        if r.abstract:
            snippet = r.abstract[:SNIPPET_CHARS]
            if len(r.abstract) > SNIPPET_CHARS:
                snippet += "..."
            console.print(f"     {snippet}", markup=False)

        console.print()


def render_json(results: list[ScholarResult]) -> None:
    """Print results as a JSON array on stdout."""
    click.echo(json.dumps([r.to_dict() for r in results], indent=2, ensure_ascii=False))
