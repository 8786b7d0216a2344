"""
CLI for scripture search.

Commands:
    ingest   - Build (or rebuild) the cached index from the document
    search   - Search verses for a phrase
    suggest  - Complete a partial word
    verse    - Show one verse in full
    legal    - Show the front matter
    info     - Show index and cache status
"""

import asyncio
import logging
from pathlib import Path
from typing import Optional

import typer
from pydantic import ValidationError
from rich import print as rprint
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table as RichTable
from rich.text import Text

from ..config.settings import Settings
from ..src.errors import DocumentUnavailable
from ..src.ingest import VerseSearch
from ..src.retrieval import NO_MATCHES_MESSAGE, match_spans
from ..src.schemas.verse import Verse

app = typer.Typer(
    name="scripture-search",
    help="Scripture Search - offline verse search with word suggestions",
)
console = Console()

HIGHLIGHT_STYLE = "bold magenta"

# Settings overrides collected by the top-level callback
_overrides: dict = {}


@app.callback()
def main(
    source: Optional[str] = typer.Option(None, "--source", "-s", help="Document path or URL"),
    cache_dir: Optional[Path] = typer.Option(None, "--cache-dir", help="Index cache directory"),
    index_version: Optional[str] = typer.Option(None, "--index-version", help="Cache version key"),
    verbose: bool = typer.Option(False, "--verbose", "-V", help="Show ingestion logs"),
):
    """Offline full-text search over a single scripture document."""
    _overrides.clear()
    if source is not None:
        _overrides["document_source"] = source
    if cache_dir is not None:
        _overrides["cache_dir"] = cache_dir
    if index_version is not None:
        _overrides["index_version"] = index_version

    if verbose:
        logging.basicConfig(
            level=logging.INFO,
            format="%(message)s",
            handlers=[RichHandler(console=console, show_path=False)],
            force=True,
        )


def _make_engine() -> VerseSearch:
    try:
        settings = Settings(**_overrides)
    except ValidationError as e:
        rprint("[red]Invalid configuration:[/red]")
        for error in e.errors():
            field = ".".join(str(part) for part in error["loc"])
            rprint(f"  {escape(field)}: {escape(error['msg'])}")
        raise typer.Exit(1)
    return VerseSearch(settings=settings)


def _start(engine: VerseSearch, rebuild: bool = False):
    """Run ingestion, echoing status changes. Exits on failure."""
    engine.subscribe(lambda status, detail: console.print(f"[dim]{status.value}[/dim]"))
    try:
        return asyncio.run(engine.start(rebuild=rebuild))
    except DocumentUnavailable as e:
        rprint(f"[red]{engine.status_message}[/red]")
        rprint(f"[dim]{escape(str(e))}[/dim]")
        raise typer.Exit(1)


def render_verse_text(verse: Verse, query: str) -> Text:
    """Verse text with every occurrence of ``query`` emphasized."""
    text = Text(verse.text)
    for start, end in match_spans(verse.text, query):
        text.stylize(HIGHLIGHT_STYLE, start, end)
    return text


@app.command()
def ingest(
    rebuild: bool = typer.Option(False, "--rebuild", help="Ignore the cached index"),
):
    """
    Build the index and cache it.

    Examples:
        # Use the cached index when present
        scripture-search ingest

        # Force a fresh parse of the document
        scripture-search --source ./bom.txt ingest --rebuild
    """
    engine = _make_engine()
    result = _start(engine, rebuild=rebuild)

    origin = "cache" if result.from_cache else engine.settings.document_source
    rprint(f"\n[green]✓ Index ready:[/green] {result.version}")
    rprint(f"  Source: {origin}")
    rprint(f"  Verses: {result.num_verses:,}")
    rprint(f"  Words: {result.num_words:,}")
    if result.index.is_empty:
        rprint("[yellow]  No verses found; check the front matter split settings[/yellow]")
    if not result.persisted:
        rprint("[yellow]  Index could not be cached; it will be rebuilt next time[/yellow]")


@app.command()
def search(
    query: str = typer.Argument(..., help="Phrase to search for"),
    show_ids: bool = typer.Option(False, "--ids", help="Show verse IDs"),
):
    """
    Search verse text (case-insensitive).

    Examples:
        scripture-search search "wherefore"
        scripture-search search "and it came to pass" --ids
    """
    if not query.strip():
        rprint("[yellow]Enter a word or phrase to search[/yellow]")
        raise typer.Exit(1)

    engine = _make_engine()
    _start(engine)

    result = engine.search(query)
    if result is None or not result.verses:
        rprint(f"[yellow]{NO_MATCHES_MESSAGE}[/yellow]")
        return

    for verse in result.verses:
        heading = f"[cyan]{escape(verse.reference)}[/cyan]"
        if show_ids:
            heading = f"[dim]#{verse.id}[/dim] {heading}"
        rprint(heading)
        console.print(render_verse_text(verse, query))
        rprint()

    style = "yellow" if result.truncated else "green"
    rprint(f"[{style}]{result.message}[/{style}]")


@app.command()
def suggest(
    prefix: str = typer.Argument(..., help="Beginning of a word"),
):
    """
    Suggest vocabulary words starting with a prefix.
    """
    engine = _make_engine()
    _start(engine)

    words = engine.suggest(prefix)
    if not words:
        if len(prefix) < engine.settings.min_prefix_length:
            rprint(f"[yellow]Type at least {engine.settings.min_prefix_length} letters[/yellow]")
        else:
            rprint("[yellow]No suggestions[/yellow]")
        return

    console.print("  ".join(words))


@app.command()
def verse(
    verse_id: int = typer.Argument(..., help="Verse ID (see search --ids)"),
    query: Optional[str] = typer.Option(None, "--highlight", "-h", help="Phrase to emphasize"),
):
    """
    Show one verse in full.
    """
    engine = _make_engine()
    _start(engine)

    found = engine.get_verse(verse_id)
    if found is None:
        rprint(f"[red]Verse not found: {verse_id}[/red]")
        raise typer.Exit(1)

    body = render_verse_text(found, query) if query else Text(found.text)
    console.print(Panel(body, title=found.reference, title_align="left"))


@app.command()
def legal():
    """
    Show the document's front matter (legal and licensing text).
    """
    engine = _make_engine()
    _start(engine)

    front_matter = engine.get_front_matter().strip()
    if not front_matter:
        rprint("[yellow]No front matter[/yellow]")
        return
    console.print(Panel(Text(front_matter), title="Legal"))


@app.command()
def info():
    """
    Show index and cache status.
    """
    engine = _make_engine()
    settings = engine.settings

    table = RichTable(title="Scripture Search")
    table.add_column("Setting", style="cyan")
    table.add_column("Value")

    table.add_row("Document", settings.document_source)
    table.add_row("Source type", "URL" if settings.is_remote_source() else "file")
    table.add_row("Split strategy", settings.split_strategy)
    table.add_row("Cache version", settings.index_version)

    cached = engine.cache.load(settings.index_version)
    if cached is None:
        table.add_row("Cached index", "✗ not found")
    else:
        table.add_row("Cached index", "✓ present")
        table.add_row("Verses", f"{len(cached.verses):,}")
        table.add_row("Words", f"{len(cached.vocabulary):,}")
        table.add_row("Front matter", f"{len(cached.front_matter):,} chars")

    console.print(table)


if __name__ == "__main__":
    app()
