"""
Community Search CLI - Operator command-line interface.

Commands:
- db init: Create the content store schema
- db load: Load content rows from a JSON file
- search: Run a search against the content store
- suggest: Show autocomplete suggestions
- serve: Run the API server
"""

# Standard library imports
import asyncio
import json
import sys
import logging

# Third-party imports
import click
from rich.console import Console
from rich.table import Table
from rich.progress import Progress, SpinnerColumn, TextColumn

from community_search.config.search_config import DATABASE_PATH, API_CONFIG, LOG_LEVEL
from community_search.search.errors import SearchError
from community_search.store.database import init_database

console = Console()

# Configure logging
logging.basicConfig(
    level=LOG_LEVEL,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)


def _engine(db_path: str):
    from community_search.search.search_engine import SearchEngine
    from community_search.store.sqlite_store import SqliteContentStore

    return SearchEngine(store=SqliteContentStore(db_path))


@click.group()
def cli():
    """Community Search CLI - Manage the content store and run searches."""
    pass


# ============================================================================
# Database Commands
# ============================================================================

@cli.group()
def db():
    """Manage the content store."""
    pass


@db.command(name='init')
@click.option('--db-path', '-d', default=DATABASE_PATH, help='Database path')
def db_init(db_path):
    """Initialize the database schema."""
    console.print("\n[bold cyan]Initializing Database[/bold cyan]\n")

    try:
        database = init_database(db_path)
        database.close()
        console.print(f"[green]✓[/green] Database initialized at: {db_path}")
        console.print("[green]✓[/green] Schema created successfully\n")
    except Exception as e:
        console.print(f"[red]Error initializing database: {e}[/red]\n")
        sys.exit(1)


@db.command(name='load')
@click.argument('json_file', type=click.Path(exists=True, dir_okay=False))
@click.option('--db-path', '-d', default=DATABASE_PATH, help='Database path')
def db_load(json_file, db_path):
    """
    Load rows from a JSON file.

    The file maps table names to lists of row objects, e.g.
    {"content_articles": [...], "search_synonyms": [...]}.
    """
    console.print(f"\n[bold cyan]Loading content from[/bold cyan] {json_file}\n")

    with open(json_file, 'r', encoding='utf-8') as f:
        data = json.load(f)

    if not isinstance(data, dict):
        console.print("[red]Expected a JSON object mapping table names to rows[/red]\n")
        sys.exit(1)

    table = Table(title="Loaded Rows")
    table.add_column("Table", style="cyan")
    table.add_column("Rows", style="green")

    database = init_database(db_path)
    try:
        for table_name, rows in data.items():
            count = database.insert(table_name, rows)
            table.add_row(table_name, str(count))
    except Exception as e:
        console.print(f"[red]Error loading content: {e}[/red]\n")
        sys.exit(1)
    finally:
        database.close()

    console.print(table)


# ============================================================================
# Search Commands
# ============================================================================

@cli.command()
@click.argument('query')
@click.option('--type', '-t', 'content_types', multiple=True,
              help='Content type (articles, questions, forum_posts, feature_requests); repeatable')
@click.option('--category', '-c', help='Filter by category id')
@click.option('--limit', '-l', default=10, type=int, help='Maximum results to return')
@click.option('--offset', '-o', default=0, type=int, help='Results to skip')
@click.option('--db-path', default=DATABASE_PATH, help='Database path')
def search(query, content_types, category, limit, offset, db_path):
    """
    Search community content.

    Example usage:
        community-search search "how do I reset my password"
        community-search search "dark mode" --type feature_requests
        community-search search "billing" --category 3 --limit 20
    """
    console.print(f"\n[bold cyan]Searching for:[/bold cyan] '{query}'\n")

    engine = _engine(db_path)

    try:
        search_query = engine.build_query(
            text=query,
            content_types=list(content_types) or None,
            category_id=category,
            limit=limit,
            offset=offset
        )

        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            console=console
        ) as progress:
            task = progress.add_task("Searching...", total=None)
            outcome = asyncio.run(engine.search(search_query))
            progress.remove_task(task)

    except SearchError as e:
        console.print(f"[red]Search error: {e.message}[/red]\n")
        sys.exit(1)
    finally:
        engine.close()

    payload = outcome.payload
    console.print(f"[bold green]{payload['total']} results[/bold green] in {payload['searchTime']}ms")
    console.print(f"[dim]Key terms: {', '.join(outcome.terms) or '-'}[/dim]")
    if outcome.fallback_used:
        console.print("[yellow]Primary search found nothing; showing fallback results[/yellow]")
    if outcome.degraded_sources:
        console.print(f"[yellow]Degraded sources: {', '.join(outcome.degraded_sources)}[/yellow]")
    console.print()

    if not payload['results']:
        console.print("[yellow]No results found. Try a shorter or different query.[/yellow]\n")
        return

    table = Table()
    table.add_column("#", style="dim")
    table.add_column("Type", style="yellow")
    table.add_column("Title", style="cyan", max_width=50)
    table.add_column("Rank", style="green")
    table.add_column("Match", style="blue")
    table.add_column("Views", style="magenta")

    for i, result in enumerate(payload['results'], offset + 1):
        title = result['title']
        table.add_row(
            str(i),
            result['content_type'],
            title[:47] + "..." if len(title) > 50 else title,
            f"{result['rank']:g}",
            result['match_type'],
            str(result['view_count'])
        )

    console.print(table)

    if payload['hasMore']:
        console.print(f"[dim]More results available: use --offset {offset + limit}[/dim]")

    if payload['relatedArticles']:
        console.print("\n[bold]Related articles:[/bold]")
        for article in payload['relatedArticles']:
            console.print(f"  • {article['title']} [dim]({article['view_count']} views)[/dim]")

    if payload['suggestions']:
        console.print("\n[bold]Suggestions:[/bold]")
        for suggestion in payload['suggestions']:
            console.print(f"  • {suggestion['text']} [dim]({suggestion['type']})[/dim]")

    console.print()


@cli.command()
@click.argument('query')
@click.option('--limit', '-l', default=10, type=int, help='Maximum suggestions')
@click.option('--db-path', default=DATABASE_PATH, help='Database path')
def suggest(query, limit, db_path):
    """Show autocomplete suggestions for a partial query."""
    engine = _engine(db_path)

    try:
        data = asyncio.run(engine.autocomplete(query, limit))
    except SearchError as e:
        console.print(f"[red]Autocomplete error: {e.message}[/red]\n")
        sys.exit(1)
    finally:
        engine.close()

    if not data['suggestions']:
        console.print("\n[yellow]No suggestions.[/yellow]\n")
        return

    table = Table(title=f"Suggestions for '{query}'")
    table.add_column("Suggestion", style="cyan")
    table.add_column("Source", style="yellow")
    table.add_column("Weight", style="green")

    for suggestion in data['suggestions']:
        table.add_row(suggestion['text'], suggestion['type'], f"{suggestion['count']:g}")

    console.print(table)


# ============================================================================
# Server Commands
# ============================================================================

@cli.command()
@click.option('--host', default=API_CONFIG['host'], help='Bind address')
@click.option('--port', default=API_CONFIG['port'], type=int, help='Bind port')
@click.option('--reload', is_flag=True, default=API_CONFIG['reload'], help='Auto-reload on code changes')
def serve(host, port, reload):
    """Run the search API server."""
    import uvicorn

    console.print(f"\n[bold cyan]Starting Community Search API on {host}:{port}[/bold cyan]\n")

    uvicorn.run(
        "community_search.api.main:app",
        host=host,
        port=port,
        reload=reload,
        log_level=API_CONFIG['log_level']
    )


if __name__ == '__main__':
    cli()
