"""Search engine CLI: entry-point for indexing and search.

Usage:
    searchengine --help

Command groups:
    db       → create the index database
    index    → crawl the configured sites, or re-index a single page
    search   → ranked search over the index
    sites    → indexing status of every site
    scrape   → fetch one URL and show what the crawler would index
"""

from __future__ import annotations

from typing import Optional

import typer

from searchengine.config import settings
from searchengine.db import get_connection, init_db
from searchengine.db.models import SiteStatus
from searchengine.db.sites import list_sites
from searchengine.errors import FetchError
from searchengine.indexing.service import IndexingService
from searchengine.logging_setup import configure_logging
from searchengine.search.engine import SearchEngine
from searchengine.text.pipeline import default_pipeline

app = typer.Typer(
    name="searchengine",
    help="Crawl configured sites and search their lemma index.",
    no_args_is_help=True,
)


@app.callback()
def main(
    log_level: str = typer.Option(settings.log_level, "--log-level", help="Logging level."),
) -> None:
    configure_logging(log_level)


# ---------------------------------------------------------------------------
# DB commands
# ---------------------------------------------------------------------------
db_app = typer.Typer(help="Database operations.", no_args_is_help=True)
app.add_typer(db_app, name="db")


@db_app.command("init")
def db_init() -> None:
    """Create or upgrade the index database."""
    conn = get_connection()
    init_db(conn)
    conn.close()
    typer.echo(f"[db init] Database ready at {settings.db_path}")


# ---------------------------------------------------------------------------
# Index commands
# ---------------------------------------------------------------------------
index_app = typer.Typer(help="Indexing operations.", no_args_is_help=True)
app.add_typer(index_app, name="index")


def _service() -> IndexingService:
    return IndexingService(default_pipeline(settings.stop_words), settings=settings)


@index_app.command("run")
def index_run(
    reindex: bool = typer.Option(False, "--reindex", help="Log the run as a re-index."),
) -> None:
    """Index every configured site and wait for the crawl to finish."""
    service = _service()
    response = service.start_reindexing() if reindex else service.start_indexing()
    if not response.result:
        typer.echo(f"[index run] {response.error}")
        raise typer.Exit(1)

    typer.echo(f"[index run] Crawling {len(settings.sites)} site(s) … (Ctrl-C to stop)")
    try:
        statuses = service.wait()
    except KeyboardInterrupt:
        service.stop_indexing()
        statuses = service.wait()

    failed = False
    for url, status in statuses.items():
        typer.echo(f"  {status.value:<9} {url}")
        failed = failed or status is SiteStatus.FAILED
    if failed:
        raise typer.Exit(1)


@index_app.command("page")
def index_page(
    url: str = typer.Argument(..., help="URL of a page on a configured site."),
) -> None:
    """Fetch and re-index a single page."""
    response = _service().index_page(url)
    if not response.result:
        typer.echo(f"[index page] {response.error}")
        raise typer.Exit(1)
    typer.echo(f"[index page] Indexed {url}")


# ---------------------------------------------------------------------------
# Search / status
# ---------------------------------------------------------------------------
@app.command("search")
def search(
    query: str = typer.Argument(..., help="Search query."),
    site: Optional[str] = typer.Option(None, "--site", help="Restrict to one site URL."),
    offset: int = typer.Option(0, min=0, help="Results to skip."),
    limit: int = typer.Option(20, min=1, help="Maximum results to show."),
) -> None:
    """Ranked search over the index."""
    conn = get_connection()
    init_db(conn)
    try:
        engine = SearchEngine(conn, default_pipeline(settings.stop_words), settings=settings)
        response = engine.search(query, site=site, offset=offset, limit=limit)
    finally:
        conn.close()

    if not response.result:
        typer.echo(f"[search] {response.error}")
        raise typer.Exit(1)
    if not response.data:
        typer.echo(f"[search] No results for {query!r}.")
        return

    typer.echo(f"[search] {response.count} result(s) for {query!r}")
    for hit in response.data:
        typer.echo(f"  {hit.relevance:.3f}  {hit.site}{hit.uri}  {hit.title!r}")
        typer.echo(f"         {hit.snippet}")


@app.command("sites")
def sites() -> None:
    """Show the indexing status of every site."""
    conn = get_connection()
    init_db(conn)
    try:
        rows = list_sites(conn)
    finally:
        conn.close()

    if not rows:
        typer.echo("[sites] No sites indexed yet.")
        return
    for site in rows:
        error = f"  ({site.last_error})" if site.last_error else ""
        typer.echo(f"  {site.status.value:<9} {site.url}  {site.name!r}{error}")


@app.command("scrape")
def scrape(
    url: str = typer.Argument(..., help="URL to fetch."),
) -> None:
    """Fetch a URL and print what the crawler would extract from it."""
    from searchengine.scraper import fetch_page

    typer.echo(f"[scrape] Fetching {url!r} …")
    try:
        page = fetch_page(url)
    except FetchError as exc:
        typer.echo(f"[scrape] {exc}")
        raise typer.Exit(1)
    typer.echo(f"[scrape] HTTP {page.status_code}")
    typer.echo(f"[scrape] Title  : {page.title or '(none)'}")
    typer.echo(f"[scrape] Words  : {len(page.text.split())}")
    typer.echo(f"[scrape] Links  : {len(page.links)}")
    typer.echo("")
    typer.echo(page.text)


# ---------------------------------------------------------------------------
# Entry-point
# ---------------------------------------------------------------------------
if __name__ == "__main__":
    app()
