"""Crawl coordinator: indexing runs over every configured site.

One indexing run
----------------
``start_indexing`` prepares a row per configured site (created, or reset
in place), then submits one crawl task per site to a bounded thread pool
and returns immediately.  Each task walks its site breadth-first on its
own DB connection and reports the final :class:`SiteStatus`.

A run owns a :class:`CancellationToken`.  ``stop_indexing`` cancels it and
marks every ``INDEXING`` site ``FAILED``.  Tasks notice the token before
taking the next URL off their queue, while sleeping between requests, and
once more before marking their site ``INDEXED``; in each case the task
fails its own site too, whichever of the two writes lands first.
"""

from __future__ import annotations

import logging
import random
import sqlite3
import threading
from collections import deque
from concurrent.futures import Future, ThreadPoolExecutor
from concurrent.futures import wait as wait_futures
from dataclasses import dataclass
from typing import Callable, Optional

import httpx

from searchengine.config import Settings, SiteConfig, settings as default_settings
from searchengine.db import get_connection, init_db
from searchengine.db.models import Site, SiteStatus
from searchengine.db.sites import (
    create_site,
    fail_indexing_sites,
    find_site_by_url,
    finish_site,
    get_site,
    list_sites,
    reset_site,
    touch_site,
)
from searchengine.errors import FetchError, SiteTraversalError, StorageError
from searchengine.indexing.cancellation import CancellationToken
from searchengine.indexing.urls import (
    get_domain,
    is_crawlable,
    is_same_site,
    is_valid_url,
    match_site,
    normalize_url,
    site_path,
)
from searchengine.indexing.writer import save_page
from searchengine.scraper.fetcher import build_client, fetch_page
from searchengine.scraper.models import FetchedPage
from searchengine.text.pipeline import TextPipeline

logger = logging.getLogger(__name__)

STOPPED_BY_USER = "stopped by user"


@dataclass
class IndexingResponse:
    """Outcome of a coordinator command; ``error`` is set when ``result`` is false."""

    result: bool
    error: Optional[str] = None


class IndexingService:
    """Runs, stops and reports on indexing of the configured sites."""

    def __init__(
        self,
        pipeline: TextPipeline,
        settings: Settings = default_settings,
        connect: Optional[Callable[[], sqlite3.Connection]] = None,
        fetch: Callable[[str, httpx.Client], FetchedPage] = fetch_page,
        client_factory: Optional[Callable[[], httpx.Client]] = None,
    ) -> None:
        self.pipeline = pipeline
        self.settings = settings
        self._connect = connect or (lambda: get_connection(settings.db_path))
        self._fetch = fetch
        self._client_factory = client_factory or (lambda: build_client(config=settings))

        self._lock = threading.Lock()
        self._token = CancellationToken()
        self._futures: dict[str, Future] = {}

        conn = self._connect()
        try:
            init_db(conn)
        finally:
            conn.close()

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    @property
    def is_running(self) -> bool:
        with self._lock:
            return self._running()

    def _running(self) -> bool:
        return any(not f.done() for f in self._futures.values())

    def start_indexing(self) -> IndexingResponse:
        """Index every configured site from scratch."""
        return self._start(reindex=False)

    def start_reindexing(self) -> IndexingResponse:
        """Re-index every configured site, discarding what was stored."""
        return self._start(reindex=True)

    def stop_indexing(self) -> IndexingResponse:
        """Cancel the current run and fail every site still being indexed."""
        with self._lock:
            if not self._running():
                return IndexingResponse(False, "Indexing is not running")
            self._token.cancel()

        conn = self._connect()
        try:
            stopped = fail_indexing_sites(conn, STOPPED_BY_USER)
        finally:
            conn.close()

        for site in stopped:
            logger.info(f"Indexing stopped by user for {site.url}")
        return IndexingResponse(True)

    def wait(self, timeout: Optional[float] = None) -> dict[str, SiteStatus]:
        """Block until the current run ends (or *timeout*) and report per-site status."""
        with self._lock:
            futures = dict(self._futures)
        wait_futures(list(futures.values()), timeout=timeout)

        statuses: dict[str, SiteStatus] = {}
        for url, future in futures.items():
            if not future.done():
                statuses[url] = SiteStatus.INDEXING
            elif future.exception() is not None:
                statuses[url] = SiteStatus.FAILED
            else:
                statuses[url] = future.result()
        return statuses

    def has_indexed_sites(self) -> bool:
        """``True`` once at least one site finished a full crawl."""
        conn = self._connect()
        try:
            return bool(list_sites(conn, SiteStatus.INDEXED))
        finally:
            conn.close()

    def site_statuses(self) -> list[Site]:
        conn = self._connect()
        try:
            return list_sites(conn)
        finally:
            conn.close()

    def index_page(self, url: str) -> IndexingResponse:
        """Fetch and (re)index one page of a configured site."""
        url = url.strip()
        if not is_valid_url(url):
            logger.error(f"Invalid URL format: {url}")
            return IndexingResponse(False, "Invalid URL format")

        config = self._site_config_for(url)
        if config is None:
            logger.error(f"Page is outside the configured sites: {url}")
            return IndexingResponse(
                False, "This page is outside the sites listed in the configuration"
            )

        conn = self._connect()
        client = self._client_factory()
        try:
            try:
                fetched = self._fetch(url, client)
            except FetchError as exc:
                logger.error(str(exc))
                return IndexingResponse(False, "Failed to load the page")
            if not fetched.is_success:
                logger.warning(f"Not indexed {url} ({fetched.status_code})")
                return IndexingResponse(False, f"Page answered with status {fetched.status_code}")

            # The site row is only created once there is a page to store.
            site = find_site_by_url(conn, config.url)
            created = site is None
            if site is None:
                site = create_site(conn, config.url, config.name)

            try:
                self._store(conn, site, fetched)
            except StorageError as exc:
                logger.error(str(exc))
                if created:
                    finish_site(conn, site.id, SiteStatus.FAILED, str(exc))
                return IndexingResponse(False, "Failed to store the page")

            if created:
                finish_site(conn, site.id, SiteStatus.INDEXED)
            logger.info(f"Indexed single page {url}")
            return IndexingResponse(True)
        finally:
            client.close()
            conn.close()

    # ------------------------------------------------------------------
    # Run management
    # ------------------------------------------------------------------

    def _start(self, reindex: bool) -> IndexingResponse:
        with self._lock:
            if self._running():
                return IndexingResponse(False, "Indexing is already running")
            if not self.settings.sites:
                return IndexingResponse(False, "No sites are configured")

            try:
                sites = self._prepare_sites()
            except sqlite3.Error as exc:
                logger.error(f"Could not prepare sites for indexing: {exc}")
                return IndexingResponse(False, f"Storage error: {exc}")

            self._token = CancellationToken()
            executor = ThreadPoolExecutor(
                max_workers=max(1, self.settings.worker_pool_size),
                thread_name_prefix="crawl",
            )
            self._futures = {
                site.url: executor.submit(self._crawl_site, site, self._token)
                for site in sites
            }
            # Let queued tasks run to completion without blocking the caller.
            executor.shutdown(wait=False)

        verb = "Re-indexing" if reindex else "Indexing"
        logger.info(f"{verb} started for {len(sites)} site(s)")
        return IndexingResponse(True)

    def _prepare_sites(self) -> list[Site]:
        conn = self._connect()
        try:
            sites = []
            for config in self.settings.sites:
                site = find_site_by_url(conn, config.url)
                if site is None:
                    site = create_site(conn, config.url, config.name)
                else:
                    site = reset_site(conn, site.id, config.name)
                logger.info(f"Site {site.url} cleared and set to INDEXING")
                sites.append(site)
            return sites
        finally:
            conn.close()

    def _site_config_for(self, url: str) -> Optional[SiteConfig]:
        if get_domain(url) not in self.settings.allowed_domains:
            return None
        root = match_site(url, [s.url for s in self.settings.sites])
        return next((s for s in self.settings.sites if s.url == root), None)

    # ------------------------------------------------------------------
    # Crawl task (runs on a pool thread)
    # ------------------------------------------------------------------

    def _crawl_site(self, site: Site, token: CancellationToken) -> SiteStatus:
        conn = self._connect()
        client = self._client_factory()
        try:
            return self._traverse(conn, client, site, token)
        except Exception as exc:
            logger.exception(f"Indexing failed for {site.url}")
            finish_site(conn, site.id, SiteStatus.FAILED, str(exc) or type(exc).__name__)
            return SiteStatus.FAILED
        finally:
            client.close()
            conn.close()

    def _traverse(
        self,
        conn: sqlite3.Connection,
        client: httpx.Client,
        site: Site,
        token: CancellationToken,
    ) -> SiteStatus:
        queue: deque[str] = deque([site.url])
        queued = {normalize_url(site.url)}
        visited: set[str] = set()
        storage_failures = 0

        while queue:
            if token.cancelled:
                return self._stopped(conn, site)

            url = queue.popleft()
            key = normalize_url(url)
            if key in visited:
                continue
            visited.add(key)

            if token.wait(self._politeness_delay()):
                return self._stopped(conn, site)

            try:
                fetched = self._fetch(url, client)
            except FetchError as exc:
                logger.warning(str(exc))
                continue

            if fetched.is_redirect:
                logger.info(f"Skipped redirect {url} ({fetched.status_code})")
                continue
            if fetched.is_error:
                logger.warning(f"Skipped {url} ({fetched.status_code})")
                continue
            if not fetched.is_success:
                continue

            try:
                self._store(conn, site, fetched)
            except StorageError as exc:
                storage_failures += 1
                logger.error(str(exc))
                if storage_failures >= self.settings.max_storage_errors:
                    raise SiteTraversalError(
                        f"Giving up after {storage_failures} storage errors: {exc}"
                    ) from exc
                continue
            storage_failures = 0
            touch_site(conn, site.id)

            for link in fetched.links:
                link_key = normalize_url(link)
                if link_key in visited or link_key in queued:
                    continue
                if is_crawlable(link) and is_same_site(link, site.url):
                    queued.add(link_key)
                    queue.append(link)

        if token.cancelled:
            return self._stopped(conn, site)
        if finish_site(conn, site.id, SiteStatus.INDEXED):
            logger.info(f"Indexing finished for {site.url} ({len(visited)} URLs visited)")
            return SiteStatus.INDEXED

        current = get_site(conn, site.id)
        return current.status if current else SiteStatus.FAILED

    def _stopped(self, conn: sqlite3.Connection, site: Site) -> SiteStatus:
        logger.info(f"Indexing stopped for {site.url}")
        finish_site(conn, site.id, SiteStatus.FAILED, STOPPED_BY_USER)
        return SiteStatus.FAILED

    def _store(self, conn: sqlite3.Connection, site: Site, fetched: FetchedPage) -> None:
        counts = self.pipeline.lemma_counts(fetched.text)
        path = site_path(fetched.url, site.url)
        save_page(conn, site.id, path, fetched.status_code, fetched.html, counts)
        logger.info(f"Indexed page {fetched.url}")

    def _politeness_delay(self) -> float:
        low = max(0.0, self.settings.politeness_delay_min)
        high = max(low, self.settings.politeness_delay_max)
        return random.uniform(low, high)
