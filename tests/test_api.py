"""Tests for the FastAPI layer.

Uses FastAPI's ``TestClient`` against an app whose workspace points at
``tmp_path``.  After startup the indexing service is swapped for a
``MagicMock`` and the text pipeline for the dictionary pipeline, so no
crawl or NLTK lookup ever runs.
"""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient

from searchengine.api.app import create_app
from searchengine.db.models import Site, SiteStatus
from searchengine.db.sites import create_site
from searchengine.indexing.service import IndexingResponse, IndexingService
from searchengine.indexing.writer import save_page


@pytest.fixture()
def app(tmp_path, monkeypatch):
    monkeypatch.setattr("searchengine.config.settings.workspace_dir", tmp_path)
    return create_app()


@pytest.fixture()
def client(app, pipeline):
    with TestClient(app) as c:
        service = MagicMock(spec=IndexingService)
        service.is_running = False
        app.state.indexing = service
        app.state.pipeline = pipeline
        yield c


@pytest.fixture()
def service(app, client) -> MagicMock:
    return app.state.indexing


# ---------------------------------------------------------------------------
# Lifespan
# ---------------------------------------------------------------------------

def test_startup_creates_database(tmp_path, app):
    with TestClient(app):
        assert isinstance(app.state.indexing, IndexingService)
    assert (tmp_path / "index.db").exists()


# ---------------------------------------------------------------------------
# Indexing commands
# ---------------------------------------------------------------------------

class TestIndexingEndpoints:
    def test_start_indexing(self, client, service):
        service.has_indexed_sites.return_value = False
        service.start_indexing.return_value = IndexingResponse(True)

        resp = client.get("/api/startIndexing")

        assert resp.status_code == 200
        assert resp.json() == {"result": True, "error": None}
        service.start_indexing.assert_called_once_with()
        service.start_reindexing.assert_not_called()

    def test_start_reindexes_after_completed_run(self, client, service):
        service.has_indexed_sites.return_value = True
        service.start_reindexing.return_value = IndexingResponse(True)

        resp = client.get("/api/startIndexing")

        assert resp.json()["result"] is True
        service.start_reindexing.assert_called_once_with()
        service.start_indexing.assert_not_called()

    def test_start_while_running(self, client, service):
        service.has_indexed_sites.return_value = False
        service.start_indexing.return_value = IndexingResponse(False, "Indexing is already running")

        resp = client.get("/api/startIndexing")

        assert resp.status_code == 200
        assert resp.json() == {"result": False, "error": "Indexing is already running"}

    def test_stop_indexing(self, client, service):
        service.stop_indexing.return_value = IndexingResponse(False, "Indexing is not running")

        resp = client.get("/api/stopIndexing")

        assert resp.json() == {"result": False, "error": "Indexing is not running"}

    def test_index_page(self, client, service):
        service.index_page.return_value = IndexingResponse(True)

        resp = client.post("/api/indexPage", json={"url": "https://one.com/cats"})

        assert resp.json() == {"result": True, "error": None}
        service.index_page.assert_called_once_with("https://one.com/cats")

    def test_index_page_empty_url(self, client, service):
        resp = client.post("/api/indexPage", json={"url": "   "})

        assert resp.json() == {"result": False, "error": "URL is empty"}
        service.index_page.assert_not_called()

    def test_index_page_missing_body(self, client):
        resp = client.post("/api/indexPage", json={})
        assert resp.status_code == 422

    def test_status(self, client, service):
        service.site_statuses.return_value = [
            Site(id=1, url="https://one.com", name="One", status=SiteStatus.INDEXED, status_time=100),
            Site(
                id=2,
                url="https://two.com",
                name="Two",
                status=SiteStatus.FAILED,
                status_time=200,
                last_error="stopped by user",
            ),
        ]

        resp = client.get("/api/status")

        assert resp.status_code == 200
        body = resp.json()
        assert [s["status"] for s in body] == ["INDEXED", "FAILED"]
        assert body[1]["last_error"] == "stopped by user"
        assert body[0]["status_time"] == 100


# ---------------------------------------------------------------------------
# Search
# ---------------------------------------------------------------------------

class TestSearchEndpoint:
    @pytest.fixture()
    def indexed(self, app, client):
        conn = app.state.db
        site = create_site(conn, "https://one.com", "One")
        save_page(conn, site.id, "/a", 200, "<title>Cats</title><p>Cats purr.</p>", {"cat": 3, "dog": 1})
        save_page(conn, site.id, "/b", 200, "<title>Dogs</title><p>Dogs bark.</p>", {"dog": 2})
        save_page(conn, site.id, "/c", 200, "<title>Birds</title><p>Birds sing.</p>", {"bird": 1})

    def test_search(self, client, indexed):
        resp = client.get("/api/search", params={"query": "cats"})

        assert resp.status_code == 200
        body = resp.json()
        assert body["result"] is True
        assert body["error"] is None
        assert body["count"] == 1
        hit = body["data"][0]
        assert hit["site"] == "https://one.com"
        assert hit["site_name"] == "One"
        assert hit["uri"] == "/a"
        assert hit["relevance"] == 1.0
        assert "<b>Cat</b>s" in hit["snippet"]

    def test_blank_query(self, client):
        body = client.get("/api/search").json()
        assert body == {"result": False, "error": "Empty search query", "count": 0, "data": []}

    def test_unknown_site(self, client, indexed):
        body = client.get("/api/search", params={"query": "cats", "site": "https://nope.com"}).json()
        assert body["result"] is False
        assert body["error"] == "The requested site is not in the index"

    def test_no_match_is_success(self, client, indexed):
        body = client.get("/api/search", params={"query": "unicorn"}).json()
        assert body == {"result": True, "error": None, "count": 0, "data": []}

    @pytest.mark.parametrize("params", [{"offset": -1}, {"limit": 0}])
    def test_bad_pagination_rejected(self, client, params):
        resp = client.get("/api/search", params={"query": "cats", **params})
        assert resp.status_code == 422
