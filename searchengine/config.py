"""Centralised settings for the search engine.

Crawl targets, crawler politeness, search tuning and storage location.
Every field reads an environment variable; a `.env` next to the package
is loaded on import and never overrides variables already set.
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from urllib.parse import urlparse

from dotenv import load_dotenv

# Load .env from the project root (one level up from this package)
_env_path = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(_env_path, override=False)


DEFAULT_STOP_WORDS = frozenset(
    {
        "a", "an", "the", "and", "or", "but", "if", "of", "at", "by", "for",
        "with", "about", "to", "from", "in", "on", "into", "over", "under",
        "is", "are", "was", "were", "be", "been", "being", "it", "its",
        "this", "that", "these", "those", "as", "so", "not", "no", "do",
        "does", "did", "also", "than", "then", "there", "here",
    }
)


@dataclass
class SiteConfig:
    """One entry of the configured site list."""

    url: str
    name: str


def _env_list(name: str, default: str = "") -> list[str]:
    raw = os.environ.get(name, default)
    return [item.strip() for item in raw.split(",") if item.strip()]


def _env_sites() -> list[SiteConfig]:
    raw = os.environ.get("SEARCH_SITES", "[]")
    return [SiteConfig(url=item["url"], name=item.get("name", item["url"])) for item in json.loads(raw)]


def _env_stop_words() -> frozenset[str]:
    words = _env_list("STOP_WORDS")
    return frozenset(w.lower() for w in words) if words else DEFAULT_STOP_WORDS


@dataclass
class Settings:
    # ------------------------------------------------------------------
    # Workspace / storage
    # ------------------------------------------------------------------
    workspace_dir: Path = field(
        default_factory=lambda: Path(
            os.environ.get("SEARCH_WORKSPACE", Path.home() / ".searchengine_data")
        )
    )

    @property
    def db_path(self) -> Path:
        """The index database inside the workspace."""
        return self.workspace_dir / "index.db"

    @property
    def schema_path(self) -> Path:
        """DDL shipped alongside the ``db`` package."""
        return Path(__file__).resolve().parent / "db" / "schema.sql"

    # ------------------------------------------------------------------
    # Sites
    # ------------------------------------------------------------------
    sites: list[SiteConfig] = field(default_factory=_env_sites)
    extra_allowed_domains: list[str] = field(
        default_factory=lambda: _env_list("ALLOWED_DOMAINS")
    )

    @property
    def allowed_domains(self) -> list[str]:
        """Hosts the crawler may touch: configured sites plus ``ALLOWED_DOMAINS``."""
        domains = [urlparse(site.url).netloc.lower() for site in self.sites]
        for domain in self.extra_allowed_domains:
            if domain.lower() not in domains:
                domains.append(domain.lower())
        return domains

    # ------------------------------------------------------------------
    # Crawler
    # ------------------------------------------------------------------
    worker_pool_size: int = field(
        default_factory=lambda: int(os.environ.get("WORKER_POOL_SIZE", "10"))
    )
    politeness_delay_min: float = field(
        default_factory=lambda: float(os.environ.get("POLITENESS_DELAY_MIN", "0.5"))
    )
    politeness_delay_max: float = field(
        default_factory=lambda: float(os.environ.get("POLITENESS_DELAY_MAX", "60.0"))
    )
    request_timeout: float = field(
        default_factory=lambda: float(os.environ.get("REQUEST_TIMEOUT", "5.0"))
    )
    user_agent: str = field(
        default_factory=lambda: os.environ.get(
            "CRAWLER_USER_AGENT",
            "Mozilla/5.0 (compatible; LemmaSearchBot/1.0; +https://example.com/bot)",
        )
    )
    referrer: str = field(
        default_factory=lambda: os.environ.get("CRAWLER_REFERRER", "http://www.google.com")
    )
    max_storage_errors: int = field(
        default_factory=lambda: int(os.environ.get("MAX_STORAGE_ERRORS", "3"))
    )

    # ------------------------------------------------------------------
    # Search
    # ------------------------------------------------------------------
    commonness_threshold: float = field(
        default_factory=lambda: float(os.environ.get("COMMONNESS_THRESHOLD", "0.5"))
    )
    snippet_max_length: int = field(
        default_factory=lambda: int(os.environ.get("SNIPPET_MAX_LENGTH", "300"))
    )
    stop_words: frozenset[str] = field(default_factory=_env_stop_words)

    # ------------------------------------------------------------------
    # Logging
    # ------------------------------------------------------------------
    log_level: str = field(
        default_factory=lambda: os.environ.get("LOG_LEVEL", "INFO")
    )

    def ensure_workspace(self) -> None:
        """mkdir -p the workspace."""
        self.workspace_dir.mkdir(parents=True, exist_ok=True)


# Module-level singleton; import this everywhere:
#   from searchengine.config import settings
settings = Settings()
