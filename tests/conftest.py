"""Shared fixtures for page2atom tests."""

from datetime import datetime, timezone
from pathlib import Path

import httpx
import pytest

from page2atom.config import FetcherConfig
from page2atom.core.fetcher import PageFetcher
from page2atom.models import Entry, Feed, FeedSpec, Link

FIXTURES_DIR = Path(__file__).parent / "fixtures"

PYRAX_URL = "https://github.com/everett-toews/test/blob/master/README.md"


def pyrax_record(**overrides) -> dict:
    """Feed record for the pyrax release notes page, keyed like the feeds file."""
    record = {
        "title": "pyrax",
        "description": "The Rackspace Python SDK",
        "author": "The Rackspace DRG",
        "url": PYRAX_URL,
        "url.home": "http://developer.rackspace.com/",
        "file": "feeds/pyrax.atom",
        "page.pattern": "<article (.*?)</article>",
        "entry.max": "20",
        "entry.pattern": '<h3>.*?href="(.*?)".*?</a>(.*?)</h3>(.*?)(?=<h3>)',
        "entry.title.group": "2",
        "entry.url.group": "1",
        "entry.content.group": "3",
    }
    record.update(overrides)
    return record


def make_entry(entry_id: str, title: str = "", summary=None, updated=None) -> Entry:
    return Entry(
        id=entry_id,
        title=title or entry_id,
        summary=summary,
        updated=updated or datetime(2026, 1, 1, tzinfo=timezone.utc),
    )


def make_feed(entry_ids: list[str], updated=None, **kwargs) -> Feed:
    fields = {
        "id": "pyrax",
        "title": "pyrax",
        "subtitle": "The Rackspace Python SDK",
        "author": "The Rackspace DRG",
        "links": (Link(href=PYRAX_URL, rel="self"), Link(href="http://developer.rackspace.com/")),
        "updated": updated or datetime(2026, 1, 1, tzinfo=timezone.utc),
        "entries": tuple(make_entry(entry_id) for entry_id in entry_ids),
    }
    fields.update(kwargs)
    return Feed(**fields)


@pytest.fixture
def now() -> datetime:
    """Fixed current time."""
    return datetime(2026, 3, 14, 15, 9, 26, tzinfo=timezone.utc)


@pytest.fixture
def pyrax_spec(tmp_path) -> FeedSpec:
    """FeedSpec for the pyrax release notes, writing under tmp_path."""
    return FeedSpec.model_validate(pyrax_record(file=str(tmp_path / "pyrax.atom")))


@pytest.fixture
def pyrax_page() -> str:
    """Raw pyrax release notes page, line breaks intact."""
    return (FIXTURES_DIR / "pyrax.RELEASENOTES.html").read_text(encoding="utf-8")


@pytest.fixture
def fetcher_config() -> FetcherConfig:
    """Fetcher settings without retry delays."""
    return FetcherConfig(max_retries=2, retry_delay_seconds=0)


@pytest.fixture
def page_server():
    """Serve pages from a dict of URL to (status, body) through a mock transport."""

    class PageServer:
        def __init__(self):
            self.pages: dict[str, tuple[int, str]] = {}
            self.requests: list[httpx.Request] = []

        def serve(self, url: str, body: str, status: int = 200) -> None:
            self.pages[url] = (status, body)

        def handler(self, request: httpx.Request) -> httpx.Response:
            self.requests.append(request)
            status, body = self.pages.get(str(request.url), (404, "Not Found"))
            return httpx.Response(status, text=body)

        def fetcher(self, config: FetcherConfig) -> PageFetcher:
            return PageFetcher(
                config=config,
                transport=httpx.MockTransport(self.handler),
                sleep=lambda seconds: None,
            )

    return PageServer()
