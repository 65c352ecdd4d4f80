import os

# Settings are read at import time, so these must be set before app imports.
os.environ.setdefault("RETRY_BASE_DELAY", "0")
os.environ.setdefault("RETRY_MAX_DELAY", "0")
os.environ.setdefault("DEFAULT_COUNTRY", "us")
os.environ.setdefault("LOG_LEVEL", "WARNING")

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import pytest

from jobs.ingest.errors import UpstreamUnavailable


class FakeGateway:
    """
    Stand-in for GooglePlayGateway. Per-language results are either a list of
    raw records or an exception instance to raise.
    """

    def __init__(self, by_lang: Optional[Dict[str, Any]] = None, default: Any = None):
        self.by_lang = by_lang or {}
        self.default = default if default is not None else []
        self.review_calls: List[tuple] = []
        self.pages_requested: List[int] = []
        self.app_info: Any = {"appId": "com.whatsapp", "title": "WhatsApp Messenger"}
        self.search_results: Any = [{"appId": "com.whatsapp", "title": "WhatsApp Messenger"}]
        self.suggestions: Any = ["whatsapp", "whatsapp business"]
        self.last_search: Optional[tuple] = None

    def fetch_reviews(self, app_id, country, lang, count=200, max_pages=1):
        self.review_calls.append((app_id, country, lang, count))
        self.pages_requested.append(max_pages)
        result = self.by_lang.get(lang, self.default)
        if isinstance(result, Exception):
            raise result
        return list(result)

    def _answer(self, value):
        if isinstance(value, Exception):
            raise value
        return value

    def fetch_app_info(self, app_id, lang="en", country="us"):
        return self._answer(self.app_info)

    def search_apps(self, query, limit=20, lang="en", country="us"):
        self.last_search = (query, limit, lang, country)
        return self._answer(self.search_results)

    def suggest(self, query, lang="en", country="us"):
        return self._answer(self.suggestions)


def upstream_down(target: str = "com.whatsapp") -> UpstreamUnavailable:
    return UpstreamUnavailable(f"Failed to fetch reviews for {target}", operation="fetch reviews", target=target)


@pytest.fixture
def raw_reviews() -> List[Dict[str, Any]]:
    """Three records shaped like google_play_scraper.reviews() output."""
    return [
        {
            "reviewId": "gp:AOqpTOE-1",
            "userName": "Jane Doe",
            "userImage": "https://play-lh.googleusercontent.com/a/jane",
            "content": "Works great, calls are clear.",
            "score": 5,
            "thumbsUpCount": 12,
            "reviewCreatedVersion": "2.24.1.6",
            "at": datetime(2025, 3, 2, 9, 30, tzinfo=timezone.utc),
            "replyContent": None,
            "repliedAt": None,
            "appVersion": "2.24.1.6",
        },
        {
            "reviewId": "gp:AOqpTOE-2",
            "userName": "Sam",
            "content": "Backups keep failing.",
            "score": 2,
            "thumbsUpCount": 3,
            "at": datetime(2025, 3, 1, 18, 0, tzinfo=timezone.utc),
            "replyContent": "Please contact support.",
            "repliedAt": datetime(2025, 3, 1, 20, 0, tzinfo=timezone.utc),
            "appVersion": None,
        },
        {
            "reviewId": "gp:AOqpTOE-3",
            "userName": "Kai",
            "content": "Ok",
            "score": 3,
            "thumbsUpCount": 0,
            "at": datetime(2025, 2, 27, 7, 15, tzinfo=timezone.utc),
            "appVersion": "2.24.1.5",
        },
    ]


@pytest.fixture
def fake_gateway() -> FakeGateway:
    return FakeGateway()


@pytest.fixture
def client(fake_gateway):
    from fastapi.testclient import TestClient

    from apps.api.app.dependencies import get_gateway
    from apps.api.app.main import app

    app.dependency_overrides[get_gateway] = lambda: fake_gateway
    with TestClient(app, raise_server_exceptions=False) as c:
        yield c
    app.dependency_overrides.clear()
