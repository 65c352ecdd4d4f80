import asyncio
import logging
import threading
import time

import pytest

from jobs.ingest.aggregate import ReviewAggregator
from jobs.ingest.errors import DateParseError, UpstreamUnavailable
from jobs.ingest.languages import languages_for
from tests.conftest import FakeGateway, upstream_down

APP_ID = "com.whatsapp"


def run(coro):
    return asyncio.run(coro)


def _raw(review_id, day, lang="en"):
    return {"reviewId": review_id, "date": f"2025-01-{day:02d}T00:00:00Z", "content": f"{lang} review"}


class TestSingleLanguage:

    def test_one_call_with_given_language(self, raw_reviews):
        gateway = FakeGateway({"en": raw_reviews})
        reviews = run(ReviewAggregator(gateway, count=100).aggregate(APP_ID, "US", "EN"))

        assert gateway.review_calls == [(APP_ID, "us", "en", 100)]
        assert [r["id"] for r in reviews] == ["gp:AOqpTOE-1", "gp:AOqpTOE-2", "gp:AOqpTOE-3"]

    def test_page_count_reaches_the_gateway(self):
        gateway = FakeGateway()
        run(ReviewAggregator(gateway, pages=3).aggregate(APP_ID, "us", "en"))
        assert gateway.pages_requested == [3]

    def test_duplicate_ids_within_a_page_collapse(self):
        gateway = FakeGateway({"en": [_raw("a", 1), _raw("a", 2), _raw("b", 3)]})
        reviews = run(ReviewAggregator(gateway).aggregate(APP_ID, "us", "en"))
        assert [r["id"] for r in reviews] == ["a", "b"]

    def test_upstream_failure_propagates(self):
        gateway = FakeGateway({"en": upstream_down()})
        with pytest.raises(UpstreamUnavailable):
            run(ReviewAggregator(gateway).aggregate(APP_ID, "us", "en"))


class TestFanOut:

    def test_queries_every_country_language(self):
        gateway = FakeGateway()
        run(ReviewAggregator(gateway).aggregate(APP_ID, "de"))
        assert sorted(call[2] for call in gateway.review_calls) == sorted(languages_for("de"))
        assert set(gateway.pages_requested) == {1}

    def test_partial_failure_still_returns_other_languages(self, caplog):
        langs = languages_for("us")
        by_lang = {lang: [_raw(f"{lang}-1", i + 1, lang)] for i, lang in enumerate(langs)}
        by_lang[langs[2]] = upstream_down()
        by_lang[langs[7]] = RuntimeError("socket closed")
        gateway = FakeGateway(by_lang)

        with caplog.at_level(logging.WARNING, logger="jobs.ingest.aggregate"):
            reviews = run(ReviewAggregator(gateway).aggregate(APP_ID, "us"))

        expected = {f"{lang}-1" for i, lang in enumerate(langs) if i not in (2, 7)}
        assert {r["id"] for r in reviews} == expected
        assert len(reviews) == 8
        assert sum("Skipping language" in rec.getMessage() for rec in caplog.records) == 2

    def test_every_language_failing_is_empty_not_error(self):
        gateway = FakeGateway(default=upstream_down())
        assert run(ReviewAggregator(gateway).aggregate(APP_ID, "us")) == []

    def test_every_language_empty(self):
        assert run(ReviewAggregator(FakeGateway()).aggregate(APP_ID, "fr")) == []

    def test_dedupes_across_languages_and_sorts_newest_first(self):
        gateway = FakeGateway(
            {
                "en": [_raw("shared", 5, "en"), _raw("old", 1, "en")],
                "es": [_raw("shared", 5, "es"), _raw("newest", 9, "es")],
            }
        )
        reviews = run(ReviewAggregator(gateway).aggregate(APP_ID, "us"))

        assert [r["id"] for r in reviews] == ["newest", "shared", "old"]
        # first occurrence in language order wins
        assert reviews[1]["text"] == "en review"

    def test_injected_logger_receives_failures(self):
        records = []

        class ListHandler(logging.Handler):
            def emit(self, record):
                records.append(record.getMessage())

        log = logging.getLogger("test.aggregate.injected")
        log.addHandler(ListHandler())
        log.setLevel(logging.DEBUG)
        log.propagate = False

        gateway = FakeGateway({"en": upstream_down()})
        run(ReviewAggregator(gateway, log=log).aggregate(APP_ID, "us"))

        assert any("Skipping language en" in m for m in records)

    def test_concurrency_bound_is_respected(self):
        active = 0
        peak = 0
        lock = threading.Lock()

        class SlowGateway(FakeGateway):
            def fetch_reviews(self, app_id, country, lang, count=200, max_pages=1):
                nonlocal active, peak
                with lock:
                    active += 1
                    peak = max(peak, active)
                time.sleep(0.02)
                with lock:
                    active -= 1
                return []

        run(ReviewAggregator(SlowGateway(), concurrency=2).aggregate(APP_ID, "us"))
        assert peak <= 2


class TestDateFilter:

    def test_filter_applied_after_aggregation(self):
        gateway = FakeGateway({"en": [_raw("jan1", 1), _raw("jan20", 20)]})
        reviews = run(ReviewAggregator(gateway).aggregate(APP_ID, "us", "en", "2025-01-10"))
        assert [r["id"] for r in reviews] == ["jan20"]

    def test_bad_date_aborts_before_fetching(self):
        gateway = FakeGateway({"en": [_raw("a", 1)]})
        with pytest.raises(DateParseError):
            run(ReviewAggregator(gateway).aggregate(APP_ID, "us", None, "last tuesday"))
        assert gateway.review_calls == []
