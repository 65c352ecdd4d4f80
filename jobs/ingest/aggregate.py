import asyncio
import logging
from typing import Any, Dict, List, Optional

from jobs.ingest.dates import filter_since, parse_cutoff, sort_newest_first
from jobs.ingest.dedupe import dedupe_reviews
from jobs.ingest.languages import languages_for
from jobs.ingest.normalize import normalize_reviews
from jobs.ingest.sources.google_play import GooglePlayGateway

logger = logging.getLogger(__name__)


class ReviewAggregator:
    """
    Fetches, normalizes, dedupes and date-filters reviews for one app.

    With a language: one gateway call, whose failure propagates.
    Without one: one call per candidate language of the country, run
    concurrently; a failing language contributes nothing and is only logged.
    """

    def __init__(
        self,
        gateway: GooglePlayGateway,
        count: int = 200,
        pages: int = 1,
        concurrency: int = 5,
        log: Optional[logging.Logger] = None,
    ):
        self.gateway = gateway
        self.count = count
        self.pages = max(1, pages)
        self.concurrency = max(1, concurrency)
        self.log = log or logger

    async def aggregate(
        self,
        app_id: str,
        country: str,
        lang: Optional[str] = None,
        date_expr: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        # parsed before any upstream call
        cutoff = parse_cutoff(date_expr)
        country = country.lower()

        if lang:
            raws = await asyncio.to_thread(self.gateway.fetch_reviews, app_id, country, lang.lower(), self.count, self.pages)
            reviews = dedupe_reviews(normalize_reviews(raws, app_id))
            self.log.info("Fetched %d reviews for %s [%s-%s]", len(reviews), app_id, lang, country)
        else:
            raws = await self._fan_out(app_id, country)
            reviews = sort_newest_first(dedupe_reviews(normalize_reviews(raws, app_id)))
            self.log.info("After deduplication: %d reviews for %s [%s]", len(reviews), app_id, country)

        if cutoff is not None:
            reviews = filter_since(reviews, cutoff)
            self.log.info("Filtered to %d reviews since %s", len(reviews), cutoff.isoformat())

        return reviews

    async def _fan_out(self, app_id: str, country: str) -> List[Dict[str, Any]]:
        languages = languages_for(country)
        sem = asyncio.Semaphore(self.concurrency)
        self.log.info("Fetching %s [%s] in %d languages: %s", app_id, country, len(languages), ", ".join(languages))

        async def one(lang: str) -> List[Dict[str, Any]]:
            async with sem:
                try:
                    rows = await asyncio.to_thread(self.gateway.fetch_reviews, app_id, country, lang, self.count, self.pages)
                except Exception as e:
                    self.log.warning("Skipping language %s for %s: %s", lang, app_id, e)
                    return []
            self.log.debug("Fetched %d reviews for language %s", len(rows), lang)
            return rows

        per_language = await asyncio.gather(*(one(lang) for lang in languages))

        all_rows: List[Dict[str, Any]] = []
        for rows in per_language:
            all_rows.extend(rows)
        self.log.info("Fetched %d total reviews from all languages", len(all_rows))
        return all_rows
