from functools import lru_cache

from fastapi import Depends

from apps.api.app.config import settings
from jobs.ingest.aggregate import ReviewAggregator
from jobs.ingest.sources.google_play import GooglePlayGateway


@lru_cache(maxsize=1)
def get_gateway() -> GooglePlayGateway:
    return GooglePlayGateway(
        attempts=settings.retry_attempts,
        base_delay=settings.retry_base_delay,
        max_delay=settings.retry_max_delay,
        suggest_url=settings.suggest_url,
        http_timeout=settings.http_timeout,
    )


def get_aggregator(gateway: GooglePlayGateway = Depends(get_gateway)) -> ReviewAggregator:
    return ReviewAggregator(
        gateway,
        count=settings.review_count,
        pages=settings.review_pages,
        concurrency=settings.fanout_concurrency,
    )
