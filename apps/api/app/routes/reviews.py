import asyncio
import logging
from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Depends, Query

from apps.api.app import params
from apps.api.app.config import settings
from apps.api.app.dependencies import get_aggregator
from apps.api.app.exceptions import NoDataFound, ServiceUnavailable
from apps.api.app.models import ErrorResponse, ReviewsResponse
from jobs.ingest.aggregate import ReviewAggregator

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get(
    "/app",
    response_model=ReviewsResponse,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}, 503: {"model": ErrorResponse}},
)
async def get_reviews(
    appid: Optional[str] = Query(None, description="Google Play package name, e.g. com.whatsapp"),
    country: Optional[str] = Query(None, description="Two-letter country code (defaults to the configured country)"),
    lang: Optional[str] = Query(None, description="Two-letter language code; omit to query the country's 10 likeliest languages"),
    date: Optional[str] = Query(None, description="Only reviews since: 7d, 2w, 3m, 1y, YYYY-MM-DD or an ISO timestamp"),
    aggregator: ReviewAggregator = Depends(get_aggregator),
):
    """
    Reviews for one app, normalized into a single schema.

    With `lang`, a single language is fetched and an upstream failure is a 503.
    Without it, every likely language of `country` is fetched; languages that
    fail are skipped.
    """
    app_id = params.app_id(appid)
    country_code = params.two_letter_code("country", country, default=settings.default_country)
    lang_code = params.two_letter_code("lang", lang, default=settings.default_lang)
    date_expr = params.optional(date)

    try:
        reviews = await asyncio.wait_for(
            aggregator.aggregate(app_id, country_code, lang_code, date_expr),
            timeout=settings.request_timeout,
        )
    except asyncio.TimeoutError:
        raise ServiceUnavailable(
            "Request timed out",
            details=f"Fetching reviews took longer than {settings.request_timeout:g}s",
        )

    logger.info(
        "App ID: %s, Country: %s, Language: %s, Date: %s, Reviews: %d",
        app_id, country_code, lang_code or "all", date_expr or "-", len(reviews),
    )

    if not reviews:
        raise NoDataFound(
            "No reviews found",
            details=f"No reviews for {app_id} matched country={country_code}, lang={lang_code or 'all'}, date={date_expr or 'any'}",
        )

    return {
        "success": True,
        "data": reviews,
        "count": len(reviews),
        "filters": {"appid": app_id, "country": country_code, "lang": lang_code, "date": date_expr},
        "statusCode": 200,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
