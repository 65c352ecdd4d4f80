from datetime import datetime, timezone
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Query

from apps.api.app import params
from apps.api.app.config import settings
from apps.api.app.dependencies import get_gateway
from apps.api.app.exceptions import ValidationError
from apps.api.app.models import AppInfoResponse, SearchResponse, SuggestionsResponse
from jobs.ingest.normalize import json_safe
from jobs.ingest.sources.google_play import GooglePlayGateway

router = APIRouter()


def _ok(data: Any) -> Dict[str, Any]:
    return {
        "success": True,
        "data": data,
        "statusCode": 200,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


@router.get("/app/info", response_model=AppInfoResponse)
def get_app_info(
    appid: Optional[str] = Query(None),
    country: Optional[str] = Query(None),
    lang: Optional[str] = Query(None),
    gateway: GooglePlayGateway = Depends(get_gateway),
):
    """Store listing metadata for one app, as returned by Google Play."""
    app_id = params.app_id(appid)
    country_code = params.two_letter_code("country", country, default=settings.default_country)
    lang_code = params.two_letter_code("lang", lang, default=settings.default_lang or "en")
    return _ok(json_safe(gateway.fetch_app_info(app_id, lang=lang_code, country=country_code)))


@router.get("/app/search", response_model=SearchResponse)
def search_apps(
    q: Optional[str] = Query(None, description="Search term"),
    limit: int = Query(20, description="Maximum number of apps to return"),
    country: Optional[str] = Query(None),
    lang: Optional[str] = Query(None),
    gateway: GooglePlayGateway = Depends(get_gateway),
):
    query = params.require("q", q, " (search query)")
    if not 1 <= limit <= settings.search_limit_max:
        raise ValidationError(
            "Invalid parameter: limit",
            details=f"limit must be between 1 and {settings.search_limit_max}",
        )
    country_code = params.two_letter_code("country", country, default=settings.default_country)
    lang_code = params.two_letter_code("lang", lang, default=settings.default_lang or "en")
    return _ok(json_safe(gateway.search_apps(query, limit=limit, lang=lang_code, country=country_code)))


@router.get("/app/suggestions", response_model=SuggestionsResponse)
def get_app_suggestions(
    q: Optional[str] = Query(None, description="Partial search term"),
    country: Optional[str] = Query(None),
    lang: Optional[str] = Query(None),
    gateway: GooglePlayGateway = Depends(get_gateway),
):
    query = params.require("q", q, " (search query)")
    country_code = params.two_letter_code("country", country, default=settings.default_country)
    lang_code = params.two_letter_code("lang", lang, default=settings.default_lang or "en")
    return _ok(gateway.suggest(query, lang=lang_code, country=country_code))
