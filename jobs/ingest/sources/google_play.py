import logging
from typing import Any, Callable, Dict, List, Optional, TypeVar

import requests
from google_play_scraper import Sort, app, reviews, search
from google_play_scraper.exceptions import NotFoundError

from jobs.ingest.errors import UpstreamUnavailable
from jobs.ingest.retry import call_with_backoff

logger = logging.getLogger(__name__)

T = TypeVar("T")

SUGGEST_URL = "https://market.android.com/suggest/SuggRequest"


class GooglePlayGateway:
    """
    Thin wrapper over google_play_scraper.

    Every call is retried with exponential backoff; whatever still fails is
    raised as UpstreamUnavailable. An app or language with no reviews is an
    empty list, not an error.
    """

    def __init__(
        self,
        attempts: int = 3,
        base_delay: float = 1.0,
        max_delay: float = 10.0,
        suggest_url: str = SUGGEST_URL,
        http_timeout: float = 10.0,
    ):
        self.attempts = attempts
        self.base_delay = base_delay
        self.max_delay = max_delay
        self.suggest_url = suggest_url
        self.http_timeout = http_timeout

    def _call(self, operation: str, target: str, fn: Callable[[], T]) -> T:
        try:
            return call_with_backoff(
                fn,
                attempts=self.attempts,
                base_delay=self.base_delay,
                max_delay=self.max_delay,
                give_up_on=(NotFoundError,),
            )
        except NotFoundError as e:
            raise UpstreamUnavailable(
                f"Google Play rejected {target}: {e}", operation=operation, target=target
            ) from e
        except UpstreamUnavailable:
            raise
        except Exception as e:
            logger.error("%s failed for %s after %d attempts: %s", operation, target, self.attempts, e)
            raise UpstreamUnavailable(
                f"Failed to {operation} for {target}: {e}", operation=operation, target=target
            ) from e

    def fetch_reviews(
        self,
        app_id: str,
        country: str,
        lang: str,
        count: int = 200,
        max_pages: int = 1,
    ) -> List[Dict[str, Any]]:
        """
        Fetch up to (count * max_pages) newest reviews for one language.
        google_play_scraper returns (result, continuation_token).
        """
        all_rows: List[Dict[str, Any]] = []
        token: Optional[Any] = None
        target = f"{app_id} [{lang}-{country}]"

        for _ in range(max_pages):
            def page(token=token):
                result, next_token = reviews(
                    app_id,
                    lang=lang,
                    country=country,
                    sort=Sort.NEWEST,
                    count=count,
                    continuation_token=token,
                )
                if result is not None and not isinstance(result, list):
                    raise UpstreamUnavailable(
                        f"Malformed reviews response for {target}",
                        operation="fetch reviews",
                        target=target,
                    )
                return result or [], next_token

            result, token = self._call("fetch reviews", target, page)
            if not result:
                break

            all_rows.extend(r for r in result if isinstance(r, dict))

            if not token:
                break

        logger.debug("Fetched %d raw reviews for %s", len(all_rows), target)
        return all_rows

    def fetch_app_info(self, app_id: str, lang: str = "en", country: str = "us") -> Dict[str, Any]:
        return self._call("fetch app information", app_id, lambda: app(app_id, lang=lang, country=country))

    def search_apps(self, query: str, limit: int = 20, lang: str = "en", country: str = "us") -> List[Dict[str, Any]]:
        results = self._call(
            "search apps",
            repr(query),
            lambda: search(query, lang=lang, country=country, n_hits=limit),
        )
        return list(results or [])[:limit]

    def suggest(self, query: str, lang: str = "en", country: str = "us") -> List[str]:
        """Play Store search-box completions for `query`."""

        def fetch() -> List[str]:
            resp = requests.get(
                self.suggest_url,
                params={"json": 1, "c": 3, "query": query, "hl": lang, "gl": country.upper()},
                headers={"User-Agent": "Mozilla/5.0"},
                timeout=self.http_timeout,
            )
            resp.raise_for_status()
            data = resp.json()
            if not isinstance(data, list):
                raise ValueError("suggestion response is not a list")
            return [item["s"] for item in data if isinstance(item, dict) and item.get("s")]

        return self._call("get app suggestions", repr(query), fetch)
