import argparse
import asyncio
import json
import sys
from pathlib import Path

from apps.api.app.config import settings
from apps.api.app.logging_setup import configure_logging
from jobs.ingest.aggregate import ReviewAggregator
from jobs.ingest.errors import ReviewsError
from jobs.ingest.sources.google_play import GooglePlayGateway


def main() -> None:
    parser = argparse.ArgumentParser(description="Fetch normalized Google Play reviews for one app")
    parser.add_argument("--app-id", required=True, help="e.g., com.whatsapp")
    parser.add_argument("--country", default=settings.default_country)
    parser.add_argument("--lang", default=settings.default_lang, help="omit to fetch every likely language")
    parser.add_argument("--date", default=None, help="7d, 2w, 3m, 1y, YYYY-MM-DD or ISO timestamp")
    parser.add_argument("--count", type=int, default=settings.review_count, help="per page")
    parser.add_argument("--pages", type=int, default=settings.review_pages, help="max pages per language")
    parser.add_argument("--out", type=Path, default=None, help="write the reviews as JSON here")
    args = parser.parse_args()

    configure_logging(settings.log_level)

    gateway = GooglePlayGateway(
        attempts=settings.retry_attempts,
        base_delay=settings.retry_base_delay,
        max_delay=settings.retry_max_delay,
    )
    aggregator = ReviewAggregator(
        gateway,
        count=args.count,
        pages=args.pages,
        concurrency=settings.fanout_concurrency,
    )

    try:
        reviews = asyncio.run(aggregator.aggregate(args.app_id, args.country, args.lang, args.date))
    except ReviewsError as e:
        print(f"Error: {e}", file=sys.stderr)
        raise SystemExit(1)

    if args.out:
        args.out.write_text(json.dumps(reviews, ensure_ascii=False, indent=2), encoding="utf-8")

    print(f"Fetched={len(reviews)} App={args.app_id} Country={args.country} Lang={args.lang or 'all'} Date={args.date or '-'}")


if __name__ == "__main__":
    main()
