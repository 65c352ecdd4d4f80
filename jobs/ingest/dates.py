"""
Date window parsing for the `date` query parameter.

Accepted forms:
  7d / 2w / 3m / 1y   relative to now (a month is 30 days, a year 365)
  YYYY-MM-DD          midnight UTC of that day
  YYYY-MM / YYYY      start of that month or year, UTC
  any ISO timestamp   that instant (naive values are taken as UTC)
"""
import re
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional, Sequence

from jobs.ingest.errors import DateParseError
from jobs.ingest.normalize import parse_timestamp

RELATIVE_RE = re.compile(r"^(\d+)([dwmy])$")
CALENDAR_FORMATS = (
    (re.compile(r"^\d{4}-\d{2}-\d{2}$"), "%Y-%m-%d"),
    (re.compile(r"^\d{4}-\d{2}$"), "%Y-%m"),
    (re.compile(r"^\d{4}$"), "%Y"),
)

UNIT_DAYS = {"d": 1, "w": 7, "m": 30, "y": 365}


def parse_cutoff(expr: Optional[str], now: Optional[datetime] = None) -> Optional[datetime]:
    if expr is None:
        return None
    expr = expr.strip()
    if not expr:
        return None

    now = now or datetime.now(timezone.utc)

    m = RELATIVE_RE.match(expr.lower())
    if m:
        try:
            return now - timedelta(days=int(m.group(1)) * UNIT_DAYS[m.group(2)])
        except OverflowError as e:
            raise DateParseError(expr) from e

    for pattern, fmt in CALENDAR_FORMATS:
        if pattern.match(expr):
            try:
                return datetime.strptime(expr, fmt).replace(tzinfo=timezone.utc)
            except ValueError as e:
                raise DateParseError(expr) from e

    if not expr[:1].isdigit():
        raise DateParseError(expr)
    cutoff = parse_timestamp(expr)
    if cutoff is None:
        raise DateParseError(expr)
    return cutoff


def filter_since(reviews: Sequence[Dict[str, Any]], cutoff: Optional[datetime]) -> List[Dict[str, Any]]:
    if cutoff is None:
        return list(reviews)
    kept = []
    for review in reviews:
        created = parse_timestamp(review.get("date"))
        if created is not None and created >= cutoff:
            kept.append(review)
    return kept


def sort_newest_first(reviews: Sequence[Dict[str, Any]]) -> List[Dict[str, Any]]:
    oldest = datetime.min.replace(tzinfo=timezone.utc)
    return sorted(reviews, key=lambda r: parse_timestamp(r.get("date")) or oldest, reverse=True)
