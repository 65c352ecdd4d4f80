import math
import random
import string
import time
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Sequence
from urllib.parse import urlencode

PLAY_STORE_DETAILS_URL = "https://play.google.com/store/apps/details"

DEFAULT_USER_NAME = "Anonymous User"
DEFAULT_TEXT = "No review text available"
DEFAULT_VERSION = "Unknown"
DEFAULT_SCORE = 3

# Canonical counter -> raw field names that hold that same counter.
COUNTER_FIELDS: Dict[str, Sequence[str]] = {
    "thumbsUp": ("thumbsUp", "thumbsUpCount"),
    "likes": ("likes",),
    "helpful": ("helpful",),
    "positive": ("positive",),
    "thumbsDown": ("thumbsDown",),
    "dislikes": ("dislikes",),
    "unhelpful": ("unhelpful",),
    "negative": ("negative",),
}


def _to_aware_utc(dt: Optional[datetime]) -> datetime:
    if dt is None:
        return datetime.now(timezone.utc)
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def json_safe(value: Any) -> Any:
    """
    Recursively convert objects that are not JSON-serializable (notably datetime)
    into JSON-safe representations.
    """
    if isinstance(value, datetime):
        # ISO 8601 string
        return to_iso(value)

    if isinstance(value, dict):
        return {k: json_safe(v) for k, v in value.items()}

    if isinstance(value, (list, tuple)):
        return [json_safe(v) for v in value]

    return value


def parse_timestamp(value: Any) -> Optional[datetime]:
    """
    Best-effort conversion of a raw timestamp (datetime, epoch seconds or
    milliseconds, ISO string) into an aware UTC datetime. None if unreadable.
    """
    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, datetime):
        return _to_aware_utc(value)

    if isinstance(value, (int, float)):
        if not math.isfinite(value):
            return None
        seconds = value / 1000 if abs(value) > 1e11 else value
        try:
            return datetime.fromtimestamp(seconds, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None

    if isinstance(value, str):
        s = value.strip()
        if not s:
            return None
        if s.endswith(("Z", "z")):
            s = s[:-1] + "+00:00"
        try:
            return _to_aware_utc(datetime.fromisoformat(s))
        except ValueError:
            return None

    return None


def to_iso(dt: datetime) -> str:
    return _to_aware_utc(dt).isoformat()


def _present(value: Any) -> bool:
    if value is None:
        return False
    if isinstance(value, str) and not value.strip():
        return False
    return True


def _first(raw: Dict[str, Any], *keys: str) -> Any:
    for key in keys:
        value = raw.get(key)
        if _present(value):
            return value
    return None


def _reply_field(raw: Dict[str, Any], flat_key: str, nested_key: str, alt_key: str) -> Any:
    value = raw.get(flat_key)
    if _present(value):
        return value
    reply = raw.get("reply")
    if isinstance(reply, dict) and _present(reply.get(nested_key)):
        return reply.get(nested_key)
    value = raw.get(alt_key)
    return value if _present(value) else None


def _score(raw: Dict[str, Any]) -> int:
    value = _first(raw, "score", "rating", "stars")
    if value is None or isinstance(value, bool):
        return DEFAULT_SCORE
    try:
        score = round(float(value))
    except (TypeError, ValueError, OverflowError):
        return DEFAULT_SCORE
    return min(5, max(1, score))


def _counter(raw: Dict[str, Any], keys: Sequence[str]) -> Optional[int]:
    value = _first(raw, *keys)
    if value is None or isinstance(value, bool):
        return None
    try:
        n = int(float(value))
    except (TypeError, ValueError, OverflowError):
        return None
    return max(0, n)


def _criterias(raw: Dict[str, Any]) -> List[str]:
    value = _first(raw, "criterias", "criteria", "tags")
    if not isinstance(value, (list, tuple)):
        return []
    return [c.strip() for c in value if isinstance(c, str) and c.strip()]


def synthetic_id(index: int) -> str:
    suffix = "".join(random.choices(string.ascii_lowercase + string.digits, k=9))
    return f"gp-{index}-{time.time_ns()}-{suffix}"


def review_url(app_id: str, review_id: str) -> str:
    return f"{PLAY_STORE_DETAILS_URL}?{urlencode({'id': app_id, 'reviewId': review_id})}"


def normalize_review(raw: Dict[str, Any], index: int, app_id: str) -> Dict[str, Any]:
    """
    Map one raw scraper record onto the canonical review shape.

    Each field takes the first non-blank candidate in a fixed order and falls
    back to a constant, so the output never depends on which subset of fields
    the scraper happened to fill in.
    """
    raw_id = _first(raw, "reviewId", "id")
    review_id = str(raw_id).strip() if raw_id is not None else synthetic_id(index)

    created = parse_timestamp(_first(raw, "date", "time", "timestamp", "at"))
    score = _score(raw)

    reply_date = parse_timestamp(_reply_field(raw, "replyDate", "date", "repliedAt"))
    reply_text = _reply_field(raw, "replyText", "text", "replyContent")

    user_image = _first(raw, "userImage", "profileImage")
    title = _first(raw, "title", "headline")

    review = {
        "id": review_id,
        "userName": str(_first(raw, "userName", "author") or DEFAULT_USER_NAME),
        "userImage": str(user_image) if user_image is not None else None,
        "date": to_iso(created or datetime.now(timezone.utc)),
        "score": score,
        "scoreText": str(score),
        "url": review_url(app_id, review_id),
        "title": str(title) if title is not None else None,
        "text": str(_first(raw, "text", "body", "content", "comment") or DEFAULT_TEXT),
        "replyDate": to_iso(reply_date) if reply_date else None,
        "replyText": str(reply_text) if reply_text is not None else None,
        "version": str(
            _first(raw, "appVersion", "version", "app_version", "reviewCreatedVersion") or DEFAULT_VERSION
        ),
    }
    for name, keys in COUNTER_FIELDS.items():
        review[name] = _counter(raw, keys)
    review["criterias"] = _criterias(raw)
    return review


def normalize_reviews(raws: Sequence[Dict[str, Any]], app_id: str) -> List[Dict[str, Any]]:
    return [normalize_review(raw, i, app_id) for i, raw in enumerate(raws)]
