from typing import Any, Dict, List, Sequence, Set


def dedupe_reviews(reviews: Sequence[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Keep the first review seen for each id; order of survivors is unchanged."""
    seen: Set[str] = set()
    unique: List[Dict[str, Any]] = []
    for review in reviews:
        review_id = review["id"]
        if review_id in seen:
            continue
        seen.add(review_id)
        unique.append(review)
    return unique
