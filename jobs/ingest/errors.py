from typing import Optional


class ReviewsError(Exception):
    """Base class for failures raised by the review pipeline."""


class UpstreamUnavailable(ReviewsError):
    """
    The Play Store could not be reached, rejected the request, or returned
    something we could not read, after retries were exhausted.
    """

    def __init__(self, message: str, *, operation: str, target: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.operation = operation
        self.target = target


class DateParseError(ReviewsError, ValueError):
    """The caller supplied a `date` expression we cannot interpret."""

    def __init__(self, expr: str):
        message = (
            f"Invalid date format: {expr}. "
            "Use YYYY-MM-DD, an ISO timestamp or a relative format (7d, 1w, 1m, 1y)"
        )
        super().__init__(message)
        self.message = message
        self.expr = expr
