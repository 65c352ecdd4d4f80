import logging
from typing import Callable, Tuple, Type, TypeVar

from tenacity import (
    Retrying,
    before_sleep_log,
    retry_if_not_exception_type,
    stop_after_attempt,
    wait_exponential,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


def call_with_backoff(
    fn: Callable[[], T],
    *,
    attempts: int = 3,
    base_delay: float = 1.0,
    max_delay: float = 10.0,
    give_up_on: Tuple[Type[BaseException], ...] = (),
) -> T:
    """
    Call `fn` until it succeeds or `attempts` calls have failed.

    Waits base_delay, 2*base_delay, 4*base_delay ... (capped at max_delay)
    between attempts. Exceptions listed in `give_up_on` are raised on first
    sight. The last exception is re-raised unchanged once attempts run out.
    """
    retrying = Retrying(
        stop=stop_after_attempt(max(1, attempts)),
        wait=wait_exponential(multiplier=base_delay, min=base_delay, max=max_delay),
        retry=retry_if_not_exception_type(give_up_on),
        before_sleep=before_sleep_log(logger, logging.WARNING),
        reraise=True,
    )
    return retrying(fn)
