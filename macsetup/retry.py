"""Bounded retry with linear backoff for network-dependent installs."""
from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Callable, Optional, Tuple, TypeVar

from .errors import StepError


logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class RetryPolicy:
    """Retry up to ``attempts`` times, waiting ``delay * n`` seconds after failure n.

    With the defaults the waits are 5s then 10s.
    """

    attempts: int = 3
    delay: float = 5.0

    def __post_init__(self) -> None:
        if self.attempts < 1:
            raise ValueError("RetryPolicy.attempts must be at least 1")

    def backoff(self, attempt: int) -> float:
        return self.delay * attempt


def retry_call(
    fn: Callable[[], T],
    policy: RetryPolicy = RetryPolicy(),
    sleep: Callable[[float], None] = time.sleep,
    on_retry: Optional[Callable[[int, StepError, float], None]] = None,
) -> Tuple[T, int]:
    """Call ``fn`` until it returns without raising StepError.

    Returns ``(value, attempts_used)``. When every attempt fails, the last
    error is re-raised with ``attempts`` set to the number of attempts made.
    """
    last: Optional[StepError] = None
    for attempt in range(1, policy.attempts + 1):
        try:
            return fn(), attempt
        except StepError as e:
            last = e
            if attempt == policy.attempts:
                break
            wait = policy.backoff(attempt)
            logger.info("attempt %d/%d failed (%s); retrying in %.0fs", attempt, policy.attempts, e.reason, wait)
            if on_retry:
                on_retry(attempt, e, wait)
            sleep(wait)
    assert last is not None
    raise StepError(last.reason, attempts=policy.attempts) from last
