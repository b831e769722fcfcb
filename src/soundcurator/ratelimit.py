"""Fixed-delay rate limiting between requests to a provider."""

from __future__ import annotations

import logging
import math
import time
from dataclasses import dataclass
from typing import Callable, Mapping

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RateLimitPolicy:
    """A request budget: at most max_requests per interval_seconds."""

    max_requests: int
    interval_seconds: int

    def __post_init__(self):
        if self.max_requests < 1:
            raise ValueError(f"max_requests must be at least 1, got {self.max_requests}")
        if self.interval_seconds < 0:
            raise ValueError(f"interval_seconds must not be negative, got {self.interval_seconds}")

    @property
    def wait_seconds(self) -> int:
        return math.ceil(self.interval_seconds / self.max_requests)


class RateLimiter:
    """Blocks before each request for a static per-call delay.

    There is no rolling window and no use of response headers: the delay is
    derived from the configured policy alone. Providers without a policy
    are not delayed.
    """

    def __init__(
        self,
        policies: Mapping[str, RateLimitPolicy],
        sleep: Callable[[float], None] = time.sleep,
    ):
        self._policies = dict(policies)
        self._sleep = sleep

    def wait_seconds(self, provider: str) -> int:
        policy = self._policies.get(provider)
        return policy.wait_seconds if policy else 0

    def throttle(self, provider: str) -> None:
        wait = self.wait_seconds(provider)
        if wait > 0:
            logger.debug("Rate limit: waiting %ss before %s request", wait, provider)
            self._sleep(wait)
