# retry.py

import time
from dataclasses import dataclass, field
from typing import Callable, List, TypeVar

from loguru import logger

from errors import UpstreamError, UpstreamTransient

T = TypeVar("T")


@dataclass
class RetryPolicy:
    """
    Exponential backoff: the delay before retry i (0-based) is
    min(base_delay * 2**i, max_delay). Only UpstreamTransient is retried;
    everything else propagates on the first failure.
    """

    max_attempts: int = 2
    base_delay: float = 0.5
    max_delay: float = 2.0
    sleep: Callable[[float], None] = field(default=time.sleep, repr=False)

    def delay_for(self, retry_index: int) -> float:
        return min(self.base_delay * (2 ** retry_index), self.max_delay)

    def delays(self, failures: int) -> List[float]:
        return [self.delay_for(i) for i in range(failures)]

    def call(self, fn: Callable[[], T], label: str = "upstream") -> T:
        for attempt in range(self.max_attempts):
            try:
                return fn()
            except UpstreamTransient as e:
                logger.warning(f"[Retry] {label} attempt {attempt + 1}/{self.max_attempts} failed: {e.message}")
                if attempt == self.max_attempts - 1:
                    raise UpstreamError(e.message, upstream_status=e.upstream_status) from e
                self.sleep(self.delay_for(attempt))
        raise UpstreamError(f"{label}: no attempts configured")
