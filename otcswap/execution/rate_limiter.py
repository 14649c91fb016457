"""Asynchronous token bucket used to pace JSON-RPC calls to the ledger node."""
from __future__ import annotations

import asyncio
import time

from ..utils.logging import get_logger, log_json
from ..utils.monitoring import rate_limit_throttle_counter

logger = get_logger(__name__)


class TokenBucket:
    """Token bucket limiting the rate of RPC requests.

    Parameters
    ----------
    rate:
        Number of requests allowed per second on average.
    capacity:
        Maximum burst size. Concurrent event queries draw from the same
        bucket, so this should cover at least one full query round.

    Requests may carry a ``cost`` above one token so that expensive calls
    (log queries) drain the bucket faster than plain reads.
    """

    def __init__(self, rate: float, capacity: int) -> None:
        if rate <= 0:
            raise ValueError("rate must be positive")
        if capacity < 1:
            raise ValueError("capacity must be at least 1")
        self.rate = float(rate)
        self.capacity = int(capacity)
        self.tokens = float(capacity)
        self.updated = time.monotonic()
        self._lock = asyncio.Lock()

    async def acquire(self, tokens: float = 1.0) -> None:
        """Consume ``tokens`` waiting if necessary.

        Raises ``ValueError`` for a cost the bucket could never hold.
        """
        if tokens <= 0 or tokens > self.capacity:
            raise ValueError(f"cost {tokens} outside (0, {self.capacity}]")
        while True:
            async with self._lock:
                now = time.monotonic()
                elapsed = now - self.updated
                self.updated = now
                self.tokens = min(self.capacity, self.tokens + elapsed * self.rate)
                if self.tokens >= tokens:
                    self.tokens -= tokens
                    return
                wait = (tokens - self.tokens) / self.rate
                rate_limit_throttle_counter.inc()
                log_json(logger, "rpc_throttled", cost=tokens, wait_seconds=round(wait, 3))
            await asyncio.sleep(wait)


__all__ = ["TokenBucket"]
