"""Order lifetime and grace period policy."""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Callable, Optional

from .connectors.ledger import LedgerConnector
from .models import ExpiryInfo
from .utils.logging import get_logger, log_json
from .utils.monitoring import expiry_fallback_counter

logger = get_logger(__name__)


class ExpiryPolicy:
    """Resolve the ledger's expiry constants with a fixed fallback.

    The constants only drive the client's own pre-flight checks and the
    active-order projection; the ledger enforces expiry itself. A failed
    read therefore falls back to ``defaults`` (7 days each unless
    configured) instead of failing the caller.
    """

    def __init__(
        self,
        ledger: LedgerConnector,
        defaults: Optional[ExpiryInfo] = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.ledger = ledger
        self.defaults = defaults or ExpiryInfo()
        self.clock = clock

    async def get_expiry_info(self) -> ExpiryInfo:
        try:
            lifetime, grace = await asyncio.gather(
                self.ledger.order_expiry(), self.ledger.grace_period()
            )
            return ExpiryInfo(order_lifetime=int(lifetime), grace_period=int(grace))
        except Exception as exc:
            expiry_fallback_counter.inc()
            log_json(
                logger,
                "expiry_info_fallback",
                level=logging.WARNING,
                error=repr(exc),
                order_lifetime=self.defaults.order_lifetime,
                grace_period=self.defaults.grace_period,
            )
            return self.defaults

    async def is_order_expired(self, timestamp: int, now: Optional[float] = None) -> bool:
        info = await self.get_expiry_info()
        return info.is_expired(timestamp, self.clock() if now is None else now)

    async def is_in_grace_period(self, timestamp: int, now: Optional[float] = None) -> bool:
        info = await self.get_expiry_info()
        return info.is_in_grace_period(timestamp, self.clock() if now is None else now)


__all__ = ["ExpiryPolicy"]
