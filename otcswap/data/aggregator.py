"""
Rebuild the set of active orders from the ledger's event history.

The escrow ledger keeps no queryable list of open orders, so the active
set is derived: every ``OrderCreated`` is a candidate and any of
``OrderFilled``, ``OrderCanceled``, ``OrderCleanedUp`` or a
``RetryOrder`` naming it as the *old* order removes it for good.
Candidates past their lifetime are dropped at read time.

The block range is walked in fixed-size chunks.  Within each chunk the
five streams are fetched concurrently, merged, put in chain order and
folded into an :class:`OrderProjection`, so memory is bounded by the
number of open candidates and closed ids rather than by raw log volume.
"""
from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass, field
from typing import Callable, Dict, Iterable, List, Optional, Set

from ..connectors.ledger import LedgerConnector
from ..errors import InvalidInput, LedgerTransportError, OTCError
from ..events import (
    PROJECTION_STREAMS,
    LedgerEvent,
    OrderCreated,
    chain_order,
    decode_events,
    is_terminal,
)
from ..models import ActiveOrdersPage, ExpiryInfo, Order, OrderFilter, Pagination
from ..policy import ExpiryPolicy
from ..utils.logging import get_logger, log_json
from ..utils.monitoring import event_query_histogram

logger = get_logger(__name__)

DEFAULT_BLOCK_CHUNK_SIZE = 5000


@dataclass
class OrderProjection:
    """Running fold state: open candidates and ids known to be closed."""

    created: Dict[int, Order] = field(default_factory=dict)
    closed: Set[int] = field(default_factory=set)

    def apply(self, event: LedgerEvent) -> None:
        if isinstance(event, OrderCreated):
            if event.order_id not in self.closed:
                self.created.setdefault(event.order_id, event.order)
        elif is_terminal(event):
            self.closed.add(event.order_id)
            self.created.pop(event.order_id, None)

    def apply_all(self, events: Iterable[LedgerEvent]) -> "OrderProjection":
        for event in events:
            self.apply(event)
        return self

    def open_orders(self, expiry: ExpiryInfo, now: float) -> List[Order]:
        """Candidates with no terminal event that are within their lifetime."""
        return [o for o in self.created.values() if not expiry.is_expired(o.created_at, now)]


def active_orders(events: Iterable[LedgerEvent], expiry: ExpiryInfo, now: float) -> List[Order]:
    """Fold ``events`` (any order) and return the active orders at ``now``."""
    return OrderProjection().apply_all(chain_order(events)).open_orders(expiry, now)


def paginate(orders: List[Order], offset: int, limit: Optional[int]) -> tuple:
    total = len(orders)
    end = total if limit is None else min(total, offset + limit)
    page = orders[offset:end]
    return page, Pagination(has_more=end < total, next_offset=end, total=total)


class EventLogAggregator:
    """Derive the active order set from the ledger's event streams.

    Parameters
    ----------
    ledger : LedgerConnector
        Source of the event streams.
    policy : ExpiryPolicy
        Supplies the order lifetime used to drop expired orders.
    block_chunk_size : int
        Number of blocks fetched per query round.
    clock : callable
        Returns the current unix time.
    """

    def __init__(
        self,
        ledger: LedgerConnector,
        policy: ExpiryPolicy,
        block_chunk_size: int = DEFAULT_BLOCK_CHUNK_SIZE,
        clock: Callable[[], float] = time.time,
    ) -> None:
        if block_chunk_size < 1:
            raise ValueError("block_chunk_size must be at least 1")
        self.ledger = ledger
        self.policy = policy
        self.block_chunk_size = block_chunk_size
        self.clock = clock

    async def _fetch_chunk(self, start: int, end: int) -> List[LedgerEvent]:
        started = time.perf_counter()
        streams = await asyncio.gather(
            *(self.ledger.query_events(name, start, end) for name in PROJECTION_STREAMS)
        )
        event_query_histogram.observe(time.perf_counter() - started)
        merged = [log for stream in streams for log in stream]
        return chain_order(decode_events(merged))

    async def _resolve_range(self, order_filter: OrderFilter) -> tuple:
        to_block = order_filter.to_block
        if to_block == "latest":
            to_block = await self.ledger.latest_block()
        elif not isinstance(to_block, int):
            raise InvalidInput(f"unsupported block tag {to_block!r}")
        if order_filter.from_block < 0:
            raise InvalidInput("from_block must be non-negative")
        return order_filter.from_block, to_block

    async def build_projection(self, from_block: int, to_block: int) -> OrderProjection:
        """Replay ``[from_block, to_block]`` chunk by chunk into a projection."""
        projection = OrderProjection()
        start = from_block
        while start <= to_block:
            end = min(start + self.block_chunk_size - 1, to_block)
            projection.apply_all(await self._fetch_chunk(start, end))
            start = end + 1
        return projection

    async def get_active_orders(
        self, order_filter: Optional[OrderFilter] = None, now: Optional[float] = None
    ) -> ActiveOrdersPage:
        order_filter = order_filter or OrderFilter()
        if order_filter.offset < 0 or (order_filter.limit is not None and order_filter.limit < 0):
            raise InvalidInput("offset and limit must be non-negative", operation="get_active_orders")
        try:
            from_block, to_block = await self._resolve_range(order_filter)
            projection = await self.build_projection(from_block, to_block)
        except OTCError as exc:
            exc.operation = exc.operation or "get_active_orders"
            raise
        except Exception as exc:
            raise LedgerTransportError(
                f"event query failed: {exc!r}", operation="get_active_orders", step="query"
            ) from exc

        expiry = await self.policy.get_expiry_info()
        now = self.clock() if now is None else now
        matching = [o for o in projection.open_orders(expiry, now) if order_filter.matches(o)]
        page, pagination = paginate(matching, order_filter.offset, order_filter.limit)
        log_json(
            logger,
            "active_orders",
            from_block=from_block,
            to_block=to_block,
            candidates=len(projection.created),
            closed=len(projection.closed),
            matching=pagination.total,
            returned=len(page),
        )
        return ActiveOrdersPage(orders=page, pagination=pagination, from_block=from_block, to_block=to_block)


__all__ = [
    "DEFAULT_BLOCK_CHUNK_SIZE",
    "OrderProjection",
    "EventLogAggregator",
    "active_orders",
    "paginate",
]
