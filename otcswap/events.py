"""Typed ledger events.

Raw :class:`~otcswap.connectors.ledger.EventLog` records are decoded into
one dataclass per event kind. :data:`LedgerEvent` is the union the
aggregator folds over; every variant exposes ``block_number`` and
``log_index`` so a merged stream can be put back in chain order with
:func:`chain_order`.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Optional, Union, get_args

from .connectors.ledger import EventLog
from .models import (
    CleanedOrder,
    CleanupFailure,
    FeeDistribution,
    Order,
    RetriedOrder,
)

ORDER_CREATED = "OrderCreated"
ORDER_FILLED = "OrderFilled"
ORDER_CANCELED = "OrderCanceled"
ORDER_CLEANED_UP = "OrderCleanedUp"
RETRY_ORDER = "RetryOrder"
CLEANUP_ERROR = "CleanupError"
CLEANUP_FEES_DISTRIBUTED = "CleanupFeesDistributed"

# streams replayed to rebuild the active order set
PROJECTION_STREAMS = (ORDER_CREATED, ORDER_FILLED, ORDER_CANCELED, ORDER_CLEANED_UP, RETRY_ORDER)


@dataclass(frozen=True)
class OrderCreated:
    order: Order
    block_number: int
    log_index: int

    @property
    def order_id(self) -> int:
        return self.order.order_id


@dataclass(frozen=True)
class OrderFilled:
    order_id: int
    maker: str
    taker: str
    timestamp: int
    block_number: int
    log_index: int


@dataclass(frozen=True)
class OrderCanceled:
    order_id: int
    maker: str
    timestamp: int
    block_number: int
    log_index: int


@dataclass(frozen=True)
class OrderCleanedUp:
    order_id: int
    maker: str
    timestamp: int
    block_number: int
    log_index: int


@dataclass(frozen=True)
class OrderRetried:
    old_order_id: int
    new_order_id: int
    maker: str
    tries: int
    timestamp: int
    block_number: int
    log_index: int

    @property
    def order_id(self) -> int:
        """The superseded order; a retry closes the *old* id."""
        return self.old_order_id


@dataclass(frozen=True)
class CleanupErrorEvent:
    order_id: int
    reason: str
    timestamp: int
    block_number: int
    log_index: int


@dataclass(frozen=True)
class FeesDistributed:
    recipient: str
    amount: int
    timestamp: int
    block_number: int
    log_index: int


LedgerEvent = Union[
    OrderCreated,
    OrderFilled,
    OrderCanceled,
    OrderCleanedUp,
    OrderRetried,
    CleanupErrorEvent,
    FeesDistributed,
]

TerminalEvent = Union[OrderFilled, OrderCanceled, OrderCleanedUp, OrderRetried]


def decode_event(log: EventLog) -> Optional[LedgerEvent]:
    """Decode ``log`` into its typed variant; unknown names return ``None``."""
    a = log.args
    pos = {"block_number": log.block_number, "log_index": log.log_index}
    if log.name == ORDER_CREATED:
        order = Order(
            order_id=int(a["orderId"]),
            maker=a["maker"],
            taker=a["taker"],
            sell_token=a["sellToken"],
            sell_amount=int(a["sellAmount"]),
            buy_token=a["buyToken"],
            buy_amount=int(a["buyAmount"]),
            created_at=int(a["timestamp"]),
            order_creation_fee=int(a.get("orderCreationFee", 0)),
        )
        return OrderCreated(order=order, **pos)
    if log.name == ORDER_FILLED:
        return OrderFilled(
            order_id=int(a["orderId"]),
            maker=a.get("maker", ""),
            taker=a["taker"],
            timestamp=int(a["timestamp"]),
            **pos,
        )
    if log.name == ORDER_CANCELED:
        return OrderCanceled(
            order_id=int(a["orderId"]), maker=a.get("maker", ""), timestamp=int(a["timestamp"]), **pos
        )
    if log.name == ORDER_CLEANED_UP:
        return OrderCleanedUp(
            order_id=int(a["orderId"]), maker=a.get("maker", ""), timestamp=int(a["timestamp"]), **pos
        )
    if log.name == RETRY_ORDER:
        return OrderRetried(
            old_order_id=int(a["oldOrderId"]),
            new_order_id=int(a["newOrderId"]),
            maker=a.get("maker", ""),
            tries=int(a["tries"]),
            timestamp=int(a["timestamp"]),
            **pos,
        )
    if log.name == CLEANUP_ERROR:
        return CleanupErrorEvent(
            order_id=int(a["orderId"]), reason=str(a["reason"]), timestamp=int(a["timestamp"]), **pos
        )
    if log.name == CLEANUP_FEES_DISTRIBUTED:
        return FeesDistributed(
            recipient=a["recipient"], amount=int(a["amount"]), timestamp=int(a["timestamp"]), **pos
        )
    return None


def decode_events(logs: Iterable[EventLog]) -> List[LedgerEvent]:
    return [event for event in map(decode_event, logs) if event is not None]


def chain_order(events: Iterable[LedgerEvent]) -> List[LedgerEvent]:
    """Sort a merged sequence by ``(block_number, log_index)``.

    The sort is stable, so events sharing a position keep their input order.
    """
    return sorted(events, key=lambda e: (e.block_number, e.log_index))


def is_terminal(event: LedgerEvent) -> bool:
    return isinstance(event, get_args(TerminalEvent))


# conversions into the result records returned by cleanup ---------------
def as_cleaned_order(event: OrderCleanedUp) -> CleanedOrder:
    return CleanedOrder(order_id=event.order_id, maker=event.maker, timestamp=event.timestamp)


def as_cleanup_failure(event: CleanupErrorEvent) -> CleanupFailure:
    return CleanupFailure(order_id=event.order_id, reason=event.reason, timestamp=event.timestamp)


def as_retried_order(event: OrderRetried) -> RetriedOrder:
    return RetriedOrder(
        old_order_id=event.old_order_id,
        new_order_id=event.new_order_id,
        maker=event.maker,
        tries=event.tries,
        timestamp=event.timestamp,
    )


def as_fee_distribution(event: FeesDistributed) -> FeeDistribution:
    return FeeDistribution(recipient=event.recipient, amount=event.amount, timestamp=event.timestamp)


__all__ = [
    "ORDER_CREATED",
    "ORDER_FILLED",
    "ORDER_CANCELED",
    "ORDER_CLEANED_UP",
    "RETRY_ORDER",
    "CLEANUP_ERROR",
    "CLEANUP_FEES_DISTRIBUTED",
    "PROJECTION_STREAMS",
    "OrderCreated",
    "OrderFilled",
    "OrderCanceled",
    "OrderCleanedUp",
    "OrderRetried",
    "CleanupErrorEvent",
    "FeesDistributed",
    "LedgerEvent",
    "TerminalEvent",
    "decode_event",
    "decode_events",
    "chain_order",
    "is_terminal",
]
