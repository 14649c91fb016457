"""
Plain data records shared by the submitter, the aggregator and callers.

All token amounts and fees are integers in base units; timestamps are
ledger block times in whole seconds. Addresses are kept as the hex
strings the ledger returns and are compared case-insensitively with
:func:`same_address`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Union

ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"

SECONDS_PER_DAY = 24 * 60 * 60
DEFAULT_ORDER_LIFETIME = 7 * SECONDS_PER_DAY
DEFAULT_GRACE_PERIOD = 7 * SECONDS_PER_DAY


def same_address(a: Optional[str], b: Optional[str]) -> bool:
    """Case-insensitive address equality; ``None`` never matches."""
    if a is None or b is None:
        return False
    return a.lower() == b.lower()


def is_zero_address(address: Optional[str]) -> bool:
    return not address or same_address(address, ZERO_ADDRESS)


@dataclass(frozen=True)
class ExpiryInfo:
    """Order lifetime and maker grace period, both in seconds."""

    order_lifetime: int = DEFAULT_ORDER_LIFETIME
    grace_period: int = DEFAULT_GRACE_PERIOD

    def __post_init__(self) -> None:
        if self.order_lifetime < 0 or self.grace_period < 0:
            raise ValueError("expiry durations must be non-negative")

    def expires_at(self, timestamp: int) -> int:
        return timestamp + self.order_lifetime

    def grace_deadline(self, timestamp: int) -> int:
        """Last second at which the maker may still cancel."""
        return timestamp + self.order_lifetime + self.grace_period

    def is_expired(self, timestamp: int, now: float) -> bool:
        return now > self.expires_at(timestamp)

    def is_in_grace_period(self, timestamp: int, now: float) -> bool:
        return self.expires_at(timestamp) < now <= self.grace_deadline(timestamp)


@dataclass(frozen=True)
class OrderParams:
    """Maker supplied input for a new order."""

    sell_token: str
    sell_amount: int
    buy_token: str
    buy_amount: int
    taker: str = ZERO_ADDRESS


@dataclass(frozen=True)
class FillParams:
    """What the filler expects to pay; forwarded for approval and balance checks."""

    order_id: int
    buy_token: str
    buy_amount: int


@dataclass(frozen=True)
class Order:
    """An order as reconstructed from its ``OrderCreated`` event."""

    order_id: int
    maker: str
    taker: str
    sell_token: str
    sell_amount: int
    buy_token: str
    buy_amount: int
    created_at: int
    order_creation_fee: int
    is_active: bool = True

    def to_dict(self) -> dict:
        return {
            "orderId": self.order_id,
            "maker": self.maker,
            "taker": self.taker,
            "sell": {"token": self.sell_token, "amount": str(self.sell_amount)},
            "buy": {"token": self.buy_token, "amount": str(self.buy_amount)},
            "createdAt": self.created_at,
            "orderCreationFee": str(self.order_creation_fee),
            "isActive": self.is_active,
        }


@dataclass(frozen=True)
class TokenDetails:
    name: str
    symbol: str
    decimals: int
    balance: int = 0


@dataclass(frozen=True)
class CreateOrderResult:
    order_id: int
    tx_hash: str
    maker: str
    timestamp: int
    block_number: int
    fee: int


@dataclass(frozen=True)
class FillOrderResult:
    order_id: int
    tx_hash: str
    taker: str
    timestamp: int
    block_number: int


@dataclass(frozen=True)
class CancelOrderResult:
    order_id: int
    tx_hash: str
    timestamp: int
    block_number: int


@dataclass(frozen=True)
class CleanedOrder:
    order_id: int
    maker: str
    timestamp: int


@dataclass(frozen=True)
class CleanupFailure:
    order_id: int
    reason: str
    timestamp: int


@dataclass(frozen=True)
class RetriedOrder:
    old_order_id: int
    new_order_id: int
    maker: str
    tries: int
    timestamp: int


@dataclass(frozen=True)
class FeeDistribution:
    recipient: str
    amount: int
    timestamp: int


@dataclass(frozen=True)
class CleanupResult:
    tx_hash: str
    block_number: int
    cleaned_orders: List[CleanedOrder] = field(default_factory=list)
    errors: List[CleanupFailure] = field(default_factory=list)
    retries: List[RetriedOrder] = field(default_factory=list)
    fees_distributed: List[FeeDistribution] = field(default_factory=list)


BlockTag = Union[int, str]


@dataclass(frozen=True)
class OrderFilter:
    """Query options for :meth:`EventLogAggregator.get_active_orders`."""

    from_block: int = 0
    to_block: BlockTag = "latest"
    maker: Optional[str] = None
    sell_token: Optional[str] = None
    buy_token: Optional[str] = None
    offset: int = 0
    limit: Optional[int] = None

    def matches(self, order: Order) -> bool:
        if self.maker and not same_address(order.maker, self.maker):
            return False
        if self.sell_token and not same_address(order.sell_token, self.sell_token):
            return False
        if self.buy_token and not same_address(order.buy_token, self.buy_token):
            return False
        return True


@dataclass(frozen=True)
class Pagination:
    has_more: bool
    next_offset: int
    total: int


@dataclass(frozen=True)
class ActiveOrdersPage:
    orders: List[Order]
    pagination: Pagination
    from_block: int
    to_block: int


__all__ = [
    "ZERO_ADDRESS",
    "DEFAULT_ORDER_LIFETIME",
    "DEFAULT_GRACE_PERIOD",
    "same_address",
    "is_zero_address",
    "ExpiryInfo",
    "OrderParams",
    "FillParams",
    "Order",
    "TokenDetails",
    "CreateOrderResult",
    "FillOrderResult",
    "CancelOrderResult",
    "CleanedOrder",
    "CleanupFailure",
    "RetriedOrder",
    "FeeDistribution",
    "CleanupResult",
    "OrderFilter",
    "Pagination",
    "ActiveOrdersPage",
]
