from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, List, Optional

import pytest

from otcswap.connectors.ledger import EventLog, LedgerConnector, OrderRecord, TxReceipt
from otcswap.models import ZERO_ADDRESS

ESCROW = "0xEeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeee"
MAKER = "0x1111111111111111111111111111111111111111"
TAKER = "0x2222222222222222222222222222222222222222"
OTHER = "0x3333333333333333333333333333333333333333"
TOKEN_A = "0xAaAaAaAaAaAaAaAaAaAaAaAaAaAaAaAaAaAaAaAa"
TOKEN_B = "0xBbBbBbBbBbBbBbBbBbBbBbBbBbBbBbBbBbBbBbBb"

WEEK = 7 * 24 * 60 * 60
T0 = 1_700_000_000


@dataclass
class FakeSigner:
    address: str


def event(name: str, block: int, log_index: int = 0, **args) -> EventLog:
    return EventLog(name=name, args=args, block_number=block, log_index=log_index)


def created(order_id: int, block: int, maker: str = MAKER, taker: str = ZERO_ADDRESS,
            sell_token: str = TOKEN_A, sell_amount: int = 100,
            buy_token: str = TOKEN_B, buy_amount: int = 50,
            timestamp: int = T0, fee: int = 10, log_index: int = 0) -> EventLog:
    return event(
        "OrderCreated", block, log_index,
        orderId=order_id, maker=maker, taker=taker,
        sellToken=sell_token, sellAmount=sell_amount,
        buyToken=buy_token, buyAmount=buy_amount,
        timestamp=timestamp, orderCreationFee=fee,
    )


class FakeLedger(LedgerConnector):
    """In-memory escrow ledger recording every call it receives."""

    def __init__(self, fee: int = 10, expiry: int = WEEK, grace: int = WEEK, latest: int = 100) -> None:
        self.fee = fee
        self.expiry = expiry
        self.grace = grace
        self.latest = latest
        self.logs: Dict[str, List[EventLog]] = {}
        self.orders: Dict[int, OrderRecord] = {}
        self.balances: Dict[tuple, int] = {}
        self.calls: List[tuple] = []
        self.fail_on: set = set()
        self.reverted: set = set()
        # receipt logs per submitted kind; callables receive the call args
        self.emit: Dict[str, Callable[..., List[EventLog]]] = {}
        self._receipts: Dict[str, TxReceipt] = {}
        self._tx_counter = 0
        self.next_order_id = 1

    # helpers -----------------------------------------------------------
    def add(self, *logs: EventLog) -> None:
        for log in logs:
            self.logs.setdefault(log.name, []).append(log)

    def add_order(self, order_id: int, maker: str = MAKER, taker: str = ZERO_ADDRESS,
                  timestamp: int = T0, is_active: bool = True) -> OrderRecord:
        record = OrderRecord(
            order_id=order_id, maker=maker, taker=taker,
            sell_token=TOKEN_A, sell_amount=100, buy_token=TOKEN_B, buy_amount=50,
            timestamp=timestamp, is_active=is_active, order_creation_fee=self.fee,
        )
        self.orders[order_id] = record
        return record

    def set_balance(self, token: str, owner: str, amount: int) -> None:
        self.balances[(token.lower(), owner.lower())] = amount

    def call_names(self) -> List[str]:
        return [c[0] for c in self.calls]

    def _record(self, name: str, *args) -> None:
        self.calls.append((name, *args))
        if name in self.fail_on:
            raise ConnectionError(f"{name} unavailable")

    def _broadcast(self, kind: str, default: List[EventLog], *args) -> str:
        self._tx_counter += 1
        tx_hash = f"0x{self._tx_counter:064x}"
        block = self.latest + self._tx_counter
        logs = self.emit[kind](*args) if kind in self.emit else default
        status = 0 if kind in self.reverted else 1
        self._receipts[tx_hash] = TxReceipt(tx_hash=tx_hash, block_number=block, status=status, logs=tuple(logs))
        return tx_hash

    @property
    def address(self) -> str:
        return ESCROW

    # reads -------------------------------------------------------------
    async def order_creation_fee(self) -> int:
        self._record("order_creation_fee")
        return self.fee

    async def order_expiry(self) -> int:
        self._record("order_expiry")
        return self.expiry

    async def grace_period(self) -> int:
        self._record("grace_period")
        return self.grace

    async def get_order(self, order_id: int) -> Optional[OrderRecord]:
        self._record("get_order", order_id)
        return self.orders.get(order_id)

    async def latest_block(self) -> int:
        self._record("latest_block")
        return self.latest

    async def query_events(self, name: str, from_block: int, to_block: int) -> List[EventLog]:
        self._record("query_events", name, from_block, to_block)
        return [log for log in self.logs.get(name, []) if from_block <= log.block_number <= to_block]

    # writes ------------------------------------------------------------
    async def submit_create_order(self, signer, taker, sell_token, sell_amount, buy_token, buy_amount, value) -> str:
        self._record("submit_create_order", signer.address, taker, sell_token, sell_amount, buy_token, buy_amount, value)
        order_id = self.next_order_id
        self.next_order_id += 1
        default = [created(order_id, self.latest + 1, maker=signer.address, taker=taker,
                           sell_token=sell_token, sell_amount=sell_amount,
                           buy_token=buy_token, buy_amount=buy_amount, timestamp=T0, fee=value)]
        return self._broadcast("create", default, signer)

    async def submit_fill_order(self, signer, order_id: int) -> str:
        self._record("submit_fill_order", signer.address, order_id)
        default = [event("OrderFilled", self.latest + 1, orderId=order_id, maker=MAKER,
                         taker=signer.address, timestamp=T0 + 10)]
        return self._broadcast("fill", default, signer, order_id)

    async def submit_cancel_order(self, signer, order_id: int) -> str:
        self._record("submit_cancel_order", signer.address, order_id)
        default = [event("OrderCanceled", self.latest + 1, orderId=order_id, maker=signer.address,
                         timestamp=T0 + 20)]
        return self._broadcast("cancel", default, signer, order_id)

    async def submit_cleanup_expired_orders(self, signer) -> str:
        self._record("submit_cleanup_expired_orders", signer.address)
        return self._broadcast("cleanup", [], signer)

    async def wait_for_receipt(self, tx_hash: str) -> TxReceipt:
        self._record("wait_for_receipt", tx_hash)
        return self._receipts[tx_hash]

    # ERC20 -------------------------------------------------------------
    async def token_name(self, token: str) -> str:
        self._record("token_name", token)
        return "Token A" if token == TOKEN_A else "Token B"

    async def token_symbol(self, token: str) -> str:
        self._record("token_symbol", token)
        return "TKA" if token == TOKEN_A else "TKB"

    async def token_decimals(self, token: str) -> int:
        self._record("token_decimals", token)
        return 18

    async def balance_of(self, token: str, owner: str) -> int:
        self._record("balance_of", token, owner)
        return self.balances.get((token.lower(), owner.lower()), 0)

    async def submit_approve(self, signer, token: str, spender: str, amount: int) -> str:
        self._record("submit_approve", signer.address, token, spender, amount)
        return self._broadcast("approve", [], signer, token, amount)


@pytest.fixture
def ledger() -> FakeLedger:
    return FakeLedger()


@pytest.fixture
def clock():
    """Mutable clock: set ``clock.now`` inside a test."""

    class Clock:
        now = T0 + 60

        def __call__(self) -> float:
            return self.now

    return Clock()
