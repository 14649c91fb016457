"""
Connector interface for the escrow ledger.

The client separates ledger access from the order workflows via a small
connector interface.  This file defines the abstract
``LedgerConnector`` which specifies every call the rest of the package
makes against the escrow contract and against ERC20 tokens, together
with the transport-neutral records those calls return.  The concrete
implementation for EVM chains lives in :mod:`otcswap.connectors.web3_ledger`;
tests use an in-memory subclass.

Classes
-------

EventLog
    One decoded event emitted by the ledger, with its position in the
    chain (block number and log index).
TxReceipt
    Result of waiting for a submitted transaction: hash, block, status
    and the ordered list of decoded events it emitted.
OrderRecord
    The ledger's stored view of one order, as returned by ``orders(id)``.
LedgerConnector
    Abstract base class for connectors.

Notes
-----
Transaction submission and confirmation are separate calls
(``submit_*`` returns a hash, :meth:`LedgerConnector.wait_for_receipt`
blocks for inclusion) so the submitter can tell a failure to broadcast
from a failure while waiting.
"""

from __future__ import annotations

import abc
from dataclasses import dataclass, field
from typing import Any, List, Mapping, Optional, Protocol, Tuple


class Signer(Protocol):
    """Wallet capability used to authorise transactions.

    ``eth_account`` ``LocalAccount`` objects satisfy this protocol.
    """

    address: str


@dataclass(frozen=True)
class EventLog:
    """A single ledger event.

    Parameters
    ----------
    name : str
        ABI event name, e.g. ``"OrderCreated"``.
    args : Mapping[str, Any]
        Decoded event arguments keyed by their ABI names.
    block_number : int
        Block the event was emitted in.
    log_index : int
        Position of the log inside its block.
    tx_hash : str
        Hash of the emitting transaction.
    """

    name: str
    args: Mapping[str, Any]
    block_number: int
    log_index: int = 0
    tx_hash: str = ""


@dataclass(frozen=True)
class TxReceipt:
    tx_hash: str
    block_number: int
    status: int = 1
    logs: Tuple[EventLog, ...] = field(default_factory=tuple)

    @property
    def succeeded(self) -> bool:
        return self.status == 1

    def events(self, name: str) -> List[EventLog]:
        """Return every log named ``name`` in emission order."""
        return [log for log in self.logs if log.name == name]


@dataclass(frozen=True)
class OrderRecord:
    order_id: int
    maker: str
    taker: str
    sell_token: str
    sell_amount: int
    buy_token: str
    buy_amount: int
    timestamp: int
    is_active: bool
    order_creation_fee: int = 0


class LedgerConnector(abc.ABC):
    """Abstract base class for escrow ledger connectors.

    Concrete subclasses must implement read calls, event queries,
    transaction submission and confirmation, plus the ERC20 calls the
    client needs for approvals and pre-flight checks.  Implementations
    raise whatever their transport raises; the submitter and the
    aggregator wrap those failures with operation context.
    """

    @property
    @abc.abstractmethod
    def address(self) -> str:
        """Address of the escrow contract (spender for approvals)."""
        raise NotImplementedError

    # escrow reads ------------------------------------------------------
    @abc.abstractmethod
    async def order_creation_fee(self) -> int:
        raise NotImplementedError

    @abc.abstractmethod
    async def order_expiry(self) -> int:
        """Return the ledger's ``ORDER_EXPIRY`` constant in seconds."""
        raise NotImplementedError

    @abc.abstractmethod
    async def grace_period(self) -> int:
        """Return the ledger's ``GRACE_PERIOD`` constant in seconds."""
        raise NotImplementedError

    @abc.abstractmethod
    async def get_order(self, order_id: int) -> Optional[OrderRecord]:
        """Return the stored order or ``None`` when no such order exists."""
        raise NotImplementedError

    @abc.abstractmethod
    async def latest_block(self) -> int:
        raise NotImplementedError

    @abc.abstractmethod
    async def query_events(self, name: str, from_block: int, to_block: int) -> List[EventLog]:
        """Return all ``name`` events in ``[from_block, to_block]``.

        Parameters
        ----------
        name : str
            ABI event name.
        from_block, to_block : int
            Inclusive block bounds.

        Returns
        -------
        list of EventLog
            In chain order.
        """
        raise NotImplementedError

    # escrow writes -----------------------------------------------------
    @abc.abstractmethod
    async def submit_create_order(
        self,
        signer: Signer,
        taker: str,
        sell_token: str,
        sell_amount: int,
        buy_token: str,
        buy_amount: int,
        value: int,
    ) -> str:
        """Broadcast ``createOrder`` with ``value`` attached; return the tx hash."""
        raise NotImplementedError

    @abc.abstractmethod
    async def submit_fill_order(self, signer: Signer, order_id: int) -> str:
        raise NotImplementedError

    @abc.abstractmethod
    async def submit_cancel_order(self, signer: Signer, order_id: int) -> str:
        raise NotImplementedError

    @abc.abstractmethod
    async def submit_cleanup_expired_orders(self, signer: Signer) -> str:
        raise NotImplementedError

    @abc.abstractmethod
    async def wait_for_receipt(self, tx_hash: str) -> TxReceipt:
        """Block until ``tx_hash`` is included and return its decoded receipt."""
        raise NotImplementedError

    # ERC20 -------------------------------------------------------------
    @abc.abstractmethod
    async def token_name(self, token: str) -> str:
        raise NotImplementedError

    @abc.abstractmethod
    async def token_symbol(self, token: str) -> str:
        raise NotImplementedError

    @abc.abstractmethod
    async def token_decimals(self, token: str) -> int:
        raise NotImplementedError

    @abc.abstractmethod
    async def balance_of(self, token: str, owner: str) -> int:
        raise NotImplementedError

    @abc.abstractmethod
    async def submit_approve(self, signer: Signer, token: str, spender: str, amount: int) -> str:
        """Broadcast ``approve(spender, amount)`` on ``token``; return the tx hash."""
        raise NotImplementedError


__all__ = ["Signer", "EventLog", "TxReceipt", "OrderRecord", "LedgerConnector"]
