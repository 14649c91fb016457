"""EVM implementation of :class:`LedgerConnector` on top of ``web3.AsyncWeb3``.

Transactions are built by web3 (gas, fees and chain id are filled in by
the node), signed locally with an ``eth_account`` account and broadcast
as raw transactions, so the node never needs to hold keys.
"""
from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence

from eth_typing import ChecksumAddress
from web3 import AsyncWeb3
from web3.logs import DISCARD

from ..execution.rate_limiter import TokenBucket
from ..models import is_zero_address
from ..utils.logging import get_logger, log_json
from .abi import ERC20_ABI, ESCROW_ABI, ESCROW_EVENT_NAMES
from .ledger import EventLog, LedgerConnector, OrderRecord, Signer, TxReceipt

logger = get_logger(__name__)


def _to_event_log(raw: Any) -> EventLog:
    return EventLog(
        name=raw["event"],
        args=dict(raw["args"]),
        block_number=int(raw["blockNumber"]),
        log_index=int(raw["logIndex"]),
        tx_hash=AsyncWeb3.to_hex(raw["transactionHash"]),
    )


class Web3Ledger(LedgerConnector):
    """Escrow ledger reached through a JSON-RPC node.

    Parameters
    ----------
    w3 : AsyncWeb3
        Connected web3 instance.
    contract_address : str
        Escrow contract address (any casing).
    abi : sequence of dict, optional
        Escrow ABI; defaults to :data:`otcswap.connectors.abi.ESCROW_ABI`.
    bucket : TokenBucket, optional
        Rate limiter awaited before every RPC request.
    confirmation_timeout : float
        Seconds to wait for a transaction receipt.
    poll_latency : float
        Seconds between receipt polls.
    log_query_cost : float
        Bucket tokens charged for each ``eth_getLogs`` request.
    """

    def __init__(
        self,
        w3: AsyncWeb3,
        contract_address: str,
        abi: Optional[Sequence[Dict[str, Any]]] = None,
        bucket: Optional[TokenBucket] = None,
        confirmation_timeout: float = 120.0,
        poll_latency: float = 0.5,
        log_query_cost: float = 1.0,
    ) -> None:
        self.w3 = w3
        self._address = AsyncWeb3.to_checksum_address(contract_address)
        self._contract = w3.eth.contract(address=self._address, abi=list(abi or ESCROW_ABI))
        self._bucket = bucket
        self.confirmation_timeout = confirmation_timeout
        self.poll_latency = poll_latency
        self.log_query_cost = log_query_cost

    @classmethod
    def from_rpc_url(cls, rpc_url: str, contract_address: str, **kwargs: Any) -> "Web3Ledger":
        w3 = AsyncWeb3(AsyncWeb3.AsyncHTTPProvider(rpc_url))
        return cls(w3, contract_address, **kwargs)

    @property
    def address(self) -> str:
        return self._address

    async def _throttle(self, cost: float = 1.0) -> None:
        if self._bucket is not None:
            await self._bucket.acquire(cost)

    def _token(self, token: str):
        return self.w3.eth.contract(address=AsyncWeb3.to_checksum_address(token), abi=ERC20_ABI)

    async def _call(self, fn) -> Any:
        await self._throttle()
        return await fn.call()

    # escrow reads ------------------------------------------------------
    async def order_creation_fee(self) -> int:
        return int(await self._call(self._contract.functions.orderCreationFee()))

    async def order_expiry(self) -> int:
        return int(await self._call(self._contract.functions.ORDER_EXPIRY()))

    async def grace_period(self) -> int:
        return int(await self._call(self._contract.functions.GRACE_PERIOD()))

    async def get_order(self, order_id: int) -> Optional[OrderRecord]:
        raw = await self._call(self._contract.functions.orders(order_id))
        maker, taker, sell_token, sell_amount, buy_token, buy_amount, ts, active, fee = raw
        # unset mapping slots come back zeroed
        if is_zero_address(maker):
            return None
        return OrderRecord(
            order_id=order_id,
            maker=maker,
            taker=taker,
            sell_token=sell_token,
            sell_amount=int(sell_amount),
            buy_token=buy_token,
            buy_amount=int(buy_amount),
            timestamp=int(ts),
            is_active=bool(active),
            order_creation_fee=int(fee),
        )

    async def latest_block(self) -> int:
        await self._throttle()
        return int(await self.w3.eth.block_number)

    async def query_events(self, name: str, from_block: int, to_block: int) -> List[EventLog]:
        await self._throttle(self.log_query_cost)
        event = getattr(self._contract.events, name)
        raw_logs = await event().get_logs(from_block=from_block, to_block=to_block)
        return [_to_event_log(raw) for raw in raw_logs]

    # transactions ------------------------------------------------------
    async def _transact(self, signer: Signer, fn, value: int = 0) -> str:
        sender: ChecksumAddress = AsyncWeb3.to_checksum_address(signer.address)
        await self._throttle()
        nonce = await self.w3.eth.get_transaction_count(sender, "pending")
        params: Dict[str, Any] = {"from": sender, "nonce": nonce}
        if value:
            params["value"] = value
        await self._throttle()
        tx = await fn.build_transaction(params)
        signed = signer.sign_transaction(tx)  # type: ignore[attr-defined]
        await self._throttle()
        tx_hash = await self.w3.eth.send_raw_transaction(signed.raw_transaction)
        hex_hash = AsyncWeb3.to_hex(tx_hash)
        log_json(logger, "tx_broadcast", tx_hash=hex_hash, sender=sender, nonce=nonce)
        return hex_hash

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
        fn = self._contract.functions.createOrder(
            AsyncWeb3.to_checksum_address(taker),
            AsyncWeb3.to_checksum_address(sell_token),
            sell_amount,
            AsyncWeb3.to_checksum_address(buy_token),
            buy_amount,
        )
        return await self._transact(signer, fn, value=value)

    async def submit_fill_order(self, signer: Signer, order_id: int) -> str:
        return await self._transact(signer, self._contract.functions.fillOrder(order_id))

    async def submit_cancel_order(self, signer: Signer, order_id: int) -> str:
        return await self._transact(signer, self._contract.functions.cancelOrder(order_id))

    async def submit_cleanup_expired_orders(self, signer: Signer) -> str:
        return await self._transact(signer, self._contract.functions.cleanupExpiredOrders())

    async def wait_for_receipt(self, tx_hash: str) -> TxReceipt:
        await self._throttle()
        receipt = await self.w3.eth.wait_for_transaction_receipt(
            tx_hash, timeout=self.confirmation_timeout, poll_latency=self.poll_latency
        )
        logs: List[EventLog] = []
        for name in ESCROW_EVENT_NAMES:
            event = getattr(self._contract.events, name)
            logs.extend(_to_event_log(raw) for raw in event().process_receipt(receipt, errors=DISCARD))
        logs.sort(key=lambda log: log.log_index)
        return TxReceipt(
            tx_hash=AsyncWeb3.to_hex(receipt["transactionHash"]),
            block_number=int(receipt["blockNumber"]),
            status=int(receipt.get("status", 1)),
            logs=tuple(logs),
        )

    # ERC20 -------------------------------------------------------------
    async def token_name(self, token: str) -> str:
        return str(await self._call(self._token(token).functions.name()))

    async def token_symbol(self, token: str) -> str:
        return str(await self._call(self._token(token).functions.symbol()))

    async def token_decimals(self, token: str) -> int:
        return int(await self._call(self._token(token).functions.decimals()))

    async def balance_of(self, token: str, owner: str) -> int:
        fn = self._token(token).functions.balanceOf(AsyncWeb3.to_checksum_address(owner))
        return int(await self._call(fn))

    async def submit_approve(self, signer: Signer, token: str, spender: str, amount: int) -> str:
        fn = self._token(token).functions.approve(AsyncWeb3.to_checksum_address(spender), amount)
        return await self._transact(signer, fn)


__all__ = ["Web3Ledger"]
