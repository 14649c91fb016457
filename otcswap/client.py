"""
Immutable facade over the escrow ledger.

``OTCClient`` bundles a ledger connector, an optional signer and the
policy settings, and hands out the component objects that do the work.
Switching wallets returns a new client via :meth:`OTCClient.with_signer`;
nothing is rebound in place, so a client can be shared between tasks.
"""

from __future__ import annotations

import dataclasses
import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

from .connectors.ledger import LedgerConnector, Signer
from .data.aggregator import DEFAULT_BLOCK_CHUNK_SIZE, EventLogAggregator
from .execution.submitter import TransactionSubmitter
from .models import (
    ActiveOrdersPage,
    CancelOrderResult,
    CleanupResult,
    CreateOrderResult,
    ExpiryInfo,
    FillOrderResult,
    FillParams,
    OrderFilter,
    OrderParams,
    TokenDetails,
)
from .policy import ExpiryPolicy
from .tokens import TokenMetadataResolver
from .utils.logging import get_logger, log_json

logger = get_logger(__name__)


@dataclass(frozen=True)
class OTCClient:
    ledger: LedgerConnector
    signer: Optional[Signer] = None
    default_expiry: ExpiryInfo = dataclasses.field(default_factory=ExpiryInfo)
    block_chunk_size: int = DEFAULT_BLOCK_CHUNK_SIZE
    clock: Callable[[], float] = time.time

    @classmethod
    def from_config(cls, config: Dict[str, Any]) -> "OTCClient":
        """Build a client talking to a JSON-RPC node from :func:`load_config` output."""
        from eth_account import Account

        from .connectors.abi import load_abi
        from .connectors.web3_ledger import Web3Ledger
        from .execution.rate_limiter import TokenBucket

        ledger_cfg = config["ledger"]
        if not ledger_cfg.get("rpc_url") or not ledger_cfg.get("contract_address"):
            raise ValueError("ledger.rpc_url and ledger.contract_address are required")
        limits = ledger_cfg["rate_limit"]
        ledger = Web3Ledger.from_rpc_url(
            ledger_cfg["rpc_url"],
            ledger_cfg["contract_address"],
            abi=load_abi(ledger_cfg["abi_path"]) if ledger_cfg.get("abi_path") else None,
            bucket=TokenBucket(rate=limits["rate"], capacity=limits["capacity"]),
            log_query_cost=limits["log_query_cost"],
            confirmation_timeout=ledger_cfg["confirmation_timeout"],
            poll_latency=ledger_cfg["poll_latency"],
        )
        signer = Account.from_key(ledger_cfg["private_key"]) if ledger_cfg.get("private_key") else None
        expiry = config["expiry"]
        return cls(
            ledger=ledger,
            signer=signer,
            default_expiry=ExpiryInfo(order_lifetime=expiry["order_lifetime"], grace_period=expiry["grace_period"]),
            block_chunk_size=config["events"]["block_chunk_size"],
        )

    def with_signer(self, signer: Optional[Signer]) -> "OTCClient":
        """Return a copy of this client acting as ``signer`` (``None`` for read-only)."""
        return dataclasses.replace(self, signer=signer)

    @property
    def signer_address(self) -> Optional[str]:
        return self.signer.address if self.signer is not None else None

    # components --------------------------------------------------------
    @property
    def policy(self) -> ExpiryPolicy:
        return ExpiryPolicy(self.ledger, defaults=self.default_expiry, clock=self.clock)

    @property
    def tokens(self) -> TokenMetadataResolver:
        return TokenMetadataResolver(self.ledger)

    @property
    def submitter(self) -> TransactionSubmitter:
        return TransactionSubmitter(self.ledger, self.policy, signer=self.signer, clock=self.clock)

    @property
    def aggregator(self) -> EventLogAggregator:
        return EventLogAggregator(
            self.ledger, self.policy, block_chunk_size=self.block_chunk_size, clock=self.clock
        )

    # operations --------------------------------------------------------
    async def create_order(self, params: OrderParams) -> CreateOrderResult:
        return await self.submitter.create_order(params)

    async def fill_order(self, params: FillParams) -> FillOrderResult:
        return await self.submitter.fill_order(params)

    async def cancel_order(self, order_id: int) -> CancelOrderResult:
        return await self.submitter.cancel_order(order_id)

    async def cleanup_expired_orders(self) -> CleanupResult:
        return await self.submitter.cleanup_expired_orders()

    async def get_active_orders(
        self, order_filter: Optional[OrderFilter] = None, now: Optional[float] = None
    ) -> ActiveOrdersPage:
        return await self.aggregator.get_active_orders(order_filter, now=now)

    async def get_expiry_info(self) -> ExpiryInfo:
        return await self.policy.get_expiry_info()

    async def is_order_expired(self, timestamp: int, now: Optional[float] = None) -> bool:
        return await self.policy.is_order_expired(timestamp, now)

    async def is_in_grace_period(self, timestamp: int, now: Optional[float] = None) -> bool:
        return await self.policy.is_in_grace_period(timestamp, now)

    async def get_token_details(self, token: str) -> TokenDetails:
        return await self.tokens.get_token_details(token, owner=self.signer_address)

    async def get_order_creation_fee(self) -> int:
        """Current creation fee, or ``0`` with a warning when it cannot be read."""
        try:
            return int(await self.ledger.order_creation_fee())
        except Exception as exc:
            log_json(logger, "creation_fee_unavailable", level=logging.WARNING, error=repr(exc))
            return 0


__all__ = ["OTCClient"]
