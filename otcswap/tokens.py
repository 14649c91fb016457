"""ERC20 metadata and balance lookups used for display and pre-flight checks."""

from __future__ import annotations

import asyncio
from typing import Optional

from .connectors.ledger import LedgerConnector
from .errors import LedgerTransportError
from .models import TokenDetails


class TokenMetadataResolver:
    def __init__(self, ledger: LedgerConnector) -> None:
        self.ledger = ledger

    async def get_token_details(self, token: str, owner: Optional[str] = None) -> TokenDetails:
        """Return name, symbol and decimals of ``token``.

        The balance is only read when ``owner`` is given (normally the
        active signer) and is ``0`` otherwise.
        """
        try:
            name, symbol, decimals = await asyncio.gather(
                self.ledger.token_name(token),
                self.ledger.token_symbol(token),
                self.ledger.token_decimals(token),
            )
        except Exception as exc:
            raise LedgerTransportError(
                f"could not read metadata for {token}: {exc}",
                operation="get_token_details",
                step="metadata",
            ) from exc
        balance = 0
        if owner:
            balance = await self.balance_of(token, owner, operation="get_token_details")
        return TokenDetails(name=name, symbol=symbol, decimals=int(decimals), balance=balance)

    async def balance_of(self, token: str, owner: str, operation: str = "balance_of") -> int:
        try:
            return int(await self.ledger.balance_of(token, owner))
        except Exception as exc:
            raise LedgerTransportError(
                f"could not read balance of {owner} in {token}: {exc}",
                operation=operation,
                step="balance",
            ) from exc


__all__ = ["TokenMetadataResolver"]
