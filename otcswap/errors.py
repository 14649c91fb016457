"""Typed failures raised by the otcswap client.

Every error carries the ``operation`` that failed (``"create_order"``,
``"fill_order"`` ...) and the ``step`` of the submission it failed in, so a
caller can tell a rejected input from a failed approval from a confirmed
transaction that emitted nothing usable. Transport problems are wrapped in
:class:`LedgerTransportError` with the original exception chained as
``__cause__``.
"""

from __future__ import annotations

from typing import Optional


class OTCError(Exception):
    """Base class for all client failures."""

    kind = "error"

    def __init__(self, message: str, *, operation: Optional[str] = None, step: Optional[str] = None) -> None:
        super().__init__(message)
        self.message = message
        self.operation = operation
        self.step = step
        # states visited before the failure, filled in by the submission tracker
        self.history: Optional[list] = None

    def __str__(self) -> str:
        if self.operation and self.step:
            return f"{self.operation} failed at {self.step}: {self.message}"
        if self.operation:
            return f"{self.operation} failed: {self.message}"
        return self.message


class NotAuthorized(OTCError):
    """No signer connected, or the signer is not the maker/designated taker."""

    kind = "not_authorized"


class InvalidInput(OTCError):
    """Order parameters violate a client side rule; ``reason`` names the rule."""

    kind = "invalid_input"

    def __init__(self, reason: str, **kwargs) -> None:
        super().__init__(reason, **kwargs)
        self.reason = reason


class NotFound(OTCError):
    kind = "not_found"


class InactiveOrder(OTCError):
    kind = "inactive_order"


class Expired(OTCError):
    kind = "expired"


class GracePeriodExpired(OTCError):
    kind = "grace_period_expired"


class InsufficientFunds(OTCError):
    kind = "insufficient_funds"


class ProtocolViolation(OTCError):
    """The ledger confirmed a transaction without emitting the expected event.

    Never retry on this: the action has most likely been applied already.
    """

    kind = "protocol_violation"


class TransactionReverted(OTCError):
    """A submitted transaction was mined with a failed status."""

    kind = "reverted"

    def __init__(self, message: str, *, tx_hash: Optional[str] = None, **kwargs) -> None:
        super().__init__(message, **kwargs)
        self.tx_hash = tx_hash


class LedgerTransportError(OTCError):
    """An RPC call failed; the underlying exception is the ``__cause__``."""

    kind = "transport"


__all__ = [
    "OTCError",
    "NotAuthorized",
    "InvalidInput",
    "NotFound",
    "InactiveOrder",
    "Expired",
    "GracePeriodExpired",
    "InsufficientFunds",
    "ProtocolViolation",
    "TransactionReverted",
    "LedgerTransportError",
]
