from __future__ import annotations

from typing import Optional, Tuple

from web3 import AsyncWeb3

from ..models import OrderParams, is_zero_address, same_address

MIN_FEE_PERCENTAGE = 90
MAX_FEE_PERCENTAGE = 150


def fee_bounds(fee: int) -> Tuple[int, int]:
    """Return the ``(min, max)`` creation fee the ledger will accept.

    Informational only; the ledger enforces the range itself.
    """
    return fee * MIN_FEE_PERCENTAGE // 100, fee * MAX_FEE_PERCENTAGE // 100


def _is_address(value: object) -> bool:
    # any casing; checksums are not enforced
    return isinstance(value, str) and AsyncWeb3.is_address(value.lower())


def _is_amount(value: object) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value > 0


def order_params_violation(params: OrderParams) -> Optional[str]:
    """Return the first rule ``params`` breaks, or ``None`` when valid.

    Parameters
    ----------
    params:
        Maker supplied order. Tokens must be well formed, non-zero and
        distinct, the taker well formed (zero means anyone) and both
        amounts strictly positive integers (base units).
    """

    if not _is_address(params.sell_token) or is_zero_address(params.sell_token):
        return "invalid sell token"
    if not _is_address(params.buy_token) or is_zero_address(params.buy_token):
        return "invalid buy token"
    if not _is_address(params.taker):
        return "invalid taker"
    if same_address(params.sell_token, params.buy_token):
        return "cannot swap same token"
    if not _is_amount(params.sell_amount):
        return "invalid sell amount"
    if not _is_amount(params.buy_amount):
        return "invalid buy amount"
    return None


def validate_order_params(params: OrderParams) -> bool:
    """Return ``True`` if ``params`` satisfies every client side order rule."""
    return order_params_violation(params) is None


__all__ = [
    "MIN_FEE_PERCENTAGE",
    "MAX_FEE_PERCENTAGE",
    "fee_bounds",
    "order_params_violation",
    "validate_order_params",
]
